# tests/test_questions.py
from hr_round.ai.llm_client import LLMError


def _answer(client, headers, qid, text="I planned the rollout in three phases."):
    r = client.post("/hr-round/answers", json={"hr_question_id": qid, "user_answer": text}, headers=headers)
    assert r.status_code == 200, r.text


def test_fetch_interview_and_single_question(client, auth_headers, interview):
    r = client.get(f"/hr-round/{interview['id']}/questions", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["interview"]["id"] == interview["id"]

    qid = interview["questions"][1]["id"]
    r = client.get(f"/hr-round/{interview['id']}/questions", params={"question_id": qid}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["question"]["id"] == qid

    r = client.get(f"/hr-round/{interview['id']}/questions", params={"question_id": "nope"}, headers=auth_headers)
    assert r.status_code == 404


def test_generate_follow_up_needs_an_answer(client, auth_headers, interview):
    qid = interview["questions"][0]["id"]
    r = client.get(
        f"/hr-round/{interview['id']}/questions",
        params={"question_id": qid, "generate_follow_up": "true"},
        headers=auth_headers,
    )
    assert r.status_code == 400

    _answer(client, auth_headers, qid)
    r = client.get(
        f"/hr-round/{interview['id']}/questions",
        params={"question_id": qid, "generate_follow_up": "true"},
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    assert len(r.json()["question"]["follow_up_questions"]) == 1


def test_post_generates_until_cap(client, auth_headers, interview, fake_llm):
    qid = interview["questions"][0]["id"]
    url = f"/hr-round/{interview['id']}/questions"
    fake_llm.queue("follow_up", 'Follow-up question: "What would you do differently?"')

    r = client.post(url, json={"question_id": qid, "user_answer": "We shipped late."}, headers=auth_headers)
    assert r.status_code == 200, r.text
    fu = r.json()["follow_up_question"]
    assert fu["text"] == "What would you do differently?"
    assert fu["position"] == 0

    r = client.post(url, json={"question_id": qid, "user_answer": "We shipped late."}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["follow_up_question"]["position"] == 1

    r = client.post(url, json={"question_id": qid, "user_answer": "We shipped late."}, headers=auth_headers)
    assert r.status_code == 400
    detail = r.json()["detail"]
    assert detail["error"] == "Maximum number of follow-up questions reached"
    assert len(detail["followUpQuestions"]) == 2


def test_post_validation_and_model_failure(client, auth_headers, other_headers, interview, fake_llm):
    url = f"/hr-round/{interview['id']}/questions"
    assert client.post(url, json={"user_answer": "x"}, headers=auth_headers).status_code == 400

    qid = interview["questions"][0]["id"]
    assert client.post(url, json={"question_id": qid, "user_answer": "x"}, headers=other_headers).status_code == 401

    fake_llm.queue("follow_up", LLMError("unavailable"))
    r = client.post(url, json={"question_id": qid, "user_answer": "x"}, headers=auth_headers)
    assert r.status_code == 502


def test_follow_up_crud(client, auth_headers, other_headers, interview):
    qid = interview["questions"][0]["id"]

    r = client.post("/hr-round/follow-ups", json={"main_question_id": qid, "text": "Why?"}, headers=auth_headers)
    assert r.status_code == 201, r.text
    created = r.json()
    # budgets derive from the main question
    assert created["max_score"] == 5
    assert created["time_limit"] == 90
    assert created["category"] == interview["questions"][0]["category"]

    r = client.post(
        "/hr-round/follow-ups",
        json={"main_question_id": qid, "text": "How?", "max_score": 4, "time_limit": 60, "category": "Technical"},
        headers=auth_headers,
    )
    assert r.status_code == 201
    assert r.json()["max_score"] == 4

    r = client.post("/hr-round/follow-ups", json={"main_question_id": qid, "text": "Third?"}, headers=auth_headers)
    assert r.status_code == 400

    r = client.get(f"/hr-round/follow-ups/{created['id']}", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["text"] == "Why?"
    assert client.get(f"/hr-round/follow-ups/{created['id']}", headers=other_headers).status_code == 401
    assert client.get("/hr-round/follow-ups/unknown", headers=auth_headers).status_code == 404

    r = client.get("/hr-round/follow-ups", params={"main_question_id": qid}, headers=auth_headers)
    assert r.status_code == 200
    assert [fu["text"] for fu in r.json()] == ["Why?", "How?"]
    assert client.get("/hr-round/follow-ups", headers=auth_headers).status_code == 400
