# tests/test_answers.py
from hr_round.ai.llm_client import LLMError
from hr_round.db import models as m


def _main_answer(client, headers, qid, text="I led the migration and measured a 30% latency drop."):
    return client.post("/hr-round/answer", json={"hr_question_id": qid, "user_answer": text}, headers=headers)


def test_main_answer_requires_fields(client, auth_headers, interview):
    r = client.post("/hr-round/answer", json={"user_answer": "hi"}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["detail"]["error"] == "Missing required fields"

    qid = interview["questions"][0]["id"]
    r = client.post("/hr-round/answer", json={"hr_question_id": qid, "user_answer": "   "}, headers=auth_headers)
    assert r.status_code == 400


def test_main_answer_scores_and_offers_follow_up(client, auth_headers, interview, fake_llm):
    qid = interview["questions"][0]["id"]
    r = _main_answer(client, auth_headers, qid)
    assert r.status_code == 200, r.text
    body = r.json()

    assert body["success"] is True
    assert body["analysis"]["score"] == 7
    assert body["analysis"]["matched_key_points"] == ["Clear structure", "Concrete example"]
    assert body["analysis"]["voice_tone"] == "Neutral"
    assert body["hr_user_answer"]["hr_question_id"] == qid
    assert body["hr_user_answer"]["hr_follow_up_question_id"] is None

    nxt = body["next_question"]
    assert nxt["main_question_id"] == qid
    assert nxt["type"] == "FOLLOWUP"
    assert nxt["max_score"] == 5 and nxt["time_limit"] == 90

    # a good answer asks for depth
    follow_up_prompts = [p for purpose, p in fake_llm.calls if purpose == "follow_up"]
    assert "strong answer" in follow_up_prompts[0]
    assert "payments" in follow_up_prompts[0]


def test_weak_answer_asks_for_clarification(client, auth_headers, interview, fake_llm):
    fake_llm.queue("analysis", "Score: 2\nFeedback: Too vague.\nKey Points: none")
    r = _main_answer(client, auth_headers, interview["questions"][0]["id"], "Not sure.")
    assert r.status_code == 200
    assert r.json()["analysis"]["score"] == 2
    prompt = [p for purpose, p in fake_llm.calls if purpose == "follow_up"][0]
    assert "needs improvement" in prompt


def test_answer_upsert_keeps_one_answer_per_question(client, auth_headers, interview, db):
    qid = interview["questions"][0]["id"]
    first = _main_answer(client, auth_headers, qid, "First try.").json()
    second = _main_answer(client, auth_headers, qid, "Second, better try.").json()

    assert first["hr_user_answer"]["id"] == second["hr_user_answer"]["id"]
    assert second["hr_user_answer"]["user_answer"] == "Second, better try."
    # the pending follow-up is offered again instead of generating another one
    assert first["next_question"]["id"] == second["next_question"]["id"]

    assert db.query(m.HRUserAnswer).filter(m.HRUserAnswer.hr_question_id == qid).count() == 1
    assert db.query(m.HRFollowUpQuestion).filter(m.HRFollowUpQuestion.main_question_id == qid).count() == 1


def test_scoring_falls_back_when_model_fails(client, auth_headers, interview, fake_llm):
    fake_llm.queue("analysis", LLMError("quota exceeded"))
    r = _main_answer(client, auth_headers, interview["questions"][0]["id"])
    assert r.status_code == 200, r.text
    analysis = r.json()["analysis"]
    assert analysis["score"] == 5
    assert analysis["evaluation_feedback"] == "Unable to generate detailed analysis."
    assert analysis["matched_key_points"] == []


def test_follow_up_generation_failure_does_not_fail_the_answer(client, auth_headers, interview, fake_llm):
    fake_llm.queue("follow_up", LLMError("down"))
    r = _main_answer(client, auth_headers, interview["questions"][0]["id"])
    assert r.status_code == 200
    assert r.json()["next_question"] is None


def test_follow_up_chain_stops_at_cap(client, auth_headers, interview, db):
    qid = interview["questions"][0]["id"]
    fu1 = _main_answer(client, auth_headers, qid).json()["next_question"]

    r = client.put(
        "/hr-round/answer",
        json={"follow_up_question_id": fu1["id"], "user_answer": "We used canary releases."},
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["analysis"]["score"] == 3
    assert body["follow_up_question"]["id"] == fu1["id"]
    assert body["hr_user_answer"]["hr_follow_up_question_id"] == fu1["id"]
    assert body["hr_user_answer"]["hr_question_id"] is None
    fu2 = body["next_question"]
    assert fu2 is not None and fu2["position"] == 1

    r = client.put(
        "/hr-round/answer",
        json={"follow_up_question_id": fu2["id"], "user_answer": "Rollback took two minutes."},
        headers=auth_headers,
    )
    assert r.status_code == 200
    assert r.json()["next_question"] is None

    # on-the-fly generation is refused once the cap is reached
    r = client.put(
        "/hr-round/answer",
        json={"hr_question_id": qid, "user_answer": "More detail."},
        headers=auth_headers,
    )
    assert r.status_code == 400
    assert db.query(m.HRFollowUpQuestion).filter(m.HRFollowUpQuestion.main_question_id == qid).count() == 2


def test_follow_up_answer_generates_question_on_the_fly(client, auth_headers, interview):
    qid = interview["questions"][1]["id"]
    r = client.put(
        "/hr-round/answer",
        json={"hr_question_id": qid, "user_answer": "I would escalate early."},
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["follow_up_question"]["main_question_id"] == qid
    assert body["hr_user_answer"]["hr_follow_up_question_id"] == body["follow_up_question"]["id"]


def test_follow_up_answer_validation(client, auth_headers, other_headers, interview):
    r = client.put("/hr-round/answer", json={"user_answer": "x"}, headers=auth_headers)
    assert r.status_code == 400
    r = client.put("/hr-round/answer", json={"follow_up_question_id": "nope", "user_answer": "x"}, headers=auth_headers)
    assert r.status_code == 404

    qid = interview["questions"][0]["id"]
    assert _main_answer(client, other_headers, qid).status_code == 401
    assert _main_answer(client, auth_headers, "missing-question").status_code == 404


def test_record_and_patch_answer(client, auth_headers, other_headers, interview):
    qid = interview["questions"][0]["id"]

    r = client.post("/hr-round/answers", json={"user_answer": "x"}, headers=auth_headers)
    assert r.status_code == 400

    r = client.post(
        "/hr-round/answers",
        json={"hr_question_id": qid, "user_answer": "Draft answer", "video_url": "recordings/1/a.webm"},
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    answer = r.json()
    assert answer["score"] is None
    assert answer["video_url"] == "recordings/1/a.webm"

    r = client.patch(
        f"/hr-round/answers/{answer['id']}",
        json={"score": 8, "evaluation_feedback": "Manual review"},
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    assert r.json()["score"] == 8
    assert r.json()["user_answer"] == "Draft answer"

    r = client.patch(f"/hr-round/answers/{answer['id']}", json={"score": 1}, headers=other_headers)
    assert r.status_code == 401
    assert client.patch("/hr-round/answers/unknown", json={"score": 1}, headers=auth_headers).status_code == 404


def test_recording_new_text_drops_old_score(client, auth_headers, interview):
    qid = interview["questions"][0]["id"]
    scored = _main_answer(client, auth_headers, qid).json()["hr_user_answer"]
    assert scored["score"] == 7

    r = client.post(
        "/hr-round/answers",
        json={"hr_question_id": qid, "user_answer": "A rewritten answer."},
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    answer = r.json()
    assert answer["id"] == scored["id"]
    assert answer["user_answer"] == "A rewritten answer."
    assert answer["score"] is None
    assert answer["evaluation_feedback"] is None
    assert answer["matched_key_points"] == []
    assert answer["voice_tone"] is None


def test_recording_same_text_keeps_score(client, auth_headers, interview):
    qid = interview["questions"][0]["id"]
    text = "Same words as before."
    _main_answer(client, auth_headers, qid, text)

    r = client.post("/hr-round/answers", json={"hr_question_id": qid, "user_answer": text}, headers=auth_headers)
    assert r.status_code == 200, r.text
    assert r.json()["score"] == 7
