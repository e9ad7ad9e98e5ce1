# tests/test_uploads.py
from datetime import datetime, timezone

from hr_round.db import models as m
from hr_round.schemas.interview import AnswerOut
from hr_round.services import transcription


def test_upload_recording_goes_under_user_prefix(client, auth_headers, user_and_token, fake_s3):
    user, _ = user_and_token
    files = {"file": ("answer 1.webm", b"\x1aE\xdf\xa3 webm bytes", "video/webm")}
    r = client.post("/media/upload", files=files, headers=auth_headers)
    assert r.status_code == 200, r.text
    body = r.json()
    assert body["key"].startswith(f"recordings/{user.id}/")
    assert body["key"].split("/")[2] == datetime.now(timezone.utc).strftime("%Y%m%d")
    assert body["key"].endswith("_answer_1.webm")
    assert body["url"].startswith("https://s3.test/test-bucket/")
    assert fake_s3._store[("test-bucket", body["key"])] == b"\x1aE\xdf\xa3 webm bytes"


def test_presigned_url_only_for_own_recordings(client, auth_headers, user_and_token, fake_s3):
    user, _ = user_and_token
    r = client.get("/media/url", params={"key": f"recordings/{user.id}/20240101/x.webm"}, headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["expires_in"] == 900

    r = client.get("/media/url", params={"key": "recordings/999/20240101/x.webm"}, headers=auth_headers)
    assert r.status_code == 401


def test_upload_requires_auth(client, fake_s3):
    r = client.post("/media/upload", files={"file": ("a.webm", b"x", "video/webm")})
    assert r.status_code == 401


def test_transcribe_endpoint(client, auth_headers, audio_file, monkeypatch):
    seen = {}

    def fake_transcribe(path):
        with open(path, "rb") as fh:
            seen["bytes"] = fh.read()
        return {"transcript": "I enjoy mentoring juniors.", "language": "en", "duration": 2.5}

    monkeypatch.setattr(transcription, "transcribe_audio_file", fake_transcribe)
    r = client.post("/transcribe", files={"audio": ("clip.wav", audio_file, "audio/wav")}, headers=auth_headers)
    assert r.status_code == 200, r.text
    assert r.json()["transcript"] == "I enjoy mentoring juniors."
    assert seen["bytes"] == audio_file.getvalue()


def test_transcribe_failures(client, auth_headers, audio_file, monkeypatch):
    monkeypatch.setattr(
        transcription, "transcribe_audio_file",
        lambda path: {"transcript": "", "language": None, "duration": 0.0},
    )
    r = client.post("/transcribe", files={"audio": ("clip.wav", audio_file, "audio/wav")}, headers=auth_headers)
    assert r.status_code == 400

    def broken(path):
        raise RuntimeError("decoder missing")

    monkeypatch.setattr(transcription, "transcribe_audio_file", broken)
    audio_file.seek(0)
    r = client.post("/transcribe", files={"audio": ("clip.wav", audio_file, "audio/wav")}, headers=auth_headers)
    assert r.status_code == 500


def test_answer_schema_reads_orm_rows():
    row = m.HRUserAnswer(id="a1", user_answer="Hi", video_url="recordings/1/20240101/x.webm", matched_key_points=[])
    out = AnswerOut.model_validate(row)
    assert out.video_url == "recordings/1/20240101/x.webm"
    assert out.score is None
