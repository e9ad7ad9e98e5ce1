# hr_round/client/session.py
"""
Client-side interview flow over the HTTP API.

Progress (current question, pending follow-up, chat messages) is kept in a
small JSON file per interview so an interrupted session resumes where it
stopped. The file is removed once the interview is complete or restarted.
"""
from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx

log = logging.getLogger(__name__)

COMPLETION_MESSAGE = (
    "Thank you for completing the interview! Your responses have been recorded. "
    "You can now view your results."
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _message(role: str, content: str, question_id: Optional[str] = None) -> Dict[str, Any]:
    msg = {"role": role, "content": content, "timestamp": _now()}
    if question_id:
        msg["question_id"] = question_id
    return msg


@dataclass
class SessionState:
    interview_id: str
    current_question_index: int = 0
    is_follow_up: bool = False
    current_follow_up: Optional[Dict[str, Any]] = None
    complete: bool = False
    messages: List[Dict[str, Any]] = field(default_factory=list)


class StateStore:
    """One JSON file per interview under `directory`."""

    def __init__(self, directory: str | os.PathLike | None = None):
        self.directory = Path(directory or Path.home() / ".hr_round")

    def path_for(self, interview_id: str) -> Path:
        return self.directory / f"hr-interview-{interview_id}.json"

    def load(self, interview_id: str) -> Optional[SessionState]:
        path = self.path_for(interview_id)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return SessionState(**data)
        except (ValueError, TypeError):
            log.warning("ignoring unreadable session state at %s", path)
            return None

    def save(self, state: SessionState) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self.path_for(state.interview_id).write_text(json.dumps(asdict(state), indent=2), encoding="utf-8")

    def clear(self, interview_id: str) -> None:
        try:
            self.path_for(interview_id).unlink()
        except FileNotFoundError:
            pass


def messages_from_chat(chat: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Turn /hr-round/{id}/chat rows into interviewer / user / system messages."""
    messages: List[Dict[str, Any]] = []
    for row in chat:
        messages.append(_message("interviewer", row["text"], row.get("id")))
        if row.get("user_answer"):
            messages.append(_message("user", row["user_answer"], row.get("id")))
        if row.get("feedback"):
            messages.append(_message("system", row["feedback"]))
    return messages


class InterviewSession:
    def __init__(
        self,
        interview_id: str,
        token: str,
        base_url: str = "http://127.0.0.1:8000",
        store: Optional[StateStore] = None,
        http: Optional[httpx.Client] = None,
        timeout: float = 120.0,
    ):
        self.interview_id = interview_id
        self.store = store or StateStore()
        self.http = http or httpx.Client(base_url=base_url, timeout=timeout)
        self.headers = {"Authorization": f"Bearer {token}"}
        self.interview: Dict[str, Any] = {}
        self.state = SessionState(interview_id=interview_id)

    # ---------- HTTP ----------
    def _request(self, method: str, url: str, **kwargs) -> Any:
        r = self.http.request(method, url, headers=self.headers, **kwargs)
        r.raise_for_status()
        return r.json()

    # ---------- flow ----------
    @property
    def questions(self) -> List[Dict[str, Any]]:
        return self.interview.get("questions") or []

    @property
    def current_question(self) -> Optional[Dict[str, Any]]:
        if self.state.complete:
            return None
        if self.state.is_follow_up and self.state.current_follow_up:
            return self.state.current_follow_up
        if self.state.current_question_index < len(self.questions):
            return self.questions[self.state.current_question_index]
        return None

    def load(self) -> SessionState:
        """Fetch the interview and restore (or seed) the conversation."""
        self.interview = self._request("GET", f"/hr-round/{self.interview_id}")

        saved = self.store.load(self.interview_id)
        if saved and saved.messages:
            self.state = saved
            return self.state

        self.state = SessionState(interview_id=self.interview_id)
        chat = self._request("GET", f"/hr-round/{self.interview_id}/chat")
        answered = [row for row in chat if row.get("user_answer")]
        if answered:
            self.state.messages = messages_from_chat(answered)
            self.state.current_question_index = len(answered)
            if self.state.current_question_index >= len(self.questions):
                self.state.complete = True
            else:
                q = self.questions[self.state.current_question_index]
                self.state.messages.append(_message("interviewer", q["text"], q["id"]))
        elif self.questions:
            first = self.questions[0]
            self.state.messages = [
                _message(
                    "system",
                    f"Welcome to your HR interview for the {self.interview.get('job_position')} position. "
                    "I'll be asking you some questions to get to know you better.",
                ),
                _message("interviewer", first["text"], first["id"]),
            ]
        self._persist()
        return self.state

    def submit_answer(self, text: str, video_url: Optional[str] = None) -> Dict[str, Any]:
        """
        Send the answer for the current question and move on: to the returned
        follow-up, else the next main question, else completion.
        """
        question = self.current_question
        if question is None:
            raise RuntimeError("Interview is already complete")
        if not (text or "").strip():
            raise ValueError("Answer must not be empty")

        if self.state.is_follow_up:
            data = self._request(
                "PUT",
                "/hr-round/answer",
                json={"follow_up_question_id": question["id"], "user_answer": text, "video_url": video_url},
            )
        else:
            data = self._request(
                "POST",
                "/hr-round/answer",
                json={"hr_question_id": question["id"], "user_answer": text, "video_url": video_url},
            )

        analysis = data["analysis"]
        self.state.messages.append(_message("user", text, question["id"]))
        self.state.messages.append(_message("system", f"Score: {analysis['score']}/{question['max_score']}"))
        self.state.messages.append(_message("system", analysis["evaluation_feedback"]))

        next_q = data.get("next_question")
        if next_q:
            self.state.is_follow_up = True
            self.state.current_follow_up = next_q
            self.state.messages.append(_message("interviewer", next_q["text"], next_q["id"]))
        else:
            self.state.is_follow_up = False
            self.state.current_follow_up = None
            self.state.current_question_index += 1
            if self.state.current_question_index < len(self.questions):
                q = self.questions[self.state.current_question_index]
                self.state.messages.append(_message("interviewer", q["text"], q["id"]))
            else:
                self.state.complete = True
                self.state.messages.append(_message("system", COMPLETION_MESSAGE))

        self._persist()
        return data

    def restart(self) -> SessionState:
        self.store.clear(self.interview_id)
        return self.load()

    def transcribe(self, path: str) -> str:
        with open(path, "rb") as fh:
            data = self._request(
                "POST",
                "/transcribe",
                files={"audio": (os.path.basename(path), fh, "audio/webm")},
            )
        return data.get("transcript", "")

    def upload_recording(self, path: str) -> str:
        with open(path, "rb") as fh:
            data = self._request(
                "POST",
                "/media/upload",
                files={"file": (os.path.basename(path), fh, "video/webm")},
            )
        return data["key"]

    def results(self) -> Dict[str, Any]:
        return self._request("GET", f"/hr-round/{self.interview_id}/results")

    def _persist(self) -> None:
        if self.state.complete:
            self.store.clear(self.interview_id)
        else:
            self.store.save(self.state)
