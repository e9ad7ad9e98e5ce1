# hr_round/services/question_gen.py
from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from hr_round.ai import llm_client
from hr_round.ai.llm_client import LLMError
from hr_round.db import models as m
from hr_round.services import prompts
from hr_round.services.follow_ups import MAX_FOLLOWUP_QUESTIONS

log = logging.getLogger(__name__)


class QuestionParseError(LLMError):
    """Model answered, but not with usable questions. Carries the raw text."""

    def __init__(self, message: str, raw: str):
        super().__init__(message)
        self.raw = raw


DEFAULT_CATEGORY = "General"
MAIN_MAX_SCORE, MAIN_TIME_LIMIT = 10, 120
FOLLOW_UP_MAX_SCORE, FOLLOW_UP_TIME_LIMIT = 5, 90


def _int_or(value: Any, default: int) -> int:
    try:
        v = int(value)
    except (TypeError, ValueError):
        return default
    return v if v > 0 else default


def _key_points(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [str(p).strip() for p in value if str(p).strip()]


def parse_generated_questions(text: str) -> List[Dict[str, Any]]:
    """
    Parse the model's question-generation output into normalized dicts.

    Raises LLMError when no JSON is present or no usable question survives.
    """
    body = llm_client.extract_json(text)
    raw = body.get("questions")
    if not isinstance(raw, list):
        raise LLMError("No valid questions could be parsed from the AI response")

    questions: List[Dict[str, Any]] = []
    for item in raw:
        if not isinstance(item, dict):
            continue
        q_text = str(item.get("text") or "").strip()
        if not q_text:
            continue
        category = str(item.get("category") or "").strip() or DEFAULT_CATEGORY

        follow_ups = []
        for fu in item.get("followUpQuestions") or []:
            if not isinstance(fu, dict) or not str(fu.get("text") or "").strip():
                continue
            follow_ups.append({
                "text": str(fu["text"]).strip(),
                "category": category,
                "expected_key_points": _key_points(fu.get("expectedKeyPoints")),
                "max_score": _int_or(fu.get("maxScore"), FOLLOW_UP_MAX_SCORE),
                "time_limit": _int_or(fu.get("timeLimit"), FOLLOW_UP_TIME_LIMIT),
            })
        if len(follow_ups) > MAX_FOLLOWUP_QUESTIONS:
            log.info("dropping %d inline follow-ups over the cap", len(follow_ups) - MAX_FOLLOWUP_QUESTIONS)

        questions.append({
            "text": q_text,
            "category": category,
            "expected_key_points": _key_points(item.get("expectedKeyPoints")),
            "max_score": _int_or(item.get("maxScore"), MAIN_MAX_SCORE),
            "time_limit": _int_or(item.get("timeLimit"), MAIN_TIME_LIMIT),
            "follow_ups": follow_ups[:MAX_FOLLOWUP_QUESTIONS],
        })

    if not questions:
        raise LLMError("No valid questions could be parsed from the AI response")
    return questions


def generate_questions(
    *,
    n: int,
    job_position: str,
    job_description: str,
    job_experience: str,
    difficulty_level: str,
    skills: List[str],
    resume: str | None,
) -> tuple[List[Dict[str, Any]], str]:
    """Call the model and return (normalized questions, raw response text)."""
    prompt = prompts.questions_prompt(
        n=n,
        job_position=job_position,
        job_description=job_description,
        job_experience=job_experience,
        difficulty_level=difficulty_level,
        skills=skills,
        resume=resume,
        max_follow_ups=MAX_FOLLOWUP_QUESTIONS,
    )
    raw = llm_client.generate_text(prompt, purpose="questions")
    log.debug("raw questions response: %s", raw[:2000])
    try:
        return parse_generated_questions(raw), raw
    except LLMError as e:
        raise QuestionParseError(str(e), raw) from e


def persist_questions(db: Session, interview: m.HRInterview, questions: List[Dict[str, Any]]) -> None:
    """Attach main questions (and their inline follow-ups) to the interview in order."""
    for pos, q in enumerate(questions):
        main = m.HRQuestion(
            position=pos,
            text=q["text"],
            type=m.QuestionType.MAIN,
            category=q["category"],
            expected_key_points=q["expected_key_points"],
            max_score=q["max_score"],
            time_limit=q["time_limit"],
        )
        for fpos, fu in enumerate(q["follow_ups"]):
            main.follow_up_questions.append(m.HRFollowUpQuestion(
                position=fpos,
                text=fu["text"],
                type=m.QuestionType.FOLLOWUP,
                category=fu["category"],
                expected_key_points=fu["expected_key_points"],
                max_score=fu["max_score"],
                time_limit=fu["time_limit"],
            ))
        interview.questions.append(main)
