# hr_round/services/follow_ups.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.orm import Session

from hr_round.ai import llm_client
from hr_round.db import models as m
from hr_round.services import prompts

log = logging.getLogger(__name__)

# Maximum number of follow-up questions allowed per main question
MAX_FOLLOWUP_QUESTIONS = 2

FOLLOWUP_THRESHOLD = 0.5
FOLLOWUP_SCORE_RATIO = 0.5
FOLLOWUP_TIME_RATIO = 0.75
DEFAULT_MAX_SCORE = 10
DEFAULT_TIME_LIMIT = 120


class FollowUpLimitReached(Exception):
    pass


def can_add_follow_up(question: m.HRQuestion) -> bool:
    return len(question.follow_up_questions) < MAX_FOLLOWUP_QUESTIONS


def _clean_question_text(text: str) -> str:
    text = (text or "").strip()
    # models sometimes answer 'Follow-up question: "..."'
    if ":" in text.split("\n", 1)[0] and text.lower().startswith(("follow-up", "follow up", "question")):
        text = text.split(":", 1)[1].strip()
    return text.strip().strip('"').strip()


def create_follow_up(
    db: Session,
    question: m.HRQuestion,
    text: str,
    *,
    category: Optional[str] = None,
    expected_key_points: Optional[list] = None,
    max_score: Optional[int] = None,
    time_limit: Optional[int] = None,
) -> m.HRFollowUpQuestion:
    """
    Persist a follow-up under `question`. Score and time budgets default to a
    fraction of the main question's. Raises FollowUpLimitReached at the cap.
    """
    if not can_add_follow_up(question):
        raise FollowUpLimitReached(f"Maximum number of follow-up questions reached ({MAX_FOLLOWUP_QUESTIONS})")

    follow_up = m.HRFollowUpQuestion(
        position=len(question.follow_up_questions),
        text=text,
        type=m.QuestionType.FOLLOWUP,
        category=category or question.category,
        expected_key_points=expected_key_points or [],
        max_score=max_score or int((question.max_score or DEFAULT_MAX_SCORE) * FOLLOWUP_SCORE_RATIO),
        time_limit=time_limit or int((question.time_limit or DEFAULT_TIME_LIMIT) * FOLLOWUP_TIME_RATIO),
    )
    question.follow_up_questions.append(follow_up)
    db.flush()
    return follow_up


def generate_follow_up(
    db: Session,
    question: m.HRQuestion,
    answer_text: str,
    context: Optional[str] = None,
) -> m.HRFollowUpQuestion:
    """Ask the model for a follow-up to `answer_text` and persist it. LLMError propagates."""
    if not can_add_follow_up(question):
        raise FollowUpLimitReached(f"Maximum number of follow-up questions reached ({MAX_FOLLOWUP_QUESTIONS})")
    prompt = prompts.follow_up_prompt(question.text, answer_text, context)
    text = _clean_question_text(llm_client.generate_text(prompt, purpose="follow_up"))
    if not text:
        raise llm_client.LLMError("Model returned an empty follow-up question")
    return create_follow_up(db, question, text)


def next_follow_up(
    db: Session,
    question: m.HRQuestion,
    answer_text: str,
    score: int,
    max_score: Optional[int] = None,
) -> Optional[m.HRFollowUpQuestion]:
    """
    Pick what the candidate should answer next under `question`: the first
    unanswered follow-up, else a freshly generated one while under the cap,
    else None. Generation failures are logged and yield None.
    """
    for fu in question.follow_up_questions:
        if fu.user_answer is None:
            return fu
    if not can_add_follow_up(question):
        return None

    ratio = score / (max_score or question.max_score or DEFAULT_MAX_SCORE)
    guidance = prompts.STRONG_ANSWER_CONTEXT if ratio >= FOLLOWUP_THRESHOLD else prompts.WEAK_ANSWER_CONTEXT
    job_description = question.interview.job_description if question.interview else ""
    context = f"{guidance} Context: {job_description or ''}".strip()
    try:
        return generate_follow_up(db, question, answer_text, context)
    except llm_client.LLMError:
        log.exception("follow-up generation failed for question %s", question.id)
        return None
