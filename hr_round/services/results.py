# hr_round/services/results.py
from __future__ import annotations

import math
from typing import Any, Dict, List, Optional

from hr_round.db import models as m

DEFAULT_PASS_SCORE = 70


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def score_band(score: int, max_score: int) -> str:
    pct = (score / max_score) * 100 if max_score else 0
    if pct >= 80:
        return "high"
    if pct >= 60:
        return "medium"
    return "low"


def missed_key_points(expected: List[str], covered: List[str]) -> List[str]:
    """Expected key points that no covered point mentions (case-insensitive, either direction)."""
    covered_l = [c.lower() for c in covered or []]
    missed = []
    for point in expected or []:
        p = point.lower()
        if not any(p in c or c in p for c in covered_l if c):
            missed.append(point)
    return missed


def _answer_block(question, answer: Optional[m.HRUserAnswer]) -> Dict[str, Any]:
    score = (answer.score or 0) if answer else 0
    covered = list(answer.matched_key_points or []) if answer else []
    return {
        "id": question.id,
        "text": question.text,
        "category": question.category,
        "score": score,
        "max_score": question.max_score,
        "band": score_band(score, question.max_score),
        "answer": answer.user_answer if answer and answer.user_answer else "No answer provided",
        "answered": answer is not None,
        "feedback": answer.evaluation_feedback if answer and answer.evaluation_feedback else "No feedback available",
        "key_points_covered": covered,
        "key_points_missed": missed_key_points(question.expected_key_points or [], covered),
        "video_url": answer.video_url if answer else None,
    }


def build_results(interview: m.HRInterview) -> Dict[str, Any]:
    """
    Aggregate stored scores. Totals cover main questions only; follow-ups are
    reported per question for feedback.
    """
    total = sum((q.user_answer.score or 0) if q.user_answer else 0 for q in interview.questions)
    max_possible = sum(q.max_score or 0 for q in interview.questions)
    percentage = round_half_up(total / max_possible * 100) if max_possible > 0 else 0
    pass_score = DEFAULT_PASS_SCORE if interview.pass_score is None else interview.pass_score

    questions = []
    for q in interview.questions:
        block = _answer_block(q, q.user_answer)
        block["follow_ups"] = [_answer_block(fu, fu.user_answer) for fu in q.follow_up_questions]
        questions.append(block)

    return {
        "interview_id": interview.id,
        "job_position": interview.job_position,
        "total_score": total,
        "max_score": max_possible,
        "percentage": percentage,
        "pass_score": pass_score,
        "passed": percentage >= pass_score,
        "answered": sum(1 for q in interview.questions if q.user_answer is not None),
        "total_questions": len(interview.questions),
        "questions": questions,
    }
