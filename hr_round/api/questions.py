# hr_round/api/questions.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from hr_round.api.deps import get_current_user, get_db, get_owned_interview
from hr_round.ai.llm_client import LLMError
from hr_round.schemas.interview import FollowUpGenerate, FollowUpOut, InterviewOut, QuestionOut
from hr_round.services import follow_ups

log = logging.getLogger(__name__)

router = APIRouter(prefix="/hr-round", tags=["hr-round"])


@router.get("/{interview_id}/questions")
def get_questions(
    interview_id: str,
    question_id: Optional[str] = Query(None),
    generate_follow_up: bool = Query(False),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    """
    Without `question_id`: the whole interview with questions and follow-ups.
    With `question_id`: that question; when `generate_follow_up=true` and the
    question is under the follow-up cap, a new follow-up is generated from the
    stored answer first.
    """
    interview = get_owned_interview(db, interview_id, user)

    if not question_id:
        return {"success": True, "interview": InterviewOut.model_validate(interview)}

    question = next((q for q in interview.questions if q.id == question_id), None)
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")

    if generate_follow_up and follow_ups.can_add_follow_up(question):
        if question.user_answer is None:
            raise HTTPException(status_code=400, detail="Cannot generate follow-up without a user answer")
        try:
            follow_ups.generate_follow_up(db, question, question.user_answer.user_answer)
            db.commit()
            db.refresh(question)
        except LLMError as e:
            db.rollback()
            log.exception("follow-up generation failed for question %s", question_id)
            raise HTTPException(status_code=502, detail=f"Failed to generate follow-up question: {e}")
        except Exception as e:
            db.rollback()
            log.exception("Error fetching HR interview questions")
            raise HTTPException(status_code=500, detail=f"Failed to fetch questions: {e}")

    return {"success": True, "question": QuestionOut.model_validate(question)}


@router.post("/{interview_id}/questions")
def create_follow_up_from_answer(
    interview_id: str,
    payload: FollowUpGenerate,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    """Generate a follow-up for `question_id` from the supplied answer text."""
    if not payload.question_id or not (payload.user_answer or "").strip():
        raise HTTPException(status_code=400, detail="Missing required fields")

    interview = get_owned_interview(db, interview_id, user)
    question = next((q for q in interview.questions if q.id == payload.question_id), None)
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")

    if not follow_ups.can_add_follow_up(question):
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Maximum number of follow-up questions reached",
                "followUpQuestions": [
                    FollowUpOut.model_validate(fu).model_dump(mode="json") for fu in question.follow_up_questions
                ],
            },
        )

    try:
        follow_up = follow_ups.generate_follow_up(db, question, payload.user_answer)
        db.commit()
        db.refresh(follow_up)
    except LLMError as e:
        db.rollback()
        log.exception("follow-up generation failed for question %s", payload.question_id)
        raise HTTPException(status_code=502, detail=f"Failed to generate follow-up question: {e}")
    except Exception as e:
        db.rollback()
        log.exception("Error generating follow-up question")
        raise HTTPException(status_code=500, detail=f"Failed to generate follow-up question: {e}")

    return {"success": True, "follow_up_question": FollowUpOut.model_validate(follow_up)}
