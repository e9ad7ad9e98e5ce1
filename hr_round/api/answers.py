# hr_round/api/answers.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from hr_round.api.deps import (
    get_current_user,
    get_db,
    get_owned_answer,
    get_owned_follow_up,
    get_owned_question,
)
from hr_round.ai.llm_client import LLMError
from hr_round.db import models as m
from hr_round.schemas.answer import (
    AnalysisOut,
    AnswerPatch,
    AnswerRecord,
    FollowUpAnswerIn,
    MainAnswerIn,
    ScoredAnswerOut,
)
from hr_round.schemas.interview import AnswerOut, FollowUpOut
from hr_round.services import follow_ups
from hr_round.services.analysis import AnswerAnalysis, analyze_answer

log = logging.getLogger(__name__)

router = APIRouter(prefix="/hr-round", tags=["hr-round"])


def _upsert_answer(
    db: Session,
    user,
    text: str,
    video_url: Optional[str],
    analysis: Optional[AnswerAnalysis] = None,
    *,
    question: Optional[m.HRQuestion] = None,
    follow_up: Optional[m.HRFollowUpQuestion] = None,
) -> m.HRUserAnswer:
    """One answer per question: update the stored one or create it."""
    target = question if question is not None else follow_up
    answer = target.user_answer
    if answer is None:
        answer = m.HRUserAnswer(user_id=user.id, matched_key_points=[])
        if question is not None:
            answer.hr_question = question
        else:
            answer.follow_up_question = follow_up
        db.add(answer)

    if analysis is None and answer.user_answer is not None and answer.user_answer != text:
        # scores belong to the old text
        answer.score = None
        answer.evaluation_feedback = None
        answer.matched_key_points = []
        answer.voice_tone = None
        answer.confidence = None
    answer.user_answer = text
    answer.video_url = video_url
    if analysis is not None:
        answer.score = analysis.score
        answer.evaluation_feedback = analysis.evaluation_feedback
        answer.matched_key_points = list(analysis.matched_key_points)
        answer.voice_tone = analysis.voice_tone
        answer.confidence = analysis.confidence
    return answer


def _scored(answer, analysis: AnswerAnalysis, next_q=None, follow_up=None) -> ScoredAnswerOut:
    return ScoredAnswerOut(
        hr_user_answer=AnswerOut.model_validate(answer),
        analysis=AnalysisOut(**analysis.as_dict()),
        next_question=FollowUpOut.model_validate(next_q) if next_q is not None else None,
        follow_up_question=FollowUpOut.model_validate(follow_up) if follow_up is not None else None,
    )


# ---------------------------
# Scored answers
# ---------------------------

@router.post("/answer", response_model=ScoredAnswerOut)
def answer_main_question(payload: MainAnswerIn, db: Session = Depends(get_db), user=Depends(get_current_user)):
    """
    Score a main-question answer, store it, and pick the next follow-up
    (an unanswered one, or a freshly generated one while under the cap).
    """
    text = (payload.user_answer or "").strip()
    if not payload.hr_question_id or not text:
        raise HTTPException(
            status_code=400,
            detail={"error": "Missing required fields", "details": "hr_question_id and user_answer are required"},
        )

    question = get_owned_question(db, payload.hr_question_id, user)
    analysis = analyze_answer(question.text, text, question.max_score, question.interview.job_description)

    try:
        answer = _upsert_answer(db, user, text, payload.video_url, analysis, question=question)
        db.flush()
        next_q = follow_ups.next_follow_up(db, question, text, analysis.score)
        db.commit()
        db.refresh(answer)
    except Exception as e:
        db.rollback()
        log.exception("Answer saving error for question %s", payload.hr_question_id)
        raise HTTPException(status_code=500, detail=f"Failed to save answer: {e}")

    log.info("main answer scored", extra={"question_id": question.id, "score": analysis.score})
    return _scored(answer, analysis, next_q=next_q)


@router.put("/answer", response_model=ScoredAnswerOut)
def answer_follow_up_question(payload: FollowUpAnswerIn, db: Session = Depends(get_db), user=Depends(get_current_user)):
    """
    Score a follow-up answer. Without `follow_up_question_id`, a follow-up is
    generated on the fly under `hr_question_id` and the answer attached to it.
    """
    text = (payload.user_answer or "").strip()
    if (not payload.follow_up_question_id and not payload.hr_question_id) or not text:
        raise HTTPException(
            status_code=400,
            detail={
                "error": "Missing required fields",
                "details": "Either follow_up_question_id or hr_question_id, and user_answer are required",
            },
        )

    if payload.follow_up_question_id:
        follow_up = get_owned_follow_up(db, payload.follow_up_question_id, user)
    else:
        main = get_owned_question(db, payload.hr_question_id, user)
        try:
            follow_up = follow_ups.generate_follow_up(db, main, text, context=main.interview.job_description or "")
        except follow_ups.FollowUpLimitReached as e:
            db.rollback()
            raise HTTPException(status_code=400, detail=str(e))
        except LLMError as e:
            db.rollback()
            log.exception("on-the-fly follow-up generation failed")
            raise HTTPException(status_code=502, detail=f"Failed to generate follow-up question: {e}")

    main = follow_up.main_question
    analysis = analyze_answer(follow_up.text, text, follow_up.max_score, main.interview.job_description)

    try:
        answer = _upsert_answer(db, user, text, payload.video_url, analysis, follow_up=follow_up)
        db.flush()
        next_q = follow_ups.next_follow_up(db, main, text, analysis.score, follow_up.max_score)
        db.commit()
        db.refresh(answer)
    except Exception as e:
        db.rollback()
        log.exception("Follow-up answer saving error")
        raise HTTPException(status_code=500, detail=f"Failed to save follow-up answer: {e}")

    return _scored(answer, analysis, next_q=next_q, follow_up=follow_up)


# ---------------------------
# Plain answer records
# ---------------------------

@router.post("/answers", response_model=AnswerOut)
def record_answer(payload: AnswerRecord, db: Session = Depends(get_db), user=Depends(get_current_user)):
    """Store an answer without scoring it (upsert on the question)."""
    if bool(payload.hr_question_id) == bool(payload.hr_follow_up_question_id):
        raise HTTPException(
            status_code=400,
            detail="Exactly one of hr_question_id or hr_follow_up_question_id is required",
        )

    if payload.hr_question_id:
        target = {"question": get_owned_question(db, payload.hr_question_id, user)}
    else:
        target = {"follow_up": get_owned_follow_up(db, payload.hr_follow_up_question_id, user)}

    try:
        answer = _upsert_answer(db, user, payload.user_answer, payload.video_url, **target)
        db.commit()
        db.refresh(answer)
    except Exception as e:
        db.rollback()
        log.exception("Error submitting answer")
        raise HTTPException(status_code=500, detail=f"Failed to submit answer: {e}")
    return answer


@router.patch("/answers/{answer_id}", response_model=AnswerOut)
def update_answer(
    answer_id: str,
    payload: AnswerPatch,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    answer = get_owned_answer(db, answer_id, user)
    try:
        for field, value in payload.model_dump(exclude_unset=True).items():
            if field == "user_answer" and value is None:
                continue
            if field == "matched_key_points" and value is None:
                value = []
            setattr(answer, field, value)
        db.commit()
        db.refresh(answer)
    except Exception as e:
        db.rollback()
        log.exception("Error updating answer %s", answer_id)
        raise HTTPException(status_code=500, detail=f"Failed to update answer: {e}")
    return answer
