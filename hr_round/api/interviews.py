# hr_round/api/interviews.py
from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response
from sqlalchemy import func
from sqlalchemy.orm import Session

from hr_round.api.deps import get_current_user, get_db, get_owned_interview
from hr_round.ai.llm_client import LLMError
from hr_round.core.config import settings
from hr_round.db import models as m
from hr_round.schemas.interview import InterviewCreate, InterviewOut, InterviewSummary, InterviewUpdate
from hr_round.services import question_gen
from hr_round.services.chat import chat_history
from hr_round.services.results import build_results

log = logging.getLogger(__name__)

router = APIRouter(prefix="/hr-round", tags=["hr-round"])

REQUIRED_FIELDS = ["job_position", "job_description", "job_experience", "difficulty_level", "total_questions"]
MAX_QUESTIONS = 20


# ---------------------------
# Create (generate questions)
# ---------------------------

@router.post("", status_code=status.HTTP_201_CREATED)
def create_interview(payload: InterviewCreate, db: Session = Depends(get_db), user=Depends(get_current_user)):
    data = payload.model_dump()
    missing = [f for f in REQUIRED_FIELDS if not data.get(f)]
    if missing:
        raise HTTPException(
            status_code=400,
            detail={"error": "Missing required fields", "missingFields": missing},
        )
    if payload.total_questions < 1 or payload.total_questions > MAX_QUESTIONS:
        raise HTTPException(status_code=400, detail=f"total_questions must be between 1 and {MAX_QUESTIONS}")

    job_experience = str(payload.job_experience)
    try:
        questions, _raw = question_gen.generate_questions(
            n=payload.total_questions,
            job_position=payload.job_position,
            job_description=payload.job_description,
            job_experience=job_experience,
            difficulty_level=payload.difficulty_level.value,
            skills=payload.skills,
            resume=user.resume,
        )
    except question_gen.QuestionParseError as e:
        log.warning("unusable question output: %s", e)
        raise HTTPException(
            status_code=502,
            detail={"error": "Failed to parse AI response", "message": str(e), "rawResponse": e.raw},
        )
    except LLMError as e:
        log.exception("question generation failed")
        raise HTTPException(status_code=502, detail={"error": "Generative model request failed", "message": str(e)})

    try:
        interview = m.HRInterview(
            user_id=user.id,
            job_position=payload.job_position,
            job_description=payload.job_description,
            job_experience=job_experience,
            skills=[s for s in payload.skills if s and s.strip()],
            difficulty_level=payload.difficulty_level,
            resume_url=payload.resume_url,
            pass_score=payload.pass_score if payload.pass_score is not None else settings.default_pass_score,
            total_score=0,
        )
        question_gen.persist_questions(db, interview, questions)
        db.add(interview)
        db.commit()
        db.refresh(interview)
    except Exception as e:
        db.rollback()
        log.exception("Error creating HR interview")
        raise HTTPException(status_code=500, detail=f"Failed to create interview: {e}")

    log.info("interview created", extra={"interview_id": interview.id, "questions": len(interview.questions)})
    return {"success": True, "hr_interview": InterviewOut.model_validate(interview)}


# ---------------------------
# Read / update / delete
# ---------------------------

@router.get("", response_model=list[InterviewSummary])
def list_interviews(db: Session = Depends(get_db), user=Depends(get_current_user)):
    rows = (
        db.query(m.HRInterview, func.count(m.HRQuestion.id))
        .outerjoin(m.HRQuestion, m.HRQuestion.hr_interview_id == m.HRInterview.id)
        .filter(m.HRInterview.user_id == user.id)
        .group_by(m.HRInterview.id)
        .order_by(m.HRInterview.created_at.desc())
        .all()
    )
    return [
        InterviewSummary(
            id=iv.id,
            job_position=iv.job_position,
            job_experience=iv.job_experience,
            difficulty_level=iv.difficulty_level,
            pass_score=iv.pass_score,
            total_score=iv.total_score,
            question_count=int(count or 0),
            created_at=iv.created_at,
        )
        for iv, count in rows
    ]


@router.get("/{interview_id}", response_model=InterviewOut)
def get_interview(interview_id: str, db: Session = Depends(get_db), user=Depends(get_current_user)):
    return get_owned_interview(db, interview_id, user)


@router.patch("/{interview_id}", response_model=InterviewOut)
def update_interview(
    interview_id: str,
    payload: InterviewUpdate,
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    interview = get_owned_interview(db, interview_id, user)
    try:
        for field, value in payload.model_dump(exclude_unset=True).items():
            if value is None:
                continue
            setattr(interview, field, value)
        db.commit()
        db.refresh(interview)
    except Exception as e:
        db.rollback()
        log.exception("Error updating HR interview %s", interview_id)
        raise HTTPException(status_code=500, detail=f"Failed to update interview: {e}")
    return interview


@router.delete("/{interview_id}")
def delete_interview(interview_id: str, db: Session = Depends(get_db), user=Depends(get_current_user)):
    interview = get_owned_interview(db, interview_id, user)
    try:
        db.delete(interview)
        db.commit()
    except Exception as e:
        db.rollback()
        log.exception("Error deleting HR interview %s", interview_id)
        raise HTTPException(status_code=500, detail=f"Failed to delete interview: {e}")
    return {"success": True, "message": "HR Interview deleted successfully"}


# ---------------------------
# Chat history & results
# ---------------------------

@router.get("/{interview_id}/chat")
def get_chat(interview_id: str, db: Session = Depends(get_db), user=Depends(get_current_user)):
    interview = get_owned_interview(db, interview_id, user)
    return chat_history(interview)


def _results(db: Session, interview: m.HRInterview) -> dict:
    results = build_results(interview)
    if interview.total_score != results["total_score"]:
        try:
            interview.total_score = results["total_score"]
            db.commit()
        except Exception:
            db.rollback()
            log.exception("failed to store total score for %s", interview.id)
            raise
    return results


@router.get("/{interview_id}/results")
def get_results(interview_id: str, db: Session = Depends(get_db), user=Depends(get_current_user)):
    interview = get_owned_interview(db, interview_id, user)
    try:
        return _results(db, interview)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to compute results: {e}")


@router.get("/{interview_id}/results/download")
def download_results(interview_id: str, db: Session = Depends(get_db), user=Depends(get_current_user)):
    interview = get_owned_interview(db, interview_id, user)
    try:
        results = _results(db, interview)
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to compute results: {e}")
    return Response(
        content=json.dumps(results, indent=2, ensure_ascii=False),
        media_type="application/json",
        headers={"Content-Disposition": f'attachment; filename="hr-interview-results-{interview_id}.json"'},
    )
