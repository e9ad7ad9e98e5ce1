# hr_round/api/follow_ups.py
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from hr_round.api.deps import get_current_user, get_db, get_owned_follow_up, get_owned_question
from hr_round.schemas.interview import FollowUpCreate, FollowUpOut
from hr_round.services import follow_ups

log = logging.getLogger(__name__)

router = APIRouter(prefix="/hr-round/follow-ups", tags=["hr-round"])


@router.get("/{follow_up_id}", response_model=FollowUpOut)
def get_follow_up(follow_up_id: str, db: Session = Depends(get_db), user=Depends(get_current_user)):
    return get_owned_follow_up(db, follow_up_id, user)


@router.get("", response_model=List[FollowUpOut])
def list_follow_ups(
    main_question_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
    user=Depends(get_current_user),
):
    if not main_question_id:
        raise HTTPException(status_code=400, detail="main_question_id is required")
    question = get_owned_question(db, main_question_id, user)
    return question.follow_up_questions


@router.post("", response_model=FollowUpOut, status_code=status.HTTP_201_CREATED)
def create_follow_up(payload: FollowUpCreate, db: Session = Depends(get_db), user=Depends(get_current_user)):
    question = get_owned_question(db, payload.main_question_id, user)
    try:
        follow_up = follow_ups.create_follow_up(
            db,
            question,
            payload.text.strip(),
            category=payload.category,
            expected_key_points=payload.expected_key_points,
            max_score=payload.max_score,
            time_limit=payload.time_limit,
        )
        db.commit()
        db.refresh(follow_up)
    except follow_ups.FollowUpLimitReached as e:
        db.rollback()
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        db.rollback()
        log.exception("Error creating follow-up question")
        raise HTTPException(status_code=500, detail=f"Failed to create follow-up question: {e}")
    return follow_up
