# hr_round/api/deps.py
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy.orm import Session

from hr_round.db.session import get_db
from hr_round.db import models as db_models
from hr_round.core import security


oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/auth/login", auto_error=False)


def _unauthorized(detail: str = "Unauthorized") -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_current_user(token: str | None = Depends(oauth2_scheme), db: Session = Depends(get_db)):
    if not token:
        raise _unauthorized()
    try:
        payload = security.decode_token(token)
    except JWTError:
        raise _unauthorized("Could not validate credentials")

    sub = payload.get("sub")
    if sub is None:
        raise _unauthorized("Could not validate credentials")

    # Try numeric id first, fallback to email
    try:
        user_id = int(sub)
        user = db.query(db_models.User).filter(db_models.User.id == user_id).first()
    except (TypeError, ValueError):
        user = db.query(db_models.User).filter(db_models.User.email == sub).first()

    if not user or user.is_active is False:
        raise _unauthorized("Could not validate credentials")
    return user


# ---------- ownership helpers ----------
# Unknown ids are 404; records that belong to someone else are 401.

def get_owned_interview(db: Session, interview_id: str, user) -> db_models.HRInterview:
    interview = db.get(db_models.HRInterview, interview_id)
    if not interview:
        raise HTTPException(status_code=404, detail="HR Interview not found")
    if interview.user_id != user.id:
        raise _unauthorized()
    return interview


def get_owned_question(db: Session, question_id: str, user) -> db_models.HRQuestion:
    question = db.get(db_models.HRQuestion, question_id)
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")
    if question.interview.user_id != user.id:
        raise _unauthorized()
    return question


def get_owned_follow_up(db: Session, follow_up_id: str, user) -> db_models.HRFollowUpQuestion:
    follow_up = db.get(db_models.HRFollowUpQuestion, follow_up_id)
    if not follow_up:
        raise HTTPException(status_code=404, detail="Follow-up question not found")
    if follow_up.main_question.interview.user_id != user.id:
        raise _unauthorized()
    return follow_up


def get_owned_answer(db: Session, answer_id: str, user) -> db_models.HRUserAnswer:
    answer = db.get(db_models.HRUserAnswer, answer_id)
    if not answer:
        raise HTTPException(status_code=404, detail="Answer not found")
    if answer.hr_question is not None:
        owner = answer.hr_question.interview.user_id
    elif answer.follow_up_question is not None:
        owner = answer.follow_up_question.main_question.interview.user_id
    else:
        owner = answer.user_id
    if owner != user.id:
        raise _unauthorized()
    return answer
