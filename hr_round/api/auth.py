# hr_round/api/auth.py
import logging
from datetime import timedelta
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from pydantic import BaseModel, EmailStr
from sqlalchemy.orm import Session

from hr_round.api import deps
from hr_round.core import security
from hr_round.core.config import settings
from hr_round.db import models as db_models
from hr_round.schemas.user import UserCreate, UserOut, UserUpdate

log = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


# ---------- Schemas ----------
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class LoginJSON(BaseModel):
    email: EmailStr
    password: str


# ---------- Helpers ----------
def _issue_access_token(user: db_models.User) -> Token:
    access_expires = timedelta(minutes=settings.access_token_expire_minutes)
    access_token = security.create_access_token(subject=str(user.id), expires_delta=access_expires)
    return Token(
        access_token=access_token,
        token_type="bearer",
        expires_in=int(access_expires.total_seconds()),
    )


def _authenticate(db: Session, email: str, password: str) -> db_models.User:
    user = db.query(db_models.User).filter(db_models.User.email == email).first()
    if not user or not security.verify_password(password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Incorrect email or password",
        )
    if user.is_active is False:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Inactive user")
    return user


def _user_out(user: db_models.User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        full_name=user.full_name,
        is_active=user.is_active,
        is_superuser=user.is_superuser,
        has_resume=bool((user.resume or "").strip()),
    )


# ---------- Endpoints ----------
@router.post("/register", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def register(payload: UserCreate, db: Session = Depends(deps.get_db)):
    exists = db.query(db_models.User).filter(db_models.User.email == payload.email).first()
    if exists:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Email already registered")
    user = db_models.User(
        email=payload.email,
        full_name=payload.full_name,
        resume=payload.resume,
        hashed_password=security.get_password_hash(payload.password),
        is_active=True,
        is_superuser=False,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    log.info("registered user", extra={"user_id": user.id})
    return _user_out(user)


@router.post("/login", response_model=Token)
def login_form(
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(deps.get_db),
) -> Any:
    """
    OAuth2 Password flow for Swagger **Authorize** dialog.

    - username = email
    - password = user's password
    """
    user = _authenticate(db, email=form_data.username, password=form_data.password)
    return _issue_access_token(user)


@router.post("/login_json", response_model=Token)
def login_json(payload: LoginJSON, db: Session = Depends(deps.get_db)) -> Any:
    """
    JSON login helper (useful with curl/Postman and the console client):
      POST /auth/login_json
      { "email": "...", "password": "..." }
    """
    user = _authenticate(db, email=payload.email, password=payload.password)
    return _issue_access_token(user)


@router.get("/me", response_model=UserOut)
def read_myself(current_user: db_models.User = Depends(deps.get_current_user)):
    return _user_out(current_user)


@router.patch("/me", response_model=UserOut)
def update_myself(
    payload: UserUpdate,
    db: Session = Depends(deps.get_db),
    current_user: db_models.User = Depends(deps.get_current_user),
):
    """Update display name and the resume text used for question generation."""
    for field, value in payload.model_dump(exclude_unset=True).items():
        setattr(current_user, field, value)
    db.add(current_user)
    db.commit()
    db.refresh(current_user)
    return _user_out(current_user)


@router.post("/refresh", response_model=Token)
def refresh_access(current_user: db_models.User = Depends(deps.get_current_user)):
    """
    Issues a fresh short-lived access token for the already-authenticated user.
    """
    return _issue_access_token(current_user)
