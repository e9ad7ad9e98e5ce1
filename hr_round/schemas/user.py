# hr_round/schemas/user.py
from pydantic import BaseModel, ConfigDict, EmailStr, Field
from typing import Optional


class UserCreate(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=6)
    full_name: Optional[str] = None
    resume: Optional[str] = None


class UserUpdate(BaseModel):
    full_name: Optional[str] = None
    resume: Optional[str] = None


class UserOut(BaseModel):
    id: int
    email: EmailStr
    full_name: Optional[str] = None
    is_active: bool
    is_superuser: bool
    has_resume: bool = False

    model_config = ConfigDict(from_attributes=True)
