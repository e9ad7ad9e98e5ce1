# hr_round/schemas/interview.py
from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from hr_round.db.models import DifficultyLevel, QuestionType


class InterviewCreate(BaseModel):
    # everything optional here: missing fields are reported together as a 400
    job_position: Optional[str] = None
    job_description: Optional[str] = None
    job_experience: Optional[Any] = None
    difficulty_level: Optional[DifficultyLevel] = None
    total_questions: Optional[int] = None
    skills: List[str] = []
    resume_url: Optional[str] = None
    pass_score: Optional[int] = Field(default=None, ge=0, le=100)


class InterviewUpdate(BaseModel):
    job_position: Optional[str] = None
    job_description: Optional[str] = None
    job_experience: Optional[str] = None
    skills: Optional[List[str]] = None
    difficulty_level: Optional[DifficultyLevel] = None
    resume_url: Optional[str] = None
    pass_score: Optional[int] = Field(default=None, ge=0, le=100)


class AnswerOut(BaseModel):
    id: str
    hr_question_id: Optional[str] = None
    hr_follow_up_question_id: Optional[str] = None
    user_answer: str
    video_url: Optional[str] = None
    score: Optional[int] = None
    evaluation_feedback: Optional[str] = None
    matched_key_points: List[str] = []
    voice_tone: Optional[str] = None
    confidence: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class FollowUpOut(BaseModel):
    id: str
    main_question_id: str
    position: int
    text: str
    type: QuestionType
    category: str
    expected_key_points: List[str] = []
    max_score: int
    time_limit: int
    user_answer: Optional[AnswerOut] = None

    model_config = ConfigDict(from_attributes=True)


class QuestionOut(BaseModel):
    id: str
    hr_interview_id: str
    position: int
    text: str
    type: QuestionType
    category: str
    expected_key_points: List[str] = []
    max_score: int
    time_limit: int
    follow_up_questions: List[FollowUpOut] = []
    user_answer: Optional[AnswerOut] = None

    model_config = ConfigDict(from_attributes=True)


class InterviewSummary(BaseModel):
    id: str
    job_position: str
    job_experience: str
    difficulty_level: DifficultyLevel
    pass_score: int
    total_score: int
    question_count: int = 0
    created_at: Optional[datetime] = None


class InterviewOut(BaseModel):
    id: str
    user_id: int
    job_position: str
    job_description: str
    job_experience: str
    skills: List[str] = []
    difficulty_level: DifficultyLevel
    resume_url: Optional[str] = None
    pass_score: int
    total_score: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    questions: List[QuestionOut] = []

    model_config = ConfigDict(from_attributes=True)


class FollowUpCreate(BaseModel):
    main_question_id: str
    text: str = Field(..., min_length=1)
    category: Optional[str] = None
    expected_key_points: List[str] = []
    max_score: Optional[int] = Field(default=None, ge=1)
    time_limit: Optional[int] = Field(default=None, ge=1)


class FollowUpGenerate(BaseModel):
    question_id: Optional[str] = None
    user_answer: Optional[str] = None
