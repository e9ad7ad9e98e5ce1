# hr_round/schemas/answer.py
from typing import List, Optional

from pydantic import BaseModel, Field

from hr_round.schemas.interview import AnswerOut, FollowUpOut


class MainAnswerIn(BaseModel):
    hr_question_id: Optional[str] = None
    user_answer: Optional[str] = None
    video_url: Optional[str] = None


class FollowUpAnswerIn(BaseModel):
    follow_up_question_id: Optional[str] = None
    hr_question_id: Optional[str] = None  # generate a follow-up on the fly under this main question
    user_answer: Optional[str] = None
    video_url: Optional[str] = None


class AnalysisOut(BaseModel):
    score: int
    evaluation_feedback: str
    matched_key_points: List[str] = []
    voice_tone: Optional[str] = None
    confidence: Optional[str] = None


class ScoredAnswerOut(BaseModel):
    success: bool = True
    hr_user_answer: AnswerOut
    analysis: AnalysisOut
    next_question: Optional[FollowUpOut] = None
    follow_up_question: Optional[FollowUpOut] = None


class AnswerRecord(BaseModel):
    hr_question_id: Optional[str] = None
    hr_follow_up_question_id: Optional[str] = None
    user_answer: str = ""
    video_url: Optional[str] = None


class AnswerPatch(BaseModel):
    user_answer: Optional[str] = None
    video_url: Optional[str] = None
    score: Optional[int] = Field(default=None, ge=0)
    evaluation_feedback: Optional[str] = None
    matched_key_points: Optional[List[str]] = None
    voice_tone: Optional[str] = None
    confidence: Optional[str] = None
