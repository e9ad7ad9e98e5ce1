# hr_round/db/models.py
import enum
from uuid import uuid4

from sqlalchemy import (
    Column,
    Integer,
    String,
    Text,
    DateTime,
    func,
    ForeignKey,
    Boolean,
    JSON,
    CheckConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.types import Enum as SAEnum

from .session import Base


def _uuid() -> str:
    return str(uuid4())


class QuestionType(str, enum.Enum):
    MAIN = "MAIN"
    FOLLOWUP = "FOLLOWUP"


class DifficultyLevel(str, enum.Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"
    EXPERT = "EXPERT"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, index=True, nullable=False)
    full_name = Column(String(255), nullable=True)
    hashed_password = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    is_superuser = Column(Boolean, default=False, nullable=False)
    # plain-text resume, fed into question generation
    resume = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    interviews = relationship("HRInterview", back_populates="user", cascade="all, delete-orphan")


class HRInterview(Base):
    __tablename__ = "hr_interviews"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    job_position = Column(String(255), nullable=False)
    job_description = Column(Text, nullable=False)
    job_experience = Column(String(50), nullable=False)
    skills = Column(JSON, nullable=False, default=list)
    difficulty_level = Column(SAEnum(DifficultyLevel, native_enum=False), nullable=False)
    resume_url = Column(Text, nullable=True)

    pass_score = Column(Integer, nullable=False, default=70)
    total_score = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    user = relationship("User", back_populates="interviews")
    questions = relationship(
        "HRQuestion",
        back_populates="interview",
        order_by="HRQuestion.position",
        cascade="all, delete-orphan",
    )


class HRQuestion(Base):
    __tablename__ = "hr_questions"

    id = Column(String(36), primary_key=True, default=_uuid)
    hr_interview_id = Column(
        String(36),
        ForeignKey("hr_interviews.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # creation order within the interview
    position = Column(Integer, nullable=False, default=0)

    text = Column(Text, nullable=False)
    type = Column(SAEnum(QuestionType, native_enum=False), nullable=False, default=QuestionType.MAIN)
    category = Column(String(100), nullable=False, default="General")
    expected_key_points = Column(JSON, nullable=False, default=list)
    max_score = Column(Integer, nullable=False, default=10)
    time_limit = Column(Integer, nullable=False, default=120)  # seconds

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    interview = relationship("HRInterview", back_populates="questions")
    follow_up_questions = relationship(
        "HRFollowUpQuestion",
        back_populates="main_question",
        order_by="HRFollowUpQuestion.position",
        cascade="all, delete-orphan",
    )
    user_answer = relationship(
        "HRUserAnswer",
        back_populates="hr_question",
        uselist=False,
        cascade="all, delete-orphan",
    )


class HRFollowUpQuestion(Base):
    __tablename__ = "hr_follow_up_questions"

    id = Column(String(36), primary_key=True, default=_uuid)
    main_question_id = Column(
        String(36),
        ForeignKey("hr_questions.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position = Column(Integer, nullable=False, default=0)

    text = Column(Text, nullable=False)
    type = Column(SAEnum(QuestionType, native_enum=False), nullable=False, default=QuestionType.FOLLOWUP)
    category = Column(String(100), nullable=False, default="General")
    expected_key_points = Column(JSON, nullable=False, default=list)
    max_score = Column(Integer, nullable=False, default=5)
    time_limit = Column(Integer, nullable=False, default=90)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    main_question = relationship("HRQuestion", back_populates="follow_up_questions")
    user_answer = relationship(
        "HRUserAnswer",
        back_populates="follow_up_question",
        uselist=False,
        cascade="all, delete-orphan",
    )


class HRUserAnswer(Base):
    __tablename__ = "hr_user_answers"
    __table_args__ = (
        CheckConstraint(
            "(hr_question_id IS NULL) <> (hr_follow_up_question_id IS NULL)",
            name="ck_answer_single_question",
        ),
    )

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    # exactly one of these is set
    hr_question_id = Column(
        String(36),
        ForeignKey("hr_questions.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    )
    hr_follow_up_question_id = Column(
        String(36),
        ForeignKey("hr_follow_up_questions.id", ondelete="CASCADE"),
        nullable=True,
        unique=True,
    )

    user_answer = Column(Text, nullable=False, default="")
    video_url = Column(Text, nullable=True)  # S3 key or external URL of the recording

    score = Column(Integer, nullable=True)
    evaluation_feedback = Column(Text, nullable=True)
    matched_key_points = Column(JSON, nullable=False, default=list)
    voice_tone = Column(Text, nullable=True)
    confidence = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    hr_question = relationship("HRQuestion", back_populates="user_answer")
    follow_up_question = relationship("HRFollowUpQuestion", back_populates="user_answer")
