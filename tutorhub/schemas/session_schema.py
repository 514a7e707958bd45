from pydantic import StringConstraints, field_validator
from typing import Annotated, Optional
from datetime import datetime
from tutorhub.database.database import SessionStatus
from tutorhub.schemas.base import ApiModel, sanitize_text, to_naive_utc
from tutorhub.schemas.tutor_schema import TutorResponse
from tutorhub.schemas.user_schema import UserResponse

Label = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=50)]
Subject = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]

class TutoringSessionCreate(ApiModel):
    """Booking data. A tutoring session is a scheduled meeting between a student and a tutor.
    The student is always the caller, so it is not part of the body."""
    tutor_id: str
    subject: Subject
    scheduled_date: datetime
    duration: Label
    status: SessionStatus = SessionStatus.SCHEDULED
    notes: Optional[str] = None

    @field_validator('scheduled_date')
    def normalize_date(cls, v):
        return to_naive_utc(v)

    @field_validator('notes')
    def sanitize_notes(cls, v):
        return sanitize_text(v)

class TutoringSessionUpdate(ApiModel):
    """Partial session update. Students only get to send status and notes."""
    student_id: Optional[str] = None
    tutor_id: Optional[str] = None
    subject: Optional[Subject] = None
    scheduled_date: Optional[datetime] = None
    duration: Optional[Label] = None
    status: Optional[SessionStatus] = None
    notes: Optional[str] = None

    @field_validator('scheduled_date')
    def normalize_date(cls, v):
        return to_naive_utc(v)

    @field_validator('notes')
    def sanitize_notes(cls, v):
        return sanitize_text(v)

class TutoringSessionResponse(ApiModel):
    """Tutoring session response data"""
    id: str
    student_id: str
    tutor_id: str
    subject: str
    scheduled_date: datetime
    duration: str
    status: SessionStatus
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class TutoringSessionWithRelations(TutoringSessionResponse):
    """Session with its tutor and student attached; either is null when the row is gone"""
    tutor: Optional[TutorResponse] = None
    student: Optional[UserResponse] = None

class SessionStatsResponse(ApiModel):
    total_sessions: int
    completed_sessions: int
    upcoming_sessions: int
