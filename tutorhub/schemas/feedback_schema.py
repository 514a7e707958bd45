import math
from pydantic import StringConstraints, field_validator
from typing import Annotated, Optional
from datetime import datetime
from tutorhub.database.database import FeedbackStatus
from tutorhub.schemas.base import ApiModel, sanitize_text
from tutorhub.schemas.user_schema import UserResponse

class FeedbackCreate(ApiModel):
    """Feedback sent by a student. Status and admin response are set by admins only."""
    subject: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
    message: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    rating: Optional[str] = None

    @field_validator('message')
    def sanitize_message(cls, v):
        return sanitize_text(v)

    @field_validator('rating', mode='before')
    def validate_rating(cls, v):
        if v is None or v == "":
            return None
        text = str(v).strip()
        try:
            value = float(text)
        except (TypeError, ValueError):
            raise ValueError('Rating must be a number')
        if math.isnan(value):
            raise ValueError('Rating must be a number')
        if value < 1 or value > 5:
            raise ValueError('Rating must be between 1 and 5')
        # The rating column holds at most 10 characters
        if len(text) > 10:
            raise ValueError('Rating must be at most 10 characters')
        return text

class FeedbackUpdate(ApiModel):
    """Admin review of a feedback entry"""
    status: Optional[FeedbackStatus] = None
    admin_response: Optional[str] = None

    @field_validator('admin_response')
    def sanitize_response(cls, v):
        return sanitize_text(v)

class FeedbackResponse(ApiModel):
    id: str
    student_id: str
    subject: str
    message: str
    rating: Optional[str] = None
    status: FeedbackStatus
    admin_response: Optional[str] = None
    created_at: datetime
    updated_at: datetime

class FeedbackWithRelations(FeedbackResponse):
    student: Optional[UserResponse] = None

class FeedbackStatsResponse(ApiModel):
    total: int
    pending: int
    reviewed: int
    resolved: int
