from pydantic import StringConstraints, field_validator
from typing import Annotated, Optional
from datetime import datetime
from tutorhub.schemas.base import ApiModel, sanitize_text
from tutorhub.schemas.tutor_schema import TutorResponse
from tutorhub.schemas.user_schema import UserResponse

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]

class LectureVideoCreate(ApiModel):
    """Lecture video data. The tutor reference is optional, the uploader is the calling admin."""
    title: Title
    description: Optional[str] = None
    subject: Title
    video_url: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    thumbnail_url: Optional[str] = None
    duration: Optional[Annotated[str, StringConstraints(max_length=50)]] = None
    tutor_id: Optional[str] = None

    @field_validator('description')
    def sanitize_description(cls, v):
        return sanitize_text(v)

    @field_validator('tutor_id')
    def empty_tutor_is_none(cls, v):
        return v or None

class LectureVideoResponse(ApiModel):
    id: str
    title: str
    description: Optional[str] = None
    subject: str
    video_url: str
    thumbnail_url: Optional[str] = None
    duration: Optional[str] = None
    tutor_id: Optional[str] = None
    uploaded_by_id: str
    created_at: datetime

class LectureVideoWithRelations(LectureVideoResponse):
    tutor: Optional[TutorResponse] = None
    uploaded_by: Optional[UserResponse] = None
