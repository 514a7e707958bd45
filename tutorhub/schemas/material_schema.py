from pydantic import StringConstraints, field_validator
from typing import Annotated, Optional
from datetime import datetime
from tutorhub.schemas.base import ApiModel, sanitize_text
from tutorhub.schemas.user_schema import UserResponse

Title = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]

class LearningMaterialCreate(ApiModel):
    """Material upload data. The uploader is the calling admin."""
    title: Title
    description: Optional[str] = None
    subject: Title
    file_url: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]
    file_type: Optional[Annotated[str, StringConstraints(max_length=100)]] = None

    @field_validator('description')
    def sanitize_description(cls, v):
        return sanitize_text(v)

class LearningMaterialResponse(ApiModel):
    id: str
    title: str
    description: Optional[str] = None
    subject: str
    file_url: str
    file_type: Optional[str] = None
    uploaded_by_id: str
    created_at: datetime

class LearningMaterialWithRelations(LearningMaterialResponse):
    uploaded_by: Optional[UserResponse] = None
