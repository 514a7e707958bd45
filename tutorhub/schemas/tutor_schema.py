from pydantic import EmailStr, StringConstraints, field_validator
from typing import Annotated, Optional
from datetime import datetime
from tutorhub.schemas.base import ApiModel, sanitize_text

Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]

class TutorBase(ApiModel):
    """Base tutor data"""
    name: Name
    email: EmailStr
    specialty: Name
    bio: Optional[str] = None
    profile_image_url: Optional[str] = None
    hourly_rate: Optional[Annotated[str, StringConstraints(max_length=50)]] = None
    availability: Annotated[str, StringConstraints(min_length=1)]

    @field_validator('bio')
    def sanitize_bio(cls, v):
        return sanitize_text(v)

    @field_validator('hourly_rate', mode='before')
    def rate_as_text(cls, v):
        if isinstance(v, (int, float)):
            return str(v)
        return v

class TutorCreate(TutorBase):
    """Tutor creation data"""
    pass # Same as TutorBase, no additional fields

class TutorUpdate(ApiModel):
    """Partial tutor update; only the submitted fields change"""
    name: Optional[Name] = None
    email: Optional[EmailStr] = None
    specialty: Optional[Name] = None
    bio: Optional[str] = None
    profile_image_url: Optional[str] = None
    hourly_rate: Optional[Annotated[str, StringConstraints(max_length=50)]] = None
    availability: Optional[Annotated[str, StringConstraints(min_length=1)]] = None

    @field_validator('bio')
    def sanitize_bio(cls, v):
        return sanitize_text(v)

    @field_validator('hourly_rate', mode='before')
    def rate_as_text(cls, v):
        if isinstance(v, (int, float)):
            return str(v)
        return v

class TutorResponse(ApiModel):
    """Tutor response data"""
    id: str
    name: str
    email: str
    specialty: str
    bio: Optional[str] = None
    profile_image_url: Optional[str] = None
    hourly_rate: Optional[str] = None
    availability: str
    created_at: datetime
    updated_at: datetime
