from pydantic import field_validator
from typing import Optional
from tutorhub.database.database import UserRole
from tutorhub.schemas.base import ApiModel
from datetime import datetime

############################
### USER ACCOUNT SCHEMAS ###
############################

class UserResponse(ApiModel):
    """User response data. The password hash is never part of it."""
    id: str
    email: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    profile_image_url: Optional[str] = None
    role: UserRole
    created_at: datetime
    updated_at: datetime

class RoleUpdate(ApiModel):
    """Role change requested by an admin"""
    role: str

    @field_validator('role')
    def validate_role(cls, v):
        if v not in [role.value for role in UserRole]:
            raise ValueError("Invalid role. Must be 'student' or 'admin'")
        return v
