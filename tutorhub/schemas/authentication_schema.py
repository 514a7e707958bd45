from typing import Optional
from pydantic import BaseModel
from tutorhub.schemas.base import ApiModel
from tutorhub.schemas.user_schema import UserResponse

class LoginRequest(BaseModel):
    """Email/password login body. Both fields are checked by the route so a missing one gets a clear message."""
    email: Optional[str] = None
    password: Optional[str] = None

class LoggedInResponse(ApiModel):
    """Authentication response data"""
    success: bool
    user: UserResponse

class LoggedOutResponse(ApiModel):
    """Logout response data"""
    success: bool

class MessageResponse(ApiModel):
    """Plain confirmation, also the shape of every error body"""
    message: str
