"""
Authentication Schemas

Pydantic models for auth request/response validation.
"""

from datetime import datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class UserLoginRequest(BaseModel):
    """User login request."""

    username: str = Field(..., min_length=1, max_length=255)
    password: str = Field(..., min_length=1)


class UserResponse(BaseModel):
    """Public identity view. Never includes the credential."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None


class LoginResponse(BaseModel):
    """Login response with the one-time session token."""

    message: str = "Login successful"
    user: UserResponse
    token: str
    token_type: str = "bearer"
    expires_at: datetime


class CurrentUserResponse(UserResponse):
    """Identity view for the authenticated caller."""

    session_expires_at: datetime


class PermissionsResponse(BaseModel):
    """Capability map for the caller's role."""

    role: str
    permissions: Dict[str, bool]


class MessageResponse(BaseModel):
    """Simple message response."""

    message: str
    success: bool = True
