"""
Staff Schemas

Pydantic models for staff record operations.
"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


StaffStatus = Literal["active", "inactive", "released", "retired"]


class StaffCreateRequest(BaseModel):
    """Staff creation request."""

    registration_number: str = Field(..., min_length=1, max_length=50)
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    department: str = Field(..., min_length=1, max_length=100)
    position: str = Field(..., min_length=1, max_length=100)
    status: StaffStatus = "active"
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)
    pin: Optional[str] = Field(None, pattern=r"^\d{4,8}$")


class StaffUpdateRequest(BaseModel):
    """Staff update request. Only provided fields are changed."""

    first_name: Optional[str] = Field(None, min_length=1, max_length=100)
    last_name: Optional[str] = Field(None, min_length=1, max_length=100)
    department: Optional[str] = Field(None, min_length=1, max_length=100)
    position: Optional[str] = Field(None, min_length=1, max_length=100)
    status: Optional[StaffStatus] = None
    email: Optional[str] = Field(None, max_length=255)
    phone: Optional[str] = Field(None, max_length=50)


class PinResetRequest(BaseModel):
    """New PIN for a staff record."""

    new_pin: str = Field(..., pattern=r"^\d{4,8}$")


class PinVerifyRequest(BaseModel):
    """PIN presented to unlock a staff profile."""

    pin: str = Field(..., min_length=1, max_length=8)


class StaffSummaryResponse(BaseModel):
    """Staff record without contact details."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    registration_number: str
    first_name: str
    last_name: str
    department: str
    position: str
    status: str


class StaffResponse(StaffSummaryResponse):
    """Full staff record. The PIN hash is never exposed."""

    email: Optional[str] = None
    phone: Optional[str] = None
    has_pin: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
