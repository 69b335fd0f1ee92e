"""
Department Schemas

Pydantic models for department operations.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class DepartmentCreateRequest(BaseModel):
    """Department creation request."""

    name: str = Field(..., min_length=1, max_length=100)
    description: Optional[str] = None
    icon: str = Field("users", min_length=1, max_length=50)
    color: str = Field("gray", min_length=1, max_length=50)


class DepartmentResponse(BaseModel):
    """Department with its current headcount."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    description: Optional[str] = None
    icon: str
    color: str
    staff_count: int = 0
    created_at: Optional[datetime] = None
