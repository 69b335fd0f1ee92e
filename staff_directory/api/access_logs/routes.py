"""
Access Log Routes

Read endpoints over the access audit log. Newest entries first.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, ConfigDict

from staff_directory.api.access.audit import AccessAuditLog
from staff_directory.api.access.permissions import AuthContext, Capability
from staff_directory.api.config import settings
from staff_directory.api.dependencies import get_audit_log, require_capabilities


router = APIRouter()


class AccessLogResponse(BaseModel):
    """Access log entry."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    action: str
    timestamp: datetime
    actor_id: Optional[int] = None
    subject_id: Optional[int] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


@router.get(
    "",
    response_model=List[AccessLogResponse],
    summary="List access log entries",
)
async def list_access_logs(
    staff_id: Optional[int] = Query(None, description="Entries about this staff record"),
    actor_id: Optional[int] = Query(None, description="Entries performed by this user"),
    limit: Optional[int] = Query(None, ge=1, le=settings.AUDIT_MAX_PAGE_SIZE),
    context: AuthContext = Depends(require_capabilities(Capability.VIEW_AUDIT_LOGS)),
    audit_log: AccessAuditLog = Depends(get_audit_log),
) -> List[AccessLogResponse]:
    """
    List access log entries.

    Filters by staff record, then by actor; with neither, returns the
    most recent page.
    """
    if staff_id is not None:
        entries = await audit_log.by_subject(staff_id, limit)
    elif actor_id is not None:
        entries = await audit_log.by_actor(actor_id, limit)
    else:
        entries = await audit_log.recent(limit)

    return [AccessLogResponse.model_validate(e) for e in entries]
