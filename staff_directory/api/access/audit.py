"""
Staff Directory - Access Audit Log

Append-only trail of authentication and permission-gated events.
Writes never fail the operation they describe.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from datetime import datetime

from staff_directory.api.exceptions import AuditWriteFailure
from staff_directory.api.repositories.base import (
    AccessLogEntry,
    AccessLogRepository,
    utcnow,
)


logger = logging.getLogger(__name__)


DEFAULT_PAGE_SIZE = 10


# ============================================================
# Action Vocabulary
# ============================================================


class AccessAction(str, Enum):
    """Closed set of access log action tags."""

    # Authentication
    LOGIN_SUCCESS = "LOGIN_SUCCESS"
    LOGIN_FAILED = "LOGIN_FAILED"
    LOGOUT = "LOGOUT"

    # Staff Records
    STAFF_CREATED = "STAFF_CREATED"
    STAFF_UPDATED = "STAFF_UPDATED"
    STAFF_DELETED = "STAFF_DELETED"

    # PIN
    PIN_VERIFICATION_SUCCESS = "PIN_VERIFICATION_SUCCESS"
    PIN_VERIFICATION_FAILED = "PIN_VERIFICATION_FAILED"
    PIN_RESET = "PIN_RESET"

    # Departments
    DEPARTMENT_CREATED = "DEPARTMENT_CREATED"


# ============================================================
# Detail Sanitizing
# ============================================================


_SENSITIVE_FIELDS = {
    "password", "password_hash", "secret", "token", "pin", "pin_hash",
    "new_pin", "authorization",
}


def _sanitize_for_audit(data: Any) -> Any:
    """Remove sensitive fields from data before logging."""
    if isinstance(data, dict):
        return {
            k: "[REDACTED]" if str(k).lower() in _SENSITIVE_FIELDS else _sanitize_for_audit(v)
            for k, v in data.items()
        }
    elif isinstance(data, (list, tuple)):
        return [_sanitize_for_audit(item) for item in data]
    elif isinstance(data, datetime):
        return data.isoformat()
    else:
        return data


# ============================================================
# Audit Log
# ============================================================


class AccessAuditLog:
    """
    Central access audit service.

    ``record`` swallows and reports storage failures; reads are always
    newest-first.
    """

    def __init__(
        self,
        repository: AccessLogRepository,
        default_page_size: int = DEFAULT_PAGE_SIZE,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repository = repository
        self.default_page_size = default_page_size
        self._clock = clock
        self.failure_count = 0

    async def record(
        self,
        action: AccessAction,
        actor_id: Optional[int] = None,
        subject_id: Optional[int] = None,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> Optional[AccessLogEntry]:
        """
        Append an entry.

        Returns:
            The stored entry, or None if the write failed
        """
        try:
            entry = AccessLogEntry(
                action=AccessAction(action).value,
                timestamp=self._clock(),
                actor_id=actor_id,
                subject_id=subject_id,
                ip_address=ip_address,
                user_agent=user_agent,
                details=_sanitize_for_audit(details) if details else None,
            )
            stored = await self.repository.append(entry)
        except Exception as e:
            self.failure_count += 1
            failure = AuditWriteFailure(
                f"Failed to record {getattr(action, 'value', action)}: {e}",
                action=getattr(action, "value", str(action)),
                details={"actor_id": actor_id, "subject_id": subject_id},
            )
            logger.exception("%s", failure)
            return None

        logger.info("AUDIT", extra={"audit_event": stored.to_dict()})
        return stored

    async def by_actor(self, actor_id: int, limit: Optional[int] = None) -> List[AccessLogEntry]:
        """Entries performed by an identity."""
        return await self.repository.by_actor(actor_id, limit)

    async def by_subject(self, subject_id: int, limit: Optional[int] = None) -> List[AccessLogEntry]:
        """Entries about a staff record."""
        return await self.repository.by_subject(subject_id, limit)

    async def recent(self, limit: Optional[int] = None) -> List[AccessLogEntry]:
        """Most recent entries, bounded by the default page size."""
        return await self.repository.recent(self.default_page_size if limit is None else limit)
