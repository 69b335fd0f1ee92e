"""
Repository Interfaces

Storage-agnostic records and async repository contracts used by the
access core. Implementations live in memory.py and sql.py.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional


def utcnow() -> datetime:
    """Get current UTC time."""
    return datetime.now(timezone.utc)


# ============================================================
# Records
# ============================================================


@dataclass
class Identity:
    """An authenticable principal."""

    id: Optional[int]
    username: str
    password_hash: str = field(repr=False)
    role: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    is_active: bool = True
    last_login_at: Optional[datetime] = None
    created_at: Optional[datetime] = None


@dataclass(frozen=True)
class Session:
    """
    A bearer session owned by one identity.

    Only the SHA-256 digest of the token is persisted. ``token`` carries
    the raw value back to the caller that issued or presented it.
    """

    token_hash: str
    user_id: int
    expires_at: datetime
    created_at: datetime
    token: Optional[str] = field(default=None, repr=False, compare=False)

    def is_expired(self, now: datetime) -> bool:
        """Valid only while the expiry is strictly in the future."""
        return now >= self.expires_at


@dataclass(frozen=True)
class AccessLogEntry:
    """Immutable access log entry."""

    action: str
    timestamp: datetime
    actor_id: Optional[int] = None
    subject_id: Optional[int] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    id: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            "id": self.id,
            "action": self.action,
            "timestamp": self.timestamp.isoformat(),
            "actor_id": self.actor_id,
            "subject_id": self.subject_id,
            "ip_address": self.ip_address,
            "user_agent": self.user_agent,
            "details": self.details,
        }


@dataclass
class StaffRecord:
    """Staff record, as much of it as the access core needs."""

    id: Optional[int]
    registration_number: str
    first_name: str
    last_name: str
    department: str
    position: str
    status: str = "active"
    email: Optional[str] = None
    phone: Optional[str] = None
    pin_hash: Optional[str] = field(default=None, repr=False)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def has_pin(self) -> bool:
        return self.pin_hash is not None


@dataclass
class DepartmentRecord:
    """Named grouping of staff records."""

    id: Optional[int]
    name: str
    description: Optional[str] = None
    icon: str = "users"
    color: str = "gray"
    created_at: Optional[datetime] = None


# ============================================================
# Repositories
# ============================================================


class IdentityRepository(ABC):
    """Identity persistence."""

    @abstractmethod
    async def get_by_id(self, user_id: int) -> Optional[Identity]:
        ...

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[Identity]:
        """Exact, case-sensitive username match."""

    @abstractmethod
    async def add(self, identity: Identity) -> Identity:
        """
        Persist a new identity and return it with its id assigned.

        Raises:
            ValueError: If the username is already taken
        """

    @abstractmethod
    async def touch_last_login(self, user_id: int, when: datetime) -> None:
        ...

    @abstractmethod
    async def set_active(self, user_id: int, active: bool) -> bool:
        """Returns False if no such identity exists."""


class SessionRepository(ABC):
    """Session persistence, keyed by token digest."""

    @abstractmethod
    async def add(self, session: Session) -> None:
        ...

    @abstractmethod
    async def get(self, token_hash: str) -> Optional[Session]:
        ...

    @abstractmethod
    async def delete(self, token_hash: str) -> bool:
        """Delete a session; returns whether a row existed."""

    @abstractmethod
    async def delete_expired(self, now: datetime) -> int:
        """Delete every session whose expiry is not after ``now``."""


class AccessLogRepository(ABC):
    """Append-only access log persistence. All reads are newest-first."""

    @abstractmethod
    async def append(self, entry: AccessLogEntry) -> AccessLogEntry:
        ...

    @abstractmethod
    async def by_actor(self, actor_id: int, limit: Optional[int] = None) -> List[AccessLogEntry]:
        ...

    @abstractmethod
    async def by_subject(self, subject_id: int, limit: Optional[int] = None) -> List[AccessLogEntry]:
        ...

    @abstractmethod
    async def recent(self, limit: int) -> List[AccessLogEntry]:
        ...


class StaffRepository(ABC):
    """Staff record persistence."""

    @abstractmethod
    async def get(self, staff_id: int) -> Optional[StaffRecord]:
        ...

    @abstractmethod
    async def get_by_registration_number(self, registration_number: str) -> Optional[StaffRecord]:
        ...

    @abstractmethod
    async def list_all(self) -> List[StaffRecord]:
        """Newest records first."""

    @abstractmethod
    async def add(self, record: StaffRecord) -> StaffRecord:
        ...

    @abstractmethod
    async def update(self, staff_id: int, changes: Dict[str, Any]) -> Optional[StaffRecord]:
        ...

    @abstractmethod
    async def delete(self, staff_id: int) -> bool:
        ...


class DepartmentRepository(ABC):
    """Department storage."""

    @abstractmethod
    async def list_all(self) -> List[DepartmentRecord]:
        ...

    @abstractmethod
    async def get_by_name(self, name: str) -> Optional[DepartmentRecord]:
        ...

    @abstractmethod
    async def add(self, record: DepartmentRecord) -> DepartmentRecord:
        """Raises ValueError if the name is taken."""
        ...


@dataclass
class Repositories:
    """Bundle of repositories handed to request-scoped services."""

    identities: IdentityRepository
    sessions: SessionRepository
    access_logs: AccessLogRepository
    staff: StaffRepository
    departments: DepartmentRepository
