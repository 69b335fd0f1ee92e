"""
In-Memory Repositories

Process-local implementations of the repository interfaces. Used by the
test suite and by STORAGE_BACKEND="memory" for local runs. None of the
methods await, so each call is atomic with respect to the event loop.
"""

import itertools
from dataclasses import replace
from datetime import datetime
from typing import Any, Dict, List, Optional

from staff_directory.api.repositories.base import (
    AccessLogEntry,
    AccessLogRepository,
    DepartmentRecord,
    DepartmentRepository,
    Identity,
    IdentityRepository,
    Repositories,
    Session,
    SessionRepository,
    StaffRecord,
    StaffRepository,
    utcnow,
)


class InMemoryIdentityRepository(IdentityRepository):
    def __init__(self):
        self._identities: Dict[int, Identity] = {}
        self._ids = itertools.count(1)

    async def get_by_id(self, user_id: int) -> Optional[Identity]:
        identity = self._identities.get(user_id)
        return replace(identity) if identity else None

    async def get_by_username(self, username: str) -> Optional[Identity]:
        for identity in self._identities.values():
            if identity.username == username:
                return replace(identity)
        return None

    async def add(self, identity: Identity) -> Identity:
        if any(i.username == identity.username for i in self._identities.values()):
            raise ValueError("Username already registered")

        stored = replace(
            identity,
            id=next(self._ids),
            created_at=identity.created_at or utcnow(),
        )
        self._identities[stored.id] = stored
        return replace(stored)

    async def touch_last_login(self, user_id: int, when: datetime) -> None:
        identity = self._identities.get(user_id)
        if identity:
            identity.last_login_at = when

    async def set_active(self, user_id: int, active: bool) -> bool:
        identity = self._identities.get(user_id)
        if identity is None:
            return False
        identity.is_active = active
        return True

    async def remove(self, user_id: int) -> None:
        """Hard delete, only used to simulate orphaned sessions."""
        self._identities.pop(user_id, None)


class InMemorySessionRepository(SessionRepository):
    def __init__(self):
        self._sessions: Dict[str, Session] = {}

    async def add(self, session: Session) -> None:
        # Never keep the raw token around
        self._sessions[session.token_hash] = replace(session, token=None)

    async def get(self, token_hash: str) -> Optional[Session]:
        return self._sessions.get(token_hash)

    async def delete(self, token_hash: str) -> bool:
        return self._sessions.pop(token_hash, None) is not None

    async def delete_expired(self, now: datetime) -> int:
        expired = [h for h, s in self._sessions.items() if s.is_expired(now)]
        for token_hash in expired:
            del self._sessions[token_hash]
        return len(expired)

    def __len__(self) -> int:
        return len(self._sessions)


class InMemoryAccessLogRepository(AccessLogRepository):
    def __init__(self):
        self._entries: List[AccessLogEntry] = []
        self._ids = itertools.count(1)

    async def append(self, entry: AccessLogEntry) -> AccessLogEntry:
        stored = replace(entry, id=next(self._ids))
        self._entries.append(stored)
        return stored

    def _newest_first(self, entries: List[AccessLogEntry], limit: Optional[int]) -> List[AccessLogEntry]:
        ordered = sorted(entries, key=lambda e: (e.timestamp, e.id), reverse=True)
        return ordered[:limit] if limit is not None else ordered

    async def by_actor(self, actor_id: int, limit: Optional[int] = None) -> List[AccessLogEntry]:
        return self._newest_first([e for e in self._entries if e.actor_id == actor_id], limit)

    async def by_subject(self, subject_id: int, limit: Optional[int] = None) -> List[AccessLogEntry]:
        return self._newest_first([e for e in self._entries if e.subject_id == subject_id], limit)

    async def recent(self, limit: int) -> List[AccessLogEntry]:
        return self._newest_first(self._entries, limit)

    def __len__(self) -> int:
        return len(self._entries)


class InMemoryStaffRepository(StaffRepository):
    def __init__(self):
        self._records: Dict[int, StaffRecord] = {}
        self._ids = itertools.count(1)

    async def get(self, staff_id: int) -> Optional[StaffRecord]:
        record = self._records.get(staff_id)
        return replace(record) if record else None

    async def get_by_registration_number(self, registration_number: str) -> Optional[StaffRecord]:
        for record in self._records.values():
            if record.registration_number == registration_number:
                return replace(record)
        return None

    async def list_all(self) -> List[StaffRecord]:
        return [replace(r) for r in sorted(self._records.values(), key=lambda r: r.id, reverse=True)]

    async def add(self, record: StaffRecord) -> StaffRecord:
        now = utcnow()
        stored = replace(record, id=next(self._ids), created_at=now, updated_at=now)
        self._records[stored.id] = stored
        return replace(stored)

    async def update(self, staff_id: int, changes: Dict[str, Any]) -> Optional[StaffRecord]:
        record = self._records.get(staff_id)
        if record is None:
            return None
        updated = replace(record, **{**changes, "updated_at": utcnow()})
        self._records[staff_id] = updated
        return replace(updated)

    async def delete(self, staff_id: int) -> bool:
        return self._records.pop(staff_id, None) is not None


class InMemoryDepartmentRepository(DepartmentRepository):
    def __init__(self):
        self._departments: Dict[int, DepartmentRecord] = {}
        self._ids = itertools.count(1)

    async def list_all(self) -> List[DepartmentRecord]:
        return [replace(d) for d in sorted(self._departments.values(), key=lambda d: d.name)]

    async def get_by_name(self, name: str) -> Optional[DepartmentRecord]:
        for department in self._departments.values():
            if department.name == name:
                return replace(department)
        return None

    async def add(self, record: DepartmentRecord) -> DepartmentRecord:
        if any(d.name == record.name for d in self._departments.values()):
            raise ValueError("Department already exists")

        stored = replace(record, id=next(self._ids), created_at=record.created_at or utcnow())
        self._departments[stored.id] = stored
        return replace(stored)


def create_memory_repositories() -> Repositories:
    """Create a fresh, empty set of in-memory repositories."""
    return Repositories(
        identities=InMemoryIdentityRepository(),
        sessions=InMemorySessionRepository(),
        access_logs=InMemoryAccessLogRepository(),
        staff=InMemoryStaffRepository(),
        departments=InMemoryDepartmentRepository(),
    )


_memory_repositories: Optional[Repositories] = None


def get_memory_repositories() -> Repositories:
    """Get the process-wide in-memory repositories."""
    global _memory_repositories
    if _memory_repositories is None:
        _memory_repositories = create_memory_repositories()
    return _memory_repositories
