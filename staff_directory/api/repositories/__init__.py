"""
Persistence layer for the access core.

Components:
- base.py: records and abstract async repositories
- memory.py: in-memory implementations
- sql.py: SQLAlchemy implementations (import explicitly)
"""

from staff_directory.api.repositories.base import (
    Identity,
    Session,
    AccessLogEntry,
    StaffRecord,
    IdentityRepository,
    SessionRepository,
    AccessLogRepository,
    StaffRepository,
    Repositories,
    utcnow,
)
from staff_directory.api.repositories.memory import (
    create_memory_repositories,
    get_memory_repositories,
)

__all__ = [
    "Identity",
    "Session",
    "AccessLogEntry",
    "StaffRecord",
    "IdentityRepository",
    "SessionRepository",
    "AccessLogRepository",
    "StaffRepository",
    "Repositories",
    "utcnow",
    "create_memory_repositories",
    "get_memory_repositories",
]
