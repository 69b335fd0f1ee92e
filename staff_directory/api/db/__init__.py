"""Database module."""

from staff_directory.api.db.session import get_session_maker, init_db, close_db
from staff_directory.api.db.models import Base, User, UserSession, AccessLog, Staff

__all__ = [
    "get_session_maker",
    "init_db",
    "close_db",
    "Base",
    "User",
    "UserSession",
    "AccessLog",
    "Staff",
]
