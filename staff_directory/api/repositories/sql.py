"""
SQLAlchemy Repositories

Async SQLAlchemy implementations of the repository interfaces.

Identity, session and staff repositories share the request's AsyncSession
and commit their own writes. The access log repository opens a short-lived
session per call so a failed audit write never poisons the request's
transaction.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import delete, desc, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from staff_directory.api.db.models import AccessLog, Department, Staff, User, UserSession
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
)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Some drivers (sqlite) hand back naive datetimes; they are stored as UTC."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _to_identity(user: User) -> Identity:
    return Identity(
        id=user.id,
        username=user.username,
        password_hash=user.password_hash,
        role=user.role,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        is_active=bool(user.is_active),
        last_login_at=_as_utc(user.last_login_at),
        created_at=_as_utc(user.created_at),
    )


def _to_session(row: UserSession) -> Session:
    return Session(
        token_hash=row.token_hash,
        user_id=row.user_id,
        expires_at=_as_utc(row.expires_at),
        created_at=_as_utc(row.created_at),
    )


def _to_entry(row: AccessLog) -> AccessLogEntry:
    return AccessLogEntry(
        id=row.id,
        action=row.action,
        timestamp=_as_utc(row.timestamp),
        actor_id=row.user_id,
        subject_id=row.staff_id,
        ip_address=row.ip_address,
        user_agent=row.user_agent,
        details=row.details,
    )


def _to_staff(row: Staff) -> StaffRecord:
    return StaffRecord(
        id=row.id,
        registration_number=row.registration_number,
        first_name=row.first_name,
        last_name=row.last_name,
        department=row.department,
        position=row.position,
        status=row.status,
        email=row.email,
        phone=row.phone,
        pin_hash=row.pin_hash,
        created_at=_as_utc(row.created_at),
        updated_at=_as_utc(row.updated_at),
    )


def _to_department(row: Department) -> DepartmentRecord:
    return DepartmentRecord(
        id=row.id,
        name=row.name,
        description=row.description,
        icon=row.icon,
        color=row.color,
        created_at=_as_utc(row.created_at),
    )


class SqlIdentityRepository(IdentityRepository):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_id(self, user_id: int) -> Optional[Identity]:
        user = await self.db.get(User, user_id)
        return _to_identity(user) if user else None

    async def get_by_username(self, username: str) -> Optional[Identity]:
        result = await self.db.execute(
            select(User).where(User.username == username)
        )
        user = result.scalar_one_or_none()
        return _to_identity(user) if user else None

    async def add(self, identity: Identity) -> Identity:
        user = User(
            username=identity.username,
            password_hash=identity.password_hash,
            role=identity.role,
            first_name=identity.first_name,
            last_name=identity.last_name,
            email=identity.email,
            is_active=identity.is_active,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ValueError("Username already registered") from e
        await self.db.refresh(user)
        return _to_identity(user)

    async def touch_last_login(self, user_id: int, when: datetime) -> None:
        await self.db.execute(
            update(User).where(User.id == user_id).values(last_login_at=when)
        )
        await self.db.commit()

    async def set_active(self, user_id: int, active: bool) -> bool:
        result = await self.db.execute(
            update(User).where(User.id == user_id).values(is_active=active)
        )
        await self.db.commit()
        return result.rowcount > 0


class SqlSessionRepository(SessionRepository):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def add(self, session: Session) -> None:
        self.db.add(
            UserSession(
                user_id=session.user_id,
                token_hash=session.token_hash,
                expires_at=session.expires_at,
                created_at=session.created_at,
            )
        )
        await self.db.commit()

    async def get(self, token_hash: str) -> Optional[Session]:
        result = await self.db.execute(
            select(UserSession).where(UserSession.token_hash == token_hash)
        )
        row = result.scalar_one_or_none()
        return _to_session(row) if row else None

    async def delete(self, token_hash: str) -> bool:
        result = await self.db.execute(
            delete(UserSession).where(UserSession.token_hash == token_hash)
        )
        await self.db.commit()
        return result.rowcount > 0

    async def delete_expired(self, now: datetime) -> int:
        result = await self.db.execute(
            delete(UserSession).where(UserSession.expires_at <= now)
        )
        await self.db.commit()
        return result.rowcount or 0


class SqlAccessLogRepository(AccessLogRepository):
    def __init__(self, session_maker: async_sessionmaker):
        self._session_maker = session_maker

    async def append(self, entry: AccessLogEntry) -> AccessLogEntry:
        row = AccessLog(
            user_id=entry.actor_id,
            staff_id=entry.subject_id,
            action=entry.action,
            timestamp=entry.timestamp,
            ip_address=entry.ip_address,
            user_agent=entry.user_agent,
            details=entry.details,
        )
        async with self._session_maker() as db:
            db.add(row)
            await db.commit()
            await db.refresh(row)
            return _to_entry(row)

    async def _query(self, where=None, limit: Optional[int] = None) -> List[AccessLogEntry]:
        query = select(AccessLog).order_by(desc(AccessLog.timestamp), desc(AccessLog.id))
        if where is not None:
            query = query.where(where)
        if limit is not None:
            query = query.limit(limit)

        async with self._session_maker() as db:
            result = await db.execute(query)
            return [_to_entry(row) for row in result.scalars().all()]

    async def by_actor(self, actor_id: int, limit: Optional[int] = None) -> List[AccessLogEntry]:
        return await self._query(AccessLog.user_id == actor_id, limit)

    async def by_subject(self, subject_id: int, limit: Optional[int] = None) -> List[AccessLogEntry]:
        return await self._query(AccessLog.staff_id == subject_id, limit)

    async def recent(self, limit: int) -> List[AccessLogEntry]:
        return await self._query(limit=limit)


class SqlStaffRepository(StaffRepository):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get(self, staff_id: int) -> Optional[StaffRecord]:
        row = await self.db.get(Staff, staff_id)
        return _to_staff(row) if row else None

    async def get_by_registration_number(self, registration_number: str) -> Optional[StaffRecord]:
        result = await self.db.execute(
            select(Staff).where(Staff.registration_number == registration_number)
        )
        row = result.scalar_one_or_none()
        return _to_staff(row) if row else None

    async def list_all(self) -> List[StaffRecord]:
        result = await self.db.execute(
            select(Staff).order_by(desc(Staff.created_at), desc(Staff.id))
        )
        return [_to_staff(row) for row in result.scalars().all()]

    async def add(self, record: StaffRecord) -> StaffRecord:
        row = Staff(
            registration_number=record.registration_number,
            first_name=record.first_name,
            last_name=record.last_name,
            department=record.department,
            position=record.position,
            status=record.status,
            email=record.email,
            phone=record.phone,
            pin_hash=record.pin_hash,
        )
        self.db.add(row)
        await self.db.commit()
        await self.db.refresh(row)
        return _to_staff(row)

    async def update(self, staff_id: int, changes: Dict[str, Any]) -> Optional[StaffRecord]:
        row = await self.db.get(Staff, staff_id)
        if row is None:
            return None

        for key, value in changes.items():
            setattr(row, key, value)

        await self.db.commit()
        await self.db.refresh(row)
        return _to_staff(row)

    async def delete(self, staff_id: int) -> bool:
        result = await self.db.execute(
            delete(Staff).where(Staff.id == staff_id)
        )
        await self.db.commit()
        return result.rowcount > 0


class SqlDepartmentRepository(DepartmentRepository):
    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_all(self) -> List[DepartmentRecord]:
        result = await self.db.execute(select(Department).order_by(Department.name))
        return [_to_department(row) for row in result.scalars().all()]

    async def get_by_name(self, name: str) -> Optional[DepartmentRecord]:
        result = await self.db.execute(
            select(Department).where(Department.name == name)
        )
        row = result.scalar_one_or_none()
        return _to_department(row) if row else None

    async def add(self, record: DepartmentRecord) -> DepartmentRecord:
        row = Department(
            name=record.name,
            description=record.description,
            icon=record.icon,
            color=record.color,
        )
        self.db.add(row)
        try:
            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            raise ValueError("Department already exists") from e
        await self.db.refresh(row)
        return _to_department(row)


def create_sql_repositories(db: AsyncSession, session_maker: async_sessionmaker) -> Repositories:
    """Build repositories bound to a request session."""
    return Repositories(
        identities=SqlIdentityRepository(db),
        sessions=SqlSessionRepository(db),
        access_logs=SqlAccessLogRepository(session_maker),
        staff=SqlStaffRepository(db),
        departments=SqlDepartmentRepository(db),
    )
