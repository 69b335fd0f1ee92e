"""
FastAPI Dependencies

Wiring of the access core into request handling: repositories, services,
the Request Authenticator and the Permission Enforcer.
"""

from contextlib import asynccontextmanager
from datetime import datetime, timedelta
from typing import AsyncGenerator, AsyncIterator, Callable, Optional, Tuple

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from staff_directory.api.access.audit import AccessAuditLog
from staff_directory.api.access.permissions import AuthContext, Capability, PermissionEnforcer
from staff_directory.api.auth.authenticator import RequestAuthenticator
from staff_directory.api.auth.service import AuthService
from staff_directory.api.auth.sessions import SessionStore
from staff_directory.api.config import settings
from staff_directory.api.exceptions import Forbidden, Unauthenticated
from staff_directory.api.repositories.base import Repositories, utcnow
from staff_directory.api.repositories.memory import get_memory_repositories


# Missing header and non-Bearer schemes both come through as None
bearer_scheme = HTTPBearer(auto_error=False)

_enforcer = PermissionEnforcer()


def client_metadata(request: Request) -> Tuple[Optional[str], Optional[str]]:
    """Client IP address and user agent for access logs."""
    ip_address = request.client.host if request.client else None
    return ip_address, request.headers.get("user-agent")


def get_clock() -> Callable[[], datetime]:
    """Time source for session expiry and log timestamps."""
    return utcnow


@asynccontextmanager
async def open_repositories() -> AsyncIterator[Repositories]:
    """Repositories for the configured storage backend."""
    if settings.STORAGE_BACKEND == "memory":
        yield get_memory_repositories()
        return

    from staff_directory.api.db.session import get_session_maker
    from staff_directory.api.repositories.sql import create_sql_repositories

    session_maker = get_session_maker()
    async with session_maker() as db:
        yield create_sql_repositories(db, session_maker)


async def get_repositories() -> AsyncGenerator[Repositories, None]:
    """Dependency to get request-scoped repositories."""
    async with open_repositories() as repos:
        yield repos


def get_session_store(
    repos: Repositories = Depends(get_repositories),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> SessionStore:
    """Dependency to get the session store."""
    return SessionStore(
        repos.sessions,
        lifetime=timedelta(hours=settings.SESSION_LIFETIME_HOURS),
        clock=clock,
    )


def get_audit_log(
    repos: Repositories = Depends(get_repositories),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> AccessAuditLog:
    """Dependency to get the access audit log."""
    return AccessAuditLog(
        repos.access_logs,
        default_page_size=settings.AUDIT_DEFAULT_PAGE_SIZE,
        clock=clock,
    )


def get_authenticator(
    repos: Repositories = Depends(get_repositories),
    session_store: SessionStore = Depends(get_session_store),
) -> RequestAuthenticator:
    """Dependency to get the request authenticator."""
    return RequestAuthenticator(session_store, repos.identities)


def get_auth_service(
    repos: Repositories = Depends(get_repositories),
    session_store: SessionStore = Depends(get_session_store),
    audit_log: AccessAuditLog = Depends(get_audit_log),
    clock: Callable[[], datetime] = Depends(get_clock),
) -> AuthService:
    """Dependency to get auth service."""
    return AuthService(repos.identities, session_store, audit_log, clock=clock)


async def get_auth_context(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    authenticator: RequestAuthenticator = Depends(get_authenticator),
) -> AuthContext:
    """
    Get the authenticated caller from the bearer token.

    Raises:
        HTTPException: 401 for any unusable token, with one generic message
    """
    token = credentials.credentials if credentials else None
    ip_address, user_agent = client_metadata(request)

    try:
        return await authenticator.authenticate(
            token, ip_address=ip_address, user_agent=user_agent
        )
    except Unauthenticated:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )


def require_capabilities(*capabilities: Capability):
    """
    Dependency factory requiring every listed capability.

    Usage:
        @router.delete("/{staff_id}")
        async def delete_staff(
            context: AuthContext = Depends(require_capabilities(Capability.DELETE_STAFF)),
        ):
            ...
    """
    async def dependency(
        context: AuthContext = Depends(get_auth_context),
    ) -> AuthContext:
        try:
            return _enforcer.enforce(context, *capabilities)
        except Forbidden as e:
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail=f"Permission denied: {e.capability}",
            )

    return dependency
