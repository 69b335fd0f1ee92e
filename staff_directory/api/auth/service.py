"""
Authentication Service

Credential verification and the login / logout flows.
"""

import logging
from datetime import datetime
from typing import Callable, Optional, Tuple

from staff_directory.api.access.audit import AccessAction, AccessAuditLog
from staff_directory.api.access.permissions import AuthContext, Role, is_valid_role
from staff_directory.api.auth.passwords import (
    dummy_hash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from staff_directory.api.auth.sessions import SessionStore
from staff_directory.api.exceptions import InvalidCredentials
from staff_directory.api.repositories.base import (
    Identity,
    IdentityRepository,
    Session,
    utcnow,
)


logger = logging.getLogger(__name__)


class CredentialVerifier:
    """Checks a username/password pair against stored bcrypt hashes."""

    def __init__(self, identities: IdentityRepository):
        self.identities = identities

    async def authenticate(self, username: str, password: str) -> Optional[Identity]:
        """
        Authenticate an identity.

        Args:
            username: Exact, case-sensitive username
            password: Plain text password

        Returns:
            Identity if the pair verifies and the identity is active,
            None otherwise (unknown users are indistinguishable)
        """
        identity = await self.identities.get_by_username(username) if username else None

        if identity is None:
            verify_password(password, dummy_hash())
            return None

        verified = verify_password(password, identity.password_hash)
        if not verified or not identity.is_active:
            return None

        return identity


class AuthService:
    """Login / logout orchestration over the access core."""

    def __init__(
        self,
        identities: IdentityRepository,
        session_store: SessionStore,
        audit_log: AccessAuditLog,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.identities = identities
        self.session_store = session_store
        self.audit_log = audit_log
        self.verifier = CredentialVerifier(identities)
        self._clock = clock

    async def login(
        self,
        username: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Tuple[Identity, Session]:
        """
        Verify credentials and issue a session.

        Raises:
            InvalidCredentials: If the pair did not verify
        """
        identity = await self.verifier.authenticate(username, password)

        if identity is None:
            logger.info("Login failed for %r", username)
            await self.audit_log.record(
                AccessAction.LOGIN_FAILED,
                ip_address=ip_address,
                user_agent=user_agent,
                details={"username": username},
            )
            raise InvalidCredentials()

        now = self._clock()
        await self.identities.touch_last_login(identity.id, now)
        identity.last_login_at = now

        session = await self.session_store.issue(identity.id)

        await self.audit_log.record(
            AccessAction.LOGIN_SUCCESS,
            actor_id=identity.id,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        logger.info("User %s logged in", identity.username)

        return identity, session

    async def logout(self, context: AuthContext, token: str) -> bool:
        """
        Revoke the caller's session.

        Returns:
            True if the session still existed
        """
        revoked = await self.session_store.revoke(token)

        await self.audit_log.record(
            AccessAction.LOGOUT,
            actor_id=context.user_id,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
        )
        return revoked

    async def create_identity(
        self,
        username: str,
        password: str,
        role: str = Role.VIEWER.value,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        email: Optional[str] = None,
        is_active: bool = True,
        rounds: Optional[int] = None,
    ) -> Identity:
        """
        Create a new identity.

        Raises:
            ValueError: Unknown role, weak password, or username taken
        """
        if not is_valid_role(role):
            raise ValueError(f"Unknown role: {role}")

        problems = validate_password_strength(password)
        if problems:
            raise ValueError("; ".join(problems))

        identity = Identity(
            id=None,
            username=username,
            password_hash=hash_password(password, rounds),
            role=Role(role).value,
            first_name=first_name,
            last_name=last_name,
            email=email,
            is_active=is_active,
        )
        return await self.identities.add(identity)


async def ensure_bootstrap_admin(
    service: AuthService,
    username: Optional[str],
    password: Optional[str],
) -> Optional[Identity]:
    """Seed a super_admin identity if configured and not yet present."""
    if not username or not password:
        return None

    existing = await service.identities.get_by_username(username)
    if existing:
        return existing

    identity = await service.create_identity(
        username=username,
        password=password,
        role=Role.SUPER_ADMIN.value,
        first_name="System",
        last_name="Administrator",
    )
    logger.info("Created bootstrap administrator %s", username)
    return identity
