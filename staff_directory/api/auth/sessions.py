"""
Session Store

Issues, resolves and revokes opaque bearer tokens with an absolute expiry.
Sessions are never extended by use.
"""

import hashlib
import logging
import re
import secrets
from dataclasses import replace
from datetime import datetime, timedelta
from typing import Callable, Optional

from staff_directory.api.repositories.base import Session, SessionRepository, utcnow


logger = logging.getLogger(__name__)


TOKEN_BYTES = 32  # 256 bits
DEFAULT_SESSION_LIFETIME = timedelta(hours=24)

_TOKEN_PATTERN = re.compile(r"^[0-9a-f]{%d}$" % (TOKEN_BYTES * 2))


def generate_token() -> str:
    """Generate a new random session token."""
    return secrets.token_hex(TOKEN_BYTES)


def hash_token(token: str) -> str:
    """Digest under which a token is stored."""
    return hashlib.sha256(token.encode()).hexdigest()


def is_well_formed(token: Optional[str]) -> bool:
    """Check a token has the shape generate_token produces."""
    return isinstance(token, str) and _TOKEN_PATTERN.match(token) is not None


def _redact(token: str) -> str:
    return f"{token[:8]}..."


class SessionStore:
    """
    Bearer session lifecycle over a SessionRepository.

    Expired sessions are treated as absent: resolve deletes them and
    returns None. sweep_expired is housekeeping only.
    """

    def __init__(
        self,
        repository: SessionRepository,
        lifetime: timedelta = DEFAULT_SESSION_LIFETIME,
        clock: Callable[[], datetime] = utcnow,
    ):
        self.repository = repository
        self.lifetime = lifetime
        self._clock = clock

    async def issue(self, user_id: int) -> Session:
        """
        Create a session for an identity.

        Returns:
            Session carrying the raw token; it is not retrievable again
        """
        token = generate_token()
        now = self._clock()

        session = Session(
            token_hash=hash_token(token),
            user_id=user_id,
            expires_at=now + self.lifetime,
            created_at=now,
            token=token,
        )
        await self.repository.add(session)

        logger.info("Issued session %s for user %s", _redact(token), user_id)
        return session

    async def resolve(self, token: Optional[str]) -> Optional[Session]:
        """
        Look up a live session.

        Returns:
            Session if present and unexpired, None otherwise
        """
        if not is_well_formed(token):
            return None

        token_hash = hash_token(token)
        session = await self.repository.get(token_hash)
        if session is None:
            return None

        if session.is_expired(self._clock()):
            await self.repository.delete(token_hash)
            logger.info("Session %s expired at %s, removed", _redact(token), session.expires_at)
            return None

        return replace(session, token=token)

    async def revoke(self, token: Optional[str]) -> bool:
        """
        Delete a session.

        Returns:
            True if a session existed; revoking twice is not an error
        """
        if not is_well_formed(token):
            return False

        revoked = await self.repository.delete(hash_token(token))
        if revoked:
            logger.info("Revoked session %s", _redact(token))
        return revoked

    async def sweep_expired(self) -> int:
        """Remove every expired session. Returns how many were removed."""
        removed = await self.repository.delete_expired(self._clock())
        if removed:
            logger.info("Swept %d expired sessions", removed)
        return removed
