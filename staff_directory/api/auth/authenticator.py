"""
Request Authenticator

First request gate: bearer token -> live session -> active identity.
Every rejection is the same Unauthenticated error.
"""

import logging
from typing import Optional

from staff_directory.api.access.permissions import AuthContext
from staff_directory.api.auth.sessions import SessionStore
from staff_directory.api.exceptions import Unauthenticated
from staff_directory.api.repositories.base import IdentityRepository


logger = logging.getLogger(__name__)


class RequestAuthenticator:
    """Resolves a presented token to an AuthContext."""

    def __init__(self, session_store: SessionStore, identities: IdentityRepository):
        self.session_store = session_store
        self.identities = identities

    async def authenticate(
        self,
        token: Optional[str],
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> AuthContext:
        """
        Resolve a token.

        Raises:
            Unauthenticated: Missing, malformed, unknown or expired token,
                or an owning identity that is missing or inactive
        """
        if not token:
            raise Unauthenticated()

        try:
            session = await self.session_store.resolve(token)
            if session is None:
                logger.info("Rejected token %s...: no live session", token[:8])
                raise Unauthenticated()

            identity = await self.identities.get_by_id(session.user_id)
        except Unauthenticated:
            raise
        except Exception as e:
            # Fail closed on storage errors
            logger.exception("Authentication lookup failed")
            raise Unauthenticated() from e

        if identity is None or not identity.is_active:
            logger.warning("Rejected session for missing or inactive user %s", session.user_id)
            raise Unauthenticated()

        return AuthContext(
            user_id=identity.id,
            username=identity.username,
            role=identity.role,
            session_expires_at=session.expires_at,
            first_name=identity.first_name,
            last_name=identity.last_name,
            email=identity.email,
            ip_address=ip_address,
            user_agent=user_agent,
        )
