"""Authentication module."""

from staff_directory.api.auth.authenticator import RequestAuthenticator
from staff_directory.api.auth.service import AuthService, CredentialVerifier
from staff_directory.api.auth.sessions import SessionStore

__all__ = [
    "AuthService",
    "CredentialVerifier",
    "RequestAuthenticator",
    "SessionStore",
]
