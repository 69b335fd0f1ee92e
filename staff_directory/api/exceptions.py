"""
Staff Directory - Access Error Hierarchy
========================================

Structured exception types for the authentication and authorization core.

Exception Categories:
    - Unauthenticated: no usable identity could be resolved from a request
    - Forbidden: identity resolved but lacks a required capability
    - InvalidCredentials: login-time username/password mismatch
    - AuditWriteFailure: internal only, reported but never propagated

Only Unauthenticated and Forbidden change the outcome of a gated operation.
"""

from typing import Any, Dict, Optional


class StaffDirectoryError(Exception):
    """
    Base exception for all staff directory errors.

    Attributes:
        message: Human-readable error description
        code: Optional error code for programmatic handling
        details: Optional dict with additional context
    """

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def __str__(self) -> str:
        if self.code:
            return f"[{self.code}] {self.message}"
        return self.message


# =============================================================================
# AUTHENTICATION & AUTHORIZATION ERRORS
# =============================================================================


class AuthError(StaffDirectoryError):
    """Base exception for caller-visible access errors."""

    pass


class Unauthenticated(AuthError):
    """
    No usable identity could be resolved.

    Raised for a missing, malformed, unknown or expired token and for an
    owning identity that is gone or inactive. The message is always the same.
    """

    def __init__(self, message: str = "Authentication required", **kwargs):
        super().__init__(message, code="UNAUTHENTICATED", **kwargs)


class Forbidden(AuthError):
    """Identity resolved but its role does not grant a capability."""

    def __init__(self, capability: Any = None, message: str = "Insufficient permissions", **kwargs):
        super().__init__(message, code="FORBIDDEN", **kwargs)
        self.capability = getattr(capability, "value", capability)


class InvalidCredentials(AuthError):
    """Username/password pair did not verify. Unknown users look identical."""

    def __init__(self, message: str = "Invalid credentials", **kwargs):
        super().__init__(message, code="INVALID_CREDENTIALS", **kwargs)


# =============================================================================
# INTERNAL ERRORS
# =============================================================================


class AuditWriteFailure(StaffDirectoryError):
    """An access log entry could not be persisted."""

    def __init__(self, message: str, action: Optional[str] = None, **kwargs):
        super().__init__(message, code="AUDIT_WRITE_FAILURE", **kwargs)
        self.action = action
