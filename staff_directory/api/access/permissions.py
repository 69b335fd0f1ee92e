"""
Staff Directory - Role Permission Matrix

Defines roles, capabilities, and the role -> capability grant table.
This is the authoritative source for "can this role do X".
"""

from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Type, TypeVar
from dataclasses import dataclass
from datetime import datetime

from staff_directory.api.exceptions import Forbidden, Unauthenticated


# ============================================================
# Capabilities
# ============================================================


class Capability(str, Enum):
    """All capabilities in the system. Values are the wire names."""

    # User Management
    CREATE_USERS = "canCreateUsers"
    DELETE_USERS = "canDeleteUsers"
    MANAGE_ROLES = "canManageRoles"

    # Staff Records
    VIEW_ALL_STAFF = "canViewAllStaff"
    CREATE_STAFF = "canCreateStaff"
    EDIT_STAFF = "canEditStaff"
    DELETE_STAFF = "canDeleteStaff"

    # PIN Protection
    BYPASS_PIN = "canBypassPIN"
    RESET_PIN = "canResetPIN"

    # Audit & Departments
    VIEW_AUDIT_LOGS = "canViewAuditLogs"
    MANAGE_DEPARTMENTS = "canManageDepartments"


# ============================================================
# Roles
# ============================================================


class Role(str, Enum):
    """System roles. Order carries no meaning."""

    SUPER_ADMIN = "super_admin"
    ADMIN = "admin"
    HR = "hr"
    STAFF = "staff"
    VIEWER = "viewer"


# ============================================================
# Role Capability Mappings
# ============================================================


ROLE_PERMISSIONS: Dict[Role, FrozenSet[Capability]] = {
    Role.SUPER_ADMIN: frozenset({
        # Users
        Capability.CREATE_USERS,
        Capability.DELETE_USERS,
        Capability.MANAGE_ROLES,

        # Staff (full)
        Capability.VIEW_ALL_STAFF,
        Capability.CREATE_STAFF,
        Capability.EDIT_STAFF,
        Capability.DELETE_STAFF,

        # PIN
        Capability.BYPASS_PIN,
        Capability.RESET_PIN,

        # Audit & Departments
        Capability.VIEW_AUDIT_LOGS,
        Capability.MANAGE_DEPARTMENTS,
    }),

    Role.ADMIN: frozenset({
        # Staff (full)
        Capability.VIEW_ALL_STAFF,
        Capability.CREATE_STAFF,
        Capability.EDIT_STAFF,
        Capability.DELETE_STAFF,

        # PIN
        Capability.BYPASS_PIN,
        Capability.RESET_PIN,

        # Audit & Departments
        Capability.VIEW_AUDIT_LOGS,
        Capability.MANAGE_DEPARTMENTS,
    }),

    Role.HR: frozenset({
        # Staff (no delete)
        Capability.VIEW_ALL_STAFF,
        Capability.CREATE_STAFF,
        Capability.EDIT_STAFF,

        # PIN (reset only)
        Capability.RESET_PIN,

        # Audit (read)
        Capability.VIEW_AUDIT_LOGS,
    }),

    # Read-only by policy
    Role.STAFF: frozenset(),
    Role.VIEWER: frozenset(),
}


_E = TypeVar("_E", bound=Enum)


def _coerce(enum_cls: Type[_E], value: Any) -> Optional[_E]:
    """Map a raw value onto an enum member, or None if it is not one."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except (ValueError, TypeError):
        return None


def is_valid_role(role: Any) -> bool:
    """Check whether a value names a declared role."""
    return _coerce(Role, role) is not None


def allows(role: Any, capability: Any) -> bool:
    """
    Check if a role is granted a capability.

    Total over any input: undeclared roles or capabilities resolve to
    False rather than raising.
    """
    resolved_role = _coerce(Role, role)
    resolved_capability = _coerce(Capability, capability)
    if resolved_role is None or resolved_capability is None:
        return False
    return resolved_capability in ROLE_PERMISSIONS.get(resolved_role, frozenset())


def permissions_for(role: Any) -> Dict[str, bool]:
    """Full capability map for a role, keyed by wire name."""
    return {capability.value: allows(role, capability) for capability in Capability}


# ============================================================
# Authorization Context
# ============================================================


@dataclass(frozen=True)
class AuthContext:
    """Resolved identity for a request. Never carries the credential."""

    user_id: int
    username: str
    role: str
    session_expires_at: datetime
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None


# ============================================================
# Permission Enforcer
# ============================================================


class PermissionEnforcer:
    """
    Second request gate, run after authentication.

    Multiple capabilities are an AND of independent checks.
    """

    def check(self, context: Optional[AuthContext], capability: Any) -> bool:
        """Check a single capability without raising."""
        if context is None:
            return False
        return allows(context.role, capability)

    def enforce(self, context: Optional[AuthContext], *capabilities: Any) -> AuthContext:
        """
        Require every listed capability.

        Raises:
            Unauthenticated: If there is no resolved identity
            Forbidden: On the first capability the role lacks
        """
        if context is None:
            raise Unauthenticated()

        for capability in capabilities:
            if not allows(context.role, capability):
                raise Forbidden(capability)

        return context
