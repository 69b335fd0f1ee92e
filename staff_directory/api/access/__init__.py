"""
Staff Directory - Access & Authority Module

Role-based capabilities and access audit logging.

Components:
- permissions.py: Role/Capability definitions, the grant table, the enforcer
- audit.py: Access log vocabulary and the append-only audit service

Usage:
    from staff_directory.api.access.permissions import (
        Role,
        Capability,
        allows,
        PermissionEnforcer,
    )

    from staff_directory.api.access.audit import (
        AccessAuditLog,
        AccessAction,
    )
"""

from staff_directory.api.access.permissions import (
    Role,
    Capability,
    AuthContext,
    ROLE_PERMISSIONS,
    PermissionEnforcer,
    allows,
    is_valid_role,
    permissions_for,
)

from staff_directory.api.access.audit import (
    AccessAuditLog,
    AccessAction,
)

__all__ = [
    # Roles and Capabilities
    "Role",
    "Capability",
    "AuthContext",
    "ROLE_PERMISSIONS",
    "PermissionEnforcer",
    "allows",
    "is_valid_role",
    "permissions_for",

    # Audit
    "AccessAuditLog",
    "AccessAction",
]
