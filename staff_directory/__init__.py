# Staff Directory - Access Core
"""
Staff Directory: internal staff records with authentication and role gating.

Core Components:
    - Credential Verifier: username/password checks against bcrypt hashes
    - Session Store: opaque bearer tokens with absolute expiry
    - Permission Matrix: static role -> capability grant table
    - Request Authenticator / Permission Enforcer: request gates
    - Access Audit Log: append-only record of access events

Example:
    uvicorn staff_directory.api.main:app
"""

__version__ = "1.0.0"
__author__ = "Staff Directory Development Team"
