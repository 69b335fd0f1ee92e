"""
Authentication Routes

API endpoints for login, logout and the current identity.
"""

from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials

from staff_directory.api.access.permissions import AuthContext, permissions_for
from staff_directory.api.auth.service import AuthService
from staff_directory.api.auth.schemas import (
    UserLoginRequest,
    LoginResponse,
    UserResponse,
    CurrentUserResponse,
    PermissionsResponse,
    MessageResponse,
)
from staff_directory.api.dependencies import (
    bearer_scheme,
    client_metadata,
    get_auth_context,
    get_auth_service,
)
from staff_directory.api.exceptions import InvalidCredentials


router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Login and get a session token",
)
async def login(
    data: UserLoginRequest,
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """
    Authenticate with username and password.

    Returns a bearer token valid for 24 hours from issue.
    """
    ip_address, user_agent = client_metadata(request)

    try:
        identity, session = await auth_service.login(
            data.username,
            data.password,
            ip_address=ip_address,
            user_agent=user_agent,
        )
    except InvalidCredentials as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=e.message,
            headers={"WWW-Authenticate": "Bearer"},
        )

    return LoginResponse(
        user=UserResponse.model_validate(identity),
        token=session.token,
        expires_at=session.expires_at,
    )


@router.post(
    "/logout",
    response_model=MessageResponse,
    summary="Logout and revoke the session",
)
async def logout(
    context: AuthContext = Depends(get_auth_context),
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
    auth_service: AuthService = Depends(get_auth_service),
) -> MessageResponse:
    """Revoke the presented session token."""
    await auth_service.logout(context, credentials.credentials)
    return MessageResponse(message="Logout successful")


@router.get(
    "/me",
    response_model=CurrentUserResponse,
    summary="Get current user",
)
async def get_me(
    context: AuthContext = Depends(get_auth_context),
) -> CurrentUserResponse:
    """Get the authenticated caller's identity."""
    return CurrentUserResponse(
        id=context.user_id,
        username=context.username,
        role=context.role,
        first_name=context.first_name,
        last_name=context.last_name,
        email=context.email,
        session_expires_at=context.session_expires_at,
    )


@router.get(
    "/permissions",
    response_model=PermissionsResponse,
    summary="Get current user's capabilities",
)
async def get_permissions(
    context: AuthContext = Depends(get_auth_context),
) -> PermissionsResponse:
    """Full capability map for the caller's role."""
    return PermissionsResponse(
        role=context.role,
        permissions=permissions_for(context.role),
    )
