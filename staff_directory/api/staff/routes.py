"""
Staff Routes

API endpoints for staff records. Every mutation passes the Request
Authenticator and the Permission Enforcer before it runs; PIN
verification is the one anonymous entry point.
"""

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Request, status

from staff_directory.api.access.audit import AccessAuditLog
from staff_directory.api.access.permissions import AuthContext, Capability
from staff_directory.api.auth.schemas import MessageResponse
from staff_directory.api.dependencies import (
    client_metadata,
    get_audit_log,
    get_repositories,
    require_capabilities,
)
from staff_directory.api.repositories.base import Repositories
from staff_directory.api.staff.schemas import (
    StaffCreateRequest,
    StaffUpdateRequest,
    StaffSummaryResponse,
    StaffResponse,
    PinResetRequest,
    PinVerifyRequest,
)
from staff_directory.api.staff.service import StaffService


router = APIRouter()


def get_staff_service(
    repos: Repositories = Depends(get_repositories),
    audit_log: AccessAuditLog = Depends(get_audit_log),
) -> StaffService:
    """Dependency to get staff service."""
    return StaffService(repos.staff, audit_log)


def _not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Staff member not found",
    )


@router.get(
    "",
    response_model=List[StaffSummaryResponse],
    summary="List staff",
)
async def list_staff(
    context: AuthContext = Depends(require_capabilities(Capability.VIEW_ALL_STAFF)),
    service: StaffService = Depends(get_staff_service),
) -> List[StaffSummaryResponse]:
    """List all staff records, newest first."""
    records = await service.list_staff()
    return [StaffSummaryResponse.model_validate(r) for r in records]


@router.post(
    "",
    response_model=StaffResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create staff record",
)
async def create_staff(
    data: StaffCreateRequest,
    context: AuthContext = Depends(require_capabilities(Capability.CREATE_STAFF)),
    service: StaffService = Depends(get_staff_service),
) -> StaffResponse:
    """Create a staff record. Registration numbers must be unique."""
    try:
        record = await service.create_staff(data, context)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return StaffResponse.model_validate(record)


@router.put(
    "/{staff_id}",
    response_model=StaffResponse,
    summary="Update staff record",
)
async def update_staff(
    staff_id: int,
    data: StaffUpdateRequest,
    context: AuthContext = Depends(require_capabilities(Capability.EDIT_STAFF)),
    service: StaffService = Depends(get_staff_service),
) -> StaffResponse:
    """Update a staff record. Only provided fields are changed."""
    record = await service.update_staff(staff_id, data, context)
    if record is None:
        raise _not_found()
    return StaffResponse.model_validate(record)


@router.delete(
    "/{staff_id}",
    response_model=MessageResponse,
    summary="Delete staff record",
)
async def delete_staff(
    staff_id: int,
    context: AuthContext = Depends(require_capabilities(Capability.DELETE_STAFF)),
    service: StaffService = Depends(get_staff_service),
) -> MessageResponse:
    """Delete a staff record."""
    if not await service.delete_staff(staff_id, context):
        raise _not_found()
    return MessageResponse(message="Staff member deleted successfully")


@router.post(
    "/{staff_id}/reset-pin",
    response_model=MessageResponse,
    summary="Reset staff PIN",
)
async def reset_pin(
    staff_id: int,
    data: PinResetRequest,
    context: AuthContext = Depends(
        require_capabilities(Capability.EDIT_STAFF, Capability.RESET_PIN)
    ),
    service: StaffService = Depends(get_staff_service),
) -> MessageResponse:
    """Set a new profile PIN. Requires both edit and PIN-reset rights."""
    if not await service.reset_pin(staff_id, data.new_pin, context):
        raise _not_found()
    return MessageResponse(message="PIN reset successfully")


@router.get(
    "/{staff_id}/profile",
    response_model=StaffResponse,
    summary="Get full profile without PIN",
)
async def get_profile(
    staff_id: int,
    context: AuthContext = Depends(require_capabilities(Capability.BYPASS_PIN)),
    service: StaffService = Depends(get_staff_service),
) -> StaffResponse:
    """Full staff profile for callers allowed to skip PIN entry."""
    record = await service.get_staff(staff_id)
    if record is None:
        raise _not_found()
    return StaffResponse.model_validate(record)


@router.post(
    "/{staff_id}/verify-pin",
    response_model=StaffResponse,
    summary="Unlock a profile with its PIN",
)
async def verify_pin(
    staff_id: int,
    data: PinVerifyRequest,
    request: Request,
    service: StaffService = Depends(get_staff_service),
) -> StaffResponse:
    """
    Anonymous profile access by PIN.

    Unknown records, records without a PIN and wrong PINs are all
    rejected the same way.
    """
    ip_address, user_agent = client_metadata(request)
    record = await service.verify_pin(
        staff_id, data.pin, ip_address=ip_address, user_agent=user_agent
    )
    if record is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid PIN",
        )
    return StaffResponse.model_validate(record)
