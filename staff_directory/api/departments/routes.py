"""
Department Routes

Any authenticated caller may list departments. Creating one requires
canManageDepartments.
"""

from dataclasses import asdict
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from staff_directory.api.access.audit import AccessAuditLog
from staff_directory.api.access.permissions import AuthContext, Capability
from staff_directory.api.departments.schemas import DepartmentCreateRequest, DepartmentResponse
from staff_directory.api.departments.service import DepartmentService
from staff_directory.api.dependencies import (
    get_audit_log,
    get_auth_context,
    get_repositories,
    require_capabilities,
)
from staff_directory.api.repositories.base import Repositories


router = APIRouter()


def get_department_service(
    repos: Repositories = Depends(get_repositories),
    audit_log: AccessAuditLog = Depends(get_audit_log),
) -> DepartmentService:
    """Dependency to get department service."""
    return DepartmentService(repos.departments, repos.staff, audit_log)


@router.get(
    "",
    response_model=List[DepartmentResponse],
    summary="List departments",
)
async def list_departments(
    context: AuthContext = Depends(get_auth_context),
    service: DepartmentService = Depends(get_department_service),
) -> List[DepartmentResponse]:
    """List departments with their staff headcounts."""
    return [
        DepartmentResponse(**asdict(department), staff_count=count)
        for department, count in await service.list_departments()
    ]


@router.post(
    "",
    response_model=DepartmentResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create department",
)
async def create_department(
    data: DepartmentCreateRequest,
    context: AuthContext = Depends(require_capabilities(Capability.MANAGE_DEPARTMENTS)),
    service: DepartmentService = Depends(get_department_service),
) -> DepartmentResponse:
    """Create a department. Names must be unique."""
    try:
        department = await service.create_department(data, context)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    return DepartmentResponse.model_validate(department)
