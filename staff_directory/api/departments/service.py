"""
Department Service

Departments group staff records by name. Headcounts are derived from the
staff records on read rather than stored.
"""

import logging
from collections import Counter
from typing import List, Tuple

from staff_directory.api.access.audit import AccessAction, AccessAuditLog
from staff_directory.api.access.permissions import AuthContext
from staff_directory.api.departments.schemas import DepartmentCreateRequest
from staff_directory.api.repositories.base import (
    DepartmentRecord,
    DepartmentRepository,
    StaffRepository,
)


logger = logging.getLogger(__name__)


class DepartmentService:
    """Service for department operations."""

    def __init__(
        self,
        departments: DepartmentRepository,
        staff: StaffRepository,
        audit_log: AccessAuditLog,
    ):
        self.departments = departments
        self.staff = staff
        self.audit_log = audit_log

    async def list_departments(self) -> List[Tuple[DepartmentRecord, int]]:
        """All departments by name, each with its staff headcount."""
        departments = await self.departments.list_all()
        counts = Counter(record.department for record in await self.staff.list_all())
        return [(d, counts[d.name]) for d in departments]

    async def create_department(
        self, data: DepartmentCreateRequest, context: AuthContext
    ) -> DepartmentRecord:
        """
        Create a department.

        Raises:
            ValueError: If a department with that name already exists
        """
        if await self.departments.get_by_name(data.name):
            raise ValueError("Department already exists")

        department = await self.departments.add(
            DepartmentRecord(
                id=None,
                name=data.name,
                description=data.description,
                icon=data.icon,
                color=data.color,
            )
        )

        logger.info("Department %r created by user %s", department.name, context.user_id)
        await self.audit_log.record(
            AccessAction.DEPARTMENT_CREATED,
            actor_id=context.user_id,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
            details={"department": department.name},
        )
        return department
