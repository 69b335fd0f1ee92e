"""
Staff Service

Staff record operations that sit behind the access gates. Callers have
already been authenticated and authorized; this layer performs the
change and records it.
"""

import logging
from typing import List, Optional

from staff_directory.api.access.audit import AccessAction, AccessAuditLog
from staff_directory.api.access.permissions import AuthContext
from staff_directory.api.auth.passwords import hash_password, verify_password
from staff_directory.api.repositories.base import StaffRecord, StaffRepository
from staff_directory.api.staff.schemas import StaffCreateRequest, StaffUpdateRequest


logger = logging.getLogger(__name__)


class StaffService:
    """Service for staff record operations."""

    def __init__(self, staff: StaffRepository, audit_log: AccessAuditLog):
        self.staff = staff
        self.audit_log = audit_log

    async def list_staff(self) -> List[StaffRecord]:
        return await self.staff.list_all()

    async def get_staff(self, staff_id: int) -> Optional[StaffRecord]:
        return await self.staff.get(staff_id)

    async def create_staff(self, data: StaffCreateRequest, context: AuthContext) -> StaffRecord:
        """
        Create a staff record.

        Raises:
            ValueError: If the registration number already exists
        """
        existing = await self.staff.get_by_registration_number(data.registration_number)
        if existing:
            raise ValueError("Registration number already exists")

        record = await self.staff.add(
            StaffRecord(
                id=None,
                registration_number=data.registration_number,
                first_name=data.first_name,
                last_name=data.last_name,
                department=data.department,
                position=data.position,
                status=data.status,
                email=data.email,
                phone=data.phone,
                pin_hash=hash_password(data.pin) if data.pin else None,
            )
        )

        await self._record(AccessAction.STAFF_CREATED, context, record.id)
        return record

    async def update_staff(
        self, staff_id: int, data: StaffUpdateRequest, context: AuthContext
    ) -> Optional[StaffRecord]:
        """Update a staff record. Returns None if it does not exist."""
        changes = {
            k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None
        }
        record = await self.staff.update(staff_id, changes)
        if record is None:
            return None

        await self._record(
            AccessAction.STAFF_UPDATED, context, staff_id,
            details={"fields": sorted(changes)},
        )
        return record

    async def delete_staff(self, staff_id: int, context: AuthContext) -> bool:
        """Delete a staff record. Returns False if it does not exist."""
        deleted = await self.staff.delete(staff_id)
        if not deleted:
            return False

        logger.info("Staff record %s deleted by user %s", staff_id, context.user_id)
        await self._record(AccessAction.STAFF_DELETED, context, staff_id)
        return True

    async def reset_pin(self, staff_id: int, new_pin: str, context: AuthContext) -> bool:
        """Set a new PIN. Returns False if the record does not exist."""
        record = await self.staff.update(staff_id, {"pin_hash": hash_password(new_pin)})
        if record is None:
            return False

        await self._record(AccessAction.PIN_RESET, context, staff_id)
        return True

    async def verify_pin(
        self,
        staff_id: int,
        pin: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> Optional[StaffRecord]:
        """
        Check a PIN for anonymous profile access.

        Rejects unless the record exists, has a PIN, and the PIN matches.

        Returns:
            The record on success, None otherwise
        """
        record = await self.staff.get(staff_id)
        verified = (
            record is not None
            and record.pin_hash is not None
            and verify_password(pin, record.pin_hash)
        )

        await self.audit_log.record(
            AccessAction.PIN_VERIFICATION_SUCCESS if verified else AccessAction.PIN_VERIFICATION_FAILED,
            subject_id=staff_id,
            ip_address=ip_address,
            user_agent=user_agent,
        )
        return record if verified else None

    async def _record(self, action: AccessAction, context: AuthContext, staff_id: int, details=None) -> None:
        await self.audit_log.record(
            action,
            actor_id=context.user_id,
            subject_id=staff_id,
            ip_address=context.ip_address,
            user_agent=context.user_agent,
            details=details,
        )
