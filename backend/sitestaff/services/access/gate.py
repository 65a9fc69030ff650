"""
Tenant-based access control for employee records.

Rules:
    * administrators may read and write every employee;
    * users of the shared (back-office) tenant may read employees linked to
      the shared tenant and write only employees linked to them personally;
    * users of any other tenant may read and write employees linked to
      their own tenant;
    * users without a tenant are denied.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from sqlalchemy import and_, exists, false, select, true
from sqlalchemy.ext.asyncio import AsyncSession

from sitestaff.core.exceptions import ConfigurationError, ForbiddenError, NotFoundError
from sitestaff.models.employee import Employee, EmployeeCounterpartyMapping, UserEmployeeMapping
from sitestaff.models.user import User

logger = logging.getLogger("sitestaff.access")


class AccessOperation(str, Enum):
    READ = "read"
    WRITE = "write"


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: str
    # False when the actor may not even learn that the employee exists
    visible: bool = True


class AccessControlGate:
    def __init__(self, db: AsyncSession, shared_counterparty_id: Optional[int]):
        self.db = db
        self.shared_counterparty_id = shared_counterparty_id

    def _shared_id(self) -> int:
        if self.shared_counterparty_id is None:
            logger.error("Shared counterparty is not configured", extra={"operational_incident": True})
            raise ConfigurationError("Shared counterparty is not configured")
        return self.shared_counterparty_id

    async def _employee_in_tenant(self, employee_id: str, counterparty_id: int) -> bool:
        result = await self.db.execute(
            select(EmployeeCounterpartyMapping.id).where(
                EmployeeCounterpartyMapping.employee_id == employee_id,
                EmployeeCounterpartyMapping.counterparty_id == counterparty_id,
            ).limit(1)
        )
        return result.first() is not None

    async def _owned_by(self, employee_id: str, user_id: int) -> bool:
        result = await self.db.execute(
            select(UserEmployeeMapping.id).where(
                UserEmployeeMapping.employee_id == employee_id,
                UserEmployeeMapping.user_id == user_id,
                UserEmployeeMapping.counterparty_id.is_(None),
            ).limit(1)
        )
        return result.first() is not None

    async def authorize(self, actor: User, employee_id: str, operation: AccessOperation) -> AccessDecision:
        if actor.is_admin:
            return AccessDecision(True, "admin")

        if actor.counterparty_id is None:
            return AccessDecision(False, "actor has no counterparty", visible=False)

        if await self.db.get(Employee, employee_id) is None:
            raise NotFoundError(f"Employee {employee_id} not found", resource="employee", resource_id=employee_id)

        shared_id = self._shared_id()

        if actor.counterparty_id == shared_id:
            readable = await self._employee_in_tenant(employee_id, shared_id)
            if operation is AccessOperation.READ:
                if readable:
                    return AccessDecision(True, "shared tenant employee")
                return AccessDecision(False, "employee is not linked to the shared tenant", visible=False)

            if await self._owned_by(employee_id, actor.id):
                return AccessDecision(True, "employee owned by actor")
            return AccessDecision(False, "employee is not owned by actor", visible=readable)

        if await self._employee_in_tenant(employee_id, actor.counterparty_id):
            return AccessDecision(True, "employee belongs to actor counterparty")
        return AccessDecision(False, "employee does not belong to actor counterparty", visible=False)

    async def ensure(
        self,
        actor: User,
        employee_id: str,
        operation: AccessOperation,
        hide_existence: bool = False,
    ) -> AccessDecision:
        """
        Raise unless `actor` may perform `operation` on the employee.

        With `hide_existence`, employees the actor cannot see are reported as
        missing instead of forbidden.
        """
        decision = await self.authorize(actor, employee_id, operation)
        if decision.allowed:
            return decision

        logger.info(
            f"Access denied: user {actor.id} {operation.value} employee {employee_id} ({decision.reason})",
            extra={"user_id": actor.id, "employee_id": employee_id},
        )
        if hide_existence and not decision.visible:
            raise NotFoundError(f"Employee {employee_id} not found", resource="employee", resource_id=employee_id)
        raise ForbiddenError("Insufficient permissions for this employee", reason=decision.reason)

    def visible_employee_filter(self, actor: User):
        """WHERE clause over Employee applying the read rule, for list queries."""
        if actor.is_admin:
            return true()
        if actor.counterparty_id is None:
            return false()

        # Shared and contractor tenants read the same way: by tenant link
        return exists().where(
            and_(
                EmployeeCounterpartyMapping.employee_id == Employee.id,
                EmployeeCounterpartyMapping.counterparty_id == actor.counterparty_id,
            )
        )
