"""
Employee status lifecycle service.

Entry point used by controllers, the import pipeline and the recalculation
script. Each public mutation:

1. checks the employee exists and locks its status rows,
2. reads the current StatusSnapshot and builds a TransitionPlan,
3. resolves every status the plan references (missing catalog entries abort
   before any write),
4. applies the steps through StatusGroupStore and commits once.

Any failure, cancellation included, rolls the whole action back.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from sitestaff.core.exceptions import NotFoundError, ValidationError
from sitestaff.models.employee import Employee
from sitestaff.models.status import EmployeeStatusMapping
from sitestaff.services.statuses import names as S
from sitestaff.services.statuses import transitions as T
from sitestaff.services.statuses.catalog import StatusCatalog
from sitestaff.services.statuses.completeness import FieldConfig, missing_fields
from sitestaff.services.statuses.store import StatusGroupStore

logger = logging.getLogger("sitestaff.statuses")


@dataclass
class CompletenessResult:
    is_complete: bool
    missing_fields: List[str] = field(default_factory=list)
    plan: Optional[T.TransitionPlan] = None


class EmployeeStatusService:
    def __init__(self, db: AsyncSession, catalog: Optional[StatusCatalog] = None):
        self.db = db
        self.catalog = catalog or StatusCatalog(db)
        self.store = StatusGroupStore(db, self.catalog)

    # --------------------------------------------------------------- plumbing

    async def _ensure_employee(self, employee_id: str) -> None:
        if await self.db.get(Employee, employee_id) is None:
            raise NotFoundError(f"Employee {employee_id} not found", resource="employee", resource_id=employee_id)

    async def _execute(
        self,
        employee_id: str,
        actor_id: int,
        build: Callable[[T.StatusSnapshot], T.TransitionPlan],
    ) -> T.TransitionPlan:
        """
        Run one planned action as a single transaction.

        On failure the session is rolled back, which expires every ORM
        instance it holds; callers must reload (or keep plain ids) before
        touching their instances again.
        """
        try:
            await self._ensure_employee(employee_id)
            await self.store.lock_employee_rows(employee_id)
            snapshot = await self.store.snapshot(employee_id)
            plan = build(snapshot)

            if plan.steps:
                # Validate the whole plan up front so nothing is half-applied
                await self.catalog.get_many(plan.status_names)
                for step in plan.steps:
                    await self.store.apply(employee_id, step, actor_id)

            await self.db.commit()
        except BaseException:
            # BaseException so a cancelled request also rolls back
            await self.db.rollback()
            self.catalog.clear()
            raise

        if plan.steps:
            logger.info(
                f"Status transition '{plan.action}' applied to employee {employee_id}: {', '.join(plan.tags)}",
                extra={"employee_id": employee_id, "actor_id": actor_id, "action": plan.action},
            )
        elif plan.skipped_reason:
            logger.debug(f"Status transition '{plan.action}' skipped for {employee_id}: {plan.skipped_reason}")
        return plan

    # ---------------------------------------------------------------- actions

    async def initialize_statuses(self, employee_id: str, actor_id: int) -> T.TransitionPlan:
        """Seed the initial statuses of a freshly created employee."""

        def build(snapshot: T.StatusSnapshot) -> T.TransitionPlan:
            if any(snapshot.current(group) for group in S.ALL_GROUPS):
                raise ValidationError(f"Statuses of employee {employee_id} are already initialized")
            return T.plan_initialization(snapshot)

        return await self._execute(employee_id, actor_id, build)

    async def recompute_on_edit(
        self,
        employee: Any,
        field_config: Optional[FieldConfig],
        actor_id: int,
    ) -> CompletenessResult:
        """
        Run after any field-affecting write: promote drafts when the card is
        complete and flag the HR record as edited.
        """
        missing = missing_fields(employee, field_config)
        complete = not missing
        plan = await self._execute(
            employee.id, actor_id, lambda snapshot: T.plan_recompute_on_edit(snapshot, complete)
        )
        return CompletenessResult(is_complete=complete, missing_fields=missing, plan=plan)

    async def recompute_completeness(
        self,
        employee: Any,
        field_config: Optional[FieldConfig],
        actor_id: int,
    ) -> CompletenessResult:
        """Completeness promotion only, without HR edit coupling (bulk recalculation)."""
        missing = missing_fields(employee, field_config)
        complete = not missing
        plan = await self._execute(
            employee.id, actor_id, lambda snapshot: T.plan_completeness(snapshot, complete)
        )
        return CompletenessResult(is_complete=complete, missing_fields=missing, plan=plan)

    async def fire(self, employee_id: str, actor_id: int) -> T.TransitionPlan:
        return await self._execute(employee_id, actor_id, T.plan_fire)

    async def reinstate(self, employee_id: str, actor_id: int) -> T.TransitionPlan:
        return await self._execute(employee_id, actor_id, T.plan_reinstate)

    async def activate(self, employee_id: str, actor_id: int) -> T.TransitionPlan:
        return await self._execute(employee_id, actor_id, T.plan_activate)

    async def deactivate(self, employee_id: str, actor_id: int) -> T.TransitionPlan:
        return await self._execute(employee_id, actor_id, T.plan_deactivate)

    async def apply_profile_activity(
        self,
        employee_id: str,
        actor_id: int,
        fired: bool = False,
        inactive: bool = False,
    ) -> T.TransitionPlan:
        return await self._execute(
            employee_id, actor_id, lambda snapshot: T.plan_profile_activity(snapshot, fired, inactive)
        )

    async def mark_edited(self, employee_id: str, actor_id: int, upload: bool = True) -> T.TransitionPlan:
        return await self._execute(employee_id, actor_id, lambda snapshot: T.plan_mark_edited(snapshot, upload))

    async def set_status(self, employee_id: str, status_id: int, actor_id: int) -> EmployeeStatusMapping:
        """Administrative override by catalog id."""
        status = await self.catalog.get_by_id(status_id)
        if S.STATUS_CATALOG.get(status.name) != status.group:
            raise ValidationError(f"Status {status.name} cannot be assigned")
        await self._execute(employee_id, actor_id, lambda snapshot: T.plan_set_status(snapshot, status.name))
        return await self.store.get_active(employee_id, status.group)

    async def set_upload_flag(
        self,
        employee_id: str,
        mapping_id: str,
        flag: bool,
        actor_id: int,
    ) -> EmployeeStatusMapping:
        try:
            await self._ensure_employee(employee_id)
            await self.store.lock_employee_rows(employee_id)
            mapping = await self.store.set_upload_flag(employee_id, mapping_id, flag, actor_id)
            await self.db.commit()
        except BaseException:
            await self.db.rollback()
            raise
        return mapping

    async def set_upload_flag_for_active(
        self,
        employee_id: str,
        flag: bool,
        actor_id: int,
    ) -> List[EmployeeStatusMapping]:
        try:
            await self._ensure_employee(employee_id)
            await self.store.lock_employee_rows(employee_id)
            mappings = await self.store.set_upload_flag_for_active(employee_id, flag, actor_id)
            await self.db.commit()
        except BaseException:
            await self.db.rollback()
            raise
        return mappings

    # ------------------------------------------------------------------ reads

    async def get_current(self, employee_id: str, group: str) -> Optional[EmployeeStatusMapping]:
        if group not in S.ALL_GROUPS:
            raise ValidationError(f"Unknown status group: {group}")
        return await self.store.get_active(employee_id, group)

    async def get_all_current(self, employee_id: str) -> List[EmployeeStatusMapping]:
        return await self.store.get_all_active(employee_id)

    async def get_batch(self, employee_ids: Iterable[str]) -> Dict[str, List[EmployeeStatusMapping]]:
        return await self.store.get_active_batch(employee_ids)
