"""
Per-employee, per-group status history.

At most one row per (employee, group) is active. Rows are never deleted;
superseded rows are flipped to inactive, which always clears `is_upload`.
Methods flush but never commit: the caller owns the transaction.
"""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sitestaff.core.exceptions import NotFoundError, ValidationError
from sitestaff.models.employee import Employee
from sitestaff.models.status import EmployeeStatusMapping, Status
from sitestaff.services.statuses.catalog import StatusCatalog
from sitestaff.services.statuses.transitions import StatusSnapshot, StepKind, TransitionStep

logger = logging.getLogger("sitestaff.statuses.store")


class StatusGroupStore:
    def __init__(self, db: AsyncSession, catalog: Optional[StatusCatalog] = None):
        self.db = db
        self.catalog = catalog or StatusCatalog(db)

    # ------------------------------------------------------------------ reads

    async def get_active(self, employee_id: str, group: str) -> Optional[EmployeeStatusMapping]:
        result = await self.db.execute(
            select(EmployeeStatusMapping)
            .where(
                EmployeeStatusMapping.employee_id == employee_id,
                EmployeeStatusMapping.status_group == group,
                EmployeeStatusMapping.is_active.is_(True),
            )
            .order_by(EmployeeStatusMapping.updated_at.desc())
        )
        return result.scalars().first()

    async def get_all_active(self, employee_id: str) -> List[EmployeeStatusMapping]:
        result = await self.db.execute(
            select(EmployeeStatusMapping)
            .where(
                EmployeeStatusMapping.employee_id == employee_id,
                EmployeeStatusMapping.is_active.is_(True),
            )
            .order_by(EmployeeStatusMapping.status_group, EmployeeStatusMapping.updated_at.desc())
        )
        return list(result.scalars().all())

    async def get_active_batch(self, employee_ids: Iterable[str]) -> Dict[str, List[EmployeeStatusMapping]]:
        ids = list(dict.fromkeys(employee_ids))
        grouped: Dict[str, List[EmployeeStatusMapping]] = {employee_id: [] for employee_id in ids}
        if not ids:
            return grouped

        result = await self.db.execute(
            select(EmployeeStatusMapping)
            .where(
                EmployeeStatusMapping.employee_id.in_(ids),
                EmployeeStatusMapping.is_active.is_(True),
            )
            .order_by(EmployeeStatusMapping.employee_id, EmployeeStatusMapping.status_group)
        )
        for mapping in result.scalars().all():
            grouped[mapping.employee_id].append(mapping)
        return grouped

    async def get_history(self, employee_id: str, group: Optional[str] = None) -> List[EmployeeStatusMapping]:
        """All rows, active and inactive, newest first."""
        return await self._rows(employee_id, group=group)

    async def snapshot(self, employee_id: str) -> StatusSnapshot:
        result = await self.db.execute(
            select(EmployeeStatusMapping.status_group, Status.name, EmployeeStatusMapping.is_upload)
            .join(Status, Status.id == EmployeeStatusMapping.status_id)
            .where(
                EmployeeStatusMapping.employee_id == employee_id,
                EmployeeStatusMapping.is_active.is_(True),
            )
            .order_by(EmployeeStatusMapping.updated_at.desc())
        )
        return StatusSnapshot.from_pairs(result.all())

    async def lock_employee_rows(self, employee_id: str) -> None:
        """
        Row-level lock over the employee and its status rows until the
        enclosing transaction ends. No-op on backends without FOR UPDATE.
        """
        await self.db.execute(
            select(Employee.id).where(Employee.id == employee_id).with_for_update()
        )
        await self.db.execute(
            select(EmployeeStatusMapping.id)
            .where(EmployeeStatusMapping.employee_id == employee_id)
            .with_for_update()
        )

    async def _rows(
        self,
        employee_id: str,
        group: Optional[str] = None,
        status_id: Optional[int] = None,
        active_only: bool = False,
    ) -> List[EmployeeStatusMapping]:
        query = select(EmployeeStatusMapping).where(EmployeeStatusMapping.employee_id == employee_id)
        if group is not None:
            query = query.where(EmployeeStatusMapping.status_group == group)
        if status_id is not None:
            query = query.where(EmployeeStatusMapping.status_id == status_id)
        if active_only:
            query = query.where(EmployeeStatusMapping.is_active.is_(True))
        result = await self.db.execute(query.order_by(EmployeeStatusMapping.created_at.desc()))
        return list(result.scalars().all())

    # ----------------------------------------------------------------- writes

    @staticmethod
    def _deactivate_row(row: EmployeeStatusMapping, actor_id: int) -> None:
        row.is_active = False
        row.is_upload = False
        row.updated_by = actor_id

    @staticmethod
    def _activate_row(row: EmployeeStatusMapping, actor_id: int, upload: Optional[bool]) -> None:
        changed = False
        if not row.is_active:
            row.is_active = True
            changed = True
        if upload is not None and row.is_upload != upload:
            row.is_upload = upload
            changed = True
        # Untouched rows keep their updated_at/updated_by
        if changed:
            row.updated_by = actor_id

    def _new_row(self, employee_id: str, status: Status, actor_id: int, upload: Optional[bool]) -> EmployeeStatusMapping:
        row = EmployeeStatusMapping(
            employee_id=employee_id,
            status=status,
            status_id=status.id,
            status_group=status.group,
            is_active=True,
            is_upload=bool(upload),
            created_by=actor_id,
            updated_by=actor_id,
        )
        self.db.add(row)
        return row

    async def set_active(
        self,
        employee_id: str,
        status_name: str,
        actor_id: int,
        upload: Optional[bool] = None,
    ) -> EmployeeStatusMapping:
        """
        Make `status_name` the single active status of its group.

        Siblings are deactivated (upload cleared); an existing row for this
        exact status is reactivated in place, otherwise a new row is inserted.
        `upload=None` keeps the row's current flag.
        """
        status = await self.catalog.get(status_name)
        rows = await self._rows(employee_id, group=status.group)

        target = next((r for r in rows if r.status_id == status.id), None)
        for row in rows:
            if row is not target and row.is_active:
                self._deactivate_row(row, actor_id)

        if target is not None:
            self._activate_row(target, actor_id, upload)
        else:
            target = self._new_row(employee_id, status, actor_id, upload)

        await self.db.flush()
        return target

    async def activate_without_clearing_group(
        self,
        employee_id: str,
        status_name: str,
        actor_id: int,
        upload: Optional[bool] = False,
    ) -> EmployeeStatusMapping:
        """
        Activate or create one status row without touching its siblings.
        The caller restores the single-active invariant before committing.
        """
        status = await self.catalog.get(status_name)
        rows = await self._rows(employee_id, status_id=status.id)

        if rows:
            target = rows[0]
            self._activate_row(target, actor_id, upload)
        else:
            target = self._new_row(employee_id, status, actor_id, upload)

        await self.db.flush()
        return target

    async def deactivate(self, employee_id: str, status_name: str, actor_id: int) -> List[EmployeeStatusMapping]:
        status = await self.catalog.get(status_name)
        rows = await self._rows(employee_id, status_id=status.id, active_only=True)
        for row in rows:
            self._deactivate_row(row, actor_id)
        await self.db.flush()
        return rows

    async def deactivate_group(
        self,
        employee_id: str,
        group: str,
        actor_id: int,
        keep: Optional[str] = None,
    ) -> List[EmployeeStatusMapping]:
        keep_id = (await self.catalog.get(keep)).id if keep else None
        rows = [
            row
            for row in await self._rows(employee_id, group=group, active_only=True)
            if row.status_id != keep_id
        ]
        for row in rows:
            self._deactivate_row(row, actor_id)
        await self.db.flush()
        return rows

    async def apply(self, employee_id: str, step: TransitionStep, actor_id: int) -> None:
        if step.kind is StepKind.SET_ACTIVE:
            await self.set_active(employee_id, step.status_name, actor_id, upload=step.upload)
        elif step.kind is StepKind.ACTIVATE_ONLY:
            await self.activate_without_clearing_group(employee_id, step.status_name, actor_id, upload=step.upload)
        elif step.kind is StepKind.DEACTIVATE:
            await self.deactivate(employee_id, step.status_name, actor_id)
        elif step.kind is StepKind.DEACTIVATE_GROUP:
            await self.deactivate_group(employee_id, step.group, actor_id, keep=step.keep)
        else:
            raise ValidationError(f"Unsupported transition step: {step.kind}")

    # ------------------------------------------------------------ upload flags

    async def set_upload_flag(
        self,
        employee_id: str,
        mapping_id: str,
        flag: bool,
        actor_id: int,
    ) -> EmployeeStatusMapping:
        row = await self.db.get(EmployeeStatusMapping, mapping_id)
        if row is None or row.employee_id != employee_id:
            raise NotFoundError(
                f"Status mapping {mapping_id} not found for employee {employee_id}",
                resource="status_mapping",
                resource_id=mapping_id,
            )
        if not row.is_active:
            raise ValidationError("Upload flag can only be changed on an active status")
        if row.is_upload != flag:
            row.is_upload = flag
            row.updated_by = actor_id
            await self.db.flush()
        return row

    async def set_upload_flag_for_active(
        self,
        employee_id: str,
        flag: bool,
        actor_id: int,
    ) -> List[EmployeeStatusMapping]:
        rows = await self._rows(employee_id, active_only=True)
        changed = [row for row in rows if row.is_upload != flag]
        for row in changed:
            row.is_upload = flag
            row.updated_by = actor_id
        if changed:
            await self.db.flush()
        return rows
