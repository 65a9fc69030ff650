"""
Tests for sitestaff/services/statuses/store.py - per-group status persistence.
"""
import pytest
from sqlalchemy import select

from sitestaff.core.exceptions import NotFoundError, ValidationError
from sitestaff.models.status import EmployeeStatusMapping
from sitestaff.services.statuses import names as S
from sitestaff.services.statuses.store import StatusGroupStore

from conftest import SHARED_USER_ID


async def all_rows(db, employee_id, group=None):
    query = select(EmployeeStatusMapping).where(EmployeeStatusMapping.employee_id == employee_id)
    if group:
        query = query.where(EmployeeStatusMapping.status_group == group)
    result = await db.execute(query)
    return list(result.scalars().all())


class TestSetActive:

    @pytest.mark.asyncio
    async def test_inserts_first_row(self, db, employee_factory):
        employee = await employee_factory(last_name="Petrov")
        store = StatusGroupStore(db)

        row = await store.set_active(employee.id, S.ACTIVE_EMPLOYED, SHARED_USER_ID)
        await db.commit()

        assert row.is_active is True
        assert row.is_upload is False
        assert row.status_group == S.GROUP_ACTIVE
        assert row.status_name == S.ACTIVE_EMPLOYED
        assert row.created_by == SHARED_USER_ID

    @pytest.mark.asyncio
    async def test_replaces_sibling_and_clears_its_upload(self, db, employee_factory):
        employee = await employee_factory(last_name="Petrov")
        store = StatusGroupStore(db)

        first = await store.set_active(employee.id, S.HR_NEW_COMPL, SHARED_USER_ID, upload=True)
        second = await store.set_active(employee.id, S.HR_EDITED, SHARED_USER_ID)
        await db.commit()

        assert first.is_active is False
        assert first.is_upload is False
        assert second.is_active is True
        active = [r for r in await all_rows(db, employee.id, S.GROUP_HR) if r.is_active]
        assert active == [second]

    @pytest.mark.asyncio
    async def test_reactivates_existing_row_in_place(self, db, employee_factory):
        employee = await employee_factory(last_name="Petrov")
        store = StatusGroupStore(db)

        original = await store.set_active(employee.id, S.ACTIVE_EMPLOYED, SHARED_USER_ID)
        await store.set_active(employee.id, S.ACTIVE_INACTIVE, SHARED_USER_ID)
        again = await store.set_active(employee.id, S.ACTIVE_EMPLOYED, SHARED_USER_ID)
        await db.commit()

        assert again.id == original.id
        assert len(await all_rows(db, employee.id, S.GROUP_ACTIVE)) == 2

    @pytest.mark.asyncio
    async def test_upload_none_preserves_flag(self, db, employee_factory):
        employee = await employee_factory(last_name="Petrov")
        store = StatusGroupStore(db)

        await store.set_active(employee.id, S.HR_EDITED, SHARED_USER_ID, upload=True)
        row = await store.set_active(employee.id, S.HR_EDITED, SHARED_USER_ID)

        assert row.is_upload is True

    @pytest.mark.asyncio
    async def test_untouched_row_keeps_audit_fields(self, db, employee_factory):
        employee = await employee_factory(last_name="Petrov")
        store = StatusGroupStore(db)

        row = await store.set_active(employee.id, S.ACTIVE_EMPLOYED, SHARED_USER_ID)
        await db.commit()
        await store.set_active(employee.id, S.ACTIVE_EMPLOYED, 99)

        assert row.updated_by == SHARED_USER_ID


class TestDeactivation:

    @pytest.mark.asyncio
    async def test_deactivate_group_with_keep(self, db, employee_factory):
        employee = await employee_factory(last_name="Petrov")
        store = StatusGroupStore(db)

        edited = await store.set_active(employee.id, S.HR_EDITED, SHARED_USER_ID, upload=True)
        fired_off = await store.activate_without_clearing_group(employee.id, S.HR_FIRED_OFF, SHARED_USER_ID)
        assert edited.is_active and fired_off.is_active

        cleared = await store.deactivate_group(employee.id, S.GROUP_HR, SHARED_USER_ID, keep=S.HR_FIRED_OFF)

        assert cleared == [edited]
        assert edited.is_active is False
        assert edited.is_upload is False
        assert fired_off.is_active is True

    @pytest.mark.asyncio
    async def test_deactivate_single_status(self, db, employee_factory):
        employee = await employee_factory(last_name="Petrov")
        store = StatusGroupStore(db)

        row = await store.set_active(employee.id, S.ACTIVE_FIRED, SHARED_USER_ID, upload=True)
        await store.deactivate(employee.id, S.ACTIVE_FIRED, SHARED_USER_ID)

        assert row.is_active is False
        assert row.is_upload is False
        assert await store.get_active(employee.id, S.GROUP_ACTIVE) is None


class TestReads:

    @pytest.mark.asyncio
    async def test_snapshot_and_batch(self, db, employee_factory):
        first = await employee_factory(last_name="Petrov")
        second = await employee_factory(last_name="Sidorov")
        store = StatusGroupStore(db)

        await store.set_active(first.id, S.STATUS_DRAFT, SHARED_USER_ID)
        await store.set_active(first.id, S.SECURE_ALLOW, SHARED_USER_ID)
        await db.commit()

        snapshot = await store.snapshot(first.id)
        assert snapshot.name(S.GROUP_STATUS) == S.STATUS_DRAFT
        assert snapshot.name(S.GROUP_SECURE) == S.SECURE_ALLOW
        assert snapshot.name(S.GROUP_HR) is None

        batch = await store.get_active_batch([first.id, second.id, first.id])
        assert set(batch) == {first.id, second.id}
        assert len(batch[first.id]) == 2
        assert batch[second.id] == []

    @pytest.mark.asyncio
    async def test_history_keeps_inactive_rows(self, db, employee_factory):
        employee = await employee_factory(last_name="Petrov")
        store = StatusGroupStore(db)

        await store.set_active(employee.id, S.ACTIVE_EMPLOYED, SHARED_USER_ID)
        await store.set_active(employee.id, S.ACTIVE_FIRED, SHARED_USER_ID)
        await db.commit()

        history = await store.get_history(employee.id, S.GROUP_ACTIVE)
        assert {row.status_name for row in history} == {S.ACTIVE_EMPLOYED, S.ACTIVE_FIRED}
        assert sum(row.is_active for row in history) == 1


class TestUploadFlags:

    @pytest.mark.asyncio
    async def test_set_upload_flag(self, db, employee_factory):
        employee = await employee_factory(last_name="Petrov")
        store = StatusGroupStore(db)
        row = await store.set_active(employee.id, S.STATUS_NEW, SHARED_USER_ID)

        await store.set_upload_flag(employee.id, row.id, True, SHARED_USER_ID)

        assert row.is_upload is True

    @pytest.mark.asyncio
    async def test_inactive_row_is_rejected(self, db, employee_factory):
        employee = await employee_factory(last_name="Petrov")
        store = StatusGroupStore(db)
        row = await store.set_active(employee.id, S.STATUS_DRAFT, SHARED_USER_ID)
        await store.set_active(employee.id, S.STATUS_NEW, SHARED_USER_ID)

        with pytest.raises(ValidationError):
            await store.set_upload_flag(employee.id, row.id, True, SHARED_USER_ID)

    @pytest.mark.asyncio
    async def test_row_of_other_employee_is_not_found(self, db, employee_factory):
        owner = await employee_factory(last_name="Petrov")
        other = await employee_factory(last_name="Sidorov")
        store = StatusGroupStore(db)
        row = await store.set_active(owner.id, S.STATUS_NEW, SHARED_USER_ID)

        with pytest.raises(NotFoundError):
            await store.set_upload_flag(other.id, row.id, True, SHARED_USER_ID)

    @pytest.mark.asyncio
    async def test_set_upload_flag_for_active(self, db, employee_factory):
        employee = await employee_factory(last_name="Petrov")
        store = StatusGroupStore(db)
        old = await store.set_active(employee.id, S.STATUS_DRAFT, SHARED_USER_ID)
        await store.set_active(employee.id, S.STATUS_NEW, SHARED_USER_ID)
        await store.set_active(employee.id, S.CARD_COMPLETED, SHARED_USER_ID)

        rows = await store.set_upload_flag_for_active(employee.id, True, SHARED_USER_ID)

        assert len(rows) == 2
        assert all(row.is_upload for row in rows)
        assert old.is_upload is False
