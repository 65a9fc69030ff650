from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sitestaff.api.deps import get_access_gate, get_batch_reader, get_current_admin, get_current_user, get_db
from sitestaff.core.exceptions import NotFoundError
from sitestaff.models.employee import Employee
from sitestaff.models.user import User
from sitestaff.schemas.employee_status import (
    BatchStatusRequest,
    BatchStatusResponse,
    EmployeeStatusesResponse,
    MarkEditedRequest,
    SetStatusRequest,
    StatusMappingResponse,
    StatusResponse,
    StatusViewResponse,
    TransitionResponse,
    UploadFlagRequest,
)
from sitestaff.services.access.gate import AccessControlGate, AccessOperation
from sitestaff.services.statuses.batch import BatchStatusReader
from sitestaff.services.statuses.catalog import StatusCatalog
from sitestaff.services.statuses.display import is_pending_export, resolve_display_status
from sitestaff.services.statuses.service import EmployeeStatusService
from sitestaff.services.statuses.transitions import TransitionPlan

router = APIRouter()


async def _transition_response(
    service: EmployeeStatusService,
    employee_id: str,
    plan: TransitionPlan,
) -> TransitionResponse:
    statuses = await service.get_all_current(employee_id)
    return TransitionResponse(
        employee_id=employee_id,
        action=plan.action,
        applied=not plan.is_noop,
        steps=plan.tags,
        skipped_reason=plan.skipped_reason,
        statuses=[StatusMappingResponse.model_validate(s) for s in statuses],
    )


# ============================================================================
# Catalog
# ============================================================================

@router.get("/statuses/catalog", response_model=List[StatusResponse])
async def list_statuses(
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await StatusCatalog(db).list_all()


@router.get("/statuses/catalog/{group}", response_model=List[StatusResponse])
async def list_statuses_by_group(
    group: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    return await StatusCatalog(db).list_by_group(group)


@router.post("/statuses/batch", response_model=BatchStatusResponse)
async def get_statuses_batch(
    request: BatchStatusRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gate: AccessControlGate = Depends(get_access_gate),
    reader: BatchStatusReader = Depends(get_batch_reader),
):
    """Active statuses for many employees. Ids the caller cannot see are omitted."""
    result = await db.execute(
        select(Employee.id).where(
            Employee.id.in_(request.employee_ids),
            gate.visible_employee_filter(current_user),
        )
    )
    visible_ids = set(result.scalars().all())
    requested = [employee_id for employee_id in request.employee_ids if employee_id in visible_ids]

    grouped = await reader.get_batch(requested)
    return BatchStatusResponse(
        statuses={
            employee_id: [StatusViewResponse.model_validate(view) for view in views]
            for employee_id, views in grouped.items()
        }
    )


# ============================================================================
# Per-employee reads
# ============================================================================

@router.get("/employees/{employee_id}/statuses", response_model=EmployeeStatusesResponse)
async def get_employee_statuses(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gate: AccessControlGate = Depends(get_access_gate),
):
    await gate.ensure(current_user, employee_id, AccessOperation.READ, hide_existence=True)
    statuses = await EmployeeStatusService(db).get_all_current(employee_id)
    return EmployeeStatusesResponse(
        employee_id=employee_id,
        statuses=[StatusMappingResponse.model_validate(s) for s in statuses],
        display_status=resolve_display_status(statuses),
        pending_export=is_pending_export(statuses),
    )


@router.get("/employees/{employee_id}/statuses/{group}", response_model=StatusMappingResponse)
async def get_employee_status_by_group(
    employee_id: str,
    group: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gate: AccessControlGate = Depends(get_access_gate),
):
    await gate.ensure(current_user, employee_id, AccessOperation.READ, hide_existence=True)
    mapping = await EmployeeStatusService(db).get_current(employee_id, group)
    if mapping is None:
        raise NotFoundError(
            f"Employee {employee_id} has no active {group} status",
            resource="status_mapping",
        )
    return mapping


# ============================================================================
# Actions
# ============================================================================

@router.put("/employees/{employee_id}/statuses", response_model=StatusMappingResponse)
async def set_employee_status(
    employee_id: str,
    request: SetStatusRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_admin),
    gate: AccessControlGate = Depends(get_access_gate),
):
    """Administrative override of one status group."""
    await gate.ensure(current_user, employee_id, AccessOperation.WRITE)
    return await EmployeeStatusService(db).set_status(employee_id, request.status_id, current_user.id)


@router.post("/employees/{employee_id}/statuses/fire", response_model=TransitionResponse)
async def fire_employee(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gate: AccessControlGate = Depends(get_access_gate),
):
    await gate.ensure(current_user, employee_id, AccessOperation.WRITE, hide_existence=True)
    service = EmployeeStatusService(db)
    plan = await service.fire(employee_id, current_user.id)
    return await _transition_response(service, employee_id, plan)


@router.post("/employees/{employee_id}/statuses/reinstate", response_model=TransitionResponse)
async def reinstate_employee(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gate: AccessControlGate = Depends(get_access_gate),
):
    await gate.ensure(current_user, employee_id, AccessOperation.WRITE, hide_existence=True)
    service = EmployeeStatusService(db)
    plan = await service.reinstate(employee_id, current_user.id)
    return await _transition_response(service, employee_id, plan)


@router.post("/employees/{employee_id}/statuses/activate", response_model=TransitionResponse)
async def activate_employee(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gate: AccessControlGate = Depends(get_access_gate),
):
    await gate.ensure(current_user, employee_id, AccessOperation.WRITE, hide_existence=True)
    service = EmployeeStatusService(db)
    plan = await service.activate(employee_id, current_user.id)
    return await _transition_response(service, employee_id, plan)


@router.post("/employees/{employee_id}/statuses/deactivate", response_model=TransitionResponse)
async def deactivate_employee(
    employee_id: str,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gate: AccessControlGate = Depends(get_access_gate),
):
    await gate.ensure(current_user, employee_id, AccessOperation.WRITE, hide_existence=True)
    service = EmployeeStatusService(db)
    plan = await service.deactivate(employee_id, current_user.id)
    return await _transition_response(service, employee_id, plan)


@router.post("/employees/{employee_id}/statuses/mark-edited", response_model=TransitionResponse)
async def mark_employee_edited(
    employee_id: str,
    request: MarkEditedRequest = MarkEditedRequest(),
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gate: AccessControlGate = Depends(get_access_gate),
):
    await gate.ensure(current_user, employee_id, AccessOperation.WRITE, hide_existence=True)
    service = EmployeeStatusService(db)
    plan = await service.mark_edited(employee_id, current_user.id, upload=request.is_upload)
    return await _transition_response(service, employee_id, plan)


# ============================================================================
# Upload flags
# ============================================================================

@router.patch("/employees/{employee_id}/statuses/upload", response_model=List[StatusMappingResponse])
async def set_upload_flag_for_active(
    employee_id: str,
    request: UploadFlagRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gate: AccessControlGate = Depends(get_access_gate),
):
    await gate.ensure(current_user, employee_id, AccessOperation.WRITE, hide_existence=True)
    return await EmployeeStatusService(db).set_upload_flag_for_active(employee_id, request.is_upload, current_user.id)


@router.patch("/employees/{employee_id}/statuses/{mapping_id}/upload", response_model=StatusMappingResponse)
async def set_upload_flag(
    employee_id: str,
    mapping_id: str,
    request: UploadFlagRequest,
    db: AsyncSession = Depends(get_db),
    current_user: User = Depends(get_current_user),
    gate: AccessControlGate = Depends(get_access_gate),
):
    await gate.ensure(current_user, employee_id, AccessOperation.WRITE, hide_existence=True)
    return await EmployeeStatusService(db).set_upload_flag(employee_id, mapping_id, request.is_upload, current_user.id)
