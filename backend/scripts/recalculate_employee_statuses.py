"""
Recalculate completeness statuses of every employee.

Applies the tenant's form configuration (default form for the shared
tenant, external form for contractors) and promotes draft statuses of
employees whose cards are now complete. HR statuses are not touched.

Usage:
    python scripts/recalculate_employee_statuses.py
"""

import asyncio
from dataclasses import dataclass
from typing import Dict, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from sitestaff.core.logging_config import get_logger, setup_logging
from sitestaff.db.session import AsyncSessionLocal
from sitestaff.models.employee import Employee
from sitestaff.services.settings.employee_settings_service import EmployeeSettingsService
from sitestaff.services.statuses.completeness import FieldConfig
from sitestaff.services.statuses.service import EmployeeStatusService

logger = get_logger("sitestaff.scripts.recalculate")


@dataclass
class RecalculationSummary:
    total: int = 0
    complete: int = 0
    promoted: int = 0


async def recalculate(db: AsyncSession) -> RecalculationSummary:
    settings_service = EmployeeSettingsService(db)
    status_service = EmployeeStatusService(db)
    configs: Dict[Optional[int], FieldConfig] = {}

    result = await db.execute(
        select(Employee)
        .options(selectinload(Employee.counterparty_mappings))
        .order_by(Employee.created_at)
    )
    employees = list(result.unique().scalars().all())
    summary = RecalculationSummary(total=len(employees))
    logger.info(f"Recalculating statuses of {summary.total} employees")

    for employee in employees:
        counterparty_id = (
            employee.counterparty_mappings[0].counterparty_id if employee.counterparty_mappings else None
        )
        if counterparty_id not in configs:
            configs[counterparty_id] = await settings_service.get_form_config_for(counterparty_id)

        logger.set_context(employee_id=employee.id)
        outcome = await status_service.recompute_completeness(
            employee, configs[counterparty_id], employee.updated_by or employee.created_by
        )
        if outcome.is_complete:
            summary.complete += 1
        if outcome.plan is not None and not outcome.plan.is_noop:
            summary.promoted += 1
            logger.info(f"{employee.full_name}: {', '.join(outcome.plan.tags)}")

    logger.clear_context()
    logger.info(
        f"Recalculation finished: {summary.promoted} promoted, "
        f"{summary.complete} of {summary.total} complete"
    )
    return summary


async def main() -> None:
    setup_logging(service_name="sitestaff-recalculate")
    async with AsyncSessionLocal() as db:
        await recalculate(db)


if __name__ == "__main__":
    asyncio.run(main())
