"""
Batch Status Reader.

Read-only fan-out used by list and export views: active statuses for many
employees without one query per employee. Ids are split into chunks, each
chunk is read in its own session (at most max_parallel at a time), and
partial results are merged. A chunk that fails is logged and reported as
"no statuses" for its members.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from sitestaff.core.config import settings
from sitestaff.models.status import EmployeeStatusMapping, Status

logger = logging.getLogger("sitestaff.statuses.batch")

SessionFactory = Callable[[], Any]  # returns an async context manager yielding AsyncSession


@dataclass(frozen=True)
class StatusView:
    mapping_id: str
    employee_id: str
    status_id: int
    status_name: str
    status_group: str
    is_active: bool
    is_upload: bool
    updated_at: Optional[datetime] = None

    @classmethod
    def from_mapping(cls, mapping: EmployeeStatusMapping) -> "StatusView":
        return cls(
            mapping_id=mapping.id,
            employee_id=mapping.employee_id,
            status_id=mapping.status_id,
            status_name=mapping.status.name,
            status_group=mapping.status_group,
            is_active=mapping.is_active,
            is_upload=mapping.is_upload,
            updated_at=mapping.updated_at,
        )


def chunked(items: Sequence[str], size: int) -> List[Sequence[str]]:
    return [items[i:i + size] for i in range(0, len(items), size)]


class BatchStatusReader:
    def __init__(
        self,
        session_factory: SessionFactory,
        chunk_size: Optional[int] = None,
        max_parallel: Optional[int] = None,
    ):
        self.session_factory = session_factory
        self.chunk_size = chunk_size or settings.STATUS_BATCH_CHUNK_SIZE
        self.max_parallel = max_parallel or settings.STATUS_BATCH_MAX_PARALLEL

    async def _read_chunk(self, session: AsyncSession, employee_ids: Sequence[str]) -> List[StatusView]:
        result = await session.execute(
            select(
                EmployeeStatusMapping.id,
                EmployeeStatusMapping.employee_id,
                EmployeeStatusMapping.status_id,
                Status.name,
                EmployeeStatusMapping.status_group,
                EmployeeStatusMapping.is_active,
                EmployeeStatusMapping.is_upload,
                EmployeeStatusMapping.updated_at,
            )
            .join(Status, Status.id == EmployeeStatusMapping.status_id)
            .where(
                EmployeeStatusMapping.employee_id.in_(list(employee_ids)),
                EmployeeStatusMapping.is_active.is_(True),
            )
            .order_by(EmployeeStatusMapping.employee_id, EmployeeStatusMapping.status_group)
        )
        return [StatusView(*row) for row in result.all()]

    async def _load_chunk(
        self,
        index: int,
        employee_ids: Sequence[str],
        limiter: asyncio.Semaphore,
    ) -> List[StatusView]:
        try:
            async with limiter:
                async with self.session_factory() as session:
                    return await self._read_chunk(session, employee_ids)
        except (SQLAlchemyError, OSError) as e:
            logger.warning(
                f"Status batch chunk {index} ({len(employee_ids)} employees) failed, "
                f"reporting no statuses for it: {e}"
            )
            return []

    async def get_batch(self, employee_ids: Iterable[str]) -> Dict[str, List[StatusView]]:
        """
        Active statuses grouped by employee id. Every requested id is present
        in the result, with an empty list when nothing was found.
        """
        ids = list(dict.fromkeys(employee_ids))
        grouped: Dict[str, List[StatusView]] = {employee_id: [] for employee_id in ids}
        if not ids:
            return grouped

        chunks = chunked(ids, self.chunk_size)
        # Bounds open sessions; the pool would otherwise time out later chunks
        limiter = asyncio.Semaphore(self.max_parallel)
        results = await asyncio.gather(
            *(self._load_chunk(index, chunk, limiter) for index, chunk in enumerate(chunks))
        )
        for views in results:
            for view in views:
                grouped[view.employee_id].append(view)

        logger.debug(f"Loaded statuses for {len(ids)} employees in {len(chunks)} chunk(s)")
        return grouped
