"""
Read-only access to the seeded status catalog.
"""

import logging
from typing import Dict, Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sitestaff.core.exceptions import NotFoundError, StatusNotFoundError, ValidationError
from sitestaff.models.status import Status
from sitestaff.services.statuses.names import ALL_GROUPS

logger = logging.getLogger("sitestaff.statuses.catalog")


class StatusCatalog:
    """
    Name -> Status lookup over the `statuses` table.

    Rows are immutable reference data, so every lookup is cached for the
    lifetime of the instance (one instance per request/session).
    """

    def __init__(self, db: AsyncSession):
        self.db = db
        self._by_name: Dict[str, Status] = {}

    def clear(self) -> None:
        """Drop cached rows (they expire when the session rolls back)."""
        self._by_name.clear()

    async def get(self, name: str) -> Status:
        return (await self.get_many([name]))[name]

    async def get_many(self, names: Iterable[str]) -> Dict[str, Status]:
        """
        Resolve every name or raise StatusNotFoundError listing all missing ones.
        """
        wanted = list(dict.fromkeys(names))
        missing = [n for n in wanted if n not in self._by_name]
        if missing:
            result = await self.db.execute(select(Status).where(Status.name.in_(missing)))
            for status in result.scalars().all():
                self._by_name[status.name] = status

        unresolved = [n for n in wanted if n not in self._by_name]
        if unresolved:
            logger.error(
                "Status catalog is missing required entries: %s",
                ", ".join(unresolved),
                extra={"operational_incident": True},
            )
            raise StatusNotFoundError(unresolved)

        return {n: self._by_name[n] for n in wanted}

    async def get_by_id(self, status_id: int) -> Status:
        status: Optional[Status] = await self.db.get(Status, status_id)
        if status is None:
            raise NotFoundError(f"Status {status_id} not found", resource="status", resource_id=status_id)
        self._by_name[status.name] = status
        return status

    async def list_all(self) -> List[Status]:
        result = await self.db.execute(select(Status).order_by(Status.group, Status.name))
        return list(result.scalars().all())

    async def list_by_group(self, group: str) -> List[Status]:
        if group not in ALL_GROUPS:
            raise ValidationError(f"Unknown status group: {group}")
        result = await self.db.execute(
            select(Status).where(Status.group == group).order_by(Status.name)
        )
        return list(result.scalars().all())
