"""
Derived read-model helpers for list views and the HR export.
"""

from typing import Any, Iterable, Optional

from sitestaff.services.statuses import names as S

# Highest priority first; the first active one wins
DISPLAY_PRIORITY = (
    S.SECURE_BLOCK,
    S.SECURE_BLOCK_COMPL,
    S.ACTIVE_FIRED,
    S.ACTIVE_FIRED_COMPL,
    S.ACTIVE_INACTIVE,
    S.HR_FIRED_OFF,
    S.HR_EDITED,
)

EXPORT_TRIGGERS = frozenset({
    S.STATUS_NEW,
    S.STATUS_TB_PASSED,
    S.STATUS_PROCESSED,
    S.HR_EDITED,
})


def _name_of(item: Any) -> str:
    if isinstance(item, str):
        return item
    return item.status_name


def resolve_display_status(active: Iterable[Any]) -> Optional[str]:
    """
    Single status name to show for an employee.

    Accepts status names or objects with `status_name` (StatusView,
    EmployeeStatusMapping). Falls back to the main `status` group value.
    """
    names = [_name_of(item) for item in active]
    present = set(names)
    for candidate in DISPLAY_PRIORITY:
        if candidate in present:
            return candidate
    for name in names:
        if S.STATUS_CATALOG.get(name) == S.GROUP_STATUS:
            return name
    return None


def is_pending_export(views: Iterable[Any]) -> bool:
    """True when an active trigger status has not been queued for upload yet."""
    return any(
        view.is_active and not view.is_upload and view.status_name in EXPORT_TRIGGERS
        for view in views
    )
