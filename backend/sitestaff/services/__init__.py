# Services Package
# Re-exports of the personnel status services

# Status Services
from sitestaff.services.statuses import (
    StatusCatalog,
    StatusGroupStore,
    EmployeeStatusService,
    BatchStatusReader,
    resolve_display_status,
    is_pending_export,
)

# Access Services
from sitestaff.services.access import AccessControlGate, AccessOperation

# Settings Services
from sitestaff.services.settings import EmployeeSettingsService

__all__ = [
    # Statuses
    "StatusCatalog",
    "StatusGroupStore",
    "EmployeeStatusService",
    "BatchStatusReader",
    "resolve_display_status",
    "is_pending_export",
    # Access
    "AccessControlGate",
    "AccessOperation",
    # Settings
    "EmployeeSettingsService",
]
