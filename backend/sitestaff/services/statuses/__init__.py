# Status Services Package
# Catalog, completeness, transition planning and persistence of employee statuses

from sitestaff.services.statuses import names
from sitestaff.services.statuses.catalog import StatusCatalog
from sitestaff.services.statuses.completeness import (
    FieldRequirement,
    FieldConfig,
    DEFAULT_FORM_CONFIG,
    parse_field_config,
    missing_fields,
    is_complete,
)
from sitestaff.services.statuses.transitions import (
    StatusSnapshot,
    TransitionPlan,
    TransitionStep,
    StepKind,
)
from sitestaff.services.statuses.store import StatusGroupStore
from sitestaff.services.statuses.service import EmployeeStatusService, CompletenessResult
from sitestaff.services.statuses.batch import BatchStatusReader, StatusView
from sitestaff.services.statuses.display import resolve_display_status, is_pending_export

__all__ = [
    "names",
    # Catalog
    "StatusCatalog",
    # Completeness
    "FieldRequirement",
    "FieldConfig",
    "DEFAULT_FORM_CONFIG",
    "parse_field_config",
    "missing_fields",
    "is_complete",
    # Transitions
    "StatusSnapshot",
    "TransitionPlan",
    "TransitionStep",
    "StepKind",
    "StatusGroupStore",
    "EmployeeStatusService",
    "CompletenessResult",
    # Read models
    "BatchStatusReader",
    "StatusView",
    "resolve_display_status",
    "is_pending_export",
]
