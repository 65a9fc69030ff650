"""
Employee card completeness.

Pure functions of (employee snapshot, field configuration); the caller loads
the tenant's configuration and passes it in.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Union

from sitestaff.core.exceptions import ValidationError
from sitestaff.models.employee import PASSPORT_TYPE_FOREIGN


@dataclass(frozen=True)
class FieldRequirement:
    visible: bool = True
    required: bool = False


FieldConfig = Dict[str, FieldRequirement]


@dataclass(frozen=True)
class EmployeeField:
    key: str
    default_required: bool
    default_visible: bool = True


EMPLOYEE_FIELDS: List[EmployeeField] = [
    # Personal data
    EmployeeField("inn", True),
    EmployeeField("gender", True),
    EmployeeField("last_name", True),
    EmployeeField("first_name", True),
    EmployeeField("middle_name", False),
    EmployeeField("position_id", True),
    EmployeeField("citizenship_id", True),
    EmployeeField("birth_date", True),
    EmployeeField("birth_country_id", True),
    EmployeeField("registration_address", True),
    # Contacts
    EmployeeField("email", False),
    EmployeeField("phone", True),
    # Documents
    EmployeeField("snils", True),
    EmployeeField("passport_type", True),
    EmployeeField("passport_number", True),
    EmployeeField("passport_date", True),
    EmployeeField("passport_issuer", True),
    EmployeeField("passport_expiry_date", False),
    # Permit / foreign citizen card
    EmployeeField("kig", True),
    EmployeeField("kig_end_date", True),
    EmployeeField("patent_number", True),
    EmployeeField("patent_issue_date", True),
    EmployeeField("blank_number", True),
    # Notes
    EmployeeField("notes", False),
]

KNOWN_FIELD_KEYS = frozenset(f.key for f in EMPLOYEE_FIELDS)

# Evaluated only when the citizenship requires a work permit
PERMIT_FIELDS = frozenset({"kig", "kig_end_date", "patent_number", "patent_issue_date", "blank_number"})

# Evaluated only for foreign passports
FOREIGN_PASSPORT_FIELDS = frozenset({"passport_expiry_date"})

DEFAULT_FORM_CONFIG: FieldConfig = {
    f.key: FieldRequirement(visible=f.default_visible, required=f.default_required)
    for f in EMPLOYEE_FIELDS
}

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _to_snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def parse_field_config(raw: Union[str, Mapping[str, Any], None]) -> FieldConfig:
    """
    Build a FieldConfig from the stored JSON representation.

    Accepts JSON text or an already-decoded mapping; keys may be camelCase
    (as edited in the admin UI) or snake_case. Unknown keys are kept so a
    newer UI does not break evaluation.
    """
    if raw is None:
        return dict(DEFAULT_FORM_CONFIG)

    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError as e:
            raise ValidationError(f"Field configuration is not valid JSON: {e}") from e

    if not isinstance(raw, Mapping):
        raise ValidationError("Field configuration must be an object of field -> {visible, required}")

    config: FieldConfig = {}
    for key, entry in raw.items():
        if isinstance(entry, FieldRequirement):
            config[_to_snake(key)] = entry
            continue
        if not isinstance(entry, Mapping):
            raise ValidationError(f"Field configuration entry for '{key}' must be an object")
        config[_to_snake(key)] = FieldRequirement(
            visible=bool(entry.get("visible", True)),
            required=bool(entry.get("required", False)),
        )
    return config


def _read(source: Any, key: str) -> Any:
    if source is None:
        return None
    if isinstance(source, Mapping):
        return source.get(key)
    return getattr(source, key, None)


def _requires_permit(employee: Any) -> bool:
    citizenship = _read(employee, "citizenship")
    return _read(citizenship, "requires_patent") is not False


def _is_filled(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and value.strip() == "":
        return False
    return True


def missing_fields(employee: Any, field_config: Optional[FieldConfig] = None) -> List[str]:
    """
    Keys of required, visible and applicable fields that are not filled.

    `employee` may be an ORM object or a mapping; its `citizenship` may be
    either as well.
    """
    config = DEFAULT_FORM_CONFIG if field_config is None else field_config
    requires_permit = _requires_permit(employee)
    is_foreign_passport = _read(employee, "passport_type") == PASSPORT_TYPE_FOREIGN

    missing = []
    for key, requirement in config.items():
        if not (requirement.visible and requirement.required):
            continue
        if key in PERMIT_FIELDS and not requires_permit:
            continue
        if key in FOREIGN_PASSPORT_FIELDS and not is_foreign_passport:
            continue
        if not _is_filled(_read(employee, key)):
            missing.append(key)
    return missing


def is_complete(employee: Any, field_config: Optional[FieldConfig] = None) -> bool:
    return not missing_fields(employee, field_config)
