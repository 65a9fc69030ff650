# Settings Services Package
# Shared tenant and employee form configuration

from sitestaff.services.settings.employee_settings_service import (
    EmployeeSettingsService,
    DEFAULT_COUNTERPARTY_KEY,
    FORM_CONFIG_DEFAULT_KEY,
    FORM_CONFIG_EXTERNAL_KEY,
)

__all__ = [
    "EmployeeSettingsService",
    "DEFAULT_COUNTERPARTY_KEY",
    "FORM_CONFIG_DEFAULT_KEY",
    "FORM_CONFIG_EXTERNAL_KEY",
]
