"""
Settings consumed by the status engine: the shared tenant id and the
per-tenant employee form configuration.
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from sitestaff.core.config import settings
from sitestaff.core.exceptions import ConfigurationError, ValidationError
from sitestaff.models.setting import Setting
from sitestaff.services.statuses.completeness import DEFAULT_FORM_CONFIG, FieldConfig, parse_field_config

logger = logging.getLogger("sitestaff.settings")

DEFAULT_COUNTERPARTY_KEY = "default_counterparty_id"
FORM_CONFIG_DEFAULT_KEY = "employee_form_config_default"
FORM_CONFIG_EXTERNAL_KEY = "employee_form_config_external"


class EmployeeSettingsService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_value(self, key: str) -> Optional[str]:
        result = await self.db.execute(select(Setting.value).where(Setting.key == key))
        return result.scalar_one_or_none()

    async def set_value(self, key: str, value: str, description: Optional[str] = None) -> Setting:
        result = await self.db.execute(select(Setting).where(Setting.key == key))
        row = result.scalar_one_or_none()
        if row is None:
            row = Setting(key=key, value=value, description=description)
            self.db.add(row)
        else:
            row.value = value
            if description is not None:
                row.description = description
        await self.db.commit()
        return row

    async def get_shared_counterparty_id(self) -> int:
        """
        Id of the shared (back-office) tenant. The settings table wins over
        the DEFAULT_COUNTERPARTY_ID environment value.
        """
        raw = await self.get_value(DEFAULT_COUNTERPARTY_KEY)
        if raw is not None and raw.strip():
            try:
                return int(raw)
            except ValueError:
                logger.error(
                    f"Setting {DEFAULT_COUNTERPARTY_KEY} is not an integer: {raw!r}",
                    extra={"operational_incident": True},
                )
                raise ConfigurationError(f"Invalid {DEFAULT_COUNTERPARTY_KEY} setting")

        if settings.DEFAULT_COUNTERPARTY_ID is not None:
            return settings.DEFAULT_COUNTERPARTY_ID

        logger.error("Shared counterparty is not configured", extra={"operational_incident": True})
        raise ConfigurationError("Shared counterparty is not configured")

    async def get_form_config_for(self, counterparty_id: Optional[int]) -> FieldConfig:
        """
        Field configuration for employees of a tenant: the shared tenant uses
        the default form, every other tenant the external one. Missing or
        invalid values fall back to the built-in default form. An unresolvable
        shared tenant raises ConfigurationError.
        """
        is_external = (
            counterparty_id is not None
            and counterparty_id != await self.get_shared_counterparty_id()
        )
        key = FORM_CONFIG_EXTERNAL_KEY if is_external else FORM_CONFIG_DEFAULT_KEY

        raw = await self.get_value(key)
        if raw is None:
            return dict(DEFAULT_FORM_CONFIG)
        try:
            return parse_field_config(raw)
        except ValidationError as e:
            logger.warning(f"Ignoring invalid {key} setting, using the default form: {e}")
            return dict(DEFAULT_FORM_CONFIG)
