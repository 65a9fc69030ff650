"""
Tests for sitestaff/services/settings/employee_settings_service.py.
"""
import json

import pytest

from sitestaff.core.config import settings
from sitestaff.core.exceptions import ConfigurationError
from sitestaff.services.settings.employee_settings_service import (
    DEFAULT_COUNTERPARTY_KEY,
    FORM_CONFIG_DEFAULT_KEY,
    FORM_CONFIG_EXTERNAL_KEY,
    EmployeeSettingsService,
)
from sitestaff.services.statuses.completeness import DEFAULT_FORM_CONFIG, FieldRequirement

from conftest import CONTRACTOR_A_ID, SHARED_COUNTERPARTY_ID


class TestSharedCounterparty:

    @pytest.mark.asyncio
    async def test_settings_table_value(self, db):
        service = EmployeeSettingsService(db)
        await service.set_value(DEFAULT_COUNTERPARTY_KEY, str(SHARED_COUNTERPARTY_ID))

        assert await service.get_shared_counterparty_id() == SHARED_COUNTERPARTY_ID

    @pytest.mark.asyncio
    async def test_environment_fallback(self, db, monkeypatch):
        monkeypatch.setattr(settings, "DEFAULT_COUNTERPARTY_ID", 42)
        assert await EmployeeSettingsService(db).get_shared_counterparty_id() == 42

    @pytest.mark.asyncio
    async def test_unset_is_configuration_error(self, db, monkeypatch):
        monkeypatch.setattr(settings, "DEFAULT_COUNTERPARTY_ID", None)
        with pytest.raises(ConfigurationError):
            await EmployeeSettingsService(db).get_shared_counterparty_id()

    @pytest.mark.asyncio
    async def test_non_integer_value_is_configuration_error(self, db):
        service = EmployeeSettingsService(db)
        await service.set_value(DEFAULT_COUNTERPARTY_KEY, "pass-office")
        with pytest.raises(ConfigurationError):
            await service.get_shared_counterparty_id()


class TestFormConfig:

    @pytest.mark.asyncio
    async def test_default_when_nothing_stored(self, db):
        service = EmployeeSettingsService(db)
        await service.set_value(DEFAULT_COUNTERPARTY_KEY, str(SHARED_COUNTERPARTY_ID))

        assert await service.get_form_config_for(CONTRACTOR_A_ID) == DEFAULT_FORM_CONFIG
        assert await service.get_form_config_for(SHARED_COUNTERPARTY_ID) == DEFAULT_FORM_CONFIG

    @pytest.mark.asyncio
    async def test_unresolvable_shared_tenant_is_configuration_error(self, db, monkeypatch):
        monkeypatch.setattr(settings, "DEFAULT_COUNTERPARTY_ID", None)
        service = EmployeeSettingsService(db)

        with pytest.raises(ConfigurationError):
            await service.get_form_config_for(SHARED_COUNTERPARTY_ID)
        with pytest.raises(ConfigurationError):
            await service.get_form_config_for(CONTRACTOR_A_ID)

    @pytest.mark.asyncio
    async def test_no_counterparty_uses_default_form(self, db, monkeypatch):
        monkeypatch.setattr(settings, "DEFAULT_COUNTERPARTY_ID", None)
        assert await EmployeeSettingsService(db).get_form_config_for(None) == DEFAULT_FORM_CONFIG

    @pytest.mark.asyncio
    async def test_shared_and_external_forms(self, db):
        service = EmployeeSettingsService(db)
        await service.set_value(DEFAULT_COUNTERPARTY_KEY, str(SHARED_COUNTERPARTY_ID))
        await service.set_value(FORM_CONFIG_DEFAULT_KEY, json.dumps({"inn": {"visible": True, "required": True}}))
        await service.set_value(FORM_CONFIG_EXTERNAL_KEY, json.dumps({"inn": {"visible": True, "required": False}}))

        shared = await service.get_form_config_for(SHARED_COUNTERPARTY_ID)
        external = await service.get_form_config_for(CONTRACTOR_A_ID)

        assert shared == {"inn": FieldRequirement(visible=True, required=True)}
        assert external == {"inn": FieldRequirement(visible=True, required=False)}

    @pytest.mark.asyncio
    async def test_invalid_json_falls_back_to_default(self, db, caplog):
        service = EmployeeSettingsService(db)
        await service.set_value(DEFAULT_COUNTERPARTY_KEY, str(SHARED_COUNTERPARTY_ID))
        await service.set_value(FORM_CONFIG_EXTERNAL_KEY, "{broken")

        assert await service.get_form_config_for(CONTRACTOR_A_ID) == DEFAULT_FORM_CONFIG
        assert FORM_CONFIG_EXTERNAL_KEY in caplog.text
