"""Tests for HubSpot task registration."""

import inspect
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from flowtasks.hubspot.errors import TaskValidationError


class TestRegistration:
    def test_register_all_5(self):
        from flowtasks.hubspot.registry import register_hubspot_tasks
        mock_reg = MagicMock()
        register_hubspot_tasks(mock_reg)
        assert mock_reg.register.call_count == 5

    def test_schemas_complete(self):
        from flowtasks.hubspot.registry import _SCHEMAS
        for name, schema in _SCHEMAS.items():
            assert schema["parameters"]["type"] == "object"
            assert "description" in schema
            assert schema["name"] == name
            assert "api_key" in schema["parameters"]["required"]
            assert set(schema["parameters"]["required"]) <= set(schema["parameters"]["properties"])

    def test_handlers_match_schemas(self):
        from flowtasks.hubspot.registry import _HANDLERS, _SCHEMAS
        assert set(_HANDLERS.keys()) == set(_SCHEMAS.keys())

    def test_schema_properties_match_handler_signatures(self):
        from flowtasks.hubspot.registry import _HANDLERS, _SCHEMAS
        for name, handler in _HANDLERS.items():
            assert inspect.iscoroutinefunction(handler), f"{name} is not async"
            params = set(inspect.signature(handler).parameters)
            assert params == set(_SCHEMAS[name]["parameters"]["properties"]), name


class TestHandlers:
    @pytest.mark.asyncio
    async def test_flat_arguments_are_bound(self):
        import flowtasks.hubspot.registry as mod

        with patch.object(mod, "update_contact", new=AsyncMock(return_value="ok")) as task:
            result = await mod.hubspot_update_contact(
                api_key="k",
                contact_id="12",
                update_data='{"phone": "1"}',
                check_if_exists=True,
                throw_error_on_failure=False,
                error_message_on_failure="nope",
            )

        assert result == "ok"
        task_input, connection, options = task.await_args.args
        assert (task_input.contact_id, task_input.update_data) == ("12", '{"phone": "1"}')
        assert connection.api_key == "k"
        assert connection.base_url == "https://api.hubapi.com"
        assert options.check_if_exists is True
        assert options.throw_error_on_failure is False
        assert options.error_message_on_failure == "nope"

    @pytest.mark.asyncio
    async def test_validation_surfaces(self):
        from flowtasks.hubspot.registry import hubspot_get_contacts
        with pytest.raises(TaskValidationError, match="API Key is required"):
            await hubspot_get_contacts(api_key="")
