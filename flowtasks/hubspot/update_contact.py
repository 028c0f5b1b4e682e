"""Update a contact in HubSpot, optionally checking that it exists first."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

import httpx

from flowtasks.hubspot.client import (
    CONTACTS_PATH,
    Connection,
    HubSpotApi,
    TaskOptions,
    execute_task,
    parse_properties,
    require,
    require_numeric_id,
)
from flowtasks.hubspot.errors import ContactNotFoundError, TaskResult

log = logging.getLogger("flowtasks.hubspot.update_contact")


@dataclass
class UpdateContactInput:
    contact_id: str
    update_data: str  # JSON object, e.g. {"lastname": "Doe"}


@dataclass
class UpdateContactOptions(TaskOptions):
    check_if_exists: bool = False


@dataclass
class UpdateContactResult(TaskResult):
    pass


async def contact_exists(api: HubSpotApi, contact_id: str) -> bool:
    """False on 404, True on success, HubSpotApiError on anything else."""
    resp = await api.request("GET", f"{CONTACTS_PATH}/{contact_id}", params={"properties": "id"})
    if resp.status_code == 404:
        return False
    api.raise_for_status(resp)
    return True


async def update_contact(
    task_input: UpdateContactInput,
    connection: Connection,
    options: Optional[UpdateContactOptions] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> UpdateContactResult:
    """Patch a contact's properties."""
    options = options or UpdateContactOptions()

    def validate() -> Tuple[str, Dict[str, Any]]:
        require(task_input.contact_id, "ContactId")
        require(task_input.update_data, "UpdateData")
        contact_id = require_numeric_id(task_input.contact_id)
        return contact_id, parse_properties(task_input.update_data, "UpdateData")

    async def perform(api: HubSpotApi, prepared: Tuple[str, Dict[str, Any]]) -> UpdateContactResult:
        contact_id, properties = prepared
        if options.check_if_exists and not await contact_exists(api, contact_id):
            raise ContactNotFoundError(contact_id)

        resp = await api.request(
            "PATCH",
            f"{CONTACTS_PATH}/{contact_id}",
            json_body={"properties": properties},
        )
        api.raise_for_status(resp)
        log.info(f"Updated HubSpot contact {contact_id}")
        return UpdateContactResult(success=True)

    return await execute_task(connection, options, UpdateContactResult, validate, perform, transport)
