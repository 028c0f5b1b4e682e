"""
Delete a contact in HubSpot.

Soft delete archives the contact. Hard delete goes through the GDPR erase
endpoint, first by id and, if that is refused, by the contact's email. A
contact that cannot be found is treated as already deleted.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx

from flowtasks.hubspot.client import (
    CONTACTS_PATH,
    Connection,
    HubSpotApi,
    TaskOptions,
    execute_task,
    require,
    require_numeric_id,
    response_object,
)
from flowtasks.hubspot.errors import TaskResult

log = logging.getLogger("flowtasks.hubspot.delete_contact")

GDPR_DELETE_PATH = f"{CONTACTS_PATH}/gdpr-delete"


@dataclass
class DeleteContactInput:
    contact_id: str


@dataclass
class DeleteContactOptions(TaskOptions):
    hard_delete: bool = False


@dataclass
class DeleteContactResult(TaskResult):
    pass


async def get_contact_email(api: HubSpotApi, contact_id: str) -> Optional[str]:
    """Return the contact's email, or None if it cannot be read."""
    resp = await api.request("GET", f"{CONTACTS_PATH}/{contact_id}", params={"properties": "email"})
    if not resp.is_success:
        return None
    body = response_object(resp)
    email = (body.get("properties") or {}).get("email")
    return str(email) if email else None


async def _gdpr_delete(api: HubSpotApi, id_property: str, object_id: str) -> httpx.Response:
    return await api.request(
        "POST",
        GDPR_DELETE_PATH,
        json_body={"idProperty": id_property, "objectId": object_id},
    )


async def delete_contact(
    task_input: DeleteContactInput,
    connection: Connection,
    options: Optional[DeleteContactOptions] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> DeleteContactResult:
    """Delete a contact by id. Deleting a missing contact succeeds."""
    options = options or DeleteContactOptions()

    def validate() -> str:
        require(task_input.contact_id, "ContactId")
        return require_numeric_id(task_input.contact_id)

    async def perform(api: HubSpotApi, contact_id: str) -> DeleteContactResult:
        if options.hard_delete:
            resp = await _gdpr_delete(api, "id", contact_id)
            if not resp.is_success:
                log.debug(f"GDPR delete by id refused ({resp.status_code}), retrying by email")
                email = await get_contact_email(api, contact_id)
                if not email:
                    log.info(f"HubSpot contact {contact_id} not found, treating as deleted")
                    return DeleteContactResult(success=True)
                resp = await _gdpr_delete(api, "email", email)
        else:
            resp = await api.request("DELETE", f"{CONTACTS_PATH}/{contact_id}")

        if resp.status_code == 404:
            log.info(f"HubSpot contact {contact_id} not found, treating as deleted")
            return DeleteContactResult(success=True)

        api.raise_for_status(resp)
        log.info(f"Deleted HubSpot contact {contact_id} (hard_delete={options.hard_delete})")
        return DeleteContactResult(success=True)

    return await execute_task(connection, options, DeleteContactResult, validate, perform, transport)
