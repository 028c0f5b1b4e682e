"""
Create a deal in HubSpot, optionally associating it with an existing contact.

The association is a second request made after the deal exists. A failed
association is reported through the same error handling as the create call;
the created deal is not removed.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx

from flowtasks.hubspot.client import (
    DEALS_PATH,
    Connection,
    HubSpotApi,
    TaskOptions,
    execute_task,
    parse_properties,
    require,
    response_object,
)
from flowtasks.hubspot.errors import HubSpotError, TaskResult

log = logging.getLogger("flowtasks.hubspot.create_deal")

# HubSpot-defined association type for deal -> contact
DEAL_TO_CONTACT_ASSOCIATION_TYPE_ID = 3


@dataclass
class CreateDealInput:
    deal_data: str  # JSON object, e.g. {"dealname": "Enterprise Deal", "amount": "5000"}


@dataclass
class CreateDealOptions(TaskOptions):
    associate_with_contact_id: Optional[str] = None


@dataclass
class CreateDealResult(TaskResult):
    id: Optional[str] = None


async def associate_deal_with_contact(api: HubSpotApi, deal_id: str, contact_id: str) -> None:
    """Link a deal to a contact. Raises HubSpotApiError on a non-success status."""
    path = (
        f"{DEALS_PATH}/{deal_id}/associations/contacts/{contact_id}"
        f"/{DEAL_TO_CONTACT_ASSOCIATION_TYPE_ID}"
    )
    resp = await api.request("PUT", path)
    api.raise_for_status(resp, prefix=f"Failed to associate deal {deal_id} with contact {contact_id}")
    log.info(f"Associated HubSpot deal {deal_id} with contact {contact_id}")


async def create_deal(
    task_input: CreateDealInput,
    connection: Connection,
    options: Optional[CreateDealOptions] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> CreateDealResult:
    """Create a deal from a JSON property bag and return its id."""
    options = options or CreateDealOptions()

    def validate() -> Dict[str, Any]:
        require(task_input.deal_data, "DealData")
        return parse_properties(task_input.deal_data, "DealData")

    async def perform(api: HubSpotApi, properties: Dict[str, Any]) -> CreateDealResult:
        resp = await api.request("POST", DEALS_PATH, json_body={"properties": properties})
        api.raise_for_status(resp)
        body = response_object(resp)
        deal_id = body.get("id")
        if deal_id is None:
            raise HubSpotError("HubSpot did not return a deal id")
        deal_id = str(deal_id)
        log.info(f"Created HubSpot deal {deal_id}")

        contact_id = (options.associate_with_contact_id or "").strip()
        if contact_id:
            await associate_deal_with_contact(api, deal_id, contact_id)

        return CreateDealResult(success=True, id=deal_id)

    return await execute_task(connection, options, CreateDealResult, validate, perform, transport)
