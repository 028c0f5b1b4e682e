"""Create a contact in HubSpot."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from email_validator import EmailNotValidError, validate_email

from flowtasks.hubspot.client import (
    CONTACTS_PATH,
    Connection,
    HubSpotApi,
    TaskOptions,
    execute_task,
    parse_properties,
    require,
    response_object,
)
from flowtasks.hubspot.errors import TaskResult, TaskValidationError

log = logging.getLogger("flowtasks.hubspot.create_contact")


@dataclass
class CreateContactInput:
    contact_data: str  # JSON object, e.g. {"email": "john@example.com", "firstname": "John"}


@dataclass
class CreateContactOptions(TaskOptions):
    validate_email: bool = False


@dataclass
class CreateContactResult(TaskResult):
    contact_id: Optional[str] = None


def is_valid_email(email: str) -> bool:
    """True when email is a bare, well-formed address with a dot after the @."""
    if not email or any(c.isspace() for c in email):
        return False
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    at = email.find("@")
    return "." in email and at > 0 and at < email.rfind(".")


async def create_contact(
    task_input: CreateContactInput,
    connection: Connection,
    options: Optional[CreateContactOptions] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> CreateContactResult:
    """Create a contact from a JSON property bag and return its id."""
    options = options or CreateContactOptions()

    def validate() -> Dict[str, Any]:
        require(task_input.contact_data, "ContactData")
        properties = parse_properties(task_input.contact_data, "ContactData")
        if options.validate_email and properties.get("email") is not None:
            email = str(properties["email"])
            if not is_valid_email(email):
                raise TaskValidationError(f"Invalid email format: {email}")
        return properties

    async def perform(api: HubSpotApi, properties: Dict[str, Any]) -> CreateContactResult:
        resp = await api.request("POST", CONTACTS_PATH, json_body={"properties": properties})
        api.raise_for_status(resp)
        body = response_object(resp)
        contact_id = body.get("id")
        log.info(f"Created HubSpot contact {contact_id}")
        return CreateContactResult(
            success=True,
            contact_id=str(contact_id) if contact_id is not None else None,
        )

    return await execute_task(connection, options, CreateContactResult, validate, perform, transport)
