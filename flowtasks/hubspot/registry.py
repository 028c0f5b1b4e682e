"""
HubSpot Tasks
=============
Workflow task entry points for HubSpot CRM: create/update/delete/get contacts
and create deals. Each handler takes flat keyword arguments, builds the task's
input, connection and options, and returns the task's result object.

Install: pip install flowtasks-hubspot
Auto-discovered via the ``flowtasks.tasks`` entry point.
"""

import logging
from typing import Any, Dict, List, Optional

from flowtasks.hubspot.client import DEFAULT_BASE_URL, Connection
from flowtasks.hubspot.create_contact import (
    CreateContactInput,
    CreateContactOptions,
    CreateContactResult,
    create_contact,
)
from flowtasks.hubspot.create_deal import (
    CreateDealInput,
    CreateDealOptions,
    CreateDealResult,
    create_deal,
)
from flowtasks.hubspot.delete_contact import (
    DeleteContactInput,
    DeleteContactOptions,
    DeleteContactResult,
    delete_contact,
)
from flowtasks.hubspot.get_contacts import (
    GetContactsInput,
    GetContactsOptions,
    GetContactsResult,
    get_contacts,
)
from flowtasks.hubspot.update_contact import (
    UpdateContactInput,
    UpdateContactOptions,
    UpdateContactResult,
    update_contact,
)

log = logging.getLogger("flowtasks.hubspot.registry")


# ---------------------------------------------------------------------------
# Task 1: hubspot_create_contact
# ---------------------------------------------------------------------------
async def hubspot_create_contact(
    api_key: str,
    contact_data: str,
    base_url: str = DEFAULT_BASE_URL,
    validate_email: bool = False,
    throw_error_on_failure: bool = True,
    error_message_on_failure: Optional[str] = None,
) -> CreateContactResult:
    """Create a contact. contact_data is a JSON string like {\"email\":\"a@b.com\"}."""
    return await create_contact(
        CreateContactInput(contact_data=contact_data),
        Connection(api_key=api_key, base_url=base_url),
        CreateContactOptions(
            validate_email=validate_email,
            throw_error_on_failure=throw_error_on_failure,
            error_message_on_failure=error_message_on_failure,
        ),
    )


# ---------------------------------------------------------------------------
# Task 2: hubspot_create_deal
# ---------------------------------------------------------------------------
async def hubspot_create_deal(
    api_key: str,
    deal_data: str,
    base_url: str = DEFAULT_BASE_URL,
    associate_with_contact_id: Optional[str] = None,
    throw_error_on_failure: bool = True,
    error_message_on_failure: Optional[str] = None,
) -> CreateDealResult:
    """Create a deal, optionally associated with a contact."""
    return await create_deal(
        CreateDealInput(deal_data=deal_data),
        Connection(api_key=api_key, base_url=base_url),
        CreateDealOptions(
            associate_with_contact_id=associate_with_contact_id,
            throw_error_on_failure=throw_error_on_failure,
            error_message_on_failure=error_message_on_failure,
        ),
    )


# ---------------------------------------------------------------------------
# Task 3: hubspot_delete_contact
# ---------------------------------------------------------------------------
async def hubspot_delete_contact(
    api_key: str,
    contact_id: str,
    base_url: str = DEFAULT_BASE_URL,
    hard_delete: bool = False,
    throw_error_on_failure: bool = True,
    error_message_on_failure: Optional[str] = None,
) -> DeleteContactResult:
    """Delete a contact by ID."""
    return await delete_contact(
        DeleteContactInput(contact_id=contact_id),
        Connection(api_key=api_key, base_url=base_url),
        DeleteContactOptions(
            hard_delete=hard_delete,
            throw_error_on_failure=throw_error_on_failure,
            error_message_on_failure=error_message_on_failure,
        ),
    )


# ---------------------------------------------------------------------------
# Task 4: hubspot_get_contacts
# ---------------------------------------------------------------------------
async def hubspot_get_contacts(
    api_key: str,
    base_url: str = DEFAULT_BASE_URL,
    filter_query: Optional[str] = None,
    properties: Optional[List[str]] = None,
    limit: int = 100,
    after: Optional[str] = None,
    include_archived: bool = False,
    throw_error_on_failure: bool = True,
    error_message_on_failure: Optional[str] = None,
) -> GetContactsResult:
    """List contacts, or search them with a filter query."""
    return await get_contacts(
        GetContactsInput(filter_query=filter_query, properties=properties, limit=limit, after=after),
        Connection(api_key=api_key, base_url=base_url),
        GetContactsOptions(
            include_archived=include_archived,
            throw_error_on_failure=throw_error_on_failure,
            error_message_on_failure=error_message_on_failure,
        ),
    )


# ---------------------------------------------------------------------------
# Task 5: hubspot_update_contact
# ---------------------------------------------------------------------------
async def hubspot_update_contact(
    api_key: str,
    contact_id: str,
    update_data: str,
    base_url: str = DEFAULT_BASE_URL,
    check_if_exists: bool = False,
    throw_error_on_failure: bool = True,
    error_message_on_failure: Optional[str] = None,
) -> UpdateContactResult:
    """Update a contact by ID. update_data is a JSON string of fields to update."""
    return await update_contact(
        UpdateContactInput(contact_id=contact_id, update_data=update_data),
        Connection(api_key=api_key, base_url=base_url),
        UpdateContactOptions(
            check_if_exists=check_if_exists,
            throw_error_on_failure=throw_error_on_failure,
            error_message_on_failure=error_message_on_failure,
        ),
    )


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------

_CONNECTION_PROPS: Dict[str, Any] = {
    "api_key": {"type": "string", "description": "HubSpot private app access token"},
    "base_url": {"type": "string", "description": "API base URL (default https://api.hubapi.com)"},
}

_ERROR_PROPS: Dict[str, Any] = {
    "throw_error_on_failure": {"type": "boolean", "description": "Raise on failure instead of returning an error result (default true)"},
    "error_message_on_failure": {"type": "string", "description": "Text prepended to the error message on failure"},
}

_SCHEMAS = {
    "hubspot_create_contact": {
        "name": "hubspot_create_contact",
        "description": "Create a new HubSpot contact from a JSON string of properties.",
        "parameters": {
            "type": "object",
            "properties": {
                **_CONNECTION_PROPS,
                "contact_data": {"type": "string", "description": "JSON string of contact properties (e.g. {\"email\":\"john@example.com\",\"firstname\":\"John\"})"},
                "validate_email": {"type": "boolean", "description": "Validate the email property before sending"},
                **_ERROR_PROPS,
            },
            "required": ["api_key", "contact_data"],
        },
    },
    "hubspot_create_deal": {
        "name": "hubspot_create_deal",
        "description": "Create a new HubSpot deal, optionally associated with a contact.",
        "parameters": {
            "type": "object",
            "properties": {
                **_CONNECTION_PROPS,
                "deal_data": {"type": "string", "description": "JSON string of deal properties (e.g. {\"dealname\":\"Big Deal\",\"amount\":\"50000\"})"},
                "associate_with_contact_id": {"type": "string", "description": "Contact ID to associate the deal with"},
                **_ERROR_PROPS,
            },
            "required": ["api_key", "deal_data"],
        },
    },
    "hubspot_delete_contact": {
        "name": "hubspot_delete_contact",
        "description": "Delete a HubSpot contact by ID. Deleting a missing contact succeeds.",
        "parameters": {
            "type": "object",
            "properties": {
                **_CONNECTION_PROPS,
                "contact_id": {"type": "string", "description": "Numeric contact ID"},
                "hard_delete": {"type": "boolean", "description": "Permanently erase the contact (GDPR delete)"},
                **_ERROR_PROPS,
            },
            "required": ["api_key", "contact_id"],
        },
    },
    "hubspot_get_contacts": {
        "name": "hubspot_get_contacts",
        "description": "List HubSpot contacts, or search them with a filter like \"email eq 'a@b.com'\".",
        "parameters": {
            "type": "object",
            "properties": {
                **_CONNECTION_PROPS,
                "filter_query": {"type": "string", "description": "Filter expression: property operator value (eq, ne, gt, lt, gte, lte, between, in, not_in, has_property, not_has_property, contains, not_contains_token)"},
                "properties": {"type": "array", "items": {"type": "string"}, "description": "Contact properties to return"},
                "limit": {"type": "integer", "description": "Max results (default 100)"},
                "after": {"type": "string", "description": "Paging cursor from a previous call"},
                "include_archived": {"type": "boolean", "description": "Include archived contacts (listing only)"},
                **_ERROR_PROPS,
            },
            "required": ["api_key"],
        },
    },
    "hubspot_update_contact": {
        "name": "hubspot_update_contact",
        "description": "Update an existing HubSpot contact by ID.",
        "parameters": {
            "type": "object",
            "properties": {
                **_CONNECTION_PROPS,
                "contact_id": {"type": "string", "description": "Numeric contact ID"},
                "update_data": {"type": "string", "description": "JSON string of properties to update"},
                "check_if_exists": {"type": "boolean", "description": "Check that the contact exists before updating"},
                **_ERROR_PROPS,
            },
            "required": ["api_key", "contact_id", "update_data"],
        },
    },
}

# Map names to functions
_HANDLERS = {
    "hubspot_create_contact": hubspot_create_contact,
    "hubspot_create_deal": hubspot_create_deal,
    "hubspot_delete_contact": hubspot_delete_contact,
    "hubspot_get_contacts": hubspot_get_contacts,
    "hubspot_update_contact": hubspot_update_contact,
}


# ---------------------------------------------------------------------------
# Registration
# ---------------------------------------------------------------------------

def register_hubspot_tasks(registry):
    """Register all HubSpot tasks with a task registry."""
    for name, handler in _HANDLERS.items():
        registry.register(name, handler, _SCHEMAS[name])
    log.debug(f"Registered {len(_HANDLERS)} HubSpot tasks")
