"""
HubSpot Task Client
===================
Connection settings, the per-call HTTP wrapper and the shared executor that
every HubSpot task runs through:

    execute_task(connection, options, ResultType, validate, perform)
        -> validate connection, then validate() (faults raise immediately)
        -> open httpx.AsyncClient
        -> await perform(api, prepared)
        -> HubSpotError / httpx.HTTPError -> handle_error
"""

import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Type, TypeVar

import httpx

from flowtasks.hubspot.errors import (
    HubSpotApiError,
    HubSpotError,
    R,
    TaskValidationError,
    handle_error,
)

log = logging.getLogger("flowtasks.hubspot.client")

DEFAULT_BASE_URL = "https://api.hubapi.com"
CONTACTS_PATH = "/crm/v3/objects/contacts"
DEALS_PATH = "/crm/v3/objects/deals"

T = TypeVar("T")


@dataclass
class Connection:
    """HubSpot private app token and API location."""

    api_key: str
    base_url: str = DEFAULT_BASE_URL
    timeout: float = 30.0


@dataclass
class TaskOptions:
    throw_error_on_failure: bool = True
    error_message_on_failure: Optional[str] = None


def validate_connection(connection: Connection) -> None:
    if not connection.api_key or not connection.api_key.strip():
        raise TaskValidationError("API Key is required")
    if not connection.base_url or not connection.base_url.strip():
        raise TaskValidationError("Base URL is required")


def require(value: Optional[str], name: str) -> str:
    """Return value, or raise when it is missing or blank."""
    if value is None or not str(value).strip():
        raise TaskValidationError(f"{name} is required")
    return value


def require_numeric_id(contact_id: str) -> str:
    """Contact ids are ASCII digits that fit a signed 64-bit integer."""
    if not (contact_id.isascii() and contact_id.isdigit()) or int(contact_id) > 2**63 - 1:
        raise TaskValidationError(f"Contact ID should be a numeric value: '{contact_id}'.")
    return contact_id


def parse_properties(raw: str, field_name: str) -> Dict[str, Any]:
    """Parse a JSON property bag, keeping key order."""
    try:
        props = json.loads(raw)
    except json.JSONDecodeError as e:
        raise TaskValidationError(f"Invalid JSON format in {field_name}") from e
    if not isinstance(props, dict):
        raise TaskValidationError(f"Invalid JSON format in {field_name}: expected a JSON object")
    return props


def response_json(resp: httpx.Response) -> Optional[Any]:
    try:
        return resp.json()
    except ValueError:
        return None


def response_object(resp: httpx.Response) -> Dict[str, Any]:
    """The decoded body when it is a JSON object, otherwise an empty dict."""
    data = response_json(resp)
    return data if isinstance(data, dict) else {}


def error_detail(resp: httpx.Response) -> str:
    """Pull HubSpot's error text out of a response, falling back to the raw body."""
    data = response_json(resp)
    if isinstance(data, dict):
        if data.get("message"):
            return str(data["message"])
        errors = data.get("errors")
        if isinstance(errors, list) and errors and isinstance(errors[0], dict) and errors[0].get("message"):
            return str(errors[0]["message"])
    return resp.text or "Unknown error"


class HubSpotApi:
    """Bearer-authenticated request helper bound to one open client."""

    def __init__(self, client: httpx.AsyncClient, connection: Connection):
        self._client = client
        self.base_url = connection.base_url.rstrip("/")
        self._headers = {
            "Authorization": f"Bearer {connection.api_key}",
            "Accept": "application/json",
        }

    async def request(
        self,
        method: str,
        path: str,
        json_body: Any = None,
        params: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        kwargs: Dict[str, Any] = {"headers": self._headers}
        if json_body is not None:
            kwargs["json"] = json_body
        if params is not None:
            kwargs["params"] = params

        log.debug(f"{method} {path}")
        return await self._client.request(method, f"{self.base_url}{path}", **kwargs)

    @staticmethod
    def raise_for_status(resp: httpx.Response, prefix: str = "HubSpot API error") -> None:
        if resp.is_success:
            return
        raise HubSpotApiError(resp.status_code, error_detail(resp), resp.text, prefix=prefix)


async def execute_task(
    connection: Connection,
    options: TaskOptions,
    result_type: Type[R],
    validate: Callable[[], T],
    perform: Callable[[HubSpotApi, T], Awaitable[R]],
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> R:
    """Validate, then run perform against a fresh client.

    Faults raised by validate_connection or validate propagate unchanged.
    HubSpotError and httpx.HTTPError raised by perform go through
    handle_error. Cancellation aborts the in-flight request and propagates.
    """
    validate_connection(connection)
    prepared = validate()

    client_kwargs: Dict[str, Any] = {"timeout": connection.timeout}
    if transport is not None:
        client_kwargs["transport"] = transport

    try:
        async with httpx.AsyncClient(**client_kwargs) as client:
            return await perform(HubSpotApi(client, connection), prepared)
    except (HubSpotError, httpx.HTTPError) as e:
        return handle_error(
            e,
            options.throw_error_on_failure,
            options.error_message_on_failure,
            result_type,
        )
