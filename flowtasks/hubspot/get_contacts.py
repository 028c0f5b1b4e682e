"""
Retrieve contacts from HubSpot.

Without a filter query this is a plain listing request. With one, the query
is parsed into a single filter and sent to the search endpoint.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from flowtasks.hubspot.client import (
    CONTACTS_PATH,
    Connection,
    HubSpotApi,
    TaskOptions,
    execute_task,
    response_object,
)
from flowtasks.hubspot.errors import TaskResult
from flowtasks.hubspot.filter_parser import ParsedFilter, parse_filter_query, to_search_filter

log = logging.getLogger("flowtasks.hubspot.get_contacts")

SEARCH_PATH = f"{CONTACTS_PATH}/search"


@dataclass
class GetContactsInput:
    filter_query: Optional[str] = None  # e.g. "email eq 'test@example.com'"
    properties: Optional[List[str]] = None
    limit: int = 100
    after: Optional[str] = None  # paging cursor from a previous result


@dataclass
class GetContactsOptions(TaskOptions):
    include_archived: bool = False


@dataclass
class GetContactsResult(TaskResult):
    contacts: Optional[List[Dict[str, Any]]] = None
    has_more: bool = False
    next_page_cursor: Optional[str] = None


def build_search_body(task_input: GetContactsInput, parsed: ParsedFilter) -> Dict[str, Any]:
    body: Dict[str, Any] = {
        "filterGroups": [{"filters": [to_search_filter(parsed)]}],
        "properties": list(task_input.properties or []),
        "limit": task_input.limit,
    }
    if task_input.after and task_input.after.strip():
        body["after"] = task_input.after
    return body


def build_list_params(task_input: GetContactsInput, include_archived: bool) -> Dict[str, str]:
    params = {"archived": "true" if include_archived else "false"}
    if task_input.properties:
        params["properties"] = ",".join(task_input.properties)
    if task_input.limit > 0:
        params["limit"] = str(task_input.limit)
    if task_input.after and task_input.after.strip():
        params["after"] = task_input.after
    return params


async def get_contacts(
    task_input: GetContactsInput,
    connection: Connection,
    options: Optional[GetContactsOptions] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> GetContactsResult:
    """List or search contacts, returning one page and its paging cursor."""
    options = options or GetContactsOptions()

    def validate() -> Optional[ParsedFilter]:
        if task_input.filter_query and task_input.filter_query.strip():
            return parse_filter_query(task_input.filter_query)
        return None

    async def perform(api: HubSpotApi, parsed: Optional[ParsedFilter]) -> GetContactsResult:
        if parsed is not None:
            resp = await api.request("POST", SEARCH_PATH, json_body=build_search_body(task_input, parsed))
        else:
            params = build_list_params(task_input, options.include_archived)
            resp = await api.request("GET", CONTACTS_PATH, params=params)
        api.raise_for_status(resp)

        body = response_object(resp)
        next_after = ((body.get("paging") or {}).get("next") or {}).get("after")
        next_after = str(next_after) if next_after else None
        contacts = body.get("results")
        log.debug(f"Fetched {len(contacts or [])} HubSpot contact(s), more={bool(next_after)}")
        return GetContactsResult(
            success=True,
            contacts=contacts,
            has_more=next_after is not None,
            next_page_cursor=next_after,
        )

    return await execute_task(connection, options, GetContactsResult, validate, perform, transport)
