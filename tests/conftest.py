"""Shared fixtures: an in-memory HubSpot served through httpx.MockTransport."""

import json
import re
from typing import Any, Dict, List, Optional, Tuple

import httpx
import pytest

from flowtasks.hubspot.client import Connection

BASE_URL = "https://api.hubapi.test"


def _error(status: int, message: str) -> httpx.Response:
    return httpx.Response(status, json={"status": "error", "message": message})


class FakeHubSpot:
    """Just enough of the CRM v3 contacts/deals API for the tasks."""

    def __init__(self):
        self.contacts: Dict[str, Dict[str, Any]] = {}
        self.deals: Dict[str, Dict[str, Any]] = {}
        self.associations: List[Tuple[str, str, str]] = []
        self.requests: List[httpx.Request] = []
        self.overrides: Dict[Tuple[str, str], httpx.Response] = {}
        self._next_id = 1001

    # -- helpers -------------------------------------------------------------

    def add_contact(self, **properties) -> str:
        cid = str(self._next_id)
        self._next_id += 1
        self.contacts[cid] = dict(properties)
        return cid

    def fail(self, method: str, path: str, status: int, body: Any = None, text: Optional[str] = None):
        if text is not None:
            self.overrides[(method, path)] = httpx.Response(status, text=text)
        else:
            self.overrides[(method, path)] = httpx.Response(status, json=body if body is not None else {})

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls(self) -> List[Tuple[str, str]]:
        return [(r.method, r.url.path) for r in self.requests]

    def body(self, index: int = -1) -> Any:
        return json.loads(self.requests[index].content)

    # -- routing -------------------------------------------------------------

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method, path = request.method, request.url.path

        if (method, path) in self.overrides:
            return self.overrides[(method, path)]

        if path == "/crm/v3/objects/contacts":
            if method == "POST":
                cid = self.add_contact(**json.loads(request.content)["properties"])
                return httpx.Response(201, json={"id": cid, "properties": self.contacts[cid]})
            if method == "GET":
                return self._list_contacts(request)

        if path == "/crm/v3/objects/contacts/search" and method == "POST":
            results = [{"id": cid, "properties": props} for cid, props in self.contacts.items()]
            return httpx.Response(200, json={"total": len(results), "results": results})

        if path == "/crm/v3/objects/contacts/gdpr-delete" and method == "POST":
            return self._gdpr_delete(json.loads(request.content))

        m = re.fullmatch(r"/crm/v3/objects/contacts/(\d+)", path)
        if m:
            return self._contact(method, m.group(1), request)

        if path == "/crm/v3/objects/deals" and method == "POST":
            did = str(self._next_id)
            self._next_id += 1
            self.deals[did] = json.loads(request.content)["properties"]
            return httpx.Response(201, json={"id": did, "properties": self.deals[did]})

        m = re.fullmatch(r"/crm/v3/objects/deals/(\d+)/associations/contacts/(\d+)/(\w+)", path)
        if m and method == "PUT":
            deal_id, contact_id, type_id = m.groups()
            if contact_id not in self.contacts:
                return _error(400, f"No contact with ID {contact_id}")
            self.associations.append((deal_id, contact_id, type_id))
            return httpx.Response(200, json={"id": deal_id})

        return _error(404, f"No route for {method} {path}")

    def _list_contacts(self, request: httpx.Request) -> httpx.Response:
        limit = int(request.url.params.get("limit", "100"))
        after = int(request.url.params.get("after", "0"))
        items = [{"id": cid, "properties": props} for cid, props in self.contacts.items()]
        page = items[after:after + limit]
        body: Dict[str, Any] = {"results": page}
        if after + limit < len(items):
            body["paging"] = {"next": {"after": str(after + limit)}}
        return httpx.Response(200, json=body)

    def _contact(self, method: str, cid: str, request: httpx.Request) -> httpx.Response:
        if cid not in self.contacts:
            return _error(404, f"Contact {cid} not found")
        if method == "GET":
            wanted = request.url.params.get("properties")
            props = self.contacts[cid]
            if wanted:
                props = {k: v for k, v in props.items() if k in wanted.split(",")}
            return httpx.Response(200, json={"id": cid, "properties": props})
        if method == "PATCH":
            self.contacts[cid].update(json.loads(request.content)["properties"])
            return httpx.Response(200, json={"id": cid, "properties": self.contacts[cid]})
        if method == "DELETE":
            del self.contacts[cid]
            return httpx.Response(204)
        return _error(405, "Method not allowed")

    def _gdpr_delete(self, body: Dict[str, Any]) -> httpx.Response:
        if body["idProperty"] == "email":
            for cid, props in list(self.contacts.items()):
                if props.get("email") == body["objectId"]:
                    del self.contacts[cid]
                    return httpx.Response(204)
            return _error(404, "Contact not found")
        if body["objectId"] in self.contacts:
            del self.contacts[body["objectId"]]
            return httpx.Response(204)
        return _error(404, "Contact not found")


@pytest.fixture
def hubspot() -> FakeHubSpot:
    return FakeHubSpot()


@pytest.fixture
def connection() -> Connection:
    return Connection(api_key="test-token", base_url=BASE_URL + "/")
