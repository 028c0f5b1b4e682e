"""
Filter Query Parser
===================
Turns a compact filter expression into one HubSpot search filter.

Grammar: ``property operator [value[,value...]]``. The operator keyword is
case-insensitive. The value part may be wrapped in single or double quotes;
one quote character is stripped from each end.

    email eq 'john@example.com'
    age gt 25
    price between 100,500
    lifecyclestage in lead,customer
    phone has_property
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from flowtasks.hubspot.errors import FilterQueryError

log = logging.getLogger("flowtasks.hubspot.filter_parser")

_OPERATORS: Dict[str, str] = {
    "eq": "EQ",
    "ne": "NEQ",
    "neq": "NEQ",
    "gt": "GT",
    "lt": "LT",
    "gte": "GTE",
    "lte": "LTE",
    "between": "BETWEEN",
    "in": "IN",
    "not_in": "NOT_IN",
    "has_property": "HAS_PROPERTY",
    "not_has_property": "NOT_HAS_PROPERTY",
    "contains": "CONTAINS_TOKEN",
    "contains_token": "CONTAINS_TOKEN",
    "not_contains_token": "NOT_CONTAINS_TOKEN",
}

NO_VALUE_OPERATORS = frozenset({"HAS_PROPERTY", "NOT_HAS_PROPERTY"})
RANGE_OPERATORS = frozenset({"BETWEEN"})
MULTI_VALUE_OPERATORS = frozenset({"IN", "NOT_IN"})

_USAGE = (
    "Invalid filter format. Use: 'property operator \"value\"' for value-based "
    "operators, or 'property has_property'."
)


@dataclass(frozen=True)
class ParsedFilter:
    property_name: str
    operator: str
    value: Optional[str] = None
    high_value: Optional[str] = None
    values: Optional[Tuple[str, ...]] = None


def _strip_quotes(text: str) -> str:
    if text[:1] in ("'", '"'):
        text = text[1:]
    if text[-1:] in ("'", '"'):
        text = text[:-1]
    return text


def parse_filter_query(filter_query: Optional[str]) -> ParsedFilter:
    """Parse a filter expression, raising FilterQueryError when it is malformed."""
    if filter_query is None or not filter_query.strip():
        raise FilterQueryError("Filter query cannot be null or whitespace.")

    parts = filter_query.split()
    if len(parts) < 2:
        raise FilterQueryError(_USAGE)

    property_name, keyword = parts[0], parts[1]
    op = _OPERATORS.get(keyword.lower())
    if op is None:
        raise FilterQueryError(f"Unsupported operator: {keyword}")

    value_part = _strip_quotes(" ".join(parts[2:]))

    if op in MULTI_VALUE_OPERATORS:
        values = tuple(v.strip() for v in value_part.split(",") if v.strip())
        if not values:
            raise FilterQueryError(
                "IN/NOT_IN operators require at least one non-empty comma-separated value."
            )
        parsed = ParsedFilter(property_name, op, values=values)
    elif op in RANGE_OPERATORS:
        bounds = [b.strip() for b in value_part.split(",")]
        if len(bounds) != 2 or not bounds[0] or not bounds[1]:
            raise FilterQueryError(
                "BETWEEN operator requires two non-empty comma-separated values."
            )
        parsed = ParsedFilter(property_name, op, value=bounds[0], high_value=bounds[1])
    elif op in NO_VALUE_OPERATORS:
        if value_part.strip():
            raise FilterQueryError(f"{op} does not accept a value.")
        parsed = ParsedFilter(property_name, op)
    else:
        if not value_part.strip():
            raise FilterQueryError(f"{op} operator requires a value.")
        parsed = ParsedFilter(property_name, op, value=value_part)

    log.debug(f"Parsed filter query {filter_query!r} as {parsed}")
    return parsed


def to_search_filter(parsed: ParsedFilter) -> Dict[str, Any]:
    """Build the filter object used inside a search request's filterGroups."""
    search_filter: Dict[str, Any] = {
        "propertyName": parsed.property_name,
        "operator": parsed.operator,
    }
    if parsed.operator in MULTI_VALUE_OPERATORS:
        search_filter["values"] = list(parsed.values or [])
    elif parsed.operator in RANGE_OPERATORS:
        search_filter["value"] = parsed.value
        search_filter["highValue"] = parsed.high_value
    elif parsed.operator not in NO_VALUE_OPERATORS:
        search_filter["value"] = parsed.value
    return search_filter
