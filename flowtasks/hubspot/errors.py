"""
HubSpot Task Errors
===================
Fault taxonomy shared by the HubSpot tasks and the mapper that turns a
remote-call fault into either a raised TaskError or a failed result.

Validation faults (TaskValidationError, FilterQueryError) always surface to
the caller. Remote-call faults (HubSpotError and transport errors) go through
handle_error, which honours the task's throw_error_on_failure option.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Type, TypeVar

log = logging.getLogger("flowtasks.hubspot.errors")


class TaskValidationError(ValueError):
    """A required field is missing or malformed."""


class FilterQueryError(TaskValidationError):
    """A filter query does not follow the `property operator value` grammar."""


class HubSpotError(Exception):
    """Base class for faults reported by (or about) the remote API."""


class HubSpotApiError(HubSpotError):
    """Non-success HTTP status returned by HubSpot."""

    def __init__(
        self,
        status_code: int,
        detail: str,
        body: str = "",
        prefix: str = "HubSpot API error",
    ):
        super().__init__(f"{prefix}: {status_code} - {detail}")
        self.status_code = status_code
        self.detail = detail
        self.body = body


class ContactNotFoundError(HubSpotError):
    """An existence probe came back negative."""

    def __init__(self, contact_id: str):
        super().__init__(f"Contact with ID {contact_id} does not exist")
        self.contact_id = contact_id


class TaskError(Exception):
    """Raised by handle_error when the task is configured to throw."""

    def __init__(self, message: str, error: BaseException):
        super().__init__(message)
        self.error = error


@dataclass
class ErrorInfo:
    message: str
    additional_info: Optional[BaseException] = None


@dataclass
class TaskResult:
    success: bool
    error: Optional[ErrorInfo] = None


R = TypeVar("R", bound=TaskResult)


def _effective_message(exc: BaseException, message_on_failure: Optional[str]) -> str:
    if message_on_failure:
        return f"{message_on_failure} {exc}"
    return str(exc)


def handle_error(
    exc: BaseException,
    throw_on_failure: bool,
    message_on_failure: Optional[str] = None,
    result_type: Type[R] = TaskResult,
) -> R:
    """Raise a TaskError chained to exc, or return a failed result_type.

    The message is ``message_on_failure + " " + str(exc)`` when an override is
    given, otherwise ``str(exc)``. The returned result carries only the error;
    all payload fields keep their defaults.
    """
    message = _effective_message(exc, message_on_failure)
    if throw_on_failure:
        log.warning(f"Task failed, raising: {message}")
        raise TaskError(message, exc) from exc

    log.warning(f"Task failed, returning error result: {message}")
    return result_type(success=False, error=ErrorInfo(message=message, additional_info=exc))
