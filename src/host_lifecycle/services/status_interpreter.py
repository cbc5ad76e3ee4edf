"""Host status history interpretation.

Turns the raw body of a Teletraan host status response into an answer about
the host. Teletraan purges terminated hosts instead of marking them, so an
empty history counts as terminated. Anything that cannot be read counts as
"not confirmed": callers use these answers to go ahead with destructive
follow-up work and must not do so on ambiguous data.

The boolean checks look at different parts of the payload on purpose:
``is_host_terminated`` only looks at whether there is any record, while
``is_host_terminated_or_pending_termination`` reads the newest record's
``pendingTerminate`` flag.
"""

from __future__ import annotations

from typing import Any

from pydantic import TypeAdapter, ValidationError

from host_lifecycle.models import HostStatusCheck, HostStatusRecord, StatusVerdict
from host_lifecycle.observability import get_logger

logger = get_logger(__name__)

StatusHistory = list[Any]

_history_adapter = TypeAdapter(StatusHistory)


def parse_status_history(body: str | bytes) -> StatusHistory:
    """Parse a status history response body.

    Records are returned as sent, newest first; they are not validated here.

    Raises:
        ValidationError: If the body is not a JSON array
    """
    return _history_adapter.validate_json(body)


def most_recent_status(history: StatusHistory) -> HostStatusRecord:
    """Validate and return the newest record of a non-empty history."""
    return HostStatusRecord.model_validate(history[0])


def is_host_terminated(body: str | bytes) -> bool:
    """Check whether a status history says the host is gone.

    Only emptiness matters; record contents are not inspected.
    """
    try:
        history = parse_status_history(body)
    except ValidationError as e:
        logger.error("Error in parsing host status", error=str(e))
        return False

    return len(history) == 0


def is_host_terminated_or_pending_termination(body: str | bytes) -> bool:
    """Check whether a host is gone or marked for termination.

    Returns the newest record's ``pendingTerminate`` flag as is. Older
    records are ignored, even when malformed.
    """
    try:
        history = parse_status_history(body)
        if not history:
            return True
        return most_recent_status(history).pending_terminate
    except ValidationError as e:
        logger.error("Error in parsing host status", error=str(e))
        return False


def interpret_status_history(host_name: str, body: str | bytes) -> HostStatusCheck:
    """Collapse a status history into a single verdict.

    Args:
        host_name: Host the history belongs to
        body: Raw response body

    Returns:
        A confirmed HostStatusCheck, or an unknown one if the body
        could not be read
    """
    try:
        history = parse_status_history(body)
        if not history:
            return HostStatusCheck.confirmed(host_name, StatusVerdict.TERMINATED)

        if most_recent_status(history).pending_terminate:
            return HostStatusCheck.confirmed(host_name, StatusVerdict.PENDING_TERMINATION)

        return HostStatusCheck.confirmed(host_name, StatusVerdict.PRESENT)

    except ValidationError as e:
        logger.error("Error in parsing host status", host_name=host_name, error=str(e))
        return HostStatusCheck.unknown(
            host_name,
            f"Malformed host status: {e.errors()[0]['msg']}",
        )
