"""Host status interpretation and termination polling."""

from .status_interpreter import (
    StatusHistory,
    interpret_status_history,
    is_host_terminated,
    is_host_terminated_or_pending_termination,
    most_recent_status,
    parse_status_history,
)
from .waiter import (
    replace_host_and_wait,
    terminate_host_and_wait,
    wait_for_host_termination,
)

__all__ = [
    "StatusHistory",
    "interpret_status_history",
    "is_host_terminated",
    "is_host_terminated_or_pending_termination",
    "most_recent_status",
    "parse_status_history",
    "replace_host_and_wait",
    "terminate_host_and_wait",
    "wait_for_host_termination",
]
