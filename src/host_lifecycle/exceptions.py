"""Host lifecycle errors.

Only configuration errors escape the client. Transport and protocol failures
are logged and reported as ``False``/``None`` instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from host_lifecycle.models import HostStatusCheck


class HostLifecycleError(Exception):
    """Base class for host lifecycle errors."""


class LifecycleConfigurationError(HostLifecycleError):
    """The client is misconfigured; retrying will not help."""


class TokenNotConfiguredError(LifecycleConfigurationError):
    """Neither a per-call override nor a configured Teletraan token is set."""

    def __init__(self):
        super().__init__("Teletraan token is not set.")


class HostReplacementRejectedError(HostLifecycleError):
    """Teletraan did not accept a replace or terminate request."""

    def __init__(self, operation: str, instance_id: str, cluster_id: str):
        self.operation = operation
        self.instance_id = instance_id
        self.cluster_id = cluster_id
        super().__init__(
            f"Teletraan rejected {operation} of host {instance_id} in cluster {cluster_id}"
        )


class HostWaitTimeoutError(HostLifecycleError):
    """A host did not reach the expected state before the deadline."""

    def __init__(
        self,
        host_name: str,
        elapsed: float,
        last_check: HostStatusCheck | None = None,
    ):
        self.host_name = host_name
        self.elapsed = elapsed
        self.last_check = last_check
        super().__init__(f"Timeout waiting for host {host_name} after {elapsed:.1f}s")
