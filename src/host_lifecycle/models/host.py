"""Host domain models.

Teletraan keeps a status history per host, newest record first. Hosts that
are gone are purged rather than marked, so an empty history means the host
has been terminated.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import ConfigDict, Field, StrictBool, field_validator

from .base import LifecycleBaseModel


class StatusVerdict(str, Enum):
    """What a host status history says about the host."""

    PRESENT = "PRESENT"
    PENDING_TERMINATION = "PENDING_TERMINATION"
    TERMINATED = "TERMINATED"


class HostReference(LifecycleBaseModel):
    """A host as Teletraan addresses it for replace/terminate requests."""

    instance_id: str = Field(min_length=1, description="Cloud instance ID")
    cluster_id: str = Field(min_length=1, description="Teletraan cluster ID")


class HostStatusRecord(LifecycleBaseModel):
    """One entry of a host's status history.

    Only ``pendingTerminate`` is interpreted; everything else the service
    sends is kept as extra fields.
    """

    model_config = ConfigDict(extra="allow")

    pending_terminate: StrictBool = Field(alias="pendingTerminate")

    @field_validator("pending_terminate", mode="before")
    @classmethod
    def parse_flag_string(cls, v: Any) -> Any:
        """Accept "true"/"false" in any case; other non-booleans are rejected."""
        if isinstance(v, str) and v.lower() in ("true", "false"):
            return v.lower() == "true"
        return v


class HostStatusCheck(LifecycleBaseModel):
    """Outcome of one status query.

    ``verdict`` is None when Teletraan could not be asked or its answer could
    not be read; ``reason`` then says why. Callers polling for termination
    should retry on unknown results rather than read them as "still present".
    """

    host_name: str
    verdict: StatusVerdict | None = None
    reason: str | None = None

    @classmethod
    def confirmed(cls, host_name: str, verdict: StatusVerdict) -> HostStatusCheck:
        return cls(host_name=host_name, verdict=verdict)

    @classmethod
    def unknown(cls, host_name: str, reason: str) -> HostStatusCheck:
        return cls(host_name=host_name, reason=reason)

    @property
    def is_known(self) -> bool:
        return self.verdict is not None

    @property
    def is_terminated(self) -> bool:
        return self.verdict == StatusVerdict.TERMINATED

    @property
    def is_pending_termination(self) -> bool:
        return self.verdict == StatusVerdict.PENDING_TERMINATION
