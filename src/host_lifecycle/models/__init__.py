"""Pydantic models for the host lifecycle client."""

from .base import LifecycleBaseModel
from .endpoint import TeletraanEndpoint
from .host import (
    HostReference,
    HostStatusCheck,
    HostStatusRecord,
    StatusVerdict,
)

__all__ = [
    "LifecycleBaseModel",
    "TeletraanEndpoint",
    "HostReference",
    "HostStatusCheck",
    "HostStatusRecord",
    "StatusVerdict",
]
