"""Clients for external services."""

from .teletraan import ACCEPTED_STATUS_CODES, TeletraanClient

__all__ = [
    "ACCEPTED_STATUS_CODES",
    "TeletraanClient",
]
