"""Host Lifecycle package.

Client for replacing and terminating cluster hosts through Teletraan:
- clients: Teletraan API client
- services: status interpretation and termination polling
- models: Pydantic data models
- config: Configuration management
- observability: Structured logging
"""

from .clients import TeletraanClient
from .exceptions import (
    HostLifecycleError,
    HostReplacementRejectedError,
    HostWaitTimeoutError,
    LifecycleConfigurationError,
    TokenNotConfiguredError,
)
from .models import (
    HostReference,
    HostStatusCheck,
    HostStatusRecord,
    StatusVerdict,
    TeletraanEndpoint,
)

__version__ = "0.1.0"

__all__ = [
    "TeletraanClient",
    "TeletraanEndpoint",
    "HostReference",
    "HostStatusCheck",
    "HostStatusRecord",
    "StatusVerdict",
    "HostLifecycleError",
    "HostReplacementRejectedError",
    "HostWaitTimeoutError",
    "LifecycleConfigurationError",
    "TokenNotConfiguredError",
]
