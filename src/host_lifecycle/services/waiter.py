"""Polling a host until Teletraan confirms it is gone.

The client itself never sleeps or retries. This module is the polling side
of a replacement: send the request once, then ask for the host's status on an
interval until Teletraan confirms termination or the deadline passes.
Unknown results are retried and never taken as confirmation.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import TYPE_CHECKING

from host_lifecycle.config import WaiterSettings
from host_lifecycle.exceptions import HostReplacementRejectedError, HostWaitTimeoutError
from host_lifecycle.models import HostReference, HostStatusCheck, StatusVerdict
from host_lifecycle.observability import get_logger

if TYPE_CHECKING:
    from host_lifecycle.clients import TeletraanClient

logger = get_logger(__name__)

_DEFAULTS = WaiterSettings.model_fields


def wait_for_host_termination(
    client: TeletraanClient,
    host_name: str,
    *,
    accept_pending: bool = False,
    timeout: float = _DEFAULTS["timeout_seconds"].default,
    interval: float = _DEFAULTS["interval_seconds"].default,
    backoff: float = _DEFAULTS["backoff"].default,
    max_interval: float = _DEFAULTS["max_interval_seconds"].default,
    override_token: str | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> HostStatusCheck:
    """Wait until Teletraan reports a host as terminated.

    Args:
        client: Teletraan client to poll with
        host_name: Host to watch
        accept_pending: Also stop once the host is marked for termination
        timeout: Maximum time to wait in seconds
        interval: Time between the first polls in seconds
        backoff: Multiplier applied to the interval after each poll
        max_interval: Upper bound for the interval
        override_token: Token to use instead of the client's
        sleep: Sleep function, replaceable in tests
        clock: Monotonic clock, replaceable in tests

    Returns:
        The check that satisfied the wait.

    Raises:
        HostWaitTimeoutError: If timeout is exceeded.
    """
    wanted: tuple[StatusVerdict, ...] = (StatusVerdict.TERMINATED,)
    if accept_pending:
        wanted += (StatusVerdict.PENDING_TERMINATION,)

    start = clock()
    delay = interval
    last_check: HostStatusCheck | None = None

    while True:
        last_check = client.check_host_status(host_name, override_token)

        if last_check.is_known and last_check.verdict in wanted:
            logger.info(
                "Host termination confirmed",
                host_name=host_name,
                verdict=last_check.verdict,
                elapsed_seconds=round(clock() - start, 1),
            )
            return last_check

        if not last_check.is_known:
            logger.warning(
                "Host status unknown, will retry",
                host_name=host_name,
                reason=last_check.reason,
            )

        elapsed = clock() - start
        if elapsed + delay > timeout:
            logger.error(
                "Timed out waiting for host termination",
                host_name=host_name,
                elapsed_seconds=round(elapsed, 1),
                last_verdict=last_check.verdict,
            )
            raise HostWaitTimeoutError(host_name, elapsed, last_check)

        sleep(delay)
        delay = min(delay * backoff, max_interval)


def _settings_kwargs(settings: WaiterSettings | None) -> dict[str, float]:
    if settings is None:
        return {}
    return {
        "timeout": settings.timeout_seconds,
        "interval": settings.interval_seconds,
        "backoff": settings.backoff,
        "max_interval": settings.max_interval_seconds,
    }


def replace_host_and_wait(
    client: TeletraanClient,
    host: HostReference,
    host_name: str,
    *,
    accept_pending: bool = False,
    override_token: str | None = None,
    settings: WaiterSettings | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> HostStatusCheck:
    """Replace a host, then wait for the old host to leave the cluster.

    Raises:
        HostReplacementRejectedError: If Teletraan did not accept the request.
        HostWaitTimeoutError: If the host is still around at the deadline.
    """
    if not client.replace_host(host.instance_id, host.cluster_id, override_token):
        raise HostReplacementRejectedError("replace", host.instance_id, host.cluster_id)

    return wait_for_host_termination(
        client,
        host_name,
        accept_pending=accept_pending,
        override_token=override_token,
        sleep=sleep,
        clock=clock,
        **_settings_kwargs(settings),
    )


def terminate_host_and_wait(
    client: TeletraanClient,
    host: HostReference,
    host_name: str,
    *,
    accept_pending: bool = False,
    override_token: str | None = None,
    settings: WaiterSettings | None = None,
    sleep: Callable[[float], None] = time.sleep,
    clock: Callable[[], float] = time.monotonic,
) -> HostStatusCheck:
    """Terminate a host, then wait for Teletraan to confirm it.

    Raises:
        HostReplacementRejectedError: If Teletraan did not accept the request.
        HostWaitTimeoutError: If the host is still around at the deadline.
    """
    if not client.terminate_host(host.instance_id, host.cluster_id, override_token):
        raise HostReplacementRejectedError("terminate", host.instance_id, host.cluster_id)

    return wait_for_host_termination(
        client,
        host_name,
        accept_pending=accept_pending,
        override_token=override_token,
        sleep=sleep,
        clock=clock,
        **_settings_kwargs(settings),
    )
