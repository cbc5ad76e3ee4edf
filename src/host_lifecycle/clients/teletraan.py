"""Teletraan host lifecycle API client.

Asks Teletraan to replace or terminate a host of a cluster, and reads back a
host's status history to confirm the change took effect.

Replace and terminate are fire-and-forget: ``True`` means Teletraan accepted
the request, not that the host is gone. Callers poll ``is_host_terminated``,
``is_host_pending_termination`` or ``check_host_status`` on their own
schedule; nothing here sleeps or retries.

Transport and protocol failures are logged and reported as ``False``/``None``.
A missing token raises ``TokenNotConfiguredError`` before any request is sent.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any

import httpx

from host_lifecycle.config import TeletraanSettings
from host_lifecycle.exceptions import TokenNotConfiguredError
from host_lifecycle.models import HostReference, HostStatusCheck, TeletraanEndpoint
from host_lifecycle.observability import (
    get_logger,
    log_external_call_end,
    log_external_call_start,
)
from host_lifecycle.services.status_interpreter import (
    interpret_status_history,
    is_host_terminated,
    is_host_terminated_or_pending_termination,
)

logger = get_logger(__name__)

SERVICE_NAME = "teletraan"

# Teletraan answers an accepted replace/terminate with either of these
ACCEPTED_STATUS_CODES = (200, 204)


class TeletraanClient:
    """Client for the Teletraan host lifecycle API.

    One instance holds one ``httpx.Client`` connection pool. Handles derived
    with ``rebind`` share that pool; only the handle that created it closes it.
    """

    def __init__(
        self,
        endpoint: TeletraanEndpoint,
        *,
        timeout: float = 10.0,
        http_client: httpx.Client | None = None,
    ):
        self.endpoint = endpoint
        self._owns_client = http_client is None
        self.client = http_client or httpx.Client(
            timeout=httpx.Timeout(timeout, connect=5.0),
        )

    @classmethod
    def from_settings(cls, settings: TeletraanSettings) -> TeletraanClient:
        """Create a client from the TELETRAAN_* settings."""
        return cls(
            TeletraanEndpoint.from_settings(settings),
            timeout=settings.timeout_seconds,
        )

    @property
    def url(self) -> str:
        return self.endpoint.url

    @property
    def environment(self) -> str:
        return self.endpoint.environment

    @property
    def token(self) -> str | None:
        return self.endpoint.token

    def rebind(
        self,
        *,
        url: str | None = None,
        environment: str | None = None,
        token: str | None = None,
    ) -> TeletraanClient:
        """Return a client for another URL, environment or token.

        The new handle reuses this client's connection pool. This handle is
        left unchanged, so requests already in flight are not affected.
        """
        return TeletraanClient(
            self.endpoint.rebind(url=url, environment=environment, token=token),
            http_client=self.client,
        )

    def _get_token_header(self, override_token: str | None = None) -> str:
        """Build the Authorization header value.

        The override wins when set and non-empty, then the configured token.

        Raises:
            TokenNotConfiguredError: If neither token is set
        """
        if override_token:
            return f"token {override_token}"
        if not self.endpoint.token:
            raise TokenNotConfiguredError()
        return f"token {self.endpoint.token}"

    def _build_headers(self, override_token: str | None = None) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": self._get_token_header(override_token),
        }

    # =========================================================================
    # State changes
    # =========================================================================

    def replace_host(
        self,
        instance_id: str,
        cluster_id: str,
        override_token: str | None = None,
    ) -> bool:
        """Ask Teletraan to replace a host in a cluster.

        Args:
            instance_id: Instance to replace
            cluster_id: Teletraan cluster the instance belongs to
            override_token: Token to use instead of the configured one

        Returns:
            True if Teletraan accepted the request
        """
        return self._change_host(
            "replace",
            self.endpoint.replace_host_url,
            instance_id,
            cluster_id,
            override_token,
        )

    def terminate_host(
        self,
        instance_id: str,
        cluster_id: str,
        override_token: str | None = None,
    ) -> bool:
        """Ask Teletraan to terminate a host of a cluster.

        Args:
            instance_id: Instance to terminate
            cluster_id: Teletraan cluster the instance belongs to
            override_token: Token to use instead of the configured one

        Returns:
            True if Teletraan accepted the request
        """
        return self._change_host(
            "terminate",
            self.endpoint.terminate_host_url,
            instance_id,
            cluster_id,
            override_token,
        )

    def _change_host(
        self,
        operation: str,
        build_url: Callable[[str], str],
        instance_id: str,
        cluster_id: str,
        override_token: str | None,
    ) -> bool:
        headers = self._build_headers(override_token)
        context: dict[str, Any] = {"instance_id": instance_id, "cluster_id": cluster_id}
        start = time.perf_counter()

        try:
            host = HostReference(instance_id=instance_id, cluster_id=cluster_id)
            url = build_url(host.cluster_id)
            context["url"] = url

            logger.info(f"Requesting host {operation} via Teletraan API", **context)
            log_external_call_start(logger, SERVICE_NAME, operation, **context)

            # DELETE with a body: Teletraan takes the hosts to remove as a JSON array
            response = self.client.request(
                "DELETE",
                url,
                json=[host.instance_id],
                headers=headers,
            )

            if response.status_code not in ACCEPTED_STATUS_CODES:
                logger.error(
                    f"Failed to {operation} host via Teletraan API",
                    status_code=response.status_code,
                    **context,
                )
                log_external_call_end(
                    logger,
                    SERVICE_NAME,
                    operation,
                    success=False,
                    duration_ms=(time.perf_counter() - start) * 1000,
                    error=f"HTTP {response.status_code}",
                )
                return False

            log_external_call_end(
                logger,
                SERVICE_NAME,
                operation,
                success=True,
                duration_ms=(time.perf_counter() - start) * 1000,
            )
            return True

        except Exception as e:
            logger.error(f"Error in host {operation} via Teletraan API", error=str(e), **context)
            log_external_call_end(
                logger,
                SERVICE_NAME,
                operation,
                success=False,
                duration_ms=(time.perf_counter() - start) * 1000,
                error=str(e),
            )
            return False

    # =========================================================================
    # Status queries
    # =========================================================================

    def get_host_status_history(
        self,
        host_name: str,
        override_token: str | None = None,
    ) -> str | None:
        """Fetch a host's status history.

        The body is a JSON array of status records, newest first. An empty
        array means the host is terminated or never existed.

        Returns:
            The raw response body, or None if the status could not be fetched.
            None means "unknown", not "terminated".
        """
        headers = self._build_headers(override_token)
        url: str | None = None
        start = time.perf_counter()

        try:
            url = self.endpoint.host_status_url(host_name)
            logger.info("Checking host status via Teletraan API", host_name=host_name, url=url)
            log_external_call_start(logger, SERVICE_NAME, "host_status", host_name=host_name)

            response = self.client.get(url, headers=headers)

            if response.status_code != 200:
                logger.error(
                    "Failed to get host status via Teletraan API",
                    host_name=host_name,
                    url=url,
                    status_code=response.status_code,
                )
                log_external_call_end(
                    logger,
                    SERVICE_NAME,
                    "host_status",
                    success=False,
                    duration_ms=(time.perf_counter() - start) * 1000,
                    error=f"HTTP {response.status_code}",
                )
                return None

            log_external_call_end(
                logger,
                SERVICE_NAME,
                "host_status",
                success=True,
                duration_ms=(time.perf_counter() - start) * 1000,
            )
            return response.text

        except Exception as e:
            logger.error(
                "Error in host status check via Teletraan API",
                host_name=host_name,
                url=url,
                error=str(e),
            )
            log_external_call_end(
                logger,
                SERVICE_NAME,
                "host_status",
                success=False,
                duration_ms=(time.perf_counter() - start) * 1000,
                error=str(e),
            )
            return None

    def is_host_pending_termination(
        self,
        host_name: str,
        override_token: str | None = None,
    ) -> bool:
        """Check whether a host is terminated or marked for termination.

        False when the status could not be fetched.
        """
        history = self.get_host_status_history(host_name, override_token)
        if history is None:
            return False
        return is_host_terminated_or_pending_termination(history)

    def is_host_terminated(
        self,
        host_name: str,
        override_token: str | None = None,
    ) -> bool:
        """Check whether a host is terminated.

        False when the status could not be fetched.
        """
        history = self.get_host_status_history(host_name, override_token)
        if history is None:
            return False
        return is_host_terminated(history)

    def check_host_status(
        self,
        host_name: str,
        override_token: str | None = None,
    ) -> HostStatusCheck:
        """Query a host's status, keeping "unknown" apart from a verdict."""
        history = self.get_host_status_history(host_name, override_token)
        if history is None:
            return HostStatusCheck.unknown(host_name, "Host status could not be fetched")
        return interpret_status_history(host_name, history)

    def close(self) -> None:
        """Close the HTTP client if this handle created it."""
        if self._owns_client:
            self.client.close()

    def __enter__(self) -> TeletraanClient:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
