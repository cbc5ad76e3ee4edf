"""Teletraan endpoint configuration."""

from __future__ import annotations

from urllib.parse import quote

from pydantic import ConfigDict, Field, field_validator

from host_lifecycle.config import TeletraanSettings

from .base import LifecycleBaseModel

_DEFAULT_PATHS = TeletraanSettings.model_fields


def _segment(value: str) -> str:
    """Escape a value so it fills exactly one path segment."""
    return quote(value, safe="")


class TeletraanEndpoint(LifecycleBaseModel):
    """Where and as whom the client talks to Teletraan.

    Immutable: use ``rebind`` to derive an endpoint for another environment
    or token. The token is only checked when a request is made.
    """

    model_config = ConfigDict(frozen=True)

    url: str = Field(min_length=1, description="Teletraan API base URL")
    environment: str = Field(description="Teletraan environment name")
    token: str | None = Field(default=None, repr=False, description="Default API token")

    replace_host_path: str = _DEFAULT_PATHS["replace_host_path"].default
    terminate_host_path: str = _DEFAULT_PATHS["terminate_host_path"].default
    host_status_path: str = _DEFAULT_PATHS["host_status_path"].default

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    @classmethod
    def from_settings(cls, settings: TeletraanSettings) -> TeletraanEndpoint:
        """Build an endpoint from the TELETRAAN_* settings."""
        return cls(
            url=settings.url,
            environment=settings.environment,
            token=settings.token,
            replace_host_path=settings.replace_host_path,
            terminate_host_path=settings.terminate_host_path,
            host_status_path=settings.host_status_path,
        )

    def rebind(
        self,
        *,
        url: str | None = None,
        environment: str | None = None,
        token: str | None = None,
    ) -> TeletraanEndpoint:
        """Return a copy with the given fields replaced."""
        changes = {}
        if url is not None:
            changes["url"] = url
        if environment is not None:
            changes["environment"] = environment
        if token is not None:
            changes["token"] = token
        # model_copy skips validation, so go through the constructor
        return type(self)(**{**self.model_dump(), **changes})

    def replace_host_url(self, cluster_id: str) -> str:
        return self.url + self.replace_host_path.format(
            environment=_segment(self.environment), cluster_id=_segment(cluster_id)
        )

    def terminate_host_url(self, cluster_id: str) -> str:
        return self.url + self.terminate_host_path.format(
            environment=_segment(self.environment), cluster_id=_segment(cluster_id)
        )

    def host_status_url(self, host_name: str) -> str:
        return self.url + self.host_status_path.format(host_name=_segment(host_name))
