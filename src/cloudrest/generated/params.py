"""Parameter types for provider configuration.

Params define how providers operate (endpoints, timeouts, poll cadence),
while paging settings and resume tokens carry runtime state.
"""

from typing import Self

from pydantic import BaseModel, Field

from cloudrest.config import ClientSettings


class ClientParams(BaseModel, frozen=True):
    """Common parameters for every provider."""

    timeout: float = Field(default=30.0, gt=0)
    """Per-request timeout in seconds."""

    max_retries: int = Field(default=3, ge=0)
    """Connection retries performed by the HTTP transport."""

    polling_interval: float = Field(default=2.0, ge=0)
    """Default seconds between long-running-operation polls."""

    user_agent: str | None = None
    """User-Agent header value."""


class StorageParams(ClientParams, frozen=True):
    """Common parameters for storage data-plane services."""

    url: str
    """Service URL, optionally carrying a SAS query string."""

    api_version: str = "2019-07-07"
    """Value sent as `x-ms-version`."""

    @classmethod
    def from_settings(cls, settings: ClientSettings, **overrides: object) -> Self:
        values: dict[str, object] = {
            "url": settings.endpoint,
            "api_version": settings.api_version_file,
            "timeout": settings.timeout,
            "max_retries": settings.max_retries,
            "polling_interval": settings.polling_interval,
            "user_agent": settings.user_agent,
        }
        values.update(overrides)
        return cls.model_validate(values)


class ManagementParams(ClientParams, frozen=True):
    """Common parameters for resource-management providers."""

    subscription_id: str
    """Target subscription."""

    endpoint: str = "https://management.azure.com"
    """Resource-management endpoint."""

    api_version: str = "2023-04-01"
    """Value sent as the `api-version` query parameter."""

    @classmethod
    def from_settings(cls, settings: ClientSettings, **overrides: object) -> Self:
        values: dict[str, object] = {
            "endpoint": settings.management_endpoint,
            "api_version": settings.api_version_workloads,
            "timeout": settings.timeout,
            "max_retries": settings.max_retries,
            "polling_interval": settings.polling_interval,
            "user_agent": settings.user_agent,
        }
        values.update(overrides)
        return cls.model_validate(values)
