"""Shared data types for service models.

These types are reused across the per-service model modules:
- `JsonValue` and `Metadata` for free-form payloads
- `SystemData` for resource audit information
- `ProxyResource` and `TrackedResource` for management-plane resources

Generated from the service REST specifications. Do not edit manually.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field
from typing_extensions import TypeAliasType

# JSON-compatible value type
JsonValue = TypeAliasType(
    "JsonValue", str | int | float | bool | None | list["JsonValue"] | dict[str, "JsonValue"]
)

# Metadata associated with resources (name/value pairs).
Metadata = TypeAliasType("Metadata", dict[str, str])


class CreatedByType(StrEnum):
    """The type of identity that created or modified a resource."""

    USER = "User"
    APPLICATION = "Application"
    MANAGED_IDENTITY = "ManagedIdentity"
    KEY = "Key"


class SystemData(BaseModel):
    """Metadata pertaining to creation and last modification of the resource."""

    model_config = ConfigDict(populate_by_name=True)

    created_by: str | None = Field(default=None, alias="createdBy")
    created_by_type: CreatedByType | None = Field(default=None, alias="createdByType")
    created_at: datetime | None = Field(default=None, alias="createdAt")
    last_modified_by: str | None = Field(default=None, alias="lastModifiedBy")
    last_modified_by_type: CreatedByType | None = Field(default=None, alias="lastModifiedByType")
    last_modified_at: datetime | None = Field(default=None, alias="lastModifiedAt")


class ProxyResource(BaseModel):
    """Common fields returned for every management-plane resource."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    """Fully qualified resource ID (read-only)."""

    name: str | None = None
    """Resource name (read-only)."""

    type: str | None = None
    """Resource type (read-only)."""

    system_data: SystemData | None = Field(default=None, alias="systemData")


class TrackedResource(ProxyResource):
    """A resource with a location and tags."""

    location: str
    """The geo-location where the resource lives."""

    tags: Metadata | None = None
    """Resource tags."""
