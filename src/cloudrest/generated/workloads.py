"""Models for the workloads resource provider (monitors).

Generated from the service REST specifications. Do not edit manually.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field

from cloudrest.generated.datatypes import JsonValue, Metadata, TrackedResource


class WorkloadMonitorProvisioningState(StrEnum):
    """State of a monitor provisioning operation."""

    ACCEPTED = "Accepted"
    CREATING = "Creating"
    UPDATING = "Updating"
    FAILED = "Failed"
    SUCCEEDED = "Succeeded"
    DELETING = "Deleting"
    MIGRATING = "Migrating"


class RoutingPreference(StrEnum):
    """Outbound routing for the monitor's function app."""

    DEFAULT = "Default"
    ROUTE_ALL = "RouteAll"


class ManagedServiceIdentityType(StrEnum):
    NONE = "None"
    USER_ASSIGNED = "UserAssigned"


class ErrorAdditionalInfo(BaseModel):
    """Additional info attached to a resource-management error."""

    type: str | None = None
    info: JsonValue = None


class ErrorDetail(BaseModel):
    """The error detail."""

    model_config = ConfigDict(populate_by_name=True)

    code: str | None = None
    message: str | None = None
    target: str | None = None
    details: list["ErrorDetail"] = Field(default_factory=list)
    additional_info: list[ErrorAdditionalInfo] = Field(default_factory=list, alias="additionalInfo")


class ErrorResponse(BaseModel):
    """Common error response for all management APIs."""

    error: ErrorDetail | None = None


class UserAssignedIdentity(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    principal_id: str | None = Field(default=None, alias="principalId")
    client_id: str | None = Field(default=None, alias="clientId")


class UserAssignedServiceIdentity(BaseModel):
    """Managed service identity (user-assigned identities only)."""

    model_config = ConfigDict(populate_by_name=True)

    type: ManagedServiceIdentityType
    user_assigned_identities: dict[str, UserAssignedIdentity] | None = Field(
        default=None, alias="userAssignedIdentities"
    )


class ManagedRGConfiguration(BaseModel):
    """Managed resource group configuration."""

    name: str | None = None


class MonitorProperties(BaseModel):
    """Properties of a workloads monitor."""

    model_config = ConfigDict(populate_by_name=True)

    provisioning_state: WorkloadMonitorProvisioningState | None = Field(
        default=None, alias="provisioningState"
    )
    """State of the last provisioning operation (read-only)."""

    errors: ErrorDetail | None = None
    """Errors encountered by the monitor (read-only)."""

    app_location: str | None = Field(default=None, alias="appLocation")
    routing_preference: RoutingPreference | None = Field(default=None, alias="routingPreference")
    zone_redundancy_preference: str | None = Field(default=None, alias="zoneRedundancyPreference")
    managed_resource_group_configuration: ManagedRGConfiguration | None = Field(
        default=None, alias="managedResourceGroupConfiguration"
    )
    log_analytics_workspace_arm_id: str | None = Field(default=None, alias="logAnalyticsWorkspaceArmId")
    monitor_subnet: str | None = Field(default=None, alias="monitorSubnet")
    msi_arm_id: str | None = Field(default=None, alias="msiArmId")
    storage_account_arm_id: str | None = Field(default=None, alias="storageAccountArmId")


class Monitor(TrackedResource):
    """A workloads monitor resource."""

    identity: UserAssignedServiceIdentity | None = None
    properties: MonitorProperties | None = None


class MonitorListResult(BaseModel):
    """A page of monitors."""

    model_config = ConfigDict(populate_by_name=True)

    value: list[Monitor] = Field(default_factory=list)
    next_link: str | None = Field(default=None, alias="nextLink")


class UpdateMonitorRequest(BaseModel):
    """Patchable monitor fields."""

    tags: Metadata | None = None
    identity: UserAssignedServiceIdentity | None = None


class OperationStatusResult(BaseModel):
    """The current status of an async operation."""

    model_config = ConfigDict(populate_by_name=True)

    id: str | None = None
    name: str | None = None
    status: str
    percent_complete: float | None = Field(default=None, alias="percentComplete")
    start_time: datetime | None = Field(default=None, alias="startTime")
    end_time: datetime | None = Field(default=None, alias="endTime")
    operations: list["OperationStatusResult"] = Field(default_factory=list)
    error: ErrorDetail | None = None
