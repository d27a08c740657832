"""Generated types from the service REST specifications.

This module contains the Pydantic models and parameter bindings emitted for
each service. Do not edit manually.
"""

from cloudrest.generated.datatypes import (
    CreatedByType,
    JsonValue,
    Metadata,
    ProxyResource,
    SystemData,
    TrackedResource,
)
from cloudrest.generated.params import ClientParams, ManagementParams, StorageParams
from cloudrest.generated.storage_file import (
    CorsRule,
    ListSharesIncludeType,
    ListSharesResponse,
    Metrics,
    RetentionPolicy,
    ServiceSetPropertiesResponse,
    ShareCreateResponse,
    ShareDeleteResponse,
    ShareGetPropertiesResponse,
    ShareItem,
    ShareProperties,
    StorageServiceProperties,
)
from cloudrest.generated.workloads import (
    ErrorDetail,
    ErrorResponse,
    ManagedRGConfiguration,
    Monitor,
    MonitorListResult,
    MonitorProperties,
    OperationStatusResult,
    UpdateMonitorRequest,
    UserAssignedServiceIdentity,
    WorkloadMonitorProvisioningState,
)

__all__ = [
    # Params (configuration)
    "ClientParams",
    "ManagementParams",
    "StorageParams",
    # Shared data types
    "CreatedByType",
    "JsonValue",
    "Metadata",
    "ProxyResource",
    "SystemData",
    "TrackedResource",
    # File service
    "CorsRule",
    "ListSharesIncludeType",
    "ListSharesResponse",
    "Metrics",
    "RetentionPolicy",
    "ServiceSetPropertiesResponse",
    "ShareCreateResponse",
    "ShareDeleteResponse",
    "ShareGetPropertiesResponse",
    "ShareItem",
    "ShareProperties",
    "StorageServiceProperties",
    # Workloads
    "ErrorDetail",
    "ErrorResponse",
    "ManagedRGConfiguration",
    "Monitor",
    "MonitorListResult",
    "MonitorProperties",
    "OperationStatusResult",
    "UpdateMonitorRequest",
    "UserAssignedServiceIdentity",
    "WorkloadMonitorProvisioningState",
]
