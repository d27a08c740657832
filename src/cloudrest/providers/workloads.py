"""Workloads resource provider (monitors) over the resource-management API."""

import asyncio
import logging
from types import TracebackType
from typing import ClassVar, Self, TypeVar

from pydantic import BaseModel

from cloudrest.credentials import TokenCredential
from cloudrest.generated import parameters
from cloudrest.generated.params import ManagementParams
from cloudrest.generated.workloads import (
    ErrorResponse,
    Monitor,
    MonitorListResult,
    OperationStatusResult,
    UpdateMonitorRequest,
)
from cloudrest.lro import HttpLroOperation, ResourceLocation
from cloudrest.operations import OperationSpec, ResponseSpec
from cloudrest.paging import Page, PageCursor
from cloudrest.polling import LroPoller, OperationState
from cloudrest.tracing import traced
from cloudrest.transport import ServiceClient

R = TypeVar("R")

logger = logging.getLogger(__name__)

_MONITORS = "/subscriptions/{subscriptionId}/providers/Microsoft.Workloads/monitors"
_GROUP_MONITORS = (
    "/subscriptions/{subscriptionId}/resourceGroups/{resourceGroupName}/providers/Microsoft.Workloads/monitors"
)
_MONITOR = _GROUP_MONITORS + "/{monitorName}"


class WorkloadsCredentials(BaseModel, frozen=True):
    """Bearer token for the resource-management endpoint."""

    token: str


class WorkloadsParams(ManagementParams, frozen=True):
    """Parameters for workloads operations.

    Inherits `subscription_id`, `endpoint` and `api_version` from ManagementParams.
    """


# Operation specifications

_error = ResponseSpec(body_model=ErrorResponse)
_group_parameters = (parameters.subscription_id, parameters.resource_group_name)
_monitor_parameters = (*_group_parameters, parameters.monitor_name)

list_spec = OperationSpec(
    name="Monitors.list",
    path=_MONITORS,
    method="GET",
    responses={200: ResponseSpec(body_model=MonitorListResult), "default": _error},
    url_parameters=(parameters.subscription_id,),
    query_parameters=(parameters.api_version,),
    header_parameters=(parameters.accept,),
)

list_by_resource_group_spec = OperationSpec(
    name="Monitors.listByResourceGroup",
    path=_GROUP_MONITORS,
    method="GET",
    responses={200: ResponseSpec(body_model=MonitorListResult), "default": _error},
    url_parameters=_group_parameters,
    query_parameters=(parameters.api_version,),
    header_parameters=(parameters.accept,),
)

list_next_spec = OperationSpec(
    name="Monitors.listNext",
    path="{nextLink}",
    method="GET",
    responses={200: ResponseSpec(body_model=MonitorListResult), "default": _error},
    url_parameters=(parameters.next_link,),
    header_parameters=(parameters.accept,),
)

get_spec = OperationSpec(
    name="Monitors.get",
    path=_MONITOR,
    method="GET",
    responses={200: ResponseSpec(body_model=Monitor), "default": _error},
    url_parameters=_monitor_parameters,
    query_parameters=(parameters.api_version,),
    header_parameters=(parameters.accept,),
)

create_spec = OperationSpec(
    name="Monitors.create",
    path=_MONITOR,
    method="PUT",
    responses={
        **{code: ResponseSpec(body_model=Monitor) for code in (200, 201, 202, 204)},
        "default": _error,
    },
    url_parameters=_monitor_parameters,
    query_parameters=(parameters.api_version,),
    header_parameters=(parameters.content_type, parameters.accept),
    request_body=parameters.monitor_parameter,
    media_type="json",
)

delete_spec = OperationSpec(
    name="Monitors.delete",
    path=_MONITOR,
    method="DELETE",
    responses={
        **{code: ResponseSpec(body_model=OperationStatusResult) for code in (200, 201, 202, 204)},
        "default": _error,
    },
    url_parameters=_monitor_parameters,
    query_parameters=(parameters.api_version,),
    header_parameters=(parameters.accept,),
)

update_spec = OperationSpec(
    name="Monitors.update",
    path=_MONITOR,
    method="PATCH",
    responses={200: ResponseSpec(body_model=Monitor), "default": _error},
    url_parameters=_monitor_parameters,
    query_parameters=(parameters.api_version,),
    header_parameters=(parameters.content_type, parameters.accept),
    request_body=parameters.update_body,
    media_type="json",
)


class MonitorsOperations:
    """Operations on SAP monitor resources."""

    __slots__: ClassVar[tuple[str, str]] = ("_client", "_polling_interval")

    _client: ServiceClient
    _polling_interval: float

    def __init__(self, client: ServiceClient, polling_interval: float) -> None:
        self._client = client
        self._polling_interval = polling_interval

    def list(self) -> PageCursor[Monitor]:
        """List monitors in the subscription."""
        return self._paged(list_spec, {}, "Monitors.list")

    def list_by_resource_group(self, resource_group_name: str) -> PageCursor[Monitor]:
        """List monitors in a resource group."""
        return self._paged(
            list_by_resource_group_spec,
            {"resource_group_name": resource_group_name},
            "Monitors.list_by_resource_group",
        )

    async def get(self, resource_group_name: str, monitor_name: str) -> Monitor:
        async with traced("Monitors.get", monitor=monitor_name):
            response = await self._client.send_operation_request(
                {"resource_group_name": resource_group_name, "monitor_name": monitor_name},
                get_spec,
            )
        return response.body

    async def begin_create(
        self,
        resource_group_name: str,
        monitor_name: str,
        monitor: Monitor,
        *,
        resume_from: str | None = None,
        polling_interval: float | None = None,
    ) -> LroPoller[Monitor]:
        """Start creating a monitor.

        With `resume_from`, continue an operation captured by
        `LroPoller.resume_token()` instead of submitting a new one.
        """
        operation: HttpLroOperation[Monitor] = HttpLroOperation(
            self._client,
            create_spec,
            {
                "resource_group_name": resource_group_name,
                "monitor_name": monitor_name,
                "monitor_parameter": monitor,
            },
        )
        async with traced("Monitors.begin_create", monitor=monitor_name):
            return await self._start(operation, resume_from, polling_interval)

    async def begin_create_and_wait(
        self,
        resource_group_name: str,
        monitor_name: str,
        monitor: Monitor,
        *,
        polling_interval: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> OperationState[Monitor]:
        poller = await self.begin_create(
            resource_group_name, monitor_name, monitor, polling_interval=polling_interval
        )
        return await poller.poll_until_done(cancel)

    async def begin_delete(
        self,
        resource_group_name: str,
        monitor_name: str,
        *,
        resume_from: str | None = None,
        polling_interval: float | None = None,
    ) -> LroPoller[OperationStatusResult]:
        """Start deleting a monitor.

        The final result is the last async-operation status document.
        """
        operation: HttpLroOperation[OperationStatusResult] = HttpLroOperation(
            self._client,
            delete_spec,
            {"resource_group_name": resource_group_name, "monitor_name": monitor_name},
            resource_location=ResourceLocation.AZURE_ASYNC_OPERATION,
        )
        async with traced("Monitors.begin_delete", monitor=monitor_name):
            return await self._start(operation, resume_from, polling_interval)

    async def begin_delete_and_wait(
        self,
        resource_group_name: str,
        monitor_name: str,
        *,
        polling_interval: float | None = None,
        cancel: asyncio.Event | None = None,
    ) -> OperationState[OperationStatusResult]:
        poller = await self.begin_delete(resource_group_name, monitor_name, polling_interval=polling_interval)
        return await poller.poll_until_done(cancel)

    async def update(
        self,
        resource_group_name: str,
        monitor_name: str,
        body: UpdateMonitorRequest,
    ) -> Monitor:
        """Patch the tags or identity of a monitor."""
        async with traced("Monitors.update", monitor=monitor_name):
            response = await self._client.send_operation_request(
                {
                    "resource_group_name": resource_group_name,
                    "monitor_name": monitor_name,
                    "body": body,
                },
                update_spec,
            )
        return response.body

    async def _start(
        self,
        operation: HttpLroOperation[R],
        resume_from: str | None,
        polling_interval: float | None,
    ) -> LroPoller[R]:
        if resume_from is None:
            interval = self._polling_interval if polling_interval is None else polling_interval
            return await LroPoller.begin(operation, polling_interval=interval)

        poller = LroPoller.from_resume_token(operation, resume_from, polling_interval=polling_interval)
        _ = await poller.poll()
        return poller

    def _paged(self, spec: OperationSpec, args: dict[str, str], span: str) -> PageCursor[Monitor]:
        async def fetch_page(continuation_token: str | None, max_page_size: int | None) -> Page[Monitor]:
            async with traced(span):
                if continuation_token is None:
                    response = await self._client.send_operation_request(args, spec)
                else:
                    response = await self._client.send_operation_request(
                        {**args, "next_link": continuation_token}, list_next_spec
                    )
            result: MonitorListResult = response.body
            return Page(items=result.value, continuation_token=result.next_link)

        return PageCursor(fetch_page, supports_max_page_size=False)


class WorkloadsProvider:
    """Resource-management provider for the workloads service."""

    __slots__: ClassVar[tuple[str, ...]] = ("_client", "_params", "monitors")

    _client: ServiceClient
    _params: WorkloadsParams
    monitors: MonitorsOperations

    def __init__(self, client: ServiceClient, params: WorkloadsParams) -> None:
        self._client = client
        self._params = params
        self.monitors = MonitorsOperations(client, params.polling_interval)

    @classmethod
    async def connect(cls, credentials: WorkloadsCredentials, params: WorkloadsParams) -> Self:
        """Create the HTTP client for the management endpoint."""
        client = ServiceClient.create(
            params.endpoint,
            auth=TokenCredential(credentials.token),
            timeout=params.timeout,
            max_retries=params.max_retries,
            user_agent=params.user_agent,
            defaults={"subscription_id": params.subscription_id, "api_version": params.api_version},
        )
        logger.info("Connected to workloads provider at %s", params.endpoint)
        return cls(client, params)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        await self._client.close()
        logger.info("Disconnected from workloads provider")

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.disconnect()


Provider = WorkloadsProvider
