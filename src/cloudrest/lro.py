"""HTTP long-running-operation strategy for resource-management services.

`HttpLroOperation` implements `LroOperation` on top of a `ServiceClient`.
It understands the three ways a management service reports progress:

- an `Azure-AsyncOperation` header pointing at a status document,
- a `Location` header polled until it stops answering 202,
- the resource's own `properties.provisioningState`.

All the state it needs between polls is plain JSON, so pollers built on it
can be resumed from a token.
"""

import json
import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from enum import StrEnum
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ValidationError

from cloudrest.errors import ErrorKind, RestError, ServiceError
from cloudrest.generated import parameters
from cloudrest.operations import OperationSpec, Parameter, ParameterLocation, ResponseSpec
from cloudrest.polling import OperationStatus, PollOutcome, Submission
from cloudrest.transport import OperationResponse, ServiceClient

T = TypeVar("T")

logger = logging.getLogger(__name__)


class ResourceLocation(StrEnum):
    """Where the final result of a successful operation is read from."""

    AZURE_ASYNC_OPERATION = "azure-async-operation"
    """The last status document."""

    LOCATION = "location"
    """The final response of the `Location` URL."""

    ORIGINAL_URI = "original-uri"
    """A GET of the URL the operation was submitted to."""


class PollingMode(StrEnum):
    OPERATION = "operation"
    LOCATION = "location"
    BODY = "body"


_polling_url = Parameter(
    name="polling_url",
    serialized_name="pollingUrl",
    location=ParameterLocation.PATH,
    required=True,
    skip_encoding=True,
)

_ANY_SUCCESS = {code: ResponseSpec() for code in (200, 201, 202, 204)}

poll_operation_spec = OperationSpec(
    name="lro.poll",
    path="{pollingUrl}",
    method="GET",
    responses=_ANY_SUCCESS,
    url_parameters=(_polling_url,),
    header_parameters=(parameters.accept,),
)


def _final_get_spec(result_model: type[BaseModel] | None) -> OperationSpec:
    return OperationSpec(
        name="lro.final",
        path="{pollingUrl}",
        method="GET",
        responses={200: ResponseSpec(body_model=result_model)},
        url_parameters=(_polling_url,),
        header_parameters=(parameters.accept,),
    )


def map_service_status(value: str | None) -> OperationStatus:
    """Map a service status string onto the poller's phases."""
    match (value or "").lower():
        case "succeeded":
            return OperationStatus.SUCCEEDED
        case "failed":
            return OperationStatus.FAILED
        case "canceled" | "cancelled":
            return OperationStatus.CANCELED
        case _:
            return OperationStatus.RUNNING


def retry_after(headers: Mapping[str, str]) -> float | None:
    """Seconds advised by a `Retry-After` header, if present and readable."""
    value = headers.get("retry-after")
    if value is None:
        return None
    if value.strip().isdigit():
        return float(value.strip())
    try:
        when = parsedate_to_datetime(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring unreadable Retry-After header %r", value)
        return None
    if when.tzinfo is None:
        when = when.replace(tzinfo=UTC)
    return max(0.0, (when - datetime.now(UTC)).total_seconds())


def _json_object(content: bytes) -> dict[str, Any]:
    if not content.strip():
        return {}
    try:
        data = json.loads(content)
    except ValueError as e:
        msg = f"Status document is not JSON: {e}"
        raise RestError(msg, kind=ErrorKind.PROTOCOL, source=e) from e
    return data if isinstance(data, dict) else {}


def _provisioning_state(data: Mapping[str, Any]) -> str | None:
    properties = data.get("properties")
    if isinstance(properties, dict):
        return properties.get("provisioningState")
    return None


def _service_error(data: Mapping[str, Any]) -> ServiceError | None:
    error = data.get("error")
    if not isinstance(error, dict):
        properties = data.get("properties")
        error = properties.get("errors") if isinstance(properties, dict) else None
    if not isinstance(error, dict):
        return None
    try:
        return ServiceError.model_validate(error)
    except ValidationError:
        return ServiceError(message=str(error))


class HttpLroOperation(Generic[T]):
    """Submit/poll primitives for one management-plane long-running operation."""

    __slots__: ClassVar[tuple[str, ...]] = (
        "_args",
        "_client",
        "_resource_location",
        "_result_model",
        "_spec",
    )

    supports_cancel: ClassVar[bool] = False

    _args: dict[str, Any]
    _client: ServiceClient
    _resource_location: ResourceLocation | None
    _result_model: type[BaseModel] | None
    _spec: OperationSpec

    def __init__(
        self,
        client: ServiceClient,
        spec: OperationSpec,
        args: Mapping[str, Any],
        *,
        resource_location: ResourceLocation | None = None,
    ) -> None:
        self._client = client
        self._spec = spec
        self._args = dict(args)
        self._resource_location = resource_location
        self._result_model = next(
            (r.body_model for code, r in spec.responses.items() if code != "default" and r.body_model),
            None,
        )

    async def submit(self) -> Submission[T]:
        response = await self._client.send_operation_request(self._args, self._spec)
        headers = response.headers

        async_url = headers.get("azure-asyncoperation")
        location_url = headers.get("location")
        if async_url:
            mode = PollingMode.OPERATION
        elif location_url:
            mode = PollingMode.LOCATION
        else:
            mode = PollingMode.BODY

        state: dict[str, Any] = {
            "method": self._spec.method,
            "mode": mode.value,
            "resource_url": response.url,
            "polling_url": async_url or location_url or response.url,
            "location_url": location_url,
            "resource_location": self._resource_location and self._resource_location.value,
        }
        logger.debug("Submitted %s (status=%d, mode=%s)", self._spec.name, response.status_code, mode)

        if mode != PollingMode.BODY:
            return Submission(state=state, next_interval=retry_after(headers))

        if response.status_code == 202:
            msg = "Service accepted the operation without a polling location"
            raise RestError(msg, kind=ErrorKind.PROTOCOL, status_code=202)
        if response.status_code == 204 or self._spec.method == "DELETE":
            return Submission(status=OperationStatus.SUCCEEDED, state=state, result=response.body)

        data = _json_object(response.content)
        state_value = _provisioning_state(data)
        status = OperationStatus.SUCCEEDED if state_value is None else map_service_status(state_value)
        return Submission(
            status=status,
            state=state,
            result=response.body if status == OperationStatus.SUCCEEDED else None,
            error=_service_error(data) if status == OperationStatus.FAILED else None,
            next_interval=retry_after(headers),
        )

    async def poll_once(self, state: dict[str, Any]) -> PollOutcome[T]:
        mode = PollingMode(state["mode"])
        response = await self._client.send_operation_request(
            {"polling_url": state["polling_url"]}, poll_operation_spec
        )
        data = _json_object(response.content)
        next_interval = retry_after(response.headers)

        match mode:
            case PollingMode.OPERATION:
                if "status" not in data:
                    msg = "Status document does not carry a status"
                    raise RestError(msg, kind=ErrorKind.PROTOCOL, status_code=response.status_code)
                status = map_service_status(data.get("status"))
                new_state = None
            case PollingMode.LOCATION:
                status = OperationStatus.RUNNING if response.status_code == 202 else OperationStatus.SUCCEEDED
                moved = response.headers.get("location")
                new_state = {**state, "polling_url": moved} if moved and moved != state["polling_url"] else None
            case PollingMode.BODY:
                state_value = _provisioning_state(data)
                status = OperationStatus.SUCCEEDED if state_value is None else map_service_status(state_value)
                new_state = None

        logger.debug("Polled %s: %s", self._spec.name, status)
        if status == OperationStatus.FAILED:
            return PollOutcome(status=status, error=_service_error(data), next_interval=next_interval)
        if status != OperationStatus.SUCCEEDED:
            return PollOutcome(status=status, next_interval=next_interval, state=new_state)

        result = await self._final_result(state, mode, response)
        return PollOutcome(status=status, result=result)

    async def cancel(self, state: dict[str, Any]) -> PollOutcome[T]:
        msg = "This operation cannot be cancelled"
        raise RestError(msg, kind=ErrorKind.USAGE)

    async def _final_result(
        self,
        state: Mapping[str, Any],
        mode: PollingMode,
        last: OperationResponse,
    ) -> Any:
        if self._result_model is None:
            return None

        resource_location = state.get("resource_location")
        serializer = self._client.serializer

        if mode == PollingMode.BODY or (
            mode == PollingMode.LOCATION and resource_location != ResourceLocation.ORIGINAL_URI
        ):
            return serializer.deserialize(self._result_model, last.content)
        if resource_location == ResourceLocation.AZURE_ASYNC_OPERATION:
            return serializer.deserialize(self._result_model, last.content)

        if state["method"] in ("PUT", "PATCH") or resource_location == ResourceLocation.ORIGINAL_URI:
            url = state["resource_url"]
        elif resource_location == ResourceLocation.LOCATION and state.get("location_url"):
            url = state["location_url"]
        else:
            return None

        final = await self._client.send_operation_request(
            {"polling_url": url}, _final_get_spec(self._result_model)
        )
        return final.body
