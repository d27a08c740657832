"""HTTP transport executing declarative operation specs over httpx."""

import json
import logging
from collections.abc import Mapping
from typing import Any, ClassVar, Self
from urllib.parse import quote, urlsplit, urlunsplit

import httpx
from pydantic import BaseModel, ConfigDict, ValidationError

from cloudrest.errors import ErrorKind, RestError
from cloudrest.operations import OperationSpec, Parameter
from cloudrest.serialization import Serializer

logger = logging.getLogger(__name__)


class OperationResponse(BaseModel, frozen=True):
    """Mapped response of a single operation request."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    status_code: int
    headers: dict[str, str]
    """Response headers with lower-cased names."""

    body: Any = None
    """Body parsed with the declared body model, or None."""

    parsed_headers: BaseModel | None = None
    """Headers parsed with the declared headers model, or None."""

    content: bytes = b""
    url: str = ""


class ServiceClient:
    """Binds arguments to operation specs and sends them with an `httpx.AsyncClient`.

    `defaults` supplies arguments shared by every operation of a client,
    such as the subscription id.
    """

    __slots__: ClassVar[tuple[str, ...]] = ("_client", "_defaults", "_endpoint", "_serializer")

    _client: httpx.AsyncClient
    _defaults: dict[str, Any]
    _endpoint: str
    _serializer: Serializer

    def __init__(
        self,
        client: httpx.AsyncClient,
        endpoint: str,
        *,
        serializer: Serializer | None = None,
        defaults: Mapping[str, Any] | None = None,
    ) -> None:
        self._client = client
        self._endpoint = endpoint
        self._serializer = serializer or Serializer()
        self._defaults = dict(defaults or {})

    @classmethod
    def create(
        cls,
        endpoint: str,
        *,
        auth: httpx.Auth | None = None,
        timeout: float = 30.0,
        max_retries: int = 3,
        user_agent: str | None = None,
        defaults: Mapping[str, Any] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> Self:
        """Build a client with its own connection pool.

        Connection-level retries are delegated to the httpx transport.
        """
        headers = {"User-Agent": user_agent} if user_agent else None
        client = httpx.AsyncClient(
            auth=auth,
            timeout=timeout,
            headers=headers,
            transport=transport or httpx.AsyncHTTPTransport(retries=max_retries),
        )
        return cls(client, endpoint, defaults=defaults)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    async def close(self) -> None:
        await self._client.aclose()

    def build_request(self, args: Mapping[str, Any], spec: OperationSpec) -> httpx.Request:
        """Bind `args` to `spec` and build the outgoing request."""
        bound = {**self._defaults, **{k: v for k, v in args.items() if v is not None}}

        path = spec.path
        for param in spec.url_parameters:
            value = _bind(param, bound)
            if value is None:
                continue
            text = str(value) if param.skip_encoding else quote(str(value), safe="")
            path = path.replace("{" + param.serialized_name + "}", text)

        if path.startswith(("http://", "https://")):
            url = path
        else:
            scheme, netloc, base_path, query, _ = urlsplit(self._endpoint)
            url = urlunsplit((scheme, netloc, base_path.rstrip("/") + path, query, ""))

        params: list[tuple[str, str]] = []
        for param in spec.query_parameters:
            value = _bind(param, bound)
            if value is not None:
                params.append((param.serialized_name, _format(value)))

        headers: dict[str, str] = {}
        for param in spec.header_parameters:
            value = _bind(param, bound)
            if value is None:
                continue
            if param.header_collection_prefix is not None:
                for key, item in dict(value).items():
                    headers[param.header_collection_prefix + key] = _format(item)
            else:
                headers[param.serialized_name] = _format(value)

        content: bytes | None = None
        if spec.request_body is not None:
            value = _bind(spec.request_body, bound)
            if value is not None:
                content = self._encode_body(value, spec)

        return self._client.build_request(
            spec.method, url, params=params or None, headers=headers, content=content
        )

    async def send_operation_request(
        self,
        args: Mapping[str, Any],
        spec: OperationSpec,
    ) -> OperationResponse:
        """Send the operation and map its response through the declared schemas."""
        request = self.build_request(args, spec)
        logger.debug("Sending %s %s", request.method, request.url)

        try:
            response = await self._client.send(request)
        except httpx.HTTPError as e:
            logger.error("Request %s %s failed: %s", request.method, request.url, e)
            msg = f"Failed to send {spec.name or spec.method} request: {e}"
            raise RestError(msg, kind=ErrorKind.TRANSPORT, source=e) from e

        headers = {k.lower(): v for k, v in response.headers.items()}
        declared = spec.response_for(response.status_code)
        if declared is None:
            error_spec = spec.error_response
            error = self._serializer.deserialize_error(
                response.content,
                is_xml=spec.is_xml,
                model=error_spec.body_model if error_spec is not None else None,
            )
            logger.error(
                "%s %s returned unexpected status %d",
                request.method,
                request.url,
                response.status_code,
            )
            msg = f"Unexpected status {response.status_code}"
            if error is not None and error.message:
                msg = f"{msg}: {error.message}"
            raise RestError(msg, kind=ErrorKind.TRANSPORT, status_code=response.status_code, error=error)

        body = None
        if declared.body_model is not None:
            body = self._serializer.deserialize(declared.body_model, response.content, is_xml=spec.is_xml)

        parsed_headers = None
        if declared.headers_model is not None:
            try:
                parsed_headers = declared.headers_model.model_validate(headers)
            except ValidationError as e:
                msg = f"Response headers do not match {declared.headers_model.__name__}: {e}"
                raise RestError(msg, kind=ErrorKind.SERIALIZATION, source=e) from e

        return OperationResponse(
            status_code=response.status_code,
            headers=headers,
            body=body,
            parsed_headers=parsed_headers,
            content=response.content,
            url=str(request.url),
        )

    def _encode_body(self, value: object, spec: OperationSpec) -> bytes:
        if isinstance(value, BaseModel):
            return self._serializer.serialize(value, is_xml=spec.media_type == "xml")
        if isinstance(value, bytes):
            return value
        return json.dumps(value).encode()


def _bind(param: Parameter, bound: Mapping[str, Any]) -> Any:
    if param.constant is not None:
        return param.constant
    value = bound.get(param.name)
    if value is None and param.required:
        msg = f"Missing required parameter '{param.name}'"
        raise RestError(msg, kind=ErrorKind.USAGE)
    return value


def _format(value: object) -> str:
    if isinstance(value, list | tuple):
        return ",".join(str(v) for v in value)
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)
