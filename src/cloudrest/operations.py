"""Declarative operation descriptors.

Each REST operation is described once as data (`OperationSpec`) and executed
by a single generic routine, `ServiceClient.send_operation_request`.
"""

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, Field
from typing_extensions import TypeAliasType

StatusKey = TypeAliasType("StatusKey", int | Literal["default"])


class ParameterLocation(StrEnum):
    """Where a bound argument is placed in the request."""

    PATH = "path"
    QUERY = "query"
    HEADER = "header"
    BODY = "body"


class Parameter(BaseModel, frozen=True):
    """A single request parameter binding."""

    name: str
    """Argument name looked up in the bound arguments."""

    serialized_name: str
    """Name on the wire (path placeholder, query key or header name)."""

    location: ParameterLocation

    required: bool = False

    constant: str | None = None
    """Fixed value; the argument is ignored when set (api-version, accept, ...)."""

    skip_encoding: bool = False
    """Insert the value verbatim, e.g. a service-issued next link."""

    header_collection_prefix: str | None = None
    """Expand a mapping into one header per key, e.g. `x-ms-meta-`."""


class ResponseSpec(BaseModel, frozen=True):
    """Mapping of one status code to its body and header schemas."""

    body_model: type[BaseModel] | None = None
    headers_model: type[BaseModel] | None = None


class OperationSpec(BaseModel, frozen=True):
    """HTTP verb, path template, parameter bindings and status-to-schema table."""

    path: str
    """Path template with `{placeholder}` segments, relative to the endpoint."""

    method: Literal["GET", "PUT", "POST", "PATCH", "DELETE", "HEAD"]

    responses: dict[StatusKey, ResponseSpec]
    """Declared status codes; `"default"` maps error bodies."""

    url_parameters: tuple[Parameter, ...] = ()
    query_parameters: tuple[Parameter, ...] = ()
    header_parameters: tuple[Parameter, ...] = ()

    request_body: Parameter | None = None

    media_type: Literal["json", "xml"] | None = None
    """Content type of `request_body`."""

    is_xml: bool = False
    """Response bodies are XML documents."""

    name: str = Field(default="")
    """Operation name used for spans and logs."""

    def response_for(self, status_code: int) -> ResponseSpec | None:
        """Return the declared response for `status_code`, if any."""
        return self.responses.get(status_code)

    @property
    def error_response(self) -> ResponseSpec | None:
        """Response used to parse error bodies of undeclared statuses."""
        return self.responses.get("default")
