"""Request authentication and connection-string parsing."""

import base64
import hashlib
import hmac
from collections.abc import Generator
from email.utils import formatdate
from typing import Literal
from urllib.parse import urlsplit

import httpx
from pydantic import BaseModel

from cloudrest.errors import ErrorKind, RestError

_SIGNED_HEADERS = (
    "content-encoding",
    "content-language",
    "content-length",
    "content-md5",
    "content-type",
    "date",
    "if-modified-since",
    "if-match",
    "if-none-match",
    "if-unmodified-since",
    "range",
)


class AnonymousCredential(httpx.Auth):
    """No authentication; used with SAS-bearing URLs or public resources."""

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        yield request


class TokenCredential(httpx.Auth):
    """Static bearer token for management-plane requests."""

    def __init__(self, token: str) -> None:
        self._token = token

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["Authorization"] = f"Bearer {self._token}"
        yield request


class SharedKeyCredential(httpx.Auth):
    """Signs storage requests with the account's shared key."""

    def __init__(self, account_name: str, account_key: str) -> None:
        try:
            self._key = base64.b64decode(account_key, validate=True)
        except ValueError as e:
            msg = "Account key is not valid base64"
            raise RestError(msg, kind=ErrorKind.CONFIGURATION, source=e) from e
        self.account_name = account_name

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        request.headers["x-ms-date"] = formatdate(usegmt=True)
        signature = self.compute_signature(self.string_to_sign(request))
        request.headers["Authorization"] = f"SharedKey {self.account_name}:{signature}"
        yield request

    def compute_signature(self, string_to_sign: str) -> str:
        digest = hmac.new(self._key, string_to_sign.encode("utf-8"), hashlib.sha256).digest()
        return base64.b64encode(digest).decode("utf-8")

    def string_to_sign(self, request: httpx.Request) -> str:
        lines = [request.method.upper()]
        for name in _SIGNED_HEADERS:
            value = request.headers.get(name, "")
            if name == "content-length" and value == "0":
                value = ""
            lines.append(value)
        return "\n".join(lines) + "\n" + self._canonical_headers(request) + self._canonical_resource(request)

    def _canonical_headers(self, request: httpx.Request) -> str:
        ms_headers = sorted(
            (name.lower(), value.strip())
            for name, value in request.headers.items()
            if name.lower().startswith("x-ms-")
        )
        return "".join(f"{name}:{value}\n" for name, value in ms_headers)

    def _canonical_resource(self, request: httpx.Request) -> str:
        path = request.url.raw_path.decode("ascii").split("?", 1)[0] or "/"
        resource = f"/{self.account_name}{path}"

        grouped: dict[str, list[str]] = {}
        for name, value in request.url.params.multi_items():
            grouped.setdefault(name.lower(), []).append(value)
        for name in sorted(grouped):
            resource += f"\n{name}:{','.join(sorted(grouped[name]))}"
        return resource


class ConnectionStringParts(BaseModel, frozen=True):
    """Endpoint and secrets extracted from a storage connection string."""

    kind: Literal["account", "sas"]
    url: str
    account_name: str | None = None
    account_key: str | None = None
    account_sas: str | None = None


def parse_connection_string(connection_string: str) -> ConnectionStringParts:
    """Parse an account-key or SAS connection string for the file endpoint."""
    fields: dict[str, str] = {}
    for segment in connection_string.strip().split(";"):
        if not segment.strip():
            continue
        key, sep, value = segment.partition("=")
        if not sep:
            msg = f"Malformed connection string segment '{segment}'"
            raise RestError(msg, kind=ErrorKind.CONFIGURATION)
        fields[key.strip()] = value.strip()

    file_endpoint = fields.get("FileEndpoint", "").rstrip("/") or None

    if "AccountKey" in fields:
        account_name = fields.get("AccountName")
        if not account_name:
            msg = "Account connection string is missing AccountName"
            raise RestError(msg, kind=ErrorKind.CONFIGURATION)
        if file_endpoint is None:
            protocol = fields.get("DefaultEndpointsProtocol", "https").lower()
            suffix = fields.get("EndpointSuffix", "core.windows.net")
            file_endpoint = f"{protocol}://{account_name}.file.{suffix}"
        return ConnectionStringParts(
            kind="account",
            url=file_endpoint,
            account_name=account_name,
            account_key=fields["AccountKey"],
        )

    if "SharedAccessSignature" in fields:
        if file_endpoint is None:
            msg = "SAS connection string is missing FileEndpoint"
            raise RestError(msg, kind=ErrorKind.CONFIGURATION)
        host = urlsplit(file_endpoint).hostname or ""
        return ConnectionStringParts(
            kind="sas",
            url=file_endpoint,
            account_name=host.split(".", 1)[0] or None,
            account_sas=fields["SharedAccessSignature"].lstrip("?"),
        )

    msg = "Connection string must be either an account connection string or a SAS connection string"
    raise RestError(msg, kind=ErrorKind.CONFIGURATION)
