"""Tests for request authentication and connection strings."""

import base64
import hashlib
import hmac

import httpx
import pytest

from conftest import RecordingHandler
from cloudrest.credentials import (
    AnonymousCredential,
    SharedKeyCredential,
    TokenCredential,
    parse_connection_string,
)
from cloudrest.errors import ErrorKind, RestError

ACCOUNT_KEY = base64.b64encode(b"secret-key-bytes").decode()


async def send_with(auth, request_kwargs=None):
    handler = RecordingHandler(lambda request: httpx.Response(200))
    async with httpx.AsyncClient(auth=auth, transport=httpx.MockTransport(handler)) as client:
        _ = await client.get("https://acct.file.core.windows.net/?comp=list", **(request_kwargs or {}))
    return handler.requests[0]


class TestTokenCredential:
    """Test bearer-token authentication."""

    @pytest.mark.asyncio
    async def test_sets_authorization(self):
        request = await send_with(TokenCredential("tok-123"))

        assert request.headers["Authorization"] == "Bearer tok-123"

    @pytest.mark.asyncio
    async def test_anonymous_adds_nothing(self):
        request = await send_with(AnonymousCredential())

        assert "Authorization" not in request.headers


class TestSharedKeyCredential:
    """Test shared-key request signing."""

    def test_string_to_sign(self):
        """Test the canonical string covers headers, x-ms headers and resource."""
        credential = SharedKeyCredential("acct", ACCOUNT_KEY)
        request = httpx.Request(
            "GET",
            "https://acct.file.core.windows.net/?maxresults=5&comp=list",
            headers={"x-ms-version": "2019-07-07", "x-ms-date": "Mon, 01 Jan 2024 00:00:00 GMT"},
        )

        expected = (
            "GET"
            + "\n" * 12
            + "x-ms-date:Mon, 01 Jan 2024 00:00:00 GMT\n"
            + "x-ms-version:2019-07-07\n"
            + "/acct/\ncomp:list\nmaxresults:5"
        )
        assert credential.string_to_sign(request) == expected

    def test_zero_content_length_is_blank(self):
        """Test a zero Content-Length is signed as an empty value."""
        credential = SharedKeyCredential("acct", ACCOUNT_KEY)
        request = httpx.Request("PUT", "https://acct.file.core.windows.net/share?restype=share")

        lines = credential.string_to_sign(request).split("\n")

        assert lines[0] == "PUT"
        assert lines[3] == ""

    def test_signature_is_hmac_sha256(self):
        credential = SharedKeyCredential("acct", ACCOUNT_KEY)

        expected = base64.b64encode(
            hmac.new(b"secret-key-bytes", b"payload", hashlib.sha256).digest()
        ).decode()
        assert credential.compute_signature("payload") == expected

    @pytest.mark.asyncio
    async def test_signs_request(self):
        """Test outgoing requests carry a date and a SharedKey header."""
        request = await send_with(SharedKeyCredential("acct", ACCOUNT_KEY))

        assert "x-ms-date" in request.headers
        assert request.headers["Authorization"].startswith("SharedKey acct:")

    def test_invalid_key(self):
        with pytest.raises(RestError) as exc_info:
            _ = SharedKeyCredential("acct", "not base64!")
        assert exc_info.value.kind == ErrorKind.CONFIGURATION


class TestConnectionString:
    """Test parsing account-key and SAS connection strings."""

    def test_account_default_endpoint(self):
        parts = parse_connection_string(
            f"DefaultEndpointsProtocol=https;AccountName=acct;AccountKey={ACCOUNT_KEY};"
            "EndpointSuffix=core.windows.net"
        )

        assert parts.kind == "account"
        assert parts.url == "https://acct.file.core.windows.net"
        assert parts.account_name == "acct"
        assert parts.account_key == ACCOUNT_KEY

    def test_account_explicit_endpoint(self):
        parts = parse_connection_string(
            f"AccountName=acct;AccountKey={ACCOUNT_KEY};FileEndpoint=http://127.0.0.1:10004/acct/"
        )

        assert parts.url == "http://127.0.0.1:10004/acct"

    def test_account_protocol_and_suffix(self):
        parts = parse_connection_string(
            f"DefaultEndpointsProtocol=http;AccountName=acct;AccountKey={ACCOUNT_KEY};"
            "EndpointSuffix=core.chinacloudapi.cn"
        )

        assert parts.url == "http://acct.file.core.chinacloudapi.cn"

    def test_sas(self):
        parts = parse_connection_string(
            "FileEndpoint=https://acct.file.core.windows.net/;SharedAccessSignature=?sv=2019-07-07&sig=abc"
        )

        assert parts.kind == "sas"
        assert parts.url == "https://acct.file.core.windows.net"
        assert parts.account_name == "acct"
        assert parts.account_sas == "sv=2019-07-07&sig=abc"

    @pytest.mark.parametrize(
        "connection_string",
        [
            "SharedAccessSignature=sv=2019-07-07&sig=abc",
            f"AccountKey={ACCOUNT_KEY}",
            "AccountName=acct",
            "garbage",
            "",
        ],
    )
    def test_invalid(self, connection_string):
        """Test incomplete or unknown connection strings are configuration errors."""
        with pytest.raises(RestError) as exc_info:
            _ = parse_connection_string(connection_string)
        assert exc_info.value.kind == ErrorKind.CONFIGURATION
