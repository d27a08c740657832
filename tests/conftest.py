"""Shared fixtures for client tests."""

import json
from collections.abc import Callable

import httpx
import pytest
from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import SimpleSpanProcessor
from opentelemetry.sdk.trace.export.in_memory_span_exporter import InMemorySpanExporter

from cloudrest.config import get_settings

_exporter = InMemorySpanExporter()
_provider = TracerProvider()
_provider.add_span_processor(SimpleSpanProcessor(_exporter))
trace.set_tracer_provider(_provider)


@pytest.fixture
def span_exporter():
    """In-memory exporter receiving every span finished during the test."""
    _exporter.clear()
    yield _exporter
    _exporter.clear()


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Isolate cached settings between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class RecordingHandler:
    """MockTransport handler that records requests and replays scripted responses."""

    def __init__(self, respond: Callable[[httpx.Request], httpx.Response]):
        self.respond = respond
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.respond(request)

    @property
    def methods(self) -> list[str]:
        return [r.method for r in self.requests]


def json_response(status_code: int, body: object = None, headers: dict[str, str] | None = None) -> httpx.Response:
    content = b"" if body is None else json.dumps(body).encode()
    return httpx.Response(status_code, content=content, headers=headers)


def xml_response(status_code: int, body: str = "", headers: dict[str, str] | None = None) -> httpx.Response:
    return httpx.Response(status_code, content=body.encode(), headers=headers)
