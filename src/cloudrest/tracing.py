"""Span recording around public client operations."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from opentelemetry import trace
from opentelemetry.trace import Span, Status, StatusCode

tracer = trace.get_tracer(__name__)


@asynccontextmanager
async def traced(name: str, **attributes: str | int | bool) -> AsyncIterator[Span]:
    """Run the body inside a span named `name`.

    The span is marked ERROR when the body raises and OK otherwise, and is
    ended on every exit path. Exceptions are always re-raised.
    """
    with tracer.start_as_current_span(
        name,
        attributes=attributes or None,
        record_exception=False,
        set_status_on_exception=False,
    ) as span:
        try:
            yield span
        except BaseException as e:
            span.record_exception(e)
            span.set_status(Status(StatusCode.ERROR, str(e)))
            raise
        span.set_status(Status(StatusCode.OK))
