"""Resumable long-running-operation polling.

`LroPoller` drives an `LroOperation` through a small state machine:

    not_started -> running -> running ... -> succeeded | failed | canceled

Its serializable state is a versioned `ResumeToken`. The token holds only
plain data, never a live client, so a poller can be rebuilt in another
process with `LroPoller.from_resume_token`.
"""

import asyncio
import contextlib
import logging
from collections.abc import Awaitable
from enum import StrEnum
from typing import Any, ClassVar, Generic, Self, TypeVar

from pydantic import BaseModel, Field, ValidationError

from cloudrest.errors import ErrorKind, RestError, ServiceError
from cloudrest.generated.datatypes import JsonValue
from cloudrest.protocols import LroOperation

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)

DEFAULT_POLLING_INTERVAL = 2.0
"""Seconds between polls when the service does not advise an interval."""

RESUME_TOKEN_VERSION = 1


class OperationStatus(StrEnum):
    """Phase of a long-running operation."""

    NOT_STARTED = "not_started"
    RUNNING = "running"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    CANCELED = "canceled"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL


_TERMINAL = frozenset({OperationStatus.SUCCEEDED, OperationStatus.FAILED, OperationStatus.CANCELED})

_TRANSITIONS: dict[OperationStatus, frozenset[OperationStatus]] = {
    OperationStatus.NOT_STARTED: frozenset({OperationStatus.RUNNING}),
    OperationStatus.RUNNING: frozenset({OperationStatus.RUNNING, *_TERMINAL}),
    OperationStatus.SUCCEEDED: frozenset(),
    OperationStatus.FAILED: frozenset(),
    OperationStatus.CANCELED: frozenset(),
}


class Submission(BaseModel, Generic[T], frozen=True):
    """Initial acknowledgement of a long-running operation."""

    status: OperationStatus = OperationStatus.RUNNING
    """Phase implied by the initial response."""

    state: dict[str, JsonValue] = Field(default_factory=dict)
    """Operation-specific locator data (polling URL, resource URL, ...)."""

    result: T | None = None
    """Final result when the service completed synchronously."""

    error: ServiceError | None = None

    next_interval: float | None = Field(default=None, ge=0)


class PollOutcome(BaseModel, Generic[T], frozen=True):
    """Result of a single status check."""

    status: OperationStatus

    result: T | None = None
    """Final result, set when `status` is succeeded."""

    error: ServiceError | None = None
    """Service-reported failure, set when `status` is failed."""

    next_interval: float | None = Field(default=None, ge=0)
    """Service-advised seconds before the next poll."""

    state: dict[str, JsonValue] | None = None
    """Replacement operation state, when the service moved the polling target."""


class OperationState(BaseModel, Generic[T], frozen=True):
    """Snapshot of a poller returned to callers."""

    status: OperationStatus
    result: T | None = None
    error: ServiceError | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == OperationStatus.SUCCEEDED


class ResumeToken(BaseModel, frozen=True):
    """Serialized poller state, sufficient to rebuild an equivalent poller."""

    version: int = RESUME_TOKEN_VERSION
    status: OperationStatus
    polling_interval: float = Field(ge=0)
    state: dict[str, JsonValue] = Field(default_factory=dict)


class LroPoller(Generic[T]):
    """Controllable handle over an in-flight long-running operation.

    Build with `await LroPoller.begin(...)` to start a new operation or with
    `LroPoller.from_resume_token(...)` to continue one captured earlier.
    Instances are not safe to drive from two concurrent call sites.
    """

    __slots__: ClassVar[tuple[str, ...]] = (
        "_error",
        "_next_interval",
        "_operation",
        "_poll_count",
        "_polling_interval",
        "_result",
        "_state",
        "_status",
    )

    _error: ServiceError | None
    _next_interval: float | None
    _operation: LroOperation[T]
    _poll_count: int
    _polling_interval: float
    _result: T | None
    _state: dict[str, Any]
    _status: OperationStatus

    def __init__(
        self,
        operation: LroOperation[T],
        *,
        status: OperationStatus = OperationStatus.NOT_STARTED,
        state: dict[str, Any] | None = None,
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
    ) -> None:
        if polling_interval < 0:
            msg = f"polling_interval must be non-negative, got {polling_interval}"
            raise RestError(msg, kind=ErrorKind.USAGE)
        self._operation = operation
        self._status = status
        self._state = dict(state or {})
        self._polling_interval = polling_interval
        self._next_interval = None
        self._result = None
        self._error = None
        self._poll_count = 0

    @classmethod
    async def begin(
        cls,
        operation: LroOperation[T],
        *,
        polling_interval: float = DEFAULT_POLLING_INTERVAL,
    ) -> Self:
        """Submit a new operation and poll it once.

        A failing submit propagates and no poller is created.
        """
        submission = await operation.submit()

        poller = cls(operation, state=submission.state, polling_interval=polling_interval)
        poller._transition(OperationStatus.RUNNING)
        logger.info("Long-running operation started (status=%s)", submission.status)
        if submission.status.is_terminal:
            poller._apply(
                PollOutcome(
                    status=submission.status,
                    result=submission.result,
                    error=submission.error,
                )
            )
        else:
            poller._next_interval = submission.next_interval

        _ = await poller.poll()
        return poller

    @classmethod
    def from_resume_token(
        cls,
        operation: LroOperation[T],
        token: str,
        *,
        polling_interval: float | None = None,
    ) -> Self:
        """Rebuild a poller from `resume_token()` output without resubmitting."""
        try:
            data = ResumeToken.model_validate_json(token)
        except ValidationError as e:
            msg = f"Invalid resume token: {e}"
            raise RestError(msg, kind=ErrorKind.USAGE, source=e) from e

        if data.version != RESUME_TOKEN_VERSION:
            msg = f"Unsupported resume token version {data.version}"
            raise RestError(msg, kind=ErrorKind.USAGE)
        if data.status.is_terminal:
            msg = f"Cannot resume an operation that already {data.status}"
            raise RestError(msg, kind=ErrorKind.USAGE)

        logger.debug("Restoring long-running operation from resume token")
        return cls(
            operation,
            status=OperationStatus.RUNNING,
            state=data.state,
            polling_interval=data.polling_interval if polling_interval is None else polling_interval,
        )

    @property
    def status(self) -> OperationStatus:
        return self._status

    @property
    def poll_count(self) -> int:
        """Number of completed status round trips."""
        return self._poll_count

    def done(self) -> bool:
        return self._status.is_terminal

    def result(self) -> T | None:
        return self._result

    def snapshot(self) -> OperationState[T]:
        return OperationState(status=self._status, result=self._result, error=self._error)

    def resume_token(self) -> str:
        """Serialize the remaining work of an unfinished operation."""
        if self.done():
            msg = f"Operation already {self._status}; nothing to resume"
            raise RestError(msg, kind=ErrorKind.USAGE)
        token = ResumeToken(
            status=self._status,
            polling_interval=self._polling_interval,
            state=self._state,
        )
        return token.model_dump_json()

    async def poll(self) -> OperationState[T]:
        """Perform exactly one status check and return the updated snapshot.

        A finished poller returns its snapshot without contacting the service.
        Errors raised by the operation leave the status untouched.
        """
        if self.done():
            return self.snapshot()

        outcome = await self._operation.poll_once(dict(self._state))
        self._poll_count += 1
        self._apply(outcome)
        return self.snapshot()

    async def poll_until_done(self, cancel: asyncio.Event | None = None) -> OperationState[T]:
        """Poll until a terminal status is reached.

        Service-reported failures are returned in the final snapshot, not
        raised. Setting `cancel` abandons the current wait or poll and raises
        a `RestError` of kind `CANCELLED`; the service-side operation keeps
        running.
        """
        while not self.done():
            delay = self._polling_interval if self._next_interval is None else self._next_interval
            await self._interruptible(asyncio.sleep(delay), cancel)
            _ = await self._interruptible(self.poll(), cancel)

        logger.info(
            "Long-running operation finished (status=%s, polls=%d)",
            self._status,
            self._poll_count,
        )
        return self.snapshot()

    async def cancel_operation(self) -> OperationState[T]:
        """Ask the service to cancel the operation, when it supports that."""
        if not self._operation.supports_cancel:
            msg = "Cancellation is not supported by this operation"
            raise RestError(msg, kind=ErrorKind.USAGE)
        if self.done():
            return self.snapshot()

        outcome = await self._operation.cancel(dict(self._state))
        self._apply(outcome)
        return self.snapshot()

    def _apply(self, outcome: PollOutcome[T]) -> None:
        self._transition(outcome.status)
        if outcome.state is not None:
            self._state = dict(outcome.state)
        self._next_interval = outcome.next_interval
        if outcome.result is not None:
            self._result = outcome.result
        if outcome.error is not None:
            self._error = outcome.error
        logger.debug("Poll outcome: status=%s next_interval=%s", self._status, self._next_interval)

    def _transition(self, new: OperationStatus) -> None:
        if new not in _TRANSITIONS[self._status]:
            msg = f"Invalid operation status transition {self._status} -> {new}"
            raise RestError(msg, kind=ErrorKind.PROTOCOL)
        self._status = new

    async def _interruptible(self, aw: Awaitable[R], cancel: asyncio.Event | None) -> R:
        if cancel is None:
            return await aw
        if cancel.is_set():
            if asyncio.iscoroutine(aw):
                aw.close()
            raise RestError("Polling was cancelled", kind=ErrorKind.CANCELLED)

        task = asyncio.ensure_future(aw)
        waiter = asyncio.ensure_future(cancel.wait())
        try:
            done, _ = await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for pending in (task, waiter):
                if not pending.done():
                    _ = pending.cancel()
                    with contextlib.suppress(asyncio.CancelledError):
                        await pending

        if task in done:
            return task.result()
        logger.info("Polling cancelled by caller")
        raise RestError("Polling was cancelled", kind=ErrorKind.CANCELLED)
