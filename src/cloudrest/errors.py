"""Error types for client operations."""

from enum import StrEnum
from typing import final

from pydantic import BaseModel, ConfigDict, Field


class ErrorKind(StrEnum):
    """Classification of client errors."""

    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    USAGE = "usage"
    CANCELLED = "cancelled"
    SERIALIZATION = "serialization"
    CONFIGURATION = "configuration"


class ServiceError(BaseModel, frozen=True):
    """Error payload reported by a service.

    Covers both the management-plane `{"error": {...}}` detail and the
    storage `<Error><Code/><Message/></Error>` document.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    code: str | None = None
    message: str | None = None
    target: str | None = None
    details: list["ServiceError"] = Field(default_factory=list)


@final
class RestError(Exception):
    """Base error for all client operations."""

    __slots__ = ("error", "kind", "message", "source", "status_code")

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.TRANSPORT,
        source: BaseException | None = None,
        status_code: int | None = None,
        error: ServiceError | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind
        self.source = source
        self.status_code = status_code
        self.error = error

    def __repr__(self) -> str:
        if self.status_code is None:
            return f"RestError({self.message!r}, kind={self.kind!r})"
        return f"RestError({self.message!r}, kind={self.kind!r}, status_code={self.status_code})"
