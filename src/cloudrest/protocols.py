"""Core protocols for paging, polling and service providers."""

from typing import TYPE_CHECKING, Any, Protocol, Self, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from cloudrest.paging import Page
    from cloudrest.polling import PollOutcome, Submission

T = TypeVar("T")  # Invariant: pages and outcomes are produced and consumed
T_co = TypeVar("T_co", covariant=True)
Cred_contra = TypeVar("Cred_contra", contravariant=True)
Params_contra = TypeVar("Params_contra", contravariant=True)


@runtime_checkable
class PageFetcher(Protocol[T_co]):
    """Protocol for fetching a single page of a listing."""

    async def __call__(
        self,
        continuation_token: str | None,
        max_page_size: int | None,
    ) -> "Page[T_co]":
        """Fetch the page starting at `continuation_token`.

        A `None` token requests the first page. `max_page_size` is a hint
        the service is free to ignore or clamp.
        """
        ...


@runtime_checkable
class LroOperation(Protocol[T]):
    """Protocol for the primitives behind a long-running operation."""

    supports_cancel: bool

    async def submit(self) -> "Submission[T]":
        """Send the initial request and capture the service acknowledgement."""
        ...

    async def poll_once(self, state: dict[str, Any]) -> "PollOutcome[T]":
        """Perform exactly one status check for the operation described by `state`."""
        ...

    async def cancel(self, state: dict[str, Any]) -> "PollOutcome[T]":
        """Ask the service to stop the operation described by `state`."""
        ...


@runtime_checkable
class Provider(Protocol[Cred_contra, Params_contra]):
    """Protocol for provider lifecycle management."""

    @classmethod
    async def connect(cls, credentials: Cred_contra, params: Params_contra) -> Self:
        """Establish connection to the external service."""
        ...

    async def disconnect(self) -> None:
        """Release resources and close connections."""
        ...
