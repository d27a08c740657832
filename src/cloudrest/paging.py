"""Cursor-based pagination over a single page-fetch primitive.

A listing operation supplies one `PageFetcher`. `PageCursor` turns it into a
lazy async sequence of items, and `PageCursor.by_page` into a lazy async
sequence of whole pages. Continuation tokens are opaque: they are stored and
forwarded exactly as the fetcher returned them.
"""

import logging
from collections.abc import Iterator
from typing import ClassVar, Generic, Literal, Self, TypeVar

from pydantic import BaseModel, Field, ValidationError

from cloudrest.errors import ErrorKind, RestError
from cloudrest.protocols import PageFetcher

T = TypeVar("T")

logger = logging.getLogger(__name__)


class Page(BaseModel, Generic[T], frozen=True):
    """One server-returned batch of items."""

    items: list[T] = Field(default_factory=list)
    """Items in server order."""

    continuation_token: str | None = None
    """Token for the next page, absent on the last page."""


class PageSettings(BaseModel, frozen=True):
    """Options accepted by `PageCursor.by_page`."""

    continuation_token: str | None = None
    """Resume from this token instead of the beginning."""

    max_page_size: int | None = Field(default=None, gt=0)
    """Advisory bound on items per round trip; the service may clamp it."""


class PageIterator(Generic[T]):
    """Explicit state machine yielding pages until the service stops returning a token."""

    __slots__: ClassVar[tuple[str, ...]] = (
        "_continuation_token",
        "_exhausted",
        "_fetch_page",
        "_max_page_size",
        "_page_count",
    )

    _continuation_token: str | None
    _exhausted: bool
    _fetch_page: PageFetcher[T]
    _max_page_size: int | None
    _page_count: int

    def __init__(
        self,
        fetch_page: PageFetcher[T],
        *,
        continuation_token: str | None = None,
        max_page_size: int | None = None,
    ) -> None:
        self._fetch_page = fetch_page
        self._continuation_token = continuation_token
        self._max_page_size = max_page_size
        self._exhausted = False
        self._page_count = 0

    @property
    def continuation_token(self) -> str | None:
        """Token of the next page to fetch, or of the last page fetched successfully."""
        return self._continuation_token

    @property
    def exhausted(self) -> bool:
        return self._exhausted

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> Page[T]:
        if self._exhausted:
            raise StopAsyncIteration

        logger.debug(
            "Fetching page %d (token=%r, max_page_size=%s)",
            self._page_count + 1,
            self._continuation_token,
            self._max_page_size,
        )
        # A failed fetch leaves the token untouched so a new cursor can retry from it.
        page = await self._fetch_page(self._continuation_token, self._max_page_size)

        self._page_count += 1
        self._continuation_token = page.continuation_token
        if not page.continuation_token:
            self._exhausted = True
        return page


class PageCursor(Generic[T]):
    """Lazy, finite, non-restartable sequence over a paginated listing.

    Iterating the cursor directly yields items; `by_page()` yields pages.
    The two views are chosen once per instance: whichever is requested
    first wins and asking for the other afterwards is a usage error.
    """

    __slots__: ClassVar[tuple[str, ...]] = (
        "_current",
        "_fetch_page",
        "_mode",
        "_pages",
        "_supports_max_page_size",
    )

    _current: Iterator[T]
    _fetch_page: PageFetcher[T]
    _mode: Literal["items", "pages"] | None
    _pages: PageIterator[T] | None
    _supports_max_page_size: bool

    def __init__(self, fetch_page: PageFetcher[T], *, supports_max_page_size: bool = True) -> None:
        self._fetch_page = fetch_page
        self._supports_max_page_size = supports_max_page_size
        self._mode = None
        self._pages = None
        self._current = iter(())

    def by_page(
        self,
        settings: PageSettings | None = None,
        *,
        continuation_token: str | None = None,
        max_page_size: int | None = None,
    ) -> PageIterator[T]:
        """Return a page-level iterator.

        Options may be given as a `PageSettings` object or as keyword
        arguments; keyword arguments take precedence.
        """
        if self._mode == "items":
            msg = "by_page() cannot be used after item iteration has started"
            raise RestError(msg, kind=ErrorKind.USAGE)

        base = settings or PageSettings()
        try:
            resolved = PageSettings(
                continuation_token=continuation_token or base.continuation_token,
                max_page_size=max_page_size if max_page_size is not None else base.max_page_size,
            )
        except ValidationError as e:
            msg = f"Invalid page settings: {e}"
            raise RestError(msg, kind=ErrorKind.USAGE, source=e) from e

        if resolved.max_page_size is not None and not self._supports_max_page_size:
            msg = "max_page_size is not supported by this operation"
            raise RestError(msg, kind=ErrorKind.USAGE)

        self._mode = "pages"
        return PageIterator(
            self._fetch_page,
            continuation_token=resolved.continuation_token,
            max_page_size=resolved.max_page_size,
        )

    def __aiter__(self) -> Self:
        return self

    async def __anext__(self) -> T:
        if self._pages is None:
            if self._mode == "pages":
                msg = "Item iteration cannot start after by_page() was requested"
                raise RestError(msg, kind=ErrorKind.USAGE)
            self._mode = "items"
            self._pages = PageIterator(self._fetch_page)

        while True:
            for item in self._current:
                return item
            # StopAsyncIteration from the page iterator ends item iteration too.
            page = await anext(self._pages)
            self._current = iter(page.items)
