"""Client runtime for cloud storage and resource-management services."""

from cloudrest._version import __version__
from cloudrest.config import ClientSettings, get_settings
from cloudrest.errors import ErrorKind, RestError, ServiceError
from cloudrest.paging import Page, PageCursor, PageIterator, PageSettings
from cloudrest.polling import LroPoller, OperationState, OperationStatus
from cloudrest.protocols import LroOperation, PageFetcher, Provider

__all__ = [
    "ClientSettings",
    "ErrorKind",
    "LroOperation",
    "LroPoller",
    "OperationState",
    "OperationStatus",
    "Page",
    "PageCursor",
    "PageFetcher",
    "PageIterator",
    "PageSettings",
    "Provider",
    "RestError",
    "ServiceError",
    "__version__",
    "get_settings",
]
