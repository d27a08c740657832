"""File-share service provider."""

import logging
from types import TracebackType
from typing import ClassVar, Self

from pydantic import BaseModel

from cloudrest.credentials import AnonymousCredential, SharedKeyCredential, parse_connection_string
from cloudrest.errors import ErrorKind, RestError
from cloudrest.generated import parameters
from cloudrest.generated.params import StorageParams
from cloudrest.generated.storage_file import (
    ListSharesIncludeType,
    ListSharesResponse,
    ResponseHeaders,
    ServiceSetPropertiesResponse,
    ShareCreateResponse,
    ShareDeleteResponse,
    ShareGetPropertiesResponse,
    ShareItem,
    StorageServiceProperties,
)
from cloudrest.generated.datatypes import Metadata
from cloudrest.operations import OperationSpec, ResponseSpec
from cloudrest.paging import Page, PageCursor
from cloudrest.tracing import traced
from cloudrest.transport import ServiceClient

logger = logging.getLogger(__name__)


class FileServiceCredentials(BaseModel, frozen=True):
    """Credentials for the file service.

    Provide an account key for shared-key signing, a SAS token, or neither
    for anonymous access (e.g. a SAS already embedded in the URL).
    """

    account_name: str | None = None
    account_key: str | None = None
    sas_token: str | None = None


class FileServiceParams(StorageParams, frozen=True):
    """Parameters for file-service operations.

    Inherits `url`, `api_version` and transport settings from StorageParams.
    """


# Operation specifications

get_properties_spec = OperationSpec(
    name="FileService.getProperties",
    path="/",
    method="GET",
    responses={
        200: ResponseSpec(body_model=StorageServiceProperties, headers_model=ResponseHeaders),
    },
    query_parameters=(parameters.restype_service, parameters.comp_properties, parameters.timeout),
    header_parameters=(parameters.file_version, parameters.accept_xml),
    is_xml=True,
)

set_properties_spec = OperationSpec(
    name="FileService.setProperties",
    path="/",
    method="PUT",
    responses={
        202: ResponseSpec(headers_model=ServiceSetPropertiesResponse),
    },
    query_parameters=(parameters.restype_service, parameters.comp_properties, parameters.timeout),
    header_parameters=(parameters.file_version, parameters.content_type_xml),
    request_body=parameters.storage_service_properties,
    media_type="xml",
    is_xml=True,
)

list_shares_segment_spec = OperationSpec(
    name="FileService.listSharesSegment",
    path="/",
    method="GET",
    responses={
        200: ResponseSpec(body_model=ListSharesResponse, headers_model=ResponseHeaders),
    },
    query_parameters=(
        parameters.comp_list,
        parameters.prefix,
        parameters.marker,
        parameters.max_results,
        parameters.include,
        parameters.timeout,
    ),
    header_parameters=(parameters.file_version, parameters.accept_xml),
    is_xml=True,
)

create_share_spec = OperationSpec(
    name="Share.create",
    path="/{shareName}",
    method="PUT",
    responses={201: ResponseSpec(headers_model=ShareCreateResponse)},
    url_parameters=(parameters.share_name,),
    query_parameters=(parameters.restype_share, parameters.timeout),
    header_parameters=(parameters.file_version, parameters.metadata, parameters.quota),
    is_xml=True,
)

delete_share_spec = OperationSpec(
    name="Share.delete",
    path="/{shareName}",
    method="DELETE",
    responses={202: ResponseSpec(headers_model=ShareDeleteResponse)},
    url_parameters=(parameters.share_name,),
    query_parameters=(parameters.restype_share, parameters.timeout),
    header_parameters=(parameters.file_version, parameters.delete_snapshots),
    is_xml=True,
)

get_share_properties_spec = OperationSpec(
    name="Share.getProperties",
    path="/{shareName}",
    method="GET",
    responses={200: ResponseSpec(headers_model=ShareGetPropertiesResponse)},
    url_parameters=(parameters.share_name,),
    query_parameters=(parameters.restype_share, parameters.timeout),
    header_parameters=(parameters.file_version,),
    is_xml=True,
)


class ShareClient:
    """Operations on a single share."""

    __slots__: ClassVar[tuple[str, str]] = ("_client", "name")

    _client: ServiceClient
    name: str

    def __init__(self, client: ServiceClient, name: str) -> None:
        self._client = client
        self.name = name

    @property
    def url(self) -> str:
        return f"{self._client.endpoint.split('?', 1)[0].rstrip('/')}/{self.name}"

    async def create(self, *, metadata: Metadata | None = None, quota: int | None = None) -> ShareCreateResponse:
        """Create the share; fails if it already exists."""
        async with traced("ShareClient.create", share=self.name):
            response = await self._client.send_operation_request(
                {"share_name": self.name, "metadata": metadata, "quota": quota},
                create_share_spec,
            )
        return response.parsed_headers

    async def delete(self, *, delete_snapshots: bool = False) -> ShareDeleteResponse:
        """Mark the share for deletion."""
        async with traced("ShareClient.delete", share=self.name):
            response = await self._client.send_operation_request(
                {"share_name": self.name, "delete_snapshots": "include" if delete_snapshots else None},
                delete_share_spec,
            )
        return response.parsed_headers

    async def get_properties(self) -> ShareGetPropertiesResponse:
        async with traced("ShareClient.get_properties", share=self.name):
            response = await self._client.send_operation_request(
                {"share_name": self.name},
                get_share_properties_spec,
            )
        return response.parsed_headers


class FileServiceProvider:
    """File-service provider for share management."""

    __slots__: ClassVar[tuple[str, str]] = ("_client", "_params")

    _client: ServiceClient
    _params: FileServiceParams

    def __init__(self, client: ServiceClient, params: FileServiceParams) -> None:
        self._client = client
        self._params = params

    @classmethod
    async def connect(cls, credentials: FileServiceCredentials, params: FileServiceParams) -> Self:
        """Create the HTTP client for the file service."""
        url = params.url
        if credentials.account_key:
            if not credentials.account_name:
                msg = "account_name is required with account_key"
                raise RestError(msg, kind=ErrorKind.CONFIGURATION)
            auth = SharedKeyCredential(credentials.account_name, credentials.account_key)
        else:
            auth = AnonymousCredential()
            if credentials.sas_token:
                separator = "&" if "?" in url else "?"
                url = f"{url}{separator}{credentials.sas_token.lstrip('?')}"

        client = ServiceClient.create(
            url,
            auth=auth,
            timeout=params.timeout,
            max_retries=params.max_retries,
            user_agent=params.user_agent,
            defaults={"file_version": params.api_version},
        )
        logger.info("Connected to file service at %s", params.url)
        return cls(client, params)

    @classmethod
    async def from_connection_string(
        cls,
        connection_string: str,
        params: FileServiceParams | None = None,
    ) -> Self:
        """Connect using an account-key or SAS connection string."""
        parts = parse_connection_string(connection_string)
        if params is None:
            params = FileServiceParams(url=parts.url)
        else:
            params = params.model_copy(update={"url": parts.url})

        if parts.kind == "account":
            credentials = FileServiceCredentials(account_name=parts.account_name, account_key=parts.account_key)
        else:
            credentials = FileServiceCredentials(sas_token=parts.account_sas)
        return await cls.connect(credentials, params)

    async def disconnect(self) -> None:
        """Close the HTTP client."""
        await self._client.close()
        logger.info("Disconnected from file service")

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.disconnect()

    def get_share_client(self, share_name: str) -> ShareClient:
        return ShareClient(self._client, share_name)

    async def create_share(
        self,
        share_name: str,
        *,
        metadata: Metadata | None = None,
        quota: int | None = None,
    ) -> tuple[ShareCreateResponse, ShareClient]:
        """Create a share and return its response together with a client for it."""
        async with traced("FileServiceProvider.create_share", share=share_name):
            share_client = self.get_share_client(share_name)
            response = await share_client.create(metadata=metadata, quota=quota)
        return response, share_client

    async def delete_share(self, share_name: str, *, delete_snapshots: bool = False) -> ShareDeleteResponse:
        async with traced("FileServiceProvider.delete_share", share=share_name):
            return await self.get_share_client(share_name).delete(delete_snapshots=delete_snapshots)

    async def get_properties(self) -> StorageServiceProperties:
        """Get the service's metrics and CORS settings."""
        async with traced("FileServiceProvider.get_properties"):
            response = await self._client.send_operation_request({}, get_properties_spec)
        return response.body

    async def set_properties(self, properties: StorageServiceProperties) -> ServiceSetPropertiesResponse:
        """Set the service's metrics and CORS settings."""
        async with traced("FileServiceProvider.set_properties"):
            response = await self._client.send_operation_request(
                {"properties": properties},
                set_properties_spec,
            )
        return response.parsed_headers

    def list_shares(
        self,
        *,
        prefix: str | None = None,
        include: list[ListSharesIncludeType] | None = None,
    ) -> PageCursor[ShareItem]:
        """List shares lazily, one segment per round trip.

        `by_page(max_page_size=...)` is sent as `maxresults`; the service
        caps it at 5000.
        """

        async def fetch_page(continuation_token: str | None, max_page_size: int | None) -> Page[ShareItem]:
            segment = await self._list_shares_segment(
                continuation_token,
                prefix=prefix,
                include=include,
                max_results=max_page_size,
            )
            return Page(items=segment.share_items, continuation_token=segment.next_marker)

        return PageCursor(fetch_page)

    async def _list_shares_segment(
        self,
        marker: str | None,
        *,
        prefix: str | None = None,
        include: list[ListSharesIncludeType] | None = None,
        max_results: int | None = None,
    ) -> ListSharesResponse:
        async with traced("FileServiceProvider.list_shares_segment"):
            response = await self._client.send_operation_request(
                {"marker": marker, "prefix": prefix, "include": include, "max_results": max_results},
                list_shares_segment_spec,
            )
        return response.body


Provider = FileServiceProvider
