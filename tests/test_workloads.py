"""Tests for the workloads monitors provider."""

import asyncio
import json

import httpx
import pytest

from conftest import RecordingHandler, json_response
from cloudrest.credentials import TokenCredential
from cloudrest.errors import ErrorKind, RestError
from cloudrest.generated.workloads import Monitor, MonitorProperties, UpdateMonitorRequest
from cloudrest.polling import OperationStatus
from cloudrest.providers import workloads
from cloudrest.providers.workloads import WorkloadsCredentials, WorkloadsParams, WorkloadsProvider
from cloudrest.transport import ServiceClient

ENDPOINT = "https://management.azure.com"
GROUP = "/subscriptions/sub-1/resourceGroups/rg-1/providers/Microsoft.Workloads/monitors"
MONITOR = f"{GROUP}/mon-1"
OPERATION = f"{ENDPOINT}/subscriptions/sub-1/providers/Microsoft.Workloads/locations/westus/operationsStatus/op-1"


def monitor_body(name="mon-1", state="Succeeded"):
    return {
        "id": f"{GROUP}/{name}",
        "name": name,
        "type": "Microsoft.Workloads/monitors",
        "location": "westus",
        "properties": {"provisioningState": state, "appLocation": "eastus"},
    }


def make_provider(respond, polling_interval=0):
    handler = RecordingHandler(respond)
    params = WorkloadsParams(subscription_id="sub-1", polling_interval=polling_interval)
    client = ServiceClient.create(
        ENDPOINT,
        auth=TokenCredential("tok"),
        transport=httpx.MockTransport(handler),
        defaults={"subscription_id": params.subscription_id, "api_version": params.api_version},
    )
    return WorkloadsProvider(client, params), handler


class TestConnect:
    """Test provider lifecycle."""

    def test_provider_alias(self):
        assert workloads.Provider is WorkloadsProvider

    @pytest.mark.asyncio
    async def test_connect_and_disconnect(self):
        provider = await WorkloadsProvider.connect(
            WorkloadsCredentials(token="tok"),
            WorkloadsParams(subscription_id="sub-1"),
        )

        request = provider._client.build_request(
            {"resource_group_name": "rg-1", "monitor_name": "mon-1"}, workloads.get_spec
        )
        await provider.disconnect()

        assert request.url.path == MONITOR
        assert request.url.params["api-version"] == "2023-04-01"


class TestList:
    """Test listing monitors through the page cursor."""

    @pytest.mark.asyncio
    async def test_list_follows_next_link(self):
        next_link = f"{ENDPOINT}/subscriptions/sub-1/providers/Microsoft.Workloads/monitors?api-version=2023-04-01&$skiptoken=p2"

        def respond(request):
            if "$skiptoken" in request.url.params:
                return json_response(200, {"value": [monitor_body("mon-2")]})
            return json_response(200, {"value": [monitor_body("mon-1")], "nextLink": next_link})

        provider, handler = make_provider(respond)

        names = [monitor.name async for monitor in provider.monitors.list()]

        assert names == ["mon-1", "mon-2"]
        first, second = handler.requests
        assert first.url.path == "/subscriptions/sub-1/providers/Microsoft.Workloads/monitors"
        assert first.url.params["api-version"] == "2023-04-01"
        assert first.headers["Authorization"] == "Bearer tok"
        assert second.url.host == "management.azure.com"
        assert second.url.params["$skiptoken"] == "p2"

    @pytest.mark.asyncio
    async def test_list_by_resource_group_pages(self):
        provider, handler = make_provider(lambda request: json_response(200, {"value": [monitor_body()]}))

        pages = [page async for page in provider.monitors.list_by_resource_group("rg-1").by_page()]

        assert len(pages) == 1
        assert pages[0].items[0].properties.app_location == "eastus"
        assert handler.requests[0].url.path == GROUP

    def test_max_page_size_unsupported(self):
        provider, _ = make_provider(lambda request: json_response(200, {"value": []}))

        with pytest.raises(RestError) as exc_info:
            _ = provider.monitors.list().by_page(max_page_size=10)
        assert exc_info.value.kind == ErrorKind.USAGE


class TestGetAndUpdate:
    """Test plain request/response operations."""

    @pytest.mark.asyncio
    async def test_get(self):
        provider, handler = make_provider(lambda request: json_response(200, monitor_body()))

        monitor = await provider.monitors.get("rg-1", "mon-1")

        assert monitor.name == "mon-1"
        assert monitor.properties.provisioning_state == "Succeeded"
        assert handler.requests[0].url.path == MONITOR

    @pytest.mark.asyncio
    async def test_get_not_found(self):
        provider, _ = make_provider(
            lambda request: json_response(
                404, {"error": {"code": "ResourceNotFound", "message": "monitor not found"}}
            )
        )

        with pytest.raises(RestError) as exc_info:
            _ = await provider.monitors.get("rg-1", "missing")

        assert exc_info.value.status_code == 404
        assert exc_info.value.error.code == "ResourceNotFound"

    @pytest.mark.asyncio
    async def test_update(self):
        body = monitor_body()
        body["tags"] = {"env": "prod"}
        provider, handler = make_provider(lambda request: json_response(200, body))

        monitor = await provider.monitors.update("rg-1", "mon-1", UpdateMonitorRequest(tags={"env": "prod"}))

        assert monitor.tags == {"env": "prod"}
        request = handler.requests[0]
        assert request.method == "PATCH"
        assert json.loads(request.content) == {"tags": {"env": "prod"}}


class TestCreate:
    """Test the create long-running operation."""

    @staticmethod
    def create_service(statuses):
        statuses = iter(statuses)

        def respond(request):
            if request.method == "PUT":
                return json_response(
                    201,
                    monitor_body(state="Accepted"),
                    headers={"Azure-AsyncOperation": OPERATION},
                )
            if request.url.path.endswith("/op-1"):
                return json_response(200, {"status": next(statuses)})
            return json_response(200, monitor_body())

        return respond

    @pytest.mark.asyncio
    async def test_begin_create_and_wait(self):
        provider, handler = make_provider(self.create_service(["Accepted", "Succeeded"]))
        monitor = Monitor(location="westus", properties=MonitorProperties(app_location="eastus"))

        state = await provider.monitors.begin_create_and_wait("rg-1", "mon-1", monitor)

        assert state.status == OperationStatus.SUCCEEDED
        assert state.result.name == "mon-1"
        assert handler.methods == ["PUT", "GET", "GET", "GET"]
        assert json.loads(handler.requests[0].content) == {
            "location": "westus",
            "properties": {"appLocation": "eastus"},
        }
        assert handler.requests[-1].url.path == MONITOR

    @pytest.mark.asyncio
    async def test_resume_create(self):
        """Test a create resumed from a token polls without resubmitting."""
        provider, _ = make_provider(self.create_service(["InProgress"]))
        monitor = Monitor(location="westus")
        poller = await provider.monitors.begin_create("rg-1", "mon-1", monitor)
        token = poller.resume_token()

        resumed_provider, handler = make_provider(self.create_service(["InProgress", "Succeeded"]))
        resumed = await resumed_provider.monitors.begin_create("rg-1", "mon-1", monitor, resume_from=token)
        state = await resumed.poll_until_done()

        assert state.status == OperationStatus.SUCCEEDED
        assert "PUT" not in handler.methods
        assert resumed.poll_count == 2

    @pytest.mark.asyncio
    async def test_cancel_wait(self):
        """Test the caller can stop waiting while the operation keeps running."""
        provider, _ = make_provider(self.create_service(["InProgress"] * 10), polling_interval=60)
        cancel = asyncio.Event()
        _ = asyncio.get_running_loop().call_later(0.01, cancel.set)

        with pytest.raises(RestError) as exc_info:
            _ = await provider.monitors.begin_create_and_wait(
                "rg-1", "mon-1", Monitor(location="westus"), cancel=cancel
            )
        assert exc_info.value.kind == ErrorKind.CANCELLED


class TestDelete:
    """Test the delete long-running operation."""

    @staticmethod
    def delete_service(final):
        def respond(request):
            if request.method == "DELETE":
                return httpx.Response(202, headers={"Azure-AsyncOperation": OPERATION, "Retry-After": "0"})
            return json_response(200, final)

        return respond

    @pytest.mark.asyncio
    async def test_delete_returns_status_document(self):
        provider, handler = make_provider(
            self.delete_service({"name": "op-1", "status": "Succeeded", "percentComplete": 100})
        )

        state = await provider.monitors.begin_delete_and_wait("rg-1", "mon-1")

        assert state.status == OperationStatus.SUCCEEDED
        assert state.result.status == "Succeeded"
        assert state.result.percent_complete == 100
        assert handler.methods == ["DELETE", "GET"]

    @pytest.mark.asyncio
    async def test_delete_failure_is_returned(self):
        provider, _ = make_provider(
            self.delete_service(
                {"status": "Failed", "error": {"code": "ScopeLocked", "message": "resource group is locked"}}
            )
        )

        state = await provider.monitors.begin_delete_and_wait("rg-1", "mon-1")

        assert state.status == OperationStatus.FAILED
        assert state.error.code == "ScopeLocked"
        assert state.result is None
