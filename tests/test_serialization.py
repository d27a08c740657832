"""Tests for body serialization."""

import json
from xml.etree.ElementTree import fromstring

import pytest
from pydantic import BaseModel, Field

from cloudrest.errors import ErrorKind, RestError, ServiceError
from cloudrest.generated.storage_file import (
    CorsRule,
    ListSharesResponse,
    Metrics,
    RetentionPolicy,
    StorageServiceProperties,
)
from cloudrest.generated.workloads import Monitor, MonitorListResult, MonitorProperties
from cloudrest.serialization import Serializer, XmlModel

LIST_SHARES = b"""<?xml version="1.0" encoding="utf-8"?>
<EnumerationResults ServiceEndpoint="https://acct.file.core.windows.net/">
  <Prefix>logs</Prefix>
  <MaxResults>2</MaxResults>
  <Shares>
    <Share>
      <Name>logs-2024</Name>
      <Properties>
        <Last-Modified>Mon, 01 Jan 2024 10:00:00 GMT</Last-Modified>
        <Etag>"0x8D"</Etag>
        <Quota>100</Quota>
      </Properties>
      <Metadata><owner>ops</owner></Metadata>
    </Share>
    <Share>
      <Name>logs-2025</Name>
      <Snapshot>2025-01-01T00:00:00.0000000Z</Snapshot>
    </Share>
  </Shares>
  <NextMarker />
</EnumerationResults>"""


@pytest.fixture
def serializer():
    return Serializer()


class TestXml:
    """Test XML models used by the file service."""

    def test_list_shares(self, serializer):
        """Test a share listing segment is mapped with its items."""
        result = serializer.deserialize(ListSharesResponse, LIST_SHARES, is_xml=True)

        assert result.service_endpoint == "https://acct.file.core.windows.net/"
        assert result.prefix == "logs"
        assert result.max_results == 2
        assert [s.name for s in result.share_items] == ["logs-2024", "logs-2025"]

        first = result.share_items[0]
        assert first.properties.quota == 100
        assert first.properties.etag == '"0x8D"'
        assert first.properties.last_modified.year == 2024
        assert first.metadata == {"owner": "ops"}
        assert result.share_items[1].snapshot == "2025-01-01T00:00:00.0000000Z"

    def test_empty_next_marker_is_none(self, serializer):
        """Test an empty NextMarker marks the last segment."""
        result = serializer.deserialize(ListSharesResponse, LIST_SHARES, is_xml=True)

        assert result.next_marker is None

    def test_service_properties_serialized(self, serializer):
        """Test service properties are written in element order."""
        properties = StorageServiceProperties(
            hour_metrics=Metrics(
                enabled=True,
                include_apis=False,
                retention_policy=RetentionPolicy(enabled=True, days=7),
            ),
            minute_metrics=Metrics(enabled=False),
            cors=[CorsRule(allowed_origins="*", allowed_methods="GET,PUT", max_age_in_seconds=60)],
        )

        content = serializer.serialize(properties, is_xml=True)

        assert content.startswith(b'<?xml version="1.0" encoding="utf-8"?>')
        root = fromstring(content)
        assert root.tag == "StorageServiceProperties"
        assert [child.tag for child in root] == ["HourMetrics", "MinuteMetrics", "Cors"]
        assert root.findtext("HourMetrics/Enabled") == "true"
        assert root.findtext("HourMetrics/IncludeAPIs") == "false"
        assert root.findtext("HourMetrics/RetentionPolicy/Days") == "7"
        assert root.find("MinuteMetrics/IncludeAPIs") is None
        assert root.findtext("Cors/CorsRule/AllowedMethods") == "GET,PUT"
        assert root.findtext("Cors/CorsRule/MaxAgeInSeconds") == "60"

    def test_service_properties_parsed(self, serializer):
        """Test service properties written by the service are read back."""
        content = (
            b"<StorageServiceProperties><HourMetrics><Version>1.0</Version><Enabled>true</Enabled>"
            b"<IncludeAPIs>true</IncludeAPIs><RetentionPolicy><Enabled>false</Enabled></RetentionPolicy>"
            b"</HourMetrics><Cors /></StorageServiceProperties>"
        )

        result = serializer.deserialize(StorageServiceProperties, content, is_xml=True)

        assert result.hour_metrics.enabled is True
        assert result.hour_metrics.include_apis is True
        assert result.hour_metrics.retention_policy.enabled is False
        assert result.minute_metrics is None
        assert result.cors == []

    def test_malformed_xml(self, serializer):
        with pytest.raises(RestError) as exc_info:
            _ = serializer.deserialize(ListSharesResponse, b"<EnumerationResults>", is_xml=True)
        assert exc_info.value.kind == ErrorKind.SERIALIZATION

    def test_entities_rejected(self, serializer):
        """Test entity declarations are refused."""
        content = b'<!DOCTYPE x [<!ENTITY a "aaaa">]><EnumerationResults>&a;</EnumerationResults>'

        with pytest.raises(RestError) as exc_info:
            _ = serializer.deserialize(ListSharesResponse, content, is_xml=True)
        assert exc_info.value.kind == ErrorKind.SERIALIZATION

    def test_model_without_xml_support(self, serializer):
        class Plain(BaseModel):
            name: str

        with pytest.raises(RestError) as exc_info:
            _ = serializer.deserialize(Plain, b"<Plain />", is_xml=True)
        assert exc_info.value.kind == ErrorKind.SERIALIZATION

        with pytest.raises(RestError):
            _ = serializer.serialize(Plain(name="x"), is_xml=True)

    def test_from_xml_required(self):
        """Test an XML model without a reader cannot be instantiated."""

        class Unreadable(XmlModel):
            name: str = ""

        with pytest.raises(TypeError):
            _ = Unreadable()

    def test_response_model_not_writable(self, serializer):
        with pytest.raises(RestError) as exc_info:
            _ = serializer.serialize(ListSharesResponse(), is_xml=True)
        assert exc_info.value.kind == ErrorKind.SERIALIZATION


class TestJson:
    """Test JSON models used by resource-management services."""

    def test_monitor_list(self, serializer):
        content = json.dumps(
            {
                "value": [
                    {
                        "id": "/subscriptions/sub/resourceGroups/rg/providers/Microsoft.Workloads/monitors/m1",
                        "name": "m1",
                        "location": "westus",
                        "systemData": {"createdBy": "me", "createdByType": "User"},
                        "properties": {"provisioningState": "Succeeded", "appLocation": "eastus"},
                    }
                ],
                "nextLink": "https://management.azure.com/next",
            }
        ).encode()

        result = serializer.deserialize(MonitorListResult, content)

        assert result.next_link == "https://management.azure.com/next"
        monitor = result.value[0]
        assert monitor.name == "m1"
        assert monitor.system_data.created_by == "me"
        assert monitor.properties.provisioning_state == "Succeeded"
        assert monitor.properties.app_location == "eastus"

    def test_serialize_uses_aliases(self, serializer):
        """Test request bodies use wire names and drop unset fields."""
        monitor = Monitor(location="westus", properties=MonitorProperties(app_location="eastus"))

        data = json.loads(serializer.serialize(monitor))

        assert data == {"location": "westus", "properties": {"appLocation": "eastus"}}

    def test_empty_body(self, serializer):
        assert serializer.deserialize(Monitor, b"") is None
        assert serializer.deserialize(Monitor, b"  ") is None

    def test_invalid_json(self, serializer):
        with pytest.raises(RestError) as exc_info:
            _ = serializer.deserialize(Monitor, b"{not json")
        assert exc_info.value.kind == ErrorKind.SERIALIZATION


class TestErrorDocuments:
    """Test best-effort parsing of service errors."""

    def test_management_envelope(self, serializer):
        content = b'{"error": {"code": "Conflict", "message": "locked", "details": [{"code": "Inner"}]}}'

        error = serializer.deserialize_error(content)

        assert error.code == "Conflict"
        assert error.message == "locked"
        assert error.details[0].code == "Inner"

    def test_storage_document(self, serializer):
        content = b"<Error><Code>ShareNotFound</Code><Message>gone</Message></Error>"

        error = serializer.deserialize_error(content, is_xml=True)

        assert error.code == "ShareNotFound"
        assert error.message == "gone"

    def test_declared_error_model(self, serializer):
        """Test a declared error model reads documents the generic parser cannot."""

        class Fault(BaseModel):
            error: ServiceError | None = Field(default=None, alias="fault")

        content = b'{"fault": {"code": "Throttled", "message": "slow down"}}'

        assert serializer.deserialize_error(content).code is None
        error = serializer.deserialize_error(content, model=Fault)

        assert error.code == "Throttled"
        assert error.message == "slow down"

    def test_declared_error_model_mismatch(self, serializer):
        """Test a body the declared model rejects falls back to the generic parser."""

        class Strict(BaseModel):
            error: int

        error = serializer.deserialize_error(b'{"error": {"code": "Conflict"}}', model=Strict)

        assert error.code == "Conflict"

    @pytest.mark.parametrize("content", [b"", b"<html>", b"[1, 2]", b"not json"])
    def test_unreadable(self, serializer, content):
        """Test unreadable error bodies yield None instead of raising."""
        assert serializer.deserialize_error(content) is None
