"""Models for the file-share service.

The file service speaks XML; each model maps its own element layout.

Generated from the service REST specifications. Do not edit manually.
"""

from datetime import datetime
from email.utils import parsedate_to_datetime
from enum import StrEnum
from typing import Self
from xml.etree.ElementTree import Element, SubElement

from pydantic import BaseModel, ConfigDict, Field

from cloudrest.generated.datatypes import Metadata
from cloudrest.serialization import XmlModel, append_text, child_bool, child_int, child_text


class ListSharesIncludeType(StrEnum):
    """Datasets that can be included in a share listing."""

    SNAPSHOTS = "snapshots"
    METADATA = "metadata"


def _http_date(value: str | None) -> datetime | None:
    if not value:
        return None
    return parsedate_to_datetime(value)


class ShareProperties(XmlModel):
    """Properties of a share."""

    last_modified: datetime | None = None
    etag: str | None = None
    quota: int | None = None
    """Maximum share size in GiB."""

    @classmethod
    def from_xml(cls, element: Element) -> Self:
        return cls(
            last_modified=_http_date(child_text(element, "Last-Modified")),
            etag=child_text(element, "Etag"),
            quota=child_int(element, "Quota"),
        )


class ShareItem(XmlModel):
    """A listed share."""

    name: str
    snapshot: str | None = None
    properties: ShareProperties = Field(default_factory=ShareProperties)
    metadata: Metadata | None = None

    @classmethod
    def from_xml(cls, element: Element) -> Self:
        properties = element.find("Properties")
        metadata = element.find("Metadata")
        return cls(
            name=child_text(element, "Name") or "",
            snapshot=child_text(element, "Snapshot"),
            properties=ShareProperties.from_xml(properties) if properties is not None else ShareProperties(),
            metadata={child.tag: child.text or "" for child in metadata} if metadata is not None else None,
        )


class ListSharesResponse(XmlModel):
    """One segment of a share listing."""

    service_endpoint: str = ""
    prefix: str | None = None
    marker: str | None = None
    max_results: int | None = None
    share_items: list[ShareItem] = Field(default_factory=list)
    next_marker: str | None = None
    """Continuation marker; empty on the last segment."""

    @classmethod
    def from_xml(cls, element: Element) -> Self:
        shares = element.find("Shares")
        return cls(
            service_endpoint=element.get("ServiceEndpoint", ""),
            prefix=child_text(element, "Prefix"),
            marker=child_text(element, "Marker"),
            max_results=child_int(element, "MaxResults"),
            share_items=[ShareItem.from_xml(e) for e in shares.findall("Share")] if shares is not None else [],
            next_marker=child_text(element, "NextMarker") or None,
        )


class RetentionPolicy(XmlModel):
    """Retention policy for metrics."""

    enabled: bool = False
    days: int | None = Field(default=None, ge=1, le=365)

    @classmethod
    def from_xml(cls, element: Element) -> Self:
        return cls(enabled=bool(child_bool(element, "Enabled")), days=child_int(element, "Days"))

    def to_xml(self) -> Element:
        root = Element("RetentionPolicy")
        append_text(root, "Enabled", self.enabled)
        append_text(root, "Days", self.days)
        return root


class Metrics(XmlModel):
    """Hour or minute metrics settings."""

    version: str = "1.0"
    enabled: bool = False
    include_apis: bool | None = None
    retention_policy: RetentionPolicy | None = None

    @classmethod
    def from_xml(cls, element: Element) -> Self:
        policy = element.find("RetentionPolicy")
        return cls(
            version=child_text(element, "Version") or "1.0",
            enabled=bool(child_bool(element, "Enabled")),
            include_apis=child_bool(element, "IncludeAPIs"),
            retention_policy=RetentionPolicy.from_xml(policy) if policy is not None else None,
        )

    def to_xml_as(self, tag: str) -> Element:
        root = Element(tag)
        append_text(root, "Version", self.version)
        append_text(root, "Enabled", self.enabled)
        if self.enabled:
            append_text(root, "IncludeAPIs", self.include_apis)
        if self.retention_policy is not None:
            root.append(self.retention_policy.to_xml())
        return root


class CorsRule(XmlModel):
    """A cross-origin resource sharing rule."""

    model_config = ConfigDict(populate_by_name=True)

    allowed_origins: str
    """Comma-separated origins, or "*"."""

    allowed_methods: str
    allowed_headers: str = ""
    exposed_headers: str = ""
    max_age_in_seconds: int = Field(default=0, ge=0)

    @classmethod
    def from_xml(cls, element: Element) -> Self:
        return cls(
            allowed_origins=child_text(element, "AllowedOrigins") or "",
            allowed_methods=child_text(element, "AllowedMethods") or "",
            allowed_headers=child_text(element, "AllowedHeaders") or "",
            exposed_headers=child_text(element, "ExposedHeaders") or "",
            max_age_in_seconds=child_int(element, "MaxAgeInSeconds") or 0,
        )

    def to_xml(self) -> Element:
        root = Element("CorsRule")
        append_text(root, "AllowedOrigins", self.allowed_origins)
        append_text(root, "AllowedMethods", self.allowed_methods)
        append_text(root, "AllowedHeaders", self.allowed_headers)
        append_text(root, "ExposedHeaders", self.exposed_headers)
        append_text(root, "MaxAgeInSeconds", self.max_age_in_seconds)
        return root


class StorageServiceProperties(XmlModel):
    """File service properties."""

    hour_metrics: Metrics | None = None
    minute_metrics: Metrics | None = None
    cors: list[CorsRule] | None = None

    @classmethod
    def from_xml(cls, element: Element) -> Self:
        hour = element.find("HourMetrics")
        minute = element.find("MinuteMetrics")
        cors = element.find("Cors")
        return cls(
            hour_metrics=Metrics.from_xml(hour) if hour is not None else None,
            minute_metrics=Metrics.from_xml(minute) if minute is not None else None,
            cors=[CorsRule.from_xml(e) for e in cors.findall("CorsRule")] if cors is not None else None,
        )

    def to_xml(self) -> Element:
        root = Element("StorageServiceProperties")
        if self.hour_metrics is not None:
            root.append(self.hour_metrics.to_xml_as("HourMetrics"))
        if self.minute_metrics is not None:
            root.append(self.minute_metrics.to_xml_as("MinuteMetrics"))
        if self.cors is not None:
            cors = SubElement(root, "Cors")
            for rule in self.cors:
                cors.append(rule.to_xml())
        return root


class ResponseHeaders(BaseModel):
    """Headers common to every file-service response."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    request_id: str | None = Field(default=None, alias="x-ms-request-id")
    version: str | None = Field(default=None, alias="x-ms-version")
    date: str | None = None


class ShareCreateResponse(ResponseHeaders):
    """Headers returned by a share create."""

    etag: str | None = None
    last_modified: str | None = Field(default=None, alias="last-modified")


class ShareDeleteResponse(ResponseHeaders):
    """Headers returned by a share delete."""


class ShareGetPropertiesResponse(ResponseHeaders):
    """Headers returned by a share get-properties."""

    etag: str | None = None
    last_modified: str | None = Field(default=None, alias="last-modified")
    quota: int | None = Field(default=None, alias="x-ms-share-quota")


class ServiceSetPropertiesResponse(ResponseHeaders):
    """Headers returned by a service set-properties."""
