"""Body serialization through pydantic models.

JSON bodies map directly onto pydantic models. XML bodies map onto models
deriving from `XmlModel`, which describe their own element layout.
"""

import json
import logging
from abc import abstractmethod
from typing import Self, TypeVar
from xml.etree.ElementTree import Element, ParseError, SubElement, tostring

from defusedxml import DefusedXmlException
from defusedxml import ElementTree as SafeElementTree
from pydantic import BaseModel, ValidationError

from cloudrest.errors import ErrorKind, RestError, ServiceError

M = TypeVar("M", bound=BaseModel)

logger = logging.getLogger(__name__)


class XmlModel(BaseModel):
    """A model that maps to and from an XML element.

    Subclasses must implement `from_xml`. Models sent as request bodies also
    override `to_xml`; on response-only models it raises a serialization error.
    """

    @classmethod
    @abstractmethod
    def from_xml(cls, element: Element) -> Self:
        """Build the model from its element."""

    def to_xml(self) -> Element:
        """Render the model as an element."""
        msg = f"{type(self).__name__} cannot be written as XML"
        raise RestError(msg, kind=ErrorKind.SERIALIZATION)


def child_text(element: Element, tag: str) -> str | None:
    """Text of the first `tag` child, or None when absent."""
    child = element.find(tag)
    if child is None:
        return None
    return child.text or ""


def child_bool(element: Element, tag: str) -> bool | None:
    value = child_text(element, tag)
    return None if value is None else value.strip().lower() == "true"


def child_int(element: Element, tag: str) -> int | None:
    value = child_text(element, tag)
    return None if value is None or not value.strip() else int(value)


def append_text(parent: Element, tag: str, value: object) -> None:
    """Append `<tag>value</tag>` unless value is None."""
    if value is None:
        return
    child = SubElement(parent, tag)
    if isinstance(value, bool):
        child.text = "true" if value else "false"
    else:
        child.text = str(value)


class Serializer:
    """Converts raw bodies to models and back."""

    def deserialize(self, model: type[M], content: bytes, *, is_xml: bool = False) -> M | None:
        """Parse `content` into `model`; an empty body yields None."""
        if not content.strip():
            return None
        try:
            if is_xml:
                if not issubclass(model, XmlModel):
                    msg = f"{model.__name__} does not support XML"
                    raise RestError(msg, kind=ErrorKind.SERIALIZATION)
                return model.from_xml(SafeElementTree.fromstring(content))
            return model.model_validate_json(content)
        except RestError:
            raise
        except (ValidationError, ParseError, DefusedXmlException, ValueError) as e:
            msg = f"Response body does not match {model.__name__}: {e}"
            raise RestError(msg, kind=ErrorKind.SERIALIZATION, source=e) from e

    def serialize(self, value: BaseModel, *, is_xml: bool = False) -> bytes:
        if is_xml:
            if not isinstance(value, XmlModel):
                msg = f"{type(value).__name__} does not support XML"
                raise RestError(msg, kind=ErrorKind.SERIALIZATION)
            return b'<?xml version="1.0" encoding="utf-8"?>' + tostring(value.to_xml(), encoding="unicode").encode()
        return value.model_dump_json(by_alias=True, exclude_none=True).encode()

    def deserialize_error(
        self,
        content: bytes,
        *,
        is_xml: bool = False,
        model: type[BaseModel] | None = None,
    ) -> ServiceError | None:
        """Best-effort parse of a service error document.

        A declared JSON error `model` is tried first; its `error` member, or the
        whole model when it has none, becomes the returned `ServiceError`.
        Never raises: an unreadable error body is logged and dropped so the
        status code still reaches the caller.
        """
        if not content.strip():
            return None
        if model is not None and not is_xml:
            try:
                data = model.model_validate_json(content).model_dump(exclude_none=True)
                if isinstance(data.get("error"), dict):
                    data = data["error"]
                return ServiceError.model_validate(data)
            except ValidationError as e:
                logger.debug("Error body does not match %s: %s", model.__name__, e)
        try:
            if is_xml:
                root = SafeElementTree.fromstring(content)
                return ServiceError(code=child_text(root, "Code"), message=child_text(root, "Message"))
            data = json.loads(content)
            if isinstance(data, dict) and isinstance(data.get("error"), dict):
                data = data["error"]
            return ServiceError.model_validate(data)
        except (ValidationError, ParseError, DefusedXmlException, ValueError) as e:
            logger.debug("Could not parse error body: %s", e)
            return None
