r"""Implement the XML codec.

The mapping between values and XML documents is:

* a dataclass instance or a pydantic model is an element named after
  the class, with one child element per field;
* a mapping with a single key ``{"root": {...}}`` is an element named
  ``root``, with one child element per key of the nested mapping;
* a list is serialized as repeated elements with the same tag;
* ``None`` values are omitted and booleans are ``true``/``false``.

Attributes are not supported.
"""

from __future__ import annotations

__all__ = ["XMLCodec", "element_to_data", "shape_sequences"]

import dataclasses
import datetime
import enum
import types
import typing
import xml.etree.ElementTree as ET
from collections.abc import Mapping
from typing import Any, Union

from pydantic import BaseModel, ValidationError

from reqpipe.codecs.base import Codec, type_adapter, type_name
from reqpipe.exceptions import MarshalError, UnmarshalError
from reqpipe.options import CONTENT_TYPE_XML

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


def _text(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, enum.Enum):
        return _text(value.value)
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


def _fill(element: ET.Element, value: Any) -> None:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        for field in dataclasses.fields(value):
            _append(element, field.name, getattr(value, field.name))
    elif isinstance(value, BaseModel):
        for name in type(value).model_fields:
            _append(element, name, getattr(value, name))
    elif isinstance(value, Mapping):
        for key, item in value.items():
            _append(element, str(key), item)
    else:
        element.text = _text(value)


def _append(parent: ET.Element, tag: str, value: Any) -> None:
    if value is None:
        return
    if isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            _append(parent, tag, item)
        return
    _fill(ET.SubElement(parent, tag), value)


def element_to_data(element: ET.Element) -> Any:
    r"""Convert an element to nested mappings, lists and strings.

    An element without children is converted to its text. Repeated
    child tags are grouped in a list.

    Example:
        ```pycon
        >>> import xml.etree.ElementTree as ET
        >>> from reqpipe.codecs.xml_codec import element_to_data
        >>> element_to_data(ET.fromstring("<a><b>1</b><b>2</b><c>x</c></a>"))
        {'b': ['1', '2'], 'c': 'x'}

        ```
    """
    children = list(element)
    if not children:
        return element.text or ""
    data: dict[str, Any] = {}
    for child in children:
        value = element_to_data(child)
        if child.tag not in data:
            data[child.tag] = value
        elif isinstance(data[child.tag], list):
            data[child.tag].append(value)
        else:
            data[child.tag] = [data[child.tag], value]
    return data


def _fields(tp: Any) -> dict[str, Any] | None:
    if typing.get_origin(tp) is not None:
        return None
    if isinstance(tp, type) and issubclass(tp, BaseModel):
        return {name: field.annotation for name, field in tp.model_fields.items()}
    if isinstance(tp, type) and dataclasses.is_dataclass(tp):
        return typing.get_type_hints(tp)
    return None


def shape_sequences(tp: Any, data: Any) -> Any:
    r"""Reshape the data of an element to match the type ``tp``.

    XML has no array syntax, so an element repeated once is
    indistinguishable from a scalar. This function wraps such values in
    lists where ``tp`` expects a sequence, and turns empty elements
    into empty mappings where ``tp`` expects a record.

    Args:
        tp: The target type.
        data: The output of ``element_to_data``.

    Returns:
        The reshaped data.

    Example:
        ```pycon
        >>> from reqpipe.codecs.xml_codec import shape_sequences
        >>> shape_sequences(dict[str, list[int]], {"a": "1", "b": ["2", "3"]})
        {'a': ['1'], 'b': ['2', '3']}

        ```
    """
    origin = typing.get_origin(tp)
    args = typing.get_args(tp)
    if origin is Union or origin is types.UnionType:
        candidates = [arg for arg in args if arg is not type(None)]
        return shape_sequences(candidates[0], data) if len(candidates) == 1 else data
    if origin in _SEQUENCE_TYPES or tp in _SEQUENCE_TYPES:
        item_type = args[0] if args else Any
        items = data if isinstance(data, list) else [data]
        return [shape_sequences(item_type, item) for item in items]
    if origin is dict and len(args) == 2 and isinstance(data, dict):
        return {key: shape_sequences(args[1], value) for key, value in data.items()}

    fields = _fields(tp)
    if fields is None:
        return data
    if data == "":
        return {}
    if not isinstance(data, dict):
        return data
    return {key: shape_sequences(fields.get(key, Any), value) for key, value in data.items()}


class XMLCodec(Codec):
    r"""Serialize values to XML and deserialize XML into typed values.

    Leaf values are text in XML. Deserializing validates them in lax
    mode, so they are converted to the annotated field types (numbers,
    booleans, enums, dates) of the dataclass or pydantic model.

    Example:
        ```pycon
        >>> from dataclasses import dataclass
        >>> from reqpipe.codecs import XMLCodec
        >>> @dataclass
        ... class Item:
        ...     a: int
        ...     tags: list[str]
        ...
        >>> codec = XMLCodec()
        >>> codec.marshal(Item(a=1, tags=["x", "y"]))
        b'<Item><a>1</a><tags>x</tags><tags>y</tags></Item>'
        >>> codec.unmarshal(b"<Item><a>1</a><tags>x</tags></Item>", Item)
        Item(a=1, tags=['x'])
        >>> codec.unmarshal(b"<r><a>1</a></r>", dict)
        {'r': {'a': '1'}}

        ```
    """

    content_type = CONTENT_TYPE_XML

    def marshal(self, value: Any) -> bytes:
        if isinstance(value, BaseModel) or (
            dataclasses.is_dataclass(value) and not isinstance(value, type)
        ):
            root = ET.Element(type(value).__name__)
            _fill(root, value)
        elif isinstance(value, Mapping) and len(value) == 1:
            ((tag, content),) = value.items()
            root = ET.Element(str(tag))
            _fill(root, content)
        else:
            msg = (
                f"cannot marshal {type(value).__name__} to XML: expected a dataclass "
                "instance, a model or a mapping with a single root key"
            )
            raise MarshalError(msg)
        return ET.tostring(root, encoding="unicode").encode("utf-8")

    def unmarshal(self, data: str | bytes, result_type: Any) -> Any:
        try:
            root = ET.fromstring(data)  # noqa: S314
        except ET.ParseError as exc:
            msg = f"invalid XML: {exc}"
            raise UnmarshalError(msg) from exc

        decoded = element_to_data(root)
        if result_type in (dict, Any, None, object):
            return {root.tag: decoded}
        try:
            return type_adapter(result_type).validate_python(
                shape_sequences(result_type, decoded), strict=False
            )
        except ValidationError as exc:
            msg = f"cannot unmarshal XML into {type_name(result_type)}: {exc}"
            raise UnmarshalError(msg) from exc
