r"""Implement the JSON codec."""

from __future__ import annotations

__all__ = ["JSONCodec"]

from typing import Any

from pydantic import ValidationError

from reqpipe.codecs.base import Codec, type_adapter, type_name
from reqpipe.exceptions import MarshalError, UnmarshalError
from reqpipe.options import CONTENT_TYPE_JSON

_ANY_ADAPTER = type_adapter(Any)


class JSONCodec(Codec):
    r"""Serialize values to compact JSON and deserialize JSON into typed
    values.

    Dataclass instances and pydantic models are serialized as objects,
    enums as their values and dates in ISO 8601 format. Deserializing
    validates the decoded document against the result type, so every
    value serialized by the codec can be read back.

    Example:
        ```pycon
        >>> from dataclasses import dataclass
        >>> from reqpipe.codecs import JSONCodec
        >>> @dataclass
        ... class Item:
        ...     a: int
        ...
        >>> codec = JSONCodec()
        >>> codec.marshal(Item(a=1))
        b'{"a":1}'
        >>> codec.unmarshal(b'{"a":1}', Item)
        Item(a=1)

        ```
    """

    content_type = CONTENT_TYPE_JSON

    def marshal(self, value: Any) -> bytes:
        try:
            return _ANY_ADAPTER.dump_json(value)
        except ValueError as exc:
            msg = f"cannot marshal {type(value).__name__} to JSON: {exc}"
            raise MarshalError(msg) from exc

    def unmarshal(self, data: str | bytes, result_type: Any) -> Any:
        try:
            return type_adapter(result_type).validate_json(data)
        except ValidationError as exc:
            if any(error["type"] == "json_invalid" for error in exc.errors()):
                msg = f"invalid JSON: {exc}"
            else:
                msg = f"cannot unmarshal JSON into {type_name(result_type)}: {exc}"
            raise UnmarshalError(msg) from exc
