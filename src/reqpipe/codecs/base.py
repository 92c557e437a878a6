r"""Define the codec interface used by the content clients."""

from __future__ import annotations

__all__ = ["Codec", "type_adapter", "type_name"]

import functools
import typing
from abc import ABC, abstractmethod
from typing import Any

from pydantic import TypeAdapter


class Codec(ABC):
    r"""Define the base class to serialize request bodies and
    deserialize response bodies.

    Attributes:
        content_type: The ``Content-Type`` header value of the request
            bodies.
    """

    content_type: str

    @abstractmethod
    def marshal(self, value: Any) -> bytes:
        r"""Serialize a value.

        Args:
            value: The value to serialize.

        Returns:
            The serialized value.

        Raises:
            MarshalError: if the value cannot be serialized.
        """

    @abstractmethod
    def unmarshal(self, data: str | bytes, result_type: Any) -> Any:
        r"""Deserialize data into a value of type ``result_type``.

        Args:
            data: The serialized data.
            result_type: The type of the returned value, for example a
                dataclass, a pydantic model, ``dict`` or
                ``list[MyDataclass]``.

        Returns:
            The deserialized value.

        Raises:
            UnmarshalError: if the data cannot be deserialized into
                ``result_type``.
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__qualname__}(content_type={self.content_type!r})"


@functools.lru_cache(maxsize=256)
def type_adapter(result_type: Any) -> TypeAdapter[Any]:
    r"""Return the pydantic adapter validating values of type
    ``result_type``.

    The adapters are cached per type.

    Args:
        result_type: The target type.

    Returns:
        The type adapter.

    Example:
        ```pycon
        >>> from dataclasses import dataclass
        >>> from reqpipe.codecs.base import type_adapter
        >>> @dataclass
        ... class Point:
        ...     x: int
        ...     y: int = 0
        ...
        >>> type_adapter(Point).validate_python({"x": 1, "z": 3})
        Point(x=1, y=0)

        ```
    """
    return TypeAdapter(result_type)


def type_name(result_type: Any) -> str:
    if typing.get_origin(result_type) is None and hasattr(result_type, "__name__"):
        return result_type.__name__
    return str(result_type)
