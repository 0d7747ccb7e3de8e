"""Codecs turning values into bytes and back.

The on-disk format is exactly what the codec produces; no header or
framing is added around it.
"""

import json
from typing import Any, Generic, Protocol, TypeVar

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from ..utils.exceptions import DecodeError, EncodeError

T = TypeVar("T")


class Codec(Protocol[T]):
    """Encode/decode pair for a value type."""

    def encode(self, value: T) -> bytes: ...

    def decode(self, data: bytes) -> T: ...


class JsonCodec:
    """
    Plain JSON codec for dicts, lists and scalars.

    Decoding yields builtin types only; use ModelCodec to get typed values
    back.
    """

    def __init__(
        self,
        indent: int | None = None,
        sort_keys: bool = False,
        encoding: str = "utf-8",
    ) -> None:
        self.indent = indent
        self.sort_keys = sort_keys
        self.encoding = encoding

    def encode(self, value: Any) -> bytes:
        """
        Serialize a value to JSON bytes.

        Only values that decode back to equal content are accepted: tuples,
        non-string dict keys and container subclasses are rejected rather
        than silently turned into lists and string keys.

        Raises:
            EncodeError: If the value is not JSON serializable or would not
                survive a round trip
        """
        _check_json_native(value, "$", set())
        try:
            text = json.dumps(value, indent=self.indent, sort_keys=self.sort_keys)
        except (TypeError, ValueError) as e:
            raise EncodeError(f"Value is not JSON serializable: {e}", original_error=e) from e
        return text.encode(self.encoding)

    def decode(self, data: bytes) -> Any:
        """
        Parse JSON bytes.

        Raises:
            DecodeError: If the bytes are not valid JSON in the configured encoding
        """
        try:
            return json.loads(data.decode(self.encoding))
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise DecodeError(f"Invalid JSON: {e}", original_error=e) from e


class ModelCodec(Generic[T]):
    """
    Typed JSON codec backed by a pydantic TypeAdapter.

    Works for pydantic models, dataclasses, TypedDicts and containers of
    them, e.g. ``ModelCodec(list[Person])``.
    """

    def __init__(self, type_: Any, indent: int | None = None) -> None:
        self.type_ = type_
        self.indent = indent
        self._adapter: TypeAdapter[T] = TypeAdapter(type_)

    def encode(self, value: T) -> bytes:
        """
        Serialize a value to JSON bytes.

        Raises:
            EncodeError: If pydantic cannot serialize the value
        """
        try:
            return self._adapter.dump_json(value, indent=self.indent)
        except PydanticSerializationError as e:
            raise EncodeError(f"Cannot serialize value: {e}", original_error=e) from e

    def decode(self, data: bytes) -> T:
        """
        Validate JSON bytes into the target type.

        Raises:
            DecodeError: If the bytes do not validate against the target type
        """
        try:
            return self._adapter.validate_json(data)
        except ValidationError as e:
            raise DecodeError(
                f"Invalid data for {getattr(self.type_, '__name__', self.type_)}: "
                f"{e.error_count()} validation error(s)",
                original_error=e,
            ) from e


_JSON_SCALARS = (type(None), bool, int, float, str)


def _check_json_native(value: Any, location: str, active: set[int]) -> None:
    """Reject anything json.loads would not hand back unchanged."""
    value_type = type(value)
    if value_type in _JSON_SCALARS:
        return

    if value_type is not list and value_type is not dict:
        raise EncodeError(
            f"{value_type.__name__} at {location} does not round-trip through JSON"
        )

    marker = id(value)
    if marker in active:
        raise EncodeError(f"Circular reference at {location}")
    active.add(marker)
    try:
        if value_type is list:
            for index, item in enumerate(value):
                _check_json_native(item, f"{location}[{index}]", active)
        else:
            for key, item in value.items():
                if type(key) is not str:
                    raise EncodeError(
                        f"Non-string key {key!r} at {location} does not round-trip through JSON"
                    )
                _check_json_native(item, f"{location}.{key}", active)
    finally:
        active.discard(marker)
