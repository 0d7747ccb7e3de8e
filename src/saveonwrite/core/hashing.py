"""Structural content digests.

Two observations of a value are considered equivalent when their digests
match. The digest covers the value's full structural content and is
deterministic within a process; it is not meant to be stable across
library versions or platforms.

Encoding rules:
- Every node is written as ``tag + length + payload`` so adjacent values
  cannot run together ("ab","c" vs "a","bc").
- Scalars are tagged by type: ``1``, ``1.0``, ``True`` and ``"1"`` differ.
- Unordered containers (dict, set, frozenset) hash each member on its own
  and feed the sorted member digests, so insertion order never matters.
- Dataclasses, pydantic models and plain objects are tagged with their
  qualified class name and hashed field by field.
"""

import dataclasses
import datetime
import hashlib
from collections.abc import Iterable
from decimal import Decimal
from enum import Enum
from pathlib import PurePath
from typing import Any, Protocol
from uuid import UUID

from pydantic import BaseModel

from ..utils.exceptions import UnhashableContentError

DEFAULT_ALGORITHM = "blake2b"

_REPR_SCALARS = (
    complex,
    Decimal,
    UUID,
    datetime.date,
    datetime.time,
    datetime.timedelta,
)


class Hasher(Protocol):
    """Anything that turns a value into a content digest."""

    def digest(self, value: Any) -> str: ...


def _qualname(cls: type) -> bytes:
    return f"{cls.__module__}.{cls.__qualname__}".encode()


class ContentHasher:
    """
    Deterministic structural hasher backed by ``hashlib``.

    Features:
    - Any fixed-size hashlib algorithm (blake2b, sha256, md5, ...)
    - Order-independent digests for dicts and sets
    - Self-reference detection instead of infinite recursion
    """

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM) -> None:
        """
        Initialize ContentHasher.

        Args:
            algorithm: Name of a hashlib algorithm

        Raises:
            ValueError: If the algorithm is unknown or has no fixed digest size
        """
        try:
            probe = hashlib.new(algorithm)
        except ValueError as e:
            raise ValueError(f"Unsupported hash algorithm: {algorithm}") from e

        # shake_* report digest_size 0 and need an explicit length
        if probe.digest_size == 0:
            raise ValueError(f"Hash algorithm must have a fixed digest size: {algorithm}")

        self.algorithm = algorithm

    def __repr__(self) -> str:
        return f"ContentHasher(algorithm={self.algorithm!r})"

    def digest(self, value: Any) -> str:
        """
        Compute the hex digest of a value's content.

        Args:
            value: Value to digest

        Returns:
            Hex digest string

        Raises:
            UnhashableContentError: If the value (or anything inside it) has
                no structural representation, or refers to itself
        """
        h = hashlib.new(self.algorithm)
        self._feed(h, value, set())
        return h.hexdigest()

    def _member_digest(self, value: Any, active: set[int]) -> bytes:
        h = hashlib.new(self.algorithm)
        self._feed(h, value, active)
        return h.digest()

    def _write(self, h: Any, tag: bytes, payload: bytes) -> None:
        h.update(tag)
        h.update(len(payload).to_bytes(8, "big"))
        h.update(payload)

    def _feed(self, h: Any, value: Any, active: set[int]) -> None:
        if value is None:
            self._write(h, b"N", b"")
        elif isinstance(value, bool):
            self._write(h, b"B", b"1" if value else b"0")
        elif isinstance(value, Enum):
            self._write(h, b"E", _qualname(type(value)))
            self._feed(h, value.value, active)
        elif isinstance(value, int):
            self._write(h, b"I", str(value).encode())
        elif isinstance(value, float):
            self._write(h, b"F", repr(value).encode())
        elif isinstance(value, str):
            self._write(h, b"S", value.encode("utf-8", "surrogatepass"))
        elif isinstance(value, (bytes, bytearray, memoryview)):
            self._write(h, b"Y", bytes(value))
        elif isinstance(value, PurePath):
            self._write(h, b"P", _qualname(type(value)) + b":" + str(value).encode())
        elif isinstance(value, _REPR_SCALARS):
            self._write(h, b"R", _qualname(type(value)) + b":" + repr(value).encode())
        else:
            self._feed_compound(h, value, active)

    def _feed_compound(self, h: Any, value: Any, active: set[int]) -> None:
        marker = id(value)
        if marker in active:
            raise UnhashableContentError(type(value), "self-referential value")
        active.add(marker)
        try:
            if isinstance(value, (list, tuple)):
                tag = b"T" if isinstance(value, tuple) else b"L"
                self._write(h, tag, _qualname(type(value)))
                self._feed_sequence(h, value, active)
            elif isinstance(value, dict):
                self._write(h, b"D", _qualname(type(value)))
                pairs = sorted(
                    self._member_digest(k, active) + self._member_digest(v, active)
                    for k, v in value.items()
                )
                self._feed_digests(h, pairs)
            elif isinstance(value, (set, frozenset)):
                self._write(h, b"U", _qualname(type(value)))
                self._feed_digests(h, sorted(self._member_digest(m, active) for m in value))
            elif isinstance(value, BaseModel):
                self._write(h, b"M", _qualname(type(value)))
                self._feed(h, value.model_dump(), active)
            elif dataclasses.is_dataclass(value) and not isinstance(value, type):
                self._write(h, b"C", _qualname(type(value)))
                self._feed_fields(
                    h, ((f.name, getattr(value, f.name)) for f in dataclasses.fields(value)), active
                )
            elif not isinstance(value, type) and not callable(value):
                attributes = _object_attributes(value)
                if attributes is None:
                    raise UnhashableContentError(type(value))
                self._write(h, b"O", _qualname(type(value)))
                self._feed_fields(h, sorted(attributes.items()), active)
            else:
                raise UnhashableContentError(type(value))
        finally:
            active.discard(marker)

    def _feed_sequence(self, h: Any, items: Iterable[Any], active: set[int]) -> None:
        count = 0
        for item in items:
            self._feed(h, item, active)
            count += 1
        h.update(count.to_bytes(8, "big"))

    def _feed_digests(self, h: Any, digests: list[bytes]) -> None:
        h.update(len(digests).to_bytes(8, "big"))
        for member in digests:
            h.update(member)

    def _feed_fields(
        self, h: Any, fields: Iterable[tuple[str, Any]], active: set[int]
    ) -> None:
        count = 0
        for name, field_value in fields:
            self._write(h, b"K", name.encode())
            self._feed(h, field_value, active)
            count += 1
        h.update(count.to_bytes(8, "big"))


def _object_attributes(value: Any) -> dict[str, Any] | None:
    """Collect instance attributes from ``__dict__`` and ``__slots__``."""
    attributes: dict[str, Any] = {}
    found = False

    if hasattr(value, "__dict__"):
        attributes.update(vars(value))
        found = True

    for cls in type(value).__mro__:
        slots = cls.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot in ("__dict__", "__weakref__"):
                continue
            found = True
            # Private slots live under their mangled name
            if slot.startswith("__") and not slot.endswith("__"):
                slot = f"_{cls.__name__.lstrip('_')}{slot}"
            if hasattr(value, slot):
                attributes[slot] = getattr(value, slot)

    return attributes if found else None


def content_digest(value: Any, algorithm: str = DEFAULT_ALGORITHM) -> str:
    """
    Compute a content digest with a one-off hasher.

    Args:
        value: Value to digest
        algorithm: Name of a hashlib algorithm

    Returns:
        Hex digest string
    """
    return ContentHasher(algorithm).digest(value)
