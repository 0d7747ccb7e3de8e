"""Change listener with scoped, hash-checked access.

A ``ChangeListener`` owns a value and an ``on_change`` callback. The value
is only reachable through an ``AccessGuard``; the guard records the
content digest when it opens and, when it closes, fires the callback if
(and only if) mutable access was taken *and* the digest moved.

Usage:
-----
```python
listener = ChangeListener({"name": "Joe", "age": 25}, on_change=print)

with listener.access() as guard:
    guard.value["age"]          # read, never fires

with listener.access() as guard:
    guard["age"] = 20           # possible change, digest moved -> fires

with listener.access() as guard:
    person = guard.mut()
    person["age"] = 21
    person["age"] = 20          # restored, digest unchanged -> silent
```

Mutating the object returned by ``guard.value`` or ``guard[key]`` in place
(e.g. ``guard["tags"].append(x)``) bypasses the possible-change flag and is
never saved; take ``guard.mut()`` when you intend to write.
"""

import copy
import logging
from types import TracebackType
from typing import Any, Generic, Protocol, TypeVar

import structlog

from ..observability.logger import TRACE
from ..utils.exceptions import GuardActiveError, GuardClosedError
from .hashing import ContentHasher, Hasher

logger = structlog.get_logger(__name__)
trace_logger = logging.getLogger(__name__)

T = TypeVar("T")
T_contra = TypeVar("T_contra", contravariant=True)

_MISSING = object()


class OnChange(Protocol[T_contra]):
    """Callback invoked with the current value after a detected change."""

    def __call__(self, value: T_contra) -> None: ...


class ChangeListener(Generic[T]):
    """
    Owner of a value that reports content changes made through guards.

    Only one guard may be open at a time; asking for a second one raises
    GuardActiveError until the first is closed.
    """

    def __init__(
        self,
        value: T,
        on_change: OnChange[T],
        *,
        hasher: Hasher | None = None,
        equality_check: bool = False,
    ) -> None:
        """
        Initialize ChangeListener.

        No hashing or I/O happens here; the first digest is taken when a
        guard opens.

        Args:
            value: Value to own
            on_change: Callback invoked with the value after a detected change
            hasher: Content hasher (default: ContentHasher())
            equality_check: Also compare a snapshot with ``!=`` when digests
                match, so a digest collision cannot hide a change
        """
        self._value = value
        self._on_change = on_change
        self._hasher: Hasher = hasher or ContentHasher()
        self._equality_check = equality_check
        self._guard: AccessGuard[T] | None = None

    @property
    def guard_active(self) -> bool:
        """Whether a guard is currently open on this listener."""
        return self._guard is not None

    @property
    def hasher(self) -> Hasher:
        return self._hasher

    def access(self) -> "AccessGuard[T]":
        """
        Open a scoped guard on the value.

        Returns:
            AccessGuard bound to this listener

        Raises:
            GuardActiveError: If another guard is still open
            UnhashableContentError: If the value cannot be digested
        """
        if self._guard is not None:
            raise GuardActiveError()

        guard = AccessGuard(self, self._hasher.digest(self._value))
        self._guard = guard
        trace_logger.log(TRACE, "Guard opened hash_at_open=%s", guard.hash_at_open)
        return guard

    def _release(self, guard: "AccessGuard[T]") -> None:
        if self._guard is guard:
            self._guard = None

    def _notify(self) -> None:
        logger.debug("Invoking change callback", value_type=type(self._value).__name__)
        self._on_change(self._value)


class AccessGuard(Generic[T]):
    """
    Scoped handle into a ChangeListener's value.

    Closing the guard (leaving the ``with`` block, or calling ``close()``)
    performs the change check exactly once and fires the listener's
    callback when the content changed.
    """

    def __init__(self, listener: ChangeListener[T], hash_at_open: str) -> None:
        self._listener: ChangeListener[T] | None = listener
        self._hash_at_open = hash_at_open
        self._mutably_accessed = False
        self._snapshot: Any = _MISSING
        if listener._equality_check:
            self._snapshot = copy.deepcopy(listener._value)

    @property
    def hash_at_open(self) -> str:
        """Content digest taken when the guard was opened."""
        return self._hash_at_open

    @property
    def closed(self) -> bool:
        return self._listener is None

    def _owner(self) -> ChangeListener[T]:
        if self._listener is None:
            raise GuardClosedError()
        return self._listener

    @property
    def value(self) -> T:
        """Read access to the value. Does not flag a possible change."""
        return self._owner()._value

    @value.setter
    def value(self, new_value: T) -> None:
        """Replace the value. Flags a possible change."""
        owner = self._owner()
        self._mutably_accessed = True
        owner._value = new_value

    def mut(self) -> T:
        """
        Mutable access to the value.

        Always flags a possible change, whether or not the caller ends up
        writing anything.

        Returns:
            The owned value
        """
        owner = self._owner()
        self._mutably_accessed = True
        return owner._value

    def __getitem__(self, key: Any) -> Any:
        return self._owner()._value[key]  # type: ignore[index]

    def __setitem__(self, key: Any, item: Any) -> None:
        self.mut()[key] = item  # type: ignore[index]

    def __delitem__(self, key: Any) -> None:
        del self.mut()[key]  # type: ignore[attr-defined]

    def detected_possible_change(self) -> bool:
        """Whether mutable access was taken through this guard."""
        return self._mutably_accessed

    def detected_change(self) -> bool:
        """
        Whether the value's content differs from when the guard opened.

        Returns False without re-hashing when no mutable access was taken.

        Returns:
            True if the content changed
        """
        if not self._mutably_accessed:
            return False

        owner = self._owner()
        current = owner._hasher.digest(owner._value)
        if current != self._hash_at_open:
            return True

        if self._snapshot is not _MISSING:
            return bool(self._snapshot != owner._value)
        return False

    def close(self) -> None:
        """
        Run the change check and release the listener.

        Safe to call more than once; only the first call has any effect.
        The listener is released even if the callback raises.
        """
        listener = self._listener
        if listener is None:
            return

        try:
            if self.detected_change():
                logger.debug("Detected change", hash_at_open=self._hash_at_open)
                listener._notify()
        finally:
            self._listener = None
            self._snapshot = _MISSING
            listener._release(self)
            trace_logger.log(
                TRACE, "Guard closed possible_change=%s", self._mutably_accessed
            )

    def __enter__(self) -> "AccessGuard[T]":
        self._owner()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return (
            f"<AccessGuard {state} possible_change={self._mutably_accessed} "
            f"hash_at_open={self._hash_at_open[:12]}>"
        )
