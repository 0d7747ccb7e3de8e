"""File-backed store that saves itself when its content changes.

Usage:
-----
```python
store = PersistentStore.from_item({"name": "Joe", "age": 25}, Path("p.json"))

with store.access() as guard:
    guard["age"] = 20        # file rewritten when the block exits

with store.access() as guard:
    guard["age"] = 20        # same content, no write

store.flush()                # explicit save, raises on failure
```

Saves triggered by a guard are best-effort: encode/write failures are
logged and kept in ``last_save_error`` but never raised, because closing a
guard must not fail the caller's control flow. The in-memory value stays
authoritative; call ``flush()`` to get failures reported.
"""

from pathlib import Path
from typing import TYPE_CHECKING, Any, Generic, TypeVar

import structlog

from ..core.hashing import Hasher
from ..core.listener import ChangeListener
from ..utils.exceptions import DataReadError, GuardActiveError, ReadError
from .codecs import Codec, JsonCodec
from .storage import FileStorage, Storage

if TYPE_CHECKING:
    from ..config import SaveOnWriteConfig

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class SaveToFile(Generic[T]):
    """Change callback bound to one destination path."""

    def __init__(self, path: Path, codec: Codec[T], storage: Storage) -> None:
        self.path = path
        self.codec = codec
        self.storage = storage
        self.last_error: DataReadError | None = None

    def save(self, value: T) -> None:
        """
        Encode the value and overwrite the destination.

        Raises:
            EncodeError: If the value cannot be encoded
            WriteError: If the destination cannot be written
        """
        data = self.codec.encode(value)
        self.storage.write(self.path, data)
        self.last_error = None

    def __call__(self, value: T) -> None:
        try:
            self.save(value)
        except DataReadError as e:
            self.last_error = e
            logger.error("Failed to save changed value", path=str(self.path), error=str(e))
        else:
            logger.debug("Saved changed value", path=str(self.path))


class PersistentStore(ChangeListener[T]):
    """
    ChangeListener whose callback writes the value to a file.

    Build one with ``from_file``, ``from_item`` or ``load_or_create``; all
    three either return a fully initialised store or raise a
    DataReadError subclass.
    """

    def __init__(
        self,
        value: T,
        path: str | Path,
        *,
        codec: Codec[T] | None = None,
        storage: Storage | None = None,
        hasher: Hasher | None = None,
        equality_check: bool = False,
    ) -> None:
        """
        Wrap an already persisted value. Performs no I/O.

        Args:
            value: Value currently stored at path
            path: Destination file
            codec: Codec used for saves (default: JsonCodec())
            storage: Storage used for saves (default: FileStorage())
            hasher: Content hasher (default: ContentHasher())
            equality_check: See ChangeListener
        """
        self._saver: SaveToFile[T] = SaveToFile(
            Path(path), codec or JsonCodec(), storage or FileStorage()
        )
        super().__init__(value, self._saver, hasher=hasher, equality_check=equality_check)

    @property
    def path(self) -> Path:
        return self._saver.path

    @property
    def last_save_error(self) -> DataReadError | None:
        """Most recent swallowed save failure, cleared by the next successful save."""
        return self._saver.last_error

    @staticmethod
    def _components(
        codec: Codec[Any] | None,
        storage: Storage | None,
        config: "SaveOnWriteConfig | None",
    ) -> dict[str, Any]:
        """Resolve collaborators, explicit arguments taking precedence over config."""
        if config is None:
            return {
                "codec": codec or JsonCodec(),
                "storage": storage or FileStorage(),
                "hasher": None,
                "equality_check": False,
            }
        return {
            "codec": codec or config.build_codec(),
            "storage": storage or config.build_storage(),
            "hasher": config.build_hasher(),
            "equality_check": config.guard.equality_check,
        }

    @classmethod
    def from_file(
        cls,
        path: str | Path,
        *,
        codec: Codec[T] | None = None,
        storage: Storage | None = None,
        config: "SaveOnWriteConfig | None" = None,
    ) -> "PersistentStore[T]":
        """
        Load a value from a file and bind saves to the same file.

        Args:
            path: File to read and later overwrite
            codec: Codec for decoding and saving
            storage: Storage backend
            config: Optional configuration supplying defaults

        Returns:
            PersistentStore holding the decoded value

        Raises:
            ReadError: If the file cannot be read
            DecodeError: If the contents cannot be decoded
        """
        path = Path(path)
        parts = cls._components(codec, storage, config)

        data = parts["storage"].read(path)
        value = parts["codec"].decode(data)

        logger.info("Loaded persistent store", path=str(path), size=len(data))
        return cls(value, path, **parts)

    @classmethod
    def from_item(
        cls,
        item: T,
        dest: str | Path,
        *,
        codec: Codec[T] | None = None,
        storage: Storage | None = None,
        config: "SaveOnWriteConfig | None" = None,
    ) -> "PersistentStore[T]":
        """
        Write a value to a file right away and bind saves to that file.

        Args:
            item: Initial value
            dest: File to create or overwrite
            codec: Codec for encoding
            storage: Storage backend
            config: Optional configuration supplying defaults

        Returns:
            PersistentStore holding item

        Raises:
            EncodeError: If the item cannot be encoded
            WriteError: If the file cannot be written
        """
        dest = Path(dest)
        parts = cls._components(codec, storage, config)

        data = parts["codec"].encode(item)
        parts["storage"].write(dest, data)

        logger.info("Created persistent store", path=str(dest), size=len(data))
        return cls(item, dest, **parts)

    @classmethod
    def load_or_create(
        cls,
        path: str | Path,
        default: T,
        *,
        codec: Codec[T] | None = None,
        storage: Storage | None = None,
        config: "SaveOnWriteConfig | None" = None,
    ) -> "PersistentStore[T]":
        """
        Load the file if it exists, otherwise initialise it with default.

        Only a missing file falls back to default; unreadable or
        undecodable files still raise.

        Args:
            path: File to load or create
            default: Value written when the file does not exist
            codec: Codec for encoding and decoding
            storage: Storage backend
            config: Optional configuration supplying defaults

        Returns:
            PersistentStore

        Raises:
            ReadError: If the file exists but cannot be read
            DecodeError: If the file exists but cannot be decoded
            EncodeError: If default cannot be encoded
            WriteError: If default cannot be written
        """
        try:
            return cls.from_file(path, codec=codec, storage=storage, config=config)
        except ReadError as e:
            if not isinstance(e.original_error, FileNotFoundError):
                raise
            logger.info("Store file missing, initialising from default", path=str(path))

        return cls.from_item(default, path, codec=codec, storage=storage, config=config)

    def flush(self) -> None:
        """
        Save the current value now and report failures.

        Raises:
            GuardActiveError: If a guard is open (its changes are not final yet)
            EncodeError: If the value cannot be encoded
            WriteError: If the file cannot be written
        """
        if self.guard_active:
            raise GuardActiveError("Cannot flush while an access guard is open")

        self._saver.save(self._value)
        logger.info("Flushed persistent store", path=str(self.path))

    def __repr__(self) -> str:
        return f"PersistentStore(path={str(self.path)!r}, guard_active={self.guard_active})"
