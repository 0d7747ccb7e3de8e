"""File storage used by persistent stores."""

from pathlib import Path
from typing import Protocol

import structlog

from ..utils.exceptions import ReadError, WriteError

logger = structlog.get_logger(__name__)


class Storage(Protocol):
    """Byte-level read/write of a whole file."""

    def read(self, path: Path) -> bytes: ...

    def write(self, path: Path, data: bytes) -> None: ...


class FileStorage:
    """
    Local filesystem storage with plain overwrite semantics.

    Writes replace the whole file in place; there is no temp-file rename,
    so a crash mid-write can leave a truncated file.
    """

    def __init__(self, create_parents: bool = True) -> None:
        """
        Initialize FileStorage.

        Args:
            create_parents: Create missing parent directories on write
        """
        self.create_parents = create_parents

    def read(self, path: Path) -> bytes:
        """
        Read the full contents of a file.

        Raises:
            ReadError: If the file cannot be opened or read
        """
        try:
            return Path(path).read_bytes()
        except OSError as e:
            raise ReadError(
                f"Cannot read file ({e.strerror or e})", path=path, original_error=e
            ) from e

    def write(self, path: Path, data: bytes) -> None:
        """
        Overwrite a file with the given bytes.

        Raises:
            WriteError: If the file cannot be written
        """
        target = Path(path)
        try:
            if self.create_parents:
                target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)
        except OSError as e:
            raise WriteError(
                f"Cannot write file ({e.strerror or e})", path=target, original_error=e
            ) from e

        logger.debug("Wrote file", path=str(target), size=len(data))
