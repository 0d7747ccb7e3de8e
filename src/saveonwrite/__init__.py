"""saveonwrite - Persist a value only when its content actually changes."""

from .config import SaveOnWriteConfig, load_config
from .core import AccessGuard, ChangeListener, ContentHasher, content_digest
from .persistence import FileStorage, JsonCodec, ModelCodec, PersistentStore
from .utils.exceptions import (
    DataReadError,
    DecodeError,
    EncodeError,
    GuardActiveError,
    GuardClosedError,
    ReadError,
    SaveOnWriteError,
    UnhashableContentError,
    WriteError,
)

__version__ = "0.1.0"
__all__ = [
    "ChangeListener",
    "AccessGuard",
    "ContentHasher",
    "content_digest",
    "PersistentStore",
    "JsonCodec",
    "ModelCodec",
    "FileStorage",
    "SaveOnWriteConfig",
    "load_config",
    "SaveOnWriteError",
    "DataReadError",
    "ReadError",
    "DecodeError",
    "EncodeError",
    "WriteError",
    "UnhashableContentError",
    "GuardActiveError",
    "GuardClosedError",
]
