"""Persistence layer: codecs, file storage and the self-saving store."""

from .codecs import Codec, JsonCodec, ModelCodec
from .storage import FileStorage, Storage
from .store import PersistentStore, SaveToFile

__all__ = [
    "Codec",
    "JsonCodec",
    "ModelCodec",
    "Storage",
    "FileStorage",
    "PersistentStore",
    "SaveToFile",
]
