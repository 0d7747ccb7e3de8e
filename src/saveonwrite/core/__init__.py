"""Core change detection: content hashing and guarded access."""

from .hashing import DEFAULT_ALGORITHM, ContentHasher, Hasher, content_digest
from .listener import AccessGuard, ChangeListener, OnChange

__all__ = [
    "DEFAULT_ALGORITHM",
    "ContentHasher",
    "Hasher",
    "content_digest",
    "ChangeListener",
    "AccessGuard",
    "OnChange",
]
