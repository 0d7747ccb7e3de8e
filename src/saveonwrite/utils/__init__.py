"""Utility functions and exceptions."""

from .exceptions import (
    DataReadError,
    DecodeError,
    EncodeError,
    GuardActiveError,
    GuardClosedError,
    GuardError,
    ReadError,
    SaveOnWriteError,
    UnhashableContentError,
    WriteError,
)

__all__ = [
    "SaveOnWriteError",
    "DataReadError",
    "ReadError",
    "DecodeError",
    "EncodeError",
    "WriteError",
    "UnhashableContentError",
    "GuardError",
    "GuardActiveError",
    "GuardClosedError",
]
