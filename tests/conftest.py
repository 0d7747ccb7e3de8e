"""Pytest configuration and shared fixtures.

Fixtures are organized by category:
- Data fixtures: sample values
- Listener fixtures: listeners with recording callbacks
- Store fixtures: file-backed stores in a temp directory
"""

import copy
from pathlib import Path
from typing import Any

import pytest

from saveonwrite.core.listener import ChangeListener
from saveonwrite.persistence.store import PersistentStore

# =============================================================================
# Data Fixtures
# =============================================================================


@pytest.fixture
def person_dict() -> dict[str, Any]:
    """Plain JSON-compatible person."""
    return {"name": "Joe", "age": 25}


# =============================================================================
# Listener Fixtures
# =============================================================================


class RecordingCallback:
    """Change callback that records every value it receives."""

    def __init__(self) -> None:
        self.calls: list[Any] = []

    def __call__(self, value: Any) -> None:
        # Snapshot; the listener keeps mutating the same object
        self.calls.append(copy.deepcopy(value))

    @property
    def count(self) -> int:
        return len(self.calls)


@pytest.fixture
def recorder() -> RecordingCallback:
    """Fresh recording callback."""
    return RecordingCallback()


@pytest.fixture
def listener(person_dict: dict[str, Any], recorder: RecordingCallback) -> ChangeListener:
    """Listener over a person dict with a recording callback."""
    return ChangeListener(person_dict, recorder)


# =============================================================================
# Store Fixtures
# =============================================================================


@pytest.fixture
def store_path(tmp_path: Path) -> Path:
    """Destination file inside the test's temp directory."""
    return tmp_path / "p.json"


@pytest.fixture
def person_store(person_dict: dict[str, Any], store_path: Path) -> PersistentStore:
    """Store created from a person dict, already written to disk."""
    return PersistentStore.from_item(person_dict, store_path)
