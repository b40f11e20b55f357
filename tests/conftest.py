"""Global fixtures: temp data directory, storage, library, controllable clock."""

from datetime import datetime, timedelta
from pathlib import Path

import pytest

from studylib.core.library import Library
from studylib.database.storage import LibraryStorage
from studylib.models import Category, Note


class FakeClock:
    """Stand-in for studylib.models.item._now."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: int = 1) -> datetime:
        self.now += timedelta(seconds=seconds)
        return self.now


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    """Frozen item clock; call advance() to move it forward."""
    fake = FakeClock(datetime(2025, 1, 15, 10, 0, 0))
    monkeypatch.setattr("studylib.models.item._now", fake)
    return fake


@pytest.fixture
def data_dir(tmp_path: Path) -> Path:
    """Temporary data directory (not created yet)."""
    return tmp_path / "studylibrary"


@pytest.fixture
def storage(data_dir: Path) -> LibraryStorage:
    """Storage rooted in a temporary directory."""
    return LibraryStorage(data_dir)


@pytest.fixture
def library(storage: LibraryStorage) -> Library:
    """Library over an empty temporary store."""
    return Library(storage)


@pytest.fixture
def programming() -> Category:
    """Sample category."""
    return Category(name="Programming", color="#4CAF50", description="Code")


@pytest.fixture
def sample_note() -> Note:
    """Single note for tests."""
    return Note(title="Test note", description="A note", content="Body text")
