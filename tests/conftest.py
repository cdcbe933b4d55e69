"""Shared fixtures for plumnote tests."""

from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from plumnote.config import Settings
from plumnote.models import Note
from plumnote.store import Store

UTC = timezone.utc


def make_note(
    note_id: int,
    text: str = "a note",
    kind: str = "journal",
    tags: list[str] | None = None,
    author: str = "",
    synced: bool = False,
    date: datetime | None = None,
) -> Note:
    return Note(
        id=note_id,
        kind=kind,
        tags=tags or [],
        text=text,
        date=date or datetime(2024, 3, 1, 12, 0, tzinfo=UTC) + timedelta(seconds=note_id),
        author=author,
        synced=synced,
    )


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point data and config directories into tmp_path."""
    monkeypatch.setenv("PLUMNOTE_HOME", str(tmp_path / "data"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "config"))
    monkeypatch.setenv("NO_COLOR", "1")
    return tmp_path


@pytest.fixture()
def store(tmp_path: Path) -> Store:
    return Store(tmp_path / "data" / "notes.json")


@pytest.fixture()
def peer_store(tmp_path: Path) -> Store:
    return Store(tmp_path / "peer" / "notes.json")


@pytest.fixture()
def settings(store: Store) -> Settings:
    return Settings(notes_path=store.path, author="ana")
