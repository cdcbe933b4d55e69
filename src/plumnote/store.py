"""
Store module for plumnote.

The whole collection lives in one JSON document. Every command loads it,
works on it in memory and writes it back with an atomic replace.
"""

import errno
import fcntl
import json
import logging
import os
import stat
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Any, Iterator

from pydantic import ValidationError

from plumnote.config import get_notes_path
from plumnote.errors import (
    CorruptStore,
    DiskFull,
    ForeignNote,
    NoteNotFound,
    PermissionDenied,
    StoreUnavailable,
)
from plumnote.models import Note, Notes

logger = logging.getLogger(__name__)

# Fields `update_note` may replace
UPDATABLE_FIELDS = ("tags", "kind", "text")


def generate_id(notes: Notes, now: datetime) -> int:
    """
    Generate a note ID (Unix timestamp in seconds).

    Bumps to the next free integer when the second is already taken locally.
    """
    candidate = int(now.timestamp())
    while candidate in notes:
        candidate += 1
    return candidate


def local_now() -> datetime:
    """Current time as an aware datetime in the local zone."""
    return datetime.now().astimezone()


def _os_error(exc: OSError, path: Path) -> StoreUnavailable:
    """Translate an OS error into the store taxonomy."""
    if isinstance(exc, PermissionError):
        return PermissionDenied(f"permission denied: {path}")
    if exc.errno in (errno.ENOSPC, errno.EDQUOT):
        return DiskFull(f"no space left writing {path}")
    return StoreUnavailable(f"{path}: {exc.strerror or exc}")


class Store:
    """JSON document store for one installation."""

    def __init__(self, path: Path | None = None):
        self.path = path or get_notes_path()
        self.lock_path = self.path.with_name(self.path.name + ".lock")

    def _ensure_dir(self) -> None:
        """Ensure the parent directory exists."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StoreUnavailable(f"cannot create {self.path.parent}: {e.strerror or e}") from e

    @contextmanager
    def locked(self) -> Iterator[None]:
        """
        Hold the exclusive lock for this store path.

        flock is per open file, so this serializes threads of one process
        as well as separate processes. Not reentrant.
        """
        self._ensure_dir()
        try:
            lock_file = open(self.lock_path, "a")
        except OSError as e:
            raise _os_error(e, self.lock_path) from e
        with lock_file:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
            try:
                yield
            finally:
                fcntl.flock(lock_file.fileno(), fcntl.LOCK_UN)

    def load(self) -> Notes:
        """Load the full collection. A missing document is an empty collection."""
        self._ensure_dir()
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return {}
        except OSError as e:
            raise _os_error(e, self.path) from e

        try:
            data = json.loads(raw)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise CorruptStore(f"{self.path} is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise CorruptStore(f"{self.path} must hold a JSON object")

        notes: Notes = {}
        for key, value in data.items():
            try:
                note_id = int(key)
            except ValueError as e:
                raise CorruptStore(f"{self.path}: {key!r} is not a note id") from e
            try:
                note = Note.model_validate(value)
            except ValidationError as e:
                raise CorruptStore(f"{self.path}: note {key} is invalid: {e}") from e
            if note.id != note_id:
                raise CorruptStore(f"{self.path}: key {key} holds note {note.id}")
            notes[note_id] = note
        return notes

    def save(self, notes: Notes) -> None:
        """Serialize the full collection and atomically replace the document."""
        self._ensure_dir()
        payload = _encode(notes)

        tmp = None
        try:
            tmp = NamedTemporaryFile(
                "w", encoding="utf-8", dir=str(self.path.parent),
                prefix=f".{self.path.name}.", suffix=".tmp", delete=False,
            )
            tmp.write(payload)
            tmp.flush()
            os.fsync(tmp.fileno())
            tmp.close()
            # New documents stay private (0600); existing ones keep their mode
            if self.path.exists():
                os.chmod(tmp.name, stat.S_IMODE(self.path.stat().st_mode))
            os.replace(tmp.name, self.path)
        except OSError as e:
            raise _os_error(e, self.path) from e
        finally:
            if tmp is not None:
                tmp.close()
                if os.path.exists(tmp.name):
                    os.unlink(tmp.name)

        logger.debug(f"Saved {len(notes)} notes to {self.path}")

    @contextmanager
    def transaction(self) -> Iterator[Notes]:
        """Lock, load, yield the collection, save it if the block succeeds."""
        with self.locked():
            notes = self.load()
            yield notes
            self.save(notes)

    def add_note(
        self,
        kind: str,
        text: str,
        tags: list[str] | None = None,
        author: str = "",
    ) -> Note:
        """Create a new unsynced note. Returns the stored note."""
        now = local_now()
        with self.transaction() as notes:
            note_id = generate_id(notes, now)
            note = Note(
                id=note_id,
                kind=kind,
                tags=tags or [],
                text=text,
                date=now,
                author=author,
            )
            notes[note_id] = note
        return note

    def update_note(self, note_id: int, field: str, value: Any, author: str = "") -> Note:
        """
        Replace one field of a note, reset its dirty bit and refresh its date.

        Only the note's own author may update it.
        """
        if field not in UPDATABLE_FIELDS:
            raise ValueError(f"cannot update field: {field}")
        if field == "text" and not value:
            raise ValueError("note text cannot be empty")

        with self.transaction() as notes:
            note = notes.get(note_id)
            if note is None:
                raise NoteNotFound(f"no note with id {note_id}")
            if note.author != author:
                raise ForeignNote(f"note {note_id} belongs to {note.author or 'nobody'}; can't update other's notes")
            updated = note.touched(local_now(), **{field: value})
            notes[note_id] = updated
        return updated

    def remove_note(self, note_id: int) -> bool:
        """Hard-delete a note. Returns True if it existed."""
        with self.transaction() as notes:
            return notes.pop(note_id, None) is not None

    def get_stats(self) -> dict[str, Any]:
        """Get store statistics."""
        notes = self.load()
        by_kind: dict[str, int] = {}
        for note in notes.values():
            by_kind[note.kind] = by_kind.get(note.kind, 0) + 1
        return {
            "total_notes": len(notes),
            "unsynced": sum(1 for note in notes.values() if not note.synced),
            "by_kind": dict(sorted(by_kind.items())),
        }


def _encode(notes: Notes) -> str:
    """Indented JSON, keys in numeric id order."""
    data = {str(note_id): notes[note_id].dump() for note_id in sorted(notes)}
    return json.dumps(data, indent=2, ensure_ascii=False) + "\n"
