"""
Display module for plumnote.

Renders notes and sync results for the terminal.
"""

import os

from plumnote.models import Note, Notes
from plumnote.sync import SyncResult


# ANSI color codes
class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    BOLD = "\033[1m"
    DIM = "\033[2m"

    BRIGHT_BLACK = "\033[90m"  # Gray
    BRIGHT_YELLOW = "\033[93m"
    BRIGHT_CYAN = "\033[96m"
    BRIGHT_MAGENTA = "\033[95m"

    @classmethod
    def enabled(cls) -> bool:
        """Check if colors should be enabled."""
        if os.environ.get("NO_COLOR"):
            return False
        return True


def c(text: str, *codes: str) -> str:
    """Apply color codes to text if colors are enabled."""
    if not Colors.enabled():
        return text
    return "".join(codes) + text + Colors.RESET


def format_date(note: Note) -> str:
    """e.g. "monday, 2 january 2006 at 15:04:05" in local time."""
    date = note.date.astimezone()
    return f"{date:%A}, {date.day} {date:%B %Y} at {date:%H:%M:%S}".lower()


def format_note(note: Note) -> str:
    """Header line followed by the quoted text."""
    parts = [
        c(f"id: {note.id}", Colors.BOLD),
        c(format_date(note), Colors.DIM),
        c(f"kind: {note.kind}", Colors.BRIGHT_YELLOW),
    ]
    if note.tags:
        parts.append(c(f"tags: [{', '.join(note.tags)}]", Colors.BRIGHT_CYAN))
    if note.author:
        parts.append(c(f"by: {note.author}", Colors.BRIGHT_MAGENTA))
    if not note.synced:
        parts.append(c("unsynced", Colors.BRIGHT_BLACK))

    return " | ".join(parts) + f"\n'{note.text}'\n"


def format_notes(notes: Notes) -> str:
    """All notes ordered by id, blank line between each."""
    if not notes:
        return "no notes found."
    return "\n".join(format_note(notes[note_id]) for note_id in sorted(notes))


def format_sync_result(result: SyncResult) -> str:
    return f"notes synced! sent {result.sent}, received {result.received}"
