"""
Query engine for plumnote.

Every filter takes a value and a collection and returns a new collection
with the matching notes. Clauses narrow left to right.
"""

from datetime import datetime, timedelta
from typing import Callable

from plumnote.errors import InvalidQuery
from plumnote.models import Notes, parse_tags

DATE_FORMAT = "%d/%m/%Y"

USAGE = "usage: plumnote l[ist] --[id, kind, tags, exact-tags, date, author] <value>"

# Every accepted spelling of a filter mode, mapped to its canonical name
MODE_ALIASES = {
    "id": "id", "-i": "id", "--id": "id",
    "kind": "kind", "-k": "kind", "--kind": "kind",
    "tags-any": "tags-any", "-t": "tags-any", "--tags": "tags-any", "--tags-any": "tags-any",
    "tags-all": "tags-all", "-e": "tags-all", "--exact-tags": "tags-all", "--tags-all": "tags-all",
    "date-range": "date-range", "-d": "date-range", "--date": "date-range", "--date-range": "date-range",
    "author": "author", "-a": "author", "--author": "author",
}


def by_id(note_id: int, notes: Notes) -> Notes:
    """At most one note. An absent id is an empty result."""
    if note_id in notes:
        return {note_id: notes[note_id]}
    return {}


def by_kind(kind: str, notes: Notes) -> Notes:
    return {nid: note for nid, note in notes.items() if note.kind == kind}


def by_tag(tag: str, notes: Notes) -> Notes:
    return {nid: note for nid, note in notes.items() if tag in note.tags}


def by_tags_any(tags: list[str], notes: Notes) -> Notes:
    """Notes carrying at least one of the tags."""
    filtered: Notes = {}
    for tag in tags:
        filtered.update(by_tag(tag, notes))
    return filtered


def by_tags_all(tags: list[str], notes: Notes) -> Notes:
    """Notes carrying every one of the tags."""
    filtered = dict(notes)
    for tag in tags:
        filtered = by_tag(tag, filtered)
    return filtered


def by_author(author: str, notes: Notes) -> Notes:
    return {nid: note for nid, note in notes.items() if note.author == author}


def parse_date_range(value: str) -> tuple[datetime, datetime]:
    """
    Parse "DD/MM/YYYY,DD/MM/YYYY" into local start and end instants.

    The end instant is the last second of the end day (23:59:59).
    """
    parts = value.split(",")
    if len(parts) != 2:
        raise InvalidQuery("usage: plumnote l[ist] --date DD/MM/YYYY,DD/MM/YYYY")

    try:
        start = datetime.strptime(parts[0].strip(), DATE_FORMAT)
        end = datetime.strptime(parts[1].strip(), DATE_FORMAT)
    except ValueError as e:
        raise InvalidQuery(f"invalid date in {value!r}: {e}") from e

    end = end + timedelta(hours=23, minutes=59, seconds=59)
    return start.astimezone(), end.astimezone()


def by_date_range(start: datetime, end: datetime, notes: Notes) -> Notes:
    """
    Notes dated strictly after start and no later than the end second.

    Sub-second parts of a note date are ignored at the end boundary, so a
    note at 23:59:59.5 on the end day still matches.
    """
    end_exclusive = end + timedelta(seconds=1)
    return {
        nid: note
        for nid, note in notes.items()
        if start < note.date.astimezone() < end_exclusive
    }


def _parse_id(value: str) -> int:
    try:
        return int(value)
    except ValueError as e:
        raise InvalidQuery(f"invalid note id: {value!r}") from e


FILTERS: dict[str, Callable[[str, Notes], Notes]] = {
    "id": lambda value, notes: by_id(_parse_id(value), notes),
    "kind": by_kind,
    "tags-any": lambda value, notes: by_tags_any(parse_tags(value), notes),
    "tags-all": lambda value, notes: by_tags_all(parse_tags(value), notes),
    "date-range": lambda value, notes: by_date_range(*parse_date_range(value), notes),
    "author": by_author,
}


def apply_filter(mode: str, value: str, notes: Notes) -> Notes:
    """Apply one (mode, value) clause."""
    canonical = MODE_ALIASES.get(mode)
    if canonical is None:
        raise InvalidQuery(f"unknown filter mode: {mode}\n{USAGE}")
    return FILTERS[canonical](value, notes)


def parse_clauses(args: list[str]) -> list[tuple[str, str]]:
    """Pair up a flat mode/value argument list."""
    if len(args) % 2:
        raise InvalidQuery(USAGE)
    return [(args[i], args[i + 1]) for i in range(0, len(args), 2)]


def run_query(clauses: list[tuple[str, str]], notes: Notes) -> Notes:
    """
    Apply clauses as an AND chain.

    Every clause is validated before any filtering happens, so a bad clause
    anywhere aborts the whole query.
    """
    for mode, value in clauses:
        canonical = MODE_ALIASES.get(mode)
        if canonical is None:
            raise InvalidQuery(f"unknown filter mode: {mode}\n{USAGE}")
        if canonical == "date-range":
            parse_date_range(value)
        elif canonical == "id":
            _parse_id(value)

    filtered = notes
    for mode, value in clauses:
        filtered = apply_filter(mode, value, filtered)
    if filtered is notes:
        filtered = dict(notes)
    return filtered
