"""
Note records for plumnote.

Note is what the store holds. TransferNote is the same record without the
synced flag, and is the only shape that crosses the wire.
"""

from datetime import datetime
from typing import Any

from pydantic import AwareDatetime, BaseModel, Field, TypeAdapter, field_validator


class TransferNote(BaseModel):
    """A note as exchanged between two installations."""

    id: int = Field(ge=0, lt=2**63, description="Seconds since epoch at creation")
    kind: str = Field(description="Short category, e.g. journal or todo")
    tags: list[str] = Field(default_factory=list, description="Free-text labels")
    text: str = Field(min_length=1, description="Note body")
    date: AwareDatetime = Field(description="Creation or last modification time")
    author: str = Field(default="", description="Configured author, may be empty")

    @field_validator("tags", mode="before")
    @classmethod
    def _null_tags(cls, value: Any) -> Any:
        # A missing tag list may be written as null
        return [] if value is None else value

    def dump(self) -> dict[str, Any]:
        """JSON-ready dict with an empty tag list omitted."""
        data = self.model_dump(mode="json")
        if not data["tags"]:
            del data["tags"]
        return data


class Note(TransferNote):
    """A note as held in the local store."""

    synced: bool = Field(default=False, description="Peer holds this exact version")

    def to_transfer(self) -> TransferNote:
        """Drop the store-local synced flag."""
        return TransferNote(**self.model_dump(exclude={"synced"}))

    @classmethod
    def from_transfer(cls, note: TransferNote, synced: bool = True) -> "Note":
        return cls(**note.model_dump(), synced=synced)

    def touched(self, now: datetime, **changes: Any) -> "Note":
        """Copy with the given fields replaced, marked dirty and re-dated."""
        return self.model_copy(update={**changes, "date": now, "synced": False})


Notes = dict[int, Note]

BATCH_ADAPTER = TypeAdapter(list[TransferNote])


def parse_tags(value: str) -> list[str]:
    """Split a comma-separated tag list, dropping blanks and duplicates."""
    tags: list[str] = []
    for raw in value.split(","):
        tag = raw.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags
