from __future__ import annotations
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import NoteRecord, from_millis


class CamelModel(BaseModel):
    # camelCase on the wire, snake_case in Python
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Note(CamelModel):
    id: str
    title: str
    content: str = ""
    created_at: datetime
    updated_at: datetime
    tags: list[str] = Field(default_factory=list)

    @classmethod
    def from_record(cls, record: NoteRecord, tags: list[str]) -> Note:
        return cls(
            id=record.id,
            title=record.title,
            content=record.content,
            created_at=from_millis(record.created_at),
            updated_at=from_millis(record.updated_at),
            tags=tags,
        )


class NoteDraft(CamelModel):
    """A note without id or timestamps. Extra keys such as ``id`` are ignored."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    title: str
    content: str = ""
    tags: list[str] = Field(default_factory=list)


class NoteUpdate(CamelModel):
    """Partial update; only the keys in ``model_fields_set`` are applied.

    ``tags`` left out keeps the current tags, ``tags=[]`` clears them.
    """

    title: Optional[str] = None
    content: Optional[str] = None
    tags: Optional[list[str]] = None


class TagCount(CamelModel):
    name: str
    count: int


class StoredImage(CamelModel):
    file_path: str
    file_name: str


def normal_tags(tags: Optional[list[str]]) -> list[str]:
    """Strip names and drop blanks and repeats, keeping first-seen order and case."""
    if not tags:
        return []
    seen: dict[str, None] = {}
    for t in tags:
        if t and t.strip():
            seen.setdefault(t.strip(), None)
    return list(seen)
