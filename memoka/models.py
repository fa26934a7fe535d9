from __future__ import annotations
from datetime import UTC, datetime, timedelta

from sqlalchemy import Column, ForeignKey, String
from sqlmodel import Field, SQLModel

_EPOCH = datetime(1970, 1, 1, tzinfo=UTC)


def now_millis() -> int:
    return int(datetime.now(UTC).timestamp() * 1000)


def from_millis(value: int) -> datetime:
    return _EPOCH + timedelta(milliseconds=value)


class NoteRecord(SQLModel, table=True):
    __tablename__ = "notes"

    id: str = Field(primary_key=True)
    title: str
    content: str = ""
    # epoch milliseconds
    created_at: int
    updated_at: int = Field(index=True)


class Tag(SQLModel, table=True):
    __tablename__ = "tags"

    id: str = Field(primary_key=True)
    name: str = Field(unique=True)


class NoteTag(SQLModel, table=True):
    __tablename__ = "note_tags"

    note_id: str = Field(
        sa_column=Column(String, ForeignKey("notes.id", ondelete="CASCADE"), primary_key=True)
    )
    tag_id: str = Field(
        sa_column=Column(String, ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True, index=True)
    )
