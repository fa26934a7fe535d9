from __future__ import annotations
from typing import Iterable, Optional
from uuid import uuid4
import logging

from sqlalchemy import func, literal_column
from sqlmodel import Session, select

from .db import Store
from .exceptions import NoteValidationError, TagLookupError
from .models import NoteRecord, NoteTag, Tag, now_millis
from .schemas import Note, NoteDraft, NoteUpdate, TagCount, normal_tags

logger = logging.getLogger(__name__)


def _new_id() -> str:
    return uuid4().hex


def _require_title(title: Optional[str]) -> str:
    if title is None or not title.strip():
        raise NoteValidationError("Note title is required", field="title", value=title)
    return title


class NoteRepository:
    """CRUD for notes and their tags on top of a :class:`~memoka.db.Store`.

    Tags are global: a name is stored once in ``tags`` and shared by every
    note that uses it through ``note_tags``. Saving a note's tags replaces
    its whole tag set in the same transaction as the note row.
    """

    def __init__(self, store: Store):
        self.store = store

    # ---------- queries ----------
    def find_all(self) -> list[Note]:
        """Every note, most recently updated first."""
        with self.store.session_scope() as s:
            stmt = select(NoteRecord).order_by(
                NoteRecord.updated_at.desc(),
                literal_column("notes.rowid").desc(),  # newest insert wins a tie
            )
            records = s.exec(stmt).all()
            return [Note.from_record(r, self._tags_for(s, r.id)) for r in records]

    def find_by_id(self, note_id: str) -> Optional[Note]:
        with self.store.session_scope() as s:
            record = s.get(NoteRecord, note_id)
            if record is None:
                return None
            return Note.from_record(record, self._tags_for(s, note_id))

    def list_tags(self) -> list[TagCount]:
        """All tag names with the number of notes using them, orphans included."""
        with self.store.session_scope() as s:
            stmt = (
                select(Tag.name, func.count(NoteTag.note_id))
                .select_from(Tag)
                .outerjoin(NoteTag, Tag.id == NoteTag.tag_id)
                .group_by(Tag.name)
                .order_by(Tag.name)
            )
            return [TagCount(name=name, count=count) for name, count in s.exec(stmt)]

    # ---------- mutations ----------
    def create(self, draft: NoteDraft) -> Note:
        title = _require_title(draft.title)
        tags = normal_tags(draft.tags)
        now = now_millis()
        record = NoteRecord(id=_new_id(), title=title, content=draft.content or "", created_at=now, updated_at=now)
        with self.store.session_scope() as s:
            s.add(record)
            s.flush()
            self._save_tags(s, record.id, tags)
            logger.debug("Created note %s with %d tag(s)", record.id, len(tags))
            return Note.from_record(record, tags)

    def update(self, note_id: str, changes: NoteUpdate) -> Optional[Note]:
        """Apply the supplied fields; ``None`` if the note does not exist."""
        supplied = changes.model_fields_set
        with self.store.session_scope() as s:
            record = s.get(NoteRecord, note_id)
            if record is None:
                return None
            if "title" in supplied:
                record.title = _require_title(changes.title)
            if "content" in supplied:
                record.content = changes.content or ""
            # never let two mutations share a timestamp
            record.updated_at = max(now_millis(), record.updated_at + 1)
            s.add(record)
            s.flush()

            if "tags" in supplied and changes.tags is not None:
                tags = normal_tags(changes.tags)
                self._save_tags(s, note_id, tags)
            else:
                tags = self._tags_for(s, note_id)
            logger.debug("Updated note %s (%s)", note_id, ", ".join(sorted(supplied)) or "touch")
            return Note.from_record(record, tags)

    def delete(self, note_id: str) -> bool:
        """Remove a note and its tag links; ``False`` if there was nothing to remove."""
        with self.store.session_scope() as s:
            record = s.get(NoteRecord, note_id)
            if record is None:
                return False
            s.delete(record)
            logger.debug("Deleted note %s", note_id)
            return True

    # ---------- tags ----------
    def _tags_for(self, s: Session, note_id: str) -> list[str]:
        stmt = (
            select(Tag.name)
            .join(NoteTag, NoteTag.tag_id == Tag.id)
            .where(NoteTag.note_id == note_id)
            .order_by(literal_column("note_tags.rowid"))
        )
        return list(s.exec(stmt))

    def _get_or_create_tag(self, s: Session, name: str) -> str:
        tag_id = s.exec(select(Tag.id).where(Tag.name == name)).first()
        if tag_id is None:
            s.add(Tag(id=_new_id(), name=name))
            s.flush()
            tag_id = s.exec(select(Tag.id).where(Tag.name == name)).first()
            if tag_id is None:
                raise TagLookupError(name)
        return tag_id

    def _save_tags(self, s: Session, note_id: str, tags: Iterable[str]) -> None:
        """Replace the note's tag links. Runs inside the caller's transaction."""
        for link in s.exec(select(NoteTag).where(NoteTag.note_id == note_id)).all():
            s.delete(link)
        # flush deletes first so re-added links get fresh rows (and rowid order)
        s.flush()

        linked: set[str] = set()
        for name in tags:
            tag_id = self._get_or_create_tag(s, name)
            if tag_id in linked:
                continue
            s.add(NoteTag(note_id=note_id, tag_id=tag_id))
            linked.add(tag_id)
        s.flush()
