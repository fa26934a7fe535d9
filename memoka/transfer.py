"""JSON and Markdown import/export for notes."""
from __future__ import annotations
from pathlib import Path
from typing import Iterable
import json
import logging

from pydantic import ValidationError

from .exceptions import NoteValidationError
from .files import read_text, write_text
from .markdown import html_to_markdown, markdown_to_html
from .repository import NoteRepository
from .schemas import Note, NoteDraft

logger = logging.getLogger(__name__)

IMPORTED_TAG = "imported"


def note_to_markdown(note: Note, convert_html: bool = False) -> str:
    header = f"# {note.title}\n\n"
    tags = f"Tags: {', '.join(note.tags)}\n\n" if note.tags else ""
    content = html_to_markdown(note.content) if convert_html else note.content
    return f"{header}{tags}{content}"


def _parse_drafts(raw: str, source: Path | str) -> list[NoteDraft]:
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise NoteValidationError(f"{source} is not valid JSON: {e}", field="source", value=str(source)) from e
    if not isinstance(data, list):
        raise NoteValidationError(f"{source} must contain a JSON array of notes", field="source", value=str(source))

    drafts = []
    for i, item in enumerate(data):
        try:
            draft = NoteDraft.model_validate(item)
        except ValidationError as e:
            raise NoteValidationError(f"Entry {i} is not a valid note: {e}", field=f"[{i}]") from e
        if not draft.title.strip():
            raise NoteValidationError(f"Entry {i} has no title", field=f"[{i}].title")
        drafts.append(draft)
    return drafts


class ImportExportService:
    """Bulk serialization of notes to and from files.

    ``import_all`` validates the whole document before creating anything: one
    bad entry rejects the batch and no notes are added.
    """

    def __init__(self, repository: NoteRepository):
        self.repository = repository

    def export_all(self, destination: Path | str) -> int:
        notes = self.repository.find_all()
        payload = [n.model_dump(mode="json", by_alias=True) for n in notes]
        write_text(destination, json.dumps(payload, indent=2, ensure_ascii=False))
        logger.info("Exported %d notes to %s", len(notes), destination)
        return len(notes)

    def import_all(self, source: Path | str) -> list[Note]:
        drafts = _parse_drafts(read_text(source), source)
        created = [self.repository.create(d) for d in drafts]
        logger.info("Imported %d notes from %s", len(created), source)
        return created

    def export_one_as_markdown(self, note: Note, destination: Path | str, convert_html: bool = False) -> None:
        write_text(destination, note_to_markdown(note, convert_html=convert_html))
        logger.info("Exported note %s to %s", note.id, destination)

    def import_markdown(self, sources: Iterable[Path | str]) -> list[Note]:
        """Create one note per Markdown file, titled after the file name.

        Every file is read before any note is created, so an unreadable file
        adds nothing. Notes are then created one by one in input order.
        """
        drafts = []
        for source in map(Path, sources):
            html = markdown_to_html(read_text(source))
            drafts.append(NoteDraft(title=source.stem, content=html, tags=[IMPORTED_TAG]))
        created = [self.repository.create(d) for d in drafts]
        logger.info("Imported %d markdown file(s)", len(created))
        return created
