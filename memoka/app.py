from __future__ import annotations
from contextlib import asynccontextmanager
from typing import Optional
import logging

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from pydantic import Field

from .db import Store, get_store, reset_store
from .files import store_image
from .repository import NoteRepository
from .schemas import CamelModel, Note, NoteDraft, NoteUpdate, StoredImage, TagCount
from .transfer import ImportExportService

logger = logging.getLogger(__name__)


# ---------- Schemas ----------
class PathIn(CamelModel):
    path: str


class PathsIn(CamelModel):
    paths: list[str] = Field(min_length=1)


class MarkdownExportIn(CamelModel):
    note: Note
    path: str
    convert_html: bool = False


class DeletedOut(CamelModel):
    deleted: bool


class ExportOut(CamelModel):
    ok: bool = True
    count: Optional[int] = None


# ---------- Dependencies ----------
def get_repository(request: Request) -> NoteRepository:
    return NoteRepository(request.app.state.store)


def get_transfer(repo: NoteRepository = Depends(get_repository)) -> ImportExportService:
    return ImportExportService(repo)


def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"{what} not found")


# ---------- API ----------
router = APIRouter(prefix="/api")


@router.get("/notes", response_model=list[Note])
def api_list_notes(repo: NoteRepository = Depends(get_repository)):
    return repo.find_all()


@router.post("/notes", response_model=Note, status_code=201)
def api_create_note(payload: NoteDraft, repo: NoteRepository = Depends(get_repository)):
    try:
        return repo.create(payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/notes/export", response_model=ExportOut)
def api_export(payload: PathIn, transfer: ImportExportService = Depends(get_transfer)):
    return ExportOut(count=transfer.export_all(payload.path))


@router.post("/notes/import", response_model=list[Note])
def api_import(payload: PathIn, transfer: ImportExportService = Depends(get_transfer)):
    try:
        return transfer.import_all(payload.path)
    except FileNotFoundError:
        raise _not_found(payload.path)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/notes/export-markdown", response_model=ExportOut)
def api_export_markdown(payload: MarkdownExportIn, transfer: ImportExportService = Depends(get_transfer)):
    transfer.export_one_as_markdown(payload.note, payload.path, convert_html=payload.convert_html)
    return ExportOut()


@router.post("/notes/import-markdown", response_model=list[Note])
def api_import_markdown(payload: PathsIn, transfer: ImportExportService = Depends(get_transfer)):
    try:
        return transfer.import_markdown(payload.paths)
    except FileNotFoundError as e:
        raise _not_found(e.filename or "File")


@router.get("/notes/{note_id}", response_model=Note)
def api_get_note(note_id: str, repo: NoteRepository = Depends(get_repository)):
    note = repo.find_by_id(note_id)
    if not note:
        raise _not_found("Note")
    return note


@router.patch("/notes/{note_id}", response_model=Note)
def api_update_note(note_id: str, payload: NoteUpdate, repo: NoteRepository = Depends(get_repository)):
    try:
        note = repo.update(note_id, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    if not note:
        raise _not_found("Note")
    return note


@router.delete("/notes/{note_id}", response_model=DeletedOut)
def api_delete_note(note_id: str, repo: NoteRepository = Depends(get_repository)):
    return DeletedOut(deleted=repo.delete(note_id))


@router.get("/tags", response_model=list[TagCount])
def api_list_tags(repo: NoteRepository = Depends(get_repository)):
    return repo.list_tags()


@router.post("/images", response_model=StoredImage)
def api_upload_image(payload: PathIn):
    try:
        return store_image(payload.path)
    except FileNotFoundError:
        raise _not_found(payload.path)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


# ---------- bootstrap ----------
def create_app(store: Optional[Store] = None) -> FastAPI:
    """Build the API. Without an explicit store the process-wide one is opened
    at startup and closed at shutdown."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.store = store or get_store()
        yield
        if store is None:
            reset_store()

    app = FastAPI(title="Memoka API", lifespan=lifespan)
    app.include_router(router)
    return app


app = create_app()
