from __future__ import annotations
from pathlib import Path
from typing import Optional
import typer
from rich.console import Console
from rich.markdown import Markdown
from rich.table import Table

from .config import configure_logging
from .db import get_store, reset_store
from .files import store_image
from .markdown import html_to_markdown, markdown_to_html
from .repository import NoteRepository
from .schemas import NoteDraft, NoteUpdate
from .transfer import ImportExportService

app = typer.Typer(help="Memoka: local notes with tags")
console = Console()


def _split(tags: Optional[str]) -> list[str]:
    return [t for t in (tags or "").split(",") if t.strip()]


def _repo(ctx: typer.Context) -> NoteRepository:
    return ctx.obj


@app.callback()
def _boot(
    ctx: typer.Context,
    verbose: bool = typer.Option(False, "--verbose", "-v", help="debug logging"),
):
    configure_logging("DEBUG" if verbose else None)
    ctx.obj = NoteRepository(get_store())
    ctx.call_on_close(reset_store)


@app.command()
def add(
    ctx: typer.Context,
    title: str = typer.Option(..., "--title", "-t"),
    content: str = typer.Option("", "--content", "-c"),
    tags: Optional[str] = typer.Option(None, "--tags", "-g", help="comma separated"),
    markdown: bool = typer.Option(False, "--markdown", "-m", help="content is markdown"),
):
    if markdown:
        content = markdown_to_html(content)
    try:
        n = _repo(ctx).create(NoteDraft(title=title, content=content, tags=_split(tags)))
    except ValueError as e:
        console.print(f"[red]Invalid[/]: {e}")
        raise typer.Exit(1)
    console.print(f"[green]Created[/] {n.id}: {n.title}")


@app.command("list")
def _list(ctx: typer.Context):
    notes = _repo(ctx).find_all()
    table = Table(title="Memoka")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Tags", style="magenta")
    table.add_column("Updated")
    for n in notes:
        table.add_row(n.id, n.title, ", ".join(n.tags), n.updated_at.isoformat(timespec="minutes"))
    console.print(table)


@app.command()
def show(ctx: typer.Context, note_id: str):
    n = _repo(ctx).find_by_id(note_id)
    if not n:
        console.print(f"[red]Not found[/]: {note_id}")
        raise typer.Exit(1)
    console.rule(f"{n.title}")
    if n.tags:
        console.print(f"[dim]tags:[/] {', '.join(n.tags)}")
    console.print(Markdown(html_to_markdown(n.content) or "_<empty>_"))


@app.command()
def edit(
    ctx: typer.Context,
    note_id: str,
    title: Optional[str] = typer.Option(None, "--title", "-t"),
    content: Optional[str] = typer.Option(None, "--content", "-c"),
    tags: Optional[str] = typer.Option(None, "--tags", "-g", help='comma separated; "" clears'),
):
    fields = {}
    if title is not None:
        fields["title"] = title
    if content is not None:
        fields["content"] = content
    if tags is not None:
        fields["tags"] = _split(tags)
    try:
        n = _repo(ctx).update(note_id, NoteUpdate(**fields))
    except ValueError as e:
        console.print(f"[red]Invalid[/]: {e}")
        raise typer.Exit(1)
    if not n:
        console.print(f"[red]Not found[/]: {note_id}")
        raise typer.Exit(1)
    console.print(f"[green]Updated[/] {n.id}: {n.title}")


@app.command()
def delete(ctx: typer.Context, note_id: str):
    if _repo(ctx).delete(note_id):
        console.print(f"[yellow]Deleted[/]: {note_id}")
    else:
        console.print(f"[red]Not found[/]: {note_id}")
        raise typer.Exit(1)


@app.command()
def tags(ctx: typer.Context):
    table = Table(title="Tags")
    table.add_column("Tag", style="magenta")
    table.add_column("Notes", justify="right")
    for t in _repo(ctx).list_tags():
        table.add_row(t.name, str(t.count))
    console.print(table)


@app.command()
def export(ctx: typer.Context, to: Path = typer.Option(..., "--to")):
    count = ImportExportService(_repo(ctx)).export_all(to)
    console.print(f"[green]Exported[/] {count} notes → {to}")


@app.command("import")
def import_(ctx: typer.Context, from_: Path = typer.Option(..., "--from")):
    try:
        notes = ImportExportService(_repo(ctx)).import_all(from_)
    except ValueError as e:
        console.print(f"[red]Invalid[/]: {e}")
        raise typer.Exit(1)
    console.print(f"[green]Imported[/] {len(notes)} notes")


@app.command("export-md")
def export_md(
    ctx: typer.Context,
    note_id: str,
    to: Path = typer.Option(..., "--to"),
    convert: bool = typer.Option(False, "--convert", help="convert HTML content to markdown"),
):
    repo = _repo(ctx)
    n = repo.find_by_id(note_id)
    if not n:
        console.print(f"[red]Not found[/]: {note_id}")
        raise typer.Exit(1)
    ImportExportService(repo).export_one_as_markdown(n, to, convert_html=convert)
    console.print(f"[green]Exported[/] {n.title} → {to}")


@app.command("import-md")
def import_md(ctx: typer.Context, paths: list[Path] = typer.Argument(..., exists=True, dir_okay=False)):
    notes = ImportExportService(_repo(ctx)).import_markdown(paths)
    for n in notes:
        console.print(f"[green]Imported[/] {n.id}: {n.title}")


@app.command("upload-image")
def upload_image(path: Path = typer.Argument(..., exists=True, dir_okay=False)):
    try:
        image = store_image(path)
    except ValueError as e:
        console.print(f"[red]Invalid[/]: {e}")
        raise typer.Exit(1)
    console.print(f"[green]Stored[/] {image.file_name} → {image.file_path}")


@app.command()
def serve(host: str = "127.0.0.1", port: int = 8000):
    """Run the HTTP API."""
    import uvicorn

    uvicorn.run("memoka.app:app", host=host, port=port)


def main():
    app()


if __name__ == "__main__":
    main()
