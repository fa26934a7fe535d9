from __future__ import annotations
from pathlib import Path
from typing import Optional
import logging
import shutil

from .config import images_dir
from .exceptions import NoteValidationError
from .schemas import StoredImage

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".svg"}


def read_text(path: Path | str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except OSError:
        logger.exception("Error reading %s", path)
        raise


def write_text(path: Path | str, content: str) -> None:
    """Write UTF-8 text, creating missing parent directories."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    except OSError:
        logger.exception("Error writing %s", path)
        raise


def _free_name(directory: Path, source: Path) -> Path:
    dest = directory / source.name
    n = 1
    while dest.exists():
        if dest.read_bytes() == source.read_bytes():
            break
        dest = directory / f"{source.stem}-{n}{source.suffix}"
        n += 1
    return dest


def store_image(source: Path | str, directory: Optional[Path] = None) -> StoredImage:
    """Copy an image into the private image directory.

    A different file already stored under the same name is never overwritten;
    the copy gets a ``-1``, ``-2``... suffix instead. Copying the same file
    twice reuses the first copy.
    """
    source = Path(source)
    if source.suffix.lower() not in IMAGE_EXTENSIONS:
        raise NoteValidationError(
            f"Unsupported image type '{source.suffix}'", field="path", value=str(source)
        )
    directory = directory or images_dir()
    try:
        directory.mkdir(parents=True, exist_ok=True)
        dest = _free_name(directory, source)
        if not (dest.exists() and dest.samefile(source)):
            shutil.copyfile(source, dest)
    except OSError:
        logger.exception("Error storing image %s", source)
        raise
    dest = dest.resolve()
    logger.info("Stored image %s as %s", source, dest)
    return StoredImage(file_path=dest.as_uri(), file_name=dest.name)
