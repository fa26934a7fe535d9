from __future__ import annotations
from pathlib import Path
import logging
import os

from rich.logging import RichHandler


def data_dir() -> Path:
    env_dir = os.getenv("MEMOKA_DATA_DIR")
    path = Path(env_dir) if env_dir else Path.home() / ".memoka"
    path.mkdir(parents=True, exist_ok=True)
    return path


def db_path() -> Path:
    env_path = os.getenv("MEMOKA_DB_PATH")
    if env_path:
        path = Path(env_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        return path
    return data_dir() / "memoka.db"


def images_dir() -> Path:
    """Private storage area for uploaded images."""
    path = data_dir() / "images"
    path.mkdir(parents=True, exist_ok=True)
    return path


def configure_logging(level: str | int | None = None) -> None:
    if level is None:
        level = os.getenv("MEMOKA_LOG_LEVEL", "WARNING")
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
        force=True,
    )
