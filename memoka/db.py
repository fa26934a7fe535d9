from __future__ import annotations
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional
import logging
import threading

from sqlalchemy import event
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine

from . import models  # noqa: F401  registers the tables on SQLModel.metadata
from .config import db_path

logger = logging.getLogger(__name__)


def _enable_foreign_keys(dbapi_connection, _record) -> None:
    # SQLite ignores ON DELETE CASCADE unless this is set per connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


class Store:
    """Owns the single SQLite connection and makes sure the schema exists.

    Construct one per process (see :func:`get_store`) and hand it to the
    repositories. Using a store after :meth:`close` is a caller error.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        if str(path) != ":memory:":
            self.path.parent.mkdir(parents=True, exist_ok=True)
            url = f"sqlite:///{self.path}"
        else:
            url = "sqlite://"
        # one shared connection; the lock below serializes transactions on it
        self.engine = create_engine(
            url,
            echo=False,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        event.listen(self.engine, "connect", _enable_foreign_keys)
        self._lock = threading.RLock()
        SQLModel.metadata.create_all(self.engine)
        logger.debug("Opened note store at %s", self.path)

    def get_session(self) -> Session:
        # keep objects alive after commit so returned models retain values
        return Session(self.engine, expire_on_commit=False)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        with self._lock:
            session = self.get_session()
            try:
                yield session
                session.commit()
            except Exception:
                session.rollback()
                logger.exception("Transaction on %s rolled back", self.path)
                raise
            finally:
                session.close()

    def close(self) -> None:
        self.engine.dispose()
        logger.debug("Closed note store at %s", self.path)

    def __enter__(self) -> Store:
        return self

    def __exit__(self, *exc) -> None:
        self.close()


_STORE: Optional[Store] = None


def get_store() -> Store:
    """Return the process-wide store, opening it on first use."""
    global _STORE
    if _STORE is None:
        _STORE = Store(db_path())
    return _STORE


def reset_store() -> None:
    """Close and forget the process-wide store (shutdown, tests)."""
    global _STORE
    if _STORE is not None:
        _STORE.close()
    _STORE = None
