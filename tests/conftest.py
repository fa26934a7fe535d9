import pytest

from memoka.db import Store, reset_store
from memoka.repository import NoteRepository


@pytest.fixture
def store(tmp_path):
    s = Store(tmp_path / "test.db")
    yield s
    s.close()


@pytest.fixture
def repo(store):
    return NoteRepository(store)


@pytest.fixture
def env(tmp_path, monkeypatch):
    """Point the process-wide store and image directory at tmp_path."""
    monkeypatch.setenv("MEMOKA_DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("MEMOKA_DB_PATH", str(tmp_path / "data" / "env.sqlite"))
    reset_store()
    yield tmp_path
    reset_store()
