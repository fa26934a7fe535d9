import json

import pytest
from fastapi.testclient import TestClient

from memoka.app import create_app


@pytest.fixture
def client(store):
    with TestClient(create_app(store)) as c:
        yield c


def test_create_get_update_delete(client):
    r = client.post("/api/notes", json={"title": "hello", "content": "<p>x</p>", "tags": ["a", "b", "a"]})
    assert r.status_code == 201
    note = r.json()
    assert note["tags"] == ["a", "b"]
    assert note["createdAt"] == note["updatedAt"]

    r = client.get(f"/api/notes/{note['id']}")
    assert r.status_code == 200
    assert r.json()["title"] == "hello"

    r = client.patch(f"/api/notes/{note['id']}", json={"title": "renamed"})
    assert r.status_code == 200
    assert r.json()["tags"] == ["a", "b"]
    assert r.json()["content"] == "<p>x</p>"

    r = client.patch(f"/api/notes/{note['id']}", json={"tags": []})
    assert r.json()["tags"] == []

    assert client.delete(f"/api/notes/{note['id']}").json() == {"deleted": True}
    assert client.delete(f"/api/notes/{note['id']}").json() == {"deleted": False}
    assert client.get(f"/api/notes/{note['id']}").status_code == 404


def test_list_notes(client):
    client.post("/api/notes", json={"title": "a"})
    client.post("/api/notes", json={"title": "b"})
    titles = [n["title"] for n in client.get("/api/notes").json()]
    assert sorted(titles) == ["a", "b"]


def test_create_blank_title_is_400(client):
    r = client.post("/api/notes", json={"title": " "})
    assert r.status_code == 400
    assert "title" in r.json()["detail"]


def test_update_missing_is_404(client):
    assert client.patch("/api/notes/nope", json={"title": "x"}).status_code == 404


def test_tags_endpoint(client):
    client.post("/api/notes", json={"title": "a", "tags": ["x", "y"]})
    client.post("/api/notes", json={"title": "b", "tags": ["x"]})
    assert client.get("/api/tags").json() == [{"name": "x", "count": 2}, {"name": "y", "count": 1}]


def test_export_and_import(client, tmp_path):
    client.post("/api/notes", json={"title": "a", "tags": ["x"]})
    dest = tmp_path / "export.json"
    r = client.post("/api/notes/export", json={"path": str(dest)})
    assert r.json() == {"ok": True, "count": 1}
    assert json.loads(dest.read_text(encoding="utf-8"))[0]["title"] == "a"

    r = client.post("/api/notes/import", json={"path": str(dest)})
    assert r.status_code == 200
    assert [n["title"] for n in r.json()] == ["a"]
    assert len(client.get("/api/notes").json()) == 2


def test_import_missing_file_is_404(client, tmp_path):
    r = client.post("/api/notes/import", json={"path": str(tmp_path / "missing.json")})
    assert r.status_code == 404


def test_import_invalid_is_400(client, tmp_path):
    src = tmp_path / "bad.json"
    src.write_text("[{}]", encoding="utf-8")
    assert client.post("/api/notes/import", json={"path": str(src)}).status_code == 400


def test_export_markdown(client, tmp_path):
    note = client.post("/api/notes", json={"title": "Hi", "content": "<p>Body</p>", "tags": ["x"]}).json()
    dest = tmp_path / "hi.md"
    r = client.post("/api/notes/export-markdown", json={"note": note, "path": str(dest), "convertHtml": True})
    assert r.json()["ok"] is True
    assert dest.read_text(encoding="utf-8") == "# Hi\n\nTags: x\n\nBody"


def test_import_markdown(client, tmp_path):
    src = tmp_path / "ideas.md"
    src.write_text("*maybe*", encoding="utf-8")
    r = client.post("/api/notes/import-markdown", json={"paths": [str(src)]})
    [note] = r.json()
    assert note["title"] == "ideas"
    assert note["tags"] == ["imported"]
    assert "<em>maybe</em>" in note["content"]


def test_upload_image(client, env):
    src = env / "photo.png"
    src.write_bytes(b"png")
    r = client.post("/api/images", json={"path": str(src)})
    assert r.status_code == 200
    body = r.json()
    assert body["fileName"] == "photo.png"
    assert body["filePath"].startswith("file://")

    assert client.post("/api/images", json={"path": str(env / "nope.png")}).status_code == 404


def test_update_missing_with_blank_title_is_404(client):
    assert client.patch("/api/notes/nope", json={"title": ""}).status_code == 404


def test_create_without_title_is_422(client):
    assert client.post("/api/notes", json={"content": "x"}).status_code == 422
