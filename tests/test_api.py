"""
HTTP API tests
"""

import io

import pytest
from fastapi.testclient import TestClient
from PIL import Image

import main
from config import settings


@pytest.fixture
def scripts_dir(tmp_path, monkeypatch):
    scripts = tmp_path / "scripts"
    scripts.mkdir()
    monkeypatch.setattr(settings, "SCRIPTS_DIR", scripts)
    monkeypatch.setattr(settings, "DEFAULT_WIDTH", 64)
    monkeypatch.setattr(settings, "DEFAULT_HEIGHT", 32)
    return scripts


@pytest.fixture
def client(scripts_dir) -> TestClient:
    return TestClient(main.app)


def decode(response) -> Image.Image:
    return Image.open(io.BytesIO(response.content))


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestRenderInline:
    """POST /render"""

    def test_streams_jpeg_without_output(self, client):
        response = client.post("/render", json={"script": 'template="40x20", bg=red'})
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"
        image = decode(response)
        assert image.format == "JPEG"
        assert image.size == (40, 20)

    def test_default_document(self, client):
        response = client.post("/render", json={"script": ""})
        assert decode(response).size == (64, 32)

    def test_variables(self, client):
        response = client.post(
            "/render",
            json={"script": 'template="{$w}x{$h}"', "variables": {"w": "12", "h": "8"}},
        )
        assert decode(response).size == (12, 8)

    def test_output_file_returned(self, client, scripts_dir):
        response = client.post("/render", json={"script": 'template="10x10"\noutput="card.png"'})
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert (scripts_dir / "card.png").is_file()
        assert decode(response).format == "PNG"

    def test_script_error(self, client):
        response = client.post(
            "/render",
            json={"script": 'template="40x20"\ntext="x", frobnicate=1'},
        )
        assert response.status_code == 400
        body = response.json()
        assert body["error"] == "UnknownOptionError"
        assert body["line"] == 2
        assert "frobnicate" in body["message"]

    def test_missing_script_field(self, client):
        assert client.post("/render", json={}).status_code == 422

    def test_bad_value_is_client_error(self, client):
        response = client.post("/render", json={"script": 'a="1"\ntemplate="0x4"'})
        assert response.status_code == 400
        assert response.json()["error"] == "MalformedCommandSyntaxError"
        assert response.json()["line"] == 2

    @pytest.mark.parametrize("target", ["../escaped.png", "sub/../../escaped.png"])
    def test_relative_output_outside_workspace(self, client, scripts_dir, target):
        response = client.post("/render", json={"script": f'output="{target}"'})
        assert response.status_code == 400
        assert response.json()["error"] == "PathOutsideWorkspaceError"
        assert not (scripts_dir.parent / "escaped.png").exists()

    def test_absolute_output_outside_workspace(self, client, tmp_path):
        target = tmp_path / "outside" / "written.png"
        response = client.post("/render", json={"script": f'output="{target}"'})
        assert response.status_code == 400
        assert not target.exists()

    def test_absolute_read_outside_workspace(self, client, tmp_path):
        Image.new("RGB", (4, 4), "red").save(tmp_path / "private.png")
        response = client.post(
            "/render",
            json={"script": f'image="{tmp_path / "private.png"}"'},
        )
        assert response.status_code == 400
        assert response.json()["error"] == "PathOutsideWorkspaceError"


class TestRenderFile:
    """GET /render?file=..."""

    def test_query_parameters_become_variables(self, client, scripts_dir):
        (scripts_dir / "card.txt").write_text('template="{$w}x10"\n', encoding="utf-8")
        response = client.get("/render", params={"file": "card.txt", "w": "30"})
        assert response.status_code == 200
        assert decode(response).size == (30, 10)

    def test_nested_script(self, client, scripts_dir):
        (scripts_dir / "cards").mkdir()
        (scripts_dir / "cards" / "a.txt").write_text('template="5x5"', encoding="utf-8")
        response = client.get("/render", params={"file": "cards/a.txt"})
        assert response.status_code == 200

    def test_missing_script(self, client):
        response = client.get("/render", params={"file": "nope.txt"})
        assert response.status_code == 404

    def test_path_escape(self, client, scripts_dir):
        (scripts_dir.parent / "secret.txt").write_text('template="5x5"', encoding="utf-8")
        response = client.get("/render", params={"file": "../secret.txt"})
        assert response.status_code == 400

    def test_script_error(self, client, scripts_dir):
        (scripts_dir / "bad.txt").write_text('\n\nimage="missing.png"\n', encoding="utf-8")
        response = client.get("/render", params={"file": "bad.txt"})
        assert response.status_code == 400
        assert response.json() == {
            "error": "MissingFileError",
            "line": 3,
            "message": f"Can't find file {scripts_dir.resolve() / 'missing.png'}",
        }

    def test_query_variable_cannot_escape(self, client, scripts_dir):
        (scripts_dir / "save.txt").write_text('output="{$name}.png"\n', encoding="utf-8")
        response = client.get("/render", params={"file": "save.txt", "name": "../escaped"})
        assert response.status_code == 400
        assert response.json()["error"] == "PathOutsideWorkspaceError"
        assert not (scripts_dir.parent / "escaped.png").exists()

    def test_file_is_required(self, client):
        assert client.get("/render").status_code == 422
