"""HTTP tests for /api/uploads."""

import pytest

from inkpress.config.settings import Settings
from inkpress.storage.dependencies import get_storage_service
from inkpress.storage.service import LocalFileStorage

from tests.conftest import bearer


PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture
def upload_client(app, client, tmp_path):
    storage = LocalFileStorage(Settings(upload_dir=str(tmp_path)))
    app.dependency_overrides[get_storage_service] = lambda: storage
    yield client
    app.dependency_overrides.clear()


def test_config_is_public(upload_client) -> None:
    body = upload_client.get("/api/uploads/config").json()

    assert "image/png" in body["image_types"]
    assert "video/mp4" in body["video_types"]


def test_upload_requires_token(upload_client) -> None:
    response = upload_client.post(
        "/api/uploads/images", files={"file": ("a.png", PNG, "image/png")}
    )
    assert response.status_code == 401


def test_upload_image(upload_client, reader, tmp_path) -> None:
    response = upload_client.post(
        "/api/uploads/images",
        files={"file": ("a.png", PNG, "image/png")},
        headers=bearer(reader),
    )

    assert response.status_code == 201
    body = response.json()
    assert body["mimetype"] == "image/png"
    assert body["original_name"] == "a.png"
    assert (tmp_path / body["path"]).exists()


def test_upload_spoofed_video(upload_client, reader) -> None:
    response = upload_client.post(
        "/api/uploads/videos",
        files={"file": ("a.mp4", PNG, "video/mp4")},
        headers=bearer(reader),
    )

    assert response.status_code == 415
    assert response.json()["error"] is True
