import numpy as np
import pytest
import requests
from fastapi.testclient import TestClient
from PIL import Image

from rmbg_service import api

from .helpers import png_bytes


@pytest.fixture
def client(monkeypatch, remover):
    uploads = []

    def fake_upload(data):
        uploads.append(data)
        return "https://cdn.example.com/rmbg/out.png"

    monkeypatch.setattr(api, "get_remover", lambda: remover)
    monkeypatch.setattr(api, "_upload_png", fake_upload)
    monkeypatch.setattr(api, "_download_image", lambda url: png_bytes(np.full((5, 8, 3), 90)))
    test_client = TestClient(api.app)
    test_client.uploads = uploads
    return test_client


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_remove_bg_uploads_png(client):
    response = client.post("/remove-bg", json={"imageUrl": "https://example.com/cat.jpg"})
    assert response.status_code == 200
    assert response.json() == {
        "outputUrl": "https://cdn.example.com/rmbg/out.png",
        "width": 8,
        "height": 5,
    }
    (uploaded,) = client.uploads
    assert uploaded.startswith(b"\x89PNG")


def test_remove_bg_rejects_undecodable_image(client, monkeypatch):
    monkeypatch.setattr(api, "_download_image", lambda url: b"<html>not an image</html>")
    response = client.post("/remove-bg", json={"imageUrl": "https://example.com/page"})
    assert response.status_code == 400
    assert client.uploads == []


def test_remove_bg_download_failure(client, monkeypatch):
    def fail(url):
        raise requests.ConnectionError("unreachable")

    monkeypatch.setattr(api, "_download_image", fail)
    response = client.post("/remove-bg", json={"imageUrl": "https://example.com/cat.jpg"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Could not download image"


def test_remove_bg_inference_failure(client, fake_session):
    fake_session.error = RuntimeError("out of memory")
    response = client.post("/remove-bg", json={"imageUrl": "https://example.com/cat.jpg"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Background removal failed"


def test_remove_bg_upload_failure(client, monkeypatch):
    def fail(data):
        raise RuntimeError("R2 configuration is incomplete")

    monkeypatch.setattr(api, "_upload_png", fail)
    response = client.post("/remove-bg", json={"imageUrl": "https://example.com/cat.jpg"})
    assert response.status_code == 500
    assert response.json()["detail"] == "Upload to storage failed"


def test_remove_bg_validates_url(client):
    response = client.post("/remove-bg", json={"imageUrl": "not a url"})
    assert response.status_code == 422


def test_remove_bg_rejects_oversized_image(client, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
    response = client.post("/remove-bg", json={"imageUrl": "https://example.com/huge.png"})
    assert response.status_code == 400
    assert client.uploads == []
