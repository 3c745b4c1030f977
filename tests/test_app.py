"""Tests for the Flask HTTP surface."""

import base64
from io import BytesIO

import pytest

from app import create_app
from patternqr.config import Settings


@pytest.fixture
def client():
    return create_app(Settings()).test_client()


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        assert response.get_json()["status"] == "OK"


class TestGenerateEndpoint:
    def test_standard(self, client):
        response = client.post("/api/generate-qr", data={"url": "https://example.com"})
        body = response.get_json()
        assert response.status_code == 200
        assert body["success"] is True
        assert body["originalUrl"] == "https://example.com"
        assert body["isReadable"] is True
        assert body["warning"] is None
        png = base64.b64decode(body["qrCode"].split(",", 1)[1])
        assert png[:4] == b"\x89PNG"

    def test_missing_url(self, client):
        response = client.post("/api/generate-qr", data={})
        assert response.status_code == 400
        assert "URL is required" in response.get_json()["error"]

    def test_invalid_url(self, client):
        response = client.post("/api/generate-qr", data={"url": "not a url"})
        assert response.status_code == 400

    def test_custom_text(self, client, long_url):
        response = client.post("/api/generate-qr", data={
            "url": long_url,
            "useCustomPattern": "true",
            "customText": "!@#$%^&*()",
        })
        body = response.get_json()
        assert response.status_code == 200
        assert body["isReadable"] is False
        assert "!@#$%^&*()" in body["warning"]

    def test_custom_text_ignored_without_flag(self, client):
        response = client.post("/api/generate-qr", data={
            "url": "https://example.com",
            "customText": "!@#$%^&*()",
        })
        assert response.get_json()["warning"] is None

    def test_text_too_long(self, client):
        response = client.post("/api/generate-qr", data={
            "url": "https://example.com",
            "mode": "text",
            "customText": "a" * 11,
        })
        assert response.status_code == 400

    def test_image_upload(self, client, red_png):
        response = client.post(
            "/api/generate-qr",
            data={
                "url": "https://example.com",
                "useCustomPattern": "true",
                "customImage": (BytesIO(red_png), "red.png", "image/png"),
            },
            content_type="multipart/form-data",
        )
        assert response.status_code == 200
        assert response.get_json()["success"] is True

    def test_rejects_non_image_upload(self, client):
        response = client.post(
            "/api/generate-qr",
            data={
                "url": "https://example.com",
                "useCustomPattern": "true",
                "customImage": (BytesIO(b"hello"), "notes.txt", "text/plain"),
            },
            content_type="multipart/form-data",
        )
        assert response.status_code == 400

    def test_upload_too_large(self):
        client = create_app(Settings(max_upload_bytes=1024)).test_client()
        response = client.post(
            "/api/generate-qr",
            data={
                "url": "https://example.com",
                "customImage": (BytesIO(b"\0" * 200 * 1024), "big.png", "image/png"),
            },
            content_type="multipart/form-data",
        )
        assert response.status_code == 413
        assert "File too large" in response.get_json()["error"]

    def test_url_too_long(self, client):
        response = client.post("/api/generate-qr",
                               data={"url": "https://example.com/" + "a" * 5000})
        assert response.status_code == 400

    def test_url_too_large_for_target_size(self, long_url):
        client = create_app(Settings(target_size=21)).test_client()
        response = client.post("/api/generate-qr", data={"url": long_url})
        assert response.status_code == 400
        assert "too large" in response.get_json()["error"]


class TestExportSvg:
    def test_svg_download(self, client):
        response = client.get("/api/export.svg?url=https://example.com&mode=text&customText=Hi")
        assert response.status_code == 200
        assert response.mimetype == "image/svg+xml"
        assert b"<text" in response.data
