import cloudinary.exceptions
import cloudinary.uploader
import pytest

import media


@pytest.mark.parametrize("url, public_id", [
    ("https://res.cloudinary.com/demo/image/upload/v1712/pesantren/news/abc.jpg", "pesantren/news/abc"),
    ("https://res.cloudinary.com/demo/video/upload/v1/clip.mp4", "clip"),
    ("https://res.cloudinary.com/demo/image/upload/v1/a.b/c.webp", "a.b/c"),
])
def test_extract_public_id(url, public_id):
    assert media.extract_public_id(url) == public_id


@pytest.mark.parametrize("url", [None, "", "https://images.unsplash.com/photo.jpg",
                                 "https://res.cloudinary.com/demo/image/upload/v1"])
def test_extract_public_id_without_upload_segment(url):
    assert media.extract_public_id(url) is None


@pytest.fixture
def configured(monkeypatch):
    monkeypatch.setattr(media, "CLOUDINARY_CLOUD_NAME", "demo")
    monkeypatch.setattr(media, "CLOUDINARY_API_KEY", "key")
    monkeypatch.setattr(media, "CLOUDINARY_API_SECRET", "secret")


def test_upload_needs_configuration(client):
    response = client.post("/api/admin/upload", files={"file": ("a.png", b"png", "image/png")})
    assert response.status_code == 503


def test_upload_rejects_type(client, configured):
    response = client.post("/api/admin/upload", files={"file": ("a.txt", b"hello", "text/plain")})
    assert response.status_code == 400
    assert response.json()["error"] == "File type text/plain is not allowed"


def test_upload_rejects_large_files(client, configured, monkeypatch):
    monkeypatch.setattr(media, "MAX_UPLOAD_SIZE", 4)
    response = client.post("/api/admin/upload", files={"file": ("a.png", b"12345", "image/png")})
    assert response.status_code == 400


def test_upload_goes_through_sdk(client, configured, monkeypatch):
    calls = []

    def fake_upload(file, **options):
        calls.append((file, options))
        return {"secure_url": "https://res.cloudinary.com/demo/image/upload/v1/pesantren/news/a.png",
                "public_id": "pesantren/news/a", "format": "png", "bytes": 3}

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
    response = client.post("/api/admin/upload", params={"type": "news"},
                           files={"file": ("a.png", b"png", "image/png")})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["public_id"] == "pesantren/news/a"
    assert data["url"].startswith("https://res.cloudinary.com/")
    assert calls == [(b"png", {"folder": "pesantren/news", "tags": ["news", "admin-upload"], "resource_type": "auto"})]


def test_upload_failure_is_502(client, configured, monkeypatch):
    def failing_upload(file, **options):
        raise cloudinary.exceptions.GeneralError("unreachable")

    monkeypatch.setattr(cloudinary.uploader, "upload", failing_upload)
    response = client.post("/api/admin/upload", files={"file": ("a.png", b"png", "image/png")})
    assert response.status_code == 502
    assert response.json()["error"] == "Upload to media storage failed"


def test_delete_asset_is_best_effort(configured, monkeypatch):
    def failing_destroy(public_id, **options):
        raise cloudinary.exceptions.GeneralError("unreachable")

    monkeypatch.setattr(cloudinary.uploader, "destroy", failing_destroy)
    media.delete_asset("https://res.cloudinary.com/demo/image/upload/v1/pesantren/news/a.png")


def test_delete_asset_destroys_public_id(configured, monkeypatch):
    destroyed = []

    def fake_destroy(public_id, **options):
        destroyed.append((public_id, options))
        return {"result": "ok"}

    monkeypatch.setattr(cloudinary.uploader, "destroy", fake_destroy)
    media.delete_asset("https://res.cloudinary.com/demo/video/upload/v1/pesantren/gallery/clip.mp4", "video")
    media.delete_asset("https://images.unsplash.com/photo.jpg")
    assert destroyed == [("pesantren/gallery/clip", {"resource_type": "video"})]


def test_delete_asset_skipped_when_unconfigured(monkeypatch):
    def unexpected(*args, **kwargs):
        raise AssertionError("destroy should not be called")

    monkeypatch.setattr(cloudinary.uploader, "destroy", unexpected)
    media.delete_asset("https://res.cloudinary.com/demo/image/upload/v1/pesantren/news/a.png")
