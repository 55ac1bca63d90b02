"""Tests for the Cloudinary adapter with the SDK's uploader calls faked out."""

from __future__ import annotations

import cloudinary.uploader
import pytest
from cloudinary.exceptions import Error as CloudinaryError
from tests.helpers.utils import staged_file
from vidtube.core.config import MediaSettings
from vidtube.infra.media.cloudinary_store import CloudinaryMediaStore, parse_asset_url
from vidtube.services._shared.ports import MediaStoreError

SETTINGS = MediaSettings(
    cloud_name="demo", api_key="key", api_secret="shh", folder="vidtube", timeout=5.0
)
ASSET = "https://res.cloudinary.com/demo/image/upload/v1712/avatars/a1.png"
HOSTED = "https://res.cloudinary.com/demo/image/upload/v1/vidtube/x.png"


class FakeUploader:
    """Record uploader calls and answer with canned bodies or errors."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, tuple, dict]] = []
        self.upload_body: dict | None = {"secure_url": HOSTED}
        self.destroy_body: dict | None = {"result": "ok"}
        self.error: Exception | None = None

    def upload(self, file, **options):
        self.calls.append(("upload", (file,), options))
        if self.error is not None:
            raise self.error
        return self.upload_body

    def destroy(self, public_id, **options):
        self.calls.append(("destroy", (public_id,), options))
        if self.error is not None:
            raise self.error
        return self.destroy_body


@pytest.fixture()
def uploader(monkeypatch) -> FakeUploader:
    fake = FakeUploader()
    monkeypatch.setattr(cloudinary.uploader, "upload", fake.upload)
    monkeypatch.setattr(cloudinary.uploader, "destroy", fake.destroy)
    return fake


@pytest.fixture()
def store() -> CloudinaryMediaStore:
    return CloudinaryMediaStore(SETTINGS)


@pytest.mark.parametrize(
    "url,expected",
    [
        (ASSET, ("image", "avatars/a1")),
        ("https://res.cloudinary.com/demo/image/upload/a1.jpg", ("image", "a1")),
        ("https://res.cloudinary.com/demo/video/upload/v3/clip", ("video", "clip")),
    ],
)
def test_parse_asset_url(url, expected):
    assert parse_asset_url(url) == expected


@pytest.mark.parametrize(
    "url", ["https://example.com/a.png", "https://res.cloudinary.com/demo/image/upload/"]
)
def test_parse_asset_url_rejects_foreign_urls(url):
    with pytest.raises(MediaStoreError):
        parse_asset_url(url)


class TestUpload:
    def test_returns_secure_url_and_passes_options(self, store, uploader, tmp_path):
        path = staged_file(tmp_path)
        assert store.upload(path) == HOSTED

        name, args, options = uploader.calls[0]
        assert name == "upload"
        assert args == (str(path),)
        assert options["resource_type"] == "auto"
        assert options["folder"] == "vidtube"
        assert options["timeout"] == 5.0
        assert (options["cloud_name"], options["api_key"], options["api_secret"]) == (
            "demo",
            "key",
            "shh",
        )

    def test_falls_back_to_plain_url(self, store, uploader, tmp_path):
        uploader.upload_body = {"url": "http://res.cloudinary.com/demo/image/upload/x.png"}
        assert store.upload(staged_file(tmp_path)).startswith("http://")

    def test_folder_omitted_when_unset(self, uploader, tmp_path):
        store = CloudinaryMediaStore(MediaSettings(cloud_name="demo", api_key="k", api_secret="s"))
        store.upload(staged_file(tmp_path))
        assert "folder" not in uploader.calls[0][2]

    def test_sdk_error_becomes_media_error(self, store, uploader, tmp_path):
        uploader.error = CloudinaryError("Server returned unexpected status code - 500")
        with pytest.raises(MediaStoreError, match="upload failed"):
            store.upload(staged_file(tmp_path))

    def test_response_without_url(self, store, uploader, tmp_path):
        uploader.upload_body = {}
        with pytest.raises(MediaStoreError, match="no URL"):
            store.upload(staged_file(tmp_path))


class TestDelete:
    @pytest.mark.parametrize("result", ["ok", "not found"])
    def test_success(self, store, uploader, result):
        uploader.destroy_body = {"result": result}
        store.delete(ASSET)

        name, args, options = uploader.calls[0]
        assert name == "destroy"
        assert args == ("avatars/a1",)
        assert options["resource_type"] == "image"
        assert options["api_key"] == "key"

    def test_failed_result(self, store, uploader):
        uploader.destroy_body = {"result": "error"}
        with pytest.raises(MediaStoreError, match="avatars/a1"):
            store.delete(ASSET)

    def test_sdk_error_becomes_media_error(self, store, uploader):
        uploader.error = CloudinaryError("Resource not allowed")
        with pytest.raises(MediaStoreError):
            store.delete(ASSET)

    def test_foreign_url_never_reaches_the_sdk(self, store, uploader):
        with pytest.raises(MediaStoreError):
            store.delete("https://example.com/a.png")
        assert uploader.calls == []


def test_unconfigured_store_fails_without_calling_out(uploader, tmp_path):
    store = CloudinaryMediaStore(MediaSettings(cloud_name="", api_key="", api_secret=""))
    with pytest.raises(MediaStoreError, match="not configured"):
        store.upload(staged_file(tmp_path))
    with pytest.raises(MediaStoreError, match="not configured"):
        store.delete(ASSET)
    assert uploader.calls == []
