"""Tests for the filesystem image storage adapter."""

from __future__ import annotations

import pytest

from yuroku.infra.storage.local_file_storage import LocalFileStorage
from yuroku.services._shared.errors import StorageError


@pytest.fixture()
def storage(tmp_path):
    return LocalFileStorage(tmp_path / "images", url_prefix="/uploads/")


def test_upload_writes_file_and_returns_public_url(storage, tmp_path):
    url = storage.upload(b"\x89PNG data", "holiday.PNG", "image/png")

    assert url.startswith("/uploads/")
    assert url.endswith(".png")
    stored = tmp_path / "images" / url.rsplit("/", 1)[1]
    assert stored.read_bytes() == b"\x89PNG data"


@pytest.mark.parametrize(
    ("filename", "content_type", "suffix"),
    [
        ("blob", "image/png", ".png"),
        ("x.html", "image/png", ".png"),
        ("photo.jpeg", "image/jpeg", ".jpg"),
        ("a.svg", "image/webp", ".webp"),
        ("anim.gif", "IMAGE/GIF", ".gif"),
        ("page.html", "text/html", ".bin"),
    ],
)
def test_extension_comes_from_content_type(storage, filename, content_type, suffix):
    url = storage.upload(b"data", filename, content_type)
    assert url.endswith(suffix)


def test_each_upload_gets_a_distinct_name(storage):
    assert storage.upload(b"a", "a.jpg", "image/jpeg") != storage.upload(b"a", "a.jpg", "image/jpeg")


def test_delete_removes_file_and_ignores_missing(storage, tmp_path):
    url = storage.upload(b"data", "x.gif", "image/gif")
    name = url.rsplit("/", 1)[1]

    storage.delete(url)
    assert not (tmp_path / "images" / name).exists()

    storage.delete(url)  # second time is a no-op


def test_delete_only_uses_the_basename(storage, tmp_path):
    outside = tmp_path / "secret.txt"
    outside.write_text("keep me")

    storage.delete("/uploads/../secret.txt")

    assert outside.exists()


def test_unwritable_directory_raises_storage_error(tmp_path):
    blocker = tmp_path / "file"
    blocker.write_text("not a directory")
    storage = LocalFileStorage(blocker / "images")

    with pytest.raises(StorageError):
        storage.upload(b"data", "a.jpg", "image/jpeg")
