"""Filesystem-backed image storage."""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from uuid import uuid4

from yuroku.services._shared.errors import StorageError
from yuroku.services._shared.ports.image_storage import ImageStorage

log = logging.getLogger(__name__)

# Stored extension per accepted content type; the client filename is ignored
IMAGE_EXTENSIONS = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
}


class LocalFileStorage(ImageStorage):
    """
    Store uploaded images under ``base_dir`` with random file names.

    :param base_dir: Directory receiving the files (created on first upload).
    :param url_prefix: Public path under which ``base_dir`` is served.
    """

    def __init__(self, base_dir: Path, url_prefix: str = "/uploads") -> None:
        self.base_dir = Path(base_dir)
        self.url_prefix = "/" + url_prefix.strip("/")

    def upload(self, data: bytes, filename: str, content_type: str) -> str:
        ext = IMAGE_EXTENSIONS.get(content_type.split(";")[0].strip().lower(), ".bin")
        name = f"{uuid4().hex}{ext}"
        try:
            self.base_dir.mkdir(parents=True, exist_ok=True)
            (self.base_dir / name).write_bytes(data)
        except OSError as exc:
            raise StorageError("Failed to store image") from exc
        log.info("storage.uploaded name=%s bytes=%d", name, len(data))
        return f"{self.url_prefix}/{name}"

    def delete(self, url: str) -> None:
        # basename only; never follow path components from the URL
        name = PurePosixPath(url).name
        if not name:
            return
        try:
            (self.base_dir / name).unlink(missing_ok=True)
        except OSError as exc:
            raise StorageError("Failed to delete image") from exc
        log.info("storage.deleted name=%s", name)

