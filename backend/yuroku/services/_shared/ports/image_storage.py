from __future__ import annotations

from typing import Protocol


class ImageStorage(Protocol):
    """
    Minimal contract for storing image blobs.

    Both operations raise :class:`~yuroku.services._shared.errors.StorageError`
    when the backend fails.
    """

    def upload(self, data: bytes, filename: str, content_type: str) -> str:
        """Persist ``data`` and return the public URL of the stored object."""
        ...

    def delete(self, url: str) -> None:
        """Remove the object behind ``url``; missing objects are ignored."""
        ...
