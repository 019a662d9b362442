# yuroku/services/logs/dto.py
from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class LogEntryCreateIn:
    """
    Input DTO for creating a log entry.

    :param name: Name of the onsen.
    :param visit_date: Calendar date of the visit.
    :param rating: Integer rating in ``[1, 5]``.
    :param location: Free-text location.
    :param spring_type: One of the known spring types.
    :param features: Known feature tags.
    :param comment: Free-text comment.
    """

    name: str
    visit_date: date
    rating: int
    location: str = ""
    spring_type: str = "unknown"
    features: Sequence[str] = field(default_factory=tuple)
    comment: str = ""


@dataclass(frozen=True, slots=True)
class LogEntryUpdateIn:
    """Partial update; ``None`` fields are left unchanged."""

    name: str | None = None
    location: str | None = None
    spring_type: str | None = None
    features: Sequence[str] | None = None
    visit_date: date | None = None
    rating: int | None = None
    comment: str | None = None

    def changes(self) -> dict[str, Any]:
        values = {
            "name": self.name,
            "location": self.location,
            "spring_type": self.spring_type,
            "features": list(self.features) if self.features is not None else None,
            "visit_date": self.visit_date,
            "rating": self.rating,
            "comment": self.comment,
        }
        return {k: v for k, v in values.items() if v is not None}


@dataclass(frozen=True, slots=True)
class ImageUploadIn:
    """
    Input DTO for an image upload.

    :param data: Raw file bytes.
    :param filename: Client-side filename (only its extension is kept).
    :param content_type: Declared MIME type.
    :param description: Optional caption.
    """

    data: bytes
    filename: str
    content_type: str
    description: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class ImageOut:
    id: int
    log_entry_id: int
    image_url: str
    description: str | None
    created_at: datetime


@dataclass(frozen=True, slots=True)
class LogEntryOut:
    """Owner-facing representation of a log entry with its images."""

    id: int
    user_id: int
    name: str
    location: str
    spring_type: str
    features: tuple[str, ...]
    visit_date: date
    rating: int
    comment: str
    created_at: datetime
    updated_at: datetime
    images: tuple[ImageOut, ...] = ()


@dataclass(frozen=True, slots=True)
class ExportOut:
    """
    Rendered export document.

    :param content: Serialized body.
    :param mimetype: Media type of ``content``.
    :param filename: Suggested download name.
    """

    content: str
    mimetype: str
    filename: str
