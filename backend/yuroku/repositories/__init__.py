"""Repository package exposing persistence-layer access for all domain models."""

from __future__ import annotations

from yuroku.repositories.base import (
    BaseRepository,
    Page,
    Pagination,
    paginate_select,
)
from yuroku.repositories.image import ImageRepository
from yuroku.repositories.log_entry import LogEntryRepository, LogFilter
from yuroku.repositories.user import UserRepository

__all__ = [
    # Base
    "BaseRepository",
    "Page",
    "Pagination",
    "paginate_select",
    # Domain
    "ImageRepository",
    "LogEntryRepository",
    "LogFilter",
    "UserRepository",
]
