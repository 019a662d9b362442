"""Photos attached to a log entry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from yuroku.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .log_entry import LogEntry


class Image(PKMixin, TimestampMixin, ReprMixin, db.Model):
    """
    Image metadata; the blob itself lives in the image storage.

    ``user_id`` duplicates the parent's owner so ownership checks need no join.
    """

    __tablename__ = "images"

    log_entry_id: Mapped[int] = mapped_column(
        ForeignKey("log_entries.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    image_url: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str | None] = mapped_column(String(500))

    __table_args__ = (
        Index("ix_images_log_entry", "log_entry_id"),
        Index("ix_images_user", "user_id"),
    )

    log_entry: Mapped[LogEntry] = relationship("LogEntry", back_populates="images")
