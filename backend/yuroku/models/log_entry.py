"""Onsen visit log entries (the owner-scoped records)."""

from __future__ import annotations

from datetime import date
from typing import TYPE_CHECKING, Any

from sqlalchemy import (
    JSON,
    CheckConstraint,
    Date,
    Enum,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from yuroku.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .image import Image
    from .user import User

# --- Domain enumerations ---
SPRING_TYPES: tuple[str, ...] = (
    "sulfur",
    "carbonic",
    "alkaline",
    "acidic",
    "chloride",
    "iron",
    "radium",
    "simple",
    "other",
    "unknown",
)

FEATURES: tuple[str, ...] = (
    "outdoor_bath",
    "private_bath",
    "direct_from_spring",
    "sauna",
    "restaurant",
    "accommodation",
    "viewpoint",
    "historical",
)

MIN_RATING = 1
MAX_RATING = 5

SpringType = Enum(*SPRING_TYPES, name="spring_type", validate_strings=True)


class LogEntry(PKMixin, TimestampMixin, ReprMixin, db.Model):
    """
    A single onsen visit recorded by its owner.

    ``user_id`` is fixed at creation; ``rating`` is always within ``[1, 5]``.
    """

    __tablename__ = "log_entries"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    location: Mapped[str] = mapped_column(String(200), nullable=False, server_default="")
    spring_type: Mapped[str] = mapped_column(SpringType, nullable=False, server_default="unknown")
    features: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    visit_date: Mapped[date] = mapped_column(Date, nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    comment: Mapped[str] = mapped_column(Text, nullable=False, server_default="")

    __table_args__ = (
        CheckConstraint(
            f"rating >= {MIN_RATING} AND rating <= {MAX_RATING}", name="rating_range"
        ),
        Index("ix_log_entries_user_visit", "user_id", "visit_date"),
    )

    owner: Mapped[User] = relationship("User", back_populates="log_entries")
    images: Mapped[list[Image]] = relationship(
        "Image",
        back_populates="log_entry",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Image.id",
        lazy="selectin",
    )

    # -------------------- Validators --------------------
    @validates("user_id")
    def _freeze_owner(self, key: str, value: int) -> int:
        """Reject any attempt to move an entry to another owner."""
        current = self.user_id
        if current is not None and value != current:
            raise ValueError("Log entry owner cannot be changed.")
        return value

    @validates("rating")
    def _check_rating(self, key: str, value: Any) -> int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("Rating must be an integer.")
        if not MIN_RATING <= value <= MAX_RATING:
            raise ValueError(f"Rating must be between {MIN_RATING} and {MAX_RATING}.")
        return value

    @validates("spring_type")
    def _check_spring_type(self, key: str, value: str) -> str:
        if value not in SPRING_TYPES:
            raise ValueError(f"Unknown spring type: {value!r}")
        return value

    @validates("features")
    def _check_features(self, key: str, value: list[str] | None) -> list[str]:
        """Keep only known features, de-duplicated in first-seen order."""
        result: list[str] = []
        for feature in value or []:
            if feature not in FEATURES:
                raise ValueError(f"Unknown feature: {feature!r}")
            if feature not in result:
                result.append(feature)
        return result
