"""Persistence for :class:`Image` rows (metadata only)."""

from __future__ import annotations

from sqlalchemy import delete, func, select

from yuroku.models.image import Image
from yuroku.repositories.base import BaseRepository


class ImageRepository(BaseRepository[Image]):
    """Repository for images attached to log entries."""

    model = Image

    def list_for_log(self, log_entry_id: int) -> list[Image]:
        stmt = select(Image).where(Image.log_entry_id == log_entry_id).order_by(Image.id.asc())
        return list(self.session.execute(stmt).scalars().all())

    def count_for_log(self, log_entry_id: int) -> int:
        stmt = select(func.count()).select_from(Image).where(Image.log_entry_id == log_entry_id)
        return int(self.session.execute(stmt).scalar_one())

    def urls_for_owner(self, owner_id: int) -> list[str]:
        stmt = select(Image.image_url).where(Image.user_id == owner_id)
        return list(self.session.execute(stmt).scalars().all())

    def delete_all_by_owner(self, owner_id: int) -> int:
        result = self.session.execute(delete(Image).where(Image.user_id == owner_id))
        return int(result.rowcount or 0)
