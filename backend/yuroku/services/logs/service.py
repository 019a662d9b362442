# yuroku/services/logs/service.py
"""
LogService
==========

Owner-scoped use cases for log entries and their images:

- CRUD on entries, always gated by :meth:`BaseService.ensure_owner`.
- Listing and filtering through the repository query engine.
- JSON/CSV export.
- Image upload under a per-entry cap, listing and deletion.
"""

from __future__ import annotations

import csv
import io
import json
import logging
from typing import Any

from yuroku.models.image import Image
from yuroku.models.log_entry import LogEntry
from yuroku.repositories.base import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from yuroku.repositories.log_entry import LogEntryRepository, LogFilter
from yuroku.services._shared.base import BaseService
from yuroku.services._shared.dto import PageMeta, PageOut
from yuroku.services._shared.errors import (
    CapacityExceededError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from yuroku.services._shared.ports.image_storage import ImageStorage
from yuroku.services.logs.dto import (
    ExportOut,
    ImageOut,
    ImageUploadIn,
    LogEntryCreateIn,
    LogEntryOut,
    LogEntryUpdateIn,
)

log = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})
DEFAULT_MAX_IMAGES = 3
EXPORT_FORMATS = ("json", "csv")
CSV_HEADER = (
    "ID",
    "Name",
    "Location",
    "Spring Type",
    "Features",
    "Visit Date",
    "Rating",
    "Comment",
    "Created At",
    "Updated At",
)


# --------------------------------------------------------------------------- #
# Converters
# --------------------------------------------------------------------------- #


def _image_out(image: Image) -> ImageOut:
    return ImageOut(
        id=image.id,
        log_entry_id=image.log_entry_id,
        image_url=image.image_url,
        description=image.description,
        created_at=image.created_at,
    )


def _entry_out(entry: LogEntry) -> LogEntryOut:
    return LogEntryOut(
        id=entry.id,
        user_id=entry.user_id,
        name=entry.name,
        location=entry.location,
        spring_type=entry.spring_type,
        features=tuple(entry.features or ()),
        visit_date=entry.visit_date,
        rating=entry.rating,
        comment=entry.comment,
        created_at=entry.created_at,
        updated_at=entry.updated_at,
        images=tuple(_image_out(img) for img in entry.images),
    )


def _export_record(entry: LogEntryOut) -> dict[str, Any]:
    return {
        "id": entry.id,
        "name": entry.name,
        "location": entry.location,
        "spring_type": entry.spring_type,
        "features": list(entry.features),
        "visit_date": entry.visit_date.isoformat(),
        "rating": entry.rating,
        "comment": entry.comment,
        "created_at": entry.created_at.isoformat(),
        "updated_at": entry.updated_at.isoformat(),
    }


class LogService(BaseService):
    """
    Application service for the ``LogEntry`` aggregate and its images.

    Every operation takes the resolved token subject as ``owner_id``; no
    method accepts a client-supplied owner.
    """

    def __init__(
        self,
        *,
        image_storage: ImageStorage,
        max_images: int = DEFAULT_MAX_IMAGES,
        default_limit: int = DEFAULT_PAGE_SIZE,
        max_limit: int = MAX_PAGE_SIZE,
    ) -> None:
        self.storage = image_storage
        self.max_images = max_images
        self.default_limit = default_limit
        self.max_limit = max_limit

    # --------------------------------------------------------------------- #
    # Entries
    # --------------------------------------------------------------------- #

    def create_log(self, owner_id: int, dto: LogEntryCreateIn) -> LogEntryOut:
        """
        Create a log entry owned by ``owner_id``.

        :raises ValidationError: If a field violates a model rule.
        """
        with self.rw_uow() as uow:
            try:
                entry = LogEntry(
                    user_id=owner_id,
                    name=dto.name,
                    location=dto.location,
                    spring_type=dto.spring_type,
                    features=list(dto.features),
                    visit_date=dto.visit_date,
                    rating=dto.rating,
                    comment=dto.comment,
                )
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
            uow.log_entries.add(entry)
            out = _entry_out(entry)

        log.info("logs.created", extra={"user_id": owner_id, "log_id": out.id})
        return out

    def get_log(self, owner_id: int, log_id: int) -> LogEntryOut:
        """
        Fetch one entry.

        :raises NotFoundError: If it does not exist.
        :raises ForbiddenError: If another user owns it.
        """
        with self.ro_uow() as uow:
            entry = self.ensure_owner(
                owner_id, uow.log_entries.get(log_id), entity="LogEntry", key=log_id
            )
            return _entry_out(entry)

    def update_log(self, owner_id: int, log_id: int, dto: LogEntryUpdateIn) -> LogEntryOut:
        """Apply a partial update; the owner never changes."""
        with self.rw_uow() as uow:
            repo: LogEntryRepository = uow.log_entries
            entry = self.ensure_owner(owner_id, repo.get(log_id), entity="LogEntry", key=log_id)
            try:
                repo.update(entry, **dto.changes())
            except ValueError as exc:
                raise ValidationError(str(exc)) from exc
            out = _entry_out(entry)

        log.info("logs.updated", extra={"user_id": owner_id, "log_id": log_id})
        return out

    def delete_log(self, owner_id: int, log_id: int) -> None:
        """Delete an entry, its image rows and their stored files."""
        with self.rw_uow() as uow:
            repo: LogEntryRepository = uow.log_entries
            entry = self.ensure_owner(owner_id, repo.get(log_id), entity="LogEntry", key=log_id)
            urls = [img.image_url for img in entry.images]
            repo.delete(entry)  # ORM cascade removes the image rows

        self._purge_files(urls)
        log.info("logs.deleted", extra={"user_id": owner_id, "log_id": log_id})

    # --------------------------------------------------------------------- #
    # Queries
    # --------------------------------------------------------------------- #

    def list_logs(self, owner_id: int, *, page: Any = None, limit: Any = None) -> PageOut[LogEntryOut]:
        """List the owner's entries, most recent visit first."""
        return self.filter_logs(owner_id, None, page=page, limit=limit)

    def filter_logs(
        self,
        owner_id: int,
        criteria: LogFilter | None,
        *,
        page: Any = None,
        limit: Any = None,
    ) -> PageOut[LogEntryOut]:
        """
        Search the owner's entries.

        Pagination input is normalized silently; it never fails.

        :param owner_id: Resolved subject.
        :param criteria: Optional filter; ``None`` matches everything.
        :returns: One page of entries plus metadata.
        """
        if criteria is not None and criteria.start_date and criteria.end_date:
            if criteria.start_date > criteria.end_date:
                raise ValidationError("start_date must not be after end_date", field="start_date")

        pagination = self.ensure_pagination(
            page=page, limit=limit, default_limit=self.default_limit, max_limit=self.max_limit
        )
        with self.ro_uow() as uow:
            result = uow.log_entries.search(owner_id, criteria, pagination)
            items = [_entry_out(e) for e in result.items]
            meta = PageMeta(
                page=result.page,
                limit=result.limit,
                total=result.total,
                has_prev=result.has_prev,
                has_next=result.has_next,
            )
        return PageOut(items=items, meta=meta)

    def export_logs(self, owner_id: int, fmt: str) -> ExportOut:
        """
        Render every entry of the owner as JSON or CSV.

        :raises ValidationError: For an unsupported ``fmt``.
        """
        fmt = (fmt or "json").strip().lower()
        if fmt not in EXPORT_FORMATS:
            raise ValidationError(
                f"Unsupported export format {fmt!r}; use one of {', '.join(EXPORT_FORMATS)}",
                field="format",
            )

        with self.ro_uow() as uow:
            entries = [_entry_out(e) for e in uow.log_entries.list_all_for_owner(owner_id)]

        records = [_export_record(e) for e in entries]
        if fmt == "json":
            return ExportOut(
                content=json.dumps(records, ensure_ascii=False, indent=2),
                mimetype="application/json",
                filename="onsen_logs.json",
            )

        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(CSV_HEADER)
        for r in records:
            writer.writerow(
                [
                    r["id"],
                    r["name"],
                    r["location"],
                    r["spring_type"],
                    ", ".join(r["features"]),
                    r["visit_date"],
                    r["rating"],
                    r["comment"],
                    r["created_at"],
                    r["updated_at"],
                ]
            )
        return ExportOut(content=buf.getvalue(), mimetype="text/csv", filename="onsen_logs.csv")

    # --------------------------------------------------------------------- #
    # Images
    # --------------------------------------------------------------------- #

    def upload_image(self, owner_id: int, log_id: int, dto: ImageUploadIn) -> ImageOut:
        """
        Attach an image to an entry, at most ``max_images`` per entry.

        The parent row is locked (``SELECT ... FOR UPDATE``) for the whole
        count-then-insert so concurrent uploads are serialized per entry.
        A stored file whose row fails to commit is removed again.

        :raises ValidationError: For empty data or an unsupported content type.
        :raises CapacityExceededError: If the entry already holds ``max_images``.
        :raises StorageError: If the file cannot be stored.
        """
        if not dto.data:
            raise ValidationError("Image file is empty", field="image")
        if dto.content_type not in ALLOWED_IMAGE_TYPES:
            raise ValidationError(
                f"Unsupported image type {dto.content_type!r}", field="image"
            )

        url: str | None = None
        try:
            with self.rw_uow() as uow:
                entry = self.ensure_owner(
                    owner_id,
                    uow.log_entries.get_for_update(log_id),
                    entity="LogEntry",
                    key=log_id,
                )
                if uow.images.count_for_log(entry.id) >= self.max_images:
                    raise CapacityExceededError("Image", self.max_images)

                url = self.storage.upload(dto.data, dto.filename, dto.content_type)
                image = uow.images.add(
                    Image(
                        log_entry_id=entry.id,
                        user_id=entry.user_id,
                        image_url=url,
                        description=dto.description,
                    )
                )
                out = _image_out(image)
        except Exception:
            if url is not None:
                self._purge_files([url])
            raise

        log.info(
            "logs.image_uploaded",
            extra={"user_id": owner_id, "log_id": log_id, "image_id": out.id},
        )
        return out

    def list_images(self, owner_id: int, log_id: int) -> list[ImageOut]:
        with self.ro_uow() as uow:
            entry = self.ensure_owner(
                owner_id, uow.log_entries.get(log_id), entity="LogEntry", key=log_id
            )
            return [_image_out(img) for img in uow.images.list_for_log(entry.id)]

    def delete_image(self, owner_id: int, log_id: int, image_id: int) -> None:
        """
        Remove one image row and its file.

        :raises NotFoundError: If the image does not belong to ``log_id``.
        """
        with self.rw_uow() as uow:
            self.ensure_owner(owner_id, uow.log_entries.get(log_id), entity="LogEntry", key=log_id)
            image = uow.images.get(image_id)
            if image is None or image.log_entry_id != log_id:
                raise NotFoundError("Image", image_id)
            self.ensure_owner(owner_id, image, entity="Image", key=image_id)
            url = image.image_url
            uow.images.delete(image)

        self._purge_files([url])
        log.info(
            "logs.image_deleted",
            extra={"user_id": owner_id, "log_id": log_id, "image_id": image_id},
        )

    # --------------------------------------------------------------------- #
    # Internals
    # --------------------------------------------------------------------- #

    def _purge_files(self, urls: list[str]) -> None:
        for url in urls:
            try:
                self.storage.delete(url)
            except StorageError:
                log.warning("storage.orphaned url=%s", url, exc_info=True)
