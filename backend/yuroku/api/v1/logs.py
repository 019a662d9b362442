"""Onsen log and image endpoints (all owner-scoped)."""

from __future__ import annotations

from dataclasses import asdict

from flask import Blueprint, Response, request

from yuroku.api.deps import current_subject, json_response, log_service, require_auth, timing
from yuroku.core.errors import UnprocessableEntity
from yuroku.repositories.log_entry import LogFilter
from yuroku.schemas import (
    ImageSchema,
    ImageUploadFormSchema,
    LogEntryCreateSchema,
    LogEntrySchema,
    LogEntryUpdateSchema,
    LogFilterQuerySchema,
    build_meta,
)
from yuroku.services._shared.dto import PageOut
from yuroku.services.logs.dto import ImageUploadIn, LogEntryCreateIn, LogEntryUpdateIn

bp = Blueprint("onsen_logs", __name__)

create_schema = LogEntryCreateSchema()
update_schema = LogEntryUpdateSchema()
filter_schema = LogFilterQuerySchema()
upload_form_schema = ImageUploadFormSchema()
entry_schema = LogEntrySchema()
entries_schema = LogEntrySchema(many=True)
image_schema = ImageSchema()
images_schema = ImageSchema(many=True)


def _page_response(result: PageOut) -> Response:
    meta = result.meta
    body = {
        "data": entries_schema.dump([asdict(item) for item in result.items]),
        "meta": build_meta(total=meta.total, page=meta.page, limit=meta.limit),
    }
    return json_response(body)


# --------------------------------------------------------------------------- #
# Entries
# --------------------------------------------------------------------------- #


@bp.post("")
@require_auth
@timing
def create_log():
    """Create a log entry owned by the caller."""

    data = create_schema.load(request.get_json(silent=True) or {})
    entry = log_service().create_log(current_subject(), LogEntryCreateIn(**data))
    return json_response({"data": entry_schema.dump(asdict(entry))}, status=201)


@bp.get("")
@require_auth
@timing
def list_logs():
    """List the caller's entries, most recent visit first."""

    result = log_service().list_logs(
        current_subject(), page=request.args.get("page"), limit=request.args.get("limit")
    )
    return _page_response(result)


@bp.get("/filter")
@require_auth
@timing
def filter_logs():
    """Filter by spring type, location, minimum rating and visit date range."""

    data = filter_schema.load(request.args.to_dict())
    result = log_service().filter_logs(
        current_subject(),
        LogFilter(**data),
        page=request.args.get("page"),
        limit=request.args.get("limit"),
    )
    return _page_response(result)


@bp.get("/export")
@require_auth
@timing
def export_logs():
    """Download every entry as ``json`` (default) or ``csv``."""

    export = log_service().export_logs(current_subject(), request.args.get("format", "json"))
    response = Response(export.content, mimetype=export.mimetype)
    response.headers["Content-Disposition"] = f'attachment; filename="{export.filename}"'
    return response


@bp.get("/<int:log_id>")
@require_auth
@timing
def get_log(log_id: int):
    entry = log_service().get_log(current_subject(), log_id)
    return json_response({"data": entry_schema.dump(asdict(entry))})


@bp.put("/<int:log_id>")
@require_auth
@timing
def update_log(log_id: int):
    """Partially update an entry; omitted fields are kept."""

    data = update_schema.load(request.get_json(silent=True) or {})
    entry = log_service().update_log(current_subject(), log_id, LogEntryUpdateIn(**data))
    return json_response({"data": entry_schema.dump(asdict(entry))})


@bp.delete("/<int:log_id>")
@require_auth
@timing
def delete_log(log_id: int):
    """Delete an entry together with its images."""

    log_service().delete_log(current_subject(), log_id)
    return "", 204


# --------------------------------------------------------------------------- #
# Images
# --------------------------------------------------------------------------- #


@bp.post("/<int:log_id>/images")
@require_auth
@timing
def upload_image(log_id: int):
    """Attach an image (multipart field ``image``) to an entry."""

    upload = request.files.get("image")
    if upload is None or not upload.filename:
        raise UnprocessableEntity("Image file is required", details={"field": "image"})
    form = upload_form_schema.load(request.form.to_dict())
    image = log_service().upload_image(
        current_subject(),
        log_id,
        ImageUploadIn(
            data=upload.read(),
            filename=upload.filename,
            content_type=upload.mimetype or "",
            description=form.get("description"),
        ),
    )
    return json_response({"data": image_schema.dump(asdict(image))}, status=201)


@bp.get("/<int:log_id>/images")
@require_auth
@timing
def list_images(log_id: int):
    images = log_service().list_images(current_subject(), log_id)
    return json_response({"data": images_schema.dump([asdict(i) for i in images])})


@bp.delete("/<int:log_id>/images/<int:image_id>")
@require_auth
@timing
def delete_image(log_id: int, image_id: int):
    log_service().delete_image(current_subject(), log_id, image_id)
    return "", 204
