"""Marshmallow schemas for onsen log entries and their images."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, ValidationError, fields, validate, validates_schema

from yuroku.models.log_entry import FEATURES, MAX_RATING, MIN_RATING, SPRING_TYPES

from .common import CamelCaseAliasSchema

_LOG_ALIASES = {"visitDate": "visit_date", "springType": "spring_type"}


class LogEntryCreateSchema(CamelCaseAliasSchema):
    """Input payload for creating a log entry."""

    class Meta:
        unknown = EXCLUDE

    ALIASES = _LOG_ALIASES

    name = fields.String(required=True, validate=validate.Length(min=1, max=200))
    location = fields.String(load_default="", validate=validate.Length(max=200))
    spring_type = fields.String(load_default="unknown", validate=validate.OneOf(SPRING_TYPES))
    features = fields.List(fields.String(validate=validate.OneOf(FEATURES)), load_default=list)
    visit_date = fields.Date(required=True)
    rating = fields.Integer(
        required=True, strict=True, validate=validate.Range(min=MIN_RATING, max=MAX_RATING)
    )
    comment = fields.String(load_default="", validate=validate.Length(max=5000))


class LogEntryUpdateSchema(CamelCaseAliasSchema):
    """Partial update payload; absent keys are left unchanged."""

    class Meta:
        unknown = EXCLUDE

    ALIASES = _LOG_ALIASES

    name = fields.String(validate=validate.Length(min=1, max=200))
    location = fields.String(validate=validate.Length(max=200))
    spring_type = fields.String(validate=validate.OneOf(SPRING_TYPES))
    features = fields.List(fields.String(validate=validate.OneOf(FEATURES)))
    visit_date = fields.Date()
    rating = fields.Integer(strict=True, validate=validate.Range(min=MIN_RATING, max=MAX_RATING))
    comment = fields.String(validate=validate.Length(max=5000))


class LogFilterQuerySchema(CamelCaseAliasSchema):
    """Query-string filter for ``/onsen_logs/filter``.

    ``page`` and ``limit`` are left to the pagination normalizer.
    """

    class Meta:
        unknown = EXCLUDE

    ALIASES = {
        "springType": "spring_type",
        "minRating": "min_rating",
        "startDate": "start_date",
        "endDate": "end_date",
    }

    spring_type = fields.String(validate=validate.OneOf(SPRING_TYPES))
    location = fields.String()
    min_rating = fields.Integer(load_default=0, validate=validate.Range(min=0, max=MAX_RATING))
    start_date = fields.Date()
    end_date = fields.Date()

    @validates_schema
    def check_range(self, data: dict[str, Any], **_: Any) -> None:
        start, end = data.get("start_date"), data.get("end_date")
        if start and end and start > end:
            raise ValidationError("start_date must not be after end_date", "start_date")


class ImageSchema(Schema):
    id = fields.Integer()
    log_entry_id = fields.Integer()
    image_url = fields.String()
    description = fields.String(allow_none=True)
    created_at = fields.DateTime()


class ImageUploadFormSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    description = fields.String(load_default=None, validate=validate.Length(max=500))


class LogEntrySchema(Schema):
    """Output representation of a log entry."""

    id = fields.Integer()
    user_id = fields.Integer()
    name = fields.String()
    location = fields.String()
    spring_type = fields.String()
    features = fields.List(fields.String())
    visit_date = fields.Date()
    rating = fields.Integer()
    comment = fields.String()
    created_at = fields.DateTime()
    updated_at = fields.DateTime()
    images = fields.List(fields.Nested(ImageSchema))
