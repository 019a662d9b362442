"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from marshmallow import Schema, fields, pre_load


class CamelCaseAliasSchema(Schema):
    """Accept camelCase spellings of snake_case fields on input.

    Subclasses list the accepted spellings in ``ALIASES``; output always
    uses the snake_case field names.
    """

    ALIASES: Mapping[str, str] = {}

    @pre_load
    def map_aliases(self, data: Any, **_: Any) -> Any:
        if not isinstance(data, Mapping):
            return data
        out = dict(data)
        for alias, name in self.ALIASES.items():
            if alias in out:
                value = out.pop(alias)
                out.setdefault(name, value)
        return out


class MetaSchema(Schema):
    """Metadata block for paginated responses."""

    total = fields.Integer(required=True)
    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    has_prev = fields.Boolean(required=True)
    has_next = fields.Boolean(required=True)


_meta_schema = MetaSchema()


def build_meta(*, total: int, page: int, limit: int) -> dict[str, Any]:
    """Return a ``meta`` mapping for paginated responses."""

    return _meta_schema.dump(
        {
            "total": int(total),
            "page": int(page),
            "limit": int(limit),
            "has_prev": page > 1,
            "has_next": page * limit < total,
        }
    )
