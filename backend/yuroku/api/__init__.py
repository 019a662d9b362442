"""Mount the versioned onsen log API on the application.

Each version package exposes ``API_VERSION`` and a ``REGISTRY`` of
``(blueprint, relative_prefix)`` pairs; this module turns them into URL
prefixes such as ``/api/v1/onsen_logs``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from flask import Blueprint, Flask

log = logging.getLogger(__name__)


def join_prefix(*segments: str) -> str:
    """Join URL segments into one rooted prefix.

    Blank segments are dropped and duplicate slashes collapse, so
    ``join_prefix("/api/", "v1", "")`` is ``"/api/v1"``.
    """
    parts = [s.strip("/") for s in segments if s and s.strip("/")]
    return "/" + "/".join(parts)


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> list[str]:
    """Register every ``(blueprint, relative_prefix)`` under ``base_prefix``.

    :returns: Mounted prefixes, in registration order.
    """
    mounted: list[str] = []
    for bp, rel_prefix in entries:
        prefix = join_prefix(base_prefix, rel_prefix)
        app.register_blueprint(bp, url_prefix=prefix)
        mounted.append(prefix)
    return mounted


def init_app(app: Flask) -> None:
    """Mount API v1 (health, auth, onsen_logs) under ``API_BASE_PREFIX``."""
    from yuroku.api.v1 import API_VERSION, REGISTRY

    base = join_prefix(app.config.get("API_BASE_PREFIX", "/api"), API_VERSION)
    mounted = register_blueprint_group(app, base_prefix=base, entries=REGISTRY)
    log.debug("api.mounted prefixes=%s", ",".join(mounted))


__all__ = ["init_app", "join_prefix", "register_blueprint_group"]
