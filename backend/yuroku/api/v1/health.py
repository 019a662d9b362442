"""Health check endpoint."""

from __future__ import annotations

from flask import Blueprint, current_app, g
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from yuroku.api.deps import json_response, optional_auth, timing
from yuroku.core.extensions import db

bp = Blueprint("health", __name__)


@bp.get("/health")
@optional_auth
@timing
def healthcheck():
    """Return application and database health information."""

    db_status = "ok"
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("healthcheck.db_error")
        db_status = "fail"
    version = current_app.config.get("APP_VERSION", "dev")
    commit = current_app.config.get("APP_COMMIT", "unknown")
    payload = {
        "status": "ok",
        "db": db_status,
        "version": version,
        "commit": commit,
        "authenticated": g.get("subject_id") is not None,
    }
    return json_response(payload)
