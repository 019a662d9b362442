"""Cross-origin policy for the API and the uploaded images."""

from __future__ import annotations

from flask import Flask
from flask_cors import CORS

# Response headers a browser client may read
EXPOSED_HEADERS = ["X-Request-ID", "Content-Disposition", "Retry-After"]


def parse_origins(raw: str | None) -> list[str] | None:
    """Split a comma-separated ``CORS_ORIGINS`` value.

    :returns: The explicit origins, or ``None`` when any origin is allowed
        (blank value or ``"*"``).
    """
    origins = [o.strip() for o in (raw or "").split(",") if o.strip()]
    if not origins or "*" in origins:
        return None
    return origins


def init_app(app: Flask) -> None:
    """Attach Flask-CORS to ``/api/*`` and the upload prefix.

    Credentials are only allowed with an explicit origin list; a wildcard
    policy never sends ``Access-Control-Allow-Credentials``.
    """
    origins = parse_origins(app.config.get("CORS_ORIGINS"))
    uploads = app.config.get("UPLOAD_URL_PREFIX", "/uploads").rstrip("/")
    policy = {"origins": origins if origins is not None else "*"}

    CORS(
        app,
        resources={r"/api/*": policy, rf"{uploads}/*": policy},
        supports_credentials=origins is not None,
        expose_headers=EXPOSED_HEADERS,
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
