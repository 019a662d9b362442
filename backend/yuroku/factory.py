"""Application factory wiring Flask extensions and blueprints."""

from __future__ import annotations

from pathlib import Path

from flask import Flask, send_from_directory

from yuroku.core.config import PLACEHOLDER_SECRET, BaseConfig, get_config
from yuroku.core.logger import configure_logging, init_app as init_logging


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :raises RuntimeError: When a production app is started with the
        placeholder or an empty JWT secret.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    _check_secrets(app)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Proxy headers if running behind a reverse proxy (optional module)
    from yuroku.core import proxy

    proxy.init_app(app)

    from yuroku.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from yuroku.core import cors

    cors.init_app(app)

    from yuroku.api import init_app as init_api

    init_api(app)

    _register_uploads(app)

    from yuroku.core import errors

    errors.init_app(app)

    return app


def _check_secrets(app: Flask) -> None:
    secret = app.config.get("JWT_SECRET_KEY")
    if not secret:
        raise RuntimeError("JWT_SECRET_KEY must be configured")
    if secret == PLACEHOLDER_SECRET and not (app.debug or app.testing):
        raise RuntimeError("JWT_SECRET_KEY still holds the placeholder value; set a real secret")


def _register_uploads(app: Flask) -> None:
    """Serve stored images back under ``UPLOAD_URL_PREFIX``."""

    upload_dir = Path(app.config["UPLOAD_DIR"]).resolve()
    prefix = "/" + str(app.config.get("UPLOAD_URL_PREFIX", "/uploads")).strip("/")

    def serve_upload(filename: str):
        resp = send_from_directory(upload_dir, filename)
        resp.headers["X-Content-Type-Options"] = "nosniff"
        return resp

    app.add_url_rule(f"{prefix}/<path:filename>", endpoint="uploads", view_func=serve_upload)
