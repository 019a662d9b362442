"""Global Flask extension instances and initialization helpers."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

import redis
from flask import Flask, current_app
from flask_limiter import Limiter
from flask_limiter.util import get_remote_address
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError
from sqlalchemy import MetaData

if TYPE_CHECKING:
    from yuroku.services._shared.ports import ImageStorage, TokenDenylistStore, TokenProvider

# Global naming convention for all constraints
convention = {
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=convention)

# Global singletons (import-safe)
db: SQLAlchemy = SQLAlchemy(session_options={"autoflush": False}, metadata=metadata)
migrate = Migrate(render_as_batch=True)
limiter = Limiter(key_func=get_remote_address)

TOKEN_PROVIDER_KEY = "yuroku.token_provider"
DENYLIST_KEY = "yuroku.denylist_store"
IMAGE_STORAGE_KEY = "yuroku.image_storage"


def init_app(app: Flask) -> None:
    """Initialize SQLAlchemy, migrations, rate limiting and auth/storage adapters.

    Parameters
    ----------
    app: flask.Flask
        Application used to bind extension instances. This call imports the
        :mod:`yuroku.models` package to ensure SQLAlchemy metadata is ready for
        migrations.

    Notes
    -----
    The JWT secret is read exactly once here and handed to the token
    provider; nothing else reads it from configuration afterwards.
    """
    db.init_app(app)

    # Ensure models are imported so Alembic sees metadata
    from yuroku import models as _models  # noqa: F401

    migrate.init_app(app, db)
    limiter.init_app(app)

    from yuroku.infra.jwt.jwt_token_provider import JWTTokenProvider
    from yuroku.infra.storage.local_file_storage import LocalFileStorage

    app.extensions[TOKEN_PROVIDER_KEY] = JWTTokenProvider(secret=app.config["JWT_SECRET_KEY"])
    app.extensions[IMAGE_STORAGE_KEY] = LocalFileStorage(
        base_dir=Path(app.config["UPLOAD_DIR"]),
        url_prefix=app.config.get("UPLOAD_URL_PREFIX", "/uploads"),
    )
    app.extensions[DENYLIST_KEY] = _build_denylist(app)


def _build_denylist(app: Flask) -> TokenDenylistStore:
    """Return a Redis denylist when ``REDIS_URL`` is set, else an in-memory one."""
    from yuroku.infra.redis.redis_denylist_store import RedisTokenDenylistStore
    from yuroku.services._shared.ports.denylist_store import InMemoryDenylistStore

    redis_url = app.config.get("REDIS_URL")
    if not redis_url:
        app.extensions.pop("redis_client", None)
        app.logger.info("REDIS_URL not set; using in-memory token denylist")
        return InMemoryDenylistStore()

    timeout = app.config.get("STORAGE_TIMEOUT_SECONDS", 5)
    redis_client = redis.Redis.from_url(
        redis_url, socket_timeout=timeout, socket_connect_timeout=timeout
    )
    try:
        redis_client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {redis_url!r}") from exc
    app.extensions["redis_client"] = redis_client
    return RedisTokenDenylistStore(redis_client)


def get_token_provider() -> TokenProvider:
    """Return the token provider bound to the current application."""
    return current_app.extensions[TOKEN_PROVIDER_KEY]


def get_denylist() -> TokenDenylistStore:
    """Return the token denylist bound to the current application."""
    return current_app.extensions[DENYLIST_KEY]


def get_image_storage() -> ImageStorage:
    """Return the image storage adapter bound to the current application."""
    return current_app.extensions[IMAGE_STORAGE_KEY]
