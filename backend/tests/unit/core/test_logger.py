from __future__ import annotations

import json
import logging

import pytest

from yuroku.core.logger import JSONFormatter, configure_logging


@pytest.fixture()
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging_sets_level_and_json_handler(restore_root_logger):
    configure_logging("debug")

    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, JSONFormatter)


def test_configure_logging_accepts_numeric_level(restore_root_logger):
    configure_logging(logging.ERROR)
    assert restore_root_logger.level == logging.ERROR


def test_json_formatter_renders_single_line_with_extras():
    record = logging.makeLogRecord(
        {
            "name": "yuroku.test",
            "levelname": "INFO",
            "levelno": logging.INFO,
            "msg": "logs.created %s",
            "args": ("ok",),
            "user_id": 7,
            "log_id": 42,
            "request_id": "req-1",
        }
    )

    line = JSONFormatter().format(record)

    assert "\n" not in line
    payload = json.loads(line)
    assert payload["message"] == "logs.created ok"
    assert payload["level"] == "INFO"
    assert payload["request_id"] == "req-1"
    assert (payload["user_id"], payload["log_id"]) == (7, 42)
    assert "image_id" not in payload


def test_request_id_is_echoed(client):
    resp = client.get("/api/v1/health", headers={"X-Request-ID": "abc-123"})
    assert resp.headers["X-Request-ID"] == "abc-123"


def test_request_id_is_generated_when_missing(client):
    resp = client.get("/api/v1/health")
    assert resp.headers.get("X-Request-ID")


def test_problem_body_carries_request_id(client):
    resp = client.get("/api/v1/nope", headers={"X-Correlation-ID": "corr-9"})

    assert resp.status_code == 404
    assert resp.mimetype == "application/problem+json"
    assert resp.get_json()["request_id"] == "corr-9"
