"""
Tests for the structured and console log formats.
"""

import json
import logging
import sys

import pytest

from storefront.logging_config import ConsoleFormatter, StructuredFormatter, configure_logging


def make_record(message="Route overridden", **extra):
    record = logging.LogRecord("storefront.routing", logging.INFO, __file__, 1, message, (), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    def test_context_keys_lifted(self):
        record = make_record(module="checkout", route="POST /api/checkout", unrelated="x")

        data = json.loads(StructuredFormatter().format(record))

        assert data["message"] == "Route overridden"
        assert data["level"] == "INFO"
        assert data["module"] == "checkout"
        assert data["route"] == "POST /api/checkout"
        assert "unrelated" not in data

    def test_exception_included(self):
        try:
            raise RuntimeError("boom")
        except RuntimeError:
            record = logging.LogRecord("x", logging.ERROR, __file__, 1, "failed", (), sys.exc_info())

        data = json.loads(StructuredFormatter().format(record))

        assert "RuntimeError: boom" in data["exception"]


class TestConsoleFormatter:
    def test_appends_context(self):
        line = ConsoleFormatter().format(make_record(extension_point="cartFields", phase="open"))

        assert line.endswith("Route overridden [extension_point=cartFields phase=open]")

    def test_plain_without_context(self):
        assert ConsoleFormatter().format(make_record()).endswith("Route overridden")


@pytest.fixture
def restore_root():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def test_configure_logging(restore_root):
    configure_logging("debug", json_format=True)

    assert restore_root.level == logging.DEBUG
    assert len(restore_root.handlers) == 1
    assert isinstance(restore_root.handlers[0].formatter, StructuredFormatter)
    assert logging.getLogger("uvicorn.access").level == logging.WARNING
