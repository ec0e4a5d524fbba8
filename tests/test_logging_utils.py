"""Tests for logging_utils module."""

from __future__ import annotations

import logging

import pytest
from loguru import logger

from taskboard.logging_utils import configure_logging, pretty


class TestPretty:
    """Test pretty function."""

    def test_simple_dict(self):
        result = pretty({"key": "value", "number": 42})

        assert '"key": "value"' in result
        assert '"number": 42' in result

    def test_task_snapshot_list(self):
        result = pretty([{"id": 1, "status": "todo"}], indent=4)

        assert result.startswith("[")
        assert '    {' in result

    def test_non_json_values_fall_back_to_str(self):
        """Objects json cannot encode are rendered with str()."""
        result = pretty({"level": logging.INFO, "obj": object()})

        assert '"level": 20' in result
        assert "object object at" in result

    def test_unserializable_top_level(self):
        circular: list = []
        circular.append(circular)

        assert pretty(circular) == str(circular)


class TestConfigureLogging:
    def test_level_filters_loguru_messages(self, capsys: pytest.CaptureFixture[str]) -> None:
        configure_logging("warning")
        logger.info("hidden message")
        logger.warning("visible message")

        err = capsys.readouterr().err
        assert "visible message" in err
        assert "hidden message" not in err
        configure_logging("INFO")

    def test_aligns_stdlib_level_when_root_has_handlers(self) -> None:
        root = logging.getLogger()
        previous = root.level
        handler = logging.NullHandler()
        root.addHandler(handler)
        try:
            configure_logging("DEBUG")
            assert root.level == logging.DEBUG
            configure_logging("ERROR")
            assert root.level == logging.ERROR
        finally:
            root.removeHandler(handler)
            configure_logging("INFO")
            root.setLevel(previous)
