"""Tests for structured logging."""

import json
import logging

from nutrition_insights.logging_config import (
    JsonFormatter,
    StructuredLogger,
    TextFormatter,
    generation_context,
    generation_id_ctx,
    setup_logging,
)


def _record(
    msg: str = "Model narrative generated",
    level: int = logging.INFO,
    **extra_fields,
) -> logging.LogRecord:
    record = logging.LogRecord(
        name="nutrition_insights.services.daily_insights",
        level=level,
        pathname="/srv/daily_insights.py",
        lineno=120,
        msg=msg,
        args=(),
        exc_info=None,
    )
    if extra_fields:
        record.extra_fields = extra_fields
    return record


class TestGenerationContext:
    """Tests for the per-narrative generation ID."""

    def test_id_is_bound_then_reset(self):
        with generation_context("protein_status") as generation_id:
            assert generation_id.startswith("protein_status-")
            assert generation_id_ctx.get() == generation_id

        assert generation_id_ctx.get() is None

    def test_ids_are_unique(self):
        with generation_context("fiber_check") as first:
            pass
        with generation_context("fiber_check") as second:
            pass

        assert first != second


class TestJsonFormatter:
    """Tests for JSON log lines."""

    def test_fields(self):
        parsed = json.loads(
            JsonFormatter(service_name="insights-test").format(
                _record(question_id="protein_status")
            )
        )

        assert parsed["level"] == "INFO"
        assert parsed["service"] == "insights-test"
        assert parsed["message"] == "Model narrative generated"
        assert parsed["question_id"] == "protein_status"
        assert "generation_id" not in parsed
        assert "location" not in parsed

    def test_generation_id_is_included(self):
        with generation_context("meal_timing") as generation_id:
            parsed = json.loads(JsonFormatter().format(_record()))

        assert parsed["generation_id"] == generation_id

    def test_errors_carry_location(self):
        parsed = json.loads(
            JsonFormatter().format(_record("Model download failed", logging.ERROR))
        )

        assert parsed["location"]["file"] == "/srv/daily_insights.py"
        assert parsed["location"]["line"] == 120

    def test_non_json_values_are_stringified(self):
        parsed = json.loads(JsonFormatter().format(_record(path=object())))

        assert parsed["path"].startswith("<object object")


class TestTextFormatter:
    """Tests for development log lines."""

    def test_line_layout(self):
        line = TextFormatter(service_name="insights-test").format(
            _record(question_id="protein_status", cached=False)
        )

        assert " - insights-test - INFO - [-] - Model narrative generated" in line
        assert line.endswith("question_id=protein_status cached=False")

    def test_generation_id_in_brackets(self):
        with generation_context("hydration_status") as generation_id:
            line = TextFormatter().format(_record())

        assert f"[{generation_id}]" in line


class TestSetup:
    """Tests for logger setup."""

    def test_json_handler_installed(self):
        setup_logging(log_format="json", log_level="DEBUG")

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JsonFormatter)

    def test_text_handler_installed(self):
        setup_logging(log_format="text", log_level="WARNING")

        assert isinstance(logging.getLogger().handlers[0].formatter, TextFormatter)

    def test_structured_logger_passes_extra_fields(self, caplog):
        logger = StructuredLogger("nutrition_insights.test")

        with caplog.at_level(logging.INFO, logger="nutrition_insights.test"):
            logger.info("State document saved", key="daily_insights")

        assert caplog.records[-1].extra_fields == {"key": "daily_insights"}
