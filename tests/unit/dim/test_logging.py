"""
Unit tests for the log formatters.
"""

import json
import logging

from dim.core.logging import HumanReadableFormatter, StructuredFormatter, record_context


def make_record(**extra):
    record = logging.LogRecord(
        name="dim.runners.dispatcher",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="prompt %d failed",
        args=(2,),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestStructuredFormatter:
    """Tests for StructuredFormatter."""

    def test_includes_run_context(self):
        formatter = StructuredFormatter(include_timestamp=False)

        line = formatter.format(make_record(run_id="abc", prompt_index=2, attempt=3))

        assert json.loads(line) == {
            "level": "WARNING",
            "logger": "dim.runners.dispatcher",
            "message": "prompt 2 failed",
            "run_id": "abc",
            "prompt_index": 2,
            "attempt": 3,
        }

    def test_timestamp(self):
        data = json.loads(StructuredFormatter().format(make_record()))

        assert "timestamp" in data
        assert "run_id" not in data


class TestHumanReadableFormatter:
    """Tests for HumanReadableFormatter."""

    def test_appends_context(self):
        formatter = HumanReadableFormatter(include_timestamp=False)

        line = formatter.format(make_record(run_id="abc", prompt_index=0))

        assert line == "dim.runners.dispatcher - WARNING - prompt 2 failed [run_id=abc prompt_index=0]"

    def test_without_context(self):
        formatter = HumanReadableFormatter(include_timestamp=False)

        assert formatter.format(make_record()).endswith("prompt 2 failed")


class TestRecordContext:
    """Tests for record_context."""

    def test_only_set_fields_in_order(self):
        record = make_record(attempt=2, run_id="r1", model="minicpm-v")

        assert list(record_context(record).items()) == [
            ("run_id", "r1"), ("attempt", 2), ("model", "minicpm-v"),
        ]

    def test_field_subset(self):
        record = make_record(run_id="r1", model="minicpm-v")

        assert record_context(record, ("run_id",)) == {"run_id": "r1"}
