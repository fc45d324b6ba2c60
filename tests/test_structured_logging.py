"""
Tests for core/structured_logging.py - correlation ids and redaction.
"""

import json
import logging
import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from core.structured_logging import (
    REDACTED,
    JSONFormatter,
    TextFormatter,
    get_run_id,
    grading_run,
)


def make_record(message="Pick graded", **extra):
    record = logging.LogRecord("grading_orchestrator", logging.INFO, __file__, 10, message, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestGradingRun:

    def test_run_id_scoped(self):
        assert get_run_id() is None
        with grading_run() as run_id:
            assert run_id.startswith("run-")
            assert get_run_id() == run_id
        assert get_run_id() is None

    def test_explicit_run_id(self):
        with grading_run("run-fixed"):
            assert get_run_id() == "run-fixed"


class TestJSONFormatter:

    def test_extra_fields_and_run_id(self):
        with grading_run("run-abc"):
            line = JSONFormatter().format(make_record(pick_id="p-1", tier="A"))
        entry = json.loads(line)
        assert entry["msg"] == "Pick graded"
        assert entry["run_id"] == "run-abc"
        assert entry["pick_id"] == "p-1"
        assert entry["tier"] == "A"

    def test_sensitive_keys_redacted(self):
        entry = json.loads(JSONFormatter().format(make_record(
            admin_api_key="secret-value",
            headers={"Authorization": "Bearer x", "accept": "json"},
        )))
        assert entry["admin_api_key"] == REDACTED
        assert entry["headers"]["Authorization"] == REDACTED
        assert entry["headers"]["accept"] == "json"


class TestTextFormatter:

    def test_correlation_placeholder(self):
        line = TextFormatter().format(make_record())
        assert "[INFO] [-]" in line
        assert line.endswith("Pick graded")

    def test_job_bound_by_grading_run(self):
        with grading_run(job="final_promotion"):
            entry = json.loads(JSONFormatter().format(make_record()))
        assert entry["job"] == "final_promotion"
        assert entry["run_id"].startswith("run-")
