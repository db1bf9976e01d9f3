"""Tests for the plain text and JSON report renderers.

WHY: Reports are what learners and downstream tools actually read.
The JSON report must always conform to its published schema, and both
formats must keep Arabic text readable.

HOW: Sessions graded from fixed transcripts feed each reporter; the
rendered content is checked as text and, for JSON, re-validated with
jsonschema.
"""

from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest

from recitation_checker.core.session import RecitationSession
from recitation_checker.reports import REPORTERS, BaseReporter
from recitation_checker.reports.json_report import JsonReporter, build_report_dict
from recitation_checker.reports.plain_text import PlainTextReporter

_SCHEMA_PATH = (
    Path(__file__).resolve().parent.parent
    / "recitation_checker" / "reports" / "report_schema.json"
)


@pytest.fixture
def perfect_update(bismillah, bismillah_plain):
    return RecitationSession(bismillah).update(bismillah_plain)


@pytest.fixture
def partial_update(bismillah):
    return RecitationSession(bismillah).update("بسم")


class TestRegistry:
    """REPORTERS lists every renderer by key."""

    def test_keys(self):
        assert set(REPORTERS) == {"plain_text", "json"}

    def test_values_are_reporter_classes(self):
        for cls in REPORTERS.values():
            assert issubclass(cls, BaseReporter)
            assert cls().name


class TestPlainTextReporter:
    """Human-readable per-word report."""

    def test_single_output(self, perfect_update):
        outputs = PlainTextReporter().render(perfect_update)
        assert len(outputs) == 1
        assert outputs[0].suffix == "-report.txt"
        assert outputs[0].media_type == "text/plain"

    def test_word_lines(self, perfect_update):
        content = PlainTextReporter().render(perfect_update)[0].content
        lines = content.splitlines()
        assert lines[0].startswith("✓ بِسْمِ -> بسم (90%)")
        assert sum(1 for line in lines if line.startswith("✓")) == 4

    def test_summary(self, perfect_update):
        content = PlainTextReporter().render(perfect_update)[0].content
        assert "Accuracy: 100% (4/4 words)" in content
        assert "Coverage: 100% (4/4 words)" in content
        assert "Result: Perfect recitation" in content
        assert "Missed:" not in content

    def test_not_found_and_missed(self, partial_update):
        content = PlainTextReporter().render(partial_update)[0].content
        assert "not found" in content
        assert "✗" in content
        assert "Missed:" in content
        assert "Result: Keep going" in content
        assert content.endswith("\n")


class TestJsonReporter:
    """Schema-validated machine-readable report."""

    def test_single_output(self, perfect_update):
        outputs = JsonReporter().render(perfect_update)
        assert len(outputs) == 1
        assert outputs[0].suffix == "-report.json"
        assert outputs[0].media_type == "application/json"

    def test_validates_against_schema(self, perfect_update, partial_update):
        schema = json.loads(_SCHEMA_PATH.read_text(encoding="utf-8"))
        for update in (perfect_update, partial_update):
            data = json.loads(JsonReporter().render(update)[0].content)
            jsonschema.validate(instance=data, schema=schema)

    def test_arabic_is_not_escaped(self, perfect_update):
        content = JsonReporter().render(perfect_update)[0].content
        assert "بسم" in content
        assert "\\u" not in content

    def test_fields(self, partial_update):
        data = json.loads(JsonReporter().render(partial_update)[0].content)
        assert data["tier"] == "none"
        assert data["total_words"] == 4
        assert data["words"][1]["best_match"] is None
        assert data["coverage"]["matched_words"] == ["بِسْمِ"]

    def test_invalid_report_raises(self, perfect_update, monkeypatch):
        import recitation_checker.reports.json_report as json_report

        def broken(update):
            data = build_report_dict(update)
            data["tier"] = "excellent"
            return data

        monkeypatch.setattr(json_report, "build_report_dict", broken)
        with pytest.raises(jsonschema.ValidationError):
            JsonReporter().render(perfect_update)
