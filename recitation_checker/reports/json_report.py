"""Machine-readable JSON recitation report.

WHY: Tools that post-process practice sessions (progress dashboards,
spaced-repetition schedulers) need the full per-word detail of both
alignment views in a stable, validated shape.

HOW: The SessionUpdate is flattened into a dict, validated against
report_schema.json with jsonschema, and serialized as UTF-8 JSON with
Arabic text left unescaped.

RULES:
- "words" is the reporting view, in reference order
- "coverage" is the consumption view
- Output is validated before returning; raise on failure
- Output suffix: "-report.json"
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

import jsonschema

from recitation_checker.core.session import SessionUpdate
from recitation_checker.reports.base import BaseReporter, ReportOutput

_SCHEMA_PATH = Path(__file__).resolve().parent / "report_schema.json"

_CACHED_SCHEMA: Optional[Dict[str, Any]] = None


def _get_schema() -> Dict[str, Any]:
    """Load and cache the report schema."""
    global _CACHED_SCHEMA
    if _CACHED_SCHEMA is None:
        with open(_SCHEMA_PATH, encoding="utf-8") as f:
            _CACHED_SCHEMA = json.load(f)
    return _CACHED_SCHEMA


def build_report_dict(update: SessionUpdate) -> Dict[str, Any]:
    """Flatten a SessionUpdate into the JSON report structure."""
    report = update.report
    alignment = update.alignment
    return {
        "sequence": update.sequence,
        "transcript": update.transcript,
        "threshold": report.threshold,
        "accuracy": report.accuracy,
        "matched_count": report.matched_count,
        "total_words": report.total_words,
        "words": [
            {
                "reference_word": record.reference_word,
                "best_match": record.best_match,
                "similarity": record.similarity,
                "matched": record.matched,
            }
            for record in report.records
        ],
        "coverage": {
            "matched_words": list(alignment.matched_words),
            "unmatched_words": list(alignment.unmatched_words),
            "accuracy": alignment.accuracy,
            "matched_count": alignment.matched_count,
            "total_words": alignment.total_words,
            "perfect_match": alignment.perfect_match,
        },
        "verse_progress": update.verse_progress,
        "tier": update.tier.value,
    }


class JsonReporter(BaseReporter):
    """Renders a SessionUpdate as schema-validated JSON."""

    @property
    def name(self) -> str:
        return "JSON"

    def render(self, update: SessionUpdate) -> List[ReportOutput]:
        """Build, validate and serialize the report.

        Raises:
            jsonschema.ValidationError: If the report does not conform
                to report_schema.json.
        """
        data = build_report_dict(update)
        jsonschema.validate(instance=data, schema=_get_schema())
        return [ReportOutput(
            suffix="-report.json",
            content=json.dumps(data, ensure_ascii=False, indent=2),
            media_type="application/json",
        )]
