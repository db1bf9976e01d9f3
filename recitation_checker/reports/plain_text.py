"""Plain text recitation report.

WHY: A learner running the CLI wants a quick, readable verdict: which
words were recited well, which were missed, and whether the recitation
counts as complete.

HOW: One line per reference word from the reporting view, marked with
a check or a cross, followed by a summary block with reporting-view
accuracy, consumption-view coverage, verse progress, and the result.

RULES:
- Word lines keep reference order
- Percentages are rounded to whole numbers
- "not found" stands in when no candidate scored above zero
- Output suffix: "-report.txt"
"""

from __future__ import annotations

from typing import List

from recitation_checker.core.models import MatchRecord
from recitation_checker.core.session import CompletionTier, SessionUpdate
from recitation_checker.reports.base import BaseReporter, ReportOutput

_RESULT_LABELS = {
    CompletionTier.PERFECT: "Perfect recitation",
    CompletionTier.GOOD: "Good recitation",
    CompletionTier.NONE: "Keep going",
}


def _percent(value: float) -> str:
    return "{}%".format(int(round(value * 100)))


def _format_record(record: MatchRecord) -> str:
    mark = "✓" if record.matched else "✗"
    best = record.best_match if record.best_match is not None else "not found"
    return "{} {} -> {} ({})".format(mark, record.reference_word, best, _percent(record.similarity))


class PlainTextReporter(BaseReporter):
    """Renders a SessionUpdate as a human-readable text report."""

    @property
    def name(self) -> str:
        return "Plain text"

    def render(self, update: SessionUpdate) -> List[ReportOutput]:
        report = update.report
        alignment = update.alignment

        lines = [_format_record(record) for record in report.records]
        if lines:
            lines.append("")
        lines.extend([
            "Accuracy: {} ({}/{} words)".format(
                _percent(report.accuracy), report.matched_count, report.total_words,
            ),
            "Coverage: {} ({}/{} words)".format(
                _percent(alignment.accuracy), alignment.matched_count, alignment.total_words,
            ),
            "Progress: {}".format(_percent(update.verse_progress)),
            "Result: {}".format(_RESULT_LABELS[update.tier]),
        ])
        if alignment.unmatched_words:
            lines.append("Missed: {}".format(" ".join(alignment.unmatched_words)))

        return [ReportOutput(
            suffix="-report.txt",
            content="\n".join(lines) + "\n",
            media_type="text/plain",
        )]
