"""Report renderer registry.

WHY: The CLI and the HTTP layer look up report formats by name, so a
central dict is the one place new formats are registered.

HOW: REPORTERS maps string keys to reporter *classes* (not instances).
Callers instantiate as needed: ``reporter = REPORTERS["json"]()``.

RULES:
- Keys are snake_case identifiers (used in the --formats CLI flag)
- Values are BaseReporter subclasses
"""

from __future__ import annotations

from typing import Dict, Type

from recitation_checker.reports.base import BaseReporter, ReportOutput
from recitation_checker.reports.json_report import JsonReporter
from recitation_checker.reports.plain_text import PlainTextReporter

REPORTERS: Dict[str, Type[BaseReporter]] = {
    "plain_text": PlainTextReporter,
    "json": JsonReporter,
}

__all__ = ["REPORTERS", "BaseReporter", "JsonReporter", "PlainTextReporter", "ReportOutput"]
