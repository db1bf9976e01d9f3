"""Abstract base reporter and output container.

WHY: The CLI and the HTTP layer both turn a SessionUpdate into
something a learner or a tool can read. A shared interface lets either
layer render any report format by name.

HOW: BaseReporter is an ABC with a ``name`` property and a ``render()``
method. ReportOutput bundles a file suffix with its content and MIME
type.

RULES:
- ``render()`` returns a list, usually of one item
- ``suffix`` starts with a hyphen, e.g. ``"-report.json"``
- The caller prepends the output stem
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from recitation_checker.core.session import SessionUpdate


@dataclass
class ReportOutput:
    """One rendered report.

    Attributes:
        suffix: Appended to the output stem, e.g. ``"-report.txt"``.
        content: The rendered text.
        media_type: MIME type, e.g. ``"application/json"``.
    """

    suffix: str
    content: str
    media_type: str


class BaseReporter(ABC):
    """Abstract base for session report formats.

    To add a new report format:
    1. Create a new file in reports/
    2. Subclass BaseReporter
    3. Implement render() and name
    4. Register in REPORTERS in reports/__init__.py
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable format name, e.g. 'Plain text'."""

    @abstractmethod
    def render(self, update: SessionUpdate) -> List[ReportOutput]:
        """Render one graded transcript update."""
