"""Scripted transcription source that replays recorded updates.

WHY: The CLI and the tests need to drive a session exactly the way a
live engine would, with a sequence of growing cumulative transcripts,
but without a microphone or a speech engine.

HOW: ReplaySource yields a fixed list of updates in order, optionally
sleeping between them. from_file() reads one update per non-blank line.

RULES:
- Each line/update is a full cumulative transcript, not a delta
- max_restarts defaults to 0 so a replay runs exactly once
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import AsyncIterator, Iterable, Union

from recitation_checker.transcription.source import TranscriptionSource


class ReplaySource(TranscriptionSource):
    """Replays pre-recorded transcript updates."""

    def __init__(
        self,
        updates: Iterable[str],
        interval_s: float = 0.0,
        max_restarts: int = 0,
        **kwargs,
    ) -> None:
        super().__init__(max_restarts=max_restarts, **kwargs)
        self._updates = list(updates)
        self.interval_s = interval_s

    @classmethod
    def from_file(cls, path: Union[str, Path], **kwargs) -> ReplaySource:
        """Load updates from a UTF-8 text file, one per non-blank line."""
        text = Path(path).read_text(encoding="utf-8")
        lines = [line.strip() for line in text.splitlines() if line.strip()]
        return cls(lines, **kwargs)

    async def _run(self) -> AsyncIterator[str]:
        for index, transcript in enumerate(self._updates):
            if index and self.interval_s:
                await asyncio.sleep(self.interval_s)
            yield transcript
