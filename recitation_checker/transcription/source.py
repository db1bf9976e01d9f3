"""Abstract live transcription source with restart and stop semantics.

WHY: Speech-to-text engines deliver a stream of "best current
transcript" updates and may end a recognition pass on their own (a
network hiccup, an engine timeout). The learner should not have to
restart anything: the source keeps delivering updates until the caller
explicitly stops it.

HOW: Subclasses implement _run(), one recognition pass yielding
cumulative transcripts. updates() wraps it in a restart loop that runs
while the source is active. TransientTranscriptionError ends a pass
and is logged; TranscriptionUnavailableError propagates to the caller.
stop() is the only termination command. feed_level() lets an audio
pipeline drive the source's SilenceDetector, which stops the source
when it trips.

RULES:
- Each yielded update is a full transcript, never a delta
- Updates produced after stop() are dropped
- updates() on an already active source raises RuntimeError
- max_restarts=None restarts indefinitely; 0 never restarts
- Every restart awaits the event loop, even with restart_delay_s=0
- There is no engine-side timeout
"""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator, Optional

from recitation_checker.config import TRANSCRIPTION_LANGUAGE
from recitation_checker.transcription.silence import SilenceConfig, SilenceDetector

logger = logging.getLogger(__name__)


class TranscriptionUnavailableError(Exception):
    """Raised when the transcription engine cannot run at all."""


class TransientTranscriptionError(Exception):
    """Raised by a recognition pass that ended abnormally but may be retried."""


class TranscriptionSource(ABC):
    """Base class for anything that delivers live transcript updates.

    To add a new source:
    1. Subclass TranscriptionSource
    2. Implement _run() as an async generator of cumulative transcripts
    3. Raise TransientTranscriptionError for retryable pass failures
    """

    def __init__(
        self,
        language: str = TRANSCRIPTION_LANGUAGE,
        silence: Optional[SilenceConfig] = None,
        max_restarts: Optional[int] = None,
        restart_delay_s: float = 0.0,
    ) -> None:
        self.language = language
        self.silence_detector = SilenceDetector(silence)
        self.max_restarts = max_restarts
        self.restart_delay_s = restart_delay_s
        self.restarts = 0
        self._active = False

    @property
    def active(self) -> bool:
        return self._active

    @abstractmethod
    def _run(self) -> AsyncIterator[str]:
        """Run one recognition pass, yielding cumulative transcripts."""

    async def updates(self) -> AsyncIterator[str]:
        """Yield transcript updates until stop() is called."""
        if self._active:
            raise RuntimeError("Transcription source is already running")

        self._active = True
        self.restarts = 0
        self.silence_detector.reset()
        try:
            while self._active:
                try:
                    async for transcript in self._run():
                        if not self._active:
                            break
                        yield transcript
                except TransientTranscriptionError as exc:
                    logger.warning("Transcription pass failed: %s", exc)

                if not self._active:
                    break
                if self.max_restarts is not None and self.restarts >= self.max_restarts:
                    logger.info("Transcription ended after %d restart(s)", self.restarts)
                    break

                self.restarts += 1
                logger.info("Transcription pass ended, restarting (%d)", self.restarts)
                # Yield to the event loop even with no delay so stop() can run
                await asyncio.sleep(self.restart_delay_s)
        finally:
            self._active = False

    def stop(self) -> None:
        """Stop delivering updates; safe to call at any time."""
        self._active = False

    def feed_level(self, level: float, now: Optional[float] = None) -> bool:
        """Report one audio frame level; stops the source on sustained silence.

        Returns:
            True if this frame caused the source to stop.
        """
        if not self._active:
            return False
        if self.silence_detector.update(level, now):
            logger.info("Sustained silence detected, stopping transcription")
            self.stop()
            return True
        return False
