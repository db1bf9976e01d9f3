"""Silence detection policy for live transcription sources.

WHY: A live source should stop listening once the learner has clearly
finished, without cutting off a short pause between verses. The levels
and frame counts involved depend on the audio pipeline, so they are
configuration of the transcription collaborator, never part of the
alignment engine.

HOW: SilenceDetector is fed one average level per audio frame. A frame
above the level threshold is speech and resets everything. After
required_frames consecutive silent frames a confirmation window opens;
once confirm_delay_s has passed the detector trips if more than
min_silence_s elapsed since the last speech, otherwise it re-arms on
the next silent frame.

RULES:
- Levels use the analyser's 0-255 byte scale
- Times are seconds from a monotonic clock (time.monotonic by default)
- update() returns True exactly when the source should stop
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Optional, Sequence

from recitation_checker.config import (
    SILENCE_CONFIRM_DELAY_S,
    SILENCE_LEVEL_THRESHOLD,
    SILENCE_MIN_DURATION_S,
    SILENCE_REQUIRED_FRAMES,
)


@dataclass(frozen=True)
class SilenceConfig:
    """Tunable silence-detection values (defaults from config/.env)."""

    level_threshold: float = SILENCE_LEVEL_THRESHOLD
    required_frames: int = SILENCE_REQUIRED_FRAMES
    min_silence_s: float = SILENCE_MIN_DURATION_S
    confirm_delay_s: float = SILENCE_CONFIRM_DELAY_S


def frame_level(samples: Sequence[float]) -> float:
    """Average level of one analyser frame (0.0 for an empty frame)."""
    if not samples:
        return 0.0
    return sum(samples) / len(samples)


class SilenceDetector:
    """Decides when sustained silence should end a recording."""

    def __init__(self, config: Optional[SilenceConfig] = None) -> None:
        self.config = config or SilenceConfig()
        self.reset()

    def reset(self, now: Optional[float] = None) -> None:
        self._silent_frames = 0
        self._last_speech: Optional[float] = now
        self._pending_since: Optional[float] = None

    @property
    def silent_frames(self) -> int:
        return self._silent_frames

    def update(self, level: float, now: Optional[float] = None) -> bool:
        now = time.monotonic() if now is None else now
        if self._last_speech is None:
            self._last_speech = now

        if level > self.config.level_threshold:
            self._last_speech = now
            self._silent_frames = 0
            self._pending_since = None
            return False

        self._silent_frames += 1

        if self._pending_since is None:
            if self._silent_frames >= self.config.required_frames:
                self._pending_since = now
            return False

        if now - self._pending_since < self.config.confirm_delay_s:
            return False

        # Confirmation window elapsed: trip, or re-arm on the next frame
        self._pending_since = None
        return now - self._last_speech > self.config.min_silence_s
