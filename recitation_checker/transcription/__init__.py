"""Live transcription sources and the loop that tracks a recitation.

WHY: The checker does not capture audio or run a speech engine itself,
but it needs a stable contract for whatever does: a stream of
cumulative transcript updates that can restart itself and be stopped.

HOW: source.py defines the abstract TranscriptionSource, silence.py the
configurable silence policy, replay.py a scripted source, tracking.py
the loop that feeds updates into a RecitationSession.

RULES:
- Sources deliver full transcripts, never deltas
- Silence-detection values are source configuration, not engine logic
"""

from recitation_checker.transcription.replay import ReplaySource
from recitation_checker.transcription.silence import SilenceConfig, SilenceDetector, frame_level
from recitation_checker.transcription.source import (
    TranscriptionSource,
    TranscriptionUnavailableError,
    TransientTranscriptionError,
)
from recitation_checker.transcription.tracking import track_recitation

__all__ = [
    "ReplaySource",
    "SilenceConfig",
    "SilenceDetector",
    "TranscriptionSource",
    "TranscriptionUnavailableError",
    "TransientTranscriptionError",
    "frame_level",
    "track_recitation",
]
