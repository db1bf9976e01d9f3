"""Session accuracy tracking across live transcript updates.

WHY: A live transcription source keeps delivering its best current
transcript while the learner recites. After every update the learner
needs fresh feedback, and the caller needs to know when the recitation
can be considered complete so it can stop listening.

HOW: RecitationSession extracts the reference words once. evaluate()
re-runs the reporting view (and the consumption view, for display)
over the entire transcript so far, then applies completion gates and
assigns a tier. Each run is tagged with a sequence number from begin();
submit() only accepts a run newer than the last accepted one, so a
stale run finishing late can never overwrite a later result.

RULES:
- Every update re-aligns the whole cumulative transcript from scratch
- Completion gates, all required: at least one MatchRecord; transcript
  longer than min_transcript_chars; verse progress >= min_verse_progress
- verse_progress = min(1, candidate words / reference words), 0.0 for
  an empty reference
- PERFECT: gates pass and every record is matched
- GOOD: gates pass and every record similarity >= good_similarity
- PERFECT is evaluated first; the two tiers are independent checks
"""

from __future__ import annotations

import enum
import logging
import threading
from dataclasses import dataclass
from typing import List, Optional

from recitation_checker.config import (
    GOOD_SIMILARITY_THRESHOLD,
    MIN_TRANSCRIPT_CHARS,
    MIN_VERSE_PROGRESS,
    SESSION_THRESHOLD,
)
from recitation_checker.core.aligner import align, match_report, validate_threshold
from recitation_checker.core.models import AlignmentResult, MatchReport
from recitation_checker.core.text import extract_words

logger = logging.getLogger(__name__)


class CompletionTier(str, enum.Enum):
    """How complete a recitation is judged to be."""

    NONE = "none"
    GOOD = "good"
    PERFECT = "perfect"


@dataclass(frozen=True)
class SessionUpdate:
    """Outcome of aligning one transcript update.

    RULES:
    - sequence orders runs; higher means a later transcript
    - report is the reporting view, used for progress decisions
    - alignment is the consumption view, shown alongside for coverage
    """

    sequence: int
    transcript: str
    report: MatchReport
    alignment: AlignmentResult
    verse_progress: float
    tier: CompletionTier

    @property
    def complete(self) -> bool:
        return self.tier != CompletionTier.NONE


class RecitationSession:
    """Tracks one learner's attempt at one reference passage.

    WHY: The surrounding application (CLI replay, HTTP session, live
    microphone loop) needs a single object that owns the reference
    words and the latest accepted result.

    HOW: Holds the reference words and the completion policy. The
    alignment itself is delegated to the pure engine functions.

    RULES:
    - reference_text is fixed for the life of the session
    - The threshold is validated at construction (ThresholdError)
    - latest is the newest accepted SessionUpdate, or None
    - All sequence bookkeeping happens under self._lock
    """

    def __init__(
        self,
        reference_text: str,
        threshold: float = SESSION_THRESHOLD,
        good_similarity: float = GOOD_SIMILARITY_THRESHOLD,
        min_transcript_chars: int = MIN_TRANSCRIPT_CHARS,
        min_verse_progress: float = MIN_VERSE_PROGRESS,
    ) -> None:
        self.reference_text = reference_text
        self.threshold = validate_threshold(threshold)
        self.good_similarity = good_similarity
        self.min_transcript_chars = min_transcript_chars
        self.min_verse_progress = min_verse_progress
        self._reference_words: List[str] = extract_words(reference_text)
        self._lock = threading.Lock()
        self._next_sequence = 0
        self._latest: Optional[SessionUpdate] = None

    @property
    def reference_words(self) -> List[str]:
        return list(self._reference_words)

    @property
    def latest(self) -> Optional[SessionUpdate]:
        with self._lock:
            return self._latest

    @property
    def is_complete(self) -> bool:
        latest = self.latest
        return latest is not None and latest.complete

    def begin(self) -> int:
        """Reserve the sequence number for a new transcript update."""
        with self._lock:
            self._next_sequence += 1
            return self._next_sequence

    def evaluate(self, transcript: str, sequence: int = 0) -> SessionUpdate:
        """Align the full transcript against the reference and grade it.

        Pure with respect to session state: nothing is recorded until
        the result is passed to submit().
        """
        candidate_words = extract_words(transcript)
        report = match_report(self._reference_words, candidate_words, self.threshold)
        alignment = align(self._reference_words, candidate_words, self.threshold)

        if self._reference_words:
            verse_progress = min(1.0, len(candidate_words) / len(self._reference_words))
        else:
            verse_progress = 0.0

        return SessionUpdate(
            sequence=sequence,
            transcript=transcript,
            report=report,
            alignment=alignment,
            verse_progress=verse_progress,
            tier=self._grade(transcript, report, verse_progress),
        )

    def submit(self, update: SessionUpdate) -> bool:
        """Accept an update unless a later one was already accepted."""
        with self._lock:
            if self._latest is not None and update.sequence <= self._latest.sequence:
                logger.debug(
                    "Discarding stale update %d (latest is %d)",
                    update.sequence, self._latest.sequence,
                )
                return False
            self._latest = update

        if update.complete:
            logger.info(
                "Recitation complete (%s) at update %d, accuracy %.2f",
                update.tier.value, update.sequence, update.report.accuracy,
            )
        return True

    def update(self, transcript: str) -> Optional[SessionUpdate]:
        """Evaluate a new transcript and record it.

        Returns:
            The accepted SessionUpdate, or None if it was already stale.
        """
        sequence = self.begin()
        result = self.evaluate(transcript, sequence)
        return result if self.submit(result) else None

    def _grade(
        self,
        transcript: str,
        report: MatchReport,
        verse_progress: float,
    ) -> CompletionTier:
        gates_pass = (
            len(report.records) > 0
            and len(transcript) > self.min_transcript_chars
            and verse_progress >= self.min_verse_progress
        )
        if not gates_pass:
            return CompletionTier.NONE
        if all(r.matched for r in report.records):
            return CompletionTier.PERFECT
        if all(r.similarity >= self.good_similarity for r in report.records):
            return CompletionTier.GOOD
        return CompletionTier.NONE
