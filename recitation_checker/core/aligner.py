"""Greedy word alignment between a reference passage and a transcript.

WHY: A recitation transcript is noisy — words are misspelled, repeated,
dropped, or added — so a strict positional comparison is useless. The
learner needs to know which reference words were said (coverage) and,
for display, how close each reference word came to being said.

HOW: Two deliberately separate traversals over word similarity scores:

  align()        — consumption view. A pool starts as every reference
                   word. Each candidate word, in order, consumes the
                   best-scoring pool entry at or above the threshold
                   (earliest pool position wins ties). Extra or repeated
                   candidates cannot double-count a consumed word.
  match_report() — reporting view. Each reference word, in order, looks
                   at the whole unmodified candidate list and keeps its
                   best score even when below the threshold. Candidates
                   are not consumed, so one spoken word can be the best
                   match of several reference words.

WordMatcher wraps both with a default threshold. It holds no other
state, so any number of instances behave identically.

RULES:
- threshold must be a number within [0, 1]; anything else raises
  ThresholdError before any work is done
- Empty reference → accuracy 0.0, matched_count 0, perfect_match False
- Empty candidate list → every reference word unmatched, accuracy 0.0
- perfect_match keeps both clauses: accuracy >= 0.9 AND
  matched_count >= 0.9 * total_words
"""

from __future__ import annotations

import math
from typing import List, Optional, Sequence, Tuple

from recitation_checker.config import DEFAULT_THRESHOLD, PERFECT_MATCH_RATIO
from recitation_checker.core.models import AlignmentResult, MatchRecord, MatchReport
from recitation_checker.core.similarity import similarity
from recitation_checker.core.text import extract_words, normalize


class ThresholdError(ValueError):
    """Raised when a similarity threshold is outside [0, 1].

    WHY: An out-of-range threshold is a configuration mistake. Clamping
    it silently would hide the mistake and produce misleading scores.

    RULES:
    - Raised synchronously, before any alignment work
    - Message includes the offending value
    """


def validate_threshold(threshold: float) -> float:
    """Return threshold as a float, raising ThresholdError if invalid."""
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise ThresholdError(
            "Threshold must be a number between 0 and 1, got {!r}".format(threshold)
        )
    value = float(threshold)
    if math.isnan(value) or not 0.0 <= value <= 1.0:
        raise ThresholdError(
            "Threshold must be between 0 and 1, got {}".format(threshold)
        )
    return value


def align(
    reference_words: Sequence[str],
    candidate_words: Sequence[str],
    threshold: float = DEFAULT_THRESHOLD,
) -> AlignmentResult:
    """Consumption view: how much of the reference the candidates covered.

    Args:
        reference_words: Words of the passage being practised.
        candidate_words: Words extracted from the current transcript.
        threshold: Minimum similarity for a pair to count.

    Returns:
        AlignmentResult with matched and unmatched reference words.

    RULES:
    - A pair counts when its similarity is >= threshold, so at threshold
      0.0 every candidate consumes a pool entry, even one scoring 0.0
    - Ties go to the earliest remaining pool entry
    """
    threshold = validate_threshold(threshold)

    pool: List[str] = list(reference_words)
    matched_words: List[str] = []

    for candidate in candidate_words:
        best_index: Optional[int] = None
        best_score = 0.0
        for index, reference_word in enumerate(pool):
            score = similarity(reference_word, candidate)
            if score < threshold:
                continue
            if best_index is None or score > best_score:
                best_index = index
                best_score = score

        if best_index is not None:
            matched_words.append(pool.pop(best_index))

    total_words = len(reference_words)
    matched_count = len(matched_words)
    accuracy = matched_count / total_words if total_words > 0 else 0.0
    perfect_match = (
        accuracy >= PERFECT_MATCH_RATIO
        and matched_count >= total_words * PERFECT_MATCH_RATIO
    )

    return AlignmentResult(
        matched_words=matched_words,
        unmatched_words=pool,
        accuracy=accuracy,
        matched_count=matched_count,
        total_words=total_words,
        perfect_match=perfect_match,
        threshold=threshold,
    )


def match_report(
    reference_words: Sequence[str],
    candidate_words: Sequence[str],
    threshold: float = DEFAULT_THRESHOLD,
) -> MatchReport:
    """Reporting view: the best available comparison for each reference word.

    Args:
        reference_words: Words of the passage being practised.
        candidate_words: Words extracted from the current transcript.
        threshold: Minimum similarity for a record to be marked matched.

    Returns:
        MatchReport with one MatchRecord per reference word, in order.
    """
    threshold = validate_threshold(threshold)

    records: List[MatchRecord] = []
    for reference_word in reference_words:
        best_match: Optional[str] = None
        best_score = 0.0
        for candidate in candidate_words:
            score = similarity(reference_word, candidate)
            if score > best_score:
                best_match = candidate
                best_score = score

        records.append(MatchRecord(
            reference_word=reference_word,
            best_match=best_match,
            similarity=best_score,
            matched=best_score >= threshold,
        ))

    total_words = len(records)
    matched_count = sum(1 for r in records if r.matched)
    accuracy = matched_count / total_words if total_words > 0 else 0.0

    return MatchReport(
        records=records,
        matched_count=matched_count,
        total_words=total_words,
        accuracy=accuracy,
        threshold=threshold,
    )


class WordMatcher:
    """Stateless matching engine with a configured default threshold.

    WHY: Callers (CLI, HTTP API, sessions) want to configure a threshold
    once and run many alignments. The engine itself has no lifecycle;
    every call works on its own copies of the inputs.

    RULES:
    - The default threshold is validated at construction
    - A threshold passed to a method overrides the default for that call
    """

    def __init__(self, threshold: float = DEFAULT_THRESHOLD) -> None:
        self.threshold = validate_threshold(threshold)

    def _resolve(self, threshold: Optional[float]) -> float:
        return self.threshold if threshold is None else threshold

    def align(
        self,
        reference_words: Sequence[str],
        candidate_words: Sequence[str],
        threshold: Optional[float] = None,
    ) -> AlignmentResult:
        return align(reference_words, candidate_words, self._resolve(threshold))

    def match_report(
        self,
        reference_words: Sequence[str],
        candidate_words: Sequence[str],
        threshold: Optional[float] = None,
    ) -> MatchReport:
        return match_report(reference_words, candidate_words, self._resolve(threshold))

    def match_texts(
        self,
        reference_text: str,
        transcribed_text: str,
        threshold: Optional[float] = None,
    ) -> Tuple[AlignmentResult, MatchReport]:
        """Extract words from free text and run both views.

        Returns:
            (consumption-view AlignmentResult, reporting-view MatchReport)
        """
        reference_words = extract_words(reference_text)
        candidate_words = extract_words(transcribed_text)
        threshold = self._resolve(threshold)
        return (
            align(reference_words, candidate_words, threshold),
            match_report(reference_words, candidate_words, threshold),
        )

    @staticmethod
    def similarity(word1: str, word2: str) -> float:
        return similarity(word1, word2)

    @staticmethod
    def normalize(word: str) -> str:
        return normalize(word)
