"""Result dataclasses produced by the word aligner.

WHY: The two alignment views answer different questions — "how much of
the reference did the transcript cover?" and "what is the best available
comparison for each reference word?" — and their outputs intentionally
diverge. Separate, typed results keep callers from mixing them up.

HOW: Three dataclasses:
  MatchRecord     — one reference word with its best candidate (reporting view)
  MatchReport     — all MatchRecords plus the accuracy derived from them
  AlignmentResult — matched/unmatched reference words (consumption view)

RULES:
- Results are recomputed on every run and never stored by the engine
- best_match is None when no candidate scored above 0.0 ("not found")
- accuracy is matched_count / total_words, 0.0 when total_words is 0
- Every reference word appears in exactly one of matched_words /
  unmatched_words
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class MatchRecord:
    """The best available comparison for one reference word.

    RULES:
    - similarity is in [0, 1]
    - matched is True iff similarity >= the threshold of the run
    """

    reference_word: str
    best_match: Optional[str]
    similarity: float
    matched: bool


@dataclass
class MatchReport:
    """Per-reference-word records from the reporting view.

    The accuracy here is the one callers should use for progress
    decisions. It is not guaranteed to equal AlignmentResult.accuracy
    for the same inputs, because reporting does not consume candidates.
    """

    records: List[MatchRecord]
    matched_count: int
    total_words: int
    accuracy: float
    threshold: float

    @property
    def all_matched(self) -> bool:
        return bool(self.records) and all(r.matched for r in self.records)


@dataclass
class AlignmentResult:
    """Reference coverage from the consumption view.

    Attributes:
        matched_words: Reference words consumed, in the order candidates
            consumed them.
        unmatched_words: Reference words left in the pool, in reference
            order.
        accuracy: matched_count / total_words (0.0 for an empty reference).
        matched_count: Number of reference words consumed.
        total_words: Number of reference words.
        perfect_match: accuracy >= 0.9 and matched_count >= 0.9 * total_words.
        threshold: Similarity threshold the run used.
    """

    matched_words: List[str] = field(default_factory=list)
    unmatched_words: List[str] = field(default_factory=list)
    accuracy: float = 0.0
    matched_count: int = 0
    total_words: int = 0
    perfect_match: bool = False
    threshold: float = 0.0
