"""Word similarity scoring in [0, 1].

WHY: The aligner needs a single graded score per word pair: exact
transcription should outrank a match that only holds after
normalization, and near-misses should still earn partial credit.

HOW: Short-circuits first (empty input, raw equality), then compares
normalized forms. Normalized-only equality earns a fixed score just
below 1.0; anything else is scored by edit distance relative to the
longer normalized word.

RULES:
- Either word empty → 0.0
- Raw equality → 1.0
- Equal after normalization → NORMALIZED_MATCH_SCORE (0.9)
- Both words normalize to "" (diacritic-only tokens) → 0.0
- Otherwise 1 - distance / max(len), which is always within [0, 1]
"""

from __future__ import annotations

from recitation_checker.config import NORMALIZED_MATCH_SCORE
from recitation_checker.core.distance import levenshtein_distance
from recitation_checker.core.text import normalize


def similarity(word1: str, word2: str) -> float:
    """Score how closely two words match, from 0.0 to 1.0."""
    if not word1 or not word2:
        return 0.0
    if word1 == word2:
        return 1.0

    normalized1 = normalize(word1)
    normalized2 = normalize(word2)
    longest = max(len(normalized1), len(normalized2))
    if longest == 0:
        return 0.0
    if normalized1 == normalized2:
        return NORMALIZED_MATCH_SCORE

    return 1.0 - levenshtein_distance(normalized1, normalized2) / longest
