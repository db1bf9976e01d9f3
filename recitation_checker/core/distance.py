"""Levenshtein edit distance with linear auxiliary space."""

from __future__ import annotations

from typing import List


def levenshtein_distance(a: str, b: str) -> int:
    """Minimum number of single-character edits turning ``a`` into ``b``.

    HOW: The classic dynamic-programming recurrence, keeping only the
    previous and current rows. Rows are sized by the shorter string, so
    memory is O(min(len(a), len(b))) while time stays O(len(a) * len(b)).

    RULES:
    - Insertions, deletions and substitutions all cost 1
    - distance(x, "") == len(x); distance("", "") == 0
    - Symmetric: distance(a, b) == distance(b, a)
    """
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    previous: List[int] = list(range(len(b) + 1))
    for i, char_a in enumerate(a, start=1):
        current = [i] + [0] * len(b)
        for j, char_b in enumerate(b, start=1):
            cost = 0 if char_a == char_b else 1
            current[j] = min(
                previous[j] + 1,         # deletion
                current[j - 1] + 1,      # insertion
                previous[j - 1] + cost,  # substitution
            )
        previous = current

    return previous[-1]
