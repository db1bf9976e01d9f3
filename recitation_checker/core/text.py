"""Arabic word extraction and normalization.

WHY: Reference text from the Quran API carries full diacritics and
verse markers, while speech-to-text output is usually bare and may
spell hamza or alif maksura differently. Comparing raw strings would
penalize correct recitations for orthographic choices the speaker
never made.

HOW: extract_words() scans free text for maximal runs of Arabic-block
code points (U+0600–U+06FF); everything else (spaces, Latin, digits,
brackets) separates words and is discarded. normalize() strips harakat
and folds interchangeable letter variants.

RULES:
- Words are found by scanning, not by whitespace splitting
- normalize() strips U+064B–U+065F and U+0670
- Alef with madda / hamza above / hamza below fold to plain alef
- Alef maksura folds to yeh
- normalize() is pure, total, and idempotent; "" maps to ""
"""

from __future__ import annotations

import re
from typing import List, Optional

ARABIC_WORD_RE = re.compile(r"[\u0600-\u06FF]+")

_DIACRITICS_RE = re.compile(r"[\u064B-\u065F\u0670]")
_ALEF_VARIANTS_RE = re.compile(r"[\u0622\u0623\u0625]")

ALEF = "\u0627"
ALEF_MAKSURA = "\u0649"
YEH = "\u064A"


def extract_words(text: Optional[str]) -> List[str]:
    """Extract Arabic words from free text, in order.

    Example: "بِسْمِ اللَّهِ (1)" -> ["بِسْمِ", "اللَّهِ"]
    """
    if not text:
        return []
    return ARABIC_WORD_RE.findall(text)


def normalize(word: str) -> str:
    """Canonicalize an Arabic word for comparison."""
    word = _DIACRITICS_RE.sub("", word)
    word = _ALEF_VARIANTS_RE.sub(ALEF, word)
    return word.replace(ALEF_MAKSURA, YEH)
