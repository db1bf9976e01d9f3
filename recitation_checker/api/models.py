"""Quran text API response dataclasses.

WHY: The Quran API returns nested JSON ({code, status, data: {ayahs}}).
Typed dataclasses make the fields the checker relies on explicit and
catch missing keys at the parsing boundary instead of deep in the
pipeline.

HOW: Each dataclass maps to one JSON object. from_dict() factory
methods parse raw response dicts; optional metadata falls back to
defaults when the API omits it.

RULES:
- Ayah.text is the verse text, including diacritics and any pause marks
- Ayah.number_in_surah is 1-indexed
- SurahResponse.ayahs keeps the API's order (ascending verse number)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List


@dataclass
class Ayah:
    """A single verse as returned by the Quran API."""

    number: int
    number_in_surah: int
    text: str

    @classmethod
    def from_dict(cls, data: dict) -> Ayah:
        """Parse an Ayah from a raw API dict.

        RULES:
        - text is required
        - number / numberInSurah default to 0 when absent
        """
        return cls(
            number=data.get("number", 0),
            number_in_surah=data.get("numberInSurah", 0),
            text=data["text"],
        )


@dataclass
class SurahResponse:
    """The ``data`` object of GET /surah/{number}.

    RULES:
    - number is the surah number (1..114)
    - ayahs holds only the requested page when offset/limit were sent
    """

    number: int
    name: str = ""
    english_name: str = ""
    ayahs: List[Ayah] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> SurahResponse:
        return cls(
            number=data.get("number", 0),
            name=data.get("name", ""),
            english_name=data.get("englishName", ""),
            ayahs=[Ayah.from_dict(a) for a in data.get("ayahs", [])],
        )

    @property
    def verses(self) -> List[str]:
        return [a.text for a in self.ayahs]
