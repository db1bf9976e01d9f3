"""Quran text API client package — async HTTP access to reference passages.

WHY: The checker compares recitations against the exact text of a
chosen passage. This package encapsulates all communication with the
Quran text API behind an async client class.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. QuranClient turns a
1-indexed verse range into offset/limit pagination and parses responses
into the typed dataclasses defined in models.py.

RULES:
- All HTTP calls go through QuranClient (no direct httpx usage elsewhere)
- Verse selections are validated before any request is sent
"""

from recitation_checker.api.client import (
    InvalidVerseRangeError,
    QuranAPIError,
    QuranClient,
    UnexpectedPayloadError,
)
from recitation_checker.api.models import Ayah, SurahResponse

__all__ = [
    "Ayah",
    "InvalidVerseRangeError",
    "QuranAPIError",
    "QuranClient",
    "SurahResponse",
    "UnexpectedPayloadError",
]
