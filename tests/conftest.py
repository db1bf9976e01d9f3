"""Shared test fixtures for the recitation_checker test suite.

WHY: Many test modules need the same Arabic reference text and the
same fake Quran API responses. Centralizing them here avoids
duplicating diacritized strings and payload shapes.

HOW: Pytest fixtures provide the diacritized first verse of Al-Fatiha,
its undiacritized transcript form, a payload builder matching the
api.alquran.cloud /surah response, and a factory for httpx
MockTransports that record the requests they receive.

RULES:
- Reference text comes from config.FATIHA_VERSES (single source of truth)
- Fake transports never touch the network
- Each factory call returns a fresh request log
"""

from __future__ import annotations

from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from recitation_checker.config import FATIHA_VERSES


# ---------------------------------------------------------------------------
# Reference text
# ---------------------------------------------------------------------------

# "In the name of God, the Most Gracious, the Most Merciful", as a
# speech engine would transcribe it: no diacritics.
BISMILLAH_PLAIN = "بسم الله الرحمن الرحيم"


@pytest.fixture
def bismillah() -> str:
    """Diacritized first verse of Al-Fatiha (four words)."""
    return FATIHA_VERSES[0]


@pytest.fixture
def bismillah_plain() -> str:
    """Undiacritized transcript of the first verse."""
    return BISMILLAH_PLAIN


# ---------------------------------------------------------------------------
# Fake Quran API
# ---------------------------------------------------------------------------


def build_surah_payload(
    verses: List[str],
    surah: int = 1,
    first_verse: int = 1,
) -> Dict[str, Any]:
    """Build a /surah/{n} response body holding the given verses."""
    return {
        "code": 200,
        "status": "OK",
        "data": {
            "number": surah,
            "name": "سُورَةُ ٱلْفَاتِحَةِ",
            "englishName": "Al-Faatiha",
            "ayahs": [
                {"number": first_verse + i, "numberInSurah": first_verse + i, "text": text}
                for i, text in enumerate(verses)
            ],
        },
    }


@pytest.fixture
def surah_payload() -> Callable[..., Dict[str, Any]]:
    """Factory fixture: surah_payload(verses, surah=1, first_verse=1)."""
    return build_surah_payload


@pytest.fixture
def quran_transport():
    """Factory fixture returning (transport, requests) pairs.

    Usage:
        transport, requests = quran_transport(json_body)
        transport, requests = quran_transport(status_code=500, text="boom")
    """

    def _factory(
        json_body: Optional[Any] = None,
        status_code: int = 200,
        text: str = "",
    ):
        requests: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            if json_body is not None:
                return httpx.Response(status_code, json=json_body)
            return httpx.Response(status_code, text=text)

        return httpx.MockTransport(handler), requests

    return _factory
