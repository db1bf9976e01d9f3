"""Async HTTP client for the Quran text API (api.alquran.cloud).

WHY: The checker needs the exact text of the passage a learner chose.
This module encapsulates the API call, verse-range pagination, response
parsing, and the Al-Fatiha fallback behind a single client class so
callers (CLI, HTTP server, tests) don't need to know HTTP details.

HOW: Uses httpx.AsyncClient for non-blocking HTTP. QuranClient is an
async context manager — enter it to get a configured client, exit to
close the connection pool. A 1-indexed verse range is translated into
the API's 0-indexed offset/limit pagination.

RULES:
- Always use the async context manager (async with QuranClient() as client:)
- Surah and verse numbers are validated before any request is sent
- start + end → offset=start-1, limit=end-start+1
- start only → offset=start-1, limit=1
- neither → the whole surah
- Non-200 HTTP responses raise QuranAPIError
- A 200 response without a usable payload falls back to the bundled
  Al-Fatiha text for surah 1, and raises UnexpectedPayloadError otherwise
"""

from __future__ import annotations

import logging
import random
from typing import List, Optional, Tuple

import httpx

from recitation_checker.api.models import SurahResponse
from recitation_checker.config import (
    FATIHA_VERSES,
    QURAN_API_BASE_URL,
    SURAH_COUNT,
    verse_count,
)

logger = logging.getLogger(__name__)


class QuranAPIError(Exception):
    """Raised when the Quran API returns an error response.

    WHY: Callers need a typed exception to distinguish upstream failures
    from invalid input or programming errors.

    RULES:
    - Always include status_code and message
    - message is the response body text or a summary
    """

    def __init__(self, status_code: int, message: str) -> None:
        self.status_code = status_code
        self.message = message
        super().__init__(f"Quran API error {status_code}: {message}")


class UnexpectedPayloadError(QuranAPIError):
    """Raised when a 200 response does not carry {code: 200, data: ...}."""


class InvalidVerseRangeError(ValueError):
    """Raised when a surah number or verse range is out of bounds.

    RULES:
    - Raised before any HTTP request is made
    - Message names the offending value and the valid range
    """


def validate_verse_range(
    surah: int,
    start_verse: Optional[int] = None,
    end_verse: Optional[int] = None,
) -> None:
    """Check a surah/verse selection against VERSES_PER_SURAH.

    RULES:
    - surah must be within 1..114
    - end_verse requires start_verse
    - 1 <= start_verse <= end_verse <= verse count of the surah
    """
    if not 1 <= surah <= SURAH_COUNT:
        raise InvalidVerseRangeError(
            "Surah must be between 1 and {}, got {}".format(SURAH_COUNT, surah)
        )
    count = verse_count(surah)

    if start_verse is None:
        if end_verse is not None:
            raise InvalidVerseRangeError("end_verse requires start_verse")
        return

    if not 1 <= start_verse <= count:
        raise InvalidVerseRangeError(
            "Surah {} has {} verses; start verse {} is out of range".format(
                surah, count, start_verse
            )
        )
    if end_verse is not None and not start_verse <= end_verse <= count:
        raise InvalidVerseRangeError(
            "End verse must be between {} and {}, got {}".format(
                start_verse, count, end_verse
            )
        )


def random_verse(rng: Optional[random.Random] = None) -> Tuple[int, int]:
    """Pick a random (surah, verse) pair, surah first, then a verse within it."""
    rng = rng or random.Random()
    surah = rng.randint(1, SURAH_COUNT)
    verse = rng.randint(1, verse_count(surah))
    return surah, verse


class QuranClient:
    """Async client for the paginated Quran text API.

    WHY: Provides a clean, typed interface for fetching a passage by
    surah and verse range, with range validation and error wrapping.

    HOW: Wraps httpx.AsyncClient. Use as an async context manager to
    ensure the HTTP connection pool is properly closed.

    RULES:
    - Use as: async with QuranClient() as client: ...
    - base_url defaults to QURAN_API_BASE_URL from config
    - transport is optional and only used by tests (httpx.MockTransport)
    """

    def __init__(
        self,
        base_url: str | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = (base_url or QURAN_API_BASE_URL).rstrip("/")
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> QuranClient:
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            headers={"Accept": "application/json; charset=utf-8"},
            timeout=httpx.Timeout(30.0, connect=10.0),
            transport=self._transport,
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:  # noqa: ANN001
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        """Return the active httpx client, raising if not in context manager."""
        if self._client is None:
            raise RuntimeError(
                "QuranClient must be used as an async context manager: "
                "async with QuranClient() as client: ..."
            )
        return self._client

    async def fetch_surah(
        self,
        surah: int,
        start_verse: Optional[int] = None,
        end_verse: Optional[int] = None,
    ) -> SurahResponse:
        """Fetch a surah, or a 1-indexed verse range of it.

        Args:
            surah: Surah number (1..114).
            start_verse: First verse to fetch (1-indexed), or None for all.
            end_verse: Last verse to fetch (inclusive), or None.

        Returns:
            SurahResponse with the requested ayahs in order.

        Raises:
            InvalidVerseRangeError: Before any request, on a bad selection.
            QuranAPIError: On a non-200 HTTP response.
            UnexpectedPayloadError: On a 200 response without usable data.
        """
        validate_verse_range(surah, start_verse, end_verse)
        client = self._ensure_client()

        params = {}
        if start_verse is not None:
            params["offset"] = start_verse - 1
            params["limit"] = (end_verse - start_verse + 1) if end_verse is not None else 1

        logger.debug("GET /surah/%d params=%s", surah, params)
        resp = await client.get(f"/surah/{surah}", params=params)

        if resp.status_code != 200:
            raise QuranAPIError(resp.status_code, resp.text)

        try:
            payload = resp.json()
        except ValueError:
            raise UnexpectedPayloadError(
                resp.status_code,
                "Response body is not JSON: {}".format(resp.text[:200]),
            )
        if not isinstance(payload, dict) or payload.get("code") != 200 or not payload.get("data"):
            status = payload.get("status") if isinstance(payload, dict) else None
            raise UnexpectedPayloadError(
                resp.status_code,
                "Unexpected response payload (status: {})".format(status),
            )

        return SurahResponse.from_dict(payload["data"])

    async def fetch_verses(
        self,
        surah: int,
        start_verse: Optional[int] = None,
        end_verse: Optional[int] = None,
    ) -> List[str]:
        """Fetch the verse texts for a selection.

        RULES:
        - Same pagination and validation as fetch_surah()
        - UnexpectedPayloadError for surah 1 is replaced by the bundled
          Al-Fatiha text, sliced to the requested range
        """
        try:
            response = await self.fetch_surah(surah, start_verse, end_verse)
        except UnexpectedPayloadError:
            if surah != 1:
                raise
            logger.warning("Quran API returned no usable data; using bundled Al-Fatiha")
            return _fatiha_slice(start_verse, end_verse)

        return response.verses


def _fatiha_slice(start_verse: Optional[int], end_verse: Optional[int]) -> List[str]:
    if start_verse is None:
        return list(FATIHA_VERSES)
    end = end_verse if end_verse is not None else start_verse
    return list(FATIHA_VERSES[start_verse - 1:end])
