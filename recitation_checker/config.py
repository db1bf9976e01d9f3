"""Configuration constants, Quran metadata, and .env loading.

WHY: Centralizes every tunable value — matching thresholds, completion
gates, silence-detection policy, API endpoints — so they are easy to
find, update, and override. Quran metadata (verse counts per surah,
the bundled Al-Fatiha text) is plain data, not buried in logic.

HOW: python-dotenv loads the .env file on import. Constants are defined
as module-level values, each overridable by an environment variable of
the same name. verse_count() gives bounds-checked access to
VERSES_PER_SURAH.

RULES:
- DEFAULT_THRESHOLD (0.7) is the library default for the aligner
- SESSION_THRESHOLD (0.6) is the default for interactive sessions
- Silence-detection values belong to the transcription source, never
  to the alignment engine
- VERSES_PER_SURAH has exactly SURAH_COUNT (114) entries
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the project root (where the script is run from)
load_dotenv()


def _env_float(name: str, default: float) -> float:
    return float(os.getenv(name, str(default)))


def _env_int(name: str, default: int) -> int:
    return int(os.getenv(name, str(default)))


# ---------------------------------------------------------------------------
# Matching and scoring
# ---------------------------------------------------------------------------

DEFAULT_THRESHOLD = _env_float("DEFAULT_THRESHOLD", 0.7)
"""Library default similarity threshold for counting a word as matched."""

SESSION_THRESHOLD = _env_float("SESSION_THRESHOLD", 0.6)
"""Threshold used by interactive sessions (CLI, HTTP API)."""

NORMALIZED_MATCH_SCORE = 0.9
"""Similarity for words equal only after normalization (below an exact 1.0)."""

PERFECT_MATCH_RATIO = 0.9

# ---------------------------------------------------------------------------
# Session completion gates
# ---------------------------------------------------------------------------

GOOD_SIMILARITY_THRESHOLD = _env_float("GOOD_SIMILARITY_THRESHOLD", 0.45)
MIN_TRANSCRIPT_CHARS = _env_int("MIN_TRANSCRIPT_CHARS", 10)
MIN_VERSE_PROGRESS = _env_float("MIN_VERSE_PROGRESS", 0.9)

# ---------------------------------------------------------------------------
# Transcription source
# ---------------------------------------------------------------------------

TRANSCRIPTION_LANGUAGE = os.getenv("TRANSCRIPTION_LANGUAGE", "ar-SA")

# Average frequency-bin level (0-255) below which a frame counts as silent
SILENCE_LEVEL_THRESHOLD = _env_float("SILENCE_LEVEL_THRESHOLD", 25.0)
SILENCE_REQUIRED_FRAMES = _env_int("SILENCE_REQUIRED_FRAMES", 15)
SILENCE_MIN_DURATION_S = _env_float("SILENCE_MIN_DURATION_S", 4.0)
SILENCE_CONFIRM_DELAY_S = _env_float("SILENCE_CONFIRM_DELAY_S", 1.0)

# ---------------------------------------------------------------------------
# Reference text API and HTTP server
# ---------------------------------------------------------------------------

QURAN_API_BASE_URL = os.getenv("QURAN_API_BASE_URL", "https://api.alquran.cloud/v1")

API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = _env_int("API_PORT", 8000)
SESSION_TTL_SECONDS = _env_int("SESSION_TTL_SECONDS", 3600)
MAX_SESSIONS = _env_int("MAX_SESSIONS", 100)
SESSION_CLEANUP_INTERVAL_S = _env_int("SESSION_CLEANUP_INTERVAL_S", 300)

LOG_LEVEL = os.getenv("LOG_LEVEL", "WARNING").upper()

# ---------------------------------------------------------------------------
# Quran metadata
# ---------------------------------------------------------------------------

SURAH_COUNT = 114

VERSES_PER_SURAH: tuple[int, ...] = (
    7, 286, 200, 176, 120, 165, 206, 75, 129, 109,
    123, 111, 43, 52, 99, 128, 111, 110, 98, 135,
    112, 78, 118, 64, 77, 227, 93, 88, 69, 60,
    34, 30, 73, 54, 45, 83, 182, 88, 75, 85,
    54, 53, 89, 59, 37, 35, 38, 29, 18, 45,
    60, 49, 62, 55, 78, 96, 29, 22, 24, 13,
    14, 11, 11, 18, 12, 12, 30, 52, 52, 44,
    28, 28, 20, 56, 40, 31, 50, 40, 46, 42,
    29, 19, 36, 25, 22, 17, 19, 26, 30, 20,
    15, 21, 11, 8, 8, 19, 5, 8, 8, 11,
    11, 8, 3, 9, 5, 4, 7, 3, 6, 3,
    5, 4, 5, 6,
)

FATIHA_VERSES: tuple[str, ...] = (
    "بِسْمِ اللَّهِ الرَّحْمَنِ الرَّحِيمِ",
    "الْحَمْدُ لِلَّهِ رَبِّ الْعَالَمِينَ",
    "الرَّحْمَنِ الرَّحِيمِ",
    "مَالِكِ يَوْمِ الدِّينِ",
    "إِيَّاكَ نَعْبُدُ وَإِيَّاكَ نَسْتَعِينُ",
    "اهْدِنَا الصِّرَاطَ الْمُسْتَقِيمَ",
    "صِرَاطَ الَّذِينَ أَنْعَمْتَ عَلَيْهِمْ غَيْرِ الْمَغْضُوبِ عَلَيْهِمْ وَلَا الضَّالِّينَ",
)
"""Al-Fatiha, served when the reference API returns an unusable payload."""


def verse_count(surah: int) -> int:
    """Return the number of verses in a surah.

    RULES:
    - surah is 1-indexed (1..SURAH_COUNT)
    - Raises ValueError for surah numbers outside that range
    """
    if not 1 <= surah <= SURAH_COUNT:
        raise ValueError(
            "Surah number must be between 1 and {}, got {}".format(SURAH_COUNT, surah)
        )
    return VERSES_PER_SURAH[surah - 1]
