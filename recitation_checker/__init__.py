"""Recitation Checker — word-level feedback on Quran recitation attempts.

WHY: A speech-to-text engine rarely spells a correct recitation exactly
like the printed text (diacritics, hamza forms, alif maksura). Learners
need per-word feedback that tolerates those differences while still
catching skipped or mispronounced words.

HOW: Three-stage pipeline — fetch the reference passage (API client),
extract and align words (core engine), render feedback (reports). A
session layer re-runs the alignment on every transcript update and
decides when a recitation is complete.

RULES:
- The core engine is pure: no I/O, no shared state between calls
- Every transcript update is aligned from scratch, never diffed
- Reporters consume the same SessionUpdate regardless of output format
"""

__version__ = "0.1.0"
