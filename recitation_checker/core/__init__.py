"""Core matching engine and session tracking.

WHY: The core package is the stable heart of the checker — word
extraction, normalization, edit distance, similarity, the two alignment
views, and the session policy built on them. Everything else (API
client, CLI, HTTP server, reports) is a collaborator around it.

HOW: text.py extracts and normalizes words, distance.py and
similarity.py score word pairs, aligner.py runs the consumption and
reporting views, models.py holds their results, session.py grades
cumulative transcripts.

RULES:
- No I/O anywhere in this package
- Engine functions are pure; RecitationSession is the only stateful type
"""

from recitation_checker.core.aligner import (
    ThresholdError,
    WordMatcher,
    align,
    match_report,
    validate_threshold,
)
from recitation_checker.core.distance import levenshtein_distance
from recitation_checker.core.models import AlignmentResult, MatchRecord, MatchReport
from recitation_checker.core.session import CompletionTier, RecitationSession, SessionUpdate
from recitation_checker.core.similarity import similarity
from recitation_checker.core.text import extract_words, normalize

__all__ = [
    "AlignmentResult",
    "CompletionTier",
    "MatchRecord",
    "MatchReport",
    "RecitationSession",
    "SessionUpdate",
    "ThresholdError",
    "WordMatcher",
    "align",
    "extract_words",
    "levenshtein_distance",
    "match_report",
    "normalize",
    "similarity",
    "validate_threshold",
]
