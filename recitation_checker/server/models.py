"""Pydantic request/response models for the HTTP API.

WHY: The FastAPI endpoints need typed schemas for request validation,
response serialization, and automatic OpenAPI documentation. Pydantic
models enforce field types at runtime and generate JSON Schema that
appears in the /docs UI.

HOW: Request models carry the texts and selections clients send;
response models mirror the core result dataclasses (MatchReport,
AlignmentResult, SessionUpdate) field for field. All models include
Field descriptions for rich OpenAPI docs.

RULES:
- All models use Field(description=...) for OpenAPI documentation
- Thresholds are plain floats here; range checks happen in the core
  (ThresholdError -> 400) so every caller gets the same message
- Python 3.9+ compatible (no PEP 604 unions, use Optional from typing)
- CompletionTier is imported from core.session (single source of truth)
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from recitation_checker.core.session import CompletionTier


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class AlignRequest(BaseModel):
    """Reference text and transcript for a one-off alignment."""

    reference_text: str = Field(description="Arabic reference passage.")
    transcript: str = Field(description="What the speech engine heard.")
    threshold: Optional[float] = Field(
        default=None,
        description="Similarity threshold in [0, 1]. Defaults to the library default (0.7).",
    )


class SimilarityRequest(BaseModel):
    """Two words to compare."""

    word1: str = Field(description="First word.")
    word2: str = Field(description="Second word.")


class CreateSessionRequest(BaseModel):
    """Reference selection for a new practice session.

    RULES:
    - Give either reference_text or surah (with an optional verse range)
    - verse_index picks one fetched verse unless whole_range is true
    """

    reference_text: Optional[str] = Field(
        default=None,
        description="Literal Arabic reference text. Takes precedence over surah.",
    )
    surah: Optional[int] = Field(default=None, description="Surah number (1-114).")
    start_verse: Optional[int] = Field(default=None, description="First verse (1-indexed).")
    end_verse: Optional[int] = Field(default=None, description="Last verse (inclusive).")
    verse_index: int = Field(
        default=1,
        description="Which fetched verse to practise (1-indexed).",
    )
    whole_range: bool = Field(
        default=False,
        description="Practise all fetched verses joined together.",
    )
    threshold: Optional[float] = Field(
        default=None,
        description="Similarity threshold in [0, 1]. Defaults to the session default (0.6).",
    )

    model_config = {"json_schema_extra": {
        "examples": [
            {"surah": 1, "start_verse": 1, "end_verse": 7},
            {"reference_text": "بِسْمِ اللَّهِ الرَّحْمَنِ الرَّحِيمِ", "threshold": 0.6},
        ]
    }}


class TranscriptUpdateRequest(BaseModel):
    """One cumulative transcript update for a session."""

    transcript: str = Field(description="The full transcript so far, not a delta.")


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class VersesResponse(BaseModel):
    """Verse texts for a surah selection."""

    surah: int = Field(description="Surah number.")
    start_verse: Optional[int] = Field(default=None, description="First verse requested.")
    end_verse: Optional[int] = Field(default=None, description="Last verse requested.")
    verses: List[str] = Field(description="Verse texts in order.")


class MatchRecordModel(BaseModel):
    """Best available comparison for one reference word."""

    reference_word: str = Field(description="The reference word.")
    best_match: Optional[str] = Field(
        default=None,
        description="Best-scoring transcript word, or null when none scored above 0.",
    )
    similarity: float = Field(description="Similarity of best_match in [0, 1].")
    matched: bool = Field(description="Whether similarity reached the threshold.")


class MatchReportResponse(BaseModel):
    """Reporting view: one record per reference word, nothing consumed."""

    records: List[MatchRecordModel] = Field(description="Per-word records in reference order.")
    matched_count: int = Field(description="Number of matched records.")
    total_words: int = Field(description="Number of reference words.")
    accuracy: float = Field(description="matched_count / total_words.")
    threshold: float = Field(description="Threshold used for this run.")
    all_matched: bool = Field(description="True when every record is matched.")


class AlignmentResponse(BaseModel):
    """Consumption view: each reference word matched at most once."""

    matched_words: List[str] = Field(description="Reference words consumed by the transcript.")
    unmatched_words: List[str] = Field(description="Reference words left unmatched.")
    accuracy: float = Field(description="matched_count / total_words.")
    matched_count: int = Field(description="Number of consumed reference words.")
    total_words: int = Field(description="Number of reference words.")
    perfect_match: bool = Field(description="Accuracy and coverage both at least 90%.")
    threshold: float = Field(description="Threshold used for this run.")


class SimilarityResponse(BaseModel):
    """Similarity score between two words."""

    word1: str = Field(description="First word as given.")
    word2: str = Field(description="Second word as given.")
    normalized1: str = Field(description="First word after normalization.")
    normalized2: str = Field(description="Second word after normalization.")
    similarity: float = Field(description="Similarity in [0, 1].")


class SessionUpdateModel(BaseModel):
    """One graded transcript update."""

    sequence: int = Field(description="Update sequence number; higher is newer.")
    transcript: str = Field(description="The transcript that was graded.")
    report: MatchReportResponse = Field(description="Reporting view, used for progress.")
    alignment: AlignmentResponse = Field(description="Consumption view, for coverage.")
    verse_progress: float = Field(description="Transcript words / reference words, capped at 1.")
    tier: CompletionTier = Field(description="Completion tier: none, good or perfect.")
    complete: bool = Field(description="True when tier is good or perfect.")


class TranscriptUpdateResponse(BaseModel):
    """Result of submitting a transcript update."""

    accepted: bool = Field(
        description="False when a newer update was accepted first and this one was discarded.",
    )
    update: SessionUpdateModel = Field(description="The graded update.")
    complete: bool = Field(description="Whether the session is now complete.")


class SessionResponse(BaseModel):
    """State of a practice session."""

    id: str = Field(description="Session ID.")
    reference_text: str = Field(description="The reference passage.")
    reference_words: List[str] = Field(description="Arabic words extracted from the reference.")
    threshold: float = Field(description="Similarity threshold for this session.")
    selection: Dict[str, Any] = Field(
        default_factory=dict,
        description="Surah/verse selection the reference came from, if any.",
    )
    created_at: float = Field(description="Creation time (epoch seconds).")
    updated_at: float = Field(description="Last activity time (epoch seconds).")
    complete: bool = Field(description="Whether the latest update completed the session.")
    latest: Optional[SessionUpdateModel] = Field(
        default=None,
        description="Most recent accepted update, or null before the first one.",
    )


class ErrorResponse(BaseModel):
    """Standard error response body.

    RULES:
    - detail is always a human-readable error message
    """

    detail: str = Field(description="Human-readable error description.")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = Field(description="Service health status.", json_schema_extra={"example": "ok"})
    version: str = Field(description="API version string.", json_schema_extra={"example": "0.1.0"})
