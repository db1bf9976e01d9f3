"""FastAPI application exposing the matching engine and practice sessions.

WHY: Web and mobile front-ends (and curl) need an HTTP API to look up
reference passages, compare a transcript against them, and follow a
learner's progress across live transcript updates. FastAPI provides
automatic OpenAPI documentation and request validation.

HOW: A single FastAPI app exposes endpoints grouped by tags:
  verses    — proxy to the Quran text API with range validation
  matching  — stateless alignment, reporting view, word similarity
  sessions  — create a session, submit cumulative transcripts, fetch
              state and rendered reports, delete
  health    — liveness check
Sessions live in an in-memory SessionStore; a lifespan task expires
idle sessions periodically.

RULES:
- All endpoints have OpenAPI descriptions on every parameter and response
- Error responses use a consistent ErrorResponse schema
- Invalid threshold or verse range -> 400; unknown session -> 404;
  store full -> 429; upstream Quran API failure -> 502
- Transcript submission runs in the threadpool; stale results lose to
  newer ones via the session's sequence numbers
- Python 3.9+ compatible (no match/case, no PEP 604 unions)
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import Annotated, List, Optional

import httpx
from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import Response

from recitation_checker import __version__
from recitation_checker.api.client import InvalidVerseRangeError, QuranAPIError, QuranClient
from recitation_checker.config import (
    API_HOST,
    API_PORT,
    DEFAULT_THRESHOLD,
    LOG_LEVEL,
    SESSION_CLEANUP_INTERVAL_S,
    SESSION_THRESHOLD,
)
from recitation_checker.core.aligner import ThresholdError, align, match_report, validate_threshold
from recitation_checker.core.models import AlignmentResult, MatchReport
from recitation_checker.core.session import RecitationSession, SessionUpdate
from recitation_checker.core.similarity import similarity
from recitation_checker.core.text import extract_words, normalize
from recitation_checker.reports import REPORTERS
from recitation_checker.server.models import (
    AlignmentResponse,
    AlignRequest,
    CreateSessionRequest,
    ErrorResponse,
    HealthResponse,
    MatchRecordModel,
    MatchReportResponse,
    SessionResponse,
    SessionUpdateModel,
    SimilarityRequest,
    SimilarityResponse,
    TranscriptUpdateRequest,
    TranscriptUpdateResponse,
    VersesResponse,
)
from recitation_checker.server.sessions import SessionStore, StoredSession

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# App and store setup
# ---------------------------------------------------------------------------

session_store = SessionStore()


async def _periodic_cleanup() -> None:
    """Expire idle sessions every SESSION_CLEANUP_INTERVAL_S seconds."""
    while True:
        await asyncio.sleep(SESSION_CLEANUP_INTERVAL_S)
        session_store.cleanup_expired()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Start periodic cleanup on startup, cancel on shutdown."""
    task = asyncio.create_task(_periodic_cleanup())
    yield
    task.cancel()
    try:
        await task
    except asyncio.CancelledError:
        pass


app = FastAPI(
    lifespan=lifespan,
    title="Quran Recitation Checker API",
    description=(
        "REST API for checking Quran recitations word by word. Fetch a "
        "reference passage, align a speech-to-text transcript against it, "
        "or open a practice session and submit cumulative transcript "
        "updates until the recitation is complete."
    ),
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _report_to_model(report: MatchReport) -> MatchReportResponse:
    return MatchReportResponse(
        records=[
            MatchRecordModel(
                reference_word=r.reference_word,
                best_match=r.best_match,
                similarity=r.similarity,
                matched=r.matched,
            )
            for r in report.records
        ],
        matched_count=report.matched_count,
        total_words=report.total_words,
        accuracy=report.accuracy,
        threshold=report.threshold,
        all_matched=report.all_matched,
    )


def _alignment_to_model(result: AlignmentResult) -> AlignmentResponse:
    return AlignmentResponse(
        matched_words=result.matched_words,
        unmatched_words=result.unmatched_words,
        accuracy=result.accuracy,
        matched_count=result.matched_count,
        total_words=result.total_words,
        perfect_match=result.perfect_match,
        threshold=result.threshold,
    )


def _update_to_model(update: SessionUpdate) -> SessionUpdateModel:
    return SessionUpdateModel(
        sequence=update.sequence,
        transcript=update.transcript,
        report=_report_to_model(update.report),
        alignment=_alignment_to_model(update.alignment),
        verse_progress=update.verse_progress,
        tier=update.tier,
        complete=update.complete,
    )


def _session_to_response(stored: StoredSession) -> SessionResponse:
    """Convert a StoredSession to a SessionResponse Pydantic model."""
    session = stored.session
    latest = session.latest
    return SessionResponse(
        id=stored.id,
        reference_text=session.reference_text,
        reference_words=session.reference_words,
        threshold=session.threshold,
        selection=stored.selection,
        created_at=stored.created_at,
        updated_at=stored.updated_at,
        complete=session.is_complete,
        latest=_update_to_model(latest) if latest is not None else None,
    )


def _get_stored_or_404(session_id: str) -> StoredSession:
    stored = session_store.get_session(session_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return stored


def _threshold_or_400(threshold: Optional[float], default: float) -> float:
    try:
        return validate_threshold(default if threshold is None else threshold)
    except ThresholdError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


async def _fetch_verses(
    surah: int,
    start_verse: Optional[int],
    end_verse: Optional[int],
) -> List[str]:
    """Fetch verse texts, mapping client errors onto HTTP errors."""
    try:
        async with QuranClient() as client:
            return await client.fetch_verses(surah, start_verse, end_verse)
    except InvalidVerseRangeError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except QuranAPIError as exc:
        logger.warning("Quran API failure for surah %d: %s", surah, exc)
        raise HTTPException(status_code=502, detail=str(exc))
    except httpx.HTTPError as exc:
        logger.warning("Could not reach Quran API for surah %d: %s", surah, exc)
        raise HTTPException(
            status_code=502,
            detail="Could not reach the Quran API: {}".format(exc),
        )


# ---------------------------------------------------------------------------
# Endpoints: Verses
# ---------------------------------------------------------------------------


@app.get(
    "/verses",
    response_model=VersesResponse,
    tags=["verses"],
    summary="Fetch reference verses",
    description=(
        "Fetch a surah, a single verse, or a verse range from the Quran text "
        "API. Verse numbers are 1-indexed and inclusive."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Missing surah or invalid verse range"},
        502: {"model": ErrorResponse, "description": "Quran text API failure"},
    },
)
async def get_verses(
    surah: Annotated[
        Optional[int],
        Query(description="Surah number (1-114)."),
    ] = None,
    start_verse: Annotated[
        Optional[int],
        Query(alias="startVerse", description="First verse (1-indexed)."),
    ] = None,
    end_verse: Annotated[
        Optional[int],
        Query(alias="endVerse", description="Last verse (inclusive). Requires startVerse."),
    ] = None,
) -> VersesResponse:
    if surah is None:
        raise HTTPException(status_code=400, detail="Surah number is required")

    verses = await _fetch_verses(surah, start_verse, end_verse)
    return VersesResponse(
        surah=surah,
        start_verse=start_verse,
        end_verse=end_verse,
        verses=verses,
    )


# ---------------------------------------------------------------------------
# Endpoints: Matching
# ---------------------------------------------------------------------------


@app.post(
    "/align",
    response_model=AlignmentResponse,
    tags=["matching"],
    summary="Align a transcript against a reference",
    description=(
        "Consumption view: each transcript word claims the best remaining "
        "reference word at or above the threshold. Reports which reference "
        "words were covered."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Threshold outside [0, 1]"},
    },
)
async def align_texts(body: AlignRequest) -> AlignmentResponse:
    threshold = _threshold_or_400(body.threshold, DEFAULT_THRESHOLD)
    result = align(extract_words(body.reference_text), extract_words(body.transcript), threshold)
    return _alignment_to_model(result)


@app.post(
    "/match-report",
    response_model=MatchReportResponse,
    tags=["matching"],
    summary="Per-word match report",
    description=(
        "Reporting view: for every reference word, the best-scoring transcript "
        "word. Transcript words are not consumed, so one may be cited for "
        "several reference words."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Threshold outside [0, 1]"},
    },
)
async def get_match_report(body: AlignRequest) -> MatchReportResponse:
    threshold = _threshold_or_400(body.threshold, DEFAULT_THRESHOLD)
    report = match_report(
        extract_words(body.reference_text),
        extract_words(body.transcript),
        threshold,
    )
    return _report_to_model(report)


@app.post(
    "/similarity",
    response_model=SimilarityResponse,
    tags=["matching"],
    summary="Similarity between two words",
    description="Normalization-aware similarity score in [0, 1].",
)
async def get_similarity(body: SimilarityRequest) -> SimilarityResponse:
    return SimilarityResponse(
        word1=body.word1,
        word2=body.word2,
        normalized1=normalize(body.word1),
        normalized2=normalize(body.word2),
        similarity=similarity(body.word1, body.word2),
    )


# ---------------------------------------------------------------------------
# Endpoints: Sessions
# ---------------------------------------------------------------------------


@app.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=201,
    tags=["sessions"],
    summary="Start a practice session",
    description=(
        "Create a session for a literal reference text or a surah selection. "
        "Submit transcript updates to POST /sessions/{id}/transcript."
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Invalid selection or threshold"},
        429: {"model": ErrorResponse, "description": "Too many concurrent sessions"},
        502: {"model": ErrorResponse, "description": "Quran text API failure"},
    },
)
async def create_session(body: CreateSessionRequest) -> SessionResponse:
    threshold = _threshold_or_400(body.threshold, SESSION_THRESHOLD)

    selection = {}
    if body.reference_text:
        reference_text = body.reference_text
    elif body.surah is not None:
        verses = await _fetch_verses(body.surah, body.start_verse, body.end_verse)
        if body.whole_range:
            reference_text = " ".join(verses)
        elif 1 <= body.verse_index <= len(verses):
            reference_text = verses[body.verse_index - 1]
        else:
            raise HTTPException(
                status_code=400,
                detail="verse_index must be between 1 and {}".format(len(verses)),
            )
        selection = {
            "surah": body.surah,
            "start_verse": body.start_verse,
            "end_verse": body.end_verse,
            "verse_index": None if body.whole_range else body.verse_index,
        }
    else:
        raise HTTPException(
            status_code=400,
            detail="Either reference_text or surah is required",
        )

    session = RecitationSession(reference_text, threshold=threshold)
    try:
        stored = session_store.create_session(session, selection)
    except ValueError as exc:
        raise HTTPException(status_code=429, detail=str(exc))

    return _session_to_response(stored)


@app.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    tags=["sessions"],
    summary="Get session state",
    description="Reference words, threshold and the latest accepted update.",
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def get_session(session_id: str) -> SessionResponse:
    return _session_to_response(_get_stored_or_404(session_id))


@app.post(
    "/sessions/{session_id}/transcript",
    response_model=TranscriptUpdateResponse,
    tags=["sessions"],
    summary="Submit a transcript update",
    description=(
        "Grade the full transcript so far against the session reference. "
        "If a newer update was accepted while this one was being graded, "
        "the result is returned with accepted=false and not stored."
    ),
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
def submit_transcript(session_id: str, body: TranscriptUpdateRequest) -> TranscriptUpdateResponse:
    stored = session_store.touch(session_id)
    if stored is None:
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))

    session = stored.session
    sequence = session.begin()
    update = session.evaluate(body.transcript, sequence)
    accepted = session.submit(update)

    return TranscriptUpdateResponse(
        accepted=accepted,
        update=_update_to_model(update),
        complete=session.is_complete,
    )


@app.get(
    "/sessions/{session_id}/report",
    tags=["sessions"],
    summary="Render the latest update as a report",
    description=(
        "Render the latest accepted update with one of the registered report "
        "formats ({}).".format(", ".join(sorted(REPORTERS.keys())))
    ),
    responses={
        400: {"model": ErrorResponse, "description": "Unknown report format"},
        404: {"model": ErrorResponse, "description": "Session not found"},
        409: {"model": ErrorResponse, "description": "No transcript submitted yet"},
    },
)
async def get_session_report(
    session_id: str,
    report_format: Annotated[
        str,
        Query(alias="format", description="Report format key."),
    ] = "json",
) -> Response:
    if report_format not in REPORTERS:
        available = ", ".join(sorted(REPORTERS.keys()))
        raise HTTPException(
            status_code=400,
            detail="Unknown report format '{}'. Available: {}".format(report_format, available),
        )

    latest = _get_stored_or_404(session_id).session.latest
    if latest is None:
        raise HTTPException(status_code=409, detail="No transcript has been submitted yet")

    output = REPORTERS[report_format]().render(latest)[0]
    return Response(content=output.content, media_type=output.media_type)


@app.delete(
    "/sessions/{session_id}",
    status_code=204,
    tags=["sessions"],
    summary="Delete a session",
    responses={
        404: {"model": ErrorResponse, "description": "Session not found"},
    },
)
async def delete_session(session_id: str) -> Response:
    if not session_store.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found: {}".format(session_id))
    return Response(status_code=204)


# ---------------------------------------------------------------------------
# Endpoints: Health
# ---------------------------------------------------------------------------


@app.get(
    "/health",
    response_model=HealthResponse,
    tags=["health"],
    summary="Health check",
    description="Liveness and readiness check for load balancers and orchestrators.",
)
async def health_check() -> HealthResponse:
    return HealthResponse(status="ok", version=__version__)


def run_api():
    """Entry point for the recitation-api console script."""
    import uvicorn

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    uvicorn.run(app, host=API_HOST, port=API_PORT, log_level=LOG_LEVEL.lower())
