"""Tests for the FastAPI recitation checker API.

WHY: Validates every endpoint's happy path and error mapping: 400 for
bad input, 404 for unknown sessions, 409 before any transcript, 429
when the store is full, 502 when the Quran API fails.

HOW: FastAPI TestClient for synchronous in-process requests. The Quran
API is replaced by an httpx.MockTransport by patching QuranClient in
the app module.

RULES:
- The real Quran API is never called
- The session store is cleared before and after each test
"""

from __future__ import annotations

import json
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient

from recitation_checker.api.client import QuranClient
from recitation_checker.config import FATIHA_VERSES
from recitation_checker.server.app import app, session_store


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_session_store():
    """Clear all sessions before each test to ensure isolation."""
    session_store._sessions.clear()
    yield
    session_store._sessions.clear()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def fake_quran(quran_transport):
    """Patch the app's QuranClient to use a MockTransport.

    Usage: requests = fake_quran(json_body) or fake_quran(status_code=500)
    """
    patchers = []

    def _install(json_body=None, status_code=200, text=""):
        transport, requests = quran_transport(json_body, status_code, text)
        patcher = patch(
            "recitation_checker.server.app.QuranClient",
            new=lambda: QuranClient(base_url="https://quran.test/v1", transport=transport),
        )
        patcher.start()
        patchers.append(patcher)
        return requests

    yield _install

    for patcher in patchers:
        patcher.stop()


# ---------------------------------------------------------------------------
# GET /verses
# ---------------------------------------------------------------------------


class TestGetVerses:
    def test_fetch_range(self, client, fake_quran, surah_payload):
        requests = fake_quran(surah_payload(list(FATIHA_VERSES[1:3]), first_verse=2))
        resp = client.get("/verses", params={"surah": 1, "startVerse": 2, "endVerse": 3})

        assert resp.status_code == 200
        body = resp.json()
        assert body["verses"] == list(FATIHA_VERSES[1:3])
        assert body["start_verse"] == 2
        assert requests[0].url.params["offset"] == "1"
        assert requests[0].url.params["limit"] == "2"

    def test_missing_surah_is_400(self, client):
        resp = client.get("/verses")
        assert resp.status_code == 400
        assert "Surah" in resp.json()["detail"]

    def test_invalid_range_is_400(self, client, fake_quran):
        requests = fake_quran({})
        resp = client.get("/verses", params={"surah": 1, "startVerse": 9})
        assert resp.status_code == 400
        assert requests == []

    def test_upstream_error_is_502(self, client, fake_quran):
        fake_quran(status_code=500, text="down")
        resp = client.get("/verses", params={"surah": 2})
        assert resp.status_code == 502

    def test_non_json_upstream_is_502(self, client, fake_quran):
        fake_quran(text="<html>maintenance</html>")
        resp = client.get("/verses", params={"surah": 2, "startVerse": 255})
        assert resp.status_code == 502

    def test_fatiha_fallback(self, client, fake_quran):
        fake_quran({"code": 200, "data": None})
        resp = client.get("/verses", params={"surah": 1})
        assert resp.status_code == 200
        assert resp.json()["verses"] == list(FATIHA_VERSES)


# ---------------------------------------------------------------------------
# Matching endpoints
# ---------------------------------------------------------------------------


class TestMatching:
    def test_align(self, client, bismillah):
        resp = client.post("/align", json={"reference_text": bismillah, "transcript": "بسم الله"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["matched_count"] == 2
        assert body["total_words"] == 4
        assert body["threshold"] == 0.7
        assert len(body["unmatched_words"]) == 2

    def test_align_threshold_out_of_range(self, client):
        resp = client.post(
            "/align",
            json={"reference_text": "بسم", "transcript": "بسم", "threshold": 1.5},
        )
        assert resp.status_code == 400
        assert "between 0 and 1" in resp.json()["detail"]

    def test_match_report(self, client):
        resp = client.post(
            "/match-report",
            json={"reference_text": "كتاب كتاب", "transcript": "كتاب"},
        )
        assert resp.status_code == 200
        body = resp.json()
        assert body["accuracy"] == 1.0
        assert [r["best_match"] for r in body["records"]] == ["كتاب", "كتاب"]
        assert body["all_matched"] is True

    def test_match_report_not_found(self, client):
        resp = client.post("/match-report", json={"reference_text": "بسم", "transcript": ""})
        assert resp.json()["records"][0]["best_match"] is None

    def test_match_report_threshold_out_of_range(self, client):
        resp = client.post(
            "/match-report",
            json={"reference_text": "بسم", "transcript": "بسم", "threshold": -0.1},
        )
        assert resp.status_code == 400

    def test_similarity(self, client):
        resp = client.post("/similarity", json={"word1": "أحمد", "word2": "احمد"})
        assert resp.status_code == 200
        body = resp.json()
        assert body["similarity"] == 0.9
        assert body["normalized1"] == "احمد"


# ---------------------------------------------------------------------------
# Sessions
# ---------------------------------------------------------------------------


class TestSessions:
    def test_create_from_text(self, client, bismillah):
        resp = client.post("/sessions", json={"reference_text": bismillah})
        assert resp.status_code == 201
        body = resp.json()
        assert len(body["reference_words"]) == 4
        assert body["threshold"] == 0.6
        assert body["latest"] is None
        assert body["complete"] is False

    def test_create_from_surah(self, client, fake_quran, surah_payload):
        fake_quran(surah_payload(list(FATIHA_VERSES[:2])))
        resp = client.post(
            "/sessions",
            json={"surah": 1, "start_verse": 1, "end_verse": 2, "verse_index": 2},
        )
        assert resp.status_code == 201
        body = resp.json()
        assert body["reference_text"] == FATIHA_VERSES[1]
        assert body["selection"]["surah"] == 1

    def test_create_whole_range(self, client, fake_quran, surah_payload):
        fake_quran(surah_payload(list(FATIHA_VERSES[:2])))
        resp = client.post(
            "/sessions",
            json={"surah": 1, "start_verse": 1, "end_verse": 2, "whole_range": True},
        )
        assert resp.json()["reference_text"] == " ".join(FATIHA_VERSES[:2])

    def test_create_bad_verse_index(self, client, fake_quran, surah_payload):
        fake_quran(surah_payload([FATIHA_VERSES[0]]))
        resp = client.post("/sessions", json={"surah": 1, "start_verse": 1, "verse_index": 3})
        assert resp.status_code == 400

    def test_create_without_reference(self, client):
        resp = client.post("/sessions", json={})
        assert resp.status_code == 400

    def test_create_bad_threshold(self, client, bismillah):
        resp = client.post("/sessions", json={"reference_text": bismillah, "threshold": 2})
        assert resp.status_code == 400

    def test_create_when_store_full(self, client, bismillah):
        with patch.object(session_store, "max_sessions", 0):
            resp = client.post("/sessions", json={"reference_text": bismillah})
        assert resp.status_code == 429

    def test_submit_transcripts_until_complete(self, client, bismillah, bismillah_plain):
        session_id = client.post("/sessions", json={"reference_text": bismillah}).json()["id"]

        first = client.post("/sessions/{}/transcript".format(session_id), json={"transcript": "بسم"})
        assert first.status_code == 200
        assert first.json()["accepted"] is True
        assert first.json()["complete"] is False

        second = client.post(
            "/sessions/{}/transcript".format(session_id),
            json={"transcript": bismillah_plain},
        )
        body = second.json()
        assert body["update"]["sequence"] == 2
        assert body["update"]["tier"] == "perfect"
        assert body["complete"] is True

        state = client.get("/sessions/{}".format(session_id)).json()
        assert state["complete"] is True
        assert state["latest"]["sequence"] == 2

    def test_unknown_session_is_404(self, client):
        assert client.get("/sessions/nope").status_code == 404
        assert client.post("/sessions/nope/transcript", json={"transcript": "بسم"}).status_code == 404
        assert client.get("/sessions/nope/report").status_code == 404
        assert client.delete("/sessions/nope").status_code == 404

    def test_report_before_transcript_is_409(self, client, bismillah):
        session_id = client.post("/sessions", json={"reference_text": bismillah}).json()["id"]
        assert client.get("/sessions/{}/report".format(session_id)).status_code == 409

    def test_report_formats(self, client, bismillah, bismillah_plain):
        session_id = client.post("/sessions", json={"reference_text": bismillah}).json()["id"]
        client.post("/sessions/{}/transcript".format(session_id), json={"transcript": bismillah_plain})

        json_resp = client.get("/sessions/{}/report".format(session_id))
        assert json_resp.status_code == 200
        assert json_resp.headers["content-type"].startswith("application/json")
        assert json.loads(json_resp.text)["tier"] == "perfect"

        text_resp = client.get("/sessions/{}/report".format(session_id), params={"format": "plain_text"})
        assert text_resp.headers["content-type"].startswith("text/plain")
        assert "Perfect recitation" in text_resp.text

    def test_report_unknown_format(self, client, bismillah):
        session_id = client.post("/sessions", json={"reference_text": bismillah}).json()["id"]
        resp = client.get("/sessions/{}/report".format(session_id), params={"format": "pdf"})
        assert resp.status_code == 400

    def test_delete(self, client, bismillah):
        session_id = client.post("/sessions", json={"reference_text": bismillah}).json()["id"]
        resp = client.delete("/sessions/{}".format(session_id))
        assert resp.status_code == 204
        assert client.get("/sessions/{}".format(session_id)).status_code == 404


# ---------------------------------------------------------------------------
# Health and schema
# ---------------------------------------------------------------------------


class TestHealthCheck:
    def test_health_returns_ok(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json()["status"] == "ok"


class TestOpenAPISchema:
    def test_openapi_schema_generates(self, client):
        resp = client.get("/openapi.json")
        assert resp.status_code == 200
        paths = resp.json()["paths"]
        assert "/verses" in paths
        assert "/sessions/{session_id}/transcript" in paths
