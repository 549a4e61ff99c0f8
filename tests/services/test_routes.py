"""API Routes - end-to-end tests through FastAPI with a file-backed SQLite ledger.

Tests cover:
    - Health and readiness checks
    - Submission -> form accept -> interview -> whitelist grant over HTTP
    - Side effects executed against the injected grant sink
    - Error envelopes (validation 400, unauthorized 403, not found 404)
    - A pass whose ledger write fails is still reported and granted
    - Recaps and the generic event endpoint

Design Decisions:
    - The app lifespan is entered explicitly (ASGITransport does not run it)
"""

import pytest
from httpx import ASGITransport, AsyncClient

from applicant_review.config import Settings
from applicant_review.core.errors import StorageFailureError
from applicant_review.main import create_app


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        database_url=f"sqlite+aiosqlite:///{tmp_path}/api.db",
        interview_questions=[f"Question {i + 1}?" for i in range(15)],
        interview_role_id="role-interview",
        whitelist_role_id="role-wl",
        session_idle_timeout_seconds=0,
        log_format="text",
    )


@pytest.fixture
def app(settings, sink):
    return create_app(settings, sink=sink)


@pytest.fixture
async def client(app):
    async with app.router.lifespan_context(app):
        async with AsyncClient(
            transport=ASGITransport(app=app), base_url="http://test",
        ) as c:
            yield c


async def _submit(client, applicant_id="u1", ref="m1", **fields):
    return await client.post("/api/v1/submissions", json={
        "applicant_id": applicant_id, "submission_ref": ref, **fields,
    })


# ─── Health ──────────────────────────────────────────────────────

async def test_liveness(client):
    res = await client.get("/api/v1/health/")
    assert res.status_code == 200
    assert res.json()["status"] == "healthy"


async def test_readiness_reports_database(client):
    res = await client.get("/api/v1/health/ready")
    assert res.status_code == 200
    assert res.json()["checks"]["database"] == "healthy"


# ─── Submission and decision ─────────────────────────────────────

async def test_faction_choice_then_submission(client):
    res = await client.post("/api/v1/applicants/u1/faction", json={"faction": "Suna"})
    assert res.status_code == 200
    res = await _submit(client, identity="Gaara")
    assert res.status_code == 201
    body = res.json()
    assert body["ok"] is True
    assert body["data"]["record"]["faction"] == "Suna"
    assert body["effects"][0]["delivered"] is True


async def test_submission_validation_error(client):
    res = await client.post("/api/v1/submissions", json={"applicant_id": "u1"})
    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_accept_grants_interview_role(client, sink):
    await _submit(client)
    res = await client.post(
        "/api/v1/submissions/u1/m1/decision",
        json={"reviewer_id": "r1", "decision": "accepted"},
    )
    assert res.status_code == 200
    assert res.json()["data"]["accepted_today"] == 1
    assert sink.calls == [("u1", "role-interview")]


async def test_unknown_decision_rejected(client):
    res = await client.post(
        "/api/v1/submissions/u1/m1/decision",
        json={"reviewer_id": "r1", "decision": "maybe"},
    )
    assert res.status_code == 400


async def test_manual_grant(client, sink):
    res = await client.post("/api/v1/grants/u7", json={"reviewer_id": "staff"})
    assert res.status_code == 200
    assert sink.calls == [("u7", "role-wl")]


# ─── Interview ───────────────────────────────────────────────────

async def test_full_interview_pass(client, sink):
    await _submit(client)
    res = await client.post("/api/v1/interviews", json={
        "target_applicant_id": "u1", "reviewer_id": "r1", "session_id": "s1",
    })
    assert res.status_code == 201

    for i in range(15):
        res = await client.post("/api/v1/interviews/s1/answers", json={
            "reviewer_id": "r1", "question_index": i, "value": i < 11,
        })
        assert res.status_code == 200
    body = res.json()
    assert body["data"]["completed"] is True
    assert body["data"]["result"] == {
        "session_id": "s1", "target_applicant_id": "u1", "reviewer_id": "r1",
        "score": 11, "total": 15, "pass": True, "answered": 15,
    }
    assert body["data"]["record"]["status"] == "accepted_final"
    assert sink.calls == [("u1", "role-wl")]

    res = await client.get("/api/v1/interviews/s1")
    assert res.status_code == 404
    assert res.json()["error"]["code"] == "SESSION_NOT_FOUND"


async def test_interview_wrong_reviewer_forbidden(client):
    await client.post("/api/v1/interviews", json={
        "target_applicant_id": "u1", "reviewer_id": "r1", "session_id": "s1",
    })
    res = await client.post("/api/v1/interviews/s1/answers", json={
        "reviewer_id": "r2", "question_index": 0, "value": True,
    })
    assert res.status_code == 403
    assert res.json()["error"]["code"] == "UNAUTHORIZED_REVIEWER"


async def test_interview_paging_and_finalize(client, sink):
    await client.post("/api/v1/interviews", json={
        "target_applicant_id": "u1", "reviewer_id": "r1", "session_id": "s1",
    })
    res = await client.post("/api/v1/interviews/s1/page", json={"reviewer_id": "r1", "delta": 1})
    assert res.json()["data"]["session"]["page"] == 1
    res = await client.post("/api/v1/interviews/s1/page", json={"reviewer_id": "r1", "delta": 3})
    assert res.status_code == 400

    view = await client.get("/api/v1/interviews/s1")
    assert view.json()["data"]["session"]["page_start"] == 4

    res = await client.post("/api/v1/interviews/s1/finalize", json={"reviewer_id": "r1"})
    assert res.json()["data"]["result"]["pass"] is False
    assert sink.calls == []


# ─── Recaps and events ───────────────────────────────────────────

async def test_daily_and_weekly_recaps(client):
    await client.post("/api/v1/applicants/u1/faction", json={"faction": "Konoha"})
    await _submit(client)
    await client.post(
        "/api/v1/submissions/u1/m1/decision",
        json={"reviewer_id": "r1", "decision": "rejected"},
    )
    daily = (await client.get("/api/v1/recaps/daily")).json()["data"]
    assert daily["by_faction"] == {"Konoha": 1, "Suna": 0, "Other": 0}
    assert daily["treated"] == 1
    weekly = (await client.get("/api/v1/recaps/weekly")).json()["data"]
    assert weekly == {"per_reviewer": {"r1": 1}, "total": 1}


async def test_daily_recap_for_past_date_is_empty(client):
    await _submit(client)
    res = await client.get("/api/v1/recaps/daily", params={"date": "2000-01-01"})
    assert res.json()["data"]["total"] == 0


async def test_reviewer_stats_invalid_stage(client):
    res = await client.get("/api/v1/recaps/reviewers/r1", params={"stage": "written"})
    assert res.status_code == 400
    assert res.json()["reason"] == "INVALID_STAGE"


async def test_event_endpoint_without_side_effects(client, sink):
    res = await client.post("/api/v1/events", json={
        "event": "grant",
        "payload": {"applicant_id": "u1", "reviewer_id": "staff"},
        "execute_side_effects": False,
    })
    assert res.status_code == 200
    assert res.json()["side_effects"][0]["type"] == "grant_role"
    assert sink.calls == []


async def test_event_endpoint_unknown_event(client):
    res = await client.post("/api/v1/events", json={"event": "nope"})
    assert res.status_code == 400
    assert res.json()["reason"] == "UNKNOWN_EVENT"


async def test_get_submission_record(client):
    await _submit(client, faction="Suna")
    res = await client.get("/api/v1/submissions/u1/m1")
    assert res.status_code == 200
    assert res.json()["data"]["record"]["faction"] == "Suna"

    missing = await client.get("/api/v1/submissions/u1/nope")
    assert missing.status_code == 404
    assert missing.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_pass_is_granted_even_when_ledger_write_fails(app, client, sink, monkeypatch):
    await client.post("/api/v1/interviews", json={
        "target_applicant_id": "u1", "reviewer_id": "r1", "session_id": "s1",
    })
    for i in range(14):
        await client.post("/api/v1/interviews/s1/answers", json={
            "reviewer_id": "r1", "question_index": i, "value": True,
        })

    async def failing_grant_final(applicant_id, reviewer_id):
        raise StorageFailureError("disk unavailable", "write")

    monkeypatch.setattr(app.state.services.ledger, "mark_grant_final", failing_grant_final)
    res = await client.post("/api/v1/interviews/s1/answers", json={
        "reviewer_id": "r1", "question_index": 14, "value": True,
    })
    assert res.status_code == 503
    body = res.json()
    assert body["error"]["code"] == "STORAGE_FAILURE"
    assert body["data"]["result"]["pass"] is True
    assert sink.calls == [("u1", "role-wl")]
