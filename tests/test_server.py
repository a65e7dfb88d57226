"""REST API tests using FastAPI's TestClient.

The app runs its real lifespan (ruleset, graph, registry) with a 1 ms stage
interval so the processing interstitial completes quickly on the client's
event loop; tests poll the session until the outcome appears.  Leads go to
an in-memory sink injected through ``create_app``.
"""

import time

import pytest
from fastapi.testclient import TestClient

from tariff_screener.leads import DEFAULT_FORM_FIELDS, FormLeadSink, MemoryLeadSink

from screener_server.app import build_lead_sink, create_app
from screener_server.config import ServerSettings, load_settings
from screener_server.errors import status_for_value_error
from screener_server.registry import SessionRegistry

API = "/api/v1"


# =====================================================================
# Fixtures
# =====================================================================


@pytest.fixture
def sink():
    return MemoryLeadSink()


@pytest.fixture
def client(sink):
    """Lenient server with fast processing."""
    app = create_app(ServerSettings(stage_interval_ms=1), lead_sink=sink)
    with TestClient(app) as c:
        yield c


@pytest.fixture
def strict_client(sink):
    app = create_app(ServerSettings(stage_interval_ms=1, strict_transitions=True), lead_sink=sink)
    with TestClient(app) as c:
        yield c


def new_session(client, session_id=None) -> str:
    body = {"session_id": session_id} if session_id else None
    resp = client.post(f"{API}/sessions", json=body)
    assert resp.status_code == 201, resp.text
    return resp.json()["session_id"]


def answer(client, sid, question, code):
    resp = client.post(f"{API}/sessions/{sid}/answer", json={"question": question, "code": code})
    assert resp.status_code == 200, resp.text
    return resp.json()


def advance(client, sid, target):
    return client.post(f"{API}/sessions/{sid}/advance", json={"target": target})


def wait_for_screen(client, sid, screen, timeout=5.0):
    """Poll the session until it shows ``screen``."""
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        view = client.get(f"{API}/sessions/{sid}").json()["view"]
        if view["screen"] == screen:
            return view
        time.sleep(0.01)
    raise AssertionError(f"Session {sid} never reached {screen}")


def walk_to_outcome(client, sid, codes=("A", "A", "B", "C")):
    assert advance(client, sid, "qualification").status_code == 200
    for q, code in zip(["qualification", "supply_chain", "documents", "timeline"], codes):
        view = answer(client, sid, q, code)
    assert view["screen"] in ("processing", "outcome")
    return wait_for_screen(client, sid, "outcome")


# =====================================================================
# Health and sessions
# =====================================================================


class TestSessions:

    def test_health(self, client):
        new_session(client)
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok", "sessions": 1}

    def test_create_starts_on_entry(self, client):
        resp = client.post(f"{API}/sessions")
        assert resp.status_code == 201
        data = resp.json()
        assert data["session_id"]
        view = data["view"]
        assert view["screen"] == "entry"
        assert view["kind"] == "entry"
        assert view["progress"] == 0
        assert view["answers"] == {}
        assert view["actions"] == [{"target": "qualification", "label": "Let's Begin"}]

    def test_create_with_id_and_conflict(self, client):
        assert new_session(client, "tab-1") == "tab-1"
        resp = client.post(f"{API}/sessions", json={"session_id": "tab-1"})
        assert resp.status_code == 409
        assert resp.json()["detail"] == "Request conflicts with the current session state"

    def test_unknown_session_404(self, client):
        resp = client.get(f"{API}/sessions/nope")
        assert resp.status_code == 404
        assert resp.json() == {"detail": "Resource not found"}
        assert client.post(f"{API}/sessions/nope/answer", json={"question": "q", "code": "A"}).status_code == 404

    def test_delete(self, client):
        sid = new_session(client)
        assert client.delete(f"{API}/sessions/{sid}").status_code == 204
        assert client.get(f"{API}/sessions/{sid}").status_code == 404
        assert client.delete(f"{API}/sessions/{sid}").status_code == 404


# =====================================================================
# Screener flow
# =====================================================================


class TestFlow:

    def test_full_flow_to_outcome(self, client):
        sid = new_session(client)
        view = walk_to_outcome(client, sid)
        assert view["progress"] == 100
        assert [t["id"] for t in view["recommendation_tracks"]] == ["fast_track", "protective_track"]
        assert view["status_message"] is None

    def test_question_view_payload(self, client):
        sid = new_session(client)
        view = advance(client, sid, "qualification").json()
        assert view["screen"] == "qualification"
        assert view["progress"] == 15
        assert [o["code"] for o in view["question"]["options"]] == ["A", "B", "C", "D"]

    def test_off_ramp(self, client):
        sid = new_session(client)
        advance(client, sid, "qualification")
        view = answer(client, sid, "qualification", "C")
        assert view["screen"] == "fallback_qualification"
        assert view["kind"] == "terminal"
        view = advance(client, sid, "entry").json()
        assert view["screen"] == "entry"

    def test_lenient_invalid_answer_is_ignored(self, client):
        sid = new_session(client)
        advance(client, sid, "qualification")
        view = answer(client, sid, "qualification", "Z")
        assert view["screen"] == "qualification"
        assert view["answers"] == {}

    def test_strict_invalid_answer_400(self, strict_client):
        sid = new_session(strict_client)
        resp = strict_client.post(
            f"{API}/sessions/{sid}/answer", json={"question": "timeline", "code": "A"}
        )
        assert resp.status_code == 400
        assert resp.json() == {"detail": "Invalid transition", "screen": "entry"}

    def test_strict_invalid_advance_400(self, strict_client):
        sid = new_session(strict_client)
        resp = advance(strict_client, sid, "outcome")
        assert resp.status_code == 400

    def test_reset(self, client):
        sid = new_session(client)
        advance(client, sid, "qualification")
        answer(client, sid, "qualification", "A")
        resp = client.post(f"{API}/sessions/{sid}/reset")
        assert resp.status_code == 200
        assert resp.json()["screen"] == "entry"
        assert resp.json()["answers"] == {}

    def test_render(self, client):
        sid = new_session(client)
        walk_to_outcome(client, sid, codes=("A", "A", "A", "A"))
        resp = client.get(f"{API}/sessions/{sid}/render")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/plain")
        assert "Your Aurora Recovery Dashboard" in resp.text
        assert "[GREEN] Fast Track" in resp.text


# =====================================================================
# Lead capture
# =====================================================================


class TestLeads:

    def test_submit_success(self, client, sink):
        sid = new_session(client)
        walk_to_outcome(client, sid)
        advance(client, sid, "lead_capture")
        resp = client.post(f"{API}/sessions/{sid}/lead", json={"email": "ops@importer.example"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["ok"] is True
        assert data["view"]["screen"] == "entry"
        assert len(sink.leads) == 1
        assert sink.leads[0].timeline == "C"

    def test_submit_invalid_email(self, client, sink):
        sid = new_session(client)
        walk_to_outcome(client, sid)
        advance(client, sid, "lead_capture")
        resp = client.post(f"{API}/sessions/{sid}/lead", json={"email": "nope"})
        assert resp.status_code == 200
        data = resp.json()
        assert data["ok"] is False
        assert data["error"]
        assert data["view"]["screen"] == "lead_capture"
        assert sink.leads == []

    def test_submit_off_screen_409(self, client):
        sid = new_session(client)
        resp = client.post(f"{API}/sessions/{sid}/lead", json={"email": "ops@importer.example"})
        assert resp.status_code == 409

    @pytest.mark.parametrize("message, status", [
        ("Session 'x' already exists", 409),
        ("Session 'x' not found", 404),
        ("Lead submission is only valid during lead_capture", 409),
        ("Lead submission already in progress for this session", 409),
        ("something else", 400),
    ])
    def test_value_error_status(self, message, status):
        assert status_for_value_error(ValueError(message)) == status


# =====================================================================
# Reference data
# =====================================================================


class TestReference:

    def test_screens(self, client):
        screens = client.get(f"{API}/reference/screens").json()
        by_id = {s["id"]: s for s in screens}
        assert len(screens) == 11
        assert by_id["timeline"] == {"id": "timeline", "kind": "question", "progress": 75}
        assert by_id["fallback_supplier"]["kind"] == "terminal"

    def test_questions(self, client):
        questions = client.get(f"{API}/reference/questions").json()
        assert [q["key"] for q in questions] == ["qualification", "supply_chain", "documents", "timeline"]

    def test_question_by_key(self, client):
        resp = client.get(f"{API}/reference/questions/documents")
        assert resp.status_code == 200
        assert len(resp.json()["checklist"]) == 4
        assert client.get(f"{API}/reference/questions/nope").status_code == 404

    def test_graph(self, client):
        edges = client.get(f"{API}/reference/graph").json()
        kinds = {e["kind"] for e in edges}
        assert kinds == {"answer", "auto", "manual", "reset"}


# =====================================================================
# Configuration and registry
# =====================================================================


class TestConfig:

    def test_defaults(self, monkeypatch):
        for name in ("SERVER_PORT", "SCREENER_STRICT_TRANSITIONS", "SCREENER_LEAD_FORM_URL",
                     "SCREENER_LEAD_FORM_FIELDS", "SCREENER_STAGE_INTERVAL_MS"):
            monkeypatch.delenv(name, raising=False)
        s = load_settings()
        assert s.port == 8080
        assert s.strict_transitions is False
        assert s.stage_interval_ms == 1200
        assert s.lead_form_url is None
        assert s.lead_form_fields == DEFAULT_FORM_FIELDS

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("SERVER_PORT", "9000")
        monkeypatch.setenv("SERVER_CORS_ORIGINS", "http://a.test, http://b.test")
        monkeypatch.setenv("SERVER_LOG_LEVEL", "debug")
        monkeypatch.setenv("SCREENER_STRICT_TRANSITIONS", "true")
        monkeypatch.setenv("SCREENER_STAGE_INTERVAL_MS", "50")
        monkeypatch.setenv("SCREENER_LEAD_FORM_URL", "https://forms.example.com/formResponse")
        monkeypatch.setenv("SCREENER_LEAD_FORM_FIELDS", "email=entry.9,bogus")
        s = load_settings()
        assert s.port == 9000
        assert s.cors_origins == ["http://a.test", "http://b.test"]
        assert s.log_level == "DEBUG"
        assert s.strict_transitions is True
        assert s.stage_interval_ms == 50
        assert s.lead_form_fields["email"] == "entry.9"
        assert s.lead_form_fields["timeline"] == DEFAULT_FORM_FIELDS["timeline"]
        assert isinstance(build_lead_sink(s), FormLeadSink)

    def test_memory_sink_without_url(self):
        assert isinstance(build_lead_sink(ServerSettings()), MemoryLeadSink)


class FakeController:
    def __init__(self):
        self.disposed = False

    def dispose(self):
        self.disposed = True


class TestRegistry:

    def test_ttl_eviction(self):
        now = [0.0]
        registry = SessionRegistry(FakeController, ttl_seconds=10, clock=lambda: now[0])
        sid, ctrl = registry.create()
        now[0] = 5.0
        assert registry.get(sid) is ctrl
        now[0] = 14.0
        assert registry.get(sid) is ctrl, "get() refreshes the idle timer"
        now[0] = 30.0
        assert registry.get(sid) is None
        assert ctrl.disposed

    def test_lru_cap(self):
        registry = SessionRegistry(FakeController, ttl_seconds=0, max_sessions=2)
        a, ctrl_a = registry.create("a")
        registry.create("b")
        registry.get("a")
        registry.create("c")
        assert registry.get("b") is None, "Least recently used session is evicted"
        assert registry.get("a") is ctrl_a
        assert len(registry) == 2

    def test_require_missing(self):
        registry = SessionRegistry(FakeController)
        with pytest.raises(ValueError, match="not found"):
            registry.require("x")
