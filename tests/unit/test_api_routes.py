import random

import pytest
from fastapi.testclient import TestClient

from agents.qg.selector import QuestionSelector
from api import routes
from api_server import app
from graph.machine import InterviewMachine
from observability.tracing import PerformanceMonitor
from storage.session_store import SessionStore

STRONG_ANSWER = (
    "At my previous company I built a dashboard where useMemo and useCallback stopped the component "
    "tree re-rendering, and render time dropped by 50%."
)


@pytest.fixture()
def client():
    machine = InterviewMachine(selector=QuestionSelector(rng=random.Random(0)), store=SessionStore())
    app.dependency_overrides[routes.get_machine] = lambda: machine
    with TestClient(app) as test_client:
        test_client.machine = machine
        yield test_client
    app.dependency_overrides.clear()


def test_start_answer_continue_cycle(client):
    started = client.post("/api/interview/start", json={"candidate_name": "Ada"})
    assert started.status_code == 200
    body = started.json()
    assert body["state"] == "active"
    assert body["question"]["difficulty"] == "intermediate"
    assert body["session"]["candidateName"] == "Ada"
    assert body["time_remaining_seconds"] == 20 * 60

    answered = client.post("/api/interview/answer", json={"answer": STRONG_ANSWER}).json()
    assert answered["state"] == "ai-assist"
    assert answered["ui_messages"][0]["text"].startswith("Response accepted:")

    continued = client.post("/api/interview/continue").json()
    assert continued["state"] == "active"
    assert continued["question"]["id"] != body["question"]["id"]


def test_weak_answer_moves_to_pressure(client):
    client.post("/api/interview/start", json={"candidate_name": "Ada"})
    body = client.post("/api/interview/answer", json={"answer": "no idea"}).json()
    assert body["state"] == "pressure"
    assert body["follow_up_prompt"]
    assert body["follow_up_seconds_remaining"] == 180
    assert body["ui_messages"][0]["text"] == body["follow_up_prompt"]


def test_blank_name_is_422(client):
    assert client.post("/api/interview/start", json={"candidate_name": " "}).status_code == 422


def test_answer_before_start_is_409(client):
    assert client.post("/api/interview/answer", json={"answer": "hello there"}).status_code == 409


def test_continue_outside_assist_is_409(client):
    assert client.post("/api/interview/continue").status_code == 409


def test_state_and_summary(client):
    client.post("/api/interview/start", json={"candidate_name": "Ada"})
    client.post("/api/interview/answer", json={"answer": STRONG_ANSWER})
    state = client.get("/api/interview/state").json()
    assert state["has_stored_session"] in (True, False)
    summary = client.get("/api/interview/summary").json()
    assert summary["report"]["totalAnswered"] == 1
    assert summary["report"]["strongRate"] == 100


def test_restart_returns_to_landing(client):
    client.post("/api/interview/start", json={"candidate_name": "Ada"})
    body = client.post("/api/interview/restart").json()
    assert body["state"] == "landing"
    assert body["session"]["responses"] == []


def test_resume_without_snapshot_is_404(client):
    assert client.post("/api/interview/resume").status_code == 404


def test_discard_and_tick(client):
    client.post("/api/interview/start", json={"candidate_name": "Ada"})
    assert client.post("/api/interview/tick").json()["state"] == "active"
    assert client.post("/api/interview/discard").status_code == 200


def test_health(client):
    body = client.get("/api/health").json()
    assert body["status"] == "ok"
    assert body["timings"] == {}


def test_health_reports_timings():
    monitor = PerformanceMonitor()
    monitor.record("evaluate_answer", 12.0)
    monitor.record("evaluate_answer", 4.0)
    machine = InterviewMachine(store=SessionStore(), monitor=monitor)
    app.dependency_overrides[routes.get_machine] = lambda: machine
    try:
        with TestClient(app) as test_client:
            timings = test_client.get("/api/health").json()["timings"]
    finally:
        app.dependency_overrides.clear()
    assert timings["evaluate_answer"] == {"avg": 8.0, "min": 4.0, "max": 12.0, "count": 2}
