from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from idea_forge.flow import Loading, ProfileForm
from idea_forge.ideas import IdeaMode
from idea_forge.memory import FlowSessionStore
from idea_forge.schemas import Profile
from tests.fakes import PROFILE, FakeOpenAI, raw_idea, raw_ideas, status_error, tool_response


def _start_session(client: TestClient, auth_headers) -> str:
    response = client.post("/sessions", headers=auth_headers)
    assert response.status_code == 201
    assert response.json()["state"]["screen"] == "hero"
    return response.json()["sessionId"]


def _send(client: TestClient, session_id: str, auth_headers, **event):
    return client.post(f"/sessions/{session_id}/events", json=event, headers=auth_headers)


def test_healthcheck(client: TestClient) -> None:
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


@pytest.mark.parametrize("path", ["/generate-ideas", "/build-business"])
def test_cors_preflight(client: TestClient, path: str) -> None:
    response = client.options(
        path,
        headers={
            "Origin": "https://ideas.example.com",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, x-client-info, apikey, content-type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
    allowed = response.headers["access-control-allow-headers"].lower()
    for header in ("authorization", "x-client-info", "apikey", "content-type"):
        assert header in allowed


def test_error_responses_carry_cors_headers(client: TestClient) -> None:
    response = client.post(
        "/generate-ideas",
        json={"profile": PROFILE},
        headers={"Origin": "https://ideas.example.com"},
    )

    assert response.status_code == 401
    assert response.headers["access-control-allow-origin"] == "*"


def test_unexpected_error_is_generic_500_with_cors_headers(
    client: TestClient, fake_openai: FakeOpenAI, auth_headers
) -> None:
    fake_openai.queue(RuntimeError("socket exploded"))

    response = client.post(
        "/generate-ideas",
        json={"profile": PROFILE},
        headers={**auth_headers, "Origin": "https://ideas.example.com"},
    )

    assert response.status_code == 500
    assert response.json() == {"error": "Unknown error"}
    assert response.headers["access-control-allow-origin"] == "*"


def test_profile_options(client: TestClient) -> None:
    response = client.get("/options/profile")

    assert response.status_code == 200
    data = response.json()
    assert [item["value"] for item in data["expertise"]] == ["beginner", "intermediate", "experienced", "serial"]
    assert [item["value"] for item in data["budget"]] == ["$0-$100", "$100-$500", "$500-$1000", "$1000-$2000"]


def test_generate_flow_end_to_end(client: TestClient, fake_openai: FakeOpenAI, auth_headers) -> None:
    fake_openai.queue(tool_response({"ideas": raw_ideas(6)}))
    session_id = _start_session(client, auth_headers)

    assert _send(client, session_id, auth_headers, type="choose_generate").json()["state"]["screen"] == (
        "profile-generate"
    )
    response = _send(client, session_id, auth_headers, type="submit_profile", profile=PROFILE)

    assert response.status_code == 200
    state = response.json()["state"]
    assert state["screen"] == "results"
    assert [idea["id"] for idea in state["ideas"]] == ["1", "2", "3", "4", "5", "6"]
    assert client.get(f"/sessions/{session_id}", headers=auth_headers).json()["state"] == state


def test_validate_flow_end_to_end(client: TestClient, fake_openai: FakeOpenAI, auth_headers) -> None:
    fake_openai.queue(tool_response({"ideas": raw_ideas(4)}))
    session_id = _start_session(client, auth_headers)

    _send(client, session_id, auth_headers, type="choose_validate")
    validator = _send(client, session_id, auth_headers, type="submit_profile", profile=PROFILE).json()["state"]
    assert validator["screen"] == "validator"
    assert fake_openai.calls == []

    state = _send(client, session_id, auth_headers, type="submit_idea", userIdea="Dog walking app").json()["state"]
    assert state["screen"] == "results"
    assert state["userIdea"] == "Dog walking app"
    assert len(state["ideas"]) == 4


def test_failed_regenerate_keeps_displayed_ideas(client: TestClient, fake_openai: FakeOpenAI, auth_headers) -> None:
    fake_openai.queue(tool_response({"ideas": raw_ideas(6)}), status_error(429))
    session_id = _start_session(client, auth_headers)
    _send(client, session_id, auth_headers, type="choose_generate")
    before = _send(client, session_id, auth_headers, type="submit_profile", profile=PROFILE).json()["state"]

    response = _send(client, session_id, auth_headers, type="regenerate")

    assert response.status_code == 429
    assert "error" in response.json()
    after = client.get(f"/sessions/{session_id}", headers=auth_headers).json()["state"]
    assert after == before


def test_regenerate_replaces_ideas(client: TestClient, fake_openai: FakeOpenAI, auth_headers) -> None:
    fresh = [raw_idea(index + 20, viabilityScore=70) for index in range(6)]
    fake_openai.queue(tool_response({"ideas": raw_ideas(6)}), tool_response({"ideas": fresh}))
    session_id = _start_session(client, auth_headers)
    _send(client, session_id, auth_headers, type="choose_generate")
    before = _send(client, session_id, auth_headers, type="submit_profile", profile=PROFILE).json()["state"]

    after = _send(client, session_id, auth_headers, type="regenerate").json()["state"]

    assert after["ideas"][0]["id"] == before["ideas"][0]["id"] == "1"
    assert after["ideas"][0]["name"] == fresh[0]["name"]
    assert after["batchId"] != before["batchId"]


def test_failed_first_generation_returns_to_profile_form(
    client: TestClient, fake_openai: FakeOpenAI, auth_headers
) -> None:
    fake_openai.queue(status_error(402))
    session_id = _start_session(client, auth_headers)
    _send(client, session_id, auth_headers, type="choose_generate")

    response = _send(client, session_id, auth_headers, type="submit_profile", profile=PROFILE)

    assert response.status_code == 402
    state = client.get(f"/sessions/{session_id}", headers=auth_headers).json()["state"]
    assert state["screen"] == "profile-generate"


def test_illegal_event_is_conflict(client: TestClient, auth_headers) -> None:
    session_id = _start_session(client, auth_headers)

    response = _send(client, session_id, auth_headers, type="regenerate")

    assert response.status_code == 409
    assert "error" in response.json()


def test_unknown_session(client: TestClient, auth_headers) -> None:
    response = client.get("/sessions/missing", headers=auth_headers)

    assert response.status_code == 404


def test_sessions_require_bearer(client: TestClient) -> None:
    assert client.post("/sessions").status_code == 401


def test_completion_after_a_new_load_started_is_discarded(
    client: TestClient, fake_openai: FakeOpenAI, auth_headers
) -> None:
    session_id = _start_session(client, auth_headers)
    _send(client, session_id, auth_headers, type="choose_validate")
    _send(client, session_id, auth_headers, type="submit_profile", profile=PROFILE)
    sessions = client.app.state.flow_sessions
    gardening = Profile.model_validate({**PROFILE, "interests": "gardening"})
    newer = Loading(mode=IdeaMode.GENERATE, profile=gardening, return_to=ProfileForm(IdeaMode.GENERATE))

    def navigate_away_then_answer():
        # The user went back and started a generate run while validation was in flight.
        sessions.set(session_id, "test-token", newer)
        return tool_response({"ideas": raw_ideas(4)})

    fake_openai.queue(navigate_away_then_answer)

    response = _send(client, session_id, auth_headers, type="submit_idea", userIdea="Dog walking app")

    assert response.status_code == 200
    assert response.json()["state"]["screen"] == "loading"
    assert sessions.get(session_id, "test-token") is newer


def test_deleted_session_is_gone(client: TestClient, auth_headers) -> None:
    session_id = _start_session(client, auth_headers)

    assert client.delete(f"/sessions/{session_id}", headers=auth_headers).status_code == 204
    assert client.get(f"/sessions/{session_id}", headers=auth_headers).status_code == 404
    assert client.delete(f"/sessions/{session_id}", headers=auth_headers).status_code == 404


def test_sessions_are_private_to_their_credential(client: TestClient, auth_headers) -> None:
    session_id = _start_session(client, auth_headers)
    other_headers = {"Authorization": "Bearer someone-else"}

    assert client.get(f"/sessions/{session_id}", headers=other_headers).status_code == 404
    assert _send(client, session_id, other_headers, type="choose_generate").status_code == 404
    assert client.delete(f"/sessions/{session_id}", headers=other_headers).status_code == 404
    assert client.get(f"/sessions/{session_id}", headers=auth_headers).json()["state"]["screen"] == "hero"


def test_flow_sessions_are_bounded(client: TestClient, auth_headers) -> None:
    client.app.state.flow_sessions = FlowSessionStore(max_sessions=2)

    first, second, third = (_start_session(client, auth_headers) for _ in range(3))

    assert client.get(f"/sessions/{first}", headers=auth_headers).status_code == 404
    assert client.get(f"/sessions/{second}", headers=auth_headers).status_code == 200
    assert client.get(f"/sessions/{third}", headers=auth_headers).status_code == 200
