"""HTTP API tests against the FastAPI application with in-memory dependencies."""
from __future__ import annotations

from typing import Iterator

import pytest
from conftest import ScriptedModel, call
from fastapi.testclient import TestClient

from orchestra.agents.catalog import AGENTS, AgentRegistry
from orchestra.core.models import ModelResponse
from orchestra.main import app
from orchestra.orchestration.session import SessionManager
from orchestra.runtime import get_agent_registry, get_provider_registry, get_session_manager
from orchestra.services.mcp import ProviderRegistry


@pytest.fixture
def model() -> ScriptedModel:
    return ScriptedModel(
        {
            "The Conductor": [
                ModelResponse(function_calls=(call("delegate_to_agent", agent_id="code-agent", task="review"),)),
                ModelResponse(text="Review delegated and done."),
            ],
            "Code Agent": [ModelResponse(text="LGTM.")],
            "Marketing Agent": [
                ModelResponse(function_calls=(call("post_instagram_video", video_url="v", caption="c"),)),
                ModelResponse(text="Instagram is not linked yet."),
            ],
        }
    )


@pytest.fixture
def sessions(model: ScriptedModel, make_orchestrator) -> SessionManager:
    return SessionManager(make_orchestrator(model))


@pytest.fixture
def client(
    sessions: SessionManager,
    agent_registry: AgentRegistry,
    provider_registry: ProviderRegistry,
) -> Iterator[TestClient]:
    app.dependency_overrides[get_session_manager] = lambda: sessions
    app.dependency_overrides[get_provider_registry] = lambda: provider_registry
    app.dependency_overrides[get_agent_registry] = lambda: agent_registry
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client: TestClient) -> None:
    assert client.get("/health").json() == {"status": "ok"}


def test_list_and_filter_agents(client: TestClient) -> None:
    everyone = client.get("/agents").json()
    marketing = client.get("/agents", params={"category": "marketing"}).json()
    searched = client.get("/agents", params={"q": "conductor"}).json()

    assert len(everyone) == len(AGENTS)
    assert marketing and all(agent["category"] == "marketing" for agent in marketing)
    assert [agent["id"] for agent in searched] == ["supervisor-agent"]


def test_get_agent_and_unknown_agent(client: TestClient) -> None:
    seo = client.get("/agents/seo-agent").json()

    assert seo["name"] == "Growth & SEO"
    assert [tool["name"] for tool in seo["tools"]] == ["get_seo_report", "analyze_keywords"]
    assert client.get("/agents/ghost-agent").status_code == 404


def test_categories_count_agents(client: TestClient) -> None:
    categories = {item["id"]: item for item in client.get("/agents/categories").json()}

    assert categories["orchestration"]["agent_count"] == 1
    assert sum(item["agent_count"] for item in categories.values()) == len(AGENTS)


def test_link_and_unlink_provider(client: TestClient) -> None:
    linked = client.post("/providers/github/link", json={"token": "gh-token"})
    assert linked.status_code == 200
    assert linked.json()["status"] == "connected"

    statuses = {p["id"]: p["status"] for p in client.get("/providers").json()}
    assert statuses["github"] == "connected"
    assert statuses["stripe"] == "disconnected"

    unlinked = client.delete("/providers/github/link")
    assert unlinked.json()["status"] == "disconnected"


def test_link_without_body_uses_placeholder_grant(client: TestClient, provider_registry: ProviderRegistry) -> None:
    assert client.post("/providers/slack/link").status_code == 200
    assert provider_registry.get_token("slack") == "SECURE_NODE_ACCESS_GRANTED"


def test_link_unknown_provider_is_404(client: TestClient) -> None:
    assert client.post("/providers/fax_machine/link", json={"token": "x"}).status_code == 404
    assert client.delete("/providers/fax_machine/link").status_code == 404


def test_chat_returns_the_messages_of_the_turn(client: TestClient) -> None:
    response = client.post("/chat", json={"message": "review the PR", "session_id": "s1"})

    body = response.json()
    assert response.status_code == 200
    assert body["accepted"] is True
    assert body["response"] == "Review delegated and done."
    assert body["agent_id"] == "supervisor-agent"
    assert [(m["role"], m["content"]) for m in body["messages"]] == [
        ("user", "review the PR"),
        ("system", "DELEGATING: Code Agent"),
        ("assistant", "Review delegated and done."),
    ]


def test_chat_surfaces_auth_notice(client: TestClient) -> None:
    body = client.post(
        "/chat",
        json={"message": "post the teaser", "agent_id": "marketing-agent", "session_id": "s2"},
    ).json()

    notices = [m for m in body["messages"] if m["role"] == "system"]
    assert notices == [
        {
            "role": "system",
            "content": "AUTH REQUIRED: instagram",
            "agent_id": None,
            "timestamp": notices[0]["timestamp"],
            "error": True,
            "provider_id": "instagram",
            "cached": False,
        }
    ]
    assert body["response"] == "Instagram is not linked yet."


def test_chat_rejects_unknown_agent_and_empty_message(client: TestClient) -> None:
    assert client.post("/chat", json={"message": "hi", "agent_id": "ghost-agent"}).status_code == 404
    assert client.post("/chat", json={"message": ""}).status_code == 422


def test_session_history_metrics_and_delete(client: TestClient) -> None:
    client.post("/chat", json={"message": "review the PR", "session_id": "s3"})

    messages = client.get("/sessions/s3/messages").json()
    metrics = client.get("/sessions/s3/metrics").json()

    assert len(messages) == 3
    assert metrics["total_requests"] == 1
    assert metrics["is_busy"] is False
    assert metrics["selected_agent_id"] == "supervisor-agent"
    assert client.delete("/sessions/s3").status_code == 204
    assert client.get("/sessions/s3/messages").status_code == 404
    assert client.delete("/sessions/s3").status_code == 404


def test_rejected_chat_creates_no_session(client: TestClient, sessions: SessionManager) -> None:
    for _ in range(3):
        assert client.post("/chat", json={"message": "hi", "agent_id": "ghost-agent"}).status_code == 404

    assert list(sessions.sessions()) == []


@pytest.mark.parametrize("message", ["   ", "\n\t "])
def test_blank_message_is_rejected_before_the_turn(
    client: TestClient,
    sessions: SessionManager,
    message: str,
) -> None:
    response = client.post("/chat", json={"message": message, "session_id": "s4"})

    assert response.status_code == 422
    assert sessions.get("s4") is None


def test_message_is_trimmed(client: TestClient) -> None:
    body = client.post("/chat", json={"message": "  review the PR \n", "session_id": "s5"}).json()

    assert body["messages"][0]["content"] == "review the PR"
    assert body["response"] == "Review delegated and done."
