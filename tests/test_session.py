"""Tests for sessions, the single-turn lock and the session manager."""
from __future__ import annotations

import asyncio
from typing import Any, Mapping, Sequence

import pytest
from conftest import ScriptedModel, call

from orchestra.agents.catalog import AgentRegistry
from orchestra.core.models import Content, MessageRole, ModelResponse
from orchestra.orchestration.session import Session, SessionManager
from orchestra.services.cache import SemanticCache
from orchestra.services.mcp import ProviderRegistry


class BlockingModel:
    """Model that holds every turn until ``release`` is set."""

    def __init__(self) -> None:
        self.started = asyncio.Event()
        self.release = asyncio.Event()
        self.calls = 0

    async def generate(
        self,
        system_instruction: str,
        contents: Sequence[Content],
        tool_declarations: Sequence[Mapping[str, Any]],
    ) -> ModelResponse:
        self.calls += 1
        self.started.set()
        await self.release.wait()
        return ModelResponse(text="finally done")


class FailingModel:
    async def generate(self, *args: Any) -> ModelResponse:
        raise RuntimeError("model backend unavailable")


@pytest.mark.anyio
async def test_turn_appends_user_and_assistant_messages(make_orchestrator, agent_registry: AgentRegistry) -> None:
    model = ScriptedModel({"Code Agent": [ModelResponse(text="Refactor the parser.")]})
    session = Session("s1", make_orchestrator(model))
    agent = agent_registry.find_by_id("code-agent")

    result = await session.execute_task(agent, "what next?")

    assert result.accepted is True
    assert result.answer == "Refactor the parser."
    assert [(m.role, m.content) for m in session.messages] == [
        (MessageRole.USER, "what next?"),
        (MessageRole.ASSISTANT, "Refactor the parser."),
    ]
    assert session.messages[1].agent_id == "code-agent"
    assert session.selected_agent is agent
    assert session.is_busy is False
    assert session.metrics.total_requests == 1


@pytest.mark.anyio
async def test_second_turn_is_dropped_while_one_is_running(make_orchestrator, agent_registry: AgentRegistry) -> None:
    model = BlockingModel()
    session = Session("s1", make_orchestrator(model))
    agent = agent_registry.find_by_id("code-agent")

    first = asyncio.create_task(session.execute_task(agent, "first"))
    await model.started.wait()
    assert session.is_busy is True
    before = len(session.log)

    rejected = await session.execute_task(agent, "second")

    assert rejected.accepted is False
    assert len(session.log) == before
    model.release.set()
    completed = await first
    assert completed.answer == "finally done"
    assert model.calls == 1
    assert [m.content for m in session.messages] == ["first", "finally done"]
    assert session.is_busy is False


@pytest.mark.anyio
async def test_model_failure_is_reported_and_releases_the_lock(
    make_orchestrator,
    agent_registry: AgentRegistry,
) -> None:
    session = Session("s1", make_orchestrator(FailingModel()))
    agent = agent_registry.find_by_id("code-agent")

    result = await session.execute_task(agent, "explode")

    assert result.accepted is True
    assert result.error == "model backend unavailable"
    last = session.messages[-1]
    assert last.role is MessageRole.SYSTEM
    assert last.error is True
    assert last.content == "ORCHESTRATION_ERROR: model backend unavailable"
    assert session.is_busy is False

    retry = await session.execute_task(agent, "explode again")
    assert retry.accepted is True


@pytest.mark.anyio
async def test_delegation_notice_precedes_the_final_answer(
    make_orchestrator,
    agent_registry: AgentRegistry,
) -> None:
    model = ScriptedModel(
        {
            "The Conductor": [
                ModelResponse(function_calls=(call("delegate_to_agent", agent_id="code-agent", task="review"),)),
                ModelResponse(text="Code review complete."),
            ],
            "Code Agent": [ModelResponse(text="Looks good.")],
        }
    )
    session = Session("s1", make_orchestrator(model))

    await session.execute_task(agent_registry.find_by_id("supervisor-agent"), "review the PR")

    assert [(m.role, m.content) for m in session.messages] == [
        (MessageRole.USER, "review the PR"),
        (MessageRole.SYSTEM, "DELEGATING: Code Agent"),
        (MessageRole.ASSISTANT, "Code review complete."),
    ]
    assert session.messages[2].agent_id == "supervisor-agent"


@pytest.mark.anyio
async def test_repeated_prompt_is_served_from_cache(make_orchestrator, agent_registry: AgentRegistry) -> None:
    answer = "A" * 40
    model = ScriptedModel({"Code Agent": [ModelResponse(text=answer)]})
    session = Session("s1", make_orchestrator(model), cache=SemanticCache())
    agent = agent_registry.find_by_id("code-agent")

    await session.execute_task(agent, "Summarize the design")
    result = await session.execute_task(agent, "SUMMARIZE the design  ")

    assert result.cached is True
    assert result.answer == answer
    assert len(model.calls) == 1
    assert session.messages[-1].cached is True
    assert session.metrics.total_requests == 2
    assert session.metrics.cache_hits == 1
    assert session.metrics.tokens_saved == 10


@pytest.mark.anyio
async def test_cache_is_scoped_per_agent(make_orchestrator, agent_registry: AgentRegistry) -> None:
    model = ScriptedModel(
        {
            "Code Agent": [ModelResponse(text="from code")],
            "SRE Agent": [ModelResponse(text="from sre")],
        }
    )
    session = Session("s1", make_orchestrator(model), cache=SemanticCache())

    await session.execute_task(agent_registry.find_by_id("code-agent"), "status")
    result = await session.execute_task(agent_registry.find_by_id("sre-agent"), "status")

    assert result.cached is False
    assert result.answer == "from sre"


@pytest.mark.anyio
async def test_subscribers_receive_appended_messages(make_orchestrator, agent_registry: AgentRegistry) -> None:
    model = ScriptedModel({"Code Agent": [ModelResponse(text="pong")]})
    session = Session("s1", make_orchestrator(model))

    async with session.log.subscribe() as queue:
        await session.execute_task(agent_registry.find_by_id("code-agent"), "ping")
        received = [queue.get_nowait(), queue.get_nowait()]

    assert [m.content for m in received] == ["ping", "pong"]
    assert queue.empty()


def test_manager_reuses_sessions_and_selects_supervisor(make_orchestrator) -> None:
    manager = SessionManager(make_orchestrator(ScriptedModel({})), cache_factory=SemanticCache)

    session = manager.get_or_create("abc")

    assert manager.get_or_create("abc") is session
    assert manager.get("abc") is session
    assert session.selected_agent.id == "supervisor-agent"
    assert list(manager.sessions()) == [session]
    assert manager.drop("abc") is True
    assert manager.drop("abc") is False
    assert manager.get("abc") is None


@pytest.mark.anyio
async def test_auth_failure_answer_is_not_replayed_after_linking(
    make_orchestrator,
    agent_registry: AgentRegistry,
    provider_registry: ProviderRegistry,
) -> None:
    post = call("post_instagram_video", video_url="v", caption="teaser")
    model = ScriptedModel(
        {
            "Marketing Agent": [
                ModelResponse(function_calls=(post,)),
                ModelResponse(text="Instagram is not linked."),
                ModelResponse(function_calls=(post,)),
                ModelResponse(text="Posted."),
            ]
        }
    )
    cache = SemanticCache()
    session = Session("s1", make_orchestrator(model), cache=cache)
    agent = agent_registry.find_by_id("marketing-agent")

    failed = await session.execute_task(agent, "post the teaser")
    provider_registry.set_token("instagram", "ig-token")
    retried = await session.execute_task(agent, "post the teaser")

    assert failed.answer == "Instagram is not linked."
    assert retried.cached is False
    assert retried.answer == "Posted."
    assert len(model.calls) == 4
    assert len(cache) == 0
    assert session.metrics.cache_hits == 0


@pytest.mark.anyio
async def test_delegated_turn_is_not_cached(make_orchestrator, agent_registry: AgentRegistry) -> None:
    model = ScriptedModel(
        {
            "The Conductor": [
                ModelResponse(function_calls=(call("delegate_to_agent", agent_id="code-agent", task="review"),)),
                ModelResponse(text="Reviewed."),
            ],
            "Code Agent": [ModelResponse(text="Looks good.")],
        }
    )
    cache = SemanticCache()
    session = Session("s1", make_orchestrator(model), cache=cache)

    await session.execute_task(agent_registry.find_by_id("supervisor-agent"), "review the PR")

    assert len(cache) == 0


def test_manager_evicts_least_recently_used_idle_session(make_orchestrator) -> None:
    manager = SessionManager(make_orchestrator(ScriptedModel({})), max_sessions=2)

    first = manager.get_or_create("a")
    manager.get_or_create("b")
    manager.get("a")
    manager.get_or_create("c")

    assert [s.session_id for s in manager.sessions()] == ["a", "c"]
    assert manager.get("a") is first
    assert manager.get("b") is None
