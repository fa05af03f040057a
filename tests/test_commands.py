"""Tests for transcript routing."""
from __future__ import annotations

import pytest

from orchestra.agents.catalog import AgentRegistry
from orchestra.orchestration.commands import CommandKind, CommandRouter


@pytest.fixture
def router(agent_registry: AgentRegistry) -> CommandRouter:
    return CommandRouter(agent_registry)


def test_transcript_without_wake_word_is_ignored(router: CommandRouter) -> None:
    routed = router.route("use the code agent")

    assert routed.kind is CommandKind.IGNORE
    assert routed.agent is None


@pytest.mark.parametrize("transcript", ["Hey!", "conductor", "  okay,  "])
def test_bare_wake_word_starts_listening(router: CommandRouter, transcript: str) -> None:
    routed = router.route(transcript)

    assert routed.kind is CommandKind.LISTEN
    assert routed.woke is True


def test_wake_word_must_open_the_transcript(router: CommandRouter) -> None:
    assert router.route("please hey code agent").kind is CommandKind.IGNORE


@pytest.mark.parametrize(
    ("transcript", "agent_id"),
    [
        ("hey use code agent", "code-agent"),
        ("Hey, switch to SRE", "sre-agent"),
        ("system talk to finance.", "finance-agent"),
    ],
)
def test_navigation_selects_an_agent(router: CommandRouter, transcript: str, agent_id: str) -> None:
    routed = router.route(transcript)

    assert routed.kind is CommandKind.SELECT
    assert routed.agent.id == agent_id
    assert routed.task == ""


def test_direct_address_preserves_task_casing(router: CommandRouter) -> None:
    routed = router.route("Hey Code Agent, refactor the AuthService module")

    assert routed.kind is CommandKind.EXECUTE
    assert routed.agent.id == "code-agent"
    assert routed.task == "refactor the AuthService module"


@pytest.mark.parametrize("name", ["Growth & SEO", "growth and seo"])
def test_direct_address_accepts_ampersand_or_and(router: CommandRouter, name: str) -> None:
    routed = router.route(f"hey {name}: audit the pricing page")

    assert routed.kind is CommandKind.EXECUTE
    assert routed.agent.id == "seo-agent"
    assert routed.task == "audit the pricing page"


def test_unmatched_command_goes_to_selected_agent(router: CommandRouter, agent_registry: AgentRegistry) -> None:
    finance = agent_registry.find_by_id("finance-agent")

    routed = router.route("hey what did we spend last month", selected_agent=finance)

    assert routed.kind is CommandKind.EXECUTE
    assert routed.agent is finance
    assert routed.task == "what did we spend last month"


def test_unmatched_command_falls_back_to_conductor(router: CommandRouter) -> None:
    routed = router.route("hey show me the incidents")

    assert routed.kind is CommandKind.EXECUTE
    assert routed.agent.id == "supervisor-agent"
    assert routed.task == "show me the incidents"


def test_conversing_needs_no_wake_word(router: CommandRouter, agent_registry: AgentRegistry) -> None:
    sre = agent_registry.find_by_id("sre-agent")

    routed = router.route("list the active incidents", conversing=True, selected_agent=sre)

    assert routed.kind is CommandKind.EXECUTE
    assert routed.agent is sre
    assert routed.woke is False


def test_short_command_is_ignored_after_wake(router: CommandRouter) -> None:
    routed = router.route("hey ok")

    assert routed.kind is CommandKind.IGNORE
    assert routed.woke is True


def test_registry_default_is_first_agent_without_supervisor(agent_registry: AgentRegistry) -> None:
    others = [agent for agent in agent_registry.all() if agent.id != "supervisor-agent"]
    router = CommandRouter(AgentRegistry(others))

    routed = router.route("hey summarize the roadmap")

    assert routed.agent.id == others[0].id
