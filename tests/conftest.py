"""Shared fixtures and fakes for the orchestra test-suite."""
from __future__ import annotations

from typing import Any, Dict, List, Mapping, Sequence, Tuple

import pytest

from orchestra.agents.catalog import AgentRegistry
from orchestra.core.models import Content, FunctionCall, ModelResponse
from orchestra.orchestration.orchestrator import Orchestrator
from orchestra.services.credentials import CredentialVault, InMemoryStore
from orchestra.services.mcp import ProviderRegistry


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


class ScriptedModel:
    """Reasoning model replaying canned responses per agent.

    Scripts are keyed by agent name and matched against the persona line
    ``You are <name>.``; each call pops the next response for that agent.
    """

    def __init__(self, scripts: Mapping[str, Sequence[ModelResponse]]) -> None:
        self._scripts: Dict[str, List[ModelResponse]] = {name: list(items) for name, items in scripts.items()}
        self.calls: List[Tuple[str, List[Content], List[Dict[str, Any]]]] = []

    def calls_for(self, agent_name: str) -> List[Tuple[str, List[Content], List[Dict[str, Any]]]]:
        return [call for call in self.calls if call[0] == agent_name]

    async def generate(
        self,
        system_instruction: str,
        contents: Sequence[Content],
        tool_declarations: Sequence[Mapping[str, Any]],
    ) -> ModelResponse:
        for name, responses in self._scripts.items():
            if system_instruction.startswith(f"You are {name}."):
                self.calls.append((name, list(contents), [dict(d) for d in tool_declarations]))
                if not responses:
                    raise AssertionError(f"No scripted response left for {name}")
                return responses.pop(0)
        raise AssertionError(f"Unexpected persona: {system_instruction}")


def call(name: str, call_id: str = "", **args: Any) -> FunctionCall:
    return FunctionCall(name=name, args=args, id=call_id or f"call-{name}")


@pytest.fixture
def vault() -> CredentialVault:
    return CredentialVault(InMemoryStore())


@pytest.fixture
def provider_registry(vault: CredentialVault) -> ProviderRegistry:
    return ProviderRegistry(vault, latency_ms=(0, 0), handshake_seconds=0)


@pytest.fixture
def agent_registry() -> AgentRegistry:
    return AgentRegistry()


@pytest.fixture
def make_orchestrator(agent_registry: AgentRegistry, provider_registry: ProviderRegistry):
    def factory(model: Any, **kwargs: Any) -> Orchestrator:
        return Orchestrator(
            agent_registry=agent_registry,
            provider_registry=provider_registry,
            model=model,
            **kwargs,
        )

    return factory
