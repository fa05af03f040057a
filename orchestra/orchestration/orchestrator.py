"""Orchestration loop driving an agent from prompt to final answer."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Sequence

from orchestra.agents.dispatch import DelegateCallback, DispatchClient, LogSink
from orchestra.core.errors import AuthRequiredError, ErrorKind
from orchestra.core.logging import get_logger
from orchestra.core.models import Agent, Content, FunctionResponse

if TYPE_CHECKING:
    from orchestra.agents.catalog import AgentRegistry
    from orchestra.core.conversation import ConversationLog
    from orchestra.services.mcp import ProviderRegistry
    from orchestra.services.reasoning import ReasoningModel

logger = get_logger(__name__)

AGENT_NOT_FOUND = "Error: Agent not found."
DEPTH_LIMIT_REACHED = "Error: Delegation depth limit reached."
DISPATCH_PLACEHOLDER = "Dispatch processed."


@dataclass(slots=True)
class TurnTrace:
    """What a turn did besides talking, accumulated across delegated sub-turns."""

    function_calls: int = 0
    auth_required: List[str] = field(default_factory=list)

    @property
    def replayable(self) -> bool:
        """Only pure text turns may be answered again from a cache."""
        return self.function_calls == 0 and not self.auth_required


def build_persona(agent: Agent) -> str:
    return f"You are {agent.name}. Role: {agent.role}. {agent.system_prompt.rstrip('.')}. Be concise and authoritative."


class Orchestrator:
    """Run agents against the reasoning model and resolve the calls they request.

    ``run`` is re-entrant: a delegation requested by the model runs the target
    agent through ``run`` again, inline, before the parent turn continues.
    """

    def __init__(
        self,
        *,
        agent_registry: AgentRegistry,
        provider_registry: ProviderRegistry,
        model: ReasoningModel,
        max_delegation_depth: int = 4,
        on_log: Optional[LogSink] = None,
    ) -> None:
        self._agents = agent_registry
        self._providers = provider_registry
        self._model = model
        self._max_delegation_depth = max_delegation_depth
        self._on_log = on_log

    @property
    def agents(self) -> AgentRegistry:
        return self._agents

    @property
    def providers(self) -> ProviderRegistry:
        return self._providers

    def client_for(self, agent: Agent) -> DispatchClient:
        return DispatchClient(agent, self._providers, on_log=self._on_log)

    async def run(
        self,
        agent: Agent,
        prompt: str,
        *,
        log: Optional[ConversationLog] = None,
        lineage: Sequence[str] = (),
        trace: Optional[TurnTrace] = None,
    ) -> str:
        """Answer ``prompt`` as ``agent`` and return the final text.

        ``lineage`` holds the ids of the agents whose turns are waiting on this
        one, outermost first; it is empty for a top-level turn. ``trace``, when
        given, records the function calls and auth failures of this turn and of
        every sub-turn it delegates to.
        """
        lineage = (*lineage, agent.id)
        client = self.client_for(agent)
        persona = build_persona(agent)
        declarations = client.list_tool_declarations()
        user_turn = Content.user(prompt)

        logger.info("turn_started", agent_id=agent.id, depth=len(lineage) - 1, tools=len(declarations))
        response = await self._model.generate(persona, [user_turn], declarations)

        if not response.function_calls:
            return response.text or ""

        if trace is not None:
            trace.function_calls += len(response.function_calls)
        delegate = self._delegation_handler(lineage, log, trace)
        function_responses: List[FunctionResponse] = []
        for call in response.function_calls:
            try:
                payload = await client.handle_call(call, delegate)
            except AuthRequiredError as exc:
                logger.warning("auth_required", agent_id=agent.id, provider_id=exc.provider_id, tool=call.name)
                if log is not None:
                    log.system(f"AUTH REQUIRED: {exc.provider_id}", error=True, provider_id=exc.provider_id)
                if trace is not None:
                    trace.auth_required.append(exc.provider_id)
                payload = {"error": ErrorKind.AUTH_REQUIRED.value}
            function_responses.append(FunctionResponse(name=call.name, id=call.id, response=payload))

        final = await self._model.generate(
            persona,
            [user_turn, Content.model(response), Content.tool(function_responses)],
            declarations,
        )
        return final.text or DISPATCH_PLACEHOLDER

    def _delegation_handler(
        self,
        lineage: Sequence[str],
        log: Optional[ConversationLog],
        trace: Optional[TurnTrace],
    ) -> DelegateCallback:
        async def delegate(target_id: str, task: str) -> str:
            target = self._agents.find_by_id(target_id)
            if target is None:
                logger.warning("delegation_target_missing", target_id=target_id)
                return AGENT_NOT_FOUND
            if target.id in lineage:
                logger.warning("delegation_cycle", target_id=target.id, lineage=list(lineage))
                return f"Error: Delegation cycle detected ({' -> '.join((*lineage, target.id))})."
            if len(lineage) > self._max_delegation_depth:
                logger.warning("delegation_depth_exceeded", target_id=target.id, depth=len(lineage))
                return DEPTH_LIMIT_REACHED

            if log is not None:
                log.system(f"DELEGATING: {target.name}")
            logger.info("delegating", source_id=lineage[-1], target_id=target.id)
            return await self.run(target, task, log=log, lineage=lineage, trace=trace)

        return delegate
