"""Per-agent client resolving model function calls to delegations or provider tools."""
from __future__ import annotations

from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Optional

from orchestra.core.errors import AuthRequiredError, ErrorKind
from orchestra.core.logging import get_logger
from orchestra.core.models import DELEGATE_FUNCTION_NAME, Agent, FunctionCall

if TYPE_CHECKING:
    from orchestra.services.mcp import ProviderRegistry

DelegateCallback = Callable[[str, str], Awaitable[str]]
LogSink = Callable[[str], None]

logger = get_logger(__name__)


class DispatchClient:
    """Bridge between the reasoning model and the tools an agent may call.

    Every call is answered with an envelope, either ``{"result": ...}`` or
    ``{"error": ...}``. Missing provider credentials are the one failure that
    is raised instead, so the caller can prompt the user to link the provider.
    """

    def __init__(
        self,
        agent: Agent,
        registry: ProviderRegistry,
        on_log: Optional[LogSink] = None,
    ) -> None:
        self.agent = agent
        self._registry = registry
        self._on_log = on_log or logger.bind(agent_id=agent.id).debug

    async def handle_call(self, call: FunctionCall, delegate: DelegateCallback) -> Dict[str, Any]:
        """Resolve one function call: identify the tool, check auth, execute, wrap."""
        if not call.name:
            self._on_log("[MCP CLIENT] Error: Function call missing name.")
            return {"error": ErrorKind.MALFORMED_CALL.value}

        self._on_log(f"[MCP CLIENT] Inbound call: {call.name}")

        if call.name == DELEGATE_FUNCTION_NAME:
            agent_id = str(call.args.get("agent_id", ""))
            task = str(call.args.get("task", ""))
            self._on_log(f"[MCP CLIENT] Routing delegation: internal_orchestra -> {agent_id}")
            return {"result": await delegate(agent_id, task)}

        tool = self.agent.find_tool(call.name)
        if tool is None:
            self._on_log(f"[MCP CLIENT] Error: Tool {call.name} not found in agent registry.")
            return {"error": ErrorKind.TOOL_NOT_FOUND.value}

        self._on_log(f"[MCP CLIENT] Dispatching to provider: {tool.provider}")
        try:
            result = await self._registry.execute(call.name, call.args, tool.provider)
        except AuthRequiredError:
            self._on_log(f"[MCP CLIENT] Auth Failure: {tool.provider} requires valid session.")
            raise
        except Exception as exc:  # noqa: BLE001
            self._on_log(f"[MCP CLIENT] Server Error: {exc}")
            return {"error": str(exc)}

        latency = result.get("_metadata", {}).get("latency")
        self._on_log(f"[MCP CLIENT] Server Response: Success (Latency: {latency}ms)")
        return {"result": result}

    def list_tool_declarations(self) -> List[Dict[str, Any]]:
        """Serialize the agent's declared tools as function declarations."""
        return [tool.declaration() for tool in self.agent.tools]
