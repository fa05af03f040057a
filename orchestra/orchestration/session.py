"""Interactive sessions owning the conversation log and the single-turn lock."""
from __future__ import annotations

import time
from collections import OrderedDict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Iterable, Optional, Sequence

from orchestra.core.conversation import ConversationLog
from orchestra.core.errors import ErrorKind
from orchestra.core.logging import get_logger
from orchestra.core.models import Agent, ConversationMessage, MessageRole, SessionMetrics
from orchestra.orchestration.orchestrator import Orchestrator, TurnTrace

if TYPE_CHECKING:
    from orchestra.services.cache import SemanticCache

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class TurnResult:
    """Outcome of a top-level turn request."""

    accepted: bool
    answer: Optional[str] = None
    error: Optional[str] = None
    cached: bool = False


class Session:
    """One interactive session: a conversation log and at most one turn in flight.

    A turn requested while another is running is dropped, not queued.
    Delegated sub-turns run inside the outer turn and never hit the lock.
    """

    def __init__(
        self,
        session_id: str,
        orchestrator: Orchestrator,
        *,
        cache: Optional[SemanticCache] = None,
        selected_agent: Optional[Agent] = None,
    ) -> None:
        self.session_id = session_id
        self.log = ConversationLog()
        self.metrics = SessionMetrics()
        self.selected_agent = selected_agent
        self._orchestrator = orchestrator
        self._cache = cache
        self._busy = False

    @property
    def is_busy(self) -> bool:
        return self._busy

    @property
    def messages(self) -> Sequence[ConversationMessage]:
        return self.log.messages

    def select(self, agent: Agent) -> None:
        self.selected_agent = agent

    async def execute_task(self, agent: Agent, text: str) -> TurnResult:
        """Run one top-level turn for ``agent``, unless one is already running."""
        if self._busy:
            logger.info("turn_rejected", session_id=self.session_id, agent_id=agent.id)
            return TurnResult(accepted=False)

        self._busy = True
        self.selected_agent = agent
        self.log.append(ConversationMessage(role=MessageRole.USER, content=text))
        self.metrics.total_requests += 1
        started = time.monotonic()
        cache_key = f"{agent.id} {text}"

        try:
            cached = self._cache.get(cache_key) if self._cache is not None else None
            if cached is not None:
                self.metrics.cache_hits += 1
                self.metrics.tokens_saved += len(cached) // 4
                self.log.append(
                    ConversationMessage(
                        role=MessageRole.ASSISTANT,
                        content=cached,
                        agent_id=agent.id,
                        cached=True,
                    )
                )
                return TurnResult(accepted=True, answer=cached, cached=True)

            trace = TurnTrace()
            answer = await self._orchestrator.run(agent, text, log=self.log, trace=trace)
            self.log.append(ConversationMessage(role=MessageRole.ASSISTANT, content=answer, agent_id=agent.id))
            # Tool payloads change between calls and auth failures must be retried live.
            if self._cache is not None and trace.replayable:
                self._cache.put(cache_key, answer)
            return TurnResult(accepted=True, answer=answer)
        except Exception as exc:  # noqa: BLE001
            logger.exception("turn_failed", session_id=self.session_id, agent_id=agent.id)
            self.log.system(f"{ErrorKind.ORCHESTRATION_ERROR.value}: {exc}", error=True)
            return TurnResult(accepted=True, error=str(exc))
        finally:
            self.metrics.record_latency((time.monotonic() - started) * 1000)
            self._busy = False


class SessionManager:
    """Registry of sessions keyed by session id.

    At most ``max_sessions`` are kept; creating one more evicts the least
    recently used session that has no turn in flight.
    """

    def __init__(
        self,
        orchestrator: Orchestrator,
        cache_factory: Optional[Callable[[], SemanticCache]] = None,
        max_sessions: int = 1000,
    ) -> None:
        self._orchestrator = orchestrator
        self._cache_factory = cache_factory
        self._max_sessions = max_sessions
        self._sessions: OrderedDict[str, Session] = OrderedDict()

    @property
    def orchestrator(self) -> Orchestrator:
        return self._orchestrator

    def get(self, session_id: str) -> Optional[Session]:
        session = self._sessions.get(session_id)
        if session is not None:
            self._sessions.move_to_end(session_id)
        return session

    def get_or_create(self, session_id: str) -> Session:
        session = self.get(session_id)
        if session is None:
            session = Session(
                session_id,
                self._orchestrator,
                cache=self._cache_factory() if self._cache_factory else None,
                selected_agent=self._orchestrator.agents.default(),
            )
            self._sessions[session_id] = session
            self._evict(keep=session_id)
        return session

    def drop(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

    def sessions(self) -> Iterable[Session]:
        return self._sessions.values()

    def _evict(self, keep: str) -> None:
        idle = [sid for sid, session in self._sessions.items() if sid != keep and not session.is_busy]
        for session_id in idle[: max(0, len(self._sessions) - self._max_sessions)]:
            del self._sessions[session_id]
            logger.info("session_evicted", session_id=session_id)
