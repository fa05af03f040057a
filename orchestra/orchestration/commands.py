"""Routing of transcribed voice or console commands to agents."""
from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import TYPE_CHECKING, Optional, Pattern

from orchestra.core.models import Agent

if TYPE_CHECKING:
    from orchestra.agents.catalog import AgentRegistry

WAKE_WORDS = ("hey", "hi", "system", "conductor", "orchestra", "okay")
NAVIGATION_PATTERN = re.compile(
    r"^(i want to use|use|switch to|talk to|open|select|activate|show|call)\s+(.+)",
    re.IGNORECASE,
)


class CommandKind(Enum):
    IGNORE = auto()
    LISTEN = auto()
    SELECT = auto()
    EXECUTE = auto()


@dataclass(frozen=True, slots=True)
class RoutedCommand:
    kind: CommandKind
    agent: Optional[Agent] = None
    task: str = ""
    woke: bool = False


def _address_pattern(agent: Agent) -> Pattern[str]:
    """Match ``<agent name>`` at the start of a command; ``&`` and ``and`` are interchangeable."""
    words = [
        r"(?:&|and)" if word.lower() in {"&", "and"} else re.escape(word)
        for word in agent.name.split()
    ]
    return re.compile(r"^" + r"\s+".join(words) + r"(?P<task>.*)$", re.IGNORECASE | re.DOTALL)


class CommandRouter:
    """Interpret a final transcript and decide which agent, if any, handles it.

    Outside a conversation only transcripts opening with a wake word are
    considered. Navigation phrases select an agent, ``<name>, <task>`` addresses
    one directly, and anything else longer than a few characters goes to the
    selected agent (or the default conductor).
    """

    def __init__(self, registry: AgentRegistry) -> None:
        self._registry = registry
        self._patterns = [(agent, _address_pattern(agent)) for agent in registry.all()]

    def route(
        self,
        transcript: str,
        *,
        conversing: bool = False,
        selected_agent: Optional[Agent] = None,
    ) -> RoutedCommand:
        command = transcript.strip()
        words = command.split()
        is_wake = bool(words) and words[0].lower().strip(",.!?") in WAKE_WORDS

        if not (is_wake or conversing):
            return RoutedCommand(CommandKind.IGNORE)

        woke = False
        if not conversing and is_wake:
            woke = True
            command = " ".join(words[1:]).lstrip(",.!? ").strip()
            if not command:
                return RoutedCommand(CommandKind.LISTEN, woke=True)

        nav_match = NAVIGATION_PATTERN.match(command)
        if nav_match:
            target = self._registry.find_by_name(nav_match.group(2).rstrip(".!?"))
            if target is not None:
                return RoutedCommand(CommandKind.SELECT, agent=target, woke=woke)

        for agent, pattern in self._patterns:
            match = pattern.match(command)
            if match:
                task = match.group("task").lstrip(",: \t").strip()
                if len(task) > 2:
                    return RoutedCommand(CommandKind.EXECUTE, agent=agent, task=task, woke=woke)

        if len(command) > 3:
            conductor = selected_agent or self._registry.default()
            return RoutedCommand(CommandKind.EXECUTE, agent=conductor, task=command, woke=woke)

        return RoutedCommand(CommandKind.IGNORE, woke=woke)
