"""Interactive console front-end for a single orchestra session."""
from __future__ import annotations

import asyncio
import contextlib
from typing import NoReturn

from orchestra.core.conversation import ConversationLog
from orchestra.core.logging import configure_logging
from orchestra.core.models import ConversationMessage, MessageRole
from orchestra.orchestration.commands import CommandKind
from orchestra.orchestration.session import Session
from orchestra.runtime import (
    get_agent_registry,
    get_command_router,
    get_provider_registry,
    get_session_manager,
)

HELP = """Commands:
  /agents                 list agents
  /providers              list providers and their connection state
  /link <provider> [tok]  link a provider
  /unlink <provider>      clear a provider token
  /use <agent-id>         select an agent
  /quit                   exit
Anything else is sent to the selected agent ("Code Agent, <task>" addresses one directly)."""


def render(message: ConversationMessage) -> str:
    if message.role is MessageRole.USER:
        return f"you> {message.content}"
    if message.role is MessageRole.ASSISTANT:
        suffix = " (cached)" if message.cached else ""
        return f"[{message.agent_id}]{suffix} {message.content}"
    prefix = "!!" if message.error else "--"
    hint = f"  (run /link {message.provider_id})" if message.provider_id else ""
    return f"{prefix} {message.content}{hint}"


async def print_messages(log: ConversationLog) -> None:
    async with log.subscribe() as inbox:
        while True:
            message = await inbox.get()
            if message.role is not MessageRole.USER:
                print(render(message))


async def handle_command(session: Session, line: str) -> bool:
    """Handle a slash command; return False when the REPL should exit."""
    registry = get_provider_registry()
    name, _, rest = line[1:].partition(" ")
    args = rest.split()

    if name == "quit":
        return False
    if name == "agents":
        for agent in get_agent_registry().all():
            tools = ", ".join(tool.name for tool in agent.tools) or "-"
            print(f"  {agent.id:<22} {agent.name:<24} tools: {tools}")
    elif name == "providers":
        for provider in registry.providers():
            print(f"  {provider.id:<14} {provider.name:<24} {provider.status.value}")
    elif name == "link" and args:
        token = args[1] if len(args) > 1 else "SECURE_NODE_ACCESS_GRANTED"
        try:
            provider = await registry.link(args[0], token)
        except KeyError as exc:
            print(f"!! {exc.args[0]}")
        else:
            print(f"-- {provider.name} {provider.status.value}")
    elif name == "unlink" and args:
        try:
            provider = registry.unlink(args[0])
        except KeyError as exc:
            print(f"!! {exc.args[0]}")
        else:
            print(f"-- {provider.name} {provider.status.value}")
    elif name == "use" and args:
        agent = get_agent_registry().find_by_id(args[0])
        if agent is None:
            print(f"!! Unknown agent {args[0]}")
        else:
            session.select(agent)
            print(f"-- {agent.name} module loaded. What is your instruction?")
    else:
        print(HELP)
    return True


async def main() -> None:
    configure_logging()
    session = get_session_manager().get_or_create("console")
    router = get_command_router()
    printer = asyncio.create_task(print_messages(session.log))

    print(HELP)
    try:
        while True:
            agent = session.selected_agent
            line = (await asyncio.to_thread(input, f"{agent.name if agent else ''}> ")).strip()
            if not line:
                continue
            if line.startswith("/"):
                if not await handle_command(session, line):
                    break
                continue

            routed = router.route(line, conversing=True, selected_agent=session.selected_agent)
            if routed.kind is CommandKind.SELECT and routed.agent is not None:
                session.select(routed.agent)
                print(f"-- {routed.agent.name} module loaded. What is your instruction?")
            elif routed.kind is CommandKind.EXECUTE and routed.agent is not None:
                await session.execute_task(routed.agent, routed.task)
                # Let the printer drain before prompting again.
                await asyncio.sleep(0)
    except (EOFError, KeyboardInterrupt):
        pass
    finally:
        printer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await printer


def run() -> NoReturn:
    asyncio.run(main())
    raise SystemExit(0)


if __name__ == "__main__":
    run()
