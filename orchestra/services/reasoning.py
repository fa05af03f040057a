"""Reasoning model adapter over the chat completions function-calling API."""
from __future__ import annotations

import json
from typing import Any, Dict, List, Mapping, Protocol, Sequence

from orchestra.core.logging import get_logger
from orchestra.core.models import Content, FunctionCall, ModelResponse
from orchestra.services.llm_pool import LLMPool

logger = get_logger(__name__)


class ReasoningModel(Protocol):
    """Anything able to turn a persona, a context and tool declarations into a reply."""

    async def generate(
        self,
        system_instruction: str,
        contents: Sequence[Content],
        tool_declarations: Sequence[Mapping[str, Any]],
    ) -> ModelResponse:
        ...


def to_chat_messages(system_instruction: str, contents: Sequence[Content]) -> List[Dict[str, Any]]:
    """Translate context turns into chat completion messages."""
    messages: List[Dict[str, Any]] = [{"role": "system", "content": system_instruction}]
    for content in contents:
        if content.role == "user":
            messages.append({"role": "user", "content": content.text})
        elif content.role == "model":
            message: Dict[str, Any] = {"role": "assistant", "content": content.text or None}
            if content.function_calls:
                message["tool_calls"] = [
                    {
                        "id": call.id,
                        "type": "function",
                        "function": {"name": call.name, "arguments": json.dumps(dict(call.args))},
                    }
                    for call in content.function_calls
                ]
            messages.append(message)
        elif content.role == "tool":
            for response in content.function_responses:
                messages.append(
                    {
                        "role": "tool",
                        "tool_call_id": response.id,
                        "content": json.dumps(dict(response.response), default=str),
                    }
                )
        else:
            raise ValueError(f"Unsupported content role: {content.role}")
    return messages


def to_tool_specs(tool_declarations: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
    return [{"type": "function", "function": dict(declaration)} for declaration in tool_declarations]


def parse_completion(response: Any) -> ModelResponse:
    """Extract text and function calls from a chat completion."""
    if not response.choices:
        return ModelResponse()
    message = response.choices[0].message
    calls = []
    for tool_call in getattr(message, "tool_calls", None) or []:
        try:
            args = json.loads(tool_call.function.arguments or "{}")
        except (json.JSONDecodeError, TypeError):
            args = {}
        calls.append(
            FunctionCall(
                name=tool_call.function.name or "",
                args=args if isinstance(args, dict) else {},
                id=tool_call.id or "",
            )
        )
    return ModelResponse(text=message.content or "", function_calls=tuple(calls))


class ChatCompletionsModel:
    """Reasoning model backed by a client from the shared LLM pool."""

    def __init__(self, llm_pool: LLMPool, model_name: str, temperature: float = 0.7) -> None:
        self._llm_pool = llm_pool
        self.model_name = model_name
        self.temperature = temperature

    async def generate(
        self,
        system_instruction: str,
        contents: Sequence[Content],
        tool_declarations: Sequence[Mapping[str, Any]],
    ) -> ModelResponse:
        request: Dict[str, Any] = {
            "model": self.model_name,
            "messages": to_chat_messages(system_instruction, contents),
            "temperature": self.temperature,
        }
        if tool_declarations:
            request["tools"] = to_tool_specs(tool_declarations)

        async with self._llm_pool.acquire(self.model_name) as client:
            response = await client.chat.completions.create(**request)

        result = parse_completion(response)
        logger.debug(
            "model_generated",
            model=self.model_name,
            function_calls=[call.name for call in result.function_calls],
        )
        return result
