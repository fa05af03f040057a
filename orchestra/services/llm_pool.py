"""LLM client pool for shared model access with concurrency control."""
from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from types import SimpleNamespace
from typing import Any, AsyncIterator, Dict

from openai import AsyncAzureOpenAI, AsyncOpenAI

from orchestra.config import AzureOpenAIConfig, OpenAIConfig


class LLMPool:
    """Manages shared LLM clients with concurrency limiting."""

    def __init__(self) -> None:
        self._clients: Dict[str, Any] = {}
        self._semaphores: Dict[str, asyncio.Semaphore] = {}
        self._initialized: Dict[str, bool] = {}

    def register_azure_openai(self, name: str, config: AzureOpenAIConfig) -> None:
        """Register an Azure OpenAI model configuration."""
        self._clients[name] = config
        self._semaphores[name] = asyncio.Semaphore(config.max_concurrent)
        self._initialized[name] = False

    def register_openai(self, name: str, config: OpenAIConfig) -> None:
        """Register a public OpenAI model configuration."""
        self._clients[name] = config
        self._semaphores[name] = asyncio.Semaphore(config.max_concurrent)
        self._initialized[name] = False

    def register_client(self, name: str, client: Any, max_concurrent: int = 50) -> None:
        """Register an already constructed client (mock or custom)."""
        self._clients[name] = client
        self._semaphores[name] = asyncio.Semaphore(max_concurrent)
        self._initialized[name] = True

    def is_registered(self, model_name: str) -> bool:
        return model_name in self._clients

    @asynccontextmanager
    async def acquire(self, model_name: str) -> AsyncIterator[Any]:
        """Acquire access to a model client with concurrency control."""
        if model_name not in self._clients:
            raise KeyError(f"Model '{model_name}' not registered in LLM pool")

        semaphore = self._semaphores[model_name]
        await semaphore.acquire()

        try:
            # Lazy initialization on first use
            if not self._initialized[model_name]:
                self._initialize_client(model_name)

            yield self._clients[model_name]
        finally:
            semaphore.release()

    def _initialize_client(self, model_name: str) -> None:
        """Lazy initialization of the actual client."""
        config = self._clients[model_name]

        if isinstance(config, AzureOpenAIConfig):
            self._clients[model_name] = AsyncAzureOpenAI(
                api_key=config.api_key,
                api_version=config.api_version,
                azure_endpoint=config.endpoint,
            )
        elif isinstance(config, OpenAIConfig):
            self._clients[model_name] = AsyncOpenAI(api_key=config.api_key)
        self._initialized[model_name] = True


class MockLLMClient:
    """Offline stand-in for the chat completions API.

    Answers with plain text and never requests tool calls.
    """

    def __init__(self, model_name: str, latency: float = 0.1) -> None:
        self.model_name = model_name
        self.latency = latency
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    async def _create(self, **kwargs: Any) -> Any:
        """Simulate a completion response."""
        messages = kwargs.get("messages", [])
        system_message = next((m["content"] for m in messages if m["role"] == "system"), "")
        user_message = next((m["content"] for m in reversed(messages) if m["role"] == "user"), "")
        tool_results = [m["content"] for m in messages if m["role"] == "tool"]

        persona = system_message.split(".")[0] if system_message else "Assistant"
        if tool_results:
            content = f"{persona}. Tool results received: {'; '.join(tool_results)}"
        else:
            content = f"{persona}. Mock response from {self.model_name}: I received '{user_message}'"

        message = SimpleNamespace(role="assistant", content=content, tool_calls=None)
        choice = SimpleNamespace(message=message, finish_reason="stop")

        await asyncio.sleep(self.latency)  # Simulate API latency
        return SimpleNamespace(choices=[choice], model=self.model_name)
