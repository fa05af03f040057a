"""Application runtime composition helpers."""
from __future__ import annotations

from functools import lru_cache

from orchestra.agents.catalog import AgentRegistry
from orchestra.config import config
from orchestra.orchestration.commands import CommandRouter
from orchestra.orchestration.orchestrator import Orchestrator
from orchestra.orchestration.session import SessionManager
from orchestra.services.cache import SemanticCache
from orchestra.services.credentials import CredentialVault, JsonFileStore
from orchestra.services.llm_pool import LLMPool, MockLLMClient
from orchestra.services.mcp import ProviderRegistry
from orchestra.services.reasoning import ChatCompletionsModel


@lru_cache
def get_agent_registry() -> AgentRegistry:
    return AgentRegistry()


@lru_cache
def get_credential_vault() -> CredentialVault:
    return CredentialVault(JsonFileStore(config.bridge.credentials_path))


@lru_cache
def get_provider_registry() -> ProviderRegistry:
    return ProviderRegistry(
        get_credential_vault(),
        latency_ms=config.bridge.latency_ms,
        node_id=config.bridge.node_id,
    )


@lru_cache
def get_llm_pool() -> LLMPool:
    pool = LLMPool()

    if config.azure_openai:
        pool.register_azure_openai(config.azure_openai.deployment_name, config.azure_openai)
    elif config.openai:
        pool.register_openai(config.openai.model, config.openai)
    else:
        # No credentials: answer offline so the console and API stay usable.
        pool.register_client("mock", MockLLMClient("mock"))

    return pool


@lru_cache
def get_reasoning_model() -> ChatCompletionsModel:
    return ChatCompletionsModel(get_llm_pool(), config.model_name)


@lru_cache
def get_orchestrator() -> Orchestrator:
    return Orchestrator(
        agent_registry=get_agent_registry(),
        provider_registry=get_provider_registry(),
        model=get_reasoning_model(),
        max_delegation_depth=config.max_delegation_depth,
    )


@lru_cache
def get_session_manager() -> SessionManager:
    cache_factory = None
    if config.cache_enabled:
        ttl = config.cache_ttl_seconds
        cache_factory = lambda: SemanticCache(ttl_seconds=ttl)  # noqa: E731
    return SessionManager(get_orchestrator(), cache_factory=cache_factory, max_sessions=config.max_sessions)


@lru_cache
def get_command_router() -> CommandRouter:
    return CommandRouter(get_agent_registry())
