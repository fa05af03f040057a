"""Configuration management for the agent orchestra."""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple


@dataclass(frozen=True)
class AzureOpenAIConfig:
    """Azure OpenAI service configuration."""

    api_key: str
    endpoint: str
    api_version: str = "2024-02-15-preview"
    deployment_name: str = "gpt-4"
    max_concurrent: int = 50


@dataclass(frozen=True)
class OpenAIConfig:
    """Public OpenAI API configuration."""

    api_key: str
    model: str = "gpt-4o"
    max_concurrent: int = 50


@dataclass(frozen=True)
class ProviderBridgeConfig:
    """Settings for the simulated provider bridge and its credential vault."""

    credentials_path: Path = Path.home() / ".a2a_orchestra" / "credentials.json"
    latency_ms: Tuple[int, int] = (600, 1000)
    node_id: str = "bridge-v3-mfa"


@dataclass(frozen=True)
class Config:
    """Application configuration loaded from environment variables."""

    azure_openai: Optional[AzureOpenAIConfig] = None
    openai: Optional[OpenAIConfig] = None
    bridge: ProviderBridgeConfig = field(default_factory=ProviderBridgeConfig)
    environment: str = "development"
    log_level: str = "INFO"
    log_format: str = "console"
    max_delegation_depth: int = 4
    cache_enabled: bool = False
    cache_ttl_seconds: float = 3600.0
    max_sessions: int = 1000
    host: str = "127.0.0.1"
    port: int = 8000

    @property
    def model_name(self) -> str:
        """Name under which the reasoning model is registered in the LLM pool."""
        if self.azure_openai:
            return self.azure_openai.deployment_name
        if self.openai:
            return self.openai.model
        return "mock"

    @classmethod
    def from_env(cls) -> Config:
        """Load configuration from environment variables."""
        azure_key = os.getenv("AZURE_OPENAI_KEY")
        azure_endpoint = os.getenv("AZURE_OPENAI_ENDPOINT")

        azure_config = None
        if azure_key and azure_endpoint:
            azure_config = AzureOpenAIConfig(
                api_key=azure_key,
                endpoint=azure_endpoint,
                api_version=os.getenv("AZURE_OPENAI_API_VERSION", "2024-02-15-preview"),
                deployment_name=os.getenv("AZURE_OPENAI_DEPLOYMENT", "gpt-4"),
                max_concurrent=int(os.getenv("AZURE_OPENAI_MAX_CONCURRENT", "50")),
            )

        openai_key = os.getenv("OPENAI_API_KEY")
        openai_config = None
        if openai_key:
            openai_config = OpenAIConfig(
                api_key=openai_key,
                model=os.getenv("OPENAI_MODEL", "gpt-4o"),
                max_concurrent=int(os.getenv("OPENAI_MAX_CONCURRENT", "50")),
            )

        credentials_path = os.getenv("ORCHESTRA_CREDENTIALS_PATH")
        bridge = ProviderBridgeConfig(
            credentials_path=(
                Path(credentials_path).expanduser()
                if credentials_path
                else ProviderBridgeConfig.credentials_path
            ),
            latency_ms=(
                int(os.getenv("ORCHESTRA_TOOL_LATENCY_MIN_MS", "600")),
                int(os.getenv("ORCHESTRA_TOOL_LATENCY_MAX_MS", "1000")),
            ),
        )

        return cls(
            azure_openai=azure_config,
            openai=openai_config,
            bridge=bridge,
            environment=os.getenv("ENVIRONMENT", "development"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", "console"),
            max_delegation_depth=int(os.getenv("ORCHESTRA_MAX_DELEGATION_DEPTH", "4")),
            cache_enabled=os.getenv("ORCHESTRA_CACHE_ENABLED", "false").lower() in {"1", "true", "yes"},
            cache_ttl_seconds=float(os.getenv("ORCHESTRA_CACHE_TTL_SECONDS", "3600")),
            max_sessions=int(os.getenv("ORCHESTRA_MAX_SESSIONS", "1000")),
            host=os.getenv("ORCHESTRA_HOST", "127.0.0.1"),
            port=int(os.getenv("ORCHESTRA_PORT", "8000")),
        )


# Global config instance
config = Config.from_env()
