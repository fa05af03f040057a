"""Provider registry bridging tool calls to simulated external systems."""
from __future__ import annotations

import asyncio
import random
import time
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from orchestra.core.errors import AuthRequiredError, ProviderError
from orchestra.core.logging import get_logger
from orchestra.core.models import INTERNAL_PROVIDER_PREFIX, Provider, ProviderInfo, ProviderStatus
from orchestra.services.credentials import CredentialVault
from orchestra.services.mock_results import generate_result

logger = get_logger(__name__)

DEFAULT_PROVIDERS: Tuple[ProviderInfo, ...] = (
    ProviderInfo("jira", "Jira Software", "Backlog and Sprint management."),
    ProviderInfo("miro", "Miro Board", "Discovery and flow mapping."),
    ProviderInfo("seo_perf", "SEO Performance", "Lighthouse and Core Web Vitals."),
    ProviderInfo("google_search", "Google Search", "Real-time web search."),
    ProviderInfo("grafana", "Grafana Labs", "Real-time SRE observability."),
    ProviderInfo("github", "GitHub Enterprise", "V3 REST Production API."),
    ProviderInfo("slack", "Slack Ops", "Internal team communication."),
    ProviderInfo("figma", "Figma Cloud", "Design tokens and assets."),
    ProviderInfo("aws", "AWS Production", "IAM-scoped cloud infrastructure."),
    ProviderInfo("stripe", "Stripe Finance", "Financial telemetry and billing."),
    ProviderInfo("instagram", "Instagram Business", "Social media management and publishing."),
    ProviderInfo("postgres", "PostgreSQL Warehouse", "Production data integrity scans."),
    ProviderInfo("meta", "Meta Business Suite", "Facebook page publishing."),
    ProviderInfo("linkedin", "LinkedIn Pages", "Company page publishing."),
    ProviderInfo("playwright", "Playwright Grid", "Browser end-to-end test runs."),
)


def is_internal(provider_id: str) -> bool:
    return provider_id.startswith(INTERNAL_PROVIDER_PREFIX)


class ProviderRegistry:
    """Registry of external providers and the credential gate in front of them."""

    def __init__(
        self,
        vault: CredentialVault,
        *,
        providers: Iterable[ProviderInfo] = DEFAULT_PROVIDERS,
        latency_ms: Tuple[int, int] = (600, 1000),
        node_id: str = "bridge-v3-mfa",
        handshake_seconds: float = 0.2,
    ) -> None:
        self._vault = vault
        self._providers: Dict[str, ProviderInfo] = {}
        self._connecting: Set[str] = set()
        self._latency_ms = latency_ms
        self._node_id = node_id
        self._handshake_seconds = handshake_seconds
        for info in providers:
            self.register(info)

    def register(self, info: ProviderInfo) -> None:
        self._providers[info.id] = info

    def is_known(self, provider_id: str) -> bool:
        return is_internal(provider_id) or provider_id in self._providers

    def get_provider(self, provider_id: str) -> Provider:
        if provider_id not in self._providers:
            raise KeyError(f"No provider registered with id: {provider_id}")
        info = self._providers[provider_id]
        return Provider(
            id=info.id,
            name=info.name,
            description=info.description,
            status=self.status(provider_id),
            access_token=self._vault.get_token(provider_id),
        )

    def providers(self) -> List[Provider]:
        return [self.get_provider(provider_id) for provider_id in self._providers]

    def status(self, provider_id: str) -> ProviderStatus:
        if provider_id in self._connecting:
            return ProviderStatus.CONNECTING
        if self.is_authenticated(provider_id):
            return ProviderStatus.CONNECTED
        return ProviderStatus.DISCONNECTED

    # Credential operations

    def set_token(self, provider_id: str, token: Optional[str]) -> None:
        """Store the token, or clear it when ``token`` is empty."""
        if token:
            self._vault.save_token(provider_id, token)
        else:
            self._vault.remove_token(provider_id)

    def get_token(self, provider_id: str) -> Optional[str]:
        return self._vault.get_token(provider_id)

    def is_authenticated(self, provider_id: str) -> bool:
        return is_internal(provider_id) or self._vault.has_auth(provider_id)

    async def link(self, provider_id: str, token: str) -> Provider:
        """Run the link handshake and store the resulting token."""
        if provider_id not in self._providers:
            raise KeyError(f"No provider registered with id: {provider_id}")
        if not token:
            raise ValueError("A non-empty token is required to link a provider")

        self._connecting.add(provider_id)
        try:
            await asyncio.sleep(self._handshake_seconds)
            self.set_token(provider_id, token)
        finally:
            self._connecting.discard(provider_id)
        logger.info("provider_linked", provider_id=provider_id)
        return self.get_provider(provider_id)

    def unlink(self, provider_id: str) -> Provider:
        if provider_id not in self._providers:
            raise KeyError(f"No provider registered with id: {provider_id}")
        self.set_token(provider_id, None)
        logger.info("provider_unlinked", provider_id=provider_id)
        return self.get_provider(provider_id)

    # Tool execution

    async def execute(self, tool_name: str, args: Mapping[str, Any], provider_id: str) -> Dict[str, Any]:
        """Execute ``tool_name`` against ``provider_id`` behind the auth gate."""
        if not self.is_known(provider_id):
            raise ProviderError(f"Unknown provider: {provider_id}", provider_id)
        if not self.is_authenticated(provider_id):
            raise AuthRequiredError(provider_id)

        started = time.monotonic()
        low, high = self._latency_ms
        await asyncio.sleep(random.uniform(low, high) / 1000)

        result = generate_result(provider_id, tool_name, args)
        latency = max(0, int((time.monotonic() - started) * 1000))
        logger.debug("provider_executed", provider_id=provider_id, tool=tool_name, latency_ms=latency)
        return {**result, "_metadata": {"latency": latency, "node": self._node_id}}
