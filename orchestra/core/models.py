"""Core data models shared across orchestra components."""
from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple

DELEGATE_FUNCTION_NAME = "delegate_to_agent"
INTERNAL_PROVIDER_PREFIX = "internal"
INTERNAL_ORCHESTRA_PROVIDER = "internal_orchestra"


class Category(str, Enum):
    """Fixed agent categories, used only for presentation and filtering."""

    ORCHESTRATION = "orchestration"
    IAAS = "iaas"
    STRATEGY = "strategy"
    DISCOVERY = "discovery"
    DESIGN = "design"
    DELIVERY = "delivery"
    ENGINEERING = "engineering"
    QUALITY = "quality"
    ANALYTICS = "analytics"
    MARKETING = "marketing"
    CUSTOMER = "customer"
    FINANCE = "finance"
    PLATFORM = "platform"
    ACCOUNTABILITY = "accountability"


CATEGORY_TITLES: Dict[Category, str] = {
    Category.ORCHESTRATION: "Orchestration & Control",
    Category.IAAS: "Idea as a Service (IAAS)",
    Category.STRATEGY: "Strategy & Value",
    Category.DISCOVERY: "Discovery & Product",
    Category.DESIGN: "Design & UX",
    Category.DELIVERY: "Delivery & Execution",
    Category.ENGINEERING: "Engineering",
    Category.QUALITY: "Quality & SRE",
    Category.ANALYTICS: "Data & Analytics",
    Category.MARKETING: "Marketing & Growth",
    Category.CUSTOMER: "Customer Ops",
    Category.FINANCE: "Finance & Legal",
    Category.PLATFORM: "Platform Ops",
    Category.ACCOUNTABILITY: "Accountability",
}


class ProviderStatus(str, Enum):
    """Connection state of an external provider."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


@dataclass(frozen=True, slots=True)
class Tool:
    """A schema-described capability bound to exactly one provider."""

    name: str
    description: str
    provider: str
    parameters: Mapping[str, Any]

    def declaration(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "parameters": dict(self.parameters),
        }


@dataclass(frozen=True, slots=True)
class Agent:
    """Immutable agent persona defined at process start."""

    id: str
    name: str
    role: str
    category: Category
    system_prompt: str
    description: str = ""
    tools: Tuple[Tool, ...] = ()
    sample_prompts: Tuple[str, ...] = ()

    def find_tool(self, name: str) -> Optional[Tool]:
        return next((tool for tool in self.tools if tool.name == name), None)


@dataclass(frozen=True, slots=True)
class ProviderInfo:
    """Display metadata for an external provider."""

    id: str
    name: str
    description: str


@dataclass(slots=True)
class Provider:
    """Provider metadata combined with its current connection state."""

    id: str
    name: str
    description: str
    status: ProviderStatus = ProviderStatus.DISCONNECTED
    access_token: Optional[str] = None


@dataclass(frozen=True, slots=True)
class ConversationMessage:
    """Entry of a session's append-only conversation log."""

    role: MessageRole
    content: str
    agent_id: Optional[str] = None
    timestamp: float = field(default_factory=time.time)
    error: bool = False
    provider_id: Optional[str] = None
    cached: bool = False


@dataclass(frozen=True, slots=True)
class FunctionCall:
    """A function call requested by the reasoning model."""

    name: str = ""
    args: Mapping[str, Any] = field(default_factory=dict)
    id: str = ""


@dataclass(frozen=True, slots=True)
class FunctionResponse:
    """Outcome of one function call, fed back to the reasoning model."""

    name: str
    id: str
    response: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class ModelResponse:
    """Text and requested function calls from one reasoning-model call."""

    text: str = ""
    function_calls: Tuple[FunctionCall, ...] = ()


@dataclass(frozen=True, slots=True)
class Content:
    """One turn of the context handed to the reasoning model.

    ``user`` turns carry text, ``model`` turns carry the model's text and
    function calls, ``tool`` turns carry the function responses.
    """

    role: str
    text: str = ""
    function_calls: Tuple[FunctionCall, ...] = ()
    function_responses: Tuple[FunctionResponse, ...] = ()

    @classmethod
    def user(cls, text: str) -> Content:
        return cls(role="user", text=text)

    @classmethod
    def model(cls, response: ModelResponse) -> Content:
        return cls(role="model", text=response.text, function_calls=response.function_calls)

    @classmethod
    def tool(cls, responses: List[FunctionResponse]) -> Content:
        return cls(role="tool", function_responses=tuple(responses))


@dataclass(slots=True)
class SessionMetrics:
    """Running counters for a single interactive session."""

    total_requests: int = 0
    cache_hits: int = 0
    tokens_saved: int = 0
    avg_latency: float = 0.0
    _completed: int = 0

    def record_latency(self, latency_ms: float) -> None:
        self._completed += 1
        self.avg_latency += (latency_ms - self.avg_latency) / self._completed

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total_requests": self.total_requests,
            "cache_hits": self.cache_hits,
            "tokens_saved": self.tokens_saved,
            "avg_latency": round(self.avg_latency, 2),
        }
