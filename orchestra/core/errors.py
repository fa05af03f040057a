"""Error kinds and exceptions raised by the dispatch core."""
from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    MALFORMED_CALL = "MALFORMED_CALL"
    TOOL_NOT_FOUND = "TOOL_NOT_FOUND"
    AUTH_REQUIRED = "AUTH_REQUIRED"
    PROVIDER_ERROR = "PROVIDER_ERROR"
    ORCHESTRATION_ERROR = "ORCHESTRATION_ERROR"


class OrchestraError(Exception):
    """Base exception tagged with the error kind it represents."""

    kind: ErrorKind = ErrorKind.ORCHESTRATION_ERROR


class AuthRequiredError(OrchestraError):
    """Raised when a tool targets a provider with no stored token."""

    kind = ErrorKind.AUTH_REQUIRED

    def __init__(self, provider_id: str) -> None:
        super().__init__(f"AUTHENTICATION_REQUIRED: No valid session for {provider_id}.")
        self.provider_id = provider_id


class ProviderError(OrchestraError):
    """Raised when a provider cannot execute a tool."""

    kind = ErrorKind.PROVIDER_ERROR

    def __init__(self, message: str, provider_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.provider_id = provider_id
