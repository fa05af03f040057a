"""HTTP API for provider connection state and credential linking."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field

from orchestra.core.models import Provider, ProviderStatus
from orchestra.runtime import get_provider_registry
from orchestra.services.mcp import ProviderRegistry

router = APIRouter(prefix="/providers", tags=["providers"])

DEFAULT_LINK_TOKEN = "SECURE_NODE_ACCESS_GRANTED"


class ProviderResponse(BaseModel):
    id: str
    name: str
    description: str
    status: ProviderStatus

    @classmethod
    def from_provider(cls, provider: Provider) -> "ProviderResponse":
        return cls(
            id=provider.id,
            name=provider.name,
            description=provider.description,
            status=provider.status,
        )


class LinkRequest(BaseModel):
    token: Optional[str] = Field(default=None, description="Access token; a placeholder grant is used when omitted")


@router.get("", response_model=List[ProviderResponse])
async def list_providers(registry: ProviderRegistry = Depends(get_provider_registry)) -> List[ProviderResponse]:
    return [ProviderResponse.from_provider(provider) for provider in registry.providers()]


@router.post("/{provider_id}/link", response_model=ProviderResponse)
async def link_provider(
    provider_id: str,
    request: Optional[LinkRequest] = None,
    registry: ProviderRegistry = Depends(get_provider_registry),
) -> ProviderResponse:
    token = (request.token if request else None) or DEFAULT_LINK_TOKEN
    try:
        provider = await registry.link(provider_id, token)
    except KeyError as exc:
        detail = exc.args[0] if exc.args else str(exc)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail) from exc
    return ProviderResponse.from_provider(provider)


@router.delete("/{provider_id}/link", response_model=ProviderResponse)
async def unlink_provider(
    provider_id: str,
    registry: ProviderRegistry = Depends(get_provider_registry),
) -> ProviderResponse:
    try:
        provider = registry.unlink(provider_id)
    except KeyError as exc:
        detail = exc.args[0] if exc.args else str(exc)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=detail) from exc
    return ProviderResponse.from_provider(provider)
