"""HTTP API exposing the agent roster."""
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from orchestra.agents.catalog import AgentRegistry
from orchestra.core.models import CATEGORY_TITLES, Agent, Category
from orchestra.runtime import get_agent_registry

router = APIRouter(prefix="/agents", tags=["agents"])


class ToolResponse(BaseModel):
    name: str
    description: str
    provider: str
    parameters: Dict[str, Any]


class AgentResponse(BaseModel):
    id: str
    name: str
    role: str
    category: Category
    description: str
    system_prompt: str
    tools: List[ToolResponse] = Field(default_factory=list)
    sample_prompts: List[str] = Field(default_factory=list)

    @classmethod
    def from_agent(cls, agent: Agent) -> "AgentResponse":
        return cls(
            id=agent.id,
            name=agent.name,
            role=agent.role,
            category=agent.category,
            description=agent.description,
            system_prompt=agent.system_prompt,
            tools=[
                ToolResponse(
                    name=tool.name,
                    description=tool.description,
                    provider=tool.provider,
                    parameters=dict(tool.parameters),
                )
                for tool in agent.tools
            ],
            sample_prompts=list(agent.sample_prompts),
        )


class CategoryResponse(BaseModel):
    id: Category
    title: str
    agent_count: int


@router.get("", response_model=List[AgentResponse])
async def list_agents(
    category: Optional[Category] = Query(default=None, description="Restrict to one category"),
    q: Optional[str] = Query(default=None, description="Match against name, role or description"),
    registry: AgentRegistry = Depends(get_agent_registry),
) -> List[AgentResponse]:
    return [AgentResponse.from_agent(agent) for agent in registry.search(category=category, query=q)]


@router.get("/categories", response_model=List[CategoryResponse])
async def list_categories(registry: AgentRegistry = Depends(get_agent_registry)) -> List[CategoryResponse]:
    return [
        CategoryResponse(id=category, title=title, agent_count=len(registry.search(category=category)))
        for category, title in CATEGORY_TITLES.items()
    ]


@router.get("/{agent_id}", response_model=AgentResponse)
async def get_agent(agent_id: str, registry: AgentRegistry = Depends(get_agent_registry)) -> AgentResponse:
    agent = registry.find_by_id(agent_id)
    if agent is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown agent")
    return AgentResponse.from_agent(agent)
