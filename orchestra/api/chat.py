"""Chat endpoint for natural language interaction with the agent orchestra."""
from __future__ import annotations

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, Field, field_validator

from orchestra.core.models import ConversationMessage, MessageRole
from orchestra.orchestration.session import SessionManager
from orchestra.runtime import get_session_manager

router = APIRouter(prefix="/chat", tags=["chat"])


class ChatRequest(BaseModel):
    message: str = Field(..., min_length=1, description="Instruction for the agent")
    agent_id: Optional[str] = Field(
        default=None,
        description="Agent to address; defaults to the session's selected agent",
    )
    session_id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        description="Session identifier for conversation continuity",
    )

    @field_validator("message")
    @classmethod
    def _reject_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("message must not be blank")
        return value


class MessageResponse(BaseModel):
    role: MessageRole
    content: str
    agent_id: Optional[str] = None
    timestamp: float
    error: bool = False
    provider_id: Optional[str] = None
    cached: bool = False

    @classmethod
    def from_message(cls, message: ConversationMessage) -> "MessageResponse":
        return cls(
            role=message.role,
            content=message.content,
            agent_id=message.agent_id,
            timestamp=message.timestamp,
            error=message.error,
            provider_id=message.provider_id,
            cached=message.cached,
        )


class ChatResponse(BaseModel):
    response: Optional[str] = None
    accepted: bool
    error: Optional[str] = None
    agent_id: str
    session_id: str
    messages: List[MessageResponse] = Field(default_factory=list)


@router.post("", response_model=ChatResponse)
async def chat(
    request: ChatRequest,
    sessions: SessionManager = Depends(get_session_manager),
) -> ChatResponse:
    """Run one turn for the requested agent and return the messages it produced."""
    agent = None
    if request.agent_id:
        agent = sessions.orchestrator.agents.find_by_id(request.agent_id)
        if agent is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown agent")

    session = sessions.get_or_create(request.session_id)
    if agent is None:
        agent = session.selected_agent or sessions.orchestrator.agents.default()

    start = len(session.log)
    result = await session.execute_task(agent, request.message)
    produced = session.messages[start:] if result.accepted else []

    return ChatResponse(
        response=result.answer,
        accepted=result.accepted,
        error=result.error,
        agent_id=agent.id,
        session_id=session.session_id,
        messages=[MessageResponse.from_message(message) for message in produced],
    )
