"""Session-scoped API routes for conversation history and metrics."""
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel

from orchestra.api.chat import MessageResponse
from orchestra.orchestration.session import Session, SessionManager
from orchestra.runtime import get_session_manager

router = APIRouter(prefix="/sessions", tags=["sessions"])


class SessionMetricsResponse(BaseModel):
    session_id: str
    is_busy: bool
    selected_agent_id: Optional[str]
    total_requests: int
    cache_hits: int
    tokens_saved: int
    avg_latency: float


def _require_session(session_id: str, sessions: SessionManager) -> Session:
    session = sessions.get(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown session")
    return session


@router.get("/{session_id}/messages", response_model=List[MessageResponse])
async def list_session_messages(
    session_id: str,
    sessions: SessionManager = Depends(get_session_manager),
) -> List[MessageResponse]:
    """Return the full conversation log of a session."""
    session = _require_session(session_id, sessions)
    return [MessageResponse.from_message(message) for message in session.messages]


@router.get("/{session_id}/metrics", response_model=SessionMetricsResponse)
async def get_session_metrics(
    session_id: str,
    sessions: SessionManager = Depends(get_session_manager),
) -> SessionMetricsResponse:
    session = _require_session(session_id, sessions)
    return SessionMetricsResponse(
        session_id=session.session_id,
        is_busy=session.is_busy,
        selected_agent_id=session.selected_agent.id if session.selected_agent else None,
        **session.metrics.as_dict(),
    )


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(
    session_id: str,
    sessions: SessionManager = Depends(get_session_manager),
) -> None:
    """Forget a session and its in-memory history."""
    if not sessions.drop(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown session")
