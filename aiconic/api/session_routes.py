"""
Session Routes - chat history persistence.

Endpoints:
- GET /api/sessions: 50 most recently updated sessions
- POST /api/sessions: Create a session
- GET /api/sessions/{session_id}: Session with its messages and icons
- DELETE /api/sessions/{session_id}: Delete a session and everything in it
- POST /api/sessions/{session_id}/messages: Append a message and its icons
"""

from __future__ import annotations

import logging
from typing import Optional, Dict, Any, List, Literal

from fastapi import APIRouter, Body, Depends, HTTPException
from pydantic import BaseModel, Field

from ..db import IconStore
from .services import get_store

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/sessions", tags=["Sessions"])


# =============================================================================
# Request Models
# =============================================================================

class CreateSessionRequest(BaseModel):
    """Request body for POST /sessions."""
    title: Optional[str] = Field(None, max_length=255, description="Session title")


class MessagePayload(BaseModel):
    role: Literal["user", "assistant"] = Field(..., description="Message author")
    content: str = Field(..., description="Message text")
    toolCalls: Optional[List[Dict[str, Any]]] = Field(
        None, description="Tool activity shown with the message"
    )


class GeneratedIconPayload(BaseModel):
    svg: str = Field(..., min_length=1, description="SVG document")
    style: Optional[str] = Field(None, description="Style id")
    name: Optional[str] = Field(None, description="Icon name")
    prompt: Optional[str] = Field(None, description="Prompt that produced the icon")


class AppendMessageRequest(BaseModel):
    """Request body for POST /sessions/{session_id}/messages."""
    message: MessagePayload
    generatedIcons: List[GeneratedIconPayload] = Field(default_factory=list)


# =============================================================================
# Endpoints
# =============================================================================

@router.get("")
async def list_sessions(store: IconStore = Depends(get_store)) -> Dict[str, Any]:
    """List the most recently updated sessions."""
    return {"sessions": store.list_sessions()}


@router.post("")
async def create_session(
    payload: Optional[CreateSessionRequest] = Body(None),
    store: IconStore = Depends(get_store),
) -> Dict[str, Any]:
    """Create a session. The title defaults to "新会话"."""
    title = payload.title if payload else None
    return {"session": store.create_session(title)}


@router.get("/{session_id}")
async def get_session(session_id: str, store: IconStore = Depends(get_store)) -> Dict[str, Any]:
    """Get a session with its messages and icons in creation order."""
    detail = store.get_session_detail(session_id)
    if detail is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return detail


@router.delete("/{session_id}")
async def delete_session(session_id: str, store: IconStore = Depends(get_store)) -> Dict[str, Any]:
    """Delete a session; its messages and icons go with it."""
    if not store.delete_session(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"success": True}


@router.post("/{session_id}/messages")
async def append_message(
    session_id: str,
    payload: AppendMessageRequest,
    store: IconStore = Depends(get_store),
) -> Dict[str, Any]:
    """
    Append one message to a session.
    
    The first user message names the session. Generated icons are stored
    in the same transaction as the message they belong to.
    """
    result = store.add_message(
        session_id,
        role=payload.message.role,
        content=payload.message.content,
        tool_calls=payload.message.toolCalls,
        generated_icons=[icon.model_dump() for icon in payload.generatedIcons],
    )
    if result is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return result
