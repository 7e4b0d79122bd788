"""
FastAPI Routes - API endpoints for the AIconic agent.

Endpoints:
- POST /api/chat: Run one agent turn, streamed as server-sent events
- GET /api/styles: Registered icon styles
- GET /api/health: Health check
"""

from __future__ import annotations

import logging
from typing import Optional, Dict, Any, List

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import AliasChoices, BaseModel, Field

from ..agent import ChatTurn, IconAgent
from ..config import LLMConfig
from ..db import check_connection
from ..styles import StyleRegistry
from .services import get_icon_agent, get_style_registry
from .stream import disconnect_check, event_stream_response

logger = logging.getLogger(__name__)

router = APIRouter()


# =============================================================================
# Request/Response Models
# =============================================================================

class ChatRequest(BaseModel):
    """Request body for POST /chat."""
    message: Optional[str] = Field(
        None,
        max_length=2000,
        description="The user's icon request",
        examples=["安全防护图标"],
    )
    history: List[ChatTurn] = Field(
        default_factory=list,
        description="Earlier turns of the conversation, oldest first",
    )
    generateMultiple: bool = Field(
        False,
        description="Force tool use on the first step and generate an icon set",
    )
    styleIds: Optional[List[str]] = Field(
        None,
        validation_alias=AliasChoices("styleIds", "styles"),
        description="Style ids for icon sets; defaults to the configured set",
    )


class StyleColorsResponse(BaseModel):
    primary: str
    secondary: str
    background: str
    accent: str


class StyleResponse(BaseModel):
    """Public config of one style plugin."""
    id: str = Field(..., description="Style id")
    name: str = Field(..., description="Display name")
    platform: str = Field(..., description="Platform label")
    description: str = Field(..., description="Short description of the look")
    colors: StyleColorsResponse


class StylesResponse(BaseModel):
    styles: List[StyleResponse]


class HealthResponse(BaseModel):
    """Response body for GET /health."""
    status: str = Field(..., description="ok or degraded")
    database: str = Field(..., description="Database connection status")
    model_configured: bool = Field(..., description="Whether a model API key is set")
    styles: int = Field(..., description="Number of registered styles")


# =============================================================================
# Endpoints
# =============================================================================

@router.post("/chat", tags=["Agent"])
async def chat(
    payload: ChatRequest,
    request: Request,
    agent: Optional[IconAgent] = Depends(get_icon_agent),
):
    """
    Run one agent turn and stream its events.
    
    The response is `text/event-stream`. Each chunk is `data: <event json>`
    and the stream ends with `data: [DONE]`. Errors after the stream has
    started arrive as an `error` event followed by `done`.
    """
    if not payload.message or not payload.message.strip():
        return JSONResponse(status_code=400, content={"error": "Message is required"})
    
    if agent is None:
        return JSONResponse(status_code=500, content={"error": "Model API key not configured"})
    
    logger.info(
        f"Chat turn: generateMultiple={payload.generateMultiple} "
        f"history={len(payload.history)} styles={payload.styleIds}"
    )
    check = disconnect_check(request)
    events = agent.run_stream(
        payload.message.strip(),
        history=payload.history,
        generate_multiple=payload.generateMultiple,
        style_ids=payload.styleIds,
        cancellation_check=check,
    )
    return event_stream_response(events, cancellation_check=check)


@router.get("/styles", response_model=StylesResponse, tags=["Styles"])
async def list_styles(registry: StyleRegistry = Depends(get_style_registry)) -> Dict[str, Any]:
    """List every registered icon style."""
    return {"styles": [config.to_dict() for config in registry.list()]}


@router.get("/health", response_model=HealthResponse, tags=["System"])
async def health_check(registry: StyleRegistry = Depends(get_style_registry)) -> HealthResponse:
    """Health check endpoint."""
    db_ok, db_message = check_connection()
    model_configured = LLMConfig.from_env().is_configured
    return HealthResponse(
        status="ok" if db_ok and model_configured else "degraded",
        database=db_message,
        model_configured=model_configured,
        styles=len(registry),
    )
