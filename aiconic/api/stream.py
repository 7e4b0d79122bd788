"""
Server-sent events transport for agent turns.

Each event is written as `data: <json>\n\n` and the stream is closed with
`data: [DONE]\n\n`. A client disconnect stops all further writes.
"""

from __future__ import annotations

import logging
from contextlib import aclosing
from typing import AsyncIterator, Optional

from fastapi import Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from ..agent import TurnRecorder
from ..agent.icon_agent import CancellationCheck

logger = logging.getLogger(__name__)

DONE_SENTINEL = "data: [DONE]\n\n"

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


def format_sse(event: BaseModel) -> str:
    """Frame one stream event as an SSE data line."""
    return f"data: {event.to_json()}\n\n"


def disconnect_check(request: Request) -> CancellationCheck:
    """Cancellation check that reports a closed client connection."""
    async def check() -> bool:
        return await request.is_disconnected()
    return check


async def sse_stream(
    events: AsyncIterator[BaseModel],
    recorder: Optional[TurnRecorder] = None,
    cancellation_check: Optional[CancellationCheck] = None,
) -> AsyncIterator[str]:
    """Encode agent events as SSE chunks, ending with the [DONE] sentinel."""
    recorder = recorder or TurnRecorder()
    async with aclosing(events) as stream:
        async for event in stream:
            recorder.apply(event)
            yield format_sse(event)
    
    if cancellation_check is not None and await cancellation_check():
        logger.info(f"Stream closed by client: {recorder.summary()}")
        return
    yield DONE_SENTINEL
    logger.info(f"Stream finished: {recorder.summary()}")


def event_stream_response(
    events: AsyncIterator[BaseModel],
    cancellation_check: Optional[CancellationCheck] = None,
) -> StreamingResponse:
    return StreamingResponse(
        sse_stream(events, cancellation_check=cancellation_check),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
