"""
Stream events and chat turn reconstruction.

The agent reports progress as a closed set of events:

    tool_start{name, args}      a tool call begins
    tool_log{name, message}     a human-readable progress line
    tool_result{name, ...}      a tool produced output (one per icon for icon sets)
    text{content}               the model's final reply
    error{error}                the turn was aborted
    done                        always last, exactly once

A receiver folds the sequence back into a ChatTurn with TurnRecorder.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, Field


DEFAULT_ASSISTANT_CONTENT = "已完成"


# =============================================================================
# Stream Events
# =============================================================================

class _Event(BaseModel):
    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)


class ToolStartEvent(_Event):
    type: Literal["tool_start"] = "tool_start"
    name: str
    args: Dict[str, Any] = Field(default_factory=dict)


class ToolLogEvent(_Event):
    type: Literal["tool_log"] = "tool_log"
    name: str
    message: str


class ToolResultEvent(_Event):
    """Output of a tool call; fields present depend on the tool."""
    type: Literal["tool_result"] = "tool_result"
    name: str
    svg: Optional[str] = None
    style: Optional[str] = None
    mainBodies: Optional[List[str]] = None
    error: Optional[str] = None


class TextEvent(_Event):
    type: Literal["text"] = "text"
    content: str


class ErrorEvent(_Event):
    type: Literal["error"] = "error"
    error: str


class DoneEvent(_Event):
    type: Literal["done"] = "done"


StreamEvent = Annotated[
    Union[ToolStartEvent, ToolLogEvent, ToolResultEvent, TextEvent, ErrorEvent, DoneEvent],
    Field(discriminator="type"),
]


# =============================================================================
# Chat Turns
# =============================================================================

class ToolStatus(str, Enum):
    RUNNING = "running"
    DONE = "done"


class ToolInvocationRecord(BaseModel):
    """One tool call as shown in the chat: its badge status and log lines."""
    name: str
    status: ToolStatus = ToolStatus.RUNNING
    logLines: List[str] = Field(
        default_factory=list,
        validation_alias=AliasChoices("logLines", "logs"),
    )


class GeneratedIcon(BaseModel):
    svg: str
    style: Optional[str] = None


class ChatTurn(BaseModel):
    """A user or assistant message with the tool activity it triggered."""
    role: Literal["user", "assistant"]
    content: str = ""
    toolCalls: Optional[List[ToolInvocationRecord]] = None


class TurnRecorder:
    """
    Rebuilds an assistant ChatTurn from a stream of events.
    
    tool_log and tool_result attach to the most recent running tool with
    the same name; a tool is marked done at its first result.
    """
    
    def __init__(self):
        self.tool_calls: List[ToolInvocationRecord] = []
        self.icons: List[GeneratedIcon] = []
        self.main_bodies: List[str] = []
        self.text: Optional[str] = None
        self.error: Optional[str] = None
        self.finished = False
    
    def _find(self, name: str) -> Optional[ToolInvocationRecord]:
        for record in reversed(self.tool_calls):
            if record.name == name and record.status == ToolStatus.RUNNING:
                return record
        for record in reversed(self.tool_calls):
            if record.name == name:
                return record
        return None
    
    def apply(self, event: BaseModel) -> None:
        if isinstance(event, ToolStartEvent):
            self.tool_calls.append(ToolInvocationRecord(name=event.name))
        elif isinstance(event, ToolLogEvent):
            record = self._find(event.name)
            if record is not None:
                record.logLines.append(event.message)
        elif isinstance(event, ToolResultEvent):
            record = self._find(event.name)
            if record is not None:
                record.status = ToolStatus.DONE
            if event.svg:
                self.icons.append(GeneratedIcon(svg=event.svg, style=event.style))
            if event.mainBodies:
                self.main_bodies = list(event.mainBodies)
        elif isinstance(event, TextEvent):
            self.text = event.content
        elif isinstance(event, ErrorEvent):
            self.error = event.error
        elif isinstance(event, DoneEvent):
            self.finished = True
    
    def to_turn(self) -> ChatTurn:
        content = self.text or self.error or DEFAULT_ASSISTANT_CONTENT
        return ChatTurn(
            role="assistant",
            content=content,
            toolCalls=list(self.tool_calls) or None,
        )
    
    def summary(self) -> Dict[str, Any]:
        return {
            "tools": [record.name for record in self.tool_calls],
            "icons": len(self.icons),
            "error": self.error,
            "finished": self.finished,
        }
