"""
Agent module for AIconic.

Contains the tool-calling icon agent, its tool catalogue and the stream
event types it emits.
"""

from .events import (
    ChatTurn,
    DoneEvent,
    ErrorEvent,
    GeneratedIcon,
    StreamEvent,
    TextEvent,
    ToolInvocationRecord,
    ToolLogEvent,
    ToolResultEvent,
    ToolStartEvent,
    ToolStatus,
    TurnRecorder,
)
from .tool_catalogue import ToolName, UnknownToolError, tool_definitions
from .icon_agent import AgentState, IconAgent, create_icon_agent, run_agent

__all__ = [
    "AgentState",
    "ChatTurn",
    "DoneEvent",
    "ErrorEvent",
    "GeneratedIcon",
    "IconAgent",
    "StreamEvent",
    "TextEvent",
    "ToolInvocationRecord",
    "ToolLogEvent",
    "ToolName",
    "ToolResultEvent",
    "ToolStartEvent",
    "ToolStatus",
    "TurnRecorder",
    "UnknownToolError",
    "create_icon_agent",
    "run_agent",
    "tool_definitions",
]
