"""
Icon Agent - tool-calling orchestration for icon generation.

The agent alternates between two states:

1. DECIDING: the conversation and the tool catalogue are sent to the model
2. EXECUTING: the tool calls the model chose run one after another, in the
   order the model listed them; each output is appended to the conversation
   as a "tool" message

The loop ends when the model answers without tool calls (its text becomes a
`text` event) or after `max_rounds` executing phases. A failing model call
aborts the turn with an `error` event. `done` is always the final event.

Example turn in generateMultiple mode:
    user: "安全相关的图标"
    -> analyze_icon_main_body(userPrompt="安全相关的图标")  => ["盾牌", "锁", "钥匙", "城墙"]
    -> generate_icon_set(mainBody="盾牌")                    => one icon per style
    -> text reply, done
"""

from __future__ import annotations

import asyncio
import json
import logging
import time
from contextlib import aclosing
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from ..config import AgentConfig, LLMConfig
from ..styles import StyleRegistry
from ..tools import IconToolbox
from .events import (
    ChatTurn,
    DoneEvent,
    ErrorEvent,
    TextEvent,
    ToolLogEvent,
    ToolResultEvent,
    ToolStartEvent,
)
from .tool_catalogue import (
    TOOL_SPECS,
    ToolArgumentError,
    ToolName,
    UnknownToolError,
    parse_tool_arguments,
    parse_tool_name,
    tool_definitions,
)

logger = logging.getLogger(__name__)

CancellationCheck = Callable[[], Awaitable[bool]]

UPSTREAM_ERROR_MESSAGE = "处理失败，请重试"
ROUND_LIMIT_MESSAGE = "已达到工具调用轮数上限，请查看已生成的图标。"


# =============================================================================
# Prompts
# =============================================================================

SYSTEM_PROMPT_MULTIPLE = """你是专业的图标设计师。生成图标时必须遵循以下流程：

**重要：必须按顺序执行两个步骤！**

步骤 1: 先调用 analyze_icon_main_body 分析用户描述，获取最佳主体元素
步骤 2: 选择分析结果中的第一个主体元素，调用 generate_icon_set 生成多种风格图标

示例流程:
用户: "安全相关的图标"
→ 调用 analyze_icon_main_body(userPrompt: "安全相关的图标")
→ 得到 mainBodies: ["盾牌", "锁", "钥匙", "城墙"]
→ 调用 generate_icon_set(mainBody: "盾牌")
→ 生成多个不同风格的盾牌图标

现在开始，直接调用工具，不要先回复文字。"""

SYSTEM_PROMPT_DEFAULT = """你是专业的图标设计师。
当用户想要生成图标时，先用 analyze_icon_main_body 分析主体，再用 generate_icon_set 生成图标。
用中文回复。"""


class AgentState(str, Enum):
    DECIDING = "deciding"
    EXECUTING = "executing"


class AgentError(RuntimeError):
    """The model call could not produce a usable decision."""


class IconAgent:
    """
    Orchestrates model decisions and tool execution for one chat turn.
    
    Instances hold no per-turn state and can serve concurrent requests.
    """
    
    def __init__(
        self,
        client: Any,
        toolbox: IconToolbox,
        registry: StyleRegistry,
        llm_config: Optional[LLMConfig] = None,
        config: Optional[AgentConfig] = None,
    ):
        self.client = client
        self.toolbox = toolbox
        self.registry = registry
        self.llm_config = llm_config or LLMConfig()
        self.config = config or AgentConfig()
        self._tool_definitions = tool_definitions(registry)
    
    # =========================================================================
    # Public API
    # =========================================================================
    
    async def run_stream(
        self,
        message: str,
        history: Optional[List[ChatTurn]] = None,
        generate_multiple: bool = False,
        style_ids: Optional[List[str]] = None,
        cancellation_check: Optional[CancellationCheck] = None,
    ) -> AsyncIterator[BaseModel]:
        """
        Run one chat turn, yielding stream events as they happen.
        
        Once cancellation_check reports True nothing more is yielded.
        """
        async def cancelled() -> bool:
            if cancellation_check is not None and await cancellation_check():
                logger.info("Client disconnected, stopping event emission")
                return True
            return False
        
        icon_set_styles = self.resolve_icon_set_styles(style_ids)
        try:
            async with aclosing(
                self._run_loop(message, history or [], generate_multiple, icon_set_styles)
            ) as events:
                async for event in events:
                    if await cancelled():
                        return
                    yield event
        except Exception as e:
            logger.error(f"Agent turn aborted: {e}")
            if await cancelled():
                return
            yield ErrorEvent(error=UPSTREAM_ERROR_MESSAGE)
        
        if await cancelled():
            return
        yield DoneEvent()
    
    def resolve_icon_set_styles(self, style_ids: Optional[List[str]]) -> List[str]:
        """Requested style ids that are registered, else the configured default set."""
        selected = [s for s in style_ids or [] if self.registry.has(s)]
        if style_ids and len(selected) < len(style_ids):
            logger.warning(f"Ignoring unknown style ids: {sorted(set(style_ids) - set(selected))}")
        return selected or list(self.config.icon_set_styles)
    
    # =========================================================================
    # Deciding / Executing loop
    # =========================================================================
    
    def _build_messages(
        self,
        message: str,
        history: List[ChatTurn],
        generate_multiple: bool,
    ) -> List[Dict[str, Any]]:
        system_prompt = SYSTEM_PROMPT_MULTIPLE if generate_multiple else SYSTEM_PROMPT_DEFAULT
        messages: List[Dict[str, Any]] = [{"role": "system", "content": system_prompt}]
        for turn in history:
            if turn.content:
                messages.append({"role": turn.role, "content": turn.content})
        messages.append({"role": "user", "content": message})
        return messages
    
    async def _decide(self, messages: List[Dict[str, Any]], tool_choice: str) -> Any:
        response = await asyncio.wait_for(
            self.client.chat.completions.create(
                model=self.llm_config.agent_model,
                messages=messages,
                tools=self._tool_definitions,
                tool_choice=tool_choice,
            ),
            timeout=self.llm_config.request_timeout_seconds,
        )
        if not response.choices:
            raise AgentError("Model returned no choices")
        return response.choices[0].message
    
    async def _run_loop(
        self,
        message: str,
        history: List[ChatTurn],
        generate_multiple: bool,
        icon_set_styles: List[str],
    ) -> AsyncIterator[BaseModel]:
        messages = self._build_messages(message, history, generate_multiple)
        tool_choice = "required" if generate_multiple else "auto"
        state = AgentState.DECIDING
        rounds = 0
        
        while True:
            logger.info(f"[{state.value}] round={rounds + 1} tool_choice={tool_choice}")
            reply = await self._decide(messages, tool_choice)
            tool_calls = list(getattr(reply, "tool_calls", None) or [])
            
            if not tool_calls:
                yield TextEvent(content=reply.content or "")
                return
            
            if rounds >= self.config.max_rounds:
                logger.warning(f"Round limit reached ({self.config.max_rounds}), ending turn")
                yield TextEvent(content=ROUND_LIMIT_MESSAGE)
                return
            
            state = AgentState.EXECUTING
            rounds += 1
            messages.append(_assistant_message(reply, tool_calls))
            
            for call in tool_calls:
                async for event in self._execute_call(call, messages, icon_set_styles):
                    yield event
            
            state = AgentState.DECIDING
            tool_choice = "auto"
    
    async def _execute_call(
        self,
        call: Any,
        messages: List[Dict[str, Any]],
        icon_set_styles: List[str],
    ) -> AsyncIterator[BaseModel]:
        function = getattr(call, "function", None)
        name = getattr(function, "name", None) or "unknown"
        
        arg_error: Optional[ToolArgumentError] = None
        try:
            raw_args = parse_tool_arguments(getattr(function, "arguments", None))
        except ToolArgumentError as e:
            raw_args, arg_error = {}, e
        
        yield ToolStartEvent(name=name, args=raw_args)
        
        try:
            if arg_error is not None:
                raise arg_error
            tool = parse_tool_name(name)
            args = TOOL_SPECS[tool].args_model.model_validate(raw_args)
        except (UnknownToolError, ToolArgumentError, ValidationError) as e:
            logger.warning(f"Rejected tool call {name}: {e}")
            result: Dict[str, Any] = {"success": False, "error": str(e)}
            yield ToolResultEvent(name=name, error=result["error"])
            messages.append(_tool_message(call, result))
            return
        
        for event in self._start_logs(tool, args):
            yield event
        
        started = time.perf_counter()
        result = await self._invoke(tool, args, icon_set_styles)
        duration_ms = (time.perf_counter() - started) * 1000
        logger.info(f"Tool {name} completed in {duration_ms:.1f}ms success={result.get('success')}")
        
        for event in self._result_events(tool, result):
            yield event
        messages.append(_tool_message(call, result))
    
    async def _invoke(self, tool: ToolName, args: Any, icon_set_styles: List[str]) -> Dict[str, Any]:
        """Dispatch a validated call to its toolbox method."""
        if tool == ToolName.ANALYZE_ICON_MAIN_BODY:
            return await self.toolbox.analyze_subject(args.userPrompt)
        if tool == ToolName.GENERATE_ICON_BY_MAIN_BODY:
            return await self.toolbox.generate_icon(args.mainBody, args.style)
        if tool == ToolName.GENERATE_ICON_SET:
            return await self.toolbox.generate_icon_set(args.mainBody, icon_set_styles)
        if tool == ToolName.SAVE_ICON:
            return await self.toolbox.persist_icon(args.name, args.svgContent, args.prompt, args.style)
        if tool == ToolName.SEARCH_ICONS:
            return await self.toolbox.search_icons(args.keyword)
        if tool == ToolName.GET_RECENT_ICONS:
            return await self.toolbox.list_recent_icons(args.limit)
        if tool == ToolName.DELETE_ICON:
            return await self.toolbox.delete_icon(args.iconId)
        raise UnknownToolError(tool.value)
    
    # =========================================================================
    # Event construction
    # =========================================================================
    
    def _style_name(self, style_id: str) -> str:
        plugin = self.registry.get(style_id)
        return plugin.config.name if plugin else style_id
    
    def _start_logs(self, tool: ToolName, args: Any) -> List[ToolLogEvent]:
        name = tool.value
        if tool == ToolName.ANALYZE_ICON_MAIN_BODY:
            message = f'分析: "{args.userPrompt}"'
        elif tool == ToolName.GENERATE_ICON_SET:
            message = f"批量生成: {args.mainBody}"
        elif tool == ToolName.GENERATE_ICON_BY_MAIN_BODY:
            message = f"生成: {args.mainBody} ({self._style_name(args.style)})"
        elif tool == ToolName.SAVE_ICON:
            message = f"保存: {args.name}"
        elif tool == ToolName.SEARCH_ICONS:
            message = f"搜索: {args.keyword}"
        elif tool == ToolName.GET_RECENT_ICONS:
            message = f"读取最近 {args.limit} 个图标"
        else:
            message = f"删除: {args.iconId}"
        return [ToolLogEvent(name=name, message=message)]
    
    def _result_events(self, tool: ToolName, result: Dict[str, Any]) -> List[BaseModel]:
        name = tool.value
        if not result.get("success"):
            error = result.get("error") or "failed"
            return [
                ToolLogEvent(name=name, message=f"✗ {error}"),
                ToolResultEvent(name=name, error=error),
            ]
        
        if tool == ToolName.ANALYZE_ICON_MAIN_BODY:
            subjects = result["mainBodies"]
            return [
                ToolLogEvent(name=name, message=f"结果: {', '.join(subjects)}"),
                ToolResultEvent(name=name, mainBodies=subjects),
            ]
        if tool == ToolName.GENERATE_ICON_SET:
            icons = result["icons"]
            events: List[BaseModel] = [
                ToolLogEvent(name=name, message=f"✓ {icon['platform']} - {icon['styleName']}")
                for icon in icons
            ]
            events.extend(ToolResultEvent(name=name, svg=icon["svg"], style=icon["style"]) for icon in icons)
            return events
        if tool == ToolName.GENERATE_ICON_BY_MAIN_BODY:
            return [ToolResultEvent(name=name, svg=result["svg"], style=result["style"])]
        if tool == ToolName.SEARCH_ICONS:
            return [
                ToolLogEvent(name=name, message=f"找到 {result['count']} 个图标"),
                ToolResultEvent(name=name),
            ]
        if "message" in result:
            return [ToolLogEvent(name=name, message=result["message"]), ToolResultEvent(name=name)]
        return [ToolResultEvent(name=name)]


# =============================================================================
# Message helpers
# =============================================================================

def _assistant_message(reply: Any, tool_calls: List[Any]) -> Dict[str, Any]:
    """The assistant turn that requested the tools, as sent back to the model."""
    return {
        "role": "assistant",
        "content": reply.content,
        "tool_calls": [
            {
                "id": call.id,
                "type": "function",
                "function": {
                    "name": getattr(getattr(call, "function", None), "name", None),
                    "arguments": getattr(getattr(call, "function", None), "arguments", None) or "{}",
                },
            }
            for call in tool_calls
        ],
    }


def _tool_message(call: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "role": "tool",
        "tool_call_id": call.id,
        "content": json.dumps(result, ensure_ascii=False),
    }


# =============================================================================
# Convenience Functions
# =============================================================================

async def run_agent(
    agent: IconAgent,
    message: str,
    history: Optional[List[ChatTurn]] = None,
    generate_multiple: bool = False,
    style_ids: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """
    Run a turn without streaming.
    
    Returns:
        {"reply": final text, "toolCalls": [{"functionName", "result": {"svg"}}], "events": [...]}
    """
    events = []
    async for event in agent.run_stream(message, history, generate_multiple, style_ids):
        events.append(event)
    
    tool_calls = [
        {"functionName": e.name, "result": {"svg": e.svg, "style": e.style}}
        for e in events
        if isinstance(e, ToolResultEvent) and e.svg
    ]
    reply = next((e.content for e in events if isinstance(e, TextEvent)), "")
    return {
        "reply": reply,
        "toolCalls": tool_calls,
        "events": [e.to_dict() for e in events],
    }


def create_icon_agent(
    client: Any,
    store: Any = None,
    registry: Optional[StyleRegistry] = None,
    llm_config: Optional[LLMConfig] = None,
    config: Optional[AgentConfig] = None,
) -> IconAgent:
    """
    Wire a synthesizer, toolbox and agent around one model client.
    
    Args:
        client: AsyncOpenAI-compatible client
        store: IconStore for the persistence tools (optional)
        registry: Style registry; defaults to all built-in styles
        llm_config: Model names and timeouts
        config: Agent limits and sampling parameters
    """
    from ..styles import build_default_registry
    from ..tools import IconSynthesizer

    registry = registry or build_default_registry()
    llm_config = llm_config or LLMConfig.from_env()
    config = config or AgentConfig.from_env()

    synthesizer = IconSynthesizer(
        client,
        registry,
        model=llm_config.icon_model,
        temperature=config.icon_temperature,
        max_tokens=config.icon_max_tokens,
        timeout_seconds=llm_config.request_timeout_seconds,
    )
    toolbox = IconToolbox(
        client,
        registry,
        synthesizer,
        store=store,
        analysis_model=llm_config.analysis_model,
        analysis_temperature=config.analysis_temperature,
        analysis_max_tokens=config.analysis_max_tokens,
        icon_set_styles=config.icon_set_styles,
        llm_timeout_seconds=llm_config.request_timeout_seconds,
        db_timeout_seconds=config.db_timeout_seconds,
    )
    return IconAgent(client, toolbox, registry, llm_config=llm_config, config=config)
