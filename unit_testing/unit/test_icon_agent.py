"""
Unit tests for the icon agent loop.

Tests cover:
- Event grammar for text-only, tool and failing turns
- Tool call execution order and conversation bookkeeping
- Unknown tools and malformed arguments
- Round limit, tool_choice policy and cancellation
"""

import re

import pytest

from aiconic.agent import ChatTurn, run_agent
from aiconic.agent.icon_agent import (
    ROUND_LIMIT_MESSAGE,
    SYSTEM_PROMPT_DEFAULT,
    SYSTEM_PROMPT_MULTIPLE,
    UPSTREAM_ERROR_MESSAGE,
)
from unit_testing.conftest import ScriptedLLM, completion, tool_call


EVENT_GRAMMAR = re.compile(
    r"^(tool_start (tool_log )*(tool_result )+(tool_log |tool_result )*)*((text |error ))?done $"
)


async def collect(agent, message="安全相关的图标", **kwargs):
    return [event.to_dict() async for event in agent.run_stream(message, **kwargs)]


def types_of(events):
    return [event["type"] for event in events]


def assert_grammar(events):
    sequence = "".join(f"{t} " for t in types_of(events))
    assert EVENT_GRAMMAR.match(sequence), f"Event sequence breaks the grammar: {sequence}"
    assert types_of(events).count("done") == 1


def icon_turn_replies(final_text="已为你生成盾牌图标"):
    return [
        completion(tool_calls=[tool_call("analyze_icon_main_body", {"userPrompt": "安全相关的图标"}, "call_a")]),
        completion(tool_calls=[tool_call("generate_icon_set", {"mainBody": "盾牌"}, "call_b")]),
        completion(content=final_text),
    ]


class TestTextOnlyTurn:

    @pytest.mark.asyncio
    async def test_text_then_done(self, make_agent):
        agent = make_agent(ScriptedLLM([completion(content="你好，我可以帮你设计图标")]))

        events = await collect(agent, "你好")

        assert events == [
            {"type": "text", "content": "你好，我可以帮你设计图标"},
            {"type": "done"},
        ]

    @pytest.mark.asyncio
    async def test_default_mode_uses_auto_tool_choice(self, make_agent):
        llm = ScriptedLLM([completion(content="ok")])
        await collect(make_agent(llm), "你好")

        call = llm.calls_of("agent")[0]
        assert call["tool_choice"] == "auto"
        assert call["messages"][0]["content"] == SYSTEM_PROMPT_DEFAULT
        assert len(call["tools"]) == 7

    @pytest.mark.asyncio
    async def test_history_precedes_message(self, make_agent):
        llm = ScriptedLLM([completion(content="ok")])
        history = [
            ChatTurn(role="user", content="云存储图标"),
            ChatTurn(role="assistant", content="已生成"),
            ChatTurn(role="assistant", content=""),
        ]

        await collect(make_agent(llm), "再来一个", history=history)

        messages = llm.calls_of("agent")[0]["messages"]
        assert messages[1:] == [
            {"role": "user", "content": "云存储图标"},
            {"role": "assistant", "content": "已生成"},
            {"role": "user", "content": "再来一个"},
        ]


class TestToolTurn:
    """A full analyze -> icon set -> text turn."""

    @pytest.mark.asyncio
    async def test_icon_set_turn(self, make_agent):
        llm = ScriptedLLM(icon_turn_replies())

        events = await collect(make_agent(llm), generate_multiple=True)

        assert_grammar(events)
        results = [e for e in events if e["type"] == "tool_result"]
        assert results[0] == {
            "type": "tool_result",
            "name": "analyze_icon_main_body",
            "mainBodies": ["盾牌", "锁", "钥匙", "城墙"],
        }
        icons = [r for r in results if r.get("svg")]
        assert [r["style"] for r in icons] == ["appstore", "material", "fluent", "neon"]
        assert all(r["name"] == "generate_icon_set" for r in icons)
        assert events[-2] == {"type": "text", "content": "已为你生成盾牌图标"}

    @pytest.mark.asyncio
    async def test_progress_logs(self, make_agent, registry):
        events = await collect(make_agent(ScriptedLLM(icon_turn_replies())), generate_multiple=True)

        logs = [e["message"] for e in events if e["type"] == "tool_log"]
        appstore = registry.require("appstore").config
        assert logs[0] == '分析: "安全相关的图标"'
        assert logs[1] == "结果: 盾牌, 锁, 钥匙, 城墙"
        assert logs[2] == "批量生成: 盾牌"
        assert f"✓ {appstore.platform} - {appstore.name}" in logs

    @pytest.mark.asyncio
    async def test_tool_choice_required_then_auto(self, make_agent):
        llm = ScriptedLLM(icon_turn_replies())
        await collect(make_agent(llm), generate_multiple=True)

        agent_calls = llm.calls_of("agent")
        assert [c["tool_choice"] for c in agent_calls] == ["required", "auto", "auto"]
        assert agent_calls[0]["messages"][0]["content"] == SYSTEM_PROMPT_MULTIPLE

    @pytest.mark.asyncio
    async def test_tool_results_fed_back_in_order(self, make_agent):
        llm = ScriptedLLM(icon_turn_replies())
        await collect(make_agent(llm), generate_multiple=True)

        messages = llm.calls_of("agent")[-1]["messages"]
        roles = [m["role"] for m in messages]
        assert roles == ["system", "user", "assistant", "tool", "assistant", "tool"]
        assert messages[2]["tool_calls"][0]["function"]["name"] == "analyze_icon_main_body"
        assert messages[3]["tool_call_id"] == "call_a"
        assert messages[5]["tool_call_id"] == "call_b"
        assert '"盾牌"' in messages[3]["content"]

    @pytest.mark.asyncio
    async def test_calls_in_one_round_run_in_listed_order(self, make_agent):
        llm = ScriptedLLM([
            completion(tool_calls=[
                tool_call("generate_icon_by_main_body", {"mainBody": "锁", "style": "neon"}, "c1"),
                tool_call("generate_icon_by_main_body", {"mainBody": "盾牌", "style": "retro"}, "c2"),
            ]),
            completion(content="好了"),
        ])

        events = await collect(make_agent(llm))

        assert_grammar(events)
        starts = [e["args"]["mainBody"] for e in events if e["type"] == "tool_start"]
        assert starts == ["锁", "盾牌"]
        assert [e["style"] for e in events if e.get("svg")] == ["neon", "retro"]

    @pytest.mark.asyncio
    async def test_requested_styles_override_default_set(self, make_agent):
        llm = ScriptedLLM(icon_turn_replies())

        events = await collect(make_agent(llm), generate_multiple=True, style_ids=["retro", "vaporwave", "clay"])

        assert [e["style"] for e in events if e.get("svg")] == ["retro", "clay"]

    @pytest.mark.asyncio
    async def test_failed_tool_reports_error_and_continues(self, make_agent):
        llm = ScriptedLLM(icon_turn_replies("生成失败了"), svg=RuntimeError("down"))

        events = await collect(make_agent(llm), generate_multiple=True)

        assert_grammar(events)
        set_results = [e for e in events if e["type"] == "tool_result" and e["name"] == "generate_icon_set"]
        assert set_results == [{"type": "tool_result", "name": "generate_icon_set", "error": "生成失败"}]
        assert events[-2]["type"] == "text"


class TestRejectedCalls:
    """Tool calls the agent cannot execute become error results."""

    @pytest.mark.asyncio
    async def test_unknown_tool(self, make_agent):
        llm = ScriptedLLM([
            completion(tool_calls=[tool_call("draw_banner", {"text": "hi"})]),
            completion(content="该工具不存在"),
        ])

        events = await collect(make_agent(llm))

        assert_grammar(events)
        assert events[0] == {"type": "tool_start", "name": "draw_banner", "args": {"text": "hi"}}
        assert events[1] == {"type": "tool_result", "name": "draw_banner", "error": "Unknown tool: draw_banner"}
        assert events[2] == {"type": "text", "content": "该工具不存在"}
        tool_message = llm.calls_of("agent")[1]["messages"][-1]
        assert tool_message["role"] == "tool"
        assert "Unknown tool" in tool_message["content"]

    @pytest.mark.asyncio
    async def test_malformed_json_arguments(self, make_agent):
        llm = ScriptedLLM([
            completion(tool_calls=[tool_call("generate_icon_set", "{mainBody: 盾牌")]),
            completion(content="参数错误"),
        ])

        events = await collect(make_agent(llm))

        assert_grammar(events)
        assert events[0] == {"type": "tool_start", "name": "generate_icon_set", "args": {}}
        assert events[1]["type"] == "tool_result"
        assert "error" in events[1]
        assert llm.calls_of("icon") == []

    @pytest.mark.asyncio
    async def test_missing_required_argument(self, make_agent):
        llm = ScriptedLLM([
            completion(tool_calls=[tool_call("generate_icon_set", {})]),
            completion(content="缺少参数"),
        ])

        events = await collect(make_agent(llm))

        assert events[1]["type"] == "tool_result"
        assert "mainBody" in events[1]["error"]

    @pytest.mark.asyncio
    async def test_unknown_style_argument(self, make_agent):
        llm = ScriptedLLM([
            completion(tool_calls=[tool_call("generate_icon_by_main_body", {"mainBody": "锁", "style": "vaporwave"})]),
            completion(content="没有这种风格"),
        ])

        events = await collect(make_agent(llm))

        assert_grammar(events)
        result = next(e for e in events if e["type"] == "tool_result")
        assert result["error"] == "Unknown style: vaporwave"
        assert llm.calls_of("icon") == []


class TestTurnLimits:

    @pytest.mark.asyncio
    async def test_round_limit(self, make_agent):
        analyze = tool_call("analyze_icon_main_body", {"userPrompt": "安全"})
        llm = ScriptedLLM([completion(tool_calls=[analyze]), completion(tool_calls=[analyze])])

        events = await collect(make_agent(llm, max_rounds=1))

        assert_grammar(events)
        assert types_of(events).count("tool_start") == 1
        assert events[-2] == {"type": "text", "content": ROUND_LIMIT_MESSAGE}
        assert len(llm.calls_of("agent")) == 2

    @pytest.mark.asyncio
    async def test_model_failure_yields_error_then_done(self, make_agent):
        agent = make_agent(ScriptedLLM([RuntimeError("502 Bad Gateway")]))

        events = await collect(agent)

        assert events == [{"type": "error", "error": UPSTREAM_ERROR_MESSAGE}, {"type": "done"}]

    @pytest.mark.asyncio
    async def test_model_failure_after_tools(self, make_agent):
        llm = ScriptedLLM([icon_turn_replies()[0], RuntimeError("timeout")])

        events = await collect(make_agent(llm))

        assert_grammar(events)
        assert events[-2] == {"type": "error", "error": UPSTREAM_ERROR_MESSAGE}

    @pytest.mark.asyncio
    async def test_cancellation_stops_emission(self, make_agent):
        llm = ScriptedLLM(icon_turn_replies())
        checks = {"count": 0}

        async def disconnected():
            checks["count"] += 1
            return checks["count"] > 2

        events = await collect(make_agent(llm), generate_multiple=True, cancellation_check=disconnected)

        assert len(events) == 2
        assert "done" not in types_of(events)
        assert len(llm.calls_of("agent")) == 1, "No further decisions after disconnect"


class TestRunAgent:

    @pytest.mark.asyncio
    async def test_collects_reply_and_icons(self, make_agent):
        agent = make_agent(ScriptedLLM(icon_turn_replies()))

        result = await run_agent(agent, "安全相关的图标", generate_multiple=True)

        assert result["reply"] == "已为你生成盾牌图标"
        assert [c["result"]["style"] for c in result["toolCalls"]] == ["appstore", "material", "fluent", "neon"]
        assert all(c["functionName"] == "generate_icon_set" for c in result["toolCalls"])
        assert result["events"][-1] == {"type": "done"}


class TestPersistenceThroughAgent:

    @pytest.mark.asyncio
    async def test_save_icon_tool(self, make_agent, store):
        llm = ScriptedLLM([
            completion(tool_calls=[tool_call("save_icon", {
                "name": "安全盾牌", "svgContent": "<svg/>", "prompt": "安全", "style": "appstore",
            })]),
            completion(content="已保存"),
        ])

        events = await collect(make_agent(llm, store=store))

        assert_grammar(events)
        logs = [e["message"] for e in events if e["type"] == "tool_log"]
        assert logs == ["保存: 安全盾牌", '图标 "安全盾牌" 已保存']
        assert store.search_icons("盾牌")[0]["name"] == "安全盾牌"
