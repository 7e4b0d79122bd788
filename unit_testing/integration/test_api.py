"""
Integration tests for the HTTP API.

Runs the FastAPI app against an in-memory SQLite database with the model
client replaced by a scripted fake.
"""

import pytest

from aiconic.api.services import get_icon_agent, get_store
from unit_testing.conftest import ScriptedLLM, completion, parse_sse, tool_call


def _use_agent(app, make_agent, llm, **kwargs):
    agent = make_agent(llm, **kwargs)
    app.dependency_overrides[get_icon_agent] = lambda: agent
    return agent


def _icon_replies():
    return [
        completion(tool_calls=[tool_call("analyze_icon_main_body", {"userPrompt": "安全防护图标"}, "call_a")]),
        completion(tool_calls=[tool_call("generate_icon_set", {"mainBody": "盾牌"}, "call_b")]),
        completion(content="已生成 4 个盾牌图标"),
    ]


# =============================================================================
# Chat Streaming
# =============================================================================

class TestChatEndpoint:
    """POST /api/chat"""

    def test_greeting_streams_text_then_done(self, app, test_client, make_agent):
        _use_agent(app, make_agent, ScriptedLLM([completion(content="你好！想设计什么图标？")]))

        response = test_client.post("/api/chat", json={"message": "你好"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert parse_sse(response.text) == [
            {"type": "text", "content": "你好！想设计什么图标？"},
            {"type": "done"},
            "[DONE]",
        ]

    def test_icon_set_turn(self, app, test_client, make_agent):
        llm = ScriptedLLM(_icon_replies())
        _use_agent(app, make_agent, llm)

        response = test_client.post("/api/chat", json={"message": "安全防护图标", "generateMultiple": True})
        events = parse_sse(response.text)

        assert events[-1] == "[DONE]"
        assert events[-2] == {"type": "done"}
        assert events[0] == {
            "type": "tool_start",
            "name": "analyze_icon_main_body",
            "args": {"userPrompt": "安全防护图标"},
        }
        svgs = [e for e in events[:-1] if e["type"] == "tool_result" and "svg" in e]
        assert len(svgs) == 4
        assert all(e["svg"].startswith("<svg") for e in svgs)
        assert llm.calls_of("agent")[0]["tool_choice"] == "required"

    def test_styles_alias_selects_icon_set_styles(self, app, test_client, make_agent):
        _use_agent(app, make_agent, ScriptedLLM(_icon_replies()))

        response = test_client.post(
            "/api/chat",
            json={"message": "安全防护图标", "generateMultiple": True, "styles": ["retro", "clay"]},
        )

        styles = [e["style"] for e in parse_sse(response.text)[:-1] if e.get("svg")]
        assert styles == ["retro", "clay"]

    def test_history_is_forwarded(self, app, test_client, make_agent):
        llm = ScriptedLLM([completion(content="好的")])
        _use_agent(app, make_agent, llm)

        test_client.post("/api/chat", json={
            "message": "换个颜色",
            "history": [
                {"role": "user", "content": "盾牌图标"},
                {"role": "assistant", "content": "已完成", "toolCalls": [
                    {"name": "generate_icon_set", "status": "done", "logLines": ["批量生成: 盾牌"]},
                ]},
            ],
        })

        roles = [m["role"] for m in llm.calls_of("agent")[0]["messages"]]
        assert roles == ["system", "user", "assistant", "user"]

    def test_upstream_failure_is_streamed(self, app, test_client, make_agent):
        _use_agent(app, make_agent, ScriptedLLM([RuntimeError("upstream 500")]))

        response = test_client.post("/api/chat", json={"message": "你好"})

        assert response.status_code == 200
        assert parse_sse(response.text) == [
            {"type": "error", "error": "处理失败，请重试"},
            {"type": "done"},
            "[DONE]",
        ]

    @pytest.mark.parametrize("body", [{}, {"message": ""}, {"message": "   "}])
    def test_missing_message(self, app, test_client, make_agent, body):
        llm = ScriptedLLM()
        _use_agent(app, make_agent, llm)

        response = test_client.post("/api/chat", json=body)

        assert response.status_code == 400
        assert response.json() == {"error": "Message is required"}
        assert llm.calls == []

    def test_missing_api_key(self, test_client, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        monkeypatch.delenv("LLM_API_KEY", raising=False)

        response = test_client.post("/api/chat", json={"message": "你好"})

        assert response.status_code == 500
        assert response.json() == {"error": "Model API key not configured"}

    def test_invalid_body(self, test_client):
        response = test_client.post("/api/chat", json={"message": "hi", "history": "nope"})
        assert response.status_code == 422
        assert response.json()["error"] == "Invalid request body"


# =============================================================================
# Unexpected Failures
# =============================================================================

class TestUnexpectedErrors:
    """Failures before a response starts still answer with {"error"}."""

    @pytest.fixture
    def lenient_client(self, app):
        from fastapi.testclient import TestClient

        with TestClient(app, raise_server_exceptions=False) as client:
            yield client

    def test_agent_construction_failure(self, app, lenient_client):
        def broken_agent():
            raise RuntimeError("client construction failed")

        app.dependency_overrides[get_icon_agent] = broken_agent

        response = lenient_client.post("/api/chat", json={"message": "hi"})

        assert response.status_code == 500
        assert response.headers["content-type"].startswith("application/json")
        assert response.json() == {"error": "Internal server error"}

    def test_store_failure(self, app, lenient_client):
        class BrokenStore:
            def list_sessions(self):
                raise RuntimeError("connection reset")

        app.dependency_overrides[get_store] = lambda: BrokenStore()

        response = lenient_client.get("/api/sessions")

        assert response.status_code == 500
        assert response.json() == {"error": "Internal server error"}


# =============================================================================
# Styles and Health
# =============================================================================

class TestCatalogueEndpoints:

    def test_list_styles(self, test_client):
        response = test_client.get("/api/styles")

        assert response.status_code == 200
        styles = response.json()["styles"]
        assert len(styles) == 17
        assert styles[0]["id"] == "appstore"
        assert set(styles[0]) == {"id", "name", "platform", "description", "colors"}

    def test_health(self, test_client):
        response = test_client.get("/api/health")

        assert response.status_code == 200
        data = response.json()
        assert data["styles"] == 17
        assert data["status"] in ("ok", "degraded")
        assert data["database"] == "Connected"


# =============================================================================
# Sessions
# =============================================================================

class TestSessionEndpoints:
    """Session persistence round trips."""

    def test_create_and_list(self, test_client):
        created = test_client.post("/api/sessions").json()["session"]

        assert created["title"] == "新会话"
        assert created["createdAt"] == created["updatedAt"]

        sessions = test_client.get("/api/sessions").json()["sessions"]
        assert [s["id"] for s in sessions] == [created["id"]]

    def test_create_with_title(self, test_client):
        created = test_client.post("/api/sessions", json={"title": "图标"}).json()["session"]
        assert created["title"] == "图标"

    def test_first_user_message_names_session(self, test_client):
        session_id = test_client.post("/api/sessions").json()["session"]["id"]

        response = test_client.post(f"/api/sessions/{session_id}/messages", json={
            "message": {"role": "user", "content": "  一个   现代   图标  "},
        })

        assert response.status_code == 200
        assert response.json()["newTitle"] == "一个 现代 图标"
        detail = test_client.get(f"/api/sessions/{session_id}").json()
        assert detail["session"]["title"] == "一个 现代 图标"

    def test_assistant_message_with_icons(self, test_client):
        session_id = test_client.post("/api/sessions").json()["session"]["id"]
        test_client.post(f"/api/sessions/{session_id}/messages", json={
            "message": {"role": "user", "content": "安全防护"},
        })

        response = test_client.post(f"/api/sessions/{session_id}/messages", json={
            "message": {
                "role": "assistant",
                "content": "已完成",
                "toolCalls": [{"name": "generate_icon_set", "status": "done", "logLines": []}],
            },
            "generatedIcons": [
                {"svg": "<svg>a</svg>", "style": "appstore"},
                {"svg": "<svg>b</svg>", "style": "neon"},
            ],
        })

        assert response.status_code == 200
        assert len(response.json()["icons"]) == 2
        detail = test_client.get(f"/api/sessions/{session_id}").json()
        assert [m["role"] for m in detail["messages"]] == ["user", "assistant"]
        assert [i["style"] for i in detail["icons"]] == ["appstore", "neon"]
        assert detail["icons"][0]["svgContent"] == "<svg>a</svg>"

    def test_delete_session(self, test_client):
        session_id = test_client.post("/api/sessions").json()["session"]["id"]

        assert test_client.delete(f"/api/sessions/{session_id}").json() == {"success": True}
        response = test_client.get(f"/api/sessions/{session_id}")
        assert response.status_code == 404
        assert response.json() == {"error": "Session not found"}

    def test_unknown_session(self, test_client):
        missing = "00000000-0000-0000-0000-000000000000"
        assert test_client.get(f"/api/sessions/{missing}").status_code == 404
        assert test_client.delete(f"/api/sessions/{missing}").status_code == 404
        response = test_client.post(f"/api/sessions/{missing}/messages", json={
            "message": {"role": "user", "content": "hi"},
        })
        assert response.status_code == 404

    def test_invalid_role(self, test_client):
        session_id = test_client.post("/api/sessions").json()["session"]["id"]
        response = test_client.post(f"/api/sessions/{session_id}/messages", json={
            "message": {"role": "system", "content": "hi"},
        })
        assert response.status_code == 422
