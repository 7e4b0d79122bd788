"""
Pytest fixtures for AIconic tests.

Provides:
- Isolated in-memory SQLite database
- A scripted stand-in for the AsyncOpenAI client
- Agent, toolbox and FastAPI test client factories
"""

import json
import os
import sys
from types import SimpleNamespace
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

# Add project root to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))

from aiconic.config import AgentConfig, LLMConfig
from aiconic.db import IconStore, init_engine, reset_engine, create_all_tables, drop_all_tables
from aiconic.styles import build_default_registry


# =============================================================================
# Fake Model Client
# =============================================================================

def completion(content: Optional[str] = None, tool_calls: Optional[List[Any]] = None) -> SimpleNamespace:
    """Build an object shaped like a chat.completions.create() response."""
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(choices=[SimpleNamespace(message=message)])


def tool_call(name: str, args: Union[Dict[str, Any], str], call_id: str = "call_1") -> SimpleNamespace:
    """Build an object shaped like a tool call in a model response."""
    arguments = args if isinstance(args, str) else json.dumps(args, ensure_ascii=False)
    return SimpleNamespace(
        id=call_id,
        type="function",
        function=SimpleNamespace(name=name, arguments=arguments),
    )


DEFAULT_SVG_FRAGMENT = '<path d="M60 35 L80 45 L80 65 Q80 80 60 88 Q40 80 40 65 L40 45 Z" fill="#fff"/>'
DEFAULT_ANALYSIS = json.dumps(
    {"mainBodies": ["盾牌", "锁", "钥匙", "城墙"], "reasoning": "安全概念最直观的视觉符号"},
    ensure_ascii=False,
)


class ScriptedLLM:
    """
    Stand-in for AsyncOpenAI routing requests by their shape.
    
    - requests carrying `tools` are agent decisions, answered from
      `agent_replies` in order
    - requests carrying `response_format` are subject analyses
    - everything else is an icon drawing request
    
    Any scripted value may be an Exception, which is raised instead.
    """
    
    def __init__(
        self,
        agent_replies: Optional[List[Any]] = None,
        analysis: Any = DEFAULT_ANALYSIS,
        svg: Union[str, Exception, Callable[[Dict[str, Any]], str]] = DEFAULT_SVG_FRAGMENT,
    ):
        self.agent_replies = list(agent_replies or [])
        self.analysis = analysis
        self.svg = svg
        self.calls: List[Dict[str, Any]] = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))
    
    def calls_of(self, kind: str) -> List[Dict[str, Any]]:
        return [call for call in self.calls if self._kind(call) == kind]
    
    @staticmethod
    def _kind(kwargs: Dict[str, Any]) -> str:
        if "tools" in kwargs:
            return "agent"
        if "response_format" in kwargs:
            return "analysis"
        return "icon"
    
    async def _create(self, **kwargs):
        self.calls.append(kwargs)
        kind = self._kind(kwargs)
        if kind == "agent":
            if not self.agent_replies:
                raise AssertionError("Agent asked for more decisions than scripted")
            value = self.agent_replies.pop(0)
        elif kind == "analysis":
            value = self.analysis
        else:
            value = self.svg(kwargs) if callable(self.svg) else self.svg
        
        if isinstance(value, Exception):
            raise value
        if isinstance(value, str):
            return completion(content=value)
        return value


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture
def db():
    """Fresh in-memory SQLite database for one test."""
    reset_engine()
    init_engine("sqlite://")
    create_all_tables()
    yield
    drop_all_tables()
    reset_engine()


@pytest.fixture
def store(db) -> IconStore:
    return IconStore()


# =============================================================================
# Agent Fixtures
# =============================================================================

@pytest.fixture
def registry():
    return build_default_registry()


@pytest.fixture
def llm_config() -> LLMConfig:
    return LLMConfig(api_key="test-key", request_timeout_seconds=5.0)


@pytest.fixture
def make_agent(registry, llm_config):
    """Factory: make_agent(llm, store=None, **agent_config_overrides)."""
    from aiconic.agent import create_icon_agent
    
    def _make(llm: ScriptedLLM, store: Optional[IconStore] = None, **overrides):
        return create_icon_agent(
            llm,
            store=store,
            registry=registry,
            llm_config=llm_config,
            config=AgentConfig(**overrides),
        )
    return _make


@pytest.fixture
def make_toolbox(registry, llm_config):
    """Factory: make_toolbox(llm, store=None) returning an IconToolbox."""
    from aiconic.tools import IconSynthesizer, IconToolbox
    
    def _make(llm: ScriptedLLM, store: Optional[IconStore] = None, **kwargs):
        synthesizer = IconSynthesizer(llm, registry, timeout_seconds=llm_config.request_timeout_seconds)
        return IconToolbox(llm, registry, synthesizer, store=store, **kwargs)
    return _make


# =============================================================================
# HTTP Fixtures
# =============================================================================

@pytest.fixture
def app(db):
    from main import app as fastapi_app
    from aiconic.api.services import reset_services
    
    reset_services()
    yield fastapi_app
    fastapi_app.dependency_overrides.clear()
    reset_services()


@pytest.fixture
def test_client(app):
    """Create a FastAPI test client."""
    from fastapi.testclient import TestClient
    
    with TestClient(app) as client:
        yield client


def parse_sse(body: str) -> List[Any]:
    """Split an SSE body into decoded events; the [DONE] sentinel stays a string."""
    events = []
    for chunk in body.split("\n\n"):
        if not chunk.strip():
            continue
        assert chunk.startswith("data: "), f"Malformed SSE chunk: {chunk!r}"
        payload = chunk[len("data: "):]
        events.append(payload if payload == "[DONE]" else json.loads(payload))
    return events
