"""
Runtime settings for AIconic.

All values come from environment variables so the same build runs locally
(with a .env file) and in a container.

Model access:
- OPENAI_API_KEY / LLM_API_KEY: API key for the chat-completion endpoint
- OPENAI_BASE_URL / LLM_API_BASE: Base URL (default: https://api.openai.com/v1)
- AICONIC_AGENT_MODEL: Model that decides which tools to call
- AICONIC_ICON_MODEL: Model that draws SVG fragments
- AICONIC_ANALYSIS_MODEL: Model that extracts visual subjects
- AICONIC_LLM_TIMEOUT_SECONDS: Per-request timeout (default: 60)

Agent behaviour:
- AICONIC_MAX_ROUNDS: Max tool-execution rounds per chat turn (default: 5)
- AICONIC_ICON_SET_STYLES: Comma separated style ids for icon sets
- AICONIC_DB_TIMEOUT_SECONDS: Timeout for database work done by tools (default: 10)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from openai import AsyncOpenAI


DEFAULT_MODEL = "gpt-4o-mini"
DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_ICON_SET_STYLES = ["appstore", "material", "fluent", "neon"]


def _str_to_bool(value: str) -> bool:
    """Convert string environment variable to boolean."""
    return value.lower() in ("true", "1", "yes", "on", "enabled")


def _get_env_bool(name: str, default: bool = False) -> bool:
    """Get boolean from environment variable."""
    value = os.getenv(name, "")
    if not value:
        return default
    return _str_to_bool(value)


def _get_env_int(name: str, default: int) -> int:
    """Get integer from environment variable."""
    value = os.getenv(name, "")
    if not value:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_env_float(name: str, default: float) -> float:
    """Get float from environment variable."""
    value = os.getenv(name, "")
    if not value:
        return default
    try:
        return float(value)
    except ValueError:
        return default


# Create missing tables at startup (local SQLite runs); production uses Alembic
AUTO_CREATE_TABLES = _get_env_bool("AICONIC_AUTO_CREATE_TABLES", True)


def _get_env_list(name: str, default: List[str]) -> List[str]:
    """Get a comma separated list from environment variable."""
    value = os.getenv(name, "")
    items = [item.strip() for item in value.split(",") if item.strip()]
    return items or list(default)


@dataclass
class LLMConfig:
    """Connection settings for the chat-completion API."""
    api_key: Optional[str] = None
    base_url: str = DEFAULT_BASE_URL
    agent_model: str = DEFAULT_MODEL
    icon_model: str = DEFAULT_MODEL
    analysis_model: str = DEFAULT_MODEL
    request_timeout_seconds: float = 60.0

    @classmethod
    def from_env(cls) -> "LLMConfig":
        """Load config from environment variables."""
        fallback_model = os.getenv("LLM_MODEL_NAME", DEFAULT_MODEL)
        return cls(
            api_key=os.getenv("OPENAI_API_KEY") or os.getenv("LLM_API_KEY"),
            base_url=os.getenv("OPENAI_BASE_URL") or os.getenv("LLM_API_BASE", DEFAULT_BASE_URL),
            agent_model=os.getenv("AICONIC_AGENT_MODEL", fallback_model),
            icon_model=os.getenv("AICONIC_ICON_MODEL", fallback_model),
            analysis_model=os.getenv("AICONIC_ANALYSIS_MODEL", fallback_model),
            request_timeout_seconds=_get_env_float("AICONIC_LLM_TIMEOUT_SECONDS", 60.0),
        )

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def to_dict(self) -> Dict[str, Any]:
        """Serialize without the API key."""
        return {
            "base_url": self.base_url,
            "agent_model": self.agent_model,
            "icon_model": self.icon_model,
            "analysis_model": self.analysis_model,
            "request_timeout_seconds": self.request_timeout_seconds,
            "api_key_set": self.is_configured,
        }


@dataclass
class AgentConfig:
    """Limits and sampling parameters for the icon agent and its tools."""
    max_rounds: int = 5
    icon_set_styles: List[str] = field(default_factory=lambda: list(DEFAULT_ICON_SET_STYLES))
    icon_temperature: float = 0.6
    icon_max_tokens: int = 600
    analysis_temperature: float = 0.5
    analysis_max_tokens: int = 200
    db_timeout_seconds: float = 10.0

    @classmethod
    def from_env(cls) -> "AgentConfig":
        """Load config from environment variables."""
        return cls(
            max_rounds=max(1, _get_env_int("AICONIC_MAX_ROUNDS", 5)),
            icon_set_styles=_get_env_list("AICONIC_ICON_SET_STYLES", DEFAULT_ICON_SET_STYLES),
            icon_temperature=_get_env_float("AICONIC_ICON_TEMPERATURE", 0.6),
            icon_max_tokens=_get_env_int("AICONIC_ICON_MAX_TOKENS", 600),
            analysis_temperature=_get_env_float("AICONIC_ANALYSIS_TEMPERATURE", 0.5),
            analysis_max_tokens=_get_env_int("AICONIC_ANALYSIS_MAX_TOKENS", 200),
            db_timeout_seconds=_get_env_float("AICONIC_DB_TIMEOUT_SECONDS", 10.0),
        )


def create_llm_client(config: Optional[LLMConfig] = None) -> AsyncOpenAI:
    """Create the shared async OpenAI-compatible client."""
    config = config or LLMConfig.from_env()
    return AsyncOpenAI(api_key=config.api_key, base_url=config.base_url)
