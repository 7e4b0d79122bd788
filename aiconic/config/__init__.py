"""
Configuration module for AIconic.
"""

from .settings import (
    AgentConfig,
    LLMConfig,
    create_llm_client,
    DEFAULT_ICON_SET_STYLES,
    AUTO_CREATE_TABLES,
)

__all__ = [
    "AgentConfig",
    "LLMConfig",
    "create_llm_client",
    "DEFAULT_ICON_SET_STYLES",
    "AUTO_CREATE_TABLES",
]
