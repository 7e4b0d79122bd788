"""
Shared service instances for the API.

The style registry, store and agent are built once per process on first
use. Routes receive them through FastAPI dependencies, so tests can swap
them with app.dependency_overrides.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import HTTPException

from ..agent import IconAgent, create_icon_agent
from ..config import AgentConfig, LLMConfig, create_llm_client
from ..db import IconStore, is_database_configured
from ..styles import StyleRegistry, build_default_registry

logger = logging.getLogger(__name__)

_registry: Optional[StyleRegistry] = None
_agent: Optional[IconAgent] = None


def get_style_registry() -> StyleRegistry:
    global _registry
    if _registry is None:
        _registry = build_default_registry()
        logger.info(f"Style registry built with {len(_registry)} styles")
    return _registry


def get_optional_store() -> Optional[IconStore]:
    """IconStore when a database is configured, else None."""
    if not is_database_configured():
        return None
    return IconStore()


def get_store() -> IconStore:
    store = get_optional_store()
    if store is None:
        raise HTTPException(status_code=503, detail="Database not configured")
    return store


def get_icon_agent() -> Optional[IconAgent]:
    """
    Build the agent on first use.
    
    Returns:
        The shared IconAgent, or None if no model API key is configured
    """
    global _agent
    if _agent is None:
        llm_config = LLMConfig.from_env()
        if not llm_config.is_configured:
            logger.error("Model API key not configured. Set OPENAI_API_KEY.")
            return None
        _agent = create_icon_agent(
            create_llm_client(llm_config),
            store=get_optional_store(),
            registry=get_style_registry(),
            llm_config=llm_config,
            config=AgentConfig.from_env(),
        )
        logger.info(f"Icon agent ready (model={llm_config.agent_model})")
    return _agent


def reset_services() -> None:
    """Drop cached instances so the next request rebuilds them."""
    global _registry, _agent
    _registry = None
    _agent = None
