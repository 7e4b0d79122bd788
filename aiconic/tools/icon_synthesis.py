"""
Icon Synthesis - draw one SVG icon for a subject in a given style.

Flow:
1. Resolve the style plugin (unknown ids fail before any model call)
2. Ask the model for bare SVG shape elements using the style's prompt
3. Strip code fences and any outer <svg> wrapper from the reply
4. Substitute a plain circle when the reply is empty or too short
5. Wrap the fragment in the style's SVG template

The result is always a complete SVG document, or None when the model
call itself failed.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Optional

from ..styles import StyleColors, StyleRegistry

logger = logging.getLogger(__name__)

MIN_FRAGMENT_LENGTH = 20

_FENCE_OPEN_RE = re.compile(r"```(?:svg|xml)?\s*", re.IGNORECASE)
_FENCE_RE = re.compile(r"```")
_SVG_OPEN_RE = re.compile(r"<svg[^>]*>", re.IGNORECASE)
_SVG_CLOSE_RE = re.compile(r"</svg>", re.IGNORECASE)


def clean_svg_fragment(raw: str) -> str:
    """Remove markdown fences and outer <svg> tags from a model reply."""
    text = _FENCE_OPEN_RE.sub("", raw or "")
    text = _FENCE_RE.sub("", text)
    text = _SVG_OPEN_RE.sub("", text)
    text = _SVG_CLOSE_RE.sub("", text)
    return text.strip()


def fallback_fragment(colors: StyleColors) -> str:
    """Deterministic placeholder shape in the style's primary color."""
    return f'<circle cx="60" cy="60" r="20" fill="{colors.primary}"/>'


class IconSynthesizer:
    """
    Generates SVG icons through a chat-completion model.
    
    Attributes:
        client: AsyncOpenAI-compatible client
        registry: Style registry used to resolve style ids
        model: Model name for drawing requests
    """
    
    def __init__(
        self,
        client: Any,
        registry: StyleRegistry,
        model: str = "gpt-4o-mini",
        temperature: float = 0.6,
        max_tokens: int = 600,
        timeout_seconds: float = 60.0,
    ):
        self.client = client
        self.registry = registry
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.timeout_seconds = timeout_seconds
    
    async def synthesize(self, subject: str, style_id: str) -> Optional[str]:
        """
        Draw `subject` in style `style_id`.
        
        Raises:
            UnknownStyleError: If style_id is not registered
        
        Returns:
            A complete SVG document, or None if the model call failed
        """
        plugin = self.registry.require(style_id)
        logger.info(f"Synthesizing {plugin.config.platform} icon [{style_id}] for subject: {subject}")
        
        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": plugin.prompt_for(subject)},
                        {"role": "user", "content": f'绘制 "{subject}":'},
                    ],
                    temperature=self.temperature,
                    max_tokens=self.max_tokens,
                ),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(f"Icon synthesis timed out after {self.timeout_seconds}s [{style_id}]")
            return None
        except Exception as e:
            logger.error(f"Icon synthesis failed [{style_id}]: {e}")
            return None
        
        raw = ""
        if response.choices:
            raw = response.choices[0].message.content or ""
        
        fragment = clean_svg_fragment(raw)
        if len(fragment) < MIN_FRAGMENT_LENGTH:
            logger.warning(f"Model returned no usable shapes for '{subject}' [{style_id}], using fallback")
            fragment = fallback_fragment(plugin.colors)
        
        return plugin.render(fragment)
