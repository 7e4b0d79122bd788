"""
Style registry.

An explicit lookup table from style id to plugin. The application builds
one registry at startup with build_default_registry() and hands it to the
icon synthesizer and the tool set.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterator, List, Optional

from .types import StyleConfig, StylePlugin

logger = logging.getLogger(__name__)


class UnknownStyleError(KeyError):
    """Raised when a style id does not resolve to a registered plugin."""

    def __init__(self, style_id: str):
        super().__init__(style_id)
        self.style_id = style_id

    def __str__(self) -> str:
        return f"Unknown style: {self.style_id}"


class StyleRegistry:
    """Mapping of style id to StylePlugin, in registration order."""

    def __init__(self, plugins: Optional[List[StylePlugin]] = None):
        self._plugins: Dict[str, StylePlugin] = {}
        for plugin in plugins or []:
            self.register(plugin)

    def register(self, plugin: StylePlugin) -> None:
        """Add a plugin, replacing any plugin with the same id."""
        if plugin.id in self._plugins:
            logger.info(f"Replacing style plugin: {plugin.id}")
        self._plugins[plugin.id] = plugin

    def get(self, style_id: str) -> Optional[StylePlugin]:
        return self._plugins.get(style_id)

    def require(self, style_id: str) -> StylePlugin:
        """Get a plugin or raise UnknownStyleError."""
        plugin = self._plugins.get(style_id)
        if plugin is None:
            raise UnknownStyleError(style_id)
        return plugin

    def has(self, style_id: str) -> bool:
        return style_id in self._plugins

    def ids(self) -> List[str]:
        return list(self._plugins.keys())

    def list(self) -> List[StyleConfig]:
        """Public configs of all registered styles."""
        return [plugin.config for plugin in self._plugins.values()]

    def __contains__(self, style_id: object) -> bool:
        return style_id in self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

    def __iter__(self) -> Iterator[StylePlugin]:
        return iter(self._plugins.values())


def build_default_registry() -> StyleRegistry:
    """Create a registry holding every built-in style."""
    from . import (
        appstore,
        material,
        fluent,
        neon,
        serene,
        atelier,
        glassmorphism,
        neumorphism,
        isometric,
        gradient,
        minimal,
        cyberpunk,
        retro,
        watercolor,
        clay,
        aurora,
        metallic,
    )

    return StyleRegistry([
        appstore.PLUGIN,
        material.PLUGIN,
        fluent.PLUGIN,
        neon.PLUGIN,
        serene.PLUGIN,
        atelier.PLUGIN,
        glassmorphism.PLUGIN,
        neumorphism.PLUGIN,
        isometric.PLUGIN,
        gradient.PLUGIN,
        minimal.PLUGIN,
        cyberpunk.PLUGIN,
        retro.PLUGIN,
        watercolor.PLUGIN,
        clay.PLUGIN,
        aurora.PLUGIN,
        metallic.PLUGIN,
    ])
