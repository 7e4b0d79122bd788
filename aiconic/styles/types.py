"""
Style plugin types.

A style plugin bundles a palette, an SVG wrapper template and the drawing
instructions sent to the model. Plugins are plain data: adding a style
never touches the agent or the tools.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict


@dataclass(frozen=True)
class StyleColors:
    """Four-color palette shared by a style's template and prompt."""
    primary: str
    secondary: str
    background: str
    accent: str

    def to_dict(self) -> Dict[str, str]:
        return {
            "primary": self.primary,
            "secondary": self.secondary,
            "background": self.background,
            "accent": self.accent,
        }


@dataclass(frozen=True)
class StyleConfig:
    """Public description of a style, as listed by GET /api/styles."""
    id: str
    name: str
    platform: str
    description: str
    colors: StyleColors

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "platform": self.platform,
            "description": self.description,
            "colors": self.colors.to_dict(),
        }


@dataclass(frozen=True)
class StylePlugin:
    """
    A registered visual style.

    build_svg(icon_content, colors) wraps a drawn fragment into a complete
    120x120 SVG document. get_prompt(subject, colors) returns the system
    prompt that asks the model to draw the subject in this style.
    """
    config: StyleConfig
    build_svg: Callable[[str, StyleColors], str]
    get_prompt: Callable[[str, StyleColors], str]

    @property
    def id(self) -> str:
        return self.config.id

    @property
    def colors(self) -> StyleColors:
        return self.config.colors

    def render(self, icon_content: str) -> str:
        """Wrap a fragment using this style's own palette."""
        return self.build_svg(icon_content, self.config.colors)

    def prompt_for(self, subject: str) -> str:
        return self.get_prompt(subject, self.config.colors)
