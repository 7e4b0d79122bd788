"""
Style catalogue for AIconic icons.
"""

from .types import StyleColors, StyleConfig, StylePlugin
from .registry import StyleRegistry, UnknownStyleError, build_default_registry

__all__ = [
    "StyleColors",
    "StyleConfig",
    "StylePlugin",
    "StyleRegistry",
    "UnknownStyleError",
    "build_default_registry",
]
