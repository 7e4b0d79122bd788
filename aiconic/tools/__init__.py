"""
Icon generation tools for the AIconic agent.
"""

from .icon_synthesis import IconSynthesizer, clean_svg_fragment, fallback_fragment
from .icon_tools import (
    ERROR_ANALYSIS_FAILED,
    ERROR_GENERATION_FAILED,
    ERROR_ICON_NOT_FOUND,
    ERROR_NO_DATABASE,
    ERROR_NO_SUBJECTS,
    ERROR_TIMEOUT,
    IconToolbox,
    SubjectAnalysis,
)

__all__ = [
    "ERROR_ANALYSIS_FAILED",
    "ERROR_GENERATION_FAILED",
    "ERROR_ICON_NOT_FOUND",
    "ERROR_NO_DATABASE",
    "ERROR_NO_SUBJECTS",
    "ERROR_TIMEOUT",
    "IconSynthesizer",
    "IconToolbox",
    "SubjectAnalysis",
    "clean_svg_fragment",
    "fallback_fragment",
]
