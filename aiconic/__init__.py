"""
AIconic - AI SVG icon generator.

A tool-calling agent that turns a natural-language description into
SVG app icons across a catalogue of visual styles.
"""

__version__ = "0.1.0"
