"""
Theory library - YAML-defined chord qualities, scales, and graph settings.

Project files override the shipped library, which extends the built-in tables.
"""

from chuk_mcp_chordmap.library.loader import TheoryLibrary

__all__ = ["TheoryLibrary"]
