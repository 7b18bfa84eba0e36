"""
MCP tool implementations.

Tools are organized by domain:
- theory - Chord and scale construction and inspection
- explore - Chord map sessions: branching, moving, exporting
"""

from chuk_mcp_chordmap.tools.explore import register_explore_tools
from chuk_mcp_chordmap.tools.theory import register_theory_tools

__all__ = [
    "register_explore_tools",
    "register_theory_tools",
]
