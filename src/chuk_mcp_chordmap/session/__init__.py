"""
Exploration sessions - the user's mental model of a chord map.

This module provides:
- SessionManager: Lifecycle management for exploration sessions
- ExplorationSession: A named explored map
"""

from chuk_mcp_chordmap.session.manager import (
    ExplorationSession,
    SessionManager,
    SessionMetadata,
)

__all__ = [
    "ExplorationSession",
    "SessionManager",
    "SessionMetadata",
]
