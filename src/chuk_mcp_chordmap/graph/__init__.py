"""
Chord graph - branching exploration of chord space through pivot notes.

Exploration grows an ExploredMap one branch at a time:
- start_at places the first chord
- branch ranks neighbours sharing a chosen pivot set and links them
- move_to / back walk the map
"""

from chuk_mcp_chordmap.graph.engine import BranchCandidate, ChordGraphEngine
from chuk_mcp_chordmap.graph.explored_map import ChordGraphNode, Edge, ExploredMap, node_id
from chuk_mcp_chordmap.graph.pool import ALL_ROOTS, CandidatePool
from chuk_mcp_chordmap.graph.scoring import (
    ScoreBreakdown,
    rank_key,
    score_candidate,
    voice_leading_cost,
)

__all__ = [
    "ALL_ROOTS",
    "BranchCandidate",
    "CandidatePool",
    "ChordGraphEngine",
    "ChordGraphNode",
    "Edge",
    "ExploredMap",
    "ScoreBreakdown",
    "node_id",
    "rank_key",
    "score_candidate",
    "voice_leading_cost",
]
