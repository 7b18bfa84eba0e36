"""
Pydantic models for the chord map.

This module provides:
- ScoringWeights / GraphConfig: Graph engine configuration
- ChordDescription / ScaleDescription: Inspection records
- NodeRecord / EdgeRecord / MapSnapshot: Explored map snapshots
"""

from chuk_mcp_chordmap.models.config import GraphConfig, ScoringWeights
from chuk_mcp_chordmap.models.records import (
    ChordDescription,
    EdgeRecord,
    MapSnapshot,
    MapState,
    NodeRecord,
    ScaleDescription,
)

__all__ = [
    "ChordDescription",
    "EdgeRecord",
    "GraphConfig",
    "MapSnapshot",
    "MapState",
    "NodeRecord",
    "ScaleDescription",
    "ScoringWeights",
]
