"""
Explored map - the session-scoped chord graph.

Nodes live in an arena keyed by a content-derived id, so revisiting a
chord always lands on the same node object. Edges are keyed by
(source, target); writing an existing edge replaces its score and pivots
(last write wins) instead of adding a duplicate.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from chuk_mcp_chordmap.core.chord import Chord
from chuk_mcp_chordmap.core.pitch import PitchClass
from chuk_mcp_chordmap.errors import SessionEnded, UnknownNode
from chuk_mcp_chordmap.models.records import MapState

from .scoring import ScoreBreakdown


def node_id(chord: Chord, merge_sonorities: bool = False) -> str:
    """
    Stable id for a chord: '<pitch classes>:<formula>:<inversion>'.

    C major in root position is '0.4.7:maj:0'. With merge_sonorities the
    id is the pitch-class set alone ('0.4.7'), so every chord that sounds
    the same shares one node.
    """
    pcs = ".".join(str(int(pc)) for pc in sorted(chord.pitch_classes))
    if merge_sonorities:
        return pcs
    return f"{pcs}:{chord.formula.name}:{chord.inversion}"


@dataclass
class ChordGraphNode:
    """A chord placed in the map."""

    id: str
    chord: Chord
    visits: int = 0

    @property
    def pitch_classes(self) -> frozenset[PitchClass]:
        return self.chord.pitch_classes


@dataclass
class Edge:
    """A scored transition, remembering which pivots it was found through."""

    source: str
    target: str
    pivots: frozenset[PitchClass]
    score: float
    breakdown: ScoreBreakdown | None = field(default=None, compare=False)


class ExploredMap:
    """
    A directed graph of visited chords plus a current position.

    Idle until a start node is placed, positioned afterwards, ended once
    closed. History records previous positions for backtracking.
    """

    def __init__(self, merge_sonorities: bool = False):
        self.merge_sonorities = merge_sonorities
        self.nodes: dict[str, ChordGraphNode] = {}
        self.edges: dict[tuple[str, str], Edge] = {}
        self.current: str | None = None
        self.history: list[str] = []
        self._ended = False

    @property
    def state(self) -> MapState:
        if self._ended:
            return MapState.ENDED
        if self.current is None:
            return MapState.IDLE
        return MapState.POSITIONED

    def ensure_open(self) -> None:
        if self._ended:
            raise SessionEnded("The explored map has ended")

    def close(self) -> None:
        self._ended = True

    def id_for(self, chord: Chord) -> str:
        return node_id(chord, self.merge_sonorities)

    def node(self, key: str | Chord | ChordGraphNode) -> ChordGraphNode:
        """
        Look up a node by id, chord, or node.

        Raises:
            UnknownNode: If the node is not in the map
        """
        if isinstance(key, ChordGraphNode):
            key = key.id
        elif isinstance(key, Chord):
            key = self.id_for(key)
        try:
            return self.nodes[key]
        except KeyError:
            raise UnknownNode(f"Node not in map: {key}") from None

    @property
    def current_node(self) -> ChordGraphNode | None:
        return self.nodes[self.current] if self.current is not None else None

    def add_node(self, chord: Chord) -> ChordGraphNode:
        """Insert a chord, reusing the existing node when its id is known."""
        key = self.id_for(chord)
        existing = self.nodes.get(key)
        if existing is not None:
            return existing
        node = ChordGraphNode(key, chord)
        self.nodes[key] = node
        return node

    def set_edge(self, edge: Edge) -> Edge:
        """Insert or overwrite the edge between two nodes."""
        self.edges[(edge.source, edge.target)] = edge
        return edge

    def has_edge(self, source: str, target: str) -> bool:
        return (source, target) in self.edges

    def edges_from(self, source: str) -> list[Edge]:
        """Outgoing edges, best score first."""
        outgoing = [e for (s, _), e in self.edges.items() if s == source]
        return sorted(outgoing, key=lambda e: -e.score)

    def edges_to(self, target: str) -> list[Edge]:
        return [e for (_, t), e in self.edges.items() if t == target]

    def __contains__(self, key: object) -> bool:
        if isinstance(key, Chord):
            key = self.id_for(key)
        return key in self.nodes

    def __len__(self) -> int:
        return len(self.nodes)

    def __repr__(self) -> str:
        return (
            f"ExploredMap({len(self.nodes)} nodes, {len(self.edges)} edges, "
            f"current={self.current!r})"
        )
