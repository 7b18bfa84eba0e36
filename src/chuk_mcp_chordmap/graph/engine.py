"""
Chord graph engine - branching exploration over chord space.

The engine never builds the whole chord graph. A branch enumerates a
bounded candidate pool, keeps the chords that contain the chosen pivot
notes, scores and ranks them, then links them to the node it started from.

Every operation validates and computes before it touches the map, so a
failed call leaves the map exactly as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass, replace

from chuk_mcp_chordmap.core.chord import Chord, ChordFormula, ChordQualityTable
from chuk_mcp_chordmap.core.pitch import KeyContext, PitchClass, SpellingPreference, normalize
from chuk_mcp_chordmap.errors import (
    ChordMapError,
    EmptyPivotSet,
    InvalidPivotSet,
    UnknownNode,
)
from chuk_mcp_chordmap.models.config import GraphConfig, ScoringWeights
from chuk_mcp_chordmap.models.records import EdgeRecord, MapSnapshot, MapState, NodeRecord

from .explored_map import ChordGraphNode, Edge, ExploredMap
from .pool import CandidatePool
from .scoring import ScoreBreakdown, rank_key, score_candidate

logger = logging.getLogger(__name__)

NodeRef = str | Chord | ChordGraphNode


@dataclass(frozen=True)
class BranchCandidate:
    """A ranked neighbour returned by branch()."""

    chord: Chord
    score: float
    node_id: str
    breakdown: ScoreBreakdown


class ChordGraphEngine:
    """
    Explores chord space from a starting chord through shared pivot notes.

    The engine holds configuration only; all session state lives in the
    ExploredMap passed to each call, so one engine can serve many maps.
    """

    def __init__(
        self,
        config: GraphConfig | None = None,
        qualities: ChordQualityTable | None = None,
    ):
        """
        Initialize the engine.

        Args:
            config: Scoring weights and limits (defaults if omitted)
            qualities: Quality table supplying the default candidate pool
        """
        self.config = config or GraphConfig()
        self.qualities = qualities or ChordQualityTable()

    def new_map(self) -> ExploredMap:
        """An idle map with no current position."""
        return ExploredMap(merge_sonorities=self.config.merge_sonorities)

    def start_at(self, chord: Chord, explored_map: ExploredMap | None = None) -> ExploredMap:
        """
        Place the first chord and make it current.

        Args:
            chord: The starting chord
            explored_map: An idle map to position (a new one if omitted)

        Returns:
            The positioned map
        """
        explored_map = explored_map or self.new_map()
        explored_map.ensure_open()
        if explored_map.state != MapState.IDLE:
            raise ChordMapError("Map already has a current position")

        node = explored_map.add_node(chord)
        node.visits += 1
        explored_map.current = node.id
        logger.debug("Started map at %s (%s)", chord, node.id)
        return explored_map

    def pivot_notes(self, explored_map: ExploredMap, chord: NodeRef) -> frozenset[PitchClass]:
        """
        The pitch classes a branch from this chord can pivot on.

        Callers pick a subset of these as the pivot set.
        """
        explored_map.ensure_open()
        if isinstance(chord, Chord):
            return chord.pitch_classes
        return explored_map.node(chord).pitch_classes

    def default_pool(self) -> CandidatePool:
        return CandidatePool.from_table(self.qualities)

    def branch(
        self,
        explored_map: ExploredMap,
        from_node: NodeRef,
        pivot_set: Iterable[int],
        candidate_pool: CandidatePool | Iterable[ChordFormula] | None = None,
        *,
        weights: ScoringWeights | None = None,
        key: KeyContext | SpellingPreference | None = None,
        allow_self: bool | None = None,
    ) -> list[BranchCandidate]:
        """
        Find, rank, and link the chords reachable through a set of pivot notes.

        Args:
            explored_map: The map to grow
            from_node: Node (or its id or chord) to branch from
            pivot_set: Pitch classes every neighbour must contain
            candidate_pool: Formulas x roots to try (the quality table if omitted)
            weights: Scoring weights overriding the configured ones
            key: Spelling convention for candidate roots
            allow_self: Keep candidates with the source's own pitch-class set

        Returns:
            Candidates ranked best first; edges to each are stored in the map

        Raises:
            UnknownNode: If from_node is not in the map
            InvalidPivotSet: If a pivot is not a note of the source chord
            EmptyPivotSet: If no pivots are given and the pool is too large
        """
        explored_map.ensure_open()
        source = explored_map.node(from_node)
        pivots = frozenset(normalize(p) for p in pivot_set)
        pool = CandidatePool.coerce(candidate_pool if candidate_pool is not None else self.default_pool())
        weights = weights or self.config.weights
        allow_self = self.config.allow_self_loops if allow_self is None else allow_self

        stray = pivots - source.pitch_classes
        if stray:
            raise InvalidPivotSet(
                f"Pivots {sorted(int(p) for p in stray)} are not in {source.chord}"
            )
        if not pivots and pool.size > self.config.max_unfiltered_candidates:
            raise EmptyPivotSet(
                f"Empty pivot set over {pool.size} candidates exceeds the limit of "
                f"{self.config.max_unfiltered_candidates}"
            )

        if key is None:
            key = source.chord.root.preference

        source_pcs = source.pitch_classes
        scored: list[tuple[Chord, ScoreBreakdown]] = []
        for candidate in pool.chords(key):
            candidate_pcs = candidate.pitch_classes
            if not pivots <= candidate_pcs:
                continue
            if candidate_pcs == source_pcs and not allow_self:
                continue
            scored.append((candidate, score_candidate(source_pcs, candidate_pcs, pivots, weights)))

        scored.sort(key=lambda item: rank_key(source.chord, item[0], item[1]))

        ranked: list[BranchCandidate] = []
        seen: set[str] = set()
        for candidate, breakdown in scored:
            target_id = explored_map.id_for(candidate)
            if target_id in seen:
                continue
            seen.add(target_id)
            ranked.append(BranchCandidate(candidate, breakdown.score, target_id, breakdown))

        logger.debug(
            "Branch from %s on %s: %d enumerated, %d kept",
            source.id,
            sorted(int(p) for p in pivots),
            pool.size,
            len(ranked),
        )

        # Mutation only starts once everything above has succeeded.
        # Results carry the chord stored in the map; an existing node keeps its own.
        linked: list[BranchCandidate] = []
        for result in ranked:
            target = explored_map.add_node(result.chord)
            explored_map.set_edge(
                Edge(source.id, target.id, pivots, result.score, result.breakdown)
            )
            linked.append(replace(result, chord=target.chord))

        return linked

    def move_to(self, explored_map: ExploredMap, node: NodeRef) -> ChordGraphNode:
        """
        Move the current position along an existing edge.

        Raises:
            UnknownNode: If there is no edge from the current node to this one
        """
        explored_map.ensure_open()
        if explored_map.current is None:
            raise UnknownNode("Map has no current position")

        target = explored_map.node(node)
        if not explored_map.has_edge(explored_map.current, target.id):
            raise UnknownNode(f"No edge from {explored_map.current} to {target.id}")

        explored_map.history.append(explored_map.current)
        explored_map.current = target.id
        target.visits += 1
        logger.debug("Moved to %s", target.id)
        return target

    def back(self, explored_map: ExploredMap) -> ChordGraphNode:
        """
        Return to the previous position.

        Raises:
            UnknownNode: If there is nowhere to go back to
        """
        explored_map.ensure_open()
        if not explored_map.history:
            raise UnknownNode("No previous position to go back to")

        previous = explored_map.node(explored_map.history[-1])
        explored_map.history.pop()
        explored_map.current = previous.id
        previous.visits += 1
        return previous

    def neighbors(self, explored_map: ExploredMap, node: NodeRef | None = None) -> list[Edge]:
        """Outgoing edges of a node (the current one by default), best first."""
        if node is None:
            if explored_map.current is None:
                raise UnknownNode("Map has no current position")
            return explored_map.edges_from(explored_map.current)
        return explored_map.edges_from(explored_map.node(node).id)

    def remove_node(self, explored_map: ExploredMap, node: NodeRef) -> None:
        """
        Drop a node and every edge touching it.

        The current node cannot be removed.
        """
        explored_map.ensure_open()
        target = explored_map.node(node)
        if target.id == explored_map.current:
            raise ChordMapError("Cannot remove the current node")

        for pair in [p for p in explored_map.edges if target.id in p]:
            del explored_map.edges[pair]
        explored_map.history = [h for h in explored_map.history if h != target.id]
        del explored_map.nodes[target.id]

    def snapshot(self, explored_map: ExploredMap) -> MapSnapshot:
        """Structured copy of the map for rendering."""
        nodes = [
            NodeRecord(
                id=n.id,
                symbol=n.chord.symbol,
                notes=[str(note) for note in n.chord.notes],
                pitch_classes=sorted(int(pc) for pc in n.pitch_classes),
                visits=n.visits,
            )
            for n in explored_map.nodes.values()
        ]
        edges = [
            EdgeRecord(
                source=e.source,
                target=e.target,
                pivots=sorted(int(p) for p in e.pivots),
                score=e.score,
                shared_notes=e.breakdown.shared_notes if e.breakdown else 0,
                voice_leading_cost=e.breakdown.voice_leading_cost if e.breakdown else 0,
            )
            for e in explored_map.edges.values()
        ]
        return MapSnapshot(
            state=explored_map.state,
            current=explored_map.current,
            history=list(explored_map.history),
            nodes=nodes,
            edges=edges,
        )

    def end(self, explored_map: ExploredMap) -> MapSnapshot:
        """Close the map and return its final snapshot."""
        explored_map.ensure_open()
        explored_map.close()
        logger.debug("Ended map with %d nodes", len(explored_map))
        return self.snapshot(explored_map)
