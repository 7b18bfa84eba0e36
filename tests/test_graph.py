"""
Tests for the chord graph engine.

Tests cover:
- Scoring and voice-leading cost
- Candidate pools
- Branching: filtering, ranking, atomicity, idempotence
- Navigation: move, back, neighbors, remove
- Snapshots and ending a map
"""

import pytest

from chuk_mcp_chordmap.core import (
    Chord,
    ChordFormula,
    ChordQualityTable,
    Note,
    ScaleFormula,
    build_scale,
)
from chuk_mcp_chordmap.errors import (
    ChordMapError,
    EmptyPivotSet,
    InvalidPivotSet,
    SessionEnded,
    UnknownNode,
)
from chuk_mcp_chordmap.graph import (
    CandidatePool,
    ChordGraphEngine,
    ExploredMap,
    node_id,
    score_candidate,
    voice_leading_cost,
)
from chuk_mcp_chordmap.models import GraphConfig, MapState, ScoringWeights


class TestScoring:
    """Tests for the pleasantness score."""

    def test_voice_leading_cost(self) -> None:
        """Each source note moves to its nearest target note."""
        assert voice_leading_cost({0, 4, 7}, {0, 4, 7}) == 0
        assert voice_leading_cost({0, 4, 7}, {9, 0, 4}) == 2
        assert voice_leading_cost({0, 4, 7}, {11, 2, 7}) == 3

    def test_voice_leading_wraps(self) -> None:
        """Distance goes the short way around the octave."""
        assert voice_leading_cost({11}, {0}) == 1

    def test_empty_target(self) -> None:
        """An empty chord cannot be led into."""
        with pytest.raises(ValueError):
            voice_leading_cost({0}, set())

    def test_score_breakdown(self) -> None:
        """Score combines the three terms with the weights."""
        breakdown = score_candidate(
            frozenset({0, 4, 7}),
            frozenset({9, 0, 4}),
            frozenset({0, 4}),
            ScoringWeights(),
        )
        assert breakdown.pivot_ratio == pytest.approx(2 / 3)
        assert breakdown.voice_leading_cost == 2
        assert breakdown.shared_notes == 2
        assert breakdown.score == pytest.approx(2 * 2 / 3 - 2 + 6)
        assert "=" in breakdown.explain(ScoringWeights())

    def test_weights_by_alias(self) -> None:
        """Weights accept their short aliases."""
        weights = ScoringWeights(w1=1.0, w2=0.5, w3=2.0)
        assert weights.pivot_coverage == 1.0
        assert weights.voice_leading == 0.5
        assert weights.shared_notes == 2.0


class TestCandidatePool:
    """Tests for CandidatePool."""

    def test_size(self, triad_seventh_pool: CandidatePool) -> None:
        """Size is formulas times roots."""
        assert triad_seventh_pool.size == 48
        assert len(list(triad_seventh_pool.chords())) == 48

    def test_deduplicates(self) -> None:
        """Repeated formulas and roots are dropped."""
        pool = CandidatePool((ChordFormula.MAJOR, ChordFormula.MAJOR), (0, 12, 7))
        assert pool.size == 2

    def test_diatonic_roots(self) -> None:
        """Diatonic pools only use the scale's degrees as roots."""
        scale = build_scale(Note("C"), ScaleFormula.MAJOR)
        pool = CandidatePool.diatonic(scale, [ChordFormula.MAJOR])
        assert sorted(int(r) for r in pool.roots) == [0, 2, 4, 5, 7, 9, 11]

    def test_from_table(self) -> None:
        """Pools can be taken from a quality table by name."""
        pool = CandidatePool.from_table(ChordQualityTable(), ["maj", "m7"])
        assert pool.formulas == (ChordFormula.MAJOR, ChordFormula.MINOR_7)


class TestExploredMap:
    """Tests for the explored map arena."""

    def test_node_id(self, c_major: Chord) -> None:
        """Ids are derived from content."""
        assert node_id(c_major) == "0.4.7:maj:0"
        assert node_id(c_major, merge_sonorities=True) == "0.4.7"

    def test_same_chord_same_node(self, c_major: Chord) -> None:
        """Adding a chord twice returns the existing node."""
        explored = ExploredMap()
        first = explored.add_node(c_major)
        second = explored.add_node(Chord(Note("C"), ChordFormula.MAJOR))
        assert first is second
        assert len(explored) == 1

    def test_unknown_node(self) -> None:
        """Looking up a missing node raises UnknownNode."""
        with pytest.raises(UnknownNode):
            ExploredMap().node("0.4.7:maj:0")


class TestBranch:
    """Tests for branching."""

    def test_start_at(self, engine: ChordGraphEngine, c_major: Chord) -> None:
        """Starting positions the map at the chord."""
        explored = engine.start_at(c_major)
        assert explored.state == MapState.POSITIONED
        assert explored.current == "0.4.7:maj:0"
        assert explored.current_node.visits == 1

    def test_new_map_is_idle(self, engine: ChordGraphEngine) -> None:
        """A fresh map has no position."""
        assert engine.new_map().state == MapState.IDLE

    def test_ranking_from_c_major(
        self,
        engine: ChordGraphEngine,
        c_major: Chord,
        triad_seventh_pool: CandidatePool,
    ) -> None:
        """C major pivoting on C and E."""
        explored = engine.start_at(c_major)
        ranked = engine.branch(explored, c_major, {0, 4}, triad_seventh_pool)

        assert [c.chord.symbol for c in ranked] == ["Cmaj7", "Amin7", "Amin", "Fmaj7"]
        assert [c.score for c in ranked] == pytest.approx([10, 10, 2 * 2 / 3 - 2 + 6, 5])

    def test_a_minor_included_and_self_excluded(
        self,
        engine: ChordGraphEngine,
        c_major: Chord,
        triad_seventh_pool: CandidatePool,
    ) -> None:
        """A minor is found; C major itself is not."""
        explored = engine.start_at(c_major)
        ranked = engine.branch(explored, c_major, {0, 4}, triad_seventh_pool)

        pitch_sets = [c.chord.pitch_classes for c in ranked]
        assert frozenset({9, 0, 4}) in pitch_sets
        assert frozenset({0, 4, 7}) not in pitch_sets
        assert not explored.has_edge(explored.current, explored.current)

    def test_results_contain_pivots(self, engine: ChordGraphEngine, c_major: Chord) -> None:
        """Every candidate contains the pivot set."""
        explored = engine.start_at(c_major)
        for pivots in ({0}, {4}, {7}, {0, 7}, {4, 7}, {0, 4, 7}):
            ranked = engine.branch(explored, c_major, pivots)
            assert ranked
            for candidate in ranked:
                assert pivots <= candidate.chord.pitch_classes

    def test_ranking_is_deterministic(
        self,
        engine: ChordGraphEngine,
        c_major: Chord,
    ) -> None:
        """Two runs give the same order."""
        first = engine.branch(engine.start_at(c_major), c_major, {7})
        second = engine.branch(engine.start_at(c_major), c_major, {7})
        assert [c.node_id for c in first] == [c.node_id for c in second]

    def test_ties_prefer_fewer_notes(self, engine: ChordGraphEngine, c_major: Chord) -> None:
        """On equal scores the smaller chord ranks first."""
        explored = engine.start_at(c_major)
        pool = CandidatePool((ChordFormula.MAJOR_7, ChordFormula.MINOR), (9,))
        ranked = engine.branch(
            explored, c_major, {4}, pool, weights=ScoringWeights(w1=0, w2=0, w3=0)
        )
        assert [c.chord.symbol for c in ranked] == ["Amin", "Amaj7"]

    def test_ties_then_formula_name(self, engine: ChordGraphEngine, c_major: Chord) -> None:
        """Equal score, size and root fall back to the formula name."""
        explored = engine.start_at(c_major)
        pool = CandidatePool(
            (ChordFormula("zeta", (0, 4, 7, 10)), ChordFormula("alpha", (0, 4, 7, 11))),
            (0,),
        )
        ranked = engine.branch(explored, c_major, {0, 4}, pool)
        assert [c.score for c in ranked] == pytest.approx([10, 10])
        assert [c.chord.symbol for c in ranked] == ["Calpha", "Czeta"]

    def test_existing_node_reused(self, engine: ChordGraphEngine, c_major: Chord) -> None:
        """Branching back to a known chord links the existing node."""
        explored = engine.start_at(c_major)
        start_node = explored.nodes["0.4.7:maj:0"]
        engine.branch(explored, c_major, {0, 4}, [ChordFormula.MINOR])
        engine.move_to(explored, "0.4.9:min:0")

        a_minor = Chord(Note("A"), ChordFormula.MINOR)
        ranked = engine.branch(explored, a_minor, {0, 4}, [ChordFormula.MAJOR])

        assert [c.node_id for c in ranked] == ["0.4.7:maj:0"]
        assert explored.nodes["0.4.7:maj:0"] is start_node
        assert explored.has_edge("0.4.7:maj:0", "0.4.9:min:0")
        assert explored.has_edge("0.4.9:min:0", "0.4.7:maj:0")
        assert len(explored.nodes) == 2

    def test_edges_added(
        self,
        engine: ChordGraphEngine,
        c_major: Chord,
        triad_seventh_pool: CandidatePool,
    ) -> None:
        """Branching links every candidate to the source."""
        explored = engine.start_at(c_major)
        ranked = engine.branch(explored, c_major, {0, 4}, triad_seventh_pool)

        assert len(explored.nodes) == 5
        for candidate in ranked:
            edge = explored.edges[(explored.current, candidate.node_id)]
            assert edge.pivots == frozenset({0, 4})
            assert edge.score == candidate.score

    def test_idempotent_growth(
        self,
        engine: ChordGraphEngine,
        c_major: Chord,
        triad_seventh_pool: CandidatePool,
    ) -> None:
        """Branching twice adds no duplicate nodes or edges."""
        explored = engine.start_at(c_major)
        engine.branch(explored, c_major, {0, 4}, triad_seventh_pool)
        nodes = set(explored.nodes)
        edges = set(explored.edges)

        engine.branch(explored, c_major, {0, 4}, triad_seventh_pool)
        assert set(explored.nodes) == nodes
        assert set(explored.edges) == edges

    def test_last_write_wins(
        self,
        engine: ChordGraphEngine,
        c_major: Chord,
        triad_seventh_pool: CandidatePool,
    ) -> None:
        """A second branch overwrites edge scores."""
        explored = engine.start_at(c_major)
        engine.branch(explored, c_major, {0, 4}, triad_seventh_pool)
        engine.branch(
            explored,
            c_major,
            {0, 4},
            triad_seventh_pool,
            weights=ScoringWeights(w1=0, w2=0, w3=1),
        )
        edge = explored.edges[("0.4.7:maj:0", "0.4.9:min:0")]
        assert edge.score == 2

    def test_invalid_pivot_leaves_map_unchanged(
        self,
        engine: ChordGraphEngine,
        c_major: Chord,
    ) -> None:
        """Pivots outside the source chord are rejected before any change."""
        explored = engine.start_at(c_major)
        with pytest.raises(InvalidPivotSet):
            engine.branch(explored, c_major, {0, 1})
        assert len(explored.nodes) == 1
        assert not explored.edges

    def test_unknown_source(self, engine: ChordGraphEngine, c_major: Chord) -> None:
        """Branching from a chord not in the map fails."""
        explored = engine.start_at(c_major)
        with pytest.raises(UnknownNode):
            engine.branch(explored, Chord(Note("D"), ChordFormula.MINOR), {2})

    def test_empty_pivots_over_limit(self, c_major: Chord) -> None:
        """An empty pivot set over a large pool is rejected."""
        engine = ChordGraphEngine(GraphConfig(max_unfiltered_candidates=10))
        explored = engine.start_at(c_major)
        with pytest.raises(EmptyPivotSet):
            engine.branch(explored, c_major, set())
        assert len(explored.nodes) == 1

    def test_empty_pivots_small_pool(self, c_major: Chord) -> None:
        """An empty pivot set is fine when the pool is small."""
        engine = ChordGraphEngine(GraphConfig(max_unfiltered_candidates=10))
        explored = engine.start_at(c_major)
        pool = CandidatePool((ChordFormula.MINOR,), (2, 4, 9))
        ranked = engine.branch(explored, c_major, set(), pool)
        assert {c.chord.symbol for c in ranked} == {"Dmin", "Emin", "Amin"}

    def test_allow_self(
        self,
        engine: ChordGraphEngine,
        c_major: Chord,
        triad_seventh_pool: CandidatePool,
    ) -> None:
        """Self loops can be switched on."""
        explored = engine.start_at(c_major)
        ranked = engine.branch(explored, c_major, {0, 4}, triad_seventh_pool, allow_self=True)
        assert ranked[0].chord == c_major
        assert explored.has_edge("0.4.7:maj:0", "0.4.7:maj:0")

    def test_merge_sonorities(self, c_major: Chord) -> None:
        """Merged sonorities collapse C6 and Am7 into one node."""
        table = ChordQualityTable()
        pool = CandidatePool((table.get("maj6"), ChordFormula.MINOR_7))

        separate = ChordGraphEngine()
        ranked = separate.branch(separate.start_at(c_major), c_major, {0, 4, 7}, pool)
        assert [c.chord.symbol for c in ranked] == ["Cmaj6", "Amin7"]

        merged = ChordGraphEngine(GraphConfig(merge_sonorities=True))
        ranked = merged.branch(merged.start_at(c_major), c_major, {0, 4, 7}, pool)
        assert [c.node_id for c in ranked] == ["0.4.7.9"]
        assert ranked[0].chord.symbol == "Cmaj6"

    def test_merged_result_reports_stored_chord(self, c_major: Chord) -> None:
        """A merged candidate reports the chord already held by its node."""
        engine = ChordGraphEngine(GraphConfig(merge_sonorities=True))
        explored = engine.start_at(c_major)
        first = engine.branch(explored, c_major, {0, 4, 7}, [ChordFormula.MINOR_7])
        assert [c.chord.symbol for c in first] == ["Amin7"]

        again = engine.branch(explored, c_major, {0, 4, 7}, [ChordQualityTable().get("maj6")])
        assert [c.node_id for c in again] == ["0.4.7.9"]
        assert again[0].chord.symbol == "Amin7"
        assert again[0].chord == explored.nodes["0.4.7.9"].chord

    def test_key_spells_candidates(self, engine: ChordGraphEngine) -> None:
        """Candidates follow the source root's accidentals."""
        e_flat = Chord(Note("E", -1), ChordFormula.MAJOR)
        explored = engine.start_at(e_flat)
        ranked = engine.branch(explored, e_flat, {3}, [ChordFormula.MAJOR])
        symbols = {c.chord.symbol for c in ranked}
        assert "Abmaj" in symbols
        assert "G#maj" not in symbols


class TestNavigation:
    """Tests for moving around the map."""

    @pytest.fixture
    def explored(
        self,
        engine: ChordGraphEngine,
        c_major: Chord,
        triad_seventh_pool: CandidatePool,
    ) -> ExploredMap:
        explored = engine.start_at(c_major)
        engine.branch(explored, c_major, {0, 4}, triad_seventh_pool)
        return explored

    def test_move_along_edge(self, engine: ChordGraphEngine, explored: ExploredMap) -> None:
        """Moving follows an edge and records history."""
        target = engine.move_to(explored, "0.4.9:min:0")
        assert explored.current == "0.4.9:min:0"
        assert explored.history == ["0.4.7:maj:0"]
        assert target.visits == 1

    def test_move_by_chord(self, engine: ChordGraphEngine, explored: ExploredMap) -> None:
        """Nodes can be addressed by chord."""
        engine.move_to(explored, Chord(Note("A"), ChordFormula.MINOR))
        assert explored.current == "0.4.9:min:0"

    def test_move_without_edge(self, engine: ChordGraphEngine, explored: ExploredMap) -> None:
        """Moving needs an edge from the current node."""
        engine.move_to(explored, "0.4.9:min:0")
        with pytest.raises(UnknownNode):
            engine.move_to(explored, "0.4.5.9:maj7:0")

    def test_back(self, engine: ChordGraphEngine, explored: ExploredMap) -> None:
        """Back returns to the previous chord."""
        engine.move_to(explored, "0.4.9:min:0")
        previous = engine.back(explored)
        assert previous.id == "0.4.7:maj:0"
        assert explored.current == "0.4.7:maj:0"
        assert explored.history == []

    def test_back_without_history(self, engine: ChordGraphEngine, explored: ExploredMap) -> None:
        """Back with nowhere to go fails."""
        with pytest.raises(UnknownNode):
            engine.back(explored)

    def test_neighbors_sorted(self, engine: ChordGraphEngine, explored: ExploredMap) -> None:
        """Neighbours come best first."""
        scores = [e.score for e in engine.neighbors(explored)]
        assert scores == sorted(scores, reverse=True)
        assert len(scores) == 4

    def test_remove_node(self, engine: ChordGraphEngine, explored: ExploredMap) -> None:
        """Removing drops the node and its edges."""
        engine.remove_node(explored, "0.4.5.9:maj7:0")
        assert "0.4.5.9:maj7:0" not in explored
        assert len(engine.neighbors(explored)) == 3

    def test_cannot_remove_current(self, engine: ChordGraphEngine, explored: ExploredMap) -> None:
        """The current node stays."""
        with pytest.raises(ChordMapError):
            engine.remove_node(explored, explored.current)


class TestSnapshot:
    """Tests for snapshots and ending."""

    def test_snapshot(
        self,
        engine: ChordGraphEngine,
        c_major: Chord,
        triad_seventh_pool: CandidatePool,
    ) -> None:
        """Snapshots list nodes and edges."""
        explored = engine.start_at(c_major)
        engine.branch(explored, c_major, {0, 4}, triad_seventh_pool)
        snapshot = engine.snapshot(explored)

        assert snapshot.state == MapState.POSITIONED
        assert snapshot.current == "0.4.7:maj:0"
        assert len(snapshot.nodes) == 5
        assert len(snapshot.edges) == 4
        start = next(n for n in snapshot.nodes if n.id == "0.4.7:maj:0")
        assert start.notes == ["C", "E", "G"]
        assert start.visits == 1

    def test_end(self, engine: ChordGraphEngine, c_major: Chord) -> None:
        """An ended map refuses further changes."""
        explored = engine.start_at(c_major)
        snapshot = engine.end(explored)
        assert snapshot.state == MapState.ENDED

        with pytest.raises(SessionEnded):
            engine.branch(explored, c_major, {0})
        with pytest.raises(SessionEnded):
            engine.end(explored)
