"""
Pleasantness scoring for chord transitions.

The score is a deterministic, explainable function of three quantities:

- pivot coverage: how much of the candidate is made of the pivot notes
- voice-leading cost: how far the source chord's notes have to move
- shared notes: how many pitch classes the two chords have in common

score = w1 * |pivots| / |candidate| - w2 * voice_leading_cost + w3 * shared_notes

Voice-leading cost pairs each source note with its nearest candidate note
(greedy nearest neighbour, not an optimal assignment), measured the short
way around the pitch-class circle.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from chuk_mcp_chordmap.core.chord import Chord
from chuk_mcp_chordmap.core.pitch import shortest_distance
from chuk_mcp_chordmap.models.config import ScoringWeights


@dataclass(frozen=True)
class ScoreBreakdown:
    """A score together with the terms that produced it."""

    score: float
    pivot_ratio: float
    voice_leading_cost: int
    shared_notes: int

    def explain(self, weights: ScoringWeights) -> str:
        return (
            f"{weights.pivot_coverage:g} * {self.pivot_ratio:.3f} "
            f"- {weights.voice_leading:g} * {self.voice_leading_cost} "
            f"+ {weights.shared_notes:g} * {self.shared_notes} = {self.score:.3f}"
        )


def voice_leading_cost(source: Iterable[int], target: Iterable[int]) -> int:
    """
    Total semitones moved when each source note goes to its nearest target note.

    Args:
        source: Pitch classes of the chord being left
        target: Pitch classes of the chord being approached

    Returns:
        Sum of the per-note minimal distances (0 when target covers source)
    """
    targets = sorted({int(t) % 12 for t in target})
    if not targets:
        raise ValueError("Cannot lead voices into an empty chord")
    return sum(
        min(shortest_distance(s, t) for t in targets) for s in sorted({int(s) % 12 for s in source})
    )


def score_candidate(
    source: frozenset[int],
    candidate: frozenset[int],
    pivots: frozenset[int],
    weights: ScoringWeights,
) -> ScoreBreakdown:
    """Score one candidate pitch-class set against the source set."""
    pivot_ratio = len(pivots) / len(candidate)
    cost = voice_leading_cost(source, candidate)
    shared = len(source & candidate)
    score = (
        weights.pivot_coverage * pivot_ratio
        - weights.voice_leading * cost
        + weights.shared_notes * shared
    )
    return ScoreBreakdown(score, pivot_ratio, cost, shared)


def rank_key(source: Chord, candidate: Chord, breakdown: ScoreBreakdown) -> tuple:
    """
    Sort key for ranked candidates, best first.

    Higher score, then fewer pitch classes, then the root closest to the
    source root, then formula name, then root pitch class.
    """
    return (
        -breakdown.score,
        len(candidate.pitch_classes),
        shortest_distance(source.root.pitch_class, candidate.root.pitch_class),
        candidate.formula.name,
        int(candidate.root.pitch_class),
    )
