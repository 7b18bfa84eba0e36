"""
Configuration models - scoring weights and graph behaviour.

Every knob of the graph engine lives here so callers can pass their own
values without code changes. Defaults: w1=2, w2=1, w3=3, and an empty
pivot set is rejected once more than 500 candidates would be enumerated.
"""

from __future__ import annotations

from pydantic import BaseModel, Field

DEFAULT_MAX_UNFILTERED_CANDIDATES = 500


class ScoringWeights(BaseModel):
    """
    Weights of the pleasantness score.

    score = w1 * |pivots| / |candidate| - w2 * voice_leading_cost + w3 * shared_notes
    """

    pivot_coverage: float = Field(
        default=2.0,
        alias="w1",
        description="Reward for pivots making up a large share of the candidate",
    )
    voice_leading: float = Field(
        default=1.0,
        alias="w2",
        description="Penalty per semitone of voice-leading motion",
    )
    shared_notes: float = Field(
        default=3.0,
        alias="w3",
        description="Reward per pitch class shared with the source chord",
    )

    model_config = {"frozen": True, "populate_by_name": True}


class GraphConfig(BaseModel):
    """Behaviour of the chord graph engine."""

    weights: ScoringWeights = Field(default_factory=ScoringWeights)
    max_unfiltered_candidates: int = Field(
        default=DEFAULT_MAX_UNFILTERED_CANDIDATES,
        ge=0,
        description="Reject an empty pivot set when more candidates than this would be enumerated",
    )
    merge_sonorities: bool = Field(
        default=False,
        description="Key nodes by pitch-class set alone, merging chords that sound the same",
    )
    allow_self_loops: bool = Field(
        default=False,
        description="Keep candidates whose pitch-class set equals the source chord's",
    )

    model_config = {"frozen": True}
