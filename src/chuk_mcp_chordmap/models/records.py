"""
Structured records for rendering.

These are what the outside world sees: descriptions of chords and scales,
and snapshots of an explored map. They are plain data, serializable to
JSON or YAML by the embedding application.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field


class MapState(str, Enum):
    """Lifecycle of an explored map."""

    IDLE = "idle"
    POSITIONED = "positioned"
    ENDED = "ended"


class ChordDescription(BaseModel):
    """A chord, ready for display."""

    symbol: str = Field(..., description="Chord symbol (e.g., 'Cmaj7', 'Cmaj/E')")
    root: str
    quality: str = Field(..., description="Quality name from the table (e.g., 'maj7')")
    quality_name: str = Field("", description="Long quality name (e.g., 'Major 7th')")
    inversion: int = Field(0, ge=0)
    bass: str
    notes: list[str] = Field(default_factory=list, description="Sounding notes from the bass up")
    pretty_notes: list[str] = Field(
        default_factory=list, description="Sounding notes with accidental glyphs (B♭, F♯)"
    )
    intervals: list[str] = Field(default_factory=list, description="Interval of each formula tone")
    pitch_classes: list[int] = Field(default_factory=list)
    interval_vector: list[int] = Field(default_factory=list)
    midi_notes: list[int] = Field(default_factory=list)
    frequencies: list[float] = Field(
        default_factory=list, description="Equal-tempered Hz of the MIDI notes, A4 = 440"
    )

    model_config = {"frozen": True}


class ScaleDescription(BaseModel):
    """A scale, ready for display."""

    tonic: str
    name: str = Field(..., description="Mode name (e.g., 'dorian')")
    formula: str = Field(..., description="Parent formula name (e.g., 'major')")
    mode: int = Field(0, ge=0)
    notes: list[str] = Field(default_factory=list)
    intervals: list[str] = Field(default_factory=list, description="Interval of each degree")
    steps: list[int] = Field(default_factory=list)
    pitch_classes: list[int] = Field(default_factory=list)

    model_config = {"frozen": True}


class NodeRecord(BaseModel):
    """One chord in an explored map."""

    id: str
    symbol: str
    notes: list[str] = Field(default_factory=list)
    pitch_classes: list[int] = Field(default_factory=list)
    visits: int = 0

    model_config = {"frozen": True}


class EdgeRecord(BaseModel):
    """A scored transition between two chords."""

    source: str
    target: str
    pivots: list[int] = Field(default_factory=list)
    score: float
    shared_notes: int = 0
    voice_leading_cost: int = 0

    model_config = {"frozen": True}


class MapSnapshot(BaseModel):
    """The whole explored map, for external rendering."""

    state: MapState = MapState.IDLE
    current: str | None = None
    history: list[str] = Field(default_factory=list)
    nodes: list[NodeRecord] = Field(default_factory=list)
    edges: list[EdgeRecord] = Field(default_factory=list)

    model_config = {"frozen": True}

    def to_yaml_dict(self) -> dict:
        """Plain dict with enums as strings, ready for yaml.safe_dump."""
        return self.model_dump(mode="json")
