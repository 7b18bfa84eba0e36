"""
Core music primitives - the theory algebra.

These are the invariants that the chord map composes on:
- PitchClass: The 12 chromatic pitch classes (0-11)
- Note: A pitch class with a display spelling
- Interval: Distance between pitches in semitones
- ChordFormula: Offsets defining a chord quality
- Chord: Formula on a spelled root, with an inversion
- ScaleFormula: Offsets defining a scale family and its modes
- Scale: Formula on a tonic, read from one mode
"""

from chuk_mcp_chordmap.core.chord import (
    Chord,
    ChordFormula,
    ChordQualityTable,
    SoundingNote,
    build_chord,
    diatonic_chords,
    invert,
    same_sonority,
    sonority_key,
    spell_all,
)
from chuk_mcp_chordmap.core.interval import (
    Direction,
    Interval,
    IntervalQuality,
    IntervalSet,
    interval_between,
    interval_vector,
)
from chuk_mcp_chordmap.core.pitch import (
    KeyContext,
    Note,
    PitchClass,
    SpellingPreference,
    distance,
    normalize,
    spell,
)
from chuk_mcp_chordmap.core.scale import (
    Scale,
    ScaleFormula,
    ScaleTable,
    build_scale,
    contains,
    degree_of,
    degrees,
    mode,
    parallel_mode,
)

__all__ = [
    # Pitch
    "PitchClass",
    "Note",
    "KeyContext",
    "SpellingPreference",
    "normalize",
    "distance",
    "spell",
    # Interval
    "Interval",
    "IntervalQuality",
    "IntervalSet",
    "Direction",
    "interval_between",
    "interval_vector",
    # Chord
    "ChordFormula",
    "Chord",
    "ChordQualityTable",
    "SoundingNote",
    "build_chord",
    "invert",
    "spell_all",
    "sonority_key",
    "same_sonority",
    "diatonic_chords",
    # Scale
    "ScaleFormula",
    "Scale",
    "ScaleTable",
    "build_scale",
    "mode",
    "parallel_mode",
    "degrees",
    "contains",
    "degree_of",
]
