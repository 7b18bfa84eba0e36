"""
Symbol-level entry points - build and describe chords and scales from text.

These are the calls an outer surface (the MCP tools, a CLI, a notebook)
makes: parse user symbols, resolve them against the quality and scale
tables, and render the result as plain records.
"""

from __future__ import annotations

import re

from chuk_mcp_chordmap.core.chord import Chord, ChordQualityTable, invert
from chuk_mcp_chordmap.core.interval import Interval, interval_vector
from chuk_mcp_chordmap.core.pitch import Note
from chuk_mcp_chordmap.core.scale import HEPTATONIC, Scale, ScaleTable
from chuk_mcp_chordmap.errors import UnknownSymbol
from chuk_mcp_chordmap.models.records import ChordDescription, ScaleDescription

# Root letter plus any run of accidentals; the rest of the symbol is the quality
_ROOT_PATTERN = re.compile(r"^\s*([A-Ga-g][#♯♭𝄪𝄫xb]*)(.*?)\s*$")

_DEFAULT_QUALITIES = ChordQualityTable()
_DEFAULT_SCALES = ScaleTable()


def parse_note(symbol: str) -> Note:
    return Note.parse(symbol)


def build_chord(
    root_symbol: str,
    quality_symbol: str,
    qualities: ChordQualityTable | None = None,
    inversion: int = 0,
) -> Chord:
    """
    Build a chord from a root name and a quality symbol.

    Args:
        root_symbol: Note name (e.g., 'C', 'F#', 'Bb')
        quality_symbol: Quality name or alias (e.g., 'maj7', 'm', 'ø')
        qualities: Quality table (built-in qualities if omitted)
        inversion: Inversion to apply after building

    Returns:
        The chord

    Raises:
        UnknownSymbol: If the root or quality cannot be resolved
    """
    table = qualities or _DEFAULT_QUALITIES
    chord = Chord(Note.parse(root_symbol), table.get(quality_symbol))
    return invert(chord, inversion) if inversion else chord


def parse_chord(symbol: str, qualities: ChordQualityTable | None = None) -> Chord:
    """
    Parse a full chord symbol such as 'Cmaj7', 'F#m', 'Bbø', 'C6/9' or 'Cmaj/E'.

    A quality containing '/' (such as '6/9') wins over slash notation. Otherwise
    the text after the last '/' is the bass, which must be one of the chord's
    notes and selects the inversion.
    """
    match = _ROOT_PATTERN.match(symbol)
    if match is None:
        raise UnknownSymbol(f"Unknown chord symbol: {symbol!r}")

    table = qualities or _DEFAULT_QUALITIES
    root_text, quality_text = match.group(1), match.group(2)
    if "/" not in quality_text or quality_text.strip() in table:
        return build_chord(root_text, quality_text, table)

    head, _, bass_text = symbol.rpartition("/")
    chord = parse_chord(head, table)
    bass = Note.parse(bass_text)
    for i, note in enumerate(chord.root_position()):
        if note.is_enharmonic(bass):
            return invert(chord, i)
    raise UnknownSymbol(f"Bass {bass} is not a note of {chord}")


def build_scale(tonic_symbol: str, scale_symbol: str, scales: ScaleTable | None = None) -> Scale:
    """
    Build a scale from a tonic name and a scale or mode name.

    Args:
        tonic_symbol: Note name (e.g., 'D')
        scale_symbol: Scale or mode name (e.g., 'major', 'dorian', 'harmonic minor')
        scales: Scale table (built-in scales if omitted)

    Raises:
        UnknownSymbol: If the tonic or scale cannot be resolved
    """
    table = scales or _DEFAULT_SCALES
    return table.build(Note.parse(tonic_symbol), scale_symbol)


def parse_scale(symbol: str, scales: ScaleTable | None = None) -> Scale:
    """Parse a key-style symbol such as 'D_dorian', 'C major' or 'F#-minor'."""
    parts = re.split(r"[\s_\-]+", symbol.strip(), maxsplit=1)
    if len(parts) != 2 or not parts[1]:
        raise UnknownSymbol(f"Scale symbol needs a tonic and a name: {symbol!r}")
    return build_scale(parts[0], parts[1], scales)


def describe_chord(chord: Chord) -> ChordDescription:
    """Render a chord as a display record."""
    return ChordDescription(
        symbol=chord.symbol,
        root=str(chord.root),
        quality=chord.formula.name,
        quality_name=chord.formula.long_name,
        inversion=chord.inversion,
        bass=str(chord.bass),
        notes=[str(n) for n in chord.notes],
        pretty_notes=chord.pretty_notes,
        intervals=chord.formula.interval_names,
        pitch_classes=sorted(int(pc) for pc in chord.pitch_classes),
        interval_vector=list(interval_vector(chord.pitch_classes)),
        midi_notes=chord.get_midi_notes(),
        frequencies=[round(f, 2) for f in chord.get_frequencies()],
    )


def describe_scale(scale: Scale) -> ScaleDescription:
    """Render a scale as a display record."""
    offsets = scale.offsets
    if len(offsets) == HEPTATONIC:
        intervals = [Interval(o, number=i + 1).name for i, o in enumerate(offsets)]
    else:
        intervals = [Interval(o).name for o in offsets]
    upper = (*offsets[1:], 12)

    return ScaleDescription(
        tonic=str(scale.tonic),
        name=scale.name,
        formula=scale.formula.name,
        mode=scale.mode,
        notes=[str(n) for n in scale.degrees()],
        intervals=intervals,
        steps=[b - a for a, b in zip(offsets, upper, strict=True)],
        pitch_classes=sorted(int(pc) for pc in scale.pitch_classes),
    )


def describe(item: Chord | Scale) -> ChordDescription | ScaleDescription:
    """Describe a chord or a scale."""
    if isinstance(item, Chord):
        return describe_chord(item)
    if isinstance(item, Scale):
        return describe_scale(item)
    raise TypeError(f"Cannot describe {type(item).__name__}")
