"""
Chord primitives - ChordFormula, Chord, ChordQualityTable.

Chords are stacks of offsets from a root. The formula defines the quality,
the chord places it on a spelled root and picks an inversion.
Inversion changes which note sounds lowest, never which pitch classes sound.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, ClassVar

from chuk_mcp_chordmap.errors import InvalidFormula, UnknownSymbol

from .interval import Interval, IntervalSet, compound_name
from .pitch import (
    KeyContext,
    Note,
    PitchClass,
    SpellingPreference,
    midi_to_hertz,
    spell,
    spell_degree,
)
from .scale import HEPTATONIC, Scale

logger = logging.getLogger(__name__)

# Generic chord degree assumed for each simple offset (b5 is a fifth, #5 a sixth)
_DEFAULT_DEGREES: dict[int, int] = {
    0: 1,
    1: 2,
    2: 2,
    3: 3,
    4: 3,
    5: 4,
    6: 5,
    7: 5,
    8: 6,
    9: 6,
    10: 7,
    11: 7,
}


def default_degree(offset: int) -> int:
    """Generic degree (1, 3, 5, 7, 9, ...) for an offset above the root."""
    return _DEFAULT_DEGREES[offset % 12] + 7 * (offset // 12)


@dataclass(frozen=True)
class ChordFormula:
    """
    A chord quality defined by its offsets from the root.

    Offsets are measured from the root, not stacked, and ascend in root
    position. Offsets past the octave are allowed for extensions:
    a major ninth is (0, 4, 7, 11, 14).

    Degrees optionally name the generic degree of each offset so that
    spelling follows the letters (an augmented fifth is G# over C, not Ab).

    Immutable and hashable.
    """

    name: str
    offsets: tuple[int, ...]
    long_name: str = field(default="", compare=False)
    degrees: tuple[int, ...] | None = field(default=None, compare=False)

    # Common chord formulas (defined after class)
    MAJOR: ClassVar[ChordFormula]
    MINOR: ClassVar[ChordFormula]
    DIMINISHED: ClassVar[ChordFormula]
    AUGMENTED: ClassVar[ChordFormula]
    MAJOR_7: ClassVar[ChordFormula]
    MINOR_7: ClassVar[ChordFormula]
    DOMINANT_7: ClassVar[ChordFormula]

    def __post_init__(self) -> None:
        offsets = tuple(int(o) for o in self.offsets)
        object.__setattr__(self, "offsets", offsets)
        if self.degrees is not None:
            object.__setattr__(self, "degrees", tuple(int(d) for d in self.degrees))

        simple = [o % 12 for o in offsets]
        if len(set(simple)) < 2:
            raise InvalidFormula(f"Chord '{self.name}' needs at least 2 distinct offsets")
        if len(set(simple)) != len(simple):
            raise InvalidFormula(f"Chord '{self.name}' repeats an offset modulo 12: {offsets}")
        if offsets[0] != 0:
            raise InvalidFormula(f"Chord '{self.name}' must start at the root (offset 0)")
        if any(b <= a for a, b in zip(offsets, offsets[1:], strict=False)):
            raise InvalidFormula(f"Chord '{self.name}' offsets must be strictly ascending")
        if self.degrees is not None:
            if len(self.degrees) != len(offsets) or any(d < 1 for d in self.degrees):
                raise InvalidFormula(f"Chord '{self.name}' degrees do not match its offsets")

    @property
    def generic_degrees(self) -> tuple[int, ...]:
        if self.degrees is not None:
            return self.degrees
        return tuple(default_degree(o) for o in self.offsets)

    @property
    def intervals(self) -> tuple[Interval, ...]:
        """Offsets reduced to simple intervals, in formula order."""
        return tuple(
            Interval(o, number=(d - 1) % 7 + 1)
            for o, d in zip(self.offsets, self.generic_degrees, strict=True)
        )

    @property
    def interval_set(self) -> IntervalSet:
        return IntervalSet(frozenset(self.intervals))

    @property
    def interval_names(self) -> list[str]:
        """Names of each offset, extensions included ('major ninth')."""
        return [
            compound_name(o, (d - 1) % 7 + 1)
            for o, d in zip(self.offsets, self.generic_degrees, strict=True)
        ]

    def contains(self, other: ChordFormula) -> bool:
        """True if every interval of the other formula is also in this one."""
        return self.interval_set.issuperset(other.interval_set)

    def get_pitches(self, root: PitchClass) -> list[PitchClass]:
        """Pitch classes of this formula on a root, in formula order."""
        return [root.transpose(o) for o in self.offsets]

    def __len__(self) -> int:
        return len(self.offsets)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"ChordFormula({self.name!r}, {self.offsets!r})"


DEFAULT_CHORD_FORMULAS: tuple[ChordFormula, ...] = (
    ChordFormula("maj", (0, 4, 7), "Major"),
    ChordFormula("maj6", (0, 4, 7, 9), "Major 6th"),
    ChordFormula("maj7", (0, 4, 7, 11), "Major 7th"),
    ChordFormula("maj9", (0, 4, 7, 11, 14), "Major 9th"),
    ChordFormula("maj11", (0, 4, 7, 11, 14, 17), "Major 11th"),
    ChordFormula("maj13", (0, 4, 7, 11, 14, 17, 21), "Major 13th"),
    ChordFormula("min", (0, 3, 7), "Minor"),
    ChordFormula("min6", (0, 3, 7, 9), "Minor 6th"),
    ChordFormula("min7", (0, 3, 7, 10), "Minor 7th"),
    ChordFormula("minmaj7", (0, 3, 7, 11), "Minor Major 7th"),
    ChordFormula("min9", (0, 3, 7, 10, 14), "Minor 9th"),
    ChordFormula("min11", (0, 3, 7, 10, 14, 17), "Minor 11th"),
    ChordFormula("min13", (0, 3, 7, 10, 14, 17, 21), "Minor 13th"),
    ChordFormula("minmaj7b13", (0, 3, 7, 11, 20), "Minor Major 7th Flat 13th", (1, 3, 5, 7, 13)),
    ChordFormula("aug", (0, 4, 8), "Augmented", (1, 3, 5)),
    ChordFormula("aug7", (0, 4, 8, 10), "Augmented 7th", (1, 3, 5, 7)),
    ChordFormula("augmaj7", (0, 4, 8, 11), "Augmented Major 7th", (1, 3, 5, 7)),
    ChordFormula("dim", (0, 3, 6), "Diminished"),
    ChordFormula("dim7", (0, 3, 6, 9), "Diminished 7th", (1, 3, 5, 7)),
    ChordFormula("m7b5", (0, 3, 6, 10), "Half-Diminished 7th"),
    ChordFormula("7", (0, 4, 7, 10), "Dominant 7th"),
    ChordFormula("9", (0, 4, 7, 10, 14), "Dominant 9th"),
    ChordFormula("sus2", (0, 2, 7), "Suspended 2nd"),
    ChordFormula("sus4", (0, 5, 7), "Suspended 4th"),
)

DEFAULT_CHORD_ALIASES: dict[str, str] = {
    "": "maj",
    "M": "maj",
    "major": "maj",
    "6": "maj6",
    "M7": "maj7",
    "Δ": "maj7",
    "Δ7": "maj7",
    "m": "min",
    "-": "min",
    "minor": "min",
    "m6": "min6",
    "m7": "min7",
    "-7": "min7",
    "mM7": "minmaj7",
    "m9": "min9",
    "m11": "min11",
    "m13": "min13",
    "mM7b13": "minmaj7b13",
    "+": "aug",
    "augM7": "augmaj7",
    "°": "dim",
    "o": "dim",
    "°7": "dim7",
    "o7": "dim7",
    "ø": "m7b5",
    "ø7": "m7b5",
    "dom7": "7",
}

_FORMULAS_BY_NAME = {f.name: f for f in DEFAULT_CHORD_FORMULAS}
ChordFormula.MAJOR = _FORMULAS_BY_NAME["maj"]
ChordFormula.MINOR = _FORMULAS_BY_NAME["min"]
ChordFormula.DIMINISHED = _FORMULAS_BY_NAME["dim"]
ChordFormula.AUGMENTED = _FORMULAS_BY_NAME["aug"]
ChordFormula.MAJOR_7 = _FORMULAS_BY_NAME["maj7"]
ChordFormula.MINOR_7 = _FORMULAS_BY_NAME["min7"]
ChordFormula.DOMINANT_7 = _FORMULAS_BY_NAME["7"]


@dataclass(frozen=True)
class SoundingNote:
    """A chord tone with its height above the root-position root."""

    note: Note
    semitones: int

    @property
    def octave(self) -> int:
        """Octaves above the root's octave (0 or more)."""
        return self.semitones // 12

    def __str__(self) -> str:
        return f"{self.note}{'+' * self.octave}" if self.octave else str(self.note)


@dataclass(frozen=True)
class Chord:
    """
    A concrete chord: spelled root, formula, and inversion.

    Inversion 0 is root position; inversion n puts the nth formula tone in
    the bass. Equality is structural. Use same_sonority() to compare only
    the pitch classes that sound.
    """

    root: Note
    formula: ChordFormula
    inversion: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.inversion < len(self.formula):
            raise ValueError(
                f"Inversion must be 0-{len(self.formula) - 1} for {self.formula.name}, "
                f"got {self.inversion}"
            )

    def root_position(self) -> list[Note]:
        """Chord tones spelled from the root, in root-position order."""
        return [
            spell_degree(self.root, d - 1, o)
            for o, d in zip(self.formula.offsets, self.formula.generic_degrees, strict=True)
        ]

    @property
    def semitones(self) -> tuple[int, ...]:
        """
        Heights of the sounding notes above the root-position root.

        The offsets are rotated for the inversion; each tone that would sit
        at or below the tone before it is raised an octave, so the result
        strictly ascends from the bass. C major, first inversion: (4, 7, 12).
        """
        offsets = self.formula.offsets
        rotated = offsets[self.inversion :] + offsets[: self.inversion]
        result = [rotated[0]]
        for offset in rotated[1:]:
            while offset <= result[-1]:
                offset += 12
            result.append(offset)
        return tuple(result)

    @property
    def notes(self) -> tuple[Note, ...]:
        """Sounding notes from the bass up."""
        spelled = self.root_position()
        return tuple(spelled[self.inversion :] + spelled[: self.inversion])

    @property
    def voicing(self) -> tuple[SoundingNote, ...]:
        return tuple(SoundingNote(n, s) for n, s in zip(self.notes, self.semitones, strict=True))

    @property
    def bass(self) -> Note:
        return self.notes[0]

    @property
    def pitch_classes(self) -> frozenset[PitchClass]:
        return frozenset(self.root.pitch_class.transpose(o) for o in self.formula.offsets)

    def get_midi_notes(self, octave: int = 4) -> list[int]:
        """
        Get MIDI note numbers for this voicing.

        Args:
            octave: Octave of the root-position root (default 4)

        Returns:
            List of MIDI note numbers, ascending from the bass
        """
        root_midi = self.root.pitch_class.to_midi(octave)
        return [root_midi + s for s in self.semitones]

    def get_frequencies(self, octave: int = 4) -> list[float]:
        """Equal-tempered frequencies in Hz of get_midi_notes(octave), A4 = 440."""
        return [midi_to_hertz(m) for m in self.get_midi_notes(octave)]

    @property
    def pretty_notes(self) -> list[str]:
        return [n.pretty for n in self.notes]

    @property
    def symbol(self) -> str:
        """Chord symbol, slash notation for inversions (Cmaj/E)."""
        result = f"{self.root}{self.formula.name}"
        if self.inversion:
            result += f"/{self.bass}"
        return result

    def same_sonority(self, other: Chord) -> bool:
        return self.pitch_classes == other.pitch_classes

    def __str__(self) -> str:
        return self.symbol


def build_chord(root: Note, formula: ChordFormula) -> Chord:
    """Place a formula on a root, in root position."""
    return Chord(root, formula, 0)


def invert(chord: Chord, n: int) -> Chord:
    """
    Rotate the chord n inversions further (wrapping at the formula length).

    invert(invert(c, n), len(c.formula) - n) == c.
    """
    size = len(chord.formula)
    return Chord(chord.root, chord.formula, (chord.inversion + n) % size)


def spell_all(
    chord: Chord, context_key: KeyContext | SpellingPreference | None = None
) -> list[Note]:
    """
    Spell the sounding notes of a chord.

    Without a context the chord spells itself from its root (C minor gives
    Eb, not D#). With a key context or preference, each pitch class is
    spelled by that convention instead.
    """
    if context_key is None:
        return list(chord.notes)
    return [spell(n.pitch_class, context_key) for n in chord.notes]


def sonority_key(chord: Chord) -> frozenset[PitchClass]:
    """The unordered pitch-class set, identical for every inversion."""
    return chord.pitch_classes


def same_sonority(a: Chord, b: Chord) -> bool:
    return a.same_sonority(b)


def formula_from_entry(name: str, entry: Any) -> ChordFormula:
    """Accept a ChordFormula, a list of offsets, or a mapping with offsets."""
    if isinstance(entry, ChordFormula):
        return entry
    if isinstance(entry, Mapping):
        degrees = entry.get("degrees")
        return ChordFormula(
            name,
            tuple(entry["offsets"]),
            entry.get("long_name", ""),
            tuple(degrees) if degrees is not None else None,
        )
    return ChordFormula(name, tuple(entry))


class ChordQualityTable:
    """
    Name to formula lookup for chord qualities.

    Symbols are case-sensitive ('M7' and 'm7' differ). Each table is
    independent, so callers can register new qualities without touching
    the engine or other tables.
    """

    def __init__(
        self,
        qualities: Mapping[str, Any] | None = None,
        aliases: Mapping[str, str] | None = None,
        include_defaults: bool = True,
    ):
        """
        Initialize the table.

        Args:
            qualities: Extra qualities keyed by name (offsets, mapping, or ChordFormula)
            aliases: Extra alias -> name mappings
            include_defaults: Start from the built-in qualities
        """
        self._formulas: dict[str, ChordFormula] = {}
        self._aliases: dict[str, str] = {}

        if include_defaults:
            for formula in DEFAULT_CHORD_FORMULAS:
                self.add(formula)
            self._aliases.update(DEFAULT_CHORD_ALIASES)

        for name, entry in (qualities or {}).items():
            self.add(formula_from_entry(name, entry))

        self._aliases.update(aliases or {})

    def add(self, formula: ChordFormula) -> ChordFormula:
        """Add (or replace) a formula under its own name."""
        self._formulas[formula.name] = formula
        return formula

    def register(
        self,
        name: str,
        offsets: Sequence[int],
        long_name: str = "",
        degrees: Sequence[int] | None = None,
    ) -> ChordFormula:
        """Create and add a formula from plain offsets."""
        return self.add(
            ChordFormula(name, tuple(offsets), long_name, tuple(degrees) if degrees else None)
        )

    def alias(self, alias: str, target: str) -> None:
        """Make another symbol resolve to an existing quality name."""
        self._aliases[alias] = target

    def get(self, symbol: str) -> ChordFormula:
        """
        Resolve a quality symbol.

        Raises:
            UnknownSymbol: If the symbol is neither a name nor an alias
        """
        key = symbol.strip()
        if key in self._formulas:
            return self._formulas[key]
        target = self._aliases.get(key)
        if target is not None and target in self._formulas:
            return self._formulas[target]
        raise UnknownSymbol(f"Unknown chord quality: {symbol!r}")

    def match(self, offsets: Sequence[int]) -> ChordFormula | None:
        """Find the formula whose root-position offsets equal these."""
        wanted = tuple(offsets)
        for formula in self._formulas.values():
            if formula.offsets == wanted:
                return formula
        return None

    def names(self) -> list[str]:
        return list(self._formulas)

    def formulas(self) -> list[ChordFormula]:
        return list(self._formulas.values())

    def __iter__(self) -> Iterator[ChordFormula]:
        return iter(self._formulas.values())

    def __contains__(self, symbol: object) -> bool:
        if not isinstance(symbol, str):
            return False
        try:
            self.get(symbol)
        except UnknownSymbol:
            return False
        return True

    def __len__(self) -> int:
        return len(self._formulas)


def roman_numeral(degree: int, formula: ChordFormula) -> str:
    """
    Roman numeral for a chord built on a 1-based scale degree.

    Case follows the third (upper = major, lower = minor),
    ° marks diminished fifths and + augmented fifths.
    """
    numeral_map = {1: "I", 2: "II", 3: "III", 4: "IV", 5: "V", 6: "VI", 7: "VII"}
    base = numeral_map.get(degree, str(degree))
    simple = {o % 12 for o in formula.offsets}

    if 3 in simple and 4 not in simple:
        base = base.lower()
    if 6 in simple and 7 not in simple:
        base += "ø" if 10 in simple else "°"
    elif 8 in simple and 7 not in simple:
        base += "+"
    if len(formula) == 4:
        base += "Δ7" if 11 in simple and 4 in simple else "7"
    return base


def diatonic_chords(
    scale: Scale,
    table: ChordQualityTable | None = None,
    sevenths: bool = False,
) -> list[tuple[str, Chord]]:
    """
    Get the chords built by stacking thirds on each degree of a scale.

    Args:
        scale: A seven-note scale
        table: Quality table used to name the chords
        sevenths: Stack four notes instead of three

    Returns:
        List of (roman numeral, chord) tuples
    """
    if len(scale) != HEPTATONIC:
        raise ValueError(f"Diatonic chords need a seven-note scale, got {len(scale)} notes")

    table = table or ChordQualityTable()
    notes = scale.degrees()
    offsets = scale.offsets
    size = 4 if sevenths else 3

    result: list[tuple[str, Chord]] = []
    for i, root in enumerate(notes):
        stack = tuple((offsets[(i + 2 * j) % 7] - offsets[i]) % 12 for j in range(size))
        formula = table.match(stack)
        if formula is None:
            logger.debug("No named quality for stack %s on %s", stack, root)
            formula = ChordFormula(
                "(" + ",".join(str(s) for s in stack) + ")", stack, "", tuple(range(1, 2 * size, 2))
            )
        chord = Chord(root, formula)
        result.append((roman_numeral(i + 1, formula), chord))
    return result


def chords_on_roots(
    formulas: Iterable[ChordFormula],
    roots: Iterable[int],
    preferred: SpellingPreference | KeyContext | None = None,
) -> Iterator[Chord]:
    """Every formula on every root, roots spelled by the given convention."""
    spelled_roots = [spell(r, preferred) for r in roots]
    for formula in formulas:
        for root in spelled_roots:
            yield Chord(root, formula)
