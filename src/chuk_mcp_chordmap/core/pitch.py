"""
Pitch primitives - PitchClass, Note and spelling.

These are the foundational types for all pitch-related operations.
PitchClass represents the 12 chromatic pitches (octave-independent).
Note adds a display spelling (letter + accidental) on top of a pitch class.
Arithmetic always happens on pitch classes; spelling is only for display.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum, IntEnum

from chuk_mcp_chordmap.errors import SpellingAmbiguous, UnknownSymbol

logger = logging.getLogger(__name__)

# Display name mappings (module level to avoid IntEnum member issues)
_SHARP_NAMES: list[str] = [
    "C",
    "C#",
    "D",
    "D#",
    "E",
    "F",
    "F#",
    "G",
    "G#",
    "A",
    "A#",
    "B",
]
_FLAT_NAMES: list[str] = [
    "C",
    "Db",
    "D",
    "Eb",
    "E",
    "F",
    "Gb",
    "G",
    "Ab",
    "A",
    "Bb",
    "B",
]

_LETTERS: tuple[str, ...] = ("C", "D", "E", "F", "G", "A", "B")
_NATURALS: dict[str, int] = {"C": 0, "D": 2, "E": 4, "F": 5, "G": 7, "A": 9, "B": 11}

# Semitone offsets used to spell a key signature from its tonic
_MAJOR_KEY_OFFSETS: tuple[int, ...] = (0, 2, 4, 5, 7, 9, 11)
_MINOR_KEY_OFFSETS: tuple[int, ...] = (0, 2, 3, 5, 7, 8, 10)

MAX_ACCIDENTAL = 2

# Concert pitch: A4 is MIDI 69 at 440 Hz
A4_MIDI = 69
A4_HERTZ = 440.0

_PRETTY_ACCIDENTALS: dict[int, str] = {-2: "𝄫", -1: "♭", 0: "", 1: "♯", 2: "𝄪"}


class PitchClass(IntEnum):
    """
    The 12 chromatic pitch classes (0-11).

    Octave-independent - C4 and C5 are both PitchClass.C.
    Enharmonic equivalents share the same value (C# == Db == 1).

    Spelling is a display concern, handled by Note and spell().
    Internally, we use sharp names (Cs, Ds, etc.).
    """

    C = 0
    Cs = 1  # C# / Db
    D = 2
    Ds = 3  # D# / Eb
    E = 4
    F = 5
    Fs = 6  # F# / Gb
    G = 7
    Gs = 8  # G# / Ab
    A = 9
    As = 10  # A# / Bb
    B = 11

    def transpose(self, semitones: int) -> PitchClass:
        """Transpose by a number of semitones (positive or negative)."""
        return PitchClass((self.value + semitones) % 12)

    def distance_to(self, other: int) -> int:
        """Ascending semitone count from this pitch class to another."""
        return distance(self, other)

    def to_midi(self, octave: int = 4) -> int:
        """Convert to MIDI note number. C4 = 60."""
        return self.value + (octave + 1) * 12

    def to_hertz(self, octave: int = 4, reference: float = A4_HERTZ) -> float:
        """Equal-tempered frequency in this octave. A4 = 440 Hz."""
        return midi_to_hertz(self.to_midi(octave), reference)

    def spell(self, prefer_flats: bool = False) -> str:
        """Get human-readable name."""
        names = _FLAT_NAMES if prefer_flats else _SHARP_NAMES
        return names[self.value]

    @property
    def is_natural(self) -> bool:
        """True for the white keys, which have a single natural spelling."""
        return _SHARP_NAMES[self.value] == _FLAT_NAMES[self.value]

    @classmethod
    def from_midi(cls, midi_note: int) -> PitchClass:
        """Extract pitch class from MIDI note number."""
        return cls(midi_note % 12)

    @classmethod
    def parse(cls, name: str) -> PitchClass:
        """Parse a pitch class from a string like 'C', 'C#', 'Db', 'Cbb'."""
        name = name.strip()

        # Try enum names (C, Cs, D, Ds, etc.)
        for member in cls:
            if member.name == name:
                return member

        return Note.parse(name).pitch_class


def normalize(n: int) -> PitchClass:
    """Reduce any integer to a pitch class. Never fails."""
    return PitchClass(n % 12)


def distance(a: int, b: int) -> int:
    """Directed ascending semitone count from a to b, in [0, 12)."""
    return (int(b) - int(a)) % 12


def midi_to_hertz(midi_note: int, reference: float = A4_HERTZ) -> float:
    """Equal-tempered frequency of a MIDI note number."""
    return reference * 2 ** ((midi_note - A4_MIDI) / 12)


def shortest_distance(a: int, b: int) -> int:
    """Semitones between two pitch classes going whichever way is shorter."""
    up = distance(a, b)
    return min(up, 12 - up)


class SpellingPreference(str, Enum):
    """Which accidental to use for black-key pitch classes."""

    SHARP = "sharp"
    FLAT = "flat"


DEFAULT_SPELLING = SpellingPreference.SHARP


@dataclass(frozen=True)
class Note:
    """
    A pitch class plus a display spelling.

    The letter is A-G and the accidental counts semitones:
    -2 = double flat, -1 = flat, 0 = natural, +1 = sharp, +2 = double sharp.

    Equality is on spelling, so C# != Db even though both are pitch class 1.
    Use is_enharmonic() to compare by pitch class.

    Examples:
        Note("C") = C
        Note("B", -1) = Bb
        Note.parse("F##") = F double sharp
    """

    letter: str
    accidental: int = 0

    def __post_init__(self) -> None:
        if self.letter not in _NATURALS:
            raise UnknownSymbol(f"Unknown note letter: {self.letter!r}")
        if not -MAX_ACCIDENTAL <= self.accidental <= MAX_ACCIDENTAL:
            raise UnknownSymbol(f"Accidental out of range: {self.accidental}")

    @property
    def pitch_class(self) -> PitchClass:
        """The pitch class this spelling denotes."""
        return normalize(_NATURALS[self.letter] + self.accidental)

    @property
    def letter_index(self) -> int:
        """Position of the letter in C D E F G A B."""
        return _LETTERS.index(self.letter)

    def is_enharmonic(self, other: Note) -> bool:
        """True if both notes denote the same pitch class."""
        return self.pitch_class == other.pitch_class

    def transpose(
        self,
        semitones: int,
        preferred: SpellingPreference | KeyContext | None = None,
    ) -> Note:
        """Transpose and respell the result."""
        if preferred is None:
            preferred = self.preference
        return spell(self.pitch_class.transpose(semitones), preferred)

    @property
    def preference(self) -> SpellingPreference:
        """Accidental direction implied by this spelling."""
        return SpellingPreference.FLAT if self.accidental < 0 else SpellingPreference.SHARP

    @property
    def pretty(self) -> str:
        """Display spelling with accidental glyphs (B♭, F♯, C𝄪)."""
        return self.letter + _PRETTY_ACCIDENTALS[self.accidental]

    def to_midi(self, octave: int = 4) -> int:
        """
        MIDI note number of this spelling in an octave.

        The octave belongs to the letter, so Cb4 is B3 (59) and B#3 is C4 (60).
        """
        return _NATURALS[self.letter] + self.accidental + (octave + 1) * 12

    def to_hertz(self, octave: int = 4, reference: float = A4_HERTZ) -> float:
        return midi_to_hertz(self.to_midi(octave), reference)

    def __str__(self) -> str:
        if self.accidental >= 0:
            return self.letter + "#" * self.accidental
        return self.letter + "b" * -self.accidental

    def __repr__(self) -> str:
        return f"Note({str(self)!r})"

    @classmethod
    def parse(cls, symbol: str) -> Note:
        """
        Parse a note from a string like 'C', 'c#', 'Db', 'Bbb', 'Fx', 'E♭'.

        Raises:
            UnknownSymbol: If the string is not a note name
        """
        text = (
            symbol.strip()
            .replace("♯", "#")
            .replace("♭", "b")
            .replace("𝄪", "##")
            .replace("𝄫", "bb")
        )
        if not text:
            raise UnknownSymbol("Empty note symbol")

        letter = text[0].upper()
        rest = text[1:].replace("x", "##")

        if letter not in _NATURALS:
            raise UnknownSymbol(f"Unknown note: {symbol!r}")

        if rest and set(rest) == {"#"}:
            accidental = len(rest)
        elif rest and set(rest) == {"b"}:
            accidental = -len(rest)
        elif not rest:
            accidental = 0
        else:
            raise UnknownSymbol(f"Unknown note: {symbol!r}")

        return cls(letter, accidental)


@dataclass(frozen=True)
class KeyContext:
    """
    The spelling convention of a key.

    Pitch classes that belong to the key use the key's own spelling;
    anything else follows the key's accidental direction.
    """

    tonic: Note
    notes: tuple[Note, ...] = ()

    @property
    def preference(self) -> SpellingPreference:
        """Flat if the key spells anything with flats, otherwise sharp."""
        accidentals = [self.tonic.accidental, *(n.accidental for n in self.notes)]
        if any(a < 0 for a in accidentals):
            return SpellingPreference.FLAT
        return SpellingPreference.SHARP

    def spelling_of(self, pc: int) -> Note | None:
        """The key's own spelling of a pitch class, if it has one."""
        pc = normalize(pc)
        for note in self.notes:
            if note.pitch_class == pc:
                return note
        return None

    @classmethod
    def for_tonic(cls, tonic: Note | str, minor: bool = False) -> KeyContext:
        """Build the context of a major (or natural minor) key."""
        if isinstance(tonic, str):
            tonic = Note.parse(tonic)
        offsets = _MINOR_KEY_OFFSETS if minor else _MAJOR_KEY_OFFSETS
        notes = tuple(spell_degree(tonic, step, semis) for step, semis in enumerate(offsets))
        return cls(tonic, notes)

    def __str__(self) -> str:
        return " ".join(str(n) for n in self.notes) or str(self.tonic)


def spell(
    pc: int,
    preferred: SpellingPreference | KeyContext | None = None,
    *,
    strict: bool = False,
) -> Note:
    """
    Spell a pitch class as a Note.

    Args:
        pc: Pitch class (any integer, normalised)
        preferred: Sharp/flat preference or a key context
        strict: Raise instead of applying the sharp default

    Returns:
        The spelled note

    Raises:
        SpellingAmbiguous: If strict, no preference, and pc is a black key
    """
    pc = normalize(pc)

    if isinstance(preferred, KeyContext):
        in_key = preferred.spelling_of(pc)
        if in_key is not None:
            return in_key
        preferred = preferred.preference

    if preferred is None:
        if not pc.is_natural:
            if strict:
                raise SpellingAmbiguous(
                    f"Pitch class {int(pc)} spells as {_SHARP_NAMES[pc]} or {_FLAT_NAMES[pc]}"
                )
            logger.debug("No spelling preference for %d, defaulting to sharp", pc)
        preferred = DEFAULT_SPELLING

    names = _FLAT_NAMES if SpellingPreference(preferred) == SpellingPreference.FLAT else _SHARP_NAMES
    return Note.parse(names[pc])


def spell_degree(root: Note, steps: int, semitones: int) -> Note:
    """
    Spell the note a given number of letter steps and semitones above a root.

    This is how diatonic spelling works: the third of C minor is three
    letters up (E) lowered to match 3 semitones, giving Eb rather than D#.
    Falls back to plain spelling when the result would need more than
    a double accidental.
    """
    letter = _LETTERS[(root.letter_index + steps) % 7]
    target = root.pitch_class.transpose(semitones)
    accidental = ((target - _NATURALS[letter] + 6) % 12) - 6

    if abs(accidental) > MAX_ACCIDENTAL:
        return spell(target, root.preference)
    return Note(letter, accidental)
