"""
Interval primitives - Interval, IntervalQuality, IntervalSet.

An interval is a semitone distance within one octave. The semitone count
is the only key for equality; the name ("minor third") is derived from it,
optionally refined by a generic number taken from the note letters so that
enharmonic spellings get their proper names (C-G# is an augmented fifth,
C-Ab a minor sixth).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum
from functools import total_ordering
from typing import ClassVar

from .pitch import Note, distance, shortest_distance

_DEFAULT_NAMES: dict[int, str] = {
    0: "perfect unison",
    1: "minor second",
    2: "major second",
    3: "minor third",
    4: "major third",
    5: "perfect fourth",
    6: "tritone",
    7: "perfect fifth",
    8: "minor sixth",
    9: "major sixth",
    10: "minor seventh",
    11: "major seventh",
}

_SHORT_NAMES: dict[int, str] = {
    0: "P1",
    1: "m2",
    2: "M2",
    3: "m3",
    4: "M3",
    5: "P4",
    6: "TT",
    7: "P5",
    8: "m6",
    9: "M6",
    10: "m7",
    11: "M7",
}

# Generic interval number assumed when no spelling is known
_DEFAULT_NUMBERS: dict[int, int] = {
    0: 1,
    1: 2,
    2: 2,
    3: 3,
    4: 3,
    5: 4,
    6: 4,
    7: 5,
    8: 6,
    9: 6,
    10: 7,
    11: 7,
}

_NUMBER_NAMES: dict[int, str] = {
    1: "unison",
    2: "second",
    3: "third",
    4: "fourth",
    5: "fifth",
    6: "sixth",
    7: "seventh",
    8: "octave",
    9: "ninth",
    10: "tenth",
    11: "eleventh",
    12: "twelfth",
    13: "thirteenth",
}

_PERFECT_NUMBERS = frozenset({1, 4, 5})

# Semitones of the major/perfect interval for each generic number
_REFERENCE_SEMITONES: dict[int, int] = {1: 0, 2: 2, 3: 4, 4: 5, 5: 7, 6: 9, 7: 11}


class IntervalQuality(str, Enum):
    """Interval quality relative to the major/perfect reference."""

    PERFECT = "perfect"
    MAJOR = "major"
    MINOR = "minor"
    AUGMENTED = "augmented"
    DIMINISHED = "diminished"

    @property
    def short(self) -> str:
        return {"perfect": "P", "major": "M", "minor": "m", "augmented": "A", "diminished": "d"}[
            self.value
        ]


class Direction(str, Enum):
    """Formula intervals have no direction; melodic intervals go up or down."""

    NONE = "none"
    UP = "up"
    DOWN = "down"


def quality_for(number: int, semitones: int) -> IntervalQuality | None:
    """
    Work out the quality of a generic interval number spanning some semitones.

    Returns None when the combination needs more than a single
    augmentation or diminution.
    """
    diff = ((semitones - _REFERENCE_SEMITONES[number] + 6) % 12) - 6
    if number in _PERFECT_NUMBERS:
        table = {
            0: IntervalQuality.PERFECT,
            1: IntervalQuality.AUGMENTED,
            -1: IntervalQuality.DIMINISHED,
        }
    else:
        table = {
            0: IntervalQuality.MAJOR,
            -1: IntervalQuality.MINOR,
            1: IntervalQuality.AUGMENTED,
            -2: IntervalQuality.DIMINISHED,
        }
    return table.get(diff)


@total_ordering
class Interval:
    """
    Distance between pitches in semitones, reduced to one octave.

    Immutable and hashable. Equality only looks at semitones, so an
    augmented fourth equals a diminished fifth and an upward major third
    equals a downward one.
    """

    __slots__ = ("_semitones", "_direction", "_number")
    _semitones: int
    _direction: Direction
    _number: int | None

    # Named intervals (class constants)
    UNISON: ClassVar[Interval]
    MINOR_SECOND: ClassVar[Interval]
    MAJOR_SECOND: ClassVar[Interval]
    MINOR_THIRD: ClassVar[Interval]
    MAJOR_THIRD: ClassVar[Interval]
    PERFECT_FOURTH: ClassVar[Interval]
    TRITONE: ClassVar[Interval]
    PERFECT_FIFTH: ClassVar[Interval]
    MINOR_SIXTH: ClassVar[Interval]
    MAJOR_SIXTH: ClassVar[Interval]
    MINOR_SEVENTH: ClassVar[Interval]
    MAJOR_SEVENTH: ClassVar[Interval]

    # Short aliases
    P1: ClassVar[Interval]
    m2: ClassVar[Interval]
    M2: ClassVar[Interval]
    m3: ClassVar[Interval]
    M3: ClassVar[Interval]
    P4: ClassVar[Interval]
    TT: ClassVar[Interval]
    P5: ClassVar[Interval]
    m6: ClassVar[Interval]
    M6: ClassVar[Interval]
    m7: ClassVar[Interval]
    M7: ClassVar[Interval]

    def __init__(
        self,
        semitones: int,
        direction: Direction = Direction.NONE,
        number: int | None = None,
    ) -> None:
        """Create an interval; semitones are reduced modulo 12."""
        if number is not None and number not in _REFERENCE_SEMITONES:
            raise ValueError(f"Generic interval number must be 1-7, got {number}")
        object.__setattr__(self, "_semitones", semitones % 12)
        object.__setattr__(self, "_direction", Direction(direction))
        object.__setattr__(self, "_number", number)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Interval is immutable")

    @property
    def semitones(self) -> int:
        """Number of semitones in this interval (0-11)."""
        return self._semitones

    @property
    def direction(self) -> Direction:
        return self._direction

    @property
    def is_directed(self) -> bool:
        return self._direction != Direction.NONE

    @property
    def signed_semitones(self) -> int:
        """Semitones with the sign of the direction (negative when descending)."""
        return -self._semitones if self._direction == Direction.DOWN else self._semitones

    @property
    def number(self) -> int:
        """Generic interval number (1 = unison ... 7 = seventh)."""
        if self._number is not None:
            return self._number
        return _DEFAULT_NUMBERS[self._semitones]

    @property
    def quality(self) -> IntervalQuality | None:
        return quality_for(self.number, self._semitones)

    @property
    def name(self) -> str:
        """Canonical name, e.g. 'minor third' or 'augmented fifth'."""
        quality = self.quality
        if self._number is None or quality is None:
            return _DEFAULT_NAMES[self._semitones]
        return f"{quality.value} {_NUMBER_NAMES[self._number]}"

    @property
    def short_name(self) -> str:
        quality = self.quality
        if self._number is None or quality is None:
            return _SHORT_NAMES[self._semitones]
        return f"{quality.short}{self._number}"

    def invert(self) -> Interval:
        """
        Invert the interval within an octave.

        M3 (4) -> m6 (8)
        P5 (7) -> P4 (5)
        P1 (0) -> P1 (0), the octave reduced back into range
        """
        number = None
        if self._number is not None:
            number = 1 if self._number == 1 else 9 - self._number
        return Interval((12 - self._semitones) % 12, self._direction, number)

    @classmethod
    def directed(cls, semitones: int) -> Interval:
        """Melodic interval from a signed semitone motion."""
        if semitones > 0:
            return cls(semitones, Direction.UP)
        if semitones < 0:
            return cls(-semitones, Direction.DOWN)
        return cls(0)

    def __add__(self, other: Interval) -> Interval:
        """Add two intervals (wraps at the octave)."""
        if not isinstance(other, Interval):
            return NotImplemented
        return Interval(self._semitones + other._semitones)

    def __sub__(self, other: Interval) -> Interval:
        """Subtract an interval from another (wraps at the octave)."""
        if not isinstance(other, Interval):
            return NotImplemented
        return Interval(self._semitones - other._semitones)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Interval):
            return NotImplemented
        return bool(self._semitones == other._semitones)

    def __lt__(self, other: Interval) -> bool:
        if not isinstance(other, Interval):
            return NotImplemented
        return bool(self._semitones < other._semitones)

    def __hash__(self) -> int:
        return hash(self._semitones)

    def __repr__(self) -> str:
        if self._number is None and not self.is_directed:
            return f"Interval({self._semitones})"
        return f"Interval({self._semitones}, {self._direction.value!r}, {self._number!r})"

    def __str__(self) -> str:
        """Short interval name with an arrow for melodic intervals."""
        arrow = {Direction.NONE: "", Direction.UP: "+", Direction.DOWN: "-"}[self._direction]
        return f"{arrow}{self.short_name}"


# Initialize class constants after class is defined
Interval.UNISON = Interval(0)
Interval.MINOR_SECOND = Interval(1)
Interval.MAJOR_SECOND = Interval(2)
Interval.MINOR_THIRD = Interval(3)
Interval.MAJOR_THIRD = Interval(4)
Interval.PERFECT_FOURTH = Interval(5)
Interval.TRITONE = Interval(6)
Interval.PERFECT_FIFTH = Interval(7)
Interval.MINOR_SIXTH = Interval(8)
Interval.MAJOR_SIXTH = Interval(9)
Interval.MINOR_SEVENTH = Interval(10)
Interval.MAJOR_SEVENTH = Interval(11)

# Short aliases
Interval.P1 = Interval.UNISON
Interval.m2 = Interval.MINOR_SECOND
Interval.M2 = Interval.MAJOR_SECOND
Interval.m3 = Interval.MINOR_THIRD
Interval.M3 = Interval.MAJOR_THIRD
Interval.P4 = Interval.PERFECT_FOURTH
Interval.TT = Interval.TRITONE
Interval.P5 = Interval.PERFECT_FIFTH
Interval.m6 = Interval.MINOR_SIXTH
Interval.M6 = Interval.MAJOR_SIXTH
Interval.m7 = Interval.MINOR_SEVENTH
Interval.M7 = Interval.MAJOR_SEVENTH


def interval_between(a: Note, b: Note, *, spelled: bool = False) -> Interval:
    """
    Ascending interval from note a to note b.

    Args:
        a: Lower note
        b: Upper note
        spelled: Name the interval from the letters (enharmonic-aware)

    Returns:
        The interval, without direction
    """
    semitones = distance(a.pitch_class, b.pitch_class)
    if not spelled:
        return Interval(semitones)

    number = (b.letter_index - a.letter_index) % 7 + 1
    if quality_for(number, semitones) is None:
        return Interval(semitones)
    return Interval(semitones, number=number)


def invert(interval: Interval) -> Interval:
    """Classic interval inversion, (12 - semitones) mod 12."""
    return interval.invert()


def compound_name(semitones: int, number: int | None = None) -> str:
    """
    Name an offset that may reach past the octave.

    14 -> 'major ninth', 17 -> 'perfect eleventh', 21 -> 'major thirteenth'.
    """
    simple = semitones % 12
    octaves = semitones // 12
    if octaves == 0:
        return Interval(simple, number=number).name
    if simple == 0 and octaves == 1:
        return "perfect octave"

    base = number if number is not None else _DEFAULT_NUMBERS[simple]
    quality = quality_for(base, simple)
    compound = base + 7 * octaves
    label = _NUMBER_NAMES.get(compound, f"{compound}th")
    if quality is None:
        return f"{compound_name(simple)} + {octaves} octave(s)"
    return f"{quality.value} {label}"


@dataclass(frozen=True)
class IntervalSet:
    """
    An unordered set of intervals, used to compare chord and scale formulas.

    Immutable and hashable.
    """

    intervals: frozenset[Interval]

    @classmethod
    def from_offsets(cls, offsets: Iterable[int]) -> IntervalSet:
        return cls(frozenset(Interval(o) for o in offsets))

    @property
    def semitones(self) -> tuple[int, ...]:
        """Sorted semitone values."""
        return tuple(sorted(i.semitones for i in self.intervals))

    def union(self, other: IntervalSet) -> IntervalSet:
        return IntervalSet(self.intervals | other.intervals)

    def intersection(self, other: IntervalSet) -> IntervalSet:
        return IntervalSet(self.intervals & other.intervals)

    def issubset(self, other: IntervalSet) -> bool:
        return self.intervals <= other.intervals

    def issuperset(self, other: IntervalSet) -> bool:
        return self.intervals >= other.intervals

    def __contains__(self, item: object) -> bool:
        if isinstance(item, int):
            item = Interval(item)
        return item in self.intervals

    def __iter__(self) -> Iterator[Interval]:
        return iter(sorted(self.intervals))

    def __len__(self) -> int:
        return len(self.intervals)

    def __str__(self) -> str:
        return "{" + ", ".join(str(i) for i in self) + "}"


def interval_vector(pitch_classes: Iterable[int]) -> tuple[int, int, int, int, int, int]:
    """
    Interval-class vector of a pitch-class set.

    Entry k counts the unordered pairs whose shortest distance is k + 1.
    A major triad gives (0, 0, 1, 1, 1, 0).
    """
    pcs = sorted({int(pc) % 12 for pc in pitch_classes})
    counts = [0] * 6
    for i, a in enumerate(pcs):
        for b in pcs[i + 1 :]:
            counts[shortest_distance(a, b) - 1] += 1
    return (counts[0], counts[1], counts[2], counts[3], counts[4], counts[5])
