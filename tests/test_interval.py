"""
Tests for interval primitives.

Tests cover:
- Interval naming, arithmetic, inversion
- interval_between with and without spelling
- IntervalSet and interval vectors
"""

import pytest

from chuk_mcp_chordmap.core import (
    Direction,
    Interval,
    IntervalQuality,
    IntervalSet,
    Note,
    interval_between,
    interval_vector,
)
from chuk_mcp_chordmap.core.interval import compound_name, invert


class TestInterval:
    """Tests for Interval class."""

    def test_named_intervals(self) -> None:
        """Named intervals have correct values."""
        assert Interval.UNISON.semitones == 0
        assert Interval.MINOR_THIRD.semitones == 3
        assert Interval.TRITONE.semitones == 6
        assert Interval.MAJOR_SEVENTH.semitones == 11

    def test_short_aliases(self) -> None:
        """Short aliases point at the same intervals."""
        assert Interval.P1 == Interval.UNISON
        assert Interval.m3 == Interval.MINOR_THIRD
        assert Interval.P5 == Interval.PERFECT_FIFTH

    def test_reduced_modulo_octave(self) -> None:
        """Semitones are reduced into one octave."""
        assert Interval(13).semitones == 1
        assert Interval(12) == Interval.UNISON

    def test_names(self) -> None:
        """Default names come from the semitone count."""
        assert Interval(4).name == "major third"
        assert Interval(6).name == "tritone"
        assert Interval(4).short_name == "M3"

    def test_spelled_names(self) -> None:
        """A generic number refines the name."""
        assert Interval(8, number=5).name == "augmented fifth"
        assert Interval(8, number=5).short_name == "A5"
        assert Interval(6, number=4).quality == IntervalQuality.AUGMENTED

    def test_equality_ignores_spelling(self) -> None:
        """Equality and hashing only look at semitones."""
        assert Interval(8, number=5) == Interval(8, number=6)
        assert hash(Interval(4, number=3)) == hash(Interval(4))

    def test_immutable(self) -> None:
        """Intervals cannot be modified."""
        with pytest.raises(AttributeError):
            Interval.MAJOR_THIRD._semitones = 5  # type: ignore[misc]

    def test_add_and_subtract(self) -> None:
        """Arithmetic wraps at the octave."""
        assert Interval.MAJOR_THIRD + Interval.MINOR_THIRD == Interval.PERFECT_FIFTH
        assert Interval.PERFECT_FIFTH + Interval.PERFECT_FIFTH == Interval.MAJOR_SECOND
        assert Interval(2) - Interval(5) == Interval(9)

    def test_directed(self) -> None:
        """Melodic intervals keep their direction."""
        down = Interval.directed(-3)
        assert down.direction == Direction.DOWN
        assert down.signed_semitones == -3
        assert str(down) == "-m3"
        assert not Interval(3).is_directed

    def test_ordering(self) -> None:
        """Intervals sort by size."""
        assert Interval.MINOR_THIRD < Interval.MAJOR_THIRD
        assert sorted([Interval(7), Interval(0), Interval(4)]) == [
            Interval(0),
            Interval(4),
            Interval(7),
        ]


class TestInversion:
    """Tests for interval inversion."""

    def test_invert(self) -> None:
        """Classic inversions."""
        assert Interval.MAJOR_THIRD.invert().semitones == 8
        assert Interval.PERFECT_FIFTH.invert().semitones == 5
        assert Interval.TRITONE.invert().semitones == 6

    def test_unison_inverts_to_unison(self) -> None:
        """The octave is reduced back to a unison."""
        assert Interval.UNISON.invert() == Interval.UNISON

    def test_invert_renames(self) -> None:
        """Inversion swaps quality and generic number."""
        assert Interval(4, number=3).invert().name == "minor sixth"
        assert Interval(8, number=5).invert().name == "diminished fourth"

    def test_involution(self) -> None:
        """Inverting twice gives the original interval."""
        for semitones in range(12):
            interval = Interval(semitones)
            assert invert(invert(interval)) == interval
            assert invert(invert(interval)).name == interval.name


class TestIntervalBetween:
    """Tests for interval_between."""

    def test_ascending(self) -> None:
        """Intervals are measured upward."""
        assert interval_between(Note("C"), Note("G")) == Interval.PERFECT_FIFTH
        assert interval_between(Note("G"), Note("C")) == Interval.PERFECT_FOURTH

    def test_spelled(self) -> None:
        """Spelled intervals follow the letters."""
        assert interval_between(Note("C"), Note("G", 1), spelled=True).name == "augmented fifth"
        assert interval_between(Note("C"), Note("A", -1), spelled=True).name == "minor sixth"

    def test_compound_names(self) -> None:
        """Extensions get compound names."""
        assert compound_name(14) == "major ninth"
        assert compound_name(17) == "perfect eleventh"
        assert compound_name(21) == "major thirteenth"
        assert compound_name(12) == "perfect octave"
        assert compound_name(20, 6) == "minor thirteenth"


class TestIntervalSet:
    """Tests for IntervalSet and interval vectors."""

    def test_from_offsets(self) -> None:
        """Build from semitone offsets."""
        intervals = IntervalSet.from_offsets([7, 0, 4, 12])
        assert intervals.semitones == (0, 4, 7)
        assert len(intervals) == 3

    def test_contains_int(self) -> None:
        """Membership accepts semitone counts."""
        intervals = IntervalSet.from_offsets([0, 4, 7])
        assert 4 in intervals
        assert Interval.MINOR_THIRD not in intervals

    def test_set_operations(self) -> None:
        """Subset, union, intersection."""
        triad = IntervalSet.from_offsets([0, 4, 7])
        seventh = IntervalSet.from_offsets([0, 4, 7, 11])
        assert triad.issubset(seventh)
        assert seventh.issuperset(triad)
        assert triad.union(IntervalSet.from_offsets([11])) == seventh
        assert seventh.intersection(triad) == triad

    def test_interval_vector(self) -> None:
        """Interval-class vectors of familiar sets."""
        assert interval_vector([0, 4, 7]) == (0, 0, 1, 1, 1, 0)
        assert interval_vector([0, 2, 4, 5, 7, 9, 11]) == (2, 5, 4, 3, 6, 1)
        assert interval_vector([0, 3, 6, 9]) == (0, 0, 4, 0, 0, 2)
