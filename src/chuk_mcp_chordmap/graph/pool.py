"""
Candidate pools - the bounded search space of a branch.

A pool is a set of chord formulas crossed with a set of roots. The full
chord space is never materialised; each branch enumerates only its pool,
at most 12 x len(formulas) chords.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from chuk_mcp_chordmap.core.chord import Chord, ChordFormula, ChordQualityTable, chords_on_roots
from chuk_mcp_chordmap.core.pitch import KeyContext, PitchClass, SpellingPreference, normalize
from chuk_mcp_chordmap.core.scale import Scale

ALL_ROOTS: tuple[PitchClass, ...] = tuple(PitchClass)


@dataclass(frozen=True)
class CandidatePool:
    """Chord formulas x roots to try when branching."""

    formulas: tuple[ChordFormula, ...]
    roots: tuple[PitchClass, ...] = ALL_ROOTS

    def __post_init__(self) -> None:
        object.__setattr__(self, "formulas", tuple(dict.fromkeys(self.formulas)))
        object.__setattr__(self, "roots", tuple(dict.fromkeys(normalize(r) for r in self.roots)))

    @property
    def size(self) -> int:
        """Number of chords the pool enumerates before filtering."""
        return len(self.formulas) * len(self.roots)

    def chords(self, preferred: SpellingPreference | KeyContext | None = None) -> Iterator[Chord]:
        """Enumerate the pool in formula-major order."""
        return chords_on_roots(self.formulas, self.roots, preferred)

    @classmethod
    def from_table(
        cls, table: ChordQualityTable, names: Iterable[str] | None = None
    ) -> CandidatePool:
        """Pool of named qualities from a table (all of them if names is None)."""
        if names is None:
            return cls(tuple(table.formulas()))
        return cls(tuple(table.get(name) for name in names))

    @classmethod
    def diatonic(cls, scale: Scale, formulas: Iterable[ChordFormula]) -> CandidatePool:
        """Restrict roots to the degrees of a scale."""
        roots = tuple(scale.tonic.pitch_class.transpose(o) for o in scale.offsets)
        return cls(tuple(formulas), roots)

    @classmethod
    def coerce(cls, pool: CandidatePool | Iterable[ChordFormula]) -> CandidatePool:
        if isinstance(pool, CandidatePool):
            return pool
        return cls(tuple(pool))

    def __len__(self) -> int:
        return self.size
