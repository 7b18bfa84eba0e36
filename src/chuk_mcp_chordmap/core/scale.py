"""
Scale primitives - ScaleFormula, Scale, ScaleTable.

Scales are offset patterns from a tonic. A Scale is a formula applied to a
tonic, read from one of the formula's modes.

Two different "modes" operations exist and they must not be confused:

- mode(scale, k): the relative mode. Start the same parent scale from its
  kth degree. Mode 1 of C major is D Dorian: new tonic, same pitch classes.
- parallel_mode(scale, k): keep the tonic and swap in the kth rotation of
  the pattern. Mode 1 of C major in parallel is C Dorian: same tonic,
  different pitch classes.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass, field
from typing import ClassVar

from chuk_mcp_chordmap.errors import InvalidFormula, UnknownSymbol

from .interval import IntervalSet
from .pitch import (
    KeyContext,
    Note,
    PitchClass,
    SpellingPreference,
    normalize,
    spell,
    spell_degree,
)

logger = logging.getLogger(__name__)

HEPTATONIC = 7


@dataclass(frozen=True)
class ScaleFormula:
    """
    A scale defined by its offsets from the tonic.

    Offsets are cumulative and ascending within one octave.
    A major scale is (0, 2, 4, 5, 7, 9, 11); its step pattern is W W H W W W H.

    Immutable and hashable, shared by every scale of that family.
    """

    name: str
    offsets: tuple[int, ...]
    mode_names: tuple[str, ...] = field(default=(), compare=False)

    # Common scale formulas (defined after class)
    MAJOR: ClassVar[ScaleFormula]
    HARMONIC_MINOR: ClassVar[ScaleFormula]
    MELODIC_MINOR: ClassVar[ScaleFormula]
    MAJOR_PENTATONIC: ClassVar[ScaleFormula]
    BLUES: ClassVar[ScaleFormula]
    WHOLE_TONE: ClassVar[ScaleFormula]
    CHROMATIC: ClassVar[ScaleFormula]

    def __post_init__(self) -> None:
        offsets = tuple(int(o) for o in self.offsets)
        object.__setattr__(self, "offsets", offsets)
        object.__setattr__(self, "mode_names", tuple(self.mode_names))

        if len(set(offsets)) < 2:
            raise InvalidFormula(f"Scale '{self.name}' needs at least 2 distinct offsets")
        if offsets[0] != 0:
            raise InvalidFormula(f"Scale '{self.name}' must start at offset 0")
        if any(b <= a for a, b in zip(offsets, offsets[1:], strict=False)):
            raise InvalidFormula(f"Scale '{self.name}' offsets must be strictly ascending")
        if offsets[-1] >= 12:
            raise InvalidFormula(f"Scale '{self.name}' offsets must stay within one octave")
        if self.mode_names and len(self.mode_names) != len(offsets):
            raise InvalidFormula(
                f"Scale '{self.name}' has {len(offsets)} degrees "
                f"but {len(self.mode_names)} mode names"
            )

    @property
    def steps(self) -> tuple[int, ...]:
        """Semitones from each degree to the next, ending back at the octave."""
        upper = (*self.offsets[1:], 12)
        return tuple(b - a for a, b in zip(self.offsets, upper, strict=True))

    @property
    def interval_set(self) -> IntervalSet:
        return IntervalSet.from_offsets(self.offsets)

    def rotated(self, k: int) -> tuple[int, ...]:
        """Offsets of the kth rotation, re-measured from its own first degree."""
        n = len(self.offsets)
        k %= n
        return tuple((self.offsets[(i + k) % n] - self.offsets[k]) % 12 for i in range(n))

    def mode_name(self, k: int) -> str:
        k %= len(self.offsets)
        if self.mode_names:
            return self.mode_names[k]
        return self.name if k == 0 else f"{self.name} mode {k + 1}"

    @classmethod
    def from_steps(
        cls, name: str, steps: Sequence[int], mode_names: Sequence[str] = ()
    ) -> ScaleFormula:
        """Build a formula from a step pattern such as (2, 2, 1, 2, 2, 2, 1)."""
        total = sum(steps)
        if total != 12:
            raise InvalidFormula(f"Scale steps must sum to 12 semitones, got {total}")
        offsets = [0]
        for step in steps[:-1]:
            offsets.append(offsets[-1] + step)
        return cls(name, tuple(offsets), tuple(mode_names))

    def __len__(self) -> int:
        return len(self.offsets)

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"ScaleFormula({self.name!r}, {self.offsets!r})"


ScaleFormula.MAJOR = ScaleFormula.from_steps(
    "major",
    (2, 2, 1, 2, 2, 2, 1),
    ("ionian", "dorian", "phrygian", "lydian", "mixolydian", "aeolian", "locrian"),
)
ScaleFormula.HARMONIC_MINOR = ScaleFormula.from_steps(
    "harmonic minor",
    (2, 1, 2, 2, 1, 3, 1),
    (
        "harmonic minor",
        "locrian natural 6",
        "ionian augmented",
        "ukrainian dorian",
        "phrygian dominant",
        "lydian sharp 2",
        "ultralocrian",
    ),
)
ScaleFormula.MELODIC_MINOR = ScaleFormula.from_steps(
    "melodic minor",
    (2, 1, 2, 2, 2, 2, 1),
    (
        "melodic minor",
        "dorian flat 2",
        "lydian augmented",
        "lydian dominant",
        "mixolydian flat 6",
        "locrian natural 2",
        "altered",
    ),
)
ScaleFormula.MAJOR_PENTATONIC = ScaleFormula(
    "major pentatonic",
    (0, 2, 4, 7, 9),
    ("major pentatonic", "egyptian", "man gong", "ritsusen", "minor pentatonic"),
)
ScaleFormula.BLUES = ScaleFormula("blues", (0, 3, 5, 6, 7, 10))
ScaleFormula.WHOLE_TONE = ScaleFormula("whole tone", (0, 2, 4, 6, 8, 10))
ScaleFormula.CHROMATIC = ScaleFormula("chromatic", tuple(range(12)))


@dataclass(frozen=True)
class Scale:
    """
    A tonic plus a parent formula read from one of its modes.

    Examples:
        Scale(Note("C"), ScaleFormula.MAJOR) = C major
        Scale(Note("D"), ScaleFormula.MAJOR, mode=1) = D dorian

    The spelling preference is fixed when the scale is built and carried
    through mode changes, so non-heptatonic scales keep their accidentals.
    """

    tonic: Note
    formula: ScaleFormula
    mode: int = 0
    spelling: SpellingPreference = SpellingPreference.SHARP

    def __post_init__(self) -> None:
        if not 0 <= self.mode < len(self.formula):
            raise ValueError(f"Mode must be 0-{len(self.formula) - 1}, got {self.mode}")

    @property
    def offsets(self) -> tuple[int, ...]:
        """Offsets of this mode measured from the tonic."""
        return self.formula.rotated(self.mode)

    @property
    def name(self) -> str:
        return self.formula.mode_name(self.mode)

    @property
    def pitch_classes(self) -> frozenset[PitchClass]:
        return frozenset(self.tonic.pitch_class.transpose(o) for o in self.offsets)

    def degrees(self) -> list[Note]:
        """
        The scale's notes in order, starting at the tonic.

        Seven-note scales use one letter per degree; other sizes follow the
        scale's spelling preference.
        """
        if len(self.formula) == HEPTATONIC:
            return [spell_degree(self.tonic, i, o) for i, o in enumerate(self.offsets)]
        rest = [spell(self.tonic.pitch_class.transpose(o), self.spelling) for o in self.offsets[1:]]
        return [self.tonic, *rest]

    def key_context(self) -> KeyContext:
        """Spelling context for pitch classes in (and around) this scale."""
        return KeyContext(self.tonic, tuple(self.degrees()))

    def __iter__(self) -> Iterator[Note]:
        return iter(self.degrees())

    def __len__(self) -> int:
        return len(self.formula)

    def __str__(self) -> str:
        return f"{self.tonic} {self.name}"


def _preference_for(tonic: Note, offsets: Sequence[int]) -> SpellingPreference:
    """Accidental direction of the major or minor key sharing this tonic."""
    minor = 3 in offsets and 4 not in offsets
    return KeyContext.for_tonic(tonic, minor=minor).preference


def build_scale(tonic: Note, formula: ScaleFormula) -> Scale:
    """Apply a formula to a tonic, in its base mode."""
    return Scale(tonic, formula, 0, _preference_for(tonic, formula.offsets))


def mode(scale: Scale, k: int) -> Scale:
    """
    The kth relative mode: the same parent scale started from its kth degree.

    The new tonic is tonic + offsets[k]; the pitch-class set is unchanged.
    mode(mode(s, k), len(s) - k) == s.
    """
    n = len(scale.formula)
    k %= n
    new_tonic = scale.degrees()[k]
    return Scale(new_tonic, scale.formula, (scale.mode + k) % n, scale.spelling)


def parallel_mode(scale: Scale, k: int) -> Scale:
    """
    The kth rotation of the pattern on the same tonic.

    parallel_mode(C major, 1) is C dorian.
    """
    n = len(scale.formula)
    return Scale(scale.tonic, scale.formula, (scale.mode + k) % n, scale.spelling)


def transpose(scale: Scale, tonic: Note) -> Scale:
    """Re-root the identical pattern at a new tonic."""
    return Scale(tonic, scale.formula, scale.mode, _preference_for(tonic, scale.offsets))


def degrees(scale: Scale) -> list[Note]:
    return scale.degrees()


def contains(scale: Scale, pc: int) -> bool:
    """True if the pitch class belongs to the scale."""
    return normalize(pc) in scale.pitch_classes


def degree_of(scale: Scale, pc: int) -> int | None:
    """
    Get the scale degree (1-based) of a pitch class.

    Returns None if the pitch class is not in the scale.
    """
    target = normalize(pc)
    for i, offset in enumerate(scale.offsets):
        if scale.tonic.pitch_class.transpose(offset) == target:
            return i + 1
    return None


def note_at(scale: Scale, degree: int) -> Note:
    """Get the note at a 1-based scale degree."""
    if not 1 <= degree <= len(scale):
        raise ValueError(f"Degree must be 1-{len(scale)}, got {degree}")
    return scale.degrees()[degree - 1]


def _normalize_symbol(symbol: str) -> str:
    return " ".join(symbol.strip().lower().replace("_", " ").replace("-", " ").split())


DEFAULT_SCALE_FORMULAS: tuple[ScaleFormula, ...] = (
    ScaleFormula.MAJOR,
    ScaleFormula.HARMONIC_MINOR,
    ScaleFormula.MELODIC_MINOR,
    ScaleFormula.MAJOR_PENTATONIC,
    ScaleFormula.BLUES,
    ScaleFormula.WHOLE_TONE,
    ScaleFormula.CHROMATIC,
)

DEFAULT_SCALE_ALIASES: dict[str, str] = {
    "minor": "aeolian",
    "natural minor": "aeolian",
    "pentatonic": "major pentatonic",
}


class ScaleTable:
    """
    Name to formula lookup for scales.

    Formula names and mode names both resolve: 'major' gives
    (MAJOR, 0) and 'dorian' gives (MAJOR, 1). Each table is independent,
    so callers can register their own scales without affecting others.
    """

    def __init__(
        self,
        formulas: Mapping[str, ScaleFormula | Sequence[int]] | None = None,
        aliases: Mapping[str, str] | None = None,
        include_defaults: bool = True,
    ):
        """
        Initialize the table.

        Args:
            formulas: Extra formulas keyed by name (offsets or ScaleFormula)
            aliases: Extra alias -> name mappings
            include_defaults: Start from the built-in scales
        """
        self._formulas: dict[str, ScaleFormula] = {}
        self._modes: dict[str, tuple[ScaleFormula, int]] = {}
        self._aliases: dict[str, str] = {}

        if include_defaults:
            for formula in DEFAULT_SCALE_FORMULAS:
                self.add(formula)
            self._aliases.update(DEFAULT_SCALE_ALIASES)

        for name, entry in (formulas or {}).items():
            if isinstance(entry, ScaleFormula):
                self.add(entry)
            else:
                self.register(name, entry)

        for alias, target in (aliases or {}).items():
            self._aliases[_normalize_symbol(alias)] = _normalize_symbol(target)

    def add(self, formula: ScaleFormula) -> ScaleFormula:
        """Add (or replace) a formula and index its mode names."""
        key = _normalize_symbol(formula.name)
        self._formulas[key] = formula
        for k, mode_name in enumerate(formula.mode_names):
            self._modes[_normalize_symbol(mode_name)] = (formula, k)
        return formula

    def register(
        self, name: str, offsets: Sequence[int], mode_names: Sequence[str] = ()
    ) -> ScaleFormula:
        """Create and add a formula from plain offsets."""
        return self.add(ScaleFormula(name, tuple(offsets), tuple(mode_names)))

    def alias(self, alias: str, target: str) -> None:
        """Make another symbol resolve to a scale or mode name."""
        self._aliases[_normalize_symbol(alias)] = _normalize_symbol(target)

    def resolve(self, symbol: str) -> tuple[ScaleFormula, int]:
        """
        Resolve a scale symbol to its parent formula and mode index.

        Raises:
            UnknownSymbol: If nothing matches
        """
        key = _normalize_symbol(symbol)
        key = self._aliases.get(key, key)

        if key in self._formulas:
            return self._formulas[key], 0
        if key in self._modes:
            return self._modes[key]
        raise UnknownSymbol(f"Unknown scale: {symbol!r}")

    def build(self, tonic: Note, symbol: str) -> Scale:
        """Build a scale on a tonic from a symbol like 'major' or 'dorian'."""
        formula, mode_index = self.resolve(symbol)
        offsets = formula.rotated(mode_index)
        return Scale(tonic, formula, mode_index, _preference_for(tonic, offsets))

    def names(self) -> list[str]:
        """All resolvable names: formulas, modes, aliases."""
        return sorted({*self._formulas, *self._modes, *self._aliases})

    def formulas(self) -> list[ScaleFormula]:
        return list(self._formulas.values())

    def __contains__(self, symbol: object) -> bool:
        if not isinstance(symbol, str):
            return False
        try:
            self.resolve(symbol)
        except UnknownSymbol:
            return False
        return True

    def __len__(self) -> int:
        return len(self._formulas)
