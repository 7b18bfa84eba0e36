"""
Error taxonomy for the chord map.

Every error is a local, recoverable condition returned to the caller.
They all derive from ValueError so callers that already guard parsing
with ``except ValueError`` keep working.
"""


class ChordMapError(ValueError):
    """Base class for all chord map errors."""


class UnknownSymbol(ChordMapError):
    """A note, chord quality, or scale symbol could not be resolved."""


class InvalidFormula(ChordMapError):
    """A chord or scale formula is malformed."""


class SpellingAmbiguous(ChordMapError):
    """A pitch class has two equally valid spellings and no preference was given."""


class UnknownNode(ChordMapError):
    """A node is not in the map or not reachable from the current position."""


class EmptyPivotSet(ChordMapError):
    """An empty pivot set would return too large a slice of the chord space."""


class InvalidPivotSet(ChordMapError):
    """Pivot notes must belong to the chord being branched from."""


class SessionEnded(ChordMapError):
    """The explored map was closed and accepts no further operations."""
