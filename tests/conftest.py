"""
Pytest configuration and shared fixtures.
"""

import tempfile
from pathlib import Path

import pytest

from chuk_mcp_chordmap.core import Chord, ChordFormula, Note
from chuk_mcp_chordmap.graph import CandidatePool, ChordGraphEngine


@pytest.fixture
def temp_dir() -> Path:
    """Create a temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def c_major() -> Chord:
    """C major triad in root position."""
    return Chord(Note("C"), ChordFormula.MAJOR)


@pytest.fixture
def engine() -> ChordGraphEngine:
    """Graph engine with default configuration."""
    return ChordGraphEngine()


@pytest.fixture
def triad_seventh_pool() -> CandidatePool:
    """Major, minor, major 7th and minor 7th on all twelve roots."""
    return CandidatePool(
        (
            ChordFormula.MAJOR,
            ChordFormula.MINOR,
            ChordFormula.MAJOR_7,
            ChordFormula.MINOR_7,
        )
    )
