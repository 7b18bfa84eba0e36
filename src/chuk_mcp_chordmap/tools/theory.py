"""
Theory tools - MCP tools for building and inspecting chords and scales.

Tools for building chords from symbols, inverting them, building scales
and modes, and listing the qualities and scales the library knows.
"""

from __future__ import annotations

import json
import logging
from typing import TYPE_CHECKING, Any

from chuk_mcp_chordmap import api
from chuk_mcp_chordmap.core.chord import diatonic_chords, invert
from chuk_mcp_chordmap.core.scale import mode, parallel_mode
from chuk_mcp_chordmap.library import TheoryLibrary

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def register_theory_tools(
    mcp: ChukMCPServer,
    library: TheoryLibrary,
) -> dict[str, Any]:
    """
    Register chord and scale tools with the MCP server.

    Args:
        mcp: The MCP server instance
        library: The theory library supplying quality and scale tables

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}

    @mcp.tool  # type: ignore[arg-type]
    async def chord_build(root: str, quality: str = "maj", inversion: int = 0) -> str:
        """
        Build a chord from a root and a quality.

        Args:
            root: Root note (e.g., 'C', 'F#', 'Bb')
            quality: Quality name or alias (e.g., 'maj7', 'm', 'dim7', 'ø')
            inversion: Inversion (0 = root position)

        Returns:
            JSON string with the chord's notes, intervals, and pitch classes

        Example:
            chord_build(root="A", quality="min7")
        """
        try:
            chord = api.build_chord(root, quality, library.qualities(), inversion)
            return json.dumps(
                {"status": "success", "chord": api.describe_chord(chord).model_dump()}
            )
        except Exception as e:
            logger.exception("Failed to build chord")
            return json.dumps({"status": "error", "message": str(e)})

    tools["chord_build"] = chord_build

    @mcp.tool  # type: ignore[arg-type]
    async def chord_invert(symbol: str, steps: int = 1) -> str:
        """
        Invert a chord.

        Rotates the chord the given number of inversions, wrapping around
        after the last one. The pitch classes never change.

        Args:
            symbol: Chord symbol (e.g., 'Cmaj7', 'Cmaj/E')
            steps: Number of inversions to rotate (default: 1)

        Returns:
            JSON string with the inverted chord

        Example:
            chord_invert(symbol="Cmaj", steps=2)
        """
        try:
            chord = api.parse_chord(symbol, library.qualities())
            inverted = invert(chord, steps)
            return json.dumps(
                {
                    "status": "success",
                    "from": chord.symbol,
                    "chord": api.describe_chord(inverted).model_dump(),
                }
            )
        except Exception as e:
            logger.exception("Failed to invert chord")
            return json.dumps({"status": "error", "message": str(e)})

    tools["chord_invert"] = chord_invert

    @mcp.tool  # type: ignore[arg-type]
    async def chord_describe(symbol: str) -> str:
        """
        Describe a chord symbol.

        Args:
            symbol: Chord symbol (e.g., 'Ebm7', 'Bø', 'Cmaj/G')

        Returns:
            JSON string with notes, interval names, interval vector, and MIDI notes

        Example:
            chord_describe(symbol="F#m7")
        """
        try:
            chord = api.parse_chord(symbol, library.qualities())
            return json.dumps(
                {"status": "success", "chord": api.describe_chord(chord).model_dump()}
            )
        except Exception as e:
            logger.exception("Failed to describe chord")
            return json.dumps({"status": "error", "message": str(e)})

    tools["chord_describe"] = chord_describe

    @mcp.tool  # type: ignore[arg-type]
    async def scale_build(tonic: str, scale: str = "major") -> str:
        """
        Build a scale or mode on a tonic.

        Args:
            tonic: Tonic note (e.g., 'D')
            scale: Scale or mode name (e.g., 'major', 'dorian', 'harmonic minor')

        Returns:
            JSON string with the scale's notes, intervals, and step pattern

        Example:
            scale_build(tonic="D", scale="dorian")
        """
        try:
            built = api.build_scale(tonic, scale, library.scales())
            return json.dumps(
                {"status": "success", "scale": api.describe_scale(built).model_dump()}
            )
        except Exception as e:
            logger.exception("Failed to build scale")
            return json.dumps({"status": "error", "message": str(e)})

    tools["scale_build"] = scale_build

    @mcp.tool  # type: ignore[arg-type]
    async def scale_mode(tonic: str, scale: str, degree: int, relative: bool = True) -> str:
        """
        Get a mode of a scale.

        A relative mode starts the same notes from another degree
        (C major, degree 2 = D dorian). A parallel mode keeps the tonic
        and rotates the pattern (C major, degree 2 = C dorian).

        Args:
            tonic: Tonic note
            scale: Scale or mode name
            degree: 1-based degree to start the mode from
            relative: Relative mode if true, parallel mode otherwise

        Returns:
            JSON string with the mode

        Example:
            scale_mode(tonic="C", scale="major", degree=2)
        """
        try:
            base = api.build_scale(tonic, scale, library.scales())
            if not 1 <= degree <= len(base):
                return json.dumps(
                    {"status": "error", "message": f"Degree must be 1-{len(base)}, got {degree}"}
                )
            rotate = mode if relative else parallel_mode
            result = rotate(base, degree - 1)
            return json.dumps(
                {
                    "status": "success",
                    "from": str(base),
                    "scale": api.describe_scale(result).model_dump(),
                }
            )
        except Exception as e:
            logger.exception("Failed to build mode")
            return json.dumps({"status": "error", "message": str(e)})

    tools["scale_mode"] = scale_mode

    @mcp.tool  # type: ignore[arg-type]
    async def scale_diatonic_chords(tonic: str, scale: str = "major", sevenths: bool = False) -> str:
        """
        List the chords built by stacking thirds on each degree of a scale.

        Args:
            tonic: Tonic note
            scale: A seven-note scale or mode name
            sevenths: Stack seventh chords instead of triads

        Returns:
            JSON string with roman numerals and chord symbols

        Example:
            scale_diatonic_chords(tonic="A", scale="minor", sevenths=True)
        """
        try:
            built = api.build_scale(tonic, scale, library.scales())
            chords = diatonic_chords(built, library.qualities(), sevenths)
            return json.dumps(
                {
                    "status": "success",
                    "scale": str(built),
                    "chords": [
                        {
                            "numeral": numeral,
                            "symbol": chord.symbol,
                            "notes": [str(n) for n in chord.notes],
                        }
                        for numeral, chord in chords
                    ],
                }
            )
        except Exception as e:
            logger.exception("Failed to list diatonic chords")
            return json.dumps({"status": "error", "message": str(e)})

    tools["scale_diatonic_chords"] = scale_diatonic_chords

    @mcp.tool  # type: ignore[arg-type]
    async def list_qualities() -> str:
        """
        List available chord qualities.

        Returns:
            JSON string with each quality's name, long name, and offsets

        Example:
            list_qualities()
        """
        try:
            formulas = library.qualities().formulas()
            return json.dumps(
                {
                    "status": "success",
                    "qualities": [
                        {
                            "name": f.name,
                            "long_name": f.long_name,
                            "offsets": list(f.offsets),
                        }
                        for f in formulas
                    ],
                    "count": len(formulas),
                }
            )
        except Exception as e:
            logger.exception("Failed to list qualities")
            return json.dumps({"status": "error", "message": str(e)})

    tools["list_qualities"] = list_qualities

    @mcp.tool  # type: ignore[arg-type]
    async def list_scales() -> str:
        """
        List available scales and their modes.

        Returns:
            JSON string with each scale's name, offsets, and mode names

        Example:
            list_scales()
        """
        try:
            formulas = library.scales().formulas()
            return json.dumps(
                {
                    "status": "success",
                    "scales": [
                        {
                            "name": f.name,
                            "offsets": list(f.offsets),
                            "modes": [f.mode_name(k) for k in range(len(f))],
                        }
                        for f in formulas
                    ],
                    "count": len(formulas),
                }
            )
        except Exception as e:
            logger.exception("Failed to list scales")
            return json.dumps({"status": "error", "message": str(e)})

    tools["list_scales"] = list_scales

    return tools
