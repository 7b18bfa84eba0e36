#!/usr/bin/env python3
"""
Example: Explore chord space from C major.

This walks the chord map the way the MCP tools do, without a server.

Usage:
    python examples/explore_chord_map.py
    # Creates: examples/output/c_major.yaml

This is the "Hello World" for chuk-mcp-chordmap - proving that:
1. Chord symbols parse into spelled chords
2. Branching through pivot notes ranks neighbours with explainable scores
3. Moving and backtracking keep the map consistent
4. The explored map exports as YAML
"""

import asyncio
from pathlib import Path

from chuk_mcp_chordmap import api
from chuk_mcp_chordmap.graph import CandidatePool
from chuk_mcp_chordmap.library import TheoryLibrary
from chuk_mcp_chordmap.session import SessionManager


async def main() -> None:
    """Branch twice from C major and export the map."""
    output_dir = Path(__file__).parent / "output"
    output_dir.mkdir(exist_ok=True)

    library = TheoryLibrary()
    manager = SessionManager(library.engine())
    engine = manager.engine
    qualities = library.qualities()

    print("CHUK Chord Map Explorer")
    print("=" * 40)

    start = api.parse_chord("Cmaj", qualities)
    session = await manager.create("demo", start)
    explored = session.explored_map
    weights = engine.config.weights
    print(f"Start: {start} ({' '.join(str(n) for n in start.notes)})")
    print()

    pool = CandidatePool.from_table(qualities, ["maj", "min", "maj7", "min7"])

    print("Branch on C and E:")
    ranked = engine.branch(explored, start, {0, 4}, pool)
    for candidate in ranked:
        print(f"  {candidate.chord.symbol:8} {candidate.breakdown.explain(weights)}")
    print()

    target = ranked[2].chord
    engine.move_to(explored, target)
    print(f"Moved to {target}")

    print("Branch on A:")
    for candidate in engine.branch(explored, target, {9}, pool)[:5]:
        print(f"  {candidate.chord.symbol:8} score {candidate.score:.3f}")
    print()

    previous = engine.back(explored)
    print(f"Back to {previous.chord}")

    output_file = output_dir / "c_major.yaml"
    await manager.export_yaml("demo", output_file)
    snapshot = await manager.end("demo")

    print()
    print(f"Explored {len(snapshot.nodes)} chords, {len(snapshot.edges)} edges")
    print(f"Map written to {output_file}")


if __name__ == "__main__":
    asyncio.run(main())
