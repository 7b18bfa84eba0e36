"""
Exploration tools - MCP tools for walking the chord map.

Tools for starting a session at a chord, branching through pivot notes,
moving and backtracking, and exporting the explored map.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

from chuk_mcp_chordmap import api
from chuk_mcp_chordmap.core.pitch import Note, PitchClass
from chuk_mcp_chordmap.graph import CandidatePool, ChordGraphNode
from chuk_mcp_chordmap.library import TheoryLibrary
from chuk_mcp_chordmap.session import ExplorationSession, SessionManager

if TYPE_CHECKING:
    from chuk_mcp_server import ChukMCPServer

logger = logging.getLogger(__name__)


def _node_dict(node: ChordGraphNode) -> dict[str, Any]:
    return {
        "id": node.id,
        "symbol": node.chord.symbol,
        "notes": [str(n) for n in node.chord.notes],
        "visits": node.visits,
    }


def _parse_pivot(value: str) -> PitchClass:
    """A pivot is a note name ('E', 'Bb') or a pitch-class number ('4')."""
    text = value.strip()
    if text.isdigit():
        return PitchClass(int(text) % 12)
    return Note.parse(text).pitch_class


def register_explore_tools(
    mcp: ChukMCPServer,
    sessions: SessionManager,
    library: TheoryLibrary,
) -> dict[str, Any]:
    """
    Register chord map exploration tools with the MCP server.

    Args:
        mcp: The MCP server instance
        sessions: The session manager
        library: The theory library supplying quality and scale tables

    Returns:
        Dictionary of registered tool functions
    """
    tools: dict[str, Any] = {}
    engine = sessions.engine

    def resolve_node(session: ExplorationSession, ref: str) -> ChordGraphNode:
        """Find a node by id or by chord symbol."""
        explored_map = session.explored_map
        if ref in explored_map.nodes:
            return explored_map.nodes[ref]
        return explored_map.node(api.parse_chord(ref, library.qualities()))

    def not_found(name: str) -> str:
        return json.dumps({"status": "error", "message": f"Session not found: {name}"})

    @mcp.tool  # type: ignore[arg-type]
    async def explore_start(name: str, chord: str, key: str | None = None) -> str:
        """
        Start exploring the chord map from a chord.

        Creates a new session whose map holds just the starting chord.

        Args:
            name: Unique name for the session
            chord: Starting chord symbol (e.g., 'Cmaj', 'Am7')
            key: Optional key used to spell new chords (e.g., 'Eb_major')

        Returns:
            JSON string with the starting node and its pivot notes

        Example:
            explore_start(name="sketch", chord="Cmaj", key="C_major")
        """
        try:
            start = api.parse_chord(chord, library.qualities())
            key_context = api.parse_scale(key, library.scales()).key_context() if key else None
            session = await sessions.create(name, start, key_context)
            node = session.explored_map.node(start)

            return json.dumps(
                {
                    "status": "success",
                    "session": name,
                    "current": _node_dict(node),
                    "pivots": [str(n) for n in start.notes],
                }
            )
        except Exception as e:
            logger.exception("Failed to start exploration")
            return json.dumps({"status": "error", "message": str(e)})

    tools["explore_start"] = explore_start

    @mcp.tool  # type: ignore[arg-type]
    async def explore_pivots(name: str, node: str | None = None) -> str:
        """
        List the notes a branch can pivot on.

        Args:
            name: Session name
            node: Node id or chord symbol (default: the current chord)

        Returns:
            JSON string with the chord's notes and pitch classes

        Example:
            explore_pivots(name="sketch")
        """
        try:
            session = await sessions.get(name)
            if session is None:
                return not_found(name)

            explored_map = session.explored_map
            target = resolve_node(session, node) if node else explored_map.current_node
            if target is None:
                return json.dumps({"status": "error", "message": "No current chord"})

            pitch_classes = engine.pivot_notes(explored_map, target)
            return json.dumps(
                {
                    "status": "success",
                    "node": target.id,
                    "notes": [str(n) for n in target.chord.notes],
                    "pitch_classes": sorted(int(pc) for pc in pitch_classes),
                }
            )
        except Exception as e:
            logger.exception("Failed to list pivots")
            return json.dumps({"status": "error", "message": str(e)})

    tools["explore_pivots"] = explore_pivots

    @mcp.tool  # type: ignore[arg-type]
    async def explore_branch(
        name: str,
        pivots: list[str],
        qualities: list[str] | None = None,
        scale: str | None = None,
        node: str | None = None,
        limit: int = 10,
    ) -> str:
        """
        Branch from a chord through a set of pivot notes.

        Finds every chord in the candidate pool that contains all the
        pivots, ranks them by pleasantness, and links them into the map.

        Args:
            name: Session name
            pivots: Notes the neighbours must share (e.g., ['C', 'E'])
            qualities: Qualities to try (default: every known quality)
            scale: Restrict roots to a scale (e.g., 'C_major')
            node: Node id or chord symbol to branch from (default: current)
            limit: Maximum number of candidates to return

        Returns:
            JSON string with ranked candidates and their score breakdowns

        Example:
            explore_branch(name="sketch", pivots=["C", "E"], qualities=["maj", "min", "maj7", "min7"])
        """
        try:
            session = await sessions.get(name)
            if session is None:
                return not_found(name)

            explored_map = session.explored_map
            source = resolve_node(session, node) if node else explored_map.current_node
            if source is None:
                return json.dumps({"status": "error", "message": "No current chord"})

            table = library.qualities()
            formulas = (
                [table.get(q) for q in qualities] if qualities else table.formulas()
            )
            if scale:
                pool = CandidatePool.diatonic(api.parse_scale(scale, library.scales()), formulas)
            else:
                pool = CandidatePool(tuple(formulas))

            ranked = engine.branch(
                explored_map,
                source,
                [_parse_pivot(p) for p in pivots],
                pool,
                key=session.key,
            )

            return json.dumps(
                {
                    "status": "success",
                    "from": source.id,
                    "total": len(ranked),
                    "candidates": [
                        {
                            "node": c.node_id,
                            "symbol": c.chord.symbol,
                            "notes": [str(n) for n in c.chord.notes],
                            "score": round(c.score, 3),
                            "pivot_ratio": round(c.breakdown.pivot_ratio, 3),
                            "voice_leading_cost": c.breakdown.voice_leading_cost,
                            "shared_notes": c.breakdown.shared_notes,
                        }
                        for c in ranked[: max(limit, 0)]
                    ],
                }
            )
        except Exception as e:
            logger.exception("Failed to branch")
            return json.dumps({"status": "error", "message": str(e)})

    tools["explore_branch"] = explore_branch

    @mcp.tool  # type: ignore[arg-type]
    async def explore_move(name: str, node: str) -> str:
        """
        Move to a neighbouring chord.

        The chord must have been found by a branch from the current chord.

        Args:
            name: Session name
            node: Node id or chord symbol

        Returns:
            JSON string with the new current node

        Example:
            explore_move(name="sketch", node="Am7")
        """
        try:
            session = await sessions.get(name)
            if session is None:
                return not_found(name)

            target = engine.move_to(session.explored_map, resolve_node(session, node))
            return json.dumps({"status": "success", "current": _node_dict(target)})
        except Exception as e:
            logger.exception("Failed to move")
            return json.dumps({"status": "error", "message": str(e)})

    tools["explore_move"] = explore_move

    @mcp.tool  # type: ignore[arg-type]
    async def explore_back(name: str) -> str:
        """
        Go back to the previous chord.

        Args:
            name: Session name

        Returns:
            JSON string with the new current node

        Example:
            explore_back(name="sketch")
        """
        try:
            session = await sessions.get(name)
            if session is None:
                return not_found(name)

            previous = engine.back(session.explored_map)
            return json.dumps({"status": "success", "current": _node_dict(previous)})
        except Exception as e:
            logger.exception("Failed to go back")
            return json.dumps({"status": "error", "message": str(e)})

    tools["explore_back"] = explore_back

    @mcp.tool  # type: ignore[arg-type]
    async def explore_remove(name: str, node: str) -> str:
        """
        Remove a chord and its edges from the map.

        The current chord cannot be removed.

        Args:
            name: Session name
            node: Node id or chord symbol

        Returns:
            JSON string confirming removal

        Example:
            explore_remove(name="sketch", node="Fmaj7")
        """
        try:
            session = await sessions.get(name)
            if session is None:
                return not_found(name)

            target = resolve_node(session, node)
            engine.remove_node(session.explored_map, target)
            return json.dumps({"status": "success", "removed": target.id})
        except Exception as e:
            logger.exception("Failed to remove node")
            return json.dumps({"status": "error", "message": str(e)})

    tools["explore_remove"] = explore_remove

    @mcp.tool  # type: ignore[arg-type]
    async def explore_snapshot(name: str) -> str:
        """
        Get the whole explored map.

        Args:
            name: Session name

        Returns:
            JSON string with nodes, edges, current position, and history

        Example:
            explore_snapshot(name="sketch")
        """
        try:
            session = await sessions.get(name)
            if session is None:
                return not_found(name)

            snapshot = engine.snapshot(session.explored_map)
            return json.dumps({"status": "success", "map": snapshot.model_dump(mode="json")})
        except Exception as e:
            logger.exception("Failed to snapshot map")
            return json.dumps({"status": "error", "message": str(e)})

    tools["explore_snapshot"] = explore_snapshot

    @mcp.tool  # type: ignore[arg-type]
    async def explore_export_yaml(name: str, path: str | None = None) -> str:
        """
        Export the explored map as YAML.

        Args:
            name: Session name
            path: Optional file to write the YAML to

        Returns:
            JSON string containing the YAML content

        Example:
            explore_export_yaml(name="sketch", path="maps/sketch.yaml")
        """
        try:
            if await sessions.get(name) is None:
                return not_found(name)

            yaml_content = await sessions.export_yaml(name, Path(path) if path else None)
            return json.dumps({"status": "success", "yaml": yaml_content, "path": path})
        except Exception as e:
            logger.exception("Failed to export YAML")
            return json.dumps({"status": "error", "message": str(e)})

    tools["explore_export_yaml"] = explore_export_yaml

    @mcp.tool  # type: ignore[arg-type]
    async def explore_list() -> str:
        """
        List exploration sessions.

        Returns:
            JSON string with session summaries, newest first

        Example:
            explore_list()
        """
        try:
            listed = await sessions.list_sessions()
            return json.dumps(
                {
                    "status": "success",
                    "sessions": [
                        {
                            "name": m.name,
                            "state": m.state.value,
                            "current": m.current,
                            "nodes": m.node_count,
                            "edges": m.edge_count,
                        }
                        for m in listed
                    ],
                    "count": len(listed),
                }
            )
        except Exception as e:
            logger.exception("Failed to list sessions")
            return json.dumps({"status": "error", "message": str(e)})

    tools["explore_list"] = explore_list

    @mcp.tool  # type: ignore[arg-type]
    async def explore_end(name: str) -> str:
        """
        End an exploration session.

        The map stays readable but accepts no further moves or branches.

        Args:
            name: Session name

        Returns:
            JSON string with the final map

        Example:
            explore_end(name="sketch")
        """
        try:
            if await sessions.get(name) is None:
                return not_found(name)

            snapshot = await sessions.end(name)
            return json.dumps({"status": "success", "map": snapshot.model_dump(mode="json")})
        except Exception as e:
            logger.exception("Failed to end session")
            return json.dumps({"status": "error", "message": str(e)})

    tools["explore_end"] = explore_end

    return tools
