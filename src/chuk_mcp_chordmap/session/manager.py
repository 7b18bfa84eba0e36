"""
Session Manager - one explored map per exploration session.

Sessions are kept in memory only. Each holds its own ExploredMap, so two
sessions never share nodes, edges, or position. A finished session can be
exported as YAML for external rendering.
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime
from pathlib import Path

import yaml

from chuk_mcp_chordmap.core.chord import Chord
from chuk_mcp_chordmap.core.pitch import KeyContext
from chuk_mcp_chordmap.graph import ChordGraphEngine, ExploredMap
from chuk_mcp_chordmap.models.records import MapSnapshot, MapState

logger = logging.getLogger(__name__)


class ExplorationSession:
    """A named explored map plus the key it is spelled in."""

    def __init__(
        self,
        name: str,
        explored_map: ExploredMap,
        key: KeyContext | None = None,
    ):
        self.name = name
        self.explored_map = explored_map
        self.key = key
        self.created = datetime.now(UTC)

    @property
    def state(self) -> MapState:
        return self.explored_map.state

    def __repr__(self) -> str:
        return f"ExplorationSession({self.name!r}, {self.state.value}, {self.explored_map!r})"


class SessionMetadata:
    """Lightweight metadata for listing sessions."""

    def __init__(
        self,
        name: str,
        state: MapState,
        current: str | None,
        node_count: int,
        edge_count: int,
        created: datetime,
    ):
        self.name = name
        self.state = state
        self.current = current
        self.node_count = node_count
        self.edge_count = edge_count
        self.created = created

    def __repr__(self) -> str:
        return f"SessionMetadata({self.name!r}, {self.state.value}, {self.node_count} nodes)"


class SessionManager:
    """
    Manages exploration session lifecycle.

    Provides methods to start, look up, end, list, and export sessions.
    """

    def __init__(self, engine: ChordGraphEngine | None = None):
        """
        Initialize the manager.

        Args:
            engine: Graph engine shared by all sessions
        """
        self.engine = engine or ChordGraphEngine()
        self._cache: dict[str, ExplorationSession] = {}

    async def create(
        self,
        name: str,
        chord: Chord,
        key: KeyContext | None = None,
    ) -> ExplorationSession:
        """
        Start a new session positioned at a chord.

        Args:
            name: Session name
            chord: Starting chord
            key: Optional key context used to spell branch candidates

        Returns:
            The created session

        Raises:
            ValueError: If an open session with this name exists
        """
        existing = self._cache.get(name)
        if existing is not None and existing.state != MapState.ENDED:
            raise ValueError(f"Session already exists: {name}")

        explored_map = self.engine.start_at(chord)
        session = ExplorationSession(name, explored_map, key)
        self._cache[name] = session
        logger.debug("Created session %s at %s", name, chord)
        return session

    async def get(self, name: str) -> ExplorationSession | None:
        """
        Get a session by name.

        Returns:
            The session or None if not found
        """
        return self._cache.get(name)

    async def require(self, name: str) -> ExplorationSession:
        """Get a session by name, raising ValueError if it does not exist."""
        session = await self.get(name)
        if session is None:
            raise ValueError(f"Session not found: {name}")
        return session

    async def end(self, name: str) -> MapSnapshot:
        """
        End a session and return its final snapshot.

        The ended session stays listed until deleted.
        """
        session = await self.require(name)
        snapshot = self.engine.end(session.explored_map)
        logger.debug("Ended session %s", name)
        return snapshot

    async def delete(self, name: str) -> bool:
        """
        Forget a session.

        Returns:
            True if deleted, False if not found
        """
        return self._cache.pop(name, None) is not None

    async def list_sessions(self) -> list[SessionMetadata]:
        """List all sessions, newest first."""
        result = [
            SessionMetadata(
                name=s.name,
                state=s.state,
                current=s.explored_map.current,
                node_count=len(s.explored_map.nodes),
                edge_count=len(s.explored_map.edges),
                created=s.created,
            )
            for s in self._cache.values()
        ]
        return sorted(result, key=lambda m: m.created, reverse=True)

    async def export_yaml(self, name: str, path: Path | None = None) -> str:
        """
        Render a session's snapshot as YAML.

        Args:
            name: Session name
            path: Optional file to write the YAML to

        Returns:
            The YAML text
        """
        session = await self.require(name)
        snapshot = self.engine.snapshot(session.explored_map)
        text = yaml.safe_dump(snapshot.to_yaml_dict(), default_flow_style=False, sort_keys=False)

        if path is not None:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(text)
        return text
