"""
Tests for the exploration session manager.
"""

from pathlib import Path

import pytest
import yaml

from chuk_mcp_chordmap.core import Chord, ChordFormula, KeyContext, Note
from chuk_mcp_chordmap.errors import SessionEnded
from chuk_mcp_chordmap.models import MapState
from chuk_mcp_chordmap.session import SessionManager


@pytest.fixture
def manager() -> SessionManager:
    return SessionManager()


class TestSessionLifecycle:
    """Tests for creating, ending, and deleting sessions."""

    @pytest.mark.asyncio
    async def test_create(self, manager: SessionManager, c_major: Chord) -> None:
        """A new session is positioned at its chord."""
        session = await manager.create("sketch", c_major)
        assert session.state == MapState.POSITIONED
        assert session.explored_map.current == "0.4.7:maj:0"
        assert await manager.get("sketch") is session

    @pytest.mark.asyncio
    async def test_create_with_key(self, manager: SessionManager, c_major: Chord) -> None:
        """The key context is kept with the session."""
        key = KeyContext.for_tonic("Eb")
        session = await manager.create("flat", c_major, key)
        assert session.key == key

    @pytest.mark.asyncio
    async def test_duplicate_name(self, manager: SessionManager, c_major: Chord) -> None:
        """Open sessions cannot be replaced."""
        await manager.create("sketch", c_major)
        with pytest.raises(ValueError):
            await manager.create("sketch", c_major)

    @pytest.mark.asyncio
    async def test_sessions_are_isolated(self, manager: SessionManager, c_major: Chord) -> None:
        """Branching in one session leaves the other alone."""
        first = await manager.create("one", c_major)
        second = await manager.create("two", c_major)
        manager.engine.branch(first.explored_map, c_major, {0, 4}, [ChordFormula.MINOR])
        assert len(first.explored_map) == 2
        assert len(second.explored_map) == 1

    @pytest.mark.asyncio
    async def test_end(self, manager: SessionManager, c_major: Chord) -> None:
        """Ending returns the final map and closes the session."""
        session = await manager.create("sketch", c_major)
        snapshot = await manager.end("sketch")
        assert snapshot.state == MapState.ENDED
        assert session.state == MapState.ENDED

        with pytest.raises(SessionEnded):
            manager.engine.move_to(session.explored_map, "0.4.7:maj:0")

    @pytest.mark.asyncio
    async def test_name_reusable_after_end(self, manager: SessionManager, c_major: Chord) -> None:
        """An ended session's name can start a new session."""
        await manager.create("sketch", c_major)
        await manager.end("sketch")
        session = await manager.create("sketch", Chord(Note("A"), ChordFormula.MINOR))
        assert session.state == MapState.POSITIONED
        assert session.explored_map.current == "0.4.9:min:0"

    @pytest.mark.asyncio
    async def test_end_unknown(self, manager: SessionManager) -> None:
        """Ending a missing session fails."""
        with pytest.raises(ValueError):
            await manager.end("missing")

    @pytest.mark.asyncio
    async def test_delete(self, manager: SessionManager, c_major: Chord) -> None:
        """Deleted sessions are gone."""
        await manager.create("sketch", c_major)
        assert await manager.delete("sketch") is True
        assert await manager.get("sketch") is None
        assert await manager.delete("sketch") is False


class TestSessionListing:
    """Tests for listing sessions."""

    @pytest.mark.asyncio
    async def test_list(self, manager: SessionManager, c_major: Chord) -> None:
        """Listing reports state and size."""
        await manager.create("one", c_major)
        await manager.create("two", c_major)
        await manager.end("two")

        listed = {m.name: m for m in await manager.list_sessions()}
        assert set(listed) == {"one", "two"}
        assert listed["one"].state == MapState.POSITIONED
        assert listed["two"].state == MapState.ENDED
        assert listed["one"].node_count == 1
        assert listed["one"].edge_count == 0

    @pytest.mark.asyncio
    async def test_list_empty(self, manager: SessionManager) -> None:
        """No sessions, empty list."""
        assert await manager.list_sessions() == []


class TestYamlExport:
    """Tests for YAML export."""

    @pytest.mark.asyncio
    async def test_export_text(self, manager: SessionManager, c_major: Chord) -> None:
        """The YAML holds nodes, edges, and position."""
        session = await manager.create("sketch", c_major)
        manager.engine.branch(session.explored_map, c_major, {0, 4}, [ChordFormula.MINOR])

        data = yaml.safe_load(await manager.export_yaml("sketch"))
        assert data["state"] == "positioned"
        assert data["current"] == "0.4.7:maj:0"
        assert {n["id"] for n in data["nodes"]} == {"0.4.7:maj:0", "0.4.9:min:0"}
        assert data["edges"][0]["source"] == "0.4.7:maj:0"
        assert data["edges"][0]["pivots"] == [0, 4]

    @pytest.mark.asyncio
    async def test_export_to_file(
        self, manager: SessionManager, c_major: Chord, temp_dir: Path
    ) -> None:
        """Export writes the file when a path is given."""
        await manager.create("sketch", c_major)
        path = temp_dir / "maps" / "sketch.yaml"
        text = await manager.export_yaml("sketch", path)

        assert path.exists()
        assert path.read_text() == text
        assert yaml.safe_load(text)["state"] == "positioned"

    @pytest.mark.asyncio
    async def test_export_ended(self, manager: SessionManager, c_major: Chord) -> None:
        """Ended sessions can still be exported."""
        await manager.create("sketch", c_major)
        await manager.end("sketch")
        data = yaml.safe_load(await manager.export_yaml("sketch"))
        assert data["state"] == "ended"
