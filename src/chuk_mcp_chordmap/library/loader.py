"""
Theory library - loads chord qualities, scales, and graph settings from YAML.

Definitions can come from:
1. Built-in defaults (compiled into the core tables)
2. Library files (shipped with the package)
3. Project files (user's project directory)

Later sources override earlier ones entry by entry, so a project can
redefine a single quality without restating the rest. Invalid entries are
logged and skipped, like unreadable files.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml

from chuk_mcp_chordmap.core.chord import ChordFormula, ChordQualityTable, formula_from_entry
from chuk_mcp_chordmap.core.scale import ScaleFormula, ScaleTable
from chuk_mcp_chordmap.errors import InvalidFormula
from chuk_mcp_chordmap.graph import ChordGraphEngine
from chuk_mcp_chordmap.models.config import GraphConfig

logger = logging.getLogger(__name__)

CHORDS_FILE = "chords.yaml"
SCALES_FILE = "scales.yaml"
GRAPH_FILE = "graph.yaml"


class TheoryLibrary:
    """
    Discovers and loads theory tables.

    Tables are built once and cached; call clear_cache() after editing
    the YAML files.
    """

    def __init__(
        self,
        library_path: Path | None = None,
        project_path: Path | None = None,
    ):
        """
        Initialize the library.

        Args:
            library_path: Path to the built-in YAML library
            project_path: Path to project overrides
        """
        self.library_path = library_path or (Path(__file__).parent / "builtin")
        self.project_path = project_path
        self._qualities: ChordQualityTable | None = None
        self._scales: ScaleTable | None = None
        self._config: GraphConfig | None = None

    def sources(self) -> list[Path]:
        """Existing directories consulted, lowest precedence first."""
        paths = [self.library_path]
        if self.project_path:
            paths.append(self.project_path)
        return [p for p in paths if p.exists()]

    def qualities(self) -> ChordQualityTable:
        """The chord quality table with all overrides applied."""
        if self._qualities is None:
            table = ChordQualityTable()
            for data in self._load_all(CHORDS_FILE):
                for name, entry in (data.get("qualities") or {}).items():
                    try:
                        table.add(self._parse_quality(str(name), entry))
                    except (ValueError, KeyError, TypeError):
                        logger.warning("Skipping invalid quality %r", name, exc_info=True)
                for alias, target in (data.get("aliases") or {}).items():
                    table.alias(str(alias), str(target))
            self._qualities = table
        return self._qualities

    def scales(self) -> ScaleTable:
        """The scale table with all overrides applied."""
        if self._scales is None:
            table = ScaleTable()
            for data in self._load_all(SCALES_FILE):
                for name, entry in (data.get("scales") or {}).items():
                    try:
                        table.add(self._parse_scale(str(name), entry))
                    except (ValueError, KeyError, TypeError):
                        logger.warning("Skipping invalid scale %r", name, exc_info=True)
                for alias, target in (data.get("aliases") or {}).items():
                    table.alias(str(alias), str(target))
            self._scales = table
        return self._scales

    def graph_config(self) -> GraphConfig:
        """Graph settings; later files override individual keys."""
        if self._config is None:
            merged: dict[str, Any] = {}
            for data in self._load_all(GRAPH_FILE):
                weights = {**merged.get("weights", {}), **(data.get("weights") or {})}
                merged.update(data)
                if weights:
                    merged["weights"] = weights
            self._config = GraphConfig.model_validate(merged)
        return self._config

    def engine(self) -> ChordGraphEngine:
        """A graph engine configured from this library."""
        return ChordGraphEngine(self.graph_config(), self.qualities())

    def clear_cache(self) -> None:
        """Forget loaded tables."""
        self._qualities = None
        self._scales = None
        self._config = None

    def _load_all(self, filename: str) -> list[dict[str, Any]]:
        """Load one file name from every source, lowest precedence first."""
        result = []
        for directory in self.sources():
            path = directory / filename
            if not path.exists():
                continue
            data = self._load_file(path)
            if data:
                logger.debug("Loaded %s", path)
                result.append(data)
        return result

    def _load_file(self, path: Path) -> dict[str, Any] | None:
        """Load a YAML mapping, skipping unreadable files."""
        try:
            with open(path) as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError):
            logger.warning("Skipping unreadable theory file %s", path, exc_info=True)
            return None

        if data is None:
            return None
        if not isinstance(data, dict):
            logger.warning("Skipping %s: expected a mapping at the top level", path)
            return None
        return data

    def _parse_quality(self, name: str, entry: Any) -> ChordFormula:
        """Parse a quality from YAML data (a list of offsets or a mapping)."""
        if not isinstance(entry, (list, dict)):
            raise InvalidFormula(f"Quality '{name}' must be a list of offsets or a mapping")
        return formula_from_entry(name, entry)

    def _parse_scale(self, name: str, entry: Any) -> ScaleFormula:
        """Parse a scale from YAML data: offsets, steps, or a bare offset list."""
        if isinstance(entry, list):
            return ScaleFormula(name, tuple(entry))
        if not isinstance(entry, dict):
            raise InvalidFormula(f"Scale '{name}' must be a list of offsets or a mapping")

        modes = tuple(entry.get("modes", ()))
        if "steps" in entry:
            return ScaleFormula.from_steps(name, tuple(entry["steps"]), modes)
        if "offsets" in entry:
            return ScaleFormula(name, tuple(entry["offsets"]), modes)
        raise InvalidFormula(f"Scale '{name}' needs offsets or steps")
