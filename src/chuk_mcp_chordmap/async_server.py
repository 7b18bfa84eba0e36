#!/usr/bin/env python3
"""
Async Chord Map MCP Server using chuk-mcp-server

This server provides MCP tools for exploring chord space. Starting from
one chord, the user picks pivot notes, the server ranks the chords that
share them, and the explored map grows one branch at a time.

The server provides tools for:
- Building and inspecting chords, inversions, scales, and modes
- Starting exploration sessions at a chord
- Branching through pivot notes with explainable scores
- Moving, backtracking, and pruning the explored map
- Exporting the map as JSON or YAML
"""

import logging
import os
from pathlib import Path

from chuk_mcp_server import ChukMCPServer

from chuk_mcp_chordmap.library import TheoryLibrary
from chuk_mcp_chordmap.session import SessionManager
from chuk_mcp_chordmap.tools import register_explore_tools, register_theory_tools

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Create the MCP server instance
mcp = ChukMCPServer("chuk-mcp-chordmap")

# Paths - project overrides live beside the working directory unless configured
BASE_PATH = Path.cwd()
CONFIG_DIR = Path(os.environ.get("CHORDMAP_CONFIG_DIR", BASE_PATH / "chordmap"))
LIBRARY_PATH = Path(__file__).parent / "library" / "builtin"

# Create managers
library = TheoryLibrary(
    library_path=LIBRARY_PATH,
    project_path=CONFIG_DIR,
)
session_manager = SessionManager(library.engine())

# Register all tools
theory_tools = register_theory_tools(mcp, library)
explore_tools = register_explore_tools(mcp, session_manager, library)

# Export tool functions for direct access
chord_build = theory_tools["chord_build"]
chord_invert = theory_tools["chord_invert"]
chord_describe = theory_tools["chord_describe"]
scale_build = theory_tools["scale_build"]
scale_mode = theory_tools["scale_mode"]
scale_diatonic_chords = theory_tools["scale_diatonic_chords"]
list_qualities = theory_tools["list_qualities"]
list_scales = theory_tools["list_scales"]

explore_start = explore_tools["explore_start"]
explore_pivots = explore_tools["explore_pivots"]
explore_branch = explore_tools["explore_branch"]
explore_move = explore_tools["explore_move"]
explore_back = explore_tools["explore_back"]
explore_remove = explore_tools["explore_remove"]
explore_snapshot = explore_tools["explore_snapshot"]
explore_export_yaml = explore_tools["explore_export_yaml"]
explore_list = explore_tools["explore_list"]
explore_end = explore_tools["explore_end"]

logger.info("CHUK Chord Map MCP Server initialized")
logger.info(f"  Library path: {LIBRARY_PATH}")
logger.info(f"  Config dir: {CONFIG_DIR}")
