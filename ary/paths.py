"""Centralized path constants for the project.

Packaged data (conversation graph, profile catalog) ships inside the
``ary`` package; exported sessions are written under the project root.
"""

from __future__ import annotations

from pathlib import Path

PACKAGE_DIR: Path = Path(__file__).resolve().parent
PROJECT_ROOT: Path = PACKAGE_DIR.parent
DATA_DIR: Path = PACKAGE_DIR / "data"
GRAPH_PATH: Path = DATA_DIR / "conversation_graph.json"
PROFILES_PATH: Path = DATA_DIR / "competence_profiles.json"
SESSIONS_DIR: Path = PROJECT_ROOT / "data" / "sessions"
