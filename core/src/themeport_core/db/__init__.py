from __future__ import annotations

from pathlib import Path

from themeport_core.home import ThemePortPaths

DEFAULT_DB_FILENAME = "core.sqlite3"


def resolve_db_path(paths: ThemePortPaths) -> Path:
    """Resolve the realm store SQLite database path (under the `db_dir` layout/override)."""

    return paths.db_dir / DEFAULT_DB_FILENAME
