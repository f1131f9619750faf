from __future__ import annotations

import os
import sys
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ThemePortPaths:
    home: Path
    themes_dir: Path
    db_dir: Path
    cache_dir: Path
    logs_dir: Path
    config_dir: Path

    @property
    def core_config_path(self) -> Path:
        return self.config_dir / "core.json"


def resolve_themeport_home(environ: dict[str, str] | None = None) -> Path:
    env = os.environ if environ is None else environ

    raw = (env.get("THEMEPORT_HOME") or "").strip()
    if raw:
        candidate = Path(raw).expanduser()
        # Never interpret THEMEPORT_HOME relative to CWD.
        if not candidate.is_absolute():
            candidate = (Path.home() / candidate).resolve()
        else:
            candidate = candidate.resolve()
        return candidate

    def default_home() -> Path:
        if sys.platform.startswith("win"):
            base = os.environ.get("LOCALAPPDATA") or os.environ.get("APPDATA")
            if base:
                return Path(base) / "ThemePort"
            return Path.home() / "AppData" / "Local" / "ThemePort"

        if sys.platform == "darwin":
            return Path.home() / "Library" / "Application Support" / "ThemePort"

        xdg = os.environ.get("XDG_DATA_HOME")
        if xdg:
            return Path(xdg) / "themeport"
        return Path.home() / ".local" / "share" / "themeport"

    return default_home().resolve()


def ensure_themeport_layout(home: Path) -> ThemePortPaths:
    home.mkdir(parents=True, exist_ok=True)

    themes_dir = home / "themes"
    db_dir = home / "db"
    cache_dir = home / "cache"
    logs_dir = home / "logs"
    config_dir = home / "config"

    for path in (themes_dir, db_dir, cache_dir, logs_dir, config_dir):
        path.mkdir(parents=True, exist_ok=True)

    return ThemePortPaths(
        home=home,
        themes_dir=themes_dir,
        db_dir=db_dir,
        cache_dir=cache_dir,
        logs_dir=logs_dir,
        config_dir=config_dir,
    )
