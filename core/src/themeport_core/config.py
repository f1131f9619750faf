from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from themeport_core.home import ThemePortPaths

DEFAULT_ENCODED_CONTENT_TYPES: tuple[str, ...] = (
    "text/css",
    "text/html",
    "text/plain",
    "text/javascript",
    "application/javascript",
    "application/json",
    "image/svg+xml",
)


class NetworkConfig(BaseModel):
    bind_host: str = Field(default="127.0.0.1")
    port: int = Field(default=8788, ge=1, le=65535)


class PathOverrides(BaseModel):
    themes_dir: str | None = None
    db_dir: str | None = None
    cache_dir: str | None = None
    logs_dir: str | None = None


class LoggingConfig(BaseModel):
    max_size_mb: int = Field(
        default=10, ge=1, description="Max size of a log file in MB before rolling."
    )
    backup_count: int = Field(default=5, ge=1, description="Number of log archives to keep.")
    level: str = Field(default="INFO")


class ThemeConfig(BaseModel):
    """Theme lookup and static asset caching.

    With ``cache_themes`` off every request re-reads theme descriptors from disk,
    assets are served with ``Cache-Control: no-cache`` and content encoding is
    skipped, which is what theme developers want while editing files.
    """

    cache_themes: bool = Field(default=True)
    static_max_age: int = Field(
        default=2592000,
        ge=0,
        description="max-age (seconds) for versioned theme resources when caching is on.",
    )


class EncodingConfig(BaseModel):
    enabled_encodings: list[str] = Field(
        default_factory=lambda: ["gzip"],
        description="Encodings offered to clients, in server preference order.",
    )
    content_types: list[str] = Field(
        default_factory=lambda: list(DEFAULT_ENCODED_CONTENT_TYPES),
        description="Content types eligible for encoding; everything else is served raw.",
    )


class CoreConfig(BaseModel):
    version: str = Field(default="1")
    network: NetworkConfig = Field(default_factory=NetworkConfig)
    paths: PathOverrides = Field(default_factory=PathOverrides)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    theme: ThemeConfig = Field(default_factory=ThemeConfig)
    encoding: EncodingConfig = Field(default_factory=EncodingConfig)


def _read_json(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        return json.load(f)


def load_core_config(paths: ThemePortPaths) -> CoreConfig:
    """Load config from ${THEMEPORT_HOME}/config/core.json.

    - If missing: returns defaults.
    - Validation is performed by Pydantic.
    """

    config_path = paths.core_config_path
    if not config_path.exists():
        return CoreConfig()

    raw = _read_json(config_path)
    return CoreConfig.model_validate(raw)


def resolve_configured_paths(paths: ThemePortPaths, config: CoreConfig) -> ThemePortPaths:
    """Apply user-configurable path overrides from config.

    config/ always stays under THEMEPORT_HOME.
    """

    def _resolve_dir(raw: str | None, default: Path) -> Path:
        if raw is None or not str(raw).strip():
            return default
        candidate = Path(raw).expanduser()
        if not candidate.is_absolute():
            candidate = (paths.home / candidate).resolve()
        else:
            candidate = candidate.resolve()
        return candidate

    themes_dir = _resolve_dir(config.paths.themes_dir, paths.themes_dir)
    db_dir = _resolve_dir(config.paths.db_dir, paths.db_dir)
    cache_dir = _resolve_dir(config.paths.cache_dir, paths.cache_dir)
    logs_dir = _resolve_dir(config.paths.logs_dir, paths.logs_dir)

    # Ensure overridden dirs exist so file edits are enough.
    for p in (themes_dir, db_dir, cache_dir, logs_dir):
        p.mkdir(parents=True, exist_ok=True)

    return ThemePortPaths(
        home=paths.home,
        themes_dir=themes_dir,
        db_dir=db_dir,
        cache_dir=cache_dir,
        logs_dir=logs_dir,
        config_dir=paths.config_dir,
    )
