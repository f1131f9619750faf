from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Any, BinaryIO

import yaml
from babel import Locale

from themeport_core.themes.models import ThemeLoadError, ThemeType, UnknownThemeTypeError

logger = logging.getLogger(__name__)

DESCRIPTOR_FILENAME = "theme.json"
MESSAGES_DIRNAME = "messages"
RESOURCES_DIRNAME = "resources"
MESSAGE_BUNDLE_SUFFIXES: tuple[str, ...] = (".yaml", ".yml", ".json")


def _flatten(data: dict[str, Any], prefix: str = "") -> dict[str, str]:
    """Flatten a nested dict into dot-separated keys with string values."""
    items: dict[str, str] = {}
    for key, value in data.items():
        full_key = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(value, dict):
            items.update(_flatten(value, full_key))
        elif value is None:
            items[full_key] = ""
        else:
            items[full_key] = str(value)
    return items


def _bundle_basenames(locale: Locale | None) -> list[str]:
    """Bundle file stems, most general first: messages, messages_en, messages_en_US."""
    names = ["messages"]
    if locale is None:
        return names

    names.append(f"messages_{locale.language}")
    if locale.script:
        names.append(f"messages_{locale.language}_{locale.script}")
    full = f"messages_{locale}"
    if full not in names:
        names.append(full)
    return names


class FilesystemTheme:
    """A theme directory under ``<themes_dir>/<type>/<name>``.

    Layout::

        theme.json                   optional: {"parent": "...", "import": "common/..."}
        messages/messages.yaml       locale-less defaults
        messages/messages_de.yaml    per-language (".yml" and ".json" also accepted)
        resources/...                static assets

    Messages and resources not found here are looked up in the imported theme
    and then along the parent chain.
    """

    def __init__(
        self,
        *,
        name: str,
        theme_type: ThemeType,
        base_dir: Path,
        parent: FilesystemTheme | None = None,
        imported: FilesystemTheme | None = None,
    ) -> None:
        self.name = name
        self.type = theme_type
        self._base_dir = base_dir
        self._parent = parent
        self._imported = imported

    @property
    def resources_dir(self) -> Path:
        return self._base_dir / RESOURCES_DIRNAME

    def get_messages(self, locale: Locale | None) -> dict[str, str]:
        messages: dict[str, str] = {}
        if self._parent is not None:
            messages.update(self._parent.get_messages(locale))
        if self._imported is not None:
            messages.update(self._imported.get_messages(locale))
        for basename in _bundle_basenames(locale):
            messages.update(self._load_bundle(basename))
        return messages

    def _load_bundle(self, basename: str) -> dict[str, str]:
        messages_dir = self._base_dir / MESSAGES_DIRNAME
        for suffix in MESSAGE_BUNDLE_SUFFIXES:
            path = messages_dir / f"{basename}{suffix}"
            if not path.is_file():
                continue
            try:
                with path.open(encoding="utf-8") as fh:
                    if suffix == ".json":
                        data = json.load(fh)
                    else:
                        # BaseLoader keeps every scalar a string (no yes -> True).
                        data = yaml.load(fh, Loader=yaml.BaseLoader)
            except (OSError, UnicodeDecodeError, json.JSONDecodeError, yaml.YAMLError) as e:
                raise ThemeLoadError(f"Failed to read message bundle {path}: {e}") from e

            if data is None:
                return {}
            if not isinstance(data, dict):
                raise ThemeLoadError(f"Message bundle {path} must contain a mapping")
            return _flatten(data)
        return {}

    def get_resource_stream(self, path: str) -> BinaryIO | None:
        resource = self._resolve_resource(path)
        if resource is not None:
            return resource.open("rb")

        if self._imported is not None:
            stream = self._imported.get_resource_stream(path)
            if stream is not None:
                return stream
        if self._parent is not None:
            return self._parent.get_resource_stream(path)
        return None

    def _resolve_resource(self, path: str) -> Path | None:
        root = self.resources_dir.resolve()
        relative = (path or "").lstrip("/")
        if not relative:
            return None

        candidate = (root / relative).resolve()
        # Reject anything that escapes the resources dir (.., symlinks out).
        if not candidate.is_relative_to(root):
            return None
        if not candidate.is_file():
            return None
        return candidate


class FilesystemThemeProvider:
    """Resolves themes from ``<themes_dir>/<type>/<name>`` directories.

    With ``cache_enabled`` resolved themes (including their parent chain) are
    kept for the life of the provider.
    """

    def __init__(self, themes_dir: Path, *, cache_enabled: bool = True) -> None:
        self._themes_dir = themes_dir
        self._cache_enabled = cache_enabled
        self._cache: dict[tuple[ThemeType, str], FilesystemTheme] = {}
        self._lock = threading.Lock()

    def is_cache_enabled(self) -> bool:
        return self._cache_enabled

    def get_theme(self, name: str, theme_type: ThemeType) -> FilesystemTheme:
        if not self._cache_enabled:
            return self._load(name, theme_type, seen=())

        key = (theme_type, name)
        with self._lock:
            cached = self._cache.get(key)
        if cached is not None:
            return cached

        theme = self._load(name, theme_type, seen=())
        with self._lock:
            # Another request may have loaded it meanwhile; keep the first.
            return self._cache.setdefault(key, theme)

    def _theme_dir(self, name: str, theme_type: ThemeType) -> Path:
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            raise ThemeLoadError(f"Invalid theme name: {name!r}")
        return self._themes_dir / theme_type.value / name

    def _load(
        self, name: str, theme_type: ThemeType, *, seen: tuple[tuple[ThemeType, str], ...]
    ) -> FilesystemTheme:
        key = (theme_type, name)
        if key in seen:
            chain = " -> ".join(f"{t.value}/{n}" for t, n in (*seen, key))
            raise ThemeLoadError(f"Cyclic theme inheritance: {chain}")

        base_dir = self._theme_dir(name, theme_type)
        if not base_dir.is_dir():
            raise ThemeLoadError(f"Theme not found: {theme_type.value}/{name}")

        descriptor = self._read_descriptor(base_dir)
        seen = (*seen, key)

        parent: FilesystemTheme | None = None
        parent_name = (descriptor.get("parent") or "").strip()
        if parent_name:
            parent = self._load(parent_name, theme_type, seen=seen)

        imported: FilesystemTheme | None = None
        import_ref = (descriptor.get("import") or "").strip()
        if import_ref:
            import_type, import_name = self._parse_import(import_ref, base_dir)
            imported = self._load(import_name, import_type, seen=seen)

        logger.debug("Loaded theme %s/%s from %s", theme_type.value, name, base_dir)
        return FilesystemTheme(
            name=name,
            theme_type=theme_type,
            base_dir=base_dir,
            parent=parent,
            imported=imported,
        )

    @staticmethod
    def _read_descriptor(base_dir: Path) -> dict[str, Any]:
        path = base_dir / DESCRIPTOR_FILENAME
        if not path.is_file():
            return {}
        try:
            with path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            raise ThemeLoadError(f"Failed to read theme descriptor {path}: {e}") from e
        if not isinstance(data, dict):
            raise ThemeLoadError(f"Theme descriptor {path} must be a JSON object")
        return data

    @staticmethod
    def _parse_import(raw: str, base_dir: Path) -> tuple[ThemeType, str]:
        type_s, sep, name = raw.partition("/")
        if not sep or not name:
            raise ThemeLoadError(f"Invalid import {raw!r} in {base_dir}; expected '<type>/<name>'")
        try:
            return ThemeType.parse(type_s), name
        except UnknownThemeTypeError as e:
            raise ThemeLoadError(f"Invalid import {raw!r} in {base_dir}: {e}") from e
