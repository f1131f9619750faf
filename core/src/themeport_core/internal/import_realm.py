from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any

from themeport_core.config import load_core_config, resolve_configured_paths
from themeport_core.db import resolve_db_path
from themeport_core.db.migrate import apply_migrations
from themeport_core.db.realms import get_or_create_realm, import_realm_localizations
from themeport_core.home import ensure_themeport_layout, resolve_themeport_home


def _read_realm_file(path: Path) -> dict[str, Any]:
    with path.open("r", encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict) or not str(data.get("name") or "").strip():
        raise ValueError(f"{path}: expected a JSON object with a non-empty 'name'")
    localizations = data.get("localizations") or {}
    if not isinstance(localizations, dict) or not all(
        isinstance(v, dict) for v in localizations.values()
    ):
        raise ValueError(f"{path}: 'localizations' must map locale tags to objects")
    return data


def import_realm_file(db_path: Path, path: Path) -> tuple[str, int]:
    """Create the realm if needed and upsert its localization overrides."""

    data = _read_realm_file(path)
    realm = get_or_create_realm(
        db_path, name=str(data["name"]).strip(), display_name=data.get("display_name")
    )
    written = import_realm_localizations(
        db_path, realm=realm, localizations=data.get("localizations") or {}
    )
    return realm.name, written


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="python -m themeport_core.internal.import_realm",
        description="ThemePort Core internal realm importer (no API).",
    )
    parser.add_argument("--home", type=Path, default=None, help="Override THEMEPORT_HOME")
    parser.add_argument("--migrate", action="store_true", help="Apply migrations")
    parser.add_argument(
        "--import",
        dest="import_paths",
        metavar="PATH",
        type=Path,
        action="append",
        default=[],
        help="Realm JSON file to import (repeatable)",
    )
    args = parser.parse_args(argv)

    environ = None
    if args.home is not None:
        environ = {"THEMEPORT_HOME": str(args.home)}

    home = resolve_themeport_home(environ)
    paths = ensure_themeport_layout(home)
    config = load_core_config(paths)
    paths = resolve_configured_paths(paths, config)

    db_path = resolve_db_path(paths)

    if args.migrate or args.import_paths:
        apply_migrations(db_path)

    for path in args.import_paths:
        name, written = import_realm_file(db_path, path)
        print(json.dumps({"realm": name, "localizations_written": written}, ensure_ascii=False))

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
