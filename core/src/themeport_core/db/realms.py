from __future__ import annotations

import sqlite3
import uuid
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from themeport_core.locales import parse_language_tag, to_language_tag


class RealmNotFoundError(LookupError):
    pass


def _utc_now_sqlite_iso() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _connect(db_path: Path) -> sqlite3.Connection:
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    return conn


def normalize_locale_tag(tag: str) -> str:
    """Canonical storage form of a locale tag (``en_us`` -> ``en-US``)."""

    locale = parse_language_tag(tag)
    if locale is None:
        raise ValueError(f"Unrecognized locale tag: {tag!r}")
    return to_language_tag(locale)


@dataclass(frozen=True)
class Realm:
    realm_id: str
    name: str
    display_name: str | None
    db_path: Path

    def get_localization_overrides(self, locale_tag: str) -> dict[str, str]:
        with _connect(self.db_path) as conn:
            rows = conn.execute(
                """
                SELECT message_key, message_value
                FROM realm_localizations
                WHERE realm_id = ? AND locale = ?;
                """.strip(),
                (self.realm_id, locale_tag),
            ).fetchall()
        return {row["message_key"]: row["message_value"] for row in rows}


class SqliteRealmProvider:
    """Read-only realm lookup over the core SQLite database."""

    def __init__(self, db_path: Path) -> None:
        self._db_path = db_path

    def get_realm_by_name(self, name: str) -> Realm | None:
        with _connect(self._db_path) as conn:
            row = conn.execute(
                "SELECT realm_id, name, display_name FROM realms WHERE name = ?;",
                (name,),
            ).fetchone()
        if row is None:
            return None
        return Realm(
            realm_id=row["realm_id"],
            name=row["name"],
            display_name=row["display_name"],
            db_path=self._db_path,
        )


def create_realm(db_path: Path, *, name: str, display_name: str | None = None) -> Realm:
    name = (name or "").strip()
    if not name:
        raise ValueError("Realm name must not be empty")

    realm_id = uuid.uuid4().hex
    with _connect(db_path) as conn:
        conn.execute(
            "INSERT INTO realms (realm_id, name, display_name) VALUES (?, ?, ?);",
            (realm_id, name, display_name),
        )
    return Realm(realm_id=realm_id, name=name, display_name=display_name, db_path=db_path)


def get_or_create_realm(db_path: Path, *, name: str, display_name: str | None = None) -> Realm:
    existing = SqliteRealmProvider(db_path).get_realm_by_name(name)
    if existing is not None:
        return existing
    return create_realm(db_path, name=name, display_name=display_name)


def set_localization_text(
    db_path: Path, *, realm: Realm, locale: str, key: str, value: str
) -> None:
    import_realm_localizations(db_path, realm=realm, localizations={locale: {key: value}})


def import_realm_localizations(
    db_path: Path, *, realm: Realm, localizations: Mapping[str, Mapping[str, str]]
) -> int:
    """Upsert override texts for a realm; returns the number of rows written."""

    now = _utc_now_sqlite_iso()
    rows: list[tuple[str, str, str, str, str]] = []
    for tag, texts in localizations.items():
        locale = normalize_locale_tag(tag)
        for key, value in texts.items():
            rows.append((realm.realm_id, locale, str(key), str(value), now))

    with _connect(db_path) as conn:
        conn.executemany(
            """
            INSERT INTO realm_localizations (realm_id, locale, message_key, message_value, updated_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(realm_id, locale, message_key) DO UPDATE SET
                message_value = excluded.message_value,
                updated_at = excluded.updated_at;
            """.strip(),
            rows,
        )
        conn.execute(
            "UPDATE realms SET updated_at = ? WHERE realm_id = ?;",
            (now, realm.realm_id),
        )
    return len(rows)
