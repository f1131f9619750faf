from __future__ import annotations

MIGRATIONS: list[tuple[str, str]] = [
    (
        "0001_realms",
        """
PRAGMA foreign_keys = ON;

CREATE TABLE IF NOT EXISTS realms (
    realm_id TEXT PRIMARY KEY,
    name TEXT NOT NULL UNIQUE,
    display_name TEXT,
    created_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now'))
);

CREATE TABLE IF NOT EXISTS realm_localizations (
    realm_id TEXT NOT NULL,
    locale TEXT NOT NULL,
    message_key TEXT NOT NULL,
    message_value TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%fZ', 'now')),
    PRIMARY KEY (realm_id, locale, message_key),
    FOREIGN KEY(realm_id) REFERENCES realms(realm_id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_realm_localizations_locale
    ON realm_localizations(realm_id, locale);
""".strip(),
    ),
]
