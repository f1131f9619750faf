from __future__ import annotations

from enum import Enum
from typing import BinaryIO, Protocol

from babel import Locale


class UnknownThemeTypeError(ValueError):
    pass


class ThemeLoadError(OSError):
    """A theme (or one of its message bundles) could not be read."""


class ThemeType(Enum):
    LOGIN = "login"
    ACCOUNT = "account"
    ADMIN = "admin"
    EMAIL = "email"
    WELCOME = "welcome"
    COMMON = "common"

    @classmethod
    def parse(cls, raw: str) -> ThemeType:
        """Case-insensitive lookup by name (``login``, ``Login``, ``LOGIN``)."""
        try:
            return cls[(raw or "").upper()]
        except KeyError:
            raise UnknownThemeTypeError(f"Unknown theme type: {raw!r}") from None


class Theme(Protocol):
    name: str
    type: ThemeType

    def get_messages(self, locale: Locale | None) -> dict[str, str]: ...

    def get_resource_stream(self, path: str) -> BinaryIO | None: ...


class ThemeProvider(Protocol):
    def get_theme(self, name: str, theme_type: ThemeType) -> Theme: ...

    def is_cache_enabled(self) -> bool: ...
