from __future__ import annotations

from themeport_core.themes.filesystem import FilesystemTheme, FilesystemThemeProvider
from themeport_core.themes.models import (
    Theme,
    ThemeLoadError,
    ThemeProvider,
    ThemeType,
    UnknownThemeTypeError,
)

__all__ = [
    "FilesystemTheme",
    "FilesystemThemeProvider",
    "Theme",
    "ThemeLoadError",
    "ThemeProvider",
    "ThemeType",
    "UnknownThemeTypeError",
]
