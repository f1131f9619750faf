from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from themeport_core.config import ThemeConfig
from themeport_core.encoding.helper import ResourceEncodingSelector
from themeport_core.themes.models import ThemeProvider


class RealmLocalizations(Protocol):
    def get_localization_overrides(self, locale_tag: str) -> dict[str, str]: ...


class RealmProvider(Protocol):
    def get_realm_by_name(self, name: str) -> RealmLocalizations | None: ...


@dataclass(frozen=True)
class ThemeSession:
    """Everything one resource or localization request may touch.

    Built per request by the API layer; the operations in
    ``themeport_core.resources`` take it explicitly and never look at app state.
    """

    themes: ThemeProvider
    realms: RealmProvider
    encoding: ResourceEncodingSelector
    theme_config: ThemeConfig
    accept_encoding: str | None = None
