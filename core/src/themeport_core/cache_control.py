from __future__ import annotations

from themeport_core.config import ThemeConfig

NO_CACHE = "no-cache"


def default_cache_control(theme_config: ThemeConfig) -> str:
    """Cache-Control for versioned theme resources.

    The URL carries the resource version, so a cached copy can never go stale
    while caching is on.
    """

    if not theme_config.cache_themes:
        return NO_CACHE
    return f"public, max-age={theme_config.static_max_age}"
