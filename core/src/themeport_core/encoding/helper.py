from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from pathlib import Path

from themeport_core.config import EncodingConfig
from themeport_core.encoding.gzip_provider import GzipResourceEncodingProvider
from themeport_core.encoding.models import ResourceEncodingProvider

logger = logging.getLogger(__name__)


def _base_content_type(content_type: str) -> str:
    return (content_type or "").split(";", 1)[0].strip().lower()


def parse_accept_encoding(header: str | None) -> set[str]:
    """Codings the client accepts (``q=0`` entries excluded)."""

    accepted: set[str] = set()
    for part in (header or "").split(","):
        coding, _, params = part.strip().partition(";")
        coding = coding.strip().lower()
        if not coding:
            continue
        q = params.strip().lower()
        if q.startswith("q="):
            try:
                if float(q[2:]) <= 0:
                    continue
            except ValueError:
                continue
        accepted.add(coding)
    return accepted


class ResourceEncodingSelector:
    """Picks the encoding provider for a resource response, if any."""

    def __init__(
        self,
        providers: Mapping[str, ResourceEncodingProvider],
        content_types: Iterable[str],
    ) -> None:
        # Insertion order is the server's preference order.
        self._providers = dict(providers)
        self._content_types = {_base_content_type(t) for t in content_types}

    @property
    def providers(self) -> dict[str, ResourceEncodingProvider]:
        return dict(self._providers)

    def select_provider_for(
        self, content_type: str, accept_encoding: str | None = None
    ) -> ResourceEncodingProvider | None:
        if _base_content_type(content_type) not in self._content_types:
            return None

        accepted = parse_accept_encoding(accept_encoding)
        if not accepted:
            return None

        for name, provider in self._providers.items():
            if name in accepted or "*" in accepted:
                return provider
        return None


def build_encoding_selector(config: EncodingConfig, cache_dir: Path) -> ResourceEncodingSelector:
    providers: dict[str, ResourceEncodingProvider] = {}
    for name in config.enabled_encodings:
        key = name.strip().lower()
        if key == GzipResourceEncodingProvider.encoding:
            providers[key] = GzipResourceEncodingProvider(cache_dir / "encoded" / key)
        else:
            logger.warning("Ignoring unsupported resource encoding %r", name)
    return ResourceEncodingSelector(providers, config.content_types)
