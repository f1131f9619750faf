from __future__ import annotations

from themeport_core.encoding.gzip_provider import GzipResourceEncodingProvider
from themeport_core.encoding.helper import (
    ResourceEncodingSelector,
    build_encoding_selector,
    parse_accept_encoding,
)
from themeport_core.encoding.models import RawStreamSupplier, ResourceEncodingProvider

__all__ = [
    "GzipResourceEncodingProvider",
    "RawStreamSupplier",
    "ResourceEncodingProvider",
    "ResourceEncodingSelector",
    "build_encoding_selector",
    "parse_accept_encoding",
]
