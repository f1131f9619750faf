from __future__ import annotations

from collections.abc import Callable
from typing import BinaryIO, Protocol

RawStreamSupplier = Callable[[], BinaryIO | None]


class ResourceEncodingProvider(Protocol):
    """Wraps raw theme resources in a content encoding and caches the result."""

    @property
    def encoding(self) -> str: ...

    def get_encoded_stream(
        self,
        supplier: RawStreamSupplier,
        theme_type: str,
        theme_name: str,
        path_key: str,
    ) -> BinaryIO | None: ...
