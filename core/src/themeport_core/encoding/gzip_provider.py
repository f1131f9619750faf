from __future__ import annotations

import gzip
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import BinaryIO

from themeport_core.encoding.models import RawStreamSupplier

logger = logging.getLogger(__name__)


class GzipResourceEncodingProvider:
    """gzip-encodes theme resources once and serves later requests from disk.

    Cache layout: ``<cache_dir>/<theme_type>/<theme_name>/<path_key>.gz``.
    Entries are written to a temp file and renamed into place, so concurrent
    requests for the same resource never observe a partial file.
    """

    encoding = "gzip"

    def __init__(self, cache_dir: Path, *, compresslevel: int = 9) -> None:
        self._cache_dir = cache_dir
        self._compresslevel = compresslevel

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def clear(self) -> None:
        """Drop all cached entries (run at startup; assets may have changed since)."""
        shutil.rmtree(self._cache_dir, ignore_errors=True)
        self._cache_dir.mkdir(parents=True, exist_ok=True)

    def cache_path(self, theme_type: str, theme_name: str, path_key: str) -> Path | None:
        """Cache file for a resource, or None when the key leaves its theme's cache dir."""
        root = self._cache_dir.resolve()
        theme_root = (root / theme_type.lower() / theme_name).resolve()
        if theme_root == root or not theme_root.is_relative_to(root):
            return None
        candidate = (theme_root / f"{path_key}.gz").resolve()
        if not candidate.is_relative_to(theme_root):
            return None
        return candidate

    def get_encoded_stream(
        self,
        supplier: RawStreamSupplier,
        theme_type: str,
        theme_name: str,
        path_key: str,
    ) -> BinaryIO | None:
        target = self.cache_path(theme_type, theme_name, path_key)
        if target is None:
            logger.warning(
                "Refusing to cache resource outside the encoding cache: %s/%s/%s",
                theme_type,
                theme_name,
                path_key,
            )
            return None

        if target.is_file():
            return target.open("rb")

        raw = supplier()
        if raw is None:
            return None

        try:
            self._write_encoded(raw, target)
        finally:
            raw.close()

        return target.open("rb")

    def _write_encoded(self, raw: BinaryIO, target: Path) -> None:
        target.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_name = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".tmp")
        temp_path = Path(temp_name)
        try:
            with os.fdopen(fd, "wb") as out:
                with gzip.GzipFile(
                    fileobj=out, mode="wb", compresslevel=self._compresslevel, mtime=0
                ) as gz:
                    shutil.copyfileobj(raw, gz, length=1024 * 1024)
            # Best-effort atomic move; a concurrent writer produced identical bytes.
            temp_path.replace(target)
        except BaseException:
            temp_path.unlink(missing_ok=True)
            raise

        logger.debug("Cached gzip-encoded resource %s", target)
