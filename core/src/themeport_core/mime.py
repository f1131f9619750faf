from __future__ import annotations

import mimetypes

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# Theme assets the platform tables do not always know about.
_EXTRA_TYPES: dict[str, str] = {
    ".woff": "font/woff",
    ".woff2": "font/woff2",
    ".ttf": "font/ttf",
    ".otf": "font/otf",
    ".eot": "application/vnd.ms-fontobject",
    ".svg": "image/svg+xml",
    ".webp": "image/webp",
    ".ico": "image/x-icon",
    ".map": "application/json",
    ".mjs": "text/javascript",
}

_types = mimetypes.MimeTypes()
for _ext, _type in _EXTRA_TYPES.items():
    _types.add_type(_type, _ext)

# guess_type() reports "x.css.gz" as text/css with a gzip encoding; the
# resource itself is the compressed file, so type it by its final extension.
_ENCODING_TYPES: dict[str, str] = {
    "gzip": "application/gzip",
    "bzip2": "application/x-bzip2",
    "xz": "application/x-xz",
    "compress": "application/x-compress",
}


def content_type_of(path: str) -> str:
    """Guess a resource's content type from its file extension."""
    guess, encoding = _types.guess_type(path, strict=False)
    if encoding is not None:
        return _ENCODING_TYPES.get(encoding, DEFAULT_CONTENT_TYPE)
    return guess or DEFAULT_CONTENT_TYPE
