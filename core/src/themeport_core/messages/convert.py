"""Translate MessageFormat-style templates for the console's client-side templating.

Theme bundles are written for server-side rendering, where ``''`` prints a
single quote and ``{0}`` is a positional argument. The console renders the
same strings with ngx-translate style interpolation, so values are rewritten::

    Don''t forget {0} and { 1 }   ->   Don't forget {{param_0}} and {{param_1}}

Quote-delimited escaping is deliberately *not* honoured: ``'{0}'`` becomes
``{{param_0}}``. Consumers rely on this, so keep it.

The rewrite is one-way; converting an already converted value is not a no-op
in general.
"""

from __future__ import annotations

import json
import re
from collections.abc import Mapping

_QUOTE_RE = re.compile(r"'('?)")
_PLACEHOLDER_RE = re.compile(r"\{\s*(\d+)\s*\}", re.ASCII)


def _named_placeholder(match: re.Match[str]) -> str:
    return "{{param_" + match.group(1) + "}}"


def convert_message_value(raw: str) -> str:
    # '' -> ' and a lone ' is dropped.
    value = _QUOTE_RE.sub(r"\1", raw)
    return _PLACEHOLDER_RE.sub(_named_placeholder, value)


def convert_messages(messages: Mapping[str, str]) -> dict[str, str]:
    return {key: convert_message_value(value) for key, value in messages.items()}


def merge_messages(
    theme_messages: Mapping[str, str] | None, overrides: Mapping[str, str] | None
) -> dict[str, str]:
    """Theme defaults overlaid with realm overrides; an override replaces the whole value."""

    merged = dict(theme_messages or {})
    merged.update(overrides or {})
    return merged


def messages_to_json(messages: Mapping[str, str] | None) -> str:
    """Serialize a converted bundle as a flat JSON object.

    An empty or missing bundle yields ``""`` rather than ``"{}"``; the console
    treats an empty body as "no translations".
    """

    if not messages:
        return ""
    return json.dumps(convert_messages(messages), ensure_ascii=False)
