from __future__ import annotations

import logging

from babel import Locale, UnknownLocaleError

logger = logging.getLogger(__name__)

UNDETERMINED_TAG = "und"


def parse_language_tag(tag: str | None) -> Locale | None:
    """Best-effort BCP-47 parse.

    Accepts ``en``, ``en-US``, ``zh-Hant-TW`` and the POSIX ``en_US`` form.
    When the full tag is not understood the primary language subtag is tried;
    if that fails too the locale is unspecified (``None``).
    """

    raw = (tag or "").strip().replace("_", "-")
    if not raw:
        return None

    for candidate in (raw, raw.split("-", 1)[0]):
        try:
            return Locale.parse(candidate, sep="-")
        except (UnknownLocaleError, ValueError, TypeError):
            continue

    logger.debug("Unparseable locale tag %r; using unspecified locale", tag)
    return None


def to_language_tag(locale: Locale | None) -> str:
    if locale is None:
        return UNDETERMINED_TAG
    return str(locale).replace("_", "-")
