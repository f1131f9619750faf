from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import BinaryIO

from themeport_core.cache_control import default_cache_control
from themeport_core.db.realms import RealmNotFoundError
from themeport_core.locales import parse_language_tag, to_language_tag
from themeport_core.messages.convert import merge_messages, messages_to_json
from themeport_core.mime import content_type_of
from themeport_core.session import ThemeSession
from themeport_core.themes.models import ThemeType
from themeport_core.version import RESOURCES_VERSION

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceFound:
    stream: BinaryIO
    content_type: str
    cache_control: str
    # Set only when the body was produced by an encoding provider.
    encoding: str | None = None


@dataclass(frozen=True)
class ResourceNotFound:
    reason: str


@dataclass(frozen=True)
class ResourceFault:
    error: Exception


ResourceOutcome = ResourceFound | ResourceNotFound | ResourceFault


@dataclass(frozen=True)
class LocalizationFailure:
    description: str


def get_resource(
    session: ThemeSession,
    version: str,
    theme_type: str,
    theme_name: str,
    path: str,
) -> ResourceOutcome:
    """Resolve a versioned theme resource.

    Missing resources and stale version tokens are ``ResourceNotFound``;
    anything else that goes wrong (unknown theme type included) is a
    ``ResourceFault`` whose details stay in the server log.
    """

    if version != RESOURCES_VERSION:
        return ResourceNotFound(reason="resource version mismatch")

    try:
        content_type = content_type_of(path)
        theme = session.themes.get_theme(theme_name, ThemeType.parse(theme_type))
        cache_control = default_cache_control(session.theme_config)

        provider = None
        if session.themes.is_cache_enabled():
            provider = session.encoding.select_provider_for(content_type, session.accept_encoding)

        # Nothing below may fail once a stream is open; the caller owns it from here.
        if provider is not None:
            stream = provider.get_encoded_stream(
                lambda: theme.get_resource_stream(path),
                theme_type,
                theme_name,
                path.replace("/", os.sep),
            )
        else:
            stream = theme.get_resource_stream(path)

        if stream is None:
            return ResourceNotFound(reason="resource not found")

        return ResourceFound(
            stream=stream,
            content_type=content_type,
            cache_control=cache_control,
            encoding=provider.encoding if provider is not None else None,
        )
    except Exception as e:
        logger.exception(
            "Failed to get theme resource %s/%s/%s", theme_type, theme_name, path
        )
        return ResourceFault(error=e)


def get_localizations(
    session: ThemeSession,
    realm_name: str,
    theme_type: str,
    theme_name: str,
    locale_tag: str | None,
) -> str | LocalizationFailure:
    """Theme messages for a locale, overlaid with the realm's overrides, as JSON.

    Returns ``""`` when there are no messages at all.
    """

    locale = parse_language_tag(locale_tag)

    try:
        theme = session.themes.get_theme(theme_name, ThemeType.parse(theme_type))
    except OSError:
        description = "Failed to create theme"
        logger.error(description, exc_info=True)
        return LocalizationFailure(description=description)

    try:
        messages = theme.get_messages(locale)
    except OSError:
        description = f"Unable to get messages for locale: {to_language_tag(locale)}"
        logger.error(description, exc_info=True)
        return LocalizationFailure(description=description)

    realm = session.realms.get_realm_by_name(realm_name)
    if realm is None:
        raise RealmNotFoundError(f"Realm not found: {realm_name}")

    overrides = realm.get_localization_overrides(to_language_tag(locale))
    return messages_to_json(merge_messages(messages, overrides))
