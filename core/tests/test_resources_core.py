from __future__ import annotations

import io
import json
import os
from typing import BinaryIO

import pytest

from themeport_core.config import ThemeConfig
from themeport_core.db.realms import RealmNotFoundError
from themeport_core.encoding import ResourceEncodingSelector
from themeport_core.resources import (
    LocalizationFailure,
    ResourceFault,
    ResourceFound,
    ResourceNotFound,
    get_localizations,
    get_resource,
)
from themeport_core.session import ThemeSession
from themeport_core.themes import ThemeLoadError, ThemeType, UnknownThemeTypeError
from themeport_core.version import RESOURCES_VERSION


class FakeTheme:
    def __init__(self, name, theme_type, *, resources=None, messages=None, messages_error=None):
        self.name = name
        self.type = theme_type
        self.resources = resources or {}
        self.messages = messages or {}
        self.messages_error = messages_error
        self.opened: list[str] = []
        self.locales = []

    def get_messages(self, locale):
        self.locales.append(locale)
        if self.messages_error is not None:
            raise self.messages_error
        return dict(self.messages)

    def get_resource_stream(self, path: str) -> BinaryIO | None:
        self.opened.append(path)
        data = self.resources.get(path)
        return io.BytesIO(data) if data is not None else None


class FakeThemeProvider:
    def __init__(self, themes=None, *, cache_enabled=True, error=None):
        self.themes = themes or {}
        self.cache_enabled = cache_enabled
        self.error = error
        self.calls: list[tuple[str, ThemeType]] = []

    def get_theme(self, name, theme_type):
        self.calls.append((name, theme_type))
        if self.error is not None:
            raise self.error
        try:
            return self.themes[(theme_type, name)]
        except KeyError:
            raise ThemeLoadError(f"Theme not found: {name}") from None

    def is_cache_enabled(self):
        return self.cache_enabled


class FakeRealm:
    def __init__(self, overrides=None):
        self.overrides = overrides or {}
        self.tags: list[str] = []

    def get_localization_overrides(self, locale_tag):
        self.tags.append(locale_tag)
        return dict(self.overrides.get(locale_tag, {}))


class FakeRealmProvider:
    def __init__(self, realms=None):
        self.realms = realms or {}

    def get_realm_by_name(self, name):
        return self.realms.get(name)


class FakeEncodingProvider:
    encoding = "br"

    def __init__(self, *, error=None):
        self.error = error
        self.calls = []

    def get_encoded_stream(self, supplier, theme_type, theme_name, path_key):
        self.calls.append((theme_type, theme_name, path_key))
        if self.error is not None:
            raise self.error
        raw = supplier()
        if raw is None:
            return None
        with raw:
            return io.BytesIO(b"encoded:" + raw.read())


def _session(themes, *, realms=None, encoder=None, cache_themes=True, accept="br"):
    providers = {"br": encoder} if encoder is not None else {}
    return ThemeSession(
        themes=themes,
        realms=realms or FakeRealmProvider(),
        encoding=ResourceEncodingSelector(providers, ["text/css"]),
        theme_config=ThemeConfig(cache_themes=cache_themes),
        accept_encoding=accept,
    )


def _login_theme(**kwargs) -> FakeTheme:
    return FakeTheme("base", ThemeType.LOGIN, **kwargs)


def test_version_mismatch_is_not_found_without_theme_lookup() -> None:
    themes = FakeThemeProvider({(ThemeType.LOGIN, "base"): _login_theme()})

    for version in ("", "stale", RESOURCES_VERSION + "x", RESOURCES_VERSION.upper() + "!"):
        outcome = get_resource(_session(themes), version, "login", "base", "css/a.css")
        assert isinstance(outcome, ResourceNotFound)

    assert themes.calls == []


def test_unknown_theme_type_is_a_fault_not_not_found() -> None:
    themes = FakeThemeProvider()
    outcome = get_resource(_session(themes), RESOURCES_VERSION, "nonsense", "base", "a.css")

    assert isinstance(outcome, ResourceFault)
    assert isinstance(outcome.error, UnknownThemeTypeError)
    assert themes.calls == []


def test_missing_theme_is_a_fault() -> None:
    outcome = get_resource(
        _session(FakeThemeProvider()), RESOURCES_VERSION, "login", "missing", "a.css"
    )
    assert isinstance(outcome, ResourceFault)
    assert isinstance(outcome.error, ThemeLoadError)


def test_raw_resource_when_caching_disabled() -> None:
    theme = _login_theme(resources={"css/a.css": b"a{}"})
    encoder = FakeEncodingProvider()
    themes = FakeThemeProvider({(ThemeType.LOGIN, "base"): theme}, cache_enabled=False)

    outcome = get_resource(
        _session(themes, encoder=encoder, cache_themes=False),
        RESOURCES_VERSION,
        "LOGIN",
        "base",
        "css/a.css",
    )

    assert isinstance(outcome, ResourceFound)
    assert outcome.content_type == "text/css"
    assert outcome.encoding is None
    assert outcome.cache_control == "no-cache"
    assert outcome.stream.read() == b"a{}"
    assert encoder.calls == []
    assert themes.calls == [("base", ThemeType.LOGIN)]


def test_encoded_resource_carries_provider_token_and_normalized_key() -> None:
    theme = _login_theme(resources={"css/nested/site.css": b"x{}"})
    encoder = FakeEncodingProvider()
    themes = FakeThemeProvider({(ThemeType.LOGIN, "base"): theme})

    outcome = get_resource(
        _session(themes, encoder=encoder),
        RESOURCES_VERSION,
        "Login",
        "base",
        "css/nested/site.css",
    )

    assert isinstance(outcome, ResourceFound)
    assert outcome.encoding == "br"
    assert outcome.content_type == "text/css"
    assert outcome.cache_control == "public, max-age=2592000"
    assert outcome.stream.read() == b"encoded:x{}"
    assert encoder.calls == [("Login", "base", os.sep.join(["css", "nested", "site.css"]))]


def test_unmatched_content_type_skips_encoding() -> None:
    theme = _login_theme(resources={"img/logo.png": b"\x89PNG"})
    encoder = FakeEncodingProvider()
    themes = FakeThemeProvider({(ThemeType.LOGIN, "base"): theme})

    outcome = get_resource(
        _session(themes, encoder=encoder), RESOURCES_VERSION, "login", "base", "img/logo.png"
    )

    assert isinstance(outcome, ResourceFound)
    assert outcome.content_type == "image/png"
    assert outcome.encoding is None
    assert outcome.stream.read() == b"\x89PNG"
    assert encoder.calls == []


def test_client_without_matching_encoding_gets_raw_bytes() -> None:
    theme = _login_theme(resources={"css/a.css": b"a{}"})
    encoder = FakeEncodingProvider()
    themes = FakeThemeProvider({(ThemeType.LOGIN, "base"): theme})

    outcome = get_resource(
        _session(themes, encoder=encoder, accept="identity"),
        RESOURCES_VERSION,
        "login",
        "base",
        "css/a.css",
    )

    assert isinstance(outcome, ResourceFound)
    assert outcome.encoding is None
    assert encoder.calls == []


@pytest.mark.parametrize("with_encoder", [True, False])
def test_absent_resource_is_not_found(with_encoder: bool) -> None:
    themes = FakeThemeProvider({(ThemeType.LOGIN, "base"): _login_theme()})
    encoder = FakeEncodingProvider() if with_encoder else None

    outcome = get_resource(
        _session(themes, encoder=encoder), RESOURCES_VERSION, "login", "base", "css/none.css"
    )
    assert isinstance(outcome, ResourceNotFound)


def test_encoding_provider_failure_is_a_fault() -> None:
    theme = _login_theme(resources={"css/a.css": b"a{}"})
    themes = FakeThemeProvider({(ThemeType.LOGIN, "base"): theme})
    encoder = FakeEncodingProvider(error=OSError("disk full"))

    outcome = get_resource(
        _session(themes, encoder=encoder), RESOURCES_VERSION, "login", "base", "css/a.css"
    )
    assert isinstance(outcome, ResourceFault)
    assert isinstance(outcome.error, OSError)


def test_localizations_merge_and_convert() -> None:
    theme = _login_theme(messages={"a": "X", "b": "Y {0}"})
    realm = FakeRealm({"en": {"a": "Z"}})
    session = _session(
        FakeThemeProvider({(ThemeType.LOGIN, "base"): theme}),
        realms=FakeRealmProvider({"acme": realm}),
    )

    body = get_localizations(session, "acme", "login", "base", "en")

    assert isinstance(body, str)
    assert json.loads(body) == {"a": "Z", "b": "Y {{param_0}}"}
    assert realm.tags == ["en"]


def test_localizations_use_canonical_tag_for_overrides() -> None:
    theme = _login_theme(messages={"a": "X"})
    realm = FakeRealm({"en-US": {"a": "Howdy"}})
    session = _session(
        FakeThemeProvider({(ThemeType.LOGIN, "base"): theme}),
        realms=FakeRealmProvider({"acme": realm}),
    )

    body = get_localizations(session, "acme", "login", "base", "en_us")

    assert json.loads(body) == {"a": "Howdy"}
    assert realm.tags == ["en-US"]
    assert str(theme.locales[0]) == "en_US"


def test_localizations_malformed_locale_degrades_to_unspecified() -> None:
    theme = _login_theme(messages={"a": "X"})
    realm = FakeRealm()
    session = _session(
        FakeThemeProvider({(ThemeType.LOGIN, "base"): theme}),
        realms=FakeRealmProvider({"acme": realm}),
    )

    body = get_localizations(session, "acme", "login", "base", "!!")

    assert json.loads(body) == {"a": "X"}
    assert theme.locales == [None]
    assert realm.tags == ["und"]


def test_localizations_empty_bundle_is_empty_string() -> None:
    session = _session(
        FakeThemeProvider({(ThemeType.LOGIN, "base"): _login_theme()}),
        realms=FakeRealmProvider({"acme": FakeRealm()}),
    )
    assert get_localizations(session, "acme", "login", "base", "en") == ""


def test_localizations_theme_failure_is_reported() -> None:
    session = _session(FakeThemeProvider(error=ThemeLoadError("boom")))

    result = get_localizations(session, "acme", "login", "base", "en")

    assert result == LocalizationFailure(description="Failed to create theme")


def test_localizations_message_failure_is_reported() -> None:
    theme = _login_theme(messages_error=ThemeLoadError("unreadable"))
    session = _session(FakeThemeProvider({(ThemeType.LOGIN, "base"): theme}))

    result = get_localizations(session, "acme", "login", "base", "de")

    assert result == LocalizationFailure(description="Unable to get messages for locale: de")


def test_localizations_unknown_theme_type_raises() -> None:
    session = _session(FakeThemeProvider())
    with pytest.raises(UnknownThemeTypeError):
        get_localizations(session, "acme", "bogus", "base", "en")


def test_localizations_unknown_realm_raises() -> None:
    session = _session(FakeThemeProvider({(ThemeType.LOGIN, "base"): _login_theme()}))
    with pytest.raises(RealmNotFoundError):
        get_localizations(session, "ghost", "login", "base", "en")
