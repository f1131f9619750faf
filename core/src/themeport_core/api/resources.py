from __future__ import annotations

from collections.abc import Iterator
from typing import BinaryIO

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask
from starlette.responses import Response

from themeport_core.api.models import fail
from themeport_core.resources import (
    LocalizationFailure,
    ResourceFault,
    ResourceNotFound,
    get_localizations,
    get_resource,
)
from themeport_core.session import ThemeSession

router = APIRouter(prefix="/resources", tags=["resources"])

STREAM_CHUNK_SIZE = 64 * 1024


def get_theme_session(request: Request) -> ThemeSession:
    state = request.app.state
    themes = getattr(state, "theme_provider", None)
    realms = getattr(state, "realm_provider", None)
    encoding = getattr(state, "encoding_selector", None)
    config = getattr(state, "themeport_config", None)
    if themes is None or realms is None or encoding is None or config is None:
        raise HTTPException(status_code=500, detail="Server not initialized")

    return ThemeSession(
        themes=themes,
        realms=realms,
        encoding=encoding,
        theme_config=config.theme,
        accept_encoding=request.headers.get("accept-encoding"),
    )


def _iter_stream(stream: BinaryIO) -> Iterator[bytes]:
    try:
        while True:
            chunk = stream.read(STREAM_CHUNK_SIZE)
            if not chunk:
                break
            yield chunk
    finally:
        stream.close()


# Declared before the catch-all resource route.
@router.get("/localizations")
def localizations(
    realm: str = Query(...),
    theme_type: str = Query(..., alias="themeType"),
    theme_name: str = Query(..., alias="themeName"),
    locale: str | None = Query(default=None),
    session: ThemeSession = Depends(get_theme_session),  # noqa: B008
) -> Response:
    result = get_localizations(session, realm, theme_type, theme_name, locale)
    if isinstance(result, LocalizationFailure):
        return JSONResponse(
            status_code=500,
            content=fail(code="internal_error", message=result.description).model_dump(
                mode="json"
            ),
        )
    return Response(content=result, media_type="application/json")


@router.get("/{version}/{theme_type}/{theme_name}/{path:path}")
def resource(
    version: str,
    theme_type: str,
    theme_name: str,
    path: str,
    session: ThemeSession = Depends(get_theme_session),  # noqa: B008
) -> Response:
    outcome = get_resource(session, version, theme_type, theme_name, path)
    if isinstance(outcome, ResourceNotFound):
        return Response(status_code=404)
    if isinstance(outcome, ResourceFault):
        return Response(status_code=500)

    headers = {"Cache-Control": outcome.cache_control}
    if outcome.encoding is not None:
        headers["Content-Encoding"] = outcome.encoding
        headers["Vary"] = "Accept-Encoding"

    return StreamingResponse(
        _iter_stream(outcome.stream),
        media_type=outcome.content_type,
        headers=headers,
        # Covers the client-disconnect path where the iterator is never finished.
        background=BackgroundTask(outcome.stream.close),
    )
