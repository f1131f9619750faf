from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from themeport_core import __version__
from themeport_core.api.models import fail
from themeport_core.api.resources import router as resources_router
from themeport_core.config import CoreConfig, load_core_config, resolve_configured_paths
from themeport_core.db import resolve_db_path
from themeport_core.db.migrate import apply_migrations
from themeport_core.db.realms import SqliteRealmProvider
from themeport_core.encoding.gzip_provider import GzipResourceEncodingProvider
from themeport_core.encoding.helper import build_encoding_selector
from themeport_core.home import ThemePortPaths, ensure_themeport_layout, resolve_themeport_home
from themeport_core.themes.filesystem import FilesystemThemeProvider
from themeport_core.version import RESOURCES_VERSION

logger = logging.getLogger(__name__)


def configure_file_logging(paths: ThemePortPaths, config: CoreConfig) -> None:
    log_path = paths.logs_dir / "core.log"
    file_handler = RotatingFileHandler(
        log_path,
        maxBytes=config.logging.max_size_mb * 1024 * 1024,
        backupCount=config.logging.backup_count,
        encoding="utf-8",
    )
    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    file_handler.setFormatter(formatter)

    # Configure root logger to capture all module logs
    root = logging.getLogger()
    root.setLevel(config.logging.level.upper())
    # Avoid adding duplicate handlers if reloaded
    if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        root.addHandler(file_handler)


def create_app() -> FastAPI:
    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        home = resolve_themeport_home()
        paths = ensure_themeport_layout(home)
        config = load_core_config(paths)
        paths = resolve_configured_paths(paths, config)

        configure_file_logging(paths, config)

        logger.info("ThemePort Core starting up (resources version %s)", RESOURCES_VERSION)
        logger.info(f"Themes directory: {paths.themes_dir}")
        logger.info(f"Logs directory: {paths.logs_dir}")

        db_path = resolve_db_path(paths)
        apply_migrations(db_path)

        encoding_selector = build_encoding_selector(config.encoding, paths.cache_dir)
        # Encoded copies from a previous build may no longer match the assets on disk.
        for provider in encoding_selector.providers.values():
            if isinstance(provider, GzipResourceEncodingProvider):
                provider.clear()

        app.state.themeport_home = home
        app.state.themeport_paths = paths
        app.state.themeport_config = config
        app.state.db_path = db_path
        app.state.theme_provider = FilesystemThemeProvider(
            paths.themes_dir, cache_enabled=config.theme.cache_themes
        )
        app.state.realm_provider = SqliteRealmProvider(db_path)
        app.state.encoding_selector = encoding_selector

        yield

    app = FastAPI(title="ThemePort Core", version=__version__, lifespan=_lifespan)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} - {response.status_code}")
        return response

    @app.exception_handler(RequestValidationError)
    async def _validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=fail(
                code="validation_error",
                message="Request validation failed",
                details=exc.errors(),
            ).model_dump(mode="json"),
        )

    def _status_to_code(status_code: int) -> str:
        if status_code == 404:
            return "not_found"
        if status_code == 405:
            return "method_not_allowed"
        if status_code == 422:
            return "validation_error"
        if 400 <= status_code < 500:
            return "client_error"
        return "server_error"

    @app.exception_handler(HTTPException)
    async def _http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=fail(
                code=_status_to_code(exc.status_code),
                message=str(exc.detail),
            ).model_dump(mode="json"),
        )

    @app.exception_handler(StarletteHTTPException)
    async def _starlette_http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> JSONResponse:
        return JSONResponse(
            status_code=exc.status_code,
            content=fail(
                code=_status_to_code(exc.status_code),
                message=exc.detail if isinstance(exc.detail, str) else "HTTP error",
            ).model_dump(mode="json"),
        )

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error(
            "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
        )
        return JSONResponse(
            status_code=500,
            content=fail(code="internal_error", message="Internal server error").model_dump(
                mode="json"
            ),
        )

    app.include_router(resources_router)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
