"""FastAPI application factory for the Crowdin app."""

from __future__ import annotations

import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles

from .config import AppSettings
from .database import Database
from .errors import AppError
from .files.blobstore import Externalizer, LocalBlobStore, build_blob_store

logger = logging.getLogger(__name__)


def error_response(settings: AppSettings, exc: Exception, status_code: int, message: str) -> JSONResponse:
    error: dict = {"message": message}
    if not settings.is_production:
        error["stack"] = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return JSONResponse({"error": error}, status_code=status_code)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings: AppSettings = app.state.settings
    if app.state.database is None:
        app.state.database = Database.from_settings(settings)
    database: Database = app.state.database
    # Auto-create tables for SQLite (local dev); other databases use Alembic.
    if database.is_sqlite:
        await database.create_all()
    if isinstance(app.state.externalizer.store, LocalBlobStore):
        app.state.externalizer.store.root_dir.mkdir(parents=True, exist_ok=True)
    yield
    await database.dispose()


def create_app(
    settings: AppSettings | None = None,
    *,
    database: Database | None = None,
    externalizer: Externalizer | None = None,
) -> FastAPI:
    settings = settings or AppSettings()
    app = FastAPI(title=settings.app_title, lifespan=lifespan)
    app.state.settings = settings
    app.state.database = database
    app.state.externalizer = externalizer or Externalizer(
        build_blob_store(settings), max_inline_bytes=settings.max_inline_bytes
    )

    @app.exception_handler(AppError)
    async def app_error_handler(request: Request, exc: AppError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        return error_response(settings, exc, exc.status_code, exc.message)

    @app.exception_handler(Exception)
    async def unhandled_error_handler(request: Request, exc: Exception):
        logger.exception("%s %s failed", request.method, request.url.path)
        return error_response(settings, exc, 500, str(exc) or "An unknown error occurred.")

    if isinstance(app.state.externalizer.store, LocalBlobStore):
        app.mount(
            "/blobs",
            StaticFiles(directory=str(app.state.externalizer.store.root_dir), check_dir=False),
            name="blobs",
        )

    from .routers import events, files, health, manifest, user

    app.include_router(files.router)
    app.include_router(user.router)
    app.include_router(events.router)
    app.include_router(manifest.router)
    app.include_router(health.router)
    return app
