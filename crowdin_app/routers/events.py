"""App lifecycle events sent by the platform: ``POST /events/{slug}``."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import AppSettings
from ..database import get_db, get_settings
from ..errors import AppError, BadRequestError, ConfigurationError
from ..schemas.events import InstalledEvent, UninstallEvent
from ..services import organization_svc, token_svc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


async def _read_json(request: Request) -> dict:
    try:
        body = json.loads((await request.body()).decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise BadRequestError("Invalid JSON body") from exc
    if not isinstance(body, dict):
        raise BadRequestError("Event body must be a JSON object")
    return body


async def handle_installed(db: AsyncSession, settings: AppSettings, body: dict) -> dict:
    if not settings.oauth_configured:
        logger.error("Missing environment configuration for Crowdin OAuth")
        raise ConfigurationError("Server configuration error")

    try:
        event = InstalledEvent.model_validate(body)
    except ValidationError as exc:
        raise BadRequestError(f"Invalid installed event: {exc.error_count()} errors") from exc

    token = await token_svc.refresh_crowdin_token(
        settings,
        app_id=event.app_id,
        app_secret=event.app_secret,
        domain=event.domain or "",
        user_id=event.user_id,
    )

    try:
        await organization_svc.upsert_organization(
            db,
            domain=event.domain,
            organization_id=event.organization_id,
            app_id=event.app_id,
            app_secret=event.app_secret,
            user_id=event.user_id,
            base_url=event.base_url,
            token=token,
        )
    except SQLAlchemyError as exc:
        logger.exception("Database error during installed event")
        raise AppError("Database operation failed", error_code="database_error") from exc

    return {"message": "Installation processed successfully"}


async def handle_uninstall(db: AsyncSession, body: dict) -> dict:
    try:
        event = UninstallEvent.model_validate(body)
    except ValidationError as exc:
        raise BadRequestError(f"Invalid uninstall event: {exc.error_count()} errors") from exc

    try:
        await organization_svc.delete_organizations(db, event.domain, event.organization_id)
    except SQLAlchemyError as exc:
        logger.exception("Database error during uninstall event")
        raise AppError("Database operation failed", error_code="database_error") from exc

    return {"message": "Uninstallation processed successfully"}


@router.post("/{slug}")
async def receive_event(
    slug: str,
    request: Request,
    settings: AppSettings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    if slug == "installed":
        return await handle_installed(db, settings, await _read_json(request))
    if slug == "uninstall":
        return await handle_uninstall(db, await _read_json(request))
    return JSONResponse({"error": {"message": "Not found"}}, status_code=404)
