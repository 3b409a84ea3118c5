"""Authenticated user lookup: ``GET /api/user``."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import AppSettings
from ..database import get_db, get_settings
from ..errors import BadRequestError, OrganizationNotFoundError, TokenRefreshError
from ..security import CallerContext, require_caller
from ..services import organization_svc, token_svc
from ..services.crowdin_api import CrowdinApiClient, get_organization_domain

router = APIRouter(prefix="/api", tags=["user"])


@router.get("/user")
async def get_user(
    caller: CallerContext = Depends(require_caller),
    settings: AppSettings = Depends(get_settings),
    db: AsyncSession = Depends(get_db),
):
    organization = await organization_svc.find_organization(
        db, caller.domain, caller.organization_id
    )
    if organization is None:
        raise OrganizationNotFoundError("Organization not found.")

    try:
        access_token = await token_svc.get_valid_organization_token(db, settings, organization.id)
    except (OrganizationNotFoundError, TokenRefreshError) as exc:
        raise BadRequestError(exc.message, error_code=exc.error_code) from exc

    client = CrowdinApiClient(
        access_token,
        organization=get_organization_domain(organization.base_url),
        base_url=settings.api_base_url,
        timeout=settings.http_timeout_seconds,
    )
    return await client.get_authenticated_user()
