"""Organization access tokens for the Crowdin app authorization flow.

The app exchanges its credentials plus the installing user and organization
domain for a short-lived access token scoped to that organization:

1. `refresh_crowdin_token` performs the exchange (single attempt)
2. `get_valid_organization_token` serves the stored token while it has more
   than the buffer left, otherwise refreshes and persists it

Concurrent refreshes for one organization are not serialized; both succeed
and the last write wins.
"""

from __future__ import annotations

import logging
import time
import uuid
from dataclasses import dataclass
from typing import Any

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from ..config import AppSettings
from ..errors import OrganizationNotFoundError, TokenRefreshError
from ..models.organization import Organization

logger = logging.getLogger(__name__)

GRANT_TYPE = "crowdin_app"


def _now() -> int:
    return round(time.time())


@dataclass(frozen=True)
class TokenData:
    """Access token with its absolute expiry (unix seconds)."""

    access_token: str
    access_token_expires: int

    def is_valid(self, buffer_seconds: int = 60, now: int | None = None) -> bool:
        current = _now() if now is None else now
        return self.access_token_expires > current + buffer_seconds


def _parse_token_response(data: Any) -> TokenData:
    if not isinstance(data, dict):
        raise TokenRefreshError("Invalid token response: expected a JSON object")
    try:
        access_token = data["access_token"]
        expires_in = int(data["expires_in"])
    except (KeyError, TypeError, ValueError) as e:
        raise TokenRefreshError(
            f"Invalid token response: missing or bad {e}",
            error_code="invalid_response",
            details={"response_keys": list(data.keys())},
        ) from e
    return TokenData(access_token=access_token, access_token_expires=_now() + expires_in)


async def refresh_crowdin_token(
    settings: AppSettings,
    *,
    app_id: str,
    app_secret: str,
    domain: str,
    user_id: int,
) -> TokenData:
    """Exchange app credentials for an organization access token.

    Raises:
        TokenRefreshError: configuration missing, request failed or
            returned a non-2xx status, or the response is malformed
    """
    if not settings.oauth_configured:
        logger.error("Missing Crowdin OAuth configuration (client id/secret or auth url)")
        raise TokenRefreshError(
            "Server configuration error related to Crowdin OAuth.",
            error_code="not_configured",
        )

    payload = {
        "grant_type": GRANT_TYPE,
        "client_id": settings.client_id,
        "client_secret": settings.client_secret,
        "app_id": app_id,
        "app_secret": app_secret,
        "domain": domain,
        "user_id": user_id,
    }

    try:
        async with httpx.AsyncClient(timeout=settings.http_timeout_seconds) as client:
            response = await client.post(settings.auth_url, json=payload)
    except httpx.HTTPError as exc:
        logger.error("Network error during Crowdin token refresh: %s", exc)
        raise TokenRefreshError(
            f"Authentication request failed during token refresh: {exc}",
            error_code="network_error",
        ) from exc

    if response.status_code < 200 or response.status_code >= 300:
        error_text = response.text[:500]
        logger.error(
            "Error from Crowdin auth during token refresh: %s %s",
            response.status_code,
            error_text,
        )
        raise TokenRefreshError(
            f"Failed to refresh Crowdin token. Status: {response.status_code}",
            error_code="refresh_failed",
            details={"raw_response": error_text},
        )

    try:
        data = response.json()
    except ValueError as exc:
        raise TokenRefreshError("Invalid token response: not JSON", error_code="invalid_response") from exc

    return _parse_token_response(data)


async def get_valid_organization_token(
    db: AsyncSession,
    settings: AppSettings,
    organization_pk: uuid.UUID,
) -> str:
    """Return a usable access token for the organization, refreshing if needed."""
    organization = await db.get(Organization, organization_pk)
    if organization is None:
        logger.error("Organization with internal ID %s not found.", organization_pk)
        raise OrganizationNotFoundError("Organization not found for token retrieval.")

    if organization.access_token and organization.access_token_expires:
        cached = TokenData(organization.access_token, organization.access_token_expires)
        if cached.is_valid(settings.token_buffer_seconds):
            return cached.access_token

    token = await refresh_crowdin_token(
        settings,
        app_id=organization.app_id,
        app_secret=organization.app_secret,
        domain=organization.domain or "",
        user_id=organization.user_id,
    )

    organization.access_token = token.access_token
    organization.access_token_expires = token.access_token_expires
    try:
        await db.commit()
    except Exception:
        await db.rollback()
        raise
    logger.info("Refreshed access token for %r", organization)
    return token.access_token
