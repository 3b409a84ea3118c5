"""Minimal Crowdin REST API v2 client."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlsplit

import httpx

from ..errors import UpstreamApiError

logger = logging.getLogger(__name__)

CROWDIN_API_BASE = "https://api.crowdin.com/api/v2"


def get_organization_domain(base_url: str) -> str | None:
    """Organization sub-domain from a base URL like ``https://acme.crowdin.com``."""
    try:
        hostname = urlsplit(base_url).hostname or ""
    except ValueError:
        logger.warning("Invalid baseUrl format: %s", base_url)
        return None
    if hostname.endswith(".crowdin.com"):
        return hostname.split(".")[0]
    return None


class CrowdinApiClient:
    """Calls the API with an organization access token.

    Usage:
        client = CrowdinApiClient(token, organization="acme")
        user = await client.get_authenticated_user()
    """

    def __init__(
        self,
        token: str,
        organization: str | None = None,
        base_url: str = CROWDIN_API_BASE,
        timeout: float = 30.0,
    ):
        self.token = token
        self.organization = organization
        self.timeout = timeout
        if organization:
            self.base_url = f"https://{organization}.api.crowdin.com/api/v2"
        else:
            self.base_url = base_url.rstrip("/")

    async def _get(self, path: str) -> dict[str, Any]:
        url = f"{self.base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.get(
                    url,
                    headers={"Authorization": f"Bearer {self.token}"},
                )
        except httpx.HTTPError as exc:
            raise UpstreamApiError(f"Crowdin API request failed: {exc}") from exc

        if response.status_code != 200:
            logger.error("Crowdin API %s returned %s: %s", path, response.status_code, response.text[:500])
            raise UpstreamApiError(
                f"Crowdin API error: {response.status_code}",
                details={"path": path, "status": response.status_code},
            )
        try:
            return response.json()
        except ValueError as exc:
            raise UpstreamApiError("Crowdin API returned invalid JSON") from exc

    async def get_authenticated_user(self) -> dict[str, Any]:
        body = await self._get("/user")
        data = body.get("data") if isinstance(body, dict) else None
        return data or {}
