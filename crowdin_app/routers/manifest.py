"""App descriptor served to the platform at install time."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..config import AppSettings
from ..database import get_settings

router = APIRouter()

FILE_NAME_PATTERN = r".+\.json$"
FILE_CONTENT_PATTERN = '"hello_world":'


def build_manifest(settings: AppSettings) -> dict:
    return {
        "identifier": settings.app_identifier,
        "name": settings.app_name,
        "baseUrl": settings.base_url,
        "logo": "/logo.svg",
        "authentication": {
            "type": "crowdin_app",
            "clientId": settings.client_id,
        },
        "events": {
            "installed": "/events/installed",
            "uninstall": "/events/uninstall",
        },
        "scopes": ["project"],
        "modules": {
            "custom-file-format": [
                {
                    "key": "custom-file-format",
                    "type": "custom-file-format",
                    "url": "/api/file/process",
                    "signaturePatterns": {
                        "fileName": FILE_NAME_PATTERN,
                        "fileContent": FILE_CONTENT_PATTERN,
                    },
                }
            ],
        },
    }


@router.get("/manifest.json")
async def manifest(settings: AppSettings = Depends(get_settings)):
    return build_manifest(settings)
