"""Crowdin app configuration via pydantic-settings."""

from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings


class AppSettings(BaseSettings):
    environment: str = "development"
    app_title: str = "Crowdin App"
    app_identifier: str = "getting-started"
    app_name: str = "Getting Started"
    base_url: str = "http://localhost:8000"

    # Crowdin OAuth (app authorization flow)
    client_id: str = ""
    client_secret: str = ""
    auth_url: str = "https://accounts.crowdin.com/oauth/token"
    api_base_url: str = "https://api.crowdin.com/api/v2"
    http_timeout_seconds: float = 30.0
    token_buffer_seconds: int = 60

    database_url: str = "sqlite+aiosqlite:///crowdin_app.db"
    echo_sql: bool = False

    # Responses above this many UTF-8 bytes are uploaded to blob storage.
    max_inline_bytes: int = 1024 * 1024

    # Blob storage: "local" writes under blob_local_dir and serves it at /blobs,
    # "vercel" uploads to a Vercel Blob compatible API.
    blob_backend: str = "local"
    blob_local_dir: str = "data/blobs"
    blob_public_url: str = ""
    blob_read_write_token: str | None = None
    blob_api_url: str = "https://blob.vercel-storage.com"

    model_config = {"env_prefix": "CROWDIN_", "env_file": ".env", "extra": "ignore"}

    @property
    def base_dir(self) -> Path:
        return Path(__file__).resolve().parent

    @property
    def project_dir(self) -> Path:
        return self.base_dir.parent

    @property
    def templates_dir(self) -> Path:
        return self.base_dir / "templates"

    @property
    def blob_dir(self) -> Path:
        path = Path(self.blob_local_dir)
        if not path.is_absolute():
            path = self.project_dir / path
        return path

    @property
    def blob_base_url(self) -> str:
        """Public URL prefix for blobs written by the local backend."""
        if self.blob_public_url.strip():
            return self.blob_public_url.strip().rstrip("/")
        return f"{self.base_url.rstrip('/')}/blobs"

    @property
    def oauth_configured(self) -> bool:
        return bool(self.client_id and self.client_secret and self.auth_url)

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}
