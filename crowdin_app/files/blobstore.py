"""Blob storage for payloads too large to return inline.

Two backends share the ``put(content, pathname, content_type) -> url`` shape:
  - `LocalBlobStore` writes under a directory the app serves at ``/blobs``.
  - `VercelBlobStore` uploads to a Vercel Blob compatible HTTP API.

Both add a random suffix to the file name so repeated uploads of the same
logical path never overwrite each other.
"""

from __future__ import annotations

import base64
import logging
import os
import secrets
import tempfile
import uuid
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from urllib.parse import quote

import httpx

from ..config import AppSettings
from ..errors import BlobAccessConfigError, BlobUploadError, ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_BASE_PATH = "uploads/"


def _split_pathname(pathname: str) -> tuple[str, str]:
    """Split into (directory prefix with trailing slash, file name)."""
    head, sep, filename = pathname.rpartition("/")
    if not filename:
        raise BlobUploadError("Invalid path: filename cannot be empty")
    base = f"{head}{sep}" if sep else DEFAULT_BASE_PATH
    return base, filename


def _with_random_suffix(filename: str) -> str:
    stem, dot, ext = filename.rpartition(".")
    suffix = secrets.token_hex(8)
    if not dot or not stem:
        return f"{filename}-{suffix}"
    return f"{stem}-{suffix}.{ext}"


class BlobStore:
    """Interface for blob backends."""

    async def put(self, content: bytes, pathname: str, content_type: str) -> str:
        raise NotImplementedError


class LocalBlobStore(BlobStore):
    def __init__(self, root_dir: str | Path, public_base_url: str):
        self.root_dir = Path(root_dir)
        self.public_base_url = public_base_url.rstrip("/")

    def path_for(self, pathname: str) -> Path:
        rel = PurePosixPath(pathname)
        if rel.is_absolute() or ".." in rel.parts:
            raise BlobUploadError(f"Invalid blob path: {pathname}")
        return self.root_dir.joinpath(*rel.parts)

    def put_bytes_atomic(self, pathname: str, data: bytes) -> Path:
        """Write bytes under ``pathname`` using an atomic rename."""
        dest = self.path_for(pathname)
        dest.parent.mkdir(parents=True, exist_ok=True)

        fd = None
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(
                prefix=f"{dest.name}.tmp.",
                dir=str(dest.parent),
            )
            with os.fdopen(fd, "wb") as f:
                fd = None
                f.write(data or b"")
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, dest)
            tmp_path = None
        finally:
            if fd is not None:
                try:
                    os.close(fd)
                except OSError:
                    pass
            if tmp_path is not None:
                try:
                    os.unlink(tmp_path)
                except OSError:
                    pass

        return dest

    async def put(self, content: bytes, pathname: str, content_type: str) -> str:
        base, filename = _split_pathname(pathname)
        final_pathname = f"{base}{_with_random_suffix(filename)}"
        try:
            self.put_bytes_atomic(final_pathname, content)
        except OSError as exc:
            raise BlobUploadError(f"Failed to upload to blob storage: {exc}") from exc
        return f"{self.public_base_url}/{quote(final_pathname)}"


class VercelBlobStore(BlobStore):
    def __init__(
        self,
        token: str | None,
        api_url: str = "https://blob.vercel-storage.com",
        timeout: float = 30.0,
    ):
        self.token = token
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout

    def _validate_access(self) -> str:
        if not self.token:
            logger.warning(
                "Blob read/write token is not set. Configure CROWDIN_BLOB_READ_WRITE_TOKEN."
            )
            raise BlobAccessConfigError("Blob access token is not configured.")
        return self.token

    async def put(self, content: bytes, pathname: str, content_type: str) -> str:
        token = self._validate_access()
        base, filename = _split_pathname(pathname)

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.put(
                    f"{self.api_url}/",
                    params={"pathname": f"{base}{filename}"},
                    content=content,
                    headers={
                        "Authorization": f"Bearer {token}",
                        "x-content-type": content_type or "application/octet-stream",
                        "x-add-random-suffix": "1",
                    },
                )
        except httpx.HTTPError as exc:
            logger.error("Error uploading to blob: %s", exc)
            raise BlobUploadError(f"Failed to upload to blob storage: {exc}") from exc

        if response.status_code in (401, 403):
            raise BlobAccessConfigError(
                f"Blob access error: {response.status_code}",
                details={"raw_response": response.text[:500]},
            )
        if response.status_code < 200 or response.status_code >= 300:
            logger.error("Blob upload failed: %s %s", response.status_code, response.text[:500])
            raise BlobUploadError(
                f"Failed to upload to blob storage: {response.status_code}",
                details={"raw_response": response.text[:500]},
            )

        try:
            return response.json()["url"]
        except (ValueError, KeyError, TypeError) as exc:
            raise BlobUploadError("Failed to upload to blob storage: response has no url") from exc


def build_blob_store(settings: AppSettings) -> BlobStore:
    backend = settings.blob_backend.strip().lower()
    if backend == "local":
        return LocalBlobStore(settings.blob_dir, settings.blob_base_url)
    if backend == "vercel":
        return VercelBlobStore(
            settings.blob_read_write_token,
            api_url=settings.blob_api_url,
            timeout=settings.http_timeout_seconds,
        )
    raise ConfigurationError(f"Unknown blob backend: {settings.blob_backend}")


def generate_unique_file_name(file_name: str | None = None) -> str:
    """Base name for uploaded artifacts: the part before the first dot."""
    safe_name = file_name or f"file_{uuid.uuid4()}"
    if "." in safe_name:
        return safe_name.split(".", 1)[0] or safe_name
    return safe_name


def exceeds_max_size(content: str, max_bytes: int) -> bool:
    return len(content.encode("utf-8")) > max_bytes


@dataclass(frozen=True)
class ExternalizedPayload:
    """Exactly one of ``data`` (base64) or ``url`` is set."""

    data: str | None = None
    url: str | None = None

    def __post_init__(self):
        if (self.data is None) == (self.url is None):
            raise ValueError("ExternalizedPayload needs exactly one of data or url")


class Externalizer:
    def __init__(self, store: BlobStore, max_inline_bytes: int = 1024 * 1024):
        self.store = store
        self.max_inline_bytes = max_inline_bytes

    def exceeds_max_size(self, content: str) -> bool:
        return exceeds_max_size(content, self.max_inline_bytes)

    async def upload(self, content: str, pathname: str, content_type: str) -> str:
        url = await self.store.put(content.encode("utf-8"), pathname, content_type)
        logger.info("Uploaded %s (%d bytes) to %s", pathname, len(content.encode("utf-8")), url)
        return url

    async def externalize(self, content: str, pathname: str, content_type: str) -> ExternalizedPayload:
        if not self.exceeds_max_size(content):
            return ExternalizedPayload(data=base64.b64encode(content.encode("utf-8")).decode("ascii"))
        return ExternalizedPayload(url=await self.upload(content, pathname, content_type))
