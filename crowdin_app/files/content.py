"""Resolve file content and string tables from inline payloads or remote URLs."""

from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Any

import httpx
from pydantic import TypeAdapter, ValidationError

from ..errors import (
    ContentDecodeError,
    ContentFetchError,
    MissingContentError,
    MissingStringsError,
    StringsDecodeError,
    StringsFetchError,
)
from ..schemas.files import FileInfo, TranslationEntry

logger = logging.getLogger(__name__)

_entries_adapter = TypeAdapter(list[TranslationEntry])


async def _get(url: str, timeout: float) -> httpx.Response:
    async with httpx.AsyncClient(timeout=timeout, follow_redirects=True) as client:
        response = await client.get(url)
    if response.status_code < 200 or response.status_code >= 300:
        logger.warning("GET %s returned %s", url, response.status_code)
        raise httpx.HTTPStatusError(
            f"HTTP error: {response.status_code} {response.reason_phrase}",
            request=response.request,
            response=response,
        )
    return response


def decode_inline_content(content: str) -> Any:
    """Decode a base64 payload and parse it as JSON."""
    try:
        raw = base64.b64decode(content)
        return json.loads(raw.decode("utf-8"))
    except (binascii.Error, UnicodeDecodeError, ValueError) as exc:
        raise ContentDecodeError(f"Failed to parse file content: {exc}") from exc


async def resolve_content(file: FileInfo, timeout: float = 30.0) -> Any:
    """Return the parsed JSON document for ``file``.

    Inline ``content`` takes precedence over ``contentUrl``. The parsed value
    is returned as-is; callers decide whether a non-object is acceptable.

    Raises:
        MissingContentError: neither source present
        ContentFetchError: the URL could not be fetched or answered non-2xx
        ContentDecodeError: the payload is not valid base64/UTF-8/JSON
    """
    if file.content:
        return decode_inline_content(file.content)

    if file.content_url:
        url = file.content_url
        try:
            response = await _get(url, timeout)
        except httpx.HTTPError as exc:
            raise ContentFetchError(
                f"Failed to load content from {url}: {exc}",
                details={"url": url},
            ) from exc
        try:
            return response.json()
        except ValueError as exc:
            raise ContentDecodeError(
                f"Failed to load content from {url}: invalid JSON ({exc})",
                details={"url": url},
            ) from exc

    raise MissingContentError("File object must contain either content or contentUrl")


async def resolve_strings(
    strings: list[TranslationEntry] | None,
    strings_url: str | None,
    timeout: float = 30.0,
) -> list[TranslationEntry]:
    """Return the string table for a build job.

    Inline ``strings`` (even an empty list) win over ``strings_url``.
    """
    if strings is not None:
        return strings

    if not strings_url:
        raise MissingStringsError("Received invalid data: strings not found")

    try:
        response = await _get(strings_url, timeout)
    except httpx.HTTPError as exc:
        raise StringsFetchError(
            f"Failed to load strings from {strings_url}: {exc}",
            details={"url": strings_url},
        ) from exc

    try:
        return _entries_adapter.validate_json(response.content)
    except ValidationError as exc:
        raise StringsDecodeError(
            f"Failed to load strings from {strings_url}: "
            f"expected a JSON array of string entries ({exc.error_count()} errors)",
            details={"url": strings_url},
        ) from exc
