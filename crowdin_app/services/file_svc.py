"""Custom file format jobs: ``parse-file`` and ``build-file``."""

from __future__ import annotations

import base64
import json
import logging
from typing import Any

from ..config import AppSettings
from ..errors import JobValidationError, MissingTargetLanguageError
from ..files.blobstore import Externalizer, generate_unique_file_name
from ..files.content import resolve_content, resolve_strings
from ..files.preview import render_preview_html
from ..files.processing import extract_strings, translate_document
from ..schemas.files import FileProcessRequest

logger = logging.getLogger(__name__)

JOB_PARSE_FILE = "parse-file"
JOB_BUILD_FILE = "build-file"
JOB_TYPES = {JOB_PARSE_FILE, JOB_BUILD_FILE}


def validate_job_type(job_type: Any) -> None:
    if not job_type:
        raise JobValidationError("Missing jobType parameter in request")
    if not isinstance(job_type, str) or job_type not in JOB_TYPES:
        name = job_type if isinstance(job_type, str) else "unknown type"
        raise JobValidationError(f"Unknown job type: {name}")


def validate_job_request(req: FileProcessRequest) -> None:
    """Reject malformed requests before any I/O happens."""
    validate_job_type(req.job_type)

    if req.file is None:
        raise JobValidationError("File is missing in request")
    if not req.file.name:
        raise JobValidationError("File name is missing")
    if not (req.file.content or req.file.content_url):
        raise JobValidationError("File content or URL is missing")

    if req.job_type == JOB_BUILD_FILE and req.strings is None and not req.strings_url:
        raise JobValidationError("For build-file, you need to provide strings or stringsUrl")


def _b64(text: str) -> str:
    return base64.b64encode(text.encode("utf-8")).decode("ascii")


async def parse_file(
    req: FileProcessRequest,
    settings: AppSettings,
    externalizer: Externalizer,
) -> dict[str, Any]:
    """Extract strings and a preview; upload both when the strings are too large."""
    document = await resolve_content(req.file, timeout=settings.http_timeout_seconds)
    entries, preview = extract_strings(document, req.target_language_id)

    file_name = req.file.name or "Unknown file"
    preview_html = render_preview_html(file_name, preview)
    base_name = generate_unique_file_name(req.file.name)

    strings = [entry.to_api() for entry in entries]
    serialized = json.dumps(strings, ensure_ascii=False, separators=(",", ":"))
    logger.info("Parsed %s: %d strings", file_name, len(strings))

    if not externalizer.exceeds_max_size(serialized):
        return {"data": {"strings": strings, "preview": _b64(preview_html)}}

    return {
        "data": {
            "stringsUrl": await externalizer.upload(
                serialized, f"parsed_files/{base_name}_strings.json", "application/json"
            ),
            "previewUrl": await externalizer.upload(
                preview_html, f"parsed_files/{base_name}_preview.html", "text/html"
            ),
        }
    }


async def build_file(
    req: FileProcessRequest,
    settings: AppSettings,
    externalizer: Externalizer,
) -> dict[str, Any]:
    """Rebuild the file in the first target language."""
    language_id = req.target_language_id
    if not language_id:
        raise MissingTargetLanguageError("Target language ID is missing")

    document = await resolve_content(req.file, timeout=settings.http_timeout_seconds)
    entries = await resolve_strings(
        req.strings, req.strings_url, timeout=settings.http_timeout_seconds
    )

    translated = translate_document(document, entries, language_id)
    content = json.dumps(translated, ensure_ascii=False, indent=2)
    base_name = generate_unique_file_name(req.file.name)

    payload = await externalizer.externalize(
        content, f"built_files/{base_name}_content.json", "application/json"
    )
    if payload.url is not None:
        return {"data": {"contentUrl": payload.url}}
    return {"data": {"content": payload.data}}


async def process_job(
    req: FileProcessRequest,
    settings: AppSettings,
    externalizer: Externalizer,
) -> dict[str, Any]:
    validate_job_request(req)
    if req.job_type == JOB_PARSE_FILE:
        return await parse_file(req, settings, externalizer)
    return await build_file(req, settings, externalizer)
