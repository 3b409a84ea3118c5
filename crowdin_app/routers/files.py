"""Custom file format endpoint: ``POST /api/file/process``."""

from __future__ import annotations

import json
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ..config import AppSettings
from ..database import get_settings
from ..errors import AppError, JobValidationError
from ..files.blobstore import Externalizer
from ..schemas.files import FileProcessRequest
from ..security import CallerContext, require_caller
from ..services import file_svc

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/file", tags=["files"])

NO_CACHE_HEADERS = {"Cache-Control": "no-cache, no-store, must-revalidate"}


def get_externalizer(request: Request) -> Externalizer:
    return request.app.state.externalizer


async def _read_job_request(request: Request) -> FileProcessRequest:
    raw_body = await request.body()
    try:
        body = json.loads(raw_body.decode("utf-8")) if raw_body else None
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise JobValidationError("Invalid JSON body") from exc
    if not isinstance(body, dict):
        raise JobValidationError("Request body must be a JSON object")

    file_svc.validate_job_type(body.get("jobType"))
    try:
        return FileProcessRequest.model_validate(body)
    except ValidationError as exc:
        first = exc.errors()[0]
        location = ".".join(str(part) for part in first["loc"])
        raise JobValidationError(f"Invalid request field '{location}': {first['msg']}") from exc


@router.post("/process")
async def process_file(
    request: Request,
    caller: CallerContext = Depends(require_caller),
    settings: AppSettings = Depends(get_settings),
    externalizer: Externalizer = Depends(get_externalizer),
):
    """Run a ``parse-file`` or ``build-file`` job."""
    job = await _read_job_request(request)
    try:
        result = await file_svc.process_job(job, settings, externalizer)
    except AppError:
        raise
    except Exception as exc:
        logger.exception("Error processing file for organization %s", caller.organization_id)
        raise AppError(
            str(exc) or "An unknown error occurred while processing the file"
        ) from exc
    return JSONResponse(result, headers=NO_CACHE_HEADERS)
