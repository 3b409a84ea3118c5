"""Error taxonomy for the file processing pipeline and organization tokens.

Every error carries the HTTP status it is reported with. Validation errors
are client errors (400) raised before any I/O; remote and storage failures
are server errors and name the URL or stage that failed.
"""

from __future__ import annotations

from typing import Any


class AppError(Exception):
    """Base error rendered as ``{"error": {"message": ...}}``."""

    status_code: int = 500
    error_code: str = "internal_error"

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        self.details = details or {}


class ConfigurationError(AppError):
    error_code = "configuration_error"


# Request validation


class JobValidationError(AppError):
    status_code = 400
    error_code = "invalid_request"


class MissingContentError(AppError):
    status_code = 400
    error_code = "missing_content"


class MissingStringsError(AppError):
    status_code = 400
    error_code = "missing_strings"


class MissingTargetLanguageError(AppError):
    status_code = 400
    error_code = "missing_target_language"


class EmptyOrInvalidContentError(AppError):
    status_code = 400
    error_code = "empty_content"


# Remote content


class ContentFetchError(AppError):
    status_code = 502
    error_code = "content_fetch_failed"


class ContentDecodeError(AppError):
    error_code = "content_decode_failed"


class StringsFetchError(AppError):
    status_code = 502
    error_code = "strings_fetch_failed"


class StringsDecodeError(AppError):
    error_code = "strings_decode_failed"


# Blob storage


class BlobUploadError(AppError):
    error_code = "blob_upload_failed"


class BlobAccessConfigError(BlobUploadError):
    """Blob credential is missing or rejected by the store."""

    error_code = "blob_access_error"


# Organizations and tokens


class OrganizationNotFoundError(AppError):
    status_code = 404
    error_code = "organization_not_found"


class TokenRefreshError(AppError):
    status_code = 502
    error_code = "token_refresh_failed"


class UpstreamApiError(AppError):
    status_code = 502
    error_code = "upstream_error"


# Caller authentication


class AuthenticationError(AppError):
    status_code = 401
    error_code = "unauthorized"


class AuthorizationError(AppError):
    status_code = 403
    error_code = "forbidden"


class BadRequestError(AppError):
    status_code = 400
    error_code = "bad_request"
