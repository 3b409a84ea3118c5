"""Verification of the platform-signed JWT sent with every ``/api`` request.

Tokens are HS256 JWTs signed with the app's client secret. They arrive as a
bearer token or in the ``jwtToken`` query parameter.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import time
from dataclasses import dataclass
from typing import Any

from fastapi import Request

from .config import AppSettings
from .database import get_settings
from .errors import AuthenticationError, AuthorizationError, ConfigurationError

logger = logging.getLogger(__name__)


class TokenVerificationError(Exception):
    pass


class TokenExpiredError(TokenVerificationError):
    pass


@dataclass(frozen=True)
class CallerContext:
    """Verified caller identity from the JWT payload."""

    domain: str | None
    organization_id: int
    user_id: int
    payload: dict[str, Any]


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("utf-8").rstrip("=")


def _b64url_decode(data: str) -> bytes:
    padding = "=" * ((4 - (len(data) % 4)) % 4)
    return base64.urlsafe_b64decode((data + padding).encode("utf-8"))


def _sign(secret: str, signing_input: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), signing_input.encode("utf-8"), hashlib.sha256).digest()
    return _b64url_encode(digest)


def encode_jwt(payload: dict[str, Any], secret: str) -> str:
    """Sign ``payload`` as an HS256 JWT."""
    header = _b64url_encode(json.dumps({"alg": "HS256", "typ": "JWT"}, separators=(",", ":")).encode("utf-8"))
    body = _b64url_encode(json.dumps(payload, separators=(",", ":")).encode("utf-8"))
    signing_input = f"{header}.{body}"
    return f"{signing_input}.{_sign(secret, signing_input)}"


def decode_jwt(token: str, secret: str, leeway: int = 0) -> dict[str, Any]:
    """Verify an HS256 JWT and return its payload."""
    try:
        header_b64, body_b64, signature = token.split(".")
    except ValueError as exc:
        raise TokenVerificationError("Invalid compact JWS") from exc

    try:
        header = json.loads(_b64url_decode(header_b64))
    except (ValueError, UnicodeDecodeError) as exc:
        raise TokenVerificationError("Invalid JWT header") from exc
    if not isinstance(header, dict) or header.get("alg") != "HS256":
        raise TokenVerificationError("Unsupported JWT algorithm")

    expected = _sign(secret, f"{header_b64}.{body_b64}")
    if not hmac.compare_digest(signature, expected):
        raise TokenVerificationError("signature verification failed")

    try:
        payload = json.loads(_b64url_decode(body_b64))
    except (ValueError, UnicodeDecodeError) as exc:
        raise TokenVerificationError("Invalid JWT payload") from exc
    if not isinstance(payload, dict):
        raise TokenVerificationError("Invalid JWT payload")

    exp = payload.get("exp")
    if exp is not None:
        if not isinstance(exp, (int, float)):
            raise TokenVerificationError('"exp" claim must be a number')
        if exp <= time.time() - leeway:
            raise TokenExpiredError('"exp" claim timestamp check failed')
    return payload


def _extract_token(request: Request) -> str:
    auth = request.headers.get("authorization", "")
    if auth.lower().startswith("bearer "):
        token = auth[7:].strip()
        if token:
            return token
    return request.query_params.get("jwtToken", "").strip()


def caller_from_payload(payload: dict[str, Any]) -> CallerContext:
    context = payload.get("context")
    if not isinstance(context, dict) or not context.get("user_id") or not context.get("organization_id"):
        logger.error("JWT is missing necessary fields (user_id or organization_id).")
        raise AuthorizationError("Invalid token payload.")
    try:
        organization_id = int(context["organization_id"])
        user_id = int(context["user_id"])
    except (TypeError, ValueError) as exc:
        raise AuthorizationError("Invalid token payload.") from exc
    domain = payload.get("domain")
    return CallerContext(
        domain=domain if isinstance(domain, str) and domain else None,
        organization_id=organization_id,
        user_id=user_id,
        payload=payload,
    )


def verify_caller(request: Request, settings: AppSettings) -> CallerContext:
    token = _extract_token(request)
    if not token:
        raise AuthenticationError("User is not authorized. Missing or invalid token.")

    secret = settings.client_secret.strip()
    if not secret:
        logger.error("Client secret is not configured; cannot verify JWTs.")
        raise ConfigurationError("Server configuration error in middleware.")

    try:
        payload = decode_jwt(token, secret)
    except TokenVerificationError as exc:
        logger.warning("JWT verification failed: %s", exc)
        raise AuthorizationError(f"Token error: {exc}") from exc

    return caller_from_payload(payload)


def require_caller(request: Request) -> CallerContext:
    """FastAPI dependency: verified caller or an error response."""
    caller = verify_caller(request, get_settings(request))
    request.state.caller = caller
    return caller
