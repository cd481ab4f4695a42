# tawsila_admin/core/security.py
import logging
from typing import Optional

from fastapi import Request, Response

from tawsila_admin.core.config import settings

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


def normalize_token(token: Optional[str]) -> Optional[str]:
    """Strip the Bearer prefix if present"""
    if token and token.startswith(BEARER_PREFIX):
        token = token[len(BEARER_PREFIX):]
    return token or None


def extract_token_from_request(request: Request) -> Optional[str]:
    """Extract the platform token from either cookie or authorization header"""
    # Try cookie first
    token = request.cookies.get(settings.TOKEN_COOKIE_NAME)
    source = "cookie"

    # If not in cookie, try auth header
    if not token:
        auth_header = request.headers.get("Authorization")
        if auth_header and auth_header.startswith(BEARER_PREFIX):
            token = auth_header
            source = "header"

    token = normalize_token(token)

    if token:
        logger.debug(f"Token extracted from {source}, length: {len(token)}")
    else:
        logger.debug("No token found in request")

    return token


def extract_locale_from_request(request: Request) -> str:
    """Locale chosen by the UI, sent as X-Locale or as the first Accept-Language entry"""
    locale = request.headers.get("X-Locale")
    if not locale:
        accept_language = request.headers.get("Accept-Language", "")
        locale = accept_language.split(",")[0].split("-")[0].strip().lower()
    return settings.normalize_locale(locale)


def set_token_cookie(response: Response, token: str) -> None:
    """Store the platform token in an HTTP-only cookie"""
    response.set_cookie(
        key=settings.TOKEN_COOKIE_NAME,
        value=normalize_token(token),
        httponly=True,
        max_age=settings.TOKEN_MAX_AGE,
        path="/",
        domain=settings.COOKIE_DOMAIN,
        samesite="lax",
        secure=settings.COOKIE_SECURE
    )


def clear_token_cookie(response: Response) -> None:
    """Remove the token cookie (must match the path used when setting)"""
    response.delete_cookie(
        key=settings.TOKEN_COOKIE_NAME,
        path="/",
        domain=settings.COOKIE_DOMAIN,
    )
