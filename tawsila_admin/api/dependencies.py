# tawsila_admin/api/dependencies.py
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer

from tawsila_admin.core import session
from tawsila_admin.core.http_client import ApiClient
from tawsila_admin.core.security import extract_locale_from_request, extract_token_from_request, normalize_token

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


async def get_optional_token(
        request: Request,
        token: Optional[str] = Depends(oauth2_scheme)
) -> Optional[str]:
    """Token from the OAuth2 header, else from cookie or header"""
    return normalize_token(token) or extract_token_from_request(request)


async def get_token_from_request(token: Optional[str] = Depends(get_optional_token)) -> str:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return token


def get_locale(request: Request) -> str:
    return extract_locale_from_request(request)


# Query parameters consumed by list endpoints themselves, never forwarded as filters
RESERVED_QUERY_PARAMS = ("page", "per_page", "include")


def get_filters(request: Request) -> Dict[str, str]:
    """Every query parameter other than paging and includes is a UI filter"""
    return {
        key: value
        for key, value in request.query_params.items()
        if key not in RESERVED_QUERY_PARAMS
    }


async def get_public_client(locale: str = Depends(get_locale)) -> ApiClient:
    """Client for calls that need no user token (login, tracking)"""
    return ApiClient(locale=locale)


async def get_api_client(
        token: str = Depends(get_token_from_request),
        locale: str = Depends(get_locale)
) -> ApiClient:
    """Client acting as the caller; a 401 from the platform drops the cached session"""

    async def forget_session() -> None:
        await session.clear_session(token)

    return ApiClient(token=token, locale=locale, on_unauthorized=forget_session)


async def get_current_user(token: str = Depends(get_token_from_request)) -> Dict[str, Any]:
    """User cached at login for this token"""
    user = await session.load_user(token)

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session expired. Please log in again.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return user
