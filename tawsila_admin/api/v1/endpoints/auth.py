# tawsila_admin/api/v1/endpoints/auth.py
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Response, status

from tawsila_admin.api.dependencies import (
    get_api_client, get_current_user, get_optional_token, get_public_client
)
from tawsila_admin.core import session
from tawsila_admin.core.http_client import ApiClient
from tawsila_admin.core.security import clear_token_cookie, set_token_cookie
from tawsila_admin.models.auth import LoginCredentials, LoginResult, SetPasswordRequest
from tawsila_admin.services import auth_service

router = APIRouter(prefix="/auth", tags=["auth"])
logger = logging.getLogger(__name__)


def _login_response(response: Response, result: LoginResult) -> Dict[str, Any]:
    """Put the token in the cookie and keep it out of the body"""
    if result.access_token:
        set_token_cookie(response, result.access_token)

    return {
        "message": result.message,
        "requires_password_change": result.requires_password_change,
        "expires_at": result.expires_at,
        "user": result.user,
    }


@router.post("/login")
async def login(
        credentials: LoginCredentials,
        response: Response,
        client: ApiClient = Depends(get_public_client)
):
    """Authenticate against the platform and start a console session"""
    logger.info("Login POST request received")

    result = await auth_service.login(client, credentials)
    return _login_response(response, result)


@router.post("/set-password")
async def set_password(
        request: SetPasswordRequest,
        response: Response,
        client: ApiClient = Depends(get_api_client)
):
    """Replace the temporary first-login password"""
    result = await auth_service.set_password(client, request)
    return _login_response(response, result)


@router.post("/logout", status_code=status.HTTP_200_OK)
async def logout(
        response: Response,
        token: Optional[str] = Depends(get_optional_token)
):
    if token:
        await auth_service.logout(ApiClient(token=token))

    clear_token_cookie(response)
    return {"message": "Logged out"}


@router.get("/me")
async def me(
        token: Optional[str] = Depends(get_optional_token),
        user: Dict[str, Any] = Depends(get_current_user)
):
    return {
        "user": user,
        "requires_password_change": await session.requires_password_change(token),
    }


@router.get("/status")
async def auth_status(token: Optional[str] = Depends(get_optional_token)):
    """Route-guard check for the dashboard; never answers 401"""
    return {
        "authenticated": await session.is_authenticated(token),
        "requires_password_change": await session.requires_password_change(token),
    }
