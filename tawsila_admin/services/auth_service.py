# tawsila_admin/services/auth_service.py
import logging

from tawsila_admin.core import session
from tawsila_admin.core.errors import AccountInactiveError, ApiError
from tawsila_admin.core.http_client import ApiClient
from tawsila_admin.models.auth import LoginCredentials, LoginResult, SetPasswordRequest

logger = logging.getLogger(__name__)


def _result_from_response(response: dict, requires_password_change: bool = False) -> LoginResult:
    meta = response.get("meta") or {}
    return LoginResult(
        access_token=meta.get("access_token") or "",
        token_type=meta.get("token_type") or "Bearer",
        expires_at=meta.get("expires_at"),
        message=response.get("message"),
        requires_password_change=requires_password_change,
        user=response.get("data") if isinstance(response.get("data"), dict) else None,
    )


async def login(client: ApiClient, credentials: LoginCredentials) -> LoginResult:
    """
    Log in against the platform.

    First-time logins (HTTP 203 or requires_password_change) only get a
    temporary token for the set-password call. Inactive accounts are refused
    before anything is stored.
    """
    response = await client.post("/login", json=credentials.model_dump())

    if response.get("status_code") == 203 or response.get("requires_password_change"):
        result = _result_from_response(response, requires_password_change=True)
        result.user = None
        if result.access_token:
            await session.mark_password_change(result.access_token)
        logger.info(f"Login for {credentials.email} requires a password change")
        return result

    result = _result_from_response(response)

    if result.user and result.user.get("status") == "inactive":
        logger.warning(f"Login refused for inactive account: {credentials.email}")
        raise AccountInactiveError()

    if result.access_token and result.user:
        await session.store_user(result.access_token, result.user)

    logger.info(f"User logged in: {credentials.email}")
    return result


async def set_password(client: ApiClient, request: SetPasswordRequest) -> LoginResult:
    """Set the password of a first-time user and switch to the new token"""
    response = await client.post("/set-password", json=request.model_dump())
    result = _result_from_response(response)

    if result.access_token and result.user:
        await session.store_user(result.access_token, result.user)
        if client.token:
            await session.clear_session(client.token)

    return result


async def logout(client: ApiClient) -> None:
    """Log out on the platform; local session data is cleared even if that fails"""
    try:
        await client.post("/logout")
    except ApiError as e:
        logger.error(f"Logout error: {e.message}")
    finally:
        await session.clear_session(client.token)
