# tawsila_admin/core/session.py
"""
Server-side counterpart of the dashboard's browser storage: the user object
and the password-change flag, cached in Redis under a digest of the token.
"""
import logging
from typing import Any, Dict, Optional

from tawsila_admin.core.cache import delete_cache, digest, get_cache, set_cache

logger = logging.getLogger(__name__)


def _user_key(token: str) -> str:
    return f"session:{digest(token)}:user"


def _password_flag_key(token: str) -> str:
    return f"session:{digest(token)}:requires_password_change"


async def store_user(token: str, user: Dict[str, Any]) -> bool:
    """Cache the user returned by the platform for this token"""
    return await set_cache(_user_key(token), user)


async def load_user(token: Optional[str]) -> Optional[Dict[str, Any]]:
    if not token:
        return None

    user = await get_cache(_user_key(token))
    return user if isinstance(user, dict) else None


async def mark_password_change(token: str) -> bool:
    return await set_cache(_password_flag_key(token), True)


async def clear_password_change(token: str) -> int:
    return await delete_cache(_password_flag_key(token))


async def requires_password_change(token: Optional[str]) -> bool:
    if not token:
        return False
    return await get_cache(_password_flag_key(token)) is True


async def clear_session(token: Optional[str]) -> None:
    """Forget everything cached for a token"""
    if not token:
        return

    removed = await delete_cache(_user_key(token), _password_flag_key(token))
    logger.debug(f"Cleared session data ({removed} keys)")


async def is_authenticated(token: Optional[str]) -> bool:
    return bool(token) and await load_user(token) is not None
