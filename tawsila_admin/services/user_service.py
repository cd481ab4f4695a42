# tawsila_admin/services/user_service.py
import logging
from typing import Any, Dict, Mapping, Optional

from tawsila_admin.core.config import settings
from tawsila_admin.core.errors import MessageError
from tawsila_admin.core.http_client import ApiClient
from tawsila_admin.models.pagination import Page, page_from_payload
from tawsila_admin.services import filter_query

logger = logging.getLogger(__name__)


async def fetch_users(
        client: ApiClient,
        page: int = 1,
        per_page: Optional[int] = None,
        filters: Optional[Mapping[str, Any]] = None
) -> Page:
    per_page = per_page or settings.DEFAULT_PAGE_SIZE
    filter_part = filter_query.build_filter_query(filters, filter_query.USERS)

    response = await client.get(f"/users?page={page}&per_page={per_page}{filter_part}")
    return page_from_payload(response, per_page)


async def fetch_user(client: ApiClient, user_id: int) -> Dict[str, Any]:
    response = await client.get(f"/users/{user_id}")
    user = response.get("data")
    if not user:
        raise MessageError("User not found", status=404)
    return user


async def create_user(client: ApiClient, user: Dict[str, Any]) -> Dict[str, Any]:
    response = await client.post("/users", json=user)
    logger.info(f"Created user {user.get('email')}")
    return response.get("data") or {}


async def update_user(client: ApiClient, user_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
    response = await client.put(f"/users/{user_id}", json=changes)
    return response.get("data") or {}


async def delete_user(client: ApiClient, user_id: int) -> None:
    await client.delete(f"/users/{user_id}")
    logger.info(f"Deleted user {user_id}")
