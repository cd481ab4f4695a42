# tawsila_admin/services/inventory_service.py
import logging
from typing import Any, Dict, Mapping, Optional

from tawsila_admin.core.config import settings
from tawsila_admin.core.errors import MessageError
from tawsila_admin.core.http_client import ApiClient
from tawsila_admin.models.pagination import Page, page_from_payload
from tawsila_admin.services import filter_query

logger = logging.getLogger(__name__)


async def fetch_inventories(
        client: ApiClient,
        page: int = 1,
        per_page: Optional[int] = None,
        filters: Optional[Mapping[str, Any]] = None
) -> Page:
    per_page = per_page or settings.DEFAULT_PAGE_SIZE
    filter_part = filter_query.build_filter_query(filters, filter_query.INVENTORIES)

    response = await client.get(f"/inventories?page={page}&per_page={per_page}{filter_part}")
    return page_from_payload(response, per_page)


async def fetch_inventory(client: ApiClient, inventory_id: int) -> Dict[str, Any]:
    """The platform answers either with the inventory or with a one-element list"""
    response = await client.get(f"/inventories/{inventory_id}")
    data = response.get("data")

    if isinstance(data, list):
        if data:
            return data[0]
    elif isinstance(data, dict) and "id" in data:
        return data

    raise MessageError("Inventory not found", status=404)


async def fetch_current_inventory(client: ApiClient) -> Dict[str, Any]:
    """Inventory of the logged-in inventory user"""
    response = await client.get("/inventories/me")
    inventory = response.get("data")
    if not inventory:
        raise MessageError("Inventory not found", status=404)
    return inventory


async def create_inventory(client: ApiClient, inventory: Dict[str, Any]) -> Dict[str, Any]:
    response = await client.post("/inventories", json=inventory)
    created = response.get("data")
    if not created:
        raise MessageError(response.get("message") or "Failed to create inventory")

    logger.info(f"Created inventory {created.get('id')}")
    return created


async def update_inventory(client: ApiClient, inventory_id: int, changes: Dict[str, Any]) -> Dict[str, Any]:
    response = await client.put(f"/inventories/{inventory_id}", json=changes)
    updated = response.get("data")
    if not updated:
        raise MessageError(response.get("message") or "Failed to update inventory")
    return updated


async def delete_inventory(client: ApiClient, inventory_id: int) -> None:
    """The platform confirms with {"deleted": true}; anything else is a failure"""
    response = await client.delete(f"/inventories/{inventory_id}")
    deleted = response.get("deleted")

    if deleted is not True:
        default = "Deletion was not successful" if deleted is False else "Invalid response from server"
        raise MessageError(response.get("message") or default)

    logger.info(f"Deleted inventory {inventory_id}")
