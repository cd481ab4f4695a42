# tawsila_admin/api/v1/endpoints/users.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from tawsila_admin.api.dependencies import get_api_client, get_filters
from tawsila_admin.core.config import settings
from tawsila_admin.core.http_client import ApiClient
from tawsila_admin.models.directory import CreateInventoryRequest, UpdateInventoryRequest
from tawsila_admin.services import inventory_service, location_service, user_service

router = APIRouter(tags=["users"])


@router.get("/users")
async def list_users(
        page: int = Query(1, ge=1),
        per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
        filters: Dict[str, str] = Depends(get_filters),
        client: ApiClient = Depends(get_api_client)
):
    result = await user_service.fetch_users(client, page, per_page, filters)
    return result.to_dict()


@router.post("/users", status_code=status.HTTP_201_CREATED)
async def create_user(user: Dict[str, Any] = Body(...), client: ApiClient = Depends(get_api_client)):
    return {"data": await user_service.create_user(client, user)}


@router.get("/users/{user_id}")
async def get_user(user_id: int, client: ApiClient = Depends(get_api_client)):
    return {"data": await user_service.fetch_user(client, user_id)}


@router.put("/users/{user_id}")
async def update_user(user_id: int, changes: Dict[str, Any] = Body(...),
                      client: ApiClient = Depends(get_api_client)):
    return {"data": await user_service.update_user(client, user_id, changes)}


@router.delete("/users/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, client: ApiClient = Depends(get_api_client)):
    await user_service.delete_user(client, user_id)


# ============================================
# Inventories
# ============================================

@router.get("/inventories")
async def list_inventories(
        page: int = Query(1, ge=1),
        per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
        filters: Dict[str, str] = Depends(get_filters),
        client: ApiClient = Depends(get_api_client)
):
    result = await inventory_service.fetch_inventories(client, page, per_page, filters)
    return result.to_dict()


@router.post("/inventories", status_code=status.HTTP_201_CREATED)
async def create_inventory(inventory: CreateInventoryRequest, client: ApiClient = Depends(get_api_client)):
    return {"data": await inventory_service.create_inventory(client, inventory.model_dump(exclude_none=True))}


@router.get("/inventories/me")
async def my_inventory(client: ApiClient = Depends(get_api_client)):
    return {"data": await inventory_service.fetch_current_inventory(client)}


@router.get("/inventories/{inventory_id}")
async def get_inventory(inventory_id: int, client: ApiClient = Depends(get_api_client)):
    return {"data": await inventory_service.fetch_inventory(client, inventory_id)}


@router.put("/inventories/{inventory_id}")
async def update_inventory(inventory_id: int, changes: UpdateInventoryRequest,
                           client: ApiClient = Depends(get_api_client)):
    return {"data": await inventory_service.update_inventory(
        client, inventory_id, changes.model_dump(exclude_unset=True)
    )}


@router.delete("/inventories/{inventory_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_inventory(inventory_id: int, client: ApiClient = Depends(get_api_client)):
    await inventory_service.delete_inventory(client, inventory_id)


# ============================================
# Locations
# ============================================

@router.get("/governorates")
async def list_governorates(client: ApiClient = Depends(get_api_client)):
    return {"data": await location_service.fetch_governorates(client)}


@router.get("/cities")
async def list_cities(governorate_id: Optional[int] = None, client: ApiClient = Depends(get_api_client)):
    return {"data": await location_service.fetch_cities(client, governorate_id)}
