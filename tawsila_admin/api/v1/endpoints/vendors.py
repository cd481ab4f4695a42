# tawsila_admin/api/v1/endpoints/vendors.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from tawsila_admin.api.dependencies import get_api_client, get_current_user
from tawsila_admin.core.http_client import ApiClient
from tawsila_admin.models.directory import CreateVendorRequest, UpdateVendorRequest
from tawsila_admin.services import agent_service, vendor_service

router = APIRouter(tags=["vendors"])


@router.get("/vendors")
async def list_vendors(client: ApiClient = Depends(get_api_client)):
    return {"data": await vendor_service.fetch_vendors(client)}


@router.post("/vendors", status_code=status.HTTP_201_CREATED)
async def create_vendor(vendor: CreateVendorRequest, client: ApiClient = Depends(get_api_client)):
    return {"data": await vendor_service.create_vendor(client, vendor.model_dump(exclude_none=True))}


@router.get("/vendors/me")
async def my_vendor(client: ApiClient = Depends(get_api_client)):
    return {"data": await vendor_service.fetch_current_vendor(client)}


@router.get("/vendors/me/id")
async def my_vendor_id(
        user: Dict[str, Any] = Depends(get_current_user),
        client: ApiClient = Depends(get_api_client)
):
    return {"vendor_id": await vendor_service.resolve_current_vendor_id(client, user)}


@router.get("/vendors/{vendor_id}")
async def get_vendor(vendor_id: int, client: ApiClient = Depends(get_api_client)):
    return {"data": await vendor_service.fetch_vendor(client, vendor_id)}


@router.put("/vendors/{vendor_id}")
async def update_vendor(vendor_id: int, changes: UpdateVendorRequest,
                        client: ApiClient = Depends(get_api_client)):
    return {"data": await vendor_service.update_vendor(client, vendor_id, changes.model_dump(exclude_unset=True))}


@router.post("/vendors/{vendor_id}/images")
async def upload_vendor_images(
        vendor_id: int,
        logo: Optional[UploadFile] = File(None),
        cover_image: Optional[UploadFile] = File(None),
        client: ApiClient = Depends(get_api_client)
):
    """Replace the vendor logo and/or cover image"""
    files = {}
    for field, upload in zip(vendor_service.IMAGE_FIELDS, (logo, cover_image)):
        if upload is not None:
            files[field] = (upload.filename, await upload.read(), upload.content_type)

    if not files:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No image uploaded")

    return {"data": await vendor_service.update_vendor(client, vendor_id, {}, files=files)}


@router.delete("/vendors/{vendor_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_vendor(vendor_id: int, client: ApiClient = Depends(get_api_client)):
    await vendor_service.delete_vendor(client, vendor_id)


# ============================================
# Agents
# ============================================

@router.get("/agents")
async def list_agents(client: ApiClient = Depends(get_api_client)):
    return {"data": await agent_service.fetch_agents(client)}


@router.get("/agents/active")
async def list_active_agents(client: ApiClient = Depends(get_api_client)):
    """Active shipping agents for the pickup and delivery assignment dialogs"""
    return {"data": await agent_service.fetch_active_agents(client)}
