# tawsila_admin/api/v1/endpoints/tracking.py
from fastapi import APIRouter, Depends

from tawsila_admin.api.dependencies import get_public_client
from tawsila_admin.core.http_client import ApiClient
from tawsila_admin.services import tracking_service

router = APIRouter(prefix="/track", tags=["tracking"])


@router.get("/{track_number}")
async def track_order(track_number: str, client: ApiClient = Depends(get_public_client)):
    """Public tracking page data, no login required"""
    return {"data": await tracking_service.fetch_tracking(client, track_number)}
