# tawsila_admin/services/tracking_service.py
from typing import Any, Dict
from urllib.parse import quote

from tawsila_admin.core.config import settings
from tawsila_admin.core.errors import ApiError, MessageError, NetworkError
from tawsila_admin.core.http_client import ApiClient


async def fetch_tracking(client: ApiClient, track_number: str) -> Dict[str, Any]:
    """Public tracking lookup, authenticated by the tracking key instead of a user token"""
    try:
        response = await client.get(
            f"/track/{quote(track_number, safe='')}",
            headers={"X-Tracking-Key": settings.TRACKING_API_KEY},
        )
    except NetworkError:
        raise
    except ApiError as e:
        if e.is_not_found:
            raise MessageError("Order not found", status=404)
        raise MessageError("Failed to fetch tracking information", status=e.status)

    return response.get("data") or {}
