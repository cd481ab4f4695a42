# tawsila_admin/services/location_service.py
from typing import Any, Dict, List, Optional

from tawsila_admin.core.http_client import ApiClient


async def fetch_governorates(client: ApiClient) -> List[Dict[str, Any]]:
    response = await client.get("/governorates")
    return response.get("data") or []


async def fetch_cities(client: ApiClient, governorate_id: Optional[int] = None) -> List[Dict[str, Any]]:
    """All cities, or only those of one governorate"""
    endpoint = "/cities"
    if governorate_id is not None:
        endpoint += f"?filter[governorate_id]={governorate_id}"

    response = await client.get(endpoint)
    return response.get("data") or []
