# tawsila_admin/services/vendor_service.py
"""
Vendor administration: the businesses that create orders on the platform.

Logo and cover images travel as multipart uploads. The platform only accepts
multipart on POST, so an update with files is a POST carrying _method=PUT.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from tawsila_admin.core.errors import ApiError, MessageError
from tawsila_admin.core.http_client import ApiClient

logger = logging.getLogger(__name__)

IMAGE_FIELDS = ("logo", "cover_image")


def _unwrap(data: Any) -> Any:
    """Some vendor endpoints nest the payload one level deeper, as {"data": {"data": ...}}"""
    if isinstance(data, dict) and "data" in data and "id" not in data:
        return data["data"]
    return data


def _form_fields(vendor: Mapping[str, Any]) -> Dict[str, str]:
    """Multipart form values; empty values are left out"""
    return {
        key: str(value)
        for key, value in vendor.items()
        if value is not None and value != ""
    }


async def fetch_vendors(client: ApiClient) -> List[Dict[str, Any]]:
    response = await client.get("/vendors")
    vendors = _unwrap(response.get("data"))
    return vendors if isinstance(vendors, list) else []


async def fetch_vendor(client: ApiClient, vendor_id: int) -> Dict[str, Any]:
    response = await client.get(f"/vendors/{vendor_id}")
    vendor = _unwrap(response.get("data"))
    if not vendor:
        raise MessageError("Vendor not found", status=404)
    return vendor


async def fetch_current_vendor(client: ApiClient) -> Dict[str, Any]:
    """Profile of the vendor the logged-in vendor user belongs to"""
    response = await client.get("/my-vendor")
    vendor = response.get("data")
    if not vendor:
        raise MessageError("Vendor not found", status=404)
    return vendor


async def create_vendor(
        client: ApiClient,
        vendor: Mapping[str, Any],
        files: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    if files:
        response = await client.post("/vendors", data=_form_fields(vendor), files=files)
    else:
        response = await client.post("/vendors", json=dict(vendor))

    created = response.get("data")
    if not created:
        raise MessageError(response.get("message") or "Failed to create vendor")

    logger.info(f"Created vendor {created.get('id')}")
    return created


async def update_vendor(
        client: ApiClient,
        vendor_id: int,
        changes: Mapping[str, Any],
        files: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    if files:
        data = {"_method": "PUT", **_form_fields(changes)}
        response = await client.post(f"/vendors/{vendor_id}", data=data, files=files)
    else:
        response = await client.put(f"/vendors/{vendor_id}", json=dict(changes))

    updated = response.get("data")
    if not updated:
        raise MessageError(response.get("message") or "Failed to update vendor")
    return updated


async def delete_vendor(client: ApiClient, vendor_id: int) -> None:
    await client.delete(f"/vendors/{vendor_id}")
    logger.info(f"Deleted vendor {vendor_id}")


def _vendor_id_from_user(user: Mapping[str, Any]) -> Optional[int]:
    for key in ("vendor_id", "organization_id"):
        if user.get(key):
            return user[key]

    for key in ("vendor", "organization"):
        nested = user.get(key)
        if isinstance(nested, dict) and nested.get("id"):
            return nested["id"]

    return None


def _matches_user(vendor: Mapping[str, Any], user: Mapping[str, Any]) -> bool:
    email = user.get("email")
    if email and vendor.get("email") in (email, email.lower()):
        return True

    contact = vendor.get("contact_person")
    return bool(contact) and contact in (user.get("name_en"), user.get("name_ar"))


async def resolve_current_vendor_id(client: ApiClient, user: Mapping[str, Any]) -> int:
    """
    Vendor id of a vendor user.

    Tries the /my-vendor profile first, then the ids carried by the cached
    user, and last a vendor whose email or contact person matches the user.
    """
    try:
        vendor = await fetch_current_vendor(client)
        return vendor["id"]
    except ApiError as e:
        logger.debug(f"/my-vendor unavailable ({e.message}), falling back to the user object")

    vendor_id = _vendor_id_from_user(user)
    if vendor_id:
        return vendor_id

    if user.get("email"):
        try:
            vendors = await fetch_vendors(client)
        except ApiError as e:
            # Vendor users usually lack the list-vendors permission
            logger.debug(f"Vendor list unavailable: {e.message}")
            vendors = []

        for vendor in vendors:
            if _matches_user(vendor, user):
                return vendor["id"]

    raise MessageError(
        "Vendor ID not found. Please contact your administrator to configure vendor_id retrieval.",
        status=404,
    )
