# tawsila_admin/services/order_service.py
"""
Order operations: listing with filters, detail, creation, accept/reject and
agent assignment. Lifecycle rules live on the platform; this module only
forwards the calls and reads the capability flags it returns.
"""
import logging
from typing import Any, Dict, List, Mapping, Optional

from tawsila_admin.core.config import settings
from tawsila_admin.core.errors import MessageError
from tawsila_admin.core.http_client import ApiClient
from tawsila_admin.models.orders import CreateOrderRequest
from tawsila_admin.models.pagination import Page, page_from_payload
from tawsila_admin.services import filter_query

logger = logging.getLogger(__name__)

# Nested relations (assignments.assignedTo) load the assigned users as well
ORDER_INCLUDES = ",".join([
    "vendor",
    "customer",
    "items",
    "assignments.assignedTo",
    "assignments.assignedBy",
    "statusLogs",
    "scans",
    "rejectedBy",
    "inventory",
])

ORDER_DETAIL_INCLUDES = ",".join([
    "customer",
    "vendor",
    "items",
    "assignments",
    "statusLogs",
    "scans",
    "rejectedBy",
    "inventory",
    "assignments.assignedBy",
    "assignments.assignedTo",
    "scans.scannedBy",
    "transactions",
    "transactions.createdBy",
])


def _require_data(response: Dict[str, Any], message: str, status: Optional[int] = None) -> Dict[str, Any]:
    data = response.get("data")
    if not data:
        raise MessageError(response.get("message") or message, status=status)
    return data


def _clean_text(value: Optional[str]) -> Optional[str]:
    if value and value.strip():
        return value.strip()
    return None


async def fetch_orders(
        client: ApiClient,
        page: int = 1,
        per_page: Optional[int] = None,
        filters: Optional[Mapping[str, Any]] = None
) -> Page:
    """Fetch one page of orders; for shipping agents the platform returns only their orders"""
    per_page = per_page or settings.DEFAULT_PAGE_SIZE
    filter_part = filter_query.build_filter_query(filters, filter_query.ORDERS)

    response = await client.get(
        f"/orders?page={page}&per_page={per_page}&include={ORDER_INCLUDES}{filter_part}"
    )
    return page_from_payload(response, per_page)


async def fetch_my_assigned_orders(client: ApiClient, user_id: Optional[int]) -> List[Dict[str, Any]]:
    """Orders with an active assignment to the given agent"""
    if not user_id:
        return []

    response = await client.get("/orders?include=assignments")
    orders = response.get("data") or []

    assigned = []
    for order in orders:
        assignments = order.get("assignments")
        if not isinstance(assignments, list):
            continue
        for assignment in assignments:
            assigned_to = assignment.get("assigned_to") or {}
            if assignment.get("is_active") and assigned_to.get("id") == user_id:
                assigned.append(order)
                break

    logger.debug(f"{len(assigned)} of {len(orders)} orders assigned to user {user_id}")
    return assigned


async def fetch_order(client: ApiClient, order_id: int) -> Dict[str, Any]:
    response = await client.get(f"/orders/{order_id}?include={ORDER_DETAIL_INCLUDES}")
    return _require_data(response, "Order not found", status=404)


async def create_order(client: ApiClient, order: CreateOrderRequest) -> Dict[str, Any]:
    response = await client.post("/orders", json=order.model_dump(exclude_none=True))
    created = _require_data(response, "Failed to create order")
    logger.info(f"Created order {created.get('order_number', created.get('id'))}")
    return created


async def accept_order(client: ApiClient, order_id: int, inventory_id: int) -> Dict[str, Any]:
    response = await client.post(f"/orders/{order_id}/accept", json={"inventory_id": inventory_id})
    return _require_data(response, "Failed to accept order")


async def reject_order(client: ApiClient, order_id: int, reason: Optional[str] = None) -> Dict[str, Any]:
    body = {}

    # Only include reason if it has a value
    reason = _clean_text(reason)
    if reason:
        body["reason"] = reason

    response = await client.post(f"/orders/{order_id}/reject", json=body)
    return _require_data(response, "Failed to reject order")


async def _assign_agent(
        client: ApiClient,
        order_id: int,
        kind: str,
        agent_id: int,
        notes: Optional[str]
) -> Dict[str, Any]:
    body: Dict[str, Any] = {"agent_id": agent_id}

    notes = _clean_text(notes)
    if notes:
        body["notes"] = notes

    response = await client.post(f"/orders/{order_id}/assign-{kind}-agent", json=body)
    return _require_data(response, f"Failed to assign {kind} agent")


async def assign_pickup_agent(client: ApiClient, order_id: int, agent_id: int,
                              notes: Optional[str] = None) -> Dict[str, Any]:
    return await _assign_agent(client, order_id, "pickup", agent_id, notes)


async def assign_delivery_agent(client: ApiClient, order_id: int, agent_id: int,
                                notes: Optional[str] = None) -> Dict[str, Any]:
    return await _assign_agent(client, order_id, "delivery", agent_id, notes)


async def fetch_order_assignments(client: ApiClient, order_id: int) -> List[Dict[str, Any]]:
    response = await client.get(f"/orders/{order_id}/assignments")
    return response.get("data") or []
