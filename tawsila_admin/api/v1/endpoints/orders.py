# tawsila_admin/api/v1/endpoints/orders.py
import logging
from typing import Any, Dict, Literal

from fastapi import APIRouter, Depends, File, HTTPException, Query, Response, UploadFile, status

from tawsila_admin.api.dependencies import get_api_client, get_current_user, get_filters
from tawsila_admin.core.config import settings
from tawsila_admin.core.http_client import ApiClient
from tawsila_admin.models.orders import (
    AcceptOrderRequest, AssignAgentRequest, CreateOrderRequest, ImportOrdersRequest, RejectOrderRequest
)
from tawsila_admin.services import location_service, order_import, order_service

router = APIRouter(prefix="/orders", tags=["orders"])
logger = logging.getLogger(__name__)

TEMPLATE_MEDIA_TYPES = {
    "csv": "text/csv; charset=utf-8",
    "xlsx": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


@router.get("")
async def list_orders(
        page: int = Query(1, ge=1),
        per_page: int = Query(settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
        filters: Dict[str, str] = Depends(get_filters),
        client: ApiClient = Depends(get_api_client)
):
    result = await order_service.fetch_orders(client, page, per_page, filters)
    return result.to_dict()


@router.get("/my-assigned")
async def my_assigned_orders(
        user: Dict[str, Any] = Depends(get_current_user),
        client: ApiClient = Depends(get_api_client)
):
    """Orders actively assigned to the logged-in shipping agent"""
    return {"data": await order_service.fetch_my_assigned_orders(client, user.get("id"))}


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_order(order: CreateOrderRequest, client: ApiClient = Depends(get_api_client)):
    return {"data": await order_service.create_order(client, order)}


@router.get("/import/template")
async def import_template(format: Literal["csv", "xlsx"] = "csv"):
    content, filename = order_import.generate_template(format)
    return Response(
        content=content,
        media_type=TEMPLATE_MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/import/preview")
async def import_preview(
        file: UploadFile = File(...),
        client: ApiClient = Depends(get_api_client)
):
    """Parse and validate an import file, resolving governorate and city ids"""
    filename = file.filename or ""
    content = await file.read()

    try:
        headers, raw_rows = order_import.parse_import_file(filename, content)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    if not raw_rows:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="The file contains no rows")

    governorates = await location_service.fetch_governorates(client)
    cities = await location_service.fetch_cities(client)

    preview = order_import.preview_rows(headers, raw_rows, governorates, cities)
    logger.info(f"Previewed import file {filename}: {len(preview['rows'])} rows, {preview['error_count']} with errors")
    return preview


@router.post("/import")
async def import_orders(request: ImportOrdersRequest, client: ApiClient = Depends(get_api_client)):
    """Group the previewed rows into orders and submit them"""
    rows = [order_import.ImportedOrderRow(**row.model_dump()) for row in request.rows]

    invalid = [row for row in rows if not order_import.validate_order_row(row)]
    if invalid:
        logger.info(f"Import refused, {len(invalid)} of {len(rows)} rows have errors")
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"message": f"{len(invalid)} rows have errors", "rows": [row.to_dict() for row in invalid]},
        )

    orders = order_import.build_payload(rows)
    return await order_import.import_orders(client, orders, request.approve_duplicates)


@router.get("/{order_id}")
async def get_order(order_id: int, client: ApiClient = Depends(get_api_client)):
    return {"data": await order_service.fetch_order(client, order_id)}


@router.post("/{order_id}/accept")
async def accept_order(order_id: int, body: AcceptOrderRequest, client: ApiClient = Depends(get_api_client)):
    return {"data": await order_service.accept_order(client, order_id, body.inventory_id)}


@router.post("/{order_id}/reject")
async def reject_order(order_id: int, body: RejectOrderRequest, client: ApiClient = Depends(get_api_client)):
    return {"data": await order_service.reject_order(client, order_id, body.reason)}


@router.post("/{order_id}/assign-pickup-agent")
async def assign_pickup_agent(order_id: int, body: AssignAgentRequest,
                              client: ApiClient = Depends(get_api_client)):
    return {"data": await order_service.assign_pickup_agent(client, order_id, body.agent_id, body.notes)}


@router.post("/{order_id}/assign-delivery-agent")
async def assign_delivery_agent(order_id: int, body: AssignAgentRequest,
                                client: ApiClient = Depends(get_api_client)):
    return {"data": await order_service.assign_delivery_agent(client, order_id, body.agent_id, body.notes)}


@router.get("/{order_id}/assignments")
async def order_assignments(order_id: int, client: ApiClient = Depends(get_api_client)):
    return {"data": await order_service.fetch_order_assignments(client, order_id)}
