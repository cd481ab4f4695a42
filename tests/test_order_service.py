import pytest

from tawsila_admin.core.errors import MessageError
from tawsila_admin.models.orders import CreateOrderRequest
from tawsila_admin.services import order_service
from tawsila_admin.services.order_service import ORDER_INCLUDES

ORDERS_PAGE = {
    "data": [{"id": 1, "status": "pending"}],
    "meta": {"current_page": 2, "last_page": 4, "per_page": 10, "total": 31, "from": 11, "to": 20},
    "links": {"first": "f", "last": "l", "prev": None, "next": "n"},
}


@pytest.mark.anyio
async def test_fetch_orders_builds_url(api, platform):
    platform.add("GET", "/orders", json=ORDERS_PAGE)

    page = await order_service.fetch_orders(api, page=2, per_page=10, filters={
        "status": "pending",
        "tracking_number": "ABC-1",
        "created_at_between": "2024-03-01,2024-03-31",
        "customer_name": "John",
        "is_in_phase1": "1",
    })

    params = platform.last.url.params
    assert params["page"] == "2"
    assert params["per_page"] == "10"
    assert params["include"] == ORDER_INCLUDES
    assert params["filter[status]"] == "pending"
    assert params["filter[track_number]"] == "ABC-1"
    assert params["filter[created_between]"] == "2024-03-01,2024-03-31"
    assert params["filter[is_in_phase1]"] == "true"
    assert "filter[customer_name]" not in params

    assert page.data == [{"id": 1, "status": "pending"}]
    assert page.meta.current_page == 2
    assert page.meta.from_ == 11
    assert page.links.next == "n"


@pytest.mark.anyio
async def test_fetch_orders_defaults_missing_meta(api, platform):
    platform.add("GET", "/orders", json={"data": []})

    page = await order_service.fetch_orders(api)

    assert platform.last.url.params["per_page"] == "24"
    assert page.to_dict() == {
        "data": [],
        "meta": {"current_page": 1, "from": None, "last_page": 1, "per_page": 24, "to": None, "total": 0},
        "links": None,
    }


@pytest.mark.anyio
async def test_fetch_order_not_found(api, platform):
    platform.add("GET", "/orders/9", json={"data": None})

    with pytest.raises(MessageError) as excinfo:
        await order_service.fetch_order(api, 9)

    assert excinfo.value.message == "Order not found"
    assert excinfo.value.status == 404


@pytest.mark.anyio
async def test_create_order_drops_empty_fields(api, platform):
    platform.add("POST", "/orders", status=201, json={"data": {"id": 10, "order_number": "ORD-10"}})

    order = CreateOrderRequest(
        customer={"name": "Sara", "mobile": "0100", "address": "Street 1"},
        items=[{"product_name": "Mug", "quantity": 2, "unit_price": 50}],
        payment_method="cod",
    )
    created = await order_service.create_order(api, order)

    assert created["order_number"] == "ORD-10"
    assert platform.body() == {
        "customer": {"name": "Sara", "mobile": "0100", "address": "Street 1"},
        "items": [{"product_name": "Mug", "quantity": 2, "unit_price": 50.0}],
        "payment_method": "cod",
    }


@pytest.mark.anyio
async def test_accept_and_reject(api, platform):
    platform.add("POST", "/orders/3/accept", json={"data": {"id": 3, "status": "accepted"}})
    platform.add("POST", "/orders/3/reject", json={"data": {"id": 3, "status": "rejected"}})

    assert (await order_service.accept_order(api, 3, 7))["status"] == "accepted"
    assert platform.body() == {"inventory_id": 7}

    await order_service.reject_order(api, 3, "  out of stock  ")
    assert platform.body() == {"reason": "out of stock"}

    await order_service.reject_order(api, 3, "   ")
    assert platform.body() == {}


@pytest.mark.anyio
async def test_assign_agents(api, platform):
    platform.add("POST", "/orders/3/assign-pickup-agent", json={"data": {"id": 3}})
    platform.add("POST", "/orders/3/assign-delivery-agent", json={"data": {"id": 3}})

    await order_service.assign_pickup_agent(api, 3, 12, notes=" call first ")
    assert platform.body() == {"agent_id": 12, "notes": "call first"}

    await order_service.assign_delivery_agent(api, 3, 13)
    assert platform.body() == {"agent_id": 13}


@pytest.mark.anyio
async def test_assign_agent_failure_message(api, platform):
    platform.add("POST", "/orders/3/assign-pickup-agent", json={"message": None})

    with pytest.raises(MessageError) as excinfo:
        await order_service.assign_pickup_agent(api, 3, 12)

    assert excinfo.value.message == "Failed to assign pickup agent"


@pytest.mark.anyio
async def test_fetch_my_assigned_orders(api, platform):
    platform.add("GET", "/orders", json={"data": [
        {"id": 1, "assignments": [{"is_active": True, "assigned_to": {"id": 5}}]},
        {"id": 2, "assignments": [{"is_active": False, "assigned_to": {"id": 5}}]},
        {"id": 3, "assignments": [{"is_active": True, "assigned_to": {"id": 6}}]},
        {"id": 4, "assignments": None},
        {"id": 5, "assignments": [{"is_active": True, "assigned_to": None}]},
    ]})

    orders = await order_service.fetch_my_assigned_orders(api, 5)

    assert [order["id"] for order in orders] == [1]
    assert platform.last.url.params["include"] == "assignments"
    assert await order_service.fetch_my_assigned_orders(api, None) == []


@pytest.mark.anyio
async def test_fetch_order_assignments(api, platform):
    platform.add("GET", "/orders/3/assignments", json={"data": [{"id": 1}]})

    assert await order_service.fetch_order_assignments(api, 3) == [{"id": 1}]
