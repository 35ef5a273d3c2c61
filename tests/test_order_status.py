"""Tests for order status tracking"""

from uuid import uuid4

import pytest
from httpx import AsyncClient

from storefront.errors import NotFoundError, ValidationError
from storefront.models.order import Order, OrderItem, OrderStatus
from storefront.realtime.hub import ORDERS
from storefront.services.order_status import (
    build_progress,
    can_transition,
    next_status,
    set_order_status,
)


@pytest.fixture
async def test_order(test_db, test_menu_items):
    order_id = uuid4()
    order = Order(
        id=order_id,
        customer_name="Jane Customer",
        phone_number="+256700000001",
        email="jane@example.com",
        delivery_type="delivery",
        delivery_address="Kampala Road",
        subtotal=25000,
        delivery_fee=5000,
        total_amount=30000,
        payment_method="cash",
    )
    order.items = [OrderItem(
        id=uuid4(),
        order_id=order_id,
        menu_item_id=test_menu_items[0].id,
        quantity=1,
        price_at_time=25000,
    )]
    test_db.add(order)
    await test_db.commit()
    return order


def test_progress_fills_steps_up_to_current():
    progress = build_progress("preparing")

    assert progress.current_index == 2
    assert not progress.is_cancelled
    assert [step.completed for step in progress.steps] == [True, True, True, False, False]
    assert [step.label for step in progress.steps] == [
        "Order Received", "Order Confirmed", "Preparing", "Ready", "Delivered",
    ]
    assert progress.steps[2].current


@pytest.mark.parametrize("status", ["cancelled", "refunded", None])
def test_progress_off_track_statuses(status):
    progress = build_progress(status)

    assert progress.is_cancelled
    assert progress.current_index == -1
    assert not any(step.completed for step in progress.steps)


def test_can_transition():
    assert can_transition("pending", "confirmed")
    assert can_transition("confirmed", "ready")
    assert can_transition("ready", "cancelled")
    assert not can_transition("delivered", "cancelled")
    assert not can_transition("preparing", "pending")
    assert not can_transition("cancelled", "confirmed")
    assert not can_transition("unknown", "confirmed")


def test_next_status():
    assert next_status("pending") == OrderStatus.CONFIRMED
    assert next_status("ready") == OrderStatus.DELIVERED
    assert next_status("delivered") is None
    assert next_status("cancelled") is None
    assert next_status("unknown") is None


@pytest.mark.asyncio
async def test_admin_may_jump_backwards(test_db, test_order, hub):
    events = []
    hub.subscribe(ORDERS, events.append)

    await set_order_status(test_db, test_order.id, "delivered", hub=hub)
    order = await set_order_status(test_db, test_order.id, "preparing", hub=hub)

    assert order.order_status == "preparing"
    assert [event.record["order_status"] for event in events] == ["delivered", "preparing"]


@pytest.mark.asyncio
async def test_unknown_status_is_rejected(test_db, test_order):
    with pytest.raises(ValidationError):
        await set_order_status(test_db, test_order.id, "refunded")


@pytest.mark.asyncio
async def test_unknown_order_is_not_found(test_db):
    with pytest.raises(NotFoundError):
        await set_order_status(test_db, uuid4(), "confirmed")


@pytest.mark.asyncio
async def test_track_order_endpoint(client: AsyncClient, test_order):
    response = await client.get(f"/orders/track/{test_order.id}")

    assert response.status_code == 200
    data = response.json()
    assert data["order"]["customer_name"] == "Jane Customer"
    assert data["order"]["items"][0]["menu_item"]["name"] == "Manziz Special Burger"
    assert data["progress"]["current_index"] == 0
    assert data["estimated_time"] == "30-45 minutes"


@pytest.mark.asyncio
@pytest.mark.parametrize("order_id", ["not-a-uuid", str(uuid4())])
async def test_track_order_missing(client: AsyncClient, order_id):
    response = await client.get(f"/orders/track/{order_id}")

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"


@pytest.mark.asyncio
async def test_admin_order_endpoints(admin_client: AsyncClient, test_order):
    response = await admin_client.get("/admin/orders", params={"search": "Jane"})
    assert response.status_code == 200
    assert response.json()["total"] == 1

    response = await admin_client.post(f"/admin/orders/{test_order.id}/advance")
    assert response.status_code == 200
    assert response.json()["order_status"] == "confirmed"

    response = await admin_client.put(
        f"/admin/orders/{test_order.id}/status", json={"order_status": "cancelled"},
    )
    assert response.json()["order_status"] == "cancelled"

    response = await admin_client.post(f"/admin/orders/{test_order.id}/advance")
    assert response.status_code == 422

    response = await admin_client.get("/admin/orders", params={"status": "cancelled"})
    assert [order["id"] for order in response.json()["items"]] == [str(test_order.id)]


@pytest.mark.asyncio
async def test_admin_orders_require_admin(authenticated_client: AsyncClient):
    response = await authenticated_client.get("/admin/orders")

    assert response.status_code == 403


@pytest.mark.asyncio
async def test_admin_orders_require_sign_in(client: AsyncClient):
    response = await client.get("/admin/orders")

    assert response.status_code == 401
