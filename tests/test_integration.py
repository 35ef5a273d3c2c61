"""Integration tests for the full storefront flow"""

import pytest
from httpx import AsyncClient

from storefront.realtime.hub import ORDERS


@pytest.mark.asyncio
async def test_full_online_order_flow(client: AsyncClient, test_menu_items, test_admin_user, pesapal_stub, hub):
    """
    Integration test simulating a paid delivery order:
    1. Browse the menu and fill the cart
    2. Check out with online payment
    3. Return from PesaPal through the callback
    4. Track the order while the kitchen advances it
    """
    # Step 1: Browse and add two burgers and one wings
    menu_response = await client.get("/menu", params={"category": "burgers"})
    assert menu_response.status_code == 200
    burger = menu_response.json()["items"][0]
    wings = test_menu_items[1]

    await client.post("/carts/browser-1/items", json={"menu_item_id": burger["id"]})
    await client.post("/carts/browser-1/items", json={"menu_item_id": burger["id"]})
    cart_response = await client.post("/carts/browser-1/items", json={"menu_item_id": str(wings.id)})
    assert cart_response.json()["total_price"] == 68000

    # Step 2: Check out; 68,000 is above the free delivery threshold
    checkout_response = await client.post("/checkout", json={
        "cart_id": "browser-1",
        "customer_name": "Jane Customer",
        "email": "jane@example.com",
        "phone_number": "+256 700 000 001",
        "delivery_type": "delivery",
        "delivery_address": "Plot 12, Kampala Road",
        "payment_method": "online",
    })

    assert checkout_response.status_code == 201
    checkout_data = checkout_response.json()
    assert checkout_data["status"] == "redirect"
    assert checkout_data["delivery_fee"] == 0
    assert checkout_data["total_amount"] == 68000
    assert checkout_data["redirect_url"] == "https://pay.pesapal.test/iframe?id=1"
    assert pesapal_stub.submitted[0]["body"]["amount"] == 68000
    order_id = checkout_data["order_id"]

    cart_response = await client.get("/carts/browser-1")
    assert cart_response.json()["total_items"] == 0

    # Step 3: Gateway redirects back
    events = []
    hub.subscribe(ORDERS, events.append)
    callback_response = await client.get(
        "/payment/callback",
        params={"OrderTrackingId": "track-1", "OrderMerchantReference": order_id},
    )

    assert callback_response.status_code == 200
    assert callback_response.json()["status"] == "success"
    assert events[-1].record["order_status"] == "confirmed"

    # Step 4: Track, then the kitchen moves it along
    track_response = await client.get(checkout_data["tracking_url"])
    track_data = track_response.json()
    assert track_data["order"]["payment_status"] == "completed"
    assert track_data["progress"]["current_index"] == 1
    assert len(track_data["order"]["items"]) == 2

    login_response = await client.post("/auth/admin/login", json={
        "email": "admin@manziz.com",
        "password": "adminpass123",
    })
    client.headers["Authorization"] = f"Bearer {login_response.json()['access_token']}"

    advance_response = await client.post(f"/admin/orders/{order_id}/advance")
    assert advance_response.json()["order_status"] == "preparing"

    track_response = await client.get(checkout_data["tracking_url"])
    assert track_response.json()["progress"]["status_label"] == "Preparing"
    assert [event.record["order_status"] for event in events] == ["confirmed", "preparing"]


@pytest.mark.asyncio
async def test_reservation_and_chat_flow(client: AsyncClient, admin_client: AsyncClient):
    """
    A customer books a table and asks about it in chat; the admin
    answers and the inbox count drops back to zero.
    """
    reservation_response = await client.post("/reservations", json={
        "name": "Sam Guest",
        "phone_number": "+256 700 000 002",
        "reservation_time": "2099-12-24T19:00:00",
        "guests": 4,
        "special_request": "Window seat",
    })
    assert reservation_response.status_code == 201

    message_response = await client.post("/messages", params={"auto_reply": "false"}, json={
        "message": "Can I bring a birthday cake for my table?",
        "customer_name": "Sam Guest",
        "customer_email": "sam@example.com",
    })
    assert message_response.status_code == 201
    message_id = message_response.json()["message"]["id"]

    count_response = await admin_client.get("/admin/messages/unread-count")
    assert count_response.json()["count"] == 1

    reply_response = await admin_client.post("/admin/messages", json={
        "message": "Of course, see you on the 24th!",
        "reply_to": message_id,
    })
    assert reply_response.status_code == 201

    open_response = await admin_client.get(f"/admin/messages/{message_id}")
    assert open_response.json()["is_read"] is True

    count_response = await admin_client.get("/admin/messages/unread-count")
    assert count_response.json()["count"] == 0

    reservations_response = await admin_client.get("/admin/reservations", params={"filter": "upcoming"})
    assert reservations_response.json()["items"][0]["name"] == "Sam Guest"
    assert reservations_response.json()["items"][0]["timing"] == "upcoming"
