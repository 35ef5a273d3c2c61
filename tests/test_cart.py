"""Tests for the cart store, its storage adapters and the cart endpoints"""

import json

import pytest
import redis.asyncio as redis
from httpx import AsyncClient

from storefront.cart.storage import InMemoryCartStorage, RedisCartStorage, cart_key
from storefront.cart.store import CartStore
from storefront.main import app


BURGER = {"id": "burger-1", "name": "Manziz Special Burger", "price": 25000, "category": "burgers"}
WINGS = {"id": "wings-1", "name": "Crispy Chicken Wings", "price": 18000, "category": "chicken"}


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the cart adapter"""

    def __init__(self):
        self.data = {}
        self.expiry = {}

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None):
        self.data[key] = value
        self.expiry[key] = ex

    async def delete(self, key):
        self.data.pop(key, None)


def test_add_same_item_merges_lines_and_keeps_latest_note():
    """Adding an item twice yields one line with quantity 2 and the second note"""
    cart = CartStore()

    cart.add_item(BURGER, notes="no onions")
    cart.add_item(BURGER, notes="extra cheese")

    assert len(cart.items) == 1
    assert cart.items[0].quantity == 2
    assert cart.items[0].notes == "extra cheese"


def test_add_without_note_keeps_existing_note():
    cart = CartStore()

    cart.add_item(BURGER, notes="no onions")
    cart.add_item(BURGER)

    assert cart.items[0].notes == "no onions"


def test_totals_follow_every_operation():
    cart = CartStore()

    cart.add_item(BURGER)
    cart.add_item(WINGS)
    cart.add_item(WINGS)
    assert cart.get_total_items() == 3
    assert cart.get_total_price() == 25000 + 2 * 18000

    cart.update_quantity("burger-1", 4)
    assert cart.get_total_items() == 6
    assert cart.get_total_price() == 4 * 25000 + 2 * 18000

    cart.remove_item("wings-1")
    assert cart.get_total_items() == 4
    assert cart.get_total_price() == 100000

    cart.clear_cart()
    assert cart.get_total_items() == 0
    assert cart.get_total_price() == 0
    assert cart.is_empty()


def test_update_quantity_zero_removes_line():
    by_update = CartStore()
    by_update.add_item(BURGER)
    by_update.add_item(WINGS)
    by_update.update_quantity("burger-1", 0)

    by_remove = CartStore()
    by_remove.add_item(BURGER)
    by_remove.add_item(WINGS)
    by_remove.remove_item("burger-1")

    assert by_update.to_state() == by_remove.to_state()


def test_remove_missing_item_is_a_no_op():
    cart = CartStore()
    cart.add_item(BURGER)

    cart.remove_item("not-in-cart")

    assert cart.get_total_items() == 1


def test_state_round_trip_preserves_lines():
    cart = CartStore()
    cart.add_item(BURGER, notes="well done")
    cart.add_item(WINGS)

    restored = CartStore.from_state(json.loads(json.dumps(cart.to_state())))

    assert restored.to_state() == cart.to_state()


@pytest.mark.parametrize("state", [
    "not a dict",
    {"items": "not a list"},
    {"items": [{"name": "No id", "price": 100, "quantity": 1}]},
    {"items": [{"id": "x", "name": "Bad qty", "price": 100, "quantity": 0}]},
    {"items": [{"id": "x", "name": "Bad price", "price": "free", "quantity": 1}]},
])
def test_malformed_state_loads_as_empty_cart(state):
    cart = CartStore.from_state(state)

    assert cart.is_empty()


@pytest.mark.asyncio
async def test_in_memory_storage_isolates_saved_state():
    storage = InMemoryCartStorage()
    cart = CartStore()
    cart.add_item(BURGER)

    await storage.save_cart("abc", cart)
    cart.add_item(BURGER)

    loaded = await storage.load_cart("abc")
    assert loaded.get_total_items() == 1


@pytest.mark.asyncio
async def test_redis_storage_uses_prefix_and_ttl():
    client = FakeRedis()
    storage = RedisCartStorage(client, ttl_seconds=3600)
    cart = CartStore()
    cart.add_item(WINGS)

    await storage.save_cart("abc", cart)

    assert "manziz:cart:abc" in client.data
    assert client.expiry["manziz:cart:abc"] == 3600
    loaded = await storage.load_cart("abc")
    assert loaded.to_state() == cart.to_state()


@pytest.mark.asyncio
async def test_redis_storage_unreadable_json_is_empty_cart():
    client = FakeRedis()
    client.data["manziz:" + cart_key("abc")] = "{not json"
    storage = RedisCartStorage(client, ttl_seconds=3600)

    cart = await storage.load_cart("abc")

    assert cart.is_empty()


@pytest.mark.asyncio
async def test_cart_endpoints(client: AsyncClient, test_menu_items):
    burger = test_menu_items[0]

    response = await client.get("/carts/browser-1")
    assert response.status_code == 200
    assert response.json()["items"] == []

    response = await client.post(
        "/carts/browser-1/items",
        json={"menu_item_id": str(burger.id), "notes": "no pickles"},
    )
    assert response.status_code == 200
    response = await client.post("/carts/browser-1/items", json={"menu_item_id": str(burger.id)})
    data = response.json()
    assert data["total_items"] == 2
    assert data["total_price"] == 50000
    assert data["items"][0]["notes"] == "no pickles"

    response = await client.patch(f"/carts/browser-1/items/{burger.id}", json={"quantity": 3})
    assert response.json()["total_price"] == 75000

    response = await client.delete(f"/carts/browser-1/items/{burger.id}")
    assert response.json()["total_items"] == 0


@pytest.mark.asyncio
async def test_cart_rejects_unavailable_item(client: AsyncClient, test_menu_items):
    soda = test_menu_items[2]

    response = await client.post("/carts/browser-1/items", json={"menu_item_id": str(soda.id)})

    assert response.status_code == 422
    assert response.json()["error"] == "validation_error"


@pytest.mark.asyncio
async def test_clear_cart_endpoint(client: AsyncClient, test_menu_items, cart_storage):
    await client.post("/carts/browser-1/items", json={"menu_item_id": str(test_menu_items[0].id)})

    response = await client.delete("/carts/browser-1")

    assert response.status_code == 200
    assert response.json()["total_items"] == 0
    assert await cart_storage.load(cart_key("browser-1")) is None


class UnreachableCartStorage(InMemoryCartStorage):
    """Storage whose backing Redis is down"""

    async def load(self, key):
        raise redis.ConnectionError("redis down")

    async def save(self, key, state):
        raise redis.ConnectionError("redis down")


@pytest.mark.asyncio
async def test_cart_storage_outage_is_retryable(client: AsyncClient, test_menu_items):
    app.state.cart_storage = UnreachableCartStorage()

    response = await client.get("/carts/browser-1")
    assert response.status_code == 503
    assert response.json()["error"] == "network_error"

    response = await client.post("/carts/browser-1/items", json={"menu_item_id": str(test_menu_items[0].id)})
    assert response.status_code == 503
