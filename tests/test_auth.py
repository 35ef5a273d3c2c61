"""Tests for sign-up, sign-in and admin access"""

import pytest
from httpx import AsyncClient

from storefront.realtime.hub import AUTH


@pytest.mark.asyncio
async def test_register_and_login(client: AsyncClient):
    response = await client.post("/auth/register", json={
        "email": "New.Customer@example.com",
        "password": "secret123",
        "full_name": "New Customer",
        "phone_number": "+256 700 000 009",
    })

    assert response.status_code == 201
    assert response.json()["email"] == "new.customer@example.com"
    assert response.json()["is_admin"] is False

    response = await client.post("/auth/login", json={
        "email": "new.customer@example.com",
        "password": "secret123",
    })

    assert response.status_code == 200
    assert response.json()["token_type"] == "bearer"


@pytest.mark.asyncio
async def test_register_duplicate_email(client: AsyncClient, test_user):
    response = await client.post("/auth/register", json={
        "email": "customer@example.com",
        "password": "secret123",
        "full_name": "Someone Else",
    })

    assert response.status_code == 422
    assert response.json()["fields"]["email"] == "An account with this email already exists"


@pytest.mark.asyncio
async def test_login_wrong_password(client: AsyncClient, test_user):
    response = await client.post("/auth/login", json={
        "email": "customer@example.com",
        "password": "wrong-password",
    })

    assert response.status_code == 401
    assert response.json()["message"] == "Incorrect email or password"


@pytest.mark.asyncio
async def test_admin_login_rejects_customers(client: AsyncClient, test_user):
    response = await client.post("/auth/admin/login", json={
        "email": "customer@example.com",
        "password": "testpass123",
    })

    assert response.status_code == 401
    assert response.json()["message"] == "Access denied. Admin privileges required."


@pytest.mark.asyncio
async def test_admin_login_publishes_sign_in(client: AsyncClient, test_admin_user, hub):
    events = []
    hub.subscribe(AUTH, events.append)

    response = await client.post("/auth/admin/login", json={
        "email": "admin@manziz.com",
        "password": "adminpass123",
    })

    assert response.status_code == 200
    assert [event.event for event in events] == ["SIGNED_IN"]
    assert events[0].record["is_admin"] is True


@pytest.mark.asyncio
async def test_refresh_rotates_token(client: AsyncClient, test_user):
    login = await client.post("/auth/login", json={
        "email": "customer@example.com",
        "password": "testpass123",
    })
    first_refresh = login.json()["refresh_token"]

    response = await client.post("/auth/refresh", json={"refresh_token": first_refresh})
    assert response.status_code == 200
    assert response.json()["refresh_token"] != first_refresh

    # The old refresh token is spent
    response = await client.post("/auth/refresh", json={"refresh_token": first_refresh})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_access_token_cannot_refresh(client: AsyncClient, test_user):
    login = await client.post("/auth/login", json={
        "email": "customer@example.com",
        "password": "testpass123",
    })

    response = await client.post("/auth/refresh", json={"refresh_token": login.json()["access_token"]})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_profile_update(authenticated_client: AsyncClient):
    response = await authenticated_client.put("/auth/me", json={
        "full_name": "Jane Updated",
        "phone_number": "+256 700 000 010",
    })

    assert response.status_code == 200
    assert response.json()["full_name"] == "Jane Updated"

    response = await authenticated_client.get("/auth/me")
    assert response.json()["phone_number"] == "+256 700 000 010"


@pytest.mark.asyncio
async def test_logout_invalidates_refresh_token(client: AsyncClient, test_user):
    login = await client.post("/auth/login", json={
        "email": "customer@example.com",
        "password": "testpass123",
    })
    tokens = login.json()
    client.headers["Authorization"] = f"Bearer {tokens['access_token']}"

    response = await client.post("/auth/logout")
    assert response.status_code == 200

    response = await client.post("/auth/refresh", json={"refresh_token": tokens["refresh_token"]})
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_bad_token_is_rejected(client: AsyncClient):
    client.headers["Authorization"] = "Bearer not-a-token"

    response = await client.get("/auth/me")

    assert response.status_code == 401


@pytest.mark.asyncio
@pytest.mark.parametrize("method,path", [
    ("get", "/admin/menu"),
    ("get", "/admin/orders"),
    ("get", "/admin/reservations"),
    ("get", "/admin/messages"),
    ("get", "/admin/messages/unread-count"),
    ("get", "/admin/analytics"),
])
async def test_admin_routes_reject_customers(authenticated_client: AsyncClient, method, path):
    response = await getattr(authenticated_client, method)(path)

    assert response.status_code == 403
