"""Tests for the PesaPal gateway client"""

import httpx
import pytest

from storefront.errors import AuthError, GatewayError, NetworkError, ValidationError
from storefront.payments.pesapal import (
    PaymentRequest,
    PesapalClient,
    split_name,
    validate_payment_request,
)
from tests.conftest import PESAPAL_BASE_URL, PesapalStub


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def make_request(**overrides) -> PaymentRequest:
    data = {
        "order_id": "6f1c2c1e-0000-4000-8000-000000000001",
        "amount": 35000,
        "currency": "UGX",
        "description": "Manziz Order #6f1c2c1e - 2 items",
        "customer_name": "Jane Nakato Customer",
        "customer_email": "jane@example.com",
        "customer_phone": "+256700000001",
    }
    data.update(overrides)
    return PaymentRequest(**data)


def make_client(stub: PesapalStub, clock=None) -> PesapalClient:
    kwargs = {"clock": clock} if clock else {}
    return PesapalClient(
        base_url=PESAPAL_BASE_URL,
        consumer_key="test-key",
        consumer_secret="test-secret",
        ipn_id="ipn-123",
        callback_url="http://localhost:5173/payment/callback",
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(stub)),
        **kwargs,
    )


def test_split_name():
    assert split_name("Jane Nakato Customer") == ("Jane", "Nakato Customer")
    assert split_name("Jane") == ("Jane", "")


def test_validate_payment_request_lists_every_problem():
    errors = validate_payment_request(make_request(
        order_id="", amount=0, customer_name=" ", customer_email="nope", customer_phone="",
    ))

    assert errors == [
        "Order ID is required",
        "Amount must be greater than 0",
        "Customer name is required",
        "Valid customer email is required",
        "Customer phone is required",
    ]


def test_valid_payment_request_has_no_errors():
    assert validate_payment_request(make_request()) == []


@pytest.mark.asyncio
async def test_access_token_is_cached_until_ttl():
    stub = PesapalStub()
    clock = FakeClock()
    client = make_client(stub, clock)

    first = await client.get_access_token()
    clock.now += 49 * 60
    second = await client.get_access_token()

    assert first == second
    assert stub.token_requests == 1

    clock.now += 2 * 60
    third = await client.get_access_token()

    assert third != first
    assert stub.token_requests == 2


@pytest.mark.asyncio
async def test_token_rejection_raises_auth_error():
    stub = PesapalStub()
    stub.token_status = 401
    client = make_client(stub)

    with pytest.raises(AuthError):
        await client.get_access_token()


@pytest.mark.asyncio
async def test_submit_order_sends_billing_address():
    stub = PesapalStub()
    client = make_client(stub)

    response = await client.submit_order_request(make_request())

    assert response.order_tracking_id == "track-1"
    assert response.redirect_url.startswith("https://pay.pesapal.test/")

    sent = stub.submitted[0]
    assert sent["headers"]["authorization"] == "Bearer token-1"
    body = sent["body"]
    assert body["notification_id"] == "ipn-123"
    assert body["callback_url"] == "http://localhost:5173/payment/callback"
    billing = body["billing_address"]
    assert billing["first_name"] == "Jane"
    assert billing["last_name"] == "Nakato Customer"
    assert billing["country_code"] == "UG"
    assert billing["email_address"] == "jane@example.com"
    assert billing["city"] == "Kampala"


@pytest.mark.asyncio
async def test_invalid_request_is_not_submitted():
    stub = PesapalStub()
    client = make_client(stub)

    with pytest.raises(ValidationError) as exc_info:
        await client.submit_order_request(make_request(customer_email="bad"))

    assert exc_info.value.errors == ["Valid customer email is required"]
    assert stub.submitted == []
    assert stub.token_requests == 0


@pytest.mark.asyncio
async def test_gateway_error_status():
    stub = PesapalStub()
    stub.submit_status = 500
    client = make_client(stub)

    with pytest.raises(GatewayError):
        await client.submit_order_request(make_request())


@pytest.mark.asyncio
async def test_transport_failure_is_network_error():
    stub = PesapalStub()
    stub.raise_network_error = True
    client = make_client(stub)

    with pytest.raises(NetworkError):
        await client.get_access_token()


@pytest.mark.asyncio
async def test_transaction_status_is_parsed():
    stub = PesapalStub()
    stub.status_code = 2
    client = make_client(stub)

    status = await client.get_transaction_status("track-9")

    assert stub.status_requests == ["track-9"]
    assert status.status_code == 2
    assert status.payment_status_description == "Failed"
    assert status.currency == "UGX"
