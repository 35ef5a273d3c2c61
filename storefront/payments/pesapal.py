"""PesaPal v3 payment gateway client"""

from dataclasses import dataclass
from typing import Callable, List, Optional
import re
import time

import httpx
import structlog

from storefront.config import Settings, settings as default_settings
from storefront.errors import AuthError, GatewayError, NetworkError, ValidationError
from storefront.schemas.payment import TransactionStatus

logger = structlog.get_logger()

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")

# GetTransactionStatus status_code values
STATUS_INVALID = 0
STATUS_COMPLETED = 1
STATUS_FAILED = 2
STATUS_REVERSED = 3


@dataclass
class PaymentRequest:
    """What we ask the gateway to collect"""
    order_id: str
    amount: int
    currency: str
    description: str
    customer_name: str
    customer_email: str
    customer_phone: str


@dataclass
class SubmitOrderResponse:
    order_tracking_id: str
    merchant_reference: str
    redirect_url: str


def split_name(full_name: str):
    """First word is the first name, the rest is the last name"""
    parts = full_name.split()
    if not parts:
        return full_name, ""
    return parts[0], " ".join(parts[1:])


def format_amount(amount: float) -> int:
    """UGX has no minor unit, the gateway takes the amount as-is"""
    return int(round(amount))


def validate_payment_request(request: PaymentRequest) -> List[str]:
    """Return every problem with the request, empty when it is valid"""
    errors = []

    if not request.order_id or not request.order_id.strip():
        errors.append("Order ID is required")

    if not request.amount or request.amount <= 0:
        errors.append("Amount must be greater than 0")

    if not request.customer_name or not request.customer_name.strip():
        errors.append("Customer name is required")

    if not request.customer_email or not EMAIL_RE.match(request.customer_email):
        errors.append("Valid customer email is required")

    if not request.customer_phone or not request.customer_phone.strip():
        errors.append("Customer phone is required")

    return errors


class PesapalClient:
    """
    Token-authenticated client for the PesaPal REST API.
    One instance per process so the access token cache is shared.
    """

    def __init__(
        self,
        base_url: str,
        consumer_key: str,
        consumer_secret: str,
        ipn_id: str,
        callback_url: str,
        http_client: Optional[httpx.AsyncClient] = None,
        token_ttl_seconds: int = 50 * 60,
        clock: Callable[[], float] = time.monotonic,
        config: Optional[Settings] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.ipn_id = ipn_id
        self.callback_url = callback_url
        self.token_ttl_seconds = token_ttl_seconds
        self.clock = clock
        self.config = config or default_settings
        self.http = http_client or httpx.AsyncClient(timeout=self.config.pesapal_timeout_seconds)

        self._access_token: Optional[str] = None
        self._token_expires_at: float = 0.0

    @classmethod
    def from_settings(cls, config: Settings, http_client: Optional[httpx.AsyncClient] = None) -> "PesapalClient":
        return cls(
            base_url=config.pesapal_base_url,
            consumer_key=config.pesapal_consumer_key,
            consumer_secret=config.pesapal_consumer_secret,
            ipn_id=config.pesapal_ipn_id,
            callback_url=config.pesapal_callback_url,
            http_client=http_client,
            token_ttl_seconds=config.pesapal_token_ttl_minutes * 60,
            config=config,
        )

    async def aclose(self) -> None:
        await self.http.aclose()

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        headers = {"Accept": "application/json", **kwargs.pop("headers", {})}
        try:
            return await self.http.request(method, f"{self.base_url}{path}", headers=headers, **kwargs)
        except httpx.RequestError as e:
            logger.error("PesaPal unreachable", path=path, error=str(e))
            raise NetworkError("Could not reach the payment provider, please try again") from e

    @staticmethod
    def _json(response: httpx.Response) -> dict:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}

    @staticmethod
    def _error_text(error) -> str:
        if isinstance(error, dict):
            return error.get("message") or error.get("code") or str(error)
        return str(error)

    async def get_access_token(self) -> str:
        """Return the cached token, requesting a new one once it has aged out"""
        if self._access_token and self.clock() < self._token_expires_at:
            return self._access_token

        response = await self._request(
            "POST",
            "/api/Auth/RequestToken",
            json={
                "consumer_key": self.consumer_key,
                "consumer_secret": self.consumer_secret,
            },
        )
        data = self._json(response)

        if response.is_error:
            logger.error("PesaPal token request rejected", status_code=response.status_code)
            raise AuthError(f"Failed to get payment access token: {response.reason_phrase}")

        if data.get("error"):
            logger.error("PesaPal auth error", error=data["error"])
            raise AuthError(f"Payment provider auth error: {self._error_text(data['error'])}")

        token = data.get("token")
        if not token:
            raise AuthError("Payment provider returned no access token")

        self._access_token = token
        # Provider tokens live 60 minutes; refresh early
        self._token_expires_at = self.clock() + self.token_ttl_seconds

        logger.debug("PesaPal token refreshed")
        return token

    def build_order_payload(self, request: PaymentRequest) -> dict:
        first_name, last_name = split_name(request.customer_name)
        return {
            "id": request.order_id,
            "currency": request.currency,
            "amount": request.amount,
            "description": request.description,
            "callback_url": self.callback_url,
            "notification_id": self.ipn_id,
            "billing_address": {
                "email_address": request.customer_email,
                "phone_number": request.customer_phone,
                "country_code": self.config.billing_country_code,
                "first_name": first_name,
                "last_name": last_name,
                "line_1": self.config.billing_line_1,
                "line_2": "",
                "city": self.config.billing_city,
                "state": self.config.billing_state,
                "postal_code": self.config.billing_postal_code,
                "zip_code": self.config.billing_postal_code,
            },
        }

    async def submit_order_request(self, request: PaymentRequest) -> SubmitOrderResponse:
        """Register the payment with the gateway and get the hosted page URL"""
        errors = validate_payment_request(request)
        if errors:
            raise ValidationError(
                f"Payment validation failed: {', '.join(errors)}",
                errors=errors,
            )

        token = await self.get_access_token()

        logger.debug("PesaPal submit order", order_id=request.order_id, amount=request.amount)

        response = await self._request(
            "POST",
            "/api/Transactions/SubmitOrderRequest",
            json=self.build_order_payload(request),
            headers={"Authorization": f"Bearer {token}"},
        )
        data = self._json(response)

        if response.is_error:
            raise GatewayError(
                f"Payment initiation failed: {response.reason_phrase} - {response.text}"
            )

        if data.get("error"):
            raise GatewayError(f"Payment provider error: {self._error_text(data['error'])}")

        if not data.get("order_tracking_id") or not data.get("redirect_url"):
            raise GatewayError("Payment provider response is missing the tracking id or redirect URL")

        return SubmitOrderResponse(
            order_tracking_id=data["order_tracking_id"],
            merchant_reference=data.get("merchant_reference") or request.order_id,
            redirect_url=data["redirect_url"],
        )

    async def get_transaction_status(self, tracking_id: str) -> TransactionStatus:
        """Fetch the current status of one payment attempt"""
        token = await self.get_access_token()

        response = await self._request(
            "GET",
            "/api/Transactions/GetTransactionStatus",
            params={"orderTrackingId": tracking_id},
            headers={"Authorization": f"Bearer {token}"},
        )
        data = self._json(response)

        if response.is_error:
            raise GatewayError(f"Failed to check payment status: {response.reason_phrase}")

        if data.get("error"):
            raise GatewayError(f"Payment status check error: {self._error_text(data['error'])}")

        return TransactionStatus.model_validate(data)
