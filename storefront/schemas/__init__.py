"""Pydantic schemas for request/response validation"""

from storefront.schemas.auth import (
    Token,
    LoginRequest,
    RefreshRequest,
    UserCreate,
    UserUpdate,
    UserResponse,
)
from storefront.schemas.menu import (
    MenuItemCreate,
    MenuItemUpdate,
    MenuItemResponse,
    MenuListResponse,
)
from storefront.schemas.cart import (
    CartItemAdd,
    CartQuantityUpdate,
    CartLineResponse,
    CartResponse,
)
from storefront.schemas.checkout import (
    CheckoutForm,
    CheckoutRequest,
    CheckoutResponse,
    PaymentTracking,
)
from storefront.schemas.order import (
    OrderStatusUpdate,
    OrderItemResponse,
    OrderResponse,
    OrderListResponse,
    OrderProgressResponse,
    OrderTrackingResponse,
)
from storefront.schemas.payment import (
    TransactionStatus,
    PaymentRecordResponse,
    PaymentCallbackResponse,
)
from storefront.schemas.reservation import (
    ReservationCreate,
    ReservationResponse,
    ReservationListResponse,
)
from storefront.schemas.message import (
    CustomerMessageCreate,
    AdminMessageCreate,
    MessageResponse,
    MessageListResponse,
    SendMessageResponse,
    UnreadCountResponse,
)
from storefront.schemas.analytics import AnalyticsResponse

__all__ = [
    "Token",
    "LoginRequest",
    "RefreshRequest",
    "UserCreate",
    "UserUpdate",
    "UserResponse",
    "MenuItemCreate",
    "MenuItemUpdate",
    "MenuItemResponse",
    "MenuListResponse",
    "CartItemAdd",
    "CartQuantityUpdate",
    "CartLineResponse",
    "CartResponse",
    "CheckoutForm",
    "CheckoutRequest",
    "CheckoutResponse",
    "PaymentTracking",
    "OrderStatusUpdate",
    "OrderItemResponse",
    "OrderResponse",
    "OrderListResponse",
    "OrderProgressResponse",
    "OrderTrackingResponse",
    "TransactionStatus",
    "PaymentRecordResponse",
    "PaymentCallbackResponse",
    "ReservationCreate",
    "ReservationResponse",
    "ReservationListResponse",
    "CustomerMessageCreate",
    "AdminMessageCreate",
    "MessageResponse",
    "MessageListResponse",
    "SendMessageResponse",
    "UnreadCountResponse",
    "AnalyticsResponse",
]
