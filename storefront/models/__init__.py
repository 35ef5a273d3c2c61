"""Database models"""

from storefront.models.menu import MenuItem, MenuCategory
from storefront.models.order import (
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    DeliveryType,
    PaymentMethod,
)
from storefront.models.reservation import Reservation
from storefront.models.message import Message, MessageSender
from storefront.models.payment import PaymentRecord
from storefront.models.user import User

__all__ = [
    "MenuItem",
    "MenuCategory",
    "Order",
    "OrderItem",
    "OrderStatus",
    "PaymentStatus",
    "DeliveryType",
    "PaymentMethod",
    "Reservation",
    "Message",
    "MessageSender",
    "PaymentRecord",
    "User",
]
