"""Shopping cart state and persistence"""

from storefront.cart.store import CartLine, CartStore
from storefront.cart.storage import (
    CartStorage,
    InMemoryCartStorage,
    RedisCartStorage,
    cart_key,
    payment_tracking_key,
)

__all__ = [
    "CartLine",
    "CartStore",
    "CartStorage",
    "InMemoryCartStorage",
    "RedisCartStorage",
    "cart_key",
    "payment_tracking_key",
]
