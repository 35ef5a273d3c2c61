"""Cart persistence adapters"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional
import copy
import json

import redis.asyncio as redis
import structlog

from storefront.cart.store import CartStore

logger = structlog.get_logger()


class CartStorage(ABC):
    """Key/value persistence for cart state and pending payment records"""

    @abstractmethod
    async def load(self, key: str) -> Optional[Any]:
        """Return the stored state, or None when nothing is stored"""
        pass

    @abstractmethod
    async def save(self, key: str, state: Any) -> None:
        pass

    @abstractmethod
    async def delete(self, key: str) -> None:
        pass

    async def load_cart(self, cart_id: str) -> CartStore:
        return CartStore.from_state(await self.load(cart_key(cart_id)))

    async def save_cart(self, cart_id: str, cart: CartStore) -> None:
        await self.save(cart_key(cart_id), cart.to_state())


def cart_key(cart_id: str) -> str:
    return f"cart:{cart_id}"


def payment_tracking_key(order_id: str) -> str:
    return f"payment-tracking:{order_id}"


class InMemoryCartStorage(CartStorage):
    """Process-local storage, used by tests and single-process development"""

    def __init__(self):
        self._data: Dict[str, Any] = {}

    async def load(self, key: str) -> Optional[Any]:
        return copy.deepcopy(self._data.get(key))

    async def save(self, key: str, state: Any) -> None:
        self._data[key] = copy.deepcopy(state)

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)


class RedisCartStorage(CartStorage):
    """JSON documents in Redis, refreshed to a sliding TTL on every save"""

    def __init__(self, client: redis.Redis, ttl_seconds: int, prefix: str = "manziz"):
        self.client = client
        self.ttl_seconds = ttl_seconds
        self.prefix = prefix

    def _key(self, key: str) -> str:
        return f"{self.prefix}:{key}"

    async def load(self, key: str) -> Optional[Any]:
        raw = await self.client.get(self._key(key))
        if raw is None:
            return None

        try:
            return json.loads(raw)
        except (TypeError, ValueError) as e:
            # Treated as an empty cart by CartStore.from_state
            logger.warning("Unreadable cart state in Redis", key=key, error=str(e))
            return {}

    async def save(self, key: str, state: Any) -> None:
        await self.client.set(self._key(key), json.dumps(state), ex=self.ttl_seconds)

    async def delete(self, key: str) -> None:
        await self.client.delete(self._key(key))
