"""Cart state container"""

from dataclasses import dataclass, asdict
from typing import Any, List, Optional
import structlog

logger = structlog.get_logger()


@dataclass
class CartLine:
    """A menu item snapshot with quantity and an optional kitchen note"""
    id: str
    name: str
    price: int
    quantity: int = 1
    category: Optional[str] = None
    image_url: Optional[str] = None
    notes: Optional[str] = None

    @classmethod
    def from_state(cls, data: Any) -> "CartLine":
        """Build a line from persisted state; raises ValueError when malformed"""
        if not isinstance(data, dict):
            raise ValueError("cart line must be an object")

        item_id = data.get("id")
        name = data.get("name")
        price = data.get("price")
        quantity = data.get("quantity")

        if not isinstance(item_id, str) or not item_id:
            raise ValueError("cart line id missing")
        if not isinstance(name, str):
            raise ValueError("cart line name missing")
        if isinstance(price, bool) or not isinstance(price, int) or price < 0:
            raise ValueError("cart line price invalid")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValueError("cart line quantity invalid")

        return cls(
            id=item_id,
            name=name,
            price=price,
            quantity=quantity,
            category=data.get("category"),
            image_url=data.get("image_url"),
            notes=data.get("notes"),
        )


class CartStore:
    """
    Ordered collection of cart lines.

    Pure state; persistence is the job of a CartStorage adapter, which lets
    tests use an in-memory store and production keep carts in Redis.
    """

    def __init__(self, lines: Optional[List[CartLine]] = None):
        self.items: List[CartLine] = list(lines or [])

    def _find(self, item_id: str) -> Optional[CartLine]:
        for line in self.items:
            if line.id == item_id:
                return line
        return None

    def add_item(self, item: Any, notes: Optional[str] = None) -> CartLine:
        """
        Add one unit of a menu item.
        Re-adding an item bumps its quantity; a new non-empty note replaces
        the previous one.
        """
        item_id = str(_get(item, "id"))
        existing = self._find(item_id)

        if existing:
            existing.quantity += 1
            if notes:
                existing.notes = notes
            return existing

        line = CartLine(
            id=item_id,
            name=_get(item, "name"),
            price=int(_get(item, "price")),
            quantity=1,
            category=_get(item, "category", None),
            image_url=_get(item, "image_url", None),
            notes=notes or None,
        )
        self.items.append(line)
        return line

    def remove_item(self, item_id: str) -> None:
        self.items = [line for line in self.items if line.id != str(item_id)]

    def update_quantity(self, item_id: str, quantity: int) -> None:
        if quantity <= 0:
            self.remove_item(item_id)
            return

        line = self._find(str(item_id))
        if line:
            line.quantity = quantity

    def clear_cart(self) -> None:
        self.items = []

    def get_total_price(self) -> int:
        return sum(line.price * line.quantity for line in self.items)

    def get_total_items(self) -> int:
        return sum(line.quantity for line in self.items)

    def is_empty(self) -> bool:
        return not self.items

    def to_state(self) -> dict:
        return {"items": [asdict(line) for line in self.items]}

    @classmethod
    def from_state(cls, state: Any) -> "CartStore":
        """Restore a cart; anything malformed yields an empty cart"""
        if state is None:
            return cls()

        try:
            if not isinstance(state, dict) or not isinstance(state.get("items"), list):
                raise ValueError("cart state must hold a list of items")
            return cls([CartLine.from_state(line) for line in state["items"]])
        except ValueError as e:
            logger.warning("Discarding malformed cart state", error=str(e))
            return cls()


def _get(item: Any, field: str, *default):
    """Read a field from a model instance or a mapping"""
    if isinstance(item, dict):
        if default:
            return item.get(field, default[0])
        return item[field]
    return getattr(item, field, *default)
