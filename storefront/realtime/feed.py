"""Local views kept in sync by realtime events"""

from typing import Any, Dict, List, Optional


class EntityFeed:
    """
    Entities keyed by id, merged from insert/update events.

    Events are advisory: duplicates and out-of-order arrivals are expected,
    so every merge replaces by id (last write wins) and an update for an
    entity we never saw is appended like an insert.
    """

    def __init__(self, entities: Optional[List[Dict[str, Any]]] = None):
        self._entities: Dict[str, Dict[str, Any]] = {}
        for entity in entities or []:
            self._merge(entity)

    def _merge(self, entity: Dict[str, Any]) -> Dict[str, Any]:
        key = str(entity["id"])
        self._entities[key] = dict(entity)
        return self._entities[key]

    def on_insert(self, entity: Dict[str, Any]) -> Dict[str, Any]:
        return self._merge(entity)

    def on_update(self, entity: Dict[str, Any]) -> Dict[str, Any]:
        return self._merge(entity)

    def get(self, entity_id: Any) -> Optional[Dict[str, Any]]:
        return self._entities.get(str(entity_id))

    def items(self) -> List[Dict[str, Any]]:
        return list(self._entities.values())

    def __len__(self) -> int:
        return len(self._entities)


class MessageFeed(EntityFeed):
    """Chat messages with a derived unread counter for the admin inbox"""

    def _merge(self, entity: Dict[str, Any]) -> Dict[str, Any]:
        previous = self.get(entity["id"])
        # is_read never flips back; a stale unread event must not resurrect it
        if previous and previous.get("is_read") and not entity.get("is_read"):
            entity = {**entity, "is_read": True}
        return super()._merge(entity)

    def items(self) -> List[Dict[str, Any]]:
        return sorted(super().items(), key=lambda m: str(m.get("created_at") or ""))

    @property
    def unread_count(self) -> int:
        return sum(
            1
            for message in self._entities.values()
            if message.get("sender") == "customer" and not message.get("is_read")
        )
