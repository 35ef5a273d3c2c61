"""In-process publish/subscribe hub for change events"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List
import structlog

logger = structlog.get_logger()

# Channel names
MESSAGES = "messages"
MESSAGE_UPDATES = "message_updates"
ORDERS = "orders"
AUTH = "auth"

# Event types
INSERT = "INSERT"
UPDATE = "UPDATE"
SIGNED_IN = "SIGNED_IN"
SIGNED_OUT = "SIGNED_OUT"
TOKEN_REFRESHED = "TOKEN_REFRESHED"


@dataclass
class RealtimeEvent:
    """A change notification; record is the JSON-ready row after the change"""
    channel: str
    event: str
    table: str
    record: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "channel": self.channel,
            "event": self.event,
            "table": self.table,
            "record": self.record,
        }


Handler = Callable[[RealtimeEvent], None]


class Subscription:
    """Handle returned by RealtimeHub.subscribe"""

    def __init__(self, hub: "RealtimeHub", channel: str, handler: Handler):
        self.hub = hub
        self.channel = channel
        self.handler = handler
        self.active = True

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self.hub._remove(self)


class RealtimeHub:
    """
    Named channels with synchronous fan-out.
    Delivery is FIFO within a channel; nothing is promised across channels.
    """

    def __init__(self):
        self._subscriptions: Dict[str, List[Subscription]] = {}

    def subscribe(self, channel: str, handler: Handler) -> Subscription:
        subscription = Subscription(self, channel, handler)
        self._subscriptions.setdefault(channel, []).append(subscription)
        logger.debug("Realtime subscribe", channel=channel)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        subscriptions = self._subscriptions.get(subscription.channel, [])
        if subscription in subscriptions:
            subscriptions.remove(subscription)
        logger.debug("Realtime unsubscribe", channel=subscription.channel)

    def subscriber_count(self, channel: str) -> int:
        return len(self._subscriptions.get(channel, []))

    def publish(self, channel: str, event: str, table: str, record: Dict[str, Any]) -> RealtimeEvent:
        change = RealtimeEvent(channel=channel, event=event, table=table, record=record)

        for subscription in list(self._subscriptions.get(channel, [])):
            try:
                subscription.handler(change)
            except Exception as e:
                logger.error(
                    "Realtime handler failed",
                    channel=channel,
                    event=event,
                    error=str(e),
                )

        return change


_hub = RealtimeHub()


def get_hub() -> RealtimeHub:
    """FastAPI dependency returning the process-wide hub"""
    return _hub
