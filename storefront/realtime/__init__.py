"""Realtime change events"""

from storefront.realtime.hub import RealtimeEvent, RealtimeHub, Subscription, get_hub
from storefront.realtime.feed import EntityFeed, MessageFeed

__all__ = [
    "RealtimeEvent",
    "RealtimeHub",
    "Subscription",
    "get_hub",
    "EntityFeed",
    "MessageFeed",
]
