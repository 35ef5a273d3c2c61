"""Order lifecycle: progress display, transitions, admin status changes"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union
from uuid import UUID

from fastapi.encoders import jsonable_encoder
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from storefront.errors import NotFoundError, ValidationError
from storefront.models.order import DeliveryType, Order, OrderItem, OrderStatus
from storefront.realtime.hub import ORDERS, UPDATE, RealtimeHub

logger = structlog.get_logger()

ORDER_STATUS_FLOW = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.READY,
    OrderStatus.DELIVERED,
]

STATUS_LABELS = {
    OrderStatus.PENDING: "Order Received",
    OrderStatus.CONFIRMED: "Order Confirmed",
    OrderStatus.PREPARING: "Preparing",
    OrderStatus.READY: "Ready",
    OrderStatus.DELIVERED: "Delivered",
    OrderStatus.CANCELLED: "Cancelled",
}


@dataclass
class ProgressStep:
    key: OrderStatus
    label: str
    completed: bool
    current: bool


@dataclass
class OrderProgress:
    steps: List[ProgressStep] = field(default_factory=list)
    current_index: int = -1
    is_cancelled: bool = False
    status_label: str = STATUS_LABELS[OrderStatus.CANCELLED]


def parse_status(value: Union[str, OrderStatus, None]) -> Optional[OrderStatus]:
    """Known status or None"""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def build_progress(status: Union[str, OrderStatus, None]) -> OrderProgress:
    """
    Progress bar for the tracking page.

    Cancelled and unrecognised values render off-track: nothing filled,
    current_index -1.
    """
    current = parse_status(status)
    if current is None or current == OrderStatus.CANCELLED:
        steps = [
            ProgressStep(key=s, label=STATUS_LABELS[s], completed=False, current=False)
            for s in ORDER_STATUS_FLOW
        ]
        return OrderProgress(steps=steps, current_index=-1, is_cancelled=True)

    index = ORDER_STATUS_FLOW.index(current)
    steps = [
        ProgressStep(key=s, label=STATUS_LABELS[s], completed=i <= index, current=i == index)
        for i, s in enumerate(ORDER_STATUS_FLOW)
    ]
    return OrderProgress(
        steps=steps,
        current_index=index,
        is_cancelled=False,
        status_label=STATUS_LABELS[current],
    )


def can_transition(current: Union[str, OrderStatus], target: Union[str, OrderStatus]) -> bool:
    """Whether a move follows the normal lifecycle (forward, or cancel before delivery)"""
    current_status = parse_status(current)
    target_status = parse_status(target)
    if current_status is None or target_status is None:
        return False

    if target_status == OrderStatus.CANCELLED:
        return current_status not in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)

    if current_status == OrderStatus.CANCELLED:
        return False

    return ORDER_STATUS_FLOW.index(target_status) > ORDER_STATUS_FLOW.index(current_status)


def next_status(current: Union[str, OrderStatus, None]) -> Optional[OrderStatus]:
    status = parse_status(current)
    if status is None or status == OrderStatus.CANCELLED:
        return None

    index = ORDER_STATUS_FLOW.index(status)
    if index + 1 >= len(ORDER_STATUS_FLOW):
        return None
    return ORDER_STATUS_FLOW[index + 1]


def estimated_time(order: Order) -> str:
    if order.scheduled_for:
        return "At scheduled time"
    if order.delivery_type == DeliveryType.DELIVERY.value:
        return "30-45 minutes"
    return "15-20 minutes"


def parse_order_id(order_id: Union[str, UUID]) -> UUID:
    """Malformed ids are indistinguishable from unknown ones"""
    if isinstance(order_id, UUID):
        return order_id
    try:
        return UUID(str(order_id))
    except ValueError:
        raise NotFoundError("Order not found")


async def load_order(db: AsyncSession, order_id: Union[str, UUID]) -> Order:
    """Order with its items and their menu items, or NotFoundError"""
    result = await db.execute(
        select(Order)
        .where(Order.id == parse_order_id(order_id))
        .options(selectinload(Order.items).selectinload(OrderItem.menu_item))
        .execution_options(populate_existing=True)
    )
    order = result.scalar_one_or_none()
    if not order:
        raise NotFoundError("Order not found")
    return order


def order_record(order: Order) -> Dict[str, Any]:
    """JSON-ready row for realtime events"""
    return jsonable_encoder(
        {column.name: getattr(order, column.name) for column in Order.__table__.columns}
    )


def publish_order_update(hub: Optional[RealtimeHub], order: Order) -> None:
    if hub is not None:
        hub.publish(ORDERS, UPDATE, "orders", order_record(order))


async def set_order_status(
    db: AsyncSession,
    order_id: Union[str, UUID],
    target: Union[str, OrderStatus],
    hub: Optional[RealtimeHub] = None,
) -> Order:
    """Admin status change. Any known status is accepted; jumps are logged as overrides."""
    target_status = parse_status(target)
    if target_status is None:
        raise ValidationError(
            f"Unknown order status: {target}",
            fields={"order_status": f"Unknown order status: {target}"},
        )

    order = await load_order(db, order_id)
    previous = order.order_status

    if previous == target_status.value:
        return order

    if not can_transition(previous, target_status):
        logger.warning(
            "Order status override",
            order_id=str(order.id),
            from_status=previous,
            to_status=target_status.value,
        )

    order.order_status = target_status.value
    await db.commit()
    order = await load_order(db, order.id)

    logger.info(
        "Order status updated",
        order_id=str(order.id),
        from_status=previous,
        to_status=target_status.value,
    )
    publish_order_update(hub, order)
    return order


async def advance_order(
    db: AsyncSession,
    order_id: Union[str, UUID],
    hub: Optional[RealtimeHub] = None,
) -> Order:
    """Move an order one step along the flow"""
    order = await load_order(db, order_id)
    target = next_status(order.order_status)
    if target is None:
        raise ValidationError(
            f"Order cannot advance from {order.order_status}",
            fields={"order_status": f"Order cannot advance from {order.order_status}"},
        )
    return await set_order_status(db, order.id, target, hub=hub)
