"""Order tracking and admin order management endpoints"""

from dataclasses import asdict
from typing import Optional
from uuid import UUID
import asyncio

from fastapi import APIRouter, Depends, WebSocket
from sqlalchemy import String, cast, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
import structlog

from storefront.api.auth import require_admin
from storefront.database import get_db
from storefront.errors import NotFoundError
from storefront.models.order import Order, OrderItem, OrderStatus
from storefront.models.user import User
from storefront.realtime.hub import ORDERS, RealtimeEvent, RealtimeHub, get_hub
from storefront.realtime.stream import forward_events
from storefront.schemas.order import (
    OrderListResponse,
    OrderProgressResponse,
    OrderResponse,
    OrderStatusUpdate,
    OrderTrackingResponse,
)
from storefront.services.order_status import (
    advance_order,
    build_progress,
    estimated_time,
    load_order,
    parse_order_id,
    set_order_status,
)

logger = structlog.get_logger()

router = APIRouter()
admin_router = APIRouter()


def tracking_response(order: Order) -> OrderTrackingResponse:
    progress = build_progress(order.order_status)
    return OrderTrackingResponse(
        order=OrderResponse.model_validate(order),
        progress=OrderProgressResponse(**asdict(progress)),
        estimated_time=estimated_time(order),
    )


@router.get("/track/{order_id}", response_model=OrderTrackingResponse)
async def track_order(
    order_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Public order tracking by order id"""
    return tracking_response(await load_order(db, order_id))


@router.websocket("/track/{order_id}/stream")
async def track_order_stream(
    websocket: WebSocket,
    order_id: str,
    hub: RealtimeHub = Depends(get_hub),
):
    """Forward status changes of one order"""
    try:
        wanted = str(parse_order_id(order_id))
    except NotFoundError:
        await websocket.close(code=4404)
        return

    await websocket.accept()
    queue: asyncio.Queue = asyncio.Queue()

    def forward(event: RealtimeEvent) -> None:
        if event.record.get("id") == wanted:
            queue.put_nowait(event.to_dict())

    subscription = hub.subscribe(ORDERS, forward)
    try:
        await forward_events(websocket, queue)
    finally:
        subscription.unsubscribe()
        logger.debug("Order stream closed", order_id=wanted)


@admin_router.get("", response_model=OrderListResponse)
async def list_orders(
    status: Optional[OrderStatus] = None,
    search: Optional[str] = None,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """All orders with items, newest first"""
    query = select(Order).options(selectinload(Order.items).selectinload(OrderItem.menu_item))

    if status:
        query = query.where(Order.order_status == status.value)

    if search:
        pattern = f"%{search}%"
        query = query.where(or_(
            Order.customer_name.ilike(pattern),
            Order.phone_number.ilike(pattern),
            cast(Order.id, String).ilike(pattern),
        ))

    result = await db.execute(
        query.order_by(Order.created_at.desc()).execution_options(populate_existing=True)
    )
    orders = result.scalars().all()

    return OrderListResponse(
        items=[OrderResponse.model_validate(order) for order in orders],
        total=len(orders),
    )


@admin_router.get("/{order_id}", response_model=OrderTrackingResponse)
async def get_order(
    order_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return tracking_response(await load_order(db, order_id))


@admin_router.put("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(
    order_id: UUID,
    data: OrderStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
):
    """Set any known status"""
    return await set_order_status(db, order_id, data.order_status, hub=hub)


@admin_router.post("/{order_id}/advance", response_model=OrderResponse)
async def advance_order_status(
    order_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
):
    """Move to the next step of the flow"""
    return await advance_order(db, order_id, hub=hub)
