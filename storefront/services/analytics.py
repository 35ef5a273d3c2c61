"""Sales analytics for the admin dashboard"""

from collections import Counter, defaultdict
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from storefront.database import utcnow
from storefront.errors import ValidationError
from storefront.models.order import Order, OrderItem
from storefront.schemas.analytics import (
    AnalyticsResponse,
    DailyRevenue,
    StatusCount,
    TopSellingItem,
)

TIME_RANGES = {"7days": 7, "30days": 30, "90days": 90}


async def build_analytics(
    db: AsyncSession,
    time_range: str = "7days",
    now: Optional[datetime] = None,
) -> AnalyticsResponse:
    if time_range not in TIME_RANGES:
        raise ValidationError(
            f"Unknown time range: {time_range}",
            fields={"time_range": "Choose 7days, 30days or 90days"},
        )

    now = now or utcnow()
    since = now - timedelta(days=TIME_RANGES[time_range])

    result = await db.execute(
        select(Order)
        .where(Order.created_at >= since)
        .options(selectinload(Order.items).selectinload(OrderItem.menu_item))
        .order_by(Order.created_at.asc())
        .execution_options(populate_existing=True)
    )
    orders = list(result.scalars().all())

    total_revenue = sum(order.total_amount for order in orders)
    total_orders = len(orders)
    average = total_revenue / total_orders if total_orders else 0.0

    status_counts = Counter(order.order_status for order in orders)

    # Last 7 days regardless of the selected range
    daily = defaultdict(int)
    for order in orders:
        daily[order.created_at.date()] += order.total_amount
    today = now.date()
    revenue_by_day = []
    for offset in range(6, -1, -1):
        day = today - timedelta(days=offset)
        revenue_by_day.append(DailyRevenue(
            date=day.isoformat(),
            weekday=day.strftime("%a"),
            revenue=daily.get(day, 0),
        ))

    sales = defaultdict(lambda: {"sales": 0, "revenue": 0})
    for order in orders:
        for item in order.items:
            name = item.menu_item.name if item.menu_item else "Unknown Item"
            sales[name]["sales"] += item.quantity
            sales[name]["revenue"] += item.quantity * item.price_at_time
    top = sorted(sales.items(), key=lambda entry: entry[1]["sales"], reverse=True)[:5]

    return AnalyticsResponse(
        time_range=time_range,
        total_revenue=total_revenue,
        total_orders=total_orders,
        average_order_value=round(average, 2),
        orders_by_status=[
            StatusCount(status=status, count=count)
            for status, count in sorted(status_counts.items())
        ],
        revenue_by_day=revenue_by_day,
        top_selling_items=[
            TopSellingItem(name=name, sales=data["sales"], revenue=data["revenue"])
            for name, data in top
        ],
    )
