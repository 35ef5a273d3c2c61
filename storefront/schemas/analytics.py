"""Analytics schemas"""

from typing import List
from pydantic import BaseModel


class StatusCount(BaseModel):
    status: str
    count: int


class DailyRevenue(BaseModel):
    date: str  # ISO date
    weekday: str
    revenue: int


class TopSellingItem(BaseModel):
    name: str
    sales: int
    revenue: int


class AnalyticsResponse(BaseModel):
    """Sales summary for the admin dashboard"""
    time_range: str
    total_revenue: int
    total_orders: int
    average_order_value: float
    orders_by_status: List[StatusCount]
    revenue_by_day: List[DailyRevenue]
    top_selling_items: List[TopSellingItem]
