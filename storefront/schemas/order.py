"""Order schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel

from storefront.models.order import OrderStatus
from storefront.schemas.menu import MenuItemResponse


class OrderStatusUpdate(BaseModel):
    """Admin status change; any known status is accepted"""
    order_status: str


class OrderItemResponse(BaseModel):
    """Order line item in response"""
    id: UUID
    menu_item_id: UUID
    quantity: int
    notes: Optional[str]
    price_at_time: int
    menu_item: Optional[MenuItemResponse] = None

    class Config:
        from_attributes = True


class OrderResponse(BaseModel):
    """Order response"""
    id: UUID
    user_id: Optional[UUID]
    customer_name: str
    phone_number: str
    email: Optional[str]
    delivery_type: str
    delivery_address: Optional[str]
    scheduled_for: Optional[datetime]
    notes: Optional[str]
    subtotal: int
    delivery_fee: int
    total_amount: int
    order_status: str
    payment_method: str
    payment_status: str
    items: List[OrderItemResponse] = []
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class OrderListResponse(BaseModel):
    """Admin order list"""
    items: List[OrderResponse]
    total: int


class ProgressStep(BaseModel):
    key: OrderStatus
    label: str
    completed: bool
    current: bool


class OrderProgressResponse(BaseModel):
    """Linear progress bar plus the off-track cancelled indicator"""
    steps: List[ProgressStep]
    current_index: int
    is_cancelled: bool
    status_label: str


class OrderTrackingResponse(BaseModel):
    """Customer-facing tracking view"""
    order: OrderResponse
    progress: OrderProgressResponse
    estimated_time: str
