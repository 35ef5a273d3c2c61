"""Cart schemas"""

from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field


class CartItemAdd(BaseModel):
    """Add a menu item to the cart"""
    menu_item_id: UUID
    notes: Optional[str] = None


class CartQuantityUpdate(BaseModel):
    """Set a line quantity; zero or less removes the line"""
    quantity: int


class CartLineResponse(BaseModel):
    id: str
    name: str
    price: int
    category: Optional[str] = None
    image_url: Optional[str] = None
    quantity: int = Field(..., ge=1)
    notes: Optional[str] = None


class CartResponse(BaseModel):
    """Cart contents with derived totals"""
    cart_id: str
    items: List[CartLineResponse]
    total_items: int
    total_price: int
