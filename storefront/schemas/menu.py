"""Menu schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field

from storefront.models.menu import MenuCategory


class MenuItemCreate(BaseModel):
    """Create menu item request"""
    name: str = Field(..., min_length=1)
    description: str = ""
    image_url: str = ""
    category: MenuCategory = MenuCategory.BURGERS
    price: int = Field(..., ge=0)
    is_available: bool = True
    is_favorite: bool = False
    tags: List[str] = []


class MenuItemUpdate(BaseModel):
    """Update menu item request"""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    image_url: Optional[str] = None
    category: Optional[MenuCategory] = None
    price: Optional[int] = Field(None, ge=0)
    is_available: Optional[bool] = None
    is_favorite: Optional[bool] = None
    tags: Optional[List[str]] = None


class MenuItemResponse(BaseModel):
    """Menu item response"""
    id: UUID
    name: str
    description: Optional[str]
    image_url: Optional[str]
    category: str
    price: int
    is_available: bool
    is_favorite: bool
    tags: List[str] = []
    created_at: Optional[datetime]

    class Config:
        from_attributes = True


class MenuListResponse(BaseModel):
    """Menu listing; source is "fallback" when sample data was served"""
    items: List[MenuItemResponse]
    total: int
    source: str = "live"
