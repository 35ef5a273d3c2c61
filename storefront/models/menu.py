"""Menu-related models"""

import enum
import uuid
from sqlalchemy import Column, String, Integer, Boolean, DateTime, JSON, Text, Uuid

from storefront.database import Base, utcnow


class MenuCategory(str, enum.Enum):
    """Menu sections"""
    BURGERS = "burgers"
    CHICKEN = "chicken"
    SIDES = "sides"
    DRINKS = "drinks"
    DESSERTS = "desserts"


class MenuItem(Base):
    """Menu items"""
    __tablename__ = "menu_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False)
    description = Column(Text, default="")
    image_url = Column(String(500), default="")
    category = Column(String(50), nullable=False, default=MenuCategory.BURGERS.value)
    price = Column(Integer, nullable=False)  # Whole UGX, no minor unit
    is_available = Column(Boolean, nullable=False, default=True)
    is_favorite = Column(Boolean, nullable=False, default=False)  # Homepage highlight
    tags = Column(JSON, default=list)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
