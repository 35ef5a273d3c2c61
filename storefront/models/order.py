"""Order models"""

import enum
import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Text, Integer, Uuid
from sqlalchemy.orm import relationship

from storefront.database import Base, utcnow


class OrderStatus(str, enum.Enum):
    """Order lifecycle, in fulfilment order; cancelled is a side branch"""
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(str, enum.Enum):
    """Order payment state; completed and failed are terminal"""
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class DeliveryType(str, enum.Enum):
    DELIVERY = "delivery"
    PICKUP = "pickup"


class PaymentMethod(str, enum.Enum):
    ONLINE = "online"
    CASH = "cash"


class Order(Base):
    """Customer orders"""
    __tablename__ = "orders"

    # Generated by the checkout flow before the row is written
    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid, ForeignKey("users.id"))

    # Customer information
    customer_name = Column(String(255), nullable=False)
    phone_number = Column(String(30), nullable=False)
    email = Column(String(255))

    # Fulfilment
    delivery_type = Column(String(20), nullable=False, default=DeliveryType.DELIVERY.value)
    delivery_address = Column(Text)
    scheduled_for = Column(DateTime)  # Restaurant local time
    notes = Column(Text)

    # Pricing (whole UGX)
    subtotal = Column(Integer, nullable=False, default=0)
    delivery_fee = Column(Integer, nullable=False, default=0)
    total_amount = Column(Integer, nullable=False, default=0)

    # Status
    order_status = Column(String(20), nullable=False, default=OrderStatus.PENDING.value)
    payment_method = Column(String(20), nullable=False, default=PaymentMethod.CASH.value)
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)

    # Metadata
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    items = relationship(
        "OrderItem",
        back_populates="order",
        cascade="all, delete-orphan",
        order_by="OrderItem.created_at",
    )
    payments = relationship("PaymentRecord", back_populates="order")


class OrderItem(Base):
    """Line items, price-snapshotted when the order is placed"""
    __tablename__ = "order_items"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id = Column(Uuid, ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    menu_item_id = Column(Uuid, ForeignKey("menu_items.id"), nullable=False)
    quantity = Column(Integer, nullable=False)
    notes = Column(Text)
    price_at_time = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=utcnow)

    # Relationships
    order = relationship("Order", back_populates="items")
    menu_item = relationship("MenuItem", lazy="joined")
