"""Payment attempt model"""

import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, JSON, Integer, Uuid
from sqlalchemy.orm import relationship

from storefront.database import Base, utcnow


class PaymentRecord(Base):
    """One payment attempt at the gateway"""
    __tablename__ = "payments"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    order_id = Column(Uuid, ForeignKey("orders.id"), nullable=False)
    tracking_id = Column(String(100), unique=True, nullable=False)  # Gateway OrderTrackingId
    provider = Column(String(50), nullable=False, default="pesapal")

    # "initiated" until the first callback, then the gateway's description
    status = Column(String(50), nullable=False, default="initiated")
    amount = Column(Integer)
    confirmation_code = Column(String(100))
    payment_method = Column(String(100))
    payment_data = Column(JSON)

    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    # Relationships
    order = relationship("Order", back_populates="payments")
