"""Support chat message model"""

import enum
import uuid
from sqlalchemy import Column, String, Boolean, DateTime, ForeignKey, Text, Uuid

from storefront.database import Base, utcnow


class MessageSender(str, enum.Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"


class Message(Base):
    """Chat messages between customers and the restaurant"""
    __tablename__ = "messages"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    sender = Column(String(20), nullable=False)
    message = Column(Text, nullable=False)

    # Only set on customer messages
    customer_name = Column(String(255))
    customer_email = Column(String(255))
    customer_phone = Column(String(30))

    is_read = Column(Boolean, nullable=False, default=False)
    reply_to = Column(Uuid, ForeignKey("messages.id"))
    created_at = Column(DateTime, default=utcnow)
