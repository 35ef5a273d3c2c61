"""Reservation model"""

import uuid
from sqlalchemy import Column, String, Integer, DateTime, Text, Uuid

from storefront.database import Base, utcnow


class Reservation(Base):
    """Table reservations"""
    __tablename__ = "reservations"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Customer information
    name = Column(String(255), nullable=False)
    phone_number = Column(String(30), nullable=False)

    # Reservation details
    reservation_time = Column(DateTime, nullable=False)  # Naive UTC
    guests = Column(Integer, nullable=False)
    special_request = Column(Text)

    created_at = Column(DateTime, default=utcnow)
