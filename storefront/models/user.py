"""User model for customer accounts and the admin panel"""

import uuid
from sqlalchemy import Column, String, Boolean, DateTime, Uuid

from storefront.database import Base, utcnow


class User(Base):
    """Customers and restaurant admins"""
    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)

    # Authentication
    email = Column(String(255), unique=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)

    # Profile
    full_name = Column(String(255))
    phone_number = Column(String(30))

    # Status
    is_admin = Column(Boolean, default=False)
    is_active = Column(Boolean, default=True)

    # Tokens
    refresh_token = Column(String(500))

    # Timestamps
    last_login = Column(DateTime)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
