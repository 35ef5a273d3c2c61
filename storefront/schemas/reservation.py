"""Reservation schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field


class ReservationCreate(BaseModel):
    """Create reservation request"""
    name: str = Field(..., min_length=1)
    phone_number: str = Field(..., min_length=1)
    reservation_time: datetime
    guests: int = Field(..., ge=1)
    special_request: Optional[str] = None


class ReservationResponse(BaseModel):
    """Reservation response"""
    id: UUID
    name: str
    phone_number: str
    reservation_time: datetime
    guests: int
    special_request: Optional[str]
    created_at: datetime
    timing: Optional[str] = None  # past, soon, today, upcoming

    class Config:
        from_attributes = True


class ReservationListResponse(BaseModel):
    """Admin reservation list"""
    items: List[ReservationResponse]
    total: int
