"""Chat message schemas"""

from datetime import datetime
from typing import Optional, List
from uuid import UUID
from pydantic import BaseModel, Field


class CustomerMessageCreate(BaseModel):
    """Message from the storefront chat widget"""
    message: str = Field(..., min_length=1)
    customer_name: Optional[str] = None
    customer_email: Optional[str] = None
    customer_phone: Optional[str] = None


class AdminMessageCreate(BaseModel):
    """Reply from the admin panel"""
    message: str = Field(..., min_length=1)
    reply_to: Optional[UUID] = None


class MessageResponse(BaseModel):
    id: UUID
    sender: str
    message: str
    customer_name: Optional[str]
    customer_email: Optional[str]
    customer_phone: Optional[str]
    is_read: bool
    reply_to: Optional[UUID]
    created_at: datetime

    class Config:
        from_attributes = True


class MessageListResponse(BaseModel):
    items: List[MessageResponse]
    total: int
    unread_count: int = 0
    source: str = "live"


class SendMessageResponse(BaseModel):
    """Stored customer message and the automatic reply, if one was sent"""
    message: MessageResponse
    auto_reply: Optional[MessageResponse] = None


class UnreadCountResponse(BaseModel):
    count: int
