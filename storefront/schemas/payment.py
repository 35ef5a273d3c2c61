"""Payment schemas"""

from datetime import datetime
from typing import Optional
from uuid import UUID
from pydantic import BaseModel, ConfigDict

from storefront.schemas.order import OrderResponse


class TransactionStatus(BaseModel):
    """GetTransactionStatus payload from the gateway"""
    model_config = ConfigDict(extra="allow")

    status_code: Optional[int] = None
    payment_status_description: Optional[str] = None
    confirmation_code: Optional[str] = None
    payment_method: Optional[str] = None
    amount: Optional[float] = None
    merchant_reference: Optional[str] = None
    currency: Optional[str] = None
    message: Optional[str] = None
    description: Optional[str] = None
    payment_account: Optional[str] = None
    created_date: Optional[str] = None
    payment_status_code: Optional[str] = None


class PaymentRecordResponse(BaseModel):
    id: UUID
    order_id: UUID
    tracking_id: str
    provider: str
    status: str
    amount: Optional[int]
    confirmation_code: Optional[str]
    payment_method: Optional[str]
    created_at: datetime
    updated_at: Optional[datetime]

    class Config:
        from_attributes = True


class PaymentCallbackResponse(BaseModel):
    """Outcome of returning from the hosted payment page"""
    status: str  # success, failed, pending
    message: str
    retry_after_seconds: Optional[int] = None
    tracking_url: Optional[str] = None
    order: Optional[OrderResponse] = None
    payment: Optional[TransactionStatus] = None
