"""Checkout schemas"""

from typing import Optional
from uuid import UUID
from pydantic import BaseModel


class CheckoutForm(BaseModel):
    """
    Checkout form as submitted by the customer.
    Fields are loosely typed on purpose: validate_checkout_form reports every
    problem with a field-level message instead of a generic 422.
    """
    customer_name: Optional[str] = None
    email: Optional[str] = None
    phone_number: Optional[str] = None
    delivery_type: Optional[str] = "delivery"
    delivery_address: Optional[str] = None
    payment_method: Optional[str] = "online"
    notes: Optional[str] = None
    schedule_order: bool = False
    scheduled_date: Optional[str] = None  # YYYY-MM-DD
    scheduled_time: Optional[str] = None  # HH:MM


class CheckoutRequest(CheckoutForm):
    """Checkout request: the cart to buy plus the form"""
    cart_id: str


class PaymentTracking(BaseModel):
    """What the client keeps to reconcile after the hosted payment page"""
    order_id: UUID
    tracking_id: str
    amount: int
    scheduled: bool = False


class CheckoutResponse(BaseModel):
    """Result of placing an order"""
    order_id: UUID
    status: str  # placed (cash) or redirect (online)
    message: str
    subtotal: int
    delivery_fee: int
    total_amount: int
    tracking_url: str
    redirect_url: Optional[str] = None
    payment_tracking: Optional[PaymentTracking] = None
