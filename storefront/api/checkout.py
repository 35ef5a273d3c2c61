"""Checkout API endpoint"""

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.auth import get_current_user_optional
from storefront.api.deps import get_cart_storage, get_payment_service
from storefront.cart.storage import CartStorage
from storefront.database import get_db
from storefront.models.user import User
from storefront.payments.service import PaymentService
from storefront.schemas.checkout import CheckoutRequest, CheckoutResponse
from storefront.services.checkout import place_order

router = APIRouter()


@router.post("", response_model=CheckoutResponse, status_code=201)
async def checkout(
    request: CheckoutRequest,
    db: AsyncSession = Depends(get_db),
    storage: CartStorage = Depends(get_cart_storage),
    payments: PaymentService = Depends(get_payment_service),
    current_user: Optional[User] = Depends(get_current_user_optional),
):
    """Place an order from a cart; online payment returns the PesaPal redirect"""
    cart = await storage.load_cart(request.cart_id)

    result = await place_order(
        db,
        request.cart_id,
        cart,
        request,
        storage,
        payments=payments,
        user_id=current_user.id if current_user else None,
    )

    return CheckoutResponse(
        order_id=result.order_id,
        status=result.status,
        message=result.message,
        subtotal=result.totals.subtotal,
        delivery_fee=result.totals.delivery_fee,
        total_amount=result.totals.total,
        tracking_url=result.tracking_url,
        redirect_url=result.redirect_url,
        payment_tracking=result.payment_tracking,
    )
