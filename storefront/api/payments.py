"""Payment callback and status endpoints"""

from fastapi import APIRouter, Depends, Query

from storefront.api.deps import get_cart_storage, get_payment_service
from storefront.cart.storage import CartStorage, payment_tracking_key
from storefront.payments.service import PaymentService
from storefront.schemas.order import OrderResponse
from storefront.schemas.payment import PaymentCallbackResponse, TransactionStatus

router = APIRouter()


@router.get("/payment/callback", response_model=PaymentCallbackResponse)
async def payment_callback(
    order_tracking_id: str = Query(..., alias="OrderTrackingId", min_length=1),
    merchant_reference: str = Query(None, alias="OrderMerchantReference"),
    payments: PaymentService = Depends(get_payment_service),
    storage: CartStorage = Depends(get_cart_storage),
):
    """Where PesaPal sends the customer back; safe to reload"""
    outcome = await payments.handle_payment_callback(order_tracking_id, merchant_reference)

    if outcome.status == "success":
        await storage.delete(payment_tracking_key(str(outcome.order.id)))

    return PaymentCallbackResponse(
        status=outcome.status,
        message=outcome.message,
        retry_after_seconds=outcome.retry_after_seconds,
        tracking_url=f"/orders/track/{outcome.order.id}",
        order=OrderResponse.model_validate(outcome.order),
        payment=outcome.payment,
    )


@router.get("/payments/{tracking_id}/status", response_model=TransactionStatus)
async def payment_status(
    tracking_id: str,
    payments: PaymentService = Depends(get_payment_service),
):
    """Raw gateway status for a payment attempt"""
    return await payments.check_payment_status(tracking_id)
