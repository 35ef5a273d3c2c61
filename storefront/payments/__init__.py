"""PesaPal payments"""

from storefront.payments.pesapal import (
    PaymentRequest,
    PesapalClient,
    SubmitOrderResponse,
    split_name,
    validate_payment_request,
)
from storefront.payments.service import PaymentInitiation, PaymentOutcome, PaymentService

__all__ = [
    "PaymentRequest",
    "PesapalClient",
    "SubmitOrderResponse",
    "split_name",
    "validate_payment_request",
    "PaymentInitiation",
    "PaymentOutcome",
    "PaymentService",
]
