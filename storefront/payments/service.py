"""Payment initiation and callback reconciliation"""

from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from storefront.config import settings
from storefront.errors import NotFoundError, ValidationError
from storefront.models.order import Order, OrderStatus, PaymentStatus
from storefront.models.payment import PaymentRecord
from storefront.payments.pesapal import (
    STATUS_COMPLETED,
    STATUS_FAILED,
    PaymentRequest,
    PesapalClient,
)
from storefront.realtime.hub import RealtimeHub
from storefront.schemas.payment import TransactionStatus
from storefront.services.order_status import load_order, parse_order_id, publish_order_update

logger = structlog.get_logger()

TERMINAL_PAYMENT_STATUSES = {PaymentStatus.COMPLETED.value, PaymentStatus.FAILED.value}


@dataclass
class PaymentInitiation:
    tracking_id: str
    merchant_reference: str
    redirect_url: str


@dataclass
class PaymentOutcome:
    """What the customer sees after returning from the payment page"""
    status: str  # success, failed, pending
    message: str
    order: Order
    payment: TransactionStatus
    retry_after_seconds: Optional[int] = None


class PaymentService:
    """Ties gateway calls to Order and PaymentRecord rows"""

    def __init__(self, db: AsyncSession, client: PesapalClient, hub: Optional[RealtimeHub] = None):
        self.db = db
        self.client = client
        self.hub = hub

    async def initiate_payment(self, request: PaymentRequest) -> PaymentInitiation:
        """Submit the order to the gateway and record the attempt"""
        response = await self.client.submit_order_request(request)

        self.db.add(PaymentRecord(
            order_id=parse_order_id(request.order_id),
            tracking_id=response.order_tracking_id,
            amount=request.amount,
        ))
        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            # The gateway payment is live; the callback recreates the record
            logger.error(
                "Payment initiated but not recorded",
                order_id=request.order_id,
                tracking_id=response.order_tracking_id,
                amount=request.amount,
                error=str(e),
            )
            raise

        logger.info(
            "Payment initiated",
            order_id=request.order_id,
            tracking_id=response.order_tracking_id,
            amount=request.amount,
        )

        return PaymentInitiation(
            tracking_id=response.order_tracking_id,
            merchant_reference=response.merchant_reference,
            redirect_url=response.redirect_url,
        )

    async def check_payment_status(self, tracking_id: str) -> TransactionStatus:
        return await self.client.get_transaction_status(tracking_id)

    async def _find_record(self, tracking_id: str) -> Optional[PaymentRecord]:
        result = await self.db.execute(
            select(PaymentRecord).where(PaymentRecord.tracking_id == tracking_id)
        )
        return result.scalar_one_or_none()

    async def _record_attempt(
        self,
        record: Optional[PaymentRecord],
        tracking_id: str,
        order: Order,
        status: TransactionStatus,
    ) -> None:
        if not record:
            # Attempt we never recorded (initiation crashed after submit)
            record = PaymentRecord(order_id=order.id, tracking_id=tracking_id)
            self.db.add(record)

        record.status = status.payment_status_description or record.status
        record.confirmation_code = status.confirmation_code
        record.payment_method = status.payment_method
        if status.amount is not None:
            record.amount = int(round(status.amount))
        record.payment_data = status.model_dump(mode="json")

    async def _resolve_order(
        self,
        tracking_id: str,
        record: Optional[PaymentRecord],
        merchant_reference: Optional[str],
        status: TransactionStatus,
    ) -> Order:
        """
        The order a tracking id pays for.

        The recorded attempt decides, then the gateway's merchant reference.
        A reference from the redirect that names a different order is refused.
        """
        if record is not None:
            order_id = record.order_id
        elif status.merchant_reference:
            order_id = parse_order_id(status.merchant_reference)
        else:
            raise NotFoundError("Order not found")

        for reference in (merchant_reference, status.merchant_reference):
            if reference and parse_order_id(reference) != order_id:
                logger.warning(
                    "Payment reference mismatch",
                    tracking_id=tracking_id,
                    order_id=str(order_id),
                    reference=reference,
                )
                raise ValidationError(
                    "This payment does not belong to the order",
                    fields={"OrderMerchantReference": "Payment does not match this order"},
                )

        return await load_order(self.db, order_id)

    async def handle_payment_callback(
        self,
        tracking_id: str,
        merchant_reference: Optional[str] = None,
    ) -> PaymentOutcome:
        """
        Reconcile an order with the gateway after the customer returns.

        Safe to repeat: the same callback always lands on the same state, and a
        terminal payment status is never replaced by a different terminal one.
        Nothing is written when the payment cannot be tied to its order.
        """
        status = await self.client.get_transaction_status(tracking_id)

        record = await self._find_record(tracking_id)
        order = await self._resolve_order(tracking_id, record, merchant_reference, status)

        if (
            status.status_code == STATUS_COMPLETED
            and status.amount is not None
            and int(round(status.amount)) < order.total_amount
        ):
            logger.warning(
                "Payment short of order total",
                order_id=str(order.id),
                tracking_id=tracking_id,
                paid=status.amount,
                total=order.total_amount,
            )
            raise ValidationError("Paid amount does not cover the order total")

        await self._record_attempt(record, tracking_id, order, status)

        if status.status_code == STATUS_COMPLETED:
            target_payment = PaymentStatus.COMPLETED.value
            outcome_status = "success"
            message = "Your order has been confirmed and is being prepared."
        elif status.status_code == STATUS_FAILED:
            target_payment = PaymentStatus.FAILED.value
            outcome_status = "failed"
            message = status.payment_status_description or "There was an issue processing your payment."
        else:
            await self.db.commit()
            logger.info(
                "Payment still pending",
                order_id=str(order.id),
                tracking_id=tracking_id,
                status_code=status.status_code,
            )
            return PaymentOutcome(
                status="pending",
                message="Your payment is being verified. Please wait...",
                order=order,
                payment=status,
                retry_after_seconds=settings.payment_poll_interval_seconds,
            )

        changed = False
        current_payment = order.payment_status

        if current_payment in TERMINAL_PAYMENT_STATUSES and current_payment != target_payment:
            logger.warning(
                "Ignoring conflicting payment callback",
                order_id=str(order.id),
                tracking_id=tracking_id,
                payment_status=current_payment,
                reported=target_payment,
            )
            outcome_status = "success" if current_payment == PaymentStatus.COMPLETED.value else "failed"
        elif current_payment != target_payment:
            order.payment_status = target_payment
            changed = True

        if (
            order.payment_status == PaymentStatus.COMPLETED.value
            and order.order_status == OrderStatus.PENDING.value
        ):
            order.order_status = OrderStatus.CONFIRMED.value
            changed = True

        await self.db.commit()
        order = await load_order(self.db, order.id)

        logger.info(
            "Payment callback processed",
            order_id=str(order.id),
            tracking_id=tracking_id,
            payment_status=order.payment_status,
            order_status=order.order_status,
            changed=changed,
        )

        if changed:
            publish_order_update(self.hub, order)

        return PaymentOutcome(
            status=outcome_status,
            message=message,
            order=order,
            payment=status,
        )
