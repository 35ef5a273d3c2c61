"""Order placement: form validation, totals, order creation and payment hand-off"""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Dict, Optional
from uuid import UUID
from zoneinfo import ZoneInfo
import re
import uuid

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from storefront.cart.storage import CartStorage, payment_tracking_key
from storefront.cart.store import CartStore
from storefront.config import Settings, settings as default_settings
from storefront.errors import (
    AuthError,
    EmptyCartError,
    GatewayError,
    InvalidScheduleError,
    NetworkError,
    ValidationError,
)
from storefront.models.order import (
    DeliveryType,
    Order,
    OrderItem,
    OrderStatus,
    PaymentMethod,
    PaymentStatus,
)
from storefront.payments.pesapal import PaymentRequest, format_amount
from storefront.payments.service import PaymentService
from storefront.schemas.checkout import CheckoutForm

logger = structlog.get_logger()

EMAIL_RE = re.compile(r"^[A-Z0-9._%+-]+@[A-Z0-9.-]+\.[A-Z]{2,}$", re.IGNORECASE)
PHONE_RE = re.compile(r"^[0-9+\-\s()]+$")


@dataclass
class OrderTotals:
    subtotal: int
    delivery_fee: int
    total: int


@dataclass
class CheckoutResult:
    order_id: UUID
    status: str  # placed or redirect
    message: str
    totals: OrderTotals
    tracking_url: str
    redirect_url: Optional[str] = None
    payment_tracking: Optional[dict] = None


def calculate_totals(
    subtotal: int,
    delivery_type: str,
    config: Settings = default_settings,
) -> OrderTotals:
    """Delivery is free from the threshold upwards; pickup is always free"""
    if delivery_type == DeliveryType.DELIVERY.value and subtotal < config.free_delivery_threshold:
        delivery_fee = config.delivery_fee
    else:
        delivery_fee = 0
    return OrderTotals(subtotal=subtotal, delivery_fee=delivery_fee, total=subtotal + delivery_fee)


def _blank(value: Optional[str]) -> bool:
    return value is None or not value.strip()


def _parse_schedule(form: CheckoutForm, tz: ZoneInfo) -> datetime:
    try:
        day = date.fromisoformat(form.scheduled_date.strip())
        at = time.fromisoformat(form.scheduled_time.strip())
    except ValueError:
        raise InvalidScheduleError("Please select a valid date and time for scheduled order")
    return datetime.combine(day, at, tzinfo=tz)


def validate_checkout_form(
    form: CheckoutForm,
    now: Optional[datetime] = None,
    config: Settings = default_settings,
) -> Optional[datetime]:
    """
    Check the whole form and report every problem at once.

    Returns the scheduled moment as restaurant-local wall time (naive), or
    None for an as-soon-as-possible order.
    """
    fields: Dict[str, str] = {}

    if _blank(form.customer_name):
        fields["customer_name"] = "Name is required"

    if _blank(form.email):
        fields["email"] = "Email is required"
    elif not EMAIL_RE.match(form.email.strip()):
        fields["email"] = "Please enter a valid email address"

    if _blank(form.phone_number):
        fields["phone_number"] = "Phone number is required"
    elif not PHONE_RE.match(form.phone_number.strip()):
        fields["phone_number"] = "Please enter a valid phone number"

    if form.delivery_type not in {t.value for t in DeliveryType}:
        fields["delivery_type"] = "Choose delivery or pickup"
    elif form.delivery_type == DeliveryType.DELIVERY.value and _blank(form.delivery_address):
        fields["delivery_address"] = "Delivery address is required"

    if form.payment_method not in {m.value for m in PaymentMethod}:
        fields["payment_method"] = "Choose online or cash payment"

    if form.schedule_order:
        if _blank(form.scheduled_date):
            fields["scheduled_date"] = "Date is required for scheduled orders"
        if _blank(form.scheduled_time):
            fields["scheduled_time"] = "Time is required for scheduled orders"

    if fields:
        raise ValidationError(fields=fields)

    if not form.schedule_order:
        return None

    tz = ZoneInfo(config.restaurant_timezone)
    scheduled = _parse_schedule(form, tz)
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    if scheduled <= now:
        raise InvalidScheduleError()

    return scheduled.replace(tzinfo=None)


def _order_items(order_id: UUID, cart: CartStore):
    items = []
    for line in cart.items:
        try:
            menu_item_id = UUID(line.id)
        except ValueError:
            raise ValidationError(f"{line.name} is no longer on the menu")
        items.append(OrderItem(
            id=uuid.uuid4(),
            order_id=order_id,
            menu_item_id=menu_item_id,
            quantity=line.quantity,
            notes=line.notes,
            price_at_time=line.price,
        ))
    return items


async def _void_order(db: AsyncSession, order_id: UUID) -> None:
    """Best effort: an order whose payment never started must not look payable"""
    try:
        await db.rollback()
        order = await db.get(Order, order_id)
        if order:
            order.payment_status = PaymentStatus.FAILED.value
            order.order_status = OrderStatus.CANCELLED.value
            await db.commit()
    except SQLAlchemyError as e:
        logger.error("Could not void unpaid order", order_id=str(order_id), error=str(e))


async def place_order(
    db: AsyncSession,
    cart_id: str,
    cart: CartStore,
    form: CheckoutForm,
    storage: CartStorage,
    payments: Optional[PaymentService] = None,
    user_id: Optional[UUID] = None,
    now: Optional[datetime] = None,
    config: Settings = default_settings,
) -> CheckoutResult:
    """Turn a cart into an order and, for online payment, start the payment"""
    if cart.is_empty():
        raise EmptyCartError()

    scheduled_for = validate_checkout_form(form, now=now, config=config)
    totals = calculate_totals(cart.get_total_price(), form.delivery_type, config)

    order_id = uuid.uuid4()
    order = Order(
        id=order_id,
        user_id=user_id,
        customer_name=form.customer_name.strip(),
        phone_number=form.phone_number.strip(),
        email=form.email.strip(),
        delivery_type=form.delivery_type,
        delivery_address=(
            form.delivery_address.strip()
            if form.delivery_type == DeliveryType.DELIVERY.value
            else None
        ),
        scheduled_for=scheduled_for,
        notes=form.notes or None,
        subtotal=totals.subtotal,
        delivery_fee=totals.delivery_fee,
        total_amount=totals.total,
        order_status=OrderStatus.PENDING.value,
        payment_method=form.payment_method,
        payment_status=PaymentStatus.PENDING.value,
    )
    order.items = _order_items(order_id, cart)
    db.add(order)
    await db.commit()

    logger.info(
        "Order created",
        order_id=str(order_id),
        total=totals.total,
        payment_method=form.payment_method,
        scheduled=scheduled_for is not None,
    )

    tracking_url = f"/orders/track/{order_id}"
    placed_message = (
        "Scheduled order placed successfully!" if scheduled_for else "Order placed successfully!"
    )

    if form.payment_method == PaymentMethod.CASH.value:
        cart.clear_cart()
        await storage.save_cart(cart_id, cart)
        return CheckoutResult(
            order_id=order_id,
            status="placed",
            message=placed_message,
            totals=totals,
            tracking_url=tracking_url,
        )

    if payments is None:
        raise GatewayError("Online payment is not available")

    request = PaymentRequest(
        order_id=str(order_id),
        amount=format_amount(totals.total),
        currency=config.payment_currency,
        description=f"{config.restaurant_name} Order #{str(order_id)[:8]} - {len(cart.items)} items",
        customer_name=order.customer_name,
        customer_email=order.email,
        customer_phone=order.phone_number,
    )

    try:
        initiation = await payments.initiate_payment(request)
    except (ValidationError, AuthError, GatewayError, NetworkError) as e:
        logger.error(
            "Payment initiation failed",
            order_id=str(order_id),
            error_code=e.code,
            error=e.message,
        )
        await _void_order(db, order_id)
        raise
    except SQLAlchemyError:
        # Submitted to the gateway already, so the order stays payable:
        # payment_status remains pending until the callback reconciles it
        logger.error("Order left pending after payment submit", order_id=str(order_id))
        raise

    tracking = {
        "order_id": str(order_id),
        "tracking_id": initiation.tracking_id,
        "amount": request.amount,
        "scheduled": scheduled_for is not None,
    }
    await storage.save(payment_tracking_key(str(order_id)), tracking)

    cart.clear_cart()
    await storage.save_cart(cart_id, cart)

    return CheckoutResult(
        order_id=order_id,
        status="redirect",
        message="Redirecting to PesaPal for payment...",
        totals=totals,
        tracking_url=tracking_url,
        redirect_url=initiation.redirect_url,
        payment_tracking=tracking,
    )
