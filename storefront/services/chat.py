"""Support chat: customer messages, admin replies and keyword auto-replies"""

from typing import Optional, Tuple
from uuid import UUID

from fastapi.encoders import jsonable_encoder
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from storefront.errors import NotFoundError, ValidationError
from storefront.models.message import Message, MessageSender
from storefront.realtime.hub import INSERT, MESSAGES, MESSAGE_UPDATES, UPDATE, RealtimeHub
from storefront.schemas.message import AdminMessageCreate, CustomerMessageCreate

logger = structlog.get_logger()

PHONE = "+256 784 811 208"

# First match wins
KEYWORD_REPLIES = [
    (("menu", "food"),
     "You can check our full menu by clicking on the \"Menu\" tab. We have delicious burgers, "
     "chicken, sides, and drinks! Is there anything specific you'd like to know about?"),
    (("order", "delivery"),
     "You can place an order through our website. We offer both delivery and pickup options. "
     "Delivery is free for orders above UGX 50,000! Would you like help with placing an order?"),
    (("hours", "open"),
     f"We're open Monday to Sunday from 8:00 AM to 10:00 PM. You can call us at {PHONE} for any inquiries."),
    (("location", "address"),
     "We're located at Children's Medical Center Area, Kampala, Uganda. "
     "You can find us on the map in our Contact page."),
    (("price", "cost"),
     "Our prices range from UGX 5,000 for drinks to UGX 25,000 for our signature burgers. "
     "Check our menu for detailed pricing!"),
    (("reservation", "book"),
     "You can make a reservation through our Reservations page. We'll call you to confirm your booking!"),
    (("hello", "hi"),
     "Hello! Thanks for reaching out to Manziz. How can I assist you today?"),
]

DEFAULT_REPLY = (
    "Thank you for your message! Our team will get back to you shortly. "
    f"For immediate assistance, please call us at {PHONE}."
)


def auto_reply(text: str) -> Optional[str]:
    """Canned answer for a customer message, None when a human should answer"""
    lower = text.lower()

    for keywords, reply in KEYWORD_REPLIES:
        if any(keyword in lower for keyword in keywords):
            return reply

    if len(lower) > 100 or "complaint" in lower or "problem" in lower:
        return None

    return DEFAULT_REPLY


def message_record(message: Message) -> dict:
    return jsonable_encoder(
        {column.name: getattr(message, column.name) for column in Message.__table__.columns}
    )


def _publish(hub: Optional[RealtimeHub], channel: str, event: str, message: Message) -> None:
    if hub is not None:
        hub.publish(channel, event, "messages", message_record(message))


async def send_customer_message(
    db: AsyncSession,
    data: CustomerMessageCreate,
    hub: Optional[RealtimeHub] = None,
    with_auto_reply: bool = True,
) -> Tuple[Message, Optional[Message]]:
    """Store a customer message and, when a keyword matches, the canned reply"""
    fields = {}
    if not (data.customer_name or "").strip():
        fields["customer_name"] = "Name is required"
    if not (data.customer_email or "").strip():
        fields["customer_email"] = "Email is required"
    if fields:
        raise ValidationError(fields=fields)

    message = Message(
        sender=MessageSender.CUSTOMER.value,
        message=data.message,
        customer_name=data.customer_name.strip(),
        customer_email=data.customer_email.strip(),
        customer_phone=data.customer_phone,
        is_read=False,
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)

    logger.info("Customer message received", message_id=str(message.id))
    _publish(hub, MESSAGES, INSERT, message)

    reply = None
    text = auto_reply(data.message) if with_auto_reply else None
    if text:
        reply = Message(
            sender=MessageSender.ADMIN.value,
            message=text,
            is_read=True,
            reply_to=message.id,
        )
        db.add(reply)
        await db.commit()
        await db.refresh(reply)
        _publish(hub, MESSAGES, INSERT, reply)

    return message, reply


async def get_message(db: AsyncSession, message_id: UUID) -> Message:
    message = await db.get(Message, message_id)
    if not message:
        raise NotFoundError("Message not found")
    return message


async def send_admin_message(
    db: AsyncSession,
    data: AdminMessageCreate,
    hub: Optional[RealtimeHub] = None,
) -> Message:
    if data.reply_to is not None:
        await get_message(db, data.reply_to)

    message = Message(
        sender=MessageSender.ADMIN.value,
        message=data.message,
        is_read=True,
        reply_to=data.reply_to,
    )
    db.add(message)
    await db.commit()
    await db.refresh(message)

    logger.info("Admin reply sent", message_id=str(message.id), reply_to=str(data.reply_to))
    _publish(hub, MESSAGES, INSERT, message)
    return message


async def mark_read(db: AsyncSession, message_id: UUID, hub: Optional[RealtimeHub] = None) -> Message:
    """Idempotent; read messages stay read"""
    message = await get_message(db, message_id)
    if message.is_read:
        return message

    message.is_read = True
    await db.commit()
    await db.refresh(message)
    _publish(hub, MESSAGE_UPDATES, UPDATE, message)
    return message


async def list_messages(
    db: AsyncSession,
    sender: Optional[str] = None,
    is_read: Optional[bool] = None,
    search: Optional[str] = None,
):
    """Admin inbox, newest first"""
    query = select(Message)

    if sender:
        query = query.where(Message.sender == sender)
    if is_read is not None:
        query = query.where(Message.is_read.is_(is_read))
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(
            Message.message.ilike(pattern),
            Message.customer_name.ilike(pattern),
            Message.customer_email.ilike(pattern),
        ))

    result = await db.execute(query.order_by(Message.created_at.desc()))
    return list(result.scalars().all())


async def unread_count(db: AsyncSession) -> int:
    result = await db.execute(
        select(func.count(Message.id)).where(
            Message.sender == MessageSender.CUSTOMER.value,
            Message.is_read.is_(False),
        )
    )
    return result.scalar() or 0
