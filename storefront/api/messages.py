"""Support chat endpoints"""

from typing import Optional
from uuid import UUID
import asyncio

from fastapi import APIRouter, Depends, Query, WebSocket
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from storefront.api.auth import require_admin
from storefront.api.deps import get_content
from storefront.database import get_db
from storefront.models.message import MessageSender
from storefront.models.user import User
from storefront.realtime.feed import MessageFeed
from storefront.realtime.hub import (
    INSERT,
    MESSAGES,
    MESSAGE_UPDATES,
    RealtimeEvent,
    RealtimeHub,
    get_hub,
)
from storefront.realtime.stream import forward_events
from storefront.schemas.message import (
    AdminMessageCreate,
    CustomerMessageCreate,
    MessageListResponse,
    MessageResponse,
    SendMessageResponse,
    UnreadCountResponse,
)
from storefront.services import chat
from storefront.services.content import ContentProvider

logger = structlog.get_logger()

router = APIRouter()
admin_router = APIRouter()


def _responses(messages):
    return [MessageResponse.model_validate(message) for message in messages]


@router.post("", response_model=SendMessageResponse, status_code=201)
async def send_message(
    data: CustomerMessageCreate,
    auto_reply: bool = True,
    db: AsyncSession = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
):
    """Customer chat message, answered automatically when a keyword matches"""
    message, reply = await chat.send_customer_message(db, data, hub=hub, with_auto_reply=auto_reply)
    return SendMessageResponse(
        message=MessageResponse.model_validate(message),
        auto_reply=MessageResponse.model_validate(reply) if reply else None,
    )


@router.get("", response_model=MessageListResponse)
async def list_chat(
    content: ContentProvider = Depends(get_content),
):
    """Chat history, oldest first"""
    result = await content.messages()
    feed = MessageFeed([message.model_dump(mode="json") for message in _responses(result.items)])
    return MessageListResponse(
        items=_responses(result.items),
        total=len(result.items),
        unread_count=feed.unread_count,
        source=result.source,
    )


@router.websocket("/stream")
async def message_stream(
    websocket: WebSocket,
    db: AsyncSession = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
):
    """Snapshot of the chat, then every change with the current unread count"""
    await websocket.accept()

    feed = MessageFeed([message.model_dump(mode="json") for message in _responses(await chat.list_messages(db))])
    queue: asyncio.Queue = asyncio.Queue()

    def merge(event: RealtimeEvent) -> None:
        if event.event == INSERT:
            merged = feed.on_insert(event.record)
        else:
            merged = feed.on_update(event.record)
        queue.put_nowait({
            **event.to_dict(),
            "record": merged,
            "unread_count": feed.unread_count,
        })

    subscriptions = [hub.subscribe(MESSAGES, merge), hub.subscribe(MESSAGE_UPDATES, merge)]
    try:
        await websocket.send_json({
            "event": "SNAPSHOT",
            "items": feed.items(),
            "unread_count": feed.unread_count,
        })
        await forward_events(websocket, queue)
    finally:
        for subscription in subscriptions:
            subscription.unsubscribe()
        logger.debug("Message stream closed")


@admin_router.get("", response_model=MessageListResponse)
async def admin_list_messages(
    sender: Optional[MessageSender] = None,
    is_read: Optional[bool] = None,
    search: Optional[str] = Query(None, min_length=1),
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Inbox, newest first"""
    messages = await chat.list_messages(
        db,
        sender=sender.value if sender else None,
        is_read=is_read,
        search=search,
    )
    return MessageListResponse(
        items=_responses(messages),
        total=len(messages),
        unread_count=await chat.unread_count(db),
    )


@admin_router.post("", response_model=MessageResponse, status_code=201)
async def admin_reply(
    data: AdminMessageCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
):
    return await chat.send_admin_message(db, data, hub=hub)


@admin_router.get("/unread-count", response_model=UnreadCountResponse)
async def admin_unread_count(
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return UnreadCountResponse(count=await chat.unread_count(db))


@admin_router.get("/{message_id}", response_model=MessageResponse)
async def admin_get_message(
    message_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
):
    """Opening a customer message marks it read"""
    message = await chat.get_message(db, message_id)
    if message.sender == MessageSender.CUSTOMER.value and not message.is_read:
        message = await chat.mark_read(db, message_id, hub=hub)
    return message


@admin_router.post("/{message_id}/read", response_model=MessageResponse)
async def admin_mark_read(
    message_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    hub: RealtimeHub = Depends(get_hub),
):
    return await chat.mark_read(db, message_id, hub=hub)
