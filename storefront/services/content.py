"""Read-side content with a built-in fallback when the database is down"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Generic, List, Optional, TypeVar
import uuid

from sqlalchemy import or_, select, String, cast
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from storefront.database import utcnow
from storefront.models.menu import MenuItem
from storefront.models.message import Message, MessageSender

logger = structlog.get_logger()

FAVORITES_LIMIT = 6

T = TypeVar("T")


@dataclass
class Content(Generic[T]):
    items: List[T]
    source: str = "live"


class ContentSource(ABC):
    """Where menu and chat content is read from"""

    name = "live"

    @abstractmethod
    async def list_menu(self, category: Optional[str] = None, search: Optional[str] = None) -> List[MenuItem]:
        pass

    @abstractmethod
    async def list_favorites(self, limit: int = FAVORITES_LIMIT) -> List[MenuItem]:
        pass

    @abstractmethod
    async def list_messages(self) -> List[Message]:
        pass


def _matches(item: MenuItem, category: Optional[str], search: Optional[str]) -> bool:
    if category and item.category != category:
        return False
    if search:
        needle = search.lower()
        haystack = [item.name or "", item.description or "", *(item.tags or [])]
        return any(needle in text.lower() for text in haystack)
    return True


class LiveSource(ContentSource):
    """Database-backed content"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_menu(self, category=None, search=None):
        query = select(MenuItem).where(MenuItem.is_available.is_(True))

        if category:
            query = query.where(MenuItem.category == category)

        if search:
            pattern = f"%{search}%"
            query = query.where(or_(
                MenuItem.name.ilike(pattern),
                MenuItem.description.ilike(pattern),
                cast(MenuItem.tags, String).ilike(pattern),
            ))

        result = await self.db.execute(query.order_by(MenuItem.created_at.desc()))
        return list(result.scalars().all())

    async def list_favorites(self, limit=FAVORITES_LIMIT):
        result = await self.db.execute(
            select(MenuItem)
            .where(MenuItem.is_available.is_(True), MenuItem.is_favorite.is_(True))
            .order_by(MenuItem.created_at.desc())
            .limit(limit)
        )
        return list(result.scalars().all())

    async def list_messages(self):
        result = await self.db.execute(select(Message).order_by(Message.created_at.asc()))
        return list(result.scalars().all())


def _sample_item(key: int, name, description, image_url, category, price, tags, is_favorite=False):
    return MenuItem(
        id=uuid.uuid5(uuid.NAMESPACE_URL, f"manziz-sample-{key}"),
        name=name,
        description=description,
        image_url=image_url,
        category=category,
        price=price,
        is_available=True,
        is_favorite=is_favorite,
        tags=tags,
        created_at=datetime(2024, 1, 1),
    )


SAMPLE_MENU = [
    _sample_item(
        1, "Manziz Special Burger",
        "Our signature burger with beef patty, fresh lettuce, tomatoes, pickles, and our secret sauce.",
        "https://images.pexels.com/photos/1640777/pexels-photo-1640777.jpeg",
        "burgers", 25000, ["signature", "beef"], is_favorite=True,
    ),
    _sample_item(
        2, "Crispy Chicken Wings",
        "Perfectly seasoned and fried chicken wings served with your choice of sauce.",
        "https://images.pexels.com/photos/60616/fried-chicken-chicken-fried-crunchy-60616.jpeg",
        "chicken", 18000, ["crispy", "spicy"], is_favorite=True,
    ),
    _sample_item(
        3, "Loaded Fries",
        "Crispy fries topped with cheese, bacon bits, and green onions.",
        "https://images.pexels.com/photos/1893556/pexels-photo-1893556.jpeg",
        "sides", 15000, ["cheesy", "loaded"], is_favorite=True,
    ),
    _sample_item(
        4, "Classic Cheese Burger",
        "Juicy beef patty with melted cheese, lettuce, tomato, and our special sauce.",
        "https://images.pexels.com/photos/1556909/pexels-photo-1556909.jpeg",
        "burgers", 22000, ["classic", "cheese"],
    ),
    _sample_item(
        5, "Chicken Strips",
        "Tender chicken strips coated in crispy breadcrumbs, served with dipping sauce.",
        "https://images.pexels.com/photos/2338407/pexels-photo-2338407.jpeg",
        "chicken", 16000, ["tender", "strips"],
    ),
    _sample_item(
        6, "Fresh Soda",
        "Ice-cold soft drinks to complement your meal perfectly.",
        "https://images.pexels.com/photos/50593/coca-cola-cold-drink-soft-drink-coke-50593.jpeg",
        "drinks", 5000, ["cold", "refreshing"],
    ),
]

WELCOME_MESSAGE = "Hello! Welcome to Manziz. How can I help you today?"


class FallbackSource(ContentSource):
    """Built-in sample menu and a welcome chat message"""

    name = "fallback"

    async def list_menu(self, category=None, search=None):
        return [item for item in SAMPLE_MENU if _matches(item, category, search)]

    async def list_favorites(self, limit=FAVORITES_LIMIT):
        return [item for item in SAMPLE_MENU if item.is_favorite][:limit]

    async def list_messages(self):
        return [Message(
            id=uuid.uuid5(uuid.NAMESPACE_URL, "manziz-welcome"),
            sender=MessageSender.ADMIN.value,
            message=WELCOME_MESSAGE,
            is_read=True,
            created_at=utcnow(),
        )]


class ContentProvider:
    """
    Serves content from the live source, switching to the fallback when the
    database errors. Results say which source answered.
    """

    def __init__(self, live: ContentSource, fallback: Optional[ContentSource] = None):
        self.live = live
        self.fallback = fallback or FallbackSource()

    async def _read(self, operation: str, *args) -> Content:
        try:
            return Content(items=await getattr(self.live, operation)(*args), source=self.live.name)
        except SQLAlchemyError as e:
            logger.warning("Serving fallback content", operation=operation, error=str(e))
            return Content(items=await getattr(self.fallback, operation)(*args), source=self.fallback.name)

    async def menu(self, category: Optional[str] = None, search: Optional[str] = None) -> Content[MenuItem]:
        return await self._read("list_menu", category, search)

    async def favorites(self, limit: int = FAVORITES_LIMIT) -> Content[MenuItem]:
        return await self._read("list_favorites", limit)

    async def messages(self) -> Content[Message]:
        return await self._read("list_messages")
