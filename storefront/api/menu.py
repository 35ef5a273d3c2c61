"""Menu API endpoints"""

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from storefront.api.auth import require_admin
from storefront.api.deps import get_content, get_image_storage
from storefront.database import get_db
from storefront.errors import NotFoundError, StorefrontError
from storefront.models.menu import MenuItem, MenuCategory
from storefront.models.user import User
from storefront.schemas.menu import (
    MenuItemCreate,
    MenuItemUpdate,
    MenuItemResponse,
    MenuListResponse,
)
from storefront.services.content import FAVORITES_LIMIT, ContentProvider
from storefront.services.images import ImageStorage

logger = structlog.get_logger()

router = APIRouter()
admin_router = APIRouter()


async def get_menu_item_or_404(db: AsyncSession, item_id: UUID) -> MenuItem:
    item = await db.get(MenuItem, item_id)
    if not item:
        raise NotFoundError("Menu item not found")
    return item


async def discard_image(images: ImageStorage, url: Optional[str]) -> None:
    """Best effort: a stale image never blocks a menu change"""
    if not url or not images.is_stored(url):
        return
    try:
        await images.delete(url)
    except (StorefrontError, OSError) as e:
        logger.warning("Could not delete menu image", url=url, error=str(e))


@router.get("", response_model=MenuListResponse)
async def list_menu(
    category: Optional[MenuCategory] = None,
    search: Optional[str] = Query(None, min_length=1),
    content: ContentProvider = Depends(get_content),
):
    """Available menu items, newest first"""
    result = await content.menu(category.value if category else None, search)
    return MenuListResponse(
        items=[MenuItemResponse.model_validate(item) for item in result.items],
        total=len(result.items),
        source=result.source,
    )


@router.get("/favorites", response_model=MenuListResponse)
async def list_favorites(
    content: ContentProvider = Depends(get_content),
):
    """Homepage highlights"""
    result = await content.favorites(FAVORITES_LIMIT)
    return MenuListResponse(
        items=[MenuItemResponse.model_validate(item) for item in result.items],
        total=len(result.items),
        source=result.source,
    )


@router.get("/{item_id}", response_model=MenuItemResponse)
async def get_menu_item(
    item_id: UUID,
    db: AsyncSession = Depends(get_db),
):
    """Get a specific menu item"""
    return await get_menu_item_or_404(db, item_id)


@admin_router.get("", response_model=List[MenuItemResponse])
async def admin_list_menu(
    category: Optional[MenuCategory] = None,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """All menu items including unavailable ones"""
    query = select(MenuItem)
    if category:
        query = query.where(MenuItem.category == category.value)
    result = await db.execute(query.order_by(MenuItem.created_at.desc()))
    return result.scalars().all()


@admin_router.post("", response_model=MenuItemResponse, status_code=201)
async def create_menu_item(
    item_data: MenuItemCreate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Create a new menu item"""
    item = MenuItem(**item_data.model_dump(mode="json"))
    db.add(item)
    await db.commit()
    await db.refresh(item)

    logger.info("Menu item created", menu_item_id=str(item.id), name=item.name)
    return item


@admin_router.put("/{item_id}", response_model=MenuItemResponse)
async def update_menu_item(
    item_id: UUID,
    item_data: MenuItemUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    images: ImageStorage = Depends(get_image_storage),
):
    """Update a menu item; a replaced stored image is removed"""
    item = await get_menu_item_or_404(db, item_id)
    old_image = item.image_url

    for field, value in item_data.model_dump(mode="json", exclude_unset=True).items():
        setattr(item, field, value)

    await db.commit()
    await db.refresh(item)

    if old_image and old_image != item.image_url:
        await discard_image(images, old_image)

    logger.info("Menu item updated", menu_item_id=str(item.id))
    return item


@admin_router.delete("/{item_id}", status_code=204)
async def delete_menu_item(
    item_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
    images: ImageStorage = Depends(get_image_storage),
):
    """Delete a menu item and its stored image"""
    item = await get_menu_item_or_404(db, item_id)
    image_url = item.image_url

    await db.delete(item)
    await db.commit()

    await discard_image(images, image_url)
    logger.info("Menu item deleted", menu_item_id=str(item_id))


@admin_router.post("/{item_id}/toggle-availability", response_model=MenuItemResponse)
async def toggle_availability(
    item_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    item = await get_menu_item_or_404(db, item_id)
    item.is_available = not item.is_available
    await db.commit()
    await db.refresh(item)
    return item


@admin_router.post("/{item_id}/toggle-favorite", response_model=MenuItemResponse)
async def toggle_favorite(
    item_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    item = await get_menu_item_or_404(db, item_id)
    item.is_favorite = not item.is_favorite
    await db.commit()
    await db.refresh(item)
    return item
