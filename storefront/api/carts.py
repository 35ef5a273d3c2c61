"""Shopping cart API endpoints"""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.deps import get_cart_storage
from storefront.cart.storage import CartStorage, cart_key
from storefront.cart.store import CartStore
from storefront.database import get_db
from storefront.errors import NotFoundError, ValidationError
from storefront.models.menu import MenuItem
from storefront.schemas.cart import CartItemAdd, CartQuantityUpdate, CartResponse

router = APIRouter()


def cart_response(cart_id: str, cart: CartStore) -> CartResponse:
    return CartResponse(
        cart_id=cart_id,
        items=cart.to_state()["items"],
        total_items=cart.get_total_items(),
        total_price=cart.get_total_price(),
    )


@router.get("/{cart_id}", response_model=CartResponse)
async def get_cart(
    cart_id: str,
    storage: CartStorage = Depends(get_cart_storage),
):
    """Cart contents; unknown carts are empty"""
    return cart_response(cart_id, await storage.load_cart(cart_id))


@router.post("/{cart_id}/items", response_model=CartResponse)
async def add_item(
    cart_id: str,
    data: CartItemAdd,
    storage: CartStorage = Depends(get_cart_storage),
    db: AsyncSession = Depends(get_db),
):
    """Add one unit of a menu item at its current price"""
    item = await db.get(MenuItem, data.menu_item_id)
    if not item:
        raise NotFoundError("Menu item not found")
    if not item.is_available:
        raise ValidationError(
            f"{item.name} is currently unavailable",
            fields={"menu_item_id": f"{item.name} is currently unavailable"},
        )

    cart = await storage.load_cart(cart_id)
    cart.add_item(item, notes=data.notes)
    await storage.save_cart(cart_id, cart)
    return cart_response(cart_id, cart)


@router.patch("/{cart_id}/items/{item_id}", response_model=CartResponse)
async def update_quantity(
    cart_id: str,
    item_id: UUID,
    data: CartQuantityUpdate,
    storage: CartStorage = Depends(get_cart_storage),
):
    """Set a line quantity; zero or less removes the line"""
    cart = await storage.load_cart(cart_id)
    cart.update_quantity(str(item_id), data.quantity)
    await storage.save_cart(cart_id, cart)
    return cart_response(cart_id, cart)


@router.delete("/{cart_id}/items/{item_id}", response_model=CartResponse)
async def remove_item(
    cart_id: str,
    item_id: UUID,
    storage: CartStorage = Depends(get_cart_storage),
):
    cart = await storage.load_cart(cart_id)
    cart.remove_item(str(item_id))
    await storage.save_cart(cart_id, cart)
    return cart_response(cart_id, cart)


@router.delete("/{cart_id}", response_model=CartResponse)
async def clear_cart(
    cart_id: str,
    storage: CartStorage = Depends(get_cart_storage),
):
    await storage.delete(cart_key(cart_id))
    return cart_response(cart_id, CartStore())
