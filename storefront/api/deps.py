"""Shared FastAPI dependencies backed by app.state"""

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.cart.storage import CartStorage
from storefront.database import get_db
from storefront.payments.pesapal import PesapalClient
from storefront.payments.service import PaymentService
from storefront.realtime.hub import RealtimeHub, get_hub
from storefront.services.content import ContentProvider, LiveSource
from storefront.services.images import ImageStorage


def get_cart_storage(request: Request) -> CartStorage:
    return request.app.state.cart_storage


def get_pesapal_client(request: Request) -> PesapalClient:
    return request.app.state.pesapal


def get_image_storage(request: Request) -> ImageStorage:
    return request.app.state.image_storage


def get_payment_service(
    db: AsyncSession = Depends(get_db),
    client: PesapalClient = Depends(get_pesapal_client),
    hub: RealtimeHub = Depends(get_hub),
) -> PaymentService:
    return PaymentService(db, client, hub)


def get_content(db: AsyncSession = Depends(get_db)) -> ContentProvider:
    return ContentProvider(LiveSource(db))
