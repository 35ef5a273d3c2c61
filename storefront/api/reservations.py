"""Reservation API endpoints"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from storefront.api.auth import require_admin
from storefront.database import get_db, utcnow
from storefront.models.user import User
from storefront.schemas.reservation import (
    ReservationCreate,
    ReservationResponse,
    ReservationListResponse,
)
from storefront.services.reservations import (
    create_reservation,
    delete_reservation,
    get_reservation,
    list_reservations,
    to_response,
)

router = APIRouter()
admin_router = APIRouter()


@router.post("", response_model=ReservationResponse, status_code=201)
async def book_table(
    data: ReservationCreate,
    db: AsyncSession = Depends(get_db),
):
    """Customer table booking; we call back to confirm"""
    return to_response(await create_reservation(db, data))


@admin_router.get("", response_model=ReservationListResponse)
async def admin_list_reservations(
    filter: str = Query("all"),
    search: Optional[str] = None,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Reservations ordered by time, each labelled past, soon, today or upcoming"""
    now = utcnow()
    reservations = await list_reservations(db, filter=filter, search=search, now=now)
    return ReservationListResponse(
        items=[to_response(reservation, now) for reservation in reservations],
        total=len(reservations),
    )


@admin_router.get("/{reservation_id}", response_model=ReservationResponse)
async def admin_get_reservation(
    reservation_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    return to_response(await get_reservation(db, reservation_id))


@admin_router.delete("/{reservation_id}", status_code=204)
async def admin_delete_reservation(
    reservation_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await delete_reservation(db, reservation_id)
