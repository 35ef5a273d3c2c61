"""Reservation booking and admin listing"""

from datetime import datetime, timedelta, timezone
from typing import List, Optional
from uuid import UUID

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from storefront.database import utcnow
from storefront.errors import NotFoundError, ValidationError
from storefront.models.reservation import Reservation
from storefront.schemas.reservation import ReservationCreate, ReservationResponse

logger = structlog.get_logger()

FILTERS = ("all", "today", "upcoming", "past")


def to_utc_naive(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def reservation_timing(reservation_time: datetime, now: Optional[datetime] = None) -> str:
    """past, soon (under 2 hours), today (under 24 hours) or upcoming"""
    now = now or utcnow()
    remaining = to_utc_naive(reservation_time) - now

    if remaining < timedelta(0):
        return "past"
    if remaining < timedelta(hours=2):
        return "soon"
    if remaining < timedelta(hours=24):
        return "today"
    return "upcoming"


def to_response(reservation: Reservation, now: Optional[datetime] = None) -> ReservationResponse:
    response = ReservationResponse.model_validate(reservation)
    response.timing = reservation_timing(reservation.reservation_time, now)
    return response


async def create_reservation(
    db: AsyncSession,
    data: ReservationCreate,
    now: Optional[datetime] = None,
) -> Reservation:
    now = now or utcnow()
    reservation_time = to_utc_naive(data.reservation_time)

    if reservation_time <= now:
        raise ValidationError(
            "Reservation time must be in the future",
            fields={"reservation_time": "Reservation time must be in the future"},
        )

    reservation = Reservation(
        name=data.name.strip(),
        phone_number=data.phone_number.strip(),
        reservation_time=reservation_time,
        guests=data.guests,
        special_request=data.special_request,
    )
    db.add(reservation)
    await db.commit()
    await db.refresh(reservation)

    logger.info(
        "Reservation created",
        reservation_id=str(reservation.id),
        guests=reservation.guests,
    )
    return reservation


async def list_reservations(
    db: AsyncSession,
    filter: str = "all",
    search: Optional[str] = None,
    now: Optional[datetime] = None,
) -> List[Reservation]:
    if filter not in FILTERS:
        raise ValidationError(
            f"Unknown filter: {filter}",
            fields={"filter": "Choose all, today, upcoming or past"},
        )

    now = now or utcnow()
    query = select(Reservation)

    if filter == "today":
        start = now.replace(hour=0, minute=0, second=0, microsecond=0)
        query = query.where(
            Reservation.reservation_time >= start,
            Reservation.reservation_time < start + timedelta(days=1),
        )
    elif filter == "upcoming":
        query = query.where(Reservation.reservation_time >= now)
    elif filter == "past":
        query = query.where(Reservation.reservation_time < now)

    if search:
        pattern = f"%{search}%"
        query = query.where(or_(
            Reservation.name.ilike(pattern),
            Reservation.phone_number.ilike(pattern),
        ))

    result = await db.execute(query.order_by(Reservation.reservation_time.asc()))
    return list(result.scalars().all())


async def get_reservation(db: AsyncSession, reservation_id: UUID) -> Reservation:
    reservation = await db.get(Reservation, reservation_id)
    if not reservation:
        raise NotFoundError("Reservation not found")
    return reservation


async def delete_reservation(db: AsyncSession, reservation_id: UUID) -> None:
    reservation = await get_reservation(db, reservation_id)
    await db.delete(reservation)
    await db.commit()
    logger.info("Reservation deleted", reservation_id=str(reservation_id))
