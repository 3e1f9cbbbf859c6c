from __future__ import annotations

from sqlalchemy import exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.office import Office
from app.models.reservation import RESERVATION_ACTIVE, Reservation


def active_reservations_count():
    """Correlated per-office count of active reservations, for use as a result column."""
    return (
        select(func.count(Reservation.id))
        .where(
            Reservation.office_id == Office.id,
            Reservation.status == RESERVATION_ACTIVE,
        )
        .correlate(Office)
        .scalar_subquery()
        .label("reservations_count")
    )


def has_reservation_by(visitor_id: int):
    # semi-join: at least one reservation by the visitor, whatever its status
    return exists().where(
        Reservation.office_id == Office.id,
        Reservation.user_id == visitor_id,
    )


async def has_active_reservations(db: AsyncSession, office_id: int) -> bool:
    stmt = select(
        exists().where(
            Reservation.office_id == office_id,
            Reservation.status == RESERVATION_ACTIVE,
        )
    )
    return bool((await db.execute(stmt)).scalar())
