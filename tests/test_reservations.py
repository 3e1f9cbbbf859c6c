import pytest
from sqlalchemy import select

from app.models.office import Office
from app.models.reservation import RESERVATION_CANCELLED, RESERVATION_COMPLETED
from app.services.reservations import active_reservations_count, has_active_reservations

from fixtures_seed import make_office, make_reservation, make_user


@pytest.mark.asyncio
async def test_active_count_column_ignores_other_statuses(db_session, owner):
    visitor = await make_user(db_session, name="Visitor")
    busy = await make_office(db_session, owner["user"])
    idle = await make_office(db_session, owner["user"])

    for status in (None, None, None, RESERVATION_CANCELLED, RESERVATION_COMPLETED):
        if status is None:
            await make_reservation(db_session, busy, visitor)
        else:
            await make_reservation(db_session, busy, visitor, status=status)
    await make_reservation(db_session, idle, visitor, status=RESERVATION_CANCELLED)

    rows = (await db_session.execute(select(Office.id, active_reservations_count()).order_by(Office.id))).all()
    assert [tuple(r) for r in rows] == [(busy.id, 3), (idle.id, 0)]

    assert await has_active_reservations(db_session, busy.id) is True
    assert await has_active_reservations(db_session, idle.id) is False
