import pytest
from sqlalchemy import select

from app.models.notification import Notification
from app.services.retry import compute_backoff_seconds
from worker.tasks import PENDING_APPROVAL, deliver_pending_approval

from fixtures_seed import make_office, make_user


@pytest.mark.asyncio
async def test_writes_one_notification_per_admin(db_session, owner, admin):
    second = await make_user(db_session, name="Admin 2", is_admin=True)
    office = await make_office(db_session, owner["user"], title="Harbour office", approval_status="pending")

    written = await deliver_pending_approval(db_session, office.id, [admin["user"].id, second.id])
    assert written == 2

    rows = (await db_session.execute(select(Notification).order_by(Notification.user_id))).scalars().all()
    assert [n.user_id for n in rows] == [admin["user"].id, second.id]
    for n in rows:
        assert n.id.startswith("ntf_")
        assert n.type == PENDING_APPROVAL
        assert n.read_at is None
        assert n.data == {"office_id": office.id, "title": "Harbour office", "approval_status": "pending"}


@pytest.mark.asyncio
async def test_missing_office_writes_nothing(db_session, admin):
    assert await deliver_pending_approval(db_session, 12345, [admin["user"].id]) == 0

    rows = (await db_session.execute(select(Notification))).scalars().all()
    assert rows == []


def test_backoff_grows_and_is_capped():
    first = compute_backoff_seconds(1)
    assert 10 <= first <= 13

    fourth = compute_backoff_seconds(4)
    assert 80 <= fourth <= 110

    assert 900 <= compute_backoff_seconds(50) <= 930
