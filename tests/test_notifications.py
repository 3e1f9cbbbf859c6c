import pytest
from sqlalchemy.exc import OperationalError

from app.services.notifications import (
    PendingApprovalNotice,
    build_pending_approval_notice,
    dispatch_pending_approval,
)


class AbortedSession:
    """Behaves like a Postgres session whose transaction failed: unusable until rolled back."""

    def __init__(self) -> None:
        self.aborted = False
        self.rollbacks = 0

    async def execute(self, stmt):
        self.aborted = True
        raise OperationalError(str(stmt), {}, ConnectionError("connection reset"))

    async def rollback(self) -> None:
        self.aborted = False
        self.rollbacks += 1


@pytest.mark.asyncio
async def test_failed_admin_lookup_leaves_session_usable():
    db = AbortedSession()

    assert await build_pending_approval_notice(db, 7) is None
    assert db.rollbacks == 1
    assert db.aborted is False


@pytest.mark.asyncio
async def test_notice_lists_admins_in_id_order(db_session, admin):
    notice = await build_pending_approval_notice(db_session, 7)
    assert notice.office_id == 7
    assert notice.admin_user_ids == (admin["user"].id,)


def test_dispatch_failure_is_absorbed(notifier):
    notifier.fail = True
    dispatch_pending_approval(notifier, PendingApprovalNotice(office_id=7, admin_user_ids=(1,)))
    assert notifier.notices == []
