from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.user import User


log = logging.getLogger(__name__)

PENDING_APPROVAL_TASK = "worker.tasks.notify_pending_approval"


@dataclass(frozen=True)
class PendingApprovalNotice:
    office_id: int
    admin_user_ids: tuple[int, ...]


class Notifier(Protocol):
    def send_pending_approval(self, notice: PendingApprovalNotice) -> None: ...


class CeleryNotifier:
    """Hands notices to the worker; delivery happens out of process."""

    def send_pending_approval(self, notice: PendingApprovalNotice) -> None:
        from worker.celery_app import celery

        celery.send_task(
            PENDING_APPROVAL_TASK,
            args=[notice.office_id, list(notice.admin_user_ids)],
            queue="notifications",
        )


_notifier = CeleryNotifier()


def get_notifier() -> Notifier:
    return _notifier


async def admin_user_ids(db: AsyncSession) -> tuple[int, ...]:
    stmt = select(User.id).where(User.is_admin.is_(True)).order_by(User.id.asc())
    return tuple((await db.execute(stmt)).scalars().all())


async def build_pending_approval_notice(db: AsyncSession, office_id: int) -> PendingApprovalNotice | None:
    # Runs after the office update is committed; must never fail the request.
    # The rollback clears the failed transaction so the session stays usable.
    try:
        admins = await admin_user_ids(db)
    except Exception:
        log.exception("office %s: could not resolve admins for pending-approval notice", office_id)
        await db.rollback()
        return None
    return PendingApprovalNotice(office_id=office_id, admin_user_ids=admins)


def dispatch_pending_approval(notifier: Notifier, notice: PendingApprovalNotice) -> None:
    try:
        notifier.send_pending_approval(notice)
    except Exception:
        log.exception("office %s: pending-approval notice dispatch failed", notice.office_id)
    else:
        log.info("office %s: pending-approval notice queued for %d admins", notice.office_id, len(notice.admin_user_ids))
