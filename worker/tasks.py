import asyncio
import logging
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from worker.celery_app import celery
from app.core.config import settings
import app.models  # noqa: F401  # ensures Models are registered
from app.models.notification import Notification
from app.models.office import Office
from app.services.retry import compute_backoff_seconds


log = logging.getLogger(__name__)

PENDING_APPROVAL = "office.pending_approval"


async def deliver_pending_approval(db: AsyncSession, office_id: int, admin_user_ids: list[int]) -> int:
    """Store one database notification per admin. Returns how many were written."""
    office = (await db.execute(select(Office).where(Office.id == office_id))).scalar_one_or_none()
    if not office:
        log.warning("pending approval: office %s no longer exists", office_id)
        return 0

    for user_id in admin_user_ids:
        db.add(
            Notification(
                user_id=user_id,
                type=PENDING_APPROVAL,
                data={
                    "office_id": office.id,
                    "title": office.title,
                    "approval_status": office.approval_status,
                },
            )
        )
    await db.commit()
    return len(admin_user_ids)


async def _notify_pending_approval(office_id: int, admin_user_ids: list[int]) -> int:
    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    Session = async_sessionmaker(engine, expire_on_commit=False)
    try:
        async with Session() as db:
            return await deliver_pending_approval(db, office_id, admin_user_ids)
    finally:
        await engine.dispose()


@celery.task(name="worker.tasks.notify_pending_approval", bind=True, max_retries=5)
def notify_pending_approval(self, office_id: int, admin_user_ids: list[int]) -> int:
    try:
        return asyncio.run(_notify_pending_approval(office_id, admin_user_ids))
    except Exception as e:
        log.exception("pending approval: delivery for office %s failed", office_id)
        raise self.retry(exc=e, countdown=compute_backoff_seconds(self.request.retries + 1))
