from __future__ import annotations

import logging
from datetime import datetime, timezone

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.office import Office
from app.models.tag import Tag
from app.schemas.office import OfficeCreate, OfficeUpdate
from app.services.approval import apply_office_changes, initial_status
from app.services.auth import Actor
from app.services.office_guard import ensure_featured_image, ensure_office_deletable, unprocessable


log = logging.getLogger(__name__)

# Fields an update may explicitly clear with null.
NULLABLE_FIELDS = {"address_line2", "featured_image_id"}


async def load_tags_or_raise(db: AsyncSession, tag_ids: list[int]) -> list[Tag]:
    wanted = list(dict.fromkeys(tag_ids))
    if not wanted:
        return []

    tags = (await db.execute(select(Tag).where(Tag.id.in_(wanted)))).scalars().all()
    found = {t.id for t in tags}
    missing = [i for i in wanted if i not in found]
    if missing:
        raise unprocessable("tags", f"Unknown tag ids: {', '.join(str(i) for i in missing)}")

    by_id = {t.id: t for t in tags}
    return [by_id[i] for i in wanted]


async def create_office_record(db: AsyncSession, *, actor: Actor, payload: OfficeCreate) -> Office:
    """
    Insert an office and attach its tags in the caller's transaction.
    The office always starts out pending review. Commit is left to the API layer.
    """
    tags = await load_tags_or_raise(db, payload.tags)

    office = Office(
        user_id=actor.user_id,
        title=payload.title,
        description=payload.description,
        lat=payload.lat,
        lng=payload.lng,
        address_line1=payload.address_line1,
        address_line2=payload.address_line2,
        hidden=payload.hidden,
        price_per_day=payload.price_per_day,
        monthly_discount=payload.monthly_discount,
        approval_status=initial_status(),
        created_by=actor.api_key_id,
        updated_by=actor.api_key_id,
    )
    # attach, not sync: a new office has no tags to replace
    office.tags.extend(tags)
    db.add(office)

    await db.flush()
    return office


async def update_office_record(
    db: AsyncSession,
    *,
    actor: Actor,
    office: Office,
    payload: OfficeUpdate,
) -> bool:
    """
    Apply a partial update (attributes + tag sync) in the caller's transaction.
    Returns True when the change sent the office back to review.

    `office` must have its tags loaded.
    """
    submitted = payload.model_dump(exclude_unset=True)
    tag_ids = submitted.pop("tags", None)
    changes = {k: v for k, v in submitted.items() if v is not None or k in NULLABLE_FIELDS}

    if "featured_image_id" in changes:
        await ensure_featured_image(db, office, changes["featured_image_id"])

    tags = await load_tags_or_raise(db, tag_ids) if tag_ids is not None else None

    requires_review = apply_office_changes(office, changes)
    office.updated_by = actor.api_key_id

    if tags is not None:
        # sync: the association becomes exactly the submitted set
        office.tags = tags

    await db.flush()
    return requires_review


async def soft_delete_office(db: AsyncSession, *, actor: Actor, office: Office) -> None:
    await ensure_office_deletable(db, office)

    office.deleted_at = datetime.now(timezone.utc)
    office.updated_by = actor.api_key_id
    await db.flush()
    log.info("office %s soft-deleted by %s", office.id, actor.api_key_id)
