"""
Checks that must pass before an office or one of its images is changed or
destroyed. Every check raises before anything is written, so a rejected
request leaves no side effects.
"""
from __future__ import annotations

import logging

from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.image import IMAGE_RESOURCE_OFFICE, Image
from app.models.office import Office
from app.services.auth import Actor, require_ability
from app.services.reservations import has_active_reservations


log = logging.getLogger(__name__)


def unprocessable(field: str, message: str) -> HTTPException:
    return HTTPException(status_code=422, detail={"errors": {field: [message]}})


def ensure_owner(actor: Actor, office: Office, ability: str) -> None:
    require_ability(actor, ability)
    if office.user_id != actor.user_id:
        raise HTTPException(status_code=403, detail="Office belongs to another user")


def image_belongs_to(image: Image, office: Office) -> bool:
    return image.resource_type == IMAGE_RESOURCE_OFFICE and image.resource_id == office.id


async def count_office_images(db: AsyncSession, office_id: int) -> int:
    stmt = select(func.count(Image.id)).where(
        Image.resource_type == IMAGE_RESOURCE_OFFICE,
        Image.resource_id == office_id,
    )
    return int((await db.execute(stmt)).scalar_one())


async def ensure_office_deletable(db: AsyncSession, office: Office) -> None:
    if await has_active_reservations(db, office.id):
        log.info("office %s delete rejected: active reservations", office.id)
        raise unprocessable("office", "Cannot delete an office with active reservations")


async def ensure_image_deletable(db: AsyncSession, office: Office, image: Image) -> None:
    # Order matters: the first failing check is the one reported.
    if not image_belongs_to(image, office):
        raise unprocessable("image", "Cannot delete this image")

    if await count_office_images(db, office.id) == 1:
        raise unprocessable("image", "Cannot delete the only image")

    if office.featured_image_id == image.id:
        raise unprocessable("image", "Cannot delete the featured image")


async def ensure_featured_image(db: AsyncSession, office: Office, image_id: int | None) -> None:
    if image_id is None:
        return
    image = await db.get(Image, image_id)
    if image is None or not image_belongs_to(image, office):
        raise unprocessable("featured_image_id", "The featured image must be one of this office's images")
