from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import commit_or_500, get_db
from app.models.image import Image
from app.schemas.image import ImageDeletedOut, ImageEnvelope, ImageOut
from app.services.auth import ABILITY_OFFICE_UPDATE, Actor, get_actor
from app.services.images import delete_office_image, read_office_image, store_office_image
from app.services.office_guard import ensure_owner
from app.services.office_query import get_live_office_or_404
from app.services.storage import LocalObjectStore, get_object_store

router = APIRouter()


@router.post("/offices/{office_id}/images", response_model=ImageEnvelope, status_code=201)
async def upload_office_image(
    office_id: int,
    image: UploadFile = File(...),
    actor: Actor = Depends(get_actor),
    store: LocalObjectStore = Depends(get_object_store),
    db: AsyncSession = Depends(get_db),
) -> ImageEnvelope:
    office = await get_live_office_or_404(db, office_id)
    ensure_owner(actor, office, ABILITY_OFFICE_UPDATE)

    data, extension = await read_office_image(image)
    row = await store_office_image(db, store=store, office=office, data=data, extension=extension)
    await commit_or_500(db, "save office image")

    return ImageEnvelope(data=ImageOut(id=row.id, path=row.path))


@router.delete("/offices/{office_id}/images/{image_id}", response_model=ImageDeletedOut)
async def delete_image(
    office_id: int,
    image_id: int,
    actor: Actor = Depends(get_actor),
    store: LocalObjectStore = Depends(get_object_store),
    db: AsyncSession = Depends(get_db),
) -> ImageDeletedOut:
    office = await get_live_office_or_404(db, office_id)
    image = await db.get(Image, image_id)
    if image is None:
        raise HTTPException(status_code=404, detail="Image not found")

    ensure_owner(actor, office, ABILITY_OFFICE_UPDATE)

    await delete_office_image(db, store=store, office=office, image=image)
    await commit_or_500(db, "delete office image")

    return ImageDeletedOut(image_id=image_id)
