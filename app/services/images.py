from __future__ import annotations

import logging

from fastapi import HTTPException, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.ids import storage_key
from app.models.image import IMAGE_RESOURCE_OFFICE, Image
from app.models.office import Office
from app.services.office_guard import ensure_image_deletable, unprocessable
from app.services.storage import LocalObjectStore


log = logging.getLogger(__name__)

MAX_IMAGE_BYTES = 5000 * 1024

# file signature -> extension
IMAGE_SIGNATURES = {
    b"\x89PNG\r\n\x1a\n": "png",
    b"\xff\xd8\xff": "jpg",
}


def detect_image_extension(data: bytes) -> str | None:
    for signature, extension in IMAGE_SIGNATURES.items():
        if data.startswith(signature):
            return extension
    return None


async def read_office_image(upload: UploadFile) -> tuple[bytes, str]:
    # Read one byte past the cap so oversized uploads are detected without loading them whole.
    data = await upload.read(MAX_IMAGE_BYTES + 1)
    if not data:
        raise unprocessable("image", "The image must be a non-empty file")
    if len(data) > MAX_IMAGE_BYTES:
        raise unprocessable("image", f"The image must not be larger than {MAX_IMAGE_BYTES // 1024} kilobytes")

    extension = detect_image_extension(data)
    if extension is None:
        raise unprocessable("image", "The image must be a file of type: jpg, png")
    return data, extension


async def store_office_image(
    db: AsyncSession,
    *,
    store: LocalObjectStore,
    office: Office,
    data: bytes,
    extension: str,
) -> Image:
    """
    Write the file, then the record. If the record never commits the file is
    left unreferenced, which is harmless.
    """
    key = store.put_bytes(key=storage_key("offices", extension), data=data)

    image = Image(resource_type=IMAGE_RESOURCE_OFFICE, resource_id=office.id, path=key)
    db.add(image)
    await db.flush()
    return image


async def delete_office_image(
    db: AsyncSession,
    *,
    store: LocalObjectStore,
    office: Office,
    image: Image,
) -> None:
    await ensure_image_deletable(db, office, image)

    # The file goes first; a record must never outlive its file.
    try:
        store.delete(image.path)
    except (OSError, ValueError):
        log.exception("office %s: could not remove stored image %s", office.id, image.path)
        raise HTTPException(status_code=500, detail="Could not delete the stored image")

    await db.delete(image)
    await db.flush()
