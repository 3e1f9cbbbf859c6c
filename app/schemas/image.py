from pydantic import BaseModel

from app.schemas.common import DeletedOut


class ImageOut(BaseModel):
    id: int
    path: str


class ImageEnvelope(BaseModel):
    data: ImageOut


class ImageDeletedOut(DeletedOut):
    image_id: int
