from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func
from sqlalchemy.types import DateTime

from app.models.base import Base


# Images are attached to a resource by (type, id); offices are the only owner type today.
IMAGE_RESOURCE_OFFICE = "office"


class Image(Base):
    __tablename__ = "images"
    __table_args__ = (
        Index("ix_images_resource", "resource_type", "resource_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    resource_type: Mapped[str] = mapped_column(String(50), nullable=False)
    resource_id: Mapped[int] = mapped_column(Integer, nullable=False)

    # Storage key relative to the media root
    path: Mapped[str] = mapped_column(String(500), nullable=False)

    created_at: Mapped[str] = mapped_column(DateTime(timezone=True), server_default=func.now())
