from decimal import Decimal

from pydantic import BaseModel, Field

from app.schemas.common import DeletedOut, PageMeta
from app.schemas.image import ImageOut
from app.schemas.tag import TagOut
from app.schemas.user import UserOut


class OfficeCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    lat: Decimal = Field(ge=-90, le=90, decimal_places=7)
    lng: Decimal = Field(ge=-180, le=180, decimal_places=7)
    address_line1: str = Field(min_length=1, max_length=255)
    address_line2: str | None = Field(default=None, max_length=255)
    hidden: bool = False
    price_per_day: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    monthly_discount: int = Field(default=0, ge=0, le=90)
    tags: list[int] = Field(default_factory=list)


class OfficeUpdate(BaseModel):
    # Every field optional; only the submitted ones are applied.
    title: str | None = Field(default=None, min_length=1, max_length=200)
    description: str | None = Field(default=None, min_length=1)
    lat: Decimal | None = Field(default=None, ge=-90, le=90, decimal_places=7)
    lng: Decimal | None = Field(default=None, ge=-180, le=180, decimal_places=7)
    address_line1: str | None = Field(default=None, min_length=1, max_length=255)
    address_line2: str | None = Field(default=None, max_length=255)
    hidden: bool | None = None
    price_per_day: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    monthly_discount: int | None = Field(default=None, ge=0, le=90)
    featured_image_id: int | None = None
    tags: list[int] | None = None


class OfficeOut(BaseModel):
    id: int
    title: str
    description: str
    lat: Decimal
    lng: Decimal
    address_line1: str
    address_line2: str | None
    approval_status: str
    hidden: bool
    price_per_day: Decimal
    monthly_discount: int
    featured_image_id: int | None
    reservations_count: int

    user: UserOut
    images: list[ImageOut]
    tags: list[TagOut]


class OfficeEnvelope(BaseModel):
    data: OfficeOut


class OfficeCollection(BaseModel):
    data: list[OfficeOut]
    meta: PageMeta


class OfficeDeletedOut(DeletedOut):
    office_id: int
