from decimal import Decimal

from sqlalchemy import Boolean, Column, Float, ForeignKey, Index, Integer, Numeric, String, Table, Text, event
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import DateTime

from app.models.base import Base, AuditMixin
from app.services.geo import Coordinate, unit_vector


APPROVAL_PENDING = "pending"
APPROVAL_APPROVED = "approved"
APPROVAL_REJECTED = "rejected"


office_tag = Table(
    "office_tag",
    Base.metadata,
    Column("office_id", Integer, ForeignKey("offices.id"), primary_key=True),
    Column("tag_id", Integer, ForeignKey("tags.id"), primary_key=True),
)


class Office(AuditMixin, Base):
    __tablename__ = "offices"
    __table_args__ = (
        Index("ix_offices_visibility", "approval_status", "hidden"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)

    lat: Mapped[Decimal] = mapped_column(Numeric(10, 7), nullable=False)
    lng: Mapped[Decimal] = mapped_column(Numeric(10, 7), nullable=False)
    address_line1: Mapped[str] = mapped_column(String(255), nullable=False)
    address_line2: Mapped[str | None] = mapped_column(String(255), nullable=True)

    # "pending" | "approved" | "rejected"; only admins move an office out of "pending"
    approval_status: Mapped[str] = mapped_column(String(20), nullable=False, default=APPROVAL_PENDING)
    hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    price_per_day: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    monthly_discount: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Must reference one of this office's images; enforced by the service layer.
    featured_image_id: Mapped[int | None] = mapped_column(Integer, nullable=True)

    # Soft-delete tombstone
    deleted_at: Mapped[str | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Unit vector of (lat, lng), kept in sync below; used for distance ordering in SQL.
    geo_x: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    geo_y: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    geo_z: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    user = relationship("User")
    images = relationship(
        "Image",
        primaryjoin="and_(Image.resource_type == 'office', foreign(Image.resource_id) == Office.id)",
        order_by="Image.id",
        viewonly=True,
    )
    tags = relationship("Tag", secondary=office_tag, order_by="Tag.id")


# ORM flushes only. A Core UPDATE of lat/lng must set geo_x/y/z too, or distance
# ordering for that office goes stale.
@event.listens_for(Office, "before_insert")
@event.listens_for(Office, "before_update")
def _sync_geo_vector(mapper, connection, target: Office) -> None:
    target.geo_x, target.geo_y, target.geo_z = unit_vector(
        Coordinate(lat=float(target.lat), lng=float(target.lng))
    )
