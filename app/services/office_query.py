from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from fastapi import HTTPException
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.models.office import APPROVAL_APPROVED, Office
from app.services.auth import Actor
from app.services.geo import Coordinate, distance_order_by
from app.services.reservations import active_reservations_count, has_reservation_by


PAGE_SIZE = 20

# Owner, images and tags ride along with every office we return.
EAGER = (
    selectinload(Office.user),
    selectinload(Office.images),
    selectinload(Office.tags),
)


@dataclass(frozen=True)
class OfficeFilters:
    user_id: int | None = None
    visitor_id: int | None = None
    near: Coordinate | None = None

    @classmethod
    def from_query(
        cls,
        *,
        user_id: int | None = None,
        visitor_id: int | None = None,
        lat: Decimal | float | None = None,
        lng: Decimal | float | None = None,
    ) -> "OfficeFilters":
        near = None
        if lat is not None and lng is not None:
            near = Coordinate(lat=float(lat), lng=float(lng))
        return cls(user_id=user_id, visitor_id=visitor_id, near=near)


@dataclass
class OfficePage:
    rows: list[tuple[Office, int]]
    total: int
    page: int
    per_page: int = PAGE_SIZE

    @property
    def last_page(self) -> int:
        return max(1, -(-self.total // self.per_page))


def visible_to_public():
    return [Office.approval_status == APPROVAL_APPROVED, Office.hidden.is_(False)]


def is_own_listing_scope(filters: OfficeFilters, actor: Actor | None) -> bool:
    return actor is not None and filters.user_id is not None and filters.user_id == actor.user_id


def build_predicates(filters: OfficeFilters, actor: Actor | None) -> list:
    predicates = [Office.deleted_at.is_(None)]

    # Owners listing their own offices see everything, including pending and hidden ones.
    if not is_own_listing_scope(filters, actor):
        predicates.extend(visible_to_public())

    if filters.user_id is not None:
        predicates.append(Office.user_id == filters.user_id)

    if filters.visitor_id is not None:
        predicates.append(has_reservation_by(filters.visitor_id))

    return predicates


def build_ordering(filters: OfficeFilters) -> list:
    if filters.near is not None:
        return [
            distance_order_by(filters.near, Office.geo_x, Office.geo_y, Office.geo_z),
            Office.id.asc(),
        ]
    return [Office.id.asc()]


async def list_offices(
    db: AsyncSession,
    filters: OfficeFilters,
    actor: Actor | None,
    page: int = 1,
) -> OfficePage:
    predicates = build_predicates(filters, actor)

    total = (
        await db.execute(select(func.count(Office.id)).where(*predicates))
    ).scalar_one()

    stmt = (
        select(Office, active_reservations_count())
        .where(*predicates)
        .order_by(*build_ordering(filters))
        .options(*EAGER)
        .execution_options(populate_existing=True)
        .offset((page - 1) * PAGE_SIZE)
        .limit(PAGE_SIZE)
    )
    rows = (await db.execute(stmt)).all()

    return OfficePage(
        rows=[(office, int(count or 0)) for office, count in rows],
        total=int(total),
        page=page,
    )


async def load_office(db: AsyncSession, office_id: int) -> tuple[Office, int] | None:
    """Fresh copy of a live office with its relations and active reservation count."""
    stmt = (
        select(Office, active_reservations_count())
        .where(Office.id == office_id, Office.deleted_at.is_(None))
        .options(*EAGER)
        .execution_options(populate_existing=True)
    )
    row = (await db.execute(stmt)).one_or_none()
    if row is None:
        return None
    office, count = row
    return office, int(count or 0)


async def get_visible_office(db: AsyncSession, office_id: int, actor: Actor | None) -> tuple[Office, int]:
    loaded = await load_office(db, office_id)
    if loaded is None:
        raise HTTPException(status_code=404, detail="Office not found")

    office, count = loaded
    is_owner = actor is not None and actor.user_id == office.user_id
    if not is_owner and (office.approval_status != APPROVAL_APPROVED or office.hidden):
        raise HTTPException(status_code=404, detail="Office not found")
    return office, count


async def get_live_office_or_404(db: AsyncSession, office_id: int) -> Office:
    # Path resolution for mutations; tombstoned offices do not exist here.
    stmt = (
        select(Office)
        .where(Office.id == office_id, Office.deleted_at.is_(None))
        .options(selectinload(Office.tags))
        .execution_options(populate_existing=True)
    )
    office = (await db.execute(stmt)).scalar_one_or_none()
    if office is None:
        raise HTTPException(status_code=404, detail="Office not found")
    return office
