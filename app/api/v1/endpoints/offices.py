from decimal import Decimal

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import commit_or_500, get_db
from app.models.office import Office
from app.schemas.common import PageMeta
from app.schemas.image import ImageOut
from app.schemas.office import (
    OfficeCollection,
    OfficeCreate,
    OfficeDeletedOut,
    OfficeEnvelope,
    OfficeOut,
    OfficeUpdate,
)
from app.schemas.tag import TagOut
from app.schemas.user import UserOut
from app.services.auth import (
    ABILITY_OFFICE_DELETE,
    ABILITY_OFFICE_UPDATE,
    Actor,
    get_actor,
    get_optional_actor,
    require_office_create,
)
from app.services.notifications import (
    Notifier,
    build_pending_approval_notice,
    dispatch_pending_approval,
    get_notifier,
)
from app.services.office_guard import ensure_owner
from app.services.office_query import (
    OfficeFilters,
    get_live_office_or_404,
    get_visible_office,
    list_offices as query_offices,
    load_office,
)
from app.services.offices import create_office_record, soft_delete_office, update_office_record

router = APIRouter()


def office_out(office: Office, reservations_count: int) -> OfficeOut:
    return OfficeOut(
        id=office.id,
        title=office.title,
        description=office.description,
        lat=office.lat,
        lng=office.lng,
        address_line1=office.address_line1,
        address_line2=office.address_line2,
        approval_status=office.approval_status,
        hidden=office.hidden,
        price_per_day=office.price_per_day,
        monthly_discount=office.monthly_discount,
        featured_image_id=office.featured_image_id,
        reservations_count=reservations_count,
        user=UserOut(id=office.user.id, name=office.user.name),
        images=[ImageOut(id=i.id, path=i.path) for i in office.images],
        tags=[TagOut(id=t.id, name=t.name) for t in office.tags],
    )


async def _fresh_office_out(db: AsyncSession, office_id: int) -> OfficeOut:
    loaded = await load_office(db, office_id)
    if loaded is None:
        raise HTTPException(status_code=404, detail="Office not found")
    return office_out(*loaded)


@router.get("/offices", response_model=OfficeCollection)
async def list_offices(
    request: Request,
    user_id: int | None = Query(default=None),
    visitor_id: int | None = Query(default=None),
    lat: Decimal | None = Query(default=None, ge=-90, le=90),
    lng: Decimal | None = Query(default=None, ge=-180, le=180),
    page: int = Query(default=1, ge=1),
    actor: Actor | None = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
) -> OfficeCollection:
    filters = OfficeFilters.from_query(user_id=user_id, visitor_id=visitor_id, lat=lat, lng=lng)
    result = await query_offices(db, filters, actor, page=page)

    first = (result.page - 1) * result.per_page + 1 if result.rows else None
    return OfficeCollection(
        data=[office_out(office, count) for office, count in result.rows],
        meta=PageMeta(
            current_page=result.page,
            from_=first,
            last_page=result.last_page,
            per_page=result.per_page,
            to=first + len(result.rows) - 1 if first is not None else None,
            total=result.total,
            path=str(request.url.path),
        ),
    )


@router.get("/offices/{office_id}", response_model=OfficeEnvelope)
async def show_office(
    office_id: int,
    actor: Actor | None = Depends(get_optional_actor),
    db: AsyncSession = Depends(get_db),
) -> OfficeEnvelope:
    office, count = await get_visible_office(db, office_id, actor)
    return OfficeEnvelope(data=office_out(office, count))


@router.post("/offices", response_model=OfficeEnvelope, status_code=201)
async def create_office(
    payload: OfficeCreate,
    actor: Actor = Depends(require_office_create),
    db: AsyncSession = Depends(get_db),
) -> OfficeEnvelope:
    office = await create_office_record(db, actor=actor, payload=payload)
    await commit_or_500(db, "create office")

    return OfficeEnvelope(data=await _fresh_office_out(db, office.id))


@router.put("/offices/{office_id}", response_model=OfficeEnvelope)
async def update_office(
    office_id: int,
    payload: OfficeUpdate,
    background_tasks: BackgroundTasks,
    actor: Actor = Depends(get_actor),
    notifier: Notifier = Depends(get_notifier),
    db: AsyncSession = Depends(get_db),
) -> OfficeEnvelope:
    office = await get_live_office_or_404(db, office_id)
    ensure_owner(actor, office, ABILITY_OFFICE_UPDATE)

    requires_review = await update_office_record(db, actor=actor, office=office, payload=payload)
    await commit_or_500(db, "update office")

    # Only after commit: admins are told the office needs another look.
    if requires_review:
        notice = await build_pending_approval_notice(db, office.id)
        if notice is not None:
            background_tasks.add_task(dispatch_pending_approval, notifier, notice)

    return OfficeEnvelope(data=await _fresh_office_out(db, office.id))


@router.delete("/offices/{office_id}", response_model=OfficeDeletedOut)
async def delete_office(
    office_id: int,
    actor: Actor = Depends(get_actor),
    db: AsyncSession = Depends(get_db),
) -> OfficeDeletedOut:
    office = await get_live_office_or_404(db, office_id)
    ensure_owner(actor, office, ABILITY_OFFICE_DELETE)

    await soft_delete_office(db, actor=actor, office=office)
    await commit_or_500(db, "delete office")

    return OfficeDeletedOut(office_id=office_id)
