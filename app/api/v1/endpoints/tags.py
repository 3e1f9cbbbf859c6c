from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.models.tag import Tag
from app.schemas.tag import TagCollection, TagOut

router = APIRouter()


@router.get("/tags", response_model=TagCollection)
async def list_tags(db: AsyncSession = Depends(get_db)) -> TagCollection:
    rows = (await db.execute(select(Tag).order_by(Tag.id.asc()))).scalars().all()
    return TagCollection(data=[TagOut(id=t.id, name=t.name) for t in rows])
