import logging

from fastapi import HTTPException
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings


log = logging.getLogger(__name__)

engine = create_async_engine(settings.database_url, pool_pre_ping=True)
SessionLocal = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)


async def get_db():
    async with SessionLocal() as session:
        yield session


async def commit_or_500(db: AsyncSession, what: str) -> None:
    # Store write failures abort the whole unit of work.
    try:
        await db.commit()
    except SQLAlchemyError:
        await db.rollback()
        log.exception("%s: commit failed", what)
        raise HTTPException(status_code=500, detail=f"Could not {what}")
