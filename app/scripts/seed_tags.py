import asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from app.core.config import settings
from app.models.tag import Tag

DEFAULT_TAGS = ("has_ac", "has_private_bathroom", "has_coffee_machine", "has_parking", "has_meeting_room")


async def seed_tags(db: AsyncSession, names=DEFAULT_TAGS) -> int:
    existing = set((await db.execute(select(Tag.name))).scalars().all())
    missing = [name for name in names if name not in existing]
    db.add_all(Tag(name=name) for name in missing)
    await db.commit()
    return len(missing)


async def main():
    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    Session = async_sessionmaker(engine, expire_on_commit=False)

    async with Session() as db:
        inserted = await seed_tags(db)
        print(f"Inserted {inserted} tags, {len(DEFAULT_TAGS) - inserted} already present")

    await engine.dispose()

if __name__ == "__main__":
    asyncio.run(main())
