from __future__ import annotations

import argparse
import asyncio

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.core.config import settings
from app.core.security import generate_api_key
from app.models.api_key import ApiKey
from app.models.user import User


async def issue_api_key(
    db: AsyncSession,
    *,
    email: str,
    name: str,
    abilities: list[str],
    is_admin: bool = False,
) -> str:
    """Create the user if needed and store a new key for it. Returns the plain key."""
    user = (await db.execute(select(User).where(User.email == email))).scalar_one_or_none()
    if user is None:
        user = User(name=name, email=email, is_admin=is_admin)
        db.add(user)
        await db.flush()

    key = generate_api_key()
    db.add(ApiKey(user_id=user.id, abilities=abilities, key_prefix=key.prefix, key_hash=key.hashed))
    await db.commit()
    return key.plain


async def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(description="Issue an API key for an offices user")
    parser.add_argument("--email", required=True)
    parser.add_argument("--name", default="")
    parser.add_argument("--admin", action="store_true", help="mark a newly created user as administrator")
    parser.add_argument(
        "--ability",
        action="append",
        dest="abilities",
        help="repeatable, e.g. --ability office.create; defaults to all abilities",
    )
    args = parser.parse_args(argv)

    engine = create_async_engine(settings.database_url, pool_pre_ping=True)
    Session = async_sessionmaker(engine, expire_on_commit=False)
    try:
        async with Session() as db:
            plain = await issue_api_key(
                db,
                email=args.email,
                name=args.name or args.email.split("@")[0],
                abilities=args.abilities or ["*"],
                is_admin=args.admin,
            )
    finally:
        await engine.dispose()

    # shown once; only the hash is kept
    print(plain)


if __name__ == "__main__":
    asyncio.run(main())
