from dataclasses import dataclass
from fastapi import Depends, HTTPException, Security
from fastapi.security.api_key import APIKeyHeader
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.db import get_db
from app.core.security import key_prefix, verify_api_key
from app.models.api_key import ApiKey
from app.models.user import User

api_key_header = APIKeyHeader(name="X-API-Key", auto_error=False)

ABILITY_OFFICE_CREATE = "office.create"
ABILITY_OFFICE_UPDATE = "office.update"
ABILITY_OFFICE_DELETE = "office.delete"


@dataclass(frozen=True)
class Actor:
    api_key_id: str
    user_id: int
    is_admin: bool
    abilities: tuple[str, ...]

    def can(self, ability: str) -> bool:
        return "*" in self.abilities or ability in self.abilities


async def _resolve_actor(db: AsyncSession, api_key: str) -> Actor:
    prefix = key_prefix(api_key)
    if prefix is None:
        raise HTTPException(status_code=401, detail="Invalid API key")

    stmt = (
        select(ApiKey, User)
        .join(User, User.id == ApiKey.user_id)
        .where(ApiKey.key_prefix == prefix, ApiKey.is_active.is_(True))
    )
    rows = (await db.execute(stmt)).all()
    match = next(((key, user) for key, user in rows if verify_api_key(api_key, key.key_hash)), None)
    if match is None:
        raise HTTPException(status_code=401, detail="Invalid API key")

    key, user = match
    return Actor(
        api_key_id=key.id,
        user_id=user.id,
        is_admin=user.is_admin,
        abilities=tuple(key.abilities or ()),
    )


async def get_actor(
    api_key: str | None = Security(api_key_header),
    db: AsyncSession = Depends(get_db),
) -> Actor:
    if not api_key:
        raise HTTPException(status_code=401, detail="Missing X-API-Key")
    return await _resolve_actor(db, api_key)


async def get_optional_actor(
    api_key: str | None = Security(api_key_header),
    db: AsyncSession = Depends(get_db),
) -> Actor | None:
    # Anonymous callers are allowed; a key that is sent must still be valid.
    if not api_key:
        return None
    return await _resolve_actor(db, api_key)


def require_ability(actor: Actor, ability: str) -> None:
    if not actor.can(ability):
        raise HTTPException(status_code=403, detail=f"API key lacks the {ability} ability")


def require_office_create(actor: Actor = Depends(get_actor)) -> Actor:
    require_ability(actor, ABILITY_OFFICE_CREATE)
    return actor
