import pytest
from sqlalchemy import func, select

from app.models.api_key import ApiKey
from app.models.tag import Tag
from app.models.user import User
from app.scripts.issue_api_key import issue_api_key
from app.scripts.seed_tags import DEFAULT_TAGS, seed_tags

from fixtures_seed import make_tag


@pytest.mark.asyncio
async def test_seed_tags_is_idempotent(db_session):
    await make_tag(db_session, "has_ac")

    assert await seed_tags(db_session) == len(DEFAULT_TAGS) - 1
    assert await seed_tags(db_session) == 0

    names = (await db_session.execute(select(Tag.name).order_by(Tag.name))).scalars().all()
    assert names == sorted(DEFAULT_TAGS)


@pytest.mark.asyncio
async def test_issued_key_authenticates(client, db_session):
    plain = await issue_api_key(db_session, email="host@example.com", name="Host", abilities=["office.create"])

    r = await client.post(
        "/v1/offices",
        json={
            "title": "Loft",
            "description": "Open plan",
            "lat": "1",
            "lng": "1",
            "address_line1": "Street 1",
            "price_per_day": 10,
        },
        headers={"X-API-Key": plain},
    )
    assert r.status_code == 201, r.text

    stored = (await db_session.execute(select(ApiKey.key_hash))).scalars().all()
    assert plain not in stored


@pytest.mark.asyncio
async def test_issuing_again_reuses_the_user(db_session):
    await issue_api_key(db_session, email="admin@example.com", name="Admin", abilities=["*"], is_admin=True)
    await issue_api_key(db_session, email="admin@example.com", name="Admin", abilities=["*"])

    users = (await db_session.execute(select(func.count()).select_from(User))).scalar_one()
    keys = (await db_session.execute(select(func.count()).select_from(ApiKey))).scalar_one()
    assert (users, keys) == (1, 2)
