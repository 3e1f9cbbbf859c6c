import os

# Must be set before app modules read settings.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("TELEMETRY_ENABLED", "false")

import httpx
import pytest
import pytest_asyncio

from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

# Import Base + all models so metadata is complete
import app.models  # noqa: F401
from app.models.base import Base

from app.main import app
from app.core.db import get_db
from app.services.notifications import PendingApprovalNotice, get_notifier
from app.services.storage import LocalObjectStore, get_object_store

from fixtures_seed import admin, other_user, owner  # noqa: F401


def _test_db_url() -> str:
    # Postgres when DATABASE_URL_TEST is set, otherwise a private in-memory SQLite per test
    return os.getenv("DATABASE_URL_TEST", "sqlite+aiosqlite:///:memory:")


@pytest_asyncio.fixture
async def async_engine():
    url = _test_db_url()
    if url.startswith("sqlite"):
        engine = create_async_engine(url, poolclass=StaticPool)
    else:
        engine = create_async_engine(url, pool_pre_ping=True)
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
            await conn.run_sync(Base.metadata.create_all)
        yield engine
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine):
    session_factory = async_sessionmaker(bind=async_engine, expire_on_commit=False, class_=AsyncSession)
    async with session_factory() as session:
        yield session


class RecordingNotifier:
    def __init__(self) -> None:
        self.notices: list[PendingApprovalNotice] = []
        self.fail = False

    def send_pending_approval(self, notice: PendingApprovalNotice) -> None:
        if self.fail:
            raise ConnectionError("broker unreachable")
        self.notices.append(notice)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()


@pytest.fixture
def object_store(tmp_path) -> LocalObjectStore:
    return LocalObjectStore(tmp_path / "media")


@pytest_asyncio.fixture
async def client(db_session: AsyncSession, notifier: RecordingNotifier, object_store: LocalObjectStore):
    """
    HTTP client that uses the test DB session, a recording notifier and a
    temporary object store via dependency overrides.
    """
    async def _override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = _override_get_db
    app.dependency_overrides[get_notifier] = lambda: notifier
    app.dependency_overrides[get_object_store] = lambda: object_store

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
