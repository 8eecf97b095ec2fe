import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from crm_service.adapter.seed import seed_system_roles
from crm_service.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from crm_service.api.app import create_app
from crm_service.depends import get_session_factory, get_unit_of_work
from tests.fixtures.json_loader import TestDataLoader
from tests.utils.auth_flow import OTP_CODE


@pytest_asyncio.fixture
def test_data():
    return TestDataLoader()


@pytest.fixture(autouse=True)
def fixed_otp_code(monkeypatch):
    """Every issued code is OTP_CODE so flows can be completed over HTTP."""
    monkeypatch.setattr(
        "crm_service.app.services.otp_service.generate_otp", lambda: OTP_CODE
    )


@pytest_asyncio.fixture
async def engine(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture
def session_factory(engine):
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False, autoflush=False)


@pytest_asyncio.fixture
async def db_session(session_factory):
    async with session_factory() as session:
        await seed_system_roles(session)
        yield session


@pytest.fixture
def app_factory(db_session, session_factory):
    """Build the app for a given config class with the test database wired in."""

    def build(app_config=ApplicationConfig):
        app = create_app(app_config)

        async def override_get_unit_of_work():
            yield SqlAlchemyUnitOfWork(db_session)

        app.dependency_overrides[get_unit_of_work] = override_get_unit_of_work
        app.dependency_overrides[get_session_factory] = lambda: session_factory
        return app

    return build


@pytest_asyncio.fixture
async def client(app_factory):
    transport = ASGITransport(app=app_factory())
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
