"""
Pytest configuration and fixtures.

Provides an in-memory SQLite database shared by the test session and
the app (via a `get_db` override), a seeded two-company tenancy, and an
httpx client bound to the app.

Seeded directory:
    Company A ── segments a1, a2      Company B ── segment b1
    users: global admin (no company), admin_a, user_a, user_b,
           orphan (role=user, no company; bypasses the service check)
"""

from types import SimpleNamespace

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from caredata.core.database import get_db
from caredata.core.security import hash_password
from caredata.main import create_app
from caredata.models import (
    Base,
    Company,
    Segment,
    User,
    UserRole,
)
from caredata.services.storage_service import LocalDocumentStore

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
PASSWORD = "correct-horse-battery"


@pytest.fixture
async def session_factory():
    test_engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(test_engine, class_=AsyncSession, expire_on_commit=False)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await test_engine.dispose()


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seed(session_factory):
    async with session_factory() as session:
        company_a = Company(company_name="Acme Care")
        company_b = Company(company_name="Bayside Homecare")
        session.add_all([company_a, company_b])
        await session.flush()

        a1 = Segment(company_id=company_a.company_id, segment_name="North")
        a2 = Segment(company_id=company_a.company_id, segment_name="South")
        b1 = Segment(company_id=company_b.company_id, segment_name="East")
        session.add_all([a1, a2, b1])

        password_hash = hash_password(PASSWORD)
        users = {
            "global_admin": User(
                name="Root", username="root", password_hash=password_hash, role=UserRole.ADMIN
            ),
            "admin_a": User(
                name="Ada Admin",
                username="ada",
                password_hash=password_hash,
                role=UserRole.ADMIN,
                company_id=company_a.company_id,
            ),
            "user_a": User(
                name="Alan User",
                username="alan",
                password_hash=password_hash,
                role=UserRole.USER,
                company_id=company_a.company_id,
            ),
            "user_b": User(
                name="Bea User",
                username="bea",
                password_hash=password_hash,
                role=UserRole.USER,
                company_id=company_b.company_id,
            ),
            "orphan": User(
                name="Otto Orphan",
                username="otto",
                password_hash=password_hash,
                role=UserRole.USER,
            ),
        }
        session.add_all(users.values())
        await session.commit()

    return SimpleNamespace(
        company_a=company_a,
        company_b=company_b,
        a1=a1,
        a2=a2,
        b1=b1,
        **users,
    )


@pytest.fixture
def document_store(tmp_path):
    return LocalDocumentStore(tmp_path / "documents")


@pytest.fixture
def app(session_factory, document_store):
    application = create_app(document_store=document_store)

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    application.dependency_overrides[get_db] = override_get_db
    return application


@pytest.fixture
async def client(app):
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
