"""
Pytest configuration and fixtures.
"""

import os

# Keep the application engine off PostgreSQL during tests
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret")

from datetime import date
from decimal import Decimal

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker

from commissiondesk.models import (
    Base,
    Sale,
    SaleStatus,
    UserProfile,
    UserRole,
    VehicleType,
)


# Test database URL (use SQLite for tests)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def db_engine():
    """Create test database engine."""
    engine = create_async_engine(TEST_DATABASE_URL, echo=False)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(db_engine):
    """Create test database session."""
    async_session = async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session() as session:
        yield session


async def _add_user(db: AsyncSession, email: str, full_name: str, role: UserRole, is_active: bool = True) -> UserProfile:
    user = UserProfile(email=email, full_name=full_name, role=role, is_active=is_active)
    db.add(user)
    await db.commit()
    await db.refresh(user)
    return user


@pytest_asyncio.fixture
async def salesperson(db_session):
    return await _add_user(db_session, "dana@example.com", "Dana Reyes", UserRole.MEMBER)


@pytest_asyncio.fixture
async def partner(db_session):
    return await _add_user(db_session, "sam@example.com", "Sam Ortiz", UserRole.MEMBER)


@pytest_asyncio.fixture
async def other_member(db_session):
    return await _add_user(db_session, "lee@example.com", "Lee Park", UserRole.MEMBER)


@pytest_asyncio.fixture
async def manager(db_session):
    return await _add_user(db_session, "morgan@example.com", "Morgan Hale", UserRole.MANAGER)


@pytest_asyncio.fixture
async def inactive_member(db_session):
    return await _add_user(db_session, "gone@example.com", "Former Rep", UserRole.MEMBER, is_active=False)


@pytest_asyncio.fixture
async def stored_sale(db_session, salesperson):
    """A completed sale row written directly, without ledger rows."""
    sale = Sale(
        stock_number="N1001",
        customer_name="Alex Kim",
        sale_date=date(2026, 3, 14),
        vehicle_type=VehicleType.NEW,
        sale_price=Decimal("25000"),
        commission_total=Decimal("400"),
        salesperson_id=salesperson.id,
        status=SaleStatus.COMPLETED,
    )
    db_session.add(sale)
    await db_session.commit()
    await db_session.refresh(sale)
    return sale
