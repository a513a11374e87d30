"""
Pytest configuration and shared fixtures.

This module provides:
- Environment variable setup for tests
- Schema creation for the models in orm_models.py
- An in-memory SQLite session and a seeded variant
"""

import os

# Set test environment variables BEFORE any dal imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["APP_ENV"] = "test"
os.environ.pop("DAL_STRICT_ORDER_DIRECTION", None)

import pytest  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from dal.db.base import Base  # noqa: E402
from orm_models import Customer, Order, OrderLine, Product, Tag  # noqa: E402


@pytest.fixture
def anyio_backend():
    """
    Configure anyio backend for async tests.

    Returns:
        str: Backend name ("asyncio")
    """
    return "asyncio"


@pytest.fixture
async def session_factory():
    """
    Create an in-memory SQLite database and return a session factory bound to it.

    Yields:
        async_sessionmaker for testing
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )

    await engine.dispose()


@pytest.fixture
async def async_session(session_factory):
    """Provide a session on the in-memory database."""
    async with session_factory() as session:
        yield session


@pytest.fixture
async def seeded_session(async_session: AsyncSession):
    """
    Session with a small order book:

        id  reference  total  status   customer  lines
        1   A-100      25     open     Bob       2 x Pen
        2   A-101      10     shipped  Ann       Ink, Pen
        3   A-102      40     open     (none)
        4   A-103      15     open     Cid
    """
    ann = Customer(id=1, name="Ann", city="Oslo")
    bob = Customer(id=2, name="Bob", city="Bergen")
    cid = Customer(id=3, name="Cid", city="Oslo")
    pen = Product(id=1, title="Pen")
    ink = Product(id=2, title="Ink")
    async_session.add_all([ann, bob, cid, pen, ink])
    async_session.add_all(
        [
            Order(id=1, reference="A-100", total=25, customer=bob,
                  lines=[OrderLine(id=1, product=pen, quantity=2)]),
            Order(id=2, reference="A-101", total=10, status="shipped",
                  customer=ann,
                  lines=[OrderLine(id=2, product=ink), OrderLine(id=3, product=pen)]),
            Order(id=3, reference="A-102", total=40),
            Order(id=4, reference="A-103", total=15, customer=cid),
        ]
    )
    async_session.add_all([Tag(code="vip", label="Very important"), Tag(code="new", label="New")])
    await async_session.commit()
    async_session.expunge_all()
    yield async_session
