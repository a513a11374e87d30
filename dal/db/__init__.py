"""Database package — async SQLAlchemy engine, session factory, Base.

UnitOfWork lives in dal.db.unit_of_work; it depends on dal.repositories,
which itself imports this package.
"""
from dal.db.base import Base, async_session_factory, build_engine, engine

__all__ = ["Base", "async_session_factory", "build_engine", "engine"]
