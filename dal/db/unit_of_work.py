"""Unit of Work — owns one AsyncSession for the lifetime of a logical operation.

Usage:
    async with UnitOfWork() as uow:
        orders = uow.repository(Order)
        orders.add(Order(total=10))
        await uow.commit()

Repositories obtained from a unit of work share its session and never commit,
roll back or close it themselves.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dal.db.base import Base, async_session_factory
from dal.repositories.base import BaseRepository

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)


class UnitOfWork:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession] | None = None):
        self._session_factory = session_factory or async_session_factory
        self._session: AsyncSession | None = None

    async def __aenter__(self) -> UnitOfWork:
        self._session = self._session_factory()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        if self._session is None:
            return
        try:
            if exc_type is not None:
                await self._session.rollback()
        finally:
            await self._session.close()
            self._session = None

    @property
    def session(self) -> AsyncSession:
        if self._session is None:
            raise RuntimeError("UnitOfWork is not active; use 'async with UnitOfWork()'")
        return self._session

    def repository(self, model: type[ModelT]) -> BaseRepository[ModelT]:
        """Return a BaseRepository bound to ``model`` and this unit's session."""
        return BaseRepository(self.session, model=model)

    @property
    def pending(self) -> dict[str, list[Any]]:
        """Changes staged in the session and not yet flushed."""
        return {
            "new": list(self.session.new),
            "dirty": list(self.session.dirty),
            "deleted": list(self.session.deleted),
        }

    async def commit(self) -> None:
        pending = self.pending
        logger.debug(
            "Committing unit of work: %d new, %d dirty, %d deleted",
            len(pending["new"]), len(pending["dirty"]), len(pending["deleted"]),
        )
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
