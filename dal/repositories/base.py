"""Generic async repository with dynamic ordering and eager-load includes."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, Generic, TypeVar, Union

from pydantic import BaseModel
from sqlalchemy import ColumnElement, Row, Select, func, inspect, select
from sqlalchemy.exc import ArgumentError, InvalidRequestError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import Load, RelationshipProperty, selectinload

from dal.core.exceptions import QueryBuildError
from dal.db.base import Base
from dal.repositories.ordering import OrderBy, build_order_by

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=Base)
ShapeT = TypeVar("ShapeT", bound=BaseModel)

# A SQL boolean clause, or a callable building one from the model class
Predicate = Union[ColumnElement[bool], Callable[[Any], ColumnElement[bool]]]
Columns = Union[Sequence[Any], Callable[[Any], Sequence[Any]]]


class BaseRepository(Generic[ModelT]):
    """Generic CRUD repository over one mapped model and one AsyncSession.

    The session is borrowed: the repository stages changes on it but never
    flushes, commits, rolls back or closes it. Either subclass with a ``model``
    attribute or pass ``model=`` to the constructor.
    """

    model: type[ModelT]

    def __init__(self, session: AsyncSession, model: type[ModelT] | None = None):
        if model is not None:
            self.model = model
        if getattr(self, "model", None) is None:
            raise TypeError(f"{type(self).__name__} needs a model class")
        self._session = session

    @property
    def session(self) -> AsyncSession:
        return self._session

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _clause(self, where: Predicate) -> ColumnElement[bool]:
        clause = where
        if callable(where) and not isinstance(where, ColumnElement):
            try:
                clause = where(self.model)
            except AttributeError as exc:
                raise QueryBuildError(
                    f"Predicate references an unknown attribute of {self.model.__name__}: {exc}"
                ) from exc
            except TypeError as exc:
                # Python and/or/not on SQL clauses; use & | ~ or and_()/or_()
                raise QueryBuildError(
                    f"Predicate for {self.model.__name__} cannot be translated: {exc}"
                ) from exc
        if not isinstance(clause, ColumnElement):
            raise QueryBuildError(
                f"Predicate for {self.model.__name__} is not a SQL expression: {clause!r}"
            )
        return clause

    def _where(self, q: Select, where: Predicate | None) -> Select:
        if where is None:
            return q
        try:
            return q.where(self._clause(where))
        except (ArgumentError, InvalidRequestError, TypeError) as exc:
            raise QueryBuildError(f"Invalid predicate for {self.model.__name__}: {exc}") from exc

    def _include_option(self, include_path: str) -> Load:
        """Build a selectinload chain for a path such as "lines.product"."""
        option = None
        current = self.model
        for name in include_path.split("."):
            name = name.strip()
            prop = dict(inspect(current).attrs.items()).get(name)
            if not isinstance(prop, RelationshipProperty):
                raise QueryBuildError(
                    f"'{name}' in include path '{include_path}' is not a relationship "
                    f"of {current.__name__}"
                )
            attr = getattr(current, name)
            option = selectinload(attr) if option is None else option.selectinload(attr)
            current = prop.mapper.class_
        return option

    def _include(self, q: Select, include: str) -> Select:
        for include_path in include.split(","):
            include_path = include_path.strip()
            if not include_path:
                continue
            q = q.options(self._include_option(include_path))
        return q

    async def _scalars(self, q: Select) -> list[ModelT]:
        result = await self._session.execute(q)
        return list(result.scalars().all())

    # ------------------------------------------------------------------
    # Ordering
    # ------------------------------------------------------------------

    def get_order_by(self, order_column: str, order_type: str) -> OrderBy[ModelT]:
        """Build a reusable ordering, e.g. ``repo.get_order_by("customer.name", "asc")``.

        Raises PropertyResolutionError immediately when any segment of the path
        cannot be resolved; nothing is queried.
        """
        return build_order_by(self.model, order_column, order_type)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    async def fetch(
        self,
        where: Predicate | None = None,
        order_by: Callable[[Select], Select] | None = None,
        include: str = "",
        *,
        offset: int | None = None,
        limit: int | None = None,
    ) -> list[ModelT]:
        """Filter, eager-load, order and materialise in one round trip.

        ``include`` is a comma-separated list of relationship paths. Paging is
        applied only when ``offset``/``limit`` are given.
        """
        q = self._where(select(self.model), where)
        q = self._include(q, include)
        if order_by is not None:
            if isinstance(order_by, OrderBy) and order_by.model is not self.model:
                raise QueryBuildError(
                    f"{order_by!r} cannot order {self.model.__name__} rows"
                )
            q = order_by(q)
        if offset is not None:
            q = q.offset(offset)
        if limit is not None:
            q = q.limit(limit)
        logger.debug("Fetching %s: %s", self.model.__name__, q)
        return await self._scalars(q)

    async def get(self, where: Predicate, include: str = "") -> ModelT | None:
        """First match in store order (no ORDER BY), or None."""
        q = self._include(self._where(select(self.model), where), include).limit(1)
        result = await self._session.execute(q)
        return result.scalars().first()

    async def get_by_id(self, entity_id: Any) -> ModelT | None:
        """Primary-key lookup; accepts int, str or a tuple for composite keys."""
        return await self._session.get(self.model, entity_id)

    async def get_all(self) -> list[ModelT]:
        return await self._scalars(select(self.model))

    async def get_many(self, where: Predicate) -> list[ModelT]:
        return await self.fetch(where)

    async def get_by(
        self,
        where: Predicate,
        columns: Columns,
        into: type[ShapeT] | None = None,
    ) -> list[Row] | list[ShapeT]:
        """Select only ``columns`` for rows matching ``where``.

        ``columns`` is a sequence of column expressions or a callable taking the
        model class, e.g. ``lambda m: (m.id, m.total)``. With ``into`` each row
        is validated into that pydantic model by column label.
        The statement selects FROM the repository model; columns of other
        models need a linking predicate.
        """
        try:
            cols = columns(self.model) if callable(columns) else columns
            q = self._where(select(*cols).select_from(self.model), where)
        except (ArgumentError, InvalidRequestError, AttributeError, TypeError) as exc:
            raise QueryBuildError(f"Invalid projection for {self.model.__name__}: {exc}") from exc
        rows = (await self._session.execute(q)).all()
        if into is None:
            return list(rows)
        return [into.model_validate(dict(row._mapping)) for row in rows]

    async def count(self, where: Predicate | None = None) -> int:
        q = self._where(select(self.model), where)
        count_q = select(func.count()).select_from(q.subquery())
        return (await self._session.execute(count_q)).scalar_one()

    async def exists(self, where: Predicate) -> bool:
        q = select(self._where(select(self.model), where).exists())
        return bool((await self._session.execute(q)).scalar())

    # ------------------------------------------------------------------
    # Write (staged on the session; the caller commits)
    # ------------------------------------------------------------------

    def add(self, entity: ModelT) -> ModelT:
        self._session.add(entity)
        return entity

    async def delete(self, entity: ModelT) -> None:
        """Stage removal, attaching the instance by primary key if it is not tracked."""
        if entity not in self._session:
            entity = await self._session.merge(entity)
        await self._session.delete(entity)

    async def delete_where(self, where: Predicate) -> list[ModelT]:
        """Load every match, then stage each one for removal individually.

        Runs a full SELECT first (not a bulk DELETE) so ORM cascades apply per row.
        """
        matches = await self.get_many(where)
        for entity in matches:
            await self._session.delete(entity)
        logger.debug("Staged %d %s row(s) for deletion", len(matches), self.model.__name__)
        return matches
