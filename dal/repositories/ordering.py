"""Dynamic ordering built from a dotted attribute path and a direction token.

    order = build_order_by(Order, "customer.name", "asc")
    stmt = order(select(Order))        # LEFT OUTER JOIN customers ... ORDER BY name ASC
    rows = order.sort(loaded_orders)   # same ordering on objects already in memory

Paths are resolved against the SQLAlchemy mapper registry when the ordering is
built, so a bad path fails before any query runs.
"""

from __future__ import annotations

import logging
from typing import Any, Generic, Iterable, NamedTuple, TypeVar

from sqlalchemy import Select, inspect
from sqlalchemy.ext.hybrid import HybridExtensionType, hybrid_property
from sqlalchemy.orm import ColumnProperty, Mapper, RelationshipProperty, aliased

from dal.core.config import settings
from dal.core.exceptions import InvalidOrderDirectionError, PropertyResolutionError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

ASCENDING = "asc"
DESCENDING = "desc"


class PathHop(NamedTuple):
    """One resolved segment: the attribute key and, for relationships, the related class."""

    key: str
    target: type | None


def _mapped_attributes(mapper: Mapper) -> dict[str, Any]:
    """Columns, relationships and hybrid properties of a mapped class, by name."""
    attrs: dict[str, Any] = dict(mapper.attrs.items())
    for key, descriptor in mapper.all_orm_descriptors.items():
        if getattr(descriptor, "extension_type", None) is HybridExtensionType.HYBRID_PROPERTY:
            attrs.setdefault(key, descriptor)
    return attrs


def _find_property(mapper: Mapper, segment: str) -> tuple[str, Any] | None:
    attrs = _mapped_attributes(mapper)
    if segment in attrs:
        return segment, attrs[segment]
    matches = [(key, prop) for key, prop in attrs.items() if key.lower() == segment.lower()]
    if len(matches) > 1:
        raise LookupError(", ".join(sorted(key for key, _ in matches)))
    return matches[0] if matches else None


def resolve_path(model: type, path: str) -> tuple[PathHop, ...]:
    """Resolve every segment of ``path`` on ``model`` or raise PropertyResolutionError.

    Segments match mapped columns, relationships and hybrid properties
    case-insensitively. Only scalar (many-to-one / one-to-one) relationships
    can be walked through and the last segment must be a column or hybrid.
    """
    entity = model.__name__
    segments = path.split(".")
    hops: list[PathHop] = []
    current: type | None = model
    sortable = False
    stop_reason = ""

    for segment in segments:
        resolved = ".".join(hop.key for hop in hops)
        if current is None:
            raise PropertyResolutionError(entity, path, segment, resolved, stop_reason)

        try:
            found = _find_property(inspect(current), segment)
        except LookupError as exc:
            raise PropertyResolutionError(
                entity, path, segment, resolved, f"ambiguous between {exc}"
            ) from None
        if found is None:
            raise PropertyResolutionError(entity, path, segment, resolved)
        key, prop = found

        if isinstance(prop, RelationshipProperty):
            sortable = False
            if prop.uselist:
                hops.append(PathHop(key, None))
                current = None
                stop_reason = f"'{key}' is a collection"
            else:
                target = prop.mapper.class_
                hops.append(PathHop(key, target))
                current = target
        elif isinstance(prop, (ColumnProperty, hybrid_property)):
            sortable = True
            hops.append(PathHop(key, None))
            current = None
            stop_reason = f"'{key}' is a column"
        else:
            raise PropertyResolutionError(
                entity, path, segment, resolved, "not a column or relationship"
            )

    if not sortable:
        raise PropertyResolutionError(
            entity,
            path,
            segments[-1],
            ".".join(hop.key for hop in hops[:-1]),
            "a relationship is not sortable; name one of its columns",
        )
    return tuple(hops)


def parse_direction(order_type: str, strict: bool | None = None) -> bool:
    """Return True for ascending.

    Only the exact token "asc" sorts ascending; every other value sorts
    descending unless strict mode rejects it.
    """
    if strict is None:
        strict = settings.strict_order_direction
    if strict and order_type not in (ASCENDING, DESCENDING):
        raise InvalidOrderDirectionError(order_type)
    return order_type == ASCENDING


class OrderBy(Generic[ModelT]):
    """Reusable ordering bound to a resolved attribute path and a direction.

    Calling it on a ``Select`` adds one aliased outer join per relationship hop
    and the ORDER BY clause. ``sort`` applies the same ordering to loaded
    objects with Python's stable sort; relationships it walks through must
    already be loaded (see the ``include`` argument of the repository).
    """

    __slots__ = ("model", "path", "hops", "ascending")

    def __init__(self, model: type[ModelT], path: str, hops: tuple[PathHop, ...], ascending: bool):
        self.model = model
        self.path = path
        self.hops = hops
        self.ascending = ascending

    def __repr__(self) -> str:
        direction = ASCENDING if self.ascending else DESCENDING
        return f"OrderBy({self.model.__name__}.{self.path} {direction})"

    def __call__(self, statement: Select) -> Select:
        entity: Any = self.model
        for hop in self.hops[:-1]:
            target = aliased(hop.target)
            statement = statement.outerjoin(getattr(entity, hop.key).of_type(target))
            entity = target
        column = getattr(entity, self.hops[-1].key)
        return statement.order_by(column.asc() if self.ascending else column.desc())

    def key(self, entity: ModelT) -> Any:
        """Extract the sort value; None when any hop along the path is None."""
        value: Any = entity
        for hop in self.hops:
            value = getattr(value, hop.key)
            if value is None:
                return None
        return value

    def sort(self, entities: Iterable[ModelT]) -> list[ModelT]:
        # None sorts lowest, matching SQLite / MySQL NULL placement
        def _key(entity: ModelT) -> tuple[bool, Any]:
            value = self.key(entity)
            return (value is not None, value)

        return sorted(entities, key=_key, reverse=not self.ascending)


def build_order_by(
    model: type[ModelT],
    order_column: str,
    order_type: str,
    *,
    strict: bool | None = None,
) -> OrderBy[ModelT]:
    """Build an OrderBy for ``model`` from e.g. ("customer.name", "desc")."""
    try:
        hops = resolve_path(model, order_column)
    except PropertyResolutionError as exc:
        logger.warning("Ordering path rejected: %s", exc.message)
        raise
    ascending = parse_direction(order_type, strict)
    order = OrderBy(model, ".".join(hop.key for hop in hops), hops, ascending)
    logger.debug("Resolved %r from %r", order, order_column)
    return order
