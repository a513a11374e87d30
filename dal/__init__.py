"""Generic async data-access layer over SQLAlchemy."""

from dal.core.exceptions import (
    DalException,
    InvalidOrderDirectionError,
    PropertyResolutionError,
    QueryBuildError,
)
from dal.db import Base
from dal.db.unit_of_work import UnitOfWork
from dal.repositories import BaseRepository, OrderBy, build_order_by

__all__ = [
    "Base",
    "BaseRepository",
    "DalException",
    "InvalidOrderDirectionError",
    "OrderBy",
    "PropertyResolutionError",
    "QueryBuildError",
    "UnitOfWork",
    "build_order_by",
]
