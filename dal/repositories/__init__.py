"""Repositories package.

Files:
  base.py      — BaseRepository[ModelT]: fetch / get / add / delete over one model
  ordering.py  — OrderBy built from a dotted attribute path ("customer.name", "asc")

Adding a repository for a model:
    class OrderRepository(BaseRepository[Order]):
        model = Order
"""

from dal.repositories.base import BaseRepository, Predicate
from dal.repositories.ordering import OrderBy, build_order_by

__all__ = ["BaseRepository", "OrderBy", "Predicate", "build_order_by"]
