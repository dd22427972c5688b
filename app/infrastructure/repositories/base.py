"""
Repository contracts shared by all features.

Services depend on the Protocol interfaces only; the SQL implementations below
them translate every SQLAlchemyError into a StorageError inside Err(...).
"""
import logging
from dataclasses import dataclass, fields
from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Any, Iterator, Protocol, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.errors import StorageError
from app.utils.result import Err, Result

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT")
ChangesT = TypeVar("ChangesT", contravariant=True)


class _Unset:
    """Marker for "field not present in a partial update"."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


class FieldChanges:
    """
    Base for tagged partial-update structures.

    Subclasses are dataclasses whose fields all default to UNSET; only fields
    that were explicitly set are written, each to its own fixed column.
    """

    def items(self) -> Iterator[tuple[str, Any]]:
        for f in fields(self):
            value = getattr(self, f.name)
            if value is not UNSET:
                yield f.name, value

    def is_empty(self) -> bool:
        return not any(True for _ in self.items())


class OrderBy(str, Enum):
    CREATED_AT = "created_at"
    DATE = "date"
    DUE_DATE = "due_date"
    AMOUNT = "amount"
    TITLE = "title"


class SortDirection(str, Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass
class FilterOptions:
    """Ordering + pagination for list queries. Default: creation order."""
    order_by: OrderBy = OrderBy.CREATED_AT
    direction: SortDirection = SortDirection.ASC
    limit: int | None = None
    offset: int = 0


@dataclass
class DateRangeFilter:
    start_date: date | None = None
    end_date: date | None = None


class BaseRepository(Protocol[EntityT, ChangesT]):
    def find_by_id(self, entity_id: str) -> Result[EntityT | None, StorageError]: ...

    def create(self, entity: EntityT) -> Result[EntityT, StorageError]: ...

    def update(self, entity_id: str, changes: ChangesT) -> Result[EntityT, StorageError]: ...

    def delete(self, entity_id: str) -> Result[bool, StorageError]: ...


class SqlRepository:
    """Common plumbing for SQLAlchemy-backed repositories"""

    # ORM model class; list ordering columns are looked up on it by OrderBy name
    model: Any = None

    def __init__(self, db: Session):
        self.db = db

    def _order_clauses(self, options: FilterOptions) -> list:
        column = getattr(self.model, options.order_by.value, None)
        if column is None:
            raise ValueError(f"{self.model.__name__} cannot be ordered by {options.order_by.value}")
        # row_id breaks ties so equal sort keys still come back in creation order
        if options.direction is SortDirection.DESC:
            return [column.desc(), self.model.row_id.desc()]
        return [column.asc(), self.model.row_id.asc()]

    def _apply_options(self, query, options: FilterOptions):
        query = query.order_by(*self._order_clauses(options))
        if options.limit is not None:
            query = query.limit(options.limit).offset(options.offset)
        elif options.offset:
            query = query.offset(options.offset)
        return query

    def _storage_error(self, operation: str, message: str, exc: SQLAlchemyError) -> Err:
        self.db.rollback()
        logger.exception("%s.%s failed", type(self).__name__, operation)
        return Err(StorageError(f"{message}: {exc}", operation=operation))


def to_decimal(value) -> Decimal:
    """SQL aggregates come back as Decimal, int or float depending on the backend."""
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))
