"""Row-based query interface over async SQLAlchemy Core.

The gamification engine talks to persistence only through this module:
``store.table(name)`` returns a chainable query whose ``execute()`` resolves
to a :class:`StoreResult`. Database failures never escape ``execute()``;
they come back as ``StoreResult.error`` so every call site has to branch on
them explicitly.

    result = await store.table("user_badges").select().eq("user_id", uid).execute()
    if result.error is not None:
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Generic, Protocol, TypeVar

from sqlalchemy import ColumnElement, Table, func, insert, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from zuna.db.base import Base

logger = logging.getLogger(__name__)

T = TypeVar("T")

Row = dict[str, Any]

# Postgres SQLSTATE for unique_violation
UNIQUE_VIOLATION = "23505"
# Raised by single() when the row count is not exactly one
NOT_SINGLE_ROW = "PGRST116"

_UPSERT_DIALECTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


@dataclass(frozen=True)
class StoreError:
    """A failed store round trip."""

    message: str
    code: str | None = None

    @property
    def is_unique_violation(self) -> bool:
        return self.code == UNIQUE_VIOLATION


@dataclass(frozen=True)
class StoreResult(Generic[T]):
    """Outcome of a store call: either ``data`` (possibly None) or ``error``."""

    data: T | None = None
    error: StoreError | None = None
    count: int | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, message: str, code: str | None = None) -> StoreResult[Any]:
        return cls(error=StoreError(message=message, code=code))


class Store(Protocol):
    """Anything that hands out table queries."""

    def table(self, name: str) -> TableQuery: ...


def _to_store_error(exc: SQLAlchemyError) -> StoreError:
    """Translate a SQLAlchemy exception into a StoreError with a SQLSTATE-like code."""
    orig = getattr(exc, "orig", None)
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code is None and isinstance(exc, IntegrityError) and "unique" in str(exc).lower():
        # SQLite reports "UNIQUE constraint failed" without a SQLSTATE
        code = UNIQUE_VIOLATION
    return StoreError(message=str(orig or exc), code=code)


class TableQuery:
    """Chainable query against one table. Build it, then ``await execute()``."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], table: Table) -> None:
        self._session_factory = session_factory
        self._table = table
        self._action = "select"
        self._columns: tuple[str, ...] = ()
        self._values: Row | list[Row] | None = None
        self._conflict_columns: tuple[str, ...] = ()
        self._ignore_duplicates = True
        self._filters: list[ColumnElement[bool]] = []
        self._order_by: list[ColumnElement[Any]] = []
        self._limit: int | None = None
        self._count = False
        self._head = False
        self._fetch = "all"

    # --- actions ---

    def select(self, *columns: str, count: bool = False, head: bool = False) -> TableQuery:
        """Select the given columns (all when empty). ``head`` skips rows, keeping only the count."""
        self._action = "select"
        self._columns = columns
        self._count = count or head
        self._head = head
        return self

    def insert(self, values: Row | list[Row]) -> TableQuery:
        self._action = "insert"
        self._values = values
        return self

    def update(self, values: Row) -> TableQuery:
        self._action = "update"
        self._values = values
        return self

    def upsert(
        self,
        rows: list[Row],
        *,
        on_conflict: tuple[str, ...],
        ignore_duplicates: bool = True,
    ) -> TableQuery:
        """Insert rows; on a conflict over ``on_conflict`` skip them (or overwrite).

        Only the rows actually written are returned in ``data``.
        """
        self._action = "upsert"
        self._values = rows
        self._conflict_columns = on_conflict
        self._ignore_duplicates = ignore_duplicates
        return self

    # --- filters ---

    def eq(self, column: str, value: Any) -> TableQuery:  # noqa: ANN401
        self._filters.append(self._column(column) == value)
        return self

    def neq(self, column: str, value: Any) -> TableQuery:  # noqa: ANN401
        self._filters.append(self._column(column) != value)
        return self

    def gt(self, column: str, value: Any) -> TableQuery:  # noqa: ANN401
        self._filters.append(self._column(column) > value)
        return self

    def gte(self, column: str, value: Any) -> TableQuery:  # noqa: ANN401
        self._filters.append(self._column(column) >= value)
        return self

    def lt(self, column: str, value: Any) -> TableQuery:  # noqa: ANN401
        self._filters.append(self._column(column) < value)
        return self

    def lte(self, column: str, value: Any) -> TableQuery:  # noqa: ANN401
        self._filters.append(self._column(column) <= value)
        return self

    def in_(self, column: str, values: list[Any]) -> TableQuery:
        self._filters.append(self._column(column).in_(values))
        return self

    def order(self, column: str, *, desc: bool = False) -> TableQuery:
        col = self._column(column)
        self._order_by.append(col.desc() if desc else col.asc())
        return self

    def limit(self, count: int) -> TableQuery:
        self._limit = count
        return self

    # --- fetch modes ---

    def single(self) -> TableQuery:
        """Expect exactly one row; zero or several is an error."""
        self._fetch = "single"
        return self

    def maybe_single(self) -> TableQuery:
        """Expect zero or one row; zero yields ``data=None`` without error."""
        self._fetch = "maybe_single"
        return self

    # --- terminal ---

    async def execute(self) -> StoreResult[Any]:
        """Run the query in its own transaction."""
        try:
            async with self._session_factory() as session, session.begin():
                rows, count = await self._run(session)
        except SQLAlchemyError as exc:
            error = _to_store_error(exc)
            if not error.is_unique_violation:
                logger.debug("Store %s on %s failed: %s", self._action, self._table.name, error.message)
            return StoreResult(error=error)
        return self._shape(rows, count)

    async def _run(self, session: AsyncSession) -> tuple[list[Row] | None, int | None]:
        if self._action == "select":
            return await self._run_select(session)

        table = self._table
        if self._action == "insert":
            stmt = insert(table).values(self._values).returning(*table.c)
        elif self._action == "update":
            stmt = update(table).where(*self._filters).values(**self._values).returning(*table.c)  # type: ignore[arg-type]
        else:
            if not self._values:
                return [], None
            dialect_insert = _UPSERT_DIALECTS[session.bind.dialect.name]
            stmt = dialect_insert(table).values(self._values)
            if self._ignore_duplicates:
                stmt = stmt.on_conflict_do_nothing(index_elements=list(self._conflict_columns))
            else:
                first = self._values[0]  # type: ignore[index]
                stmt = stmt.on_conflict_do_update(
                    index_elements=list(self._conflict_columns),
                    set_={k: stmt.excluded[k] for k in first if k not in self._conflict_columns},
                )
            stmt = stmt.returning(*table.c)

        result = await session.execute(stmt)
        return [dict(r._mapping) for r in result.all()], None

    async def _run_select(self, session: AsyncSession) -> tuple[list[Row] | None, int | None]:
        rows: list[Row] | None = None
        count: int | None = None

        if not self._head:
            columns = [self._column(c) for c in self._columns] or [self._table]
            stmt = select(*columns).where(*self._filters).order_by(*self._order_by)
            if self._limit is not None:
                stmt = stmt.limit(self._limit)
            result = await session.execute(stmt)
            rows = [dict(r._mapping) for r in result.all()]

        if self._count:
            count_stmt = select(func.count()).select_from(self._table).where(*self._filters)
            count = (await session.execute(count_stmt)).scalar_one()

        return rows, count

    def _shape(self, rows: list[Row] | None, count: int | None) -> StoreResult[Any]:
        if self._fetch == "all" or rows is None:
            return StoreResult(data=rows, count=count)

        if self._fetch == "single" and len(rows) != 1:
            return StoreResult.failure(
                f"Expected exactly one row from {self._table.name}, got {len(rows)}",
                NOT_SINGLE_ROW,
            )
        if len(rows) > 1:
            return StoreResult.failure(
                f"Expected at most one row from {self._table.name}, got {len(rows)}",
                NOT_SINGLE_ROW,
            )
        return StoreResult(data=rows[0] if rows else None, count=count)

    def _column(self, name: str) -> ColumnElement[Any]:
        return self._table.c[name]


class SqlAlchemyStore:
    """Store backed by the application's ORM metadata."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    def table(self, name: str) -> TableQuery:
        return TableQuery(self._session_factory, Base.metadata.tables[name])
