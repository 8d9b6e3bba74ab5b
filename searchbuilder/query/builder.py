from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any, Self, TypeAlias

import aiosqlite

from searchbuilder.logging import get_logger
from searchbuilder.query.expression import (
    Binding,
    CommonTableExpression,
    Expression,
    Join,
    Order,
    Scope,
)
from searchbuilder.query.grammar import compile_select, wrap

_logger = get_logger(__name__)

Column: TypeAlias = str | Expression

_OPERATORS = frozenset({"=", "!=", "<>", "<", "<=", ">", ">=", "like", "not like", "is", "is not"})
_JOIN_KINDS = frozenset({"INNER", "LEFT", "CROSS"})

# Distinguishes where(column, value) from where(column, operator, None)
_MISSING = object()


@dataclass(frozen=True)
class Query:
    """Immutable SELECT builder.

    Every method returns a new query, so a query handed to another component
    can never be changed behind its back.
    """

    table: str | None = None
    source: "Query | None" = None
    source_alias: str | None = None
    columns: tuple[Column, ...] = ()
    scopes: tuple[Scope, ...] = ()
    wheres: tuple[Expression, ...] = ()
    joins: tuple[Join, ...] = ()
    groups: tuple[Column, ...] = ()
    orders: tuple[Order, ...] = ()
    unions: tuple["Query", ...] = ()
    ctes: tuple[CommonTableExpression, ...] = ()
    limit_value: int | None = None
    offset_value: int | None = None

    @classmethod
    def table_(cls, name: str) -> Self:
        return cls(table=name)

    @property
    def from_table(self) -> str | None:
        return self.table

    # --- projection ---

    def select(self, *columns: Column) -> Self:
        return replace(self, columns=tuple(columns))

    def add_select(self, *columns: Column) -> Self:
        return replace(self, columns=self.columns + tuple(columns))

    def select_raw(self, sql: str, *bindings: Binding) -> Self:
        return self.add_select(Expression.raw(sql, *bindings))

    def from_sub(self, query: "Query", alias: str) -> Self:
        return replace(self, table=None, source=query, source_alias=alias)

    # --- filtering ---

    def where(self, column: str, operator: Any, value: Any = _MISSING) -> Self:
        if value is _MISSING:
            operator, value = "=", operator
        op = str(operator).lower()
        if op not in _OPERATORS:
            raise ValueError(f"Unsupported operator: {operator}")
        if value is None and op in ("=", "is"):
            return self.where_null(column)
        if value is None and op in ("!=", "<>", "is not"):
            return self.where_not_null(column)
        return self.where_raw(f"{wrap(column)} {op.upper()} ?", value)

    def where_raw(self, sql: str, *bindings: Binding) -> Self:
        return replace(self, wheres=self.wheres + (Expression.raw(sql, *bindings),))

    def where_in(self, column: str, values: Iterable[Any]) -> Self:
        values = list(values)
        if not values:
            return self.where_raw("0 = 1")
        placeholders = ",".join("?" * len(values))
        return self.where_raw(f"{wrap(column)} IN ({placeholders})", *values)

    def where_null(self, column: str) -> Self:
        return self.where_raw(f"{wrap(column)} IS NULL")

    def where_not_null(self, column: str) -> Self:
        return self.where_raw(f"{wrap(column)} IS NOT NULL")

    def where_like(self, column: str, pattern: str) -> Self:
        return self.where(column, "like", pattern)

    # --- implicit scopes ---

    def with_global_scope(self, scope: Scope) -> Self:
        return replace(self, scopes=self.scopes + (scope,))

    def without_global_scope(self, name: str) -> Self:
        return replace(self, scopes=tuple(s for s in self.scopes if s.name != name))

    def without_global_scopes(self) -> Self:
        return replace(self, scopes=())

    # --- joins ---

    def join(
        self,
        table: str,
        first: str,
        operator: str,
        second: str | None = None,
        kind: str = "INNER",
    ) -> Self:
        if second is None:
            operator, second = "=", operator
        kind = kind.upper()
        if kind not in _JOIN_KINDS:
            raise ValueError(f"Unsupported join kind: {kind}")
        return replace(self, joins=self.joins + (Join(kind, table, first, operator, second),))

    def left_join(self, table: str, first: str, operator: str, second: str | None = None) -> Self:
        return self.join(table, first, operator, second, kind="LEFT")

    # --- grouping / ordering / limits ---

    def group_by(self, *columns: Column) -> Self:
        return replace(self, groups=self.groups + tuple(columns))

    def order_by(self, column: Column, direction: str = "asc") -> Self:
        direction = direction.upper()
        if direction not in ("ASC", "DESC"):
            raise ValueError(f"Order direction must be 'asc' or 'desc', got {direction!r}")
        return replace(self, orders=self.orders + (Order(column, direction),))

    def limit(self, value: int) -> Self:
        return replace(self, limit_value=value)

    def offset(self, value: int) -> Self:
        return replace(self, offset_value=value)

    # --- composition ---

    def union_all(self, query: "Query") -> Self:
        return replace(self, unions=self.unions + (query,))

    def with_expression(self, name: str, query: "Query") -> Self:
        return replace(self, ctes=self.ctes + (CommonTableExpression(name, query),))

    # --- compilation / execution ---

    def compile(self) -> tuple[str, list[Binding]]:
        return compile_select(self)

    def to_sql(self) -> str:
        return self.compile()[0]

    def get_bindings(self) -> list[Binding]:
        return self.compile()[1]

    async def fetch_rows(self, conn: aiosqlite.Connection) -> list[dict]:
        sql, bindings = self.compile()
        _logger.debug("Executing query", sql=sql, bindings=bindings)
        async with conn.execute(sql, bindings) as cursor:
            names = [d[0] for d in cursor.description]
            rows = await cursor.fetchall()
        return [dict(zip(names, row)) for row in rows]

    async def get(self, conn: aiosqlite.Connection) -> list[Any]:
        return await self.fetch_rows(conn)

    async def first(self, conn: aiosqlite.Connection) -> Any | None:
        rows = await self.limit(1).get(conn)
        return rows[0] if rows else None
