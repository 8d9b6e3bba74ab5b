"""SQL compilation for `Query` objects.

Output targets SQLite: identifiers are double-quoted and values are always
bound through `?` placeholders.
"""

import re
from typing import TYPE_CHECKING

from searchbuilder.query.expression import Binding, Expression

if TYPE_CHECKING:
    from searchbuilder.query.builder import Query

_ALIAS_RE = re.compile(r"^(.+?)\s+as\s+(.+)$", re.IGNORECASE)


def wrap_segment(segment: str) -> str:
    if segment == "*":
        return segment
    return '"' + segment.replace('"', '""') + '"'


def wrap(value: str | Expression) -> str:
    """Quote a (possibly dotted, possibly aliased) identifier."""
    if isinstance(value, Expression):
        return value.sql
    match = _ALIAS_RE.match(value.strip())
    if match:
        return f"{wrap(match.group(1))} AS {wrap_segment(match.group(2).strip())}"
    return ".".join(wrap_segment(part) for part in value.strip().split("."))


def table_reference(table: str) -> str:
    """Name a table is addressed by inside the statement (its alias if any)."""
    match = _ALIAS_RE.match(table.strip())
    if match:
        return match.group(2).strip()
    return table.strip()


def compile_select(query: "Query") -> tuple[str, list[Binding]]:
    parts: list[str] = []
    bindings: list[Binding] = []

    if query.ctes:
        compiled = []
        for cte in query.ctes:
            sql, params = compile_select(cte.query)
            compiled.append(f"{wrap_segment(cte.name)} AS ({sql})")
            bindings.extend(params)
        parts.append("WITH " + ", ".join(compiled))

    parts.append("SELECT " + _compile_columns(query, bindings))

    if query.source is not None:
        sql, params = compile_select(query.source)
        parts.append(f"FROM ({sql}) AS {wrap_segment(query.source_alias)}")
        bindings.extend(params)
    elif query.table is not None:
        parts.append("FROM " + wrap(query.table))

    for join in query.joins:
        parts.append(
            f"{join.kind} JOIN {wrap(join.table)} ON {wrap(join.first)} {join.operator} {wrap(join.second)}"
        )

    wheres = [scope.expression for scope in query.scopes] + list(query.wheres)
    if wheres:
        parts.append("WHERE " + " AND ".join(w.sql for w in wheres))
        for w in wheres:
            bindings.extend(w.bindings)

    if query.groups:
        parts.append("GROUP BY " + ", ".join(wrap(g) for g in query.groups))

    for member in query.unions:
        sql, params = compile_select(member)
        # SQLite rejects WITH, ORDER BY and LIMIT on a bare compound member
        if member.ctes or member.orders or member.limit_value is not None or member.offset_value is not None:
            sql = f"SELECT * FROM ({sql})"
        parts.append("UNION ALL " + sql)
        bindings.extend(params)

    # Ordering and limits apply to the whole compound statement
    if query.orders:
        orders = []
        for order in query.orders:
            orders.append(f"{wrap(order.column)} {order.direction}")
            if isinstance(order.column, Expression):
                bindings.extend(order.column.bindings)
        parts.append("ORDER BY " + ", ".join(orders))

    if query.limit_value is not None:
        parts.append("LIMIT ?")
        bindings.append(query.limit_value)
    if query.offset_value is not None:
        if query.limit_value is None:
            parts.append("LIMIT -1")
        parts.append("OFFSET ?")
        bindings.append(query.offset_value)

    return " ".join(parts), bindings


def _compile_columns(query: "Query", bindings: list[Binding]) -> str:
    if not query.columns:
        if query.table is not None and query.source is None:
            return wrap(table_reference(query.table)) + ".*"
        return "*"
    compiled = []
    for column in query.columns:
        compiled.append(wrap(column))
        if isinstance(column, Expression):
            bindings.extend(column.bindings)
    return ", ".join(compiled)
