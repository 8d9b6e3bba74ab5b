from collections.abc import Callable, Sequence
from typing import Any, Self, TypeAlias

import aiosqlite

from searchbuilder.constants import (
    ID_COLUMN,
    SCORE_COLUMN,
    SCORE_CTE_NAME,
    SCORE_SEED_SQL,
    SCORE_UNION_ALIAS,
)
from searchbuilder.logging import get_logger
from searchbuilder.query.builder import Query
from searchbuilder.query.grammar import table_reference, wrap
from searchbuilder.query.model import Model
from searchbuilder.search.condition import Condition
from searchbuilder.search.terms import split_terms

_logger = get_logger(__name__)

TermCallback: TypeAlias = Callable[["SearchBuilder", str], Any]


def fallback_score(index: int, count: int) -> int:
    """Default weight of the condition registered at `index` out of `count`.

    Earlier registrations weigh more: the first gets `count`, the last gets 1.
    """
    return count - index


def resolve_scores(conditions: Sequence[Condition]) -> list[Condition]:
    count = len(conditions)
    return [c.apply_score(fallback_score(i, count)) for i, c in enumerate(conditions)]


class SearchBuilder:
    """Ranks rows of one table by the summed scores of the conditions they match.

    Each registered condition is a subquery selecting matching ids. They are
    unioned (duplicates kept), summed per id into a CTE, and the CTE is joined
    back onto the base query ordered by total score.
    """

    def __init__(
        self,
        model: type[Model] | str,
        cte_name: str = SCORE_CTE_NAME,
        union_alias: str = SCORE_UNION_ALIAS,
    ):
        if isinstance(model, str):
            self.model = None
            self.table = model
        elif isinstance(model, type) and issubclass(model, Model):
            self.model = model
            self.table = model.table_name()
        else:
            raise TypeError(f"Cannot bind a search builder to {model!r}")

        self.cte_name = cte_name
        self.union_alias = union_alias
        self.query: Query | None = None
        self.conditions: list[Condition] = []

    def set_query(self, query: Query) -> Self:
        """Set the base query the ranked rows are drawn from."""
        self.query = query
        return self

    def search(self, query: Query, score: int | None = None) -> Self:
        """Register a condition subquery with an optional score."""
        self.conditions.append(Condition.of(query, score))
        return self

    def split_terms(self, terms: str, callback: TermCallback) -> Self:
        """Call `callback(self, term)` once per unique term of the phrase."""
        for term in split_terms(terms):
            callback(self, term)
        return self

    def base_query(self) -> Query:
        if self.query is not None:
            return self.query
        if self.model is not None:
            return self.model.query()
        return Query.table_(self.table)

    def get_query(self) -> Query:
        query = self.base_query()
        if query.source is not None:
            table = query.source_alias
        else:
            table = table_reference(query.from_table or self.table)
        key = self.model.__key__ if self.model is not None else ID_COLUMN
        qualified_key = f"{table}.{key}"

        _logger.debug("Building search query", table=table, conditions=len(self.conditions))

        columns = query.columns or (f"{table}.*",)
        return (
            query.select(*columns, f"{self.cte_name}.{SCORE_COLUMN} as {SCORE_COLUMN}")
            .with_expression(self.cte_name, self.get_score_query())
            .left_join(self.cte_name, f"{self.cte_name}.{ID_COLUMN}", "=", qualified_key)
            .where_raw(f"{wrap(qualified_key)} IN (SELECT {wrap(ID_COLUMN)} FROM {wrap(self.cte_name)})")
            .order_by(f"{self.cte_name}.{SCORE_COLUMN}", "desc")
        )

    def get_score_query(self) -> Query:
        subquery = Query().select_raw(SCORE_SEED_SQL)
        for condition in resolve_scores(self.conditions):
            subquery = subquery.union_all(condition.query)

        alias = self.union_alias
        return (
            Query()
            .from_sub(subquery, alias)
            .select_raw(
                f'"{alias}"."{ID_COLUMN}" AS "{ID_COLUMN}", SUM("{alias}"."{SCORE_COLUMN}") AS "{SCORE_COLUMN}"'
            )
            .group_by(ID_COLUMN)
        )

    async def get(self, conn: aiosqlite.Connection) -> list[Any]:
        rows = await self.get_query().get(conn)
        _logger.debug("Search executed", table=self.table, results=len(rows))
        return rows
