from dataclasses import dataclass, replace
from typing import Self

from searchbuilder.constants import SCORE_COLUMN
from searchbuilder.query.builder import Query


@dataclass(frozen=True)
class Condition:
    """One weighted match rule: a subquery selecting matching ids plus a score."""

    query: Query
    score: int | None = None

    @classmethod
    def of(cls, query: Query, score: int | None = None) -> Self:
        return cls(query=query).set_query(query).set_score(score)

    def set_query(self, query: Query) -> Self:
        # Implicit scopes (soft deletes etc.) keep the scoring subquery off
        # covering indexes; the base query applies them once, outside the CTE.
        return replace(self, query=query.without_global_scopes())

    def set_score(self, score: int | None) -> Self:
        return replace(self, score=score)

    def apply_score(self, fallback_score: int) -> Self:
        """Resolve the score and project it as a column of the query.

        Returns a new condition; applying again to the result would project a
        second score column.
        """
        score = fallback_score if self.score is None else self.score
        return replace(
            self,
            score=score,
            query=self.query.select_raw(f"{int(score)} AS {SCORE_COLUMN}"),
        )
