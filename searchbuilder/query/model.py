import re
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar

import aiosqlite
from pydantic import BaseModel, ConfigDict

from searchbuilder.query.builder import Query
from searchbuilder.query.expression import Expression, Scope
from searchbuilder.query.grammar import wrap

if TYPE_CHECKING:
    from searchbuilder.search.builder import SearchBuilder

_CAMEL_RE = re.compile(r"(?<!^)(?=[A-Z])")


def default_table_name(cls_name: str) -> str:
    snake = _CAMEL_RE.sub("_", cls_name).lower()
    if snake.endswith("y") and not snake.endswith(("ay", "ey", "oy", "uy")):
        return snake[:-1] + "ies"
    if snake.endswith(("s", "x", "ch", "sh")):
        return snake + "es"
    return snake + "s"


class Model(BaseModel):
    """Row of a table, hydrated from query results.

    Extra columns (joined values such as a total score) are kept as attributes.
    """

    model_config = ConfigDict(extra="allow")

    __table__: ClassVar[str | None] = None
    __key__: ClassVar[str] = "id"

    id: int | None = None

    @classmethod
    def table_name(cls) -> str:
        return cls.__table__ or default_table_name(cls.__name__)

    @classmethod
    def qualified_key(cls) -> str:
        return f"{cls.table_name()}.{cls.__key__}"

    @classmethod
    def global_scopes(cls) -> list[Scope]:
        return []

    @classmethod
    def query(cls) -> "ModelQuery":
        return ModelQuery(table=cls.table_name(), model=cls, scopes=tuple(cls.global_scopes()))

    @classmethod
    def where(cls, column: str, *args: Any) -> "ModelQuery":
        return cls.query().where(column, *args)

    @classmethod
    def select(cls, *columns: str | Expression) -> "ModelQuery":
        return cls.query().select(*columns)


class SoftDeletes(Model):
    """Hides rows whose `deleted_at` is set from every query of the model."""

    deleted_at: datetime | None = None

    @classmethod
    def global_scopes(cls) -> list[Scope]:
        scopes = super().global_scopes()
        column = f"{cls.table_name()}.deleted_at"
        return [*scopes, Scope("soft_deletes", Expression(f"{wrap(column)} IS NULL"))]


class Searchable:
    @classmethod
    def search_builder(cls) -> "SearchBuilder":
        from searchbuilder.search.builder import SearchBuilder

        return SearchBuilder(cls)


@dataclass(frozen=True)
class ModelQuery(Query):
    model: type[Model] | None = None

    def hydrate(self, rows: list[dict]) -> list[Model]:
        return [self.model.model_validate(row) for row in rows]

    async def get(self, conn: aiosqlite.Connection) -> list[Model]:
        return self.hydrate(await self.fetch_rows(conn))

