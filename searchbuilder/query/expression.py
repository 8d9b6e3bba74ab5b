from dataclasses import dataclass
from typing import Any, TypeAlias

Binding: TypeAlias = Any


@dataclass(frozen=True)
class Expression:
    """Raw SQL fragment with its positional `?` bindings."""

    sql: str
    bindings: tuple[Binding, ...] = ()

    @classmethod
    def raw(cls, sql: str, *bindings: Binding) -> "Expression":
        return cls(sql, tuple(bindings))


@dataclass(frozen=True)
class Join:
    kind: str
    table: str
    first: str
    operator: str
    second: str


@dataclass(frozen=True)
class Scope:
    """Named implicit predicate applied to every query of a model."""

    name: str
    expression: Expression


@dataclass(frozen=True)
class Order:
    column: str | Expression
    direction: str


@dataclass(frozen=True)
class CommonTableExpression:
    name: str
    query: Any
