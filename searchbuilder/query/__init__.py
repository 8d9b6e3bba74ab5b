from searchbuilder.query.builder import Query
from searchbuilder.query.expression import Expression, Join, Scope
from searchbuilder.query.grammar import wrap
from searchbuilder.query.model import Model, ModelQuery, Searchable, SoftDeletes

__all__ = [
    "Expression",
    "Join",
    "Model",
    "ModelQuery",
    "Query",
    "Scope",
    "Searchable",
    "SoftDeletes",
    "wrap",
]
