from searchbuilder.query import Expression, Model, ModelQuery, Query, Scope, Searchable, SoftDeletes
from searchbuilder.search import Condition, SearchBuilder, split_terms

__version__ = "0.1.0"

__all__ = [
    "Condition",
    "Expression",
    "Model",
    "ModelQuery",
    "Query",
    "Scope",
    "SearchBuilder",
    "Searchable",
    "SoftDeletes",
    "split_terms",
]
