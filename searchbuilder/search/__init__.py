from searchbuilder.search.builder import SearchBuilder, fallback_score, resolve_scores
from searchbuilder.search.condition import Condition
from searchbuilder.search.terms import split_terms

__all__ = [
    "Condition",
    "SearchBuilder",
    "fallback_score",
    "resolve_scores",
    "split_terms",
]
