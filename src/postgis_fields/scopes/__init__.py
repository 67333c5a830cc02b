"""
Spatial predicate filters.

Public API:
    - ``SpatialScopes``: validates a field and appends a PostGIS predicate
      filter to a query
    - ``SpatialPredicate``: the supported predicates
    - ``DEFAULT_PREDICATE_REGISTRY``: the default operator registry
    - ``SpatialPredicateOperator`` / ``SpatialPredicateRegistry``:
      extension points for custom predicates
"""

from .builder import Filterable, SpatialScopes
from .predicates import DEFAULT_PREDICATE_REGISTRY, build_default_predicate_registry
from .strategy import (
    SpatialPredicate,
    SpatialPredicateOperator,
    SpatialPredicateRegistry,
)

__all__ = [
    "DEFAULT_PREDICATE_REGISTRY",
    "Filterable",
    "SpatialPredicate",
    "SpatialPredicateOperator",
    "SpatialPredicateRegistry",
    "SpatialScopes",
    "build_default_predicate_registry",
]
