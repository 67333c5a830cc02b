"""PostGIS predicate operators and the default registry."""

from __future__ import annotations

from .strategy import (
    SpatialPredicate,
    SpatialPredicateOperator,
    SpatialPredicateRegistry,
)


class BinaryPredicateOperator(SpatialPredicateOperator):
    """Renders ``<function>(<column>, <geometry>)``."""

    predicate: SpatialPredicate

    @property
    def name(self) -> SpatialPredicate:
        return self.predicate

    def apply(self, function: str, column: str, geometry: str) -> str:
        return f"{function}({column}, {geometry})"


class ContainsOperator(BinaryPredicateOperator):
    predicate = SpatialPredicate.CONTAINS


class CoversOperator(BinaryPredicateOperator):
    predicate = SpatialPredicate.COVERS


class CrossesOperator(BinaryPredicateOperator):
    predicate = SpatialPredicate.CROSSES


class IntersectsOperator(BinaryPredicateOperator):
    predicate = SpatialPredicate.INTERSECTS


class WithinOperator(BinaryPredicateOperator):
    predicate = SpatialPredicate.WITHIN


class TouchesOperator(BinaryPredicateOperator):
    predicate = SpatialPredicate.TOUCHES


class OverlapsOperator(BinaryPredicateOperator):
    predicate = SpatialPredicate.OVERLAPS


class DisjointOperator(BinaryPredicateOperator):
    predicate = SpatialPredicate.DISJOINT


class GeomEqualsOperator(BinaryPredicateOperator):
    predicate = SpatialPredicate.EQUALS


class CoveredByOperator(BinaryPredicateOperator):
    predicate = SpatialPredicate.COVERED_BY


def build_default_predicate_registry() -> SpatialPredicateRegistry:
    """Create a registry with all built-in spatial predicate operators."""
    registry = SpatialPredicateRegistry()
    registry.register_all(
        ContainsOperator(),
        CoversOperator(),
        CrossesOperator(),
        IntersectsOperator(),
        WithinOperator(),
        TouchesOperator(),
        OverlapsOperator(),
        DisjointOperator(),
        GeomEqualsOperator(),
        CoveredByOperator(),
    )
    return registry


DEFAULT_PREDICATE_REGISTRY: SpatialPredicateRegistry = (
    build_default_predicate_registry()
)

__all__ = [
    "DEFAULT_PREDICATE_REGISTRY",
    "BinaryPredicateOperator",
    "build_default_predicate_registry",
]
