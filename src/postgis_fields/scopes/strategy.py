"""
Spatial predicate compilation strategy.

Provides the ``SpatialPredicateOperator`` interface and a registry keyed by
:class:`SpatialPredicate`. Each supported predicate is one operator class;
adding a predicate means adding an enum member and registering its operator.
"""

from __future__ import annotations

import enum
from abc import ABC, abstractmethod

from ..exceptions import UnsupportedPredicate


class SpatialPredicate(str, enum.Enum):
    """Boolean PostGIS functions usable as query filters."""

    CONTAINS = "Contains"
    COVERS = "Covers"
    CROSSES = "Crosses"
    INTERSECTS = "Intersects"
    WITHIN = "Within"
    TOUCHES = "Touches"
    OVERLAPS = "Overlaps"
    DISJOINT = "Disjoint"
    EQUALS = "Equals"
    COVERED_BY = "CoveredBy"

    @classmethod
    def _missing_(cls, value: object) -> SpatialPredicate | None:
        if isinstance(value, str):
            key = value.replace("_", "").lower()
            for member in cls:
                if member.value.lower() == key:
                    return member
        return None

    @property
    def function(self) -> str:
        return f"ST_{self.value}"


class SpatialPredicateOperator(ABC):
    """
    Strategy interface for rendering a spatial predicate as a raw SQL
    boolean fragment.
    """

    @property
    @abstractmethod
    def name(self) -> SpatialPredicate:
        """The predicate this strategy handles."""
        ...

    @abstractmethod
    def apply(self, function: str, column: str, geometry: str) -> str:
        """
        Build the filter fragment.

        Args:
            function: The (possibly schema-qualified) predicate function name.
            column: SQL for the column operand.
            geometry: SQL for the geometry operand.

        Returns:
            A raw SQL boolean expression.
        """
        ...


class SpatialPredicateRegistry:
    """
    Registry of ``SpatialPredicateOperator`` instances keyed by
    :class:`SpatialPredicate`.
    """

    def __init__(self) -> None:
        self._operators: dict[SpatialPredicate, SpatialPredicateOperator] = {}

    def register(
        self, operator: SpatialPredicateOperator
    ) -> SpatialPredicateOperator | None:
        """Install ``operator`` for its predicate; return the one it replaces."""
        previous = self._operators.get(operator.name)
        self._operators[operator.name] = operator
        return previous

    def register_all(self, *operators: SpatialPredicateOperator) -> None:
        for operator in operators:
            self.register(operator)

    def operator_for(self, predicate: SpatialPredicate) -> SpatialPredicateOperator:
        """
        Return the operator rendering ``predicate``.

        Raises:
            UnsupportedPredicate: If no operator is registered for it.
        """
        try:
            return self._operators[predicate]
        except KeyError:
            raise UnsupportedPredicate(
                f"No operator registered for spatial predicate {predicate.value!r}"
            ) from None

    @property
    def supported_predicates(self) -> frozenset[SpatialPredicate]:
        return frozenset(self._operators)

    def apply(
        self,
        predicate: SpatialPredicate,
        function: str,
        column: str,
        geometry: str,
    ) -> str:
        """Render ``predicate`` with its registered operator."""
        return self.operator_for(predicate).apply(function, column, geometry)
