"""
Spatial query scopes.

``SpatialScopes`` validates a field against the model's
:class:`~postgis_fields.fields.FieldSpecRegistry`, renders a PostGIS
predicate fragment and appends it to a query with ``query.where(...)``.
Any generative builder with a ``where`` method works; SQLAlchemy ``Select``,
``Update`` and ``Delete`` statements AND the new clause with existing ones.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

from sqlalchemy import TextClause, text

from ..exceptions import UnsupportedPredicate
from ..persistence import DEFAULT_SCHEMA, qualify
from ..wkt import encode
from .predicates import DEFAULT_PREDICATE_REGISTRY
from .strategy import SpatialPredicate

if TYPE_CHECKING:
    from ..fields import FieldSpecRegistry
    from ..geometries import Geometry
    from .strategy import SpatialPredicateRegistry

logger = logging.getLogger(__name__)

Q = TypeVar("Q", bound="Filterable")


class Filterable(Protocol):
    def where(self: Q, *whereclause: Any) -> Q: ...


class SpatialScopes:
    """
    Builds spatial filters for the fields of one model.

    Parameters
    ----------
    registry:
        The model's frozen :class:`FieldSpecRegistry`.
    schema:
        Schema holding the PostGIS functions. ``None`` leaves names
        unqualified.
    predicates:
        Optional custom predicate registry. Falls back to
        ``DEFAULT_PREDICATE_REGISTRY``.
    """

    def __init__(
        self,
        registry: FieldSpecRegistry,
        *,
        schema: str | None = DEFAULT_SCHEMA,
        predicates: SpatialPredicateRegistry | None = None,
    ) -> None:
        self.registry = registry
        self.schema = schema
        self.predicates = predicates or DEFAULT_PREDICATE_REGISTRY

    def fragment(
        self,
        predicate: SpatialPredicate | str,
        field_name: str,
        geometry: Geometry,
    ) -> str:
        """
        Render the raw SQL filter for ``predicate`` on ``field_name``.

        The geometry argument is embedded with the field's configured SRID.

        Raises:
            FieldNotSpatial: If ``field_name`` is not a declared spatial field.
            UnsupportedPredicate: If the predicate has no registered operator.
        """
        spec = self.registry.require(field_name)
        try:
            predicate = SpatialPredicate(predicate)
        except ValueError as exc:
            raise UnsupportedPredicate(
                f"Unsupported spatial predicate: {predicate}"
            ) from exc

        geometry_sql = (
            f"{qualify('ST_GeomFromText', self.schema)}"
            f"('{encode(geometry)}', {spec.srid})"
        )
        fragment = self.predicates.apply(
            predicate,
            qualify(predicate.function, self.schema),
            f"{field_name}::geometry",
            geometry_sql,
        )
        logger.debug(
            "Spatial filter on %s.%s: %s",
            self.registry.model_name,
            field_name,
            fragment,
        )
        return fragment

    def clause(
        self,
        predicate: SpatialPredicate | str,
        field_name: str,
        geometry: Geometry,
    ) -> TextClause:
        return text(self.fragment(predicate, field_name, geometry))

    def apply(
        self,
        query: Q,
        predicate: SpatialPredicate | str,
        field_name: str,
        geometry: Geometry,
    ) -> Q:
        """Append the filter for ``predicate`` to ``query`` and return the result."""
        return query.where(self.clause(predicate, field_name, geometry))

    def contains(self, query: Q, field_name: str, geometry: Geometry) -> Q:
        return self.apply(query, SpatialPredicate.CONTAINS, field_name, geometry)

    def covers(self, query: Q, field_name: str, geometry: Geometry) -> Q:
        return self.apply(query, SpatialPredicate.COVERS, field_name, geometry)

    def crosses(self, query: Q, field_name: str, geometry: Geometry) -> Q:
        return self.apply(query, SpatialPredicate.CROSSES, field_name, geometry)

    def intersects(self, query: Q, field_name: str, geometry: Geometry) -> Q:
        return self.apply(query, SpatialPredicate.INTERSECTS, field_name, geometry)

    def within(self, query: Q, field_name: str, geometry: Geometry) -> Q:
        return self.apply(query, SpatialPredicate.WITHIN, field_name, geometry)

    def touches(self, query: Q, field_name: str, geometry: Geometry) -> Q:
        return self.apply(query, SpatialPredicate.TOUCHES, field_name, geometry)

    def overlaps(self, query: Q, field_name: str, geometry: Geometry) -> Q:
        return self.apply(query, SpatialPredicate.OVERLAPS, field_name, geometry)

    def disjoint(self, query: Q, field_name: str, geometry: Geometry) -> Q:
        return self.apply(query, SpatialPredicate.DISJOINT, field_name, geometry)

    def equals(self, query: Q, field_name: str, geometry: Geometry) -> Q:
        return self.apply(query, SpatialPredicate.EQUALS, field_name, geometry)

    def covered_by(self, query: Q, field_name: str, geometry: Geometry) -> Q:
        return self.apply(query, SpatialPredicate.COVERED_BY, field_name, geometry)
