"""SQLAlchemy model mixin for PostGIS-backed geometry attributes.

Declare spatial attributes on the model class::

    class Place(SpatialModelMixin, Base):
        __tablename__ = "places"
        __postgis_fields__ = {"location": Point, "area": Polygon}
        __postgis_types__ = {"area": {"geomtype": "geometry", "srid": 27700}}

        id: Mapped[int] = mapped_column(primary_key=True)

Spatial attributes not defined on the class get a GeoAlchemy2
``geography``/``geometry`` column. On flush, geometry values are written
through ``ST_GeogFromText`` / ``ST_GeomFromText``; on load, stored values
are decoded back into geometry objects. ``Place.st_contains("area", poly)``
and friends return a ``select(Place)`` filtered by the PostGIS predicate.

The mixin must precede the declarative base in the class bases.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, ClassVar

from sqlalchemy import event, literal_column, select
from sqlalchemy import inspect as sa_inspect
from sqlalchemy.orm.attributes import set_committed_value

from ..fields import FieldSpecRegistry
from ..persistence import DEFAULT_SCHEMA, PersistenceAdapter
from ..scopes import SpatialPredicate, SpatialScopes
from .columns import spatial_column

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import Select

    from ..geometries import Geometry
    from ..scopes.builder import Q

logger = logging.getLogger(__name__)


class _InstanceBinding:
    """Writes raw SQL expressions onto a mapped instance before flush."""

    def __init__(self, target: Any) -> None:
        self.target = target

    def bind_raw(self, attribute_name: str, sql: str) -> None:
        setattr(self.target, attribute_name, literal_column(sql))


class _InstanceHydration:
    """Sets decoded values on a loaded instance without marking it dirty."""

    def __init__(self, target: Any) -> None:
        self.target = target

    def set_attribute(self, attribute_name: str, value: Geometry) -> None:
        set_committed_value(self.target, attribute_name, value)


def _loaded_values(target: Any, names: Iterable[str]) -> dict[str, Any]:
    state = target.__dict__
    return {name: state[name] for name in names if name in state}


def _bind_geometries(_mapper: Any, _connection: Any, target: Any) -> None:
    adapter = type(target).__postgis_adapter__
    adapter.bind(
        _InstanceBinding(target), _loaded_values(target, adapter.registry.names)
    )


def _hydrate_on_load(target: Any, _context: Any) -> None:
    adapter = type(target).__postgis_adapter__
    adapter.hydrate(
        _InstanceHydration(target), _loaded_values(target, adapter.registry.names)
    )


def _hydrate_on_refresh(
    target: Any, _context: Any, attrs: Iterable[str] | None
) -> None:
    adapter = type(target).__postgis_adapter__
    names = adapter.registry.names
    if attrs is not None:
        refreshed = set(attrs)
        names = tuple(name for name in names if name in refreshed)
    adapter.hydrate(_InstanceHydration(target), _loaded_values(target, names))


class SpatialModelMixin:
    """Adds PostGIS-backed geometry attributes to a declarative model.

    Override ``__postgis_fields__``, ``__postgis_types__`` and
    ``__postgis_schema__`` on your model to customize.
    """

    __postgis_fields__: ClassVar[dict[str, type[Geometry]]] = {}
    __postgis_types__: ClassVar[dict[str, dict[str, Any]]] = {}
    __postgis_schema__: ClassVar[str | None] = DEFAULT_SCHEMA

    __postgis_registry__: ClassVar[FieldSpecRegistry]
    __postgis_adapter__: ClassVar[PersistenceAdapter]
    __postgis_scopes__: ClassVar[SpatialScopes]

    def __init_subclass__(cls, **kwargs: Any) -> None:
        registry = FieldSpecRegistry.from_declarations(
            cls.__name__, cls.__postgis_fields__, cls.__postgis_types__
        )
        cls.__postgis_registry__ = registry
        cls.__postgis_adapter__ = PersistenceAdapter(
            registry, schema=cls.__postgis_schema__
        )
        cls.__postgis_scopes__ = SpatialScopes(registry, schema=cls.__postgis_schema__)

        if not cls.__dict__.get("__abstract__", False):
            for spec in registry:
                if getattr(cls, spec.attribute_name, None) is None:
                    setattr(cls, spec.attribute_name, spatial_column(spec))

        super().__init_subclass__(**kwargs)

        if len(registry) and sa_inspect(cls, raiseerr=False) is not None:
            event.listen(cls, "before_insert", _bind_geometries)
            event.listen(cls, "before_update", _bind_geometries)
            event.listen(cls, "load", _hydrate_on_load)
            event.listen(cls, "refresh", _hydrate_on_refresh)
            event.listen(cls, "refresh_flush", _hydrate_on_refresh)
            logger.debug(
                "Registered spatial persistence events for %s: %s",
                cls.__name__,
                registry.names,
            )

    # ------------------------------------------------------------------
    # Query scopes
    # ------------------------------------------------------------------

    @classmethod
    def spatial_filter(
        cls,
        predicate: SpatialPredicate | str,
        field_name: str,
        geometry: Geometry,
        query: Q | None = None,
    ) -> Q | Select[Any]:
        """
        Filter ``query`` (default ``select(cls)``) by a PostGIS predicate.

        Raises:
            FieldNotSpatial: If ``field_name`` is not declared on this model.
        """
        clause = cls.__postgis_scopes__.clause(predicate, field_name, geometry)
        if query is None:
            return select(cls).where(clause)
        return query.where(clause)

    @classmethod
    def st_contains(
        cls, field_name: str, geometry: Geometry, query: Q | None = None
    ) -> Q | Select[Any]:
        return cls.spatial_filter(SpatialPredicate.CONTAINS, field_name, geometry, query)

    @classmethod
    def st_covers(
        cls, field_name: str, geometry: Geometry, query: Q | None = None
    ) -> Q | Select[Any]:
        return cls.spatial_filter(SpatialPredicate.COVERS, field_name, geometry, query)

    @classmethod
    def st_crosses(
        cls, field_name: str, geometry: Geometry, query: Q | None = None
    ) -> Q | Select[Any]:
        return cls.spatial_filter(SpatialPredicate.CROSSES, field_name, geometry, query)

    @classmethod
    def st_intersects(
        cls, field_name: str, geometry: Geometry, query: Q | None = None
    ) -> Q | Select[Any]:
        return cls.spatial_filter(
            SpatialPredicate.INTERSECTS, field_name, geometry, query
        )

    @classmethod
    def st_within(
        cls, field_name: str, geometry: Geometry, query: Q | None = None
    ) -> Q | Select[Any]:
        return cls.spatial_filter(SpatialPredicate.WITHIN, field_name, geometry, query)

    @classmethod
    def st_touches(
        cls, field_name: str, geometry: Geometry, query: Q | None = None
    ) -> Q | Select[Any]:
        return cls.spatial_filter(SpatialPredicate.TOUCHES, field_name, geometry, query)

    @classmethod
    def st_overlaps(
        cls, field_name: str, geometry: Geometry, query: Q | None = None
    ) -> Q | Select[Any]:
        return cls.spatial_filter(
            SpatialPredicate.OVERLAPS, field_name, geometry, query
        )

    @classmethod
    def st_disjoint(
        cls, field_name: str, geometry: Geometry, query: Q | None = None
    ) -> Q | Select[Any]:
        return cls.spatial_filter(
            SpatialPredicate.DISJOINT, field_name, geometry, query
        )

    @classmethod
    def st_equals(
        cls, field_name: str, geometry: Geometry, query: Q | None = None
    ) -> Q | Select[Any]:
        return cls.spatial_filter(SpatialPredicate.EQUALS, field_name, geometry, query)

    @classmethod
    def st_covered_by(
        cls, field_name: str, geometry: Geometry, query: Q | None = None
    ) -> Q | Select[Any]:
        return cls.spatial_filter(
            SpatialPredicate.COVERED_BY, field_name, geometry, query
        )
