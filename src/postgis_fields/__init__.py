"""PostGIS geometry fields for SQLAlchemy models."""

from __future__ import annotations

from .exceptions import (
    FieldNotSpatial,
    InvalidFieldDeclaration,
    MalformedGeometry,
    MalformedWKT,
    PostgisFieldsError,
    RegistryFrozenError,
    UnsupportedGeometryType,
    UnsupportedPredicate,
)
from .fields import DEFAULT_SRID, FieldSpec, FieldSpecRegistry, StorageMode
from .geometries import (
    Geometry,
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)
from .interop import coerce_geometry, from_shapely, to_shapely
from .orm import SpatialModelMixin, spatial_column
from .persistence import (
    DEFAULT_SCHEMA,
    PersistenceAdapter,
    RawBindingTarget,
    RowHydrationTarget,
)
from .scopes import (
    DEFAULT_PREDICATE_REGISTRY,
    SpatialPredicate,
    SpatialPredicateOperator,
    SpatialPredicateRegistry,
    SpatialScopes,
)
from .wkt import decode, encode, encode_ewkt

__all__ = [
    # Geometry model
    "Geometry",
    "Point",
    "LineString",
    "Polygon",
    "MultiPoint",
    "MultiLineString",
    "MultiPolygon",
    "GeometryCollection",
    # WKT codec
    "encode",
    "encode_ewkt",
    "decode",
    # Shapely / driver values
    "coerce_geometry",
    "from_shapely",
    "to_shapely",
    # Field declarations
    "DEFAULT_SRID",
    "FieldSpec",
    "FieldSpecRegistry",
    "StorageMode",
    # Persistence
    "DEFAULT_SCHEMA",
    "PersistenceAdapter",
    "RawBindingTarget",
    "RowHydrationTarget",
    # Query scopes
    "DEFAULT_PREDICATE_REGISTRY",
    "SpatialPredicate",
    "SpatialPredicateOperator",
    "SpatialPredicateRegistry",
    "SpatialScopes",
    # SQLAlchemy
    "SpatialModelMixin",
    "spatial_column",
    # Exceptions
    "PostgisFieldsError",
    "MalformedGeometry",
    "MalformedWKT",
    "UnsupportedGeometryType",
    "FieldNotSpatial",
    "InvalidFieldDeclaration",
    "RegistryFrozenError",
    "UnsupportedPredicate",
]
