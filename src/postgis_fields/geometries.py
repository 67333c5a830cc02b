"""Immutable geometry value objects.

Every variant is a frozen pydantic model. Equality is structural: the shape
parts are compared recursively and instances are hashable. ``srid`` is
reference-system metadata carried alongside the shape; it never takes part
in equality or hashing, so a value read back from a column that stamps its
SRID still equals the value that was written.

A :class:`Point` is built as ``Point(lat, lng)`` but renders its WKT body as
``"lng lat"``. Every body produced here, and every value decoded by
:mod:`postgis_fields.wkt`, keeps that order. Coordinates must be finite.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any, ClassVar

from pydantic import BaseModel, ConfigDict, ValidationError

from .exceptions import MalformedGeometry


def format_coordinate(value: float) -> str:
    """Render a coordinate without a trailing ``.0`` for integral values."""
    if value.is_integer() and abs(value) < 1e16:
        return str(int(value))
    return repr(value)


class Geometry(BaseModel):
    """
    Base class for all geometry variants.

    ``Geometry`` itself has no WKT form. It is used as the "any variant"
    type of a field declaration, so it stays instantiable, but encoding an
    instance raises :class:`~postgis_fields.exceptions.UnsupportedGeometryType`.
    """

    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    wkt_type: ClassVar[str] = "GEOMETRY"

    srid: int | None = None

    def wkt_body(self) -> str:
        """Return the text placed between the type's parentheses.

        Concrete variants override this; the base has no body.
        """
        raise NotImplementedError(f"{type(self).__name__} has no WKT body")

    @property
    def is_empty(self) -> bool:
        return False

    def to_wkt(self) -> str:
        from .wkt import encode

        return encode(self)

    def to_ewkt(self, srid: int | None = None) -> str:
        from .wkt import encode_ewkt

        return encode_ewkt(self, srid)

    @classmethod
    def from_wkt(cls, text: str) -> Geometry:
        """Decode ``text`` and check that it yields an instance of ``cls``."""
        from .wkt import decode

        return decode(text, expected=cls)

    def _key(self) -> tuple[Any, ...]:
        return tuple(
            getattr(self, name) for name in type(self).model_fields if name != "srid"
        )

    def __eq__(self, other: object) -> bool:
        if type(other) is not type(self):
            return False
        return self._key() == other._key()  # type: ignore[attr-defined]

    def __hash__(self) -> int:
        return hash((type(self).__name__, self._key()))

    def __str__(self) -> str:
        return self.to_wkt()


class Point(Geometry):
    wkt_type: ClassVar[str] = "POINT"

    lat: float
    lng: float

    def __init__(self, lat: float, lng: float, **data: Any) -> None:
        try:
            super().__init__(lat=lat, lng=lng, **data)
        except ValidationError as exc:
            raise MalformedGeometry(
                f"Point requires finite numeric coordinates, got ({lat!r}, {lng!r})"
            ) from exc

    def wkt_body(self) -> str:
        return f"{format_coordinate(self.lng)} {format_coordinate(self.lat)}"


class LineString(Geometry):
    wkt_type: ClassVar[str] = "LINESTRING"

    points: tuple[Point, ...]

    def __init__(self, points: Iterable[Point], **data: Any) -> None:
        points = tuple(points)
        if len(points) < 2:
            raise MalformedGeometry(
                f"{type(self).__name__} requires at least 2 points, got {len(points)}"
            )
        super().__init__(points=points, **data)

    @property
    def is_closed(self) -> bool:
        return self.points[0] == self.points[-1]

    def __len__(self) -> int:
        return len(self.points)

    def wkt_body(self) -> str:
        return ",".join(point.wkt_body() for point in self.points)


class Polygon(Geometry):
    """A polygon made of one exterior ring followed by optional interior rings.

    Ring closure is not enforced.
    """

    wkt_type: ClassVar[str] = "POLYGON"

    rings: tuple[LineString, ...]

    def __init__(self, rings: Iterable[LineString], **data: Any) -> None:
        rings = tuple(rings)
        if not rings:
            raise MalformedGeometry("Polygon requires at least 1 ring")
        super().__init__(rings=rings, **data)

    @property
    def exterior(self) -> LineString:
        return self.rings[0]

    @property
    def interiors(self) -> tuple[LineString, ...]:
        return self.rings[1:]

    def __len__(self) -> int:
        return len(self.rings)

    def wkt_body(self) -> str:
        return ",".join(f"({ring.wkt_body()})" for ring in self.rings)


class MultiPoint(Geometry):
    wkt_type: ClassVar[str] = "MULTIPOINT"

    points: tuple[Point, ...] = ()

    def __init__(self, points: Iterable[Point] = (), **data: Any) -> None:
        super().__init__(points=tuple(points), **data)

    @property
    def is_empty(self) -> bool:
        return not self.points

    def __len__(self) -> int:
        return len(self.points)

    def wkt_body(self) -> str:
        return ",".join(point.wkt_body() for point in self.points)


class MultiLineString(Geometry):
    wkt_type: ClassVar[str] = "MULTILINESTRING"

    linestrings: tuple[LineString, ...] = ()

    def __init__(self, linestrings: Iterable[LineString] = (), **data: Any) -> None:
        super().__init__(linestrings=tuple(linestrings), **data)

    @property
    def is_empty(self) -> bool:
        return not self.linestrings

    def __len__(self) -> int:
        return len(self.linestrings)

    def wkt_body(self) -> str:
        return ",".join(f"({line.wkt_body()})" for line in self.linestrings)


class MultiPolygon(Geometry):
    wkt_type: ClassVar[str] = "MULTIPOLYGON"

    polygons: tuple[Polygon, ...] = ()

    def __init__(self, polygons: Iterable[Polygon] = (), **data: Any) -> None:
        super().__init__(polygons=tuple(polygons), **data)

    @property
    def is_empty(self) -> bool:
        return not self.polygons

    def __len__(self) -> int:
        return len(self.polygons)

    def wkt_body(self) -> str:
        return ",".join(f"({polygon.wkt_body()})" for polygon in self.polygons)


class GeometryCollection(Geometry):
    """Heterogeneous collection; members are rendered with their type keyword."""

    wkt_type: ClassVar[str] = "GEOMETRYCOLLECTION"

    geometries: tuple[Geometry, ...] = ()

    def __init__(self, geometries: Iterable[Geometry] = (), **data: Any) -> None:
        super().__init__(geometries=tuple(geometries), **data)

    @property
    def is_empty(self) -> bool:
        return not self.geometries

    def __len__(self) -> int:
        return len(self.geometries)

    def wkt_body(self) -> str:
        return ",".join(geometry.to_wkt() for geometry in self.geometries)


GEOMETRY_TYPES: dict[str, type[Geometry]] = {
    cls.wkt_type: cls
    for cls in (
        Point,
        LineString,
        Polygon,
        MultiPoint,
        MultiLineString,
        MultiPolygon,
        GeometryCollection,
    )
}

__all__ = [
    "GEOMETRY_TYPES",
    "Geometry",
    "GeometryCollection",
    "LineString",
    "MultiLineString",
    "MultiPoint",
    "MultiPolygon",
    "Point",
    "Polygon",
    "format_coordinate",
]
