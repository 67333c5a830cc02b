"""Conversions between geometry values, Shapely objects and driver values.

Binary values (WKB bytes, hex EWKB strings, GeoAlchemy2 ``WKBElement``) are
converted to WKT through Shapely before reaching :func:`postgis_fields.wkt.decode`.
"""

from __future__ import annotations

import re
from typing import Any

import shapely
from geoalchemy2.elements import WKBElement, WKTElement
from geoalchemy2.shape import to_shape
from shapely.errors import GEOSException
from shapely.geometry.base import BaseGeometry

from .exceptions import MalformedWKT
from .geometries import Geometry
from .wkt import decode, encode

_HEX = re.compile(r"^(?:[0-9A-Fa-f]{2})+$")


def to_shapely(geometry: Geometry) -> BaseGeometry:
    """Return the Shapely equivalent of ``geometry`` (axes in WKT order)."""
    shape = shapely.from_wkt(encode(geometry))
    if geometry.srid is not None:
        shape = shapely.set_srid(shape, geometry.srid)
    return shape


def from_shapely(shape: BaseGeometry, srid: int | None = None) -> Geometry:
    """Build a geometry value from a Shapely object."""
    if srid is None:
        srid = shapely.get_srid(shape) or None
    geometry = decode(shapely.to_wkt(shape, rounding_precision=-1, trim=True))
    if srid is not None:
        geometry = geometry.model_copy(update={"srid": srid})
    return geometry


def _from_wkb(data: bytes | str, srid: int | None = None) -> Geometry:
    try:
        shape = shapely.from_wkb(data)
    except GEOSException as exc:
        raise MalformedWKT(f"Cannot read binary geometry: {exc}") from exc
    return from_shapely(shape, srid)


def coerce_geometry(value: Any) -> Geometry | None:
    """
    Convert a raw column value into a geometry value.

    Accepts WKT/EWKT strings, hex (E)WKB strings, WKB bytes, GeoAlchemy2
    elements and Shapely geometries. ``None`` is returned unchanged and a
    :class:`Geometry` passes through.

    Raises:
        MalformedWKT: If the value cannot be interpreted as a geometry.
    """
    if value is None or isinstance(value, Geometry):
        return value
    if isinstance(value, WKTElement):
        geometry = decode(value.data)
        srid = value.srid if value.srid and value.srid > 0 else None
        if srid is not None and geometry.srid is None:
            geometry = geometry.model_copy(update={"srid": srid})
        return geometry
    if isinstance(value, WKBElement):
        srid = value.srid if value.srid and value.srid > 0 else None
        return from_shapely(to_shape(value), srid)
    if isinstance(value, BaseGeometry):
        return from_shapely(value)
    if isinstance(value, (bytes, bytearray, memoryview)):
        return _from_wkb(bytes(value))
    if isinstance(value, str):
        if _HEX.match(value):
            return _from_wkb(value)
        return decode(value)
    raise MalformedWKT(f"Cannot read a geometry from {type(value).__name__}")


__all__ = ["coerce_geometry", "from_shapely", "to_shapely"]
