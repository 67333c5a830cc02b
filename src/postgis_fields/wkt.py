"""
WKT encoding and decoding for :mod:`postgis_fields.geometries`.

Encoding
--------
``encode(g)`` produces ``"<TYPE>(<BODY>)"`` with no whitespace besides the
single space inside a coordinate pair::

    POINT(2 1)
    LINESTRING(2 1,4 3)
    POLYGON((1 1,2 1),(2 1,2 2),(2 2,1 1))
    MULTIPOINT(2 1,4 3)
    MULTILINESTRING((2 1,4 3),(6 5,8 7))
    MULTIPOLYGON(((1 1,2 1,2 2,1 1)))
    GEOMETRYCOLLECTION(POINT(2 1),LINESTRING(2 1,4 3))

Empty multi-geometries and collections encode as ``"<TYPE> EMPTY"``.

Decoding
--------
``decode(text)`` accepts the output of ``encode`` as well as the looser
forms emitted by PostGIS and Shapely: an optional ``SRID=<n>;`` prefix,
lower-case keywords, whitespace around tokens, ``TYPE()`` for empty values and
parenthesized members inside ``MULTIPOINT``. Numbers must be separated by
whitespace or punctuation. Coordinates are swapped back so that
``decode(encode(g)) == g``.
"""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from .exceptions import MalformedGeometry, MalformedWKT, UnsupportedGeometryType
from .geometries import (
    GEOMETRY_TYPES,
    Geometry,
    GeometryCollection,
    LineString,
    MultiLineString,
    MultiPoint,
    MultiPolygon,
    Point,
    Polygon,
)

if TYPE_CHECKING:
    from collections.abc import Callable

_EWKT_PREFIX = re.compile(r"^\s*SRID\s*=\s*(-?\d+)\s*;", re.IGNORECASE)

_TOKEN = re.compile(
    r"\s*(?:"
    r"(?P<number>(?<![\w.])[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?(?![.\w]))"
    r"|(?P<word>[A-Za-z_]+)"
    r"|(?P<punct>[(),])"
    r")"
)

EMPTY = "EMPTY"


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode(geometry: Geometry) -> str:
    """Encode ``geometry`` as WKT."""
    if not isinstance(geometry, Geometry):
        raise UnsupportedGeometryType(
            f"Cannot encode {type(geometry).__name__} as WKT"
        )
    if geometry.wkt_type not in GEOMETRY_TYPES:
        raise UnsupportedGeometryType(
            f"{type(geometry).__name__} is not a concrete geometry type"
        )
    if geometry.is_empty:
        return f"{geometry.wkt_type} {EMPTY}"
    return f"{geometry.wkt_type}({geometry.wkt_body()})"


def encode_ewkt(geometry: Geometry, srid: int | None = None) -> str:
    """Encode ``geometry`` as EWKT.

    Uses ``srid`` when given, else the value's own ``srid``. Falls back to
    plain WKT when neither is set.
    """
    srid = srid if srid is not None else geometry.srid
    if srid is None:
        return encode(geometry)
    return f"SRID={srid};{encode(geometry)}"


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode(text: str, *, expected: type[Geometry] = Geometry) -> Geometry:
    """
    Decode a WKT or EWKT string.

    Args:
        text: The WKT string, optionally prefixed with ``SRID=<n>;``.
        expected: Geometry class the result must be an instance of.

    Raises:
        MalformedWKT: If ``text`` is not valid WKT or yields an unexpected
            geometry type.
        UnsupportedGeometryType: If the type keyword is unknown.
    """
    if not isinstance(text, str):
        raise MalformedWKT(f"WKT must be a string, got {type(text).__name__}")

    srid: int | None = None
    match = _EWKT_PREFIX.match(text)
    if match:
        srid = int(match.group(1))
        text = text[match.end() :]

    parser = _Parser(text)
    geometry = parser.parse_geometry()
    parser.expect_end()

    if srid is not None:
        geometry = geometry.model_copy(update={"srid": srid})
    if not isinstance(geometry, expected):
        raise MalformedWKT(
            f"Expected {expected.__name__}, got {type(geometry).__name__}: {text!r}"
        )
    return geometry


def _tokenize(text: str) -> list[tuple[str, str]]:
    tokens: list[tuple[str, str]] = []
    pos = 0
    end = len(text.rstrip())
    while pos < end:
        match = _TOKEN.match(text, pos)
        if match is None or match.end() == pos:
            raise MalformedWKT(f"Unexpected character at {pos}: {text!r}")
        kind = match.lastgroup
        assert kind is not None
        tokens.append((kind, match.group(kind)))
        pos = match.end()
    return tokens


class _Parser:
    """Recursive-descent parser over the token list of a single WKT string."""

    def __init__(self, text: str) -> None:
        self.text = text
        self.tokens = _tokenize(text)
        self.pos = 0

    # -- token helpers -----------------------------------------------------

    def _peek(self) -> tuple[str, str] | None:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return None

    def _next(self) -> tuple[str, str]:
        token = self._peek()
        if token is None:
            raise MalformedWKT(f"Unexpected end of input: {self.text!r}")
        self.pos += 1
        return token

    def _accept(self, value: str) -> bool:
        token = self._peek()
        if token is not None and token[0] == "punct" and token[1] == value:
            self.pos += 1
            return True
        return False

    def _expect(self, value: str) -> None:
        kind, found = self._next()
        if kind != "punct" or found != value:
            raise MalformedWKT(f"Expected {value!r}, found {found!r}: {self.text!r}")

    def _number(self) -> float:
        kind, found = self._next()
        if kind != "number":
            raise MalformedWKT(f"Expected a number, found {found!r}: {self.text!r}")
        return float(found)

    def _list(self, item: Callable[[], Any]) -> list[Any]:
        items = [item()]
        while self._accept(","):
            items.append(item())
        return items

    def _group(self, item: Callable[[], Any]) -> list[Any]:
        self._expect("(")
        items = self._list(item)
        self._expect(")")
        return items

    def expect_end(self) -> None:
        token = self._peek()
        if token is not None:
            raise MalformedWKT(f"Trailing input {token[1]!r}: {self.text!r}")

    # -- grammar -----------------------------------------------------------

    def parse_geometry(self) -> Geometry:
        kind, keyword = self._next()
        if kind != "word":
            raise MalformedWKT(f"Expected a geometry keyword: {self.text!r}")
        cls = GEOMETRY_TYPES.get(keyword.upper())
        if cls is None:
            raise UnsupportedGeometryType(f"Unknown geometry type {keyword!r}")

        token = self._peek()
        if token is not None and token[0] == "word" and token[1].upper() == EMPTY:
            self.pos += 1
            return self._empty(cls)

        self._expect("(")
        if self._accept(")"):
            return self._empty(cls)
        geometry = self._BODIES[cls](self)
        self._expect(")")
        return geometry

    def _empty(self, cls: type[Geometry]) -> Geometry:
        if cls in (Point, LineString, Polygon):
            raise MalformedWKT(f"{cls.__name__} cannot be empty: {self.text!r}")
        return cls()

    def _point(self) -> Point:
        lng = self._number()
        lat = self._number()
        try:
            return Point(lat, lng)
        except MalformedGeometry as exc:
            raise MalformedWKT(f"{exc}: {self.text!r}") from exc

    def _points(self) -> list[Point]:
        return self._list(self._point)

    def _linestring(self) -> LineString:
        return self._construct(LineString, self._points())

    def _ring(self) -> LineString:
        return self._construct(LineString, self._group(self._point))

    def _polygon(self) -> Polygon:
        return self._construct(Polygon, self._list(self._ring))

    def _multipoint_member(self) -> Point:
        if self._accept("("):
            point = self._point()
            self._expect(")")
            return point
        return self._point()

    def _multipoint(self) -> MultiPoint:
        return MultiPoint(self._list(self._multipoint_member))

    def _multilinestring(self) -> MultiLineString:
        return MultiLineString(self._list(self._ring))

    def _multipolygon(self) -> MultiPolygon:
        polygons = self._list(
            lambda: self._construct(Polygon, self._group(self._ring))
        )
        return MultiPolygon(polygons)

    def _collection(self) -> GeometryCollection:
        return GeometryCollection(self._list(self.parse_geometry))

    def _construct(self, cls: type[Geometry], parts: list[Any]) -> Any:
        try:
            return cls(parts)
        except MalformedGeometry as exc:
            raise MalformedWKT(f"{exc}: {self.text!r}") from exc

    _BODIES: dict[type[Geometry], Callable[[_Parser], Geometry]] = {
        Point: _point,
        LineString: _linestring,
        Polygon: _polygon,
        MultiPoint: _multipoint,
        MultiLineString: _multilinestring,
        MultiPolygon: _multipolygon,
        GeometryCollection: _collection,
    }


__all__ = ["EMPTY", "decode", "encode", "encode_ewkt"]
