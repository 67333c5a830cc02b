"""Shared fixtures for postgis-fields tests."""

from __future__ import annotations

import pytest

from postgis_fields.fields import FieldSpecRegistry, StorageMode
from postgis_fields.geometries import LineString, Point, Polygon


@pytest.fixture
def triangle() -> Polygon:
    """Polygon built from three two-point rings."""
    return Polygon(
        [
            LineString([Point(1, 1), Point(1, 2)]),
            LineString([Point(1, 2), Point(2, 2)]),
            LineString([Point(2, 2), Point(1, 1)]),
        ]
    )


@pytest.fixture
def registry() -> FieldSpecRegistry:
    """Registry with a default geography field and a geometry field in 27700."""
    registry = FieldSpecRegistry("TestModel")
    registry.register("point", Point)
    registry.register("point2", Polygon, StorageMode.GEOMETRY, 27700)
    registry.freeze()
    return registry
