"""Tests for spatial field declarations."""

from __future__ import annotations

import pytest

from postgis_fields.exceptions import (
    FieldNotSpatial,
    InvalidFieldDeclaration,
    PostgisFieldsError,
    RegistryFrozenError,
    UnsupportedGeometryType,
)
from postgis_fields.fields import (
    DEFAULT_SRID,
    FieldSpec,
    FieldSpecRegistry,
    StorageMode,
)
from postgis_fields.geometries import Geometry, LineString, Point, Polygon


class TestRegister:
    def test_defaults_to_geography_4326(self) -> None:
        spec = FieldSpecRegistry("Model").register("location", Point)
        assert spec.storage_mode is StorageMode.GEOGRAPHY
        assert spec.srid == DEFAULT_SRID == 4326
        assert spec.is_srid_explicit is False

    def test_srid_override_switches_to_geometry(self) -> None:
        spec = FieldSpecRegistry("Model").register("area", Polygon, srid=27700)
        assert spec.storage_mode is StorageMode.GEOMETRY
        assert spec.srid == 27700
        assert spec.is_srid_explicit is True

    def test_explicit_storage_mode_is_honoured(self) -> None:
        spec = FieldSpecRegistry("Model").register(
            "area", Polygon, StorageMode.GEOMETRY
        )
        assert spec.storage_mode is StorageMode.GEOMETRY
        assert spec.srid == 4326
        assert spec.is_srid_explicit is False

    def test_last_write_wins(self) -> None:
        registry = FieldSpecRegistry("Model")
        registry.register("shape", Point)
        registry.register("shape", LineString, srid=3857)
        spec = registry.lookup("shape")
        assert spec is not None
        assert spec.geometry_type is LineString
        assert spec.srid == 3857
        assert len(registry) == 1

    @pytest.mark.parametrize("geometry_type", [str, int, "Point", Point(1, 2)])
    def test_non_geometry_type_is_rejected(self, geometry_type: object) -> None:
        with pytest.raises(UnsupportedGeometryType):
            FieldSpecRegistry("Model").register("shape", geometry_type)  # type: ignore[arg-type]

    def test_frozen_registry_rejects_registration(
        self, registry: FieldSpecRegistry
    ) -> None:
        assert registry.frozen
        with pytest.raises(RegistryFrozenError):
            registry.register("other", Point)


class TestLookup:
    def test_lookup(self, registry: FieldSpecRegistry) -> None:
        spec = registry.lookup("point2")
        assert spec == FieldSpec(
            attribute_name="point2",
            geometry_type=Polygon,
            storage_mode=StorageMode.GEOMETRY,
            srid=27700,
            is_srid_explicit=True,
        )

    def test_lookup_missing(self, registry: FieldSpecRegistry) -> None:
        assert registry.lookup("missing") is None

    def test_is_spatial(self, registry: FieldSpecRegistry) -> None:
        assert registry.is_spatial("point")
        assert not registry.is_spatial("name")
        assert "point2" in registry
        assert "name" not in registry

    def test_require_raises_field_not_spatial(
        self, registry: FieldSpecRegistry
    ) -> None:
        with pytest.raises(FieldNotSpatial) as exc_info:
            registry.require("undefined_field")
        assert exc_info.value.field_name == "undefined_field"
        assert exc_info.value.model_name == "TestModel"
        assert str(exc_info.value) == (
            "Field undefined_field in class TestModel "
            "not present in __postgis_fields__"
        )

    def test_iteration_and_names(self, registry: FieldSpecRegistry) -> None:
        assert registry.names == ("point", "point2")
        assert [spec.attribute_name for spec in registry] == ["point", "point2"]


class TestFromDeclarations:
    def test_builds_frozen_registry(self) -> None:
        registry = FieldSpecRegistry.from_declarations(
            "Place",
            {"point": Point, "point2": Polygon},
            {"point2": {"geomtype": "geometry", "srid": 27700}},
        )
        assert registry.frozen
        assert registry.model_name == "Place"

        point = registry.require("point")
        assert point.storage_mode is StorageMode.GEOGRAPHY
        assert point.srid == 4326

        point2 = registry.require("point2")
        assert point2.storage_mode is StorageMode.GEOMETRY
        assert point2.srid == 27700

    def test_geomtype_is_case_insensitive(self) -> None:
        registry = FieldSpecRegistry.from_declarations(
            "Place", {"area": Polygon}, {"area": {"geomtype": "GEOGRAPHY"}}
        )
        spec = registry.require("area")
        assert spec.storage_mode is StorageMode.GEOGRAPHY
        assert spec.srid == 4326

    def test_unknown_geomtype(self) -> None:
        with pytest.raises(InvalidFieldDeclaration) as exc_info:
            FieldSpecRegistry.from_declarations(
                "Place", {"area": Polygon}, {"area": {"geomtype": "raster"}}
            )
        assert isinstance(exc_info.value, PostgisFieldsError)
        assert "Place.area" in str(exc_info.value)

    def test_without_types(self) -> None:
        registry = FieldSpecRegistry.from_declarations("Place", {"any": Geometry})
        assert registry.require("any").geometry_type is Geometry


class TestFieldSpec:
    def test_accepts(self) -> None:
        spec = FieldSpec(attribute_name="location", geometry_type=Point)
        assert spec.accepts(Point(1, 2))
        assert not spec.accepts(LineString([Point(1, 2), Point(3, 4)]))

    def test_any_geometry(self) -> None:
        spec = FieldSpec(attribute_name="shape", geometry_type=Geometry)
        assert spec.accepts(Point(1, 2))
        assert spec.accepts(LineString([Point(1, 2), Point(3, 4)]))
