"""Tests for the SQLAlchemy model mixin."""

from __future__ import annotations

import re
from typing import Any

import pytest
from geoalchemy2 import Geography, Geometry as GeometryColumnType
from sqlalchemy import Engine, Integer, String, Text, create_engine, event, select
from sqlalchemy.dialects import postgresql
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column
from sqlalchemy.schema import CreateTable

from postgis_fields.exceptions import FieldNotSpatial
from postgis_fields.fields import StorageMode
from postgis_fields.geometries import LineString, Point, Polygon
from postgis_fields.orm import SpatialModelMixin

POLYGON_SQL = (
    "public.ST_GeomFromText('POLYGON((1 1,2 1),(2 1,2 2),(2 2,1 1))', 4326)"
)


class PostgisBase(DeclarativeBase):
    pass


class SqliteBase(DeclarativeBase):
    pass


class TestModel(SpatialModelMixin, PostgisBase):
    __test__ = False
    __tablename__ = "test_models"
    __postgis_fields__ = {"point": Point, "point2": Polygon}
    __postgis_types__ = {"point2": {"geomtype": "geometry", "srid": 27700}}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True)


class Place(SpatialModelMixin, SqliteBase):
    """Stores geometry columns as text; PostGIS functions are emulated."""

    __tablename__ = "places"
    __postgis_schema__ = None
    __postgis_fields__ = {"point": Point, "point2": Polygon}
    __postgis_types__ = {"point2": {"geomtype": "geometry", "srid": 27700}}

    id: Mapped[int] = mapped_column(Integer, primary_key=True)
    name: Mapped[str | None] = mapped_column(String, nullable=True)
    point: Mapped[Any] = mapped_column(Text, nullable=True)
    point2: Mapped[Any] = mapped_column(Text, nullable=True)


def compiled(stmt: Any) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


@pytest.fixture
def statements() -> list[str]:
    return []


@pytest.fixture
def engine(statements: list[str]) -> Engine:
    engine = create_engine("sqlite://")

    @event.listens_for(engine, "connect")
    def _register_functions(dbapi_connection: Any, _record: Any) -> None:
        dbapi_connection.create_function("ST_GeogFromText", 1, lambda wkt: wkt)
        dbapi_connection.create_function(
            "ST_GeomFromText", 2, lambda wkt, srid: f"SRID={srid};{wkt}"
        )

    @event.listens_for(engine, "before_cursor_execute")
    def _record(
        _conn: Any,
        _cursor: Any,
        statement: str,
        _parameters: Any,
        _context: Any,
        _executemany: bool,
    ) -> None:
        statements.append(statement)

    SqliteBase.metadata.create_all(engine)
    return engine


class TestDeclaration:
    def test_registry_is_built_per_model(self) -> None:
        registry = TestModel.__postgis_registry__
        assert registry.model_name == "TestModel"
        assert registry.frozen
        assert registry.names == ("point", "point2")
        assert registry.require("point").storage_mode is StorageMode.GEOGRAPHY
        assert registry.require("point2").srid == 27700

    def test_columns_are_added(self) -> None:
        point = TestModel.__table__.c.point
        point2 = TestModel.__table__.c.point2
        assert isinstance(point.type, Geography)
        assert point.type.geometry_type == "POINT"
        assert point.type.srid == 4326
        assert isinstance(point2.type, GeometryColumnType)
        assert point2.type.geometry_type == "POLYGON"
        assert point2.type.srid == 27700
        assert point.nullable and point2.nullable

    def test_ddl(self) -> None:
        ddl = compiled(CreateTable(TestModel.__table__))
        assert "geography(POINT,4326)" in ddl
        assert "geometry(POLYGON,27700)" in ddl

    def test_explicit_columns_are_kept(self) -> None:
        assert isinstance(Place.__table__.c.point.type, Text)

    def test_models_do_not_share_registries(self) -> None:
        assert TestModel.__postgis_registry__ is not Place.__postgis_registry__
        assert SpatialModelMixin.__postgis_fields__ == {}

    def test_abstract_model_gets_no_columns(self) -> None:
        class AbstractPlace(SpatialModelMixin, PostgisBase):
            __abstract__ = True
            __postgis_fields__ = {"location": Point}

        assert "location" not in AbstractPlace.__dict__
        assert AbstractPlace.__postgis_registry__.names == ("location",)


class TestScopes:
    def test_st_contains(self, triangle: Polygon) -> None:
        sql = compiled(TestModel.st_contains("point", triangle))
        assert sql.startswith("SELECT test_models.id")
        assert "FROM test_models" in sql
        assert f"public.ST_Contains(point::geometry, {POLYGON_SQL})" in sql

    @pytest.mark.parametrize(
        ("method", "function"),
        [
            ("st_contains", "ST_Contains"),
            ("st_covers", "ST_Covers"),
            ("st_crosses", "ST_Crosses"),
            ("st_intersects", "ST_Intersects"),
            ("st_within", "ST_Within"),
            ("st_touches", "ST_Touches"),
            ("st_overlaps", "ST_Overlaps"),
            ("st_disjoint", "ST_Disjoint"),
            ("st_equals", "ST_Equals"),
            ("st_covered_by", "ST_CoveredBy"),
        ],
    )
    def test_named_scopes(self, triangle: Polygon, method: str, function: str) -> None:
        stmt = getattr(TestModel, method)("point", triangle)
        assert f"public.{function}(point::geometry, {POLYGON_SQL})" in compiled(stmt)

    def test_geometry_field_uses_declared_srid(self, triangle: Polygon) -> None:
        sql = compiled(TestModel.st_intersects("point2", triangle))
        assert "public.ST_Intersects(point2::geometry" in sql
        assert "(2 2,1 1))', 27700))" in sql

    def test_existing_query_is_narrowed(self, triangle: Polygon) -> None:
        query = select(TestModel).where(TestModel.name == "Depot")
        sql = compiled(TestModel.st_covers("point", triangle, query))
        assert re.search(r"test_models\.name = \S+ AND public\.ST_Covers\(", sql)

    def test_scopes_chain(self, triangle: Polygon) -> None:
        query = TestModel.st_contains("point", triangle)
        sql = compiled(TestModel.st_within("point2", triangle, query))
        assert "public.ST_Contains(point::geometry" in sql
        assert "AND public.ST_Within(point2::geometry" in sql

    def test_undeclared_field(self, triangle: Polygon) -> None:
        with pytest.raises(FieldNotSpatial) as exc_info:
            TestModel.st_contains("undefined_field", triangle)
        assert str(exc_info.value) == (
            "Field undefined_field in class TestModel "
            "not present in __postgis_fields__"
        )

    def test_spatial_filter_by_name(self, triangle: Polygon) -> None:
        sql = compiled(TestModel.spatial_filter("covered_by", "point", triangle))
        assert "public.ST_CoveredBy(point::geometry" in sql


class TestPersistence:
    def test_insert_writes_through_constructors(
        self, engine: Engine, statements: list[str]
    ) -> None:
        with Session(engine) as session:
            session.add(Place(id=1, name="Depot", point=Point(1, 2)))
            session.commit()

        inserts = [s for s in statements if s.startswith("INSERT")]
        assert len(inserts) == 1
        assert "ST_GeogFromText('POINT(2 1)')" in inserts[0]

    def test_geometry_field_passes_srid(
        self, engine: Engine, statements: list[str], triangle: Polygon
    ) -> None:
        with Session(engine) as session:
            session.add(Place(id=1, point2=triangle))
            session.commit()

        inserts = [s for s in statements if s.startswith("INSERT")]
        assert (
            "ST_GeomFromText('POLYGON((1 1,2 1),(2 1,2 2),(2 2,1 1))', '27700')"
            in inserts[0]
        )

    def test_load_decodes_values(self, engine: Engine, triangle: Polygon) -> None:
        with Session(engine) as session:
            session.add(Place(id=1, point=Point(1, 2), point2=triangle))
            session.commit()

        with Session(engine) as session:
            place = session.get(Place, 1)
            assert place is not None
            assert place.point == Point(1, 2)
            assert place.point2 == triangle
            assert place.point2.srid == 27700
            assert not session.is_modified(place)

    def test_null_values_stay_unset(self, engine: Engine) -> None:
        with Session(engine) as session:
            session.add(Place(id=1, name="Nowhere"))
            session.commit()

        with Session(engine) as session:
            place = session.get(Place, 1)
            assert place is not None
            assert place.point is None
            assert place.point2 is None

    def test_update_matches_insert(
        self, engine: Engine, statements: list[str]
    ) -> None:
        with Session(engine) as session:
            session.add(Place(id=1, point=Point(1, 2)))
            session.commit()

        with Session(engine) as session:
            place = session.get(Place, 1)
            assert place is not None
            place.point = Point(2, 4)
            session.commit()
            assert place.point == Point(2, 4)

        updates = [s for s in statements if s.startswith("UPDATE")]
        assert len(updates) == 1
        assert "point=ST_GeogFromText('POINT(4 2)')" in updates[0]

    def test_mismatched_type_is_still_written(
        self, engine: Engine, statements: list[str]
    ) -> None:
        line = LineString([Point(1, 2), Point(3, 4)])
        with Session(engine) as session:
            session.add(Place(id=1, point=line))
            session.commit()

        with Session(engine) as session:
            place = session.get(Place, 1)
            assert place is not None
            assert place.point == line

