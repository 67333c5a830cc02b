"""GeoAlchemy2 column types for declared spatial fields."""

from __future__ import annotations

from typing import Any

from geoalchemy2 import Geography
from geoalchemy2 import Geometry as GeometryColumnType
from sqlalchemy.orm import MappedColumn, mapped_column

from ..fields import FieldSpec, StorageMode


def column_type(spec: FieldSpec) -> Geography | GeometryColumnType:
    """Return the ``geography``/``geometry`` column type matching ``spec``.

    Spatial indexes are left to migrations.
    """
    type_cls = (
        Geography if spec.storage_mode is StorageMode.GEOGRAPHY else GeometryColumnType
    )
    # Geometry.wkt_type is "GEOMETRY", i.e. any variant.
    return type_cls(
        geometry_type=spec.geometry_type.wkt_type,
        srid=spec.srid,
        spatial_index=False,
    )


def spatial_column(spec: FieldSpec, **kwargs: Any) -> MappedColumn[Any]:
    kwargs.setdefault("nullable", True)
    return mapped_column(column_type(spec), **kwargs)


__all__ = ["column_type", "spatial_column"]
