"""SQLAlchemy integration for spatial fields."""

from .columns import column_type, spatial_column
from .mixin import SpatialModelMixin

__all__ = [
    "SpatialModelMixin",
    "column_type",
    "spatial_column",
]
