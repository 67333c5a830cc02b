"""
Spatial field declarations.

A :class:`FieldSpecRegistry` holds one :class:`FieldSpec` per spatial
attribute of a model. It is built once from the model's class-level
declarations and frozen; lookups afterwards are read-only and need no
locking.

Declarations use two mappings::

    __postgis_fields__ = {"location": Point, "area": Polygon}
    __postgis_types__ = {"area": {"geomtype": "geometry", "srid": 27700}}

Fields without an entry in ``__postgis_types__`` are stored as
``geography`` with SRID 4326.
"""

from __future__ import annotations

import enum
import logging
from collections.abc import Iterator, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict

from .exceptions import (
    FieldNotSpatial,
    InvalidFieldDeclaration,
    RegistryFrozenError,
    UnsupportedGeometryType,
)
from .geometries import Geometry

logger = logging.getLogger(__name__)

DEFAULT_SRID = 4326


class StorageMode(str, enum.Enum):
    """PostGIS column kind a spatial field is stored in."""

    GEOGRAPHY = "geography"
    GEOMETRY = "geometry"


class FieldSpec(BaseModel):
    """Declaration of a single spatial attribute."""

    model_config = ConfigDict(frozen=True)

    attribute_name: str
    geometry_type: type[Geometry]
    storage_mode: StorageMode = StorageMode.GEOGRAPHY
    srid: int = DEFAULT_SRID
    is_srid_explicit: bool = False

    def accepts(self, value: Any) -> bool:
        """Return True if ``value`` is an instance of the declared geometry type."""
        return isinstance(value, self.geometry_type)


def _storage_mode(
    model_name: str, attribute_name: str, geomtype: str | None
) -> StorageMode | None:
    if not geomtype:
        return None
    try:
        return StorageMode(geomtype.lower())
    except ValueError as exc:
        raise InvalidFieldDeclaration(
            f"Unknown geomtype {geomtype!r} for {model_name}.{attribute_name}; "
            f"expected one of {[mode.value for mode in StorageMode]}"
        ) from exc


class FieldSpecRegistry:
    """
    Registry of :class:`FieldSpec` instances keyed by attribute name.

    ``register`` is last-write-wins until :meth:`freeze` is called.
    """

    def __init__(self, model_name: str = "<unbound>") -> None:
        self.model_name = model_name
        self._specs: dict[str, FieldSpec] = {}
        self._frozen = False

    @classmethod
    def from_declarations(
        cls,
        model_name: str,
        fields: Mapping[str, type[Geometry]],
        types: Mapping[str, Mapping[str, Any]] | None = None,
    ) -> FieldSpecRegistry:
        """Build and freeze a registry from ``__postgis_fields__``-style mappings."""
        registry = cls(model_name)
        types = types or {}
        for name, geometry_type in fields.items():
            options = types.get(name, {})
            registry.register(
                name,
                geometry_type,
                storage_mode=_storage_mode(model_name, name, options.get("geomtype")),
                srid=options.get("srid"),
            )
        registry.freeze()
        logger.debug(
            "Built spatial field registry for %s: %s", model_name, registry.names
        )
        return registry

    def register(
        self,
        attribute_name: str,
        geometry_type: type[Geometry],
        storage_mode: StorageMode | None = None,
        srid: int | None = None,
    ) -> FieldSpec:
        """
        Declare ``attribute_name`` as spatial.

        Args:
            attribute_name: The model attribute / column name.
            geometry_type: A :class:`Geometry` subclass (or ``Geometry`` itself
                for "any variant").
            storage_mode: Column kind. Defaults to geography, or to geometry
                when only ``srid`` is given.
            srid: Reference-system identifier. Defaults to 4326.

        Raises:
            UnsupportedGeometryType: If ``geometry_type`` is not a geometry class.
            RegistryFrozenError: If the registry has been frozen.
        """
        if self._frozen:
            raise RegistryFrozenError(
                f"Spatial field registry for {self.model_name} is frozen"
            )
        if not (isinstance(geometry_type, type) and issubclass(geometry_type, Geometry)):
            raise UnsupportedGeometryType(
                f"{geometry_type!r} declared for {self.model_name}.{attribute_name} "
                "is not a geometry type"
            )

        if storage_mode is None:
            storage_mode = (
                StorageMode.GEOMETRY if srid is not None else StorageMode.GEOGRAPHY
            )
        spec = FieldSpec(
            attribute_name=attribute_name,
            geometry_type=geometry_type,
            storage_mode=storage_mode,
            srid=srid if srid is not None else DEFAULT_SRID,
            is_srid_explicit=srid is not None,
        )
        self._specs[attribute_name] = spec
        return spec

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def lookup(self, attribute_name: str) -> FieldSpec | None:
        return self._specs.get(attribute_name)

    def is_spatial(self, attribute_name: str) -> bool:
        return attribute_name in self._specs

    def require(self, attribute_name: str) -> FieldSpec:
        """Return the spec for ``attribute_name`` or raise :class:`FieldNotSpatial`."""
        spec = self._specs.get(attribute_name)
        if spec is None:
            raise FieldNotSpatial(attribute_name, self.model_name)
        return spec

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(self._specs)

    def __contains__(self, attribute_name: object) -> bool:
        return attribute_name in self._specs

    def __iter__(self) -> Iterator[FieldSpec]:
        return iter(self._specs.values())

    def __len__(self) -> int:
        return len(self._specs)

    def __repr__(self) -> str:
        return f"FieldSpecRegistry({self.model_name!r}, fields={list(self._specs)})"


__all__ = [
    "DEFAULT_SRID",
    "FieldSpec",
    "FieldSpecRegistry",
    "StorageMode",
]
