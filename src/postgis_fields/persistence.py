"""
PersistenceAdapter: converts spatial attributes to PostGIS write expressions
and raw column values back into geometry values.

The adapter is independent of any ORM. A host layer wires it in by
implementing two narrow protocols:

- :class:`RawBindingTarget`: accepts an unescaped SQL expression as the
  value to write for an attribute.
- :class:`RowHydrationTarget`: receives decoded geometry values on read.

The SQLAlchemy wiring lives in :mod:`postgis_fields.orm`.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from .fields import StorageMode
from .geometries import Geometry
from .interop import coerce_geometry
from .wkt import encode

if TYPE_CHECKING:
    from collections.abc import Mapping

    from .fields import FieldSpecRegistry

logger = logging.getLogger(__name__)

DEFAULT_SCHEMA = "public"


@runtime_checkable
class RawBindingTarget(Protocol):
    def bind_raw(self, attribute_name: str, sql: str) -> None:
        """Use ``sql`` verbatim as the value written for ``attribute_name``."""
        ...


@runtime_checkable
class RowHydrationTarget(Protocol):
    def set_attribute(self, attribute_name: str, value: Geometry) -> None: ...


def qualify(function: str, schema: str | None) -> str:
    """Prefix a SQL function name with ``schema`` when one is set."""
    return f"{schema}.{function}" if schema else function


class PersistenceAdapter:
    """
    Write/read converter for the spatial fields of one model.

    Parameters
    ----------
    registry:
        The model's frozen :class:`FieldSpecRegistry`.
    schema:
        Schema holding the PostGIS functions. ``None`` leaves function
        names unqualified.
    """

    def __init__(
        self,
        registry: FieldSpecRegistry,
        *,
        schema: str | None = DEFAULT_SCHEMA,
    ) -> None:
        self.registry = registry
        self.schema = schema

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def write_expression(self, attribute_name: str, geometry: Geometry) -> str:
        """
        Build the SQL expression that stores ``geometry`` in ``attribute_name``.

        Raises:
            FieldNotSpatial: If the attribute is not a declared spatial field.
        """
        spec = self.registry.require(attribute_name)
        if not spec.accepts(geometry):
            logger.warning(
                "%s.%s is declared as %s but received %s",
                self.registry.model_name,
                attribute_name,
                spec.geometry_type.__name__,
                type(geometry).__name__,
            )

        wkt = encode(geometry)
        if spec.storage_mode is StorageMode.GEOMETRY:
            expression = (
                f"{qualify('ST_GeomFromText', self.schema)}('{wkt}', '{spec.srid}')"
            )
        else:
            expression = f"{qualify('ST_GeogFromText', self.schema)}('{wkt}')"

        logger.debug(
            "Write expression for %s.%s: %s",
            self.registry.model_name,
            attribute_name,
            expression,
        )
        return expression

    def write_expressions(self, values: Mapping[str, Any]) -> dict[str, str]:
        """Return write expressions for every spatial attribute holding a geometry."""
        return {
            name: self.write_expression(name, value)
            for name, value in values.items()
            if name in self.registry and isinstance(value, Geometry)
        }

    def bind(self, target: RawBindingTarget, values: Mapping[str, Any]) -> None:
        """Register the write expressions of ``values`` on ``target``.

        Used unchanged for inserts and updates.
        """
        for name, sql in self.write_expressions(values).items():
            target.bind_raw(name, sql)

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def read_value(self, attribute_name: str, raw: Any) -> Geometry | None:
        """
        Decode a raw column value for ``attribute_name``.

        Raises:
            FieldNotSpatial: If the attribute is not a declared spatial field.
            MalformedWKT: If the stored value is not a valid geometry.
        """
        self.registry.require(attribute_name)
        return coerce_geometry(raw)

    def read_row(self, row: Mapping[str, Any]) -> dict[str, Geometry]:
        """Decode every non-null spatial value present in ``row``."""
        decoded: dict[str, Geometry] = {}
        for spec in self.registry:
            raw = row.get(spec.attribute_name)
            if raw is None:
                continue
            geometry = self.read_value(spec.attribute_name, raw)
            if geometry is not None:
                decoded[spec.attribute_name] = geometry
        return decoded

    def hydrate(self, target: RowHydrationTarget, row: Mapping[str, Any]) -> None:
        """Set decoded spatial values on ``target``; null columns stay unset."""
        for name, geometry in self.read_row(row).items():
            target.set_attribute(name, geometry)


__all__ = [
    "DEFAULT_SCHEMA",
    "PersistenceAdapter",
    "RawBindingTarget",
    "RowHydrationTarget",
    "qualify",
]
