"""Exceptions for postgis-fields."""

from __future__ import annotations


class PostgisFieldsError(Exception):
    """Root exception for the entire postgis-fields package."""


class MalformedGeometry(PostgisFieldsError):
    """Raised when a geometry is built with fewer parts than its type requires."""


class MalformedWKT(PostgisFieldsError):
    """Raised when a WKT string cannot be decoded."""


class UnsupportedGeometryType(MalformedWKT):
    """Raised for a WKT keyword or geometry class outside the supported variants."""


class FieldNotSpatial(PostgisFieldsError):
    """Raised when an attribute is not declared as a spatial field on a model."""

    def __init__(self, field_name: str, model_name: str) -> None:
        self.field_name = field_name
        self.model_name = model_name
        super().__init__(
            f"Field {field_name} in class {model_name} "
            "not present in __postgis_fields__"
        )


class RegistryFrozenError(PostgisFieldsError):
    """Raised when registering a field on a registry that is already frozen."""


class InvalidFieldDeclaration(PostgisFieldsError):
    """Raised when a model's spatial field options cannot be interpreted."""


class UnsupportedPredicate(PostgisFieldsError):
    """Raised when a spatial predicate has no registered operator."""


__all__: list[str] = [
    "FieldNotSpatial",
    "InvalidFieldDeclaration",
    "MalformedGeometry",
    "MalformedWKT",
    "PostgisFieldsError",
    "RegistryFrozenError",
    "UnsupportedGeometryType",
    "UnsupportedPredicate",
]
