"""
Schema module: transform primitives and entity introspection.
"""

from crud_contracts.schema.transforms import (
    FieldDefinition,
    omit,
    pick,
    partial,
    extend,
    field_names,
    field_definition,
    has_field,
    resolve_names,
    build_model,
    optional_definition,
    required_definition,
    item_annotation,
    pascal_case,
)
from crud_contracts.schema.introspection import EntityIntrospection

__all__ = [
    # transforms
    "FieldDefinition",
    "omit",
    "pick",
    "partial",
    "extend",
    "field_names",
    "field_definition",
    "has_field",
    "resolve_names",
    "build_model",
    "optional_definition",
    "required_definition",
    "item_annotation",
    "pascal_case",
    # introspection
    "EntityIntrospection",
]
