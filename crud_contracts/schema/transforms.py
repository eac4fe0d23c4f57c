"""
Schema transform primitives.

Derive new pydantic models from an entity model without touching it:
omit a set of fields, keep only a subset, make every field optional, or add
fields. Retained fields keep their annotation, constraints, alias and
description, in the order the source model declares them.

Only fields are carried over. Validators and computed fields of the source
model stay with the source model.

Usage:
    from crud_contracts.schema import omit, partial, pick

    UserCreate = omit(User, ["id", "createdAt", "updatedAt"])
    UserPatch = partial(UserCreate)
    UserEmail = pick(User, ["email"])
"""

from copy import copy
from typing import Annotated, Any, Iterable, Optional, Type

from pydantic import BaseModel, create_model
from pydantic.fields import FieldInfo
from pydantic_core import PydanticUndefined

from crud_contracts.config.logging import get_logger
from crud_contracts.config.settings import settings
from crud_contracts.utils.exceptions import UnknownFieldError

logger = get_logger(__name__)

# (annotation, FieldInfo) pair, the form create_model accepts
FieldDefinition = tuple[Any, FieldInfo]

# Config keys that must not leak from the source model into derived models
_NON_INHERITED_CONFIG = frozenset({"title", "json_schema_extra"})


def is_strict(strict: bool | None) -> bool:
    """Resolve an explicit strictness flag against the configured default."""
    return settings.strict_field_names if strict is None else strict


def field_names(schema: Type[BaseModel]) -> list[str]:
    """Field names of a model in declaration order."""
    return list(schema.model_fields)


def has_field(schema: Type[BaseModel], name: str) -> bool:
    return name in schema.model_fields or name in _alias_map(schema)


def field_definition(schema: Type[BaseModel], name: str) -> FieldDefinition:
    """
    Get a field's definition ready to be re-embedded in another model.

    Args:
        schema: Source model
        name: Field name (or alias)

    Raises:
        UnknownFieldError: If the model has no such field
    """
    resolved = _alias_map(schema).get(name, name)
    info = schema.model_fields.get(resolved)
    if info is None:
        raise UnknownFieldError(schema.__name__, [name])
    return info.annotation, copy(info)


def resolve_names(
    schema: Type[BaseModel],
    names: Iterable[str],
    *,
    strict: bool | None = None,
    operation: str = "select",
) -> list[str]:
    """
    Map caller supplied names (attribute names or aliases) to attribute names.

    Unknown names raise in strict mode and are dropped in loose mode.

    Returns:
        Attribute names, deduplicated, in the order they were given
    """
    aliases = _alias_map(schema)
    resolved: list[str] = []
    unknown: list[str] = []

    for name in names:
        attr = aliases.get(name, name)
        if attr not in schema.model_fields:
            unknown.append(name)
        elif attr not in resolved:
            resolved.append(attr)

    if unknown:
        if is_strict(strict):
            raise UnknownFieldError(schema.__name__, unknown, operation=operation)
        logger.debug(
            "Unknown fields ignored",
            schema=schema.__name__,
            operation=operation,
            fields=unknown,
        )

    return resolved


def build_model(
    name: str,
    definitions: dict[str, FieldDefinition],
    *,
    config: dict | None = None,
    doc: str | None = None,
) -> Type[BaseModel]:
    """Create a model from an ordered mapping of field definitions."""
    return create_model(name, __config__=config, __doc__=doc, **definitions)


def omit(
    schema: Type[BaseModel],
    names: Iterable[str],
    *,
    model_name: str | None = None,
    strict: bool | None = None,
) -> Type[BaseModel]:
    """
    Derive a model without the named fields.

    Args:
        schema: Source model
        names: Fields to drop
        model_name: Name of the derived model (default: <Source>Omit)
        strict: Reject unknown names (default: settings.strict_field_names)

    Returns:
        New model with the remaining fields in source order
    """
    dropped = set(resolve_names(schema, names, strict=strict, operation="omit"))
    definitions = {
        name: field_definition(schema, name)
        for name in schema.model_fields
        if name not in dropped
    }
    return build_model(
        model_name or f"{schema.__name__}Omit",
        definitions,
        config=inherited_config(schema),
    )


def pick(
    schema: Type[BaseModel],
    names: Iterable[str],
    *,
    model_name: str | None = None,
    strict: bool | None = None,
) -> Type[BaseModel]:
    """
    Derive a model with only the named fields.

    Fields keep the source declaration order, not the order of ``names``.
    """
    kept = set(resolve_names(schema, names, strict=strict, operation="pick"))
    definitions = {
        name: field_definition(schema, name)
        for name in schema.model_fields
        if name in kept
    }
    return build_model(
        model_name or f"{schema.__name__}Pick",
        definitions,
        config=inherited_config(schema),
    )


def partial(
    schema: Type[BaseModel],
    *,
    model_name: str | None = None,
) -> Type[BaseModel]:
    """
    Derive a model where every field is optional and defaults to None.

    Constraints still apply to values that are provided, so a partial of a
    model with ``age: int = Field(ge=0)`` accepts ``{}`` and rejects ``{"age": -1}``.
    """
    definitions = {
        name: optional_definition(field_definition(schema, name))
        for name in schema.model_fields
    }
    return build_model(
        model_name or f"{schema.__name__}Partial",
        definitions,
        config=inherited_config(schema),
    )


def extend(
    schema: Type[BaseModel],
    fields: dict[str, Any],
    *,
    model_name: str | None = None,
) -> Type[BaseModel]:
    """
    Derive a model with extra fields added (or existing ones replaced).

    Values of ``fields`` are either an annotation (required field) or an
    ``(annotation, default_or_FieldInfo)`` tuple.
    """
    definitions: dict[str, Any] = {
        name: field_definition(schema, name) for name in schema.model_fields
    }
    for name, definition in fields.items():
        definitions[name] = definition if isinstance(definition, tuple) else (definition, ...)
    return build_model(
        model_name or f"{schema.__name__}Extended",
        definitions,
        config=inherited_config(schema),
    )


def optional_definition(definition: FieldDefinition) -> FieldDefinition:
    """Turn a field definition into an optional one defaulting to None."""
    annotation, info = definition
    info = copy(info)
    info.default = None
    info.default_factory = None
    return Optional[annotation], info


def required_definition(definition: FieldDefinition) -> FieldDefinition:
    """Turn a field definition into a required one (no default)."""
    annotation, info = definition
    info = copy(info)
    info.default = PydanticUndefined
    info.default_factory = None
    return annotation, info


def item_annotation(definition: FieldDefinition) -> Any:
    """
    Annotation for using a field as a list item.

    Keeps the field's constraints but not its default, alias or description.
    """
    annotation, info = definition
    if not info.metadata:
        return annotation
    return Annotated[(annotation, *info.metadata)]


def inherited_config(schema: Type[BaseModel]) -> dict | None:
    config = {
        key: value
        for key, value in schema.model_config.items()
        if key not in _NON_INHERITED_CONFIG
    }
    return config or None


def _alias_map(schema: Type[BaseModel]) -> dict[str, str]:
    return {
        info.alias: name
        for name, info in schema.model_fields.items()
        if info.alias and info.alias != name
    }


def pascal_case(value: str) -> str:
    """``blog_post`` / ``blog-post`` / ``blogPost`` -> ``BlogPost``."""
    parts = value.replace("-", "_").split("_")
    return "".join(part[:1].upper() + part[1:] for part in parts if part)
