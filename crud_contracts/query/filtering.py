"""
Filtering dimension.

Contributes a single ``filter`` key. Each configured field accepts a
``{operator, value}`` object, discriminated on ``operator``; the value shape
depends on the operator (a list for in/notIn, a pair for between, a bool for
the null checks, the field's base type otherwise). With logical operators
enabled, ``_and`` / ``_or`` hold nested lists of the same filter object.

Usage:
    from crud_contracts.query import create_filtering_config, string_field, numeric_field

    filtering = create_filtering_config({
        "name": string_field(),
        "age": numeric_field(operators=["gt", "lt"]),
    })
"""

from dataclasses import dataclass
from datetime import datetime
import types
from typing import (
    Annotated,
    Any,
    ClassVar,
    Iterable,
    List,
    Literal,
    Mapping,
    Optional,
    Union,
    get_args,
    get_origin,
)

from pydantic import Field

from crud_contracts.config.constants import FilterOperator, FilterType
from crud_contracts.query.dimension import DimensionKind, QueryDimension
from crud_contracts.schema.transforms import FieldDefinition, build_model, pascal_case
from crud_contracts.utils.exceptions import FilteringConfigError, UnknownOperatorError


# =============================================================================
# Operator Catalogs
# =============================================================================

ALL_FILTER_OPERATORS: list[str] = list(FilterOperator.ALL)
COMPARISON_OPERATORS: list[str] = ["eq", "ne", "gt", "gte", "lt", "lte"]
STRING_OPERATORS: list[str] = ["eq", "ne", "like", "ilike", "startsWith", "endsWith"]
NUMERIC_OPERATORS: list[str] = ["eq", "ne", "gt", "gte", "lt", "lte", "between"]
ARRAY_OPERATORS: list[str] = ["in", "notIn", "contains"]
NULL_OPERATORS: list[str] = ["isNull", "isNotNull"]

_BASE_TYPES: dict[str, Any] = {
    FilterType.STRING: str,
    FilterType.NUMBER: float,
    FilterType.BOOLEAN: bool,
    FilterType.DATE: datetime,
    FilterType.ARRAY: list[Any],
}


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True)
class FieldFilterConfig:
    """
    Filter settings for one field.

    ``type`` selects the base value type and the default operators. An
    untyped config uses ``value_type`` (or ``Any``) and must list operators
    explicitly or accept eq/ne.
    """

    type: str | None = None
    operators: tuple[str, ...] | None = None
    enum_values: tuple[str, ...] | None = None
    nullable: bool = False
    value_type: Any = None

    def __post_init__(self):
        if self.type is not None and self.type not in FilterType.ALL:
            raise FilteringConfigError(f"Unknown filter type '{self.type}'", type=self.type)
        if self.operators is not None:
            object.__setattr__(self, "operators", tuple(self.operators))
        if self.enum_values is not None:
            object.__setattr__(self, "enum_values", tuple(self.enum_values))

    @property
    def resolved_operators(self) -> tuple[str, ...]:
        if self.operators is not None:
            return self.operators
        if self.type is not None:
            return tuple(FilterOperator.DEFAULTS[self.type])
        return tuple(FilterOperator.FALLBACK)

    def base_annotation(self) -> Any:
        """Annotation of a single filter value for this field."""
        if self.value_type is not None:
            base = self.value_type
        elif self.type == FilterType.ENUM:
            base = Literal[self.enum_values] if self.enum_values else str
        else:
            base = _BASE_TYPES.get(self.type, Any)
        return Optional[base] if self.nullable else base

    def value_annotation(self, operator: str) -> Any:
        """Annotation of the ``value`` paired with ``operator``."""
        base = self.base_annotation()
        if operator in FilterOperator.LIST_VALUED:
            return list[base]
        if operator in FilterOperator.RANGE:
            return tuple[base, base]
        if operator in FilterOperator.NULL_CHECKS:
            return bool
        return base


@dataclass(frozen=True)
class FilteringConfig:
    """Filterable fields and whether ``_and`` / ``_or`` are accepted."""

    fields: Mapping[str, FieldFilterConfig]
    allow_logical_operators: bool = True

    def __post_init__(self):
        fields = dict(self.fields)
        for name, config in fields.items():
            if not isinstance(config, FieldFilterConfig):
                raise FilteringConfigError(
                    f"Filter for '{name}' must be a FieldFilterConfig",
                    field=name,
                    got=type(config).__name__,
                )
            unknown = set(config.resolved_operators) - set(ALL_FILTER_OPERATORS)
            if unknown:
                raise UnknownOperatorError(name, unknown)
            if not config.resolved_operators:
                raise FilteringConfigError(f"Filter for '{name}' has no operators", field=name)
        object.__setattr__(self, "fields", fields)


# =============================================================================
# Descriptor
# =============================================================================


@dataclass(frozen=True)
class FilteringDimension(QueryDimension):
    """Filtering descriptor."""

    kind: ClassVar[str] = DimensionKind.FILTERING
    config_class: ClassVar[type] = FilteringConfig

    config: FilteringConfig

    def input_fields(self) -> dict[str, FieldDefinition]:
        return {
            "filter": (
                Optional[self.filter_model()],
                Field(default=None, description="Field filters"),
            ),
        }

    def filter_model(self, prefix: str = ""):
        """Model of the ``filter`` object, recursive when logical operators are on."""
        model_name = f"{prefix}Filter"
        fields: dict[str, FieldDefinition] = {
            name: (Optional[field_filter_annotation(name, config, prefix)], Field(default=None))
            for name, config in self.config.fields.items()
        }

        if not self.config.allow_logical_operators:
            return build_model(model_name, fields)

        fields["and_"] = (Optional[List[model_name]], Field(default=None, alias="_and"))
        fields["or_"] = (Optional[List[model_name]], Field(default=None, alias="_or"))
        model = build_model(model_name, fields, config={"populate_by_name": True})
        if not model.__pydantic_complete__:
            model.model_rebuild(_types_namespace={model_name: model})
        return model

    def referenced_fields(self) -> tuple[str, ...]:
        return tuple(self.config.fields)

    def restrict_to(self, allowed: Iterable[str]) -> Optional["FilteringDimension"]:
        allowed = set(allowed)
        kept = {name: cfg for name, cfg in self.config.fields.items() if name in allowed}
        if not kept:
            return None
        if len(kept) == len(self.config.fields):
            return self
        return FilteringDimension(
            FilteringConfig(kept, allow_logical_operators=self.config.allow_logical_operators)
        )


def field_filter_annotation(name: str, config: FieldFilterConfig, prefix: str = "") -> Any:
    """Discriminated union of ``{operator, value}`` variants for one field."""
    variants = [
        build_model(
            f"{prefix}{pascal_case(name)}{pascal_case(operator)}Filter",
            {
                "operator": (Literal[operator], Field(...)),
                "value": (config.value_annotation(operator), Field(...)),
            },
        )
        for operator in config.resolved_operators
    ]
    if len(variants) == 1:
        return variants[0]
    return Annotated[Union[tuple(variants)], Field(discriminator="operator")]


def create_filtering_config(
    fields: Mapping[str, FieldFilterConfig],
    *,
    allow_logical_operators: bool = True,
) -> FilteringDimension:
    """
    Create a filtering descriptor.

    Raises:
        FilteringConfigError: If a field config is malformed
        UnknownOperatorError: If an operator is not in the catalog
    """
    return FilteringDimension(
        FilteringConfig(fields, allow_logical_operators=allow_logical_operators)
    )


def infer_filter_type(annotation: Any) -> str | None:
    """Best-effort mapping from a Python annotation to a filter type."""
    origin = get_origin(annotation)
    args = get_args(annotation)

    if origin in (Union, types.UnionType):
        non_none = [a for a in args if a is not type(None)]
        return infer_filter_type(non_none[0]) if len(non_none) == 1 else None
    if origin is Annotated:
        return infer_filter_type(args[0])
    if origin is Literal:
        return FilterType.ENUM
    if origin in (list, tuple, set, frozenset):
        return FilterType.ARRAY
    if annotation is bool:
        return FilterType.BOOLEAN
    if isinstance(annotation, type):
        if issubclass(annotation, (int, float)):
            return FilterType.NUMBER
        if issubclass(annotation, str):
            return FilterType.STRING
        if annotation.__name__ in ("datetime", "date"):
            return FilterType.DATE
    return None


# =============================================================================
# Field Helpers
# =============================================================================


def string_field(operators: Iterable[str] | None = None, nullable: bool = False) -> FieldFilterConfig:
    """String field filter (equality and pattern operators)."""
    return FieldFilterConfig(
        type=FilterType.STRING,
        operators=tuple(operators) if operators is not None else ("eq", "ne", "like", "ilike", "contains", "startsWith", "endsWith"),
        nullable=nullable,
    )


def numeric_field(operators: Iterable[str] | None = None, nullable: bool = False) -> FieldFilterConfig:
    """Numeric field filter (equality, comparison and range)."""
    return FieldFilterConfig(
        type=FilterType.NUMBER,
        operators=tuple(operators) if operators is not None else tuple(NUMERIC_OPERATORS),
        nullable=nullable,
    )


def comparison_field(nullable: bool = False) -> FieldFilterConfig:
    """Numeric field filter restricted to ordering comparisons."""
    return FieldFilterConfig(
        type=FilterType.NUMBER,
        operators=("gt", "gte", "lt", "lte", "between"),
        nullable=nullable,
    )


def boolean_field(nullable: bool = False) -> FieldFilterConfig:
    return FieldFilterConfig(type=FilterType.BOOLEAN, operators=("eq", "ne"), nullable=nullable)


def date_field(operators: Iterable[str] | None = None, nullable: bool = False) -> FieldFilterConfig:
    return FieldFilterConfig(
        type=FilterType.DATE,
        operators=tuple(operators) if operators is not None else tuple(FilterOperator.DEFAULTS[FilterType.DATE]),
        nullable=nullable,
    )


def enum_field(
    values: Iterable[str],
    operators: Iterable[str] | None = None,
    nullable: bool = False,
) -> FieldFilterConfig:
    """
    Enum field filter.

    Raises:
        FilteringConfigError: If no values are given
    """
    values = tuple(values)
    if not values:
        raise FilteringConfigError("enum_field requires at least one value")
    return FieldFilterConfig(
        type=FilterType.ENUM,
        enum_values=values,
        operators=tuple(operators) if operators is not None else ("eq", "ne", "in", "notIn"),
        nullable=nullable,
    )


def array_field(operators: Iterable[str] | None = None, nullable: bool = False) -> FieldFilterConfig:
    return FieldFilterConfig(
        type=FilterType.ARRAY,
        operators=tuple(operators) if operators is not None else ("contains", "in"),
        nullable=nullable,
    )
