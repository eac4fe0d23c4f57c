"""
Fluent list configuration for a StandardOperations instance.

Usage:
    from crud_contracts.operations import FilterField, create_list_config

    config = (
        create_list_config(users)
        .with_pagination(default_limit=20, max_limit=100)
        .with_sorting(["name", "createdAt"], default_field="createdAt")
        .with_filtering({"email": str, "age": FilterField(int, ["gt", "lt"]), "name": None})
        .build_config()
    )
    list_users = users.list(config).build()
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Optional, Type

from pydantic import BaseModel

from crud_contracts.config.constants import FilterOperator
from crud_contracts.query.composer import QueryComposer, QueryConfig
from crud_contracts.query.filtering import (
    FieldFilterConfig,
    create_filtering_config,
    infer_filter_type,
)
from crud_contracts.query.pagination import create_pagination_config
from crud_contracts.query.search import create_search_config
from crud_contracts.query.sorting import create_sorting_config
from crud_contracts.routes.contract import RouteContract
from crud_contracts.schema.transforms import field_definition, has_field, resolve_names

if TYPE_CHECKING:
    from crud_contracts.operations.standard import StandardOperations


@dataclass(frozen=True)
class FilterField:
    """A filterable field given as a value type plus an explicit operator list."""

    value_type: Any
    operators: Optional[tuple[str, ...]] = None

    def __post_init__(self):
        if self.operators is not None:
            object.__setattr__(self, "operators", tuple(self.operators))


def filter_config_for(annotation: Any, operators: Iterable[str] | None = None) -> FieldFilterConfig:
    """
    Filter config for a value type.

    The filter type (and with it the default operators) is inferred from the
    annotation. Annotations with no inferable type accept every operator.
    """
    filter_type = infer_filter_type(annotation)
    if operators is None and filter_type is None:
        operators = FilterOperator.ALL
    return FieldFilterConfig(
        type=filter_type,
        operators=tuple(operators) if operators is not None else None,
        value_type=annotation,
    )


class ListOperationBuilder:
    """
    Immutable list configuration bound to one entity's operations.

    Every ``with_*`` call returns a new builder; ``build()`` is
    ``ops.list(build_config()).build()``.
    """

    def __init__(self, operations: "StandardOperations", composer: QueryComposer | None = None):
        self._operations = operations
        self._composer = composer or QueryComposer(name=operations.context.model_name("list"))

    @property
    def entity(self) -> Type[BaseModel]:
        return self._operations.entity

    def _with(self, composer: QueryComposer) -> "ListOperationBuilder":
        return ListOperationBuilder(self._operations, composer)

    def with_pagination(self, **options: Any) -> "ListOperationBuilder":
        return self._with(self._composer.with_pagination(create_pagination_config(**options)))

    def with_sorting(self, fields: Iterable[str], **options: Any) -> "ListOperationBuilder":
        fields = self._entity_fields(fields, "sorting")
        return self._with(self._composer.with_sorting(create_sorting_config(fields, **options)))

    def with_filtering(
        self,
        fields: Mapping[str, Any],
        allow_logical_operators: bool = True,
    ) -> "ListOperationBuilder":
        """
        Configure filtering.

        Each value is a bare annotation, a FilterField, a FieldFilterConfig,
        or None (use the entity's own annotation for that field).

        Raises:
            UnknownFieldError: In strict mode, for keys that are not entity fields
        """
        names = self._entity_fields(fields, "filtering")
        configs = {name: self._normalize_filter(name, fields[name]) for name in names}
        return self._with(self._composer.with_filtering(
            create_filtering_config(configs, allow_logical_operators=allow_logical_operators)
        ))

    def with_search(self, fields: Iterable[str], **options: Any) -> "ListOperationBuilder":
        fields = self._entity_fields(fields, "search")
        return self._with(self._composer.with_search(create_search_config(fields, **options)))

    def _entity_fields(self, fields: Iterable[str], operation: str) -> list[str]:
        names = list(fields)
        # raises in strict mode, logs the drop in loose mode
        resolve_names(self.entity, names, strict=self._operations.strict, operation=operation)
        return [name for name in names if has_field(self.entity, name)]

    def _normalize_filter(self, name: str, value: Any) -> FieldFilterConfig:
        if isinstance(value, FieldFilterConfig):
            return value
        if isinstance(value, FilterField):
            return filter_config_for(value.value_type, value.operators)
        if value is None:
            annotation, _ = field_definition(self.entity, name)
            return filter_config_for(annotation)
        return filter_config_for(value)

    # =========================================================================
    # Results
    # =========================================================================

    def build_config(self) -> QueryConfig:
        return self._composer.get_config()

    def get_schemas(self) -> QueryConfig:
        return self.build_config()

    def build_input_schema(self) -> Type[BaseModel]:
        return self._composer.build_input_schema()

    def build_output_schema(self) -> Type[BaseModel]:
        return self._composer.build_output_schema(self.entity)

    def build(self) -> RouteContract:
        return self._operations.list(self.build_config()).build()


def create_list_config(operations: "StandardOperations") -> ListOperationBuilder:
    """Start a fluent list configuration for ``operations``."""
    return ListOperationBuilder(operations)


create_filter_config = create_list_config
