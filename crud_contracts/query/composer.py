"""
Query composer.

Merges up to four dimensions (pagination, sorting, filtering, search) into
one flat query object and one list output shape. The composer is immutable:
every ``with_*`` call returns a new composer, so a base composer can be
branched into several variants.

Usage:
    from crud_contracts.query import QueryComposer, create_pagination_config

    composer = (
        QueryComposer()
        .with_pagination(create_pagination_config(default_limit=20))
        .with_sorting(fields=["name", "createdAt"], default_field="createdAt")
    )
    ListInput = composer.build_input_schema()         # {query?: {...}}
    ListOutput = composer.build_output_schema(User)   # {data: [...], meta: {...}}
"""

from dataclasses import dataclass, replace
from typing import Any, Iterable, Mapping, Optional, Type

from pydantic import BaseModel, Field

from crud_contracts.config.constants import Limits
from crud_contracts.config.logging import get_logger
from crud_contracts.config.settings import settings
from crud_contracts.query.dimension import (
    DimensionKind,
    PlainOptions,
    QueryDimension,
    config_as_dict,
    normalize_dimension,
)
from crud_contracts.query.filtering import FieldFilterConfig, FilteringDimension, create_filtering_config
from crud_contracts.query.pagination import PaginationDimension, create_pagination_config
from crud_contracts.query.search import SearchDimension, create_search_config
from crud_contracts.query.sorting import SortingDimension, create_sorting_config
from crud_contracts.schema.transforms import FieldDefinition, build_model, has_field, is_strict
from crud_contracts.utils.exceptions import (
    ContractConfigError,
    DimensionCollisionError,
    UnknownFieldError,
)

logger = get_logger(__name__)


@dataclass(frozen=True)
class QueryConfig:
    """
    The active dimensions of a list query.

    Absent slots contribute nothing. Present slots contribute disjoint keys.
    """

    pagination: Optional[PaginationDimension] = None
    sorting: Optional[SortingDimension] = None
    filtering: Optional[FilteringDimension] = None
    search: Optional[SearchDimension] = None

    def dimensions(self) -> list[QueryDimension]:
        """Active dimensions in composition order."""
        return [
            getattr(self, kind)
            for kind in DimensionKind.ALL
            if getattr(self, kind) is not None
        ]

    @property
    def is_empty(self) -> bool:
        return not self.dimensions()

    def with_dimension(self, kind: str, descriptor: Optional[QueryDimension]) -> "QueryConfig":
        return replace(self, **{kind: descriptor})

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "QueryConfig":
        """Build a config from ``{kind: descriptor | options}``."""
        unknown = set(values) - set(DimensionKind.ALL)
        if unknown:
            raise ContractConfigError(
                f"Unknown query dimension(s): {', '.join(sorted(unknown))}",
                dimensions=sorted(unknown),
            )
        return cls(**{
            kind: normalize_dimension(kind, value)
            for kind, value in values.items()
            if value is not None
        })


def input_keys(dimension: QueryDimension) -> tuple[str, ...]:
    if isinstance(dimension, FilteringDimension):
        return ("filter",)
    return tuple(dimension.input_fields())


def check_collisions(config: QueryConfig, reserved: Mapping[str, str] | None = None) -> None:
    """
    Ensure no two dimensions (or a dimension and a reserved key) share a key.

    Raises:
        DimensionCollisionError: On the first shared key
    """
    owners: dict[str, str] = dict(reserved or {})
    for dimension in config.dimensions():
        for key in input_keys(dimension):
            if key in owners:
                raise DimensionCollisionError(key, owners[key], dimension.kind)
            owners[key] = dimension.kind


class QueryComposer:
    """
    Immutable composition of query dimensions.

    Each ``with_*`` method takes a descriptor, a tagged input
    (PrebuiltDimension / PlainOptions), a config dataclass, or keyword
    options, and returns a new composer.
    """

    def __init__(self, config: QueryConfig | None = None, *, name: str = ""):
        self._config = config or QueryConfig()
        self._name = name
        check_collisions(self._config)

    def __repr__(self) -> str:
        kinds = [d.kind for d in self._config.dimensions()]
        return f"QueryComposer(name={self._name!r}, dimensions={kinds})"

    # =========================================================================
    # Dimensions
    # =========================================================================

    def with_pagination(self, value: Any = None, **options: Any) -> "QueryComposer":
        return self._with(DimensionKind.PAGINATION, value, options)

    def with_sorting(self, value: Any = None, **options: Any) -> "QueryComposer":
        return self._with(DimensionKind.SORTING, value, options)

    def with_filtering(self, value: Any = None, **options: Any) -> "QueryComposer":
        return self._with(DimensionKind.FILTERING, value, options)

    def with_search(self, value: Any = None, **options: Any) -> "QueryComposer":
        return self._with(DimensionKind.SEARCH, value, options)

    def without(self, kind: str) -> "QueryComposer":
        return QueryComposer(self._config.with_dimension(kind, None), name=self._name)

    def named(self, name: str) -> "QueryComposer":
        """Return a composer whose generated models are prefixed with ``name``."""
        return QueryComposer(self._config, name=name)

    def _with(self, kind: str, value: Any, options: dict[str, Any]) -> "QueryComposer":
        if value is None:
            value = PlainOptions(kind, options)
        elif options:
            raise ContractConfigError(
                f"Pass either a {kind} dimension or keyword options, not both",
                dimension=kind,
            )

        descriptor = normalize_dimension(kind, value)
        config = self._config.with_dimension(kind, descriptor)
        check_collisions(config)

        logger.debug(
            "Query dimension configured",
            dimension=kind,
            composer=self._name or None,
            config=config_as_dict(descriptor.config),
        )
        return QueryComposer(config, name=self._name)

    # =========================================================================
    # Entity validation
    # =========================================================================

    def validate_fields(
        self,
        entity: Type[BaseModel],
        *,
        strict: bool | None = None,
    ) -> "QueryComposer":
        """
        Check that sorting, filtering and search refer to entity fields.

        In strict mode unknown references raise; in loose mode they are
        dropped (a dimension left with no fields is removed).

        Raises:
            UnknownFieldError: In strict mode, for the first offending dimension
        """
        config = self._config
        for dimension in self._config.dimensions():
            referenced = dimension.referenced_fields()
            unknown = [name for name in referenced if not has_field(entity, name)]
            if not unknown:
                continue
            if is_strict(strict):
                raise UnknownFieldError(entity.__name__, unknown, dimension=dimension.kind)

            logger.debug(
                "Unknown query fields dropped",
                entity=entity.__name__,
                dimension=dimension.kind,
                fields=unknown,
            )
            known = [name for name in referenced if name not in unknown]
            config = config.with_dimension(dimension.kind, dimension.restrict_to(known))

        if config is self._config:
            return self
        return QueryComposer(config, name=self._name)

    # =========================================================================
    # Schemas
    # =========================================================================

    def get_config(self) -> QueryConfig:
        return self._config

    @property
    def has_pagination(self) -> bool:
        return self._config.pagination is not None

    def query_fields(self) -> dict[str, FieldDefinition]:
        """Flat merge of every active dimension's input fields."""
        fields: dict[str, FieldDefinition] = {}
        for dimension in self._config.dimensions():
            if isinstance(dimension, FilteringDimension):
                fields["filter"] = (
                    Optional[dimension.filter_model(self._name)],
                    Field(default=None, description="Field filters"),
                )
            else:
                fields.update(dimension.input_fields())
        return fields

    def build_query_schema(self) -> Type[BaseModel]:
        """Model of the flat query object."""
        return build_model(f"{self._name}Query", self.query_fields())

    def build_input_schema(self) -> Type[BaseModel]:
        """Model of the list input: a single optional ``query`` key."""
        return build_model(
            f"{self._name}ListInput",
            {"query": (Optional[self.build_query_schema()], Field(default=None))},
        )

    def build_output_schema(
        self,
        item: Type[BaseModel],
        *,
        model_name: str | None = None,
    ) -> Type[BaseModel]:
        """Model of the list output: ``data`` plus pagination ``meta`` when active."""
        fields: dict[str, FieldDefinition] = {"data": (list[item], Field(...))}
        for dimension in self._config.dimensions():
            fields.update(dimension.output_fields(self._name or item.__name__))
        return build_model(model_name or f"{self._name or item.__name__}ListOutput", fields)


def create_query_composer(
    config: QueryConfig | Mapping[str, Any] | None = None,
    *,
    name: str = "",
) -> QueryComposer:
    if isinstance(config, Mapping):
        config = QueryConfig.from_mapping(config)
    return QueryComposer(config, name=name)


def coerce_composer(value: Any, *, name: str = "") -> QueryComposer:
    """Accept a composer, a QueryConfig, or a ``{kind: ...}`` mapping."""
    if isinstance(value, QueryComposer):
        return value.named(name) if name else value
    if isinstance(value, QueryConfig) or isinstance(value, Mapping) or value is None:
        return create_query_composer(value, name=name)
    raise ContractConfigError(
        f"Cannot build a query from {type(value).__name__}",
        got=type(value).__name__,
    )


# =============================================================================
# Presets
# =============================================================================


def create_basic_list_query(default_limit: int = 10, max_limit: int = 100) -> QueryComposer:
    """Offset pagination only."""
    return QueryComposer(
        QueryConfig(pagination=create_pagination_config(
            default_limit=default_limit,
            max_limit=max_limit,
            include_offset=True,
        ))
    )


def create_list_query(
    *,
    pagination: Any = None,
    sorting: Any = None,
    filtering: Any = None,
    search: Any = None,
) -> QueryComposer:
    """Compose any subset of dimensions in one call."""
    return create_query_composer({
        DimensionKind.PAGINATION: pagination,
        DimensionKind.SORTING: sorting,
        DimensionKind.FILTERING: filtering,
        DimensionKind.SEARCH: search,
    })


def create_search_query(
    fields: Iterable[str],
    *,
    default_limit: int | None = None,
    max_limit: int = Limits.SEARCH_MAX_LIMIT,
    min_query_length: int = 1,
) -> QueryComposer:
    """Offset pagination plus search with field selection."""
    return QueryComposer(
        QueryConfig(
            pagination=create_pagination_config(
                default_limit=settings.search_page_limit if default_limit is None else default_limit,
                max_limit=max_limit,
                include_offset=True,
            ),
            search=create_search_config(
                fields,
                min_query_length=min_query_length,
                allow_field_selection=True,
            ),
        )
    )


def create_advanced_query(
    sortable_fields: Iterable[str],
    filterable_fields: Mapping[str, FieldFilterConfig],
    *,
    searchable_fields: Iterable[str] | None = None,
    default_limit: int = 20,
    max_limit: int = 100,
    default_sort_field: str | None = None,
    default_sort_direction: str = "asc",
) -> QueryComposer:
    """Offset and page pagination, sorting, filtering, and optional search."""
    searchable_fields = list(searchable_fields or [])
    return QueryComposer(
        QueryConfig(
            pagination=create_pagination_config(
                default_limit=default_limit,
                max_limit=max_limit,
                include_offset=True,
                include_page=True,
            ),
            sorting=create_sorting_config(
                sortable_fields,
                default_field=default_sort_field,
                default_direction=default_sort_direction,
            ),
            filtering=create_filtering_config(filterable_fields),
            search=create_search_config(searchable_fields, allow_field_selection=True)
            if searchable_fields else None,
        )
    )
