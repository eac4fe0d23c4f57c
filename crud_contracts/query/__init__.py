"""
Query module: pagination, sorting, filtering and search dimensions,
and the composer that merges them into one list query.
"""

from crud_contracts.query.dimension import (
    DimensionKind,
    QueryDimension,
    PrebuiltDimension,
    PlainOptions,
    normalize_dimension,
)
from crud_contracts.query.pagination import (
    PaginationConfig,
    PaginationDimension,
    create_pagination_config,
    offset_pagination,
    page_pagination,
    cursor_pagination,
    full_pagination,
)
from crud_contracts.query.sorting import (
    SortingConfig,
    SortingDimension,
    create_sorting_config,
)
from crud_contracts.query.filtering import (
    FieldFilterConfig,
    FilteringConfig,
    FilteringDimension,
    create_filtering_config,
    infer_filter_type,
    string_field,
    numeric_field,
    comparison_field,
    boolean_field,
    date_field,
    enum_field,
    array_field,
    ALL_FILTER_OPERATORS,
    COMPARISON_OPERATORS,
    STRING_OPERATORS,
    NUMERIC_OPERATORS,
    ARRAY_OPERATORS,
    NULL_OPERATORS,
)
from crud_contracts.query.search import (
    SearchConfig,
    SearchDimension,
    create_search_config,
)
from crud_contracts.query.composer import (
    QueryConfig,
    QueryComposer,
    create_query_composer,
    coerce_composer,
    create_basic_list_query,
    create_list_query,
    create_search_query,
    create_advanced_query,
)

__all__ = [
    # Dimension variants
    "DimensionKind",
    "QueryDimension",
    "PrebuiltDimension",
    "PlainOptions",
    "normalize_dimension",
    # Pagination
    "PaginationConfig",
    "PaginationDimension",
    "create_pagination_config",
    "offset_pagination",
    "page_pagination",
    "cursor_pagination",
    "full_pagination",
    # Sorting
    "SortingConfig",
    "SortingDimension",
    "create_sorting_config",
    # Filtering
    "FieldFilterConfig",
    "FilteringConfig",
    "FilteringDimension",
    "create_filtering_config",
    "infer_filter_type",
    "string_field",
    "numeric_field",
    "comparison_field",
    "boolean_field",
    "date_field",
    "enum_field",
    "array_field",
    "ALL_FILTER_OPERATORS",
    "COMPARISON_OPERATORS",
    "STRING_OPERATORS",
    "NUMERIC_OPERATORS",
    "ARRAY_OPERATORS",
    "NULL_OPERATORS",
    # Search
    "SearchConfig",
    "SearchDimension",
    "create_search_config",
    # Composer
    "QueryConfig",
    "QueryComposer",
    "create_query_composer",
    "coerce_composer",
    "create_basic_list_query",
    "create_list_query",
    "create_search_query",
    "create_advanced_query",
]
