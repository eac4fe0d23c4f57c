"""
crud_contracts: route contract generation for CRUD entities.

Usage:
    from crud_contracts import StandardOperations, build_openapi

    users = StandardOperations(User, "user")
    contracts = users.all_contracts()
    document = build_openapi(contracts, prefix="/users")
"""

from crud_contracts.config import settings, get_settings, get_logger, setup_logging
from crud_contracts.operations import (
    FilterField,
    ListOperationBuilder,
    StandardOperations,
    create_filter_config,
    create_list_config,
    create_list_options,
    standard_operations,
)
from crud_contracts.query import (
    QueryComposer,
    QueryConfig,
    PlainOptions,
    PrebuiltDimension,
    create_advanced_query,
    create_basic_list_query,
    create_filtering_config,
    create_list_query,
    create_pagination_config,
    create_query_composer,
    create_search_config,
    create_search_query,
    create_sorting_config,
)
from crud_contracts.routes import (
    CommonErrors,
    RouteBuilder,
    RouteContract,
    build_openapi,
    error,
    param,
    route,
)
from crud_contracts.schema import EntityIntrospection, extend, omit, partial, pick
from crud_contracts.utils import (
    BuilderFinalizedError,
    ContractConfigError,
    ContractError,
)

__version__ = "0.1.0"

__all__ = [
    # config
    "settings",
    "get_settings",
    "get_logger",
    "setup_logging",
    # schema
    "EntityIntrospection",
    "omit",
    "pick",
    "partial",
    "extend",
    # query
    "QueryComposer",
    "QueryConfig",
    "PlainOptions",
    "PrebuiltDimension",
    "create_pagination_config",
    "create_sorting_config",
    "create_filtering_config",
    "create_search_config",
    "create_query_composer",
    "create_basic_list_query",
    "create_list_query",
    "create_search_query",
    "create_advanced_query",
    # routes
    "RouteBuilder",
    "RouteContract",
    "CommonErrors",
    "error",
    "param",
    "route",
    "build_openapi",
    # operations
    "StandardOperations",
    "standard_operations",
    "create_list_options",
    "ListOperationBuilder",
    "FilterField",
    "create_list_config",
    "create_filter_config",
    # errors
    "ContractError",
    "ContractConfigError",
    "BuilderFinalizedError",
]
