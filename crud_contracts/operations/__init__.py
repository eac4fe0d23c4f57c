"""
Operations module: standard operation factories, templates and the list builder.
"""

from crud_contracts.operations.templates import (
    OperationContext,
    OperationSpec,
    batch,
    list_shaped,
    single_record,
    streaming,
    resolve_batch_size,
)
from crud_contracts.operations.standard import (
    OPERATIONS,
    StandardOperations,
    standard_operations,
    create_list_options,
)
from crud_contracts.operations.list_builder import (
    FilterField,
    ListOperationBuilder,
    create_list_config,
    create_filter_config,
)

__all__ = [
    # templates
    "OperationContext",
    "OperationSpec",
    "batch",
    "list_shaped",
    "single_record",
    "streaming",
    "resolve_batch_size",
    # standard operations
    "OPERATIONS",
    "StandardOperations",
    "standard_operations",
    "create_list_options",
    # list builder
    "FilterField",
    "ListOperationBuilder",
    "create_list_config",
    "create_filter_config",
]
