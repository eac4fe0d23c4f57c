"""
Utilities module: exceptions.
"""

from crud_contracts.utils.exceptions import (
    ContractError,
    ContractConfigError,
    UnknownFieldError,
    BatchSizeError,
    PaginationBoundsError,
    SortingConfigError,
    FilteringConfigError,
    UnknownOperatorError,
    SearchConfigError,
    DimensionCollisionError,
    DimensionKindError,
    BuilderFinalizedError,
)

__all__ = [
    "ContractError",
    "ContractConfigError",
    "UnknownFieldError",
    "BatchSizeError",
    "PaginationBoundsError",
    "SortingConfigError",
    "FilteringConfigError",
    "UnknownOperatorError",
    "SearchConfigError",
    "DimensionCollisionError",
    "DimensionKindError",
    "BuilderFinalizedError",
]
