"""
Centralized exceptions for contract construction.

Every error here is raised while a contract is being defined, never while a
request is being served. Request-time shape failures are plain
``pydantic.ValidationError`` instances raised by the generated schemas.

Usage:
    from crud_contracts.utils.exceptions import UnknownFieldError, BatchSizeError

    raise UnknownFieldError("User", ["nmae"])
    raise BatchSizeError(0)
"""

from typing import Any, Iterable

from crud_contracts.config.logging import get_logger

logger = get_logger(__name__)


class ContractError(Exception):
    """
    Base exception with automatic logging.

    All engine exceptions inherit from this class so that construction
    failures are logged with their context at the point they are raised.
    """

    code: str = "CONTRACT_ERROR"

    def __init__(
        self,
        detail: str,
        log_level: str = "warning",
        **log_context: Any,
    ):
        log_fn = getattr(logger, log_level, logger.warning)
        log_fn(detail, code=self.code, **log_context)

        self.detail = detail
        self.context = log_context
        super().__init__(detail)


# =============================================================================
# Configuration Errors
# =============================================================================


class ContractConfigError(ContractError, ValueError):
    """
    Invalid contract configuration.

    Usage:
        raise ContractConfigError("Route has no path", method="GET")
    """

    code = "CONFIG_ERROR"


class UnknownFieldError(ContractConfigError):
    """A field reference does not exist on the schema it targets."""

    code = "UNKNOWN_FIELD"

    def __init__(self, schema_name: str, names: Iterable[str], **log_context: Any):
        self.schema_name = schema_name
        self.names = sorted(names)
        super().__init__(
            f"Unknown field(s) for {schema_name}: {', '.join(self.names)}",
            schema=schema_name,
            fields=self.names,
            **log_context,
        )


class BatchSizeError(ContractConfigError):
    """Batch operation configured with a non-positive upper bound."""

    code = "INVALID_BATCH_SIZE"

    def __init__(self, max_batch_size: int, **log_context: Any):
        self.max_batch_size = max_batch_size
        super().__init__(
            f"max_batch_size must be at least 1, got {max_batch_size}",
            max_batch_size=max_batch_size,
            **log_context,
        )


class PaginationBoundsError(ContractConfigError):
    """Pagination limits violate min_limit <= default_limit <= max_limit."""

    code = "INVALID_PAGINATION"

    def __init__(self, min_limit: int, default_limit: int, max_limit: int, **log_context: Any):
        super().__init__(
            f"Pagination limits must satisfy 1 <= min_limit <= default_limit <= max_limit "
            f"(got min={min_limit}, default={default_limit}, max={max_limit})",
            min_limit=min_limit,
            default_limit=default_limit,
            max_limit=max_limit,
            **log_context,
        )


class SortingConfigError(ContractConfigError):
    """Invalid sorting configuration."""

    code = "INVALID_SORTING"


class FilteringConfigError(ContractConfigError):
    """Invalid filtering configuration."""

    code = "INVALID_FILTERING"


class UnknownOperatorError(FilteringConfigError):
    """A filter operator name is not part of the operator catalog."""

    code = "UNKNOWN_OPERATOR"

    def __init__(self, field: str, operators: Iterable[str], **log_context: Any):
        self.operators = sorted(operators)
        super().__init__(
            f"Unknown filter operator(s) for '{field}': {', '.join(self.operators)}",
            field=field,
            operators=self.operators,
            **log_context,
        )


class SearchConfigError(ContractConfigError):
    """Invalid search configuration."""

    code = "INVALID_SEARCH"


class DimensionCollisionError(ContractConfigError):
    """Two query dimensions (or a base input and a query) claim the same key."""

    code = "DIMENSION_COLLISION"

    def __init__(self, key: str, first: str, second: str, **log_context: Any):
        self.key = key
        super().__init__(
            f"Query key '{key}' is contributed by both {first} and {second}",
            key=key,
            dimensions=[first, second],
            **log_context,
        )


class DimensionKindError(ContractConfigError):
    """A descriptor of one dimension kind was supplied where another was expected."""

    code = "DIMENSION_KIND"

    def __init__(self, expected: str, got: Any, **log_context: Any):
        super().__init__(
            f"Expected a {expected} dimension, got {type(got).__name__}",
            expected=expected,
            **log_context,
        )


# =============================================================================
# Lifecycle Errors
# =============================================================================


class BuilderFinalizedError(ContractError, RuntimeError):
    """A builder was mutated after build() finalized it."""

    code = "BUILDER_FINALIZED"

    def __init__(self, operation: str, **log_context: Any):
        super().__init__(
            f"Cannot call {operation}() after build()",
            operation=operation,
            **log_context,
        )
