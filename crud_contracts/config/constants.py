"""
Centralized constants for the contract engine.
Avoids magic strings for methods, operators and operation vocabularies.

Usage:
    from crud_contracts.config.constants import HttpMethod, FilterOperator

    if operator in FilterOperator.RANGE:
        ...
"""

from typing import Final


# =============================================================================
# HTTP
# =============================================================================


class HttpMethod:
    """HTTP-style route methods."""

    GET: Final[str] = "GET"
    POST: Final[str] = "POST"
    PUT: Final[str] = "PUT"
    PATCH: Final[str] = "PATCH"
    DELETE: Final[str] = "DELETE"

    ALL: Final[list[str]] = [GET, POST, PUT, PATCH, DELETE]
    # Methods whose input travels in the request body
    WITH_BODY: Final[frozenset[str]] = frozenset({POST, PUT, PATCH, DELETE})


# =============================================================================
# Sorting
# =============================================================================


class SortDirection:
    """Sort direction values."""

    ASC: Final[str] = "asc"
    DESC: Final[str] = "desc"

    ALL: Final[list[str]] = [ASC, DESC]


class NullsHandling:
    """Where NULL values land in a sorted result."""

    FIRST: Final[str] = "first"
    LAST: Final[str] = "last"

    ALL: Final[list[str]] = [FIRST, LAST]


# =============================================================================
# Filtering
# =============================================================================


class FilterType:
    """Semantic value types a filterable field can have."""

    STRING: Final[str] = "string"
    NUMBER: Final[str] = "number"
    BOOLEAN: Final[str] = "boolean"
    DATE: Final[str] = "date"
    ENUM: Final[str] = "enum"
    ARRAY: Final[str] = "array"

    ALL: Final[list[str]] = [STRING, NUMBER, BOOLEAN, DATE, ENUM, ARRAY]


class FilterOperator:
    """Filter operator names and their groups."""

    EQ: Final[str] = "eq"
    NE: Final[str] = "ne"
    GT: Final[str] = "gt"
    GTE: Final[str] = "gte"
    LT: Final[str] = "lt"
    LTE: Final[str] = "lte"
    LIKE: Final[str] = "like"
    ILIKE: Final[str] = "ilike"
    IN: Final[str] = "in"
    NOT_IN: Final[str] = "notIn"
    BETWEEN: Final[str] = "between"
    IS_NULL: Final[str] = "isNull"
    IS_NOT_NULL: Final[str] = "isNotNull"
    CONTAINS: Final[str] = "contains"
    STARTS_WITH: Final[str] = "startsWith"
    ENDS_WITH: Final[str] = "endsWith"

    ALL: Final[list[str]] = [
        EQ, NE, GT, GTE, LT, LTE, LIKE, ILIKE, IN, NOT_IN,
        BETWEEN, IS_NULL, IS_NOT_NULL, CONTAINS, STARTS_WITH, ENDS_WITH,
    ]

    # Operator groups by value shape
    LIST_VALUED: Final[frozenset[str]] = frozenset({IN, NOT_IN})
    RANGE: Final[frozenset[str]] = frozenset({BETWEEN})
    NULL_CHECKS: Final[frozenset[str]] = frozenset({IS_NULL, IS_NOT_NULL})

    # Default operator sets per field type
    DEFAULTS: Final[dict[str, list[str]]] = {
        FilterType.STRING: [EQ, NE, LIKE, ILIKE, IN, NOT_IN, CONTAINS, STARTS_WITH, ENDS_WITH],
        FilterType.NUMBER: [EQ, NE, GT, GTE, LT, LTE, IN, NOT_IN, BETWEEN],
        FilterType.BOOLEAN: [EQ, NE],
        FilterType.DATE: [EQ, NE, GT, GTE, LT, LTE, BETWEEN],
        FilterType.ENUM: [EQ, NE, IN, NOT_IN],
        FilterType.ARRAY: [CONTAINS, IN],
    }
    # Untyped configs fall back to equality
    FALLBACK: Final[list[str]] = [EQ, NE]


# =============================================================================
# Operation Limits
# =============================================================================


class Limits:
    """Bounds baked into generated contracts."""

    MIN_BATCH_SIZE: Final[int] = 1
    HISTORY_MAX_LIMIT: Final[int] = 100
    DISTINCT_MAX_LIMIT: Final[int] = 1000
    SEARCH_MAX_LIMIT: Final[int] = 100
    IMPORT_MAX_RECORDS: Final[int] = 10_000
    STREAMING_DEFAULT_LIMIT: Final[int] = 10
    STREAMING_MAX_LIMIT: Final[int] = 100


# =============================================================================
# Operation Vocabularies
# =============================================================================


class ChangeAction:
    """Actions recorded in an entity change history."""

    CREATED: Final[str] = "created"
    UPDATED: Final[str] = "updated"
    DELETED: Final[str] = "deleted"
    RESTORED: Final[str] = "restored"

    ALL: Final[list[str]] = [CREATED, UPDATED, DELETED, RESTORED]


class HealthStatus:
    """Health check status values."""

    HEALTHY: Final[str] = "healthy"
    DEGRADED: Final[str] = "degraded"
    UNHEALTHY: Final[str] = "unhealthy"

    ALL: Final[list[str]] = [HEALTHY, DEGRADED, UNHEALTHY]


class ExportFormat:
    """File formats accepted by export and import operations."""

    CSV: Final[str] = "csv"
    JSON: Final[str] = "json"
    XML: Final[str] = "xml"

    ALL: Final[list[str]] = [CSV, JSON, XML]


class AggregateFunction:
    """Aggregation functions."""

    SUM: Final[str] = "sum"
    AVG: Final[str] = "avg"
    MIN: Final[str] = "min"
    MAX: Final[str] = "max"
    COUNT: Final[str] = "count"

    ALL: Final[list[str]] = [SUM, AVG, MIN, MAX, COUNT]


class MetricsFormat:
    """Output formats for the metrics operation."""

    JSON: Final[str] = "json"
    PROMETHEUS: Final[str] = "prometheus"

    ALL: Final[list[str]] = [JSON, PROMETHEUS]
