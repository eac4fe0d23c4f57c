"""
Configuration module: settings, logging, constants.
"""

from crud_contracts.config.settings import Settings, settings, get_settings
from crud_contracts.config.logging import get_logger, setup_logging
from crud_contracts.config.constants import (
    HttpMethod,
    SortDirection,
    NullsHandling,
    FilterType,
    FilterOperator,
    Limits,
    ChangeAction,
    HealthStatus,
    ExportFormat,
    AggregateFunction,
    MetricsFormat,
)

__all__ = [
    # settings
    "Settings",
    "settings",
    "get_settings",
    # logging
    "get_logger",
    "setup_logging",
    # constants
    "HttpMethod",
    "SortDirection",
    "NullsHandling",
    "FilterType",
    "FilterOperator",
    "Limits",
    "ChangeAction",
    "HealthStatus",
    "ExportFormat",
    "AggregateFunction",
    "MetricsFormat",
]
