"""
Typed error definitions attached to route contracts.

Usage:
    from crud_contracts.routes import error, CommonErrors

    builder.errors(
        CommonErrors.NOT_FOUND,
        error("EMAIL_TAKEN").status(409).message("Email already registered"),
    )
"""

from dataclasses import dataclass, replace
from typing import Any, Final

from fastapi import status


@dataclass(frozen=True)
class ErrorDefinition:
    """An error a route may return: code, HTTP status, message and payload shape."""

    code: str
    message: str | None = None
    status: int | None = None
    data: Any = None


class ErrorBuilder:
    """Fluent, immutable construction of an ErrorDefinition."""

    def __init__(self, definition: ErrorDefinition):
        self._definition = definition

    def code(self, code: str) -> "ErrorBuilder":
        return ErrorBuilder(replace(self._definition, code=code))

    def message(self, message: str) -> "ErrorBuilder":
        return ErrorBuilder(replace(self._definition, message=message))

    def status(self, status_code: int) -> "ErrorBuilder":
        return ErrorBuilder(replace(self._definition, status=status_code))

    def data(self, schema: Any) -> "ErrorBuilder":
        return ErrorBuilder(replace(self._definition, data=schema))

    def definition(self) -> ErrorDefinition:
        return self._definition


def error(code: str = "") -> ErrorBuilder:
    """Start an error definition."""
    return ErrorBuilder(ErrorDefinition(code=code))


def to_definition(value: ErrorDefinition | ErrorBuilder) -> ErrorDefinition:
    if isinstance(value, ErrorBuilder):
        return value.definition()
    return value


# =============================================================================
# Common Definitions
# =============================================================================


class CommonErrors:
    """Prebuilt definitions for the usual failure modes of CRUD routes."""

    BAD_REQUEST: Final[ErrorDefinition] = ErrorDefinition(
        "BAD_REQUEST", "Invalid request", status.HTTP_400_BAD_REQUEST
    )
    UNAUTHORIZED: Final[ErrorDefinition] = ErrorDefinition(
        "UNAUTHORIZED", "Authentication required", status.HTTP_401_UNAUTHORIZED
    )
    FORBIDDEN: Final[ErrorDefinition] = ErrorDefinition(
        "FORBIDDEN", "Access denied", status.HTTP_403_FORBIDDEN
    )
    NOT_FOUND: Final[ErrorDefinition] = ErrorDefinition(
        "NOT_FOUND", "Resource not found", status.HTTP_404_NOT_FOUND
    )
    CONFLICT: Final[ErrorDefinition] = ErrorDefinition(
        "CONFLICT", "Resource already exists", status.HTTP_409_CONFLICT
    )
    INTERNAL: Final[ErrorDefinition] = ErrorDefinition(
        "INTERNAL_SERVER_ERROR", "Internal server error", status.HTTP_500_INTERNAL_SERVER_ERROR
    )
