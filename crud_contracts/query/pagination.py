"""
Pagination dimension.

Contributes ``limit`` (always) and ``offset`` / ``page`` / ``cursor`` (as
configured) to the query object, and a ``meta`` object to the list output.

Usage:
    from crud_contracts.query import create_pagination_config

    pagination = create_pagination_config(default_limit=20, max_limit=100)
    pagination.schema.model_validate({"limit": 50})
"""

from dataclasses import dataclass, field
from typing import ClassVar, Optional

from pydantic import Field

from crud_contracts.config.settings import settings
from crud_contracts.query.dimension import DimensionKind, QueryDimension
from crud_contracts.schema.transforms import FieldDefinition, build_model
from crud_contracts.utils.exceptions import PaginationBoundsError


@dataclass(frozen=True)
class PaginationConfig:
    """
    Pagination bounds and enabled styles.

    Invariant: 1 <= min_limit <= default_limit <= max_limit.
    """

    default_limit: int = field(default_factory=lambda: settings.default_page_limit)
    max_limit: int = field(default_factory=lambda: settings.max_page_limit)
    min_limit: int = 1
    include_offset: bool = True
    include_cursor: bool = False
    include_page: bool = False

    def __post_init__(self):
        if not (1 <= self.min_limit <= self.default_limit <= self.max_limit):
            raise PaginationBoundsError(self.min_limit, self.default_limit, self.max_limit)


@dataclass(frozen=True)
class PaginationDimension(QueryDimension):
    """Pagination descriptor."""

    kind: ClassVar[str] = DimensionKind.PAGINATION
    config_class: ClassVar[type] = PaginationConfig

    config: PaginationConfig

    def input_fields(self) -> dict[str, FieldDefinition]:
        config = self.config
        fields: dict[str, FieldDefinition] = {
            "limit": (
                int,
                Field(
                    default=config.default_limit,
                    ge=config.min_limit,
                    le=config.max_limit,
                    description="Maximum number of items to return",
                ),
            ),
        }
        if config.include_offset:
            fields["offset"] = (
                int,
                Field(default=0, ge=0, description="Number of items to skip"),
            )
        if config.include_page:
            fields["page"] = (
                int,
                Field(default=1, ge=1, description="Page number, starting at 1"),
            )
        if config.include_cursor:
            fields["cursor"] = (
                Optional[str],
                Field(default=None, description="Opaque cursor from a previous page"),
            )
        return fields

    def output_fields(self, prefix: str = "") -> dict[str, FieldDefinition]:
        return {"meta": (self.meta_model(prefix), Field(...))}

    def meta_model(self, prefix: str = ""):
        """Model of the pagination metadata attached to list output."""
        config = self.config
        fields: dict[str, FieldDefinition] = {
            "total": (int, Field(ge=0)),
            "limit": (int, Field(ge=1)),
        }
        if config.include_offset:
            fields["offset"] = (int, Field(ge=0))
        if config.include_page:
            fields["page"] = (int, Field(ge=1))
            fields["totalPages"] = (int, Field(ge=0))
        if config.include_cursor:
            fields["nextCursor"] = (Optional[str], Field(default=None))
            fields["prevCursor"] = (Optional[str], Field(default=None))
        fields["hasMore"] = (bool, Field(...))
        return build_model(f"{prefix}PaginationMeta", fields)


def create_pagination_config(
    *,
    default_limit: int | None = None,
    max_limit: int | None = None,
    min_limit: int = 1,
    include_offset: bool = True,
    include_cursor: bool = False,
    include_page: bool = False,
) -> PaginationDimension:
    """
    Create a pagination descriptor.

    Args:
        default_limit: Limit applied when the caller sends none
        max_limit: Largest accepted limit
        min_limit: Smallest accepted limit
        include_offset: Accept ``offset``
        include_cursor: Accept ``cursor`` and report next/prev cursors
        include_page: Accept ``page`` and report total pages

    Raises:
        PaginationBoundsError: If the limits are inconsistent
    """
    return PaginationDimension(
        PaginationConfig(
            default_limit=settings.default_page_limit if default_limit is None else default_limit,
            max_limit=settings.max_page_limit if max_limit is None else max_limit,
            min_limit=min_limit,
            include_offset=include_offset,
            include_cursor=include_cursor,
            include_page=include_page,
        )
    )


# =============================================================================
# Presets
# =============================================================================


def offset_pagination(default_limit: int | None = None, max_limit: int | None = None) -> PaginationDimension:
    """Limit/offset pagination."""
    return create_pagination_config(default_limit=default_limit, max_limit=max_limit)


def page_pagination(default_limit: int | None = None, max_limit: int | None = None) -> PaginationDimension:
    """Page-number pagination."""
    return create_pagination_config(
        default_limit=default_limit,
        max_limit=max_limit,
        include_offset=False,
        include_page=True,
    )


def cursor_pagination(default_limit: int | None = None, max_limit: int | None = None) -> PaginationDimension:
    """Cursor pagination."""
    return create_pagination_config(
        default_limit=default_limit,
        max_limit=max_limit,
        include_offset=False,
        include_cursor=True,
    )


def full_pagination(default_limit: int | None = None, max_limit: int | None = None) -> PaginationDimension:
    """Offset, page and cursor styles together."""
    return create_pagination_config(
        default_limit=default_limit,
        max_limit=max_limit,
        include_offset=True,
        include_cursor=True,
        include_page=True,
    )
