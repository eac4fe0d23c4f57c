"""
Search dimension.

Contributes an optional free-text ``query`` and, when field selection is
allowed, ``searchFields`` restricted to the searchable fields.
"""

from dataclasses import dataclass
from typing import ClassVar, Iterable, Literal, Optional

from pydantic import Field

from crud_contracts.query.dimension import DimensionKind, QueryDimension
from crud_contracts.schema.transforms import FieldDefinition
from crud_contracts.utils.exceptions import SearchConfigError


@dataclass(frozen=True)
class SearchConfig:
    fields: tuple[str, ...]
    min_query_length: int = 1
    allow_field_selection: bool = False

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))
        if not self.fields:
            raise SearchConfigError("Search requires at least one searchable field")
        if self.min_query_length < 0:
            raise SearchConfigError(
                "min_query_length must not be negative",
                min_query_length=self.min_query_length,
            )


@dataclass(frozen=True)
class SearchDimension(QueryDimension):
    """Search descriptor."""

    kind: ClassVar[str] = DimensionKind.SEARCH
    config_class: ClassVar[type] = SearchConfig

    config: SearchConfig

    def input_fields(self) -> dict[str, FieldDefinition]:
        config = self.config
        fields: dict[str, FieldDefinition] = {
            "query": (
                Optional[str],
                Field(
                    default=None,
                    min_length=config.min_query_length,
                    description="Free-text search query",
                ),
            ),
        }
        if config.allow_field_selection:
            fields["searchFields"] = (
                Optional[list[Literal[config.fields]]],
                Field(default=None, description="Fields to search in"),
            )
        return fields

    def referenced_fields(self) -> tuple[str, ...]:
        return self.config.fields

    def restrict_to(self, allowed: Iterable[str]) -> Optional["SearchDimension"]:
        allowed = set(allowed)
        kept = tuple(name for name in self.config.fields if name in allowed)
        if not kept:
            return None
        if kept == self.config.fields:
            return self
        return SearchDimension(
            SearchConfig(
                fields=kept,
                min_query_length=self.config.min_query_length,
                allow_field_selection=self.config.allow_field_selection,
            )
        )


def create_search_config(
    fields: Iterable[str],
    *,
    min_query_length: int = 1,
    allow_field_selection: bool = False,
) -> SearchDimension:
    """
    Create a search descriptor.

    Raises:
        SearchConfigError: On an empty field list
    """
    return SearchDimension(
        SearchConfig(
            fields=tuple(fields),
            min_query_length=min_query_length,
            allow_field_selection=allow_field_selection,
        )
    )
