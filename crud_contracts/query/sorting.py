"""
Sorting dimension.

Single mode contributes ``sortBy`` and ``sortDirection``; multiple mode
contributes ``sortBy`` as a non-empty list of ``{field, direction}`` pairs.
``nullsHandling`` is added when enabled.
"""

from dataclasses import dataclass
from typing import ClassVar, Iterable, Literal, Optional

from pydantic import Field

from crud_contracts.config.constants import SortDirection
from crud_contracts.query.dimension import DimensionKind, QueryDimension
from crud_contracts.schema.transforms import FieldDefinition, build_model
from crud_contracts.utils.exceptions import SortingConfigError

DirectionLiteral = Literal["asc", "desc"]
NullsLiteral = Literal["first", "last"]


@dataclass(frozen=True)
class SortingConfig:
    """Sortable fields and defaults. ``fields`` must be non-empty."""

    fields: tuple[str, ...]
    default_field: str | None = None
    default_direction: str = SortDirection.ASC
    allow_multiple: bool = False
    allow_nulls_handling: bool = False

    def __post_init__(self):
        object.__setattr__(self, "fields", tuple(self.fields))

        if not self.fields:
            raise SortingConfigError("Sorting requires at least one sortable field")

        if len(set(self.fields)) != len(self.fields):
            raise SortingConfigError(
                "Sortable fields must be unique", fields=list(self.fields)
            )

        if self.default_field is not None and self.default_field not in self.fields:
            raise SortingConfigError(
                f"Default sort field '{self.default_field}' is not sortable",
                default_field=self.default_field,
                fields=list(self.fields),
            )

        if self.default_direction not in SortDirection.ALL:
            raise SortingConfigError(
                f"Invalid sort direction '{self.default_direction}'",
                default_direction=self.default_direction,
            )


@dataclass(frozen=True)
class SortingDimension(QueryDimension):
    """Sorting descriptor."""

    kind: ClassVar[str] = DimensionKind.SORTING
    config_class: ClassVar[type] = SortingConfig

    config: SortingConfig

    @property
    def field_literal(self):
        return Literal[self.config.fields]

    def input_fields(self) -> dict[str, FieldDefinition]:
        config = self.config
        fields: dict[str, FieldDefinition] = {}

        if config.allow_multiple:
            sort_item = build_model(
                "SortItem",
                {
                    "field": (self.field_literal, Field(...)),
                    "direction": (DirectionLiteral, Field(default=SortDirection.ASC)),
                },
            )
            fields["sortBy"] = (
                Optional[list[sort_item]],
                Field(default=None, min_length=1, description="Sort keys in priority order"),
            )
        else:
            fields["sortBy"] = (
                Optional[self.field_literal],
                Field(default=config.default_field, description="Field to sort by"),
            )
            fields["sortDirection"] = (
                DirectionLiteral,
                Field(default=config.default_direction, description="Sort direction"),
            )

        if config.allow_nulls_handling:
            fields["nullsHandling"] = (
                Optional[NullsLiteral],
                Field(default=None, description="Placement of null values"),
            )
        return fields

    def referenced_fields(self) -> tuple[str, ...]:
        return self.config.fields

    def restrict_to(self, allowed: Iterable[str]) -> Optional["SortingDimension"]:
        allowed = set(allowed)
        kept = tuple(name for name in self.config.fields if name in allowed)
        if not kept:
            return None
        if kept == self.config.fields:
            return self
        default_field = self.config.default_field if self.config.default_field in kept else None
        return SortingDimension(
            SortingConfig(
                fields=kept,
                default_field=default_field,
                default_direction=self.config.default_direction,
                allow_multiple=self.config.allow_multiple,
                allow_nulls_handling=self.config.allow_nulls_handling,
            )
        )


def create_sorting_config(
    fields: Iterable[str],
    *,
    default_field: str | None = None,
    default_direction: str = SortDirection.ASC,
    allow_multiple: bool = False,
    allow_nulls_handling: bool = False,
) -> SortingDimension:
    """
    Create a sorting descriptor.

    Raises:
        SortingConfigError: On an empty field list, or a default field that
            is not one of the sortable fields
    """
    return SortingDimension(
        SortingConfig(
            fields=tuple(fields),
            default_field=default_field,
            default_direction=default_direction,
            allow_multiple=allow_multiple,
            allow_nulls_handling=allow_nulls_handling,
        )
    )
