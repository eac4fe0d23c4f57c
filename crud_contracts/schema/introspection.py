"""
Entity introspection.

Resolves, once per entity, the identifier's field definition and the default
omission set: the fields a caller may never write (identifier, timestamp pair,
soft-delete marker).
"""

from dataclasses import dataclass, field
from typing import Iterable, Type

from pydantic import BaseModel, Field

from crud_contracts.config.settings import settings
from crud_contracts.schema.transforms import (
    FieldDefinition,
    field_definition,
    has_field,
    resolve_names,
)


@dataclass(frozen=True)
class EntityIntrospection:
    """
    Structural facts about an entity model.

    Built through ``from_entity``; convention fields (timestamps, soft-delete
    marker) only count when the entity actually declares them.
    """

    entity: Type[BaseModel]
    id_field: str
    id_definition: FieldDefinition
    timestamp_omissions: frozenset[str] = field(default_factory=frozenset)
    soft_delete_omissions: frozenset[str] = field(default_factory=frozenset)
    strict: bool | None = None

    @classmethod
    def from_entity(
        cls,
        entity: Type[BaseModel],
        id_field: str = "id",
        *,
        id_schema: FieldDefinition | type | None = None,
        timestamps: bool = True,
        soft_delete: bool = False,
        timestamp_fields: Iterable[str] | None = None,
        soft_delete_field: str | None = None,
        strict: bool | None = None,
    ) -> "EntityIntrospection":
        """
        Introspect an entity model.

        Args:
            entity: Entity model
            id_field: Name of the identifier field
            id_schema: Explicit identifier annotation or definition; defaults to
                the entity's own field, or ``str`` when the entity has none
            timestamps: Whether the created/updated pair is server managed
            soft_delete: Whether the soft-delete marker is server managed
            timestamp_fields: Names of the created/updated pair
            soft_delete_field: Name of the soft-delete marker
            strict: Field name policy for caller supplied omissions
        """
        if id_schema is not None:
            id_definition = id_schema if isinstance(id_schema, tuple) else (id_schema, Field())
        elif has_field(entity, id_field):
            id_definition = field_definition(entity, id_field)
        else:
            id_definition = (str, Field())

        timestamp_names = list(timestamp_fields or settings.timestamp_fields)
        marker = soft_delete_field or settings.soft_delete_field

        timestamp_omissions = frozenset(
            resolve_names(entity, [n for n in timestamp_names if has_field(entity, n)])
        ) if timestamps else frozenset()
        soft_delete_omissions = frozenset(
            resolve_names(entity, [marker] if has_field(entity, marker) else [])
        ) if soft_delete else frozenset()

        return cls(
            entity=entity,
            id_field=id_field,
            id_definition=id_definition,
            timestamp_omissions=timestamp_omissions,
            soft_delete_omissions=soft_delete_omissions,
            strict=strict,
        )

    @property
    def has_id_field(self) -> bool:
        return has_field(self.entity, self.id_field)

    @property
    def id_annotation(self):
        return self.id_definition[0]

    @property
    def default_omissions(self) -> frozenset[str]:
        """Identifier plus the declared server managed fields."""
        id_names = frozenset(resolve_names(self.entity, [self.id_field])) if self.has_id_field else frozenset()
        return id_names | self.timestamp_omissions | self.soft_delete_omissions

    @property
    def audit_omissions(self) -> frozenset[str]:
        """Server managed fields other than the identifier."""
        return self.timestamp_omissions | self.soft_delete_omissions

    def omissions(self, extra: Iterable[str] = ()) -> frozenset[str]:
        """Default omission set unioned with caller supplied names."""
        return self.default_omissions | self._checked(extra)

    def audit_omissions_with(self, extra: Iterable[str] = ()) -> frozenset[str]:
        return self.audit_omissions | self._checked(extra)

    def _checked(self, names: Iterable[str]) -> frozenset[str]:
        return frozenset(
            resolve_names(self.entity, names, strict=self.strict, operation="omit")
        )
