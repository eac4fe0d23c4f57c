"""
Query dimension descriptors.

A dimension (pagination, sorting, filtering, search) is described by a
frozen descriptor that is both a bag of settings (``config``) and a schema
fragment (``input_fields`` / ``schema``). Callers hand dimensions to the
query composer in one of two tagged forms:

    PrebuiltDimension(descriptor)          # already built
    PlainOptions("sorting", {...})         # options to build from

``normalize_dimension`` is the single place that lowers either form into a
descriptor.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, fields as dataclass_fields, is_dataclass
from functools import cached_property
from typing import Any, ClassVar, Iterable, Mapping, Optional, Type, Union

from pydantic import BaseModel

from crud_contracts.schema.transforms import FieldDefinition, build_model
from crud_contracts.utils.exceptions import ContractConfigError, DimensionKindError


class DimensionKind:
    """Dimension slot names, in composition order."""

    PAGINATION = "pagination"
    SORTING = "sorting"
    FILTERING = "filtering"
    SEARCH = "search"

    ALL = [PAGINATION, SORTING, FILTERING, SEARCH]


_REGISTRY: dict[str, Type["QueryDimension"]] = {}


@dataclass(frozen=True)
class QueryDimension(ABC):
    """Base descriptor. Subclasses declare ``kind`` and ``config_class``."""

    kind: ClassVar[str]
    config_class: ClassVar[type]

    config: Any

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if "kind" in cls.__dict__:
            _REGISTRY[cls.kind] = cls

    @classmethod
    def from_options(cls, options: Any) -> "QueryDimension":
        """Build a descriptor from a config instance or a mapping of options."""
        if isinstance(options, cls.config_class):
            return cls(options)
        if isinstance(options, Mapping):
            return cls(cls.config_class(**options))
        raise DimensionKindError(cls.kind, options)

    @abstractmethod
    def input_fields(self) -> dict[str, FieldDefinition]:
        """Fields this dimension contributes to the query object."""

    def output_fields(self, prefix: str = "") -> dict[str, FieldDefinition]:
        """Fields this dimension contributes to the list output."""
        return {}

    def referenced_fields(self) -> tuple[str, ...]:
        """Entity field names this dimension refers to."""
        return ()

    def restrict_to(self, allowed: Iterable[str]) -> Optional["QueryDimension"]:
        """
        Drop references to fields outside ``allowed``.

        Returns None when nothing is left to configure.
        """
        return self

    @cached_property
    def schema(self) -> Type[BaseModel]:
        """Standalone model of this dimension's input fragment."""
        name = f"{type(self).__name__.removesuffix('Dimension')}Query"
        return build_model(name, self.input_fields())


# =============================================================================
# Tagged Inputs
# =============================================================================


@dataclass(frozen=True)
class PrebuiltDimension:
    """A fully built dimension descriptor."""

    descriptor: QueryDimension


@dataclass(frozen=True)
class PlainOptions:
    """Options from which a descriptor of ``kind`` is built."""

    kind: str
    options: Any


DimensionInput = Union[PrebuiltDimension, PlainOptions]


def as_dimension_input(kind: str, value: Any) -> DimensionInput:
    """Wrap an untagged value (descriptor, config or mapping) in its tag."""
    if isinstance(value, (PrebuiltDimension, PlainOptions)):
        return value
    if isinstance(value, QueryDimension):
        return PrebuiltDimension(value)
    return PlainOptions(kind, value)


def normalize_dimension(kind: str, value: Any) -> QueryDimension:
    """
    Lower a dimension input into a descriptor of ``kind``.

    Args:
        kind: Expected dimension kind (see DimensionKind)
        value: PrebuiltDimension, PlainOptions, or an untagged value

    Raises:
        DimensionKindError: If the value describes a different dimension
    """
    if kind not in _REGISTRY:
        raise ContractConfigError(f"Unknown query dimension '{kind}'", kind=kind)

    tagged = as_dimension_input(kind, value)

    if isinstance(tagged, PrebuiltDimension):
        descriptor = tagged.descriptor
        if descriptor.kind != kind:
            raise DimensionKindError(kind, descriptor)
        return descriptor

    if tagged.kind != kind:
        raise DimensionKindError(kind, tagged.options)
    return _REGISTRY[kind].from_options(tagged.options)


def config_as_dict(config: Any) -> dict[str, Any]:
    """Shallow dict of a config dataclass, for logging."""
    if is_dataclass(config):
        return {f.name: getattr(config, f.name) for f in dataclass_fields(config)}
    return dict(config)
