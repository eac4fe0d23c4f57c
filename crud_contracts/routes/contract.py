"""
Route contract data types.

A RouteContract is the terminal, read-only artifact of a RouteBuilder:
method, path template, input and output specs, metadata and error
definitions. A handler-binding layer or a documentation generator reads it;
nothing in this package executes it.
"""

import re
from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import Any, Mapping, Optional, Type

from pydantic import BaseModel, Field, TypeAdapter

from crud_contracts.routes.errors import ErrorDefinition
from crud_contracts.schema.transforms import FieldDefinition, build_model

_PATH_PARAM = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")

INPUT_PARTS = ("params", "query", "body", "headers")


def path_parameters(path: str) -> list[str]:
    """Names of ``{name}`` placeholders in a path template, in order."""
    return _PATH_PARAM.findall(path)


def is_model(value: Any) -> bool:
    return isinstance(value, type) and issubclass(value, BaseModel)


@dataclass(frozen=True)
class RouteMetadata:
    summary: str | None = None
    description: str | None = None
    tags: tuple[str, ...] = ()
    deprecated: bool = False
    operation_id: str | None = None


@dataclass(frozen=True)
class InputSpec:
    """
    Route input.

    Either a single plain ``schema``, or any subset of the detailed parts
    (``params``, ``query``, ``body``, ``headers``). ``streamed`` marks a body
    that arrives as an unbounded sequence of chunks, each matching ``body``
    (or ``schema``).
    """

    schema: Optional[Type[BaseModel]] = None
    params: Optional[Type[BaseModel]] = None
    query: Optional[Type[BaseModel]] = None
    body: Optional[Type[BaseModel]] = None
    headers: Optional[Type[BaseModel]] = None
    streamed: bool = False

    @property
    def is_detailed(self) -> bool:
        return any(getattr(self, part) is not None for part in INPUT_PARTS)

    @property
    def is_empty(self) -> bool:
        return self.schema is None and not self.is_detailed

    def parts(self) -> dict[str, Type[BaseModel]]:
        return {
            part: getattr(self, part)
            for part in INPUT_PARTS
            if getattr(self, part) is not None
        }

    def validation_model(self, name: str) -> Optional[Type[BaseModel]]:
        """
        One model covering the whole input.

        Plain inputs are their own schema. Detailed inputs become
        ``{params, query, body, headers}`` with a part required only when its
        model has required fields.
        """
        if not self.is_detailed:
            return self.schema
        return build_model(
            name,
            {part: _part_definition(model) for part, model in self.parts().items()},
        )


@dataclass(frozen=True)
class OutputSpec:
    """
    Route output.

    ``body`` is a model class or any pydantic-compatible annotation. When
    ``streamed`` is set the route emits an unbounded, cancellable sequence of
    ``body`` chunks instead of a single value.
    """

    body: Any = None
    status: int = 200
    headers: Optional[Type[BaseModel]] = None
    streamed: bool = False


@dataclass(frozen=True)
class RouteContract:
    method: str
    path: str
    input: InputSpec = field(default_factory=InputSpec)
    output: OutputSpec = field(default_factory=OutputSpec)
    metadata: RouteMetadata = field(default_factory=RouteMetadata)
    errors: Mapping[str, ErrorDefinition] = field(default_factory=dict)
    entity: Optional[Type[BaseModel]] = None

    def __post_init__(self):
        object.__setattr__(self, "errors", MappingProxyType(dict(self.errors)))

    @property
    def path_parameters(self) -> list[str]:
        return path_parameters(self.path)

    @property
    def summary(self) -> str | None:
        return self.metadata.summary

    @property
    def description(self) -> str | None:
        return self.metadata.description

    @property
    def tags(self) -> tuple[str, ...]:
        return self.metadata.tags

    @property
    def is_streaming(self) -> bool:
        return self.input.streamed or self.output.streamed

    @cached_property
    def input_schema(self) -> Optional[Type[BaseModel]]:
        """Model that validates the whole input (None when the route takes none)."""
        return self.input.validation_model(f"{self._model_prefix}Input")

    @property
    def output_schema(self) -> Any:
        return self.output.body

    def validate_input(self, data: Any) -> Any:
        """
        Validate a value against the input shape.

        Raises:
            pydantic.ValidationError: If the value does not match
        """
        schema = self.input_schema
        if schema is None:
            return None
        return schema.model_validate(data)

    def validate_output(self, data: Any) -> Any:
        """
        Validate a value (a single chunk for streamed outputs) against the output shape.

        Raises:
            pydantic.ValidationError: If the value does not match
        """
        if is_model(self.output.body):
            return self.output.body.model_validate(data)
        return self._output_adapter.validate_python(data)

    @cached_property
    def _output_adapter(self) -> TypeAdapter:
        return TypeAdapter(self.output.body if self.output.body is not None else Any)

    @property
    def _model_prefix(self) -> str:
        if self.metadata.operation_id:
            return self.metadata.operation_id[:1].upper() + self.metadata.operation_id[1:]
        return "Route"


def _part_definition(model: Type[BaseModel]) -> FieldDefinition:
    required = any(info.is_required() for info in model.model_fields.values())
    if required:
        return model, Field(...)
    return Optional[model], Field(default=None)
