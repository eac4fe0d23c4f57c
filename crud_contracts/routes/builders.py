"""
Input and output builders handed to RouteBuilder.input / RouteBuilder.output callbacks.

Both builders are immutable: every method returns a new builder.

Usage:
    from crud_contracts.routes import RouteBuilder, param

    contract = (
        RouteBuilder()
        .method("PATCH")
        .input(lambda b: b.params("/", param("id", UUID)).body(b.entity).partial())
        .output(User)
        .build()
    )
    contract.path  # "/{id}"
"""

from dataclasses import dataclass, replace
from typing import Any, Optional, Type

from pydantic import BaseModel, Field

from crud_contracts.routes.contract import InputSpec, OutputSpec
from crud_contracts.schema.transforms import (
    FieldDefinition,
    build_model,
    extend,
    omit,
    partial,
    pick,
    required_definition,
)
from crud_contracts.utils.exceptions import ContractConfigError


@dataclass(frozen=True)
class PathParam:
    """A ``{name}`` placeholder token used by InputBuilder.params."""

    name: str
    definition: FieldDefinition


def param(name: str, annotation: Any = str) -> PathParam:
    """
    Declare a path parameter.

    Args:
        name: Placeholder name
        annotation: Value type, or an ``(annotation, FieldInfo)`` definition
            taken from an entity (its default is dropped, path values are
            always required)
    """
    if isinstance(annotation, tuple):
        return PathParam(name, required_definition(annotation))
    return PathParam(name, (annotation, Field(...)))


# =============================================================================
# Input
# =============================================================================


class InputBuilder:
    """
    Detailed input under construction: params, query, body and headers.

    ``omit``, ``pick``, ``partial`` and ``extend`` transform the body (the
    entity when no body is set yet).
    """

    def __init__(
        self,
        spec: InputSpec | None = None,
        *,
        entity: Optional[Type[BaseModel]] = None,
        pending_path: str | None = None,
        model_prefix: str = "",
    ):
        self._spec = spec or InputSpec()
        self._entity = entity
        self._pending_path = pending_path
        self._model_prefix = model_prefix

    @property
    def entity(self) -> Optional[Type[BaseModel]]:
        return self._entity

    @property
    def pending_path(self) -> str | None:
        """Path assembled by ``params``, applied to the route when the callback returns."""
        return self._pending_path

    def spec(self) -> InputSpec:
        return self._spec

    def _with(self, **changes: Any) -> "InputBuilder":
        pending_path = changes.pop("pending_path", self._pending_path)
        return InputBuilder(
            replace(self._spec, **changes),
            entity=self._entity,
            pending_path=pending_path,
            model_prefix=self._model_prefix,
        )

    def params(self, *segments: str | PathParam) -> "InputBuilder":
        """
        Build the path template and its params model in one go.

        Literal strings and ``param()`` tokens are concatenated left to right.

        Raises:
            ContractConfigError: If a segment is neither a string nor a param token,
                or a parameter name repeats
        """
        path = ""
        definitions: dict[str, FieldDefinition] = {}
        for segment in segments:
            if isinstance(segment, PathParam):
                if segment.name in definitions:
                    raise ContractConfigError(
                        f"Path parameter '{segment.name}' declared twice",
                        parameter=segment.name,
                    )
                path += "{" + segment.name + "}"
                definitions[segment.name] = segment.definition
            elif isinstance(segment, str):
                path += segment
            else:
                raise ContractConfigError(
                    f"Unsupported path segment: {segment!r}",
                    got=type(segment).__name__,
                )

        model = build_model(f"{self._model_prefix}Params", definitions)
        return self._with(schema=None, params=model, pending_path=path or "/")

    def params_schema(self, model: Type[BaseModel]) -> "InputBuilder":
        return self._with(schema=None, params=model)

    def query(self, model: Type[BaseModel]) -> "InputBuilder":
        return self._with(schema=None, query=model)

    def body(self, model: Type[BaseModel]) -> "InputBuilder":
        return self._with(schema=None, body=model)

    def headers(self, model: Type[BaseModel]) -> "InputBuilder":
        return self._with(schema=None, headers=model)

    def streamed(self, flag: bool = True) -> "InputBuilder":
        return self._with(streamed=flag)

    def omit(self, *names: str, strict: bool | None = None) -> "InputBuilder":
        return self.body(omit(self._body_source("omit"), names, strict=strict))

    def pick(self, *names: str, strict: bool | None = None) -> "InputBuilder":
        return self.body(pick(self._body_source("pick"), names, strict=strict))

    def partial(self) -> "InputBuilder":
        return self.body(partial(self._body_source("partial")))

    def extend(self, **fields: Any) -> "InputBuilder":
        return self.body(extend(self._body_source("extend"), fields))

    def _body_source(self, operation: str) -> Type[BaseModel]:
        source = self._spec.body or self._spec.schema or self._entity
        if source is None:
            raise ContractConfigError(
                f"Cannot {operation} a body: no body or entity schema is set",
                operation=operation,
            )
        return source


# =============================================================================
# Output
# =============================================================================


class OutputBuilder:
    """Output under construction: body, status, headers and streaming flag."""

    def __init__(
        self,
        spec: OutputSpec | None = None,
        *,
        entity: Optional[Type[BaseModel]] = None,
    ):
        self._spec = spec or OutputSpec()
        self._entity = entity

    @property
    def entity(self) -> Optional[Type[BaseModel]]:
        return self._entity

    def spec(self) -> OutputSpec:
        return self._spec

    def _with(self, **changes: Any) -> "OutputBuilder":
        return OutputBuilder(replace(self._spec, **changes), entity=self._entity)

    def body(self, schema: Any) -> "OutputBuilder":
        return self._with(body=schema)

    def status(self, code: int) -> "OutputBuilder":
        if not 100 <= code <= 599:
            raise ContractConfigError(f"Invalid HTTP status: {code}", status=code)
        return self._with(status=code)

    def headers(self, model: Type[BaseModel]) -> "OutputBuilder":
        return self._with(headers=model)

    def streamed(self, flag: bool = True) -> "OutputBuilder":
        return self._with(streamed=flag)


def seed_input(spec: InputSpec) -> InputSpec:
    """
    Starting point handed to an input callback.

    A plain schema is offered as the body so callbacks can refine it.
    """
    if spec.is_detailed or spec.schema is None:
        return spec
    return InputSpec(body=spec.schema, streamed=spec.streamed)
