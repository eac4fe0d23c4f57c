"""
Operation templates.

Every standard operation is one of four shapes:

    single_record   one entity (optionally addressed by /{id}) in, one result out
    batch           a bounded list of items or ids in the body
    list_shaped     a composed list query in, {data, meta?} out
    streaming       like single_record, with a streamed input and/or output

An OperationSpec carries the per-operation conventions (verb, method, path,
texts, status, streaming flags); the template turns it into a RouteBuilder
with tags, operation id and entity already set.
"""

from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import Any, Callable, Optional, Type

from pydantic import BaseModel, Field

from crud_contracts.config.constants import Limits
from crud_contracts.config.settings import settings
from crud_contracts.query.composer import QueryComposer, check_collisions, coerce_composer
from crud_contracts.routes.builders import InputBuilder, PathParam, param
from crud_contracts.routes.contract import RouteMetadata
from crud_contracts.routes.route_builder import RouteBuilder
from crud_contracts.schema.introspection import EntityIntrospection
from crud_contracts.schema.transforms import (
    FieldDefinition,
    build_model,
    field_definition,
    item_annotation,
    pascal_case,
)
from crud_contracts.utils.exceptions import BatchSizeError, ContractConfigError

InputDerivation = Callable[[InputBuilder], Any]


@dataclass(frozen=True)
class OperationSpec:
    """
    Conventions of one operation.

    ``path`` is the full path, or for ``by_id`` operations the suffix that
    follows ``/{id}``. ``summary`` and ``description`` may reference
    ``{entity}``, ``{entities}`` and any extra keys passed to ``texts``.
    """

    verb: str
    method: str
    path: str = ""
    summary: str = ""
    description: str = ""
    by_id: bool = False
    status: int = 200
    stream_input: bool = False
    stream_output: bool = False

    def at(self, path: str) -> "OperationSpec":
        return replace(self, path=path)

    def texts(self, entity_name: str, **extra: Any) -> tuple[str, str]:
        values = {"entity": entity_name, "entities": f"{entity_name}s", **extra}
        return self.summary.format(**values), self.description.format(**values)


@dataclass(frozen=True)
class OperationContext:
    """Entity facts shared by every operation of a StandardOperations instance."""

    entity_name: str
    introspection: EntityIntrospection
    text_values: dict[str, Any] = field(default_factory=dict)

    @property
    def entity(self) -> Type[BaseModel]:
        return self.introspection.entity

    @cached_property
    def pascal_name(self) -> str:
        return pascal_case(self.entity_name)

    def operation_id(self, verb: str) -> str:
        return f"{verb}{self.pascal_name}"

    def model_name(self, verb: str, suffix: str = "") -> str:
        return f"{pascal_case(verb)}{self.pascal_name}{suffix}"

    def id_param(self) -> PathParam:
        return param(self.introspection.id_field, self.introspection.id_definition)

    def id_item(self) -> Any:
        """Annotation of one identifier inside a list of ids."""
        return item_annotation(self.introspection.id_definition)


# =============================================================================
# Input derivations
# =============================================================================


def body_input(model: Type[BaseModel]) -> InputDerivation:
    return lambda b: b.body(model)


def query_input(model: Type[BaseModel]) -> InputDerivation:
    return lambda b: b.query(model)


def headers_input(model: Type[BaseModel]) -> InputDerivation:
    return lambda b: b.headers(model)


def plain_input(model: Optional[Type[BaseModel]]) -> InputDerivation:
    return lambda b: model


def resolve_batch_size(max_batch_size: int | None) -> int:
    """
    Upper bound of a batch, defaulting to settings.default_max_batch_size.

    Raises:
        BatchSizeError: If the bound is below 1
    """
    limit = settings.default_max_batch_size if max_batch_size is None else max_batch_size
    if limit < Limits.MIN_BATCH_SIZE:
        raise BatchSizeError(limit)
    return limit


# =============================================================================
# Templates
# =============================================================================


def _start(context: OperationContext, spec: OperationSpec, **text_values: Any) -> RouteBuilder:
    summary, description = spec.texts(context.entity_name, **{**context.text_values, **text_values})
    return RouteBuilder(
        method=spec.method,
        path=None if spec.by_id else (spec.path or "/"),
        metadata=RouteMetadata(
            summary=summary,
            description=description,
            tags=(context.entity_name,),
            operation_id=context.operation_id(spec.verb),
        ),
        entity=context.entity,
    )


def _with_input(
    builder: RouteBuilder,
    context: OperationContext,
    spec: OperationSpec,
    derive: InputDerivation | None,
) -> RouteBuilder:
    if not spec.by_id:
        if derive is None:
            return builder
        if spec.stream_input:
            return builder.input(lambda b: derive(b).streamed())
        return builder.input(derive)

    def by_id(b: InputBuilder) -> InputBuilder:
        b = b.params("/", context.id_param(), spec.path)
        if derive is not None:
            b = derive(b)
        if not isinstance(b, InputBuilder):
            raise ContractConfigError(
                f"{spec.verb} addresses a record by id and needs a detailed input",
                operation=spec.verb,
            )
        return b.streamed() if spec.stream_input else b

    return builder.input(by_id)


def _with_output(builder: RouteBuilder, spec: OperationSpec, output: Any) -> RouteBuilder:
    builder = builder.output(output)
    if spec.status != 200 or spec.stream_output:
        builder = builder.output(lambda b: b.status(spec.status).streamed(spec.stream_output))
    return builder


def single_record(
    context: OperationContext,
    spec: OperationSpec,
    *,
    input: InputDerivation | None = None,
    output: Any = None,
    **text_values: Any,
) -> RouteBuilder:
    """Instantiate a one-record operation."""
    builder = _start(context, spec, **text_values)
    builder = _with_input(builder, context, spec, input)
    return _with_output(builder, spec, output)


def batch(
    context: OperationContext,
    spec: OperationSpec,
    *,
    field_name: str,
    item: Any,
    output: Any,
    max_batch_size: int | None = None,
    **text_values: Any,
) -> RouteBuilder:
    """
    Instantiate a batch operation whose body is ``{field_name: [item, ...]}``.

    The list is bounded to ``1 <= len <= max_batch_size``.

    Raises:
        BatchSizeError: If max_batch_size is below 1
    """
    limit = resolve_batch_size(max_batch_size)
    body = build_model(
        context.model_name(spec.verb, "Body"),
        {
            field_name: (
                list[item],
                Field(..., min_length=Limits.MIN_BATCH_SIZE, max_length=limit),
            ),
        },
    )
    return single_record(
        context,
        spec,
        input=body_input(body),
        output=output,
        max_batch_size=limit,
        **text_values,
    )


def list_shaped(
    context: OperationContext,
    spec: OperationSpec,
    query: Any,
    *,
    item: Optional[Type[BaseModel]] = None,
    strict: bool | None = None,
    **text_values: Any,
) -> RouteBuilder:
    """
    Instantiate a list operation from a composer, QueryConfig or ``{kind: ...}`` mapping.

    Sorting, filtering and search references are checked against the entity.
    """
    composer = coerce_composer(query, name=context.model_name(spec.verb))
    composer = composer.validate_fields(context.entity, strict=strict)
    builder = _start(context, spec, **text_values)
    builder = _with_input(builder, context, spec, plain_input(composer.build_input_schema()))
    return _with_output(builder, spec, composer.build_output_schema(item or context.entity))


def streaming(
    context: OperationContext,
    spec: OperationSpec,
    *,
    input: InputDerivation | None = None,
    output: Any = None,
    **text_values: Any,
) -> RouteBuilder:
    """
    Instantiate an operation with a streamed input and/or output.

    Raises:
        ContractConfigError: If the spec streams neither direction
    """
    if not (spec.stream_input or spec.stream_output):
        raise ContractConfigError(
            f"{spec.verb} is a streaming operation but streams nothing",
            operation=spec.verb,
        )
    return single_record(context, spec, input=input, output=output, **text_values)


def merged_list_input(
    name: str,
    base_input: Optional[Type[BaseModel]],
    composer: QueryComposer,
) -> Type[BaseModel]:
    """
    Flat merge of a base input's fields with a composed query's fields.

    Raises:
        DimensionCollisionError: If a query key is also a base input field
    """
    definitions: dict[str, FieldDefinition] = {}
    owners: dict[str, str] = {}
    if base_input is not None:
        for field_name in base_input.model_fields:
            definitions[field_name] = field_definition(base_input, field_name)
            owners[field_name] = base_input.__name__
    check_collisions(composer.get_config(), reserved=owners)
    definitions.update(composer.query_fields())
    return build_model(name, definitions)
