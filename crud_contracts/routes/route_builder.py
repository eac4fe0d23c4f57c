"""
Fluent route contract builder.

A RouteBuilder is immutable: every mutator returns a new builder, so a
partially configured builder can be branched into several routes. Calling
``build()`` produces a frozen RouteContract and finalizes the builder; any
further mutator call raises BuilderFinalizedError.

Usage:
    from crud_contracts.routes import RouteBuilder, CommonErrors, route

    get_user = (
        route(summary="Get user")
        .method("GET")
        .input(lambda b: b.params("/", param("id", UUID)))
        .output(User)
        .errors(CommonErrors.NOT_FOUND)
        .build()
    )
"""

from dataclasses import replace
from datetime import datetime
from typing import Any, Callable, Iterable, Literal, Mapping, Optional, Type

from pydantic import BaseModel, Field

from crud_contracts.config.constants import HttpMethod
from crud_contracts.config.logging import get_logger
from crud_contracts.routes.builders import InputBuilder, OutputBuilder, seed_input
from crud_contracts.routes.contract import (
    InputSpec,
    OutputSpec,
    RouteContract,
    RouteMetadata,
    is_model,
    path_parameters,
)
from crud_contracts.routes.errors import ErrorBuilder, ErrorDefinition, error, to_definition
from crud_contracts.schema.transforms import build_model
from crud_contracts.utils.exceptions import BuilderFinalizedError, ContractConfigError

logger = get_logger(__name__)

InputCallback = Callable[[InputBuilder], Any]
OutputCallback = Callable[[OutputBuilder], Any]


class RouteBuilder:
    """Immutable builder of a single RouteContract."""

    def __init__(
        self,
        *,
        method: str | None = None,
        path: str | None = None,
        input: InputSpec | None = None,
        output: OutputSpec | None = None,
        metadata: RouteMetadata | None = None,
        entity: Optional[Type[BaseModel]] = None,
        errors: Mapping[str, ErrorDefinition] | None = None,
    ):
        self._method = method
        self._path = path
        self._input = input or InputSpec()
        self._output = output or OutputSpec()
        self._metadata = metadata or RouteMetadata()
        self._entity = entity
        self._errors = dict(errors or {})
        self._contract: RouteContract | None = None

    def __repr__(self) -> str:
        return f"RouteBuilder(method={self._method!r}, path={self._path!r})"

    @property
    def is_built(self) -> bool:
        return self._contract is not None

    # Read-only views of the builder state

    @property
    def route_method(self) -> str | None:
        return self._method

    @property
    def route_path(self) -> str | None:
        return self._path

    @property
    def route_metadata(self) -> RouteMetadata:
        return self._metadata

    @property
    def input_spec(self) -> InputSpec:
        return self._input

    @property
    def output_spec(self) -> OutputSpec:
        return self._output

    @property
    def route_entity(self) -> Optional[Type[BaseModel]]:
        return self._entity

    def _copy(self, operation: str, **changes: Any) -> "RouteBuilder":
        if self._contract is not None:
            raise BuilderFinalizedError(operation, path=self._path)
        state = {
            "method": self._method,
            "path": self._path,
            "input": self._input,
            "output": self._output,
            "metadata": self._metadata,
            "entity": self._entity,
            "errors": self._errors,
        }
        state.update(changes)
        return RouteBuilder(**state)

    # =========================================================================
    # Metadata
    # =========================================================================

    def route(self, metadata: RouteMetadata | None = None, **fields: Any) -> "RouteBuilder":
        """Replace the metadata wholesale."""
        if metadata is None:
            metadata = RouteMetadata(**_metadata_fields(fields))
        return self._copy("route", metadata=metadata)

    def update_route(self, **changes: Any) -> "RouteBuilder":
        """Change some metadata fields, keeping the rest."""
        return self._copy(
            "update_route",
            metadata=replace(self._metadata, **_metadata_fields(changes)),
        )

    def summary(self, text: str) -> "RouteBuilder":
        return self._copy("summary", metadata=replace(self._metadata, summary=text))

    def description(self, text: str) -> "RouteBuilder":
        return self._copy("description", metadata=replace(self._metadata, description=text))

    def tags(self, *tags: str) -> "RouteBuilder":
        """Append tags (duplicates are ignored)."""
        merged = self._metadata.tags + tuple(t for t in tags if t not in self._metadata.tags)
        return self._copy("tags", metadata=replace(self._metadata, tags=merged))

    def deprecated(self, flag: bool = True) -> "RouteBuilder":
        return self._copy("deprecated", metadata=replace(self._metadata, deprecated=flag))

    def operation_id(self, operation_id: str) -> "RouteBuilder":
        return self._copy(
            "operation_id",
            metadata=replace(self._metadata, operation_id=operation_id),
        )

    # =========================================================================
    # Method, path, entity
    # =========================================================================

    def method(self, method: str) -> "RouteBuilder":
        method = method.upper()
        if method not in HttpMethod.ALL:
            raise ContractConfigError(f"Unsupported HTTP method: {method}", method=method)
        return self._copy("method", method=method)

    def path(self, path: str) -> "RouteBuilder":
        if not path.startswith("/"):
            raise ContractConfigError(f"Path must start with '/': {path!r}", path=path)
        return self._copy("path", path=path)

    def entity(self, schema: Type[BaseModel]) -> "RouteBuilder":
        return self._copy("entity", entity=schema)

    # =========================================================================
    # Input / output
    # =========================================================================

    def input(self, value: Type[BaseModel] | InputCallback | None) -> "RouteBuilder":
        """
        Set the route input.

        Args:
            value: A model (plain input), None (no input), or a callback that
                receives an InputBuilder and returns either a model or the builder

        Raises:
            ContractConfigError: If the callback returns anything else
        """
        if value is None or is_model(value):
            return self._copy("input", input=InputSpec(schema=value))

        if not callable(value):
            raise ContractConfigError(
                f"input() expects a model or a callback, got {type(value).__name__}",
                got=type(value).__name__,
            )

        seeded = InputBuilder(
            seed_input(self._input),
            entity=self._entity,
            model_prefix=self._model_prefix,
        )
        result = value(seeded)

        if isinstance(result, InputBuilder):
            changes: dict[str, Any] = {"input": result.spec()}
            if result.pending_path is not None:
                changes["path"] = result.pending_path
            return self._copy("input", **changes)
        if result is None or is_model(result):
            return self._copy("input", input=InputSpec(schema=result))

        raise ContractConfigError(
            f"input() callback must return a model or an InputBuilder, got {type(result).__name__}",
            got=type(result).__name__,
        )

    def output(self, value: Any) -> "RouteBuilder":
        """
        Set the route output.

        A schema (model class or any pydantic-compatible annotation) replaces
        the body and keeps status and streaming. A callback receives an
        OutputBuilder seeded from the current output and may return the
        builder or a schema.
        """
        if callable(value) and not isinstance(value, type) and not _is_annotation(value):
            result = value(OutputBuilder(self._output, entity=self._entity))
            if isinstance(result, OutputBuilder):
                return self._copy("output", output=result.spec())
            value = result
        return self._copy("output", output=replace(self._output, body=value))

    def status(self, code: int) -> "RouteBuilder":
        return self.output(lambda b: b.status(code))

    # =========================================================================
    # Errors
    # =========================================================================

    def errors(self, *definitions: Any) -> "RouteBuilder":
        """
        Attach error definitions, merged by code (later wins).

        Accepts ErrorDefinition / ErrorBuilder values, or a single callback
        that receives the ``error`` factory and returns an iterable of them.
        """
        if len(definitions) == 1 and callable(definitions[0]) and not isinstance(
            definitions[0], (ErrorDefinition, ErrorBuilder)
        ):
            definitions = tuple(definitions[0](error))

        merged = dict(self._errors)
        for item in definitions:
            definition = to_definition(item)
            if not definition.code:
                raise ContractConfigError("Error definitions need a code")
            merged[definition.code] = definition
        return self._copy("errors", errors=merged)

    # =========================================================================
    # Build
    # =========================================================================

    def build(self) -> RouteContract:
        """
        Finalize the builder into a RouteContract.

        Building again returns the same contract.

        Raises:
            ContractConfigError: If no path is set, or the path placeholders
                do not match the params model
        """
        if self._contract is not None:
            return self._contract

        if not self._path:
            raise ContractConfigError(
                "Route has no path",
                method=self._method,
                operation_id=self._metadata.operation_id,
            )

        placeholders = set(path_parameters(self._path))
        declared = set(self._input.params.model_fields) if self._input.params else set()
        if self._input.params is not None and placeholders != declared:
            raise ContractConfigError(
                f"Path {self._path!r} does not match params {sorted(declared)}",
                path=self._path,
                placeholders=sorted(placeholders),
                params=sorted(declared),
            )

        contract = RouteContract(
            method=self._method or HttpMethod.GET,
            path=self._path,
            input=self._input,
            output=self._output,
            metadata=self._metadata,
            errors=self._errors,
            entity=self._entity,
        )
        self._contract = contract

        logger.debug(
            "Route contract built",
            method=contract.method,
            path=contract.path,
            operation_id=self._metadata.operation_id,
            streaming=contract.is_streaming,
        )
        return contract

    @property
    def _model_prefix(self) -> str:
        operation_id = self._metadata.operation_id
        if not operation_id:
            return "Route"
        return operation_id[:1].upper() + operation_id[1:]

    # =========================================================================
    # Probes
    # =========================================================================

    @staticmethod
    def health(path: str = "/health", include_details: bool = False) -> "RouteBuilder":
        """GET probe returning ``{status, timestamp, details?}``."""
        fields: dict[str, Any] = {
            "status": (Literal["healthy"], Field(...)),
            "timestamp": (datetime, Field(...)),
        }
        if include_details:
            fields["details"] = (Optional[dict[str, Any]], Field(default=None))
        return RouteBuilder(
            method=HttpMethod.GET,
            path=path,
            output=OutputSpec(body=build_model("HealthResponse", fields)),
            metadata=RouteMetadata(summary="Health check", tags=("health",)),
        )

    @staticmethod
    def ready(path: str = "/ready") -> "RouteBuilder":
        """GET probe returning ``{ready, checks?}``."""
        body = build_model("ReadinessResponse", {
            "ready": (Literal[True], Field(...)),
            "checks": (Optional[dict[str, Any]], Field(default=None)),
        })
        return RouteBuilder(
            method=HttpMethod.GET,
            path=path,
            output=OutputSpec(body=body),
            metadata=RouteMetadata(summary="Readiness check", tags=("health",)),
        )

    @staticmethod
    def live(path: str = "/live") -> "RouteBuilder":
        """GET probe returning ``{alive}``."""
        body = build_model("LivenessResponse", {"alive": (Literal[True], Field(...))})
        return RouteBuilder(
            method=HttpMethod.GET,
            path=path,
            output=OutputSpec(body=body),
            metadata=RouteMetadata(summary="Liveness check", tags=("health",)),
        )


def route(**metadata: Any) -> RouteBuilder:
    """Start a builder with the given metadata (summary, description, tags, ...)."""
    return RouteBuilder(metadata=RouteMetadata(**_metadata_fields(metadata)))


def _metadata_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    fields = dict(fields)
    if "tags" in fields:
        fields["tags"] = _as_tags(fields["tags"])
    return fields


def _as_tags(tags: str | Iterable[str]) -> tuple[str, ...]:
    if isinstance(tags, str):
        return (tags,)
    return tuple(tags)


def _is_annotation(value: Any) -> bool:
    # typing constructs like list[User] or Optional[X] are callable-looking aliases
    return getattr(value, "__origin__", None) is not None
