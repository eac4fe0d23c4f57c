"""
OpenAPI export for route contracts.

Turns a set of RouteContracts into an OpenAPI 3.1 document. Component
schemas come from pydantic; the assembled document is validated against
FastAPI's OpenAPI models before it is returned, the same way FastAPI builds
its own ``/openapi.json``.

Usage:
    from crud_contracts.routes.openapi import build_openapi

    document = build_openapi(ops.all_contracts(), prefix="/users")
"""

from typing import Any, Iterable, Mapping, Type

from fastapi.encoders import jsonable_encoder
from fastapi.openapi.models import OpenAPI
from pydantic import BaseModel, TypeAdapter
from pydantic.json_schema import models_json_schema

from crud_contracts.config.constants import HttpMethod
from crud_contracts.config.logging import get_logger
from crud_contracts.config.settings import settings
from crud_contracts.routes.contract import RouteContract, is_model
from crud_contracts.utils.exceptions import ContractConfigError

logger = get_logger(__name__)

OPENAPI_VERSION = "3.1.0"
REF_TEMPLATE = "#/components/schemas/{model}"

JSON_CONTENT = "application/json"
STREAM_CONTENT = "text/event-stream"
STREAM_INPUT_CONTENT = "application/x-ndjson"


class _SchemaRegistry:
    """Component schemas shared by every operation of the document."""

    def __init__(self, contracts: list[RouteContract]):
        models: list[tuple[Type[BaseModel], str]] = []
        for contract in contracts:
            for model in _input_models(contract):
                models.append((model, "validation"))
            if is_model(contract.output.body):
                models.append((contract.output.body, "serialization"))
            for definition in contract.errors.values():
                if is_model(definition.data):
                    models.append((definition.data, "serialization"))

        unique = list(dict.fromkeys(models))
        refs, top = models_json_schema(unique, ref_template=REF_TEMPLATE)
        self.refs: dict[tuple[Type[BaseModel], str], dict] = dict(refs)
        self.components: dict[str, Any] = dict(top.get("$defs", {}))

    def ref(self, model: Type[BaseModel], mode: str) -> dict:
        return self.refs[(model, mode)]

    def resolve(self, model: Type[BaseModel]) -> dict:
        """The component schema of a model (its properties and required list)."""
        ref = self.ref(model, "validation")["$ref"]
        return self.components[ref.rsplit("/", 1)[-1]]

    def annotation(self, annotation: Any, mode: str) -> dict:
        """Schema of an arbitrary annotation, hoisting its definitions into components."""
        if is_model(annotation):
            return self.ref(annotation, mode)
        schema = TypeAdapter(annotation).json_schema(mode=mode, ref_template=REF_TEMPLATE)
        self.components.update(schema.pop("$defs", {}))
        return schema


def build_openapi(
    contracts: Mapping[str, RouteContract] | Iterable[RouteContract],
    *,
    title: str | None = None,
    version: str | None = None,
    prefix: str = "",
) -> dict[str, Any]:
    """
    Build an OpenAPI document.

    Args:
        contracts: Contracts keyed by name (the name is used as operationId
            when the contract has none), or a plain iterable of contracts
        title: API title (default: settings.api_title)
        version: API version (default: settings.api_version)
        prefix: Path prefix applied to every contract path

    Returns:
        The document as a JSON-compatible dict

    Raises:
        ContractConfigError: If two contracts share a method and path
    """
    if isinstance(contracts, Mapping):
        named = list(contracts.items())
    else:
        named = [(None, contract) for contract in contracts]

    registry = _SchemaRegistry([contract for _, contract in named])
    paths: dict[str, dict[str, Any]] = {}

    for name, contract in named:
        path = _join(prefix, contract.path)
        method = contract.method.lower()
        item = paths.setdefault(path, {})
        if method in item:
            raise ContractConfigError(
                f"Duplicate route {contract.method} {path}",
                method=contract.method,
                path=path,
            )
        item[method] = _operation(contract, name, registry)

    document = {
        "openapi": OPENAPI_VERSION,
        "info": {
            "title": title or settings.api_title,
            "version": version or settings.api_version,
        },
        "paths": paths,
        "components": {"schemas": registry.components},
    }

    logger.debug("OpenAPI document built", paths=len(paths), operations=len(named))
    return jsonable_encoder(
        OpenAPI.model_validate(document),
        by_alias=True,
        exclude_none=True,
    )


# =============================================================================
# Operation assembly
# =============================================================================


def _operation(contract: RouteContract, name: str | None, registry: _SchemaRegistry) -> dict:
    metadata = contract.metadata
    operation: dict[str, Any] = {
        "summary": metadata.summary,
        "description": metadata.description,
        "tags": list(metadata.tags) or None,
        "operationId": metadata.operation_id or name,
        "deprecated": metadata.deprecated or None,
        "responses": _responses(contract, registry),
    }

    parameters: list[dict] = []
    body_model = None
    spec = contract.input

    if spec.is_detailed:
        if spec.params is not None:
            parameters += _parameters(spec.params, "path", registry)
        if spec.query is not None:
            parameters += _parameters(spec.query, "query", registry)
        if spec.headers is not None:
            parameters += _parameters(spec.headers, "header", registry)
        body_model = spec.body
    elif spec.schema is not None:
        if contract.method in HttpMethod.WITH_BODY or spec.streamed:
            body_model = spec.schema
        else:
            parameters += _parameters(spec.schema, "query", registry)

    # Path placeholders without a params model are still documented
    declared = {p["name"] for p in parameters if p["in"] == "path"}
    for placeholder in contract.path_parameters:
        if placeholder not in declared:
            parameters.append({
                "name": placeholder,
                "in": "path",
                "required": True,
                "schema": {"type": "string"},
            })

    if parameters:
        operation["parameters"] = parameters
    if body_model is not None:
        content_type = STREAM_INPUT_CONTENT if spec.streamed else JSON_CONTENT
        operation["requestBody"] = {
            "required": _has_required(body_model),
            "content": {content_type: {"schema": registry.ref(body_model, "validation")}},
        }

    return {key: value for key, value in operation.items() if value is not None}


def _parameters(model: Type[BaseModel], location: str, registry: _SchemaRegistry) -> list[dict]:
    schema = registry.resolve(model)
    required = set(schema.get("required", []))
    parameters = []
    for prop, prop_schema in schema.get("properties", {}).items():
        parameter = {
            "name": prop,
            "in": location,
            "required": location == "path" or prop in required,
            "schema": prop_schema,
        }
        if _is_object(prop_schema):
            parameter["style"] = "deepObject"
            parameter["explode"] = True
        parameters.append(parameter)
    return parameters


def _responses(contract: RouteContract, registry: _SchemaRegistry) -> dict[str, Any]:
    output = contract.output
    success: dict[str, Any] = {"description": contract.summary or "Successful response"}
    if output.body is not None:
        content_type = STREAM_CONTENT if output.streamed else JSON_CONTENT
        success["content"] = {
            content_type: {"schema": registry.annotation(output.body, "serialization")}
        }
    responses: dict[str, Any] = {str(output.status): success}

    for definition in contract.errors.values():
        if definition.status is None:
            continue
        key = str(definition.status)
        text = definition.message or definition.code
        if key in responses:
            responses[key]["description"] += f"; {text}"
            continue
        response: dict[str, Any] = {"description": text}
        if definition.data is not None:
            response["content"] = {
                JSON_CONTENT: {"schema": registry.annotation(definition.data, "serialization")}
            }
        responses[key] = response

    return responses


def _input_models(contract: RouteContract) -> list[Type[BaseModel]]:
    spec = contract.input
    if spec.is_detailed:
        return list(spec.parts().values())
    return [spec.schema] if spec.schema is not None else []


def _has_required(model: Type[BaseModel]) -> bool:
    return any(info.is_required() for info in model.model_fields.values())


def _is_object(schema: dict) -> bool:
    if "$ref" in schema or schema.get("type") == "object":
        return True
    return any(_is_object(option) for option in schema.get("anyOf", []))


def _join(prefix: str, path: str) -> str:
    if not prefix:
        return path
    joined = prefix.rstrip("/") + path
    if len(joined) > 1 and joined.endswith("/"):
        joined = joined.rstrip("/")
    return joined
