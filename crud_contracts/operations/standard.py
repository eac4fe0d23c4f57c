"""
Standard operations for an entity.

Given an entity model and a name, StandardOperations produces pre-wired
RouteBuilders for the usual CRUD family: single-record, list, batch,
soft-delete, auditing, bulk data and streaming operations. Each factory
returns a builder so the caller can refine it before ``build()``.

The method, path, texts and status of every operation live in the
OPERATIONS table below; the factories only derive input and output shapes.

Usage:
    from crud_contracts.operations import StandardOperations

    users = StandardOperations(User, "user", soft_delete=True)

    create_user = users.create().build()          # POST /, body without id/timestamps
    patch_user = users.patch().build()            # PATCH /{id}, partial body
    list_users = users.list({"pagination": {"default_limit": 20}}).build()
"""

from datetime import datetime
from typing import Any, Iterable, Literal, Mapping, Optional, Type

from pydantic import BaseModel, Field

from crud_contracts.config.constants import (
    AggregateFunction,
    ChangeAction,
    ExportFormat,
    HealthStatus,
    HttpMethod,
    Limits,
    MetricsFormat,
)
from crud_contracts.config.logging import get_logger
from crud_contracts.config.settings import settings
from crud_contracts.operations.templates import (
    OperationContext,
    OperationSpec,
    batch,
    body_input,
    headers_input,
    list_shaped,
    merged_list_input,
    plain_input,
    query_input,
    single_record,
    streaming,
)
from crud_contracts.query.composer import (
    QueryComposer,
    coerce_composer,
    create_search_query,
)
from crud_contracts.query.filtering import FieldFilterConfig, create_filtering_config
from crud_contracts.query.pagination import create_pagination_config
from crud_contracts.query.search import create_search_config
from crud_contracts.query.sorting import create_sorting_config
from crud_contracts.routes.contract import RouteContract, RouteMetadata
from crud_contracts.routes.route_builder import RouteBuilder
from crud_contracts.schema.introspection import EntityIntrospection
from crud_contracts.schema.transforms import (
    FieldDefinition,
    build_model,
    field_definition,
    omit,
    pascal_case,
    partial,
    pick,
    required_definition,
    resolve_names,
)
from crud_contracts.utils.exceptions import ContractConfigError

logger = get_logger(__name__)

GET, POST, PUT, PATCH, DELETE = (
    HttpMethod.GET,
    HttpMethod.POST,
    HttpMethod.PUT,
    HttpMethod.PATCH,
    HttpMethod.DELETE,
)


# =============================================================================
# Conventions
# =============================================================================


OPERATIONS: dict[str, OperationSpec] = {
    spec.verb: spec
    for spec in [
        # Single record
        OperationSpec("read", GET, by_id=True,
                      summary="Get {entity} by ID",
                      description="Retrieve a specific {entity} by its ID"),
        OperationSpec("create", POST, "/", status=201,
                      summary="Create a new {entity}",
                      description="Create a new {entity} with the provided data"),
        OperationSpec("update", PUT, by_id=True,
                      summary="Update an existing {entity}",
                      description="Replace all fields of an existing {entity}"),
        OperationSpec("patch", PATCH, by_id=True,
                      summary="Partially update {entity}",
                      description="Update only the provided fields of an existing {entity}"),
        OperationSpec("delete", DELETE, by_id=True,
                      summary="Delete {entity}",
                      description="Permanently delete a {entity} by its ID"),
        OperationSpec("exists", GET, "/exists", by_id=True,
                      summary="Check if {entity} exists",
                      description="Check whether a {entity} with the given ID exists"),
        OperationSpec("check", GET, "/check/{field}",
                      summary="Check {entity} {field}",
                      description="Check whether a {entity} with the given {field} exists"),
        OperationSpec("upsert", PUT, "/upsert",
                      summary="Upsert {entity}",
                      description="Create or update {entity} by {unique_field}"),
        OperationSpec("validate", POST, "/validate",
                      summary="Validate {entity}",
                      description="Validate {entity} data without persisting it"),
        # List
        OperationSpec("list", GET, "/",
                      summary="List {entities}",
                      description="Retrieve a list of {entities}"),
        OperationSpec("count", GET, "/count",
                      summary="Count {entities}",
                      description="Count {entities} matching the given filter"),
        OperationSpec("search", GET, "/search",
                      summary="Search {entities}",
                      description="Full-text search over {entities}"),
        OperationSpec("distinct", GET, "/distinct/{field}",
                      summary="Get distinct {field} values",
                      description="Retrieve the distinct values of {entity} {field}"),
        # Batch
        OperationSpec("batchCreate", POST, "/batch", status=201,
                      summary="Batch create {entities}",
                      description="Create up to {max_batch_size} {entities} in a single request"),
        OperationSpec("batchDelete", DELETE, "/batch",
                      summary="Batch delete {entities}",
                      description="Delete up to {max_batch_size} {entities} by ID"),
        OperationSpec("batchRead", POST, "/batch/read",
                      summary="Batch read {entities}",
                      description="Retrieve up to {max_batch_size} {entities} by ID"),
        OperationSpec("batchUpdate", PATCH, "/batch",
                      summary="Batch update {entities}",
                      description="Update up to {max_batch_size} {entities} in a single request"),
        OperationSpec("batchUpsert", PUT, "/batch/upsert",
                      summary="Batch upsert {entities}",
                      description="Create or update up to {max_batch_size} {entities} by {unique_field}"),
        # Soft delete and lifecycle
        OperationSpec("softDelete", DELETE, "/soft", by_id=True,
                      summary="Soft delete {entity}",
                      description="Mark a {entity} as deleted without removing it"),
        OperationSpec("batchSoftDelete", DELETE, "/batch/soft",
                      summary="Batch soft delete {entities}",
                      description="Mark up to {max_batch_size} {entities} as deleted"),
        OperationSpec("archive", POST, "/archive", by_id=True,
                      summary="Archive {entity}",
                      description="Archive a {entity}"),
        OperationSpec("restore", POST, "/restore", by_id=True,
                      summary="Restore {entity}",
                      description="Restore a soft-deleted or archived {entity}"),
        OperationSpec("clone", POST, "/clone", by_id=True, status=201,
                      summary="Clone {entity}",
                      description="Create a duplicate of a {entity}"),
        OperationSpec("history", GET, "/history", by_id=True,
                      summary="Get {entity} history",
                      description="Retrieve the change history of a {entity}"),
        # Bulk data
        OperationSpec("aggregate", POST, "/aggregate",
                      summary="Aggregate {entities}",
                      description="Compute {functions} over {entities}"),
        OperationSpec("export", POST, "/export",
                      summary="Export {entities}",
                      description="Export {entities} as {formats}"),
        OperationSpec("import", POST, "/import",
                      summary="Import {entities}",
                      description="Import up to {max_records} {entities} from {formats}"),
        # Service
        OperationSpec("healthCheck", GET, "/health",
                      summary="Health check",
                      description="Report {entity} service health and dependency status"),
        OperationSpec("metrics", GET, "/metrics",
                      summary="Get metrics",
                      description="Report {entity} service metrics in {format} format"),
        # Streaming
        OperationSpec("streamingRead", GET, "/streaming", by_id=True, stream_output=True,
                      summary="Streaming {entity} by ID",
                      description="Stream updates of a {entity} as they happen"),
        OperationSpec("streamingList", GET, "/streaming", stream_output=True,
                      summary="Streaming {entities} list",
                      description="Stream pages of {entities}"),
        OperationSpec("streamingSearch", GET, "/search/streaming", stream_output=True,
                      summary="Streaming search {entities}",
                      description="Stream search results over {entities}"),
        OperationSpec("streamedInput", POST, "/stream-upload", stream_input=True,
                      summary="Stream {entities} upload",
                      description="Upload {entities} as a stream of chunks"),
        OperationSpec("websocket", GET, "/ws", stream_input=True, stream_output=True,
                      summary="{entity} websocket",
                      description="Bidirectional stream of {entity} messages"),
        OperationSpec("streamFile", GET, "/stream", by_id=True,
                      summary="Stream {entity} file",
                      description="Download a {entity} file with range support"),
    ]
}


class StandardOperations:
    """
    Factory of standard route builders for one entity.

    Args:
        entity: Entity model
        entity_name: Name used in texts, tags and operation ids ("user")
        id_field: Identifier field name
        id_schema: Identifier annotation or definition overriding the entity's own
        timestamps: Omit the created/updated pair from written bodies
        soft_delete: Omit the soft-delete marker from written bodies
        strict: Field name policy (default: settings.strict_field_names)
    """

    def __init__(
        self,
        entity: Type[BaseModel],
        entity_name: str,
        id_field: str = "id",
        id_schema: FieldDefinition | type | None = None,
        timestamps: bool = True,
        soft_delete: bool = False,
        strict: bool | None = None,
    ):
        self.entity = entity
        self.entity_name = entity_name
        self.strict = strict
        self.introspection = EntityIntrospection.from_entity(
            entity,
            id_field,
            id_schema=id_schema,
            timestamps=timestamps,
            soft_delete=soft_delete,
            strict=strict,
        )
        self.context = OperationContext(entity_name, self.introspection)

        logger.debug(
            "Standard operations configured",
            entity=entity.__name__,
            entity_name=entity_name,
            id_field=id_field,
            omissions=sorted(self.introspection.default_omissions),
        )

    def __repr__(self) -> str:
        return f"StandardOperations({self.entity.__name__}, {self.entity_name!r})"

    def _model(self, verb: str, suffix: str, fields: dict[str, Any], **config: Any) -> Type[BaseModel]:
        return build_model(self.context.model_name(verb, suffix), fields, config=config or None)

    def _success_model(self, verb: str) -> Type[BaseModel]:
        return self._model(verb, "Output", {
            "success": (bool, Field(...)),
            "message": (Optional[str], Field(default=None)),
        })

    def _at(self, verb: str, path: str | None) -> OperationSpec:
        spec = OPERATIONS[verb]
        return spec.at(path) if path else spec

    def _ids_field(self) -> Any:
        return self.context.id_item()

    def _unique_field(self, name: str | None, operation: str) -> str:
        if name is None or name == self.introspection.id_field:
            return self.introspection.id_field
        resolve_names(self.entity, [name], strict=True, operation=operation)
        return name

    # =========================================================================
    # Single record
    # =========================================================================

    def read(self) -> RouteBuilder:
        return single_record(self.context, OPERATIONS["read"], output=self.entity)

    def create(
        self,
        body: Optional[Type[BaseModel]] = None,
        omit_fields: Iterable[str] = (),
    ) -> RouteBuilder:
        """
        POST / with a body of the entity minus identifier and server managed fields.

        Args:
            body: Explicit body model (skips the derivation)
            omit_fields: Additional fields to leave out of the body
        """
        if body is None:
            body = omit(
                self.entity,
                self.introspection.omissions(omit_fields),
                model_name=self.context.model_name("create", "Body"),
                strict=self.strict,
            )
        return single_record(
            self.context,
            OPERATIONS["create"],
            input=body_input(body),
            output=self.entity,
        )

    def update(
        self,
        body: Optional[Type[BaseModel]] = None,
        omit_fields: Iterable[str] | None = None,
    ) -> RouteBuilder:
        """
        PUT /{id} replacing the whole entity.

        Without ``omit_fields`` the body is the full entity. With it, the
        server managed fields and the given extras are left out.
        """
        if body is None:
            if omit_fields is None:
                body = self.entity
            else:
                body = omit(
                    self.entity,
                    self.introspection.audit_omissions_with(omit_fields),
                    model_name=self.context.model_name("update", "Body"),
                    strict=self.strict,
                )
        return single_record(
            self.context,
            OPERATIONS["update"],
            input=body_input(body),
            output=self.entity,
        )

    def patch(self, omit_fields: Iterable[str] = ()) -> RouteBuilder:
        """PATCH /{id} with every writable field optional."""
        writable = omit(
            self.entity,
            self.introspection.omissions(omit_fields),
            strict=self.strict,
        )
        body = partial(writable, model_name=self.context.model_name("patch", "Body"))
        return single_record(
            self.context,
            OPERATIONS["patch"],
            input=body_input(body),
            output=self.entity,
        )

    def delete(self) -> RouteBuilder:
        return single_record(
            self.context,
            OPERATIONS["delete"],
            output=self._success_model("delete"),
        )

    def exists(self) -> RouteBuilder:
        return single_record(
            self.context,
            OPERATIONS["exists"],
            output=self._model("exists", "Output", {"exists": (bool, Field(...))}),
        )

    def check(self, field: str, field_schema: Any = None) -> RouteBuilder:
        """
        GET /check/<field>: does a record with this field value exist?

        The input is exactly ``{field: value}`` with the entity's constraints
        for that field (or ``field_schema`` when given).

        Raises:
            UnknownFieldError: If the entity has no such field
        """
        (name,) = resolve_names(self.entity, [field], strict=True, operation="check")
        if field_schema is None:
            definition = required_definition(field_definition(self.entity, name))
        elif isinstance(field_schema, tuple):
            definition = required_definition(field_schema)
        else:
            definition = (field_schema, Field(...))

        spec = OPERATIONS["check"]
        input_model = self._model("check", "Query", {name: definition}, extra="forbid")
        output_model = self._model("check", "Output", {"exists": (bool, Field(...))}, extra="forbid")
        return single_record(
            self.context,
            spec.at(spec.path.format(field=name)),
            input=plain_input(input_model),
            output=output_model,
            field=name,
        )

    def upsert(self, unique_field: str | None = None, path: str | None = None) -> RouteBuilder:
        """PUT /upsert creating or updating by ``unique_field`` (default: the id field)."""
        unique_field = self._unique_field(unique_field, "upsert")
        spec = OPERATIONS["upsert"]
        output = self._model("upsert", "Output", {
            "item": (self.entity, Field(...)),
            "created": (bool, Field(...)),
        })
        return single_record(
            self.context,
            spec.at(path) if path else spec,
            input=body_input(self.entity),
            output=output,
            unique_field=unique_field,
        )

    def validate(self) -> RouteBuilder:
        """POST /validate: dry-run validation of a create body."""
        body = omit(
            self.entity,
            self.introspection.default_omissions,
            model_name=self.context.model_name("validate", "Body"),
        )
        error_item = self._model("validate", "Error", {
            "field": (str, Field(...)),
            "message": (str, Field(...)),
        })
        output = self._model("validate", "Output", {
            "valid": (bool, Field(...)),
            "errors": (Optional[list[error_item]], Field(default=None)),
        })
        return single_record(
            self.context,
            OPERATIONS["validate"],
            input=body_input(body),
            output=output,
        )

    # =========================================================================
    # List
    # =========================================================================

    def list(self, config: Any = None) -> RouteBuilder:
        """
        GET / listing entities.

        Without a config the route takes no input and returns ``{data: [...]}``.
        With a composer, QueryConfig or ``{kind: options}`` mapping it takes
        ``{query?: {...}}`` and returns ``{data, meta?}``.
        """
        spec = OPERATIONS["list"]
        if config is None:
            output = self._model("list", "Output", {"data": (list[self.entity], Field(...))})
            return single_record(self.context, spec, output=output)
        return list_shaped(self.context, spec, config, strict=self.strict)

    def count(self) -> RouteBuilder:
        query = self._model("count", "Query", {"filter": (Optional[Any], Field(default=None))})
        output = self._model("count", "Output", {"count": (int, Field(..., ge=0))})
        return single_record(
            self.context,
            OPERATIONS["count"],
            input=query_input(query),
            output=output,
        )

    def search(self, fields: Iterable[str] = (), pagination: Any = None) -> RouteBuilder:
        """
        GET /search over ``fields``.

        Pagination defaults to offset pagination with settings.search_page_limit.
        Without fields the route is paginated only and takes no search text.
        """
        return list_shaped(
            self.context,
            OPERATIONS["search"],
            self._search_composer(fields, pagination),
            strict=self.strict,
        )

    def distinct(self, field: str) -> RouteBuilder:
        (name,) = resolve_names(self.entity, [field], strict=True, operation="distinct")
        spec = OPERATIONS["distinct"]
        input_model = self._model("distinct", "Query", {
            "limit": (Optional[int], Field(default=None, ge=1, le=Limits.DISTINCT_MAX_LIMIT)),
        })
        output = self._model("distinct", "Output", {
            "values": (list[Any], Field(...)),
            "total": (int, Field(..., ge=0)),
        })
        return single_record(
            self.context,
            spec.at(spec.path.format(field=name)),
            input=plain_input(input_model),
            output=output,
            field=name,
        )

    def _search_composer(self, fields: Iterable[str], pagination: Any) -> QueryComposer:
        fields = list(fields)
        if pagination is None:
            if fields:
                return create_search_query(fields)
            pagination = create_pagination_config(
                default_limit=settings.search_page_limit,
                max_limit=Limits.SEARCH_MAX_LIMIT,
            )
        dimensions: dict[str, Any] = {"pagination": pagination}
        if fields:
            dimensions["search"] = create_search_config(fields, allow_field_selection=True)
        return coerce_composer(dimensions)

    # =========================================================================
    # Batch
    # =========================================================================

    def batch_create(
        self,
        max_batch_size: int | None = None,
        item_schema: Optional[Type[BaseModel]] = None,
        omit_fields: Iterable[str] = (),
    ) -> RouteBuilder:
        """POST /batch creating up to ``max_batch_size`` entities."""
        item = item_schema or omit(
            self.entity,
            self.introspection.omissions(omit_fields),
            model_name=self.context.model_name("batchCreate", "Item"),
            strict=self.strict,
        )
        output = self._model("batchCreate", "Output", {
            "created": (list[self.entity], Field(...)),
            "failed": (list[self._index_error("batchCreate")], Field(default_factory=list)),
        })
        return batch(
            self.context,
            OPERATIONS["batchCreate"],
            field_name="items",
            item=item,
            output=output,
            max_batch_size=max_batch_size,
        )

    def batch_delete(self, max_batch_size: int | None = None) -> RouteBuilder:
        return self._batch_delete("batchDelete", max_batch_size)

    def batch_read(self, max_batch_size: int | None = None) -> RouteBuilder:
        output = self._model("batchRead", "Output", {
            "items": (list[self.entity], Field(...)),
            "notFound": (Optional[list[str]], Field(default=None)),
        })
        return batch(
            self.context,
            OPERATIONS["batchRead"],
            field_name="ids",
            item=self._ids_field(),
            output=output,
            max_batch_size=max_batch_size,
        )

    def batch_update(self, max_batch_size: int | None = None) -> RouteBuilder:
        error_item = self._model("batchUpdate", "Error", {
            "id": (str, Field(...)),
            "error": (str, Field(...)),
        })
        output = self._model("batchUpdate", "Output", {
            "items": (list[self.entity], Field(...)),
            "errors": (Optional[list[error_item]], Field(default=None)),
        })
        return batch(
            self.context,
            OPERATIONS["batchUpdate"],
            field_name="items",
            item=self.entity,
            output=output,
            max_batch_size=max_batch_size,
        )

    def batch_upsert(
        self,
        max_batch_size: int | None = None,
        unique_field: str | None = None,
    ) -> RouteBuilder:
        unique_field = self._unique_field(unique_field, "batch_upsert")
        output = self._model("batchUpsert", "Output", {
            "created": (list[self.entity], Field(...)),
            "updated": (list[self.entity], Field(...)),
            "errors": (Optional[list[self._index_error("batchUpsert")]], Field(default=None)),
        })
        return batch(
            self.context,
            OPERATIONS["batchUpsert"],
            field_name="items",
            item=self.entity,
            output=output,
            max_batch_size=max_batch_size,
            unique_field=unique_field,
        )

    def _batch_delete(self, verb: str, max_batch_size: int | None) -> RouteBuilder:
        output = self._model(verb, "Output", {
            "deleted": (int, Field(..., ge=0)),
            "failed": (Optional[list[str]], Field(default=None)),
        })
        return batch(
            self.context,
            OPERATIONS[verb],
            field_name="ids",
            item=self._ids_field(),
            output=output,
            max_batch_size=max_batch_size,
        )

    def _index_error(self, verb: str) -> Type[BaseModel]:
        return self._model(verb, "Error", {
            "index": (int, Field(..., ge=0)),
            "error": (str, Field(...)),
        })

    # =========================================================================
    # Soft delete and lifecycle
    # =========================================================================

    def soft_delete(self, path_suffix: str = "/soft") -> RouteBuilder:
        spec = OPERATIONS["softDelete"]
        return single_record(
            self.context,
            spec.at(path_suffix),
            output=self._success_model("softDelete"),
        )

    def batch_soft_delete(self, max_batch_size: int | None = None) -> RouteBuilder:
        return self._batch_delete("batchSoftDelete", max_batch_size)

    def archive(self) -> RouteBuilder:
        output = self._model("archive", "Output", {
            "success": (bool, Field(...)),
            "archivedAt": (datetime, Field(...)),
        })
        return single_record(self.context, OPERATIONS["archive"], output=output)

    def restore(self) -> RouteBuilder:
        return single_record(self.context, OPERATIONS["restore"], output=self.entity)

    def clone(self) -> RouteBuilder:
        """POST /{id}/clone with optional free-form overrides."""
        body = self._model("clone", "Body", {
            "overrides": (Optional[dict[str, Any]], Field(default=None)),
        })
        return single_record(
            self.context,
            OPERATIONS["clone"],
            input=body_input(body),
            output=self.entity,
        )

    def clone_with_overrides(self, fields: Iterable[str] = ()) -> RouteBuilder:
        """
        POST /{id}/clone where only ``fields`` may be overridden.

        Override values keep the entity's constraints for those fields.
        """
        names = resolve_names(self.entity, fields, strict=self.strict, operation="clone")
        if names:
            overrides = partial(
                pick(self.entity, names),
                model_name=self.context.model_name("clone", "Overrides"),
            )
            body = self._model("clone", "Body", {
                "overrides": (Optional[overrides], Field(default=None)),
            })
        else:
            body = self._model("clone", "Body", {})
        return single_record(
            self.context,
            OPERATIONS["clone"],
            input=body_input(body),
            output=self.entity,
        )

    def history(self) -> RouteBuilder:
        """GET /{id}/history returning a page of change records."""
        query = self._model("history", "Query", {
            "limit": (Optional[int], Field(default=None, ge=1, le=Limits.HISTORY_MAX_LIMIT)),
            "cursor": (Optional[str], Field(default=None)),
        })
        change = self._model("history", "Change", {
            "old": (Any, Field(default=None)),
            "new": (Any, Field(default=None)),
        })
        record = self._model("history", "Record", {
            "id": (str, Field(...)),
            "entityId": (str, Field(...)),
            "action": (Literal[tuple(ChangeAction.ALL)], Field(...)),
            "changes": (dict[str, change], Field(...)),
            "userId": (Optional[str], Field(default=None)),
            "timestamp": (datetime, Field(...)),
        })
        output = self._model("history", "Output", {
            "items": (list[record], Field(...)),
            "hasMore": (bool, Field(...)),
            "nextCursor": (Optional[str], Field(default=None)),
        })
        return single_record(
            self.context,
            OPERATIONS["history"],
            input=query_input(query),
            output=output,
        )

    # =========================================================================
    # Bulk data
    # =========================================================================

    def aggregate(
        self,
        functions: Iterable[str] = (AggregateFunction.COUNT,),
        group_by: Iterable[str] | None = None,
        path: str | None = None,
    ) -> RouteBuilder:
        """
        POST /aggregate.

        Grouped aggregates return ``{groups: [...], total?}``; ungrouped ones
        return one number per function.
        """
        functions = list(dict.fromkeys(functions))
        unknown = [fn for fn in functions if fn not in AggregateFunction.ALL]
        if unknown or not functions:
            raise ContractConfigError(
                f"Unknown aggregate function(s): {', '.join(unknown) or '(none given)'}",
                functions=functions,
            )
        group_fields = resolve_names(self.entity, group_by or [], strict=True, operation="group_by")

        body = self._model("aggregate", "Body", {
            "filters": (Optional[dict[str, Any]], Field(default=None)),
        })
        if group_fields:
            output = self._model("aggregate", "Output", {
                "groups": (list[dict[str, Any]], Field(...)),
                "total": (Optional[float], Field(default=None)),
            })
        else:
            output = self._model("aggregate", "Output", {
                fn: (float, Field(...)) for fn in functions
            })

        spec = OPERATIONS["aggregate"]
        return single_record(
            self.context,
            spec.at(path) if path else spec,
            input=body_input(body),
            output=output,
            functions=", ".join(functions),
        )

    def export(
        self,
        formats: Iterable[str] = tuple(ExportFormat.ALL),
        path: str | None = None,
    ) -> RouteBuilder:
        formats = self._formats(formats)
        body = self._model("export", "Body", {
            "format": (Literal[formats], Field(...)),
            "filters": (Optional[dict[str, Any]], Field(default=None)),
            "fields": (Optional[list[str]], Field(default=None)),
            "limit": (Optional[int], Field(default=None, ge=1)),
        })
        output = self._model("export", "Output", {
            "filename": (str, Field(...)),
            "contentType": (str, Field(...)),
            "size": (int, Field(..., ge=0)),
        })
        return single_record(
            self.context,
            self._at("export", path),
            input=body_input(body),
            output=output,
            formats=", ".join(formats),
        )

    def import_(
        self,
        formats: Iterable[str] = tuple(ExportFormat.ALL),
        max_records: int = Limits.IMPORT_MAX_RECORDS,
        path: str | None = None,
    ) -> RouteBuilder:
        """
        POST /import of serialized records.

        ``max_records`` caps the error report and is stated in the route
        description; the record count itself is only known once ``data`` is parsed.
        """
        formats = self._formats(formats)
        if max_records < 1:
            raise ContractConfigError("max_records must be at least 1", max_records=max_records)

        options = self._model("import", "Options", {
            "skipHeader": (Optional[bool], Field(default=None)),
            "delimiter": (Optional[str], Field(default=None)),
            "dryRun": (Optional[bool], Field(default=None)),
        })
        body = self._model("import", "Body", {
            "format": (Literal[formats], Field(...)),
            "data": (str, Field(...)),
            "options": (Optional[options], Field(default=None)),
        })
        row_error = self._model("import", "Error", {
            "row": (int, Field(..., ge=0)),
            "error": (str, Field(...)),
            "data": (Optional[dict[str, Any]], Field(default=None)),
        })
        output = self._model("import", "Output", {
            "success": (bool, Field(...)),
            "imported": (int, Field(..., ge=0)),
            "failed": (int, Field(..., ge=0)),
            "errors": (Optional[list[row_error]], Field(default=None, max_length=max_records)),
            "dryRun": (Optional[bool], Field(default=None)),
        })
        return single_record(
            self.context,
            self._at("import", path),
            input=body_input(body),
            output=output,
            formats=", ".join(formats),
            max_records=max_records,
        )

    def _formats(self, formats: Iterable[str]) -> tuple[str, ...]:
        formats = tuple(dict.fromkeys(formats))
        unknown = [f for f in formats if f not in ExportFormat.ALL]
        if unknown or not formats:
            raise ContractConfigError(
                f"Unsupported format(s): {', '.join(unknown) or '(none given)'}",
                formats=list(formats),
            )
        return formats

    # =========================================================================
    # Service
    # =========================================================================

    def health_check(self, path: str | None = None) -> RouteBuilder:
        dependency = self._model("healthCheck", "Dependency", {
            "status": (Literal[tuple(HealthStatus.ALL)], Field(...)),
            "latency": (Optional[float], Field(default=None)),
            "message": (Optional[str], Field(default=None)),
        })
        output = self._model("healthCheck", "Output", {
            "status": (Literal[tuple(HealthStatus.ALL)], Field(...)),
            "uptime": (int, Field(..., ge=0)),
            "timestamp": (datetime, Field(...)),
            "version": (Optional[str], Field(default=None)),
            "dependencies": (Optional[dict[str, dependency]], Field(default=None)),
        })
        spec = OPERATIONS["healthCheck"]
        return single_record(self.context, spec.at(path) if path else spec, output=output)

    def metrics(self, format: str = MetricsFormat.JSON, path: str | None = None) -> RouteBuilder:
        """GET /metrics as a JSON document or Prometheus text."""
        if format not in MetricsFormat.ALL:
            raise ContractConfigError(f"Unsupported metrics format: {format}", format=format)

        if format == MetricsFormat.PROMETHEUS:
            output: Any = str
        else:
            histogram = self._model("metrics", "Histogram", {
                "count": (float, Field(...)),
                "sum": (float, Field(...)),
                "min": (float, Field(...)),
                "max": (float, Field(...)),
                "avg": (float, Field(...)),
            })
            output = self._model("metrics", "Output", {
                "counters": (Optional[dict[str, float]], Field(default=None)),
                "gauges": (Optional[dict[str, float]], Field(default=None)),
                "histograms": (Optional[dict[str, histogram]], Field(default=None)),
            })
        return single_record(self.context, self._at("metrics", path), output=output, format=format)

    # =========================================================================
    # Streaming
    # =========================================================================

    def streaming_read(self) -> RouteBuilder:
        return streaming(self.context, OPERATIONS["streamingRead"], output=self.entity)

    def streaming_list(self, config: Any = None, path: str | None = None) -> RouteBuilder:
        """GET /streaming emitting ``{data, meta?}`` chunks (offset pagination by default)."""
        if config is None:
            config = {"pagination": create_pagination_config(
                default_limit=Limits.STREAMING_DEFAULT_LIMIT,
                max_limit=Limits.STREAMING_MAX_LIMIT,
            )}
        return list_shaped(self.context, self._at("streamingList", path), config, strict=self.strict)

    def streaming_search(self, fields: Iterable[str] = (), pagination: Any = None) -> RouteBuilder:
        return list_shaped(
            self.context,
            OPERATIONS["streamingSearch"],
            self._search_composer(fields, pagination),
            strict=self.strict,
        )

    def streamed_input(
        self,
        chunk_schema: Optional[Type[BaseModel]] = None,
        path: str | None = None,
        output: Any = None,
    ) -> RouteBuilder:
        """POST /stream-upload consuming a stream of chunks (entities by default)."""
        if output is None:
            output = self._model("streamedInput", "Output", {
                "success": (bool, Field(...)),
                "processed": (int, Field(..., ge=0)),
                "message": (Optional[str], Field(default=None)),
            })
        spec = OPERATIONS["streamedInput"]
        return streaming(
            self.context,
            spec.at(path) if path else spec,
            input=body_input(chunk_schema or self.entity),
            output=output,
        )

    def websocket(
        self,
        path: str = "/ws",
        input_schema: Optional[Type[BaseModel]] = None,
        output_schema: Optional[Type[BaseModel]] = None,
    ) -> RouteBuilder:
        """Bidirectional stream: entity chunks in both directions by default."""
        return streaming(
            self.context,
            OPERATIONS["websocket"].at(path),
            input=body_input(input_schema or self.entity),
            output=output_schema or self.entity,
        )

    bidirectional = websocket

    def stream_file(self) -> RouteBuilder:
        """GET /{id}/stream with HTTP range support."""
        headers = self._model("streamFile", "Headers", {
            "range": (Optional[str], Field(default=None)),
            "ifRange": (Optional[str], Field(default=None, alias="if-range")),
        }, populate_by_name=True)
        output = self._model("streamFile", "Output", {
            "content": (Any, Field(...)),
            "contentType": (str, Field(...)),
            "contentLength": (int, Field(..., ge=0)),
            "acceptRanges": (Optional[Literal["bytes"]], Field(default=None)),
            "contentRange": (Optional[str], Field(default=None)),
            "etag": (Optional[str], Field(default=None)),
            "lastModified": (Optional[str], Field(default=None)),
        })
        return single_record(
            self.context,
            OPERATIONS["streamFile"],
            input=headers_input(headers),
            output=output,
        )

    # =========================================================================
    # Merged lists
    # =========================================================================

    @staticmethod
    def list_from(base: RouteBuilder, query: Any = None) -> RouteBuilder:
        """
        Turn a base route into a list route.

        The base route's plain input fields and the composed query fields are
        merged into one flat input; the base output becomes the list item.

        Raises:
            ContractConfigError: If the base input is not a plain model
            DimensionCollisionError: If a query key is also a base input field
        """
        spec = base.input_spec
        if spec.is_detailed:
            raise ContractConfigError(
                "list_from needs a base route with a plain input",
                path=base.route_path,
            )
        return StandardOperations.list_from_schemas(
            base.route_metadata,
            spec.schema,
            base.output_spec.body,
            query,
            method=base.route_method,
            path=base.route_path,
        )

    @staticmethod
    def list_from_schemas(
        route: RouteMetadata | Mapping[str, Any] | None,
        base_input: Optional[Type[BaseModel]],
        item_schema: Type[BaseModel],
        query: Any = None,
        *,
        method: str | None = None,
        path: str | None = None,
    ) -> RouteBuilder:
        """
        Build a list route from plain models.

        ``route`` is RouteMetadata or a mapping that may also carry
        ``method`` and ``path``.
        """
        if isinstance(route, Mapping):
            route = dict(route)
            method = method or route.pop("method", None)
            path = path or route.pop("path", None)
            route = RouteMetadata(**route)

        if item_schema is None:
            raise ContractConfigError("list_from needs an item schema", path=path)

        metadata = route or RouteMetadata()
        prefix = pascal_case(metadata.operation_id or item_schema.__name__)
        composer = coerce_composer(query, name=prefix)

        return RouteBuilder(
            method=method or GET,
            path=path,
            metadata=metadata,
        ).input(
            merged_list_input(f"{prefix}ListInput", base_input, composer)
        ).output(
            composer.build_output_schema(item_schema)
        )

    # =========================================================================
    # Everything
    # =========================================================================

    def all_contracts(self) -> dict[str, RouteContract]:
        """
        Build the default contract of every path-distinct operation.

        Operations that need arguments (check, distinct, search) and the
        alternatives that share a method and path with another one
        (clone_with_overrides, streaming search) are left out.
        """
        builders = {
            "read": self.read(),
            "create": self.create(),
            "update": self.update(),
            "patch": self.patch(),
            "delete": self.delete(),
            "list": self.list(),
            "count": self.count(),
            "exists": self.exists(),
            "batchCreate": self.batch_create(),
            "batchDelete": self.batch_delete(),
            "batchRead": self.batch_read(),
            "batchUpdate": self.batch_update(),
            "batchUpsert": self.batch_upsert(),
            "upsert": self.upsert(),
            "validate": self.validate(),
            "softDelete": self.soft_delete(),
            "batchSoftDelete": self.batch_soft_delete(),
            "archive": self.archive(),
            "restore": self.restore(),
            "clone": self.clone(),
            "history": self.history(),
            "aggregate": self.aggregate(),
            "export": self.export(),
            "import": self.import_(),
            "healthCheck": self.health_check(),
            "metrics": self.metrics(),
            "streamingRead": self.streaming_read(),
            "streamingList": self.streaming_list(),
            "streamedInput": self.streamed_input(),
            "websocket": self.websocket(),
            "streamFile": self.stream_file(),
        }
        return {name: builder.build() for name, builder in builders.items()}


# =============================================================================
# Shorthands
# =============================================================================


def standard_operations(entity: Type[BaseModel], name: str, **options: Any) -> StandardOperations:
    """Shorthand for ``StandardOperations(entity, name, **options)``."""
    return StandardOperations(entity, name, **options)


def create_list_options(
    *,
    sortable_fields: Iterable[str] | None = None,
    default_sort_field: str | None = None,
    filterable_fields: Mapping[str, FieldFilterConfig] | None = None,
    searchable_fields: Iterable[str] | None = None,
    default_limit: int = 20,
    max_limit: int = 100,
) -> dict[str, Any]:
    """
    ``{kind: descriptor}`` mapping for ``StandardOperations.list``.

    Pagination (offset and page) is always on; the other dimensions are added
    when their field lists are given.
    """
    options: dict[str, Any] = {
        "pagination": create_pagination_config(
            default_limit=default_limit,
            max_limit=max_limit,
            include_offset=True,
            include_page=True,
        ),
    }
    sortable_fields = list(sortable_fields or [])
    if sortable_fields:
        options["sorting"] = create_sorting_config(
            sortable_fields,
            default_field=default_sort_field,
        )
    if filterable_fields:
        options["filtering"] = create_filtering_config(filterable_fields)
    searchable_fields = list(searchable_fields or [])
    if searchable_fields:
        options["search"] = create_search_config(searchable_fields)
    return options
