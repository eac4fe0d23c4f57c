"""
Tests for RouteBuilder, its input/output builders and error definitions.
"""

from typing import Optional
from uuid import UUID, uuid4

import pytest
from pydantic import BaseModel, ValidationError

from crud_contracts.routes import (
    CommonErrors,
    InputBuilder,
    RouteBuilder,
    error,
    param,
    route,
)
from crud_contracts.utils.exceptions import BuilderFinalizedError, ContractConfigError


class Greeting(BaseModel):
    message: str


class TestMetadata:
    """Route metadata mutators."""

    def test_route_factory(self):
        builder = route(summary="Get user", tags="users", operation_id="getUser")
        metadata = builder.route_metadata
        assert metadata.summary == "Get user"
        assert metadata.tags == ("users",)
        assert metadata.operation_id == "getUser"

    def test_update_route_keeps_other_fields(self):
        builder = route(summary="Old", description="Kept").update_route(summary="New")
        assert builder.route_metadata.summary == "New"
        assert builder.route_metadata.description == "Kept"

    def test_tags_append_and_dedupe(self):
        builder = route(tags=["a"]).tags("b", "a")
        assert builder.route_metadata.tags == ("a", "b")

    def test_deprecated(self):
        assert RouteBuilder().deprecated().route_metadata.deprecated is True

    def test_method_normalized(self):
        assert RouteBuilder().method("post").route_method == "POST"

    def test_unknown_method_rejected(self):
        with pytest.raises(ContractConfigError):
            RouteBuilder().method("FETCH")

    def test_relative_path_rejected(self):
        with pytest.raises(ContractConfigError):
            RouteBuilder().path("users")


class TestInput:
    """Plain and detailed inputs."""

    def test_plain_model(self):
        contract = RouteBuilder().path("/").input(Greeting).build()
        assert contract.input.schema is Greeting
        assert contract.validate_input({"message": "hi"}).message == "hi"

    def test_no_input(self):
        contract = RouteBuilder().path("/").input(None).build()
        assert contract.input.is_empty
        assert contract.validate_input({"anything": 1}) is None

    def test_params_set_path(self, user_model):
        contract = (
            route(operation_id="getUser")
            .input(lambda b: b.params("/", param("id", UUID)))
            .output(user_model)
            .build()
        )
        assert contract.path == "/{id}"
        assert contract.path_parameters == ["id"]
        assert contract.method == "GET"
        assert contract.input.params.__name__ == "GetUserParams"
        parsed = contract.validate_input({"params": {"id": str(uuid4())}})
        assert isinstance(parsed.params.id, UUID)
        with pytest.raises(ValidationError):
            contract.validate_input({"params": {"id": "not-a-uuid"}})

    def test_multi_segment_path(self):
        builder = RouteBuilder().input(
            lambda b: b.params("/orgs/", param("org"), "/members/", param("member", int))
        )
        assert builder.route_path == "/orgs/{org}/members/{member}"

    def test_duplicate_param_rejected(self):
        with pytest.raises(ContractConfigError):
            RouteBuilder().input(lambda b: b.params("/", param("id"), "/", param("id")))

    def test_bad_segment_rejected(self):
        with pytest.raises(ContractConfigError):
            RouteBuilder().input(lambda b: b.params("/", 42))

    def test_body_transforms_from_entity(self, user_model):
        builder = RouteBuilder(entity=user_model).method("PATCH").input(
            lambda b: b.params("/", param("id", UUID)).omit("id", "createdAt", "updatedAt").partial()
        )
        spec = builder.input_spec
        assert "id" not in spec.body.model_fields
        assert spec.body.model_validate({}).name is None
        assert spec.params is not None

    def test_pick_and_extend(self, user_model):
        spec = (
            RouteBuilder(entity=user_model)
            .input(lambda b: b.pick("email").extend(password=str))
            .input_spec
        )
        assert list(spec.body.model_fields) == ["email", "password"]

    def test_transform_without_source_rejected(self):
        with pytest.raises(ContractConfigError):
            RouteBuilder().input(lambda b: b.partial())

    def test_callback_returning_model_is_plain(self):
        spec = RouteBuilder().input(lambda b: Greeting).input_spec
        assert spec.schema is Greeting
        assert not spec.is_detailed

    def test_callback_bad_return_rejected(self):
        with pytest.raises(ContractConfigError):
            RouteBuilder().input(lambda b: "nope")

    def test_non_callable_rejected(self):
        with pytest.raises(ContractConfigError):
            RouteBuilder().input(42)

    def test_plain_schema_seeds_callback_body(self):
        """A plain input is offered as the body to the next callback."""
        spec = RouteBuilder().input(Greeting).input(lambda b: b.streamed()).input_spec
        assert spec.body is Greeting
        assert spec.streamed

    def test_query_and_headers(self):
        class Filters(BaseModel):
            q: Optional[str] = None

        class Auth(BaseModel):
            authorization: str

        contract = (
            RouteBuilder()
            .path("/search")
            .input(lambda b: b.query(Filters).headers(Auth))
            .build()
        )
        parsed = contract.validate_input({"headers": {"authorization": "Bearer x"}})
        assert parsed.query is None
        with pytest.raises(ValidationError):
            contract.validate_input({})

    def test_input_builder_is_immutable(self):
        base = InputBuilder()
        with_body = base.body(Greeting)
        assert base.spec().body is None
        assert with_body.spec().body is Greeting


class TestOutput:
    """Outputs, status and streaming."""

    def test_model_output(self):
        contract = RouteBuilder().path("/").output(Greeting).build()
        assert contract.output_schema is Greeting
        assert contract.validate_output({"message": "x"}).message == "x"

    def test_annotation_output(self, user_model, user_payload):
        contract = RouteBuilder().path("/").output(list[user_model]).build()
        assert len(contract.validate_output([user_payload(), user_payload()])) == 2
        with pytest.raises(ValidationError):
            contract.validate_output([user_payload(age=-1)])

    def test_status_and_stream_survive_body_change(self):
        builder = RouteBuilder().path("/").output(lambda b: b.status(201).streamed()).output(Greeting)
        assert builder.output_spec.status == 201
        assert builder.output_spec.streamed
        assert builder.output_spec.body is Greeting

    def test_status_shortcut(self):
        assert RouteBuilder().status(204).output_spec.status == 204

    def test_invalid_status_rejected(self):
        with pytest.raises(ContractConfigError):
            RouteBuilder().status(42)

    def test_callback_may_return_schema(self):
        spec = RouteBuilder().output(lambda b: Greeting).output_spec
        assert spec.body is Greeting


class TestErrors:
    """Error definitions."""

    def test_merge_by_code(self):
        builder = RouteBuilder().errors(CommonErrors.NOT_FOUND).errors(
            error("NOT_FOUND").status(404).message("No such user"),
            error("EMAIL_TAKEN").status(409).data(Greeting),
        )
        contract = builder.path("/").build()
        assert set(contract.errors) == {"NOT_FOUND", "EMAIL_TAKEN"}
        assert contract.errors["NOT_FOUND"].message == "No such user"
        assert contract.errors["EMAIL_TAKEN"].data is Greeting

    def test_callback_form(self):
        builder = RouteBuilder().errors(lambda e: [e("GONE").status(410)])
        assert builder.path("/").build().errors["GONE"].status == 410

    def test_missing_code_rejected(self):
        with pytest.raises(ContractConfigError):
            RouteBuilder().errors(error().status(400))

    def test_common_errors(self):
        assert CommonErrors.NOT_FOUND.status == 404
        assert CommonErrors.CONFLICT.status == 409
        assert CommonErrors.INTERNAL.code == "INTERNAL_SERVER_ERROR"

    def test_contract_errors_read_only(self):
        contract = RouteBuilder().path("/").errors(CommonErrors.FORBIDDEN).build()
        with pytest.raises(TypeError):
            contract.errors["X"] = CommonErrors.CONFLICT


class TestLifecycle:
    """Branching and finalization."""

    def test_branches_are_independent(self):
        base = route(tags=["users"]).method("GET")
        first = base.path("/a").summary("A")
        second = base.path("/b").deprecated()

        assert base.route_path is None
        assert first.route_metadata.deprecated is False
        assert second.route_metadata.summary is None
        assert first.build().path == "/a"
        assert second.build().path == "/b"

    def test_mutation_after_build_raises(self):
        builder = RouteBuilder().path("/")
        builder.build()
        with pytest.raises(BuilderFinalizedError):
            builder.summary("late")
        with pytest.raises(BuilderFinalizedError):
            builder.output(Greeting)

    def test_build_is_idempotent(self):
        builder = RouteBuilder().path("/")
        assert builder.build() is builder.build()
        assert builder.is_built

    def test_sibling_of_built_builder_still_mutable(self):
        base = RouteBuilder().path("/")
        sibling = base.summary("x")
        base.build()
        assert sibling.summary("y").route_metadata.summary == "y"

    def test_missing_path_rejected(self):
        with pytest.raises(ContractConfigError):
            RouteBuilder().method("GET").build()

    def test_params_must_match_path(self):
        builder = RouteBuilder().input(lambda b: b.params("/", param("id"))).path("/items")
        with pytest.raises(ContractConfigError):
            builder.build()


class TestProbes:
    """Health, readiness and liveness routes."""

    def test_health(self):
        contract = RouteBuilder.health().build()
        assert (contract.method, contract.path) == ("GET", "/health")
        contract.validate_output({"status": "healthy", "timestamp": "2024-01-01T00:00:00Z"})
        assert "details" not in contract.output_schema.model_fields
        with pytest.raises(ValidationError):
            contract.validate_output({"status": "sick", "timestamp": "2024-01-01T00:00:00Z"})

    def test_health_with_details(self):
        contract = RouteBuilder.health("/healthz", include_details=True).build()
        assert contract.path == "/healthz"
        assert "details" in contract.output_schema.model_fields

    def test_ready_and_live(self):
        assert RouteBuilder.ready().build().validate_output({"ready": True}).ready is True
        with pytest.raises(ValidationError):
            RouteBuilder.live().build().validate_output({"alive": False})
