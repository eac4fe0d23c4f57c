"""
Tests for single-record, list and lifecycle standard operations.
"""

from datetime import datetime
from uuid import uuid4

import pytest
from pydantic import BaseModel, ValidationError

from crud_contracts.operations import (
    OPERATIONS,
    StandardOperations,
    create_list_options,
    standard_operations,
)
from crud_contracts.query import create_pagination_config, numeric_field
from crud_contracts.routes import RouteBuilder
from crud_contracts.utils.exceptions import (
    BuilderFinalizedError,
    ContractConfigError,
    DimensionCollisionError,
    UnknownFieldError,
)


def params(**values):
    return {"params": values}


class TestRead:
    """read()"""

    def test_method_and_path(self, users):
        contract = users.read().build()
        assert (contract.method, contract.path) == ("GET", "/{id}")
        assert contract.metadata.operation_id == "readUser"
        assert contract.tags == ("user",)
        assert contract.summary == "Get user by ID"

    def test_output_is_entity(self, users, user_payload):
        contract = users.read().build()
        assert contract.validate_output(user_payload()).age == 36
        with pytest.raises(ValidationError):
            contract.validate_output(user_payload(age=-1))

    def test_id_param_uses_entity_type(self, users):
        contract = users.read().build()
        contract.validate_input(params(id=str(uuid4())))
        with pytest.raises(ValidationError):
            contract.validate_input(params(id="42"))

    def test_id_schema_override(self, user_model):
        contract = StandardOperations(user_model, "user", id_schema=int).read().build()
        assert contract.validate_input(params(id="42")).params.id == 42


class TestCreate:
    """create()"""

    def test_body_omits_id_and_timestamps(self, users):
        contract = users.create().build()
        body = contract.input.body
        assert not {"id", "createdAt", "updatedAt"} & set(body.model_fields)
        assert body.__name__ == "CreateUserBody"

    def test_status_and_path(self, users):
        contract = users.create().build()
        assert (contract.method, contract.path, contract.output.status) == ("POST", "/", 201)

    def test_body_validates(self, users):
        contract = users.create().build()
        contract.validate_input({"body": {"name": "Ada", "email": "ada@example.com", "age": 3}})
        with pytest.raises(ValidationError):
            contract.validate_input({"body": {"name": "Ada", "email": "not-an-email", "age": 3}})

    def test_extra_omissions(self, users):
        body = users.create(omit_fields=["role"]).build().input.body
        assert "role" not in body.model_fields

    def test_explicit_body(self, users):
        class Signup(BaseModel):
            email: str

        assert users.create(body=Signup).build().input.body is Signup

    def test_soft_delete_marker_omitted(self, documents):
        body = documents.create().build().input.body
        assert "deletedAt" not in body.model_fields
        assert "id" not in body.model_fields


class TestUpdateAndPatch:
    """update() and patch()"""

    def test_update_replaces_whole_entity(self, users, user_model):
        contract = users.update().build()
        assert (contract.method, contract.path) == ("PUT", "/{id}")
        assert contract.input.body is user_model

    def test_update_with_omissions_keeps_id(self, users):
        body = users.update(omit_fields=["role"]).build().input.body
        assert "id" in body.model_fields
        assert not {"createdAt", "updatedAt", "role"} & set(body.model_fields)

    def test_patch_accepts_empty_body(self, users):
        contract = users.patch().build()
        parsed = contract.validate_input({"params": {"id": str(uuid4())}, "body": {}})
        assert parsed.body.name is None

    def test_patch_rejects_invalid_values(self, users):
        contract = users.patch().build()
        with pytest.raises(ValidationError):
            contract.validate_input({"params": {"id": str(uuid4())}, "body": {"age": -1}})

    def test_patch_body_never_has_id(self, users):
        body = users.patch().build().input.body
        assert "id" not in body.model_fields
        assert body.__name__ == "PatchUserBody"


class TestDeleteAndExists:
    """delete(), exists(), soft delete and lifecycle routes."""

    def test_delete(self, users):
        contract = users.delete().build()
        assert (contract.method, contract.path) == ("DELETE", "/{id}")
        assert contract.validate_output({"success": True}).message is None

    def test_exists(self, users):
        contract = users.exists().build()
        assert contract.path == "/{id}/exists"
        assert contract.validate_output({"exists": False}).exists is False

    def test_soft_delete_suffix(self, documents):
        assert documents.soft_delete().build().path == "/{id}/soft"
        assert documents.soft_delete("/trash").build().path == "/{id}/trash"

    def test_document_id_keeps_constraints(self, documents):
        contract = documents.read().build()
        assert contract.validate_input(params(id="5")).params.id == 5
        with pytest.raises(ValidationError):
            contract.validate_input(params(id="0"))

    def test_archive_restore_history(self, documents):
        assert documents.archive().build().path == "/{id}/archive"
        assert documents.restore().build().method == "POST"
        history = documents.history().build()
        assert history.path == "/{id}/history"
        parsed = history.validate_input({"params": {"id": 1}, "query": {"limit": 10}})
        assert parsed.query.limit == 10
        with pytest.raises(ValidationError):
            history.validate_input({"params": {"id": 1}, "query": {"limit": 1000}})
        history.validate_output({
            "items": [{
                "id": "h1",
                "entityId": "1",
                "action": "updated",
                "changes": {"title": {"old": "a", "new": "b"}},
                "timestamp": "2024-01-01T00:00:00Z",
            }],
            "hasMore": False,
        })

    def test_clone(self, users):
        contract = users.clone().build()
        assert (contract.path, contract.output.status) == ("/{id}/clone", 201)
        contract.validate_input({"params": {"id": str(uuid4())}, "body": {"overrides": {"x": 1}}})

    def test_clone_with_overrides_restricted(self, users):
        contract = users.clone_with_overrides(["name"]).build()
        body = {"params": {"id": str(uuid4())}, "body": {"overrides": {"name": "Copy"}}}
        assert contract.validate_input(body).body.overrides.name == "Copy"
        with pytest.raises(ValidationError):
            contract.validate_input({"params": {"id": str(uuid4())}, "body": {"overrides": {"name": ""}}})


class TestCheckAndDistinct:
    """check() and distinct()"""

    def test_check_input_is_exactly_the_field(self, users):
        contract = users.check("email").build()
        assert contract.path == "/check/email"
        assert list(contract.input.schema.model_fields) == ["email"]
        contract.validate_input({"email": "ada@example.com"})
        with pytest.raises(ValidationError):
            contract.validate_input({"email": "nope"})
        with pytest.raises(ValidationError):
            contract.validate_input({})
        with pytest.raises(ValidationError):
            contract.validate_input({"email": "ada@example.com", "name": "Ada"})

    def test_check_output_is_exactly_exists(self, users):
        contract = users.check("email").build()
        assert list(contract.output_schema.model_fields) == ["exists"]
        with pytest.raises(ValidationError):
            contract.validate_output({"exists": True, "id": "x"})

    def test_check_field_with_default_still_required(self, users):
        contract = users.check("role").build()
        with pytest.raises(ValidationError):
            contract.validate_input({})

    def test_check_unknown_field(self, users):
        with pytest.raises(UnknownFieldError):
            users.check("phone")

    def test_check_custom_schema(self, users):
        contract = users.check("name", field_schema=int).build()
        assert contract.validate_input({"name": "7"}).name == 7

    def test_distinct(self, users):
        contract = users.distinct("role").build()
        assert contract.path == "/distinct/role"
        assert contract.summary == "Get distinct role values"
        contract.validate_output({"values": ["admin"], "total": 1})

    def test_distinct_unknown_field(self, users):
        with pytest.raises(UnknownFieldError):
            users.distinct("phone")


class TestUpsertAndValidate:
    """upsert() and validate()"""

    def test_upsert(self, users, user_payload):
        contract = users.upsert().build()
        assert (contract.method, contract.path) == ("PUT", "/upsert")
        contract.validate_output({"item": user_payload(), "created": True})
        assert contract.description == "Create or update user by id"

    def test_upsert_unique_field_checked(self, users):
        assert users.upsert(unique_field="email").build().description.endswith("by email")
        with pytest.raises(UnknownFieldError):
            users.upsert(unique_field="phone")

    def test_validate(self, users):
        contract = users.validate().build()
        assert contract.path == "/validate"
        assert "id" not in contract.input.body.model_fields
        contract.validate_output({"valid": False, "errors": [{"field": "age", "message": "too low"}]})


class TestList:
    """list(), count() and search()"""

    def test_bare_list(self, users, user_payload):
        contract = users.list().build()
        assert (contract.method, contract.path) == ("GET", "/")
        assert contract.input.is_empty
        contract.validate_output({"data": []})
        contract.validate_output({"data": [user_payload()]})
        with pytest.raises(ValidationError):
            contract.validate_output({})
        with pytest.raises(ValidationError):
            contract.validate_output({"data": [user_payload(age=-1)]})

    def test_paginated_list(self, users):
        contract = users.list({"pagination": create_pagination_config(default_limit=20, max_limit=100)}).build()
        assert contract.validate_input({}).query is None
        assert contract.validate_input({"query": {}}).query.limit == 20
        assert contract.validate_input({"query": {"limit": 50}}).query.limit == 50
        with pytest.raises(ValidationError):
            contract.validate_input({"query": {"limit": 200}})

    def test_paginated_list_output_has_meta(self, users):
        contract = users.list({"pagination": {"default_limit": 20, "max_limit": 100}}).build()
        contract.validate_output({"data": [], "meta": {"total": 0, "limit": 20, "offset": 0, "hasMore": False}})
        with pytest.raises(ValidationError):
            contract.validate_output({"data": []})

    def test_list_options_helper(self, users):
        options = create_list_options(
            sortable_fields=["name", "age"],
            default_sort_field="name",
            filterable_fields={"age": numeric_field()},
            searchable_fields=["name"],
        )
        contract = users.list(options).build()
        query = contract.validate_input({"query": {
            "page": 2,
            "sortBy": "age",
            "filter": {"age": {"operator": "gt", "value": 18}},
            "query": "ada",
        }}).query
        assert query.page == 2
        assert query.filter.age.value == 18.0

    def test_list_rejects_unknown_sort_field(self, users):
        with pytest.raises(UnknownFieldError):
            users.list({"sorting": {"fields": ["nickname"]}})

    def test_list_drops_unknown_field_when_loose(self, users, loose_fields):
        contract = users.list({"sorting": {"fields": ["name", "nickname"]}}).build()
        with pytest.raises(ValidationError):
            contract.validate_input({"query": {"sortBy": "nickname"}})
        assert contract.validate_input({"query": {"sortBy": "name"}}).query.sortBy == "name"

    def test_count(self, users):
        contract = users.count().build()
        assert contract.path == "/count"
        with pytest.raises(ValidationError):
            contract.validate_output({"count": -1})

    def test_search(self, users, engine_config):
        engine_config.search_page_limit = 5
        contract = users.search(["name", "email"]).build()
        assert contract.path == "/search"
        query = contract.validate_input({"query": {"query": "ada", "searchFields": ["email"]}}).query
        assert query.limit == 5
        with pytest.raises(ValidationError):
            contract.validate_input({"query": {"searchFields": ["age"]}})

    def test_search_custom_pagination(self, users):
        contract = users.search(["name"], pagination={"default_limit": 3, "max_limit": 9}).build()
        with pytest.raises(ValidationError):
            contract.validate_input({"query": {"limit": 10}})

    def test_search_without_fields_is_paginated_only(self, users, engine_config):
        engine_config.search_page_limit = 7
        contract = users.search().build()
        query = contract.validate_input({"query": {}}).query
        assert query.limit == 7
        assert "query" not in type(query).model_fields
        with pytest.raises(ValidationError):
            contract.validate_input({"query": {"limit": 101}})
        contract.validate_output({
            "data": [],
            "meta": {"total": 0, "limit": 7, "offset": 0, "hasMore": False},
        })


class TestListFrom:
    """Merged list routes."""

    def test_list_from_base_route(self, user_model):
        class Scope(BaseModel):
            teamId: str

        base = RouteBuilder(method="GET", path="/teams/members").operation_id("listMembers").input(Scope).output(user_model)
        contract = StandardOperations.list_from(base, {"pagination": {"default_limit": 10}}).build()
        parsed = contract.validate_input({"teamId": "t1", "limit": 5})
        assert (parsed.teamId, parsed.limit) == ("t1", 5)
        assert contract.input.schema.__name__ == "ListMembersListInput"
        assert "meta" in contract.output_schema.model_fields

    def test_list_from_collision(self, user_model):
        class Window(BaseModel):
            limit: int

        base = RouteBuilder(path="/report").input(Window).output(user_model)
        with pytest.raises(DimensionCollisionError):
            StandardOperations.list_from(base, {"pagination": {}})

    def test_list_from_detailed_input_rejected(self, users):
        with pytest.raises(ContractConfigError):
            StandardOperations.list_from(users.read())

    def test_list_from_schemas_mapping(self, user_model):
        contract = StandardOperations.list_from_schemas(
            {"method": "GET", "path": "/people", "summary": "People"},
            None,
            user_model,
            {"sorting": {"fields": ["name"]}},
        ).build()
        assert contract.path == "/people"
        assert contract.validate_input({"sortBy": "name"}).sortBy == "name"

    def test_list_from_schemas_needs_item(self):
        with pytest.raises(ContractConfigError):
            StandardOperations.list_from_schemas({"path": "/x"}, None, None)


class TestConventions:
    """Shared conventions of the factory."""

    def test_builders_are_refinable(self, users):
        contract = users.read().summary("Fetch a user").tags("admin").build()
        assert contract.summary == "Fetch a user"
        assert contract.tags == ("user", "admin")

    def test_factory_calls_are_independent(self, users):
        first = users.read()
        first.build()
        with pytest.raises(BuilderFinalizedError):
            first.summary("late")
        assert users.read().summary("fresh").build().summary == "fresh"

    def test_every_operation_has_texts(self):
        for spec in OPERATIONS.values():
            assert spec.summary and spec.description

    def test_multi_word_entity_names(self, user_model):
        ops = standard_operations(user_model, "team_member")
        contract = ops.create().build()
        assert contract.metadata.operation_id == "createTeamMember"
        assert contract.input.body.__name__ == "CreateTeamMemberBody"

    def test_repr(self, users):
        assert repr(users) == "StandardOperations(User, 'user')"


class Account(BaseModel):
    uuid: str
    handle: str
    createdAt: datetime
    updatedAt: datetime


class TestCustomIdentifier:
    """Entities whose identifier is not called ``id``."""

    @pytest.fixture
    def accounts(self):
        return StandardOperations(Account, "account", id_field="uuid")

    def test_read_path_uses_identifier(self, accounts):
        contract = accounts.read().build()
        assert contract.path == "/{uuid}"
        assert contract.validate_input(params(uuid="a-1")).params.uuid == "a-1"

    def test_create_omits_identifier(self, accounts):
        body = accounts.create().build().input.body
        assert list(body.model_fields) == ["handle"]

    def test_upsert_defaults_to_identifier(self, accounts):
        contract = accounts.upsert().build()
        assert contract.description == "Create or update account by uuid"

    def test_batch_upsert_defaults_to_identifier(self, accounts):
        contract = accounts.batch_upsert().build()
        assert contract.description.endswith("by uuid")

    def test_all_contracts(self, accounts):
        contracts = accounts.all_contracts()
        assert contracts["read"].path == "/{uuid}"
        assert contracts["batchDelete"].validate_input({"body": {"ids": ["a-1"]}})
