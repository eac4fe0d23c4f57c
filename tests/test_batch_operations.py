"""
Tests for batch and bulk data operations.
"""

from uuid import uuid4

import pytest
from pydantic import ValidationError

from crud_contracts.utils.exceptions import BatchSizeError, ContractConfigError, UnknownFieldError


def ids(count):
    return [str(uuid4()) for _ in range(count)]


class TestBatchBounds:
    """Size bounds of batch bodies."""

    def test_batch_delete_bounds(self, users):
        contract = users.batch_delete(max_batch_size=2).build()
        contract.validate_input({"body": {"ids": ids(1)}})
        contract.validate_input({"body": {"ids": ids(2)}})
        with pytest.raises(ValidationError):
            contract.validate_input({"body": {"ids": ids(3)}})
        with pytest.raises(ValidationError):
            contract.validate_input({"body": {"ids": []}})

    def test_ids_keep_entity_type(self, users):
        contract = users.batch_read(max_batch_size=5).build()
        with pytest.raises(ValidationError):
            contract.validate_input({"body": {"ids": ["not-a-uuid"]}})

    def test_default_bound_from_settings(self, users, engine_config):
        engine_config.default_max_batch_size = 3
        contract = users.batch_delete().build()
        contract.validate_input({"body": {"ids": ids(3)}})
        with pytest.raises(ValidationError):
            contract.validate_input({"body": {"ids": ids(4)}})
        assert "3" in contract.description

    @pytest.mark.parametrize("size", [0, -5])
    def test_non_positive_bound_rejected(self, users, size):
        with pytest.raises(BatchSizeError):
            users.batch_create(max_batch_size=size)


class TestBatchCreate:
    """batch_create()"""

    def test_route(self, users):
        contract = users.batch_create().build()
        assert (contract.method, contract.path, contract.output.status) == ("POST", "/batch", 201)
        assert contract.input.body.__name__ == "BatchCreateUserBody"

    def test_items_are_create_bodies(self, users):
        contract = users.batch_create(max_batch_size=2).build()
        item = {"name": "Ada", "email": "ada@example.com", "age": 3}
        parsed = contract.validate_input({"body": {"items": [item, item]}})
        assert len(parsed.body.items) == 2
        assert "id" not in type(parsed.body.items[0]).model_fields
        with pytest.raises(ValidationError):
            contract.validate_input({"body": {"items": [item, item, item]}})

    def test_output_reports_failures_by_index(self, users, user_payload):
        contract = users.batch_create().build()
        parsed = contract.validate_output({
            "created": [user_payload()],
            "failed": [{"index": 1, "error": "duplicate email"}],
        })
        assert parsed.failed[0].index == 1
        assert contract.validate_output({"created": []}).failed == []


class TestBatchUpdateAndUpsert:
    """batch_update(), batch_upsert() and batch_soft_delete()"""

    def test_batch_update(self, users, user_payload):
        contract = users.batch_update(max_batch_size=1).build()
        assert (contract.method, contract.path) == ("PATCH", "/batch")
        contract.validate_input({"body": {"items": [user_payload()]}})
        with pytest.raises(ValidationError):
            contract.validate_input({"body": {"items": [user_payload(), user_payload()]}})

    def test_batch_upsert(self, users):
        contract = users.batch_upsert(unique_field="email").build()
        assert (contract.method, contract.path) == ("PUT", "/batch/upsert")
        assert "email" in contract.description
        contract.validate_output({"created": [], "updated": []})

    def test_batch_upsert_unknown_unique_field(self, users):
        with pytest.raises(UnknownFieldError):
            users.batch_upsert(unique_field="phone")

    def test_batch_soft_delete(self, documents):
        contract = documents.batch_soft_delete(max_batch_size=2).build()
        assert (contract.method, contract.path) == ("DELETE", "/batch/soft")
        contract.validate_input({"body": {"ids": [1, 2]}})
        with pytest.raises(ValidationError):
            contract.validate_input({"body": {"ids": [0]}})


class TestAggregate:
    """aggregate()"""

    def test_ungrouped(self, users):
        contract = users.aggregate(functions=["count", "avg"]).build()
        assert contract.path == "/aggregate"
        assert contract.validate_output({"count": 3, "avg": 1.5}).avg == 1.5
        with pytest.raises(ValidationError):
            contract.validate_output({"count": 3})

    def test_grouped(self, users):
        contract = users.aggregate(functions=["sum"], group_by=["role"]).build()
        contract.validate_output({"groups": [{"role": "admin", "sum": 10}]})

    def test_unknown_function(self, users):
        with pytest.raises(ContractConfigError):
            users.aggregate(functions=["median"])

    def test_unknown_group_field(self, users):
        with pytest.raises(UnknownFieldError):
            users.aggregate(group_by=["team"])

    def test_custom_path(self, users):
        assert users.aggregate(path="/stats").build().path == "/stats"


class TestExportImport:
    """export() and import_()"""

    def test_export_formats(self, users):
        contract = users.export(formats=["csv"]).build()
        contract.validate_input({"body": {"format": "csv"}})
        with pytest.raises(ValidationError):
            contract.validate_input({"body": {"format": "xml"}})
        assert contract.description == "Export users as csv"

    def test_unsupported_format(self, users):
        with pytest.raises(ContractConfigError):
            users.export(formats=["pdf"])

    def test_import(self, users):
        contract = users.import_(max_records=2).build()
        assert contract.path == "/import"
        assert "2" in contract.description
        contract.validate_input({"body": {"format": "json", "data": "[]", "options": {"dryRun": True}}})
        errors = [{"row": i, "error": "bad"} for i in range(3)]
        with pytest.raises(ValidationError):
            contract.validate_output({"success": False, "imported": 0, "failed": 3, "errors": errors})

    def test_import_needs_positive_limit(self, users):
        with pytest.raises(ContractConfigError):
            users.import_(max_records=0)

    def test_export_custom_path(self, users):
        contract = users.export(path="/downloads").build()
        assert (contract.method, contract.path) == ("POST", "/downloads")
        assert users.export().build().path == "/export"

    def test_import_custom_path(self, users):
        contract = users.import_(path="/uploads").build()
        assert (contract.method, contract.path) == ("POST", "/uploads")
        contract.validate_input({"body": {"format": "csv", "data": "a,b"}})


class TestServiceOperations:
    """health_check() and metrics()"""

    def test_health_check(self, users):
        contract = users.health_check().build()
        assert (contract.method, contract.path) == ("GET", "/health")
        contract.validate_output({
            "status": "degraded",
            "uptime": 10,
            "timestamp": "2024-01-01T00:00:00Z",
            "dependencies": {"db": {"status": "healthy", "latency": 1.2}},
        })

    def test_metrics_json(self, users):
        contract = users.metrics().build()
        contract.validate_output({"counters": {"requests": 3}})

    def test_metrics_prometheus(self, users):
        contract = users.metrics(format="prometheus").build()
        assert contract.validate_output("requests_total 3") == "requests_total 3"
        assert contract.description.endswith("in prometheus format")

    def test_metrics_unknown_format(self, users):
        with pytest.raises(ContractConfigError):
            users.metrics(format="xml")

    def test_metrics_custom_path(self, users):
        contract = users.metrics(path="/stats").build()
        assert (contract.method, contract.path) == ("GET", "/stats")
        contract.validate_output({"gauges": {"connections": 2}})
