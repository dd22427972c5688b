"""
Tests for domain error kinds and their HTTP mapping
"""
from app.domain.errors import (
    DomainRuleError, NotFoundError, StorageError, ValidationError, error_response,
)


class TestErrorResponse:
    def test_validation_error_is_400_with_field(self):
        status, body = error_response(ValidationError("amount: bad", field="amount"))
        assert status == 400
        assert body == {"error": "Validation Error", "message": "amount: bad", "field": "amount"}

    def test_not_found_is_404(self):
        status, body = error_response(NotFoundError.for_entity("Task", "abc", code="task_not_found"))
        assert status == 404
        assert body["message"] == "Task with id abc not found"
        assert body["code"] == "task_not_found"

    def test_domain_rule_is_422(self):
        status, body = error_response(DomainRuleError("no default", code="no_default_contract"))
        assert status == 422
        assert body["code"] == "no_default_contract"

    def test_storage_error_is_500(self):
        status, _ = error_response(StorageError("db down", operation="select"))
        assert status == 500

    def test_unknown_exception_does_not_leak_message(self):
        status, body = error_response(RuntimeError("secret detail"))
        assert status == 500
        assert "secret" not in body["message"]


class TestWithContext:
    def test_keeps_kind_and_adds_step(self):
        original = StorageError("connection lost", operation="select")
        wrapped = original.with_context("task_summary", "Failed to get dashboard overview")

        assert isinstance(wrapped, StorageError)
        assert wrapped.step == "task_summary"
        assert wrapped.message == "Failed to get dashboard overview (task_summary): connection lost"
        assert wrapped.operation == "select"
        assert wrapped.__cause__ is original
        assert original.step is None
        assert original.message == "connection lost"
