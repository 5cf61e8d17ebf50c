"""
Unit tests for the exception system.

Covers the layer exceptions, the factory helpers and the rebuild of typed
errors from JSON error responses.
"""

import pytest

from catalog_core.exceptions import (
    BaseError,
    ErrorCode,
    ForbiddenError,
    NotFoundError,
    TransportError,
    ValidationError,
    clear_correlation_id,
    duplicate,
    error_from_response,
    get_correlation_id,
    not_found,
    permission_denied,
    set_correlation_id,
    validation_failed,
)


class TestBaseError:
    """Test BaseError class."""

    def test_basic_error_creation(self):
        error = BaseError("Test error message")

        assert error.message == "Test error message"
        assert error.error_code == ErrorCode.INTERNAL_ERROR
        assert error.status_code == 500
        assert error.cause is None
        assert error.context["error_id"] == error.error_id

    def test_error_with_cause(self):
        original_error = ValueError("Original error")
        error = BaseError("Wrapped error", cause=original_error)

        assert error.context["cause"]["type"] == "ValueError"
        assert error.context["cause"]["message"] == "Original error"

    def test_error_with_correlation_id(self):
        set_correlation_id("corr-123")
        try:
            error = BaseError("Correlated")
            assert error.context["correlation_id"] == "corr-123"
            assert error.to_dict()["error"]["correlation_id"] == "corr-123"
        finally:
            clear_correlation_id()

        assert get_correlation_id() is None

    def test_to_dict_hides_internal_context(self):
        error = BaseError("Boom", cause=RuntimeError("inner"), tenant_id="tenant-a")

        body = error.to_dict()["error"]
        assert body["code"] == ErrorCode.INTERNAL_ERROR.value
        assert body["context"] == {"tenant_id": "tenant-a"}
        assert "cause" not in body

    def test_add_context(self):
        error = BaseError("Fluent").add_context(kind="amenity")

        assert error.context["kind"] == "amenity"


class TestLayerErrors:
    @pytest.mark.parametrize(
        "error,status_code,error_code",
        [
            (ValidationError("bad"), 400, ErrorCode.VALIDATION_FAILED),
            (ForbiddenError("no"), 403, ErrorCode.PERMISSION_DENIED),
            (NotFoundError("gone"), 404, ErrorCode.NOT_FOUND),
            (TransportError("down"), 502, ErrorCode.CONNECTION_ERROR),
        ],
    )
    def test_status_and_code(self, error, status_code, error_code):
        assert error.status_code == status_code
        assert error.error_code == error_code

    def test_status_override_is_per_instance(self):
        timeout = TransportError("slow", error_code=ErrorCode.TIMEOUT_ERROR, status_code=504)

        assert timeout.status_code == 504
        assert TransportError("down").status_code == 502

    def test_cause_is_summarised(self):
        error = NotFoundError("gone", cause=KeyError("abc"), kind="amenity")

        assert error.context["cause"] == {"type": "KeyError", "message": "'abc'"}
        assert "cause" not in error.to_dict()["error"]["context"]

    def test_validation_error_records_field(self):
        error = ValidationError("Name is required", field="name", error_code=ErrorCode.MISSING_REQUIRED)

        assert error.context["field"] == "name"


class TestFactories:
    def test_not_found(self):
        error = not_found("CatalogItem", item_id="abc")

        assert isinstance(error, NotFoundError)
        assert error.message == "CatalogItem not found: item_id=abc"
        assert error.context["resource_type"] == "CatalogItem"

    def test_duplicate(self):
        error = duplicate("CatalogItem", code="wifi", kind="amenity")

        assert isinstance(error, ValidationError)
        assert error.error_code == ErrorCode.DUPLICATE
        assert error.context["field"] == "code"
        assert "code=wifi" in error.message

    def test_validation_failed(self):
        error = validation_failed("color", 12, "must be a string")

        assert error.context["value"] == "12"
        assert error.context["reason"] == "must be a string"

    def test_permission_denied(self):
        error = permission_denied("delete", "global catalog item", item_id="x")

        assert isinstance(error, ForbiddenError)
        assert error.message == "Permission denied: delete on global catalog item"
        assert error.context["item_id"] == "x"


class TestErrorFromResponse:
    """Typed errors survive the trip through the JSON contract."""

    @pytest.mark.parametrize(
        "original,expected_class",
        [
            (duplicate("CatalogItem", code="wifi"), ValidationError),
            (permission_denied("update", "global catalog item"), ForbiddenError),
            (not_found("CatalogItem", item_id="1"), NotFoundError),
        ],
    )
    def test_rebuilds_error_class(self, original, expected_class):
        rebuilt = error_from_response(original.status_code, original.to_dict())

        assert isinstance(rebuilt, expected_class)
        assert rebuilt.message == original.message
        assert rebuilt.error_code == original.error_code
        assert rebuilt.context["remote_error_id"] == original.error_id

    def test_validation_field_is_restored(self):
        original = ValidationError("Name is required", field="name", error_code=ErrorCode.MISSING_REQUIRED)

        rebuilt = error_from_response(400, original.to_dict())

        assert rebuilt.context["field"] == "name"
        assert rebuilt.error_code == ErrorCode.MISSING_REQUIRED

    def test_falls_back_to_status_code(self):
        rebuilt = error_from_response(404, {"error": "No such item"})

        assert isinstance(rebuilt, NotFoundError)
        assert rebuilt.message == "No such item"

    @pytest.mark.parametrize("body", [None, "gateway timeout", {"unexpected": True}])
    def test_server_errors_become_transport_errors(self, body):
        rebuilt = error_from_response(503, body)

        assert isinstance(rebuilt, TransportError)
        assert rebuilt.error_code == ErrorCode.EXTERNAL_API_ERROR
        assert rebuilt.context["remote_status"] == 503
        assert "503" in rebuilt.message
