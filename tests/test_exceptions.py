import logging

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import ProtectedError
from django.http import Http404
from rest_framework.exceptions import NotFound

from materials.exceptions import (
    ConflictError,
    InsufficientStockError,
    InternalError,
    NotFoundError,
    ValidationError,
    custom_exception_handler,
)


def test_service_errors_map_to_status_codes():
    cases = [
        (ValidationError("bad"), 400, "validation_error"),
        (NotFoundError("gone"), 404, "not_found"),
        (ConflictError("no"), 409, "conflict"),
        (InsufficientStockError("short"), 409, "insufficient_stock"),
        (InternalError(), 500, "internal_error"),
    ]
    for exc, status, code in cases:
        response = custom_exception_handler(exc, {})
        assert response.status_code == status
        assert response.data["code"] == code
        assert response.data["status_code"] == status


def test_field_errors_are_included():
    exc = ValidationError("Line 1: bad", errors={"quantity": "not_positive"})
    response = custom_exception_handler(exc, {})
    assert response.data == {
        "detail": "Line 1: bad",
        "code": "validation_error",
        "errors": {"quantity": "not_positive"},
        "status_code": 400,
    }


def test_insufficient_stock_is_a_conflict():
    assert issubclass(InsufficientStockError, ConflictError)


def test_django_validation_error_becomes_400():
    response = custom_exception_handler(DjangoValidationError("nope"), {})
    assert response.status_code == 400
    assert response.data["errors"] == ["nope"]


def test_http404_and_drf_errors():
    assert custom_exception_handler(Http404(), {}).status_code == 404
    response = custom_exception_handler(NotFound(), {})
    assert response.status_code == 404
    assert response.data["status_code"] == 404


def test_unexpected_error_is_logged_and_hidden(caplog):
    with caplog.at_level(logging.ERROR, logger="materials.exceptions"):
        response = custom_exception_handler(RuntimeError("db password is hunter2"), {})
    assert response.status_code == 500
    assert response.data["detail"] == "Internal server error."
    assert "hunter2" not in str(response.data)
    assert "Unhandled error" in caplog.text


def test_protected_delete_is_a_conflict():
    class Referencing:
        class _meta:
            verbose_name = "material"

    exc = ProtectedError("still referenced", {Referencing()})
    response = custom_exception_handler(exc, {})
    assert response.status_code == 409
    assert response.data["code"] == "protected"
    assert response.data["errors"] == {"referenced_by": ["material"]}
