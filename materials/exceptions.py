"""Service errors and the REST API's exception handler."""

import logging
from typing import Any, Dict, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db.models import ProtectedError, RestrictedError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import ValidationError as DRFValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class ServiceError(Exception):
    """Base class for errors raised by the service layer."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_code = "error"

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        errors: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.default_code
        self.errors = errors or {}

    def as_dict(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {"detail": self.message, "code": self.code}
        if self.errors:
            body["errors"] = self.errors
        return body


class ValidationError(ServiceError):
    """Malformed or out-of-range input."""

    default_code = "validation_error"


class NotFoundError(ServiceError):
    """A referenced entity does not exist."""

    status_code = status.HTTP_404_NOT_FOUND
    default_code = "not_found"


class ConflictError(ServiceError):
    """Illegal status transition or a request that would break an invariant."""

    status_code = status.HTTP_409_CONFLICT
    default_code = "conflict"


class InsufficientStockError(ConflictError):
    """Not enough stock on hand to satisfy the request."""

    default_code = "insufficient_stock"


class InternalError(ServiceError):
    """Unexpected failure; details stay in the log."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "internal_error"

    def __init__(self, message: str = "Internal server error.", **kwargs):
        super().__init__(message, **kwargs)


def custom_exception_handler(exc, context):
    """Render service errors and unexpected failures as JSON responses.

    Django ValidationError is treated as a REST framework validation error
    and deleting a row that is still referenced is a conflict. Anything REST
    framework does not know about becomes a generic 500.
    """
    if isinstance(exc, (ProtectedError, RestrictedError)):
        if isinstance(exc, ProtectedError):
            referencing = exc.protected_objects
        else:
            referencing = exc.restricted_objects
        blocking = sorted({str(obj._meta.verbose_name) for obj in referencing})
        exc = ConflictError(
            "Cannot delete this record while other records still reference it.",
            code="protected",
            errors={"referenced_by": blocking},
        )

    if isinstance(exc, ServiceError):
        body = exc.as_dict()
        body["status_code"] = exc.status_code
        return Response(body, status=exc.status_code)

    if isinstance(exc, DjangoValidationError):
        exc = DRFValidationError(detail=exc.messages)

    if isinstance(exc, Http404):
        return Response(
            {"detail": "Not found.", "code": "not_found", "status_code": 404},
            status=404,
        )

    response = exception_handler(exc, context)
    if response is not None:
        if not isinstance(response.data, dict):
            response.data = {"errors": response.data}
        response.data["status_code"] = response.status_code
        return response

    view = context.get("view")
    logger.error(
        "Unhandled error in %s", type(view).__name__ if view else "view", exc_info=exc
    )
    error = InternalError()
    body = error.as_dict()
    body["status_code"] = error.status_code
    return Response(body, status=error.status_code)
