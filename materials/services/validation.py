"""Input coercion and lookup helpers shared by the service modules."""

from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional, Type, TypeVar

from django.db import models

from ..exceptions import NotFoundError, ValidationError

ModelT = TypeVar("ModelT", bound=models.Model)

CENT = Decimal("0.01")


def to_decimal(value: Any, field: str, line: Optional[int] = None) -> Decimal:
    """Convert ``value`` to Decimal without going through float."""
    where = f"Line {line}: " if line is not None else ""
    if value is None or value == "":
        raise ValidationError(f"{where}{field} is required.", errors={field: "required"})
    if isinstance(value, float):
        value = str(value)
    try:
        result = Decimal(value)
    except (TypeError, ValueError, InvalidOperation):
        raise ValidationError(
            f"{where}{field} must be a number.", errors={field: "invalid"}
        ) from None
    if not result.is_finite():
        raise ValidationError(f"{where}{field} must be a number.", errors={field: "invalid"})
    return result


def positive_decimal(value: Any, field: str, line: Optional[int] = None) -> Decimal:
    result = to_decimal(value, field, line)
    if result <= 0:
        where = f"Line {line}: " if line is not None else ""
        raise ValidationError(
            f"{where}{field} must be greater than zero.", errors={field: "not_positive"}
        )
    return result


def money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


def get_object(model: Type[ModelT], pk: Any, label: Optional[str] = None) -> ModelT:
    """Fetch ``model`` by primary key or raise :class:`NotFoundError`."""
    label = label or model._meta.verbose_name.title()
    if pk in (None, ""):
        raise NotFoundError(f"{label} not specified.")
    try:
        return model.objects.get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFoundError(f"{label} {pk} not found.") from None


def lock_object(model: Type[ModelT], pk: Any, label: Optional[str] = None) -> ModelT:
    """Like :func:`get_object` but takes a row lock; call inside a transaction."""
    label = label or model._meta.verbose_name.title()
    try:
        return model.objects.select_for_update().get(pk=pk)
    except (model.DoesNotExist, ValueError, TypeError):
        raise NotFoundError(f"{label} {pk} not found.") from None
