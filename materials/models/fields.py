from decimal import Decimal

from django.db import models


class QuantityField(models.DecimalField):
    """DecimalField sized for material quantities (three decimal places)."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("max_digits", 14)
        kwargs.setdefault("decimal_places", 3)
        super().__init__(*args, **kwargs)


class MoneyField(models.DecimalField):
    """DecimalField for currency amounts, defaulting to zero."""

    def __init__(self, *args, **kwargs):
        kwargs.setdefault("max_digits", 15)
        kwargs.setdefault("decimal_places", 2)
        if not kwargs.get("null"):
            kwargs.setdefault("default", Decimal("0.00"))
        super().__init__(*args, **kwargs)
