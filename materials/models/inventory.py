from decimal import Decimal

from django.conf import settings
from django.db import models

from ..status import StockTransactionType, TransferStatus
from .catalog import Item, Project, Warehouse
from .fields import MoneyField, QuantityField


class Material(models.Model):
    """Stock of one catalog item held for a project, optionally per warehouse.

    ``stock_qty`` is only changed through ``stock_service``.
    """

    material_id = models.AutoField(primary_key=True)
    project = models.ForeignKey(
        Project, models.PROTECT, db_column="project_id", related_name="materials"
    )
    item = models.ForeignKey(
        Item, models.PROTECT, db_column="item_id", related_name="materials"
    )
    warehouse = models.ForeignKey(
        Warehouse,
        models.PROTECT,
        db_column="warehouse_id",
        blank=True,
        null=True,
        related_name="materials",
    )
    name = models.CharField(max_length=255)
    stock_qty = QuantityField(default=Decimal("0"))
    cost_per_unit = MoneyField(max_digits=12, blank=True, null=True)
    minimum_stock_level = QuantityField(default=Decimal("0"))
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"{self.name} @ {self.project}"

    class Meta:
        db_table = "materials"
        constraints = [
            models.UniqueConstraint(
                fields=["project", "item", "warehouse"],
                name="uniq_material_project_item_warehouse",
            ),
            models.CheckConstraint(
                condition=models.Q(stock_qty__gte=0),
                name="material_stock_qty_non_negative",
            ),
        ]


class StockTransaction(models.Model):
    """Records each stock increase or decrease with the balance around it."""

    transaction_id = models.AutoField(primary_key=True)
    material = models.ForeignKey(
        Material,
        models.CASCADE,
        db_column="material_id",
        related_name="stock_transactions",
    )
    project = models.ForeignKey(
        Project,
        models.PROTECT,
        db_column="project_id",
        related_name="stock_transactions",
    )
    transaction_type = models.CharField(
        max_length=20, choices=StockTransactionType.choices
    )
    quantity_change = QuantityField()
    quantity_before = QuantityField()
    quantity_after = QuantityField()
    reference = models.CharField(max_length=100, blank=True, null=True)
    user = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.PROTECT,
        db_column="performed_by_user_id",
        related_name="+",
    )
    notes = models.TextField(blank=True, null=True)
    transaction_date = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"Transaction {self.pk} for {self.material}"

    class Meta:
        db_table = "stock_transactions"
        ordering = ["-transaction_date", "-transaction_id"]


class SiteTransfer(models.Model):
    """Material moved from one project site to another.

    Transfers are written by the site-transfer workflow; here they are only
    read by the consumption calculator.
    """

    transfer_id = models.AutoField(primary_key=True)
    from_project = models.ForeignKey(
        Project,
        models.PROTECT,
        db_column="from_project_id",
        related_name="outbound_transfers",
    )
    to_project = models.ForeignKey(
        Project,
        models.PROTECT,
        db_column="to_project_id",
        related_name="inbound_transfers",
    )
    material = models.ForeignKey(
        Material, models.PROTECT, db_column="material_id", related_name="transfers"
    )
    quantity = QuantityField()
    transfer_date = models.DateField()
    status = models.CharField(
        max_length=20, choices=TransferStatus.choices, default=TransferStatus.PENDING
    )
    transfer_reason = models.TextField(blank=True, null=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"Transfer {self.pk}: {self.from_project} -> {self.to_project}"

    class Meta:
        db_table = "site_transfers"
