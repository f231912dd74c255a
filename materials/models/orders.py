from decimal import Decimal

from django.conf import settings
from django.db import models

from ..status import POStatus, QualityStatus
from .catalog import Item, Project, Supplier, Unit, Warehouse
from .fields import MoneyField, QuantityField
from .requisitions import MaterialRequirementRequest


class PurchaseOrder(models.Model):
    """Orders items from a supplier, optionally against an approved MRR."""

    po_id = models.AutoField(primary_key=True)
    po_number = models.CharField(max_length=50, unique=True)
    mrr = models.ForeignKey(
        MaterialRequirementRequest,
        models.PROTECT,
        db_column="mrr_id",
        blank=True,
        null=True,
        related_name="purchase_orders",
    )
    project = models.ForeignKey(
        Project,
        models.PROTECT,
        db_column="project_id",
        blank=True,
        null=True,
        related_name="purchase_orders",
    )
    supplier = models.ForeignKey(
        Supplier, models.PROTECT, db_column="supplier_id", related_name="purchase_orders"
    )
    status = models.CharField(
        max_length=20, choices=POStatus.choices, default=POStatus.DRAFT
    )
    po_date = models.DateField()
    expected_delivery_date = models.DateField(blank=True, null=True)
    subtotal = MoneyField()
    tax_amount = MoneyField()
    total_amount = MoneyField()
    payment_terms = models.CharField(max_length=100, blank=True, null=True)
    delivery_terms = models.CharField(max_length=100, blank=True, null=True)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.PROTECT,
        db_column="created_by_user_id",
        related_name="+",
    )
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.PROTECT,
        db_column="approved_by_user_id",
        blank=True,
        null=True,
        related_name="+",
    )
    approved_at = models.DateTimeField(blank=True, null=True)
    placed_at = models.DateTimeField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"{self.po_number} to {self.supplier}"

    class Meta:
        db_table = "purchase_orders"
        ordering = ["-po_date", "-po_id"]


class PurchaseOrderItem(models.Model):
    """Line item detailing quantity and price for a purchase order."""

    po_item_id = models.AutoField(primary_key=True)
    purchase_order = models.ForeignKey(
        PurchaseOrder, models.CASCADE, db_column="po_id", related_name="items"
    )
    line_no = models.PositiveIntegerField()
    item = models.ForeignKey(Item, models.PROTECT, db_column="item_id", related_name="+")
    unit = models.ForeignKey(Unit, models.PROTECT, db_column="unit_id", related_name="+")
    quantity_ordered = QuantityField()
    unit_price = MoneyField(max_digits=12)
    tax_rate = models.DecimalField(max_digits=5, decimal_places=2, default=Decimal("0"))
    tax_amount = MoneyField()
    line_total = MoneyField()
    quantity_received = QuantityField(default=Decimal("0"))
    notes = models.TextField(blank=True, null=True)

    @property
    def remaining_quantity(self) -> Decimal:
        return self.quantity_ordered - (self.quantity_received or Decimal("0"))

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"{self.purchase_order} - {self.item}"

    class Meta:
        db_table = "purchase_order_items"
        ordering = ["line_no"]


class MaterialReceipt(models.Model):
    """Acknowledges goods received against a purchase order."""

    receipt_id = models.AutoField(primary_key=True)
    receipt_number = models.CharField(max_length=50, unique=True)
    purchase_order = models.ForeignKey(
        PurchaseOrder, models.PROTECT, db_column="po_id", related_name="receipts"
    )
    project = models.ForeignKey(
        Project, models.PROTECT, db_column="project_id", related_name="receipts"
    )
    warehouse = models.ForeignKey(
        Warehouse,
        models.PROTECT,
        db_column="warehouse_id",
        blank=True,
        null=True,
        related_name="receipts",
    )
    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.PROTECT,
        db_column="received_by_user_id",
        related_name="+",
    )
    receipt_date = models.DateField()
    supplier_delivery_note = models.CharField(max_length=100, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"{self.receipt_number} for PO {self.purchase_order_id}"

    class Meta:
        db_table = "material_receipts"
        ordering = ["-receipt_date", "-receipt_id"]


class MaterialReceiptItem(models.Model):
    """Quantity and quality of one PO line received on a receipt."""

    receipt_item_id = models.AutoField(primary_key=True)
    receipt = models.ForeignKey(
        MaterialReceipt, models.CASCADE, db_column="receipt_id", related_name="items"
    )
    po_item = models.ForeignKey(
        PurchaseOrderItem,
        models.PROTECT,
        db_column="po_item_id",
        related_name="receipt_items",
    )
    item = models.ForeignKey(Item, models.PROTECT, db_column="item_id", related_name="+")
    unit = models.ForeignKey(Unit, models.PROTECT, db_column="unit_id", related_name="+")
    quantity_received = QuantityField()
    quality_status = models.CharField(
        max_length=10, choices=QualityStatus.choices, default=QualityStatus.GOOD
    )
    remarks = models.TextField(blank=True, null=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"{self.receipt} item {self.po_item}"

    class Meta:
        db_table = "material_receipt_items"
