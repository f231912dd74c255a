from django.conf import settings
from django.db import models

from ..status import MrrStatus, Priority
from .catalog import Item, Project, Unit
from .fields import MoneyField, QuantityField


class MaterialRequirementRequest(models.Model):
    """A project's declared need for materials, awaiting an approval decision."""

    mrr_id = models.AutoField(primary_key=True)
    mrr_number = models.CharField(max_length=50, unique=True)
    project = models.ForeignKey(
        Project, models.PROTECT, db_column="project_id", related_name="mrrs"
    )
    requested_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.PROTECT,
        db_column="requested_by_user_id",
        related_name="+",
    )
    status = models.CharField(
        max_length=20, choices=MrrStatus.choices, default=MrrStatus.PENDING
    )
    priority = models.CharField(
        max_length=10, choices=Priority.choices, default=Priority.MEDIUM
    )
    required_date = models.DateField(blank=True, null=True)
    approved_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.PROTECT,
        db_column="approved_by_user_id",
        blank=True,
        null=True,
        related_name="+",
    )
    decided_at = models.DateTimeField(blank=True, null=True)
    rejection_reason = models.TextField(blank=True, null=True)
    notes = models.TextField(blank=True, null=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.mrr_number or f"MRR {self.pk}"

    class Meta:
        db_table = "material_requirement_requests"
        ordering = ["-created_at", "-mrr_id"]


class MrrItem(models.Model):
    """One requested catalog item and quantity within an MRR."""

    mrr_item_id = models.AutoField(primary_key=True)
    mrr = models.ForeignKey(
        MaterialRequirementRequest,
        models.CASCADE,
        db_column="mrr_id",
        related_name="items",
    )
    line_no = models.PositiveIntegerField()
    item = models.ForeignKey(Item, models.PROTECT, db_column="item_id", related_name="+")
    unit = models.ForeignKey(Unit, models.PROTECT, db_column="unit_id", related_name="+")
    quantity_requested = QuantityField()
    estimated_cost_per_unit = MoneyField(max_digits=12, blank=True, null=True)
    notes = models.TextField(blank=True, null=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"{self.mrr} - {self.item}"

    class Meta:
        db_table = "mrr_items"
        ordering = ["line_no"]
