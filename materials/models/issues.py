from django.conf import settings
from django.db import models

from ..status import ConsumptionType, IssueStatus, QualityStatus
from .catalog import Project
from .fields import QuantityField
from .inventory import Material
from .orders import MaterialReceipt, PurchaseOrder
from .requisitions import MaterialRequirementRequest


class MaterialIssue(models.Model):
    """Material released from site inventory to a project team member."""

    issue_id = models.AutoField(primary_key=True)
    project = models.ForeignKey(
        Project, models.PROTECT, db_column="project_id", related_name="issues"
    )
    material = models.ForeignKey(
        Material, models.PROTECT, db_column="material_id", related_name="issues"
    )
    quantity_issued = QuantityField()
    issue_date = models.DateField()
    issue_purpose = models.TextField(blank=True, null=True)
    location = models.CharField(max_length=255, blank=True, null=True)
    issued_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.PROTECT,
        db_column="issued_by_user_id",
        related_name="+",
    )
    received_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.PROTECT,
        db_column="received_by_user_id",
        blank=True,
        null=True,
        related_name="+",
    )
    status = models.CharField(
        max_length=20, choices=IssueStatus.choices, default=IssueStatus.PENDING
    )
    mrr = models.ForeignKey(
        MaterialRequirementRequest,
        models.SET_NULL,
        db_column="mrr_id",
        blank=True,
        null=True,
        related_name="issues",
    )
    purchase_order = models.ForeignKey(
        PurchaseOrder,
        models.SET_NULL,
        db_column="po_id",
        blank=True,
        null=True,
        related_name="issues",
    )
    receipt = models.ForeignKey(
        MaterialReceipt,
        models.SET_NULL,
        db_column="receipt_id",
        blank=True,
        null=True,
        related_name="issues",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"Issue {self.pk} of {self.material}"

    class Meta:
        db_table = "material_issues"
        ordering = ["-issue_date", "-issue_id"]


class MaterialReturn(models.Model):
    """Issued material sent back from site; only GOOD returns are restocked."""

    return_id = models.AutoField(primary_key=True)
    project = models.ForeignKey(
        Project, models.PROTECT, db_column="project_id", related_name="returns"
    )
    material = models.ForeignKey(
        Material, models.PROTECT, db_column="material_id", related_name="returns"
    )
    issue = models.ForeignKey(
        MaterialIssue, models.PROTECT, db_column="issue_id", related_name="returns"
    )
    quantity = QuantityField()
    quality_status = models.CharField(
        max_length=10, choices=QualityStatus.choices, default=QualityStatus.GOOD
    )
    restocked = models.BooleanField(default=False)
    return_date = models.DateField()
    return_reason = models.TextField(blank=True, null=True)
    returned_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.PROTECT,
        db_column="returned_by_user_id",
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
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"Return {self.pk} against issue {self.issue_id}"

    class Meta:
        db_table = "material_returns"
        ordering = ["-return_date", "-return_id"]


class MaterialConsumption(models.Model):
    """Material used up, wasted, stolen or damaged on site."""

    consumption_id = models.AutoField(primary_key=True)
    project = models.ForeignKey(
        Project, models.PROTECT, db_column="project_id", related_name="consumptions"
    )
    material = models.ForeignKey(
        Material, models.PROTECT, db_column="material_id", related_name="consumptions"
    )
    issue = models.ForeignKey(
        MaterialIssue,
        models.PROTECT,
        db_column="issue_id",
        blank=True,
        null=True,
        related_name="consumptions",
    )
    quantity_consumed = QuantityField()
    consumption_type = models.CharField(
        max_length=10, choices=ConsumptionType.choices, default=ConsumptionType.ACTUAL
    )
    consumption_date = models.DateField()
    consumption_purpose = models.TextField(blank=True, null=True)
    recorded_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        models.PROTECT,
        db_column="recorded_by_user_id",
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"Consumption {self.pk} of {self.material}"

    class Meta:
        db_table = "material_consumptions"
        ordering = ["-consumption_date", "-consumption_id"]
