import logging
from datetime import date
from decimal import Decimal
from typing import Optional

from django.db import transaction
from django.db.models import Sum
from django.utils import timezone

from ..exceptions import ConflictError, ValidationError
from ..models import (
    Material,
    MaterialIssue,
    MaterialReceipt,
    MaterialRequirementRequest,
    Project,
    PurchaseOrder,
)
from ..status import IssueStatus, MrrStatus, StockTransactionType, transition
from . import stock_service
from .validation import get_object, lock_object, positive_decimal

logger = logging.getLogger(__name__)

INITIAL_STATUSES = (IssueStatus.PENDING, IssueStatus.ISSUED)


def _check_references(project, material, po, receipt) -> None:
    """The PO and receipt an issue cites must belong to its project and item."""
    if po is not None:
        if po.project_id is not None and po.project_id != project.pk:
            raise ValidationError(
                f"Purchase order {po.po_number} belongs to another project.",
                errors={"po_id": "mismatch"},
            )
        if not po.items.filter(item_id=material.item_id).exists():
            raise ValidationError(
                f"Purchase order {po.po_number} has no line for {material.name}.",
                errors={"po_id": "mismatch"},
            )
    if receipt is not None:
        if receipt.project_id != project.pk:
            raise ValidationError(
                f"Receipt {receipt.receipt_number} belongs to another project.",
                errors={"receipt_id": "mismatch"},
            )
        if po is not None and receipt.purchase_order_id != po.pk:
            raise ValidationError(
                f"Receipt {receipt.receipt_number} was not booked against {po.po_number}.",
                errors={"receipt_id": "mismatch"},
            )
        if not receipt.items.filter(item_id=material.item_id).exists():
            raise ValidationError(
                f"Receipt {receipt.receipt_number} has no line for {material.name}.",
                errors={"receipt_id": "mismatch"},
            )


@transaction.atomic
def issue(
    project_id: int,
    material_id: int,
    quantity,
    issued_by,
    received_by=None,
    status: str = IssueStatus.ISSUED,
    mrr_id: Optional[int] = None,
    po_id: Optional[int] = None,
    receipt_id: Optional[int] = None,
    issue_date: Optional[date] = None,
    issue_purpose: Optional[str] = None,
    location: Optional[str] = None,
) -> MaterialIssue:
    """Release material from site stock, decrementing it in the same transaction.

    Raises :class:`InsufficientStockError` when the material does not hold
    ``quantity``; nothing is written in that case.
    """
    quantity = positive_decimal(quantity, "quantity_issued")
    if status not in INITIAL_STATUSES:
        raise ValidationError(
            "A new issue must be PENDING or ISSUED.", errors={"status": "invalid"}
        )
    project = get_object(Project, project_id, "Project")
    material = get_object(Material, material_id, "Material")
    if material.project_id != project.pk:
        raise ValidationError(
            f"Material {material.pk} is not held by project {project.pk}.",
            errors={"material_id": "wrong_project"},
        )
    mrr = get_object(MaterialRequirementRequest, mrr_id, "MRR") if mrr_id else None
    if mrr is not None and mrr.status != MrrStatus.APPROVED:
        raise ConflictError(
            f"Cannot issue materials for MRR {mrr.mrr_number}; it is {mrr.status}."
        )
    po = get_object(PurchaseOrder, po_id, "Purchase Order") if po_id else None
    receipt = get_object(MaterialReceipt, receipt_id, "Receipt") if receipt_id else None
    _check_references(project, material, po, receipt)

    material_issue = MaterialIssue.objects.create(
        project=project,
        material=material,
        quantity_issued=quantity,
        issue_date=issue_date or timezone.localdate(),
        issue_purpose=issue_purpose,
        location=location,
        issued_by=issued_by,
        received_by=received_by,
        status=status,
        mrr=mrr,
        purchase_order=po,
        receipt=receipt,
    )
    stock_service.record_stock_transaction(
        material_id=material.pk,
        quantity_change=-quantity,
        transaction_type=StockTransactionType.ISSUE,
        user=issued_by,
        reference=f"ISSUE-{material_issue.pk}",
        notes=issue_purpose,
    )
    logger.info(
        "Issued %s of material %s to project %s (issue %s)",
        quantity,
        material.pk,
        project.pk,
        material_issue.pk,
    )
    return material_issue


@transaction.atomic
def mark_issued(issue_id: int) -> MaterialIssue:
    material_issue = lock_object(MaterialIssue, issue_id, "Material Issue")
    transition(material_issue, IssueStatus.ISSUED)
    material_issue.save(update_fields=["status", "updated_at"])
    return material_issue


@transaction.atomic
def mark_received(issue_id: int, received_by) -> MaterialIssue:
    material_issue = lock_object(MaterialIssue, issue_id, "Material Issue")
    transition(material_issue, IssueStatus.RECEIVED)
    material_issue.received_by = received_by
    material_issue.save(update_fields=["status", "received_by", "updated_at"])
    return material_issue


@transaction.atomic
def cancel(issue_id: int, cancelled_by) -> MaterialIssue:
    """Cancel an issue and put its quantity back into stock."""
    material_issue = lock_object(MaterialIssue, issue_id, "Material Issue")
    if material_issue.returns.exists() or material_issue.consumptions.exists():
        raise ConflictError(
            f"Issue {issue_id} already has returns or consumption recorded."
        )
    transition(material_issue, IssueStatus.CANCELLED)
    material_issue.save(update_fields=["status", "updated_at"])
    stock_service.record_stock_transaction(
        material_id=material_issue.material_id,
        quantity_change=material_issue.quantity_issued,
        transaction_type=StockTransactionType.ISSUE_CANCEL,
        user=cancelled_by,
        reference=f"ISSUE-{material_issue.pk}",
    )
    return material_issue


def outstanding_quantity(material_issue: MaterialIssue) -> Decimal:
    """Quantity issued that has not yet been returned or consumed."""
    returned = material_issue.returns.aggregate(total=Sum("quantity"))["total"] or Decimal("0")
    consumed = material_issue.consumptions.aggregate(total=Sum("quantity_consumed"))[
        "total"
    ] or Decimal("0")
    return material_issue.quantity_issued - returned - consumed
