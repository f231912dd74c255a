import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.db import IntegrityError, transaction
from django.db.models import Sum
from django.db.models.functions import Length
from django.utils import timezone

from ..exceptions import ConflictError, ValidationError
from ..models import Item, Material, MaterialRequirementRequest, MrrItem, Project, Unit
from ..status import MrrStatus, Priority, transition
from .validation import get_object, lock_object, positive_decimal, to_decimal

logger = logging.getLogger(__name__)

DECISIONS = {
    "APPROVED": MrrStatus.APPROVED,
    "APPROVE": MrrStatus.APPROVED,
    "REJECTED": MrrStatus.REJECTED,
    "REJECT": MrrStatus.REJECTED,
}


def generate_mrr_number(today: Optional[date] = None) -> str:
    """Next number in the ``MRR{YYYY}{MM}{seq}`` series for the month."""
    today = today or timezone.localdate()
    prefix = f"MRR{today.year}{today.month:02d}"
    # Longer numbers sort first so sequence 10000 outranks 9999.
    last = (
        MaterialRequirementRequest.objects.filter(mrr_number__startswith=prefix)
        .order_by(Length("mrr_number").desc(), "-mrr_number")
        .values_list("mrr_number", flat=True)
        .first()
    )
    sequence = 1
    if last:
        try:
            sequence = int(last[len(prefix):]) + 1
        except ValueError:
            pass
    return f"{prefix}{sequence:04d}"


def _build_items(items_data: List[Dict[str, Any]]) -> List[MrrItem]:
    if not items_data:
        raise ValidationError(
            "MRR must contain at least one item.", errors={"items": "empty"}
        )
    items = []
    for line, item_d in enumerate(items_data, 1):
        quantity = positive_decimal(
            item_d.get("quantity_requested"), "quantity_requested", line
        )
        item = get_object(Item, item_d.get("item_id"), "Item")
        unit_id = item_d.get("unit_id") or item.unit_id
        unit = get_object(Unit, unit_id, "Unit")
        estimate = item_d.get("estimated_cost_per_unit")
        items.append(
            MrrItem(
                line_no=line,
                item=item,
                unit=unit,
                quantity_requested=quantity,
                estimated_cost_per_unit=(
                    to_decimal(estimate, "estimated_cost_per_unit", line)
                    if estimate not in (None, "")
                    else None
                ),
                notes=item_d.get("notes"),
            )
        )
    return items


def create_mrr(
    project_id: int,
    requested_by,
    items_data: List[Dict[str, Any]],
    required_date: Optional[date] = None,
    priority: str = Priority.MEDIUM,
    notes: Optional[str] = None,
) -> MaterialRequirementRequest:
    """Record a project's material need as a PENDING request."""
    if priority not in Priority.values:
        raise ValidationError(f"Unknown priority {priority}.", errors={"priority": "invalid"})
    project = get_object(Project, project_id, "Project")
    items = _build_items(items_data)
    try:
        with transaction.atomic():
            mrr = MaterialRequirementRequest.objects.create(
                mrr_number=generate_mrr_number(),
                project=project,
                requested_by=requested_by,
                status=MrrStatus.PENDING,
                priority=priority,
                required_date=required_date,
                notes=notes,
            )
            for item in items:
                item.mrr = mrr
            MrrItem.objects.bulk_create(items)
    except IntegrityError as exc:
        logger.error("Integrity error creating MRR: %s", exc)
        raise ConflictError(
            "Could not allocate an MRR number; please resubmit.", code="number_conflict"
        ) from exc
    logger.info("Created %s for project %s with %d items", mrr.mrr_number, project.pk, len(items))
    return mrr


@transaction.atomic
def decide(
    mrr_id: int, approver, decision: str, reason: Optional[str] = None
) -> MaterialRequirementRequest:
    """Approve or reject a PENDING MRR; a decided MRR cannot be decided again."""
    target = DECISIONS.get(str(decision or "").strip().upper())
    if target is None:
        raise ValidationError(
            f"Unknown decision {decision!r}; use APPROVED or REJECTED.",
            errors={"decision": "invalid"},
        )
    mrr = lock_object(MaterialRequirementRequest, mrr_id, "MRR")
    transition(mrr, target)
    mrr.approved_by = approver
    mrr.decided_at = timezone.now()
    if target == MrrStatus.REJECTED:
        mrr.rejection_reason = reason
    mrr.save(
        update_fields=[
            "status",
            "approved_by",
            "decided_at",
            "rejection_reason",
            "updated_at",
        ]
    )
    return mrr


@transaction.atomic
def delete_mrr(mrr_id: int) -> None:
    mrr = lock_object(MaterialRequirementRequest, mrr_id, "MRR")
    if mrr.status != MrrStatus.PENDING:
        raise ConflictError(f"MRR {mrr.mrr_number} is {mrr.status} and cannot be deleted.")
    if mrr.purchase_orders.exists():
        raise ConflictError(f"MRR {mrr.mrr_number} is referenced by a purchase order.")
    mrr.delete()
    logger.info("Deleted MRR %s", mrr_id)


def check_inventory(mrr_id: int) -> Dict[str, Any]:
    """Compare each requested line with the stock already held at the MRR's project.

    Stock across the project's warehouses is summed per item. A line is
    ``AVAILABLE`` when that stock covers it, ``INSUFFICIENT_STOCK`` when some
    but not enough is held and ``NOT_IN_STOCK`` when the project holds none.
    Nothing is written.
    """
    mrr = get_object(MaterialRequirementRequest, mrr_id, "MRR")
    if mrr.status == MrrStatus.REJECTED:
        raise ConflictError(
            f"MRR {mrr.mrr_number} was rejected; there is nothing to check.",
            code="invalid_status",
        )
    lines = list(mrr.items.select_related("item").order_by("line_no"))
    on_hand = dict(
        Material.objects.filter(
            project_id=mrr.project_id, item_id__in=[line.item_id for line in lines]
        )
        .values_list("item_id")
        .annotate(total=Sum("stock_qty"))
    )

    results = []
    for line in lines:
        available = on_hand.get(line.item_id) or Decimal("0")
        if available >= line.quantity_requested:
            line_status = "AVAILABLE"
        elif available > 0:
            line_status = "INSUFFICIENT_STOCK"
        else:
            line_status = "NOT_IN_STOCK"
        results.append(
            {
                "mrr_item_id": line.pk,
                "item_id": line.item_id,
                "item_code": line.item.item_code,
                "item_name": line.item.item_name,
                "required_quantity": line.quantity_requested,
                "available_stock": available,
                "shortfall": max(line.quantity_requested - available, Decimal("0")),
                "status": line_status,
            }
        )
    return {
        "mrr_id": mrr.pk,
        "mrr_number": mrr.mrr_number,
        "all_available": all(row["status"] == "AVAILABLE" for row in results),
        "items": results,
    }
