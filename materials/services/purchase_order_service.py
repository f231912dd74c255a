import logging
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional

from django.db import IntegrityError, transaction
from django.db.models import Max
from django.utils import timezone

from ..exceptions import ConflictError, ValidationError
from ..models import (
    Item,
    MaterialRequirementRequest,
    Project,
    PurchaseOrder,
    PurchaseOrderItem,
    Supplier,
    Unit,
)
from ..status import MrrStatus, POStatus, transition
from . import notification_service
from .validation import get_object, lock_object, money, positive_decimal, to_decimal

logger = logging.getLogger(__name__)

HUNDRED = Decimal("100")


def generate_po_number() -> str:
    next_id = (PurchaseOrder.objects.aggregate(m=Max("po_id"))["m"] or 0) + 1
    return f"PO{next_id:06d}"


def _build_lines(items_data: List[Dict[str, Any]]) -> List[PurchaseOrderItem]:
    """Validate line input and compute each line's total and tax."""
    if not items_data:
        raise ValidationError(
            "Purchase Order must contain at least one item.", errors={"items": "empty"}
        )
    lines = []
    for line, item_d in enumerate(items_data, 1):
        quantity = positive_decimal(item_d.get("quantity_ordered"), "quantity_ordered", line)
        unit_price = to_decimal(item_d.get("unit_price"), "unit_price", line)
        if unit_price < 0:
            raise ValidationError(
                f"Line {line}: unit_price cannot be negative.",
                errors={"unit_price": "negative"},
            )
        tax_rate = to_decimal(item_d.get("tax_rate") or "0", "tax_rate", line)
        if not Decimal("0") <= tax_rate <= HUNDRED:
            raise ValidationError(
                f"Line {line}: tax_rate must be between 0 and 100.",
                errors={"tax_rate": "out_of_range"},
            )
        item = get_object(Item, item_d.get("item_id"), "Item")
        unit = get_object(Unit, item_d.get("unit_id") or item.unit_id, "Unit")
        # Line total and tax round half-up to the cent; header totals add the
        # rounded line amounts.
        line_total = money(quantity * unit_price)
        lines.append(
            PurchaseOrderItem(
                line_no=line,
                item=item,
                unit=unit,
                quantity_ordered=quantity,
                unit_price=unit_price,
                tax_rate=tax_rate,
                tax_amount=money(line_total * tax_rate / HUNDRED),
                line_total=line_total,
                notes=item_d.get("notes"),
            )
        )
    return lines


def _apply_totals(po: PurchaseOrder, lines) -> None:
    po.subtotal = sum((ln.line_total for ln in lines), Decimal("0.00"))
    po.tax_amount = sum((ln.tax_amount for ln in lines), Decimal("0.00"))
    po.total_amount = po.subtotal + po.tax_amount


def recalculate_totals(po: PurchaseOrder) -> PurchaseOrder:
    """Recompute the header amounts from the stored lines and save them."""
    _apply_totals(po, list(po.items.all()))
    po.save(update_fields=["subtotal", "tax_amount", "total_amount", "updated_at"])
    return po


def _create_po(
    *,
    supplier_id: int,
    items_data: List[Dict[str, Any]],
    created_by,
    project: Optional[Project],
    mrr: Optional[MaterialRequirementRequest],
    po_date: Optional[date] = None,
    expected_delivery_date: Optional[date] = None,
    payment_terms: Optional[str] = None,
    delivery_terms: Optional[str] = None,
    notes: Optional[str] = None,
) -> PurchaseOrder:
    supplier = get_object(Supplier, supplier_id, "Supplier")
    lines = _build_lines(items_data)
    po = PurchaseOrder(
        po_number=generate_po_number(),
        mrr=mrr,
        project=project,
        supplier=supplier,
        status=POStatus.DRAFT,
        po_date=po_date or timezone.localdate(),
        expected_delivery_date=expected_delivery_date,
        payment_terms=payment_terms,
        delivery_terms=delivery_terms,
        created_by=created_by,
        notes=notes,
    )
    _apply_totals(po, lines)
    try:
        with transaction.atomic():
            po.save()
            for ln in lines:
                ln.purchase_order = po
            PurchaseOrderItem.objects.bulk_create(lines)
    except IntegrityError as exc:
        logger.error("Integrity error creating PO: %s", exc)
        raise ConflictError(
            "Could not allocate a PO number; please resubmit.", code="number_conflict"
        ) from exc
    logger.info(
        "Created %s (supplier %s, total %s)", po.po_number, supplier.pk, po.total_amount
    )
    return po


def create_from_mrr(
    mrr_id: int,
    supplier_id: int,
    items_data: List[Dict[str, Any]],
    created_by,
    **details,
) -> PurchaseOrder:
    """Create a DRAFT PO for an APPROVED MRR; the project comes from the MRR."""
    mrr = get_object(MaterialRequirementRequest, mrr_id, "MRR")
    if mrr.status != MrrStatus.APPROVED:
        raise ConflictError(
            f"Only approved MRRs can be converted to Purchase Orders "
            f"(MRR {mrr.mrr_number} is {mrr.status})."
        )
    return _create_po(
        supplier_id=supplier_id,
        items_data=items_data,
        created_by=created_by,
        project=mrr.project,
        mrr=mrr,
        **details,
    )


def create_standalone(
    project_id: Optional[int],
    supplier_id: int,
    items_data: List[Dict[str, Any]],
    created_by,
    **details,
) -> PurchaseOrder:
    project = get_object(Project, project_id, "Project") if project_id else None
    return _create_po(
        supplier_id=supplier_id,
        items_data=items_data,
        created_by=created_by,
        project=project,
        mrr=None,
        **details,
    )


@transaction.atomic
def update_items(po_id: int, items_data: List[Dict[str, Any]]) -> PurchaseOrder:
    """Replace the lines of a DRAFT PO and recompute its totals."""
    po = lock_object(PurchaseOrder, po_id, "Purchase Order")
    if po.status != POStatus.DRAFT:
        raise ConflictError(f"{po.po_number} is {po.status}; only draft orders can be edited.")
    lines = _build_lines(items_data)
    po.items.all().delete()
    for ln in lines:
        ln.purchase_order = po
    PurchaseOrderItem.objects.bulk_create(lines)
    return recalculate_totals(po)


@transaction.atomic
def approve(po_id: int, approver) -> PurchaseOrder:
    po = lock_object(PurchaseOrder, po_id, "Purchase Order")
    transition(po, POStatus.APPROVED)
    po.approved_by = approver
    po.approved_at = timezone.now()
    po.save(update_fields=["status", "approved_by", "approved_at", "updated_at"])
    return po


@transaction.atomic
def place(po_id: int) -> PurchaseOrder:
    """Place an APPROVED order and notify the supplier once committed."""
    po = lock_object(PurchaseOrder, po_id, "Purchase Order")
    transition(po, POStatus.PLACED)
    po.placed_at = timezone.now()
    po.save(update_fields=["status", "placed_at", "updated_at"])
    transaction.on_commit(lambda: notification_service.notify_po_placed(po))
    return po


@transaction.atomic
def acknowledge(po_id: int) -> PurchaseOrder:
    po = lock_object(PurchaseOrder, po_id, "Purchase Order")
    transition(po, POStatus.ACKNOWLEDGED)
    po.save(update_fields=["status", "updated_at"])
    return po


@transaction.atomic
def cancel(po_id: int) -> PurchaseOrder:
    po = lock_object(PurchaseOrder, po_id, "Purchase Order")
    transition(po, POStatus.CANCELLED)
    po.save(update_fields=["status", "updated_at"])
    return po


@transaction.atomic
def close(po_id: int) -> PurchaseOrder:
    po = lock_object(PurchaseOrder, po_id, "Purchase Order")
    transition(po, POStatus.CLOSED)
    po.save(update_fields=["status", "updated_at"])
    return po


def refresh_receipt_status(po: PurchaseOrder) -> PurchaseOrder:
    """Set PARTIALLY_RECEIVED or FULLY_RECEIVED from the lines' received totals.

    Called by the receipt service inside its transaction, with ``po`` locked.
    """
    lines = list(po.items.all())
    fully_received = all(ln.quantity_received >= ln.quantity_ordered for ln in lines)
    target = POStatus.FULLY_RECEIVED if fully_received else POStatus.PARTIALLY_RECEIVED
    if po.status != target:
        transition(po, target)
        po.save(update_fields=["status", "updated_at"])
    return po


def get_po_progress(po_id: int) -> Dict[str, Any]:
    """Ordered, received and remaining quantities per line of a PO."""
    po = get_object(PurchaseOrder, po_id, "Purchase Order")
    lines = []
    ordered_total = received_total = Decimal("0")
    for ln in po.items.select_related("item"):
        ordered_total += ln.quantity_ordered
        received_total += ln.quantity_received
        lines.append(
            {
                "po_item_id": ln.po_item_id,
                "item_id": ln.item_id,
                "item_name": ln.item.item_name,
                "quantity_ordered": ln.quantity_ordered,
                "quantity_received": ln.quantity_received,
                "remaining": ln.remaining_quantity,
            }
        )
    percent = int(received_total / ordered_total * 100) if ordered_total else 0
    return {
        "po_id": po.po_id,
        "po_number": po.po_number,
        "status": po.status,
        "ordered_total": ordered_total,
        "received_total": received_total,
        "percent": percent,
        "items": lines,
    }
