import logging
from collections import defaultdict
from datetime import date
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from django.db import IntegrityError, transaction
from django.db.models import Max
from django.utils import timezone

from ..exceptions import ConflictError, ValidationError
from ..models import (
    MaterialReceipt,
    MaterialReceiptItem,
    Project,
    PurchaseOrder,
    PurchaseOrderItem,
    Warehouse,
)
from ..status import PO_RECEIVABLE, QualityStatus, StockTransactionType
from . import purchase_order_service, stock_service
from .validation import get_object, lock_object, positive_decimal

logger = logging.getLogger(__name__)


def generate_receipt_number() -> str:
    next_id = (MaterialReceipt.objects.aggregate(m=Max("receipt_id"))["m"] or 0) + 1
    return f"GRN-{next_id:04d}"


def _normalize_lines(
    items_data: List[Dict[str, Any]], po_items: Dict[int, PurchaseOrderItem]
) -> List[Tuple[PurchaseOrderItem, Decimal, str, Optional[str]]]:
    """Check every line against its PO item before anything is written.

    Quantities for the same PO item are summed across the request so two
    lines cannot jointly over-receive.
    """
    if not items_data:
        raise ValidationError(
            "Receipt must contain at least one received item.", errors={"items": "empty"}
        )
    normalized = []
    requested: Dict[int, Decimal] = defaultdict(Decimal)
    for line, item_d in enumerate(items_data, 1):
        try:
            po_item_id = int(item_d.get("po_item_id"))
        except (TypeError, ValueError):
            raise ValidationError(
                f"Line {line}: po_item_id is required.", errors={"po_item_id": "required"}
            ) from None
        po_item = po_items.get(po_item_id)
        if po_item is None:
            raise ValidationError(
                f"Line {line}: PO item {po_item_id} does not belong to this order.",
                errors={"po_item_id": "invalid"},
            )
        quantity = positive_decimal(item_d.get("quantity_received"), "quantity_received", line)
        quality = item_d.get("quality_status") or QualityStatus.GOOD
        if quality not in QualityStatus.values:
            raise ValidationError(
                f"Line {line}: unknown quality status {quality}.",
                errors={"quality_status": "invalid"},
            )
        requested[po_item_id] += quantity
        normalized.append((po_item, quantity, quality, item_d.get("remarks")))

    over = {
        str(pk): {
            "ordered": str(po_items[pk].quantity_ordered),
            "already_received": str(po_items[pk].quantity_received),
            "requested": str(qty),
        }
        for pk, qty in requested.items()
        if po_items[pk].quantity_received + qty > po_items[pk].quantity_ordered
    }
    if over:
        logger.warning("Rejected over-receipt on PO items %s", ", ".join(over))
        raise ValidationError(
            "Received quantity would exceed the quantity ordered.",
            code="over_receipt",
            errors={"items": over},
        )
    return normalized


def create_receipt(
    po_id: int,
    received_by,
    items_data: List[Dict[str, Any]],
    warehouse_id: Optional[int] = None,
    project_id: Optional[int] = None,
    receipt_date: Optional[date] = None,
    supplier_delivery_note: Optional[str] = None,
    notes: Optional[str] = None,
) -> MaterialReceipt:
    """Record goods received against a PO.

    Lines, stock increments and the PO status update commit together or not
    at all. Only GOOD lines are added to site stock; DAMAGED and DEFECTIVE
    lines still count against the quantity ordered.
    """
    try:
        with transaction.atomic():
            po = lock_object(PurchaseOrder, po_id, "Purchase Order")
            if po.status not in PO_RECEIVABLE:
                raise ConflictError(
                    f"{po.po_number} is {po.status}; goods can only be received "
                    "against placed orders."
                )
            project = po.project
            if project is None:
                if not project_id:
                    raise ValidationError(
                        f"{po.po_number} has no project; project_id is required.",
                        errors={"project_id": "required"},
                    )
                project = get_object(Project, project_id, "Project")
            warehouse = get_object(Warehouse, warehouse_id, "Warehouse") if warehouse_id else None

            po_items = {
                pi.pk: pi
                for pi in PurchaseOrderItem.objects.select_for_update()
                .filter(purchase_order=po)
                .select_related("item")
            }
            lines = _normalize_lines(items_data, po_items)

            receipt = MaterialReceipt.objects.create(
                receipt_number=generate_receipt_number(),
                purchase_order=po,
                project=project,
                warehouse=warehouse,
                received_by=received_by,
                receipt_date=receipt_date or timezone.localdate(),
                supplier_delivery_note=supplier_delivery_note,
                notes=notes,
            )
            for po_item, quantity, quality, remarks in lines:
                MaterialReceiptItem.objects.create(
                    receipt=receipt,
                    po_item=po_item,
                    item=po_item.item,
                    unit_id=po_item.unit_id,
                    quantity_received=quantity,
                    quality_status=quality,
                    remarks=remarks,
                )
                po_item.quantity_received += quantity
                po_item.save(update_fields=["quantity_received"])
                if quality == QualityStatus.GOOD:
                    material = stock_service.get_or_create_material(
                        project, po_item.item, warehouse, cost_per_unit=po_item.unit_price
                    )
                    stock_service.record_stock_transaction(
                        material_id=material.pk,
                        quantity_change=quantity,
                        transaction_type=StockTransactionType.RECEIPT,
                        user=received_by,
                        reference=receipt.receipt_number,
                        notes=f"{po.po_number} line {po_item.line_no}",
                    )
            purchase_order_service.refresh_receipt_status(po)
    except IntegrityError as exc:
        logger.error("Integrity error creating receipt for PO %s: %s", po_id, exc)
        raise ConflictError(
            "Could not allocate a receipt number; please resubmit.", code="number_conflict"
        ) from exc
    logger.info(
        "Created %s for %s with %d lines (PO now %s)",
        receipt.receipt_number,
        po.po_number,
        len(lines),
        po.status,
    )
    return receipt


def get_receipts_for_po(po_id: int):
    return (
        MaterialReceipt.objects.filter(purchase_order_id=po_id)
        .prefetch_related("items")
        .order_by("receipt_id")
    )
