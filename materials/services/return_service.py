import logging
from datetime import date
from typing import Optional

from django.db import transaction
from django.utils import timezone

from ..exceptions import ConflictError, ValidationError
from ..models import MaterialConsumption, MaterialIssue, MaterialReturn
from ..status import (
    ISSUE_OUTSTANDING,
    ConsumptionType,
    QualityStatus,
    StockTransactionType,
)
from . import issue_service, stock_service
from .validation import lock_object, positive_decimal

logger = logging.getLogger(__name__)


def _lock_outstanding_issue(issue_id: int, quantity, field: str):
    """Lock the issue and check ``quantity`` fits its unsettled balance."""
    material_issue = lock_object(MaterialIssue, issue_id, "Material Issue")
    if material_issue.status not in ISSUE_OUTSTANDING:
        raise ConflictError(
            f"Issue {issue_id} is {material_issue.status}; nothing is out on site."
        )
    outstanding = issue_service.outstanding_quantity(material_issue)
    if quantity > outstanding:
        logger.warning(
            "Rejected %s of %s against issue %s (outstanding %s)",
            field,
            quantity,
            issue_id,
            outstanding,
        )
        raise ValidationError(
            f"{field} of {quantity} exceeds the {outstanding} still outstanding "
            f"on issue {issue_id}.",
            code="exceeds_issued",
            errors={field: {"outstanding": str(outstanding), "requested": str(quantity)}},
        )
    return material_issue


@transaction.atomic
def return_material(
    issue_id: int,
    quantity,
    returned_by,
    quality_status: str = QualityStatus.GOOD,
    approved_by=None,
    return_date: Optional[date] = None,
    return_reason: Optional[str] = None,
) -> MaterialReturn:
    """Record material coming back from site against an issue.

    GOOD returns go back into stock. DAMAGED and DEFECTIVE returns settle the
    issue's balance but are held for write-off instead of being restocked.
    """
    quantity = positive_decimal(quantity, "quantity")
    if quality_status not in QualityStatus.values:
        raise ValidationError(
            f"Unknown quality status {quality_status}.",
            errors={"quality_status": "invalid"},
        )
    material_issue = _lock_outstanding_issue(issue_id, quantity, "quantity")
    restock = quality_status == QualityStatus.GOOD

    material_return = MaterialReturn.objects.create(
        project_id=material_issue.project_id,
        material_id=material_issue.material_id,
        issue=material_issue,
        quantity=quantity,
        quality_status=quality_status,
        restocked=restock,
        return_date=return_date or timezone.localdate(),
        return_reason=return_reason,
        returned_by=returned_by,
        approved_by=approved_by,
    )
    if restock:
        stock_service.record_stock_transaction(
            material_id=material_issue.material_id,
            quantity_change=quantity,
            transaction_type=StockTransactionType.RETURN,
            user=returned_by,
            reference=f"RETURN-{material_return.pk}",
            notes=return_reason,
        )
    logger.info(
        "Return %s: %s %s against issue %s",
        material_return.pk,
        quantity,
        quality_status,
        issue_id,
    )
    return material_return


@transaction.atomic
def consume(
    issue_id: int,
    quantity,
    recorded_by,
    consumption_type: str = ConsumptionType.ACTUAL,
    consumption_date: Optional[date] = None,
    consumption_purpose: Optional[str] = None,
) -> MaterialConsumption:
    """Book issued material as used up; stock already left at issue time."""
    quantity = positive_decimal(quantity, "quantity_consumed")
    if consumption_type not in ConsumptionType.values:
        raise ValidationError(
            f"Unknown consumption type {consumption_type}.",
            errors={"consumption_type": "invalid"},
        )
    material_issue = _lock_outstanding_issue(issue_id, quantity, "quantity_consumed")
    consumption = MaterialConsumption.objects.create(
        project_id=material_issue.project_id,
        material_id=material_issue.material_id,
        issue=material_issue,
        quantity_consumed=quantity,
        consumption_type=consumption_type,
        consumption_date=consumption_date or timezone.localdate(),
        consumption_purpose=consumption_purpose,
        recorded_by=recorded_by,
    )
    logger.info(
        "Consumption %s: %s %s against issue %s",
        consumption.pk,
        quantity,
        consumption_type,
        issue_id,
    )
    return consumption
