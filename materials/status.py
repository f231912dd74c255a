"""Status choices and the transition tables that govern them.

Every status change on a workflow document goes through :func:`transition`,
which rejects anything not listed in the document's table.
"""

import logging
from typing import Dict, FrozenSet

from django.db import models

from .exceptions import ConflictError

logger = logging.getLogger(__name__)


class MrrStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    REJECTED = "REJECTED", "Rejected"


class Priority(models.TextChoices):
    LOW = "LOW", "Low"
    MEDIUM = "MEDIUM", "Medium"
    HIGH = "HIGH", "High"
    URGENT = "URGENT", "Urgent"


class POStatus(models.TextChoices):
    DRAFT = "DRAFT", "Draft"
    APPROVED = "APPROVED", "Approved"
    PLACED = "PLACED", "Placed"
    ACKNOWLEDGED = "ACKNOWLEDGED", "Acknowledged"
    PARTIALLY_RECEIVED = "PARTIALLY_RECEIVED", "Partially Received"
    FULLY_RECEIVED = "FULLY_RECEIVED", "Fully Received"
    CANCELLED = "CANCELLED", "Cancelled"
    CLOSED = "CLOSED", "Closed"


class IssueStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    ISSUED = "ISSUED", "Issued"
    RECEIVED = "RECEIVED", "Received"
    CANCELLED = "CANCELLED", "Cancelled"


class QualityStatus(models.TextChoices):
    GOOD = "GOOD", "Good"
    DAMAGED = "DAMAGED", "Damaged"
    DEFECTIVE = "DEFECTIVE", "Defective"


class ConsumptionType(models.TextChoices):
    ACTUAL = "ACTUAL", "Actual"
    WASTAGE = "WASTAGE", "Wastage"
    THEFT = "THEFT", "Theft"
    DAMAGE = "DAMAGE", "Damage"


class TransferStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    APPROVED = "APPROVED", "Approved"
    COMPLETED = "COMPLETED", "Completed"
    CANCELLED = "CANCELLED", "Cancelled"


class StockTransactionType(models.TextChoices):
    RECEIPT = "RECEIPT", "Receipt"
    ISSUE = "ISSUE", "Issue"
    ISSUE_CANCEL = "ISSUE_CANCEL", "Issue Cancelled"
    RETURN = "RETURN", "Return"


MRR_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    MrrStatus.PENDING: frozenset({MrrStatus.APPROVED, MrrStatus.REJECTED}),
}

PO_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    POStatus.DRAFT: frozenset({POStatus.APPROVED, POStatus.CANCELLED}),
    POStatus.APPROVED: frozenset({POStatus.PLACED, POStatus.CANCELLED}),
    POStatus.PLACED: frozenset(
        {
            POStatus.ACKNOWLEDGED,
            POStatus.PARTIALLY_RECEIVED,
            POStatus.FULLY_RECEIVED,
        }
    ),
    POStatus.ACKNOWLEDGED: frozenset(
        {POStatus.PARTIALLY_RECEIVED, POStatus.FULLY_RECEIVED}
    ),
    POStatus.PARTIALLY_RECEIVED: frozenset(
        {POStatus.FULLY_RECEIVED, POStatus.CLOSED}
    ),
    POStatus.FULLY_RECEIVED: frozenset({POStatus.CLOSED}),
}

ISSUE_TRANSITIONS: Dict[str, FrozenSet[str]] = {
    IssueStatus.PENDING: frozenset({IssueStatus.ISSUED, IssueStatus.CANCELLED}),
    IssueStatus.ISSUED: frozenset({IssueStatus.RECEIVED, IssueStatus.CANCELLED}),
}

# PO states in which goods may still be received.
PO_RECEIVABLE = frozenset(
    {POStatus.PLACED, POStatus.ACKNOWLEDGED, POStatus.PARTIALLY_RECEIVED}
)

# Issue states with material out on site.
ISSUE_OUTSTANDING = frozenset({IssueStatus.ISSUED, IssueStatus.RECEIVED})

_TABLES = {
    "MaterialRequirementRequest": MRR_TRANSITIONS,
    "PurchaseOrder": PO_TRANSITIONS,
    "MaterialIssue": ISSUE_TRANSITIONS,
}


def can_transition(table: Dict[str, FrozenSet[str]], current: str, target: str) -> bool:
    return target in table.get(current, frozenset())


def transition(document, target: str, field: str = "status") -> str:
    """Move ``document`` to ``target`` or raise :class:`ConflictError`.

    Only the attribute is changed; the caller saves the document inside its
    own transaction. Returns the previous status.
    """
    name = type(document).__name__
    table = _TABLES[name]
    current = getattr(document, field)
    if not can_transition(table, current, target):
        logger.warning(
            "Rejected %s %s transition %s -> %s", name, document.pk, current, target
        )
        raise ConflictError(
            f"{name} {document.pk} cannot move from {current} to {target}.",
            code="invalid_transition",
        )
    setattr(document, field, target)
    logger.info("%s %s: %s -> %s", name, document.pk, current, target)
    return current
