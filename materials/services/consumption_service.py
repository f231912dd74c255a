"""On-demand consumption figures derived from the material ledger.

For every (project, material) pair with activity::

    consumed   = issued - returned - transferred out
    total_cost = consumed * cost_per_unit

Cancelled issues are ignored and only completed site transfers count. A
material without a cost is costed at zero and flagged with ``cost_missing``.
"""

import logging
from decimal import Decimal
from typing import Any, Dict, List, Optional, Tuple

from django.db.models import Sum

from ..models import Material, MaterialIssue, MaterialReturn, Project, SiteTransfer
from ..status import IssueStatus, TransferStatus
from .validation import money

logger = logging.getLogger(__name__)

ZERO = Decimal("0")

Key = Tuple[int, int]


def _sums(queryset, project_field: str, quantity_field: str) -> Dict[Key, Decimal]:
    rows = (
        queryset.order_by()
        .values(project_field, "material_id")
        .annotate(total=Sum(quantity_field))
    )
    return {(r[project_field], r["material_id"]): r["total"] or ZERO for r in rows}


def calculate_consumption(project_id: Optional[int] = None) -> List[Dict[str, Any]]:
    """Return one consumption row per (project, material), optionally for one project."""
    issues = MaterialIssue.objects.exclude(status=IssueStatus.CANCELLED)
    returns = MaterialReturn.objects.all()
    transfers = SiteTransfer.objects.filter(status=TransferStatus.COMPLETED)
    if project_id is not None:
        issues = issues.filter(project_id=project_id)
        returns = returns.filter(project_id=project_id)
        transfers = transfers.filter(from_project_id=project_id)

    issued = _sums(issues, "project_id", "quantity_issued")
    returned = _sums(returns, "project_id", "quantity")
    transferred = _sums(transfers, "from_project_id", "quantity")

    keys = sorted(set(issued) | set(returned) | set(transferred))
    if not keys:
        return []

    materials = Material.objects.in_bulk({material_id for _, material_id in keys})
    projects = Project.objects.in_bulk({project_id for project_id, _ in keys})

    rows = []
    missing_cost = []
    for key in keys:
        proj_id, material_id = key
        material = materials[material_id]
        total_issued = issued.get(key, ZERO)
        total_returned = returned.get(key, ZERO)
        total_transferred = transferred.get(key, ZERO)
        consumed = total_issued - total_returned - total_transferred
        cost_missing = material.cost_per_unit is None
        if cost_missing:
            missing_cost.append(material_id)
        cost_per_unit = material.cost_per_unit or ZERO
        rows.append(
            {
                "project_id": proj_id,
                "project_name": projects[proj_id].name,
                "material_id": material_id,
                "material_name": material.name,
                "total_issued": total_issued,
                "total_returned": total_returned,
                "total_transferred": total_transferred,
                "consumed": consumed,
                "cost_per_unit": cost_per_unit,
                "cost_missing": cost_missing,
                "total_cost": money(consumed * cost_per_unit),
            }
        )
    if missing_cost:
        logger.warning(
            "Consumption costed at zero for materials without cost_per_unit: %s",
            ", ".join(str(m) for m in sorted(set(missing_cost))),
        )
    return rows


def summarize(rows: List[Dict[str, Any]]) -> Dict[str, Any]:
    return {
        "total_materials": len(rows),
        "total_consumed_quantity": sum((r["consumed"] for r in rows), ZERO),
        "total_cost": sum((r["total_cost"] for r in rows), Decimal("0.00")),
        "materials_missing_cost": sum(1 for r in rows if r["cost_missing"]),
    }
