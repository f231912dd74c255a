import logging
from decimal import Decimal
from typing import Optional

from django.db import transaction
from django.db.models import F

from ..exceptions import InsufficientStockError, NotFoundError
from ..models import Item, Material, Project, StockTransaction, Warehouse

logger = logging.getLogger(__name__)


def get_or_create_material(
    project: Project,
    item: Item,
    warehouse: Optional[Warehouse] = None,
    cost_per_unit: Optional[Decimal] = None,
) -> Material:
    """Return the site inventory row for ``item`` at ``project``/``warehouse``.

    A new row starts with zero stock; ``cost_per_unit`` fills in the cost of
    a new row or of an existing row that has none yet.
    """
    material = (
        Material.objects.select_for_update()
        .filter(project=project, item=item, warehouse=warehouse)
        .first()
    )
    if material is None:
        material = Material.objects.create(
            project=project,
            item=item,
            warehouse=warehouse,
            name=item.item_name,
            cost_per_unit=cost_per_unit,
        )
        logger.info(
            "Created material %s for item %s at project %s",
            material.pk,
            item.pk,
            project.pk,
        )
    elif material.cost_per_unit is None and cost_per_unit is not None:
        material.cost_per_unit = cost_per_unit
        material.save(update_fields=["cost_per_unit", "updated_at"])
    return material


@transaction.atomic
def record_stock_transaction(
    material_id: int,
    quantity_change: Decimal,
    transaction_type: str,
    user,
    reference: Optional[str] = None,
    notes: Optional[str] = None,
) -> StockTransaction:
    """Apply ``quantity_change`` to a material's stock and log it.

    The material row is locked for the duration of the enclosing transaction
    and decrements only apply while enough stock remains, so concurrent
    callers cannot take the balance below zero.
    """
    quantity_change = Decimal(str(quantity_change))
    try:
        material = Material.objects.select_for_update().get(pk=material_id)
    except Material.DoesNotExist:
        raise NotFoundError(f"Material {material_id} not found.") from None

    before = material.stock_qty
    rows = Material.objects.filter(pk=material_id)
    if quantity_change < 0:
        rows = rows.filter(stock_qty__gte=-quantity_change)
    updated = rows.update(stock_qty=F("stock_qty") + quantity_change)
    if not updated:
        logger.warning(
            "Insufficient stock for material %s: available %s, requested %s",
            material_id,
            before,
            -quantity_change,
        )
        raise InsufficientStockError(
            f"Insufficient stock for {material.name}. "
            f"Available: {before}, requested: {-quantity_change}.",
            errors={"available": str(before), "requested": str(-quantity_change)},
        )

    material.refresh_from_db(fields=["stock_qty"])
    tx = StockTransaction.objects.create(
        material=material,
        project_id=material.project_id,
        transaction_type=transaction_type,
        quantity_change=quantity_change,
        quantity_before=material.stock_qty - quantity_change,
        quantity_after=material.stock_qty,
        reference=reference,
        user=user,
        notes=notes,
    )
    logger.debug(
        "Stock %s for material %s: %s (now %s)",
        transaction_type,
        material_id,
        quantity_change,
        material.stock_qty,
    )
    return tx


def get_stock_history(material_id: int, limit: int = 50):
    """Return the most recent stock transactions for a material, newest first."""
    return StockTransaction.objects.filter(material_id=material_id).order_by(
        "-transaction_date", "-transaction_id"
    )[:limit]


def get_low_stock(project_id: Optional[int] = None):
    """Materials at or below their minimum stock level, lowest stock first.

    Rows without a minimum level (``0``) are never reported.
    """
    queryset = Material.objects.filter(
        minimum_stock_level__gt=0, stock_qty__lte=F("minimum_stock_level")
    ).select_related("item", "project")
    if project_id is not None:
        queryset = queryset.filter(project_id=project_id)
    return queryset.order_by("stock_qty", "material_id")
