import logging
from datetime import date
from decimal import Decimal

import pytest

from materials.models import Material, SiteTransfer
from materials.services import (
    consumption_service,
    issue_service,
    mrr_service,
    purchase_order_service,
    receipt_service,
    return_service,
)
from materials.status import IssueStatus, POStatus, TransferStatus


@pytest.mark.django_db
def test_requisition_to_consumption_flow(project, item, supplier, user, approver):
    mrr = mrr_service.create_mrr(
        project.pk, user, [{"item_id": item.pk, "quantity_requested": 100}]
    )
    mrr_service.decide(mrr.pk, approver, "APPROVED")

    po = purchase_order_service.create_from_mrr(
        mrr.pk,
        supplier.pk,
        [{"item_id": item.pk, "quantity_ordered": 100, "unit_price": 10}],
        user,
    )
    assert po.total_amount == Decimal("1000.00")
    purchase_order_service.approve(po.pk, approver)
    purchase_order_service.place(po.pk)

    po_item = po.items.get()
    receipt_service.create_receipt(po.pk, user, [{"po_item_id": po_item.pk, "quantity_received": 60}])
    po.refresh_from_db()
    assert po.status == POStatus.PARTIALLY_RECEIVED
    receipt_service.create_receipt(po.pk, user, [{"po_item_id": po_item.pk, "quantity_received": 40}])
    po.refresh_from_db()
    assert po.status == POStatus.FULLY_RECEIVED

    material = Material.objects.get(project=project, item=item)
    assert material.stock_qty == Decimal("100")

    issue = issue_service.issue(project.pk, material.pk, 30, user, mrr_id=mrr.pk)
    return_service.return_material(issue.pk, 10, user)
    return_service.consume(issue.pk, 20, user)
    material.refresh_from_db()
    assert material.stock_qty == Decimal("80")

    rows = consumption_service.calculate_consumption(project.pk)
    assert len(rows) == 1
    row = rows[0]
    assert row["material_name"] == item.item_name
    assert row["total_issued"] == Decimal("30")
    assert row["total_returned"] == Decimal("10")
    assert row["total_transferred"] == 0
    assert row["consumed"] == Decimal("20")
    assert row["cost_missing"] is False
    assert row["total_cost"] == Decimal("200.00")


@pytest.mark.django_db
def test_no_activity_returns_empty(project):
    assert consumption_service.calculate_consumption(project.pk) == []
    assert consumption_service.summarize([])["total_materials"] == 0


@pytest.mark.django_db
def test_cancelled_issues_are_ignored(stocked_material, project, user):
    kept = issue_service.issue(project.pk, stocked_material.pk, 8, user)
    dropped = issue_service.issue(project.pk, stocked_material.pk, 5, user)
    issue_service.cancel(dropped.pk, user)
    assert kept.status == IssueStatus.ISSUED
    [row] = consumption_service.calculate_consumption(project.pk)
    assert row["total_issued"] == Decimal("8")


@pytest.mark.django_db
def test_completed_transfers_reduce_consumption(stocked_material, project, other_project, user):
    issue_service.issue(project.pk, stocked_material.pk, 30, user)
    for status, qty in ((TransferStatus.COMPLETED, 5), (TransferStatus.PENDING, 7)):
        SiteTransfer.objects.create(
            from_project=project,
            to_project=other_project,
            material=stocked_material,
            quantity=qty,
            transfer_date=date.today(),
            status=status,
        )
    [row] = consumption_service.calculate_consumption(project.pk)
    assert row["total_transferred"] == Decimal("5")
    assert row["consumed"] == Decimal("25")
    assert row["total_cost"] == Decimal("250.00")


@pytest.mark.django_db
def test_missing_cost_is_flagged_and_logged(project, item, user, caplog):
    material = Material.objects.create(
        project=project, item=item, name="Sand", stock_qty=Decimal("10")
    )
    issue_service.issue(project.pk, material.pk, 4, user)
    with caplog.at_level(logging.WARNING, logger="materials.services.consumption_service"):
        rows = consumption_service.calculate_consumption()
    [row] = rows
    assert row["cost_missing"] is True
    assert row["total_cost"] == Decimal("0.00")
    assert "without cost_per_unit" in caplog.text
    assert consumption_service.summarize(rows)["materials_missing_cost"] == 1


@pytest.mark.django_db
def test_rows_are_grouped_per_project(stocked_material, project, other_project, item, user):
    elsewhere = Material.objects.create(
        project=other_project,
        item=item,
        name=item.item_name,
        stock_qty=Decimal("50"),
        cost_per_unit=Decimal("2.00"),
    )
    issue_service.issue(project.pk, stocked_material.pk, 10, user)
    issue_service.issue(other_project.pk, elsewhere.pk, 3, user)

    rows = consumption_service.calculate_consumption()
    assert {(r["project_name"], r["consumed"]) for r in rows} == {
        ("Tower A", Decimal("10")),
        ("Tower B", Decimal("3")),
    }
    summary = consumption_service.summarize(rows)
    assert summary["total_materials"] == 2
    assert summary["total_consumed_quantity"] == Decimal("13")
    assert summary["total_cost"] == Decimal("106.00")

    [only] = consumption_service.calculate_consumption(other_project.pk)
    assert only["material_id"] == elsewhere.pk
