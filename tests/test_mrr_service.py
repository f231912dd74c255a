from datetime import date
from decimal import Decimal

import pytest

from materials.exceptions import ConflictError, NotFoundError, ValidationError
from materials.models import Material, MaterialRequirementRequest
from materials.services import mrr_service, purchase_order_service
from materials.status import MrrStatus


@pytest.mark.django_db
def test_create_mrr_is_pending_with_numbered_items(project, item, user):
    mrr = mrr_service.create_mrr(
        project.pk,
        user,
        [
            {"item_id": item.pk, "quantity_requested": "25.5"},
            {"item_id": item.pk, "quantity_requested": 4, "estimated_cost_per_unit": 9.5},
        ],
        priority="HIGH",
    )
    assert mrr.status == MrrStatus.PENDING
    assert mrr.priority == "HIGH"
    lines = list(mrr.items.all())
    assert [ln.line_no for ln in lines] == [1, 2]
    assert lines[0].quantity_requested == Decimal("25.5")
    assert lines[0].unit_id == item.unit_id
    assert lines[1].estimated_cost_per_unit == Decimal("9.50")


@pytest.mark.django_db
def test_mrr_numbers_follow_monthly_sequence(project, item, user):
    today = date.today()
    prefix = f"MRR{today.year}{today.month:02d}"
    first = mrr_service.create_mrr(project.pk, user, [{"item_id": item.pk, "quantity_requested": 1}])
    second = mrr_service.create_mrr(project.pk, user, [{"item_id": item.pk, "quantity_requested": 1}])
    assert first.mrr_number == f"{prefix}0001"
    assert second.mrr_number == f"{prefix}0002"


def test_generate_mrr_number_for_given_month(db):
    assert mrr_service.generate_mrr_number(date(2024, 3, 9)) == "MRR2024030001"


@pytest.mark.django_db
@pytest.mark.parametrize(
    "items",
    [
        [],
        [{"quantity_requested": "lots"}],
        [{"item_id": None, "quantity_requested": 0}],
    ],
)
def test_create_mrr_rejects_bad_items(project, item, user, items):
    for line in items:
        line.setdefault("item_id", item.pk)
    with pytest.raises(ValidationError):
        mrr_service.create_mrr(project.pk, user, items)
    assert MaterialRequirementRequest.objects.count() == 0


@pytest.mark.django_db
def test_create_mrr_unknown_project(item, user):
    with pytest.raises(NotFoundError):
        mrr_service.create_mrr(9999, user, [{"item_id": item.pk, "quantity_requested": 1}])


@pytest.mark.django_db
def test_decide_approve_records_approver(project, item, user, approver):
    mrr = mrr_service.create_mrr(project.pk, user, [{"item_id": item.pk, "quantity_requested": 3}])
    mrr = mrr_service.decide(mrr.pk, approver, "approve")
    mrr.refresh_from_db()
    assert mrr.status == MrrStatus.APPROVED
    assert mrr.approved_by == approver
    assert mrr.decided_at is not None


@pytest.mark.django_db
def test_decide_reject_stores_reason(project, item, user, approver):
    mrr = mrr_service.create_mrr(project.pk, user, [{"item_id": item.pk, "quantity_requested": 3}])
    mrr_service.decide(mrr.pk, approver, "REJECTED", reason="Over budget")
    mrr.refresh_from_db()
    assert mrr.status == MrrStatus.REJECTED
    assert mrr.rejection_reason == "Over budget"


@pytest.mark.django_db
def test_second_decision_is_a_conflict(approved_mrr, approver):
    with pytest.raises(ConflictError):
        mrr_service.decide(approved_mrr.pk, approver, "REJECTED")
    approved_mrr.refresh_from_db()
    assert approved_mrr.status == MrrStatus.APPROVED


@pytest.mark.django_db
def test_unknown_decision(approved_mrr, approver):
    with pytest.raises(ValidationError):
        mrr_service.decide(approved_mrr.pk, approver, "MAYBE")


@pytest.mark.django_db
def test_delete_pending_mrr(project, item, user):
    mrr = mrr_service.create_mrr(project.pk, user, [{"item_id": item.pk, "quantity_requested": 1}])
    mrr_service.delete_mrr(mrr.pk)
    assert not MaterialRequirementRequest.objects.filter(pk=mrr.pk).exists()


@pytest.mark.django_db
def test_delete_decided_mrr_is_refused(approved_mrr, supplier, item, user):
    purchase_order_service.create_from_mrr(
        approved_mrr.pk,
        supplier.pk,
        [{"item_id": item.pk, "quantity_ordered": 1, "unit_price": 1}],
        user,
    )
    with pytest.raises(ConflictError):
        mrr_service.delete_mrr(approved_mrr.pk)
    assert MaterialRequirementRequest.objects.filter(pk=approved_mrr.pk).exists()


@pytest.mark.django_db
def test_mrr_sequence_continues_past_four_digits(project, user):
    for number in ("MRR2026019999", "MRR20260110000"):
        MaterialRequirementRequest.objects.create(
            mrr_number=number, project=project, requested_by=user
        )
    assert mrr_service.generate_mrr_number(date(2026, 1, 5)) == "MRR20260110001"
    assert mrr_service.generate_mrr_number(date(2026, 2, 1)) == "MRR2026020001"


@pytest.mark.django_db
def test_check_inventory_compares_lines_with_project_stock(
    stocked_material, project, other_project, item, item_factory, user
):
    rebar = item_factory(item_name="Rebar 12mm")
    sand = item_factory(item_name="Sand")
    Material.objects.create(project=project, item=rebar, name="Rebar", stock_qty=Decimal("2"))
    Material.objects.create(
        project=other_project, item=sand, name="Sand", stock_qty=Decimal("500")
    )
    mrr = mrr_service.create_mrr(
        project.pk,
        user,
        [
            {"item_id": item.pk, "quantity_requested": 60},
            {"item_id": rebar.pk, "quantity_requested": 5},
            {"item_id": sand.pk, "quantity_requested": 1},
        ],
    )

    result = mrr_service.check_inventory(mrr.pk)

    assert result["mrr_number"] == mrr.mrr_number
    assert result["all_available"] is False
    rows = {row["item_id"]: row for row in result["items"]}
    assert rows[item.pk]["status"] == "AVAILABLE"
    assert rows[item.pk]["available_stock"] == Decimal("100")
    assert rows[item.pk]["shortfall"] == Decimal("0")
    assert rows[rebar.pk]["status"] == "INSUFFICIENT_STOCK"
    assert rows[rebar.pk]["shortfall"] == Decimal("3")
    assert rows[sand.pk]["status"] == "NOT_IN_STOCK"
    assert rows[sand.pk]["available_stock"] == Decimal("0")
    assert not Material.objects.filter(project=project, item=sand).exists()


@pytest.mark.django_db
def test_check_inventory_all_available(stocked_material, approved_mrr):
    result = mrr_service.check_inventory(approved_mrr.pk)
    assert result["all_available"] is True
    assert result["items"][0]["required_quantity"] == Decimal("100")


@pytest.mark.django_db
def test_check_inventory_refuses_rejected_mrr(project, item, user, approver):
    mrr = mrr_service.create_mrr(project.pk, user, [{"item_id": item.pk, "quantity_requested": 1}])
    mrr_service.decide(mrr.pk, approver, "REJECTED", "Not needed")
    with pytest.raises(ConflictError):
        mrr_service.check_inventory(mrr.pk)
    with pytest.raises(NotFoundError):
        mrr_service.check_inventory(99999)
