import threading
from decimal import Decimal

import pytest
from django.db import connection, connections

from materials.exceptions import InsufficientStockError, NotFoundError
from materials.models import Material, MaterialIssue, StockTransaction
from materials.services import issue_service, stock_service
from materials.status import StockTransactionType


@pytest.mark.django_db
def test_record_stock_transaction_updates_stock_and_logs(project, item, user):
    material = Material.objects.create(project=project, item=item, name="Cement")
    tx = stock_service.record_stock_transaction(
        material.pk, 12, StockTransactionType.RECEIPT, user, reference="GRN-0001"
    )
    material.refresh_from_db()
    assert material.stock_qty == Decimal("12")
    assert tx.quantity_before == 0
    assert tx.quantity_after == Decimal("12")
    assert StockTransaction.objects.filter(material=material).count() == 1


@pytest.mark.django_db
def test_decrement_below_zero_is_refused(project, item, user):
    material = Material.objects.create(
        project=project, item=item, name="Cement", stock_qty=Decimal("2")
    )
    with pytest.raises(InsufficientStockError):
        stock_service.record_stock_transaction(material.pk, -3, StockTransactionType.ISSUE, user)
    material.refresh_from_db()
    assert material.stock_qty == Decimal("2")
    assert not StockTransaction.objects.exists()


@pytest.mark.django_db
def test_unknown_material(user):
    with pytest.raises(NotFoundError):
        stock_service.record_stock_transaction(999, 1, StockTransactionType.RECEIPT, user)


@pytest.mark.django_db
def test_get_or_create_material_fills_missing_cost(project, item):
    material = stock_service.get_or_create_material(project, item)
    assert material.cost_per_unit is None
    again = stock_service.get_or_create_material(project, item, cost_per_unit=Decimal("7.25"))
    assert again.pk == material.pk
    assert again.cost_per_unit == Decimal("7.25")
    kept = stock_service.get_or_create_material(project, item, cost_per_unit=Decimal("9.99"))
    assert kept.cost_per_unit == Decimal("7.25")


@pytest.mark.django_db
def test_get_stock_history_newest_first(stocked_material, project, user):
    issue_service.issue(project.pk, stocked_material.pk, 1, user)
    issue_service.issue(project.pk, stocked_material.pk, 2, user)
    history = list(stock_service.get_stock_history(stocked_material.pk, limit=2))
    assert [tx.quantity_change for tx in history] == [Decimal("-2"), Decimal("-1")]


@pytest.mark.django_db
def test_sequential_issues_stop_at_zero(project, item, user):
    material = Material.objects.create(
        project=project, item=item, name="Cement", stock_qty=Decimal("10")
    )
    results = []
    for _ in range(4):
        try:
            issue_service.issue(project.pk, material.pk, 3, user)
            results.append(True)
        except InsufficientStockError:
            results.append(False)
    material.refresh_from_db()
    assert results == [True, True, True, False]
    assert material.stock_qty == Decimal("1")


@pytest.mark.skipif(connection.vendor == "sqlite", reason="requires row-level locking")
@pytest.mark.django_db(transaction=True)
def test_concurrent_issues_never_oversell(project, item, user):
    material = Material.objects.create(
        project=project, item=item, name="Cement", stock_qty=Decimal("10")
    )
    outcomes = []
    barrier = threading.Barrier(5)

    def worker():
        barrier.wait()
        try:
            issue_service.issue(project.pk, material.pk, 3, user)
            outcomes.append("ok")
        except InsufficientStockError:
            outcomes.append("short")
        finally:
            connections.close_all()

    threads = [threading.Thread(target=worker) for _ in range(5)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    material.refresh_from_db()
    assert outcomes.count("ok") == 3
    assert material.stock_qty == Decimal("1")
    assert MaterialIssue.objects.count() == 3


@pytest.mark.django_db
def test_low_stock_lists_materials_at_or_below_minimum(
    project, other_project, item_factory
):
    low = Material.objects.create(
        project=project,
        item=item_factory(),
        name="Cement",
        stock_qty=Decimal("5"),
        minimum_stock_level=Decimal("20"),
    )
    at_level = Material.objects.create(
        project=project,
        item=item_factory(item_name="Rebar 12mm"),
        name="Rebar",
        stock_qty=Decimal("10"),
        minimum_stock_level=Decimal("10"),
    )
    Material.objects.create(
        project=project,
        item=item_factory(item_name="Sand"),
        name="Sand",
        stock_qty=Decimal("50"),
        minimum_stock_level=Decimal("10"),
    )
    Material.objects.create(
        project=project,
        item=item_factory(item_name="Gravel"),
        name="Gravel",
        stock_qty=Decimal("0"),
    )
    elsewhere = Material.objects.create(
        project=other_project,
        item=item_factory(item_name="Bricks"),
        name="Bricks",
        stock_qty=Decimal("1"),
        minimum_stock_level=Decimal("100"),
    )

    assert list(stock_service.get_low_stock()) == [elsewhere, low, at_level]
    assert list(stock_service.get_low_stock(project.pk)) == [low, at_level]
