import os
import sys
from decimal import Decimal

import django
import pytest

# Ensure project root is on sys.path
PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "procurement_app.settings")
django.setup()

from materials.models import (  # noqa: E402
    Category,
    Item,
    Project,
    Supplier,
    Unit,
)
from materials.services import (  # noqa: E402
    mrr_service,
    purchase_order_service,
    receipt_service,
)


@pytest.fixture
def user(db):
    from django.contrib.auth import get_user_model

    return get_user_model().objects.create_user(username="site.engineer", password="pw")


@pytest.fixture
def approver(db):
    from django.contrib.auth import get_user_model

    return get_user_model().objects.create_user(username="project.manager", password="pw")


@pytest.fixture
def project(db):
    return Project.objects.create(name="Tower A", code="TWA", location="Plot 12")


@pytest.fixture
def other_project(db):
    return Project.objects.create(name="Tower B", code="TWB")


@pytest.fixture
def unit(db):
    return Unit.objects.create(unit_name="Bags", unit_symbol="bag")


@pytest.fixture
def category(db):
    return Category.objects.create(category_name="Cement")


@pytest.fixture
def item_factory(category, unit):
    def create_item(**kwargs):
        defaults = {
            "item_code": f"ITM-{Item.objects.count() + 1:03d}",
            "item_name": "Portland Cement 50kg",
            "category": category,
            "unit": unit,
            "is_active": True,
        }
        defaults.update(kwargs)
        return Item.objects.create(**defaults)

    return create_item


@pytest.fixture
def item(item_factory):
    return item_factory()


@pytest.fixture
def supplier(db):
    return Supplier.objects.create(supplier_name="Acme Building Supplies")


@pytest.fixture
def approved_mrr(project, item, user, approver):
    mrr = mrr_service.create_mrr(
        project.pk, user, [{"item_id": item.pk, "quantity_requested": 100}]
    )
    return mrr_service.decide(mrr.pk, approver, "APPROVED")


@pytest.fixture
def po_factory(project, supplier, item, user, approver):
    """Create a purchase order for ``item`` and move it to ``status``."""

    def create_po(quantity=100, unit_price=10, tax_rate=0, status="DRAFT", mrr=None):
        lines = [
            {
                "item_id": item.pk,
                "quantity_ordered": quantity,
                "unit_price": unit_price,
                "tax_rate": tax_rate,
            }
        ]
        if mrr is not None:
            po = purchase_order_service.create_from_mrr(mrr.pk, supplier.pk, lines, user)
        else:
            po = purchase_order_service.create_standalone(project.pk, supplier.pk, lines, user)
        if status in ("APPROVED", "PLACED"):
            po = purchase_order_service.approve(po.pk, approver)
        if status == "PLACED":
            po = purchase_order_service.place(po.pk)
        return po

    return create_po


@pytest.fixture
def stocked_material(po_factory, user):
    """Receive 100 units at 10.00 into site stock and return the material."""
    po = po_factory(quantity=100, unit_price=10, status="PLACED")
    po_item = po.items.get()
    receipt_service.create_receipt(
        po.pk, user, [{"po_item_id": po_item.pk, "quantity_received": 100}]
    )
    material = po.project.materials.get(item=po_item.item)
    assert material.stock_qty == Decimal("100")
    return material


@pytest.fixture
def api_client(user):
    """REST framework client authenticated as ``user``."""
    from rest_framework.test import APIClient

    client = APIClient()
    client.force_authenticate(user=user)
    yield client
    client.force_authenticate(user=None)
