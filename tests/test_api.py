from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from materials.models import Material, MaterialRequirementRequest, PurchaseOrder
from materials.status import MrrStatus, POStatus


@pytest.mark.django_db
def test_api_requires_authentication(project):
    response = APIClient().get("/api/projects/")
    assert response.status_code == 403
    assert response.json()["status_code"] == 403


@pytest.mark.django_db
def test_catalog_crud(api_client, category, unit):
    response = api_client.post(
        "/api/items/",
        {"item_code": "RB-12", "item_name": "Rebar 12mm", "category": category.pk, "unit": unit.pk},
        format="json",
    )
    assert response.status_code == 201
    item_id = response.json()["item_id"]

    listing = api_client.get("/api/items/", {"name": "rebar"})
    assert listing.status_code == 200
    assert [i["item_id"] for i in listing.json()["results"]] == [item_id]

    response = api_client.patch(f"/api/items/{item_id}/", {"is_active": False}, format="json")
    assert response.json()["is_active"] is False


@pytest.mark.django_db
def test_materials_are_read_only(api_client, stocked_material):
    response = api_client.post("/api/materials/", {"name": "x"}, format="json")
    assert response.status_code == 405
    detail = api_client.get(f"/api/materials/{stocked_material.pk}/")
    assert Decimal(detail.json()["stock_qty"]) == Decimal("100")
    history = api_client.get(f"/api/materials/{stocked_material.pk}/history/")
    assert history.json()[0]["transaction_type"] == "RECEIPT"


@pytest.mark.django_db
def test_mrr_create_and_decide(api_client, project, item):
    response = api_client.post(
        "/api/mrrs/",
        {
            "project_id": project.pk,
            "priority": "URGENT",
            "items": [{"item_id": item.pk, "quantity_requested": "12.5"}],
        },
        format="json",
    )
    assert response.status_code == 201
    body = response.json()
    assert body["status"] == MrrStatus.PENDING
    assert len(body["items"]) == 1

    decided = api_client.patch(
        f"/api/mrrs/{body['mrr_id']}/decide/", {"decision": "APPROVED"}, format="json"
    )
    assert decided.status_code == 200
    assert decided.json()["status"] == MrrStatus.APPROVED

    again = api_client.patch(
        f"/api/mrrs/{body['mrr_id']}/decide/", {"decision": "REJECTED"}, format="json"
    )
    assert again.status_code == 409
    assert again.json()["code"] == "invalid_transition"


@pytest.mark.django_db
def test_mrr_without_items_is_400(api_client, project):
    response = api_client.post(
        "/api/mrrs/", {"project_id": project.pk, "items": []}, format="json"
    )
    assert response.status_code == 400
    assert response.json()["errors"] == {"items": "empty"}


@pytest.mark.django_db
def test_delete_mrr(api_client, project, item, approved_mrr):
    pending = api_client.post(
        "/api/mrrs/",
        {"project_id": project.pk, "items": [{"item_id": item.pk, "quantity_requested": 1}]},
        format="json",
    ).json()
    assert api_client.delete(f"/api/mrrs/{pending['mrr_id']}/").status_code == 204
    assert api_client.delete(f"/api/mrrs/{approved_mrr.pk}/").status_code == 409
    assert MaterialRequirementRequest.objects.count() == 1


@pytest.mark.django_db
def test_purchase_order_workflow(api_client, approved_mrr, supplier, item):
    response = api_client.post(
        "/api/purchase-orders/",
        {
            "mrr_id": approved_mrr.pk,
            "supplier_id": supplier.pk,
            "items": [{"item_id": item.pk, "quantity_ordered": 100, "unit_price": "10.00"}],
        },
        format="json",
    )
    assert response.status_code == 201
    po = response.json()
    assert po["status"] == POStatus.DRAFT
    assert Decimal(po["total_amount"]) == Decimal("1000.00")
    assert po["project"] == approved_mrr.project_id

    url = f"/api/purchase-orders/{po['po_id']}"
    edited = api_client.patch(
        f"{url}/items/",
        {"items": [{"item_id": item.pk, "quantity_ordered": 80, "unit_price": "10.00"}]},
        format="json",
    )
    assert Decimal(edited.json()["subtotal"]) == Decimal("800.00")

    assert api_client.patch(f"{url}/place/").status_code == 409
    assert api_client.patch(f"{url}/approve/").json()["status"] == POStatus.APPROVED
    assert api_client.patch(f"{url}/place/").json()["status"] == POStatus.PLACED
    assert api_client.patch(f"{url}/acknowledge/").json()["status"] == POStatus.ACKNOWLEDGED

    po_item_id = edited.json()["items"][0]["po_item_id"]
    receipt = api_client.post(
        "/api/receipts/",
        {"po_id": po["po_id"], "items": [{"po_item_id": po_item_id, "quantity_received": 30}]},
        format="json",
    )
    assert receipt.status_code == 201
    assert receipt.json()["receipt_number"].startswith("GRN-")

    progress = api_client.get(f"{url}/progress/").json()
    assert progress["status"] == POStatus.PARTIALLY_RECEIVED
    assert progress["percent"] == 37

    over = api_client.post(
        "/api/receipts/",
        {"po_id": po["po_id"], "items": [{"po_item_id": po_item_id, "quantity_received": 51}]},
        format="json",
    )
    assert over.status_code == 400
    assert over.json()["code"] == "over_receipt"

    assert api_client.patch(f"{url}/close/").json()["status"] == POStatus.CLOSED
    assert PurchaseOrder.objects.get().status == POStatus.CLOSED


@pytest.mark.django_db
def test_standalone_po_and_cancel(api_client, project, supplier, item):
    po = api_client.post(
        "/api/purchase-orders/",
        {
            "project_id": project.pk,
            "supplier_id": supplier.pk,
            "items": [{"item_id": item.pk, "quantity_ordered": 1, "unit_price": 5}],
        },
        format="json",
    ).json()
    assert po["mrr"] is None
    cancelled = api_client.patch(f"/api/purchase-orders/{po['po_id']}/cancel/")
    assert cancelled.json()["status"] == POStatus.CANCELLED


@pytest.mark.django_db
def test_unknown_supplier_is_404(api_client, project, item):
    response = api_client.post(
        "/api/purchase-orders/",
        {
            "project_id": project.pk,
            "supplier_id": 4040,
            "items": [{"item_id": item.pk, "quantity_ordered": 1, "unit_price": 5}],
        },
        format="json",
    )
    assert response.status_code == 404
    assert response.json()["code"] == "not_found"


@pytest.mark.django_db
def test_issue_return_consume_and_calculate(api_client, stocked_material, project, user):
    short = api_client.post(
        "/api/issues/",
        {"project_id": project.pk, "material_id": stocked_material.pk, "quantity_issued": 500},
        format="json",
    )
    assert short.status_code == 409
    assert short.json()["code"] == "insufficient_stock"

    issued = api_client.post(
        "/api/issues/",
        {"project_id": project.pk, "material_id": stocked_material.pk, "quantity_issued": 30},
        format="json",
    )
    assert issued.status_code == 201
    issue = issued.json()
    assert issue["issued_by"] == user.pk

    returned = api_client.post(
        "/api/returns/", {"issue_id": issue["issue_id"], "quantity": 10}, format="json"
    )
    assert returned.status_code == 201
    assert returned.json()["restocked"] is True

    consumed = api_client.post(
        "/api/consumptions/",
        {"issue_id": issue["issue_id"], "quantity_consumed": 20},
        format="json",
    )
    assert consumed.status_code == 201

    too_much = api_client.post(
        "/api/returns/", {"issue_id": issue["issue_id"], "quantity": 1}, format="json"
    )
    assert too_much.status_code == 400
    assert too_much.json()["code"] == "exceeds_issued"

    received = api_client.patch(f"/api/issues/{issue['issue_id']}/mark-received/")
    assert received.json()["status"] == "RECEIVED"

    report = api_client.get("/api/consumptions/calculate/", {"project": project.pk}).json()
    [row] = report["rows"]
    assert Decimal(row["consumed"]) == Decimal("20")
    assert Decimal(row["total_cost"]) == Decimal("200.00")
    assert report["summary"]["total_materials"] == 1

    assert Material.objects.get().stock_qty == Decimal("80")


@pytest.mark.django_db
def test_cancel_issue_via_api(api_client, stocked_material, project):
    issue = api_client.post(
        "/api/issues/",
        {"project_id": project.pk, "material_id": stocked_material.pk, "quantity_issued": 5},
        format="json",
    ).json()
    response = api_client.patch(f"/api/issues/{issue['issue_id']}/cancel/")
    assert response.json()["status"] == "CANCELLED"
    stocked_material.refresh_from_db()
    assert stocked_material.stock_qty == Decimal("100")


@pytest.mark.django_db
def test_calculate_for_unknown_project(api_client):
    response = api_client.get("/api/consumptions/calculate/", {"project": 999})
    assert response.status_code == 404


@pytest.mark.django_db
def test_invalid_payload_is_400(api_client, project):
    response = api_client.post("/api/issues/", {"project_id": project.pk}, format="json")
    assert response.status_code == 400
    body = response.json()
    assert "material_id" in body
    assert body["status_code"] == 400


@pytest.mark.django_db
def test_deleting_referenced_catalog_rows_is_409(api_client, stocked_material, project, unit):
    response = api_client.delete(f"/api/projects/{project.pk}/")
    assert response.status_code == 409
    assert response.json()["code"] == "protected"

    response = api_client.delete(f"/api/units/{unit.pk}/")
    assert response.status_code == 409
    assert response.json()["status_code"] == 409

    assert Material.objects.filter(project=project).exists()


@pytest.mark.django_db
def test_low_stock_listing(api_client, stocked_material, project):
    assert api_client.get("/api/materials/low-stock/").json() == []

    Material.objects.filter(pk=stocked_material.pk).update(minimum_stock_level=Decimal("150"))
    response = api_client.get("/api/materials/low-stock/", {"project": project.pk})
    assert response.status_code == 200
    assert [row["material_id"] for row in response.json()] == [stocked_material.pk]

    missing = api_client.get("/api/materials/low-stock/", {"project": 99999})
    assert missing.status_code == 404


@pytest.mark.django_db
def test_mrr_check_inventory(api_client, stocked_material, approved_mrr):
    response = api_client.get(f"/api/mrrs/{approved_mrr.pk}/check-inventory/")
    assert response.status_code == 200
    body = response.json()
    assert body["all_available"] is True
    line = body["items"][0]
    assert line["status"] == "AVAILABLE"
    assert Decimal(str(line["available_stock"])) == Decimal("100")
