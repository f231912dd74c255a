from django.contrib.auth import get_user_model
from rest_framework import mixins, permissions, status, viewsets
from rest_framework.decorators import action
from rest_framework.response import Response

from ..models import (
    Brand,
    Category,
    Item,
    Material,
    MaterialConsumption,
    MaterialIssue,
    MaterialReceipt,
    MaterialRequirementRequest,
    MaterialReturn,
    Project,
    PurchaseOrder,
    SiteTransfer,
    StockTransaction,
    Supplier,
    Unit,
    Warehouse,
)
from ..serializers import (
    BrandSerializer,
    CategorySerializer,
    ConsumptionCreateSerializer,
    ConsumptionRowSerializer,
    IssueCreateSerializer,
    ItemSerializer,
    MaterialConsumptionSerializer,
    MaterialIssueSerializer,
    MaterialReceiptSerializer,
    MaterialReturnSerializer,
    MaterialSerializer,
    MrrCreateSerializer,
    MrrDecisionSerializer,
    MrrSerializer,
    POItemsSerializer,
    ProjectSerializer,
    PurchaseOrderCreateSerializer,
    PurchaseOrderSerializer,
    ReceiptCreateSerializer,
    ReturnCreateSerializer,
    SiteTransferSerializer,
    StockTransactionSerializer,
    SupplierSerializer,
    UnitSerializer,
    WarehouseSerializer,
)
from ..services import (
    consumption_service,
    issue_service,
    mrr_service,
    purchase_order_service,
    receipt_service,
    return_service,
    stock_service,
)
from ..services.validation import get_object


def _optional_user(user_id):
    if not user_id:
        return None
    return get_object(get_user_model(), user_id, "User")


def _validated(serializer_class, request):
    serializer = serializer_class(data=request.data)
    serializer.is_valid(raise_exception=True)
    return serializer.validated_data


class ListCreateRetrieveViewSet(
    mixins.ListModelMixin,
    mixins.RetrieveModelMixin,
    mixins.CreateModelMixin,
    viewsets.GenericViewSet,
):
    """Base for workflow documents that are only ever created through services."""

    permission_classes = [permissions.IsAuthenticated]


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class ProjectViewSet(viewsets.ModelViewSet):
    """CRUD API for construction projects (sites).

    Query params:
        active: ``true`` to list only active projects.
    """

    queryset = Project.objects.all().order_by("project_id")
    serializer_class = ProjectSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.request.query_params.get("active") == "true":
            queryset = queryset.filter(is_active=True)
        return queryset


class UnitViewSet(viewsets.ModelViewSet):
    queryset = Unit.objects.all().order_by("unit_name")
    serializer_class = UnitSerializer
    permission_classes = [permissions.IsAuthenticated]


class CategoryViewSet(viewsets.ModelViewSet):
    queryset = Category.objects.all().order_by("category_name")
    serializer_class = CategorySerializer
    permission_classes = [permissions.IsAuthenticated]


class BrandViewSet(viewsets.ModelViewSet):
    queryset = Brand.objects.all().order_by("brand_name")
    serializer_class = BrandSerializer
    permission_classes = [permissions.IsAuthenticated]


class ItemViewSet(viewsets.ModelViewSet):
    """API endpoint for CRUD operations on catalog items.

    Query params:
        name: optional substring to filter item names.
        category: exact category id.
    """

    queryset = Item.objects.all().select_related("unit").order_by("item_code")
    serializer_class = ItemSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        queryset = super().get_queryset()
        name = self.request.query_params.get("name")
        category = self.request.query_params.get("category")
        if name:
            queryset = queryset.filter(item_name__icontains=name)
        if category:
            queryset = queryset.filter(category_id=category)
        return queryset


class SupplierViewSet(viewsets.ModelViewSet):
    """Standard CRUD API for suppliers."""

    queryset = Supplier.objects.all().order_by("supplier_name")
    serializer_class = SupplierSerializer
    permission_classes = [permissions.IsAuthenticated]


class WarehouseViewSet(viewsets.ModelViewSet):
    queryset = Warehouse.objects.all().order_by("warehouse_name")
    serializer_class = WarehouseSerializer
    permission_classes = [permissions.IsAuthenticated]


# ---------------------------------------------------------------------------
# Stock
# ---------------------------------------------------------------------------


class MaterialViewSet(viewsets.ReadOnlyModelViewSet):
    """Site stock per project and item; changed only through the stock ledger.

    Query params:
        project: exact project id (also accepted by ``low-stock``).
    """

    queryset = Material.objects.all().select_related("item").order_by("material_id")
    serializer_class = MaterialSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        queryset = super().get_queryset()
        project = self.request.query_params.get("project")
        if project:
            queryset = queryset.filter(project_id=project)
        return queryset

    @action(detail=True, methods=["get"])
    def history(self, request, pk=None):
        material = self.get_object()
        transactions = stock_service.get_stock_history(material.pk)
        return Response(StockTransactionSerializer(transactions, many=True).data)

    @action(detail=False, methods=["get"], url_path="low-stock")
    def low_stock(self, request):
        project_id = request.query_params.get("project")
        if project_id:
            project_id = get_object(Project, project_id, "Project").pk
        materials = stock_service.get_low_stock(project_id or None)
        return Response(MaterialSerializer(materials, many=True).data)


class StockTransactionViewSet(viewsets.ReadOnlyModelViewSet):
    """Browse stock movements with before and after balances."""

    queryset = StockTransaction.objects.all().select_related("material")
    serializer_class = StockTransactionSerializer
    permission_classes = [permissions.IsAuthenticated]

    def get_queryset(self):
        queryset = super().get_queryset()
        material = self.request.query_params.get("material")
        if material:
            queryset = queryset.filter(material_id=material)
        return queryset


class SiteTransferViewSet(viewsets.ReadOnlyModelViewSet):
    queryset = SiteTransfer.objects.all().order_by("-transfer_date", "-transfer_id")
    serializer_class = SiteTransferSerializer
    permission_classes = [permissions.IsAuthenticated]


# ---------------------------------------------------------------------------
# Requisitions and purchasing
# ---------------------------------------------------------------------------


class MrrViewSet(
    mixins.DestroyModelMixin,
    ListCreateRetrieveViewSet,
):
    """Material requirement requests raised by project sites.

    Query params:
        project: exact project id.
        status: exact status match.
    """

    queryset = (
        MaterialRequirementRequest.objects.all()
        .prefetch_related("items")
        .order_by("-mrr_id")
    )
    serializer_class = MrrSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        project = self.request.query_params.get("project")
        mrr_status = self.request.query_params.get("status")
        if project:
            queryset = queryset.filter(project_id=project)
        if mrr_status:
            queryset = queryset.filter(status=mrr_status)
        return queryset

    def create(self, request, *args, **kwargs):
        data = _validated(MrrCreateSerializer, request)
        mrr = mrr_service.create_mrr(
            project_id=data["project_id"],
            requested_by=request.user,
            items_data=data["items"],
            required_date=data.get("required_date"),
            priority=data["priority"],
            notes=data.get("notes"),
        )
        return Response(MrrSerializer(mrr).data, status=status.HTTP_201_CREATED)

    def destroy(self, request, *args, **kwargs):
        mrr_service.delete_mrr(kwargs["pk"])
        return Response(status=status.HTTP_204_NO_CONTENT)

    @action(detail=True, methods=["patch"])
    def decide(self, request, pk=None):
        data = _validated(MrrDecisionSerializer, request)
        mrr = mrr_service.decide(pk, request.user, data["decision"], data.get("reason"))
        return Response(MrrSerializer(mrr).data)

    @action(detail=True, methods=["get"], url_path="check-inventory")
    def check_inventory(self, request, pk=None):
        return Response(mrr_service.check_inventory(pk))


class PurchaseOrderViewSet(ListCreateRetrieveViewSet):
    """Purchase orders, raised from an approved MRR or standalone.

    Query params:
        status: exact status match.
        supplier: exact supplier id.
    """

    queryset = (
        PurchaseOrder.objects.all()
        .select_related("supplier")
        .prefetch_related("items")
        .order_by("-po_id")
    )
    serializer_class = PurchaseOrderSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        po_status = self.request.query_params.get("status")
        supplier = self.request.query_params.get("supplier")
        if po_status:
            queryset = queryset.filter(status=po_status)
        if supplier:
            queryset = queryset.filter(supplier_id=supplier)
        return queryset

    def _respond(self, po):
        po = self.get_queryset().get(pk=po.pk)
        return Response(PurchaseOrderSerializer(po).data)

    def create(self, request, *args, **kwargs):
        data = dict(_validated(PurchaseOrderCreateSerializer, request))
        mrr_id = data.pop("mrr_id", None)
        project_id = data.pop("project_id", None)
        supplier_id = data.pop("supplier_id")
        items = data.pop("items")
        if mrr_id:
            po = purchase_order_service.create_from_mrr(
                mrr_id, supplier_id, items, request.user, **data
            )
        else:
            po = purchase_order_service.create_standalone(
                project_id, supplier_id, items, request.user, **data
            )
        po = self.get_queryset().get(pk=po.pk)
        return Response(PurchaseOrderSerializer(po).data, status=status.HTTP_201_CREATED)

    @action(detail=True, methods=["patch"])
    def items(self, request, pk=None):
        data = _validated(POItemsSerializer, request)
        return self._respond(purchase_order_service.update_items(pk, data["items"]))

    @action(detail=True, methods=["patch"])
    def approve(self, request, pk=None):
        return self._respond(purchase_order_service.approve(pk, request.user))

    @action(detail=True, methods=["patch"])
    def place(self, request, pk=None):
        return self._respond(purchase_order_service.place(pk))

    @action(detail=True, methods=["patch"])
    def acknowledge(self, request, pk=None):
        return self._respond(purchase_order_service.acknowledge(pk))

    @action(detail=True, methods=["patch"])
    def cancel(self, request, pk=None):
        return self._respond(purchase_order_service.cancel(pk))

    @action(detail=True, methods=["patch"])
    def close(self, request, pk=None):
        return self._respond(purchase_order_service.close(pk))

    @action(detail=True, methods=["get"])
    def progress(self, request, pk=None):
        return Response(purchase_order_service.get_po_progress(pk))


class MaterialReceiptViewSet(ListCreateRetrieveViewSet):
    """Goods receipts recorded against placed purchase orders.

    Query params:
        po: exact purchase order id.
    """

    queryset = MaterialReceipt.objects.all().prefetch_related("items").order_by("-receipt_id")
    serializer_class = MaterialReceiptSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        po = self.request.query_params.get("po")
        if po:
            queryset = queryset.filter(purchase_order_id=po)
        return queryset

    def create(self, request, *args, **kwargs):
        data = _validated(ReceiptCreateSerializer, request)
        receipt = receipt_service.create_receipt(
            po_id=data["po_id"],
            received_by=request.user,
            items_data=data["items"],
            warehouse_id=data.get("warehouse_id"),
            project_id=data.get("project_id"),
            receipt_date=data.get("receipt_date"),
            supplier_delivery_note=data.get("supplier_delivery_note"),
            notes=data.get("notes"),
        )
        receipt = self.get_queryset().get(pk=receipt.pk)
        return Response(MaterialReceiptSerializer(receipt).data, status=status.HTTP_201_CREATED)


# ---------------------------------------------------------------------------
# Site usage
# ---------------------------------------------------------------------------


class MaterialIssueViewSet(ListCreateRetrieveViewSet):
    """Issues of site stock to the works.

    Query params:
        project: exact project id.
        status: exact status match.
    """

    queryset = MaterialIssue.objects.all().order_by("-issue_id")
    serializer_class = MaterialIssueSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        project = self.request.query_params.get("project")
        issue_status = self.request.query_params.get("status")
        if project:
            queryset = queryset.filter(project_id=project)
        if issue_status:
            queryset = queryset.filter(status=issue_status)
        return queryset

    def create(self, request, *args, **kwargs):
        data = _validated(IssueCreateSerializer, request)
        material_issue = issue_service.issue(
            project_id=data["project_id"],
            material_id=data["material_id"],
            quantity=data["quantity_issued"],
            issued_by=request.user,
            received_by=_optional_user(data.get("received_by_user_id")),
            status=data["status"],
            mrr_id=data.get("mrr_id"),
            po_id=data.get("po_id"),
            receipt_id=data.get("receipt_id"),
            issue_date=data.get("issue_date"),
            issue_purpose=data.get("issue_purpose"),
            location=data.get("location"),
        )
        return Response(
            MaterialIssueSerializer(material_issue).data, status=status.HTTP_201_CREATED
        )

    @action(detail=True, methods=["patch"], url_path="mark-issued")
    def mark_issued(self, request, pk=None):
        return Response(MaterialIssueSerializer(issue_service.mark_issued(pk)).data)

    @action(detail=True, methods=["patch"], url_path="mark-received")
    def mark_received(self, request, pk=None):
        material_issue = issue_service.mark_received(pk, request.user)
        return Response(MaterialIssueSerializer(material_issue).data)

    @action(detail=True, methods=["patch"])
    def cancel(self, request, pk=None):
        material_issue = issue_service.cancel(pk, request.user)
        return Response(MaterialIssueSerializer(material_issue).data)


class MaterialReturnViewSet(ListCreateRetrieveViewSet):
    queryset = MaterialReturn.objects.all().order_by("-return_id")
    serializer_class = MaterialReturnSerializer

    def create(self, request, *args, **kwargs):
        data = _validated(ReturnCreateSerializer, request)
        material_return = return_service.return_material(
            issue_id=data["issue_id"],
            quantity=data["quantity"],
            returned_by=request.user,
            quality_status=data["quality_status"],
            approved_by=_optional_user(data.get("approved_by_user_id")),
            return_date=data.get("return_date"),
            return_reason=data.get("return_reason"),
        )
        return Response(
            MaterialReturnSerializer(material_return).data, status=status.HTTP_201_CREATED
        )


class MaterialConsumptionViewSet(ListCreateRetrieveViewSet):
    """Recorded consumption plus the on-demand consumption calculator."""

    queryset = MaterialConsumption.objects.all().order_by("-consumption_id")
    serializer_class = MaterialConsumptionSerializer

    def create(self, request, *args, **kwargs):
        data = _validated(ConsumptionCreateSerializer, request)
        consumption = return_service.consume(
            issue_id=data["issue_id"],
            quantity=data["quantity_consumed"],
            recorded_by=request.user,
            consumption_type=data["consumption_type"],
            consumption_date=data.get("consumption_date"),
            consumption_purpose=data.get("consumption_purpose"),
        )
        return Response(
            MaterialConsumptionSerializer(consumption).data, status=status.HTTP_201_CREATED
        )

    @action(detail=False, methods=["get"])
    def calculate(self, request):
        project_id = request.query_params.get("project")
        if project_id:
            project_id = get_object(Project, project_id, "Project").pk
        rows = consumption_service.calculate_consumption(project_id or None)
        return Response(
            {
                "rows": ConsumptionRowSerializer(rows, many=True).data,
                "summary": consumption_service.summarize(rows),
            }
        )
