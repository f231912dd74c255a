from rest_framework import serializers

from .models import (
    Brand,
    Category,
    Item,
    Material,
    MaterialConsumption,
    MaterialIssue,
    MaterialReceipt,
    MaterialReceiptItem,
    MaterialRequirementRequest,
    MaterialReturn,
    MrrItem,
    Project,
    PurchaseOrder,
    PurchaseOrderItem,
    SiteTransfer,
    StockTransaction,
    Supplier,
    Unit,
    Warehouse,
)
from .status import ConsumptionType, IssueStatus, Priority, QualityStatus

# ---------------------------------------------------------------------------
# Catalog and reference data
# ---------------------------------------------------------------------------


class ProjectSerializer(serializers.ModelSerializer):
    class Meta:
        model = Project
        fields = ["project_id", "name", "code", "location", "is_active", "created_at"]


class UnitSerializer(serializers.ModelSerializer):
    class Meta:
        model = Unit
        fields = ["unit_id", "unit_name", "unit_symbol"]


class CategorySerializer(serializers.ModelSerializer):
    class Meta:
        model = Category
        fields = ["category_id", "category_name", "description"]


class BrandSerializer(serializers.ModelSerializer):
    class Meta:
        model = Brand
        fields = ["brand_id", "brand_name", "is_active"]


class ItemSerializer(serializers.ModelSerializer):
    """Expose catalog items with their category, brand and unit."""

    class Meta:
        model = Item
        fields = [
            "item_id",
            "item_code",
            "item_name",
            "description",
            "category",
            "brand",
            "unit",
            "is_active",
        ]


class SupplierSerializer(serializers.ModelSerializer):
    """Serialize supplier contact and status information."""

    class Meta:
        model = Supplier
        fields = [
            "supplier_id",
            "supplier_name",
            "contact_person",
            "phone",
            "email",
            "address",
            "is_active",
            "updated_at",
        ]


class WarehouseSerializer(serializers.ModelSerializer):
    class Meta:
        model = Warehouse
        fields = [
            "warehouse_id",
            "warehouse_name",
            "address",
            "contact_person",
            "contact_phone",
            "is_active",
        ]


# ---------------------------------------------------------------------------
# Site inventory
# ---------------------------------------------------------------------------


class MaterialSerializer(serializers.ModelSerializer):
    """Site stock for one item; read-only because only the ledger moves it."""

    class Meta:
        model = Material
        fields = [
            "material_id",
            "project",
            "item",
            "warehouse",
            "name",
            "stock_qty",
            "cost_per_unit",
            "minimum_stock_level",
            "updated_at",
        ]
        read_only_fields = fields


class StockTransactionSerializer(serializers.ModelSerializer):
    """Show stock movements with the balance before and after."""

    class Meta:
        model = StockTransaction
        fields = [
            "transaction_id",
            "material",
            "project",
            "transaction_type",
            "quantity_change",
            "quantity_before",
            "quantity_after",
            "reference",
            "user",
            "notes",
            "transaction_date",
        ]


class SiteTransferSerializer(serializers.ModelSerializer):
    class Meta:
        model = SiteTransfer
        fields = [
            "transfer_id",
            "from_project",
            "to_project",
            "material",
            "quantity",
            "transfer_date",
            "status",
            "transfer_reason",
        ]


# ---------------------------------------------------------------------------
# Workflow documents (read side)
# ---------------------------------------------------------------------------


class MrrItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = MrrItem
        fields = [
            "mrr_item_id",
            "line_no",
            "item",
            "unit",
            "quantity_requested",
            "estimated_cost_per_unit",
            "notes",
        ]


class MrrSerializer(serializers.ModelSerializer):
    """Expose requisition details with their line items."""

    items = MrrItemSerializer(many=True, read_only=True)

    class Meta:
        model = MaterialRequirementRequest
        fields = [
            "mrr_id",
            "mrr_number",
            "project",
            "requested_by",
            "status",
            "priority",
            "required_date",
            "approved_by",
            "decided_at",
            "rejection_reason",
            "notes",
            "created_at",
            "items",
        ]


class PurchaseOrderItemSerializer(serializers.ModelSerializer):
    """Detail quantities and prices for ordered items."""

    class Meta:
        model = PurchaseOrderItem
        fields = [
            "po_item_id",
            "line_no",
            "item",
            "unit",
            "quantity_ordered",
            "unit_price",
            "tax_rate",
            "tax_amount",
            "line_total",
            "quantity_received",
            "notes",
        ]


class PurchaseOrderSerializer(serializers.ModelSerializer):
    """Provide purchase order headers and lines."""

    items = PurchaseOrderItemSerializer(many=True, read_only=True)

    class Meta:
        model = PurchaseOrder
        fields = [
            "po_id",
            "po_number",
            "mrr",
            "project",
            "supplier",
            "status",
            "po_date",
            "expected_delivery_date",
            "subtotal",
            "tax_amount",
            "total_amount",
            "payment_terms",
            "delivery_terms",
            "created_by",
            "approved_by",
            "approved_at",
            "placed_at",
            "notes",
            "items",
        ]


class MaterialReceiptItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = MaterialReceiptItem
        fields = [
            "receipt_item_id",
            "po_item",
            "item",
            "unit",
            "quantity_received",
            "quality_status",
            "remarks",
        ]


class MaterialReceiptSerializer(serializers.ModelSerializer):
    """Serialize receipts recorded against purchase orders."""

    items = MaterialReceiptItemSerializer(many=True, read_only=True)

    class Meta:
        model = MaterialReceipt
        fields = [
            "receipt_id",
            "receipt_number",
            "purchase_order",
            "project",
            "warehouse",
            "received_by",
            "receipt_date",
            "supplier_delivery_note",
            "notes",
            "items",
        ]


class MaterialIssueSerializer(serializers.ModelSerializer):
    class Meta:
        model = MaterialIssue
        fields = [
            "issue_id",
            "project",
            "material",
            "quantity_issued",
            "issue_date",
            "issue_purpose",
            "location",
            "issued_by",
            "received_by",
            "status",
            "mrr",
            "purchase_order",
            "receipt",
        ]


class MaterialReturnSerializer(serializers.ModelSerializer):
    class Meta:
        model = MaterialReturn
        fields = [
            "return_id",
            "project",
            "material",
            "issue",
            "quantity",
            "quality_status",
            "restocked",
            "return_date",
            "return_reason",
            "returned_by",
            "approved_by",
        ]


class MaterialConsumptionSerializer(serializers.ModelSerializer):
    class Meta:
        model = MaterialConsumption
        fields = [
            "consumption_id",
            "project",
            "material",
            "issue",
            "quantity_consumed",
            "consumption_type",
            "consumption_date",
            "consumption_purpose",
            "recorded_by",
        ]


# ---------------------------------------------------------------------------
# Request payloads (write side)
# ---------------------------------------------------------------------------

QUANTITY = {"max_digits": 14, "decimal_places": 3}
PRICE = {"max_digits": 12, "decimal_places": 2}


class MrrLineInputSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    unit_id = serializers.IntegerField(required=False)
    quantity_requested = serializers.DecimalField(**QUANTITY)
    estimated_cost_per_unit = serializers.DecimalField(
        required=False, allow_null=True, **PRICE
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class MrrCreateSerializer(serializers.Serializer):
    project_id = serializers.IntegerField()
    required_date = serializers.DateField(required=False, allow_null=True)
    priority = serializers.ChoiceField(choices=Priority.choices, default=Priority.MEDIUM)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    items = MrrLineInputSerializer(many=True, allow_empty=True)


class MrrDecisionSerializer(serializers.Serializer):
    decision = serializers.CharField()
    reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class POLineInputSerializer(serializers.Serializer):
    item_id = serializers.IntegerField()
    unit_id = serializers.IntegerField(required=False)
    quantity_ordered = serializers.DecimalField(**QUANTITY)
    unit_price = serializers.DecimalField(**PRICE)
    tax_rate = serializers.DecimalField(
        max_digits=5, decimal_places=2, required=False, default=0
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class POItemsSerializer(serializers.Serializer):
    items = POLineInputSerializer(many=True, allow_empty=True)


class PurchaseOrderCreateSerializer(POItemsSerializer):
    mrr_id = serializers.IntegerField(required=False, allow_null=True)
    project_id = serializers.IntegerField(required=False, allow_null=True)
    supplier_id = serializers.IntegerField()
    po_date = serializers.DateField(required=False, allow_null=True)
    expected_delivery_date = serializers.DateField(required=False, allow_null=True)
    payment_terms = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    delivery_terms = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ReceiptLineInputSerializer(serializers.Serializer):
    po_item_id = serializers.IntegerField()
    quantity_received = serializers.DecimalField(**QUANTITY)
    quality_status = serializers.ChoiceField(
        choices=QualityStatus.choices, default=QualityStatus.GOOD
    )
    remarks = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ReceiptCreateSerializer(serializers.Serializer):
    po_id = serializers.IntegerField()
    project_id = serializers.IntegerField(required=False, allow_null=True)
    warehouse_id = serializers.IntegerField(required=False, allow_null=True)
    receipt_date = serializers.DateField(required=False, allow_null=True)
    supplier_delivery_note = serializers.CharField(
        required=False, allow_blank=True, allow_null=True
    )
    notes = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    items = ReceiptLineInputSerializer(many=True, allow_empty=True)


class IssueCreateSerializer(serializers.Serializer):
    project_id = serializers.IntegerField()
    material_id = serializers.IntegerField()
    quantity_issued = serializers.DecimalField(**QUANTITY)
    received_by_user_id = serializers.IntegerField(required=False, allow_null=True)
    status = serializers.ChoiceField(
        choices=[IssueStatus.PENDING, IssueStatus.ISSUED], default=IssueStatus.ISSUED
    )
    mrr_id = serializers.IntegerField(required=False, allow_null=True)
    po_id = serializers.IntegerField(required=False, allow_null=True)
    receipt_id = serializers.IntegerField(required=False, allow_null=True)
    issue_date = serializers.DateField(required=False, allow_null=True)
    issue_purpose = serializers.CharField(required=False, allow_blank=True, allow_null=True)
    location = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ReturnCreateSerializer(serializers.Serializer):
    issue_id = serializers.IntegerField()
    quantity = serializers.DecimalField(**QUANTITY)
    quality_status = serializers.ChoiceField(
        choices=QualityStatus.choices, default=QualityStatus.GOOD
    )
    approved_by_user_id = serializers.IntegerField(required=False, allow_null=True)
    return_date = serializers.DateField(required=False, allow_null=True)
    return_reason = serializers.CharField(required=False, allow_blank=True, allow_null=True)


class ConsumptionCreateSerializer(serializers.Serializer):
    issue_id = serializers.IntegerField()
    quantity_consumed = serializers.DecimalField(**QUANTITY)
    consumption_type = serializers.ChoiceField(
        choices=ConsumptionType.choices, default=ConsumptionType.ACTUAL
    )
    consumption_date = serializers.DateField(required=False, allow_null=True)
    consumption_purpose = serializers.CharField(
        required=False, allow_blank=True, allow_null=True
    )


class ConsumptionRowSerializer(serializers.Serializer):
    project_id = serializers.IntegerField()
    project_name = serializers.CharField()
    material_id = serializers.IntegerField()
    material_name = serializers.CharField()
    total_issued = serializers.DecimalField(**QUANTITY)
    total_returned = serializers.DecimalField(**QUANTITY)
    total_transferred = serializers.DecimalField(**QUANTITY)
    consumed = serializers.DecimalField(**QUANTITY)
    cost_per_unit = serializers.DecimalField(**PRICE)
    cost_missing = serializers.BooleanField()
    total_cost = serializers.DecimalField(max_digits=18, decimal_places=2)
