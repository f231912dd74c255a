from decimal import Decimal

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import materials.models.fields

STATUS_MRR = [("PENDING", "Pending"), ("APPROVED", "Approved"), ("REJECTED", "Rejected")]
PRIORITY = [("LOW", "Low"), ("MEDIUM", "Medium"), ("HIGH", "High"), ("URGENT", "Urgent")]
STATUS_PO = [
    ("DRAFT", "Draft"),
    ("APPROVED", "Approved"),
    ("PLACED", "Placed"),
    ("ACKNOWLEDGED", "Acknowledged"),
    ("PARTIALLY_RECEIVED", "Partially Received"),
    ("FULLY_RECEIVED", "Fully Received"),
    ("CANCELLED", "Cancelled"),
    ("CLOSED", "Closed"),
]
STATUS_ISSUE = [
    ("PENDING", "Pending"),
    ("ISSUED", "Issued"),
    ("RECEIVED", "Received"),
    ("CANCELLED", "Cancelled"),
]
QUALITY = [("GOOD", "Good"), ("DAMAGED", "Damaged"), ("DEFECTIVE", "Defective")]
CONSUMPTION = [
    ("ACTUAL", "Actual"),
    ("WASTAGE", "Wastage"),
    ("THEFT", "Theft"),
    ("DAMAGE", "Damage"),
]
STATUS_TRANSFER = [
    ("PENDING", "Pending"),
    ("APPROVED", "Approved"),
    ("COMPLETED", "Completed"),
    ("CANCELLED", "Cancelled"),
]
STOCK_TXN = [
    ("RECEIPT", "Receipt"),
    ("ISSUE", "Issue"),
    ("ISSUE_CANCEL", "Issue Cancelled"),
    ("RETURN", "Return"),
]


def quantity(**kwargs):
    return materials.models.fields.QuantityField(max_digits=14, decimal_places=3, **kwargs)


def money(max_digits=15, **kwargs):
    if not kwargs.get("null"):
        kwargs.setdefault("default", Decimal("0.00"))
    return materials.models.fields.MoneyField(
        max_digits=max_digits, decimal_places=2, **kwargs
    )


def user_fk(db_column, null=False):
    extra = {"blank": True, "null": True} if null else {}
    return models.ForeignKey(
        db_column=db_column,
        on_delete=django.db.models.deletion.PROTECT,
        related_name="+",
        to=settings.AUTH_USER_MODEL,
        **extra,
    )


def fk(to, db_column, related_name, on_delete=django.db.models.deletion.PROTECT, null=False):
    extra = {"blank": True, "null": True} if null else {}
    return models.ForeignKey(
        db_column=db_column,
        on_delete=on_delete,
        related_name=related_name,
        to=to,
        **extra,
    )


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Project",
            fields=[
                ("project_id", models.AutoField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255, unique=True)),
                ("code", models.CharField(blank=True, max_length=50, null=True)),
                ("location", models.CharField(blank=True, max_length=255, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={"db_table": "projects", "ordering": ["name"]},
        ),
        migrations.CreateModel(
            name="Unit",
            fields=[
                ("unit_id", models.AutoField(primary_key=True, serialize=False)),
                ("unit_name", models.CharField(max_length=50, unique=True)),
                ("unit_symbol", models.CharField(blank=True, max_length=10, null=True)),
            ],
            options={"db_table": "units"},
        ),
        migrations.CreateModel(
            name="Category",
            fields=[
                ("category_id", models.AutoField(primary_key=True, serialize=False)),
                ("category_name", models.CharField(max_length=100, unique=True)),
                ("description", models.TextField(blank=True, null=True)),
            ],
            options={"db_table": "item_categories", "verbose_name_plural": "categories"},
        ),
        migrations.CreateModel(
            name="Brand",
            fields=[
                ("brand_id", models.AutoField(primary_key=True, serialize=False)),
                ("brand_name", models.CharField(max_length=100, unique=True)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={"db_table": "brands"},
        ),
        migrations.CreateModel(
            name="Supplier",
            fields=[
                ("supplier_id", models.AutoField(primary_key=True, serialize=False)),
                ("supplier_name", models.CharField(max_length=255, unique=True)),
                ("contact_person", models.CharField(blank=True, max_length=255, null=True)),
                ("phone", models.CharField(blank=True, max_length=20, null=True)),
                ("email", models.CharField(blank=True, max_length=254, null=True)),
                ("address", models.TextField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={"db_table": "suppliers"},
        ),
        migrations.CreateModel(
            name="Warehouse",
            fields=[
                ("warehouse_id", models.AutoField(primary_key=True, serialize=False)),
                ("warehouse_name", models.CharField(max_length=255, unique=True)),
                ("address", models.TextField(blank=True, null=True)),
                ("contact_person", models.CharField(blank=True, max_length=255, null=True)),
                ("contact_phone", models.CharField(blank=True, max_length=20, null=True)),
                ("is_active", models.BooleanField(default=True)),
            ],
            options={"db_table": "warehouses"},
        ),
        migrations.CreateModel(
            name="Item",
            fields=[
                ("item_id", models.AutoField(primary_key=True, serialize=False)),
                ("item_code", models.CharField(max_length=50, unique=True)),
                ("item_name", models.CharField(max_length=255)),
                ("description", models.TextField(blank=True, null=True)),
                ("is_active", models.BooleanField(default=True)),
                ("category", fk("materials.category", "category_id", "items")),
                (
                    "brand",
                    fk(
                        "materials.brand",
                        "brand_id",
                        "items",
                        on_delete=django.db.models.deletion.SET_NULL,
                        null=True,
                    ),
                ),
                ("unit", fk("materials.unit", "unit_id", "items")),
            ],
            options={"db_table": "item_master"},
        ),
        migrations.CreateModel(
            name="Material",
            fields=[
                ("material_id", models.AutoField(primary_key=True, serialize=False)),
                ("name", models.CharField(max_length=255)),
                ("stock_qty", quantity(default=Decimal("0"))),
                ("cost_per_unit", money(max_digits=12, blank=True, null=True)),
                ("minimum_stock_level", quantity(default=Decimal("0"))),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("project", fk("materials.project", "project_id", "materials")),
                ("item", fk("materials.item", "item_id", "materials")),
                (
                    "warehouse",
                    fk("materials.warehouse", "warehouse_id", "materials", null=True),
                ),
            ],
            options={
                "db_table": "materials",
                "constraints": [
                    models.UniqueConstraint(
                        fields=("project", "item", "warehouse"),
                        name="uniq_material_project_item_warehouse",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("stock_qty__gte", 0)),
                        name="material_stock_qty_non_negative",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="StockTransaction",
            fields=[
                ("transaction_id", models.AutoField(primary_key=True, serialize=False)),
                ("transaction_type", models.CharField(choices=STOCK_TXN, max_length=20)),
                ("quantity_change", quantity()),
                ("quantity_before", quantity()),
                ("quantity_after", quantity()),
                ("reference", models.CharField(blank=True, max_length=100, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("transaction_date", models.DateTimeField(auto_now_add=True)),
                (
                    "material",
                    fk(
                        "materials.material",
                        "material_id",
                        "stock_transactions",
                        on_delete=django.db.models.deletion.CASCADE,
                    ),
                ),
                ("project", fk("materials.project", "project_id", "stock_transactions")),
                ("user", user_fk("performed_by_user_id")),
            ],
            options={
                "db_table": "stock_transactions",
                "ordering": ["-transaction_date", "-transaction_id"],
            },
        ),
        migrations.CreateModel(
            name="SiteTransfer",
            fields=[
                ("transfer_id", models.AutoField(primary_key=True, serialize=False)),
                ("quantity", quantity()),
                ("transfer_date", models.DateField()),
                (
                    "status",
                    models.CharField(choices=STATUS_TRANSFER, default="PENDING", max_length=20),
                ),
                ("transfer_reason", models.TextField(blank=True, null=True)),
                (
                    "from_project",
                    fk("materials.project", "from_project_id", "outbound_transfers"),
                ),
                ("to_project", fk("materials.project", "to_project_id", "inbound_transfers")),
                ("material", fk("materials.material", "material_id", "transfers")),
            ],
            options={"db_table": "site_transfers"},
        ),
        migrations.CreateModel(
            name="MaterialRequirementRequest",
            fields=[
                ("mrr_id", models.AutoField(primary_key=True, serialize=False)),
                ("mrr_number", models.CharField(max_length=50, unique=True)),
                (
                    "status",
                    models.CharField(choices=STATUS_MRR, default="PENDING", max_length=20),
                ),
                (
                    "priority",
                    models.CharField(choices=PRIORITY, default="MEDIUM", max_length=10),
                ),
                ("required_date", models.DateField(blank=True, null=True)),
                ("decided_at", models.DateTimeField(blank=True, null=True)),
                ("rejection_reason", models.TextField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("project", fk("materials.project", "project_id", "mrrs")),
                ("requested_by", user_fk("requested_by_user_id")),
                ("approved_by", user_fk("approved_by_user_id", null=True)),
            ],
            options={
                "db_table": "material_requirement_requests",
                "ordering": ["-created_at", "-mrr_id"],
            },
        ),
        migrations.CreateModel(
            name="MrrItem",
            fields=[
                ("mrr_item_id", models.AutoField(primary_key=True, serialize=False)),
                ("line_no", models.PositiveIntegerField()),
                ("quantity_requested", quantity()),
                ("estimated_cost_per_unit", money(max_digits=12, blank=True, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                (
                    "mrr",
                    fk(
                        "materials.materialrequirementrequest",
                        "mrr_id",
                        "items",
                        on_delete=django.db.models.deletion.CASCADE,
                    ),
                ),
                ("item", fk("materials.item", "item_id", "+")),
                ("unit", fk("materials.unit", "unit_id", "+")),
            ],
            options={"db_table": "mrr_items", "ordering": ["line_no"]},
        ),
        migrations.CreateModel(
            name="PurchaseOrder",
            fields=[
                ("po_id", models.AutoField(primary_key=True, serialize=False)),
                ("po_number", models.CharField(max_length=50, unique=True)),
                (
                    "status",
                    models.CharField(choices=STATUS_PO, default="DRAFT", max_length=20),
                ),
                ("po_date", models.DateField()),
                ("expected_delivery_date", models.DateField(blank=True, null=True)),
                ("subtotal", money()),
                ("tax_amount", money()),
                ("total_amount", money()),
                ("payment_terms", models.CharField(blank=True, max_length=100, null=True)),
                ("delivery_terms", models.CharField(blank=True, max_length=100, null=True)),
                ("approved_at", models.DateTimeField(blank=True, null=True)),
                ("placed_at", models.DateTimeField(blank=True, null=True)),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "mrr",
                    fk(
                        "materials.materialrequirementrequest",
                        "mrr_id",
                        "purchase_orders",
                        null=True,
                    ),
                ),
                (
                    "project",
                    fk("materials.project", "project_id", "purchase_orders", null=True),
                ),
                ("supplier", fk("materials.supplier", "supplier_id", "purchase_orders")),
                ("created_by", user_fk("created_by_user_id")),
                ("approved_by", user_fk("approved_by_user_id", null=True)),
            ],
            options={"db_table": "purchase_orders", "ordering": ["-po_date", "-po_id"]},
        ),
        migrations.CreateModel(
            name="PurchaseOrderItem",
            fields=[
                ("po_item_id", models.AutoField(primary_key=True, serialize=False)),
                ("line_no", models.PositiveIntegerField()),
                ("quantity_ordered", quantity()),
                ("unit_price", money(max_digits=12)),
                (
                    "tax_rate",
                    models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=5),
                ),
                ("tax_amount", money()),
                ("line_total", money()),
                ("quantity_received", quantity(default=Decimal("0"))),
                ("notes", models.TextField(blank=True, null=True)),
                (
                    "purchase_order",
                    fk(
                        "materials.purchaseorder",
                        "po_id",
                        "items",
                        on_delete=django.db.models.deletion.CASCADE,
                    ),
                ),
                ("item", fk("materials.item", "item_id", "+")),
                ("unit", fk("materials.unit", "unit_id", "+")),
            ],
            options={"db_table": "purchase_order_items", "ordering": ["line_no"]},
        ),
        migrations.CreateModel(
            name="MaterialReceipt",
            fields=[
                ("receipt_id", models.AutoField(primary_key=True, serialize=False)),
                ("receipt_number", models.CharField(max_length=50, unique=True)),
                ("receipt_date", models.DateField()),
                (
                    "supplier_delivery_note",
                    models.CharField(blank=True, max_length=100, null=True),
                ),
                ("notes", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("purchase_order", fk("materials.purchaseorder", "po_id", "receipts")),
                ("project", fk("materials.project", "project_id", "receipts")),
                (
                    "warehouse",
                    fk("materials.warehouse", "warehouse_id", "receipts", null=True),
                ),
                ("received_by", user_fk("received_by_user_id")),
            ],
            options={
                "db_table": "material_receipts",
                "ordering": ["-receipt_date", "-receipt_id"],
            },
        ),
        migrations.CreateModel(
            name="MaterialReceiptItem",
            fields=[
                ("receipt_item_id", models.AutoField(primary_key=True, serialize=False)),
                ("quantity_received", quantity()),
                (
                    "quality_status",
                    models.CharField(choices=QUALITY, default="GOOD", max_length=10),
                ),
                ("remarks", models.TextField(blank=True, null=True)),
                (
                    "receipt",
                    fk(
                        "materials.materialreceipt",
                        "receipt_id",
                        "items",
                        on_delete=django.db.models.deletion.CASCADE,
                    ),
                ),
                (
                    "po_item",
                    fk("materials.purchaseorderitem", "po_item_id", "receipt_items"),
                ),
                ("item", fk("materials.item", "item_id", "+")),
                ("unit", fk("materials.unit", "unit_id", "+")),
            ],
            options={"db_table": "material_receipt_items"},
        ),
        migrations.CreateModel(
            name="MaterialIssue",
            fields=[
                ("issue_id", models.AutoField(primary_key=True, serialize=False)),
                ("quantity_issued", quantity()),
                ("issue_date", models.DateField()),
                ("issue_purpose", models.TextField(blank=True, null=True)),
                ("location", models.CharField(blank=True, max_length=255, null=True)),
                (
                    "status",
                    models.CharField(choices=STATUS_ISSUE, default="PENDING", max_length=20),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("project", fk("materials.project", "project_id", "issues")),
                ("material", fk("materials.material", "material_id", "issues")),
                ("issued_by", user_fk("issued_by_user_id")),
                ("received_by", user_fk("received_by_user_id", null=True)),
                (
                    "mrr",
                    fk(
                        "materials.materialrequirementrequest",
                        "mrr_id",
                        "issues",
                        on_delete=django.db.models.deletion.SET_NULL,
                        null=True,
                    ),
                ),
                (
                    "purchase_order",
                    fk(
                        "materials.purchaseorder",
                        "po_id",
                        "issues",
                        on_delete=django.db.models.deletion.SET_NULL,
                        null=True,
                    ),
                ),
                (
                    "receipt",
                    fk(
                        "materials.materialreceipt",
                        "receipt_id",
                        "issues",
                        on_delete=django.db.models.deletion.SET_NULL,
                        null=True,
                    ),
                ),
            ],
            options={
                "db_table": "material_issues",
                "ordering": ["-issue_date", "-issue_id"],
            },
        ),
        migrations.CreateModel(
            name="MaterialReturn",
            fields=[
                ("return_id", models.AutoField(primary_key=True, serialize=False)),
                ("quantity", quantity()),
                (
                    "quality_status",
                    models.CharField(choices=QUALITY, default="GOOD", max_length=10),
                ),
                ("restocked", models.BooleanField(default=False)),
                ("return_date", models.DateField()),
                ("return_reason", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("project", fk("materials.project", "project_id", "returns")),
                ("material", fk("materials.material", "material_id", "returns")),
                ("issue", fk("materials.materialissue", "issue_id", "returns")),
                ("returned_by", user_fk("returned_by_user_id")),
                ("approved_by", user_fk("approved_by_user_id", null=True)),
            ],
            options={
                "db_table": "material_returns",
                "ordering": ["-return_date", "-return_id"],
            },
        ),
        migrations.CreateModel(
            name="MaterialConsumption",
            fields=[
                ("consumption_id", models.AutoField(primary_key=True, serialize=False)),
                ("quantity_consumed", quantity()),
                (
                    "consumption_type",
                    models.CharField(choices=CONSUMPTION, default="ACTUAL", max_length=10),
                ),
                ("consumption_date", models.DateField()),
                ("consumption_purpose", models.TextField(blank=True, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("project", fk("materials.project", "project_id", "consumptions")),
                ("material", fk("materials.material", "material_id", "consumptions")),
                (
                    "issue",
                    fk("materials.materialissue", "issue_id", "consumptions", null=True),
                ),
                ("recorded_by", user_fk("recorded_by_user_id")),
            ],
            options={
                "db_table": "material_consumptions",
                "ordering": ["-consumption_date", "-consumption_id"],
            },
        ),
    ]
