from django.contrib import admin

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


for model in [
    Project,
    Unit,
    Category,
    Brand,
    Item,
    Supplier,
    Warehouse,
    Material,
    StockTransaction,
    SiteTransfer,
    MaterialRequirementRequest,
    MrrItem,
    PurchaseOrder,
    PurchaseOrderItem,
    MaterialReceipt,
    MaterialReceiptItem,
    MaterialIssue,
    MaterialReturn,
    MaterialConsumption,
]:
    admin.site.register(model)
