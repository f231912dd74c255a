from .catalog import Brand, Category, Item, Project, Supplier, Unit, Warehouse
from .fields import MoneyField, QuantityField
from .inventory import Material, SiteTransfer, StockTransaction
from .issues import MaterialConsumption, MaterialIssue, MaterialReturn
from .orders import (
    MaterialReceipt,
    MaterialReceiptItem,
    PurchaseOrder,
    PurchaseOrderItem,
)
from .requisitions import MaterialRequirementRequest, MrrItem

__all__ = [
    "MoneyField",
    "QuantityField",
    "Project",
    "Unit",
    "Category",
    "Brand",
    "Item",
    "Supplier",
    "Warehouse",
    "Material",
    "StockTransaction",
    "SiteTransfer",
    "MaterialRequirementRequest",
    "MrrItem",
    "PurchaseOrder",
    "PurchaseOrderItem",
    "MaterialReceipt",
    "MaterialReceiptItem",
    "MaterialIssue",
    "MaterialReturn",
    "MaterialConsumption",
]
