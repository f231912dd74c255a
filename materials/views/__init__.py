from .api import (
    BrandViewSet,
    CategoryViewSet,
    ItemViewSet,
    MaterialConsumptionViewSet,
    MaterialIssueViewSet,
    MaterialReceiptViewSet,
    MaterialReturnViewSet,
    MaterialViewSet,
    MrrViewSet,
    ProjectViewSet,
    PurchaseOrderViewSet,
    SiteTransferViewSet,
    StockTransactionViewSet,
    SupplierViewSet,
    UnitViewSet,
    WarehouseViewSet,
)

__all__ = [
    "ProjectViewSet",
    "UnitViewSet",
    "CategoryViewSet",
    "BrandViewSet",
    "ItemViewSet",
    "SupplierViewSet",
    "WarehouseViewSet",
    "MaterialViewSet",
    "StockTransactionViewSet",
    "SiteTransferViewSet",
    "MrrViewSet",
    "PurchaseOrderViewSet",
    "MaterialReceiptViewSet",
    "MaterialIssueViewSet",
    "MaterialReturnViewSet",
    "MaterialConsumptionViewSet",
]
