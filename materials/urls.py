"""API routes for the site materials app."""

from rest_framework.routers import DefaultRouter

from .views import (
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

router = DefaultRouter()
router.register(r"projects", ProjectViewSet)
router.register(r"units", UnitViewSet)
router.register(r"categories", CategoryViewSet)
router.register(r"brands", BrandViewSet)
router.register(r"items", ItemViewSet)
router.register(r"suppliers", SupplierViewSet)
router.register(r"warehouses", WarehouseViewSet)
router.register(r"materials", MaterialViewSet)
router.register(r"stock-transactions", StockTransactionViewSet)
router.register(r"site-transfers", SiteTransferViewSet)
router.register(r"mrrs", MrrViewSet)
router.register(r"purchase-orders", PurchaseOrderViewSet)
router.register(r"receipts", MaterialReceiptViewSet)
router.register(r"issues", MaterialIssueViewSet)
router.register(r"returns", MaterialReturnViewSet)
router.register(r"consumptions", MaterialConsumptionViewSet)

urlpatterns = router.urls
