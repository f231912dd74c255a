"""Service layer for the materials app."""

from . import (
    consumption_service,
    issue_service,
    mrr_service,
    notification_service,
    purchase_order_service,
    receipt_service,
    return_service,
    stock_service,
)

__all__ = [
    "stock_service",
    "mrr_service",
    "purchase_order_service",
    "receipt_service",
    "issue_service",
    "return_service",
    "consumption_service",
    "notification_service",
]
