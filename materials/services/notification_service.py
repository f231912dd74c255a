"""Supplier notifications sent when a purchase order is placed.

Delivery is delegated to the callable named by the
``PO_NOTIFICATION_BACKEND`` setting. Notifications are best effort: a failing
backend is logged and never affects the order.
"""

import logging

from django.conf import settings
from django.utils.module_loading import import_string

logger = logging.getLogger(__name__)


def log_notification(purchase_order) -> None:
    """Default backend: write the message to the log."""
    logger.info(
        "PO %s placed with supplier %s for %s",
        purchase_order.po_number,
        purchase_order.supplier,
        purchase_order.total_amount,
    )


def get_backend():
    return import_string(settings.PO_NOTIFICATION_BACKEND)


def notify_po_placed(purchase_order) -> bool:
    """Send the placement notification; return False if it failed."""
    try:
        get_backend()(purchase_order)
    except Exception:
        logger.exception(
            "Supplier notification failed for PO %s", purchase_order.po_number
        )
        return False
    return True
