"""Materials application configuration."""

from django.apps import AppConfig


class MaterialsConfig(AppConfig):
    """Procurement and site inventory: MRRs, orders, receipts, issues."""

    default_auto_field = "django.db.models.BigAutoField"
    name = "materials"
    verbose_name = "Site Materials"
