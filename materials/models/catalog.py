from django.db import models


class Project(models.Model):
    """A construction project that owns site inventory and ledger rows."""

    project_id = models.AutoField(primary_key=True)
    name = models.CharField(max_length=255, unique=True)
    code = models.CharField(max_length=50, blank=True, null=True)
    location = models.CharField(max_length=255, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.name or f"Project {self.pk}"

    class Meta:
        db_table = "projects"
        ordering = ["name"]


class Unit(models.Model):
    """Unit of measure such as bags, m3 or kg."""

    unit_id = models.AutoField(primary_key=True)
    unit_name = models.CharField(max_length=50, unique=True)
    unit_symbol = models.CharField(max_length=10, blank=True, null=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.unit_symbol or self.unit_name

    class Meta:
        db_table = "units"


class Category(models.Model):
    category_id = models.AutoField(primary_key=True)
    category_name = models.CharField(max_length=100, unique=True)
    description = models.TextField(blank=True, null=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.category_name

    class Meta:
        db_table = "item_categories"
        verbose_name_plural = "categories"


class Brand(models.Model):
    brand_id = models.AutoField(primary_key=True)
    brand_name = models.CharField(max_length=100, unique=True)
    is_active = models.BooleanField(default=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.brand_name

    class Meta:
        db_table = "brands"


class Item(models.Model):
    """Catalog entry referenced by requests, orders and site inventory."""

    item_id = models.AutoField(primary_key=True)
    item_code = models.CharField(max_length=50, unique=True)
    item_name = models.CharField(max_length=255)
    description = models.TextField(blank=True, null=True)
    category = models.ForeignKey(
        Category, models.PROTECT, db_column="category_id", related_name="items"
    )
    brand = models.ForeignKey(
        Brand,
        models.SET_NULL,
        db_column="brand_id",
        blank=True,
        null=True,
        related_name="items",
    )
    unit = models.ForeignKey(
        Unit, models.PROTECT, db_column="unit_id", related_name="items"
    )
    is_active = models.BooleanField(default=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return f"{self.item_code} {self.item_name}"

    class Meta:
        db_table = "item_master"


class Supplier(models.Model):
    """Stores vendor contact and activity information."""

    supplier_id = models.AutoField(primary_key=True)
    supplier_name = models.CharField(max_length=255, unique=True)
    contact_person = models.CharField(max_length=255, blank=True, null=True)
    phone = models.CharField(max_length=20, blank=True, null=True)
    email = models.CharField(max_length=254, blank=True, null=True)
    address = models.TextField(blank=True, null=True)
    is_active = models.BooleanField(default=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.supplier_name or f"Supplier {self.pk}"

    class Meta:
        db_table = "suppliers"


class Warehouse(models.Model):
    warehouse_id = models.AutoField(primary_key=True)
    warehouse_name = models.CharField(max_length=255, unique=True)
    address = models.TextField(blank=True, null=True)
    contact_person = models.CharField(max_length=255, blank=True, null=True)
    contact_phone = models.CharField(max_length=20, blank=True, null=True)
    is_active = models.BooleanField(default=True)

    def __str__(self) -> str:  # pragma: no cover - simple representation
        return self.warehouse_name

    class Meta:
        db_table = "warehouses"
