from tortoise import fields, models
import uuid


class Expense(models.Model):
    """
    Ledger row owned by the finance side of the application. The stock engine
    only creates and deletes these through a CostEntryGateway, never edits them.
    """
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    date = fields.DateField()
    amount = fields.DecimalField(max_digits=14, decimal_places=2)
    category = fields.CharField(max_length=64)
    expense_type = fields.CharField(max_length=64, null=True)
    description = fields.TextField()
    vendor = fields.CharField(max_length=255, null=True)
    project_id = fields.UUIDField(null=True)
    project_type = fields.CharField(max_length=32, null=True)
    status = fields.CharField(max_length=32, default="paid")
    payment_method = fields.CharField(max_length=32, default="from_inventory")
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "expenses"
        indexes = [
            ("project_id",),          # Per-vessel expense views
            ("date",),
        ]


class WarehouseHolding(models.Model):
    """Failed equipment parked in a warehouse after a replacement."""
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    equipment_name = fields.CharField(max_length=255)
    warehouse_id = fields.UUIDField()
    condition = fields.CharField(max_length=32, default="poor")
    status = fields.CharField(max_length=32, default="in_warehouse")
    estimated_value = fields.DecimalField(max_digits=14, decimal_places=2, default=0)
    description = fields.TextField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "land_equipment"
