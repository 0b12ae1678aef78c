from enum import Enum
from tortoise import fields, models
import uuid


class StockStatus(str, Enum):
    IN_STOCK = "in_stock"
    LOW_STOCK = "low_stock"  # At or below the reorder level
    OUT_OF_STOCK = "out_of_stock"


class InventoryItem(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    name = fields.CharField(max_length=255)
    category = fields.CharField(max_length=128, null=True)
    unit = fields.CharField(max_length=32, default="pcs")
    quantity = fields.IntField(default=0)
    reorder_level = fields.IntField(null=True) # Falls back to DEFAULT_REORDER_LEVEL
    unit_cost = fields.DecimalField(max_digits=12, decimal_places=2, default=0)
    # Derived from (quantity, reorder_level); only written by the stock ledger
    status = fields.CharEnumField(StockStatus, default=StockStatus.OUT_OF_STOCK)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "marine_inventory"
        indexes = [
            ("status",),  # Available-stock pickers filter on status
        ]

    def __str__(self):
        return self.name
