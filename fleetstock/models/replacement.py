from enum import Enum
from tortoise import fields, models
import uuid


class ReplacementSource(str, Enum):
    INVENTORY = "inventory"
    PURCHASE = "purchase"
    REPAIR = "repair"


class Disposition(str, Enum):
    SCRAPPED = "scrapped"
    SENT_TO_WAREHOUSE = "sent_to_warehouse"
    REPAIRED = "repaired"
    SOLD = "sold"
    DISPOSED = "disposed"


class ReplacementStatus(str, Enum):
    CONFIRMED = "confirmed"
    RETURNED = "returned"  # Terminal: the new unit was sent back, costs voided


class EquipmentReplacement(models.Model):
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    vessel_id = fields.UUIDField()
    old_equipment_name = fields.CharField(max_length=255)
    failure_reason = fields.TextField()
    failure_date = fields.DateField(null=True)
    new_equipment_source = fields.CharEnumField(ReplacementSource)
    # Only set when the new unit was taken from stock
    item = fields.ForeignKeyField(
        "models.InventoryItem", related_name="replacements", null=True, on_delete=fields.SET_NULL
    )
    replacement_date = fields.DateField()
    replacement_cost = fields.DecimalField(max_digits=14, decimal_places=2, default=0)
    labor_cost = fields.DecimalField(max_digits=14, decimal_places=2, default=0)
    old_equipment_disposition = fields.CharEnumField(Disposition)
    # Only set when the failed unit went to a warehouse
    warehouse_id = fields.UUIDField(null=True)
    overhaul_project_id = fields.UUIDField(null=True)
    maintenance_schedule_id = fields.UUIDField(null=True)
    notes = fields.TextField(null=True)
    status = fields.CharEnumField(ReplacementStatus, default=ReplacementStatus.CONFIRMED)
    return_reason = fields.TextField(null=True)
    returned_at = fields.DatetimeField(null=True)
    expense_ref = fields.UUIDField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "equipment_replacements"
        indexes = [
            ("vessel_id",),                        # Vessel equipment history
            ("status",),                           # Confirmed vs returned
            ("vessel_id", "replacement_date"),     # Composite: vessel history by date
        ]

    @property
    def total_cost(self):
        return self.replacement_cost + self.labor_cost
