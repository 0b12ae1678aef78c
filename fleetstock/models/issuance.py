from tortoise import fields, models
import uuid


class IssuanceRecord(models.Model):
    """One act of consuming stocked inventory against a vessel or overhaul project."""
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    item = fields.ForeignKeyField("models.InventoryItem", related_name="issuances", on_delete=fields.RESTRICT)
    vessel_id = fields.UUIDField()
    overhaul_project_id = fields.UUIDField(null=True)
    maintenance_schedule_id = fields.UUIDField(null=True)
    purpose = fields.CharField(max_length=64, default="maintenance")
    notes = fields.TextField(null=True)
    quantity = fields.IntField()
    unit_cost = fields.DecimalField(max_digits=12, decimal_places=2)
    issued_on = fields.DateField()
    expense_ref = fields.UUIDField(null=True) # Cost Entry created for this issuance
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "inventory_usage"
        indexes = [
            ("vessel_id",),                # Vessel usage history
            ("item_id",),                  # Item consumption
            ("vessel_id", "issued_on"),    # Composite: vessel usage by date
        ]

    @property
    def total_cost(self):
        return self.unit_cost * self.quantity
