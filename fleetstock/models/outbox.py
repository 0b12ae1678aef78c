from tortoise import fields, models
import uuid


class OutboxEvent(models.Model):
    """
    Events written in the same transaction as the stock change that caused
    them, then picked up by the outbox poller.
    """
    id = fields.UUIDField(primary_key=True, default=uuid.uuid4)
    aggregate_type = fields.CharField(max_length=64) # e.g., 'inventory'
    aggregate_id = fields.UUIDField(null=True) # ID of the entity that generated the event
    event_type = fields.CharField(max_length=128) # e.g., 'inventory.low_stock_alert.v1'
    payload = fields.JSONField() # The actual event data
    published = fields.BooleanField(default=False)
    attempts = fields.IntField(default=0)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "outbox_events"
