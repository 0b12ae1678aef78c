from typing import Dict, Any
from fleetstock.models.outbox import OutboxEvent
from uuid import UUID

async def create_outbox_event(
    aggregate_type: str,
    aggregate_id: UUID,
    event_type: str,
    payload: Dict[str, Any],
    conn: Any = None
) -> None:
    """
    Creates a new Outbox event record using the provided database connection (transaction).

    Passing 'conn' ties the event to the stock change that produced it: both commit or neither does.
    """
    await OutboxEvent.create(
        aggregate_type=aggregate_type,
        aggregate_id=aggregate_id,
        event_type=event_type,
        payload=payload,
        published=False,
        attempts=0,
        using_db=conn
    )
