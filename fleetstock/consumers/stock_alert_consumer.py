import logging
from typing import Dict, Any
from uuid import UUID

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("stock_alert_consumer")


async def handle_low_stock_alert(event_payload: Dict[str, Any], event_id: UUID):
    """
    Consumer logic for 'inventory.low_stock_alert.v1'.
    Raises the reorder alert for purchasing; out-of-stock items are logged at error level.
    """
    name = event_payload.get("name")
    quantity = event_payload.get("quantity")
    level = event_payload.get("reorder_level")
    status = event_payload.get("status")

    if status == "out_of_stock":
        log.error(f"!!! OUT OF STOCK !!! {name} ({event_payload.get('item_id')}) after {event_payload.get('triggered_by')}.")
    else:
        log.warning(f"LOW STOCK: {name} ({event_payload.get('item_id')}) has {quantity} left, reorder level {level}.")
