import asyncio
import logging
from fleetstock.models.outbox import OutboxEvent
from fleetstock.consumers.stock_alert_consumer import handle_low_stock_alert
from fleetstock.core.db import init_db
from fleetstock.core.config import POLLING_INTERVAL, MAX_ATTEMPTS, BATCH_SIZE
from fleetstock.services.stock_ledger import LOW_STOCK_EVENT

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("outbox_poller")

# event type -> handler(payload, event_id)
HANDLERS = {
    LOW_STOCK_EVENT: handle_low_stock_alert,
}


async def dispatch_event(event: OutboxEvent):
    """Routes an OutboxEvent to the handler registered for its type."""
    handler = HANDLERS.get(event.event_type)
    if handler is None:
        log.warning(f"No handler found for event type: {event.event_type}")
        return

    log.info(f"Poller DISPATCHING: {event.event_type} (ID: {event.id.hex[:8]}...)")
    await handler(event.payload, event.id)


async def poll_outbox_for_new_events() -> int:
    """
    Queries the Outbox table for unpublished events and attempts to dispatch them.
    Returns the number of events published in this pass.
    """
    # Select events that haven't been published and haven't exceeded max attempts
    events = await OutboxEvent.filter(published=False, attempts__lt=MAX_ATTEMPTS).limit(BATCH_SIZE).order_by('created_at')

    published = 0
    for event in events:
        try:
            await dispatch_event(event)

            event.published = True
            await event.save(update_fields=['published'])
            published += 1
        except Exception:
            event.attempts += 1
            await event.save(update_fields=['attempts'])
            log.exception(f"Dispatch of {event.event_type} ({event.id}) failed, attempt {event.attempts}/{MAX_ATTEMPTS}.")
    return published


async def start_outbox_poller():
    """Main loop for the poller service."""
    await init_db()
    log.info("--- Outbox Poller Service Started ---")

    while True:
        try:
            await poll_outbox_for_new_events()
        except Exception as e:
            log.error(f"Poller encountered a critical DB error: {e}.")

        await asyncio.sleep(POLLING_INTERVAL)

if __name__ == "__main__":
    try:
        asyncio.run(start_outbox_poller())
    except KeyboardInterrupt:
        log.info("Poller service stopped.")
