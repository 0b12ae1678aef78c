import pytest
from unittest.mock import AsyncMock, patch
from uuid import uuid4

from fleetstock.consumers.outbox_poller import HANDLERS, poll_outbox_for_new_events
from fleetstock.core.config import MAX_ATTEMPTS
from fleetstock.models.outbox import OutboxEvent
from fleetstock.services.issuance_service import issue_inventory
from fleetstock.services.stock_ledger import LOW_STOCK_EVENT


@pytest.mark.asyncio
async def test_low_stock_alert_is_dispatched_once(make_item):
    item = await make_item(quantity=12)
    await issue_inventory(item.id, uuid4(), 3)

    handler = AsyncMock()
    with patch.dict(HANDLERS, {LOW_STOCK_EVENT: handler}):
        assert await poll_outbox_for_new_events() == 1
        assert await poll_outbox_for_new_events() == 0

    payload = handler.call_args.args[0]
    assert payload["item_id"] == str(item.id)
    assert payload["status"] == "low_stock"
    assert payload["triggered_by"] == "issuance"


@pytest.mark.asyncio
async def test_failed_dispatch_counts_attempts(make_item):
    item = await make_item(quantity=1)
    await issue_inventory(item.id, uuid4(), 1)

    handler = AsyncMock(side_effect=RuntimeError("pager down"))
    with patch.dict(HANDLERS, {LOW_STOCK_EVENT: handler}):
        for _ in range(MAX_ATTEMPTS + 1):
            await poll_outbox_for_new_events()

    event = await OutboxEvent.get(event_type=LOW_STOCK_EVENT)
    assert event.published is False
    assert event.attempts == MAX_ATTEMPTS
    assert handler.call_count == MAX_ATTEMPTS


@pytest.mark.asyncio
async def test_unknown_event_type_is_marked_published(db):
    await OutboxEvent.create(aggregate_type="inventory", aggregate_id=uuid4(), event_type="inventory.unknown.v1", payload={})

    assert await poll_outbox_for_new_events() == 1
