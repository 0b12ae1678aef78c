import asyncio
import pytest
from datetime import date
from decimal import Decimal
from unittest.mock import AsyncMock, patch
from uuid import uuid4

from conftest import ExternalLedger
from fleetstock.core.errors import InsufficientStock, NotFound, PartialFailure, ValidationError
from fleetstock.models.inventory import InventoryItem, StockStatus
from fleetstock.models.issuance import IssuanceRecord
from fleetstock.models.ledger import Expense
from fleetstock.services.issuance_service import issue_inventory, reverse_issuance, list_issuances, get_issuance

VESSEL = uuid4()


async def _reload(item):
    return await InventoryItem.get(id=item.id)


@pytest.mark.asyncio
async def test_issue_creates_linked_cost_entry(make_item):
    item = await make_item(quantity=20, unit_cost=Decimal("45.50"))

    record = await issue_inventory(item.id, VESSEL, 4, issued_on=date(2026, 3, 1))

    assert (await _reload(item)).quantity == 16
    expense = await Expense.get(id=record.expense_ref)
    assert expense.amount == Decimal("182.00")
    assert expense.category == "inventory usage"
    assert expense.date == date(2026, 3, 1)
    assert expense.project_id == VESSEL
    assert "Fuel Injector" in expense.description
    assert record.unit_cost == Decimal("45.50")
    assert await IssuanceRecord.filter(item_id=item.id).count() == 1


@pytest.mark.asyncio
async def test_issue_uses_explicit_unit_cost(make_item):
    item = await make_item(quantity=20, unit_cost=Decimal("45.50"))

    record = await issue_inventory(item.id, VESSEL, 2, unit_cost=Decimal("60"))

    expense = await Expense.get(id=record.expense_ref)
    assert expense.amount == Decimal("120.00")


@pytest.mark.asyncio
async def test_scenario_a_low_stock_then_insufficient(make_item):
    item = await make_item(quantity=5, reorder_level=3)

    await issue_inventory(item.id, VESSEL, 4)
    stored = await _reload(item)
    assert stored.quantity == 1
    assert stored.status == StockStatus.LOW_STOCK

    with pytest.raises(InsufficientStock):
        await issue_inventory(item.id, VESSEL, 2)

    stored = await _reload(item)
    assert stored.quantity == 1
    assert stored.status == StockStatus.LOW_STOCK
    assert await Expense.all().count() == 1
    assert await IssuanceRecord.all().count() == 1


@pytest.mark.asyncio
async def test_scenario_b_reversal_from_out_of_stock(make_item):
    item = await make_item(quantity=3)
    record = await issue_inventory(item.id, VESSEL, 3)
    assert (await _reload(item)).status == StockStatus.OUT_OF_STOCK

    await reverse_issuance(record.id)

    stored = await _reload(item)
    assert stored.quantity == 3
    assert stored.status == StockStatus.LOW_STOCK


@pytest.mark.asyncio
async def test_reversal_round_trip_leaves_nothing_behind(make_item):
    item = await make_item(quantity=40)
    record = await issue_inventory(item.id, VESSEL, 7)

    await reverse_issuance(record.id)

    stored = await _reload(item)
    assert stored.quantity == 40
    assert stored.status == StockStatus.IN_STOCK
    assert await Expense.all().count() == 0
    assert await IssuanceRecord.all().count() == 0


@pytest.mark.asyncio
async def test_reverse_unknown_issuance(db):
    with pytest.raises(NotFound):
        await reverse_issuance(uuid4())


@pytest.mark.asyncio
@pytest.mark.parametrize("quantity", [0, -1])
async def test_issue_rejects_non_positive_quantity(make_item, quantity):
    item = await make_item(quantity=5)
    with pytest.raises(ValidationError):
        await issue_inventory(item.id, VESSEL, quantity)
    assert (await _reload(item)).quantity == 5


@pytest.mark.asyncio
async def test_issue_rejects_negative_unit_cost(make_item):
    item = await make_item(quantity=5)
    with pytest.raises(ValidationError):
        await issue_inventory(item.id, VESSEL, 1, unit_cost=Decimal("-1"))
    assert (await _reload(item)).quantity == 5
    assert await Expense.all().count() == 0


@pytest.mark.asyncio
async def test_concurrent_issuance_of_last_unit(make_item):
    item = await make_item(quantity=1)

    results = await asyncio.gather(
        issue_inventory(item.id, uuid4(), 1),
        issue_inventory(item.id, uuid4(), 1),
        return_exceptions=True,
    )

    failures = [r for r in results if isinstance(r, Exception)]
    assert len(failures) == 1
    assert isinstance(failures[0], InsufficientStock)
    stored = await _reload(item)
    assert stored.quantity == 0
    assert stored.status == StockStatus.OUT_OF_STOCK
    assert await Expense.all().count() == 1
    assert await IssuanceRecord.all().count() == 1


@pytest.mark.asyncio
async def test_issue_unknown_item(db):
    with pytest.raises(NotFound):
        await issue_inventory(uuid4(), VESSEL, 1)
    assert await Expense.all().count() == 0


@pytest.mark.asyncio
async def test_failure_after_ledger_write_rolls_back_stock(make_item):
    """With the default ledger the cost entry shares the transaction, so nothing survives."""
    item = await make_item(quantity=5)

    with patch.object(IssuanceRecord, "create", AsyncMock(side_effect=RuntimeError("db down"))):
        with pytest.raises(RuntimeError):
            await issue_inventory(item.id, VESSEL, 2)

    assert (await _reload(item)).quantity == 5
    assert await Expense.all().count() == 0


@pytest.mark.asyncio
async def test_external_ledger_leftover_is_reported(make_item, external_ledger):
    item = await make_item(quantity=5)

    with patch.object(IssuanceRecord, "create", AsyncMock(side_effect=RuntimeError("db down"))):
        with pytest.raises(PartialFailure) as excinfo:
            await issue_inventory(item.id, VESSEL, 2, gateway=external_ledger)

    failure = excinfo.value
    assert failure.step == "create_issuance_record"
    assert failure.completed_steps == ["create_cost_entry"]
    assert failure.results["create_cost_entry"] in external_ledger.entries
    # Stock is rolled back with the transaction
    assert (await _reload(item)).quantity == 5


@pytest.mark.asyncio
async def test_reversal_is_safe_to_retry_after_partial_failure(make_item, external_ledger):
    item = await make_item(quantity=10)
    record = await issue_inventory(item.id, VESSEL, 4, gateway=external_ledger)
    assert len(external_ledger.entries) == 1

    with patch.object(IssuanceRecord, "delete", AsyncMock(side_effect=RuntimeError("db down"))):
        with pytest.raises(PartialFailure) as excinfo:
            await reverse_issuance(record.id, gateway=external_ledger)
    assert excinfo.value.step == "delete_issuance_record"
    assert excinfo.value.completed_steps == ["delete_cost_entry"]
    assert external_ledger.entries == {}
    assert (await _reload(item)).quantity == 6

    # Retrying restocks exactly once and the repeated ledger delete is a no-op
    await reverse_issuance(record.id, gateway=external_ledger)
    assert (await _reload(item)).quantity == 10
    assert await IssuanceRecord.all().count() == 0


@pytest.mark.asyncio
async def test_step_timeout_fails_the_issuance(make_item):
    item = await make_item(quantity=5)
    slow_ledger = ExternalLedger(create_delay=1)

    with pytest.raises(asyncio.TimeoutError):
        await issue_inventory(item.id, VESSEL, 1, gateway=slow_ledger, timeout=0.05)

    assert (await _reload(item)).quantity == 5
    assert slow_ledger.entries == {}


@pytest.mark.asyncio
async def test_list_and_get_issuances(make_item):
    item = await make_item(quantity=30)
    other_vessel = uuid4()
    first = await issue_inventory(item.id, VESSEL, 1, issued_on=date(2026, 1, 5))
    second = await issue_inventory(item.id, VESSEL, 2, issued_on=date(2026, 2, 5))
    await issue_inventory(item.id, other_vessel, 3)

    records = await list_issuances(VESSEL)
    assert [r.id for r in records] == [second.id, first.id]
    assert len(await list_issuances()) == 3

    fetched = await get_issuance(first.id)
    assert fetched.item.name == "Fuel Injector"

    with pytest.raises(NotFound):
        await get_issuance(uuid4())
