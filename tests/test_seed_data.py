import pytest

from fleetstock.models.inventory import InventoryItem, StockStatus
from fleetstock.scripts.seed_data import DEMO_ITEMS, seed


@pytest.mark.asyncio
async def test_seed_creates_items_with_derived_status(db):
    await seed()

    assert await InventoryItem.all().count() == len(DEMO_ITEMS)
    starter = await InventoryItem.get(name="Generator Starter Motor")
    assert starter.quantity == 1
    assert starter.status == StockStatus.LOW_STOCK


@pytest.mark.asyncio
async def test_reseeding_resets_quantity_and_status(db):
    await seed()
    await InventoryItem.filter(name="Fuel Injector").update(quantity=0, status=StockStatus.OUT_OF_STOCK)

    await seed()

    assert await InventoryItem.all().count() == len(DEMO_ITEMS)
    injector = await InventoryItem.get(name="Fuel Injector")
    assert injector.quantity == 12
    assert injector.status == StockStatus.IN_STOCK
