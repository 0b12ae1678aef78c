import asyncio
import pytest
from decimal import Decimal
from uuid import uuid4
from tortoise import Tortoise
from fastapi.testclient import TestClient

from fleetstock.core.db import MODELS_MODULES
from fleetstock.services.cost_entries import CostEntryGateway, HoldingSink
from fleetstock.services.stock_ledger import create_item


@pytest.fixture
async def db():
    """Fresh in-memory database per test."""
    await Tortoise.init(db_url="sqlite://:memory:", modules={"models": MODELS_MODULES})
    await Tortoise.generate_schemas()
    yield
    await Tortoise.close_connections()


@pytest.fixture
def make_item(db):
    async def _make(quantity=5, reorder_level=None, unit_cost=Decimal("100.00"), name="Fuel Injector"):
        return await create_item(name=name, quantity=quantity, reorder_level=reorder_level, unit_cost=unit_cost)
    return _make


@pytest.fixture
def client():
    # Not used as a context manager: the lifespan (real DB connection) does not run
    from fleetstock.main import app
    return TestClient(app)


class ExternalLedger(CostEntryGateway):
    """Ledger living in another service: its writes commit immediately."""
    transactional = False

    def __init__(self, create_delay: float = 0):
        self.entries = {}
        self.create_delay = create_delay

    async def create_cost_entry(self, amount, entry_date, category, description, vendor=None, *, project_id=None, conn=None):
        if self.create_delay:
            await asyncio.sleep(self.create_delay)
        entry_id = uuid4()
        self.entries[entry_id] = {"amount": amount, "category": category, "description": description}
        return entry_id

    async def delete_cost_entry(self, entry_id, *, conn=None):
        self.entries.pop(entry_id, None)


class RecordingSink(HoldingSink):
    def __init__(self, fail: bool = False):
        self.holdings = []
        self.fail = fail

    async def record_holding(self, name, warehouse_id, estimated_value, description):
        if self.fail:
            raise ConnectionError("warehouse catalog unavailable")
        self.holdings.append(
            {"name": name, "warehouse_id": warehouse_id, "estimated_value": estimated_value, "description": description}
        )


@pytest.fixture
def external_ledger():
    return ExternalLedger()
