# fleetstock/scripts/seed_data.py
import asyncio
import logging
from decimal import Decimal
from tortoise import Tortoise
from tortoise.transactions import in_transaction
from fleetstock.core.db import init_db
from fleetstock.models.inventory import InventoryItem
from fleetstock.services.stock_ledger import apply_delta, lock_item, recompute_status

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("seed_data")

DEMO_ITEMS = [
    # name, category, quantity, reorder level, unit cost
    ("Fuel Injector", "engine", 12, 4, Decimal("850.00")),
    ("Bilge Pump", "pumps", 3, 2, Decimal("1200.00")),
    ("Impeller Kit", "pumps", 25, None, Decimal("95.50")),
    ("Generator Starter Motor", "electrical", 1, 1, Decimal("2300.00")),
]

async def seed():
    for name, category, quantity, level, cost in DEMO_ITEMS:
        item, created = await InventoryItem.get_or_create(
            name=name,
            defaults={
                "category": category,
                "quantity": quantity,
                "reorder_level": level,
                "unit_cost": cost,
                "status": recompute_status(quantity, level),
            },
        )
        if not created:
            # Existing rows are reset through the ledger so status follows quantity
            async with in_transaction() as conn:
                item = await lock_item(item.id, conn)
                item.reorder_level = level
                apply_delta(item, quantity - item.quantity)
                await item.save(update_fields=["quantity", "reorder_level", "status", "updated_at"], using_db=conn)
        log.info(f"{'Created' if created else 'Reset'} {name}: {item.quantity} [{item.status.value}] id={item.id}")

    log.info("Inventory seeded.")

async def main():
    await init_db()
    await seed()
    await Tortoise.close_connections()

if __name__ == "__main__":
    asyncio.run(main())
