import logging
from typing import Any, Optional
from uuid import UUID
from fleetstock.core.config import DEFAULT_REORDER_LEVEL
from fleetstock.core.errors import InsufficientStock, NotFound, ValidationError
from fleetstock.events.outbox_utility import create_outbox_event
from fleetstock.models.inventory import InventoryItem, StockStatus

log = logging.getLogger("fleetstock.stock_ledger")

LOW_STOCK_EVENT = "inventory.low_stock_alert.v1"


def recompute_status(quantity: int, reorder_level: Optional[int] = None) -> StockStatus:
    """Availability is a pure function of quantity and reorder level."""
    if reorder_level is None:
        reorder_level = DEFAULT_REORDER_LEVEL
    if quantity <= 0:
        return StockStatus.OUT_OF_STOCK
    if quantity <= reorder_level:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def apply_delta(item: InventoryItem, delta: int) -> InventoryItem:
    """
    Adds `delta` to the item's quantity (negative consumes, positive restocks)
    and recomputes its status. A result below zero raises InsufficientStock and
    leaves the item untouched; nothing is clamped.

    This is the only place a quantity is changed.
    """
    new_qty = item.quantity + delta
    if new_qty < 0:
        raise InsufficientStock(item.id, requested=-delta, available=item.quantity)

    item.quantity = new_qty
    item.status = recompute_status(new_qty, item.reorder_level)
    return item


async def lock_item(item_id: UUID, conn: Any) -> InventoryItem:
    """Loads the item row with a row lock held until the surrounding transaction ends."""
    item = await InventoryItem.filter(id=item_id).using_db(conn).select_for_update().first()
    if not item:
        raise NotFound("Inventory item", item_id)
    return item


async def adjust_stock(item_id: UUID, delta: int, conn: Any, reason: str = "") -> InventoryItem:
    """
    Locks the item, applies the delta and persists quantity and status in one write.

    Must run inside a transaction (`conn`): the row lock serializes concurrent
    issuances against the same item, so the quantity check and the decrement
    cannot interleave.
    """
    item = await lock_item(item_id, conn)
    old_status = item.status
    apply_delta(item, delta)
    await item.save(update_fields=["quantity", "status", "updated_at"], using_db=conn)
    log.info(f"Stock {item.id} ({item.name}) {delta:+d} -> {item.quantity} [{item.status.value}] {reason}".rstrip())

    if item.status != old_status and item.status != StockStatus.IN_STOCK:
        await emit_low_stock_alert(item, reason, conn)
    return item


async def emit_low_stock_alert(item: InventoryItem, reason: str, conn: Any):
    """Queues an alert when an item drops to or below its reorder level."""
    await create_outbox_event(
        aggregate_type="inventory",
        aggregate_id=item.id,
        event_type=LOW_STOCK_EVENT,
        payload={
            "item_id": str(item.id),
            "name": item.name,
            "quantity": item.quantity,
            "reorder_level": item.reorder_level if item.reorder_level is not None else DEFAULT_REORDER_LEVEL,
            "status": item.status.value,
            "triggered_by": reason,
        },
        conn=conn
    )


async def get_item(item_id: UUID) -> InventoryItem:
    item = await InventoryItem.get_or_none(id=item_id)
    if not item:
        raise NotFound("Inventory item", item_id)
    return item


async def create_item(
    name: str,
    quantity: int = 0,
    reorder_level: Optional[int] = None,
    unit_cost=0,
    category: Optional[str] = None,
    unit: str = "pcs",
) -> InventoryItem:
    """Catalog utility: adds a stocked line with its status derived from the opening quantity."""
    if quantity < 0:
        raise ValidationError("Opening quantity cannot be negative.", details={"quantity": quantity})
    return await InventoryItem.create(
        name=name,
        category=category,
        unit=unit,
        quantity=quantity,
        reorder_level=reorder_level,
        unit_cost=unit_cost,
        status=recompute_status(quantity, reorder_level),
    )
