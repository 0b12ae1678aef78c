import logging
from tortoise.transactions import in_transaction
from typing import List, Optional
from datetime import date
from decimal import Decimal
from uuid import UUID
from fleetstock.core.errors import NotFound, ValidationError
from fleetstock.models.issuance import IssuanceRecord
from fleetstock.services.cost_entries import CostEntryGateway, INVENTORY_USAGE, get_cost_entry_gateway
from fleetstock.services.stock_ledger import adjust_stock
from fleetstock.services.step_log import StepLog

log = logging.getLogger("fleetstock.issuance")


async def issue_inventory(
    item_id: UUID,
    vessel_id: UUID,
    quantity: int,
    unit_cost: Optional[Decimal] = None,
    issued_on: Optional[date] = None,
    *,
    overhaul_project_id: Optional[UUID] = None,
    maintenance_schedule_id: Optional[UUID] = None,
    purpose: str = "maintenance",
    notes: Optional[str] = None,
    gateway: Optional[CostEntryGateway] = None,
    timeout: Optional[float] = None,
) -> IssuanceRecord:
    """
    Consumes `quantity` units of an item for a vessel and books the cost.

    Decrements stock, creates one Cost Entry for quantity x unit cost and one
    IssuanceRecord linked to it, all in one transaction. Fails with
    InsufficientStock before any write when the item holds fewer units.
    """
    if quantity is None or quantity <= 0:
        raise ValidationError("Quantity to issue must be greater than zero.", details={"quantity": quantity})
    if unit_cost is not None and Decimal(str(unit_cost)) < 0:
        raise ValidationError("Unit cost cannot be negative.", details={"unit_cost": str(unit_cost)})
    gateway = gateway or get_cost_entry_gateway()
    issued_on = issued_on or date.today()
    steps = StepLog("issue_inventory", timeout)

    try:
        async with in_transaction() as conn:
            # 1. Consume stock (row lock, non-negativity check)
            item = await steps.run("consume_stock", adjust_stock(item_id, -quantity, conn, reason="issuance"))
            cost = Decimal(str(unit_cost)) if unit_cost is not None else item.unit_cost
            amount = cost * quantity

            # 2. Book the cost
            target = f"overhaul {overhaul_project_id}" if overhaul_project_id else f"vessel {vessel_id}"
            expense_id = await steps.run(
                "create_cost_entry",
                gateway.create_cost_entry(
                    amount,
                    issued_on,
                    INVENTORY_USAGE,
                    f"Parts used: {item.name} x{quantity} for {target}",
                    project_id=vessel_id,
                    conn=conn,
                ),
                external=not gateway.transactional,
            )

            # 3. Record the issuance, linked to its cost entry
            record = await steps.run(
                "create_issuance_record",
                IssuanceRecord.create(
                    item_id=item.id,
                    vessel_id=vessel_id,
                    overhaul_project_id=overhaul_project_id,
                    maintenance_schedule_id=maintenance_schedule_id,
                    purpose=purpose,
                    notes=notes,
                    quantity=quantity,
                    unit_cost=cost,
                    issued_on=issued_on,
                    expense_ref=expense_id,
                    using_db=conn
                ),
            )
    except Exception as exc:
        steps.raise_if_partial(exc)
        raise

    log.info(f"Issued {quantity} x {item.name} to vessel {vessel_id} (issuance {record.id}, cost entry {expense_id}).")
    return record


async def reverse_issuance(
    issuance_id: UUID,
    *,
    gateway: Optional[CostEntryGateway] = None,
    timeout: Optional[float] = None,
) -> None:
    """
    Exact inverse of issue_inventory: restocks the consumed quantity, voids the
    linked Cost Entry and deletes the record.

    Stock is restored first. If the ledger delete succeeded elsewhere but a
    later step failed, the transaction undoes the restock and the record still
    exists, so calling this again restocks once and the repeated delete is a no-op.
    """
    gateway = gateway or get_cost_entry_gateway()
    steps = StepLog("reverse_issuance", timeout)

    try:
        async with in_transaction() as conn:
            # 1. Read (and lock) the record so concurrent reversals cannot double-restock
            record = await steps.run(
                "load_issuance",
                IssuanceRecord.filter(id=issuance_id).using_db(conn).select_for_update().first(),
            )
            if not record:
                raise NotFound("Issuance", issuance_id)

            # 2. Restock, unconditionally
            await steps.run(
                "restore_stock",
                adjust_stock(record.item_id, record.quantity, conn, reason="issuance reversal"),
            )

            # 3. Void the cost entry
            if record.expense_ref:
                await steps.run(
                    "delete_cost_entry",
                    gateway.delete_cost_entry(record.expense_ref, conn=conn),
                    external=not gateway.transactional,
                )

            # 4. Drop the record
            await steps.run("delete_issuance_record", record.delete(using_db=conn))
    except Exception as exc:
        steps.raise_if_partial(exc)
        raise

    log.info(f"Reversed issuance {issuance_id}: {record.quantity} units restocked to item {record.item_id}.")


async def get_issuance(issuance_id: UUID) -> IssuanceRecord:
    record = await IssuanceRecord.get_or_none(id=issuance_id).prefetch_related("item")
    if not record:
        raise NotFound("Issuance", issuance_id)
    return record


async def list_issuances(vessel_id: Optional[UUID] = None) -> List[IssuanceRecord]:
    """Issuances newest first, optionally for one vessel."""
    query = IssuanceRecord.all()
    if vessel_id:
        query = query.filter(vessel_id=vessel_id)
    return await query.order_by("-issued_on", "-created_at").prefetch_related("item")

