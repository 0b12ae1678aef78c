import asyncio
import logging
from tortoise import timezone
from tortoise.transactions import in_transaction
from typing import List, Optional
from datetime import date, datetime
from decimal import Decimal
from uuid import UUID
from fleetstock.core.config import HOLDING_VALUE_RATE
from fleetstock.core.errors import InvalidState, NotFound, ValidationError
from fleetstock.models.replacement import EquipmentReplacement, ReplacementSource, Disposition, ReplacementStatus
from fleetstock.schemas.replacement import ReplacementRequest
from fleetstock.services.cost_entries import (
    CostEntryGateway,
    HoldingSink,
    EQUIPMENT_REPLACEMENT,
    get_cost_entry_gateway,
    get_holding_sink,
)
from fleetstock.services.stock_ledger import adjust_stock
from fleetstock.services.step_log import StepLog

log = logging.getLogger("fleetstock.replacement")

CENTS = Decimal("0.01")


def validate_replacement(request: ReplacementRequest):
    """Rejects a request before anything is written."""
    if not (request.old_equipment_name or "").strip():
        raise ValidationError("Old equipment name is required.", details={"field": "old_equipment_name"})
    if not (request.failure_reason or "").strip():
        raise ValidationError("Failure reason is required.", details={"field": "failure_reason"})
    if request.new_equipment_source == ReplacementSource.INVENTORY and not request.inventory_id:
        raise ValidationError(
            "An inventory item is required when the new equipment comes from inventory.",
            details={"field": "inventory_id"},
        )
    if request.old_equipment_disposition == Disposition.SENT_TO_WAREHOUSE and not request.warehouse_id:
        raise ValidationError(
            "A warehouse is required when the old equipment is sent to a warehouse.",
            details={"field": "warehouse_id"},
        )
    for field in ("replacement_cost", "labor_cost"):
        if getattr(request, field) < 0:
            raise ValidationError(f"{field.replace('_', ' ').capitalize()} cannot be negative.", details={"field": field})


def holding_value(replacement_cost: Decimal, labor_cost: Decimal) -> Decimal:
    """Salvage value of a warehoused failed unit."""
    return ((replacement_cost + labor_cost) * HOLDING_VALUE_RATE).quantize(CENTS)


async def replace_equipment(
    request: ReplacementRequest,
    *,
    gateway: Optional[CostEntryGateway] = None,
    holdings: Optional[HoldingSink] = None,
    timeout: Optional[float] = None,
) -> EquipmentReplacement:
    """
    Records a failed-for-new equipment swap in status `confirmed`.

    A unit taken from inventory consumes exactly one unit of stock, mirroring
    the single unit a return puts back. The combined replacement and labor cost
    is booked as one Cost Entry linked to the replacement. When the failed unit
    goes to a warehouse, a holding record is written after the transaction
    commits; that write is best effort and never fails the replacement.
    """
    validate_replacement(request)
    gateway = gateway or get_cost_entry_gateway()
    holdings = holdings or get_holding_sink()

    from_inventory = request.new_equipment_source == ReplacementSource.INVENTORY
    to_warehouse = request.old_equipment_disposition == Disposition.SENT_TO_WAREHOUSE
    replacement_date = request.replacement_date or date.today()
    total = request.replacement_cost + request.labor_cost
    vessel_label = request.vessel_name or f"vessel {request.vessel_id}"
    steps = StepLog("replace_equipment", timeout)

    try:
        async with in_transaction() as conn:
            # 1. Take the new unit out of stock, then record the swap
            if from_inventory:
                await steps.run(
                    "consume_stock",
                    adjust_stock(request.inventory_id, -1, conn, reason="equipment replacement"),
                )

            replacement = await steps.run(
                "create_replacement",
                EquipmentReplacement.create(
                    vessel_id=request.vessel_id,
                    old_equipment_name=request.old_equipment_name.strip(),
                    failure_reason=request.failure_reason.strip(),
                    failure_date=request.failure_date,
                    new_equipment_source=request.new_equipment_source,
                    item_id=request.inventory_id if from_inventory else None,
                    replacement_date=replacement_date,
                    replacement_cost=request.replacement_cost,
                    labor_cost=request.labor_cost,
                    old_equipment_disposition=request.old_equipment_disposition,
                    warehouse_id=request.warehouse_id if to_warehouse else None,
                    overhaul_project_id=request.overhaul_project_id,
                    maintenance_schedule_id=request.maintenance_schedule_id,
                    notes=request.notes,
                    status=ReplacementStatus.CONFIRMED,
                    using_db=conn
                ),
            )

            # 2. Book the cost and link it back
            expense_id = await steps.run(
                "create_cost_entry",
                gateway.create_cost_entry(
                    total,
                    replacement_date,
                    EQUIPMENT_REPLACEMENT,
                    f"Replaced {replacement.old_equipment_name} on {vessel_label}: {replacement.failure_reason}",
                    project_id=request.vessel_id,
                    conn=conn,
                ),
                external=not gateway.transactional,
            )
            replacement.expense_ref = expense_id
            await steps.run("link_cost_entry", replacement.save(update_fields=["expense_ref"], using_db=conn))
    except Exception as exc:
        steps.raise_if_partial(exc)
        raise

    log.info(
        f"Replacement {replacement.id} confirmed on {vessel_label}: {replacement.old_equipment_name} "
        f"({request.new_equipment_source.value}), cost entry {expense_id} for {total}."
    )

    # 3. Park the failed unit in the warehouse, best effort
    if to_warehouse:
        await record_failed_unit(replacement, vessel_label, holdings, steps.timeout)

    return replacement


async def record_failed_unit(replacement: EquipmentReplacement, vessel_label: str, holdings: HoldingSink, timeout: float):
    value = holding_value(replacement.replacement_cost, replacement.labor_cost)
    try:
        await asyncio.wait_for(
            holdings.record_holding(
                replacement.old_equipment_name,
                replacement.warehouse_id,
                value,
                f"Removed from {vessel_label}: {replacement.failure_reason}",
            ),
            timeout=timeout,
        )
    except Exception as e:
        # The replacement stands; the holding has to be entered by hand.
        log.warning(
            f"Could not record {replacement.old_equipment_name} in warehouse {replacement.warehouse_id} "
            f"for replacement {replacement.id}: {e!r}"
        )


async def return_replacement(
    replacement_id: UUID,
    reason: str,
    *,
    gateway: Optional[CostEntryGateway] = None,
    timeout: Optional[float] = None,
) -> EquipmentReplacement:
    """
    Sends the new unit back: restocks the one unit taken from inventory, voids
    the Cost Entry and moves the replacement to `returned`. The row is kept as
    a cost-neutral history record.

    A second return fails with InvalidState and changes nothing.
    """
    if not (reason or "").strip():
        raise ValidationError("A return reason is required.", details={"field": "reason"})
    reason = reason.strip()
    gateway = gateway or get_cost_entry_gateway()
    steps = StepLog("return_replacement", timeout)

    try:
        async with in_transaction() as conn:
            replacement = await steps.run(
                "load_replacement",
                EquipmentReplacement.filter(id=replacement_id).using_db(conn).select_for_update().first(),
            )
            if not replacement:
                raise NotFound("Equipment replacement", replacement_id)
            if replacement.status == ReplacementStatus.RETURNED:
                raise InvalidState(
                    f"Equipment replacement {replacement_id} was already returned.",
                    details={"id": str(replacement_id), "status": replacement.status.value},
                )

            # 1. Put the unit back in stock
            if replacement.new_equipment_source == ReplacementSource.INVENTORY and replacement.item_id:
                await steps.run(
                    "restore_stock",
                    adjust_stock(replacement.item_id, 1, conn, reason="replacement return"),
                )

            # 2. Void the cost entry
            if replacement.expense_ref:
                await steps.run(
                    "delete_cost_entry",
                    gateway.delete_cost_entry(replacement.expense_ref, conn=conn),
                    external=not gateway.transactional,
                )

            # 3. confirmed -> returned, only if still confirmed
            returned_at = await steps.run("mark_returned", mark_returned(replacement_id, reason, conn))
    except Exception as exc:
        steps.raise_if_partial(exc)
        raise

    replacement.status = ReplacementStatus.RETURNED
    replacement.return_reason = reason
    replacement.returned_at = returned_at
    replacement.expense_ref = None
    log.info(f"Replacement {replacement_id} returned: {reason}")
    return replacement


async def mark_returned(replacement_id: UUID, reason: str, conn) -> datetime:
    """Conditional confirmed -> returned transition; returns the return timestamp."""
    returned_at = timezone.now()
    updated = await (
        EquipmentReplacement.filter(id=replacement_id, status=ReplacementStatus.CONFIRMED)
        .using_db(conn)
        .update(
            status=ReplacementStatus.RETURNED,
            return_reason=reason,
            returned_at=returned_at,
            expense_ref=None,
        )
    )
    if not updated:
        raise InvalidState(
            f"Equipment replacement {replacement_id} is no longer confirmed.",
            details={"id": str(replacement_id)},
        )
    return returned_at


async def delete_replacement(replacement_id: UUID) -> None:
    """
    Operator hard delete. No compensation: stock and the Cost Entry are left
    as they are. Use return_replacement to undo a replacement.
    """
    deleted = await EquipmentReplacement.filter(id=replacement_id).delete()
    if not deleted:
        raise NotFound("Equipment replacement", replacement_id)
    log.warning(f"Replacement {replacement_id} deleted without compensation.")


async def get_replacement(replacement_id: UUID) -> EquipmentReplacement:
    replacement = await EquipmentReplacement.get_or_none(id=replacement_id)
    if not replacement:
        raise NotFound("Equipment replacement", replacement_id)
    return replacement


async def list_replacements(
    vessel_id: Optional[UUID] = None,
    status: Optional[ReplacementStatus] = None,
) -> List[EquipmentReplacement]:
    """Replacements newest first, optionally filtered by vessel and status."""
    query = EquipmentReplacement.all()
    if vessel_id:
        query = query.filter(vessel_id=vessel_id)
    if status:
        query = query.filter(status=status)
    return await query.order_by("-replacement_date", "-created_at")
