"""
Contracts for the two external collaborators the engine writes to: the
expense ledger (Cost Entries) and the warehouse holding catalog.

The default implementations store rows through Tortoise in the same database
as the stock tables, so a Cost Entry joins the operation's transaction. A
gateway backed by another service sets `transactional = False`; the step log
then reports a PartialFailure if a later step fails after it committed.
"""
import logging
from abc import ABC, abstractmethod
from datetime import date
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID
from fleetstock.models.ledger import Expense, WarehouseHolding

log = logging.getLogger("fleetstock.cost_entries")

INVENTORY_USAGE = "inventory usage"
EQUIPMENT_REPLACEMENT = "equipment replacement"


class CostEntryGateway(ABC):
    transactional = True

    @abstractmethod
    async def create_cost_entry(
        self,
        amount: Decimal,
        entry_date: date,
        category: str,
        description: str,
        vendor: Optional[str] = None,
        *,
        project_id: Optional[UUID] = None,
        conn: Any = None,
    ) -> UUID:
        """Creates one ledger row and returns its id."""

    @abstractmethod
    async def delete_cost_entry(self, entry_id: UUID, *, conn: Any = None) -> None:
        """Deletes a ledger row. Deleting an id that does not exist is not an error."""


class ExpenseLedgerGateway(CostEntryGateway):
    """Writes Cost Entries to the `expenses` table."""
    transactional = True

    async def create_cost_entry(self, amount, entry_date, category, description, vendor=None, *, project_id=None, conn=None):
        expense = await Expense.create(
            date=entry_date,
            amount=amount,
            category=category,
            expense_type=category.replace(" ", "_"),
            description=description,
            vendor=vendor,
            project_id=project_id,
            project_type="vessel" if project_id else None,
            status="paid",
            payment_method="from_inventory",
            using_db=conn
        )
        log.info(f"Cost entry {expense.id} created: {category} {amount}")
        return expense.id

    async def delete_cost_entry(self, entry_id, *, conn=None):
        deleted = await Expense.filter(id=entry_id).using_db(conn).delete()
        if deleted:
            log.info(f"Cost entry {entry_id} voided.")
        else:
            log.info(f"Cost entry {entry_id} already gone, nothing to void.")


class HoldingSink(ABC):
    @abstractmethod
    async def record_holding(self, name: str, warehouse_id: UUID, estimated_value: Decimal, description: str) -> None:
        """Records a failed unit as held in a warehouse."""


class WarehouseHoldingSink(HoldingSink):
    """Parks failed equipment in the `land_equipment` catalog."""

    async def record_holding(self, name, warehouse_id, estimated_value, description):
        holding = await WarehouseHolding.create(
            equipment_name=name,
            warehouse_id=warehouse_id,
            condition="poor",
            status="in_warehouse",
            estimated_value=estimated_value,
            description=description,
        )
        log.info(f"Holding {holding.id} recorded in warehouse {warehouse_id} at {estimated_value}")


def get_cost_entry_gateway() -> CostEntryGateway:
    return ExpenseLedgerGateway()


def get_holding_sink() -> HoldingSink:
    return WarehouseHoldingSink()
