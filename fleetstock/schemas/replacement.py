import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field
from fleetstock.models.replacement import ReplacementSource, Disposition, ReplacementStatus


class ReplacementRequest(BaseModel):
    """
    Schema for recording a failed-for-new equipment swap.

    Conditional requirements (item for inventory source, warehouse for
    sent_to_warehouse) are checked by the replacement service, not here.
    """
    vessel_id: uuid.UUID
    vessel_name: Optional[str] = Field(None, description="Display name used in the warehouse holding description.")
    old_equipment_name: str = ""
    failure_reason: str = ""
    failure_date: Optional[date] = None
    new_equipment_source: ReplacementSource = ReplacementSource.INVENTORY
    inventory_id: Optional[uuid.UUID] = None
    replacement_cost: Decimal = Decimal("0")
    labor_cost: Decimal = Decimal("0")
    old_equipment_disposition: Disposition = Disposition.SENT_TO_WAREHOUSE
    warehouse_id: Optional[uuid.UUID] = None
    replacement_date: Optional[date] = Field(None, description="Defaults to today.")
    overhaul_project_id: Optional[uuid.UUID] = None
    maintenance_schedule_id: Optional[uuid.UUID] = None
    notes: Optional[str] = None


class ReturnRequest(BaseModel):
    reason: str = Field(..., description="Why the new unit is being sent back (e.g., wrong fit).")


class ReplacementResponse(BaseModel):
    id: uuid.UUID
    vessel_id: uuid.UUID
    old_equipment_name: str
    new_equipment_source: ReplacementSource
    item_id: Optional[uuid.UUID]
    replacement_cost: Decimal
    labor_cost: Decimal
    old_equipment_disposition: Disposition
    warehouse_id: Optional[uuid.UUID]
    status: ReplacementStatus
    return_reason: Optional[str]
    returned_at: Optional[datetime]
    expense_ref: Optional[uuid.UUID]

    @classmethod
    def from_record(cls, replacement):
        return cls(
            id=replacement.id,
            vessel_id=replacement.vessel_id,
            old_equipment_name=replacement.old_equipment_name,
            new_equipment_source=replacement.new_equipment_source,
            item_id=replacement.item_id,
            replacement_cost=replacement.replacement_cost,
            labor_cost=replacement.labor_cost,
            old_equipment_disposition=replacement.old_equipment_disposition,
            warehouse_id=replacement.warehouse_id,
            status=replacement.status,
            return_reason=replacement.return_reason,
            returned_at=replacement.returned_at,
            expense_ref=replacement.expense_ref,
        )
