import uuid
from datetime import date
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field


class IssuanceRequest(BaseModel):
    """Schema for consuming stock against a vessel."""
    item_id: uuid.UUID
    vessel_id: uuid.UUID
    quantity: int = Field(..., description="Units to consume; must be positive.")
    unit_cost: Optional[Decimal] = Field(None, ge=0, description="Defaults to the item's unit cost.")
    issued_on: Optional[date] = Field(None, description="Defaults to today.")
    overhaul_project_id: Optional[uuid.UUID] = None
    maintenance_schedule_id: Optional[uuid.UUID] = None
    purpose: str = "maintenance"
    notes: Optional[str] = None


class IssuanceResponse(BaseModel):
    id: uuid.UUID
    item_id: uuid.UUID
    vessel_id: uuid.UUID
    quantity: int
    unit_cost: Decimal
    total_cost: Decimal
    issued_on: date
    expense_ref: Optional[uuid.UUID]

    @classmethod
    def from_record(cls, record):
        return cls(
            id=record.id,
            item_id=record.item_id,
            vessel_id=record.vessel_id,
            quantity=record.quantity,
            unit_cost=record.unit_cost,
            total_cost=record.total_cost,
            issued_on=record.issued_on,
            expense_ref=record.expense_ref,
        )
