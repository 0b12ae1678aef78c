import uuid
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field
from fleetstock.models.inventory import StockStatus


class InventoryItemRequest(BaseModel):
    name: str = Field(..., description="Name of the part or equipment (e.g., Fuel Injector).")
    category: Optional[str] = Field(None, description="Catalog category.")
    unit: str = Field("pcs", description="Unit of measure.")
    quantity: int = Field(0, ge=0, description="Opening stock quantity.")
    reorder_level: Optional[int] = Field(None, ge=0, description="Level at or below which the item counts as low stock (default 10).")
    unit_cost: Decimal = Field(Decimal("0"), ge=0, description="Cost of one unit.")


class InventoryResponse(BaseModel):
    """Schema for fetching inventory stock."""
    id: uuid.UUID
    name: str
    quantity: int
    reorder_level: Optional[int]
    unit_cost: Decimal
    status: StockStatus
    updated_at: str
