import logging
from fastapi import APIRouter, status
from fleetstock.schemas.inventory import InventoryItemRequest, InventoryResponse
from fleetstock.schemas.response import SuccessResponse
from fleetstock.services.stock_ledger import create_item, get_item
from uuid import UUID

log = logging.getLogger("uvicorn")
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

router = APIRouter()


def _to_response(item) -> InventoryResponse:
    return InventoryResponse(
        id=item.id,
        name=item.name,
        quantity=item.quantity,
        reorder_level=item.reorder_level,
        unit_cost=item.unit_cost,
        status=item.status,
        updated_at=str(item.updated_at)
    )


@router.get("/{item_id}", response_model=SuccessResponse)
async def get_inventory_stock(item_id: UUID):
    """Fetches quantity and availability status for one item."""
    item = await get_item(item_id)
    return SuccessResponse(data=_to_response(item).model_dump(mode="json"))


@router.post("/items", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def add_inventory_item(item_data: InventoryItemRequest):
    """
    Adds a stocked part to the catalog. Its status is derived from the opening
    quantity and reorder level.
    """
    item = await create_item(
        name=item_data.name,
        quantity=item_data.quantity,
        reorder_level=item_data.reorder_level,
        unit_cost=item_data.unit_cost,
        category=item_data.category,
        unit=item_data.unit,
    )
    log.info(f"Inventory item {item.id} ({item.name}) added with {item.quantity} {item.unit}.")
    return SuccessResponse(data=_to_response(item).model_dump(mode="json"))
