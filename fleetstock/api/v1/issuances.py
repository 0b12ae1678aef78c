import logging
from fastapi import APIRouter, status
from fleetstock.schemas.issuance import IssuanceRequest, IssuanceResponse
from fleetstock.schemas.response import SuccessResponse
from fleetstock.services.issuance_service import issue_inventory, reverse_issuance, get_issuance, list_issuances
from typing import Optional
from uuid import UUID

router = APIRouter()
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("uvicorn")


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def issue_endpoint(request_data: IssuanceRequest):
    """
    Consumes stock for a vessel. Returns 409 when the item holds fewer units
    than requested; nothing is written in that case.
    """
    record = await issue_inventory(
        item_id=request_data.item_id,
        vessel_id=request_data.vessel_id,
        quantity=request_data.quantity,
        unit_cost=request_data.unit_cost,
        issued_on=request_data.issued_on,
        overhaul_project_id=request_data.overhaul_project_id,
        maintenance_schedule_id=request_data.maintenance_schedule_id,
        purpose=request_data.purpose,
        notes=request_data.notes,
    )
    return SuccessResponse(data=IssuanceResponse.from_record(record).model_dump(mode="json"))


@router.get("/", response_model=SuccessResponse)
async def list_issuances_endpoint(vessel_id: Optional[UUID] = None):
    records = await list_issuances(vessel_id)
    return SuccessResponse(data=[IssuanceResponse.from_record(r).model_dump(mode="json") for r in records])


@router.get("/{issuance_id}", response_model=SuccessResponse)
async def get_issuance_endpoint(issuance_id: UUID):
    record = await get_issuance(issuance_id)
    return SuccessResponse(data=IssuanceResponse.from_record(record).model_dump(mode="json"))


@router.delete("/{issuance_id}", response_model=SuccessResponse)
async def reverse_issuance_endpoint(issuance_id: UUID):
    """Restores the consumed stock, voids the cost entry and deletes the issuance."""
    await reverse_issuance(issuance_id)
    log.info(f"Issuance {issuance_id} reversed.")
    return SuccessResponse(data={"issuance_id": str(issuance_id), "message": "Issuance reversed and stock restored."})
