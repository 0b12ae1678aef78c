import logging
from fastapi import APIRouter, status
from fleetstock.models.replacement import ReplacementStatus
from fleetstock.schemas.replacement import ReplacementRequest, ReplacementResponse, ReturnRequest
from fleetstock.schemas.response import SuccessResponse
from fleetstock.services.replacement_service import (
    replace_equipment,
    return_replacement,
    delete_replacement,
    get_replacement,
    list_replacements,
)
from typing import Optional
from uuid import UUID

router = APIRouter()
logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')
log = logging.getLogger("uvicorn")


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=SuccessResponse)
async def replace_endpoint(request_data: ReplacementRequest):
    """Records an equipment replacement in status 'confirmed'."""
    replacement = await replace_equipment(request_data)
    return SuccessResponse(data=ReplacementResponse.from_record(replacement).model_dump(mode="json"))


@router.post("/{replacement_id}/return", response_model=SuccessResponse)
async def return_endpoint(replacement_id: UUID, payload: ReturnRequest):
    """
    Returns the new unit (e.g. wrong fit): restocks it, voids the cost entry and
    keeps the replacement as a 'returned' record. 409 if already returned.
    """
    replacement = await return_replacement(replacement_id, payload.reason)
    return SuccessResponse(data=ReplacementResponse.from_record(replacement).model_dump(mode="json"))


@router.get("/", response_model=SuccessResponse)
async def list_replacements_endpoint(vessel_id: Optional[UUID] = None, status: Optional[ReplacementStatus] = None):
    replacements = await list_replacements(vessel_id, status)
    return SuccessResponse(data=[ReplacementResponse.from_record(r).model_dump(mode="json") for r in replacements])


@router.get("/{replacement_id}", response_model=SuccessResponse)
async def get_replacement_endpoint(replacement_id: UUID):
    replacement = await get_replacement(replacement_id)
    return SuccessResponse(data=ReplacementResponse.from_record(replacement).model_dump(mode="json"))


@router.delete("/{replacement_id}", response_model=SuccessResponse)
async def delete_replacement_endpoint(replacement_id: UUID):
    """Operator hard delete. Stock and the cost entry are not compensated."""
    await delete_replacement(replacement_id)
    log.info(f"Replacement {replacement_id} deleted by operator.")
    return SuccessResponse(data={"replacement_id": str(replacement_id), "message": "Replacement deleted."})
