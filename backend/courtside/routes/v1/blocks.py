# backend/courtside/routes/v1/blocks.py
"""
Court block routes - API v1 (establishment owners only)

Endpoints:
    POST / - Block one interval, optionally repeated weekly
    POST /series - Block a time range on selected weekdays over a date range
    DELETE /{block_id} - Remove a block
"""

import logging

from fastapi import APIRouter, Body, Depends, status

from ...api.dependencies import get_block_service, get_current_principal
from ...core.identity import Principal
from ...schemas.base_responses import DeleteResponse
from ...schemas.block import BlockAdmissionResponse, BlockCreate, BlockSeriesCreate
from ...services.block_service import BlockService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["blocks-v1"])


@router.post("", response_model=BlockAdmissionResponse, status_code=status.HTTP_201_CREATED)
def create_block(
    block_data: BlockCreate = Body(...),
    principal: Principal = Depends(get_current_principal),
    block_service: BlockService = Depends(get_block_service),
) -> BlockAdmissionResponse:
    result = block_service.create_block(
        principal,
        block_data.court_id,
        block_data.start_time,
        block_data.end_time,
        note=block_data.note,
        repeat_weeks=block_data.repeat_weeks,
    )
    return BlockAdmissionResponse.model_validate(result.to_dict())


@router.post("/series", response_model=BlockAdmissionResponse, status_code=status.HTTP_201_CREATED)
def create_block_series(
    series: BlockSeriesCreate = Body(...),
    principal: Principal = Depends(get_current_principal),
    block_service: BlockService = Depends(get_block_service),
) -> BlockAdmissionResponse:
    result = block_service.create_block_series(
        principal,
        series.court_id,
        series.start_date,
        series.end_date,
        series.weekdays,
        series.start_time,
        series.end_time,
        note=series.note,
    )
    return BlockAdmissionResponse.model_validate(result.to_dict())


@router.delete("/{block_id}", response_model=DeleteResponse)
def delete_block(
    block_id: str,
    principal: Principal = Depends(get_current_principal),
    block_service: BlockService = Depends(get_block_service),
) -> DeleteResponse:
    block_service.delete_block(principal, block_id)
    return DeleteResponse(message="Block removed")
