# backend/courtside/routes/v1/holidays.py
"""
Holiday override routes for the caller's own establishment - API v1

Endpoints:
    GET /establishments/me/holidays - List overrides, optionally between two dates
    PUT /establishments/me/holidays - Create or replace the override of a date
    DELETE /establishments/me/holidays/{holiday_id} - Remove an override
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, Query

from ...api.dependencies import get_current_principal, get_holiday_service
from ...core.identity import Principal
from ...schemas.base_responses import DeleteResponse
from ...schemas.holiday import HolidayResponse, HolidayUpsert
from ...services.holiday_service import HolidayService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["holidays-v1"])


@router.get("/establishments/me/holidays", response_model=List[HolidayResponse])
def list_holidays(
    start: Optional[str] = Query(None, description="YYYY-MM-DD"),
    end: Optional[str] = Query(None, description="YYYY-MM-DD"),
    principal: Principal = Depends(get_current_principal),
    holiday_service: HolidayService = Depends(get_holiday_service),
) -> List[HolidayResponse]:
    holidays = holiday_service.list_holidays(principal, start, end)
    return [HolidayResponse.model_validate(holiday) for holiday in holidays]


@router.put("/establishments/me/holidays", response_model=HolidayResponse)
def upsert_holiday(
    holiday_data: HolidayUpsert = Body(...),
    principal: Principal = Depends(get_current_principal),
    holiday_service: HolidayService = Depends(get_holiday_service),
) -> HolidayResponse:
    holiday = holiday_service.upsert_holiday(
        principal,
        holiday_data.date,
        holiday_data.is_open,
        opening_time=holiday_data.opening_time,
        closing_time=holiday_data.closing_time,
        note=holiday_data.note,
    )
    return HolidayResponse.model_validate(holiday)


@router.delete("/establishments/me/holidays/{holiday_id}", response_model=DeleteResponse)
def delete_holiday(
    holiday_id: str,
    principal: Principal = Depends(get_current_principal),
    holiday_service: HolidayService = Depends(get_holiday_service),
) -> DeleteResponse:
    holiday_service.delete_holiday(principal, holiday_id)
    return DeleteResponse(message="Holiday removed")
