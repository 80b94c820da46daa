# backend/courtside/routes/v1/monthly_passes.py
"""
Monthly pass routes - API v1

Endpoints:
    POST / - Customer requests a weekly slot for a month
    POST /{pass_id}/confirm - Owner confirms and materializes the blocks
    POST /{pass_id}/cancel - Owner rejects a PENDING request
"""

import logging

from fastapi import APIRouter, Body, Depends, status

from ...api.dependencies import get_current_principal, get_monthly_pass_service
from ...core.identity import Principal
from ...schemas.monthly_pass import MonthlyPassRequest, MonthlyPassResponse
from ...services.monthly_pass_service import MonthlyPassService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["monthly-passes-v1"])


@router.post(
    "",
    response_model=MonthlyPassResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {"description": "Slot reserved by another pass, or already ACTIVE"},
        422: {"description": "Request window closed or terms not accepted"},
    },
)
def request_monthly_pass(
    request_data: MonthlyPassRequest = Body(...),
    principal: Principal = Depends(get_current_principal),
    monthly_pass_service: MonthlyPassService = Depends(get_monthly_pass_service),
) -> MonthlyPassResponse:
    """Re-requesting while PENDING returns the same pass."""
    monthly_pass = monthly_pass_service.request_monthly_pass(
        principal,
        request_data.court_id,
        request_data.month,
        request_data.weekday,
        request_data.start_time,
        request_data.end_time,
        accept_terms=request_data.accept_terms,
    )
    return MonthlyPassResponse.model_validate(monthly_pass)


@router.post("/{pass_id}/confirm", response_model=MonthlyPassResponse)
def confirm_monthly_pass(
    pass_id: str,
    principal: Principal = Depends(get_current_principal),
    monthly_pass_service: MonthlyPassService = Depends(get_monthly_pass_service),
) -> MonthlyPassResponse:
    monthly_pass = monthly_pass_service.confirm_monthly_pass(principal, pass_id)
    return MonthlyPassResponse.model_validate(monthly_pass)


@router.post("/{pass_id}/cancel", response_model=MonthlyPassResponse)
def cancel_monthly_pass(
    pass_id: str,
    principal: Principal = Depends(get_current_principal),
    monthly_pass_service: MonthlyPassService = Depends(get_monthly_pass_service),
) -> MonthlyPassResponse:
    monthly_pass = monthly_pass_service.cancel_monthly_pass(principal, pass_id)
    return MonthlyPassResponse.model_validate(monthly_pass)
