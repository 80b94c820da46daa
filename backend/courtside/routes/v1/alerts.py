# backend/courtside/routes/v1/alerts.py
"""
Availability alert routes - API v1

Endpoints:
    POST / - Watch a currently unavailable interval
"""

import logging

from fastapi import APIRouter, Body, Depends, status

from ...api.dependencies import get_availability_alert_service, get_current_principal
from ...core.identity import Principal
from ...schemas.availability import AvailabilityAlertCreate, AvailabilityAlertResponse
from ...services.availability_alert_service import AvailabilityAlertService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["availability-alerts-v1"])


@router.post(
    "",
    response_model=AvailabilityAlertResponse,
    status_code=status.HTTP_201_CREATED,
    responses={422: {"description": "Interval already available or outside operating hours"}},
)
def create_availability_alert(
    alert_data: AvailabilityAlertCreate = Body(...),
    principal: Principal = Depends(get_current_principal),
    alert_service: AvailabilityAlertService = Depends(get_availability_alert_service),
) -> AvailabilityAlertResponse:
    alert = alert_service.create_alert(
        principal,
        alert_data.court_id,
        alert_data.date,
        alert_data.start_time,
        alert_data.duration_minutes,
    )
    return AvailabilityAlertResponse.model_validate(alert)
