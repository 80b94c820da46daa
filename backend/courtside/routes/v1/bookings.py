# backend/courtside/routes/v1/bookings.py
"""
Booking routes - API v1

All business logic delegated to BookingService.

Endpoints:
    POST / - Customer booking, or owner walk-in when customer_name is sent
    POST /{booking_id}/confirm - Owner confirms a PENDING booking
    POST /{booking_id}/cancel - Owner rejects a PENDING booking
    POST /{booking_id}/customer-cancel - Customer cancels their own booking
    POST /{booking_id}/reschedule - Customer moves their own booking once
"""

import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, status

from ...api.dependencies import get_booking_service, get_current_principal
from ...core.identity import Principal
from ...schemas.base_responses import ErrorEnvelope
from ...schemas.booking import (
    BookingCancel,
    BookingCreate,
    BookingCreateResponse,
    BookingReschedule,
    BookingResponse,
)
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - prefix added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


@router.post(
    "",
    response_model=BookingCreateResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": ErrorEnvelope, "description": "Malformed or misaligned interval"},
        409: {"model": ErrorEnvelope, "description": "Time slot not available"},
        422: {"model": ErrorEnvelope, "description": "Closed, outside operating hours, or in the past"},
    },
)
def create_booking(
    booking_data: BookingCreate = Body(...),
    principal: Principal = Depends(get_current_principal),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingCreateResponse:
    """
    Admit a booking and its weekly repeats, all-or-nothing.

    Customers get CONFIRMED or PENDING (owner confirmation or online payment);
    owner walk-ins are always CONFIRMED.
    """
    if booking_data.is_walk_in:
        result = booking_service.create_admin_booking(
            principal,
            booking_data.court_id,
            booking_data.start_time,
            booking_data.end_time,
            customer_name=booking_data.customer_name,
            customer_email=booking_data.customer_email,
            customer_phone=booking_data.customer_phone,
            repeat_weeks=booking_data.repeat_weeks,
        )
    else:
        result = booking_service.create_booking(
            principal,
            booking_data.court_id,
            booking_data.start_time,
            booking_data.end_time,
            repeat_weeks=booking_data.repeat_weeks,
            pay_at_court=booking_data.pay_at_court,
        )
    return BookingCreateResponse.model_validate(result.to_dict())


@router.post(
    "/{booking_id}/confirm",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}, 409: {"description": "Not PENDING or taken"}},
)
def confirm_booking(
    booking_id: str,
    principal: Principal = Depends(get_current_principal),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Confirm; overlapping PENDING bookings on the court are cancelled."""
    booking = booking_service.confirm_booking(principal, booking_id)
    return BookingResponse.model_validate(booking)


@router.post(
    "/{booking_id}/cancel",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}},
)
def cancel_booking(
    booking_id: str,
    cancel_data: Optional[BookingCancel] = Body(default=None),
    principal: Principal = Depends(get_current_principal),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    reason = cancel_data.reason if cancel_data is not None else None
    booking = booking_service.cancel_booking_as_owner(principal, booking_id, reason)
    return BookingResponse.model_validate(booking)


@router.post(
    "/{booking_id}/customer-cancel",
    response_model=BookingResponse,
    responses={404: {"description": "Booking not found"}, 422: {"description": "Too late to cancel"}},
)
def cancel_own_booking(
    booking_id: str,
    principal: Principal = Depends(get_current_principal),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    booking = booking_service.cancel_booking_as_customer(principal, booking_id)
    return BookingResponse.model_validate(booking)


@router.post(
    "/{booking_id}/reschedule",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        404: {"model": ErrorEnvelope, "description": "Booking not found"},
        409: {"model": ErrorEnvelope, "description": "Already rescheduled, cancelled, or new time taken"},
        422: {"model": ErrorEnvelope, "description": "Closed or outside operating hours"},
    },
)
def reschedule_own_booking(
    booking_id: str,
    reschedule_data: BookingReschedule = Body(...),
    principal: Principal = Depends(get_current_principal),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    """Returns the replacement booking; the original is cancelled."""
    booking = booking_service.reschedule_booking_as_customer(
        principal, booking_id, reschedule_data.start_time, reschedule_data.end_time
    )
    return BookingResponse.model_validate(booking)
