import logging

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status

from app.api.deps import get_booking_service
from app.api.routes.slots import to_slots_response
from app.api.schemas.booking import BookingCreatedResponse
from app.core.config import settings
from app.core.exceptions import BookingRejected, StoreUnavailable
from app.models.booking import Booking, BookingForm, BookingPublic
from app.services.booking_service import BookingService
from app.services.email_service import (
    send_booking_request_email,
    send_clinic_booking_notification_email,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/bookings", tags=["bookings"])


def _to_public(b: Booking) -> BookingPublic:
    return BookingPublic.model_validate(b, from_attributes=True)


@router.post("", response_model=BookingCreatedResponse, status_code=status.HTTP_201_CREATED)
async def request_booking(
    body: BookingForm,
    background_tasks: BackgroundTasks,
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingCreatedResponse:
    try:
        booking, refreshed = await booking_service.submit(body)
    except BookingRejected as exc:
        if exc.kind == BookingRejected.INPUT_INCOMPLETE:
            raise HTTPException(
                status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
                detail={"message": exc.detail, "missing": exc.missing},
            ) from exc
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=exc.detail) from exc
    except StoreUnavailable as exc:
        logger.warning("Booking request failed: %s", exc)
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Booking service is temporarily unavailable. Please try again.",
        ) from exc

    background_tasks.add_task(send_booking_request_email, booking)
    clinic_email = settings.from_email or settings.contact_email
    if clinic_email:
        background_tasks.add_task(send_clinic_booking_notification_email, clinic_email, booking)
    return BookingCreatedResponse(
        booking=_to_public(booking),
        available_slots=to_slots_response(refreshed),
    )
