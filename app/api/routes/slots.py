from datetime import date

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import get_engine
from app.api.schemas.booking import AvailableSlotsResponse, ResourceInfo
from app.services.availability_service import (
    Availability,
    AvailabilityEngine,
    AvailabilityStatus,
    Selection,
    resource_from_id,
)

router = APIRouter(prefix="/slots", tags=["slots"])


def to_slots_response(availability: Availability) -> AvailableSlotsResponse:
    selected = availability.selection.date
    resource = availability.resource
    return AvailableSlotsResponse(
        date=selected.isoformat() if selected else "",
        date_key=availability.date_key,
        status=availability.status,
        message=availability.message,
        resource=(
            ResourceInfo(kind=resource.kind.value, id=resource.id, name=resource.name)
            if resource is not None
            else None
        ),
        slots=list(availability.slots),
    )


@router.get("/available", response_model=AvailableSlotsResponse)
async def available_slots(
    date_param: date = Query(..., alias="date"),
    service_id: str | None = Query(None),
    branch_id: str | None = Query(None),
    practitioner_id: str | None = Query(None, description="Omit for no preference"),
    engine: AvailabilityEngine = Depends(get_engine),
) -> AvailableSlotsResponse:
    """Bookable start times for the selection, in clinic-local time (e.g. "09:00 AM")."""
    selection = Selection(
        date=date_param,
        service_id=service_id,
        branch_id=branch_id,
        resource=resource_from_id(practitioner_id),
    )
    availability = await engine.compute_availability(selection)
    if availability.status == AvailabilityStatus.UNAVAILABLE:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=availability.message,
        )
    return to_slots_response(availability)
