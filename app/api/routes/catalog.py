from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.api.deps import get_store
from app.core.exceptions import StoreUnavailable
from app.models.catalog import BranchPublic, PractitionerPublic, ServicePublic
from app.services.store import BookingStore

router = APIRouter(tags=["catalog"])

_UNAVAILABLE = "Catalog is temporarily unavailable. Please try again."


@router.get("/services", response_model=list[ServicePublic])
async def list_services(store: BookingStore = Depends(get_store)) -> list[ServicePublic]:
    try:
        services = await store.list_services()
    except StoreUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=_UNAVAILABLE) from exc
    return [ServicePublic.model_validate(s, from_attributes=True) for s in services]


@router.get("/branches", response_model=list[BranchPublic])
async def list_branches(store: BookingStore = Depends(get_store)) -> list[BranchPublic]:
    try:
        branches = await store.list_branches()
    except StoreUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=_UNAVAILABLE) from exc
    return [BranchPublic.model_validate(b, from_attributes=True) for b in branches]


@router.get("/practitioners", response_model=list[PractitionerPublic])
async def list_practitioners(
    branch_id: str | None = Query(None),
    store: BookingStore = Depends(get_store),
) -> list[PractitionerPublic]:
    """Practitioners, optionally only those affiliated with one branch."""
    try:
        practitioners = await store.list_practitioners()
    except StoreUnavailable as exc:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=_UNAVAILABLE) from exc
    if branch_id is not None:
        practitioners = [p for p in practitioners if p.branch_id == branch_id]
    return [PractitionerPublic.model_validate(p, from_attributes=True) for p in practitioners]
