from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from realty.core.database import get_db
from realty.core.deps import get_listing_cache
from realty.schemas.visit import VisitCreate, VisitResponse, VisitStatusUpdate, VisitWithProperty
from realty.services import visits as visit_service
from realty.services.cache import PROPERTIES, VISITS, ListingCache

router = APIRouter(prefix="/visits", tags=["visits"])


@router.get("", response_model=list[VisitWithProperty])
def list_visits(db: Session = Depends(get_db), cache: ListingCache = Depends(get_listing_cache)):
    return cache.get_or_load(VISITS, lambda: visit_service.list_visits(db))


@router.post("", response_model=VisitResponse, status_code=201)
def create_visit(
    payload: VisitCreate,
    db: Session = Depends(get_db),
    cache: ListingCache = Depends(get_listing_cache),
):
    visit = visit_service.create_visit(db, payload)
    cache.invalidate(VISITS, PROPERTIES)
    return visit


@router.patch("/{visit_id}", response_model=VisitResponse)
def update_visit_status(
    visit_id: int,
    payload: VisitStatusUpdate,
    db: Session = Depends(get_db),
    cache: ListingCache = Depends(get_listing_cache),
):
    visit = visit_service.update_visit_status(db, visit_id, payload.status)
    cache.invalidate(VISITS, PROPERTIES)
    return visit


@router.delete("/{visit_id}", status_code=204)
def delete_visit(
    visit_id: int,
    db: Session = Depends(get_db),
    cache: ListingCache = Depends(get_listing_cache),
):
    visit_service.delete_visit(db, visit_id)
    cache.invalidate(VISITS, PROPERTIES)
    return Response(status_code=204)
