from fastapi import APIRouter, Depends, File, HTTPException, Response, UploadFile
from sqlalchemy.orm import Session

from realty.core.config import get_settings
from realty.core.database import get_db
from realty.core.deps import get_image_storage, get_listing_cache
from realty.core.errors import ValidationError
from realty.schemas.property import (
    AggregatedProperty,
    ImageUploadResponse,
    ListingPage,
    PropertyCreate,
    PropertyResponse,
    PropertyUpdate,
)
from realty.services import properties as property_service
from realty.services.cache import PROPERTIES, VISITS, ListingCache
from realty.services.filters import FilterCriteria, filter_properties
from realty.services.listings import aggregate_listings, get_listing
from realty.services.storage import ImageStorage

router = APIRouter(prefix="/properties", tags=["properties"])

UPLOAD_CHUNK_BYTES = 64 * 1024


async def read_limited(file: UploadFile, max_bytes: int) -> bytes:
    """Read an upload, stopping as soon as it grows past ``max_bytes``."""
    chunks = []
    size = 0
    while True:
        chunk = await file.read(UPLOAD_CHUNK_BYTES)
        if not chunk:
            break
        size += len(chunk)
        if size > max_bytes:
            raise ValidationError(f"Image exceeds {max_bytes} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


@router.get("", response_model=ListingPage)
def list_properties(
    city: str | None = None,
    neighborhood: str | None = None,
    kind: str | None = None,
    min_price: str | None = None,
    max_price: str | None = None,
    db: Session = Depends(get_db),
    cache: ListingCache = Depends(get_listing_cache),
):
    strategy = get_settings().LISTING_FETCH_STRATEGY
    listing = cache.get_or_load(PROPERTIES, lambda: aggregate_listings(db, strategy=strategy))

    criteria = FilterCriteria.from_query(city, neighborhood, kind, min_price, max_price)
    items = filter_properties(listing, criteria)
    return ListingPage(
        items=items,
        count=len(items),
        total=len(listing),
        active_filters=criteria.is_active(),
        ignored_filters=criteria.ignored_fields(),
    )


@router.post("/images", response_model=ImageUploadResponse)
async def upload_image(
    file: UploadFile = File(...),
    storage: ImageStorage = Depends(get_image_storage),
):
    content = await read_limited(file, storage.max_bytes)
    path = storage.save(file.filename or "", content)
    return ImageUploadResponse(path=path, url=storage.public_url(path))


@router.get("/{property_id}", response_model=AggregatedProperty)
def read_property(property_id: int, db: Session = Depends(get_db)):
    item = get_listing(db, property_id)
    if item is None:
        raise HTTPException(status_code=404, detail="Property not found")
    return item


@router.post("", response_model=PropertyResponse, status_code=201)
def create_property(
    payload: PropertyCreate,
    db: Session = Depends(get_db),
    cache: ListingCache = Depends(get_listing_cache),
):
    prop = property_service.create_property(db, payload)
    cache.invalidate(PROPERTIES, VISITS)
    return prop


@router.patch("/{property_id}", response_model=PropertyResponse)
def update_property(
    property_id: int,
    payload: PropertyUpdate,
    db: Session = Depends(get_db),
    cache: ListingCache = Depends(get_listing_cache),
):
    prop = property_service.update_property(db, property_id, payload)
    cache.invalidate(PROPERTIES, VISITS)
    return prop


@router.delete("/{property_id}", status_code=204)
def delete_property(
    property_id: int,
    db: Session = Depends(get_db),
    cache: ListingCache = Depends(get_listing_cache),
):
    property_service.delete_property(db, property_id)
    cache.invalidate(PROPERTIES, VISITS)
    return Response(status_code=204)
