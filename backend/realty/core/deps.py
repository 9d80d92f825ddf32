from fastapi import Request

from realty.core.config import get_settings
from realty.services.cache import ListingCache
from realty.services.storage import ImageStorage


def get_listing_cache(request: Request) -> ListingCache:
    """Listing cache shared by the handlers of the current request only."""
    cache = getattr(request.state, "listing_cache", None)
    if cache is None:
        cache = ListingCache(ttl_seconds=get_settings().LISTING_CACHE_TTL_SECONDS)
        request.state.listing_cache = cache
    return cache


def get_image_storage() -> ImageStorage:
    settings = get_settings()
    return ImageStorage(
        settings.STORAGE_DIR,
        public_base=settings.STORAGE_PUBLIC_URL,
        max_bytes=settings.MAX_UPLOAD_BYTES,
    )
